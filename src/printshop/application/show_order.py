"""Application service: Show Order use case (query).

Totals are re-priced from the stored lines on every call; the order's own
subtotal / total fields are only a cache and are not displayed.
"""

from __future__ import annotations

from printshop.application.calls import guarded
from printshop.application.dto import (
    GarmentLineDTO,
    ImpressionLineDTO,
    OrderDTO,
    TotalsDTO,
)
from printshop.application.line_items import LineItemAggregator
from printshop.domain.exceptions import EntityNotFoundError
from printshop.domain.model.line_items import GarmentLine, ImpressionLine
from printshop.domain.model.order import ORDER_STATUS_LABELS, Order
from printshop.domain.repository.command_api import CommandApi
from printshop.domain.service.pricing import (
    Totals,
    garment_line_value,
    quantity_summary,
)


class ShowOrderHandler:

    def __init__(self, api: CommandApi, lines: LineItemAggregator) -> None:
        self._api = api
        self._lines = lines

    async def handle(self, order_id: str) -> OrderDTO:
        order = await guarded("load order", self._api.get_order_by_id(order_id))
        if order is None:
            raise EntityNotFoundError(f"Order {order_id} not found")
        client = await guarded("load client", self._api.get_client_by_id(order.client_id))

        garments = await self._lines.list_garment_lines(order_id)
        impressions = await self._lines.list_impression_lines(order_id)
        totals = await self._lines.totals_for(order)

        return self._to_dto(
            order,
            client.name if client is not None else "?",
            garments,
            impressions,
            totals,
        )

    # --- Mapping --------------------------------------------------------------

    @staticmethod
    def _to_dto(
        order: Order,
        client_name: str,
        garments: list[GarmentLine],
        impressions: list[ImpressionLine],
        totals: Totals,
    ) -> OrderDTO:
        # Debt follows the fresh total, keeping whatever was already paid.
        debt = totals.total.minus_floored(order.paid)
        return OrderDTO(
            id=order.id,  # type: ignore[arg-type]
            name=order.name,
            client_name=client_name,
            status=ORDER_STATUS_LABELS[order.status],
            due_date=order.due_date.isoformat(),
            iva=f"{order.iva:g}%",
            garments=[
                GarmentLineDTO(
                    id=g.id,  # type: ignore[arg-type]
                    garment=g.kind.display_name,
                    color=g.color,
                    sizes=str(g.sizes),
                    quantity=g.total_quantity,
                    unit_price=str(g.unit_price),
                    services=[f"{s} {s.unit_price}" for s in g.services],
                    line_total=str(garment_line_value(g)),
                )
                for g in garments
            ],
            impressions=[
                ImpressionLineDTO(
                    id=i.id,  # type: ignore[arg-type]
                    name=i.name,
                    size=i.size,
                    material=i.material.display_name,
                    price=str(i.price),
                )
                for i in impressions
            ],
            totals=TotalsDTO(
                subtotal=str(totals.subtotal),
                tax=str(totals.tax),
                discount=str(order.discount),
                total=str(totals.total),
                pieces=quantity_summary(garments),
            ),
            debt=str(debt),
            is_draft=order.is_placeholder,
        )
