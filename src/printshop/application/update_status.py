"""Application service: Update Order Status use case."""

from __future__ import annotations

from printshop.application.calls import guarded
from printshop.domain.exceptions import EntityNotFoundError
from printshop.domain.model.kinds import parse_enum
from printshop.domain.model.order import Order, OrderStatus
from printshop.domain.repository.command_api import CommandApi


class UpdateOrderStatusHandler:

    def __init__(self, api: CommandApi) -> None:
        self._api = api

    async def handle(self, order_id: str, status: OrderStatus | str) -> Order:
        new_status = parse_enum(OrderStatus, status, "order status")

        order = await guarded("load order", self._api.get_order_by_id(order_id))
        if order is None:
            raise EntityNotFoundError(f"Order {order_id} not found")

        order.change_status(new_status)
        return await guarded("save order", self._api.update_order(order_id, order))
