"""Process-scoped cache of orders, clients and per-order line items.

One instance is owned by the composition root and handed by reference to
the coordinator and the line-item aggregator.  Nothing is refreshed
implicitly: callers invalidate or reload after the mutations they know
about.
"""

from __future__ import annotations

import logging

from printshop.application.calls import guarded
from printshop.domain.model.client import Client
from printshop.domain.model.line_items import GarmentLine, ImpressionLine
from printshop.domain.model.order import Order, OrderStatus
from printshop.domain.repository.command_api import CommandApi

logger = logging.getLogger(__name__)


class ShopCache:

    def __init__(self, api: CommandApi) -> None:
        self._api = api
        self._orders: dict[str, Order] | None = None
        self._clients: dict[str, Client] | None = None
        self._garments: dict[str, list[GarmentLine]] = {}
        self._impressions: dict[str, list[ImpressionLine]] = {}

    # --- Orders and clients ---------------------------------------------------

    async def reload(self) -> None:
        """Re-read every order and client from the command API."""
        orders = await guarded("list orders", self._api.list_orders())
        clients = await guarded("list clients", self._api.list_clients())
        self._orders = {o.id: o for o in orders if o.id is not None}
        self._clients = {c.id: c for c in clients if c.id is not None}
        logger.debug("Cache reloaded: %d orders, %d clients", len(orders), len(clients))

    def invalidate_orders(self) -> None:
        self._orders = None
        self._clients = None

    async def orders(self) -> list[Order]:
        if self._orders is None:
            await self.reload()
        return list(self._orders.values())  # type: ignore[union-attr]

    async def clients(self) -> list[Client]:
        if self._clients is None:
            await self.reload()
        return list(self._clients.values())  # type: ignore[union-attr]

    async def find_order(self, order_id: str) -> Order | None:
        for order in await self.orders():
            if order.id == order_id:
                return order
        return None

    async def find_client(self, client_id: str) -> Client | None:
        for client in await self.clients():
            if client.id == client_id:
                return client
        return None

    async def search_orders(
        self,
        term: str = "",
        status: OrderStatus | None = None,
        include_drafts: bool = False,
    ) -> list[Order]:
        """Filter orders by name / client name substring and by status."""
        clients = {c.id: c for c in await self.clients()}
        needle = term.strip().lower()
        result: list[Order] = []
        for order in await self.orders():
            if order.is_placeholder and not include_drafts:
                continue
            if status is not None and order.status is not status:
                continue
            if needle:
                client = clients.get(order.client_id)
                haystack = [order.name.lower()]
                if client is not None:
                    haystack.append(client.name.lower())
                if not any(needle in text for text in haystack):
                    continue
            result.append(order)
        return sorted(result, key=lambda o: o.created_at, reverse=True)

    def forget_order(self, order_id: str) -> None:
        """Drop an order and its line lists after it was deleted."""
        if self._orders is not None:
            self._orders.pop(order_id, None)
        self.invalidate_lines(order_id)

    # --- Line items -----------------------------------------------------------

    def cached_garment_lines(self, order_id: str) -> list[GarmentLine] | None:
        return self._garments.get(order_id)

    def cached_impression_lines(self, order_id: str) -> list[ImpressionLine] | None:
        return self._impressions.get(order_id)

    def store_garment_lines(self, order_id: str, lines: list[GarmentLine]) -> None:
        self._garments[order_id] = lines

    def store_impression_lines(self, order_id: str, lines: list[ImpressionLine]) -> None:
        self._impressions[order_id] = lines

    def invalidate_lines(self, order_id: str) -> None:
        self._garments.pop(order_id, None)
        self._impressions.pop(order_id, None)
