"""Application service: Update Client Debt use case.

A client's debt is the sum of what is still owed on its orders.  Drafts
are left out; they have not been committed to anyone yet.  Run after
anything that changes an order's debt or owner.
"""

from __future__ import annotations

import logging

from printshop.application.calls import guarded
from printshop.domain.exceptions import EntityNotFoundError
from printshop.domain.model.client import Client
from printshop.domain.model.value_objects import Money
from printshop.domain.repository.command_api import CommandApi

logger = logging.getLogger(__name__)


class UpdateClientDebtHandler:

    def __init__(self, api: CommandApi) -> None:
        self._api = api

    async def handle(self, client_id: str) -> Client:
        client = await guarded("load client", self._api.get_client_by_id(client_id))
        if client is None:
            raise EntityNotFoundError(f"Client {client_id} not found")

        orders = await guarded("load orders", self._api.list_orders())
        owed = [o.debt for o in orders if o.client_id == client_id and not o.is_placeholder]
        client.debt = sum(owed, Money.zero())

        updated = await guarded("save client", self._api.update_client(client_id, client))
        if updated is None:
            raise EntityNotFoundError(f"Client {client_id} not found")
        logger.info("Client %s now owes %s", client_id, updated.debt)
        return updated
