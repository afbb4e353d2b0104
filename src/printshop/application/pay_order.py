"""Application service: Pay Order Debt use case.

Records a payment against the amount still owed on an order.  Paying more
than is owed settles the order; the debt never goes below zero.  The
client's total debt is rolled up again afterwards.
"""

from __future__ import annotations

import logging

from printshop.application.calls import guarded
from printshop.application.update_client_debt import UpdateClientDebtHandler
from printshop.domain.exceptions import EntityNotFoundError, ValidationError
from printshop.domain.model.order import Order
from printshop.domain.model.value_objects import Money
from printshop.domain.repository.command_api import CommandApi

logger = logging.getLogger(__name__)


class PayOrderDebtHandler:

    def __init__(self, api: CommandApi) -> None:
        self._api = api
        self._client_debt = UpdateClientDebtHandler(api)

    async def handle(self, order_id: str, amount: str | float) -> Order:
        payment = Money.of(amount)

        order = await guarded("load order", self._api.get_order_by_id(order_id))
        if order is None:
            raise EntityNotFoundError(f"Order {order_id} not found")
        if order.is_placeholder:
            raise ValidationError("Cannot register a payment on a draft order")

        if payment > order.debt:
            logger.info("Payment of %s exceeds debt of %s on order %s", payment, order.debt, order_id)
        order.record_payment(payment)
        updated = await guarded("save order", self._api.update_order(order_id, order))
        logger.info("Payment of %s recorded on order %s; debt now %s", payment, order_id, updated.debt)
        await self._client_debt.handle(order.client_id)
        return updated
