"""Order aggregate: the record every line item hangs off.

An order starts life either as a *draft* (created before the user typed
anything, referencing a placeholder client) or directly as a real order.
``subtotal`` and ``total`` are a cache of the last pricing run; they are
rewritten from the line items via ``apply_totals`` and never trusted on
their own.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

from printshop.domain.exceptions import ValidationError
from printshop.domain.model.value_objects import Money, parse_rate

if TYPE_CHECKING:
    from printshop.domain.service.pricing import Totals

DRAFT_ORDER_NAME = "Pedido em rascunho"
DEFAULT_IVA = Decimal("16")


class OrderStatus(Enum):
    RECEIVED = "received"
    IN_PRODUCTION = "in_production"
    READY = "ready"
    DELIVERED = "delivered"


ORDER_STATUS_LABELS: dict[OrderStatus, str] = {
    OrderStatus.RECEIVED: "Pedido Recebido",
    OrderStatus.IN_PRODUCTION: "Pedido na Produção",
    OrderStatus.READY: "Pedido Pronto pra Entrega",
    OrderStatus.DELIVERED: "Pedido Entregue",
}


@dataclass
class Order:
    """Aggregate root for shop orders.

    Use ``Order.draft()`` or ``Order.create()`` for new orders.  The
    ``__init__`` stays simple so the command API can reconstitute stored
    orders without re-validating.
    """

    id: str | None
    name: str
    client_id: str
    due_date: date
    iva: Decimal = DEFAULT_IVA
    discount: Money = field(default_factory=Money.zero)
    status: OrderStatus = OrderStatus.RECEIVED
    subtotal: Money = field(default_factory=Money.zero)
    total: Money = field(default_factory=Money.zero)
    debt: Money = field(default_factory=Money.zero)
    is_placeholder: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factories ------------------------------------------------------------

    @staticmethod
    def draft(client_id: str, iva: Decimal = DEFAULT_IVA, today: date | None = None) -> Order:
        """Minimal valid order used to obtain an id before any real data exists."""
        return Order(
            id=None,
            name=DRAFT_ORDER_NAME,
            client_id=client_id,
            due_date=today or date.today(),
            iva=parse_rate(iva),
            is_placeholder=True,
        )

    @staticmethod
    def create(
        name: str,
        client_id: str,
        due_date: date,
        iva: Decimal = DEFAULT_IVA,
        discount: Money | None = None,
        status: OrderStatus = OrderStatus.RECEIVED,
    ) -> Order:
        """Create a real order directly, skipping the draft stage."""
        order = Order(id=None, name="", client_id="", due_date=due_date)
        order.finalize(
            name=name,
            client_id=client_id,
            due_date=due_date,
            iva=iva,
            discount=discount or Money.zero(),
            status=status,
        )
        return order

    # --- Mutations ------------------------------------------------------------

    def finalize(
        self,
        name: str,
        client_id: str,
        due_date: date,
        iva: Decimal,
        discount: Money,
        status: OrderStatus,
    ) -> None:
        """Write the user's fields onto the order and make it permanent."""
        if not name or not name.strip():
            raise ValidationError("Order name is required")
        if not client_id:
            raise ValidationError("A client must be selected")
        self.name = name.strip()
        self.client_id = client_id
        self.due_date = due_date
        self.iva = parse_rate(iva)
        self.discount = discount
        self.status = status
        self.is_placeholder = False

    def apply_totals(self, totals: Totals) -> None:
        """Refresh the cached financial figures from a pricing run.

        Whatever has already been paid (``total - debt``) stays paid.
        """
        paid = self.total.minus_floored(self.debt)
        self.subtotal = totals.subtotal
        self.total = totals.total
        self.debt = totals.total.minus_floored(paid)

    def record_payment(self, amount: Money) -> None:
        if amount.is_zero:
            raise ValidationError("Payment amount must be greater than zero")
        self.debt = self.debt.minus_floored(amount)

    def change_status(self, status: OrderStatus) -> None:
        if self.is_placeholder:
            raise ValidationError("Cannot change the status of a draft order")
        self.status = status

    # --- Computed properties --------------------------------------------------

    @property
    def paid(self) -> Money:
        return self.total.minus_floored(self.debt)

    @property
    def is_settled(self) -> bool:
        return self.debt.is_zero
