"""Unit tests for the Order aggregate and Client."""

from datetime import date
from decimal import Decimal

import pytest

from printshop.domain.exceptions import ValidationError
from printshop.domain.model.client import PLACEHOLDER_NAME, Client
from printshop.domain.model.order import DRAFT_ORDER_NAME, Order, OrderStatus
from printshop.domain.model.value_objects import Money
from printshop.domain.service.pricing import Totals


def _totals(total: str) -> Totals:
    amount = Money.of(total)
    return Totals(subtotal=amount, tax=Money.zero(), total=amount)


class TestOrderDraft:

    def test_draft_is_placeholder(self):
        order = Order.draft("cli-1", today=date(2026, 3, 1))
        assert order.is_placeholder
        assert order.name == DRAFT_ORDER_NAME
        assert order.due_date == date(2026, 3, 1)
        assert order.iva == Decimal("16")
        assert order.total == Money.zero()

    def test_draft_rejects_bad_iva(self):
        with pytest.raises(ValidationError, match="between 0 and 100"):
            Order.draft("cli-1", iva=Decimal("120"))

    def test_finalize_clears_placeholder(self):
        order = Order.draft("cli-1")
        order.finalize(
            name="  Uniformes escola ",
            client_id="cli-2",
            due_date=date(2026, 4, 1),
            iva=Decimal("0"),
            discount=Money.of("10"),
            status=OrderStatus.IN_PRODUCTION,
        )
        assert not order.is_placeholder
        assert order.name == "Uniformes escola"
        assert order.client_id == "cli-2"
        assert order.status is OrderStatus.IN_PRODUCTION

    def test_finalize_requires_name(self):
        order = Order.draft("cli-1")
        with pytest.raises(ValidationError, match="Order name is required"):
            order.finalize("", "cli-1", date.today(), Decimal("16"), Money.zero(),
                           OrderStatus.RECEIVED)
        assert order.is_placeholder

    def test_create_requires_client(self):
        with pytest.raises(ValidationError, match="client must be selected"):
            Order.create(name="Bonés", client_id="", due_date=date.today())


class TestOrderFinancials:

    def test_apply_totals_on_fresh_order_sets_full_debt(self):
        order = Order.create("Bonés", "cli-1", date.today())
        order.apply_totals(_totals("870"))
        assert order.total == Money.of("870")
        assert order.debt == Money.of("870")

    def test_apply_totals_keeps_what_was_paid(self):
        order = Order.create("Bonés", "cli-1", date.today())
        order.apply_totals(_totals("870"))
        order.record_payment(Money.of("300"))

        order.apply_totals(_totals("1000"))

        assert order.paid == Money.of("300")
        assert order.debt == Money.of("700")

    def test_apply_totals_below_paid_floors_debt(self):
        order = Order.create("Bonés", "cli-1", date.today())
        order.apply_totals(_totals("500"))
        order.record_payment(Money.of("400"))

        order.apply_totals(_totals("200"))

        assert order.debt == Money.zero()

    def test_overpayment_settles_order(self):
        order = Order.create("Bonés", "cli-1", date.today())
        order.apply_totals(_totals("100"))
        order.record_payment(Money.of("150"))
        assert order.is_settled

    def test_zero_payment_rejected(self):
        order = Order.create("Bonés", "cli-1", date.today())
        with pytest.raises(ValidationError, match="greater than zero"):
            order.record_payment(Money.zero())

    def test_change_status_on_draft_rejected(self):
        order = Order.draft("cli-1")
        with pytest.raises(ValidationError, match="draft order"):
            order.change_status(OrderStatus.READY)


class TestClient:

    def test_create_requires_fields(self):
        with pytest.raises(ValidationError, match="Client NUIT is required"):
            Client.create(name="Maria", nuit=" ", contact="84")

    def test_placeholder_is_recognised_by_marker(self):
        client = Client.placeholder("__marker__")
        assert client.name == PLACEHOLDER_NAME
        assert client.is_placeholder("__marker__")
        assert not client.is_placeholder("other")

    def test_real_client_is_not_placeholder(self):
        client = Client.create(name="Maria", nuit="400", contact="84")
        assert not client.is_placeholder("__marker__")
