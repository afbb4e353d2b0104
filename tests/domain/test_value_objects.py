"""Unit tests for domain value objects."""

from decimal import Decimal

import pytest

from printshop.domain.exceptions import ValidationError
from printshop.domain.model.value_objects import Money, SizeQuantities, parse_rate


# ── Money ────────────────────────────────────────────────────────────────────


class TestMoney:

    def test_creation(self):
        m = Money(Decimal("10.50"))
        assert m.amount == Decimal("10.50")
        assert m.currency == "MZN"

    def test_of_factory_from_string(self):
        assert Money.of("25.99").amount == Decimal("25.99")

    def test_of_factory_from_float(self):
        assert Money.of(0.1).amount == Decimal("0.1")

    def test_of_factory_rejects_garbage(self):
        with pytest.raises(ValidationError, match="Invalid money amount"):
            Money.of("abc")

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            Money.of("-1")

    def test_addition(self):
        assert Money.of("10") + Money.of("5.50") == Money.of("15.50")

    def test_subtraction_going_negative_rejected(self):
        with pytest.raises(ValidationError, match="negative amount"):
            Money.of("5") - Money.of("10")

    def test_minus_floored_stops_at_zero(self):
        assert Money.of("5").minus_floored(Money.of("10")) == Money.zero()
        assert Money.of("10").minus_floored(Money.of("4")) == Money.of("6")

    def test_minus_floored_of_equal_amounts_is_zero(self):
        assert Money.of("870").minus_floored(Money.of("870")).is_zero

    def test_minus_floored_checks_currency(self):
        with pytest.raises(ValidationError, match="Cannot combine"):
            Money(Decimal("10"), "MZN").minus_floored(Money(Decimal("5"), "USD"))

    def test_comparisons(self):
        assert Money.of("10") > Money.of("9.99")
        assert Money.of("10") >= Money.of("10")
        assert not Money.of("5") > Money.of("5")

    def test_multiplication_by_int(self):
        assert Money.of("7.50") * 3 == Money.of("22.50")

    def test_multiplication_by_float_rejected(self):
        with pytest.raises(TypeError):
            Money.of("7.50") * 1.5

    def test_percent(self):
        assert Money.of("750").percent(Decimal("16")) == Money.of("120")

    def test_currency_mismatch_rejected(self):
        with pytest.raises(ValidationError, match="Cannot combine"):
            Money(Decimal("10"), "MZN") + Money(Decimal("5"), "USD")

    def test_str_formatting(self):
        assert str(Money.of("870")) == "870.00 MZN"
        assert str(Money.of("1234.5")) == "1,234.50 MZN"


class TestParseRate:

    def test_accepts_bounds(self):
        assert parse_rate(0) == Decimal("0")
        assert parse_rate("100") == Decimal("100")

    @pytest.mark.parametrize("value", [-1, "100.5", "x"])
    def test_rejects_out_of_range(self, value):
        with pytest.raises(ValidationError):
            parse_rate(value)


# ── SizeQuantities ───────────────────────────────────────────────────────────


class TestSizeQuantities:

    def test_total_is_sum_of_sizes(self):
        sizes = SizeQuantities({"S": 2, "M": 3})
        assert sizes.total_quantity == 5

    def test_missing_sizes_count_as_zero(self):
        sizes = SizeQuantities({"XL": 4})
        assert sizes.get("S") == 0
        assert sizes.as_dict() == {"S": 0, "M": 0, "L": 0, "XL": 4, "XXL": 0, "XXXL": 0}

    def test_lowercase_keys_normalized(self):
        assert SizeQuantities({"m": 2}).get("M") == 2

    def test_empty_map_totals_zero(self):
        assert SizeQuantities().total_quantity == 0

    def test_unknown_size_rejected(self):
        with pytest.raises(ValidationError, match="Unknown size"):
            SizeQuantities({"XS": 1})

    def test_negative_quantity_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            SizeQuantities({"S": -1})

    def test_non_integer_quantity_rejected(self):
        with pytest.raises(ValidationError, match="must be an integer"):
            SizeQuantities({"S": 1.5})

    def test_str_lists_non_zero_sizes(self):
        assert str(SizeQuantities({"S": 2, "M": 3})) == "S:2, M:3"
