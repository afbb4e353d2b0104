"""Value objects for prices, tax rates and per-size garment quantities.

All of them are frozen and validate on construction, so a price below
zero or a size outside the shop's range can never be held.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Mapping

from printshop.domain.exceptions import ValidationError

DEFAULT_CURRENCY = "MZN"


@dataclass(frozen=True)
class Money:
    """Monetary amount with currency.

    Uses Decimal internally; the command API speaks floats, so conversion
    happens only at the persistence boundary (``of`` / ``to_float``).
    """

    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if not self.amount.is_finite():
            raise ValidationError(f"Money amount must be finite, got {self.amount}")
        if self.amount < Decimal("0"):
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}"
            )

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        result = self.amount - other.amount
        if result < Decimal("0"):
            raise ValidationError("Money subtraction would result in a negative amount")
        return Money(result, self.currency)

    def __mul__(self, factor: int) -> Money:
        if isinstance(factor, bool) or not isinstance(factor, int):
            raise TypeError(f"Can only multiply Money by int, got {type(factor).__name__}")
        return Money(self.amount * factor, self.currency)

    def __gt__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount >= other.amount

    def percent(self, rate: Decimal) -> Money:
        """Return ``rate`` percent of this amount (e.g. IVA on a subtotal)."""
        return Money(self.amount * rate / Decimal("100"), self.currency)

    def minus_floored(self, other: Money) -> Money:
        """Subtract, flooring at zero instead of raising."""
        if other >= self:
            return Money.zero(self.currency)
        return self - other

    @property
    def is_zero(self) -> bool:
        return self.amount == Decimal("0")

    # --- Display --------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.amount:,.2f} {self.currency}"

    def to_float(self) -> float:
        return float(self.amount)

    # --- Internal helpers -----------------------------------------------------

    def _assert_same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValidationError(
                f"Cannot combine {self.currency} with {other.currency}"
            )

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def of(amount: str | float | int | Decimal, currency: str = DEFAULT_CURRENCY) -> Money:
        """Convenient factory that coerces to Decimal safely."""
        try:
            return Money(Decimal(str(amount)), currency)
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc

    @staticmethod
    def zero(currency: str = DEFAULT_CURRENCY) -> Money:
        return Money(Decimal("0"), currency)


def parse_rate(value: str | float | int | Decimal, name: str = "IVA") -> Decimal:
    """Parse a tax percentage, which must lie within 0 to 100."""
    try:
        rate = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"Invalid {name} rate: {value!r}") from exc
    if not rate.is_finite() or rate < 0 or rate > 100:
        raise ValidationError(f"{name} must be between 0 and 100, got {value}")
    return rate


CLOTHING_SIZES: tuple[str, ...] = ("S", "M", "L", "XL", "XXL", "XXXL")


@dataclass(frozen=True)
class SizeQuantities:
    """Per-size piece counts for a garment line.

    Only the fixed size keys are accepted; missing keys count as zero.
    ``total_quantity`` is always derived from the map.
    """

    counts: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        normalized: dict[str, int] = {}
        for size, qty in self.counts.items():
            key = str(size).upper()
            if key not in CLOTHING_SIZES:
                raise ValidationError(
                    f"Unknown size '{size}' (expected one of {', '.join(CLOTHING_SIZES)})"
                )
            if isinstance(qty, bool) or not isinstance(qty, int):
                raise ValidationError(
                    f"Quantity for size {key} must be an integer, got {type(qty).__name__}"
                )
            if qty < 0:
                raise ValidationError(f"Quantity for size {key} cannot be negative")
            normalized[key] = normalized.get(key, 0) + qty
        object.__setattr__(
            self, "counts", {s: normalized.get(s, 0) for s in CLOTHING_SIZES}
        )

    @property
    def total_quantity(self) -> int:
        return sum(self.counts.values())

    def get(self, size: str) -> int:
        return self.counts.get(size.upper(), 0)

    def as_dict(self) -> dict[str, int]:
        return dict(self.counts)

    def __str__(self) -> str:
        parts = [f"{s}:{q}" for s, q in self.counts.items() if q]
        return ", ".join(parts) if parts else "-"
