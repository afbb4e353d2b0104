"""Domain service: order pricing.

Turns the current line items of an order plus its IVA rate and discount
into subtotal / tax / total.  Pure and synchronous: callers re-run it after
every line-item mutation instead of reading an order's cached totals.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from printshop.domain.model.line_items import GarmentLine, ImpressionLine
from printshop.domain.model.value_objects import Money


@dataclass(frozen=True)
class Totals:

    subtotal: Money
    tax: Money
    total: Money

    @property
    def discount_clamped(self) -> bool:
        """True when the discount exceeded subtotal + tax and total hit zero."""
        return self.total.is_zero and not (self.subtotal + self.tax).is_zero


def garment_line_value(line: GarmentLine) -> Money:
    """(unit price + every service price) x total quantity."""
    return line.unit_price_with_services * line.total_quantity


def compute_totals(
    garment_lines: Iterable[GarmentLine],
    impression_lines: Iterable[ImpressionLine],
    iva: Decimal,
    discount: Money,
) -> Totals:
    """Compute order totals.

    ``total = subtotal + subtotal * iva / 100 - discount``, floored at zero
    when the discount is larger than what it is discounting.
    """
    subtotal = Money.zero(discount.currency)
    for line in garment_lines:
        subtotal = subtotal + garment_line_value(line)
    for impression in impression_lines:
        subtotal = subtotal + impression.price

    tax = subtotal.percent(iva)
    total = (subtotal + tax).minus_floored(discount)
    return Totals(subtotal=subtotal, tax=tax, total=total)


def quantity_summary(garment_lines: Iterable[GarmentLine]) -> int:
    """Total number of pieces across all garment lines."""
    return sum(line.total_quantity for line in garment_lines)
