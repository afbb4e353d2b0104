"""Data Transfer Objects: plain containers that cross layer boundaries.

Input specs carry raw user values (strings, floats, dicts) into the
application layer, which turns them into validated domain objects.
Output DTOs carry formatted values back out for display.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal


# --- Inputs -------------------------------------------------------------------


@dataclass(frozen=True)
class ServiceChargeSpec:
    """Input: a decoration service to apply to a garment."""

    service_type: str
    location: str
    unit_price: str | float | int | Decimal
    description: str | None = None


@dataclass(frozen=True)
class GarmentLineSpec:
    """Input: a garment line as entered in the products form."""

    garment_type: str
    unit_price: str | float | int | Decimal
    sizes: dict[str, int]
    color: str
    custom_type: str | None = None
    services: list[ServiceChargeSpec] = field(default_factory=list)


@dataclass(frozen=True)
class ImpressionSpec:
    """Input: a print job as entered in the impressions form."""

    name: str
    size: str
    material: str
    price: str | float | int | Decimal
    custom_material: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class OrderFields:
    """Input: the order details form."""

    name: str = ""
    due_date: date = field(default_factory=date.today)
    iva: str | float | int | Decimal = Decimal("16")
    discount: str | float | int | Decimal = Decimal("0")
    status: str = "received"


# --- Outputs ------------------------------------------------------------------


@dataclass(frozen=True)
class TotalsDTO:
    """Output: freshly computed order figures, formatted."""

    subtotal: str
    tax: str
    discount: str
    total: str
    pieces: int


@dataclass(frozen=True)
class GarmentLineDTO:
    id: str
    garment: str
    color: str
    sizes: str
    quantity: int
    unit_price: str
    services: list[str]
    line_total: str


@dataclass(frozen=True)
class ImpressionLineDTO:
    id: str
    name: str
    size: str
    material: str
    price: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: str
    name: str
    client_name: str
    status: str
    due_date: str
    iva: str
    garments: list[GarmentLineDTO]
    impressions: list[ImpressionLineDTO]
    totals: TotalsDTO
    debt: str
    is_draft: bool
