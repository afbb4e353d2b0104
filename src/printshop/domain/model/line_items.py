"""Line items owned by an order: garments (with service charges) and prints.

Each line belongs to exactly one order.  The factories enforce every
invariant; plain ``__init__`` is left for reconstitution from storage.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from printshop.domain.exceptions import ValidationError
from printshop.domain.model.kinds import (
    SERVICE_LOCATION_LABELS,
    SERVICE_TYPE_LABELS,
    GarmentKind,
    Material,
    ServiceLocation,
    ServiceType,
    parse_enum,
)
from printshop.domain.model.value_objects import Money, SizeQuantities


@dataclass
class ServiceCharge:
    """A decoration service applied at one placement on a garment line."""

    service_type: ServiceType
    location: ServiceLocation
    unit_price: Money
    description: str | None = None
    id: str | None = None

    @staticmethod
    def create(
        service_type: ServiceType | str,
        location: ServiceLocation | str,
        unit_price: Money,
        description: str | None = None,
    ) -> ServiceCharge:
        if unit_price.is_zero:
            raise ValidationError("Service price must be greater than zero")
        return ServiceCharge(
            service_type=parse_enum(ServiceType, service_type, "service type"),
            location=parse_enum(ServiceLocation, location, "service location"),
            unit_price=unit_price,
            description=(description or "").strip() or None,
        )

    @property
    def slot(self) -> tuple[ServiceType, ServiceLocation]:
        return (self.service_type, self.location)

    def __str__(self) -> str:
        return (
            f"{SERVICE_TYPE_LABELS[self.service_type]} "
            f"({SERVICE_LOCATION_LABELS[self.location]})"
        )


@dataclass
class GarmentLine:
    """One clothing entry within an order, with quantities by size.

    Invariants:
    - ``total_quantity`` is always the sum of ``sizes``
    - no two service charges share a (service type, location) slot
    """

    id: str | None
    order_id: str
    kind: GarmentKind
    unit_price: Money
    sizes: SizeQuantities
    color: str
    services: list[ServiceCharge] = field(default_factory=list)

    @staticmethod
    def create(
        order_id: str,
        kind: GarmentKind,
        unit_price: Money,
        sizes: SizeQuantities,
        color: str,
        services: list[ServiceCharge] | None = None,
    ) -> GarmentLine:
        if not color or not color.strip():
            raise ValidationError("Garment color is required")
        if sizes.total_quantity <= 0:
            raise ValidationError("Garment quantity must be greater than zero")

        line = GarmentLine(
            id=None,
            order_id=order_id,
            kind=kind,
            unit_price=unit_price,
            sizes=sizes,
            color=color.strip(),
        )
        for charge in services or []:
            line.add_service(charge)
        return line

    @property
    def total_quantity(self) -> int:
        return self.sizes.total_quantity

    @property
    def unit_price_with_services(self) -> Money:
        result = self.unit_price
        for charge in self.services:
            result = result + charge.unit_price
        return result

    def has_service(self, service_type: ServiceType, location: ServiceLocation) -> bool:
        return any(c.slot == (service_type, location) for c in self.services)

    def add_service(self, charge: ServiceCharge) -> None:
        """Attach a service charge; its (type, location) slot must be free."""
        if self.has_service(*charge.slot):
            raise ValidationError(
                f"Service {charge} already exists on this garment"
            )
        self.services.append(charge)

    def remove_service(self, service_type: ServiceType, location: ServiceLocation) -> bool:
        """Detach the charge in the given slot. Returns False if it was absent."""
        before = len(self.services)
        self.services = [c for c in self.services if c.slot != (service_type, location)]
        return len(self.services) != before


@dataclass
class ImpressionLine:
    """A print job entry within an order, independent of garments."""

    id: str | None
    order_id: str
    name: str
    size: str
    material: Material
    price: Money
    description: str = ""

    @staticmethod
    def create(
        order_id: str,
        name: str,
        size: str,
        material: Material,
        price: Money,
        description: str | None = None,
    ) -> ImpressionLine:
        if not name or not name.strip():
            raise ValidationError("Impression name is required")
        if not size or not size.strip():
            raise ValidationError("Impression size is required")
        if price.is_zero:
            raise ValidationError("Impression price must be greater than zero")
        return ImpressionLine(
            id=None,
            order_id=order_id,
            name=name.strip(),
            size=size.strip(),
            material=material,
            price=price,
            description=(description or "").strip(),
        )
