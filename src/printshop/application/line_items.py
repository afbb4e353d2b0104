"""Application service: line items of one order.

Validates garment, service and impression input into domain objects,
forwards creates / updates / deletes to the command API and keeps the
per-order line lists in the shared ``ShopCache``.  Every mutation
invalidates the cached lists of that order, so a list read after a known
local change always goes back to the command API.
"""

from __future__ import annotations

import logging

from printshop.application.cache import ShopCache
from printshop.application.calls import guarded
from printshop.application.dto import GarmentLineSpec, ImpressionSpec, ServiceChargeSpec
from printshop.domain.exceptions import EntityNotFoundError
from printshop.domain.model.kinds import (
    GarmentKind,
    Material,
    ServiceLocation,
    ServiceType,
    parse_enum,
)
from printshop.domain.model.line_items import GarmentLine, ImpressionLine, ServiceCharge
from printshop.domain.model.order import Order
from printshop.domain.model.value_objects import Money, SizeQuantities
from printshop.domain.repository.command_api import CommandApi
from printshop.domain.service.pricing import Totals, compute_totals

logger = logging.getLogger(__name__)


class LineItemAggregator:

    def __init__(self, api: CommandApi, cache: ShopCache) -> None:
        self._api = api
        self._cache = cache

    # --- Builders (validation only, no I/O) -----------------------------------

    @staticmethod
    def build_service_charge(spec: ServiceChargeSpec) -> ServiceCharge:
        return ServiceCharge.create(
            service_type=spec.service_type,
            location=spec.location,
            unit_price=Money.of(spec.unit_price),
            description=spec.description,
        )

    @classmethod
    def build_garment_line(cls, order_id: str, spec: GarmentLineSpec) -> GarmentLine:
        return GarmentLine.create(
            order_id=order_id,
            kind=GarmentKind(spec.garment_type, spec.custom_type),
            unit_price=Money.of(spec.unit_price),
            sizes=SizeQuantities(spec.sizes),
            color=spec.color,
            services=[cls.build_service_charge(s) for s in spec.services],
        )

    @staticmethod
    def build_impression_line(order_id: str, spec: ImpressionSpec) -> ImpressionLine:
        return ImpressionLine.create(
            order_id=order_id,
            name=spec.name,
            size=spec.size,
            material=Material(spec.material, spec.custom_material),
            price=Money.of(spec.price),
            description=spec.description,
        )

    # --- Garment lines --------------------------------------------------------

    async def add_garment_line(self, order_id: str, spec: GarmentLineSpec) -> GarmentLine:
        line = self.build_garment_line(order_id, spec)
        stored = await guarded("save garment", self._api.create_clothes(line))
        self._cache.invalidate_lines(order_id)
        logger.info("Garment line %s added to order %s", stored.id, order_id)
        return stored

    async def remove_garment_line(self, order_id: str, line_id: str) -> None:
        """Delete a garment line. Removing an absent line is a no-op."""
        deleted = await guarded("delete garment", self._api.delete_clothes(line_id))
        self._cache.invalidate_lines(order_id)
        if not deleted:
            logger.info("Garment line %s already absent from order %s", line_id, order_id)

    async def update_garment_line(
        self, order_id: str, line_id: str, spec: GarmentLineSpec
    ) -> GarmentLine:
        """Replace a stored garment line, services included."""
        line = self.build_garment_line(order_id, spec)
        line.id = line_id
        stored = await guarded("update garment", self._api.update_clothes(line_id, line))
        self._cache.invalidate_lines(order_id)
        if stored is None:
            raise EntityNotFoundError(f"Garment line {line_id} not found")
        return stored

    async def add_service_charge(
        self, line: GarmentLine, spec: ServiceChargeSpec | ServiceCharge
    ) -> ServiceCharge:
        """Attach a service to a garment line.

        A line that is not stored yet is only changed in memory; a stored
        line is written back, and the in-memory change undone if that fails.
        """
        charge = spec if isinstance(spec, ServiceCharge) else self.build_service_charge(spec)
        line.add_service(charge)
        if line.id is None:
            return charge

        try:
            await self._write_back(line)
        except Exception:
            line.remove_service(*charge.slot)
            raise
        return charge

    async def remove_service_charge(
        self,
        line: GarmentLine,
        service_type: ServiceType | str,
        location: ServiceLocation | str,
    ) -> None:
        """Detach the charge in a slot. Removing an absent charge is a no-op.

        As with adding, a failed write-back puts the charge back in memory.
        """
        slot = (
            parse_enum(ServiceType, service_type, "service type"),
            parse_enum(ServiceLocation, location, "service location"),
        )
        charge = next((s for s in line.services if s.slot == slot), None)
        if charge is None:
            return
        line.remove_service(*slot)
        if line.id is None:
            return

        try:
            await self._write_back(line)
        except Exception:
            line.add_service(charge)
            raise

    async def _write_back(self, line: GarmentLine) -> None:
        stored = await guarded(
            "update garment", self._api.update_clothes(line.id, line)  # type: ignore[arg-type]
        )
        self._cache.invalidate_lines(line.order_id)
        if stored is None:
            logger.info("Garment line %s vanished before update", line.id)

    async def list_garment_lines(self, order_id: str) -> list[GarmentLine]:
        cached = self._cache.cached_garment_lines(order_id)
        if cached is None:
            cached = await guarded(
                "load garments", self._api.get_clothes_by_order_id(order_id)
            )
            self._cache.store_garment_lines(order_id, cached)
        return list(cached)

    # --- Impression lines -----------------------------------------------------

    async def add_impression_line(self, order_id: str, spec: ImpressionSpec) -> ImpressionLine:
        line = self.build_impression_line(order_id, spec)
        stored = await guarded("save impression", self._api.create_impression(line))
        self._cache.invalidate_lines(order_id)
        logger.info("Impression line %s added to order %s", stored.id, order_id)
        return stored

    async def update_impression_line(
        self, order_id: str, line_id: str, spec: ImpressionSpec
    ) -> ImpressionLine:
        line = self.build_impression_line(order_id, spec)
        line.id = line_id
        stored = await guarded(
            "update impression", self._api.update_impression(line_id, line)
        )
        self._cache.invalidate_lines(order_id)
        if stored is None:
            raise EntityNotFoundError(f"Impression {line_id} not found")
        return stored

    async def remove_impression_line(self, order_id: str, line_id: str) -> None:
        """Delete an impression line. Removing an absent line is a no-op."""
        deleted = await guarded("delete impression", self._api.delete_impression(line_id))
        self._cache.invalidate_lines(order_id)
        if not deleted:
            logger.info("Impression line %s already absent from order %s", line_id, order_id)

    async def list_impression_lines(self, order_id: str) -> list[ImpressionLine]:
        cached = self._cache.cached_impression_lines(order_id)
        if cached is None:
            cached = await guarded(
                "load impressions", self._api.get_impressions_by_order_id(order_id)
            )
            self._cache.store_impression_lines(order_id, cached)
        return list(cached)

    # --- Whole-order helpers --------------------------------------------------

    async def reload(self, order_id: str) -> None:
        """Drop and re-fetch both line lists of an order."""
        self._cache.invalidate_lines(order_id)
        await self.list_garment_lines(order_id)
        await self.list_impression_lines(order_id)

    async def totals_for(self, order: Order) -> Totals:
        """Price an order from its current stored line items."""
        return compute_totals(
            await self.list_garment_lines(order.id),  # type: ignore[arg-type]
            await self.list_impression_lines(order.id),  # type: ignore[arg-type]
            order.iva,
            order.discount,
        )

    async def delete_all_for(self, order_id: str) -> None:
        """Delete every line of an order, ahead of deleting the order itself.

        Stops at the first failure; the caller decides whether that matters.
        """
        self._cache.invalidate_lines(order_id)
        for garment in await self.list_garment_lines(order_id):
            await self.remove_garment_line(order_id, garment.id)  # type: ignore[arg-type]
        for impression in await self.list_impression_lines(order_id):
            await self.remove_impression_line(order_id, impression.id)  # type: ignore[arg-type]
        self._cache.invalidate_lines(order_id)
