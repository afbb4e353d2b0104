"""Unit tests for garment / service / impression line items."""

import pytest

from printshop.domain.exceptions import ValidationError
from printshop.domain.model.kinds import (
    GarmentKind,
    GarmentType,
    Material,
    MaterialType,
    ServiceLocation,
    ServiceType,
)
from printshop.domain.model.line_items import GarmentLine, ImpressionLine, ServiceCharge
from printshop.domain.model.value_objects import Money, SizeQuantities


def _line(**overrides) -> GarmentLine:
    kwargs = dict(
        order_id="ord-1",
        kind=GarmentKind(GarmentType.WITH_COLLAR),
        unit_price=Money.of("100"),
        sizes=SizeQuantities({"S": 2, "M": 3}),
        color="Azul",
    )
    kwargs.update(overrides)
    return GarmentLine.create(**kwargs)


def _stamping_front_right(price="50") -> ServiceCharge:
    return ServiceCharge.create("stamping", "front_right", Money.of(price))


class TestGarmentKind:

    def test_fixed_kind_has_no_label(self):
        kind = GarmentKind("with_collar")
        assert kind.kind is GarmentType.WITH_COLLAR
        assert kind.label is None

    def test_custom_requires_label(self):
        with pytest.raises(ValidationError, match="requires a description"):
            GarmentKind("custom", "   ")

    def test_custom_with_label(self):
        assert GarmentKind("custom", " Polo ").display_name == "Polo"

    def test_fixed_kind_rejects_label(self):
        with pytest.raises(ValidationError, match="does not take"):
            GarmentKind("with_collar", "Polo")

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError, match="Unknown garment type"):
            GarmentKind("kimono")


class TestMaterial:

    def test_other_requires_label(self):
        with pytest.raises(ValidationError, match="custom material"):
            Material("other")

    def test_other_with_label(self):
        assert Material(MaterialType.OTHER, "Lona").display_name == "Lona"


class TestGarmentLine:

    def test_total_quantity_from_sizes(self):
        assert _line().total_quantity == 5

    def test_empty_color_rejected(self):
        with pytest.raises(ValidationError, match="color is required"):
            _line(color="  ")

    def test_zero_quantity_rejected(self):
        with pytest.raises(ValidationError, match="greater than zero"):
            _line(sizes=SizeQuantities({"S": 0}))

    def test_unit_price_with_services(self):
        line = _line()
        line.add_service(_stamping_front_right())
        assert line.unit_price_with_services == Money.of("150")


class TestServiceCharges:

    def test_zero_price_rejected(self):
        with pytest.raises(ValidationError, match="greater than zero"):
            ServiceCharge.create("stamping", "back", Money.zero())

    def test_duplicate_slot_rejected_and_list_unchanged(self):
        line = _line()
        line.add_service(_stamping_front_right())

        with pytest.raises(ValidationError, match="already exists"):
            line.add_service(_stamping_front_right("30"))

        assert len(line.services) == 1
        assert line.services[0].unit_price == Money.of("50")

    def test_same_type_other_location_allowed(self):
        line = _line()
        line.add_service(_stamping_front_right())
        line.add_service(ServiceCharge.create("stamping", "back", Money.of("40")))
        assert len(line.services) == 2

    def test_duplicate_in_factory_rejected(self):
        with pytest.raises(ValidationError, match="already exists"):
            _line(services=[_stamping_front_right(), _stamping_front_right("30")])

    def test_remove_service(self):
        line = _line(services=[_stamping_front_right()])
        assert line.remove_service(ServiceType.STAMPING, ServiceLocation.FRONT_RIGHT)
        assert line.services == []

    def test_remove_absent_service_is_noop(self):
        line = _line()
        assert not line.remove_service(ServiceType.DTF, ServiceLocation.BACK)


class TestImpressionLine:

    def _create(self, **overrides):
        kwargs = dict(
            order_id="ord-1",
            name="Banner loja",
            size="2x1m",
            material=Material("vinyl_white"),
            price=Money.of("1500"),
        )
        kwargs.update(overrides)
        return ImpressionLine.create(**kwargs)

    def test_create(self):
        line = self._create(description=" frente ")
        assert line.name == "Banner loja"
        assert line.description == "frente"

    @pytest.mark.parametrize("field", ["name", "size"])
    def test_blank_required_fields_rejected(self, field):
        with pytest.raises(ValidationError, match="required"):
            self._create(**{field: " "})

    def test_zero_price_rejected(self):
        with pytest.raises(ValidationError, match="greater than zero"):
            self._create(price=Money.zero())
