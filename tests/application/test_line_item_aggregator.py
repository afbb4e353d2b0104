"""Integration tests for the LineItemAggregator.

Uses the in-memory fake command API, no file I/O.
"""

import asyncio

import pytest

from printshop.application.cache import ShopCache
from printshop.application.dto import GarmentLineSpec, ImpressionSpec, ServiceChargeSpec
from printshop.application.line_items import LineItemAggregator
from printshop.domain.exceptions import (
    EntityNotFoundError,
    PersistenceError,
    ValidationError,
)
from printshop.domain.model.value_objects import Money
from tests.fakes import FakeCommandApi

ORDER_ID = "ord-x"


def _setup() -> tuple[LineItemAggregator, FakeCommandApi, ShopCache]:
    api = FakeCommandApi()
    cache = ShopCache(api)
    return LineItemAggregator(api, cache), api, cache


def _shirts(**overrides) -> GarmentLineSpec:
    kwargs = dict(
        garment_type="with_collar",
        unit_price=100,
        sizes={"S": 2, "M": 3},
        color="Azul",
        services=[ServiceChargeSpec("stamping", "front_right", 50)],
    )
    kwargs.update(overrides)
    return GarmentLineSpec(**kwargs)


def _banner(**overrides) -> ImpressionSpec:
    kwargs = dict(name="Banner", size="2x1m", material="vinyl_white", price="1500")
    kwargs.update(overrides)
    return ImpressionSpec(**kwargs)


class TestGarmentLines:

    def test_add_stores_line_with_services(self):
        lines, api, _ = _setup()
        stored = asyncio.run(lines.add_garment_line(ORDER_ID, _shirts()))

        assert stored.id in api.clothes
        assert stored.total_quantity == 5
        assert stored.services[0].id is not None

    def test_invalid_input_never_reaches_the_api(self):
        lines, api, _ = _setup()
        with pytest.raises(ValidationError, match="color is required"):
            asyncio.run(lines.add_garment_line(ORDER_ID, _shirts(color="")))
        assert api.calls == []

    def test_custom_garment_requires_description(self):
        lines, api, _ = _setup()
        with pytest.raises(ValidationError, match="requires a description"):
            asyncio.run(lines.add_garment_line(ORDER_ID, _shirts(garment_type="custom")))
        assert api.clothes == {}

    def test_custom_garment_with_description(self):
        lines, _, _ = _setup()
        stored = asyncio.run(
            lines.add_garment_line(ORDER_ID, _shirts(garment_type="custom", custom_type="Polo"))
        )
        assert stored.kind.display_name == "Polo"

    def test_api_failure_is_wrapped(self):
        lines, api, _ = _setup()
        api.fail_on.add("create_clothes")
        with pytest.raises(PersistenceError, match="Could not save garment"):
            asyncio.run(lines.add_garment_line(ORDER_ID, _shirts()))

    def test_update_replaces_sizes_and_services(self):
        lines, api, _ = _setup()

        async def scenario():
            stored = await lines.add_garment_line(ORDER_ID, _shirts())
            await lines.update_garment_line(
                ORDER_ID, stored.id, _shirts(sizes={"XL": 1}, services=[])
            )
            return await lines.list_garment_lines(ORDER_ID)

        [updated] = asyncio.run(scenario())
        assert updated.total_quantity == 1
        assert updated.services == []

    def test_update_missing_line_raises(self):
        lines, _, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="Garment line"):
            asyncio.run(lines.update_garment_line(ORDER_ID, "clo-404", _shirts()))

    def test_remove_is_idempotent(self):
        lines, api, _ = _setup()

        async def scenario():
            stored = await lines.add_garment_line(ORDER_ID, _shirts())
            await lines.remove_garment_line(ORDER_ID, stored.id)
            await lines.remove_garment_line(ORDER_ID, stored.id)
            return await lines.list_garment_lines(ORDER_ID)

        assert asyncio.run(scenario()) == []
        assert api.clothes == {}


class TestListingAndCache:

    def test_list_is_fetched_once_then_cached(self):
        lines, api, _ = _setup()

        async def scenario():
            await lines.add_garment_line(ORDER_ID, _shirts())
            await lines.list_garment_lines(ORDER_ID)
            await lines.list_garment_lines(ORDER_ID)

        asyncio.run(scenario())
        assert api.calls.count("get_clothes_by_order_id") == 1

    def test_mutation_invalidates_cached_list(self):
        lines, api, _ = _setup()

        async def scenario():
            await lines.add_garment_line(ORDER_ID, _shirts())
            first = await lines.list_garment_lines(ORDER_ID)
            await lines.add_garment_line(ORDER_ID, _shirts(color="Verde"))
            second = await lines.list_garment_lines(ORDER_ID)
            return first, second

        first, second = asyncio.run(scenario())
        assert len(first) == 1
        assert len(second) == 2
        assert api.calls.count("get_clothes_by_order_id") == 2

    def test_list_returns_a_copy(self):
        lines, _, _ = _setup()

        async def scenario():
            await lines.add_garment_line(ORDER_ID, _shirts())
            listed = await lines.list_garment_lines(ORDER_ID)
            listed.clear()
            return await lines.list_garment_lines(ORDER_ID)

        assert len(asyncio.run(scenario())) == 1

    def test_lines_of_other_orders_are_not_listed(self):
        lines, _, _ = _setup()

        async def scenario():
            await lines.add_garment_line(ORDER_ID, _shirts())
            await lines.add_garment_line("ord-other", _shirts())
            return await lines.list_garment_lines(ORDER_ID)

        assert len(asyncio.run(scenario())) == 1


class TestServiceCharges:

    def test_add_to_unsaved_line_stays_in_memory(self):
        lines, api, _ = _setup()
        line = lines.build_garment_line(ORDER_ID, _shirts(services=[]))

        asyncio.run(lines.add_service_charge(line, ServiceChargeSpec("dtf", "back", 40)))

        assert len(line.services) == 1
        assert api.calls == []

    def test_add_to_stored_line_is_written_back(self):
        lines, api, _ = _setup()

        async def scenario():
            stored = await lines.add_garment_line(ORDER_ID, _shirts())
            await lines.add_service_charge(stored, ServiceChargeSpec("embroidery", "back", 80))
            return stored

        stored = asyncio.run(scenario())
        assert len(api.clothes[stored.id].services) == 2

    def test_duplicate_slot_rejected(self):
        lines, api, _ = _setup()

        async def scenario():
            stored = await lines.add_garment_line(ORDER_ID, _shirts())
            with pytest.raises(ValidationError, match="already exists"):
                await lines.add_service_charge(
                    stored, ServiceChargeSpec("stamping", "front_right", 30)
                )
            return stored

        stored = asyncio.run(scenario())
        assert len(stored.services) == 1
        assert len(api.clothes[stored.id].services) == 1
        assert "update_clothes" not in api.calls

    def test_failed_write_back_undoes_local_change(self):
        lines, api, _ = _setup()

        async def scenario():
            stored = await lines.add_garment_line(ORDER_ID, _shirts())
            api.fail_on.add("update_clothes")
            with pytest.raises(PersistenceError):
                await lines.add_service_charge(stored, ServiceChargeSpec("dtf", "back", 40))
            return stored

        stored = asyncio.run(scenario())
        assert len(stored.services) == 1

    def test_failed_removal_write_back_restores_charge(self):
        lines, api, _ = _setup()

        async def scenario():
            stored = await lines.add_garment_line(ORDER_ID, _shirts())
            api.fail_on.add("update_clothes")
            with pytest.raises(PersistenceError):
                await lines.remove_service_charge(stored, "stamping", "front_right")
            return stored

        stored = asyncio.run(scenario())
        assert [s.slot for s in stored.services] == [s.slot for s in api.clothes[stored.id].services]
        assert len(stored.services) == 1

    def test_remove_absent_charge_is_noop(self):
        lines, api, _ = _setup()

        async def scenario():
            stored = await lines.add_garment_line(ORDER_ID, _shirts())
            await lines.remove_service_charge(stored, "dtf", "back")
            await lines.remove_service_charge(stored, "stamping", "front_right")
            await lines.remove_service_charge(stored, "stamping", "front_right")
            return stored

        stored = asyncio.run(scenario())
        assert api.clothes[stored.id].services == []
        assert api.calls.count("update_clothes") == 1


class TestImpressionLines:

    def test_add_and_list(self):
        lines, _, _ = _setup()

        async def scenario():
            await lines.add_impression_line(ORDER_ID, _banner())
            return await lines.list_impression_lines(ORDER_ID)

        listed = asyncio.run(scenario())
        assert [i.name for i in listed] == ["Banner"]
        assert listed[0].price == Money.of("1500")

    def test_other_material_requires_description(self):
        lines, api, _ = _setup()
        with pytest.raises(ValidationError, match="custom material"):
            asyncio.run(lines.add_impression_line(ORDER_ID, _banner(material="other")))
        assert api.calls == []

    def test_update_replaces_stored_line(self):
        lines, api, _ = _setup()

        async def scenario():
            stored = await lines.add_impression_line(ORDER_ID, _banner())
            await lines.update_impression_line(ORDER_ID, stored.id, _banner(price="900"))
            return stored.id

        line_id = asyncio.run(scenario())
        assert api.impressions[line_id].price == Money.of("900")

    def test_update_missing_line_raises(self):
        lines, _, _ = _setup()
        with pytest.raises(EntityNotFoundError):
            asyncio.run(lines.update_impression_line(ORDER_ID, "imp-404", _banner()))

    def test_remove_is_idempotent(self):
        lines, api, _ = _setup()

        async def scenario():
            stored = await lines.add_impression_line(ORDER_ID, _banner())
            await lines.remove_impression_line(ORDER_ID, stored.id)
            await lines.remove_impression_line(ORDER_ID, stored.id)

        asyncio.run(scenario())
        assert api.impressions == {}


class TestWholeOrder:

    def test_delete_all_for_removes_every_line(self):
        lines, api, _ = _setup()

        async def scenario():
            await lines.add_garment_line(ORDER_ID, _shirts())
            await lines.add_garment_line(ORDER_ID, _shirts(color="Verde"))
            await lines.add_impression_line(ORDER_ID, _banner())
            await lines.add_impression_line("ord-other", _banner())
            await lines.delete_all_for(ORDER_ID)

        asyncio.run(scenario())
        assert api.clothes == {}
        assert [i.order_id for i in api.impressions.values()] == ["ord-other"]
