"""Tests for the elevator list controller: loading, caching and mutations."""

import asyncio
from datetime import date, timedelta

import pytest

from elevator_platform.backend import BackendError
from elevator_platform.ui_logic import ElevatorListController, ListStatus
from elevator_platform.ui_logic.elevator_manager import (
    BUILDINGS_LOADING_LABEL,
    MANAGE_FORBIDDEN_MESSAGE,
    NOT_LINKED_LABEL,
)
from elevator_platform.ui_logic.notifications import NotificationLevel

ROWS = [
    {"id": "e1", "serial_number": "A120", "model": "Otis Gen2", "capacity": 630, "status": "operational", "building_id": "b1"},
    {"id": "e2", "serial_number": "B200", "model": "KONE MonoSpace", "capacity": 1000, "status": "maintenance", "building_id": None},
]
BUILDINGS = [{"id": "b1", "name": "Block 12", "address": "12 Vitosha Blvd"}]


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def _form_values(**overrides):
    today = date.today()
    values = {
        "serial_number": "C300",
        "model": "Schindler 3300",
        "capacity": 800,
        "status": "operational",
        "installation_date": date(2018, 5, 1),
        "last_inspection_date": today - timedelta(days=30),
        "next_inspection_date": today + timedelta(days=335),
        "building_id": "b1",
    }
    values.update(overrides)
    return values


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ready_backend(backend):
    backend.responses["get_elevators"] = {"success": True, "data": ROWS}
    backend.responses["get_buildings_for_elevators"] = BUILDINGS
    return backend


async def _controller(make_auth, clock, role="company", company_id="company-1"):
    auth = make_auth(role=role, company_id=company_id)
    await auth.initialize()
    return ElevatorListController(auth, cache_ttl=120.0, clock=clock)


def _spy_invalidations(controller):
    calls = []
    original = controller.cache.invalidate

    def spy():
        calls.append(1)
        original()

    controller.cache.invalidate = spy
    return calls


class TestLoading:
    @pytest.mark.asyncio
    async def test_idle_without_user(self, make_auth, backend, clock):
        auth = make_auth(signed_in=False)
        await auth.initialize()
        controller = ElevatorListController(auth, clock=clock)
        await controller.load()
        assert controller.status is ListStatus.IDLE
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_company_load_is_scoped_and_fetches_buildings(self, make_auth, ready_backend, clock):
        controller = await _controller(make_auth, clock)
        await controller.load()

        assert controller.status is ListStatus.READY
        assert [e.serial_number for e in controller.elevators] == ["A120", "B200"]
        assert ready_backend.calls_to("get_elevators") == [{"in_company_id": "company-1"}]
        assert ready_backend.calls_to("get_buildings_for_elevators") == [
            {"building_ids": ["b1"], "company_ids": ["company-1"]}
        ]

    @pytest.mark.asyncio
    async def test_other_roles_are_not_scoped(self, make_auth, ready_backend, clock):
        controller = await _controller(make_auth, clock, role="technician", company_id="company-9")
        await controller.load()
        assert ready_backend.calls_to("get_elevators") == [{"in_company_id": None}]
        assert not controller.can_manage

    @pytest.mark.asyncio
    async def test_second_load_within_ttl_uses_cache(self, make_auth, ready_backend, clock):
        controller = await _controller(make_auth, clock)
        await controller.load()
        first = controller.elevators
        clock.now += 60
        await controller.load()

        assert controller.elevators is first
        assert len(ready_backend.calls_to("get_elevators")) == 1

    @pytest.mark.asyncio
    async def test_load_after_ttl_refetches(self, make_auth, ready_backend, clock):
        controller = await _controller(make_auth, clock)
        await controller.load()
        clock.now += 121
        await controller.load()
        assert len(ready_backend.calls_to("get_elevators")) == 2

    @pytest.mark.asyncio
    async def test_force_bypasses_cache(self, make_auth, ready_backend, clock):
        controller = await _controller(make_auth, clock)
        await controller.load()
        await controller.refresh()
        assert len(ready_backend.calls_to("get_elevators")) == 2

    @pytest.mark.asyncio
    async def test_concurrent_load_is_ignored_while_in_flight(self, make_auth, backend, clock):
        gate = asyncio.Event()

        async def slow(params):
            await gate.wait()
            return {"success": True, "data": ROWS}

        backend.responses["get_elevators"] = slow
        backend.responses["get_buildings_for_elevators"] = BUILDINGS
        controller = await _controller(make_auth, clock)

        first = asyncio.create_task(controller.load())
        await asyncio.sleep(0)
        assert controller.status is ListStatus.LOADING
        assert controller.is_loading
        await controller.load(force=True)
        gate.set()
        await first

        assert len(backend.calls_to("get_elevators")) == 1
        assert controller.status is ListStatus.READY
        assert not controller.is_loading

    @pytest.mark.asyncio
    async def test_failure_result_keeps_previous_elevators(self, make_auth, backend, clock):
        backend.queues["get_elevators"] = [
            {"success": True, "data": ROWS},
            {"success": False, "message": "Access denied"},
        ]
        backend.responses["get_buildings_for_elevators"] = BUILDINGS
        controller = await _controller(make_auth, clock)
        await controller.load()
        previous = controller.elevators

        await controller.refresh()

        assert controller.status is ListStatus.ERROR
        assert controller.error == "Access denied"
        assert controller.elevators is previous
        assert not controller.is_loading

    @pytest.mark.asyncio
    async def test_transport_error_sets_error_state(self, make_auth, backend, clock):
        backend.responses["get_elevators"] = BackendError("timeout")
        controller = await _controller(make_auth, clock)
        await controller.load()
        assert controller.status is ListStatus.ERROR
        assert "timeout" in controller.error
        assert controller.elevators == []

    @pytest.mark.asyncio
    async def test_building_failure_is_not_fatal(self, make_auth, backend, clock):
        backend.responses["get_elevators"] = {"success": True, "data": ROWS}
        backend.responses["get_buildings_for_elevators"] = BackendError("boom")
        controller = await _controller(make_auth, clock)
        await controller.load()
        assert controller.status is ListStatus.READY
        assert controller.building_label("b1") == BUILDINGS_LOADING_LABEL

    @pytest.mark.asyncio
    async def test_unexpected_building_error_keeps_list_ready(self, make_auth, backend, clock):
        backend.responses["get_elevators"] = {"success": True, "data": ROWS}
        backend.responses["get_buildings_for_elevators"] = TypeError("unexpected payload")
        controller = await _controller(make_auth, clock)
        await controller.load()
        assert controller.status is ListStatus.READY
        assert controller.error is None
        assert [e.id for e in controller.elevators] == ["e1", "e2"]

        await controller.load()
        assert controller.status is ListStatus.READY
        assert controller.building_label("b1") == BUILDINGS_LOADING_LABEL

    @pytest.mark.asyncio
    async def test_building_labels(self, make_auth, ready_backend, clock):
        controller = await _controller(make_auth, clock)
        await controller.load()
        assert controller.building_label(None) == NOT_LINKED_LABEL
        assert controller.building_label("b1") == "Block 12"
        assert controller.building_label("0123456789abcdef") == "Building (01234567...)"

    @pytest.mark.asyncio
    async def test_building_options_list_company_buildings(self, make_auth, ready_backend, clock):
        controller = await _controller(make_auth, clock)
        options = await controller.load_building_options()
        assert [b.name for b in options] == ["Block 12"]
        assert ready_backend.calls_to("get_buildings_for_elevators") == [
            {"building_ids": [], "company_ids": ["company-1"]}
        ]

    @pytest.mark.asyncio
    async def test_filters_are_derived_without_refetch(self, make_auth, ready_backend, clock):
        controller = await _controller(make_auth, clock)
        await controller.load()

        assert controller.set_filters("A12", "all").is_valid
        assert [e.serial_number for e in controller.visible_elevators] == ["A120"]
        controller.set_filters("", "maintenance")
        assert [e.serial_number for e in controller.visible_elevators] == ["B200"]
        assert not controller.set_filters("", "unknown").is_valid
        assert controller.status_filter == "maintenance"
        assert len(ready_backend.calls_to("get_elevators")) == 1

    @pytest.mark.asyncio
    async def test_sign_out_resets_controller(self, make_auth, ready_backend, clock):
        controller = await _controller(make_auth, clock)
        await controller.load()
        await controller.auth.sign_out()

        assert controller.status is ListStatus.IDLE
        assert controller.elevators == []
        assert controller.cache.get() is None


class TestSaveElevator:
    @pytest.mark.asyncio
    async def test_success_invalidates_once_and_refetches_once(self, make_auth, ready_backend, clock, notifier):
        ready_backend.responses["upsert_elevator"] = {"success": True, "data": {"id": "e3"}}
        controller = await _controller(make_auth, clock)
        await controller.load()
        invalidations = _spy_invalidations(controller)

        outcome = await controller.save_elevator(_form_values())

        assert outcome.ok and outcome.close
        assert invalidations == [1]
        assert len(ready_backend.calls_to("get_elevators")) == 2
        data = ready_backend.calls_to("upsert_elevator")[0]["elevator_data"]
        assert data["company_id"] == "company-1"
        assert data["building_id"] == "b1"
        assert data["capacity"] == 800
        assert data["installation_date"] == "2018-05-01"
        assert "id" not in data
        assert notifier.drain()[-1].level is NotificationLevel.SUCCESS

    @pytest.mark.asyncio
    async def test_update_sends_id(self, make_auth, ready_backend, clock):
        ready_backend.responses["upsert_elevator"] = {"success": True, "data": {"id": "e1"}}
        controller = await _controller(make_auth, clock)
        await controller.save_elevator(_form_values(), elevator_id="e1")
        assert ready_backend.calls_to("upsert_elevator")[0]["elevator_data"]["id"] == "e1"

    @pytest.mark.asyncio
    async def test_creates_building_when_none_selected(self, make_auth, ready_backend, clock):
        ready_backend.responses["create_building"] = {"success": True, "data": {"id": "b9"}}
        ready_backend.responses["upsert_elevator"] = {"success": True}
        controller = await _controller(make_auth, clock)

        values = _form_values(building_id="", building_name="Block 7", building_address="7 Rakovski St", building_floors=8)
        outcome = await controller.save_elevator(values)

        assert outcome.ok
        building = ready_backend.calls_to("create_building")[0]["building_data"]
        assert building == {
            "name": "Block 7",
            "address": "7 Rakovski St",
            "company_id": "company-1",
            "floors": 8,
            "entrances": 1,
        }
        assert ready_backend.calls_to("upsert_elevator")[0]["elevator_data"]["building_id"] == "b9"

    @pytest.mark.asyncio
    async def test_retry_after_failed_upsert_reuses_new_building(self, make_auth, ready_backend, clock):
        ready_backend.responses["create_building"] = {"success": True, "data": {"id": "b9"}}
        ready_backend.queues["upsert_elevator"] = [{"success": False, "message": "Serial number already exists"}]
        ready_backend.responses["upsert_elevator"] = {"success": True}
        controller = await _controller(make_auth, clock)
        values = _form_values(building_id="", building_name="Block 7", building_address="7 Rakovski St")

        first = await controller.save_elevator(values)
        assert not first.ok and not first.close
        assert [b.id for b in controller.building_options] == ["b9"]

        second = await controller.save_elevator(values)

        assert second.ok
        assert len(ready_backend.calls_to("create_building")) == 1
        upserts = ready_backend.calls_to("upsert_elevator")
        assert [u["elevator_data"]["building_id"] for u in upserts] == ["b9", "b9"]

    @pytest.mark.asyncio
    async def test_validation_errors_make_no_remote_call(self, make_auth, ready_backend, clock):
        controller = await _controller(make_auth, clock)
        ready_backend.calls.clear()
        outcome = await controller.save_elevator(_form_values(serial_number="A", capacity=0))
        assert not outcome.ok and not outcome.close
        assert set(outcome.errors) == {"serial_number", "capacity"}
        assert ready_backend.calls == []

    @pytest.mark.asyncio
    async def test_only_company_accounts_may_save(self, make_auth, ready_backend, clock, notifier):
        controller = await _controller(make_auth, clock, role="technician")
        ready_backend.calls.clear()
        outcome = await controller.save_elevator(_form_values())
        assert not outcome.ok
        assert outcome.message == MANAGE_FORBIDDEN_MESSAGE
        assert ready_backend.calls == []

    @pytest.mark.asyncio
    async def test_company_without_company_id_may_not_save(self, make_auth, ready_backend, clock):
        controller = await _controller(make_auth, clock, company_id=None)
        ready_backend.calls.clear()
        outcome = await controller.save_elevator(_form_values())
        assert not outcome.ok
        assert ready_backend.calls == []

    @pytest.mark.asyncio
    async def test_server_failure_keeps_modal_open(self, make_auth, ready_backend, clock, notifier):
        ready_backend.responses["upsert_elevator"] = {"success": False, "message": "Serial number already exists"}
        controller = await _controller(make_auth, clock)
        await controller.load()
        invalidations = _spy_invalidations(controller)

        outcome = await controller.save_elevator(_form_values())

        assert not outcome.ok and not outcome.close
        assert outcome.message == "Serial number already exists"
        assert invalidations == []
        assert len(ready_backend.calls_to("get_elevators")) == 1
        last = notifier.drain()[-1]
        assert last.level is NotificationLevel.ERROR
        assert last.message == "Serial number already exists"
        assert not controller.saving


class TestDelete:
    @pytest.mark.asyncio
    async def test_cancelled_delete_makes_no_remote_call(self, make_auth, ready_backend, clock):
        controller = await _controller(make_auth, clock)
        await controller.load()
        ready_backend.calls.clear()

        controller.request_delete("e1")
        assert controller.delete_dialog.is_open
        assert controller.delete_dialog.label == "A120"
        controller.cancel_delete()

        assert not controller.delete_dialog.is_open
        assert ready_backend.calls == []
        assert len(controller.elevators) == 2

    @pytest.mark.asyncio
    async def test_confirmed_delete_refetches(self, make_auth, ready_backend, clock):
        controller = await _controller(make_auth, clock)
        await controller.load()
        invalidations = _spy_invalidations(controller)

        controller.request_delete("e2")
        assert await controller.confirm_delete()

        assert ready_backend.calls_to("delete:elevators") == [{"id": "e2"}]
        assert invalidations == [1]
        assert len(ready_backend.calls_to("get_elevators")) == 2
        assert not controller.delete_dialog.is_open

    @pytest.mark.asyncio
    async def test_failed_delete_leaves_list_untouched(self, make_auth, ready_backend, clock, notifier):
        ready_backend.responses["delete:elevators"] = BackendError("violates foreign key constraint")
        controller = await _controller(make_auth, clock)
        await controller.load()
        before = controller.elevators

        controller.request_delete("e1")
        assert not await controller.confirm_delete()

        assert controller.elevators is before
        assert not controller.delete_dialog.is_open
        assert len(ready_backend.calls_to("get_elevators")) == 1
        assert "violates foreign key constraint" in notifier.drain()[-1].message

    @pytest.mark.asyncio
    async def test_confirm_without_request_does_nothing(self, make_auth, ready_backend, clock):
        controller = await _controller(make_auth, clock)
        ready_backend.calls.clear()
        assert not await controller.confirm_delete()
        assert ready_backend.calls == []
