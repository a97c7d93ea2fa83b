"""
Elevator list: fetching, caching, filtering and mutations.

The controller is created once per browser session. Its collection is scoped
to the caller's company (for company accounts) and cached for a short TTL;
every successful mutation invalidates the cache and re-fetches before
returning, so the list the user sees always comes from the backend.

State machine::

    IDLE --load--> LOADING --ok--> READY
                           --err-> ERROR   (previous elevators kept)
    READY/ERROR --refresh/mutation--> LOADING
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple
import logging
import time

from ..backend import BackendError, GENERIC_ERROR_MESSAGE
from ..models import Building, CurrentUser, Elevator, RpcResult
from ..roles import can_manage_elevators, company_scope
from .auth_manager import SIGNED_OUT, AuthManager
from .cache import TtlCache
from .confirm import ConfirmDialog
from .filters import STATUS_ALL, apply_filters
from .validation_manager import ValidationResult, parse_date, validate_elevator, validate_filters

logger = logging.getLogger(__name__)

NOT_LINKED_LABEL = "Not linked to a building"
BUILDINGS_LOADING_LABEL = "Loading..."
MANAGE_FORBIDDEN_MESSAGE = "Only company accounts can manage elevators"


class ListStatus(Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass
class MutationOutcome:
    """Result of a create/update/delete as seen by the modal that issued it."""

    ok: bool
    close: bool = False
    errors: Dict[str, str] = field(default_factory=dict)
    message: Optional[str] = None


class ElevatorListController:
    """Owns the elevator collection shown on the company dashboard."""

    def __init__(self, auth: AuthManager, *, cache_ttl: float = 120.0, clock=time.monotonic):
        self.auth = auth
        self.notifier = auth.notifier
        self.cache: TtlCache[List[Elevator]] = TtlCache(cache_ttl, clock)
        self.status = ListStatus.IDLE
        self.error: Optional[str] = None
        self.elevators: List[Elevator] = []
        self.buildings: Dict[str, Building] = {}
        self.building_options: List[Building] = []
        # Buildings created by a save whose elevator upsert then failed, by (name, address)
        self._created_buildings: Dict[Tuple[str, str], str] = {}
        self.search_term = ""
        self.status_filter = STATUS_ALL
        self.delete_dialog = ConfirmDialog()
        self.saving = False
        self._in_flight = False
        auth.add_listener(SIGNED_OUT, self.reset)

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------
    @property
    def client(self):
        return self.auth.client

    @property
    def is_loading(self) -> bool:
        return self._in_flight

    @property
    def can_manage(self) -> bool:
        user = self.auth.user
        return user is not None and can_manage_elevators(user.role)

    @property
    def visible_elevators(self) -> List[Elevator]:
        return apply_filters(self.elevators, self.search_term, self.status_filter)

    def set_filters(self, search_term: Optional[str], status: Optional[str]) -> ValidationResult:
        result = validate_filters(search_term, status)
        if result.is_valid:
            self.search_term = search_term or ""
            self.status_filter = status or STATUS_ALL
        return result

    def get_elevator(self, elevator_id: str) -> Optional[Elevator]:
        for elevator in self.elevators:
            if elevator.id == elevator_id:
                return elevator
        return None

    def building_label(self, building_id: Optional[str]) -> str:
        if not building_id:
            return NOT_LINKED_LABEL
        if not self.buildings:
            return BUILDINGS_LOADING_LABEL
        building = self.buildings.get(building_id)
        if building is not None:
            return building.name
        return f"Building ({building_id[:8]}...)"

    def reset(self) -> None:
        """Forget everything fetched for the previous user."""
        self.cache.invalidate()
        self.status = ListStatus.IDLE
        self.error = None
        self.elevators = []
        self.buildings = {}
        self.building_options = []
        self._created_buildings = {}
        self.search_term = ""
        self.status_filter = STATUS_ALL
        self.delete_dialog.close()

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------
    async def load(self, force: bool = False) -> None:
        """Fetch the elevator collection unless the cache is still fresh.

        ``force`` skips the cache read; concurrent calls while a fetch is in
        flight return immediately.
        """
        user = self.auth.user
        if user is None or user.profile is None:
            self.status = ListStatus.IDLE
            return
        if self._in_flight:
            return
        if not force:
            cached = self.cache.get()
            if cached is not None:
                self.elevators = cached
                self.status = ListStatus.READY
                self.error = None
                return

        self._in_flight = True
        self.status = ListStatus.LOADING
        self.error = None
        try:
            payload = await self.client.rpc(
                "get_elevators",
                {"in_company_id": company_scope(user.role, user.company_id)},
                token=self.auth.access_token,
            )
            result = RpcResult.from_payload(payload)
            if not result.success:
                self.error = result.message or "Failed to load elevators"
                self.status = ListStatus.ERROR
                logger.warning("get_elevators reported failure: %s", self.error)
                return
            elevators = [Elevator.from_row(row) for row in result.rows()]
            self.cache.store(elevators)
            self.elevators = elevators
            self.status = ListStatus.READY
            logger.info("Loaded %d elevators", len(elevators))
            await self._load_buildings(user)
        except BackendError as e:
            self.error = f"Error loading elevators: {e.message}"
            self.status = ListStatus.ERROR
        except Exception:
            logger.exception("Unexpected error while loading elevators")
            self.error = "Unexpected error while loading elevators"
            self.status = ListStatus.ERROR
        finally:
            self._in_flight = False

    async def refresh(self) -> None:
        await self.load(force=True)

    async def on_resume(self) -> None:
        """Re-fetch after the tab was idle; no-op until the list was shown once."""
        if self.status is ListStatus.IDLE:
            return
        await self.load(force=True)

    async def _fetch_buildings(self, user: CurrentUser, building_ids: List[str]) -> List[Building]:
        company_ids = [user.company_id] if user.company_id else []
        payload = await self.client.rpc(
            "get_buildings_for_elevators",
            {"building_ids": building_ids, "company_ids": company_ids},
            token=self.auth.access_token,
        )
        return [Building.from_row(row) for row in RpcResult.from_payload(payload).rows()]

    async def _load_buildings(self, user: CurrentUser) -> None:
        building_ids = sorted({e.building_id for e in self.elevators if e.building_id})
        if not building_ids:
            return
        try:
            buildings = await self._fetch_buildings(user, building_ids)
        except BackendError as e:
            logger.error("Loading buildings failed: %s", e.message)
            return
        except Exception:
            logger.exception("Unexpected error while loading buildings")
            return
        self.buildings = {b.id: b for b in buildings}

    async def load_building_options(self) -> List[Building]:
        """Buildings of the caller's company, for the building picker."""
        user = self.auth.user
        if user is None:
            return []
        try:
            self.building_options = await self._fetch_buildings(user, [])
        except BackendError as e:
            logger.error("Loading building options failed: %s", e.message)
        except Exception:
            logger.exception("Unexpected error while loading building options")
        return self.building_options

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def _manager_company(self) -> Optional[str]:
        user = self.auth.user
        if user is None or not can_manage_elevators(user.role) or not user.company_id:
            return None
        return user.company_id

    async def _create_building(self, values: Mapping[str, Any], company_id: str) -> str:
        """Create the building typed into the form, once per (name, address).

        A retry after a failed elevator upsert reuses the building created by
        the first attempt instead of inserting another one.
        """
        name = str(values.get("building_name")).strip()
        address = str(values.get("building_address")).strip()
        key = (name.casefold(), address.casefold())
        if key in self._created_buildings:
            logger.info("Reusing building %s created by an earlier attempt", self._created_buildings[key])
            return self._created_buildings[key]

        floors = int(values.get("building_floors") or 1)
        entrances = int(values.get("building_entrances") or 1)
        payload = await self.client.rpc(
            "create_building",
            {
                "building_data": {
                    "name": name,
                    "address": address,
                    "company_id": company_id,
                    "floors": floors,
                    "entrances": entrances,
                }
            },
            token=self.auth.access_token,
        )
        result = RpcResult.from_payload(payload)
        if not result.success:
            raise BackendError(result.message or "Failed to create building")
        data = result.data
        building_id = data.get("id") if isinstance(data, Mapping) else data
        if not building_id:
            raise BackendError("The new building has no id")
        building_id = str(building_id)
        logger.info("Created building %s", building_id)
        self._created_buildings[key] = building_id
        self.building_options.append(
            Building(building_id, name, address, floors=floors, entrances=entrances, company_id=company_id)
        )
        return building_id

    async def save_elevator(self, values: Mapping[str, Any], elevator_id: Optional[str] = None) -> MutationOutcome:
        """Create (``elevator_id`` None) or update an elevator."""
        company_id = self._manager_company()
        if company_id is None:
            self.notifier.error(MANAGE_FORBIDDEN_MESSAGE)
            return MutationOutcome(ok=False, message=MANAGE_FORBIDDEN_MESSAGE)

        result = validate_elevator(values)
        if not result.is_valid:
            return MutationOutcome(ok=False, errors=result.field_errors())

        self.saving = True
        try:
            building_id = str(values.get("building_id") or "").strip()
            if not building_id:
                building_id = await self._create_building(values, company_id)

            elevator_data: Dict[str, Any] = {
                "building_id": building_id,
                "company_id": company_id,
                "serial_number": str(values["serial_number"]).strip(),
                "model": str(values["model"]).strip(),
                "capacity": int(float(values["capacity"])),
                "installation_date": parse_date(values["installation_date"]).isoformat(),
                "last_inspection_date": parse_date(values["last_inspection_date"]).isoformat(),
                "next_inspection_date": parse_date(values["next_inspection_date"]).isoformat(),
                "status": str(values.get("status") or "operational"),
            }
            if elevator_id:
                elevator_data["id"] = elevator_id

            payload = await self.client.rpc(
                "upsert_elevator", {"elevator_data": elevator_data}, token=self.auth.access_token
            )
            rpc_result = RpcResult.from_payload(payload)
            if not rpc_result.success:
                message = rpc_result.message or "Failed to save the elevator"
                self.notifier.error(message)
                return MutationOutcome(ok=False, message=message)
        except BackendError as e:
            self.notifier.error(e.message)
            return MutationOutcome(ok=False, message=e.message)
        except Exception:
            logger.exception("Unexpected error while saving elevator")
            self.notifier.error(GENERIC_ERROR_MESSAGE)
            return MutationOutcome(ok=False, message=GENERIC_ERROR_MESSAGE)
        finally:
            self.saving = False

        self._created_buildings.clear()
        message = "Elevator updated successfully" if elevator_id else "Elevator added successfully"
        self.notifier.success(message)
        self.cache.invalidate()
        await self.load()
        return MutationOutcome(ok=True, close=True, message=message)

    def request_delete(self, elevator_id: str) -> None:
        elevator = self.get_elevator(elevator_id)
        self.delete_dialog.open(elevator_id, elevator.serial_number if elevator else elevator_id)

    def cancel_delete(self) -> None:
        self.delete_dialog.close()

    async def confirm_delete(self) -> bool:
        target = self.delete_dialog.target
        self.delete_dialog.close()
        if target is None:
            return False
        if self._manager_company() is None:
            self.notifier.error(MANAGE_FORBIDDEN_MESSAGE)
            return False
        try:
            await self.client.delete("elevators", filters={"id": target}, token=self.auth.access_token)
        except BackendError as e:
            self.notifier.error(f"Error deleting elevator: {e.message}")
            return False
        except Exception:
            logger.exception("Unexpected error while deleting elevator %s", target)
            self.notifier.error(GENERIC_ERROR_MESSAGE)
            return False
        self.notifier.success("Elevator deleted successfully")
        self.cache.invalidate()
        await self.load()
        return True
