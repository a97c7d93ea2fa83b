"""
Parts of a single elevator, shown in a modal over the elevator list.

Parts are not cached: every ``open()`` and every successful mutation fetches
the list again.
"""

from typing import Any, Dict, List, Mapping, Optional
import logging

from ..backend import BackendError, GENERIC_ERROR_MESSAGE
from ..models import ElevatorPart, PartStatus, RpcResult
from .auth_manager import SIGNED_OUT, AuthManager
from .confirm import ConfirmDialog
from .elevator_manager import ListStatus, MutationOutcome
from .validation_manager import parse_date, validate_elevator_part

logger = logging.getLogger(__name__)

PART_FIELDS = (
    "name",
    "part_number",
    "manufacturer",
    "installation_date",
    "last_maintenance_date",
    "next_maintenance_date",
    "status",
    "description",
)
DATE_FIELDS = ("installation_date", "last_maintenance_date", "next_maintenance_date")


class PartsListController:
    def __init__(self, auth: AuthManager):
        self.auth = auth
        self.notifier = auth.notifier
        self.elevator_id: Optional[str] = None
        self.parts: List[ElevatorPart] = []
        self.status = ListStatus.IDLE
        self.error: Optional[str] = None
        self.delete_dialog = ConfirmDialog()
        self.saving = False
        auth.add_listener(SIGNED_OUT, self.close)

    @property
    def is_open(self) -> bool:
        return self.elevator_id is not None

    def get_part(self, part_id: str) -> Optional[ElevatorPart]:
        for part in self.parts:
            if part.id == part_id:
                return part
        return None

    async def open(self, elevator_id: str) -> None:
        self.elevator_id = elevator_id
        self.parts = []
        await self.reload()

    def close(self) -> None:
        self.elevator_id = None
        self.parts = []
        self.status = ListStatus.IDLE
        self.error = None
        self.delete_dialog.close()

    async def reload(self) -> None:
        if self.elevator_id is None:
            return
        self.status = ListStatus.LOADING
        self.error = None
        try:
            payload = await self.auth.client.rpc(
                "get_elevator_parts", {"elevator_uuid": self.elevator_id}, token=self.auth.access_token
            )
            result = RpcResult.from_payload(payload, data_key="parts")
            if not result.success:
                self.error = result.message or "Failed to load parts"
                self.status = ListStatus.ERROR
                return
            self.parts = [ElevatorPart.from_row(row) for row in result.rows()]
            self.status = ListStatus.READY
        except BackendError as e:
            self.error = f"Error loading parts: {e.message}"
            self.status = ListStatus.ERROR
        except Exception:
            logger.exception("Unexpected error while loading parts of %s", self.elevator_id)
            self.error = "Unexpected error while loading parts"
            self.status = ListStatus.ERROR

    @staticmethod
    def _params(values: Mapping[str, Any]) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        for key in PART_FIELDS:
            value = values.get(key)
            if key in DATE_FIELDS:
                parsed = parse_date(value)
                value = parsed.isoformat() if parsed else None
            else:
                value = str(value).strip() if value is not None else ""
                value = value or None
            params[f"{key}_param"] = value
        if params["status_param"] is None:
            params["status_param"] = PartStatus.OPERATIONAL.value
        return params

    async def save_part(self, values: Mapping[str, Any], part_id: Optional[str] = None) -> MutationOutcome:
        """Add a part to the open elevator, or update ``part_id``."""
        if self.elevator_id is None:
            return MutationOutcome(ok=False, message="No elevator selected")
        result = validate_elevator_part(values)
        if not result.is_valid:
            return MutationOutcome(ok=False, errors=result.field_errors())

        params = self._params(values)
        if part_id:
            name, params = "update_elevator_part", {"part_id_param": part_id, **params}
            success_message, failure_message = "Part updated successfully", "Failed to update the part"
        else:
            name, params = "add_elevator_part", {"elevator_id_param": self.elevator_id, **params}
            success_message, failure_message = "Part added successfully", "Failed to add the part"

        self.saving = True
        try:
            payload = await self.auth.client.rpc(name, params, token=self.auth.access_token)
            rpc_result = RpcResult.from_payload(payload)
            if not rpc_result.success:
                message = rpc_result.message or failure_message
                self.notifier.error(message)
                return MutationOutcome(ok=False, message=message)
        except BackendError as e:
            self.notifier.error(f"Error: {e.message}")
            return MutationOutcome(ok=False, message=e.message)
        except Exception:
            logger.exception("Unexpected error in %s", name)
            self.notifier.error(GENERIC_ERROR_MESSAGE)
            return MutationOutcome(ok=False, message=GENERIC_ERROR_MESSAGE)
        finally:
            self.saving = False

        self.notifier.success(success_message)
        await self.reload()
        return MutationOutcome(ok=True, close=True, message=success_message)

    def request_delete(self, part_id: str) -> None:
        part = self.get_part(part_id)
        self.delete_dialog.open(part_id, part.name if part else part_id)

    def cancel_delete(self) -> None:
        self.delete_dialog.close()

    async def confirm_delete(self) -> bool:
        target = self.delete_dialog.target
        self.delete_dialog.close()
        if target is None:
            return False
        try:
            payload = await self.auth.client.rpc(
                "delete_elevator_part", {"part_id_param": target}, token=self.auth.access_token
            )
            result = RpcResult.from_payload(payload)
            if not result.success:
                self.notifier.error(result.message or "Failed to delete the part")
                return False
        except BackendError as e:
            self.notifier.error(f"Error deleting part: {e.message}")
            return False
        except Exception:
            logger.exception("Unexpected error deleting part %s", target)
            self.notifier.error(GENERIC_ERROR_MESSAGE)
            return False
        self.notifier.success("Part deleted successfully")
        await self.reload()
        return True
