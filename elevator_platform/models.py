from __future__ import annotations

"""
Typed records exchanged with the backend.

Rows arrive as JSON objects; each dataclass offers a tolerant ``from_row``
that ignores unknown columns and fills safe defaults for missing ones.
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from .roles import Role


class ElevatorStatus(Enum):
    OPERATIONAL = "operational"
    MAINTENANCE = "maintenance"
    OUT_OF_ORDER = "out_of_order"


class PartStatus(Enum):
    OPERATIONAL = "operational"
    NEEDS_MAINTENANCE = "needs_maintenance"
    DEFECTIVE = "defective"


ELEVATOR_STATUS_LABELS: Dict[str, str] = {
    ElevatorStatus.OPERATIONAL.value: "Operational",
    ElevatorStatus.MAINTENANCE.value: "In maintenance",
    ElevatorStatus.OUT_OF_ORDER.value: "Out of order",
}

PART_STATUS_LABELS: Dict[str, str] = {
    PartStatus.OPERATIONAL.value: "Operational",
    PartStatus.NEEDS_MAINTENANCE.value: "Needs maintenance",
    PartStatus.DEFECTIVE.value: "Defective",
}


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text if text else None


def _to_int(value: Any, default: int) -> int:
    """``int`` that accepts numeric strings such as ``"630.0"``; junk gives ``default``."""
    if value is None or value == "":
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default


@dataclass
class Session:
    """Authenticated session as issued by the auth endpoints.

    Tokens are opaque to the client and must never be logged.
    """

    user_id: str
    email: Optional[str]
    access_token: str
    refresh_token: str
    expires_at: float

    def expires_soon(self, now: float, margin: float) -> bool:
        return self.expires_at - now <= margin

    @classmethod
    def from_auth_payload(cls, payload: Mapping[str, Any], now: float) -> "Session":
        """Build a session from a ``/token`` response body."""
        user = payload.get("user") or {}
        expires_at = payload.get("expires_at")
        if expires_at is None:
            expires_at = now + float(payload.get("expires_in") or 3600)
        return cls(
            user_id=str(user.get("id", "")),
            email=user.get("email"),
            access_token=str(payload.get("access_token", "")),
            refresh_token=str(payload.get("refresh_token", "")),
            expires_at=float(expires_at),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Session":
        return cls(
            user_id=str(data["user_id"]),
            email=data.get("email"),
            access_token=str(data["access_token"]),
            refresh_token=str(data["refresh_token"]),
            expires_at=float(data["expires_at"]),
        )


@dataclass
class Profile:
    """Row of the ``profiles`` table."""

    id: str
    role: Optional[Role] = None
    company_id: Optional[str] = None
    full_name: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    company_name: Optional[str] = None
    company_address: Optional[str] = None
    tax_id: Optional[str] = None
    additional_info: Optional[str] = None
    specialization: Optional[str] = None
    experience: Optional[str] = None
    building_address: Optional[str] = None
    apartments_count: Optional[str] = None
    building_info: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Profile":
        return cls(
            id=str(row.get("id", "")),
            role=Role.parse(row.get("role")),
            company_id=_opt_str(row.get("company_id")),
            full_name=_opt_str(row.get("full_name")),
            phone=_opt_str(row.get("phone")),
            avatar_url=_opt_str(row.get("avatar_url")),
            company_name=_opt_str(row.get("company_name")),
            company_address=_opt_str(row.get("company_address")),
            tax_id=_opt_str(row.get("tax_id")),
            additional_info=_opt_str(row.get("additional_info")),
            specialization=_opt_str(row.get("specialization")),
            # experience and apartments_count are stored as text but may arrive as numbers
            experience=_opt_str(row.get("experience")),
            building_address=_opt_str(row.get("building_address")),
            apartments_count=_opt_str(row.get("apartments_count")),
            building_info=_opt_str(row.get("building_info")),
            created_at=_opt_str(row.get("created_at")),
            updated_at=_opt_str(row.get("updated_at")),
        )

    def form_values(self) -> Dict[str, str]:
        """Editable fields as strings, empty string for unset values."""
        keys = (
            "full_name", "phone", "company_name", "company_address", "additional_info",
            "specialization", "experience", "building_address", "apartments_count", "building_info",
        )
        return {k: getattr(self, k) or "" for k in keys}


@dataclass
class CurrentUser:
    """Signed-in user together with the profile fetched after sign-in."""

    session: Session
    profile: Optional[Profile] = None

    @property
    def id(self) -> str:
        return self.session.user_id

    @property
    def email(self) -> Optional[str]:
        return self.session.email

    @property
    def role(self) -> Optional[Role]:
        return self.profile.role if self.profile else None

    @property
    def company_id(self) -> Optional[str]:
        return self.profile.company_id if self.profile else None


@dataclass
class Building:
    id: str
    name: str
    address: str = ""
    floors: int = 1
    entrances: int = 1
    company_id: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Building":
        return cls(
            id=str(row.get("id", "")),
            name=str(row.get("name") or ""),
            address=str(row.get("address") or ""),
            floors=_to_int(row.get("floors"), 1),
            entrances=_to_int(row.get("entrances"), 1),
            company_id=_opt_str(row.get("company_id")),
        )


@dataclass
class Elevator:
    id: str
    serial_number: str
    model: str
    capacity: int = 0
    status: str = ElevatorStatus.OPERATIONAL.value
    building_id: Optional[str] = None
    company_id: Optional[str] = None
    installation_date: Optional[str] = None
    last_inspection_date: Optional[str] = None
    next_inspection_date: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Elevator":
        return cls(
            id=str(row.get("id", "")),
            serial_number=str(row.get("serial_number") or ""),
            model=str(row.get("model") or ""),
            capacity=_to_int(row.get("capacity"), 0),
            status=str(row.get("status") or ElevatorStatus.OPERATIONAL.value),
            building_id=_opt_str(row.get("building_id")),
            company_id=_opt_str(row.get("company_id")),
            installation_date=_opt_str(row.get("installation_date")),
            last_inspection_date=_opt_str(row.get("last_inspection_date")),
            next_inspection_date=_opt_str(row.get("next_inspection_date")),
        )


@dataclass
class ElevatorPart:
    id: str
    elevator_id: str
    name: str
    part_number: Optional[str] = None
    manufacturer: Optional[str] = None
    installation_date: Optional[str] = None
    last_maintenance_date: Optional[str] = None
    next_maintenance_date: Optional[str] = None
    status: str = PartStatus.OPERATIONAL.value
    description: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ElevatorPart":
        return cls(
            id=str(row.get("id", "")),
            elevator_id=str(row.get("elevator_id") or ""),
            name=str(row.get("name") or ""),
            part_number=_opt_str(row.get("part_number")),
            manufacturer=_opt_str(row.get("manufacturer")),
            installation_date=_opt_str(row.get("installation_date")),
            last_maintenance_date=_opt_str(row.get("last_maintenance_date")),
            next_maintenance_date=_opt_str(row.get("next_maintenance_date")),
            status=str(row.get("status") or PartStatus.OPERATIONAL.value),
            description=_opt_str(row.get("description")),
        )


@dataclass(frozen=True)
class RpcResult:
    """Structured result of a named remote procedure.

    Procedures answer ``{"success": bool, "<data_key>": ..., "message": str}``;
    some return the payload bare (a list, or an object without ``success``),
    which is treated as a success.
    """

    success: bool
    data: Any = None
    message: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any, data_key: str = "data") -> "RpcResult":
        if isinstance(payload, Mapping):
            if "success" in payload:
                return cls(
                    success=bool(payload.get("success")),
                    data=payload.get(data_key),
                    message=_opt_str(payload.get("message")),
                )
            return cls(success=True, data=payload.get(data_key, payload), message=_opt_str(payload.get("message")))
        return cls(success=True, data=payload)

    def rows(self) -> List[Dict[str, Any]]:
        """Return ``data`` as a list of row dicts (empty when absent)."""
        if isinstance(self.data, list):
            return [r for r in self.data if isinstance(r, Mapping)]
        return []


__all__ = [
    "Building",
    "CurrentUser",
    "ELEVATOR_STATUS_LABELS",
    "Elevator",
    "ElevatorPart",
    "ElevatorStatus",
    "PART_STATUS_LABELS",
    "PartStatus",
    "Profile",
    "RpcResult",
    "Session",
]
