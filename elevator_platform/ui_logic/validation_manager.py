"""
Framework-agnostic form validation for the elevator platform.

Every form the UI submits is checked here first. A failing check produces a
``ValidationError`` bound to the offending field, so pages can render the
message next to the input. Nothing in this module talks to the backend.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional
import logging
import re

from ..models import ElevatorStatus, PartStatus
from ..roles import REGISTRATION_ROLES, Role, role_profile_fields
from .filters import STATUS_ALL

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PHONE_RE = re.compile(r"^[0-9+\s-]{10,}$")
TAX_ID_RE = re.compile(r"^[0-9]{9,13}$")
DIGITS_RE = re.compile(r"^[0-9]+$")
STRONG_PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[^\da-zA-Z]).{8,}$")

MIN_VALID_DATE = date(2000, 1, 1)

# Profile field limits: (min, max); min applies only when a value is given
PROFILE_LIMITS: Dict[str, tuple] = {
    "full_name": (2, 100),
    "company_name": (2, 100),
    "phone": (5, 20),
    "company_address": (0, 200),
    "additional_info": (0, 500),
    "specialization": (0, 100),
    "experience": (0, 500),
    "building_address": (0, 200),
    "apartments_count": (0, 50),
    "building_info": (0, 500),
}

FIELD_LABELS: Dict[str, str] = {
    "full_name": "Full name",
    "company_name": "Company name",
    "phone": "Phone",
    "company_address": "Company address",
    "additional_info": "Additional information",
    "specialization": "Specialization",
    "experience": "Experience",
    "building_address": "Building address",
    "apartments_count": "Apartments count",
    "building_info": "Building information",
}


class ValidationError:
    """Represents a validation error bound to a form field."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValidationError):
            return NotImplemented
        return (self.field, self.message) == (other.field, other.message)

    def __repr__(self) -> str:
        return f"ValidationError({self.field!r}, {self.message!r})"

    def to_dict(self) -> Dict:
        return {"field": self.field, "message": self.message}


class ValidationResult:
    """Represents the result of a validation operation."""

    def __init__(self, errors: Optional[List[ValidationError]] = None):
        self.errors: List[ValidationError] = list(errors or [])

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add_error(self, field: str, message: str) -> None:
        self.errors.append(ValidationError(field, message))

    def get_errors_by_field(self, field: str) -> List[ValidationError]:
        return [error for error in self.errors if error.field == field]

    def field_errors(self) -> Dict[str, str]:
        """First message per field, in the order the fields failed."""
        out: Dict[str, str] = {}
        for error in self.errors:
            out.setdefault(error.field, error.message)
        return out

    def first_message(self) -> Optional[str]:
        return self.errors[0].message if self.errors else None

    def to_dict(self) -> Dict:
        return {
            "is_valid": self.is_valid,
            "errors": [error.to_dict() for error in self.errors],
        }


def _text(values: Mapping[str, Any], key: str) -> str:
    value = values.get(key)
    if value is None:
        return ""
    return str(value).strip()


def parse_date(value: Any) -> Optional[date]:
    """Accept a ``date``, ``datetime`` or ISO ``YYYY-MM-DD`` string.

    Returns None for empty input and raises ``ValueError`` for garbage.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])


def _check_email(result: ValidationResult, email: str) -> None:
    if not email:
        result.add_error("email", "Email is required")
    elif not EMAIL_RE.match(email):
        result.add_error("email", "Invalid email address")


# ----------------------------------------------------------------------
# Authentication forms
# ----------------------------------------------------------------------
def validate_login(email: str, password: str) -> ValidationResult:
    result = ValidationResult()
    _check_email(result, (email or "").strip())
    if not password:
        result.add_error("password", "Password is required")
    return result


def validate_forgot_password(email: str) -> ValidationResult:
    result = ValidationResult()
    _check_email(result, (email or "").strip())
    return result


def validate_resend_verification(email: str) -> ValidationResult:
    result = ValidationResult()
    _check_email(result, (email or "").strip())
    return result


def validate_reset_password(password: str, confirm_password: str) -> ValidationResult:
    result = ValidationResult()
    if not password:
        result.add_error("password", "Password is required")
    elif len(password) < 8:
        result.add_error("password", "Password must be at least 8 characters")
    elif not STRONG_PASSWORD_RE.match(password):
        result.add_error(
            "password",
            "Password must contain an uppercase letter, a lowercase letter, a digit and a special character",
        )
    if not confirm_password:
        result.add_error("confirm_password", "Please confirm the password")
    elif password != confirm_password:
        result.add_error("confirm_password", "Passwords do not match")
    return result


def validate_register(values: Mapping[str, Any]) -> ValidationResult:
    """Validate the registration form.

    Expects the keys ``email``, ``password``, ``confirm_password``, ``role``,
    ``full_name``, ``phone`` and the role-specific profile fields.
    """
    result = ValidationResult()
    _check_email(result, _text(values, "email"))

    password = values.get("password") or ""
    if len(password) < 6:
        result.add_error("password", "Password must be at least 6 characters")
    if password != (values.get("confirm_password") or ""):
        result.add_error("confirm_password", "Passwords do not match")

    role = Role.parse(values.get("role"))
    if role not in REGISTRATION_ROLES:
        result.add_error("role", "Choose an account type")

    if len(_text(values, "full_name")) < 2:
        result.add_error("full_name", "Name must be at least 2 characters")
    if not PHONE_RE.match(_text(values, "phone")):
        result.add_error("phone", "Invalid phone number")

    if role is Role.COMPANY:
        if not (_text(values, "company_name") and _text(values, "company_address") and _text(values, "tax_id")):
            result.add_error("company_name", "Company name, address and tax ID are required")
        tax_id = _text(values, "tax_id")
        if tax_id and not TAX_ID_RE.match(tax_id):
            result.add_error("tax_id", "Tax ID must be 9 to 13 digits")
    elif role is Role.TECHNICIAN:
        experience = _text(values, "experience")
        if not (_text(values, "specialization") and experience):
            result.add_error("specialization", "Specialization and experience are required")
        if experience and not DIGITS_RE.match(experience):
            result.add_error("experience", "Enter a valid number of years")
    elif role is Role.BUILDING_MANAGER:
        apartments = _text(values, "apartments_count")
        if not (_text(values, "building_address") and apartments):
            result.add_error("building_address", "Building address and apartments count are required")
        if apartments and not DIGITS_RE.match(apartments):
            result.add_error("apartments_count", "Enter a valid number of apartments")
    return result


# ----------------------------------------------------------------------
# Profile
# ----------------------------------------------------------------------
def validate_profile(role: Optional[Role], values: Mapping[str, Any]) -> ValidationResult:
    """Length checks on the profile fields editable for ``role``.

    Empty fields count as "not provided" and are always accepted.
    """
    result = ValidationResult()
    fields = ["full_name", "phone"]
    if role is not None:
        fields.extend(role_profile_fields(role))
    for key in fields:
        value = _text(values, key)
        if not value:
            continue
        low, high = PROFILE_LIMITS[key]
        label = FIELD_LABELS[key]
        if low and len(value) < low:
            result.add_error(key, f"{label} must be at least {low} characters")
        elif len(value) > high:
            result.add_error(key, f"{label} cannot exceed {high} characters")
    return result


# ----------------------------------------------------------------------
# Elevators and parts
# ----------------------------------------------------------------------
def _check_date(
    result: ValidationResult, values: Mapping[str, Any], key: str, label: str, required: bool = True
) -> Optional[date]:
    try:
        value = parse_date(values.get(key))
    except ValueError:
        result.add_error(key, f"Invalid {label.lower()}")
        return None
    if value is None and required:
        result.add_error(key, f"{label} is required")
    return value


def validate_elevator(values: Mapping[str, Any], today: Optional[date] = None) -> ValidationResult:
    """Validate the elevator create/edit form.

    Either ``building_id`` is set, or ``building_name`` and
    ``building_address`` describe a building to create.
    """
    today = today or date.today()
    result = ValidationResult()

    serial = _text(values, "serial_number")
    if len(serial) < 2:
        result.add_error("serial_number", "Serial number must be at least 2 characters")
    elif len(serial) > 50:
        result.add_error("serial_number", "Serial number cannot exceed 50 characters")

    model = _text(values, "model")
    if len(model) < 2:
        result.add_error("model", "Model must be at least 2 characters")
    elif len(model) > 100:
        result.add_error("model", "Model cannot exceed 100 characters")

    try:
        capacity = float(values.get("capacity"))
    except (TypeError, ValueError):
        result.add_error("capacity", "Enter a valid number")
    else:
        if capacity != capacity or capacity < 1:
            result.add_error("capacity", "Capacity must be a positive number")
        elif capacity > 5000:
            result.add_error("capacity", "Capacity cannot exceed 5000 kg")

    status = _text(values, "status") or ElevatorStatus.OPERATIONAL.value
    if status not in {s.value for s in ElevatorStatus}:
        result.add_error("status", "Invalid status")

    installed = _check_date(result, values, "installation_date", "Installation date")
    last = _check_date(result, values, "last_inspection_date", "Last inspection date")
    upcoming = _check_date(result, values, "next_inspection_date", "Next inspection date")

    for key, value in (("installation_date", installed), ("last_inspection_date", last)):
        if value is None:
            continue
        if value < MIN_VALID_DATE:
            result.add_error(key, f"Date cannot be before {MIN_VALID_DATE.isoformat()}")
        elif value > today:
            result.add_error(key, "Date cannot be in the future")

    if upcoming is not None:
        if upcoming < today:
            result.add_error("next_inspection_date", "Next inspection date must be today or later")
        elif last is not None and upcoming <= last:
            result.add_error("next_inspection_date", "Next inspection must be after the last inspection")

    if not _text(values, "building_id"):
        if len(_text(values, "building_name")) < 2 or len(_text(values, "building_address")) < 5:
            result.add_error("building_id", "Select an existing building or enter a new one")
    return result


def validate_elevator_part(values: Mapping[str, Any]) -> ValidationResult:
    result = ValidationResult()
    name = _text(values, "name")
    if not name:
        result.add_error("name", "Part name is required")
    elif len(name) > 255:
        result.add_error("name", "Part name cannot exceed 255 characters")

    status = _text(values, "status") or PartStatus.OPERATIONAL.value
    if status not in {s.value for s in PartStatus}:
        result.add_error("status", "Invalid status")

    for key, label in (
        ("installation_date", "Installation date"),
        ("last_maintenance_date", "Last maintenance date"),
        ("next_maintenance_date", "Next maintenance date"),
    ):
        _check_date(result, values, key, label, required=False)
    return result


def validate_filters(search_term: Optional[str], status: Optional[str]) -> ValidationResult:
    result = ValidationResult()
    if search_term is not None and len(search_term) > 100:
        result.add_error("search", "Search term cannot exceed 100 characters")
    allowed = {STATUS_ALL} | {s.value for s in ElevatorStatus}
    if status is not None and status not in allowed:
        result.add_error("status", "Invalid status filter")
    return result
