"""
User roles and the role-specific profile fields.

Roles form a closed set. Everything that depends on the role goes through
an exhaustive ``match`` so that adding a member to :class:`Role` is flagged
by the type checker at every place that has to handle it.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple, assert_never


class Role(Enum):
    """Enumeration of account roles known to the backend."""

    COMPANY = "company"
    COMPANY_ADMIN = "company_admin"
    TECHNICIAN = "technician"
    BUILDING_MANAGER = "building_manager"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: object) -> Optional["Role"]:
        """Return the role for a raw backend value, or None when unknown."""
        if isinstance(value, Role):
            return value
        try:
            return cls(str(value))
        except ValueError:
            return None


# Roles a visitor can pick on the registration form
REGISTRATION_ROLES: Tuple[Role, ...] = (Role.COMPANY, Role.TECHNICIAN, Role.BUILDING_MANAGER)

COMMON_PROFILE_FIELDS: Tuple[str, ...] = ("full_name", "phone")


def role_label(role: Role) -> str:
    match role:
        case Role.COMPANY:
            return "Company"
        case Role.COMPANY_ADMIN:
            return "Company administrator"
        case Role.TECHNICIAN:
            return "Technician"
        case Role.BUILDING_MANAGER:
            return "Building manager"
        case Role.ADMIN:
            return "Administrator"
        case _:
            assert_never(role)


def role_profile_fields(role: Role) -> Tuple[str, ...]:
    """Return the profile fields editable for ``role`` besides the common ones."""
    match role:
        case Role.COMPANY | Role.COMPANY_ADMIN:
            return ("company_name", "company_address")
        case Role.TECHNICIAN:
            return ("specialization", "experience", "additional_info")
        case Role.BUILDING_MANAGER:
            return ("building_address", "apartments_count", "building_info")
        case Role.ADMIN:
            return ()
        case _:
            assert_never(role)


def registration_fields(role: Role) -> Tuple[str, ...]:
    """Profile columns written on registration for ``role``."""
    match role:
        case Role.COMPANY:
            return ("company_name", "company_address", "tax_id")
        case Role.TECHNICIAN:
            return ("specialization", "experience", "additional_info")
        case Role.BUILDING_MANAGER:
            return ("building_address", "apartments_count", "building_info")
        case Role.COMPANY_ADMIN | Role.ADMIN:
            raise ValueError(f"Role '{role.value}' cannot be chosen at registration")
        case _:
            assert_never(role)


def can_manage_elevators(role: Optional[Role]) -> bool:
    """Only company accounts create, edit and delete elevators."""
    return role in (Role.COMPANY, Role.COMPANY_ADMIN)


def company_scope(role: Optional[Role], company_id: Optional[str]) -> Optional[str]:
    """Company id to pass as the tenant hint, or None for unscoped roles.

    The backend enforces authorization; this only narrows the query.
    """
    if can_manage_elevators(role):
        return company_id
    return None
