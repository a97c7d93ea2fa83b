from __future__ import annotations

"""Pure filtering of the elevator collection for display."""

from typing import Iterable, List, Optional

from ..models import Elevator

STATUS_ALL = "all"


def matches_search(elevator: Elevator, search_term: Optional[str]) -> bool:
    """Case-insensitive substring match on serial number or model."""
    if not search_term:
        return True
    needle = search_term.lower()
    return needle in elevator.serial_number.lower() or needle in elevator.model.lower()


def matches_status(elevator: Elevator, status: Optional[str]) -> bool:
    if not status or status == STATUS_ALL:
        return True
    return elevator.status == status


def apply_filters(
    collection: Iterable[Elevator],
    search_term: Optional[str] = None,
    status: Optional[str] = STATUS_ALL,
) -> List[Elevator]:
    """Return the elevators passing both predicates, in input order.

    The input is never modified.
    """
    return [
        e for e in collection
        if matches_search(e, search_term) and matches_status(e, status)
    ]
