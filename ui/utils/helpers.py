from __future__ import annotations

"""General-purpose helpers for the UI."""

import asyncio
from datetime import date
from typing import Any, Awaitable, Dict, Optional, TypeVar

from elevator_platform.models import ELEVATOR_STATUS_LABELS, PART_STATUS_LABELS
from elevator_platform.ui_logic.validation_manager import parse_date

T = TypeVar("T")

NOT_SET = "Not set"


def run_async(coro: Awaitable[T]) -> T:
    """Run a manager coroutine to completion from a Streamlit callback.

    Streamlit executes the script synchronously, so each handler gets its
    own short-lived event loop.
    """
    return asyncio.run(coro)


def format_date(value: Any) -> str:
    """Render a stored date as ``DD.MM.YYYY``."""
    try:
        parsed = parse_date(value)
    except ValueError:
        return str(value)
    if parsed is None:
        return NOT_SET
    return parsed.strftime("%d.%m.%Y")


def to_date(value: Any) -> Optional[date]:
    """Value for ``st.date_input``; unparseable input becomes None."""
    try:
        return parse_date(value)
    except ValueError:
        return None


def elevator_status_label(status: str) -> str:
    return ELEVATOR_STATUS_LABELS.get(status, status)


def part_status_label(status: str) -> str:
    return PART_STATUS_LABELS.get(status, status)


def error_for(errors: Dict[str, str], field: str) -> Optional[str]:
    return errors.get(field) if errors else None
