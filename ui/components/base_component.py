from __future__ import annotations

"""Base component class for the Streamlit pages.

All pages inherit from `BaseComponent` and implement `render()`. They get
the session's manager context, the UI state and the session service through
the constructor, so a page never builds its own backend client.
"""

from dataclasses import dataclass
from typing import Awaitable, Dict, Optional, TypeVar

import streamlit as st

from elevator_platform.ui_logic import AppContext
from ui.services import SessionService
from ui.state import UIState
from ui.utils.helpers import error_for, run_async

T = TypeVar("T")


@dataclass
class BaseComponent:
    """Base class for all UI components.

    Attributes:
        ctx: Managers for the current browser session
        state: Presentation state (open modals, inline errors)
        session: Navigation and session bookkeeping
    """

    ctx: AppContext
    state: UIState
    session: SessionService

    def render(self) -> None:
        """Render the component.

        Subclasses must override this method to draw Streamlit widgets
        and call into the managers.
        """
        raise NotImplementedError("Subclasses must implement render()")

    def run(self, coro: Awaitable[T]) -> T:
        return run_async(coro)

    @staticmethod
    def field_error(errors: Dict[str, str], field: str) -> None:
        message: Optional[str] = error_for(errors, field)
        if message:
            st.caption(f":red[{message}]")
