from __future__ import annotations

"""Per-browser-session objects and navigation.

Streamlit re-executes the script on every interaction; the manager context
and the UI state are created on the first run and kept in
``st.session_state`` afterwards.
"""

import logging
from typing import Optional

import streamlit as st

from elevator_platform.config import get_settings
from elevator_platform.ui_logic import AppContext, build_context
from elevator_platform.ui_logic.auth_manager import SIGNED_OUT
from ui.state import UIState

logger = logging.getLogger(__name__)

CONTEXT_KEY = "app_context"
UI_STATE_KEY = "ui_state"
ROUTE_PARAM = "route"


class SessionService:
    """Access to the session-scoped context, UI state and current route."""

    def context(self) -> AppContext:
        if CONTEXT_KEY not in st.session_state:
            ctx = build_context(get_settings())
            ctx.auth.add_listener(SIGNED_OUT, self.ui_state().reset)
            st.session_state[CONTEXT_KEY] = ctx
            logger.info("Created session context")
        return st.session_state[CONTEXT_KEY]

    def ui_state(self) -> UIState:
        if UI_STATE_KEY not in st.session_state:
            st.session_state[UI_STATE_KEY] = UIState()
        return st.session_state[UI_STATE_KEY]

    def requested_route(self) -> Optional[str]:
        return st.query_params.get(ROUTE_PARAM)

    def query_param(self, name: str) -> Optional[str]:
        return st.query_params.get(name)

    def navigate(self, route: str) -> None:
        """Switch to ``route`` and rerun; drops one-shot link parameters."""
        st.query_params.clear()
        st.query_params[ROUTE_PARAM] = route
        st.rerun()
