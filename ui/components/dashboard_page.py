from __future__ import annotations

import streamlit as st

from elevator_platform import routes
from elevator_platform.roles import role_label

from .base_component import BaseComponent
from .elevator_list import ElevatorListView

TITLES = {
    routes.DASHBOARD_COMPANY: "Company dashboard",
    routes.DASHBOARD_TECHNICIAN: "Technician dashboard",
    routes.DASHBOARD_BUILDING_MANAGER: "Building manager dashboard",
    routes.DASHBOARD_ADMIN: "Administration",
    routes.DASHBOARD: "Dashboard",
}


class DashboardPage(BaseComponent):
    """Role dashboard; every role sees the elevators the backend lets it read."""

    def __init__(self, ctx, state, session, route: str) -> None:
        super().__init__(ctx, state, session)
        self.route = route

    def render(self) -> None:
        user = self.ctx.auth.user
        st.title(TITLES.get(self.route, "Dashboard"))
        if user is None:
            return
        name = (user.profile.full_name if user.profile else None) or user.email or ""
        st.caption(f"Welcome, {name}" + (f" · {role_label(user.role)}" if user.role else ""))
        if user.profile is None:
            st.warning("Your profile is still loading or could not be found.")
            if st.button("Reload profile", key="dashboard_reload_profile"):
                self.run(self.ctx.auth.reload_profile())
                st.rerun()
            return
        ElevatorListView(self.ctx, self.state, self.session).render()


def render_dashboard_page(ctx, state, session, route: str) -> None:
    DashboardPage(ctx, state, session, route).render()
