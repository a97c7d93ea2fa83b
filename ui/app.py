"""
Elevator Platform UI

Single Streamlit script; the ``route`` query parameter selects the page.
"""

from pathlib import Path
import sys
import streamlit as st

# Ensure project root is on sys.path to enable package imports
project_root = Path(__file__).resolve().parents[1]
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from elevator_platform import routes
from elevator_platform.config import get_settings
from elevator_platform.utils_logging import configure_logging
from ui.services import SessionService
from ui.utils.helpers import run_async
from ui.components.notifications import render_notifications
from ui.components.login_page import render_login_page
from ui.components.register_page import render_register_page
from ui.components.password_pages import render_forgot_password_page, render_reset_password_page
from ui.components.verification_pages import render_email_verification_page, render_resend_verification_page
from ui.components.profile_page import render_profile_page
from ui.components.dashboard_page import render_dashboard_page


st.set_page_config(page_title="Elevator Platform", page_icon="🛗", layout="wide")

PUBLIC_PAGES = {
    routes.LOGIN: render_login_page,
    routes.REGISTER: render_register_page,
    routes.FORGOT_PASSWORD: render_forgot_password_page,
    routes.RESET_PASSWORD: render_reset_password_page,
    routes.EMAIL_VERIFICATION: render_email_verification_page,
    routes.RESEND_VERIFICATION: render_resend_verification_page,
}


def render_sidebar(ctx, session: SessionService, route: str) -> None:
    user = ctx.auth.user
    with st.sidebar:
        st.markdown("### 🛗 Elevator Platform")
        if user is None:
            return
        st.caption(user.email or "")
        dashboard = routes.dashboard_route_for(user.role)
        if st.button("Dashboard", use_container_width=True, disabled=route == dashboard):
            session.navigate(dashboard)
        if st.button("Profile", use_container_width=True, disabled=route == routes.PROFILE):
            session.navigate(routes.PROFILE)
        st.divider()
        if st.button("Sign out", use_container_width=True):
            run_async(ctx.auth.sign_out())
            ctx.notifier.info("You have been signed out")
            session.navigate(routes.LOGIN)


def main() -> None:
    settings = get_settings()
    configure_logging(Path(settings.log_dir), settings.debug)

    session = SessionService()
    ctx = session.context()
    state = session.ui_state()

    run_async(ctx.auth.initialize())
    if ctx.resume.observe():
        run_async(ctx.handle_resume())

    render_notifications(ctx.notifier)

    requested = session.requested_route()
    route = routes.resolve_route(requested, ctx.auth.is_authenticated, ctx.auth.user.role if ctx.auth.user else None)
    if routes.normalize(requested) != route:
        # Keep the address bar in sync with the page actually shown
        st.query_params["route"] = route

    render_sidebar(ctx, session, route)

    if route in PUBLIC_PAGES:
        PUBLIC_PAGES[route](ctx, state, session)
    elif route == routes.PROFILE:
        render_profile_page(ctx, state, session)
    else:
        render_dashboard_page(ctx, state, session, route)

    render_notifications(ctx.notifier)


if __name__ == "__main__":
    main()
