"""
Application routes and the access rules between them.

Streamlit has a single script, so routes are plain path strings kept in the
``route`` query parameter; :func:`resolve_route` decides which page actually
renders given the signed-in state.
"""

from __future__ import annotations

from typing import Optional, assert_never

from .roles import Role

LOGIN = "/login"
REGISTER = "/register"
FORGOT_PASSWORD = "/forgot-password"
RESET_PASSWORD = "/reset-password"
EMAIL_VERIFICATION = "/email-verification"
RESEND_VERIFICATION = "/resend-verification"
PROFILE = "/profile"
DASHBOARD = "/dashboard"
DASHBOARD_COMPANY = "/dashboard/company"
DASHBOARD_TECHNICIAN = "/dashboard/technician"
DASHBOARD_BUILDING_MANAGER = "/dashboard/building-manager"
DASHBOARD_ADMIN = "/dashboard/admin"

PUBLIC_ROUTES = frozenset(
    {LOGIN, REGISTER, FORGOT_PASSWORD, RESET_PASSWORD, EMAIL_VERIFICATION, RESEND_VERIFICATION}
)
DASHBOARD_ROUTES = frozenset(
    {DASHBOARD, DASHBOARD_COMPANY, DASHBOARD_TECHNICIAN, DASHBOARD_BUILDING_MANAGER, DASHBOARD_ADMIN}
)
PROTECTED_ROUTES = DASHBOARD_ROUTES | {PROFILE}

# Public pages a signed-in user is sent away from
AUTH_ONLY_ROUTES = frozenset({LOGIN, REGISTER})


def dashboard_route_for(role: Optional[Role]) -> str:
    """Role-specific dashboard, or the generic one when the role is unknown."""
    if role is None:
        return DASHBOARD
    match role:
        case Role.COMPANY | Role.COMPANY_ADMIN:
            return DASHBOARD_COMPANY
        case Role.TECHNICIAN:
            return DASHBOARD_TECHNICIAN
        case Role.BUILDING_MANAGER:
            return DASHBOARD_BUILDING_MANAGER
        case Role.ADMIN:
            return DASHBOARD_ADMIN
        case _:
            assert_never(role)


def route_url(site_url: str, route: str) -> str:
    """Absolute link to ``route``, used as redirect target in e-mails."""
    return f"{site_url.rstrip('/')}/?route={route}"


def normalize(route: Optional[str]) -> str:
    if not route:
        return "/"
    route = "/" + route.strip().strip("/")
    return route


def resolve_route(requested: Optional[str], authenticated: bool, role: Optional[Role] = None) -> str:
    """Return the route to render for ``requested``.

    - protected routes without a session go to ``/login``
    - ``/login`` and ``/register`` with a session go to the dashboard
    - ``/dashboard`` (and ``/``) resolve to the role dashboard
    - unknown routes fall back to the dashboard or login
    """
    route = normalize(requested)
    if route == "/":
        route = DASHBOARD if authenticated else LOGIN
    if route not in PUBLIC_ROUTES and route not in PROTECTED_ROUTES:
        route = DASHBOARD if authenticated else LOGIN

    if route in PROTECTED_ROUTES and not authenticated:
        return LOGIN
    if route in AUTH_ONLY_ROUTES and authenticated:
        route = DASHBOARD
    if route == DASHBOARD:
        return dashboard_route_for(role)
    return route
