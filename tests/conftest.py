"""
Pytest configuration for ensuring the project root is on sys.path.

This allows test modules to import the in-repo package layout like:
    from elevator_platform.ui_logic import AuthManager

Without relying on external environment variables.
"""

import os
import sys
from typing import Optional

import pytest

# Insert the repository root (one directory up from tests/) at the
# beginning of sys.path to prioritize local modules over site-packages.
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from elevator_platform.models import Session  # noqa: E402
from elevator_platform.ui_logic import AuthManager, Notifier, SessionStore  # noqa: E402
from fakes import COMPANY_ID, NOW, USER_ID, FakeBackend, profile_row  # noqa: E402


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


@pytest.fixture
def session_store() -> SessionStore:
    return SessionStore()


@pytest.fixture
def make_auth(backend, notifier, session_store):
    """Factory for an AuthManager; ``await auth.initialize()`` signs it in.

    With ``signed_in=True`` a valid session is stored and the profile RPC
    answers ``profile_row(role, company_id)``.
    """

    def factory(role: str = "company", company_id: Optional[str] = COMPANY_ID, signed_in: bool = True, **extra):
        if signed_in:
            session_store.save(
                Session(
                    user_id=USER_ID,
                    email="ivan@example.com",
                    access_token="access-token",
                    refresh_token="refresh-token",
                    expires_at=NOW + 3600,
                )
            )
            backend.responses["get_profile_by_id"] = profile_row(role, company_id, **extra)
        return AuthManager(backend, session_store, notifier, clock=lambda: NOW)

    return factory
