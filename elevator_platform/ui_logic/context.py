"""
Per-browser-session wiring of the managers.

``build_context`` creates one backend client, auth manager and set of
controllers; the Streamlit app keeps the result in ``st.session_state`` so
nothing here is shared between sessions.
"""

from dataclasses import dataclass
from typing import Callable, Optional
import logging
import time

import httpx

from ..backend import BackendClient
from ..config import Settings
from .auth_manager import AuthManager
from .elevator_manager import ElevatorListController
from .notifications import Notifier
from .parts_manager import PartsListController
from .profile_manager import ProfileForm
from .session_store import SessionStore

logger = logging.getLogger(__name__)


class ResumePolicy:
    """Detects the user returning to an idle tab.

    Streamlit reruns the script on every interaction; a gap between two
    reruns longer than ``idle_seconds`` is treated as a resume.
    """

    def __init__(self, idle_seconds: float = 300.0, clock: Callable[[], float] = time.monotonic):
        self.idle_seconds = idle_seconds
        self._clock = clock
        self._last_seen: Optional[float] = None

    def observe(self) -> bool:
        """Record a rerun; return True if it follows an idle gap."""
        now = self._clock()
        resumed = self._last_seen is not None and now - self._last_seen > self.idle_seconds
        self._last_seen = now
        return resumed


@dataclass
class AppContext:
    settings: Settings
    notifier: Notifier
    auth: AuthManager
    elevators: ElevatorListController
    parts: PartsListController
    profile: ProfileForm
    resume: ResumePolicy

    async def handle_resume(self) -> None:
        """Refresh an expiring session and re-fetch the visible list."""
        logger.info("Resuming after idle period")
        await self.auth.on_resume()
        if self.auth.is_authenticated:
            await self.elevators.on_resume()


def build_context(settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> AppContext:
    notifier = Notifier()
    client = BackendClient(
        settings.backend_url, settings.backend_anon_key, timeout=settings.request_timeout, transport=transport
    )
    auth = AuthManager(
        client,
        SessionStore(),
        notifier,
        site_url=settings.site_url,
        expiry_margin=settings.session_expiry_margin_seconds,
    )
    return AppContext(
        settings=settings,
        notifier=notifier,
        auth=auth,
        elevators=ElevatorListController(auth, cache_ttl=settings.elevator_cache_ttl_seconds),
        parts=PartsListController(auth),
        profile=ProfileForm(auth, bucket=settings.avatar_bucket, max_avatar_bytes=settings.max_avatar_bytes),
        resume=ResumePolicy(settings.resume_idle_seconds),
    )
