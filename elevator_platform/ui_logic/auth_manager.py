"""
Authentication and session context.

One ``AuthManager`` exists per browser session. It owns the current
:class:`Session`, the profile fetched for it, and the browser session's store.
Components that hold user-scoped data (the elevator list, the parts view)
subscribe to ``"signed_out"`` so that sign-out tears them down as well.
"""

from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple
import logging
import time

from .. import routes
from ..backend import BackendClient, BackendError, GENERIC_ERROR_MESSAGE
from ..models import CurrentUser, Profile, Session
from .notifications import Notifier
from .session_store import SessionStore

logger = logging.getLogger(__name__)

SIGNED_IN = "signed_in"
SIGNED_OUT = "signed_out"
PROFILE_CHANGED = "profile_changed"


def _profile_row(payload: Any) -> Optional[Mapping[str, Any]]:
    """``get_profile_by_id`` answers a row, a one-row list or ``{data: row}``."""
    if isinstance(payload, list):
        payload = payload[0] if payload else None
    if isinstance(payload, Mapping) and "id" not in payload and isinstance(payload.get("data"), (Mapping, list)):
        return _profile_row(payload["data"])
    if isinstance(payload, Mapping):
        return payload
    return None


class AuthManager:
    """
    Session holder and auth operations for a single browser session.

    Operations return ``(ok, message)`` tuples; they never raise for backend
    failures. The message is ready to show to the user.
    """

    def __init__(
        self,
        client: BackendClient,
        store: SessionStore,
        notifier: Notifier,
        *,
        site_url: str = "http://localhost:8501",
        expiry_margin: float = 60.0,
        clock: Callable[[], float] = time.time,
    ):
        self.client = client
        self.notifier = notifier
        self.site_url = site_url.rstrip("/")
        self.expiry_margin = expiry_margin
        self._store = store
        self._clock = clock
        self._session: Optional[Session] = None
        self._profile: Optional[Profile] = None
        self._listeners: Dict[str, List[Callable]] = {}
        self.initialized = False
        self.busy = False

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def profile(self) -> Optional[Profile]:
        return self._profile

    @property
    def user(self) -> Optional[CurrentUser]:
        if self._session is None:
            return None
        return CurrentUser(self._session, self._profile)

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    @property
    def access_token(self) -> Optional[str]:
        return self._session.access_token if self._session else None

    def add_listener(self, event: str, callback: Callable) -> None:
        """Add a listener for auth events (``signed_in``, ``signed_out``, ``profile_changed``)."""
        self._listeners.setdefault(event, []).append(callback)

    def remove_listener(self, event: str, callback: Callable) -> None:
        if event in self._listeners:
            try:
                self._listeners[event].remove(callback)
            except ValueError:
                pass

    def _notify_listeners(self, event: str, *args: Any) -> None:
        for callback in list(self._listeners.get(event, [])):
            try:
                callback(*args)
            except Exception:
                logger.exception("Error in auth listener for %s", event)

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------
    def _adopt(self, session: Session) -> None:
        self._session = session
        self._store.save(session)

    def _teardown(self) -> None:
        self._session = None
        self._profile = None
        self._store.clear()
        self._notify_listeners(SIGNED_OUT)

    async def initialize(self) -> None:
        """Restore the stored session, refreshing it if it is about to expire."""
        if self.initialized:
            return
        try:
            session = self._store.load()
            if session is None:
                return
            self._session = session
            if session.expires_soon(self._clock(), self.expiry_margin):
                if not await self.refresh_session():
                    return
            await self._load_profile()
            logger.info("Restored session for user %s", session.user_id)
        finally:
            self.initialized = True

    async def refresh_session(self) -> bool:
        """Exchange the refresh token for a new session; tear down on failure."""
        if self._session is None:
            return False
        try:
            payload = await self.client.refresh_session(self._session.refresh_token)
        except BackendError as e:
            logger.warning("Session refresh failed (HTTP %s): %s", e.status_code, e.message)
            self.notifier.warning("Your session has expired. Please sign in again.")
            self._teardown()
            return False
        self._adopt(Session.from_auth_payload(payload, self._clock()))
        logger.info("Session refreshed for user %s", self._session.user_id)
        return True

    async def ensure_fresh_session(self) -> bool:
        if self._session is None:
            return False
        if self._session.expires_soon(self._clock(), self.expiry_margin):
            return await self.refresh_session()
        return True

    async def on_resume(self) -> None:
        """Called when the user comes back to an idle tab."""
        if await self.ensure_fresh_session() and self._profile is None:
            await self._load_profile()

    async def _load_profile(self) -> None:
        if self._session is None:
            return
        try:
            payload = await self.client.rpc(
                "get_profile_by_id", {"user_id": self._session.user_id}, token=self.access_token
            )
        except BackendError as e:
            logger.error("Loading profile failed: %s", e.message)
            self._profile = None
            return
        row = _profile_row(payload)
        self._profile = Profile.from_row(row) if row else None
        if self._profile is None:
            logger.warning("No profile row for user %s", self._session.user_id)
        self._notify_listeners(PROFILE_CHANGED, self._profile)

    async def reload_profile(self) -> None:
        await self._load_profile()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    async def sign_in(self, email: str, password: str) -> Tuple[bool, str]:
        self.busy = True
        try:
            payload = await self.client.sign_in_with_password(email, password)
            self._adopt(Session.from_auth_payload(payload, self._clock()))
            await self._load_profile()
            logger.info("User %s signed in", self._session.user_id)
            self._notify_listeners(SIGNED_IN, self.user)
            return True, "Signed in successfully"
        except BackendError as e:
            logger.info("Sign-in rejected: %s", e.message)
            return False, e.message
        except Exception:
            logger.exception("Unexpected error during sign-in")
            return False, GENERIC_ERROR_MESSAGE
        finally:
            self.busy = False

    async def sign_up(
        self, email: str, password: str, metadata: Mapping[str, Any]
    ) -> Tuple[bool, str, Optional[str], Optional[str]]:
        """Create an account.

        Returns ``(ok, message, user_id, access_token)``; the token is None
        while the e-mail address is unconfirmed.
        """
        self.busy = True
        try:
            payload = await self.client.sign_up(
                email, password, data=metadata, redirect_to=routes.route_url(self.site_url, routes.EMAIL_VERIFICATION)
            )
            user = payload.get("user") if isinstance(payload, Mapping) and "user" in payload else payload
            user_id = str(user.get("id")) if isinstance(user, Mapping) and user.get("id") else None
            token = payload.get("access_token") if isinstance(payload, Mapping) else None
            if user_id is None:
                return False, "Registration failed", None, None
            logger.info("Registered user %s", user_id)
            return True, "Registration successful", user_id, token
        except BackendError as e:
            return False, e.message, None, None
        except Exception:
            logger.exception("Unexpected error during sign-up")
            return False, GENERIC_ERROR_MESSAGE, None, None
        finally:
            self.busy = False

    async def sign_out(self) -> None:
        """Revoke the session remotely (best effort) and tear down local state."""
        token = self.access_token
        try:
            if token:
                await self.client.sign_out(token)
        except BackendError as e:
            logger.warning("Remote sign-out failed: %s", e.message)
        finally:
            self._teardown()
            logger.info("Signed out")

    async def reset_password(self, email: str) -> Tuple[bool, str]:
        """Send a password-reset e-mail linking back to ``/reset-password``."""
        try:
            await self.client.reset_password_for_email(email, routes.route_url(self.site_url, routes.RESET_PASSWORD))
            return True, "Password reset instructions were sent to your email"
        except BackendError as e:
            return False, e.message
        except Exception:
            logger.exception("Unexpected error requesting password reset")
            return False, GENERIC_ERROR_MESSAGE

    async def verify_link(self, token_hash: str, link_type: str) -> Tuple[bool, str]:
        """Redeem the ``token_hash`` of an e-mailed link.

        Recovery links open a session used by the reset-password form;
        signup links confirm the address and are not kept signed in.
        """
        try:
            payload = await self.client.verify_otp(token_hash, link_type)
        except BackendError as e:
            logger.warning("%s link rejected: %s", link_type, e.message)
            return False, e.message
        if link_type == "recovery":
            self._adopt(Session.from_auth_payload(payload, self._clock()))
            return True, "Enter your new password"
        return True, "Your email address has been confirmed. You can now sign in."

    async def update_password(self, password: str) -> Tuple[bool, str]:
        if self._session is None:
            return False, "The reset link is invalid or has expired"
        try:
            await self.client.update_user(self._session.access_token, {"password": password})
            return True, "Your password has been changed"
        except BackendError as e:
            return False, e.message
        except Exception:
            logger.exception("Unexpected error updating password")
            return False, GENERIC_ERROR_MESSAGE

    async def resend_verification(self, email: str) -> Tuple[bool, str]:
        try:
            await self.client.resend_signup(email, routes.route_url(self.site_url, routes.EMAIL_VERIFICATION))
            return True, "Verification email sent"
        except BackendError as e:
            return False, e.message
        except Exception:
            logger.exception("Unexpected error resending verification")
            return False, GENERIC_ERROR_MESSAGE
