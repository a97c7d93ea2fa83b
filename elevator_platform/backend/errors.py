"""Error types raised by :class:`~elevator_platform.backend.client.BackendClient`.

Catch :class:`BackendError` for any failed request and read ``message`` for
text that can be shown to the user; ``status_code`` and ``details`` carry the
HTTP context for logging.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."

# Keys the auth, REST and storage services use for their error text
_MESSAGE_KEYS = ("message", "msg", "error_description", "error")


class BackendError(Exception):
    """Base error for backend failures.

    Args:
        message: Human-readable error description.
        status_code: HTTP status code, None for transport failures.
        code: Backend error code when the response carried one.
        details: Decoded response body, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401


class AuthError(BackendError):
    """Raised by the ``/auth/v1`` endpoints (bad credentials, expired tokens...)."""


def message_from_body(body: Any, fallback: str = GENERIC_ERROR_MESSAGE) -> str:
    """Extract the user-facing message from an error response body."""
    if isinstance(body, Mapping):
        for key in _MESSAGE_KEYS:
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value
    if isinstance(body, str) and body.strip():
        return body.strip()
    return fallback


def code_from_body(body: Any) -> Optional[str]:
    if isinstance(body, Mapping):
        for key in ("code", "error_code"):
            value = body.get(key)
            if value is not None:
                return str(value)
    return None
