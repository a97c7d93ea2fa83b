"""HTTP access to the hosted auth, database and storage services."""

from .client import BackendClient
from .errors import AuthError, BackendError, GENERIC_ERROR_MESSAGE

__all__ = [
    "AuthError",
    "BackendClient",
    "BackendError",
    "GENERIC_ERROR_MESSAGE",
]
