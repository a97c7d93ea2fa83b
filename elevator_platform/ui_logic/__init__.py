"""
Framework-agnostic logic behind the Streamlit pages.

Core principles:
- No UI framework imports
- Remote calls are async and go through :class:`~elevator_platform.backend.BackendClient`
- Backend failures become notifications or ``(ok, message)`` results, never
  exceptions escaping into the page
"""

from .auth_manager import AuthManager
from .cache import TtlCache
from .confirm import ConfirmDialog
from .context import AppContext, ResumePolicy, build_context
from .elevator_manager import ElevatorListController, ListStatus, MutationOutcome
from .filters import apply_filters
from .form_manager import (
    FormOutcome,
    ForgotPasswordForm,
    LoginForm,
    RegisterForm,
    ResendVerificationForm,
    ResetPasswordForm,
)
from .notifications import Notification, NotificationLevel, Notifier
from .parts_manager import PartsListController
from .profile_manager import AvatarUpload, ProfileForm
from .session_store import SessionStore
from .validation_manager import ValidationError, ValidationResult

__all__ = [
    "AppContext",
    "AuthManager",
    "AvatarUpload",
    "ConfirmDialog",
    "ElevatorListController",
    "FormOutcome",
    "ForgotPasswordForm",
    "ListStatus",
    "LoginForm",
    "MutationOutcome",
    "Notification",
    "NotificationLevel",
    "Notifier",
    "PartsListController",
    "ProfileForm",
    "RegisterForm",
    "ResendVerificationForm",
    "ResetPasswordForm",
    "ResumePolicy",
    "SessionStore",
    "TtlCache",
    "ValidationError",
    "ValidationResult",
    "apply_filters",
    "build_context",
]
