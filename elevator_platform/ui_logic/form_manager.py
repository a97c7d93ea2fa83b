"""
Submit handlers for the authentication forms.

Each form validates locally first; a failing validation returns the per-field
errors and makes no remote call. Successful submissions notify the user and
may name a route to navigate to.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional
import logging

from .. import routes
from ..backend import BackendError, GENERIC_ERROR_MESSAGE
from ..roles import Role, registration_fields
from .auth_manager import AuthManager
from .validation_manager import (
    ValidationResult,
    validate_forgot_password,
    validate_login,
    validate_register,
    validate_resend_verification,
    validate_reset_password,
)

logger = logging.getLogger(__name__)

SOCIAL_PROVIDERS = ("google", "facebook")


@dataclass
class FormOutcome:
    """Result of a form submission as seen by the page."""

    ok: bool
    errors: Dict[str, str] = field(default_factory=dict)
    redirect: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def invalid(cls, result: ValidationResult) -> "FormOutcome":
        return cls(ok=False, errors=result.field_errors())


class _AuthForm:
    def __init__(self, auth: AuthManager):
        self.auth = auth
        self.submitting = False

    @property
    def notifier(self):
        return self.auth.notifier


class LoginForm(_AuthForm):
    """Login page: credentials, the reset-password shortcut and social buttons."""

    async def submit(self, email: str, password: str) -> FormOutcome:
        result = validate_login(email, password)
        if not result.is_valid:
            return FormOutcome.invalid(result)
        self.submitting = True
        try:
            ok, message = await self.auth.sign_in(email.strip(), password)
        finally:
            self.submitting = False
        if not ok:
            self.notifier.error(message)
            return FormOutcome(ok=False, message=message)
        self.notifier.success(message)
        return FormOutcome(ok=True, redirect=routes.DASHBOARD, message=message)

    async def send_reset_from_login(self, email: str) -> FormOutcome:
        email = (email or "").strip()
        if not email:
            self.notifier.warning("Enter your email address first")
            return FormOutcome(ok=False, errors={"email": "Email is required"})
        result = validate_forgot_password(email)
        if not result.is_valid:
            return FormOutcome.invalid(result)
        ok, message = await self.auth.reset_password(email)
        (self.notifier.success if ok else self.notifier.error)(message)
        return FormOutcome(ok=ok, message=message)

    def social_login(self, provider: str) -> FormOutcome:
        message = f"Sign-in with {provider.capitalize()} is coming soon"
        self.notifier.info(message)
        return FormOutcome(ok=False, message=message)


class RegisterForm(_AuthForm):
    """Registration: creates the account, then the matching ``profiles`` row."""

    async def submit(self, values: Mapping[str, Any]) -> FormOutcome:
        result = validate_register(values)
        if not result.is_valid:
            return FormOutcome.invalid(result)

        role = Role.parse(values.get("role"))
        email = str(values["email"]).strip()
        full_name = str(values["full_name"]).strip()
        self.submitting = True
        try:
            ok, message, user_id, token = await self.auth.sign_up(
                email, values["password"], {"full_name": full_name, "role": role.value}
            )
            if not ok:
                self.notifier.error(message)
                return FormOutcome(ok=False, message=message)

            row: Dict[str, Any] = {
                "id": user_id,
                "role": role.value,
                "full_name": full_name,
                "phone": str(values.get("phone") or "").strip(),
            }
            for key in registration_fields(role):
                value = str(values.get(key) or "").strip()
                row[key] = value or None
            try:
                await self.auth.client.insert("profiles", row, token=token)
            except BackendError as e:
                logger.error("Creating profile for %s failed: %s", user_id, e.message)
                self.notifier.error(e.message)
                return FormOutcome(ok=False, message=e.message)
        except Exception:
            logger.exception("Unexpected error during registration")
            self.notifier.error(GENERIC_ERROR_MESSAGE)
            return FormOutcome(ok=False, message=GENERIC_ERROR_MESSAGE)
        finally:
            self.submitting = False

        message = "Registration successful! Check your email to confirm your account."
        self.notifier.success(message)
        return FormOutcome(ok=True, redirect=routes.EMAIL_VERIFICATION, message=message)


class ForgotPasswordForm(_AuthForm):
    def __init__(self, auth: AuthManager):
        super().__init__(auth)
        self.sent = False

    async def submit(self, email: str) -> FormOutcome:
        result = validate_forgot_password(email)
        if not result.is_valid:
            return FormOutcome.invalid(result)
        self.submitting = True
        try:
            ok, message = await self.auth.reset_password(email.strip())
        finally:
            self.submitting = False
        if ok:
            self.sent = True
            self.notifier.success(message)
        else:
            self.notifier.error(message)
        return FormOutcome(ok=ok, message=message)


class ResetPasswordForm(_AuthForm):
    """Sets a new password for the session opened by the recovery link."""

    async def submit(self, password: str, confirm_password: str) -> FormOutcome:
        result = validate_reset_password(password, confirm_password)
        if not result.is_valid:
            return FormOutcome.invalid(result)
        self.submitting = True
        try:
            ok, message = await self.auth.update_password(password)
            if not ok:
                self.notifier.error(message)
                return FormOutcome(ok=False, message=message)
            await self.auth.sign_out()
        finally:
            self.submitting = False
        self.notifier.success(f"{message}. Please sign in with your new password.")
        return FormOutcome(ok=True, redirect=routes.LOGIN, message=message)


class ResendVerificationForm(_AuthForm):
    async def submit(self, email: str) -> FormOutcome:
        result = validate_resend_verification(email)
        if not result.is_valid:
            return FormOutcome.invalid(result)
        self.submitting = True
        try:
            ok, message = await self.auth.resend_verification(email.strip())
        finally:
            self.submitting = False
        if not ok:
            self.notifier.error(message)
            return FormOutcome(ok=False, message=message)
        self.notifier.success(message)
        return FormOutcome(ok=True, redirect=routes.EMAIL_VERIFICATION, message=message)
