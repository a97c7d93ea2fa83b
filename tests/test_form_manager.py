"""Tests for the authentication form handlers."""

import pytest

from elevator_platform import routes
from elevator_platform.backend import AuthError, BackendError
from elevator_platform.ui_logic import (
    ForgotPasswordForm,
    LoginForm,
    RegisterForm,
    ResendVerificationForm,
    ResetPasswordForm,
)
from elevator_platform.ui_logic.notifications import NotificationLevel
from fakes import USER_ID, profile_row, session_payload

REGISTER_VALUES = {
    "email": " maria@example.com ",
    "password": "secret1",
    "confirm_password": "secret1",
    "role": "company",
    "full_name": "Maria Ivanova",
    "phone": "+359 888 000 111",
    "company_name": "Lift Ltd",
    "company_address": "1 Vitosha Blvd, Sofia",
    "tax_id": "123456789",
}


class TestLoginForm:
    @pytest.mark.asyncio
    async def test_success_redirects_to_dashboard(self, make_auth, backend):
        backend.responses["sign_in_with_password"] = session_payload()
        backend.responses["get_profile_by_id"] = profile_row()
        form = LoginForm(make_auth(signed_in=False))

        outcome = await form.submit(" ivan@example.com ", "secret")

        assert outcome.ok
        assert outcome.redirect == routes.DASHBOARD
        assert backend.calls_to("sign_in_with_password")[0]["email"] == "ivan@example.com"

    @pytest.mark.asyncio
    async def test_invalid_input_makes_no_call(self, make_auth, backend):
        form = LoginForm(make_auth(signed_in=False))
        outcome = await form.submit("nope", "")
        assert set(outcome.errors) == {"email", "password"}
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_failure_notifies_error(self, make_auth, backend, notifier):
        backend.responses["sign_in_with_password"] = AuthError("Invalid login credentials")
        form = LoginForm(make_auth(signed_in=False))

        outcome = await form.submit("ivan@example.com", "wrong")

        assert not outcome.ok
        assert outcome.redirect is None
        last = notifier.drain()[-1]
        assert (last.level, last.message) == (NotificationLevel.ERROR, "Invalid login credentials")

    @pytest.mark.asyncio
    async def test_reset_shortcut_needs_email(self, make_auth, backend, notifier):
        form = LoginForm(make_auth(signed_in=False))
        outcome = await form.send_reset_from_login("  ")
        assert not outcome.ok
        assert backend.calls == []
        assert notifier.drain()[-1].level is NotificationLevel.WARNING

    @pytest.mark.asyncio
    async def test_reset_shortcut_sends_email(self, make_auth, backend):
        form = LoginForm(make_auth(signed_in=False))
        outcome = await form.send_reset_from_login("ivan@example.com")
        assert outcome.ok
        assert backend.calls_to("reset_password_for_email")[0]["email"] == "ivan@example.com"

    def test_social_login_is_informational(self, make_auth, notifier):
        form = LoginForm(make_auth(signed_in=False))
        outcome = form.social_login("google")
        assert not outcome.ok
        assert notifier.drain()[-1].message == "Sign-in with Google is coming soon"


class TestRegisterForm:
    @pytest.mark.asyncio
    async def test_creates_account_and_profile_row(self, make_auth, backend):
        backend.responses["sign_up"] = {"user": {"id": USER_ID}, "access_token": "fresh-token"}
        form = RegisterForm(make_auth(signed_in=False))

        outcome = await form.submit(REGISTER_VALUES)

        assert outcome.ok
        assert outcome.redirect == routes.EMAIL_VERIFICATION
        sign_up = backend.calls_to("sign_up")[0]
        assert sign_up["email"] == "maria@example.com"
        assert sign_up["data"] == {"full_name": "Maria Ivanova", "role": "company"}
        assert sign_up["redirect_to"].endswith("?route=/email-verification")
        assert backend.calls_to("insert:profiles") == [
            {
                "id": USER_ID,
                "role": "company",
                "full_name": "Maria Ivanova",
                "phone": "+359 888 000 111",
                "company_name": "Lift Ltd",
                "company_address": "1 Vitosha Blvd, Sofia",
                "tax_id": "123456789",
            }
        ]

    @pytest.mark.asyncio
    async def test_optional_role_fields_become_none(self, make_auth, backend):
        backend.responses["sign_up"] = {"id": USER_ID}
        form = RegisterForm(make_auth(signed_in=False))
        values = {
            **REGISTER_VALUES,
            "role": "technician",
            "specialization": "Hydraulics",
            "experience": "4",
            "additional_info": "",
        }

        assert (await form.submit(values)).ok
        row = backend.calls_to("insert:profiles")[0]
        assert row["additional_info"] is None
        assert "company_name" not in row

    @pytest.mark.asyncio
    async def test_validation_errors_make_no_call(self, make_auth, backend):
        form = RegisterForm(make_auth(signed_in=False))
        outcome = await form.submit({**REGISTER_VALUES, "confirm_password": "other"})
        assert outcome.errors["confirm_password"] == "Passwords do not match"
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_sign_up_failure_skips_profile(self, make_auth, backend):
        backend.responses["sign_up"] = AuthError("User already registered")
        form = RegisterForm(make_auth(signed_in=False))

        outcome = await form.submit(REGISTER_VALUES)

        assert outcome.message == "User already registered"
        assert backend.calls_to("insert:profiles") == []

    @pytest.mark.asyncio
    async def test_profile_insert_failure_is_reported(self, make_auth, backend):
        backend.responses["sign_up"] = {"user": {"id": USER_ID}}
        backend.responses["insert:profiles"] = BackendError("duplicate key value")
        form = RegisterForm(make_auth(signed_in=False))
        outcome = await form.submit(REGISTER_VALUES)
        assert not outcome.ok
        assert outcome.message == "duplicate key value"
        assert not form.submitting


class TestPasswordForms:
    @pytest.mark.asyncio
    async def test_forgot_password_empty_email_makes_no_call(self, make_auth, backend):
        form = ForgotPasswordForm(make_auth(signed_in=False))
        outcome = await form.submit("")
        assert outcome.errors == {"email": "Email is required"}
        assert backend.calls == []
        assert not form.sent

    @pytest.mark.asyncio
    async def test_forgot_password_marks_sent(self, make_auth, backend):
        form = ForgotPasswordForm(make_auth(signed_in=False))
        outcome = await form.submit("ivan@example.com")
        assert outcome.ok
        assert form.sent
        assert backend.calls_to("reset_password_for_email")[0]["redirect_to"].endswith("?route=/reset-password")

    @pytest.mark.asyncio
    async def test_reset_password_updates_and_signs_out(self, make_auth, backend):
        auth = make_auth(signed_in=False)
        backend.responses["verify_otp"] = session_payload()
        await auth.verify_link("hash-1", "recovery")
        form = ResetPasswordForm(auth)

        outcome = await form.submit("Abcdefg1!", "Abcdefg1!")

        assert outcome.ok
        assert outcome.redirect == routes.LOGIN
        assert backend.calls_to("update_user") == [{"password": "Abcdefg1!"}]
        assert len(backend.calls_to("sign_out")) == 1
        assert not auth.is_authenticated

    @pytest.mark.asyncio
    async def test_reset_password_without_recovery_session(self, make_auth, backend, notifier):
        form = ResetPasswordForm(make_auth(signed_in=False))
        outcome = await form.submit("Abcdefg1!", "Abcdefg1!")
        assert not outcome.ok
        assert backend.calls == []
        assert notifier.drain()[-1].level is NotificationLevel.ERROR

    @pytest.mark.asyncio
    async def test_resend_verification_redirects(self, make_auth, backend):
        form = ResendVerificationForm(make_auth(signed_in=False))
        outcome = await form.submit("maria@example.com")
        assert outcome.ok
        assert outcome.redirect == routes.EMAIL_VERIFICATION
        assert backend.calls_to("resend_signup")[0]["email"] == "maria@example.com"
