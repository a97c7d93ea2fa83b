from __future__ import annotations

"""Forgot-password request and the reset form opened from the e-mail link."""

import streamlit as st

from elevator_platform import routes
from elevator_platform.ui_logic import ForgotPasswordForm, ResetPasswordForm

from .base_component import BaseComponent


class ForgotPasswordPage(BaseComponent):
    FORM = "forgot_password"

    def render(self) -> None:
        st.header("Forgot password")
        if st.session_state.get("forgot_password_sent"):
            st.success("Check your inbox for a link to reset your password.")
        else:
            errors = self.state.errors(self.FORM)
            with st.form("forgot_password_form"):
                email = st.text_input("Email")
                self.field_error(errors, "email")
                submitted = st.form_submit_button("Send reset link", type="primary")
            if submitted:
                form = ForgotPasswordForm(self.ctx.auth)
                outcome = self.run(form.submit(email))
                self.state.set_errors(self.FORM, outcome.errors)
                st.session_state["forgot_password_sent"] = form.sent
                st.rerun()

        if st.button("Back to sign in", key="forgot_to_login"):
            st.session_state.pop("forgot_password_sent", None)
            self.session.navigate(routes.LOGIN)


class ResetPasswordPage(BaseComponent):
    FORM = "reset_password"

    def _redeem_link(self) -> None:
        token_hash = self.session.query_param("token_hash")
        if not token_hash or token_hash == self.state.redeemed_token:
            return
        ok, message = self.run(self.ctx.auth.verify_link(token_hash, "recovery"))
        self.state.redeemed_token = token_hash
        if not ok:
            self.ctx.notifier.error(message)

    def render(self) -> None:
        self._redeem_link()
        st.header("Choose a new password")
        if not self.ctx.auth.is_authenticated:
            st.warning("The reset link is invalid or has expired. Request a new one.")
            if st.button("Request a new link", key="reset_to_forgot"):
                self.session.navigate(routes.FORGOT_PASSWORD)
            return

        errors = self.state.errors(self.FORM)
        with st.form("reset_password_form"):
            password = st.text_input("New password", type="password")
            self.field_error(errors, "password")
            confirm = st.text_input("Confirm new password", type="password")
            self.field_error(errors, "confirm_password")
            submitted = st.form_submit_button("Change password", type="primary")
        st.caption("At least 8 characters with upper and lower case letters, a digit and a special character.")

        if submitted:
            outcome = self.run(ResetPasswordForm(self.ctx.auth).submit(password, confirm))
            self.state.set_errors(self.FORM, outcome.errors)
            if outcome.redirect:
                self.session.navigate(outcome.redirect)
            st.rerun()


def render_forgot_password_page(ctx, state, session) -> None:
    ForgotPasswordPage(ctx, state, session).render()


def render_reset_password_page(ctx, state, session) -> None:
    ResetPasswordPage(ctx, state, session).render()
