from __future__ import annotations

import streamlit as st

from elevator_platform import routes
from elevator_platform.ui_logic import LoginForm
from elevator_platform.ui_logic.form_manager import SOCIAL_PROVIDERS

from .base_component import BaseComponent

FORM = "login"


class LoginPage(BaseComponent):
    """Email/password sign-in with the reset shortcut and social buttons."""

    def render(self) -> None:
        form = LoginForm(self.ctx.auth)
        errors = self.state.errors(FORM)

        st.header("Sign in")
        with st.form("login_form"):
            email = st.text_input("Email", key="login_email")
            self.field_error(errors, "email")
            password = st.text_input("Password", type="password", key="login_password")
            self.field_error(errors, "password")
            submitted = st.form_submit_button("Sign in", type="primary", use_container_width=True)

        if submitted:
            outcome = self.run(form.submit(email, password))
            self.state.set_errors(FORM, outcome.errors)
            if outcome.redirect:
                self.session.navigate(outcome.redirect)
            st.rerun()

        if st.button("Forgot your password?", key="login_forgot"):
            outcome = self.run(form.send_reset_from_login(st.session_state.get("login_email", "")))
            self.state.set_errors(FORM, outcome.errors)
            st.rerun()

        st.divider()
        cols = st.columns(len(SOCIAL_PROVIDERS))
        for col, provider in zip(cols, SOCIAL_PROVIDERS):
            with col:
                if st.button(f"Continue with {provider.capitalize()}", key=f"social_{provider}", use_container_width=True):
                    form.social_login(provider)
                    st.rerun()

        st.divider()
        left, mid, right = st.columns(3)
        with left:
            if st.button("Create an account", key="login_to_register"):
                self.session.navigate(routes.REGISTER)
        with mid:
            if st.button("Reset password", key="login_to_forgot"):
                self.session.navigate(routes.FORGOT_PASSWORD)
        with right:
            if st.button("Resend verification email", key="login_to_resend"):
                self.session.navigate(routes.RESEND_VERIFICATION)


def render_login_page(ctx, state, session) -> None:
    LoginPage(ctx, state, session).render()
