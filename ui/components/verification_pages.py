from __future__ import annotations

"""E-mail verification landing page and the resend form."""

import streamlit as st

from elevator_platform import routes
from elevator_platform.ui_logic import ResendVerificationForm

from .base_component import BaseComponent


class EmailVerificationPage(BaseComponent):
    def render(self) -> None:
        token_hash = self.session.query_param("token_hash")
        if token_hash and token_hash != self.state.redeemed_token:
            link_type = self.session.query_param("type") or "signup"
            ok, message = self.run(self.ctx.auth.verify_link(token_hash, link_type))
            self.state.redeemed_token = token_hash
            (self.ctx.notifier.success if ok else self.ctx.notifier.error)(message)
        elif not st.session_state.get("verification_info_shown"):
            self.ctx.notifier.info("Check your email to confirm your account")
            st.session_state["verification_info_shown"] = True

        st.header("Confirm your email")
        st.write(
            "We sent you a confirmation link. Open it to activate your account, "
            "then sign in."
        )
        left, right = st.columns(2)
        with left:
            if st.button("Go to sign in", type="primary", key="verify_to_login"):
                self.session.navigate(routes.LOGIN)
        with right:
            if st.button("Didn't get the email?", key="verify_to_resend"):
                self.session.navigate(routes.RESEND_VERIFICATION)


class ResendVerificationPage(BaseComponent):
    FORM = "resend_verification"

    def render(self) -> None:
        errors = self.state.errors(self.FORM)
        st.header("Resend verification email")
        with st.form("resend_verification_form"):
            email = st.text_input("Email")
            self.field_error(errors, "email")
            submitted = st.form_submit_button("Resend", type="primary")

        if submitted:
            outcome = self.run(ResendVerificationForm(self.ctx.auth).submit(email))
            self.state.set_errors(self.FORM, outcome.errors)
            if outcome.redirect:
                self.session.navigate(outcome.redirect)
            st.rerun()

        if st.button("Back to sign in", key="resend_to_login"):
            self.session.navigate(routes.LOGIN)


def render_email_verification_page(ctx, state, session) -> None:
    EmailVerificationPage(ctx, state, session).render()


def render_resend_verification_page(ctx, state, session) -> None:
    ResendVerificationPage(ctx, state, session).render()
