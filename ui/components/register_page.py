from __future__ import annotations

import streamlit as st

from elevator_platform import routes
from elevator_platform.roles import REGISTRATION_ROLES, Role, registration_fields, role_label
from elevator_platform.ui_logic import RegisterForm

from .base_component import BaseComponent

FORM = "register"

FIELD_WIDGETS = {
    "company_name": ("Company name", "text"),
    "company_address": ("Company address", "text"),
    "tax_id": ("Tax ID", "text"),
    "specialization": ("Specialization", "text"),
    "experience": ("Years of experience", "text"),
    "additional_info": ("Additional information", "area"),
    "building_address": ("Building address", "text"),
    "apartments_count": ("Number of apartments", "text"),
    "building_info": ("Building information", "area"),
}


class RegisterPage(BaseComponent):
    def render(self) -> None:
        errors = self.state.errors(FORM)
        st.header("Create an account")

        # Outside the form so the role-specific fields follow the selection
        role: Role = st.selectbox(
            "Account type",
            REGISTRATION_ROLES,
            format_func=role_label,
            key="register_role",
        )

        with st.form("register_form"):
            values = {"role": role.value}
            values["email"] = st.text_input("Email")
            self.field_error(errors, "email")
            values["password"] = st.text_input("Password", type="password")
            self.field_error(errors, "password")
            values["confirm_password"] = st.text_input("Confirm password", type="password")
            self.field_error(errors, "confirm_password")
            values["full_name"] = st.text_input("Full name")
            self.field_error(errors, "full_name")
            values["phone"] = st.text_input("Phone")
            self.field_error(errors, "phone")

            st.subheader(role_label(role))
            for key in registration_fields(role):
                label, kind = FIELD_WIDGETS[key]
                if kind == "area":
                    values[key] = st.text_area(label)
                else:
                    values[key] = st.text_input(label)
                self.field_error(errors, key)
            self.field_error(errors, "role")
            submitted = st.form_submit_button("Register", type="primary", use_container_width=True)

        if submitted:
            outcome = self.run(RegisterForm(self.ctx.auth).submit(values))
            self.state.set_errors(FORM, outcome.errors)
            if outcome.redirect:
                self.session.navigate(outcome.redirect)
            st.rerun()

        if st.button("Already have an account? Sign in", key="register_to_login"):
            self.session.navigate(routes.LOGIN)


def render_register_page(ctx, state, session) -> None:
    RegisterPage(ctx, state, session).render()
