from __future__ import annotations

import streamlit as st

from elevator_platform.roles import role_label
from elevator_platform.ui_logic import AvatarUpload

from .base_component import BaseComponent

FORM = "profile"

FIELD_WIDGETS = {
    "full_name": ("Full name", "text"),
    "phone": ("Phone", "text"),
    "company_name": ("Company name", "text"),
    "company_address": ("Company address", "text"),
    "specialization": ("Specialization", "text"),
    "experience": ("Experience", "area"),
    "additional_info": ("Additional information", "area"),
    "building_address": ("Building address", "text"),
    "apartments_count": ("Number of apartments", "text"),
    "building_info": ("Building information", "area"),
}


class ProfilePage(BaseComponent):
    """Role-aware profile editor with avatar upload."""

    def _render_avatar(self) -> None:
        cache_key = "profile_avatar"
        profile = self.ctx.auth.profile
        avatar_url = profile.avatar_url if profile else None
        cached = st.session_state.get(cache_key)
        if cached is None or cached[0] != avatar_url:
            cached = (avatar_url, self.run(self.ctx.profile.load_avatar()))
            st.session_state[cache_key] = cached
        if cached[1]:
            st.image(cached[1], width=120)
        else:
            st.caption("No avatar uploaded")

    def render(self) -> None:
        user = self.ctx.auth.user
        if user is None:
            return
        profile_form = self.ctx.profile
        errors = self.state.errors(FORM)

        st.header("Profile")
        st.caption(f"{user.email} · {role_label(user.role) if user.role else 'No role'}")
        if user.profile is None:
            st.warning("Your profile could not be loaded. Some fields may be empty.")
        self._render_avatar()

        initial = profile_form.initial_values()
        with st.form("profile_form"):
            values = {}
            for key in profile_form.editable_fields():
                label, kind = FIELD_WIDGETS[key]
                if kind == "area":
                    values[key] = st.text_area(label, value=initial.get(key, ""))
                else:
                    values[key] = st.text_input(label, value=initial.get(key, ""))
                self.field_error(errors, key)
            upload = st.file_uploader("Avatar (max 2 MB)", type=["png", "jpg", "jpeg", "gif", "webp"])
            self.field_error(errors, "avatar")
            submitted = st.form_submit_button("Save changes", type="primary")

        if submitted:
            avatar = None
            if upload is not None:
                avatar = AvatarUpload(upload.name, upload.getvalue(), upload.type or "application/octet-stream")
            outcome = self.run(profile_form.save(values, avatar))
            self.state.set_errors(FORM, outcome.errors)
            st.rerun()


def render_profile_page(ctx, state, session) -> None:
    ProfilePage(ctx, state, session).render()
