from __future__ import annotations

"""Toast rendering of queued notifications."""

import streamlit as st

from elevator_platform.ui_logic import NotificationLevel, Notifier

ICONS = {
    NotificationLevel.SUCCESS: "✅",
    NotificationLevel.ERROR: "❌",
    NotificationLevel.WARNING: "⚠️",
    NotificationLevel.INFO: "ℹ️",
}


def render_notifications(notifier: Notifier) -> None:
    for notification in notifier.drain():
        st.toast(notification.message, icon=ICONS[notification.level])
