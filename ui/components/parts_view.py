from __future__ import annotations

"""Modal listing the parts of one elevator, with add/edit/delete."""

from typing import Any, Dict, Optional

import streamlit as st

from elevator_platform.models import ElevatorPart, PartStatus
from elevator_platform.ui_logic import ListStatus

from ui.utils.helpers import format_date, part_status_label, to_date

FORM = "part"


def _close(view) -> None:
    view.ctx.parts.close()
    view.state.modals.close_parts()
    view.state.set_errors(FORM, {})
    st.rerun()


def _rerun_open(view) -> None:
    view.state.modals.keep_parts_open()
    st.rerun()


def _render_part_form(view, part: Optional[ElevatorPart]) -> None:
    parts = view.ctx.parts
    modals = view.state.modals
    errors = view.state.errors(FORM)
    statuses = [s.value for s in PartStatus]

    st.markdown(f"**{'Edit part' if part else 'New part'}**")
    with st.form("part_form"):
        values: Dict[str, Any] = {}
        values["name"] = st.text_input("Name", value=part.name if part else "")
        view.field_error(errors, "name")
        c1, c2 = st.columns(2)
        with c1:
            values["part_number"] = st.text_input("Part number", value=(part.part_number or "") if part else "")
        with c2:
            values["manufacturer"] = st.text_input("Manufacturer", value=(part.manufacturer or "") if part else "")
        current = part.status if part and part.status in statuses else PartStatus.OPERATIONAL.value
        values["status"] = st.selectbox("Status", statuses, index=statuses.index(current), format_func=part_status_label)
        view.field_error(errors, "status")
        c1, c2, c3 = st.columns(3)
        with c1:
            values["installation_date"] = st.date_input(
                "Installed", value=to_date(part.installation_date) if part else None
            )
        with c2:
            values["last_maintenance_date"] = st.date_input(
                "Last maintenance", value=to_date(part.last_maintenance_date) if part else None
            )
        with c3:
            values["next_maintenance_date"] = st.date_input(
                "Next maintenance", value=to_date(part.next_maintenance_date) if part else None
            )
        values["description"] = st.text_area("Description", value=(part.description or "") if part else "")

        save, cancel = st.columns(2)
        with save:
            submitted = st.form_submit_button(
                "Save", type="primary", use_container_width=True, on_click=modals.keep_parts_open
            )
        with cancel:
            cancelled = st.form_submit_button("Cancel", use_container_width=True, on_click=modals.keep_parts_open)

    if cancelled:
        modals.part_form_open = False
        modals.editing_part_id = None
        view.state.set_errors(FORM, {})
        _rerun_open(view)
    if submitted:
        outcome = view.run(parts.save_part(values, part.id if part else None))
        view.state.set_errors(FORM, outcome.errors)
        if outcome.close:
            modals.part_form_open = False
            modals.editing_part_id = None
        _rerun_open(view)


def _render_part_row(view, part: ElevatorPart, can_manage: bool) -> None:
    parts = view.ctx.parts
    modals = view.state.modals
    cols = st.columns([3, 2, 2, 1, 1] if can_manage else [3, 2, 2])
    with cols[0]:
        st.markdown(f"**{part.name}**")
        st.caption(" · ".join(filter(None, [part.part_number, part.manufacturer])) or "No details")
    with cols[1]:
        st.write(part_status_label(part.status))
    with cols[2]:
        st.caption(f"Next maintenance: {format_date(part.next_maintenance_date)}")
    if can_manage:
        with cols[3]:
            if st.button("Edit", key=f"part_edit_{part.id}", on_click=modals.keep_parts_open):
                modals.part_form_open = True
                modals.editing_part_id = part.id
                view.state.set_errors(FORM, {})
                _rerun_open(view)
        with cols[4]:
            if st.button("Delete", key=f"part_delete_{part.id}", on_click=modals.keep_parts_open):
                parts.request_delete(part.id)
                _rerun_open(view)


@st.dialog("Elevator parts", width="large")
def _parts_dialog(view) -> None:
    parts = view.ctx.parts
    modals = view.state.modals
    can_manage = view.ctx.elevators.can_manage

    elevator = view.ctx.elevators.get_elevator(parts.elevator_id) if parts.elevator_id else None
    if elevator is not None:
        st.caption(f"{elevator.serial_number} · {elevator.model}")

    if parts.status is ListStatus.ERROR:
        st.error(parts.error or "Failed to load parts")
        if st.button("Retry", key="parts_retry", on_click=modals.keep_parts_open):
            view.run(parts.reload())
            _rerun_open(view)
    elif not parts.parts:
        st.info("No parts recorded for this elevator.")

    for part in parts.parts:
        _render_part_row(view, part, can_manage)

    dialog = parts.delete_dialog
    if dialog.is_open:
        st.warning(f"Delete part **{dialog.label}**?")
        yes, no = st.columns(2)
        with yes:
            if st.button("Delete", type="primary", key="part_delete_confirm", on_click=modals.keep_parts_open):
                view.run(parts.confirm_delete())
                _rerun_open(view)
        with no:
            if st.button("Cancel", key="part_delete_cancel", on_click=modals.keep_parts_open):
                parts.cancel_delete()
                _rerun_open(view)

    if modals.part_form_open:
        part = parts.get_part(modals.editing_part_id) if modals.editing_part_id else None
        _render_part_form(view, part)
    elif can_manage and st.button("Add part", key="part_add", on_click=modals.keep_parts_open):
        modals.part_form_open = True
        modals.editing_part_id = None
        view.state.set_errors(FORM, {})
        _rerun_open(view)

    st.divider()
    if st.button("Close", key="parts_close", on_click=modals.keep_parts_open):
        _close(view)


def render_parts_dialog(view) -> None:
    _parts_dialog(view)
