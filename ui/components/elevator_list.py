from __future__ import annotations

"""Elevator table with filters, the create/edit modal and delete confirmation."""

from datetime import date
from typing import Any, Dict, List, Optional

import pandas as pd
import streamlit as st

from elevator_platform.models import Elevator, ElevatorStatus
from elevator_platform.ui_logic import ListStatus
from elevator_platform.ui_logic.filters import STATUS_ALL
from elevator_platform.ui_logic.validation_manager import MIN_VALID_DATE

from ui.utils.helpers import elevator_status_label, format_date, to_date
from .base_component import BaseComponent
from .parts_view import render_parts_dialog

FORM = "elevator"
NEW_BUILDING = ""


def elevators_frame(elevators: List[Elevator], building_label) -> pd.DataFrame:
    """Display table for ``elevators`` in their current order."""
    rows = [
        {
            "Serial number": e.serial_number,
            "Model": e.model,
            "Capacity (kg)": e.capacity,
            "Building": building_label(e.building_id),
            "Status": elevator_status_label(e.status),
            "Installed": format_date(e.installation_date),
            "Last inspection": format_date(e.last_inspection_date),
            "Next inspection": format_date(e.next_inspection_date),
        }
        for e in elevators
    ]
    columns = [
        "Serial number", "Model", "Capacity (kg)", "Building", "Status",
        "Installed", "Last inspection", "Next inspection",
    ]
    return pd.DataFrame(rows, columns=columns)


@st.dialog("Elevator", width="large")
def _elevator_form_dialog(view: "ElevatorListView") -> None:
    view.render_elevator_form()


class ElevatorListView(BaseComponent):
    """The elevator section of the dashboards."""

    @property
    def controller(self):
        return self.ctx.elevators

    # ------------------------------------------------------------------
    # List
    # ------------------------------------------------------------------
    def _render_toolbar(self) -> None:
        controller = self.controller
        left, mid, right = st.columns([4, 1, 1])
        with left:
            st.subheader("Elevators")
        with mid:
            if st.button("Refresh", key="elevators_refresh", use_container_width=True):
                self.run(controller.refresh())
                st.rerun()
        with right:
            if controller.can_manage and st.button("Add elevator", type="primary", key="elevators_add", use_container_width=True):
                self.run(controller.load_building_options())
                self.state.set_errors(FORM, {})
                self.state.modals.open_elevator_form(None)
                st.rerun()

    def _render_filters(self) -> None:
        statuses = [STATUS_ALL] + [s.value for s in ElevatorStatus]
        left, right = st.columns([3, 1])
        with left:
            search = st.text_input(
                "Search", placeholder="Serial number or model", key="elevators_search", label_visibility="collapsed"
            )
        with right:
            status = st.selectbox(
                "Status",
                statuses,
                format_func=lambda s: "All statuses" if s == STATUS_ALL else elevator_status_label(s),
                key="elevators_status",
                label_visibility="collapsed",
            )
        result = self.controller.set_filters(search, status)
        for error in result.errors:
            st.caption(f":red[{error.message}]")

    def _render_delete_confirm(self) -> None:
        dialog = self.controller.delete_dialog
        if not dialog.is_open:
            return
        st.warning(f"Delete elevator **{dialog.label}**? This cannot be undone.")
        yes, no = st.columns(2)
        with yes:
            if st.button("Delete", type="primary", key="elevator_delete_confirm"):
                self.run(self.controller.confirm_delete())
                st.rerun()
        with no:
            if st.button("Cancel", key="elevator_delete_cancel"):
                self.controller.cancel_delete()
                st.rerun()

    def _render_actions(self, elevator: Elevator) -> None:
        controller = self.controller
        cols = st.columns(3 if controller.can_manage else 1)
        with cols[0]:
            if st.button("View parts", key="elevator_parts", use_container_width=True):
                self.run(self.ctx.parts.open(elevator.id))
                self.state.modals.open_parts()
                st.rerun()
        if controller.can_manage:
            with cols[1]:
                if st.button("Edit", key="elevator_edit", use_container_width=True):
                    self.run(controller.load_building_options())
                    self.state.set_errors(FORM, {})
                    self.state.modals.open_elevator_form(elevator.id)
                    st.rerun()
            with cols[2]:
                if st.button("Delete", key="elevator_delete", use_container_width=True):
                    controller.request_delete(elevator.id)
                    st.rerun()

    def render(self) -> None:
        controller = self.controller
        self.run(controller.load())

        self._render_toolbar()
        self._render_filters()

        if controller.status is ListStatus.ERROR:
            st.error(controller.error or "Failed to load elevators")
            if st.button("Retry", key="elevators_retry"):
                self.run(controller.refresh())
                st.rerun()

        visible = controller.visible_elevators
        if controller.status is ListStatus.READY and not controller.elevators:
            st.info("No elevators yet.")
        elif controller.elevators and not visible:
            st.info("No elevators match the filters.")

        if visible:
            event = st.dataframe(
                elevators_frame(visible, controller.building_label),
                hide_index=True,
                use_container_width=True,
                on_select="rerun",
                selection_mode="single-row",
                key="elevators_table",
            )
            selected = event.selection.rows
            if selected and selected[0] < len(visible):
                self._render_actions(visible[selected[0]])
            else:
                st.caption("Select a row to view parts or manage the elevator.")

        self._render_delete_confirm()

        modals = self.state.modals
        if modals.take_elevator_form():
            _elevator_form_dialog(self)
        elif modals.take_parts():
            render_parts_dialog(self)
        elif self.ctx.parts.is_open:
            # Parts dialog was dismissed without its Close button
            self.ctx.parts.close()

    # ------------------------------------------------------------------
    # Create / edit modal
    # ------------------------------------------------------------------
    def _initial_values(self, elevator: Optional[Elevator]) -> Dict[str, Any]:
        if elevator is None:
            return {"status": ElevatorStatus.OPERATIONAL.value, "capacity": 630, "building_id": NEW_BUILDING}
        return {
            "serial_number": elevator.serial_number,
            "model": elevator.model,
            "capacity": elevator.capacity,
            "status": elevator.status,
            "building_id": elevator.building_id or NEW_BUILDING,
            "installation_date": to_date(elevator.installation_date),
            "last_inspection_date": to_date(elevator.last_inspection_date),
            "next_inspection_date": to_date(elevator.next_inspection_date),
        }

    def render_elevator_form(self) -> None:
        controller = self.controller
        modals = self.state.modals
        elevator = controller.get_elevator(modals.editing_elevator_id) if modals.editing_elevator_id else None
        initial = self._initial_values(elevator)
        errors = self.state.errors(FORM)
        today = date.today()

        options = [NEW_BUILDING] + [b.id for b in controller.building_options]
        names = {b.id: f"{b.name} ({b.address})" if b.address else b.name for b in controller.building_options}
        current = initial["building_id"]
        if current not in options:
            options.append(current)
            names[current] = controller.building_label(current)
        building_id = st.selectbox(
            "Building",
            options,
            index=options.index(current),
            format_func=lambda i: "➕ New building" if i == NEW_BUILDING else names.get(i, i),
            key="elevator_form_building",
            on_change=modals.keep_elevator_form_open,
        )

        with st.form("elevator_form"):
            values: Dict[str, Any] = {"building_id": building_id}
            if building_id == NEW_BUILDING:
                values["building_name"] = st.text_input("Building name")
                values["building_address"] = st.text_input("Building address")
                c1, c2 = st.columns(2)
                with c1:
                    values["building_floors"] = st.number_input("Floors", min_value=1, value=1, step=1)
                with c2:
                    values["building_entrances"] = st.number_input("Entrances", min_value=1, value=1, step=1)
            self.field_error(errors, "building_id")

            values["serial_number"] = st.text_input("Serial number", value=initial.get("serial_number", ""))
            self.field_error(errors, "serial_number")
            values["model"] = st.text_input("Model", value=initial.get("model", ""))
            self.field_error(errors, "model")
            values["capacity"] = st.number_input(
                "Capacity (kg)", min_value=0, max_value=10000, value=int(initial["capacity"]), step=10
            )
            self.field_error(errors, "capacity")
            statuses = [s.value for s in ElevatorStatus]
            values["status"] = st.selectbox(
                "Status", statuses, index=statuses.index(initial["status"]) if initial["status"] in statuses else 0,
                format_func=elevator_status_label,
            )
            self.field_error(errors, "status")

            c1, c2, c3 = st.columns(3)
            with c1:
                values["installation_date"] = st.date_input(
                    "Installation date", value=initial.get("installation_date"), min_value=MIN_VALID_DATE, max_value=today
                )
                self.field_error(errors, "installation_date")
            with c2:
                values["last_inspection_date"] = st.date_input(
                    "Last inspection", value=initial.get("last_inspection_date"), min_value=MIN_VALID_DATE, max_value=today
                )
                self.field_error(errors, "last_inspection_date")
            with c3:
                values["next_inspection_date"] = st.date_input(
                    "Next inspection", value=initial.get("next_inspection_date"),
                    min_value=MIN_VALID_DATE, max_value=date(today.year + 10, 12, 31),
                )
                self.field_error(errors, "next_inspection_date")

            save, cancel = st.columns(2)
            with save:
                submitted = st.form_submit_button(
                    "Save changes" if elevator else "Add elevator",
                    type="primary",
                    use_container_width=True,
                    on_click=modals.keep_elevator_form_open,
                )
            with cancel:
                cancelled = st.form_submit_button(
                    "Cancel", use_container_width=True, on_click=modals.keep_elevator_form_open
                )

        if cancelled:
            modals.close_elevator_form()
            self.state.set_errors(FORM, {})
            st.rerun()
        if submitted:
            outcome = self.run(controller.save_elevator(values, elevator.id if elevator else None))
            self.state.set_errors(FORM, outcome.errors)
            if outcome.close:
                modals.close_elevator_form()
            else:
                modals.keep_elevator_form_open()
            st.rerun()
