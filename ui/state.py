from __future__ import annotations

"""
Typed UI state for the Streamlit GUI.

Only presentation state lives here: which modal is open, which record it
edits, and the inline errors of the last submission per form. Everything
fetched from the backend is owned by the managers in
``elevator_platform.ui_logic``.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass
class ModalState:
    """Which modal is open on the dashboard and for which record.

    ``elevator_form_open`` and ``parts_open`` are one-shot: the page takes
    the flag when it draws the dialog, and only widgets inside the dialog
    re-arm it through their callbacks. A dialog dismissed with its X button
    or Escape therefore stays closed on the next rerun.
    """

    elevator_form_open: bool = False
    editing_elevator_id: Optional[str] = None
    parts_open: bool = False
    part_form_open: bool = False
    editing_part_id: Optional[str] = None

    def open_elevator_form(self, elevator_id: Optional[str] = None) -> None:
        self.elevator_form_open = True
        self.editing_elevator_id = elevator_id

    def keep_elevator_form_open(self) -> None:
        self.elevator_form_open = True

    def take_elevator_form(self) -> bool:
        shown = self.elevator_form_open
        self.elevator_form_open = False
        return shown

    def close_elevator_form(self) -> None:
        self.elevator_form_open = False
        self.editing_elevator_id = None

    def open_parts(self) -> None:
        self.parts_open = True
        self.part_form_open = False
        self.editing_part_id = None

    def keep_parts_open(self) -> None:
        self.parts_open = True

    def take_parts(self) -> bool:
        shown = self.parts_open
        self.parts_open = False
        return shown

    def close_parts(self) -> None:
        self.parts_open = False
        self.part_form_open = False
        self.editing_part_id = None


@dataclass
class UIState:
    """Aggregate UI state for one browser session."""

    modals: ModalState = field(default_factory=ModalState)
    form_errors: Dict[str, Dict[str, str]] = field(default_factory=dict)
    # Set once a recovery/confirmation link has been redeemed
    redeemed_token: Optional[str] = None

    def errors(self, form: str) -> Dict[str, str]:
        return self.form_errors.get(form, {})

    def set_errors(self, form: str, errors: Dict[str, str]) -> None:
        if errors:
            self.form_errors[form] = dict(errors)
        else:
            self.form_errors.pop(form, None)

    def reset(self) -> None:
        self.modals = ModalState()
        self.form_errors.clear()
