from __future__ import annotations

"""Two-step confirmation state for destructive actions."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class ConfirmDialog:
    """Remembers which record a pending delete refers to.

    Opening the dialog does nothing remotely; the owning controller performs
    the delete only when the user confirms.
    """

    target: Optional[str] = None
    label: str = ""

    @property
    def is_open(self) -> bool:
        return self.target is not None

    def open(self, target: str, label: str = "") -> None:
        self.target = target
        self.label = label

    def close(self) -> None:
        self.target = None
        self.label = ""
