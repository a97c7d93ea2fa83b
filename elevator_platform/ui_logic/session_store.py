"""
Storage of the authenticated session for one browser session.

The session is kept as a plain dict in a mapping owned by the browser
session (a fresh dict by default, or ``st.session_state``). Nothing is
written to disk, so one visitor can never restore another visitor's tokens.
An entry that cannot be parsed is removed and treated as "no session".
"""

from __future__ import annotations

import logging
from typing import Any, MutableMapping, Optional

from ..models import Session

logger = logging.getLogger(__name__)

SESSION_KEY = "auth_session"


class SessionStore:
    """Load, save and clear a single :class:`Session`."""

    def __init__(self, backing: Optional[MutableMapping[str, Any]] = None, key: str = SESSION_KEY):
        self._backing: MutableMapping[str, Any] = {} if backing is None else backing
        self.key = key

    def load(self) -> Optional[Session]:
        data = self._backing.get(self.key)
        if data is None:
            return None
        try:
            return Session.from_dict(data)
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("Discarding unreadable stored session: %s", e)
            self.clear()
            return None

    def save(self, session: Session) -> None:
        self._backing[self.key] = session.to_dict()

    def clear(self) -> None:
        self._backing.pop(self.key, None)
