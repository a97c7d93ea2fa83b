"""Service layer for the Streamlit UI.

Keeps session bookkeeping and navigation out of the page components so
they can stay focused on presentation.
"""

from .session_service import SessionService

__all__ = [
    "SessionService",
]
