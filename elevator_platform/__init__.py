"""
Core of the elevator maintenance platform client.

Everything here is independent of Streamlit: the backend client, the typed
records, role rules and the managers in :mod:`elevator_platform.ui_logic`
that the pages in ``ui/`` render.
"""

__version__ = "0.1.0"
