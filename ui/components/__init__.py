"""UI components package for the Streamlit application.

Each page is a class inheriting from `BaseComponent` with a `render()`
method, plus a module-level `render_*` function used by `ui/app.py`.
"""

from .base_component import BaseComponent  # re-export for convenience

__all__ = [
    "BaseComponent",
]
