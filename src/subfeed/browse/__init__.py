"""
Browse-session state, events and layout.

The session driver lives in ``subfeed.browse.session`` and is imported from
there directly, since it depends on the service layer.
"""

from __future__ import annotations

from .layout import ColumnWidths, ViewportLayout, column_widths, compute_layout
from .state import NO_SELECTION, BrowseState, derive_view, reduce

__all__ = [
    "NO_SELECTION",
    "BrowseState",
    "ColumnWidths",
    "ViewportLayout",
    "column_widths",
    "compute_layout",
    "derive_view",
    "reduce",
]
