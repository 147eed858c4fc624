from __future__ import annotations

from typing import Dict

__all__ = ["IDs", "pattern_id"]


class IDs:
    class Store:
        # Per-browser state; the server only holds read-only table templates
        VIEW_STATE = "view-state"
        FILTER_STATE = "filter-state"
        FILTER_SESSION = "filter-session"
        PREFERENCES = "user-preferences"

    class Control:
        # Toolbar
        TABLE_SELECT = "table-select"
        SEARCH_CONTAINER = "search-container"
        SEARCH_INPUT = "search-input"
        FILTER_BTN = "filter-btn"
        FILTER_BADGE = "filter-badge"

        # Filter modal
        FILTER_MODAL = "filter-modal"
        FILTER_BODY = "filter-body"
        FILTER_APPLY = "filter-apply-btn"
        FILTER_CLEAR = "filter-clear-btn"
        FILTER_CLOSE = "filter-close-btn"

        # Table + pagination
        TABLE_CONTAINER = "table-container"
        PAGINATION = "pagination"
        ROWS_PER_PAGE = "rows-per-page-select"
        ROW_COUNT = "row-count"

    class Pattern:
        # Components generated per column, addressed as {"type": ..., "column": name}
        SORT_HEADER = "sort-header"
        ROW_SELECT = "row-select"
        FILTER_CHECK = "filter-check"
        FILTER_MIN = "filter-min"
        FILTER_MAX = "filter-max"
        FILTER_SELECT = "filter-select"


def pattern_id(kind: str, column: str) -> Dict[str, str]:
    return {"type": kind, "column": column}
