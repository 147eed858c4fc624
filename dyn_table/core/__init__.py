"""
Core engine: column schema, filter model, predicate evaluation, search,
sorting, the filter editing session and the view assembler
"""

from .columns import ColumnSpec, ColumnStyle, RenderOptions
from .filter_model import (
    FilterEntry,
    MultiCheckFilter,
    RangeFilter,
    SelectOption,
    SetRange,
    SingleSelectFilter,
    ToggleItem,
    build_filter_model,
    count_active,
)
from .predicates import apply_filters
from .search import search
from .session import FilterEditingSession
from .sorting import SortDirection, compare, sort_records
from .view import FilterController, Pagination, Row, SortState, TableView, assemble_view

__all__ = [
    "ColumnSpec",
    "ColumnStyle",
    "RenderOptions",
    "FilterEntry",
    "MultiCheckFilter",
    "RangeFilter",
    "SingleSelectFilter",
    "ToggleItem",
    "SetRange",
    "SelectOption",
    "build_filter_model",
    "count_active",
    "apply_filters",
    "search",
    "FilterEditingSession",
    "SortDirection",
    "compare",
    "sort_records",
    "FilterController",
    "Pagination",
    "Row",
    "SortState",
    "TableView",
    "assemble_view",
]
