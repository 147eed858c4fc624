from __future__ import annotations

import copy
import logging
import math
from dataclasses import dataclass, field, replace
from enum import Enum
from functools import cmp_to_key
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, TYPE_CHECKING

from .columns import ColumnSpec, Schema, filterable_columns
from .filter_model import (
    FilterModel,
    Record,
    build_filter_model,
    count_active,
    model_from_dict,
    model_to_dict,
)
from .predicates import record_passes
from .search import compile_query, record_matches
from .session import FilterEditingSession
from .sorting import SortDirection, compare

if TYPE_CHECKING:
    from dyn_table.services.preferences import RowsPerPagePreference

logger = logging.getLogger(__name__)

DEFAULT_ROWS_PER_PAGE = 25
ROWS_PER_PAGE_OPTIONS = (5, 10, 25, 50, 100)


@dataclass(frozen=True)
class Row:
    """A record plus its position in the original dataset."""
    key: int
    record: Record


def index_rows(dataset: Sequence[Record]) -> List[Row]:
    return [Row(key=i, record=record) for i, record in enumerate(dataset)]


def assemble_view(
        rows: Sequence[Row],
        schema: Schema,
        model: Optional[FilterModel],
        query: Optional[str] = None,
        sort_key: Optional[str] = None,
        direction: SortDirection | str = SortDirection.DESCENDING,
) -> List[Row]:
    """
    Search, filter and sort rows (pagination not applied).

    A row stays visible only if it matches the query and passes every filter.
    """
    pattern = compile_query(query)
    visible = [
        row for row in rows
        if record_matches(row.record, schema, pattern) and record_passes(row.record, model)
    ]
    if sort_key is not None:
        comparator = compare(sort_key, direction, schema)
        visible.sort(key=cmp_to_key(lambda a, b: comparator(a.record, b.record)))
    return visible


# -------------------------------------------------------------------------
# Pagination, sort & selection state
# -------------------------------------------------------------------------

@dataclass(frozen=True)
class Pagination:
    page: int = 0
    rows_per_page: int = DEFAULT_ROWS_PER_PAGE

    def window(self, rows: Sequence[Row]) -> List[Row]:
        start = self.page * self.rows_per_page
        return list(rows[start:start + self.rows_per_page])

    def last_page(self, total: int) -> int:
        return max(0, math.ceil(total / self.rows_per_page) - 1)

    def clamp(self, total: int) -> Pagination:
        """Move back to the last page that still has rows."""
        last = self.last_page(total)
        if self.page > last:
            return replace(self, page=last)
        return self

    def with_page(self, page: int) -> Pagination:
        return replace(self, page=max(0, page))

    def with_rows_per_page(self, rows_per_page: int) -> Pagination:
        """Change page size, keeping the first visible row on screen."""
        page = (self.page * self.rows_per_page) // rows_per_page
        return Pagination(page=page, rows_per_page=rows_per_page)


@dataclass(frozen=True)
class SortState:
    by: Optional[str] = None
    direction: SortDirection = SortDirection.DESCENDING

    def toggle(self, name: str) -> SortState:
        """
        Clicking a new column, or the current one while descending, sorts
        ascending. Clicking the current column while ascending sorts descending.
        """
        if name != self.by or self.direction is SortDirection.DESCENDING:
            return SortState(by=name, direction=SortDirection.ASCENDING)
        return SortState(by=name, direction=SortDirection.DESCENDING)


class SelectMode(str, Enum):
    SINGLE = "single"
    MULTIPLE = "multiple"


@dataclass(frozen=True)
class RowSelection:
    """
    Selected row keys, in the order they were picked.

    Single mode holds at most one key; picking another row replaces it.
    """
    mode: SelectMode = SelectMode.MULTIPLE
    selected: Tuple[int, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "mode", SelectMode(self.mode))
        keys = tuple(dict.fromkeys(int(k) for k in self.selected))
        if self.mode is SelectMode.SINGLE:
            keys = keys[-1:]
        object.__setattr__(self, "selected", keys)

    def is_selected(self, key: int) -> bool:
        return key in self.selected

    def select(self, key: int, checked: bool = True) -> RowSelection:
        if checked == self.is_selected(key):
            return self
        if self.mode is SelectMode.SINGLE:
            return replace(self, selected=(key,) if checked else ())
        if checked:
            return replace(self, selected=self.selected + (key,))
        return replace(self, selected=tuple(k for k in self.selected if k != key))


# -------------------------------------------------------------------------
# Filter controller
# -------------------------------------------------------------------------

def _fingerprint(dataset: Sequence[Record], schema: Schema) -> Tuple[Tuple[ColumnSpec, ...], List[Tuple[Any, ...]]]:
    columns = tuple(filterable_columns(schema))
    return columns, [tuple(record.get(c.name) for c in columns) for record in dataset]


class FilterController:
    """
    Owns the committed filter model for one dataset/schema pair.

    The model is rebuilt only when the filterable columns or their values
    change, so re-sending equal data doesn't wipe applied filters. Each time
    the filter UI opens a new FilterEditingSession is started from the
    committed model.
    """

    def __init__(
            self,
            dataset: Sequence[Record],
            schema: Schema,
            on_change: Optional[Callable[[FilterModel], None]] = None,
    ) -> None:
        self._on_change = on_change
        self._fingerprint = _fingerprint(dataset, schema)
        self.base: FilterModel = build_filter_model(dataset, schema)
        self.committed: FilterModel = self.base
        self.badge_count = 0
        self.session: Optional[FilterEditingSession] = None

    def sync(self, dataset: Sequence[Record], schema: Schema) -> bool:
        """Rebuild the model if the filterable data or columns changed. Returns True on rebuild."""
        fingerprint = _fingerprint(dataset, schema)
        if fingerprint == self._fingerprint:
            return False

        if self.session is not None and self.session.is_open:
            self.session.close()
        self.session = None

        self._fingerprint = fingerprint
        self.base = build_filter_model(dataset, schema)
        self.committed = self.base
        self.badge_count = 0
        logger.info(
            "Rebuilt filter model after data change",
            extra={"n_records": len(dataset), "n_columns": len(schema)},
        )
        return True

    def _commit(self, model: FilterModel) -> None:
        self.committed = model
        self.badge_count = count_active(model)
        if self._on_change is not None:
            self._on_change(model)

    def open(self) -> FilterEditingSession:
        self.session = FilterEditingSession(self.committed, on_apply=self._commit)
        self.session.open()
        return self.session

    def resume(self, data: Optional[Mapping[str, Any]]) -> FilterEditingSession:
        """Pick up a session saved with FilterEditingSession.to_dict."""
        self.session = FilterEditingSession.from_dict(data, self.committed, on_apply=self._commit)
        return self.session

    def apply(self) -> FilterModel:
        """Commit the open session's draft and close it."""
        if self.session is None:
            return self.committed
        committed = self.session.apply()
        self.close()
        return committed

    def close(self) -> None:
        if self.session is not None and self.session.is_open:
            self.session.close()
        self.session = None

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return model_to_dict(self.committed)

    def restore(self, data: Optional[Mapping[str, Any]]) -> None:
        """Replace the committed model with saved state, without notifying on_change."""
        self.committed = model_from_dict(data, self.base)
        self.badge_count = count_active(self.committed)

    def fork(self) -> FilterController:
        """Independent controller over the same data, with no open session."""
        forked = copy.copy(self)
        forked.session = None
        return forked


# -------------------------------------------------------------------------
# Table view
# -------------------------------------------------------------------------

@dataclass
class ViewOptions:
    """Behaviour switches a host passes to TableView."""
    sort_enabled: bool = True
    select_enabled: bool = False
    select_mode: SelectMode = SelectMode.MULTIPLE
    selected: Sequence[int] = field(default_factory=tuple)


class TableView:
    """
    Ties the engine together for a host: data, query, filters, sort,
    selection and pagination, producing the rows for the current page.

    A TableView is mutable and belongs to one user. Hosts serving several
    users keep one template per table and fork() it per request, saving
    to_dict() between requests.
    """

    def __init__(
            self,
            dataset: Sequence[Record],
            schema: Schema,
            *,
            sort_by: Optional[str] = None,
            sort_order: SortDirection | str = SortDirection.DESCENDING,
            options: Optional[ViewOptions] = None,
            preferences: Optional["RowsPerPagePreference"] = None,
            on_filter_change: Optional[Callable[[FilterModel], None]] = None,
            on_select: Optional[Callable[[List[int]], None]] = None,
    ) -> None:
        options = options or ViewOptions()
        self.schema: List[ColumnSpec] = list(schema)
        self.rows: List[Row] = index_rows(dataset)
        self.filters = FilterController(dataset, self.schema, on_change=on_filter_change)
        self.query = ""
        self.sort_enabled = options.sort_enabled
        self.sort = SortState(
            by=sort_by if sort_by is not None else (self.schema[0].name if self.schema else None),
            direction=SortDirection(sort_order),
        )
        self.selection: Optional[RowSelection] = (
            RowSelection(mode=options.select_mode, selected=tuple(options.selected))
            if options.select_enabled else None
        )
        self._on_select = on_select
        self._preferences = preferences
        rows_per_page = preferences.retrieve() if preferences is not None else DEFAULT_ROWS_PER_PAGE
        self.pagination = Pagination(page=0, rows_per_page=rows_per_page)

    def set_data(self, dataset: Sequence[Record], schema: Optional[Schema] = None) -> None:
        if schema is not None:
            self.schema = list(schema)
        self.rows = index_rows(dataset)
        self.filters.sync(dataset, self.schema)

    def set_query(self, query: Optional[str]) -> None:
        self.query = query or ""

    def sort_by_key(self, name: Optional[str]) -> None:
        if not name:
            return
        if not self.sort_enabled:
            logger.debug("Ignoring sort request, sorting is disabled", extra={"sort_key": name})
            return
        self.sort = self.sort.toggle(name)

    def select_row(self, key: int, checked: bool = True) -> None:
        """Select or deselect a row by key and notify on_select with every selected key."""
        if self.selection is None:
            logger.debug("Ignoring row selection, selection is disabled", extra={"key": key})
            return
        selection = self.selection.select(key, checked)
        if selection is self.selection:
            return
        self.selection = selection
        if self._on_select is not None:
            self._on_select(list(selection.selected))

    def set_page(self, page: int) -> None:
        self.pagination = self.pagination.with_page(page)

    def set_rows_per_page(self, rows_per_page: int) -> None:
        if rows_per_page < 1:
            logger.warning("Ignoring non-positive page size", extra={"rows_per_page": rows_per_page})
            return
        self.pagination = self.pagination.with_rows_per_page(rows_per_page)
        if self._preferences is not None:
            self._preferences.store(rows_per_page)

    def use_preferences(self, preferences: "RowsPerPagePreference") -> None:
        """Switch to another preference store and take its page size."""
        self._preferences = preferences
        self.pagination = Pagination(page=self.pagination.page, rows_per_page=preferences.retrieve())

    def matching_rows(self) -> List[Row]:
        return assemble_view(
            self.rows,
            self.schema,
            self.filters.committed,
            query=self.query,
            sort_key=self.sort.by,
            direction=self.sort.direction,
        )

    def current_page(self) -> Tuple[List[Row], int]:
        """
        Rows for the current page and the total number of matching rows.

        Moves back to the last non-empty page if the visible set shrank.
        """
        matching = self.matching_rows()
        self.pagination = self.pagination.clamp(len(matching))
        return self.pagination.window(matching), len(matching)

    def page_rows(self) -> List[Row]:
        rows, _ = self.current_page()
        return rows

    # -------------------------------------------------------------------------
    # Per-user state
    # -------------------------------------------------------------------------
    def fork(self) -> TableView:
        """Copy sharing the rows and schema, whose state changes don't affect this view."""
        forked = copy.copy(self)
        forked.filters = self.filters.fork()
        return forked

    def to_dict(self) -> Dict[str, Any]:
        """
        Sort, page and selection. Committed filters are saved separately with
        filters.to_dict(); page size lives in preferences.
        """
        return {
            "sort_by": self.sort.by,
            "sort_order": self.sort.direction.value,
            "page": self.pagination.page,
            "selected": list(self.selection.selected) if self.selection is not None else [],
        }

    def restore(self, data: Optional[Mapping[str, Any]]) -> None:
        if not data:
            return
        try:
            direction = SortDirection(data.get("sort_order", self.sort.direction.value))
        except ValueError:
            direction = self.sort.direction
        self.sort = SortState(by=data.get("sort_by", self.sort.by), direction=direction)
        self.pagination = self.pagination.with_page(int(data.get("page") or 0))
        if self.selection is not None and "selected" in data:
            self.selection = replace(self.selection, selected=tuple(data.get("selected") or ()))
