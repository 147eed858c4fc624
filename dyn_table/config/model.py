from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from dyn_table.core.columns import ColumnSpec
from dyn_table.core.filter_model import Record
from dyn_table.core.sorting import SortDirection
from dyn_table.core.view import DEFAULT_ROWS_PER_PAGE, SelectMode, ViewOptions


@dataclass(frozen=True)
class TableOptions:
    """
    Per-table behaviour switches.

    - sort_enabled / sort_by / sort_order: header sorting, initial column
      (defaults to the first column) and direction
    - search_enabled / search_placeholder: free-text search box
    - filter_enabled: filter button and modal
    - select_enabled / select_mode / selected: row selection and the rows
      selected up front
    - no_data_message: shown instead of the table when no rows match
    """
    sort_enabled: bool = True
    sort_by: Optional[str] = None
    sort_order: SortDirection = SortDirection.DESCENDING
    search_enabled: bool = True
    search_placeholder: str = "Search items"
    filter_enabled: bool = True
    select_enabled: bool = False
    select_mode: SelectMode = SelectMode.MULTIPLE
    selected: Tuple[int, ...] = ()
    no_data_message: str = "No data"

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> TableOptions:
        data = data or {}
        sort = data.get("sort") or {}
        search = data.get("search") or {}
        filters = data.get("filter") or {}
        select = data.get("select") or {}
        no_data = data.get("no_data") or {}
        return cls(
            sort_enabled=bool(sort.get("enabled", True)),
            sort_by=sort.get("by"),
            sort_order=SortDirection(sort.get("order", SortDirection.DESCENDING.value)),
            search_enabled=bool(search.get("enabled", True)),
            search_placeholder=search.get("placeholder") or "Search items",
            filter_enabled=bool(filters.get("enabled", True)),
            select_enabled=bool(select.get("enabled", False)),
            select_mode=SelectMode(select.get("mode", SelectMode.MULTIPLE.value)),
            selected=tuple(int(k) for k in select.get("selected") or ()),
            no_data_message=no_data.get("message") or "No data",
        )

    def view_options(self) -> ViewOptions:
        return ViewOptions(
            sort_enabled=self.sort_enabled,
            select_enabled=self.select_enabled,
            select_mode=self.select_mode,
            selected=self.selected,
        )


@dataclass
class TableConfig:
    """
    Parsed config entry for a single table.
    """
    raw: Dict[str, Any]
    source_path: Path
    index: int

    @property
    def name(self) -> str:
        return self.raw.get("name", f"Table {self.index}")

    @property
    def title(self) -> str:
        return self.raw.get("title") or self.name

    @property
    def file(self) -> Path:
        return Path(self.raw["file"])

    @property
    def columns(self) -> List[ColumnSpec]:
        return [ColumnSpec.from_dict(c) for c in self.raw.get("columns", [])]

    @property
    def options(self) -> TableOptions:
        return TableOptions.from_dict(self.raw.get("options"))

    @classmethod
    def from_raw(cls, raw: Dict[str, Any], source_path: Path, index: int) -> TableConfig:
        return cls(raw=raw, source_path=source_path, index=index)


@dataclass
class GlobalConfig:
    ui_title: str
    default_rows_per_page: int = DEFAULT_ROWS_PER_PAGE
    tables: List[TableConfig] = field(default_factory=list)


@dataclass
class Table:
    """A loaded table: its config, resolved column schema, options and records."""
    config: TableConfig
    schema: List[ColumnSpec]
    records: List[Record]
    options: TableOptions = field(default_factory=TableOptions)

    @property
    def name(self) -> str:
        return self.config.name
