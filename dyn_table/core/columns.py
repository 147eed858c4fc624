from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from .exceptions import SchemaError

logger = logging.getLogger(__name__)


class ColumnStyle(str, Enum):
    """
    Style a column's entries are shown in.

    - number/date/datetime/time: filtered with a range
    - select: filtered with a single-choice dropdown
    - default: filtered with a list of checkboxes
    """
    DEFAULT = "default"
    NUMBER = "number"
    DATE = "date"
    DATETIME = "datetime"
    TIME = "time"
    SELECT = "select"

    @property
    def is_range(self) -> bool:
        return self in (ColumnStyle.NUMBER, ColumnStyle.DATE, ColumnStyle.DATETIME, ColumnStyle.TIME)

    @property
    def is_temporal(self) -> bool:
        return self in (ColumnStyle.DATE, ColumnStyle.DATETIME, ColumnStyle.TIME)


@dataclass(frozen=True)
class RenderOptions:
    """
    Options for rendering entries of a column.

    :param disable_table: don't use the value extractor when rendering table cells
    :param disable_filter_modal: don't use the value extractor when labelling filter options
    """
    disable_table: bool = False
    disable_filter_modal: bool = False


@dataclass(frozen=True)
class ColumnSpec:
    """
    Describes one column of the table.

    Fields:

    - name: unique key, joined against record fields
    - title: human-readable header, defaults to name
    - style: how entries are displayed and which filter the column gets
    - can_filter: whether the column gets a filter entry
    - value_extractor: renders a value for display (table cell, filter label)
    - search_extractor: derives the text used for free-text search
    - identity_extractor: derives the key used to dedupe/match filter options
    - comparator: custom ordering for object-valued entries
    """

    name: str
    title: Optional[str] = None
    style: ColumnStyle = ColumnStyle.DEFAULT
    can_filter: bool = False
    rendering: RenderOptions = field(default_factory=RenderOptions)
    value_extractor: Optional[Callable[[Any], Any]] = None
    search_extractor: Optional[Callable[[Any], str]] = None
    identity_extractor: Optional[Callable[[Any], Any]] = None
    comparator: Optional[Callable[[Any, Any], int]] = None

    def __post_init__(self) -> None:
        if not isinstance(self.style, ColumnStyle):
            object.__setattr__(self, "style", ColumnStyle(self.style))

    @property
    def display_title(self) -> str:
        return self.title or self.name

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ColumnSpec:
        """
        Build a ColumnSpec from a JSON column definition.

        Extractors and comparators cannot be expressed in JSON; attach them
        in Python with dataclasses.replace if needed.

        :raises SchemaError: if the definition has no name or an unknown style
        """
        if not isinstance(data, dict):
            raise SchemaError(f"Column definition must be an object, got {type(data).__name__}")

        name = data.get("name")
        if not name or not isinstance(name, str):
            raise SchemaError("Column definition is missing a 'name'")

        style_raw = data.get("style") or ColumnStyle.DEFAULT.value
        try:
            style = ColumnStyle(style_raw)
        except ValueError as e:
            raise SchemaError(f"Column '{name}' has unknown style '{style_raw}'") from e

        rendering_raw = data.get("rendering") or {}
        rendering = RenderOptions(
            disable_table=bool(rendering_raw.get("disable_table", False)),
            disable_filter_modal=bool(rendering_raw.get("disable_filter_modal", False)),
        )

        return cls(
            name=name,
            title=data.get("title"),
            style=style,
            can_filter=bool(data.get("can_filter", False)),
            rendering=rendering,
        )


Schema = Sequence[ColumnSpec]


def find_column(schema: Schema, name: Optional[str]) -> Optional[ColumnSpec]:
    if name is None:
        return None
    return next((c for c in schema if c.name == name), None)


def column_title(schema: Schema, name: str) -> str:
    """Friendly title for a column name, falling back to the name itself."""
    column = find_column(schema, name)
    return column.display_title if column is not None else name


def filterable_columns(schema: Schema) -> List[ColumnSpec]:
    """
    Columns that get a filter entry.

    Columns with an empty or repeated name are skipped (first one wins).
    """
    seen: set[str] = set()
    columns: List[ColumnSpec] = []
    for column in schema:
        if not column.can_filter:
            continue
        if not column.name:
            logger.warning("Skipping filterable column without a name")
            continue
        if column.name in seen:
            logger.warning(
                "Skipping duplicate filterable column",
                extra={"column": column.name},
            )
            continue
        seen.add(column.name)
        columns.append(column)
    return columns
