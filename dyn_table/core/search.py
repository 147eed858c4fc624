from __future__ import annotations

import re
from typing import Any, List, Optional, Pattern, Sequence

from .columns import ColumnSpec, Schema
from .filter_model import Record
from .values import data_string, is_primitive

_WHITESPACE = re.compile(r"\s+")


def normalise_text(text: str) -> str:
    """Drop all whitespace and case-fold, applied to queries and candidates alike."""
    return _WHITESPACE.sub("", text).casefold()


def compile_query(query: Optional[str]) -> Optional[Pattern[str]]:
    """
    Compile a free-text query into a literal substring pattern.

    Returns None for an empty/whitespace-only query, which matches everything.
    """
    normalised = normalise_text(query or "")
    if not normalised:
        return None
    return re.compile(re.escape(normalised))


def searchable_text(column: ColumnSpec, raw: Any) -> str:
    if column.search_extractor is not None:
        return normalise_text(str(column.search_extractor(raw)))

    display = data_string(raw, column.style)
    if not isinstance(display, str):
        return ""
    # Object values shown through a value extractor have no reliable text form
    if column.value_extractor is not None and not is_primitive(raw):
        return ""
    return normalise_text(display)


def record_matches(record: Record, schema: Schema, pattern: Optional[Pattern[str]]) -> bool:
    if pattern is None:
        return True
    return any(
        pattern.search(searchable_text(column, record.get(column.name))) is not None
        for column in schema
    )


def search(query: Optional[str], dataset: Sequence[Record], schema: Schema) -> List[Record]:
    """Records where any column's text contains the query, in input order."""
    pattern = compile_query(query)
    return [record for record in dataset if record_matches(record, schema, pattern)]
