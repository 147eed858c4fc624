from __future__ import annotations

import locale
import logging
from enum import Enum
from functools import cmp_to_key
from typing import Any, Callable, List, Optional, Sequence

from .columns import ColumnSpec, ColumnStyle, Schema, find_column
from .filter_model import Record
from .values import is_numeric, is_plain_object, time_of_day, to_timestamp, value_key

logger = logging.getLogger(__name__)

Comparator = Callable[[Record, Record], int]


class SortDirection(str, Enum):
    """
    Sort order. Ascending is natural order for every kind of value:
    smaller numbers, earlier dates and lower strings first.
    """
    ASCENDING = "asc"
    DESCENDING = "desc"

    @property
    def sign(self) -> int:
        return 1 if self is SortDirection.ASCENDING else -1


def _sign(number: float) -> int:
    return (number > 0) - (number < 0)


def locale_compare(a: str, b: str) -> int:
    """
    Compare strings case-insensitively first, then with the process locale.

    Case folding keeps "apple" before "Cherry" even in the C locale, where
    strcoll falls back to code point order.
    """
    folded = locale.strcoll(a.casefold(), b.casefold())
    if folded:
        return _sign(folded)
    return _sign(locale.strcoll(a, b))


def _compare_temporal(column: ColumnSpec, a: Any, b: Any, sign: int) -> int:
    coerce = time_of_day if column.style == ColumnStyle.TIME else to_timestamp
    ta, tb = coerce(a), coerce(b)
    # Values that aren't dates go last in either direction
    if ta is None and tb is None:
        return 0
    if ta is None:
        return 1
    if tb is None:
        return -1
    return sign * _sign(ta - tb)


def _compare_search_text(column: ColumnSpec, a: Any, b: Any) -> int:
    ka = column.search_extractor(a)
    kb = column.search_extractor(b)
    if is_numeric(ka) and is_numeric(kb):
        return _sign(ka - kb)
    return locale_compare(value_key(ka), value_key(kb))


def compare_values(column: ColumnSpec, a: Any, b: Any, direction: SortDirection) -> int:
    """
    Compare two entries of a column. First matching rule wins:

    1. date/datetime/time columns compare as timestamps (time of day only for time)
    2. two numbers compare numerically
    3. two plain objects use the column's comparator, else its search text
    4. everything else compares as strings in the current locale
    """
    sign = direction.sign

    if column.style.is_temporal:
        return _compare_temporal(column, a, b, sign)

    if is_numeric(a) and is_numeric(b):
        return sign * _sign(a - b)

    if is_plain_object(a) and is_plain_object(b):
        if column.comparator is not None:
            return sign * _sign(column.comparator(a, b))
        if column.search_extractor is not None:
            return sign * _compare_search_text(column, a, b)

    return sign * locale_compare(value_key(a), value_key(b))


def compare(sort_key: Optional[str], direction: SortDirection | str, schema: Schema) -> Comparator:
    """
    Build a record comparator for the given column and direction.

    Sorting by a column that isn't in the schema keeps the input order.
    """
    direction = SortDirection(direction)
    column = find_column(schema, sort_key)

    if column is None:
        logger.debug("Sort key not in schema, keeping order", extra={"sort_key": sort_key})

        def keep_order(a: Record, b: Record) -> int:
            return 0

        return keep_order

    def comparator(a: Record, b: Record) -> int:
        return compare_values(column, a.get(column.name), b.get(column.name), direction)

    return comparator


def sort_records(
        dataset: Sequence[Record],
        sort_key: Optional[str],
        direction: SortDirection | str,
        schema: Schema,
) -> List[Record]:
    """Stable sort of the records by one column."""
    return sorted(dataset, key=cmp_to_key(compare(sort_key, direction, schema)))
