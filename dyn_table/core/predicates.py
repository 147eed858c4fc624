from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

from .filter_model import (
    FilterModel,
    FilterVariant,
    MultiCheckFilter,
    RangeFilter,
    Record,
    SingleSelectFilter,
)
from .values import is_primitive, to_timestamp, value_key

logger = logging.getLogger(__name__)


def _passes_range(variant: RangeFilter, value: Any) -> bool:
    if not variant.is_active():
        return True
    numeric = to_timestamp(value)
    if numeric is None:
        return False
    if variant.min is not None and numeric < variant.min:
        return False
    if variant.max is not None and numeric > variant.max:
        return False
    return True


def _passes_multi_check(variant: MultiCheckFilter, value: Any) -> bool:
    checked = variant.checked_values
    if not checked:
        return True
    # Objects/lists can't be matched against option keys
    if not is_primitive(value):
        return True
    return value_key(value) in checked


def _passes_single_select(variant: SingleSelectFilter, value: Any) -> bool:
    if not variant.is_active():
        return True
    return value == variant.selected


def _passes(variant: FilterVariant, value: Any) -> bool:
    if isinstance(variant, RangeFilter):
        return _passes_range(variant, value)
    if isinstance(variant, MultiCheckFilter):
        return _passes_multi_check(variant, value)
    if isinstance(variant, SingleSelectFilter):
        return _passes_single_select(variant, value)
    raise TypeError(f"Unknown filter variant {type(variant).__name__}")


def record_passes(record: Record, model: Optional[FilterModel]) -> bool:
    """
    True when the record satisfies every column filter in the model.

    Columns the record doesn't have are not constrained.
    """
    if not model:
        return True
    for column, entry in model.items():
        if column not in record:
            continue
        if not _passes(entry.variant, entry.identity_of(record[column])):
            return False
    return True


def apply_filters(dataset: Sequence[Record], model: Optional[FilterModel]) -> List[Record]:
    """Records that pass every filter in the model, in input order."""
    kept = [record for record in dataset if record_passes(record, model)]
    logger.debug(
        "Applied filters",
        extra={"n_records": len(dataset), "n_kept": len(kept)},
    )
    return kept
