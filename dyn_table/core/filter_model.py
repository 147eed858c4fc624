from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .columns import ColumnSpec, ColumnStyle, Schema, filterable_columns
from .values import to_timestamp, value_key

logger = logging.getLogger(__name__)

Record = Mapping[str, Any]
SelectValue = Union[str, int, float, None]


# -------------------------------------------------------------------------
# Filter variants
# -------------------------------------------------------------------------

@dataclass(frozen=True)
class CheckItem:
    value: str
    label: Any
    checked: bool = False


@dataclass(frozen=True)
class SelectItem:
    value: str
    label: Any


@dataclass(frozen=True)
class RangeFilter:
    """Inclusive bounds in epoch milliseconds (or plain numbers for number columns)."""

    min: Optional[float] = None
    max: Optional[float] = None

    def is_active(self) -> bool:
        return self.min is not None or self.max is not None

    def active_count(self) -> int:
        return 1 if self.min is not None and self.max is not None else 0

    def cleared(self) -> RangeFilter:
        return RangeFilter()


@dataclass(frozen=True)
class MultiCheckFilter:
    items: Tuple[CheckItem, ...] = ()

    @property
    def checked_values(self) -> List[str]:
        return [item.value for item in self.items if item.checked]

    def is_active(self) -> bool:
        return any(item.checked for item in self.items)

    def active_count(self) -> int:
        return len(self.checked_values)

    def cleared(self) -> MultiCheckFilter:
        return MultiCheckFilter(items=tuple(replace(item, checked=False) for item in self.items))

    def toggled(self, value: str, checked: bool) -> MultiCheckFilter:
        return MultiCheckFilter(
            items=tuple(
                replace(item, checked=checked) if item.value == value else item
                for item in self.items
            )
        )


@dataclass(frozen=True)
class SingleSelectFilter:
    items: Tuple[SelectItem, ...] = ()
    selected: SelectValue = None

    def is_active(self) -> bool:
        return self.selected is not None and self.selected != ""

    def active_count(self) -> int:
        return 1 if self.is_active() else 0

    def cleared(self) -> SingleSelectFilter:
        return replace(self, selected=None)


FilterVariant = Union[RangeFilter, MultiCheckFilter, SingleSelectFilter]


def empty_variant(style: ColumnStyle) -> FilterVariant:
    if style.is_range:
        return RangeFilter()
    if style == ColumnStyle.SELECT:
        return SingleSelectFilter()
    return MultiCheckFilter()


@dataclass(frozen=True)
class FilterEntry:
    """
    Filter definition and state for one column.

    The variant type is fixed by the style when the entry is created.
    """

    style: ColumnStyle
    variant: FilterVariant
    search_extractor: Optional[Callable[[Any], str]] = None
    identity_extractor: Optional[Callable[[Any], Any]] = None

    @classmethod
    def for_column(cls, column: ColumnSpec) -> FilterEntry:
        return cls(
            style=column.style,
            variant=empty_variant(column.style),
            search_extractor=column.search_extractor,
            identity_extractor=column.identity_extractor,
        )

    def identity_of(self, raw: Any) -> Any:
        if self.identity_extractor is not None:
            identity = self.identity_extractor(raw)
            if identity is not None:
                return identity
        return raw

    def with_variant(self, variant: FilterVariant) -> FilterEntry:
        return replace(self, variant=variant)


FilterModel = Dict[str, FilterEntry]


# -------------------------------------------------------------------------
# Builder
# -------------------------------------------------------------------------

def _item_label(column: ColumnSpec, raw: Any) -> Any:
    if column.rendering.disable_filter_modal:
        extractor = column.search_extractor
    else:
        extractor = column.value_extractor
    if extractor is not None:
        label = extractor(raw)
        if label is not None:
            return label
    return raw


def _populate(column: ColumnSpec, entry: FilterEntry, dataset: Sequence[Record]) -> FilterVariant:
    seen: set[str] = set()
    keys: List[Tuple[str, Any]] = []

    for index, record in enumerate(dataset):
        raw = record.get(column.name)
        label = _item_label(column, raw)
        if label is None:
            continue

        identity = entry.identity_of(raw)
        key = value_key(identity if identity is not None else index)
        if key in seen:
            continue
        seen.add(key)
        keys.append((key, label))

    if isinstance(entry.variant, SingleSelectFilter):
        return SingleSelectFilter(items=tuple(SelectItem(value=k, label=label) for k, label in keys))
    return MultiCheckFilter(items=tuple(CheckItem(value=k, label=label) for k, label in keys))


def build_filter_model(dataset: Sequence[Record], schema: Schema) -> FilterModel:
    """
    Build a fresh filter model: one entry per filterable column.

    Checkbox and dropdown entries are pre-populated with the distinct values
    observed in the dataset, keyed by the stringified identity. Range entries
    start unbounded.
    """
    model: FilterModel = {}
    for column in filterable_columns(schema):
        entry = FilterEntry.for_column(column)
        if not column.style.is_range:
            entry = entry.with_variant(_populate(column, entry, dataset))
        model[column.name] = entry

    logger.debug(
        "Built filter model",
        extra={"n_columns": len(model), "n_records": len(dataset)},
    )
    return model


def count_active(model: Optional[FilterModel]) -> int:
    """
    Number of applied filters: 1 per fully bounded range, 1 per checked
    checkbox, 1 per dropdown with a selection.
    """
    if not model:
        return 0
    return sum(entry.variant.active_count() for entry in model.values())


def clear_model(model: FilterModel) -> FilterModel:
    """Copy of the model with every bound, checkbox and selection reset."""
    return {name: entry.with_variant(entry.variant.cleared()) for name, entry in model.items()}


# -------------------------------------------------------------------------
# Edits
# -------------------------------------------------------------------------

@dataclass(frozen=True)
class ToggleItem:
    value: str
    checked: bool


@dataclass(frozen=True)
class SetRange:
    min: Any = None
    max: Any = None


@dataclass(frozen=True)
class SelectOption:
    selected: SelectValue = None


FilterEdit = Union[ToggleItem, SetRange, SelectOption]


def _bound(value: Any, column: str) -> Optional[float]:
    if value is None or value == "":
        return None
    bound = to_timestamp(value)
    if bound is None:
        logger.warning(
            "Ignoring range bound that is not a number or date",
            extra={"column": column, "bound": repr(value)},
        )
    return bound


def apply_edit(model: FilterModel, column: str, edit: FilterEdit) -> FilterModel:
    """
    Return a new model with one column's entry replaced by the edited one.

    Unknown columns and edits that don't fit the column's filter kind leave
    the model unchanged.
    """
    entry = model.get(column)
    if entry is None:
        logger.warning("Ignoring edit for unknown filter column", extra={"column": column})
        return model

    variant = entry.variant
    if isinstance(edit, ToggleItem) and isinstance(variant, MultiCheckFilter):
        new_variant: FilterVariant = variant.toggled(edit.value, edit.checked)
    elif isinstance(edit, SetRange) and isinstance(variant, RangeFilter):
        new_variant = RangeFilter(min=_bound(edit.min, column), max=_bound(edit.max, column))
    elif isinstance(edit, SelectOption) and isinstance(variant, SingleSelectFilter):
        new_variant = replace(variant, selected=edit.selected)
    else:
        logger.warning(
            "Ignoring edit that does not match the filter kind",
            extra={"column": column, "edit": type(edit).__name__, "filter": type(variant).__name__},
        )
        return model

    updated = dict(model)
    updated[column] = entry.with_variant(new_variant)
    return updated


# -------------------------------------------------------------------------
# Serialisation
# -------------------------------------------------------------------------

def model_to_dict(model: FilterModel) -> Dict[str, Dict[str, Any]]:
    """
    JSON-friendly filter state: bounds, checked values and selections.

    Items and labels are not included; they come back from the model the
    state is restored onto.
    """
    state: Dict[str, Dict[str, Any]] = {}
    for name, entry in model.items():
        variant = entry.variant
        if isinstance(variant, RangeFilter):
            state[name] = {"min": variant.min, "max": variant.max}
        elif isinstance(variant, MultiCheckFilter):
            state[name] = {"checked": variant.checked_values}
        else:
            state[name] = {"selected": variant.selected}
    return state


def model_from_dict(data: Optional[Mapping[str, Any]], template: FilterModel) -> FilterModel:
    """
    Restore filter state saved with model_to_dict onto a model's entries.

    Columns missing from the data keep the template's entry; checked values
    that are no longer offered are dropped.
    """
    if not data:
        return template

    model: FilterModel = {}
    for name, entry in template.items():
        saved = data.get(name)
        variant = entry.variant
        if not isinstance(saved, Mapping):
            model[name] = entry
        elif isinstance(variant, RangeFilter):
            model[name] = entry.with_variant(
                RangeFilter(min=_bound(saved.get("min"), name), max=_bound(saved.get("max"), name))
            )
        elif isinstance(variant, MultiCheckFilter):
            checked = set(saved.get("checked") or [])
            model[name] = entry.with_variant(
                MultiCheckFilter(items=tuple(replace(item, checked=item.value in checked) for item in variant.items))
            )
        else:
            model[name] = entry.with_variant(replace(variant, selected=saved.get("selected")))
    return model
