from __future__ import annotations

from datetime import date, datetime

from dyn_table.core.columns import ColumnSpec, ColumnStyle
from dyn_table.core.filter_model import (
    CheckItem,
    FilterEntry,
    MultiCheckFilter,
    RangeFilter,
    SelectItem,
    SingleSelectFilter,
    build_filter_model,
)
from dyn_table.core.predicates import apply_filters, record_passes
from dyn_table.core.values import to_timestamp


def _range_model(column: str, style: ColumnStyle = ColumnStyle.NUMBER, **bounds):
    return {column: FilterEntry(style=style, variant=RangeFilter(**bounds))}


def test_range_filter_keeps_values_inside_inclusive_bounds():
    dataset = [{"age": 26}, {"age": 39}, {"age": 12}]

    result = apply_filters(dataset, _range_model("age", min=20, max=40))

    assert result == [{"age": 26}, {"age": 39}]


def test_range_bounds_are_inclusive():
    dataset = [{"age": 20}, {"age": 40}, {"age": 41}]

    assert apply_filters(dataset, _range_model("age", min=20, max=40)) == [{"age": 20}, {"age": 40}]


def test_half_open_ranges():
    dataset = [{"age": 5}, {"age": 50}]

    assert apply_filters(dataset, _range_model("age", min=10)) == [{"age": 50}]
    assert apply_filters(dataset, _range_model("age", max=10)) == [{"age": 5}]


def test_range_excludes_values_that_are_not_numbers_or_dates():
    dataset = [{"age": "unknown"}, {"age": None}, {"age": {"years": 3}}, {"age": True}, {"age": 30}]

    assert apply_filters(dataset, _range_model("age", min=0, max=100)) == [{"age": 30}]


def test_range_on_dates_compares_timestamps():
    low = to_timestamp(date(2000, 1, 1))
    high = to_timestamp(date(2010, 12, 31))
    dataset = [
        {"birthday": datetime(1998, 3, 14)},
        {"birthday": "2005-06-01"},
        {"birthday": date(2012, 6, 23)},
    ]

    result = apply_filters(dataset, _range_model("birthday", ColumnStyle.DATE, min=low, max=high))

    assert result == [{"birthday": "2005-06-01"}]


def test_multi_check_keeps_checked_values_only():
    model = {
        "lastName": FilterEntry(
            style=ColumnStyle.DEFAULT,
            variant=MultiCheckFilter(
                items=(
                    CheckItem(value="Smith", label="Smith", checked=True),
                    CheckItem(value="Price", label="Price", checked=False),
                )
            ),
        )
    }
    dataset = [{"lastName": "Smith"}, {"lastName": "Price"}]

    assert apply_filters(dataset, model) == [{"lastName": "Smith"}]


def test_multi_check_matches_on_stringified_value():
    model = {
        "age": FilterEntry(
            style=ColumnStyle.DEFAULT,
            variant=MultiCheckFilter(items=(CheckItem(value="26", label=26, checked=True),)),
        )
    }

    assert apply_filters([{"age": 26}, {"age": 26.0}, {"age": 27}], model) == [{"age": 26}, {"age": 26.0}]


def test_multi_check_lets_objects_through():
    model = {
        "tags": FilterEntry(
            style=ColumnStyle.DEFAULT,
            variant=MultiCheckFilter(items=(CheckItem(value="a", label="a", checked=True),)),
        )
    }
    dataset = [{"tags": ["x", "y"]}, {"tags": {"k": 1}}, {"tags": "b"}]

    assert apply_filters(dataset, model) == [{"tags": ["x", "y"]}, {"tags": {"k": 1}}]


def test_multi_check_uses_identity_extractor():
    model = {
        "owner": FilterEntry(
            style=ColumnStyle.DEFAULT,
            variant=MultiCheckFilter(items=(CheckItem(value="7", label="ada", checked=True),)),
            identity_extractor=lambda v: v["id"],
        )
    }
    dataset = [{"owner": {"id": 7}}, {"owner": {"id": 9}}]

    assert apply_filters(dataset, model) == [{"owner": {"id": 7}}]


def test_single_select_compares_without_stringifying():
    items = (SelectItem(value="1", label="one"),)
    dataset = [{"level": 1}, {"level": "1"}]

    by_string = {"level": FilterEntry(ColumnStyle.SELECT, SingleSelectFilter(items=items, selected="1"))}
    by_number = {"level": FilterEntry(ColumnStyle.SELECT, SingleSelectFilter(items=items, selected=1))}

    assert apply_filters(dataset, by_string) == [{"level": "1"}]
    assert apply_filters(dataset, by_number) == [{"level": 1}]


def test_inactive_filters_are_no_ops():
    dataset = [{"a": "x", "n": 1, "s": "p"}, {"a": "y", "n": None, "s": None}, {"b": 3}]
    model = {
        "a": FilterEntry(ColumnStyle.DEFAULT, MultiCheckFilter(items=(CheckItem("x", "x"), CheckItem("y", "y")))),
        "n": FilterEntry(ColumnStyle.NUMBER, RangeFilter()),
        "s": FilterEntry(ColumnStyle.SELECT, SingleSelectFilter(items=(SelectItem("p", "p"),), selected=None)),
    }

    assert apply_filters(dataset, model) == dataset

    model["s"] = FilterEntry(ColumnStyle.SELECT, SingleSelectFilter(items=(SelectItem("p", "p"),), selected=""))
    assert apply_filters(dataset, model) == dataset


def test_freshly_built_model_keeps_everything():
    schema = [
        ColumnSpec(name="name", can_filter=True),
        ColumnSpec(name="age", style=ColumnStyle.NUMBER, can_filter=True),
    ]
    dataset = [{"name": "a", "age": 1}, {"name": "b", "age": "?"}]

    assert apply_filters(dataset, build_filter_model(dataset, schema)) == dataset


def test_columns_missing_from_record_pass():
    assert record_passes({"other": 1}, _range_model("age", min=1, max=2))


def test_all_column_filters_must_pass():
    model = {
        **_range_model("age", min=20, max=40),
        "lastName": FilterEntry(
            ColumnStyle.DEFAULT,
            MultiCheckFilter(items=(CheckItem("Smith", "Smith", checked=True),)),
        ),
    }
    dataset = [
        {"age": 26, "lastName": "Smith"},
        {"age": 26, "lastName": "Price"},
        {"age": 60, "lastName": "Smith"},
    ]

    assert apply_filters(dataset, model) == [{"age": 26, "lastName": "Smith"}]


def test_no_model_keeps_everything():
    dataset = [{"a": 1}]

    assert apply_filters(dataset, None) == dataset


def test_range_handles_far_future_dates():
    dataset = [{"d": date(9999, 12, 31)}, {"d": date(2020, 1, 1)}]

    assert apply_filters(dataset, _range_model("d", ColumnStyle.DATE, min=0)) == dataset
    assert apply_filters(dataset, _range_model("d", ColumnStyle.DATE, max=to_timestamp(date(2021, 1, 1)))) == [
        {"d": date(2020, 1, 1)}
    ]
