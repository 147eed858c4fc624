from __future__ import annotations

from datetime import datetime

from dash import html

from dyn_table.core.columns import ColumnSpec, ColumnStyle
from dyn_table.core.search import compile_query, normalise_text, search


def _make_schema():
    return [
        ColumnSpec(name="firstName"),
        ColumnSpec(name="lastName"),
        ColumnSpec(name="age", style=ColumnStyle.NUMBER),
    ]


def _make_dataset():
    return [
        {"firstName": "Ada", "lastName": "Smith", "age": 26},
        {"firstName": "Grace", "lastName": "Price", "age": 39},
        {"firstName": "Mary Ann", "lastName": "O'Neil (Jr.)", "age": 12},
    ]


def test_empty_query_returns_everything_in_order():
    dataset = _make_dataset()

    assert search("", dataset, _make_schema()) == dataset
    assert search("   ", dataset, _make_schema()) == dataset
    assert search(None, dataset, _make_schema()) == dataset


def test_matches_any_column_case_insensitively():
    result = search("SMI", _make_dataset(), _make_schema())

    assert [r["firstName"] for r in result] == ["Ada"]


def test_numbers_are_searchable_as_text():
    result = search("39", _make_dataset(), _make_schema())

    assert [r["firstName"] for r in result] == ["Grace"]


def test_whitespace_is_ignored_on_both_sides():
    result = search("m a r y a n n", _make_dataset(), _make_schema())

    assert [r["firstName"] for r in result] == ["Mary Ann"]


def test_special_characters_are_literal():
    assert [r["firstName"] for r in search("(jr.)", _make_dataset(), _make_schema())] == ["Mary Ann"]
    assert search(".*", _make_dataset(), _make_schema()) == []
    assert search("[", _make_dataset(), _make_schema()) == []


def test_search_extractor_overrides_display_text():
    schema = [ColumnSpec(name="owner", search_extractor=lambda v: v["name"])]
    dataset = [{"owner": {"name": "Ada"}}, {"owner": {"name": "Grace"}}]

    assert search("grace", dataset, schema) == [{"owner": {"name": "Grace"}}]


def test_dates_are_searched_in_display_format():
    schema = [ColumnSpec(name="birthday", style=ColumnStyle.DATE)]
    dataset = [{"birthday": datetime(1998, 3, 14)}, {"birthday": datetime(2001, 7, 4)}]

    assert search("mar14", dataset, schema) == [{"birthday": datetime(1998, 3, 14)}]


def test_components_and_extracted_objects_are_not_searchable():
    schema = [
        ColumnSpec(name="badge"),
        ColumnSpec(name="owner", value_extractor=lambda v: v["name"]),
    ]
    dataset = [{"badge": html.Span("gold"), "owner": {"name": "gold"}}]

    assert search("gold", dataset, schema) == []


def test_plain_objects_render_as_placeholder():
    schema = [ColumnSpec(name="meta")]
    dataset = [{"meta": {"a": 1}}, {"meta": "x"}]

    assert search("-", dataset, schema) == [{"meta": {"a": 1}}]


def test_query_helpers():
    assert normalise_text(" Hello\tWorld\n") == "helloworld"
    assert compile_query("  ") is None
    assert compile_query("a.b").search("axb") is None


def test_unrepresentable_dates_are_not_searchable():
    schema = [ColumnSpec(name="d", style=ColumnStyle.DATE)]
    dataset = [{"d": 1e16}, {"d": datetime(9999, 12, 31)}]

    assert search("x", dataset, schema) == []
    assert search("9999", dataset, schema) == [{"d": datetime(9999, 12, 31)}]
