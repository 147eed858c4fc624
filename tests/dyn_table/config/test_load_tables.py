from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pytest

from dyn_table.config.loader import load_global_config, load_tables, records_from_frame
from dyn_table.config.model import TableOptions
from dyn_table.core.columns import ColumnSpec, ColumnStyle
from dyn_table.core.exceptions import ConfigError
from dyn_table.core.sorting import SortDirection
from dyn_table.core.view import SelectMode


def _write_config(root: Path, tables: dict, global_cfg: dict | None = None) -> None:
    (root / "tables").mkdir(parents=True, exist_ok=True)
    (root / "global.json").write_text(json.dumps(global_cfg or {"ui_title": "Test Tables"}))
    for file_name, raw in tables.items():
        (root / "tables" / file_name).write_text(json.dumps(raw))


def _people_table(file: str = "people.csv") -> dict:
    return {
        "name": "people",
        "file": file,
        "columns": [
            {"name": "name", "can_filter": True},
            {"name": "age", "style": "number", "can_filter": True},
            {"name": "born", "style": "date"},
        ],
        "options": {"sort": {"by": "age", "order": "asc"}, "search": {"placeholder": "Find"}},
    }


def _write_people_csv(root: Path) -> None:
    (root / "people.csv").write_text(
        "name,age,born\n"
        "Ada,26,1998-03-14\n"
        "Grace,,not-a-date\n"
    )


def test_load_tables_reads_schema_options_and_records(tmp_path):
    _write_config(tmp_path, {"people.json": _people_table()})
    _write_people_csv(tmp_path)

    global_config, tables = load_tables(tmp_path)

    assert global_config.ui_title == "Test Tables"
    assert global_config.default_rows_per_page == 25
    assert len(tables) == 1

    table = tables[0]
    assert table.name == "people"
    assert [c.name for c in table.schema] == ["name", "age", "born"]
    assert table.schema[1].style is ColumnStyle.NUMBER
    assert table.options.sort_by == "age"
    assert table.options.sort_order is SortDirection.ASCENDING
    assert table.options.search_placeholder == "Find"

    ada, grace = table.records
    assert ada["name"] == "Ada"
    assert ada["age"] == 26
    assert ada["born"] == pd.Timestamp("1998-03-14")
    assert grace["age"] is None
    assert grace["born"] is None


def test_invalid_tables_are_skipped(tmp_path):
    bad_style = _people_table()
    bad_style["name"] = "broken"
    bad_style["columns"] = [{"name": "x", "style": "sparkline"}]

    missing_file = _people_table(file="nope.csv")
    missing_file["name"] = "missing"

    _write_config(
        tmp_path,
        {"a_people.json": _people_table(), "b_broken.json": bad_style, "c_missing.json": missing_file},
    )
    _write_people_csv(tmp_path)

    _, tables = load_tables(tmp_path)

    assert [t.name for t in tables] == ["people"]


def test_no_valid_tables_raises(tmp_path):
    _write_config(tmp_path, {"people.json": _people_table(file="nope.csv")})

    with pytest.raises(RuntimeError):
        load_tables(tmp_path)


def test_missing_global_config_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_global_config(tmp_path)


def test_bad_rows_per_page_raises(tmp_path):
    _write_config(tmp_path, {}, {"ui_title": "x", "default_rows_per_page": 0})

    with pytest.raises(ConfigError):
        load_global_config(tmp_path)


def test_table_options_defaults():
    options = TableOptions.from_dict(None)

    assert options.sort_enabled is True
    assert options.select_enabled is False
    assert options.no_data_message == "No data"


def test_table_options_read_sort_select_and_no_data():
    options = TableOptions.from_dict(
        {
            "sort": {"enabled": False},
            "select": {"enabled": True, "mode": "single", "selected": [3, "4"]},
            "no_data": {"message": "Nobody here"},
        }
    )

    assert options.sort_enabled is False
    assert options.select_mode is SelectMode.SINGLE
    assert options.selected == (3, 4)
    assert options.no_data_message == "Nobody here"

    view_options = options.view_options()
    assert (view_options.sort_enabled, view_options.select_enabled) == (False, True)


def test_table_with_bad_select_mode_is_skipped(tmp_path):
    bad = _people_table()
    bad["name"] = "bad"
    bad["options"] = {"select": {"enabled": True, "mode": "some"}}
    _write_config(tmp_path, {"bad.json": bad, "people.json": _people_table()})
    _write_people_csv(tmp_path)

    _, tables = load_tables(tmp_path)

    assert [t.name for t in tables] == ["people"]


def test_records_from_frame_unwraps_missing_values():
    frame = pd.DataFrame({"a": [1.5, None], "b": ["x", None]})

    records = records_from_frame(frame, [ColumnSpec(name="a", style=ColumnStyle.NUMBER)])

    assert records == [{"a": 1.5, "b": "x"}, {"a": None, "b": None}]
