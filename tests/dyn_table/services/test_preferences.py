from __future__ import annotations

from dyn_table.services.preferences import ROWS_PER_PAGE_KEY, RowsPerPagePreference
from dyn_table.services.storage import BrowserPreferenceStore, InMemoryPreferenceStore


def test_retrieve_defaults_when_absent():
    pref = RowsPerPagePreference(InMemoryPreferenceStore(), default=25)

    assert pref.retrieve() == 25


def test_store_then_retrieve():
    store = InMemoryPreferenceStore()
    pref = RowsPerPagePreference(store)

    pref.store(50)

    assert store.get(ROWS_PER_PAGE_KEY) == "50"
    assert pref.retrieve() == 50


def test_malformed_values_fall_back_to_default():
    for raw in ["abc", "\"10\"", "2.5", "true", "-5", "0", "null"]:
        pref = RowsPerPagePreference(InMemoryPreferenceStore({ROWS_PER_PAGE_KEY: raw}), default=10)
        assert pref.retrieve() == 10, raw


def test_browser_store_starts_from_saved_data():
    store = BrowserPreferenceStore({"rowsPerPage": "5", "junk": 3})

    assert RowsPerPagePreference(store, default=25).retrieve() == 5
    assert store.get("junk") is None
    assert store.changed is False


def test_browser_store_reports_changes_for_write_back():
    store = BrowserPreferenceStore(None)
    pref = RowsPerPagePreference(store, default=25)

    pref.store(50)

    assert store.changed is True
    assert store.data == {"rowsPerPage": "50"}


def test_browser_store_ignores_rewriting_same_value():
    store = BrowserPreferenceStore({"rowsPerPage": "10"})

    RowsPerPagePreference(store).store(10)

    assert store.changed is False


def test_browser_store_ignores_non_object_data():
    store = BrowserPreferenceStore(["not", "a", "dict"])

    assert store.data == {}
