from __future__ import annotations

from dyn_table.core.columns import ColumnSpec, ColumnStyle
from dyn_table.core.filter_model import (
    SelectOption,
    SetRange,
    ToggleItem,
    build_filter_model,
    count_active,
    model_to_dict,
)
from dyn_table.core.session import FilterEditingSession, SessionState


def _make_model():
    schema = [
        ColumnSpec(name="lastName", can_filter=True),
        ColumnSpec(name="age", style=ColumnStyle.NUMBER, can_filter=True),
        ColumnSpec(name="team", style=ColumnStyle.SELECT, can_filter=True),
    ]
    dataset = [
        {"lastName": "Smith", "age": 26, "team": "red"},
        {"lastName": "Price", "age": 39, "team": "blue"},
    ]
    return build_filter_model(dataset, schema)


def _open_session(model=None, on_apply=None) -> FilterEditingSession:
    session = FilterEditingSession(model if model is not None else _make_model(), on_apply=on_apply)
    session.open()
    return session


def test_open_starts_draft_from_committed():
    model = _make_model()
    session = FilterEditingSession(model)
    assert session.state is SessionState.IDLE

    draft = session.open()

    assert session.is_open
    assert draft == model
    assert session.backup is None
    assert session.was_cleared is False


def test_mutate_changes_draft_but_not_committed():
    session = _open_session()

    session.mutate("lastName", ToggleItem(value="Smith", checked=True))

    assert session.draft["lastName"].variant.checked_values == ["Smith"]
    assert session.committed["lastName"].variant.checked_values == []


def test_apply_commits_and_notifies():
    received = []
    session = _open_session(on_apply=received.append)
    session.mutate("age", SetRange(min=20, max=30))

    committed = session.apply()

    assert committed["age"].variant.min == 20
    assert session.committed == committed
    assert received == [committed]
    assert session.was_cleared is False
    assert session.backup is None


def test_apply_twice_is_idempotent():
    session = _open_session()
    session.mutate("team", SelectOption(selected="red"))

    first = session.apply()
    second = session.apply()

    assert first == second


def test_clear_resets_draft_and_keeps_backup():
    session = _open_session()
    session.mutate("lastName", ToggleItem(value="Price", checked=True))
    session.mutate("age", SetRange(min=1, max=2))
    before_clear = session.draft

    cleared = session.clear()

    assert count_active(cleared) == 0
    assert session.was_cleared is True
    assert session.backup == before_clear


def test_clear_then_close_restores_pre_clear_draft():
    session = _open_session()
    session.mutate("lastName", ToggleItem(value="Price", checked=True))
    session.mutate("team", SelectOption(selected="blue"))
    before_clear = session.draft

    session.clear()
    session.close()

    assert session.state is SessionState.CLOSED
    assert session.draft == before_clear
    assert session.backup is None
    assert session.was_cleared is False


def test_clear_then_apply_commits_the_cleared_model():
    model = _make_model()
    session = _open_session(model)
    session.mutate("lastName", ToggleItem(value="Smith", checked=True))
    session.apply()

    session.clear()
    committed = session.apply()

    assert count_active(committed) == 0
    assert session.backup is None


def test_close_without_clear_discards_unapplied_edits():
    session = _open_session()
    session.mutate("lastName", ToggleItem(value="Smith", checked=True))

    session.close()

    assert session.draft == session.committed
    assert count_active(session.committed) == 0


def test_actions_outside_open_session_are_ignored():
    model = _make_model()
    session = FilterEditingSession(model)

    assert session.mutate("lastName", ToggleItem(value="Smith", checked=True)) == model
    assert session.clear() == model
    assert session.apply() == model
    session.close()
    assert session.state is SessionState.IDLE


def test_reopen_seeds_from_last_commit():
    session = _open_session()
    session.mutate("team", SelectOption(selected="red"))
    committed = session.apply()
    session.mutate("team", SelectOption(selected="blue"))
    session.close()

    draft = session.open()

    assert draft == committed
    assert draft["team"].variant.selected == "red"


def test_saved_session_resumes_edits():
    model = _make_model()
    session = _open_session(model)
    session.mutate("lastName", ToggleItem(value="Smith", checked=True))

    resumed = FilterEditingSession.from_dict(session.to_dict(), model)

    assert resumed.is_open
    assert resumed.draft == session.draft
    assert resumed.committed == model


def test_saved_clear_still_rolls_back_on_close():
    model = _make_model()
    session = _open_session(model)
    session.mutate("team", SelectOption(selected="red"))
    before_clear = session.draft
    session.clear()

    resumed = FilterEditingSession.from_dict(session.to_dict(), model)
    assert resumed.was_cleared
    assert model_to_dict(resumed.backup) == model_to_dict(before_clear)

    resumed.close()
    assert resumed.draft == before_clear


def test_unknown_saved_state_starts_fresh():
    model = _make_model()

    session = FilterEditingSession.from_dict({"state": "half-open", "draft": {}}, model)

    assert session.state is SessionState.IDLE
    assert session.draft == model
    assert FilterEditingSession.from_dict(None, model).state is SessionState.IDLE
