from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple, TYPE_CHECKING

import dash
from dash import ALL, Input, Output, State, no_update

from dyn_table.core.filter_model import (
    MultiCheckFilter,
    RangeFilter,
    SelectOption,
    SetRange,
    SingleSelectFilter,
    ToggleItem,
)
from dyn_table.core.session import FilterEditingSession
from dyn_table.core.values import to_timestamp
from dyn_table.core.view import TableView
from dyn_table.services.preferences import RowsPerPagePreference
from dyn_table.services.storage import BrowserPreferenceStore
from dyn_table.ui.ids import IDs
from dyn_table.ui.layout import build_filter_body, build_table

if TYPE_CHECKING:
    from dyn_table.ui.config import AppConfig

logger = logging.getLogger(__name__)


def _by_column(values: List[Any], ids: List[Dict[str, str]]) -> Dict[str, Any]:
    return {component_id["column"]: value for component_id, value in zip(ids, values)}


def _with_table(state: Optional[Mapping[str, Any]], table_name: str, value: Any) -> Dict[str, Any]:
    """Copy of a per-table store's data with one table's entry replaced."""
    updated = dict(state or {})
    updated[table_name] = value
    return updated


def load_view(
        ctx: AppConfig,
        table_name: Optional[str],
        view_state: Optional[Mapping[str, Any]] = None,
        filter_state: Optional[Mapping[str, Any]] = None,
        preferences: Optional[Mapping[str, Any]] = None,
) -> Tuple[TableView, BrowserPreferenceStore]:
    """
    Rebuild one browser's view of a table from its stores.

    The returned preference store reports whether the page size preference
    changed and must be written back.
    """
    name = ctx.table_for(table_name).name
    view = ctx.view_for(name)
    store = BrowserPreferenceStore(preferences)
    view.use_preferences(RowsPerPagePreference(store, default=ctx.global_config.default_rows_per_page))
    view.restore((view_state or {}).get(name))
    view.filters.restore((filter_state or {}).get(name))
    return view, store


def stage_control_values(
        session: FilterEditingSession,
        checks: Dict[str, List[str]],
        mins: Dict[str, Any],
        maxs: Dict[str, Any],
        selects: Dict[str, Any],
) -> None:
    """Turn the modal's control values into edits on the session's draft."""
    for name, entry in session.draft.items():
        variant = entry.variant

        if isinstance(variant, MultiCheckFilter) and name in checks:
            wanted = set(checks[name] or [])
            for item in variant.items:
                if item.checked != (item.value in wanted):
                    session.mutate(name, ToggleItem(value=item.value, checked=item.value in wanted))

        elif isinstance(variant, RangeFilter) and (name in mins or name in maxs):
            low, high = mins.get(name), maxs.get(name)
            low = to_timestamp(low) if low not in (None, "") else None
            high = to_timestamp(high) if high not in (None, "") else None
            if (low, high) != (variant.min, variant.max):
                session.mutate(name, SetRange(min=low, max=high))

        elif isinstance(variant, SingleSelectFilter) and name in selects:
            selected = selects[name]
            if selected != variant.selected:
                session.mutate(name, SelectOption(selected=selected))


def register_table_callbacks(app: dash.Dash, ctx: AppConfig) -> None:
    # ---------------------------------------------------------
    # Filter modal: open / clear / apply / close
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Control.FILTER_MODAL, "is_open"),
        Output(IDs.Control.FILTER_BODY, "children"),
        Output(IDs.Store.FILTER_STATE, "data"),
        Output(IDs.Store.FILTER_SESSION, "data"),
        Input(IDs.Control.FILTER_BTN, "n_clicks"),
        Input(IDs.Control.FILTER_CLEAR, "n_clicks"),
        Input(IDs.Control.FILTER_APPLY, "n_clicks"),
        Input(IDs.Control.FILTER_CLOSE, "n_clicks"),
        State(IDs.Control.TABLE_SELECT, "value"),
        State({"type": IDs.Pattern.FILTER_CHECK, "column": ALL}, "value"),
        State({"type": IDs.Pattern.FILTER_CHECK, "column": ALL}, "id"),
        State({"type": IDs.Pattern.FILTER_MIN, "column": ALL}, "value"),
        State({"type": IDs.Pattern.FILTER_MIN, "column": ALL}, "id"),
        State({"type": IDs.Pattern.FILTER_MAX, "column": ALL}, "value"),
        State({"type": IDs.Pattern.FILTER_MAX, "column": ALL}, "id"),
        State({"type": IDs.Pattern.FILTER_SELECT, "column": ALL}, "value"),
        State({"type": IDs.Pattern.FILTER_SELECT, "column": ALL}, "id"),
        State(IDs.Store.FILTER_STATE, "data"),
        State(IDs.Store.FILTER_SESSION, "data"),
        prevent_initial_call=True,
    )
    def handle_filter_modal(
            _open_clicks, _clear_clicks, _apply_clicks, _close_clicks,
            table_name: Optional[str],
            check_values, check_ids,
            min_values, min_ids,
            max_values, max_ids,
            select_values, select_ids,
            filter_state: Optional[Dict[str, Any]],
            session_data: Optional[Dict[str, Any]],
    ):
        name = ctx.table_for(table_name).name
        view, _ = load_view(ctx, name, filter_state=filter_state)
        trigger = dash.ctx.triggered_id

        if trigger == IDs.Control.FILTER_BTN:
            session = view.filters.open()
            return True, build_filter_body(session.draft, view.schema), no_update, session.to_dict()

        if not session_data:
            return False, no_update, no_update, None

        session = view.filters.resume(session_data)

        if trigger == IDs.Control.FILTER_CLEAR:
            draft = session.clear()
            return True, build_filter_body(draft, view.schema), no_update, session.to_dict()

        if trigger == IDs.Control.FILTER_APPLY:
            stage_control_values(
                session,
                checks=_by_column(check_values, check_ids),
                mins=_by_column(min_values, min_ids),
                maxs=_by_column(max_values, max_ids),
                selects=_by_column(select_values, select_ids),
            )
            view.filters.apply()
            logger.info(
                "Filters applied",
                extra={"table": name, "active_filters": view.filters.badge_count},
            )
            return False, no_update, _with_table(filter_state, name, view.filters.to_dict()), None

        view.filters.close()
        return False, no_update, no_update, None

    # ---------------------------------------------------------
    # Header sorting and row selection
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Store.VIEW_STATE, "data", allow_duplicate=True),
        Input({"type": IDs.Pattern.SORT_HEADER, "column": ALL}, "n_clicks"),
        Input({"type": IDs.Pattern.ROW_SELECT, "column": ALL}, "value"),
        State(IDs.Control.TABLE_SELECT, "value"),
        State(IDs.Store.VIEW_STATE, "data"),
        prevent_initial_call=True,
    )
    def handle_table_clicks(_sort_clicks, _selected, table_name, view_state):
        trigger = dash.ctx.triggered_id
        if not trigger or not isinstance(trigger, dict):
            raise dash.exceptions.PreventUpdate

        name = ctx.table_for(table_name).name
        view, _ = load_view(ctx, name, view_state=view_state)
        before = view.to_dict()
        value = dash.ctx.triggered[0].get("value")

        if trigger.get("type") == IDs.Pattern.SORT_HEADER:
            # Freshly rendered headers fire with n_clicks=None
            if not value:
                raise dash.exceptions.PreventUpdate
            view.sort_by_key(trigger.get("column"))
        elif trigger.get("type") == IDs.Pattern.ROW_SELECT:
            view.select_row(int(trigger["column"]), bool(value))

        after = view.to_dict()
        if after == before:
            raise dash.exceptions.PreventUpdate
        return _with_table(view_state, name, after)

    # ---------------------------------------------------------
    # Table body, pagination and search
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Control.TABLE_CONTAINER, "children"),
        Output(IDs.Control.PAGINATION, "max_value"),
        Output(IDs.Control.PAGINATION, "active_page"),
        Output(IDs.Control.ROWS_PER_PAGE, "value"),
        Output(IDs.Control.FILTER_BADGE, "children"),
        Output(IDs.Control.ROW_COUNT, "children"),
        Output(IDs.Control.SEARCH_CONTAINER, "style"),
        Output(IDs.Control.FILTER_BTN, "style"),
        Output(IDs.Store.VIEW_STATE, "data"),
        Output(IDs.Store.PREFERENCES, "data"),
        Input(IDs.Control.TABLE_SELECT, "value"),
        Input(IDs.Control.SEARCH_INPUT, "value"),
        Input(IDs.Control.PAGINATION, "active_page"),
        Input(IDs.Control.ROWS_PER_PAGE, "value"),
        Input(IDs.Store.VIEW_STATE, "data"),
        Input(IDs.Store.FILTER_STATE, "data"),
        State(IDs.Store.PREFERENCES, "data"),
    )
    def render_table(table_name, query, active_page, rows_per_page, view_state, filter_state, preferences):
        def style(flag: bool) -> dict:
            return {} if flag else {"display": "none"}

        table = ctx.table_for(table_name)
        view, prefs = load_view(ctx, table.name, view_state, filter_state, preferences)
        before = view.to_dict()
        trigger = dash.ctx.triggered_id

        if trigger == IDs.Control.ROWS_PER_PAGE and rows_per_page:
            if int(rows_per_page) != view.pagination.rows_per_page:
                view.set_rows_per_page(int(rows_per_page))
        elif trigger == IDs.Control.PAGINATION and active_page:
            view.set_page(int(active_page) - 1)

        view.set_query(query if table.options.search_enabled else None)

        rows, total = view.current_page()
        start = view.pagination.page * view.pagination.rows_per_page
        count_text = f"{start + 1 if rows else 0}–{start + len(rows)} of {total}"

        after = view.to_dict()
        return (
            build_table(view, rows, table.options.no_data_message),
            view.pagination.last_page(total) + 1,
            view.pagination.page + 1,
            view.pagination.rows_per_page,
            view.filters.badge_count or None,
            count_text,
            style(table.options.search_enabled),
            style(table.options.filter_enabled),
            _with_table(view_state, table.name, after) if after != before else no_update,
            prefs.data if prefs.changed else no_update,
        )
