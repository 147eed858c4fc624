from __future__ import annotations

from typing import Any, List, Optional, TYPE_CHECKING

import dash_bootstrap_components as dbc
from dash import dcc, html

from dyn_table.core.columns import ColumnSpec, ColumnStyle, Schema, column_title
from dyn_table.core.filter_model import (
    FilterEntry,
    FilterModel,
    MultiCheckFilter,
    RangeFilter,
    SingleSelectFilter,
)
from dyn_table.core.sorting import SortDirection
from dyn_table.core.values import data_string, from_epoch_ms, is_renderable, render_entry
from dyn_table.core.view import ROWS_PER_PAGE_OPTIONS, Row, RowSelection, SelectMode, TableView
from dyn_table.ui.ids import IDs, pattern_id

if TYPE_CHECKING:
    from dyn_table.ui.config import AppConfig

_INPUT_TYPES = {
    ColumnStyle.NUMBER: "number",
    ColumnStyle.DATE: "date",
    ColumnStyle.DATETIME: "datetime-local",
    ColumnStyle.TIME: "time",
}

_INPUT_FORMATS = {
    ColumnStyle.DATE: "%Y-%m-%d",
    ColumnStyle.DATETIME: "%Y-%m-%dT%H:%M",
    ColumnStyle.TIME: "%H:%M",
}


# -------------------------------------------------------------------------
# Filter modal body
# -------------------------------------------------------------------------

def _option_label(label: Any, style: ColumnStyle) -> Any:
    if isinstance(label, str) or is_renderable(label):
        return label
    return data_string(label, style)


def bound_to_input(style: ColumnStyle, bound: Optional[float]) -> Any:
    """Show a stored range bound in the matching HTML input format."""
    if bound is None:
        return None
    if style == ColumnStyle.NUMBER:
        return bound
    ts = from_epoch_ms(bound)
    return ts.strftime(_INPUT_FORMATS[style]) if ts is not None else None


def _range_control(name: str, entry: FilterEntry, variant: RangeFilter) -> html.Div:
    input_type = _INPUT_TYPES.get(entry.style, "number")
    return dbc.Row(
        [
            dbc.Col(
                dbc.Input(
                    id=pattern_id(IDs.Pattern.FILTER_MIN, name),
                    type=input_type,
                    value=bound_to_input(entry.style, variant.min),
                    placeholder="From",
                )
            ),
            dbc.Col(
                dbc.Input(
                    id=pattern_id(IDs.Pattern.FILTER_MAX, name),
                    type=input_type,
                    value=bound_to_input(entry.style, variant.max),
                    placeholder="To",
                )
            ),
        ],
        className="g-2",
    )


def _check_control(name: str, entry: FilterEntry, variant: MultiCheckFilter) -> dcc.Checklist:
    return dcc.Checklist(
        id=pattern_id(IDs.Pattern.FILTER_CHECK, name),
        options=[
            {"label": _option_label(item.label, entry.style), "value": item.value}
            for item in variant.items
        ],
        value=variant.checked_values,
        inputClassName="me-2",
        labelClassName="d-block",
    )


def _select_control(name: str, entry: FilterEntry, variant: SingleSelectFilter) -> dcc.Dropdown:
    return dcc.Dropdown(
        id=pattern_id(IDs.Pattern.FILTER_SELECT, name),
        options=[
            {"label": _option_label(item.label, entry.style), "value": item.value}
            for item in variant.items
        ],
        value=variant.selected,
        placeholder="Select...",
        clearable=True,
    )


def build_filter_body(model: FilterModel, schema: Schema) -> List[Any]:
    sections: List[Any] = []
    for name, entry in model.items():
        variant = entry.variant
        if isinstance(variant, RangeFilter):
            control = _range_control(name, entry, variant)
        elif isinstance(variant, MultiCheckFilter):
            control = _check_control(name, entry, variant)
        else:
            control = _select_control(name, entry, variant)

        sections.append(
            html.Div(
                [html.H6(column_title(schema, name), className="fw-semibold"), control, html.Hr()],
                className="mb-2",
            )
        )
    return sections


def build_filter_modal() -> dbc.Modal:
    return dbc.Modal(
        [
            dbc.ModalHeader(dbc.ModalTitle("Filter"), close_button=False),
            dbc.ModalBody(id=IDs.Control.FILTER_BODY),
            dbc.ModalFooter(
                [
                    dbc.Button("Clear Filters", id=IDs.Control.FILTER_CLEAR, color="link"),
                    dbc.Button("Close", id=IDs.Control.FILTER_CLOSE, color="secondary", outline=True),
                    dbc.Button("Apply", id=IDs.Control.FILTER_APPLY, color="primary"),
                ]
            ),
        ],
        id=IDs.Control.FILTER_MODAL,
        is_open=False,
        backdrop="static",
        scrollable=True,
    )


# -------------------------------------------------------------------------
# Table
# -------------------------------------------------------------------------

def _sort_marker(view: TableView, name: str) -> str:
    if view.sort.by != name:
        return ""
    return " ▲" if view.sort.direction is SortDirection.ASCENDING else " ▼"


def _header_cell(view: TableView, column: ColumnSpec) -> html.Th:
    if not view.sort_enabled:
        return html.Th(column.display_title, className="fw-semibold")
    return html.Th(
        dbc.Button(
            column.display_title + _sort_marker(view, column.name),
            id=pattern_id(IDs.Pattern.SORT_HEADER, column.name),
            color="link",
            className="p-0 fw-semibold text-decoration-none",
        )
    )


def _select_cell(selection: RowSelection, row: Row) -> html.Td:
    control = dbc.RadioButton if selection.mode is SelectMode.SINGLE else dbc.Checkbox
    return html.Td(
        control(
            id=pattern_id(IDs.Pattern.ROW_SELECT, str(row.key)),
            value=selection.is_selected(row.key),
        ),
        style={"width": "2.5rem"},
    )


def build_table(view: TableView, rows: List[Row], no_data_message: str = "No data") -> Any:
    if not rows:
        return html.Div(no_data_message, className="text-muted p-4 text-center")

    selection = view.selection
    header_cells = [html.Th()] if selection is not None else []
    header_cells += [_header_cell(view, column) for column in view.schema]

    body = html.Tbody(
        [
            html.Tr(
                ([_select_cell(selection, row)] if selection is not None else [])
                + [html.Td(render_entry(column, row.record.get(column.name))) for column in view.schema],
                key=str(row.key),
            )
            for row in rows
        ]
    )
    return dbc.Table([html.Thead(html.Tr(header_cells)), body], hover=True, striped=True, responsive=True, size="sm")


# -------------------------------------------------------------------------
# Page
# -------------------------------------------------------------------------

def build_layout(ctx: "AppConfig") -> dbc.Container:
    default_table = ctx.default_table
    options = default_table.options

    navbar = dbc.NavbarSimple(brand=ctx.global_config.ui_title, color="primary", dark=True, className="mb-3")

    toolbar = dbc.Row(
        [
            dbc.Col(
                dcc.Dropdown(
                    id=IDs.Control.TABLE_SELECT,
                    options=[{"label": t.config.title, "value": t.name} for t in ctx.tables],
                    value=default_table.name,
                    clearable=False,
                ),
                md=3,
            ),
            dbc.Col(
                dbc.Input(
                    id=IDs.Control.SEARCH_INPUT,
                    type="search",
                    placeholder=options.search_placeholder,
                    debounce=True,
                ),
                id=IDs.Control.SEARCH_CONTAINER,
                md=6,
            ),
            dbc.Col(
                dbc.Button(
                    ["Filters ", dbc.Badge(id=IDs.Control.FILTER_BADGE, color="danger", pill=True)],
                    id=IDs.Control.FILTER_BTN,
                    color="secondary",
                    outline=True,
                ),
                md="auto",
            ),
        ],
        className="g-2 mb-3 align-items-center",
    )

    footer = dbc.Row(
        [
            dbc.Col(html.Small(id=IDs.Control.ROW_COUNT, className="text-muted"), md="auto"),
            dbc.Col(
                dcc.Dropdown(
                    id=IDs.Control.ROWS_PER_PAGE,
                    options=[{"label": f"{n} rows", "value": n} for n in ROWS_PER_PAGE_OPTIONS],
                    value=ctx.global_config.default_rows_per_page,
                    clearable=False,
                ),
                md=2,
            ),
            dbc.Col(
                dbc.Pagination(
                    id=IDs.Control.PAGINATION,
                    max_value=1,
                    active_page=1,
                    fully_expanded=False,
                    first_last=True,
                    previous_next=True,
                ),
                md="auto",
            ),
        ],
        className="g-2 align-items-center justify-content-end",
    )

    return dbc.Container(
        fluid=True,
        children=[
            navbar,
            # Per-browser stores
            dcc.Store(id=IDs.Store.VIEW_STATE, storage_type="session"),
            dcc.Store(id=IDs.Store.FILTER_STATE, storage_type="session"),
            dcc.Store(id=IDs.Store.FILTER_SESSION, storage_type="memory"),
            dcc.Store(id=IDs.Store.PREFERENCES, storage_type="local"),
            toolbar,
            build_filter_modal(),
            dbc.Card(dbc.CardBody(html.Div(id=IDs.Control.TABLE_CONTAINER))),
            html.Div(footer, className="mt-2"),
        ],
    )
