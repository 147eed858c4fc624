from __future__ import annotations

import logging
from functools import partial
from pathlib import Path
from typing import List

import dash_bootstrap_components as dbc
from dash import Dash

from dyn_table.config.loader import load_tables
from dyn_table.core.view import TableView
from dyn_table.ui.callbacks import register_table_callbacks
from dyn_table.ui.config import AppConfig
from dyn_table.ui.layout import build_layout

logger = logging.getLogger(__name__)


def _log_selection(table_name: str, selected: List[int]) -> None:
    logger.info("Rows selected", extra={"table": table_name, "selected": selected})


def create_dash_app(config_root: Path | str = Path("config")) -> Dash:
    config_root = Path(config_root)

    # 1) Load config + data
    global_config, tables = load_tables(config_root)

    # 2) One read-only TableView template per table; user state lives in the browser
    views = {
        table.name: TableView(
            table.records,
            table.schema,
            sort_by=table.options.sort_by,
            sort_order=table.options.sort_order,
            options=table.options.view_options(),
            on_select=partial(_log_selection, table.name),
        )
        for table in tables
    }

    # 3) App context
    ctx = AppConfig(
        config_root=config_root,
        global_config=global_config,
        tables=tables,
        table_by_name={t.name: t for t in tables},
        views=views,
        default_table=tables[0],
    )
    ctx.validate()

    logger.info(
        "Starting table host",
        extra={"n_tables": len(tables), "config_root": str(config_root)},
    )

    app = Dash(__name__, external_stylesheets=[dbc.themes.FLATLY])
    app.title = global_config.ui_title
    app.layout = build_layout(ctx)

    register_table_callbacks(app, ctx)

    return app
