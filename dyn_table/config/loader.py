from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from dyn_table.config.model import GlobalConfig, Table, TableConfig
from dyn_table.core.columns import ColumnSpec, ColumnStyle
from dyn_table.core.exceptions import ConfigError, SchemaError
from dyn_table.core.filter_model import Record
from dyn_table.core.view import DEFAULT_ROWS_PER_PAGE

logger = logging.getLogger(__name__)


def _resolve(root: Path, raw: str) -> Path:
    path = Path(raw)
    return path if path.is_absolute() else (root / path).resolve()


def load_global_config(root: Path) -> GlobalConfig:
    """
    Load configuration from a directory using the multi-file layout.

    Expected structure:

        root/
            global.json
            tables/
                people.json
                orders.json
                ...

    Each file in 'tables/' is parsed into a TableConfig. The resulting GlobalConfig includes:

    - ui_title: title for the UI, defaults to 'Data Table'
    - default_rows_per_page: page size used until the user picks one
    - tables: list of TableConfigs

    :param root: Directory containing 'global.json' and optionally 'tables/'.
    :return: A GlobalConfig instance.
    :raises FileNotFoundError: if global.json does not exist.
    :raises ConfigError: if global.json is not a JSON object or has bad values.
    """
    root = Path(root)
    logger.info("Loading global config", extra={"config_root": str(root)})

    global_path = root / "global.json"
    if not global_path.is_file():
        raise FileNotFoundError(f"File not found at {global_path}")

    try:
        with global_path.open() as f:
            raw_global = json.load(f)
    except ValueError as e:
        raise ConfigError(f"{global_path} is not valid JSON: {e}") from e

    if not isinstance(raw_global, dict):
        raise ConfigError(f"{global_path} must contain a JSON object")

    rows_per_page = raw_global.get("default_rows_per_page", DEFAULT_ROWS_PER_PAGE)
    if isinstance(rows_per_page, bool) or not isinstance(rows_per_page, int) or rows_per_page < 1:
        raise ConfigError(f"default_rows_per_page must be a positive integer, got {rows_per_page!r}")

    tables: List[TableConfig] = []
    tables_dir = root / "tables"
    if tables_dir.is_dir():
        for idx, config_file in enumerate(sorted(tables_dir.glob("*.json"))):
            try:
                with config_file.open() as f:
                    raw = json.load(f)
            except ValueError as e:
                logger.error(
                    "Skipping unreadable table config",
                    extra={"path": str(config_file), "error": str(e)},
                )
                continue
            tables.append(TableConfig.from_raw(raw, source_path=config_file, index=idx))

    return GlobalConfig(
        ui_title=raw_global.get("ui_title", "Data Table"),
        default_rows_per_page=rows_per_page,
        tables=tables,
    )


def records_from_frame(frame: pd.DataFrame, schema: Optional[Sequence[ColumnSpec]] = None) -> List[Record]:
    """
    Turn a DataFrame into the list of dict records the engine works on.

    Date-styled columns in the schema are parsed to Timestamps; missing
    cells (NaN/NaT) become None.
    """
    frame = frame.copy()
    for column in schema or ():
        if column.name not in frame.columns:
            continue
        if column.style in (ColumnStyle.DATE, ColumnStyle.DATETIME):
            frame[column.name] = pd.to_datetime(frame[column.name], errors="coerce")

    frame = frame.astype(object).where(frame.notna(), None)
    records: List[Dict[str, Any]] = frame.to_dict(orient="records")

    # Unwrap numpy scalars left in object columns
    return [
        {k: (v.item() if isinstance(v, np.generic) else v) for k, v in record.items()}
        for record in records
    ]


def load_records(path: Path, schema: Optional[Sequence[ColumnSpec]] = None) -> List[Record]:
    frame = pd.read_csv(path)
    return records_from_frame(frame, schema)


def load_table(cfg: TableConfig, root: Path) -> Table:
    """
    Resolve a TableConfig into a Table.

    :raises ConfigError: if the config is incomplete or its data file can't be read
    """
    if "file" not in cfg.raw:
        raise ConfigError(f"Table '{cfg.name}' has no 'file'")

    try:
        schema = cfg.columns
        options = cfg.options
    except (SchemaError, ValueError, TypeError, AttributeError) as e:
        raise ConfigError(f"Table '{cfg.name}' is invalid: {e}") from e

    if not schema:
        raise ConfigError(f"Table '{cfg.name}' defines no columns")

    path = _resolve(root, str(cfg.file))
    if not path.is_file():
        raise ConfigError(f"Data file for table '{cfg.name}' not found at {path}")

    try:
        records = load_records(path, schema)
    except (OSError, ValueError) as e:
        raise ConfigError(f"Could not read data for table '{cfg.name}': {e}") from e

    logger.info(
        "Loaded table",
        extra={"table": cfg.name, "n_records": len(records), "n_columns": len(schema)},
    )
    return Table(config=cfg, schema=schema, records=records, options=options)


def load_tables(root: Path) -> Tuple[GlobalConfig, List[Table]]:
    """
    Load the global configuration and every table it lists.

    Main entrypoint used by the UI.

    1. Loads the GlobalConfig from 'root'.
    2. Resolves each TableConfig with `load_table`.
    3. Skips any table whose config is invalid, logging the error.

    :param root: Path to config directory.
    :return: A tuple of (GlobalConfig, List[Table]).
    :raises RuntimeError: if no valid tables could be loaded.
    """
    root = Path(root)
    global_config = load_global_config(root)

    tables: List[Table] = []
    for cfg in global_config.tables:
        try:
            tables.append(load_table(cfg, root))
        except ConfigError as e:
            logger.error(
                "Skipping table due to config error",
                extra={"table": cfg.name, "path": str(cfg.source_path), "error": str(e)},
            )

    if not tables:
        raise RuntimeError(f"No valid tables could be loaded from {root}")

    return global_config, tables
