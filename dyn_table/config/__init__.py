"""
JSON configuration: global settings and per-table definitions
"""

from .loader import load_global_config, load_records, load_tables, records_from_frame
from .model import GlobalConfig, Table, TableConfig, TableOptions

__all__ = [
    "GlobalConfig",
    "Table",
    "TableConfig",
    "TableOptions",
    "load_global_config",
    "load_records",
    "load_tables",
    "records_from_frame",
]
