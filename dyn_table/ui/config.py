from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from dyn_table.config.model import GlobalConfig, Table
from dyn_table.core.view import TableView


@dataclass
class AppConfig:
    config_root: Path
    global_config: GlobalConfig
    tables: List[Table] = field(default_factory=list)
    table_by_name: Dict[str, Table] = field(default_factory=dict)
    # Built once at startup and never changed; callbacks work on forks
    views: Dict[str, TableView] = field(default_factory=dict)
    default_table: Optional[Table] = None

    def validate(self) -> None:
        """Ensure all required services are attached before the app starts."""
        if self.default_table is None:
            raise RuntimeError("AppConfig.default_table must be set.")
        missing = [t.name for t in self.tables if t.name not in self.views]
        if missing:
            raise RuntimeError(f"No TableView built for tables: {', '.join(missing)}")

    def view_for(self, table_name: Optional[str]) -> TableView:
        """A fresh view of the table for one request."""
        return self.views[self.table_for(table_name).name].fork()

    def table_for(self, table_name: Optional[str]) -> Table:
        if table_name and table_name in self.table_by_name:
            return self.table_by_name[table_name]
        return self.default_table
