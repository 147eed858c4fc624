from __future__ import annotations

import json
import logging

from dyn_table.core.view import DEFAULT_ROWS_PER_PAGE
from dyn_table.services.storage import PreferenceStore

logger = logging.getLogger(__name__)

ROWS_PER_PAGE_KEY = "rowsPerPage"


class RowsPerPagePreference:
    """
    The user's rows-per-page choice, read when a table is first shown and
    written whenever they change it.
    """

    def __init__(self, store: PreferenceStore, default: int = DEFAULT_ROWS_PER_PAGE):
        self.store_backend = store
        self.default = default

    def retrieve(self) -> int:
        raw = self.store_backend.get(ROWS_PER_PAGE_KEY)
        if raw is None:
            return self.default

        try:
            value = json.loads(raw)
        except ValueError:
            value = None

        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            logger.warning(
                "Ignoring malformed rows-per-page preference",
                extra={"stored": raw},
            )
            return self.default
        return value

    def store(self, rows_per_page: int) -> None:
        self.store_backend.set(ROWS_PER_PAGE_KEY, json.dumps(int(rows_per_page)))
