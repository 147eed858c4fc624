from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class PreferenceStore(ABC):
    """
    Opaque key-value store for user display preferences (browser storage,
    database...). Values are strings; callers encode/decode them.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass


class InMemoryPreferenceStore(PreferenceStore):
    """Per-process store, used for tests and when nothing should persist."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class BrowserPreferenceStore(InMemoryPreferenceStore):
    """
    Preferences kept in the user's browser (a dcc.Store with local storage).

    Built from the store's data at the start of a callback; when `changed`,
    `data` is written back to the store so the browser keeps it.
    """

    def __init__(self, data: Any = None):
        if not isinstance(data, dict):
            if data is not None:
                logger.warning("Ignoring browser preferences that are not an object")
            data = {}
        super().__init__({str(k): v for k, v in data.items() if isinstance(v, str)})
        self.changed = False

    def set(self, key: str, value: str) -> None:
        if self.get(key) != value:
            self.changed = True
        super().set(key, value)

    @property
    def data(self) -> Dict[str, str]:
        return dict(self._values)
