from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

from .filter_model import FilterEdit, FilterModel, apply_edit, clear_model, model_from_dict, model_to_dict

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    OPEN = "open"
    CLOSED = "closed"


class FilterEditingSession:
    """
    Staged edits over a filter model while the filter UI is open.

    - open: the draft starts as a snapshot of the committed model
    - mutate: replaces one column's entry in the draft
    - clear: resets the draft, keeping the previous draft as a backup
    - apply: commits the draft and notifies on_apply
    - close: a clear that was never applied is rolled back, other
      unapplied edits are dropped

    Models are immutable, so snapshots share structure safely.
    """

    def __init__(
            self,
            committed: FilterModel,
            on_apply: Optional[Callable[[FilterModel], None]] = None,
    ) -> None:
        self._committed: FilterModel = committed
        self._draft: FilterModel = committed
        self._backup: Optional[FilterModel] = None
        self._was_cleared = False
        self._on_apply = on_apply
        self.state = SessionState.IDLE

    # -------------------------------------------------------------------------
    # Read-only views
    # -------------------------------------------------------------------------
    @property
    def committed(self) -> FilterModel:
        return self._committed

    @property
    def draft(self) -> FilterModel:
        return self._draft

    @property
    def backup(self) -> Optional[FilterModel]:
        return self._backup

    @property
    def was_cleared(self) -> bool:
        return self._was_cleared

    @property
    def is_open(self) -> bool:
        return self.state is SessionState.OPEN

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------
    def _ensure_open(self, action: str) -> bool:
        if self.state is SessionState.OPEN:
            return True
        logger.warning(
            "Ignoring filter session action outside an open session",
            extra={"action": action, "state": self.state.value},
        )
        return False

    def open(self, committed: Optional[FilterModel] = None) -> FilterModel:
        if committed is not None:
            self._committed = committed
        self._draft = self._committed
        self._backup = None
        self._was_cleared = False
        self.state = SessionState.OPEN
        return self._draft

    def mutate(self, column: str, edit: FilterEdit) -> FilterModel:
        if self._ensure_open("mutate"):
            self._draft = apply_edit(self._draft, column, edit)
        return self._draft

    def clear(self) -> FilterModel:
        if self._ensure_open("clear"):
            self._backup = self._draft
            self._was_cleared = True
            self._draft = clear_model(self._draft)
        return self._draft

    def apply(self) -> FilterModel:
        if not self._ensure_open("apply"):
            return self._committed

        self._committed = self._draft
        self._was_cleared = False
        self._backup = None
        logger.debug("Applied filter draft", extra={"n_columns": len(self._committed)})

        if self._on_apply is not None:
            self._on_apply(self._committed)
        return self._committed

    def close(self) -> None:
        if not self._ensure_open("close"):
            return

        if self._was_cleared and self._backup is not None:
            self._draft = self._backup
        else:
            self._draft = self._committed

        self._backup = None
        self._was_cleared = False
        self.state = SessionState.CLOSED

    # -------------------------------------------------------------------------
    # Serialisation
    # -------------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        """State of an in-progress session, for hosts that keep it between requests."""
        return {
            "state": self.state.value,
            "draft": model_to_dict(self._draft),
            "backup": model_to_dict(self._backup) if self._backup is not None else None,
            "was_cleared": self._was_cleared,
        }

    @classmethod
    def from_dict(
            cls,
            data: Optional[Mapping[str, Any]],
            committed: FilterModel,
            on_apply: Optional[Callable[[FilterModel], None]] = None,
    ) -> FilterEditingSession:
        """Rebuild a session saved with to_dict on top of the committed model."""
        session = cls(committed, on_apply=on_apply)
        if not data:
            return session

        try:
            session.state = SessionState(data.get("state", SessionState.IDLE.value))
        except ValueError:
            logger.warning("Ignoring saved filter session with unknown state", extra={"state": data.get("state")})
            return session

        session._draft = model_from_dict(data.get("draft"), committed)
        backup = data.get("backup")
        session._backup = model_from_dict(backup, committed) if backup is not None else None
        session._was_cleared = bool(data.get("was_cleared", False))
        return session
