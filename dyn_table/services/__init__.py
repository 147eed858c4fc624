"""
Services around the engine: persisted user preferences
"""

from .preferences import RowsPerPagePreference
from .storage import BrowserPreferenceStore, InMemoryPreferenceStore, PreferenceStore

__all__ = [
    "PreferenceStore",
    "InMemoryPreferenceStore",
    "BrowserPreferenceStore",
    "RowsPerPagePreference",
]
