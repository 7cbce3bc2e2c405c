# ABOUTME: Main package for the Weekly Pulse leadership update system.
# ABOUTME: Exports the document helpers, result models and storage backends.

from weekly_pulse.config import get_settings
from weekly_pulse.document import deep_merge, default_document
from weekly_pulse.models import (
    LoadedUpdate,
    ReferenceEntry,
    SavedUpdate,
    UpdateSummary,
    WeeklyUpdateDocument,
)
from weekly_pulse.services import (
    InMemoryUpdateStore,
    SqlUpdateStore,
    UpdateStore,
    create_update_store,
)

__all__ = [
    "get_settings",
    "deep_merge",
    "default_document",
    "LoadedUpdate",
    "ReferenceEntry",
    "SavedUpdate",
    "UpdateSummary",
    "WeeklyUpdateDocument",
    "InMemoryUpdateStore",
    "SqlUpdateStore",
    "UpdateStore",
    "create_update_store",
]
