# ABOUTME: Service layer for weekly update persistence.
# ABOUTME: Exports the storage backends and the configuration-driven factory.

from weekly_pulse.services.memory_store import InMemoryUpdateStore
from weekly_pulse.services.store import UpdateStore, create_update_store
from weekly_pulse.services.update_service import SqlUpdateStore

__all__ = [
    "InMemoryUpdateStore",
    "SqlUpdateStore",
    "UpdateStore",
    "create_update_store",
]
