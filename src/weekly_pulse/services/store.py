# ABOUTME: Storage backend interface for weekly updates and configuration-driven selection.
# ABOUTME: Both relational and in-memory backends satisfy the UpdateStore protocol.

from collections.abc import Mapping
from datetime import date
from typing import Any, Protocol

import structlog

from weekly_pulse.config import Settings, get_settings
from weekly_pulse.models import LoadedUpdate, ReferenceEntry, SavedUpdate, UpdateSummary
from weekly_pulse.services.memory_store import InMemoryUpdateStore
from weekly_pulse.services.update_service import SqlUpdateStore

log = structlog.get_logger()


class UpdateStore(Protocol):
    """Read/write access to complete weekly update documents."""

    async def save_update(
        self,
        user_id: str,
        week_date: date | str,
        team_name: str,
        org_name: str,
        document: Mapping[str, Any],
        existing_update_id: str | None = None,
        status: str | None = None,
    ) -> SavedUpdate: ...

    async def get_update_by_id(self, update_id: str) -> LoadedUpdate | None: ...

    async def list_updates_for_user(self, user_id: str) -> list[UpdateSummary]: ...

    async def list_teams(self) -> list[ReferenceEntry]: ...

    async def list_organizations(self) -> list[ReferenceEntry]: ...


def create_update_store(settings: Settings | None = None) -> UpdateStore:
    """Build the storage backend named by ``settings.storage_backend``."""
    settings = settings or get_settings()
    if settings.storage_backend == "memory":
        log.info("update_store_selected", backend="memory")
        return InMemoryUpdateStore()
    log.info("update_store_selected", backend="postgres")
    return SqlUpdateStore()
