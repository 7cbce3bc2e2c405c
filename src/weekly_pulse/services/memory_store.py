# ABOUTME: Process-local weekly update store for demos and tests.
# ABOUTME: Mirrors the relational store's validation, ownership policy and placeholder expansion.

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Any
from uuid import uuid4

import structlog

from weekly_pulse.document import (
    deep_merge,
    default_document,
    drop_blank_items,
    fill_placeholders,
    validate_save_request,
)
from weekly_pulse.errors import DuplicateWeekError, UpdateNotFoundError
from weekly_pulse.models import (
    SECTION_KEYS,
    LoadedUpdate,
    ReferenceEntry,
    SavedUpdate,
    UpdateSummary,
)

log = structlog.get_logger()


@dataclass
class StoredUpdate:
    """One weekly update held in memory, with blank items already removed."""

    id: str
    user_id: str
    team_name: str
    client_org: str
    week_date: date
    top_3_bullets: str
    status: str
    created_at: datetime
    updated_at: datetime
    sections: dict[str, dict[str, Any]] = field(default_factory=dict)


class InMemoryUpdateStore:
    """Weekly update store backed by a dict owned by the instance."""

    def __init__(self) -> None:
        self._updates: dict[str, StoredUpdate] = {}
        # name -> id, ids assigned in creation order
        self._teams: dict[str, int] = {}
        self._organizations: dict[str, int] = {}

    def _find_by_team_and_week(self, team_name: str, week_date: date) -> StoredUpdate | None:
        for stored in self._updates.values():
            if stored.team_name == team_name and stored.week_date == week_date:
                return stored
        return None

    async def save_update(
        self,
        user_id: str,
        week_date: date | str,
        team_name: str,
        org_name: str,
        document: Mapping[str, Any],
        existing_update_id: str | None = None,
        status: str | None = None,
    ) -> SavedUpdate:
        """Create or update a weekly update. Same contract as ``SqlUpdateStore.save_update``."""
        parsed_date, sections = validate_save_request(
            user_id, week_date, team_name, org_name, document
        )
        now = datetime.now(UTC)
        holder = self._find_by_team_and_week(team_name, parsed_date)

        if existing_update_id:
            if holder is not None and holder.id != existing_update_id:
                raise DuplicateWeekError(holder.id, team_name, parsed_date)
            target = self._updates.get(existing_update_id)
            if target is None or target.user_id != user_id:
                raise UpdateNotFoundError(existing_update_id, user_id)
        elif holder is not None:
            if holder.user_id != user_id:
                raise DuplicateWeekError(holder.id, team_name, parsed_date)
            target = holder
        else:
            target = StoredUpdate(
                id=str(uuid4()),
                user_id=user_id,
                team_name=team_name,
                client_org=org_name,
                week_date=parsed_date,
                top_3_bullets="",
                status="draft",
                created_at=now,
                updated_at=now,
            )

        # Build the new state completely before publishing it
        updated = copy.deepcopy(target)
        updated.team_name = team_name
        updated.client_org = org_name
        updated.week_date = parsed_date
        updated.top_3_bullets = document.get("top_3_bullets") or ""
        if status is not None:
            updated.status = status
        updated.updated_at = now
        for key, section in sections.items():
            # Keys not submitted keep their stored values
            updated.sections.setdefault(key, {}).update(drop_blank_items(key, section))
        self._updates[updated.id] = updated
        self._teams.setdefault(team_name, len(self._teams) + 1)
        self._organizations.setdefault(org_name, len(self._organizations) + 1)

        log.info("update_saved", id=updated.id, user_id=user_id, backend="memory")
        return SavedUpdate(
            id=updated.id,
            user_id=updated.user_id,
            week_date=updated.week_date,
            team_name=updated.team_name,
            client_org=updated.client_org,
            status=updated.status,
            created_at=updated.created_at,
            updated_at=updated.updated_at,
            data=dict(document),
        )

    async def get_update_by_id(self, update_id: str) -> LoadedUpdate | None:
        """Load a weekly update, expanding empty lists to one placeholder item."""
        stored = self._updates.get(update_id)
        if stored is None:
            log.info("update_not_found", id=update_id, backend="memory")
            return None

        data = default_document()
        data["meta"] = {
            "date": stored.week_date.isoformat(),
            "team_name": stored.team_name,
            "client_org": stored.client_org,
        }
        data["top_3_bullets"] = stored.top_3_bullets
        for key in SECTION_KEYS:
            if key in stored.sections:
                section = fill_placeholders(key, copy.deepcopy(stored.sections[key]))
                deep_merge(data[key], section)

        return LoadedUpdate(
            id=stored.id,
            user_id=stored.user_id,
            week_date=stored.week_date,
            team_name=stored.team_name,
            client_org=stored.client_org,
            status=stored.status,
            created_at=stored.created_at,
            updated_at=stored.updated_at,
            data=data,
        )

    async def list_updates_for_user(self, user_id: str) -> list[UpdateSummary]:
        """List a user's updates, newest week first."""
        owned = sorted(
            (stored for stored in self._updates.values() if stored.user_id == user_id),
            key=lambda stored: (stored.week_date, stored.created_at),
            reverse=True,
        )
        return [
            UpdateSummary(
                id=stored.id,
                week_date=stored.week_date,
                team_name=stored.team_name,
                client_org=stored.client_org,
                status=stored.status,
                created_at=stored.created_at,
                updated_at=stored.updated_at,
            )
            for stored in owned
        ]

    async def list_teams(self) -> list[ReferenceEntry]:
        """List every team seen by a save, ordered by name."""
        return [ReferenceEntry(id=id_, name=name) for name, id_ in sorted(self._teams.items())]

    async def list_organizations(self) -> list[ReferenceEntry]:
        """List every organization seen by a save, ordered by name."""
        return [
            ReferenceEntry(id=id_, name=name) for name, id_ in sorted(self._organizations.items())
        ]
