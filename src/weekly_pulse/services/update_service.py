# ABOUTME: Relational weekly update store: the save/load orchestrator and transaction boundary.
# ABOUTME: Resolves team/org, upserts the root row, and runs section mappers in one transaction.

from collections.abc import Mapping
from datetime import date
from typing import Any

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from weekly_pulse.db.repository import ReferenceRepository, WeeklyUpdateRepository
from weekly_pulse.db.sections import SECTION_MAPPERS
from weekly_pulse.db.session import get_session
from weekly_pulse.document import deep_merge, default_document, validate_save_request
from weekly_pulse.errors import (
    DuplicateWeekError,
    PersistenceError,
    UpdateNotFoundError,
    WeeklyPulseError,
)
from weekly_pulse.models import LoadedUpdate, ReferenceEntry, SavedUpdate, UpdateSummary

log = structlog.get_logger()


def _reference_entries(rows) -> list[ReferenceEntry]:
    return [ReferenceEntry(id=row.id, name=row.name, description=row.description) for row in rows]


class SqlUpdateStore:
    """Reads and writes complete weekly update documents in a relational database.

    Each ``save_update`` call is a single transaction: the root row and every
    section write commit together or not at all.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        self.session_factory = session_factory

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
        """Create or update the weekly update for a team's week.

        Args:
            user_id: Id of the authenticated author.
            week_date: Week date as a date or ``YYYY-MM-DD`` string.
            team_name: Team name, matched exactly.
            org_name: Client organization name, matched exactly.
            document: Weekly update document; only sections present are written.
            existing_update_id: Edit this update instead of matching by team and week.
            status: New status; unchanged when None (new updates start as "draft").

        Returns:
            The saved root row metadata with the submitted document.

        Raises:
            DocumentValidationError: If required fields or sections are invalid.
            UpdateNotFoundError: If ``existing_update_id`` is absent or not owned by the user.
            DuplicateWeekError: If another update already holds the team's week.
            PersistenceError: If any database operation fails.
        """
        parsed_date, sections = validate_save_request(
            user_id, week_date, team_name, org_name, document
        )
        top_3_bullets = document.get("top_3_bullets") or ""

        try:
            async with get_session(self.session_factory) as session:
                refs = ReferenceRepository(session)
                team_id, org_id = await refs.resolve_team_and_organization(team_name, org_name)

                updates = WeeklyUpdateRepository(session)
                update_id = await self._resolve_root(
                    updates,
                    user_id=user_id,
                    team_id=team_id,
                    org_id=org_id,
                    team_name=team_name,
                    week_date=parsed_date,
                    top_3_bullets=top_3_bullets,
                    status=status,
                    existing_update_id=existing_update_id,
                )

                for mapper in SECTION_MAPPERS:
                    if mapper.key in sections:
                        section_id = await mapper.save(session, update_id, sections[mapper.key])
                        log.debug("section_saved", section=mapper.key, section_id=section_id)

                root = await updates.get_root(update_id)
        except WeeklyPulseError as e:
            log.warning("save_update_rejected", user_id=user_id, error=str(e))
            raise
        except SQLAlchemyError as e:
            log.exception("save_update_failed", user_id=user_id, team=team_name)
            raise PersistenceError(f"Failed to save weekly update: {e}") from e

        log.info(
            "update_saved",
            id=root.id,
            user_id=user_id,
            team=team_name,
            week=parsed_date.isoformat(),
            sections=len(sections),
        )
        return SavedUpdate(
            id=root.id,
            user_id=root.user_id,
            week_date=root.week_date,
            team_name=root.team_name,
            client_org=root.client_org,
            status=root.status,
            created_at=root.created_at,
            updated_at=root.updated_at,
            data=dict(document),
        )

    async def _resolve_root(
        self,
        updates: WeeklyUpdateRepository,
        *,
        user_id: str,
        team_id: int,
        org_id: int,
        team_name: str,
        week_date: date,
        top_3_bullets: str,
        status: str | None,
        existing_update_id: str | None,
    ) -> str:
        """Find, update or create the root row and return its id."""
        values: dict[str, Any] = {"organization_id": org_id, "top_3_bullets": top_3_bullets}
        if status is not None:
            values["status"] = status

        holder = await updates.find_by_team_and_week(team_id, week_date)

        if existing_update_id:
            if holder is not None and holder.id != existing_update_id:
                raise DuplicateWeekError(holder.id, team_name, week_date)
            values.update(team_id=team_id, week_date=week_date)
            if not await updates.update_root(existing_update_id, values, owner_id=user_id):
                raise UpdateNotFoundError(existing_update_id, user_id)
            log.info("update_edited", id=existing_update_id)
            return existing_update_id

        if holder is None:
            new_id = await updates.insert_root(
                user_id, team_id, org_id, week_date, top_3_bullets, status
            )
            if new_id is not None:
                log.info("update_created", id=new_id, team=team_name, week=week_date.isoformat())
                return new_id
            # Lost a race with a concurrent first save of the same week
            holder = await updates.find_by_team_and_week(team_id, week_date)

        if holder.user_id != user_id:
            raise DuplicateWeekError(holder.id, team_name, week_date)

        await updates.update_root(holder.id, values)
        log.info("update_matched_by_week", id=holder.id, team=team_name)
        return holder.id

    async def get_update_by_id(self, update_id: str) -> LoadedUpdate | None:
        """Load a complete weekly update document.

        Returns None if the update does not exist. Sections never saved keep
        their defaults; empty lists are expanded to one placeholder item.

        Raises:
            PersistenceError: If any database read fails.
        """
        try:
            async with get_session(self.session_factory) as session:
                root = await WeeklyUpdateRepository(session).get_root(update_id)
                if root is None:
                    log.info("update_not_found", id=update_id)
                    return None

                data = default_document()
                data["meta"] = {
                    "date": root.week_date.isoformat(),
                    "team_name": root.team_name,
                    "client_org": root.client_org,
                }
                data["top_3_bullets"] = root.top_3_bullets

                for mapper in SECTION_MAPPERS:
                    section = await mapper.load(session, update_id)
                    if section is not None:
                        deep_merge(data[mapper.key], section)
        except SQLAlchemyError as e:
            log.exception("get_update_failed", id=update_id)
            raise PersistenceError(f"Failed to load weekly update {update_id}: {e}") from e

        return LoadedUpdate(
            id=root.id,
            user_id=root.user_id,
            week_date=root.week_date,
            team_name=root.team_name,
            client_org=root.client_org,
            status=root.status,
            created_at=root.created_at,
            updated_at=root.updated_at,
            data=data,
        )

    async def list_updates_for_user(self, user_id: str) -> list[UpdateSummary]:
        """List a user's updates, newest week first, without loading sections."""
        try:
            async with get_session(self.session_factory) as session:
                rows = await WeeklyUpdateRepository(session).list_for_user(user_id)
        except SQLAlchemyError as e:
            log.exception("list_updates_failed", user_id=user_id)
            raise PersistenceError(f"Failed to list updates for user {user_id}: {e}") from e

        log.debug("updates_listed", user_id=user_id, count=len(rows))
        return [
            UpdateSummary(
                id=row.id,
                week_date=row.week_date,
                team_name=row.team_name,
                client_org=row.client_org,
                status=row.status,
                created_at=row.created_at,
                updated_at=row.updated_at,
            )
            for row in rows
        ]

    async def list_teams(self) -> list[ReferenceEntry]:
        """List every known team, ordered by name."""
        try:
            async with get_session(self.session_factory) as session:
                rows = await ReferenceRepository(session).list_teams()
        except SQLAlchemyError as e:
            log.exception("list_teams_failed")
            raise PersistenceError(f"Failed to list teams: {e}") from e
        return _reference_entries(rows)

    async def list_organizations(self) -> list[ReferenceEntry]:
        """List every known client organization, ordered by name."""
        try:
            async with get_session(self.session_factory) as session:
                rows = await ReferenceRepository(session).list_organizations()
        except SQLAlchemyError as e:
            log.exception("list_organizations_failed")
            raise PersistenceError(f"Failed to list organizations: {e}") from e
        return _reference_entries(rows)
