# ABOUTME: Repository classes for database access patterns.
# ABOUTME: ReferenceRepository (teams, organizations) and WeeklyUpdateRepository (root rows).

from collections.abc import Sequence
from datetime import UTC, date, datetime
from typing import Any
from uuid import uuid4

import structlog
from sqlalchemy import Row, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from weekly_pulse.db.models import Organization, Team, WeeklyUpdate

log = structlog.get_logger()


def dialect_insert(session: AsyncSession, model: type) -> Any:
    """Build a dialect-specific INSERT supporting ON CONFLICT clauses."""
    dialect = session.bind.dialect.name
    if dialect == "postgresql":
        return postgresql.insert(model)
    if dialect == "sqlite":
        return sqlite.insert(model)
    raise NotImplementedError(f"ON CONFLICT inserts are not supported for dialect '{dialect}'")


class ReferenceRepository:
    """Find-or-create access to the shared team and organization rows."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_team_id(self, name: str) -> int | None:
        """Get team id by exact name."""
        result = await self.session.execute(select(Team.id).where(Team.name == name))
        return result.scalar_one_or_none()

    async def get_organization_id(self, name: str) -> int | None:
        """Get organization id by exact name."""
        result = await self.session.execute(
            select(Organization.id).where(Organization.name == name)
        )
        return result.scalar_one_or_none()

    async def find_or_create_team(self, name: str) -> int:
        """Return the id of the team named ``name``, creating it if needed."""
        team_id = await self.get_team_id(name)
        if team_id is None:
            await self._insert_ignoring_conflict(Team, name)
            team_id = await self.get_team_id(name)
            log.info("team_resolved_by_insert", team=name, id=team_id)
        return team_id

    async def find_or_create_organization(self, name: str) -> int:
        """Return the id of the organization named ``name``, creating it if needed."""
        org_id = await self.get_organization_id(name)
        if org_id is None:
            await self._insert_ignoring_conflict(Organization, name)
            org_id = await self.get_organization_id(name)
            log.info("organization_resolved_by_insert", organization=name, id=org_id)
        return org_id

    async def resolve_team_and_organization(self, team_name: str, org_name: str) -> tuple[int, int]:
        """Resolve (team_id, organization_id), creating either row when missing.

        Names are matched exactly, without case normalization.
        """
        team_id = await self.find_or_create_team(team_name)
        org_id = await self.find_or_create_organization(org_name)
        return team_id, org_id

    async def list_teams(self) -> Sequence[Row]:
        """List all teams ordered by name."""
        result = await self.session.execute(
            select(Team.id, Team.name, Team.description).order_by(Team.name.asc())
        )
        return result.all()

    async def list_organizations(self) -> Sequence[Row]:
        """List all organizations ordered by name."""
        result = await self.session.execute(
            select(Organization.id, Organization.name, Organization.description).order_by(
                Organization.name.asc()
            )
        )
        return result.all()

    async def _insert_ignoring_conflict(self, model: type[Team] | type[Organization], name: str):
        # A concurrent request may insert the same name first; the unique index absorbs it.
        stmt = (
            dialect_insert(self.session, model)
            .values(name=name, created_at=datetime.now(UTC))
            .on_conflict_do_nothing(index_elements=["name"])
        )
        await self.session.execute(stmt)


def _root_query():
    return (
        select(
            WeeklyUpdate.id,
            WeeklyUpdate.user_id,
            WeeklyUpdate.week_date,
            WeeklyUpdate.top_3_bullets,
            WeeklyUpdate.status,
            WeeklyUpdate.created_at,
            WeeklyUpdate.updated_at,
            Team.name.label("team_name"),
            Organization.name.label("client_org"),
        )
        .join(Team, WeeklyUpdate.team_id == Team.id)
        .join(Organization, WeeklyUpdate.organization_id == Organization.id)
    )


class WeeklyUpdateRepository:
    """Repository for weekly update root rows.

    Reads return plain rows (not ORM instances) so that values written through
    bulk UPDATE statements are never shadowed by the session identity map.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_root(self, update_id: str) -> Row | None:
        """Get a root row joined with its team and organization names."""
        result = await self.session.execute(_root_query().where(WeeklyUpdate.id == update_id))
        return result.one_or_none()

    async def find_by_team_and_week(self, team_id: int, week_date: date) -> Row | None:
        """Get (id, user_id) of the root row holding a team's week, if any."""
        result = await self.session.execute(
            select(WeeklyUpdate.id, WeeklyUpdate.user_id)
            .where(WeeklyUpdate.team_id == team_id)
            .where(WeeklyUpdate.week_date == week_date)
        )
        return result.one_or_none()

    async def insert_root(
        self,
        user_id: str,
        team_id: int,
        organization_id: int,
        week_date: date,
        top_3_bullets: str,
        status: str | None = None,
    ) -> str | None:
        """Insert a root row. Returns its id, or None if the team's week is already taken."""
        now = datetime.now(UTC)
        stmt = (
            dialect_insert(self.session, WeeklyUpdate)
            .values(
                id=str(uuid4()),
                user_id=user_id,
                team_id=team_id,
                organization_id=organization_id,
                week_date=week_date,
                top_3_bullets=top_3_bullets,
                status=status or "draft",
                created_at=now,
                updated_at=now,
            )
            .on_conflict_do_nothing(index_elements=["team_id", "week_date"])
            .returning(WeeklyUpdate.id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update_root(
        self,
        update_id: str,
        values: dict[str, Any],
        owner_id: str | None = None,
    ) -> bool:
        """Update a root row's columns and bump ``updated_at``.

        When ``owner_id`` is given the update only applies to rows owned by that
        user. Returns True if a row was updated.
        """
        stmt = (
            update(WeeklyUpdate)
            .where(WeeklyUpdate.id == update_id)
            .values(**values, updated_at=datetime.now(UTC))
            .execution_options(synchronize_session=False)
        )
        if owner_id is not None:
            stmt = stmt.where(WeeklyUpdate.user_id == owner_id)
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def list_for_user(self, user_id: str) -> Sequence[Row]:
        """List a user's root rows ordered by week date descending."""
        result = await self.session.execute(
            _root_query()
            .where(WeeklyUpdate.user_id == user_id)
            .order_by(WeeklyUpdate.week_date.desc(), WeeklyUpdate.created_at.desc())
        )
        return result.all()
