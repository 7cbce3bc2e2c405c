# ABOUTME: Unit tests for ReferenceRepository and WeeklyUpdateRepository with a mocked session.
# ABOUTME: Verifies find-or-create flow, dialect dispatch and ownership-scoped root updates.

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql

from weekly_pulse.db.models import Team, WeeklyUpdate
from weekly_pulse.db.repository import (
    ReferenceRepository,
    WeeklyUpdateRepository,
    dialect_insert,
)


def _scalar_result(value) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


@pytest.fixture
def mock_session() -> AsyncMock:
    """Create a mock async session bound to a PostgreSQL dialect."""
    session = AsyncMock()
    session.add = MagicMock()
    session.bind = MagicMock()
    session.bind.dialect.name = "postgresql"
    return session


class TestDialectInsert:
    """Tests for dialect-specific INSERT construction."""

    def test_postgresql(self, mock_session: AsyncMock) -> None:
        stmt = dialect_insert(mock_session, Team)
        assert hasattr(stmt, "on_conflict_do_nothing")

    def test_sqlite(self, mock_session: AsyncMock) -> None:
        mock_session.bind.dialect.name = "sqlite"
        stmt = dialect_insert(mock_session, Team)
        assert hasattr(stmt, "on_conflict_do_nothing")

    def test_unsupported_dialect(self, mock_session: AsyncMock) -> None:
        mock_session.bind.dialect.name = "mssql"
        with pytest.raises(NotImplementedError):
            dialect_insert(mock_session, Team)


class TestReferenceRepository:
    """Tests for team and organization find-or-create."""

    async def test_existing_team_not_inserted(self, mock_session: AsyncMock) -> None:
        mock_session.execute.return_value = _scalar_result(7)
        repo = ReferenceRepository(mock_session)

        team_id = await repo.find_or_create_team("Frontend Platform")

        assert team_id == 7
        mock_session.execute.assert_awaited_once()

    async def test_missing_team_inserted_then_reselected(self, mock_session: AsyncMock) -> None:
        mock_session.execute.side_effect = [
            _scalar_result(None),  # lookup
            MagicMock(),  # insert ... on conflict do nothing
            _scalar_result(11),  # reselect
        ]
        repo = ReferenceRepository(mock_session)

        team_id = await repo.find_or_create_team("New Team")

        assert team_id == 11
        assert mock_session.execute.await_count == 3
        insert_stmt = mock_session.execute.await_args_list[1].args[0]
        compiled = str(insert_stmt.compile(dialect=postgresql.dialect()))
        assert "ON CONFLICT (name) DO NOTHING" in compiled

    async def test_resolve_team_and_organization(self, mock_session: AsyncMock) -> None:
        mock_session.execute.side_effect = [_scalar_result(3), _scalar_result(5)]
        repo = ReferenceRepository(mock_session)

        assert await repo.resolve_team_and_organization("Team", "Org") == (3, 5)

    async def test_list_teams_ordered_by_name(self, mock_session: AsyncMock) -> None:
        rows = [(2, "Data", None), (1, "Platform", None)]
        result = MagicMock()
        result.all.return_value = rows
        mock_session.execute.return_value = result
        repo = ReferenceRepository(mock_session)

        assert await repo.list_teams() == rows
        stmt = mock_session.execute.await_args.args[0]
        compiled = str(stmt.compile(dialect=postgresql.dialect()))
        assert "ORDER BY teams.name ASC" in compiled

    async def test_list_organizations_ordered_by_name(self, mock_session: AsyncMock) -> None:
        result = MagicMock()
        result.all.return_value = []
        mock_session.execute.return_value = result
        repo = ReferenceRepository(mock_session)

        assert await repo.list_organizations() == []
        stmt = mock_session.execute.await_args.args[0]
        compiled = str(stmt.compile(dialect=postgresql.dialect()))
        assert "ORDER BY organizations.name ASC" in compiled


class TestWeeklyUpdateRepository:
    """Tests for root row access."""

    async def test_insert_root_returns_none_on_conflict(self, mock_session: AsyncMock) -> None:
        mock_session.execute.return_value = _scalar_result(None)
        repo = WeeklyUpdateRepository(mock_session)

        result = await repo.insert_root("U1", 1, 2, date(2025, 5, 12), "bullets")

        assert result is None
        stmt = mock_session.execute.await_args.args[0]
        compiled = str(stmt.compile(dialect=postgresql.dialect()))
        assert "ON CONFLICT (team_id, week_date) DO NOTHING" in compiled
        assert "RETURNING" in compiled

    async def test_update_root_scoped_to_owner(self, mock_session: AsyncMock) -> None:
        result = MagicMock()
        result.rowcount = 0
        mock_session.execute.return_value = result
        repo = WeeklyUpdateRepository(mock_session)

        updated = await repo.update_root("u-1", {"top_3_bullets": "x"}, owner_id="U2")

        assert updated is False
        stmt = mock_session.execute.await_args.args[0]
        compiled = str(stmt.compile(dialect=postgresql.dialect()))
        assert "weekly_updates.user_id" in compiled
        assert "updated_at" in compiled

    async def test_update_root_without_owner(self, mock_session: AsyncMock) -> None:
        result = MagicMock()
        result.rowcount = 1
        mock_session.execute.return_value = result
        repo = WeeklyUpdateRepository(mock_session)

        assert await repo.update_root("u-1", {"top_3_bullets": "x"}) is True
        stmt = mock_session.execute.await_args.args[0]
        compiled = str(stmt.compile(dialect=postgresql.dialect()))
        assert "weekly_updates.user_id" not in compiled

    async def test_get_root_not_found(self, mock_session: AsyncMock) -> None:
        result = MagicMock()
        result.one_or_none.return_value = None
        mock_session.execute.return_value = result
        repo = WeeklyUpdateRepository(mock_session)

        assert await repo.get_root("missing") is None

    def test_model_columns(self) -> None:
        assert {"team_id", "week_date", "user_id"} <= set(WeeklyUpdate.__table__.columns.keys())
