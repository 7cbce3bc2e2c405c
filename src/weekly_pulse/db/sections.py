# ABOUTME: Per-section mappers between weekly update document sections and their tables.
# ABOUTME: Each mapper upserts its section row, replaces child rows, and rebuilds it on load.

from collections.abc import Callable, Sequence
from typing import Any

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from weekly_pulse.db.models import (
    Base,
    DeliveryAccomplishment,
    DeliveryMissDelay,
    DeliveryPerformanceRecord,
    Escalation,
    GoalRecord,
    GrowthOpportunity,
    MemberNeedingAttentionRecord,
    OpportunitiesWinsRecord,
    PersonalUpdatesRecord,
    PersonalWin,
    Reflection,
    RiskRecord,
    RisksEscalationsRecord,
    StakeholderEngagementRecord,
    StakeholderExpectationShift,
    StakeholderFeedback,
    SupportNeededRecord,
    SupportRequest,
    TeamHealthRecord,
    TeamMembersUpdatesRecord,
    TopContributorRecord,
    Win,
)
from weekly_pulse.document import fill_placeholders, non_blank_items

log = structlog.get_logger()


class SectionMapper:
    """Persists one document section to its table and child tables.

    Subclasses set ``key`` (the document key) and ``model`` (the section table)
    and implement ``save`` and ``load`` explicitly for their fields.
    """

    key: str
    model: type[Base]

    async def save(self, session: AsyncSession, update_id: str, data: dict[str, Any]) -> int:
        """Upsert the section row, replace its children, and return the row id."""
        raise NotImplementedError

    async def load(self, session: AsyncSession, update_id: str) -> dict[str, Any] | None:
        """Rebuild the section, or return None if it was never saved."""
        raise NotImplementedError

    async def _find(self, session: AsyncSession, update_id: str) -> Any:
        result = await session.execute(select(self.model).where(self.model.update_id == update_id))
        return result.scalar_one_or_none()

    async def _upsert(self, session: AsyncSession, update_id: str, **columns: Any) -> Any:
        record = await self._find(session, update_id)
        if record is None:
            record = self.model(update_id=update_id, **columns)
            session.add(record)
        else:
            for name, value in columns.items():
                setattr(record, name, value)
        await session.flush()
        return record

    async def _replace_children(
        self,
        session: AsyncSession,
        child_model: type[Base],
        parent_column: str,
        parent_id: int,
        rows: list[dict[str, Any]] | None,
    ) -> None:
        # None means the list was not submitted; stored children stay as they are
        if rows is None:
            return
        await session.execute(
            delete(child_model).where(getattr(child_model, parent_column) == parent_id)
        )
        if rows:
            session.add_all([child_model(**{parent_column: parent_id}, **row) for row in rows])
            await session.flush()
        log.debug(
            "section_children_replaced",
            section=self.key,
            table=child_model.__tablename__,
            parent_id=parent_id,
            count=len(rows),
        )

    async def _load_children(
        self,
        session: AsyncSession,
        child_model: type[Base],
        parent_column: str,
        parent_id: int,
    ) -> Sequence[Any]:
        result = await session.execute(
            select(child_model)
            .where(getattr(child_model, parent_column) == parent_id)
            .order_by(child_model.created_at, child_model.id)
        )
        return result.scalars().all()

    def _columns(self, data: dict[str, Any], *names: str) -> dict[str, Any]:
        return {name: data[name] for name in names if name in data}

    def _rows(
        self, field: str, data: dict[str, Any], build: Callable[[Any], dict[str, Any]]
    ) -> list[dict[str, Any]] | None:
        if field not in data:
            return None
        return [build(item) for item in non_blank_items(self.key, field, data[field])]

    def _texts(
        self, field: str, data: dict[str, Any], column: str = "description"
    ) -> list[dict[str, Any]] | None:
        return self._rows(field, data, lambda text: {column: text})


class TeamHealthMapper(SectionMapper):
    key = "team_health"
    model = TeamHealthRecord

    async def save(self, session: AsyncSession, update_id: str, data: dict[str, Any]) -> int:
        record = await self._upsert(
            session,
            update_id,
            **self._columns(data, "owner_input", "sentiment_score", "overall_status"),
        )
        return record.id

    async def load(self, session: AsyncSession, update_id: str) -> dict[str, Any] | None:
        record = await self._find(session, update_id)
        if record is None:
            return None
        return {
            "owner_input": record.owner_input,
            "sentiment_score": record.sentiment_score,
            "overall_status": record.overall_status,
        }


class DeliveryPerformanceMapper(SectionMapper):
    key = "delivery_performance"
    model = DeliveryPerformanceRecord

    async def save(self, session: AsyncSession, update_id: str, data: dict[str, Any]) -> int:
        record = await self._upsert(
            session, update_id, **self._columns(data, "workload_balance")
        )
        await self._replace_children(
            session,
            DeliveryAccomplishment,
            "performance_id",
            record.id,
            self._texts("accomplishments", data),
        )
        await self._replace_children(
            session,
            DeliveryMissDelay,
            "performance_id",
            record.id,
            self._texts("misses_delays", data),
        )
        return record.id

    async def load(self, session: AsyncSession, update_id: str) -> dict[str, Any] | None:
        record = await self._find(session, update_id)
        if record is None:
            return None
        accomplishments = await self._load_children(
            session, DeliveryAccomplishment, "performance_id", record.id
        )
        misses = await self._load_children(session, DeliveryMissDelay, "performance_id", record.id)
        section = {
            "accomplishments": [row.description for row in accomplishments],
            "misses_delays": [row.description for row in misses],
            "workload_balance": record.workload_balance,
        }
        return fill_placeholders(self.key, section)


class StakeholderEngagementMapper(SectionMapper):
    key = "stakeholder_engagement"
    model = StakeholderEngagementRecord

    async def save(self, session: AsyncSession, update_id: str, data: dict[str, Any]) -> int:
        record = await self._upsert(
            session, update_id, **self._columns(data, "stakeholder_nps")
        )
        await self._replace_children(
            session,
            StakeholderFeedback,
            "engagement_id",
            record.id,
            self._texts("feedback_notes", data, column="feedback"),
        )
        await self._replace_children(
            session,
            StakeholderExpectationShift,
            "engagement_id",
            record.id,
            self._texts("expectation_shift", data),
        )
        return record.id

    async def load(self, session: AsyncSession, update_id: str) -> dict[str, Any] | None:
        record = await self._find(session, update_id)
        if record is None:
            return None
        feedback = await self._load_children(
            session, StakeholderFeedback, "engagement_id", record.id
        )
        shifts = await self._load_children(
            session, StakeholderExpectationShift, "engagement_id", record.id
        )
        section = {
            "feedback_notes": [row.feedback for row in feedback],
            "expectation_shift": [row.description for row in shifts],
            "stakeholder_nps": record.stakeholder_nps,
        }
        return fill_placeholders(self.key, section)


class RisksEscalationsMapper(SectionMapper):
    key = "risks_escalations"
    model = RisksEscalationsRecord

    async def save(self, session: AsyncSession, update_id: str, data: dict[str, Any]) -> int:
        record = await self._upsert(session, update_id)
        risks = self._rows(
            "risks",
            data,
            lambda risk: {
                "title": risk.get("title", ""),
                "description": risk.get("description", ""),
                "severity": risk.get("severity", "Green"),
            },
        )
        await self._replace_children(
            session, RiskRecord, "risks_escalations_id", record.id, risks
        )
        await self._replace_children(
            session,
            Escalation,
            "risks_escalations_id",
            record.id,
            self._texts("escalations", data),
        )
        return record.id

    async def load(self, session: AsyncSession, update_id: str) -> dict[str, Any] | None:
        record = await self._find(session, update_id)
        if record is None:
            return None
        risks = await self._load_children(session, RiskRecord, "risks_escalations_id", record.id)
        escalations = await self._load_children(
            session, Escalation, "risks_escalations_id", record.id
        )
        section = {
            "risks": [
                {"title": row.title, "description": row.description, "severity": row.severity}
                for row in risks
            ],
            "escalations": [row.description for row in escalations],
        }
        return fill_placeholders(self.key, section)


class OpportunitiesWinsMapper(SectionMapper):
    key = "opportunities_wins"
    model = OpportunitiesWinsRecord

    async def save(self, session: AsyncSession, update_id: str, data: dict[str, Any]) -> int:
        record = await self._upsert(session, update_id)
        await self._replace_children(
            session, Win, "opportunities_wins_id", record.id, self._texts("wins", data)
        )
        await self._replace_children(
            session,
            GrowthOpportunity,
            "opportunities_wins_id",
            record.id,
            self._texts("growth_ops", data),
        )
        return record.id

    async def load(self, session: AsyncSession, update_id: str) -> dict[str, Any] | None:
        record = await self._find(session, update_id)
        if record is None:
            return None
        wins = await self._load_children(session, Win, "opportunities_wins_id", record.id)
        growth = await self._load_children(
            session, GrowthOpportunity, "opportunities_wins_id", record.id
        )
        section = {
            "wins": [row.description for row in wins],
            "growth_ops": [row.description for row in growth],
        }
        return fill_placeholders(self.key, section)


class SupportNeededMapper(SectionMapper):
    key = "support_needed"
    model = SupportNeededRecord

    async def save(self, session: AsyncSession, update_id: str, data: dict[str, Any]) -> int:
        record = await self._upsert(session, update_id)
        await self._replace_children(
            session, SupportRequest, "support_needed_id", record.id, self._texts("requests", data)
        )
        return record.id

    async def load(self, session: AsyncSession, update_id: str) -> dict[str, Any] | None:
        record = await self._find(session, update_id)
        if record is None:
            return None
        requests = await self._load_children(
            session, SupportRequest, "support_needed_id", record.id
        )
        return fill_placeholders(self.key, {"requests": [row.description for row in requests]})


class PersonalUpdatesMapper(SectionMapper):
    key = "personal_updates"
    model = PersonalUpdatesRecord

    async def save(self, session: AsyncSession, update_id: str, data: dict[str, Any]) -> int:
        record = await self._upsert(session, update_id, **self._columns(data, "support_needed"))
        await self._replace_children(
            session,
            PersonalWin,
            "personal_update_id",
            record.id,
            self._texts("personal_wins", data),
        )
        await self._replace_children(
            session,
            Reflection,
            "personal_update_id",
            record.id,
            self._texts("reflections", data),
        )
        goals = self._rows(
            "goals",
            data,
            lambda goal: {
                "description": goal.get("description", ""),
                "status": goal.get("status", "Green"),
                "progress_update": goal.get("update", ""),
            },
        )
        await self._replace_children(session, GoalRecord, "personal_update_id", record.id, goals)
        return record.id

    async def load(self, session: AsyncSession, update_id: str) -> dict[str, Any] | None:
        record = await self._find(session, update_id)
        if record is None:
            return None
        wins = await self._load_children(session, PersonalWin, "personal_update_id", record.id)
        reflections = await self._load_children(
            session, Reflection, "personal_update_id", record.id
        )
        goals = await self._load_children(session, GoalRecord, "personal_update_id", record.id)
        section = {
            "personal_wins": [row.description for row in wins],
            "reflections": [row.description for row in reflections],
            "goals": [
                {
                    "description": row.description,
                    "status": row.status,
                    "update": row.progress_update,
                }
                for row in goals
            ],
            "support_needed": record.support_needed,
        }
        return fill_placeholders(self.key, section)


class TeamMembersUpdatesMapper(SectionMapper):
    key = "team_members_updates"
    model = TeamMembersUpdatesRecord

    async def save(self, session: AsyncSession, update_id: str, data: dict[str, Any]) -> int:
        record = await self._upsert(session, update_id, **self._columns(data, "people_changes"))
        contributors = self._rows(
            "top_contributors",
            data,
            lambda person: {
                "name": person["name"],
                "achievement": person.get("achievement", ""),
                "recognition": person.get("recognition", ""),
            },
        )
        await self._replace_children(
            session, TopContributorRecord, "team_members_update_id", record.id, contributors
        )
        attention = self._rows(
            "members_needing_attention",
            data,
            lambda person: {
                "name": person["name"],
                "issue": person.get("issue", ""),
                "support_plan": person.get("support_plan", ""),
                "delivery_risk": person.get("delivery_risk", "Low"),
            },
        )
        await self._replace_children(
            session, MemberNeedingAttentionRecord, "team_members_update_id", record.id, attention
        )
        return record.id

    async def load(self, session: AsyncSession, update_id: str) -> dict[str, Any] | None:
        record = await self._find(session, update_id)
        if record is None:
            return None
        contributors = await self._load_children(
            session, TopContributorRecord, "team_members_update_id", record.id
        )
        attention = await self._load_children(
            session, MemberNeedingAttentionRecord, "team_members_update_id", record.id
        )
        section = {
            "people_changes": record.people_changes,
            "top_contributors": [
                {"name": row.name, "achievement": row.achievement, "recognition": row.recognition}
                for row in contributors
            ],
            "members_needing_attention": [
                {
                    "name": row.name,
                    "issue": row.issue,
                    "support_plan": row.support_plan,
                    "delivery_risk": row.delivery_risk,
                }
                for row in attention
            ],
        }
        return fill_placeholders(self.key, section)


# Save and load order
SECTION_MAPPERS: tuple[SectionMapper, ...] = (
    TeamHealthMapper(),
    DeliveryPerformanceMapper(),
    StakeholderEngagementMapper(),
    RisksEscalationsMapper(),
    OpportunitiesWinsMapper(),
    SupportNeededMapper(),
    PersonalUpdatesMapper(),
    TeamMembersUpdatesMapper(),
)
