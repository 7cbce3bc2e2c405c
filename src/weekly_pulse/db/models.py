# ABOUTME: SQLAlchemy ORM models for weekly update persistence.
# ABOUTME: One root table, one table per document section and one per repeated child list.

from datetime import UTC, date, datetime
from uuid import uuid4

from sqlalchemy import (
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from weekly_pulse.models import DeliveryRisk, TrafficLight, WorkloadBalance


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _enum_column(enum_cls: type, name: str) -> Enum:
    return Enum(*[member.value for member in enum_cls], name=name)


# Shared by risks.severity and goals.status
TRAFFIC_LIGHT_ENUM = _enum_column(TrafficLight, "traffic_light_enum")


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# Reference entities


class User(Base):
    """A report author. Rows are owned by the external auth system."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    username: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    role: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    def __repr__(self) -> str:
        return f"<User {self.username}>"


class Team(Base):
    """A delivery team, found or created by exact name."""

    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    def __repr__(self) -> str:
        return f"<Team {self.id}: {self.name}>"


class Organization(Base):
    """A client organization, found or created by exact name."""

    __tablename__ = "organizations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    def __repr__(self) -> str:
        return f"<Organization {self.id}: {self.name}>"


# Root


class WeeklyUpdate(Base):
    """The root row of one weekly update. At most one per (team, week)."""

    __tablename__ = "weekly_updates"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    team_id: Mapped[int] = mapped_column(Integer, ForeignKey("teams.id"), nullable=False)
    organization_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("organizations.id"), nullable=False
    )
    week_date: Mapped[date] = mapped_column(Date, nullable=False)
    top_3_bullets: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="draft")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    team: Mapped[Team] = relationship("Team")
    organization: Mapped[Organization] = relationship("Organization")

    __table_args__ = (
        UniqueConstraint("team_id", "week_date", name="uq_weekly_updates_team_week"),
        Index("ix_weekly_updates_user_week", "user_id", "week_date"),
    )

    def __repr__(self) -> str:
        return f"<WeeklyUpdate {self.id} team={self.team_id} week={self.week_date}>"


def _update_fk() -> Mapped[str]:
    return mapped_column(
        String(36),
        ForeignKey("weekly_updates.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )


def _created_at() -> Mapped[datetime]:
    return mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


# Sections (one row per weekly update) and their child lists


class TeamHealthRecord(Base):
    __tablename__ = "team_health"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    update_id: Mapped[str] = _update_fk()
    owner_input: Mapped[str] = mapped_column(Text, nullable=False, default="")
    sentiment_score: Mapped[float | None] = mapped_column(
        Numeric(3, 1, asdecimal=False), nullable=True
    )
    overall_status: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = _created_at()


class DeliveryPerformanceRecord(Base):
    __tablename__ = "delivery_performance"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    update_id: Mapped[str] = _update_fk()
    workload_balance: Mapped[str] = mapped_column(
        _enum_column(WorkloadBalance, "workload_balance_enum"),
        nullable=False,
        default=WorkloadBalance.JUST_RIGHT.value,
    )
    created_at: Mapped[datetime] = _created_at()


class DeliveryAccomplishment(Base):
    __tablename__ = "delivery_accomplishments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    performance_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("delivery_performance.id", ondelete="CASCADE"), nullable=False
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = _created_at()


class DeliveryMissDelay(Base):
    __tablename__ = "delivery_misses_delays"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    performance_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("delivery_performance.id", ondelete="CASCADE"), nullable=False
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = _created_at()


class StakeholderEngagementRecord(Base):
    __tablename__ = "stakeholder_engagement"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    update_id: Mapped[str] = _update_fk()
    stakeholder_nps: Mapped[float | None] = mapped_column(
        Numeric(5, 1, asdecimal=False), nullable=True
    )
    created_at: Mapped[datetime] = _created_at()


class StakeholderFeedback(Base):
    __tablename__ = "stakeholder_feedback"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    engagement_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("stakeholder_engagement.id", ondelete="CASCADE"), nullable=False
    )
    feedback: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = _created_at()


class StakeholderExpectationShift(Base):
    __tablename__ = "stakeholder_expectation_shifts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    engagement_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("stakeholder_engagement.id", ondelete="CASCADE"), nullable=False
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = _created_at()


class RisksEscalationsRecord(Base):
    __tablename__ = "risks_escalations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    update_id: Mapped[str] = _update_fk()
    created_at: Mapped[datetime] = _created_at()


class RiskRecord(Base):
    __tablename__ = "risks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    risks_escalations_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("risks_escalations.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    severity: Mapped[str] = mapped_column(
        TRAFFIC_LIGHT_ENUM,
        nullable=False,
        default=TrafficLight.GREEN.value,
    )
    created_at: Mapped[datetime] = _created_at()


class Escalation(Base):
    __tablename__ = "escalations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    risks_escalations_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("risks_escalations.id", ondelete="CASCADE"), nullable=False
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = _created_at()


class OpportunitiesWinsRecord(Base):
    __tablename__ = "opportunities_wins"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    update_id: Mapped[str] = _update_fk()
    created_at: Mapped[datetime] = _created_at()


class Win(Base):
    __tablename__ = "wins"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    opportunities_wins_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("opportunities_wins.id", ondelete="CASCADE"), nullable=False
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = _created_at()


class GrowthOpportunity(Base):
    __tablename__ = "growth_opportunities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    opportunities_wins_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("opportunities_wins.id", ondelete="CASCADE"), nullable=False
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = _created_at()


class SupportNeededRecord(Base):
    __tablename__ = "support_needed"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    update_id: Mapped[str] = _update_fk()
    created_at: Mapped[datetime] = _created_at()


class SupportRequest(Base):
    __tablename__ = "support_requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    support_needed_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("support_needed.id", ondelete="CASCADE"), nullable=False
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = _created_at()


class PersonalUpdatesRecord(Base):
    __tablename__ = "personal_updates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    update_id: Mapped[str] = _update_fk()
    support_needed: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = _created_at()


class PersonalWin(Base):
    __tablename__ = "personal_wins"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    personal_update_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("personal_updates.id", ondelete="CASCADE"), nullable=False
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = _created_at()


class Reflection(Base):
    __tablename__ = "reflections"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    personal_update_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("personal_updates.id", ondelete="CASCADE"), nullable=False
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = _created_at()


class GoalRecord(Base):
    __tablename__ = "goals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    personal_update_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("personal_updates.id", ondelete="CASCADE"), nullable=False
    )
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[str] = mapped_column(
        TRAFFIC_LIGHT_ENUM,
        nullable=False,
        default=TrafficLight.GREEN.value,
    )
    progress_update: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = _created_at()


class TeamMembersUpdatesRecord(Base):
    __tablename__ = "team_members_updates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    update_id: Mapped[str] = _update_fk()
    people_changes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = _created_at()


class TopContributorRecord(Base):
    __tablename__ = "top_contributors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    team_members_update_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("team_members_updates.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    achievement: Mapped[str] = mapped_column(Text, nullable=False, default="")
    recognition: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = _created_at()


class MemberNeedingAttentionRecord(Base):
    __tablename__ = "members_needing_attention"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    team_members_update_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("team_members_updates.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    issue: Mapped[str] = mapped_column(Text, nullable=False, default="")
    support_plan: Mapped[str] = mapped_column(Text, nullable=False, default="")
    delivery_risk: Mapped[str] = mapped_column(
        _enum_column(DeliveryRisk, "delivery_risk_enum"),
        nullable=False,
        default=DeliveryRisk.LOW.value,
    )
    created_at: Mapped[datetime] = _created_at()
