# ABOUTME: Pydantic models for the weekly update document and repository results.
# ABOUTME: Defines section schemas with placeholder defaults, status enums, and saved/loaded views.

from datetime import date, datetime
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_SENTIMENT_SCORE = 3.5


class TrafficLight(str, Enum):
    """Severity of a risk or status of a goal."""

    GREEN = "Green"
    YELLOW = "Yellow"
    RED = "Red"


class WorkloadBalance(str, Enum):
    """How the team's workload felt this week."""

    TOO_MUCH = "TooMuch"
    JUST_RIGHT = "JustRight"
    TOO_LITTLE = "TooLittle"


class DeliveryRisk(str, Enum):
    """Delivery risk posed by a team member needing attention."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


def _placeholder_text() -> list[str]:
    return [""]


class Meta(BaseModel):
    """Report header. Always rebuilt from the root row on load."""

    date: str = ""
    team_name: str = ""
    client_org: str = ""


class TeamHealth(BaseModel):
    owner_input: str = ""
    sentiment_score: Annotated[float, Field(ge=1.0, le=5.0)] | None = DEFAULT_SENTIMENT_SCORE
    overall_status: str = ""


class DeliveryPerformance(BaseModel):
    accomplishments: list[str] = Field(default_factory=_placeholder_text)
    misses_delays: list[str] = Field(default_factory=_placeholder_text)
    workload_balance: WorkloadBalance = WorkloadBalance.JUST_RIGHT


class StakeholderEngagement(BaseModel):
    feedback_notes: list[str] = Field(default_factory=_placeholder_text)
    expectation_shift: list[str] = Field(default_factory=_placeholder_text)
    stakeholder_nps: float | None = None


class Risk(BaseModel):
    title: str = ""
    description: str = ""
    severity: TrafficLight = TrafficLight.GREEN


class RisksEscalations(BaseModel):
    risks: list[Risk] = Field(default_factory=lambda: [Risk()])
    escalations: list[str] = Field(default_factory=_placeholder_text)


class OpportunitiesWins(BaseModel):
    wins: list[str] = Field(default_factory=_placeholder_text)
    growth_ops: list[str] = Field(default_factory=_placeholder_text)


class SupportNeeded(BaseModel):
    requests: list[str] = Field(default_factory=_placeholder_text)


class Goal(BaseModel):
    description: str = ""
    status: TrafficLight = TrafficLight.GREEN
    update: str = ""


class PersonalUpdates(BaseModel):
    personal_wins: list[str] = Field(default_factory=_placeholder_text)
    reflections: list[str] = Field(default_factory=_placeholder_text)
    goals: list[Goal] = Field(default_factory=lambda: [Goal()])
    support_needed: str = ""


class TopContributor(BaseModel):
    name: str = ""
    achievement: str = ""
    recognition: str = ""


class MemberNeedingAttention(BaseModel):
    name: str = ""
    issue: str = ""
    support_plan: str = ""
    delivery_risk: DeliveryRisk = DeliveryRisk.LOW


class TeamMembersUpdates(BaseModel):
    people_changes: str = ""
    top_contributors: list[TopContributor] = Field(default_factory=lambda: [TopContributor()])
    members_needing_attention: list[MemberNeedingAttention] = Field(
        default_factory=lambda: [MemberNeedingAttention()]
    )


class WeeklyUpdateDocument(BaseModel):
    """A complete weekly update. Every field defaults to its empty placeholder."""

    meta: Meta = Field(default_factory=Meta)
    top_3_bullets: str = ""
    team_health: TeamHealth = Field(default_factory=TeamHealth)
    delivery_performance: DeliveryPerformance = Field(default_factory=DeliveryPerformance)
    stakeholder_engagement: StakeholderEngagement = Field(default_factory=StakeholderEngagement)
    risks_escalations: RisksEscalations = Field(default_factory=RisksEscalations)
    opportunities_wins: OpportunitiesWins = Field(default_factory=OpportunitiesWins)
    support_needed: SupportNeeded = Field(default_factory=SupportNeeded)
    personal_updates: PersonalUpdates = Field(default_factory=PersonalUpdates)
    team_members_updates: TeamMembersUpdates = Field(default_factory=TeamMembersUpdates)


SECTION_MODELS: dict[str, type[BaseModel]] = {
    "team_health": TeamHealth,
    "delivery_performance": DeliveryPerformance,
    "stakeholder_engagement": StakeholderEngagement,
    "risks_escalations": RisksEscalations,
    "opportunities_wins": OpportunitiesWins,
    "support_needed": SupportNeeded,
    "personal_updates": PersonalUpdates,
    "team_members_updates": TeamMembersUpdates,
}

SECTION_KEYS: tuple[str, ...] = tuple(SECTION_MODELS)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UpdateSummary(_CamelModel):
    """Lightweight listing entry for one weekly update."""

    id: str
    week_date: date
    team_name: str
    client_org: str
    status: str
    created_at: datetime
    updated_at: datetime


class SavedUpdate(_CamelModel):
    """Confirmation returned by a save, echoing the submitted document."""

    id: str
    user_id: str
    week_date: date
    team_name: str
    client_org: str
    status: str
    created_at: datetime
    updated_at: datetime
    data: dict[str, Any]


class LoadedUpdate(_CamelModel):
    """A fully populated weekly update document with its root metadata."""

    id: str
    user_id: str
    week_date: date
    team_name: str
    client_org: str
    status: str
    created_at: datetime
    updated_at: datetime
    data: dict[str, Any]


class ReferenceEntry(_CamelModel):
    """A team or client organization offered for selection."""

    id: int
    name: str
    description: str | None = None
