# ABOUTME: Pytest fixtures and configuration for Weekly Pulse tests.
# ABOUTME: Provides mock settings, an in-memory SQLite database, stores, and sample documents.

import copy
from collections.abc import AsyncGenerator
from typing import Any

import pytest
from pydantic import SecretStr
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from weekly_pulse.config import Settings
from weekly_pulse.db.session import create_session_factory, init_db
from weekly_pulse.services.memory_store import InMemoryUpdateStore
from weekly_pulse.services.update_service import SqlUpdateStore

SAMPLE_DOCUMENT: dict[str, Any] = {
    "top_3_bullets": "Sprint completed 🟢 | New feature launched 🟢 | Team morale high 🟢",
    "meta": {
        "date": "2025-05-12",
        "team_name": "Frontend Platform",
        "client_org": "Acme Corp",
    },
    "team_health": {
        "owner_input": "Team is doing well, high energy and good collaboration.",
        "sentiment_score": 4.2,
        "overall_status": "Team morale is high after completing the major milestone",
    },
    "delivery_performance": {
        "accomplishments": [
            "Completed new dashboard UI",
            "Fixed 12 critical bugs",
            "Improved load time by 30%",
        ],
        "misses_delays": ["API integration delayed due to third-party issues"],
        "workload_balance": "JustRight",
    },
    "stakeholder_engagement": {
        "feedback_notes": ["Client praised the new UI", "Stakeholders happy with progress"],
        "expectation_shift": ["Timeline extended for phase 2 due to scope increase"],
        "stakeholder_nps": 4.5,
    },
    "risks_escalations": {
        "risks": [
            {
                "title": "Third-party API reliability",
                "description": "External API has had intermittent outages",
                "severity": "Yellow",
            },
        ],
        "escalations": ["Need decision on feature prioritization for next sprint"],
    },
    "opportunities_wins": {
        "wins": ["Successfully launched new dashboard", "Received positive client feedback"],
        "growth_ops": ["Potential for AI-powered analytics in next phase"],
    },
    "support_needed": {
        "requests": ["Additional QA resource for next sprint"],
    },
    "personal_updates": {
        "personal_wins": ["Successfully led cross-team collaboration", "Mentored junior developer"],
        "reflections": ["Learned importance of early stakeholder alignment"],
        "goals": [
            {
                "description": "Improve team velocity by 10%",
                "status": "Green",
                "update": "On track with 8% improvement so far",
            },
        ],
        "support_needed": "Need guidance on handling competing priorities",
    },
    "team_members_updates": {
        "people_changes": "New developer joining next week",
        "top_contributors": [
            {
                "name": "Sarah Johnson",
                "achievement": "Led successful client demo that clarified scope",
                "recognition": "Team shoutout and gift card",
            },
        ],
        "members_needing_attention": [
            {
                "name": "James Smith",
                "issue": "Struggling with time management",
                "support_plan": "Daily check-ins and peer mentoring",
                "delivery_risk": "Medium",
            },
        ],
    },
}


@pytest.fixture
def mock_settings() -> Settings:
    """Create mock settings for testing."""
    return Settings(
        storage_backend="memory",
        db_host="db.internal",
        db_port=5433,
        db_name="pulse_test",
        db_user="pulse",
        db_password=SecretStr("test-password"),
        log_level="DEBUG",
    )


@pytest.fixture
def sample_document() -> dict[str, Any]:
    """A fully filled weekly update for Frontend Platform / Acme Corp."""
    return copy.deepcopy(SAMPLE_DOCUMENT)


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """In-memory SQLite engine with all tables created.

    StaticPool keeps a single connection so the in-memory database survives
    across sessions.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(db_engine)


@pytest.fixture
def sql_store(session_factory: async_sessionmaker[AsyncSession]) -> SqlUpdateStore:
    return SqlUpdateStore(session_factory)


@pytest.fixture
def memory_store() -> InMemoryUpdateStore:
    return InMemoryUpdateStore()
