# ABOUTME: Database module initialization.
# ABOUTME: Exports core database components for the weekly update persistence layer.

from weekly_pulse.db.models import Base, Organization, Team, User, WeeklyUpdate
from weekly_pulse.db.repository import ReferenceRepository, WeeklyUpdateRepository
from weekly_pulse.db.sections import SECTION_MAPPERS, SectionMapper
from weekly_pulse.db.session import close_db, get_session, init_db

__all__ = [
    "Base",
    "Organization",
    "ReferenceRepository",
    "SECTION_MAPPERS",
    "SectionMapper",
    "Team",
    "User",
    "WeeklyUpdate",
    "WeeklyUpdateRepository",
    "close_db",
    "get_session",
    "init_db",
]
