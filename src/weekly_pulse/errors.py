# ABOUTME: Exception hierarchy for weekly update persistence.
# ABOUTME: Separates validation, authorization/not-found, duplicate-week and storage failures.

from datetime import date


class WeeklyPulseError(Exception):
    """Base class for all weekly update errors."""


class DocumentValidationError(WeeklyPulseError, ValueError):
    """Raised when a save request is rejected before any database access."""

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        details = "; ".join(f"{field}: {problem}" for field, problem in errors.items())
        super().__init__(f"Invalid weekly update: {details}")


class UpdateNotFoundError(WeeklyPulseError):
    """Raised when an explicit update id does not exist or belongs to another user."""

    def __init__(self, update_id: str, user_id: str):
        self.update_id = update_id
        self.user_id = user_id
        super().__init__(f"Update {update_id} not found or not owned by user {user_id}")


class DuplicateWeekError(WeeklyPulseError):
    """Raised when a (team, week) pair is already held by another update."""

    def __init__(self, existing_id: str, team_name: str, week_date: date):
        self.existing_id = existing_id
        self.team_name = team_name
        self.week_date = week_date
        super().__init__(
            f"Team '{team_name}' already has update {existing_id} for week {week_date.isoformat()}"
        )


class PersistenceError(WeeklyPulseError):
    """Raised when a database operation fails; the transaction has been rolled back."""
