# ABOUTME: Document-level helpers for weekly updates: defaults, deep merge, blank filtering.
# ABOUTME: Shared by the relational and in-memory stores so both expand placeholders identically.

import copy
from collections.abc import Callable, Mapping
from datetime import date
from typing import Any

from pydantic import ValidationError

from weekly_pulse.errors import DocumentValidationError
from weekly_pulse.models import SECTION_KEYS, SECTION_MODELS, WeeklyUpdateDocument


def default_document() -> dict[str, Any]:
    """Build a fully populated default document.

    Every section is present and every repeated list holds exactly one
    placeholder item, so consumers never need to check for missing keys.
    A new object is returned on each call.
    """
    return WeeklyUpdateDocument().model_dump(mode="json")


def deep_merge(target: dict[str, Any], source: Mapping[str, Any]) -> dict[str, Any]:
    """Merge ``source`` onto ``target`` in place and return ``target``.

    Mappings are merged recursively. Lists and scalars overwrite the target
    value, except ``None`` which never replaces an existing value.
    """
    for key, value in source.items():
        if isinstance(value, Mapping):
            existing = target.get(key)
            if not isinstance(existing, dict):
                existing = {}
                target[key] = existing
            deep_merge(existing, value)
        elif value is not None:
            target[key] = value
    return target


def is_blank(value: Any) -> bool:
    """True for None or strings that are empty after trimming."""
    return value is None or not str(value).strip()


def is_blank_risk(risk: Mapping[str, Any]) -> bool:
    return is_blank(risk.get("title")) and is_blank(risk.get("description"))


def is_blank_goal(goal: Mapping[str, Any]) -> bool:
    return is_blank(goal.get("description")) and is_blank(goal.get("update"))


def is_blank_person(person: Mapping[str, Any]) -> bool:
    """Contributors and members needing attention are identified by name."""
    return is_blank(person.get("name"))


# (section, list field) -> blank predicate for that list's items
LIST_FIELDS: dict[tuple[str, str], Callable[[Any], bool]] = {
    ("delivery_performance", "accomplishments"): is_blank,
    ("delivery_performance", "misses_delays"): is_blank,
    ("stakeholder_engagement", "feedback_notes"): is_blank,
    ("stakeholder_engagement", "expectation_shift"): is_blank,
    ("risks_escalations", "risks"): is_blank_risk,
    ("risks_escalations", "escalations"): is_blank,
    ("opportunities_wins", "wins"): is_blank,
    ("opportunities_wins", "growth_ops"): is_blank,
    ("support_needed", "requests"): is_blank,
    ("personal_updates", "personal_wins"): is_blank,
    ("personal_updates", "reflections"): is_blank,
    ("personal_updates", "goals"): is_blank_goal,
    ("team_members_updates", "top_contributors"): is_blank_person,
    ("team_members_updates", "members_needing_attention"): is_blank_person,
}


def placeholder_for(section: str, field: str) -> Any:
    """Return a fresh copy of the default placeholder item for a list field."""
    return copy.deepcopy(default_document()[section][field][0])


def non_blank_items(section: str, field: str, items: list[Any] | None) -> list[Any]:
    """Keep only the items of a list field that carry content."""
    blank = LIST_FIELDS[(section, field)]
    return [item for item in items or [] if not blank(item)]


def drop_blank_items(section: str, data: Mapping[str, Any]) -> dict[str, Any]:
    """Copy a section with blank items removed from each of its lists."""
    cleaned = copy.deepcopy(dict(data))
    for section_key, field in LIST_FIELDS:
        if section_key == section and field in cleaned:
            cleaned[field] = non_blank_items(section, field, cleaned[field])
    return cleaned


def fill_placeholders(section: str, data: dict[str, Any]) -> dict[str, Any]:
    """Replace empty lists in a section with a single placeholder item, in place."""
    for section_key, field in LIST_FIELDS:
        if section_key == section and not data.get(field):
            data[field] = [placeholder_for(section, field)]
    return data


def validate_sections(document: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
    """Validate every section present in ``document``.

    Returns normalized section dicts (enums as plain strings) holding only the
    keys the caller sent, keyed by section name in storage order. Sections that
    are absent or None are skipped.

    Raises:
        DocumentValidationError: If any section fails validation.
    """
    sections: dict[str, dict[str, Any]] = {}
    errors: dict[str, str] = {}
    for key in SECTION_KEYS:
        raw = document.get(key)
        if raw is None:
            continue
        try:
            section = SECTION_MODELS[key].model_validate(raw)
            dumped = section.model_dump(mode="json")
            sections[key] = {name: dumped[name] for name in section.model_fields_set}
        except ValidationError as e:
            for err in e.errors():
                location = ".".join(str(part) for part in (key, *err["loc"]))
                errors[location] = err["msg"]
    top_bullets = document.get("top_3_bullets")
    if top_bullets is not None and not isinstance(top_bullets, str):
        errors["top_3_bullets"] = "Input should be a valid string"
    if errors:
        raise DocumentValidationError(errors)
    return sections


def parse_week_date(value: date | str | None) -> date:
    """Coerce a week date given as a date or ``YYYY-MM-DD`` string.

    Raises:
        DocumentValidationError: If the value is missing or malformed.
    """
    if isinstance(value, date):
        return value
    if is_blank(value):
        raise DocumentValidationError({"week_date": "is required"})
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as e:
        raise DocumentValidationError({"week_date": f"invalid date {value!r}"}) from e


def validate_save_request(
    user_id: str | None,
    week_date: date | str | None,
    team_name: str | None,
    org_name: str | None,
    document: Mapping[str, Any] | None,
) -> tuple[date, dict[str, dict[str, Any]]]:
    """Check a save request before any storage access.

    Returns the parsed week date and the validated sections.
    """
    errors: dict[str, str] = {}
    try:
        parsed_date: date | None = parse_week_date(week_date)
    except DocumentValidationError as e:
        errors.update(e.errors)
        parsed_date = None
    if is_blank(user_id):
        errors["user_id"] = "is required"
    if is_blank(team_name):
        errors["team_name"] = "is required"
    if is_blank(org_name):
        errors["client_org"] = "is required"
    if document is None or not isinstance(document, Mapping):
        errors["data"] = "document must be an object"
    if errors or parsed_date is None:
        raise DocumentValidationError(errors)
    return parsed_date, validate_sections(document)
