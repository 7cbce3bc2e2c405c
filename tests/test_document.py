# ABOUTME: Tests for default documents, deep merge, blank filtering and save validation.
# ABOUTME: Covers placeholder expansion and merge idempotence on partial documents.

from datetime import date

import pytest

from weekly_pulse.document import (
    LIST_FIELDS,
    deep_merge,
    default_document,
    drop_blank_items,
    fill_placeholders,
    is_blank,
    non_blank_items,
    parse_week_date,
    validate_save_request,
    validate_sections,
)
from weekly_pulse.errors import DocumentValidationError
from weekly_pulse.models import DEFAULT_SENTIMENT_SCORE, SECTION_KEYS


class TestDefaultDocument:
    """Tests for the default document builder."""

    def test_all_sections_present(self) -> None:
        doc = default_document()
        assert set(SECTION_KEYS) <= set(doc)
        assert doc["meta"] == {"date": "", "team_name": "", "client_org": ""}
        assert doc["top_3_bullets"] == ""

    def test_every_list_has_one_placeholder(self) -> None:
        doc = default_document()
        for section, field in LIST_FIELDS:
            assert len(doc[section][field]) == 1, f"{section}.{field}"

    def test_placeholder_values(self) -> None:
        doc = default_document()
        assert doc["delivery_performance"]["accomplishments"] == [""]
        assert doc["risks_escalations"]["risks"] == [
            {"title": "", "description": "", "severity": "Green"}
        ]
        assert doc["personal_updates"]["goals"] == [
            {"description": "", "status": "Green", "update": ""}
        ]
        assert doc["team_members_updates"]["members_needing_attention"][0]["delivery_risk"] == "Low"

    def test_neutral_defaults(self) -> None:
        doc = default_document()
        assert doc["team_health"]["sentiment_score"] == DEFAULT_SENTIMENT_SCORE == 3.5
        assert doc["stakeholder_engagement"]["stakeholder_nps"] is None
        assert doc["delivery_performance"]["workload_balance"] == "JustRight"

    def test_returns_fresh_copies(self) -> None:
        first = default_document()
        first["delivery_performance"]["accomplishments"].append("mutated")
        second = default_document()
        assert second["delivery_performance"]["accomplishments"] == [""]


class TestDeepMerge:
    """Tests for deep_merge semantics."""

    def test_nested_values_merge(self) -> None:
        target = {"a": {"x": 1, "y": 2}}
        result = deep_merge(target, {"a": {"y": 3}})
        assert result is target
        assert target == {"a": {"x": 1, "y": 3}}

    def test_creates_missing_nested_objects(self) -> None:
        target: dict = {}
        deep_merge(target, {"a": {"b": {"c": 1}}})
        assert target == {"a": {"b": {"c": 1}}}

    def test_non_mapping_target_value_is_replaced_by_object(self) -> None:
        target = {"a": "text"}
        deep_merge(target, {"a": {"b": 1}})
        assert target == {"a": {"b": 1}}

    def test_lists_overwrite(self) -> None:
        target = {"items": ["a", "b", "c"]}
        deep_merge(target, {"items": ["z"]})
        assert target["items"] == ["z"]

    def test_none_preserves_target(self) -> None:
        target = {"score": 3.5, "name": "kept"}
        deep_merge(target, {"score": None, "name": "new", "missing": None})
        assert target == {"score": 3.5, "name": "new"}

    def test_falsy_values_overwrite(self) -> None:
        target = {"text": "old", "count": 5, "items": ["x"]}
        deep_merge(target, {"text": "", "count": 0, "items": []})
        assert target == {"text": "", "count": 0, "items": []}

    def test_idempotent_on_partial_document(self) -> None:
        partial = {
            "top_3_bullets": "Shipped",
            "team_health": {"sentiment_score": None, "owner_input": "fine"},
            "risks_escalations": {"escalations": ["Need budget"]},
        }
        once = deep_merge(default_document(), partial)
        twice = deep_merge(deep_merge(default_document(), partial), partial)
        assert once == twice
        assert once["team_health"]["sentiment_score"] == 3.5
        assert once["risks_escalations"]["risks"][0]["severity"] == "Green"


class TestBlankFiltering:
    """Tests for blank item detection."""

    @pytest.mark.parametrize("value", [None, "", "   ", "\t\n"])
    def test_blank_values(self, value) -> None:
        assert is_blank(value)

    def test_non_blank_value(self) -> None:
        assert not is_blank(" x ")

    def test_text_items_keep_original_strings(self) -> None:
        items = ["Shipped X", "", "  ", "  padded  "]
        assert non_blank_items("delivery_performance", "accomplishments", items) == [
            "Shipped X",
            "  padded  ",
        ]

    def test_risk_kept_when_title_or_description(self) -> None:
        risks = [
            {"title": "", "description": "", "severity": "Red"},
            {"title": "Vendor", "description": "", "severity": "Yellow"},
            {"title": " ", "description": "Outage", "severity": "Green"},
        ]
        kept = non_blank_items("risks_escalations", "risks", risks)
        assert [risk["severity"] for risk in kept] == ["Yellow", "Green"]

    def test_people_identified_by_name(self) -> None:
        contributors = [
            {"name": "", "achievement": "Did things", "recognition": ""},
            {"name": "Ana", "achievement": "", "recognition": ""},
        ]
        kept = non_blank_items("team_members_updates", "top_contributors", contributors)
        assert [person["name"] for person in kept] == ["Ana"]

    def test_goal_kept_when_only_update(self) -> None:
        goals = [{"description": "", "status": "Green", "update": "Progressing"}]
        assert non_blank_items("personal_updates", "goals", goals) == goals

    def test_none_list_is_empty(self) -> None:
        assert non_blank_items("support_needed", "requests", None) == []

    def test_drop_blank_items_copies(self) -> None:
        section = {"wins": ["", "Win"], "growth_ops": ["  "]}
        cleaned = drop_blank_items("opportunities_wins", section)
        assert cleaned == {"wins": ["Win"], "growth_ops": []}
        assert section["wins"] == ["", "Win"]

    def test_fill_placeholders_only_for_empty_lists(self) -> None:
        section = {"wins": [], "growth_ops": ["Expand"]}
        fill_placeholders("opportunities_wins", section)
        assert section == {"wins": [""], "growth_ops": ["Expand"]}

    def test_fill_placeholders_records(self) -> None:
        section = {"risks": [], "escalations": []}
        fill_placeholders("risks_escalations", section)
        assert section["risks"] == [{"title": "", "description": "", "severity": "Green"}]
        assert section["escalations"] == [""]


class TestValidation:
    """Tests for save request validation."""

    def test_parse_week_date_from_string(self) -> None:
        assert parse_week_date("2025-05-12") == date(2025, 5, 12)

    def test_parse_week_date_passthrough(self) -> None:
        assert parse_week_date(date(2025, 5, 12)) == date(2025, 5, 12)

    def test_parse_week_date_invalid(self) -> None:
        with pytest.raises(DocumentValidationError) as exc_info:
            parse_week_date("12/05/2025")
        assert "week_date" in exc_info.value.errors

    def test_missing_required_fields(self) -> None:
        with pytest.raises(DocumentValidationError) as exc_info:
            validate_save_request("U1", "", " ", None, {})
        assert set(exc_info.value.errors) == {"week_date", "team_name", "client_org"}

    def test_missing_user(self) -> None:
        with pytest.raises(DocumentValidationError) as exc_info:
            validate_save_request("", "2025-05-12", "Team", "Org", {})
        assert "user_id" in exc_info.value.errors

    def test_validation_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            validate_save_request("U1", None, "Team", "Org", {})

    def test_only_present_sections_returned(self) -> None:
        week, sections = validate_save_request(
            "U1",
            "2025-05-12",
            "Team",
            "Org",
            {"team_health": {"owner_input": "ok"}, "support_needed": None},
        )
        assert week == date(2025, 5, 12)
        assert list(sections) == ["team_health"]
        assert sections["team_health"] == {"owner_input": "ok"}

    def test_invalid_enum_rejected(self) -> None:
        document = {"risks_escalations": {"risks": [{"title": "X", "severity": "Purple"}]}}
        with pytest.raises(DocumentValidationError) as exc_info:
            validate_sections(document)
        assert "risks_escalations.risks.0.severity" in exc_info.value.errors

    def test_sentiment_out_of_range_rejected(self) -> None:
        with pytest.raises(DocumentValidationError):
            validate_sections({"team_health": {"sentiment_score": 7.5}})

    def test_explicit_null_sentiment_kept(self) -> None:
        sections = validate_sections({"team_health": {"sentiment_score": None}})
        assert sections["team_health"]["sentiment_score"] is None

    def test_non_string_summary_rejected(self) -> None:
        with pytest.raises(DocumentValidationError) as exc_info:
            validate_sections({"top_3_bullets": ["a", "b"]})
        assert "top_3_bullets" in exc_info.value.errors

    def test_legacy_fields_ignored(self) -> None:
        sections = validate_sections(
            {"team_health": {"traffic_light": "Green", "energy_engagement": "High"}}
        )
        assert "traffic_light" not in sections["team_health"]

    def test_unsent_section_keys_not_defaulted(self) -> None:
        sections = validate_sections(
            {"delivery_performance": {"accomplishments": ["a"]}, "team_health": {}}
        )
        assert sections["delivery_performance"] == {"accomplishments": ["a"]}
        assert sections["team_health"] == {}

    def test_list_items_are_normalized(self) -> None:
        sections = validate_sections({"risks_escalations": {"risks": [{"title": "Vendor"}]}})
        assert sections["risks_escalations"] == {
            "risks": [{"title": "Vendor", "description": "", "severity": "Green"}]
        }
