"""Tests for model response parsing: JSON first, labelled free text as fallback."""

import json

from prcheck_core.parser import (
    DEFAULT_RECOMMENDATIONS,
    RAW_PREFIX_CHARS,
    extract_section,
    parse_model_response,
    split_recommendations,
)

FULL_PAYLOAD = {
    "correctness_score": 8,
    "completeness_score": 6,
    "risk_level": "medium",
    "missing_requirements": "Pagination is not handled",
    "implementation_quality": "Clean and well structured",
    "recommendations": ["Add pagination", "Add tests"],
}


class TestStructuredPath:
    def test_json_embedded_in_prose(self):
        raw = f"Here is my analysis:\n```json\n{json.dumps(FULL_PAYLOAD)}\n```\nHope this helps!"
        parsed = parse_model_response(raw)

        assert parsed.structured is True
        assert parsed.correctness_score == 8
        assert parsed.completeness_score == 6
        assert parsed.risk_level == "MEDIUM"
        assert parsed.missing_requirements == "Pagination is not handled"
        assert parsed.implementation_quality == "Clean and well structured"
        assert parsed.recommendations == ("Add pagination", "Add tests")
        assert parsed.raw_response is None

    def test_missing_fields_get_defaults(self):
        parsed = parse_model_response("{}")
        assert parsed.correctness_score == "N/A"
        assert parsed.completeness_score == "N/A"
        assert parsed.risk_level == "UNKNOWN"
        assert parsed.missing_requirements == "Unable to determine"
        assert parsed.implementation_quality == "Not assessed"
        assert parsed.recommendations == DEFAULT_RECOMMENDATIONS

    def test_non_conforming_values_get_defaults(self):
        payload = {"correctness_score": "great", "completeness_score": 42, "risk_level": "SEVERE"}
        parsed = parse_model_response(json.dumps(payload))
        assert parsed.correctness_score == "N/A"
        assert parsed.completeness_score == "N/A"
        assert parsed.risk_level == "UNKNOWN"

    def test_zero_score_is_kept(self):
        parsed = parse_model_response(json.dumps({"correctness_score": 0}))
        assert parsed.correctness_score == 0

    def test_numeric_string_score_accepted(self):
        parsed = parse_model_response(json.dumps({"correctness_score": "7/10"}))
        assert parsed.correctness_score == 7

    def test_string_recommendation_wrapped_in_list(self):
        parsed = parse_model_response(json.dumps({"recommendations": "Add tests"}))
        assert parsed.recommendations == ("Add tests",)

    def test_nested_objects_kept_intact(self):
        payload = dict(FULL_PAYLOAD, details={"files": {"a.py": 1}})
        parsed = parse_model_response(json.dumps(payload))
        assert parsed.structured is True
        assert parsed.correctness_score == 8


LABELLED_TEXT = """I reviewed the change.

RISK_LEVEL: high
RECOMMENDATIONS:
- Add input validation
- Add tests for the new endpoint
CORRECTNESS_SCORE: 7
IMPLEMENTATION_QUALITY: Readable, but the handler is long.
It mixes parsing and persistence.
MISSING_REQUIREMENTS: The CSV export from the issue is missing
COMPLETENESS_SCORE: 5
"""


class TestFallbackPath:
    def test_sections_recovered_in_any_order(self):
        parsed = parse_model_response(LABELLED_TEXT)

        assert parsed.structured is False
        assert parsed.correctness_score == 7
        assert parsed.completeness_score == 5
        assert parsed.risk_level == "HIGH"
        assert parsed.missing_requirements == "The CSV export from the issue is missing"
        assert parsed.implementation_quality == (
            "Readable, but the handler is long.\nIt mixes parsing and persistence."
        )
        assert parsed.recommendations == ("Add input validation", "Add tests for the new endpoint")

    def test_markdown_decorated_labels(self):
        raw = (
            "1. **CORRECTNESS_SCORE**: 9\n"
            "2. **Completeness Score**: 8\n"
            "3. **RISK_LEVEL**: LOW\n"
            "4. **MISSING_REQUIREMENTS**: None identified\n"
            "5. **IMPLEMENTATION_QUALITY**: Solid\n"
        )
        parsed = parse_model_response(raw)
        assert parsed.correctness_score == 9
        assert parsed.completeness_score == 8
        assert parsed.risk_level == "LOW"
        assert parsed.missing_requirements == "None identified"
        assert parsed.implementation_quality == "Solid"

    def test_unmatched_fields_are_none(self):
        parsed = parse_model_response("The change looks fine to me.")
        assert parsed.correctness_score is None
        assert parsed.completeness_score is None
        assert parsed.risk_level == "UNKNOWN"
        assert parsed.missing_requirements is None
        assert parsed.implementation_quality is None
        assert parsed.recommendations is None

    def test_invalid_json_falls_back_to_text(self):
        raw = '{"correctness_score": 6, "risk_level": "LOW", oops}'
        parsed = parse_model_response(raw)
        assert parsed.structured is False
        assert parsed.correctness_score == 6
        assert parsed.risk_level == "LOW"

    def test_raw_prefix_is_bounded(self):
        raw = "CORRECTNESS_SCORE: 5\n" + "x" * 2000
        parsed = parse_model_response(raw)
        assert len(parsed.raw_response) == RAW_PREFIX_CHARS

    def test_braces_in_prose_fall_back_to_text(self):
        parsed = parse_model_response("Wrap the value in {curly} braces.\nRISK_LEVEL: MEDIUM")
        assert parsed.structured is False
        assert parsed.risk_level == "MEDIUM"


class TestHelpers:
    def test_section_stops_at_next_label(self):
        text = "MISSING_REQUIREMENTS: a\nb\nNotes: c"
        assert extract_section(text, "MISSING_REQUIREMENTS") == "a\nb"

    def test_unbulleted_recommendations_stay_single_entry(self):
        assert split_recommendations("Add tests and docs") == ("Add tests and docs",)

    def test_none_section(self):
        assert split_recommendations(None) is None
