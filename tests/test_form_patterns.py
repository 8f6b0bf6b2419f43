"""Tests for pattern-based form detection and AI/pattern merging."""

from unittest.mock import AsyncMock, patch

import pytest

from app.core.form_patterns import (
    detect_form_fields,
    extract_form_title,
    is_field_required,
    merge_form_structures,
    validate_and_enhance_structure,
)

FORM_TEXT = """Community Development Grant Application
Organization Name: ______ *
Contact Person: ______
Email Address: ______
Project Title: ______
Amount Requested: $______
[ ] Food security
[ ] Housing assistance
Signature: ________
"""


class TestDetectFormFields:
    def test_fields_detected(self):
        result = detect_form_fields(FORM_TEXT)

        assert set(result["formFields"]) == {
            "organization",
            "contact_person",
            "email",
            "project_title",
            "requested_amount",
            "checkbox_0",
            "checkbox_1",
            "signature",
            "signature_date",
        }
        assert result["formFields"]["email"]["type"] == "email"
        assert result["formFields"]["requested_amount"]["validation"]["message"] == "Please enter a valid dollar amount"
        assert result["formFields"]["checkbox_1"]["label"] == "Housing assistance"

    def test_required_from_star(self):
        fields = detect_form_fields(FORM_TEXT)["formFields"]

        assert fields["organization"]["required"] is True
        assert fields["contact_person"]["required"] is False
        assert fields["signature"]["required"] is True

    def test_sections_ordered(self):
        sections = detect_form_fields(FORM_TEXT)["formSections"]

        assert [s["id"] for s in sections] == [
            "applicant_info",
            "contact_info",
            "project_info",
            "budget_info",
            "additional_info",
            "certification",
        ]
        assert sections[1]["fields"] == ["contact_person", "email"]

    def test_metadata_and_categories(self):
        result = detect_form_fields(FORM_TEXT, "foundation_grant")

        assert result["formMetadata"]["title"] == "Community Development Grant"
        assert result["formMetadata"]["documentType"] == "foundation_grant"
        assert result["extractionConfidence"] == 0.7
        assert result["fieldPatterns"]["contact"] == ["contact_person", "email"]
        assert result["fieldPatterns"]["compliance"] == ["signature", "signature_date"]

    def test_empty_document(self):
        result = detect_form_fields("")

        assert result["formFields"] == {}
        assert result["formMetadata"]["title"] == "Grant Application"
        assert result["extractionConfidence"] == 0.3


def test_is_field_required_markers():
    assert is_field_required("project_title", "project title (required): ____")
    assert not is_field_required("project_title", "project title: ____")


def test_extract_form_title_none():
    assert extract_form_title("hello\nworld") is None


def test_merge_ai_wins_and_unplaced_fields_get_sections():
    pattern = detect_form_fields(FORM_TEXT)
    ai = {
        "formFields": {
            "organization": {"label": "Legal Name", "type": "text", "section": "applicant_info"},
            "board_chair": {"label": "Board Chair", "type": "text", "section": "governance"},
        },
        "formSections": [{"id": "applicant_info", "title": "Applicant", "fields": ["organization"]}],
        "formMetadata": {"title": "AI Title"},
        "extractionConfidence": 0.9,
    }

    merged = merge_form_structures(ai, pattern)

    assert merged["formFields"]["organization"]["label"] == "Legal Name"
    assert "contact_person" in merged["formFields"]
    sections = {s["id"]: s for s in merged["formSections"]}
    assert sections["applicant_info"]["fields"] == ["organization"]
    assert sections["governance"]["fields"] == ["board_chair"]
    assert sections["contact_info"]["fields"] == ["contact_person", "email"]
    assert merged["formMetadata"]["title"] == "AI Title"
    assert merged["formMetadata"]["extractionMethod"] == "hybrid_ai_pattern"
    assert merged["formMetadata"]["totalFields"] == 10
    assert merged["extractionConfidence"] == 0.9


def test_merge_missing_sides():
    pattern = {"formFields": {"a": {}}}

    assert merge_form_structures(None, pattern) is pattern
    assert merge_form_structures(None, None) == {"formFields": {}, "formSections": [], "formMetadata": {}}


def test_validate_and_enhance_structure():
    structure = validate_and_enhance_structure({"formFields": {"a": {"type": "text", "required": True}}})

    assert structure["formMetadata"] == {"totalFields": 1, "requiredFields": 1, "sections": 0}
    assert structure["extractionConfidence"] == 0.6


class TestAnalyzeFormStructure:
    @pytest.mark.asyncio
    async def test_patterns_only(self):
        from app.chains.analyze_form_structure import analyze_form_structure

        with patch("app.chains.analyze_form_structure.extract_form_structure_ai") as mock_ai:
            result = await analyze_form_structure(FORM_TEXT, use_ai=False)

        mock_ai.assert_not_called()
        assert result["formMetadata"]["totalFields"] == 9

    @pytest.mark.asyncio
    async def test_ai_failure_falls_back_to_patterns(self):
        from app.chains.analyze_form_structure import analyze_form_structure

        with patch(
            "app.chains.analyze_form_structure.extract_form_structure_ai",
            new=AsyncMock(side_effect=ValueError("bad output")),
        ):
            result = await analyze_form_structure(FORM_TEXT)

        assert "organization" in result["formFields"]
        assert "extractionMethod" not in result["formMetadata"]
