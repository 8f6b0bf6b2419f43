"""Tests for completed form population and PDF rendering."""

from datetime import date

from app.core.pdf_generator import (
    calculate_value,
    extract_mapped_value,
    format_field_value,
    generate_completed_form,
    get_nested_value,
    intelligent_field_match,
    populate_form_fields,
)

USER_DATA = {
    "organization": {
        "name": "Acme Community Org",
        "ein": "12-3456789",
        "phone": "5551234567",
        "address": {"street": "1 Main St", "city": "Springfield", "state": "IL", "zip": "62701"},
    },
    "project": {
        "title": "Food Hub",
        "description": "Regional food distribution",
        "budgetTotal": 125000,
        "startDate": "2026-01-01",
        "endDate": "2026-12-31",
        "budgetItems": [{"amount": 1000}, {"amount": 2500}, {}],
    },
    "user": {"name": "Jordan Lee", "email": "jordan@example.org"},
}


class TestFormatFieldValue:
    def test_currency(self):
        assert format_field_value(1234.5, "currency") == "$1,234.5"
        assert format_field_value("$50,000", "currency") == "$50,000"

    def test_date(self):
        assert format_field_value("2026-03-15", "date") == "03/15/2026"
        assert format_field_value(date(2026, 1, 2), "date") == "01/02/2026"
        assert format_field_value("next spring", "date") == "next spring"

    def test_impossible_date_is_left_as_is(self):
        assert format_field_value("2024-02-30", "date") == "2024-02-30"
        assert format_field_value("2024-13-01T00:00:00", "date") == "2024-13-01T00:00:00"

    def test_phone(self):
        assert format_field_value("555-123-4567", "phone") == "(555) 123-4567"
        assert format_field_value("12345", "phone") == "12345"

    def test_textarea_truncates(self):
        assert format_field_value("abcdef", "textarea", {"maxLength": 3}) == "abc..."

    def test_empty_values(self):
        assert format_field_value(None, "text") == ""
        assert format_field_value(0, "currency") == ""


def test_get_nested_value():
    assert get_nested_value(USER_DATA, "organization.address.city") == "Springfield"
    assert get_nested_value(USER_DATA, "organization.name.first") is None


def test_calculate_value():
    assert calculate_value("total_budget", USER_DATA) == 3500
    assert calculate_value("project_duration_months", USER_DATA) == 12
    assert calculate_value("unknown", USER_DATA) is None


class TestExtractMappedValue:
    def test_source_with_transformation(self):
        mapping = {"dataSource": "organization", "dataField": "name", "transformation": "uppercase"}

        assert extract_mapped_value(USER_DATA, mapping) == "ACME COMMUNITY ORG"

    def test_dotted_path(self):
        mapping = {"dataSource": "custom", "dataField": "organization.address.zip"}

        assert extract_mapped_value(USER_DATA, mapping) == "62701"

    def test_calculated(self):
        assert extract_mapped_value(USER_DATA, {"dataSource": "calculated", "dataField": "total_budget"}) == 3500


def test_intelligent_field_match():
    assert intelligent_field_match({"label": "Organization Name"}, USER_DATA) == "Acme Community Org"
    assert intelligent_field_match({"label": "EIN"}, USER_DATA) == "12-3456789"
    assert intelligent_field_match({"label": "Mailing Address"}, USER_DATA) == "1 Main St, Springfield, IL 62701"
    assert intelligent_field_match({"label": "Contact", "type": "email"}, USER_DATA) == "jordan@example.org"
    assert intelligent_field_match({"label": "Project Title"}, USER_DATA) == "Food Hub"
    assert intelligent_field_match({"label": "Start", "type": "date"}, USER_DATA) == "2026-01-01"
    assert intelligent_field_match({"label": "Favorite color"}, USER_DATA) is None


def test_populate_prefers_mapping_then_formats():
    structure = {
        "formFields": {
            "org": {"label": "Organization Name", "type": "text"},
            "amount": {"label": "Amount Requested", "type": "currency"},
            "phone": {"label": "Phone", "type": "phone"},
            "notes": {"label": "Notes", "type": "textarea"},
        }
    }
    mappings = {"org": {"dataSource": "user", "dataField": "name"}}

    populated = populate_form_fields(structure, USER_DATA, mappings)

    assert populated == {
        "org": "Jordan Lee",
        "amount": "$125,000",
        "phone": "(555) 123-4567",
    }


class TestGenerateCompletedForm:
    def test_renders_pdf(self):
        structure = {
            "formFields": {
                "org": {"label": "Organization Name", "type": "text", "required": True},
                "summary": {"label": "Project Description", "type": "textarea"},
                "focus": {"label": "Focus", "type": "checkbox", "options": ["Food", "Housing"]},
            },
            "formSections": [{"title": "Applicant", "description": "About you", "fields": ["org", "summary", "focus"]}],
            "formMetadata": {"title": "Community Grant"},
        }

        result = generate_completed_form(structure, USER_DATA)

        assert result["success"] is True
        assert result["document"].startswith(b"%PDF")
        assert result["metadata"]["totalFields"] == 3
        assert result["metadata"]["populatedFields"] == 2
        assert result["metadata"]["formTitle"] == "Community Grant"

    def test_bad_date_does_not_fail_the_form(self):
        user_data = {**USER_DATA, "project": {**USER_DATA["project"], "startDate": "2024-02-30"}}
        structure = {
            "formFields": {
                "org": {"label": "Organization Name", "type": "text"},
                "start": {"label": "Start Date", "type": "date"},
            }
        }

        result = generate_completed_form(structure, user_data)

        assert result["success"] is True
        assert result["metadata"]["populatedFields"] == 2
        assert calculate_value("project_duration_months", user_data) is None

    def test_invalid_structure(self):
        result = generate_completed_form({"formFields": []}, USER_DATA)

        assert result["success"] is False
        assert result["error"] == "Invalid form structure provided"
        assert result["metadata"]["formTitle"] == "Form Generation Failed"
