"""Completed application form generation.

Takes a form structure (``formFields`` / ``formSections`` / ``formMetadata``),
fills every field it can from the applicant's data and renders the result as a
PDF with PyMuPDF. Layout coordinates are in millimetres on an A4 page.
"""

import re
from datetime import date, datetime, timezone
from functools import reduce
from typing import Any

from app.core.logging import get_logger

logger = get_logger(__name__)

# Lazy import to avoid loading PyMuPDF at module load
fitz = None


def _get_fitz():
    """Lazy load PyMuPDF."""
    global fitz
    if fitz is None:
        import fitz as _fitz

        fitz = _fitz
    return fitz


MM = 72 / 25.4
MARGIN_TOP = 20
MARGIN_LEFT = 20
SECTION_BREAK_Y = 250
FIELD_BREAK_Y = 270
DESCRIPTION_WIDTH = 170
VALUE_WIDTH = 160

FONT_REGULAR = "helv"
FONT_BOLD = "hebo"
FONT_ITALIC = "heit"

TEXTAREA_PLACEHOLDER = "[Please provide response]"
FIELD_PLACEHOLDER = "[To be completed]"


# Field population


def get_nested_value(data: dict[str, Any], path: str) -> Any:
    """Resolve a dotted path such as ``organization.address.city``."""

    def step(current: Any, key: str) -> Any:
        return current.get(key) if isinstance(current, dict) else None

    return reduce(step, path.split("."), data)


def calculate_value(calculation: str, user_data: dict[str, Any]) -> Any:
    project = user_data.get("project") or {}
    if calculation == "total_budget":
        return sum((item.get("amount") or 0) for item in project.get("budgetItems") or [])
    if calculation == "project_duration_months":
        start, end = project.get("startDate"), project.get("endDate")
        if start and end:
            try:
                days = (date.fromisoformat(end[:10]) - date.fromisoformat(start[:10])).days
            except ValueError:
                return None
            return round(days / 30)
    return None


def _format_number(num: float) -> str:
    text = f"{num:,.3f}".rstrip("0").rstrip(".")
    return text or "0"


def format_field_value(value: Any, field_type: str | None, validation: dict[str, Any] | None = None) -> Any:
    """
    Format a value for display in a field of the given type.

    currency -> ``$1,234.5``, ISO date -> ``MM/DD/YYYY``, 10-digit phone ->
    ``(555) 123-4567``, textarea -> truncated at ``maxLength`` with ``...``.
    """
    if value in (None, "", 0, False):
        return ""

    if field_type == "currency":
        cleaned = re.sub(r"[^0-9.-]", "", str(value))
        try:
            return f"${_format_number(float(cleaned))}"
        except ValueError:
            return value

    if field_type == "date":
        if isinstance(value, (date, datetime)):
            return value.strftime("%m/%d/%Y")
        if isinstance(value, str) and re.match(r"^\d{4}-\d{2}-\d{2}", value):
            try:
                return date.fromisoformat(value[:10]).strftime("%m/%d/%Y")
            except ValueError:
                return value
        return value

    if field_type == "phone":
        digits = re.sub(r"\D", "", str(value))
        if len(digits) == 10:
            return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
        return value

    if field_type == "textarea":
        max_length = (validation or {}).get("maxLength")
        text = str(value)
        if max_length and len(text) > max_length:
            return text[:max_length] + "..."
        return text

    if isinstance(value, list):
        return value
    return str(value)


def apply_transformation(value: Any, transformation: str | None) -> Any:
    if transformation == "uppercase":
        return str(value).upper()
    if transformation == "lowercase":
        return str(value).lower()
    if transformation in ("currency", "phone", "date"):
        return format_field_value(value, transformation)
    return value


def extract_mapped_value(user_data: dict[str, Any], mapping: dict[str, Any]) -> Any:
    """Pull a value out of ``user_data`` according to an explicit field mapping."""
    source = mapping.get("dataSource")
    data_field = mapping.get("dataField") or ""

    if source in ("organization", "project", "user"):
        value = (user_data.get(source) or {}).get(data_field)
    elif source == "calculated":
        value = calculate_value(data_field, user_data)
    else:
        value = get_nested_value(user_data, data_field) if data_field else None

    if value and mapping.get("transformation"):
        value = apply_transformation(value, mapping["transformation"])
    return value


def intelligent_field_match(field: dict[str, Any], user_data: dict[str, Any]) -> Any:
    """Guess a field's value from its label and type when no mapping exists."""
    label = (field.get("label") or "").lower()
    field_type = field.get("type")
    org = user_data.get("organization") or {}
    project = user_data.get("project") or {}
    user = user_data.get("user") or {}

    if "organization" in label or "company" in label or "entity" in label:
        return org.get("name") or org.get("legalName")
    if "ein" in label or "tax id" in label or "federal id" in label:
        return org.get("ein") or org.get("taxId")
    if "address" in label and isinstance(org.get("address"), dict):
        address = org["address"]
        return (
            f"{address.get('street', '')}, {address.get('city', '')}, "
            f"{address.get('state', '')} {address.get('zip', '')}"
        )

    if "phone" in label or field_type == "phone":
        return org.get("phone") or user.get("phone")
    if "email" in label or field_type == "email":
        return org.get("email") or user.get("email")
    if "contact person" in label or "executive director" in label:
        return org.get("contactPerson") or user.get("name")

    if "project" in label and "title" in label:
        return project.get("title") or project.get("name")
    if "project" in label and "description" in label:
        return project.get("description") or project.get("summary")
    if "amount" in label or "budget" in label or field_type == "currency":
        return project.get("budgetTotal") or project.get("requestedAmount")

    if field_type == "date":
        if "start" in label:
            return project.get("startDate")
        if "end" in label:
            return project.get("endDate")
    return None


def populate_form_fields(
    form_structure: dict[str, Any],
    user_data: dict[str, Any],
    field_mappings: dict[str, dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Fill each field by explicit mapping, then label matching, then format it."""
    field_mappings = field_mappings or {}
    populated: dict[str, Any] = {}

    for field_id, field in (form_structure.get("formFields") or {}).items():
        value = None
        if field_id in field_mappings:
            try:
                value = extract_mapped_value(user_data, field_mappings[field_id])
            except (TypeError, ValueError) as e:
                logger.warning(f"Failed to extract mapped value for {field_id}: {e}")

        if not value:
            value = intelligent_field_match(field, user_data)

        if value:
            populated[field_id] = format_field_value(value, field.get("type"), field.get("validation"))

    return populated


# PDF rendering


class _FormWriter:
    """Tracks the current page and vertical position while drawing."""

    def __init__(self, doc):
        self.pymupdf = _get_fitz()
        self.doc = doc
        self.page = None
        self.y = MARGIN_TOP
        self.new_page()

    def new_page(self) -> None:
        rect = self.pymupdf.paper_rect("a4")
        self.page = self.doc.new_page(width=rect.width, height=rect.height)
        self.y = MARGIN_TOP

    def text(self, x_mm: float, y_mm: float, text: str, size: float, font: str = FONT_REGULAR) -> None:
        self.page.insert_text((x_mm * MM, y_mm * MM), text, fontsize=size, fontname=font)

    def wrap(self, text: str, width_mm: float, size: float, font: str = FONT_REGULAR) -> list[str]:
        lines: list[str] = []
        for paragraph in str(text).split("\n"):
            current = ""
            for word in paragraph.split(" "):
                candidate = f"{current} {word}".strip()
                if self.pymupdf.get_text_length(candidate, fontname=font, fontsize=size) <= width_mm * MM:
                    current = candidate
                else:
                    if current:
                        lines.append(current)
                    current = word
            lines.append(current)
        return lines

    def line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        self.page.draw_line((x1 * MM, y1 * MM), (x2 * MM, y2 * MM), width=0.5)

    def rect(self, x: float, y: float, w: float, h: float) -> None:
        self.page.draw_rect(self.pymupdf.Rect(x * MM, y * MM, (x + w) * MM, (y + h) * MM), width=0.5)

    def checkbox(self, x: float, y: float, checked: bool) -> None:
        self.rect(x, y - 3, 3, 3)
        if checked:
            self.line(x, y - 3, x + 3, y)
            self.line(x, y, x + 3, y - 3)


def _add_fields(writer: _FormWriter, fields: dict[str, dict[str, Any]], populated: dict[str, Any]) -> None:
    for field_id, field in fields.items():
        if writer.y > FIELD_BREAK_Y:
            writer.new_page()

        value = populated.get(field_id) or ""
        label = f"{field.get('label') or field_id}{' *' if field.get('required') else ''}"
        writer.text(MARGIN_LEFT, writer.y, label, 11, FONT_BOLD)
        writer.y += 8

        field_type = field.get("type")
        if field_type == "textarea":
            lines = writer.wrap(value or TEXTAREA_PLACEHOLDER, VALUE_WIDTH, 11)
            for offset, line in enumerate(lines):
                writer.text(MARGIN_LEFT + 5, writer.y + offset * 5, line, 11)
            height = max(len(lines) * 5, 15)
            writer.y += height
            writer.rect(MARGIN_LEFT, writer.y - len(lines) * 5 - 5, VALUE_WIDTH, height)
        elif field_type == "checkbox" and field.get("options"):
            for option in field["options"]:
                checked = option in value if isinstance(value, list) else value == option
                writer.checkbox(MARGIN_LEFT + 5, writer.y, checked)
                writer.text(MARGIN_LEFT + 15, writer.y, str(option), 11)
                writer.y += 6
        else:
            writer.text(MARGIN_LEFT + 5, writer.y, str(value or FIELD_PLACEHOLDER), 11)
            writer.y += 5
            writer.line(MARGIN_LEFT, writer.y + 2, MARGIN_LEFT + VALUE_WIDTH, writer.y + 2)

        writer.y += 10


def _add_section(
    writer: _FormWriter,
    section: dict[str, Any],
    all_fields: dict[str, dict[str, Any]],
    populated: dict[str, Any],
) -> None:
    if writer.y > SECTION_BREAK_Y:
        writer.new_page()

    writer.text(MARGIN_LEFT, writer.y, section.get("title") or "", 14, FONT_BOLD)
    writer.y += 12

    if section.get("description"):
        lines = writer.wrap(section["description"], DESCRIPTION_WIDTH, 10, FONT_ITALIC)
        for offset, line in enumerate(lines):
            writer.text(MARGIN_LEFT, writer.y + offset * 5, line, 10, FONT_ITALIC)
        writer.y += len(lines) * 5 + 5

    section_fields = {fid: all_fields[fid] for fid in section.get("fields") or [] if fid in all_fields}
    _add_fields(writer, section_fields, populated)


def render_form_pdf(form_structure: dict[str, Any], populated: dict[str, Any]) -> bytes:
    """Render a populated form structure to PDF bytes."""
    pymupdf = _get_fitz()
    doc = pymupdf.open()
    try:
        writer = _FormWriter(doc)
        title = (form_structure.get("formMetadata") or {}).get("title") or "Completed Application Form"
        writer.text(MARGIN_LEFT, writer.y, title, 16, FONT_BOLD)
        writer.y += 15
        writer.text(MARGIN_LEFT, writer.y, f"Generated: {date.today().strftime('%m/%d/%Y')}", 10)
        writer.y += 20

        fields = form_structure.get("formFields") or {}
        sections = form_structure.get("formSections") or []
        if sections:
            for section in sections:
                _add_section(writer, section, fields, populated)
                writer.y += 10
        else:
            _add_fields(writer, fields, populated)

        return doc.tobytes()
    finally:
        doc.close()


def generate_completed_form(
    form_structure: dict[str, Any] | None,
    user_data: dict[str, Any],
    field_mappings: dict[str, dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """
    Populate and render a completed application form.

    Args:
        form_structure: Dict with formFields, optional formSections and formMetadata
        user_data: Dict with organization, project and user sub-dicts
        field_mappings: Optional explicit field id -> mapping

    Returns:
        {success, document (PDF bytes), metadata} on success, or
        {success: False, error, metadata} on failure
    """
    structure = form_structure or {}
    title = (structure.get("formMetadata") or {}).get("title")

    try:
        if not isinstance(structure.get("formFields"), dict):
            raise ValueError("Invalid form structure provided")

        populated = populate_form_fields(structure, user_data or {}, field_mappings)
        document = render_form_pdf(structure, populated)

        logger.info(
            f"Generated form '{title or 'Generated Form'}'",
            extra={"fields": len(structure["formFields"]), "populated": len(populated)},
        )
        return {
            "success": True,
            "document": document,
            "populatedFields": populated,
            "metadata": {
                "totalFields": len(structure["formFields"]),
                "populatedFields": len(populated),
                "generatedAt": datetime.now(timezone.utc).isoformat(),
                "formTitle": title or "Generated Form",
            },
        }
    except Exception as e:
        logger.error(f"Document generation failed: {e}")
        return {
            "success": False,
            "error": str(e),
            "metadata": {
                "generatedAt": datetime.now(timezone.utc).isoformat(),
                "formTitle": title or "Form Generation Failed",
            },
        }
