"""Tests for upload text extraction."""

from io import BytesIO

import pytest
from docx import Document

from app.core.document_text import extract_text_from_upload


class TestPlainText:
    def test_utf8_text(self):
        result = extract_text_from_upload("guidelines.txt", "text/plain", "Eligibility: nonprofits".encode())

        assert result.text == "Eligibility: nonprofits"
        assert result.source_format == "text"
        assert result.detected_encoding == "utf-8"

    def test_utf8_bom(self):
        result = extract_text_from_upload("notes.md", None, b"\xef\xbb\xbfHello")

        assert result.text == "Hello"
        assert result.detected_encoding == "utf-8-sig"

    def test_latin1_fallback(self):
        result = extract_text_from_upload("rfp.txt", None, "Caf\xe9".encode("latin-1"))

        assert result.text == "Café"
        assert result.detected_encoding == "latin-1"

    def test_content_type_without_extension(self):
        result = extract_text_from_upload("upload", "application/json", b'{"a": 1}')

        assert result.source_format == "text"


def test_unsupported_type():
    with pytest.raises(ValueError, match="Unsupported file type"):
        extract_text_from_upload("image.png", "image/png", b"\x89PNG")


def test_docx_paragraphs_and_tables():
    doc = Document()
    doc.add_paragraph("Grant Application Form")
    doc.add_paragraph("   ")
    table = doc.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "Organization Name"
    table.rows[0].cells[1].text = "Acme"
    buffer = BytesIO()
    doc.save(buffer)

    result = extract_text_from_upload("form.docx", None, buffer.getvalue())

    assert result.source_format == "docx"
    assert result.text == "Grant Application Form\nOrganization Name | Acme"
