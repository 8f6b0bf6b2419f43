"""Text extraction from uploaded funding documents and application forms."""

from dataclasses import dataclass, field
from io import BytesIO

from docx import Document

from app.core.logging import get_logger

logger = get_logger(__name__)

TEXT_EXTENSIONS = {".txt", ".md", ".json", ".csv", ".tsv", ".yaml", ".yml"}
PDF_CONTENT_TYPE = "application/pdf"
DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TEXT_CONTENT_TYPE_PREFIXES = ("text/", "application/json")

# Lazy import to avoid loading PyMuPDF at module load
fitz = None


def _get_fitz():
    """Lazy load PyMuPDF."""
    global fitz
    if fitz is None:
        import fitz as _fitz

        fitz = _fitz
    return fitz


@dataclass
class DocumentText:
    """Text pulled out of an upload."""

    text: str
    source_format: str
    detected_encoding: str | None = None
    page_count: int | None = None
    warnings: list[str] = field(default_factory=list)


def _get_extension(filename: str) -> str:
    if "." in filename:
        return "." + filename.rsplit(".", 1)[-1].lower()
    return ""


def _decode_bytes(raw_bytes: bytes) -> tuple[str, str]:
    """
    Decode bytes with a UTF-8-BOM / UTF-8 / Latin-1 fallback chain.

    Raises:
        ValueError: If no encoding works
    """
    if raw_bytes.startswith(b"\xef\xbb\xbf"):
        try:
            return raw_bytes.decode("utf-8-sig"), "utf-8-sig"
        except UnicodeDecodeError:
            pass

    for encoding in ("utf-8", "latin-1"):
        try:
            return raw_bytes.decode(encoding), encoding
        except UnicodeDecodeError:
            continue

    raise ValueError("Unable to decode file content. Supported encodings: UTF-8, UTF-8-BOM, Latin-1.")


def extract_pdf_text(raw_bytes: bytes) -> DocumentText:
    pymupdf = _get_fitz()
    warnings: list[str] = []
    pages: list[str] = []

    with pymupdf.open(stream=raw_bytes, filetype="pdf") as doc:
        page_count = doc.page_count
        for index, page in enumerate(doc):
            text = page.get_text("text").strip()
            if text:
                pages.append(text)
            else:
                warnings.append(f"Page {index + 1} has no extractable text")

    if not pages:
        warnings.append("PDF appears to be scanned; no text layer found")

    return DocumentText(
        text="\n\n".join(pages),
        source_format="pdf",
        page_count=page_count,
        warnings=warnings,
    )


def extract_docx_text(raw_bytes: bytes) -> DocumentText:
    doc = Document(BytesIO(raw_bytes))
    parts = [p.text for p in doc.paragraphs if p.text.strip()]

    # Application forms often keep their labels in tables
    for table in doc.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                parts.append(" | ".join(cells))

    return DocumentText(text="\n".join(parts), source_format="docx")


def extract_text_from_upload(
    filename: str,
    content_type: str | None,
    raw_bytes: bytes,
) -> DocumentText:
    """
    Extract text content from an uploaded file.

    Args:
        filename: Original filename
        content_type: MIME content type (may be None)
        raw_bytes: Raw file bytes

    Returns:
        DocumentText with the extracted text

    Raises:
        ValueError: If the file type is not supported or content cannot be decoded
    """
    extension = _get_extension(filename)
    content_type = (content_type or "").lower()

    if extension == ".pdf" or content_type == PDF_CONTENT_TYPE:
        result = extract_pdf_text(raw_bytes)
    elif extension == ".docx" or content_type == DOCX_CONTENT_TYPE:
        result = extract_docx_text(raw_bytes)
    elif extension in TEXT_EXTENSIONS or content_type.startswith(TEXT_CONTENT_TYPE_PREFIXES):
        text, encoding = _decode_bytes(raw_bytes)
        result = DocumentText(text=text, source_format="text", detected_encoding=encoding)
    else:
        allowed = ", ".join(sorted(TEXT_EXTENSIONS | {".pdf", ".docx"}))
        raise ValueError(f"Unsupported file type. Allowed extensions: {allowed}.")

    logger.info(
        f"Extracted {len(result.text)} chars from {filename}",
        extra={"source_format": result.source_format},
    )
    return result
