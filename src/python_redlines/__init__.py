"""
python_redlines - Extract, normalize and accept tracked changes ("redlines").

This package provides a single normalized shape (Change) for tracked changes
found in:

- DOCX track changes (<w:ins>, <w:del>)
- PDFs with review markup (strike-outs, underlines, carets), through a
  pluggable PDF backend

It can also accept all tracked changes in a DOCX, producing a clean copy.

Example:
    >>> import python_redlines
    >>> result = python_redlines.extract("contract.docx")
    >>> print(python_redlines.format_for_llm(result))
    >>> cleaned = python_redlines.clean_docx("contract.docx")
"""

__version__ = "0.5.0"
__all__ = [
    "extract",
    "infer_type",
    "clean_docx",
    "clean_docx_with_warnings",
    "discover_cleanable_parts",
    "accept_tracked_changes_xml",
    "parse_track_changes",
    "format_for_llm",
    "DocxPackage",
    "Change",
    "ChangeType",
    "PdfRedline",
    "RawRevision",
    "TrackChanges",
    "CleanWarning",
    "CleanedXml",
    "ExtractionResult",
    "RedlinesError",
    "ParseError",
    "MissingPartError",
    "UnsupportedInputTypeError",
    "InternalError",
    "PartCleanError",
]

from pathlib import Path
from typing import Any

from . import docx, pdf

# Import the single-part cleaner and extractor
from .cleaner import accept_tracked_changes_xml

# Import package-level operations
from .docx import clean_docx, clean_docx_with_warnings, discover_cleanable_parts
from .errors import (
    InternalError,
    MissingPartError,
    ParseError,
    PartCleanError,
    RedlinesError,
    UnsupportedInputTypeError,
)
from .extractor import parse_track_changes

# Import formatting
from .format import format_for_llm

# Import model classes
from .models.change import Change, ChangeType, PdfRedline, RawRevision, TrackChanges
from .package import DocxPackage

# Import result types
from .results import CleanedXml, CleanWarning, ExtractionResult


def infer_type(path: str | Path) -> str:
    """Infer the document type from a file extension.

    Returns:
        "docx", "pdf", or "unknown"
    """
    suffix = Path(path).suffix.lower()
    if suffix == ".docx":
        return "docx"
    if suffix == ".pdf":
        return "pdf"
    return "unknown"


def extract(
    path: str | Path,
    *,
    doc_type: str | None = None,
    pdf_backend: pdf.PdfRedlineBackend | None = None,
    pdf_options: dict[str, Any] | None = None,
) -> ExtractionResult:
    """Extract tracked changes from a file, inferring its type from the extension.

    Args:
        path: Path to a .docx or .pdf file
        doc_type: Override the inferred type ("docx" or "pdf")
        pdf_backend: PDF backend to use instead of the default
        pdf_options: Options forwarded to the PDF backend

    Returns:
        ExtractionResult with normalized changes

    Raises:
        UnsupportedInputTypeError: If the type is neither docx nor pdf
        ParseError: If the DOCX main part is not well-formed XML
    """
    doc_type = doc_type or infer_type(path)

    if doc_type == "docx":
        changes = docx.extract_track_changes(path).to_changes()
        return ExtractionResult(source="docx", changes=changes)

    if doc_type == "pdf":
        redlines = pdf.extract_redlines(path, backend=pdf_backend, **(pdf_options or {}))
        return ExtractionResult(source="pdf", changes=pdf.to_changes(redlines))

    raise UnsupportedInputTypeError(doc_type, f"cannot extract changes from {path}")
