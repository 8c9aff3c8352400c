"""
PDF adapter: a pluggable backend for finding redlines in PDFs.

Finding redlines in a PDF needs a native PDF library. The library is used
through the PdfRedlineBackend interface; the default implementation is
PyMuPDFBackend, available with the ``pdf`` extra::

    pip install python-redlines[pdf]

The default backend is chosen once, when this module is imported. Any other
backend can be passed to each call with ``backend=``.
"""

import logging
from pathlib import Path
from typing import Any, Protocol

from .errors import UnsupportedInputTypeError
from .models.change import Change, PdfRedline

logger = logging.getLogger(__name__)


class PdfRedlineBackend(Protocol):
    """Capability interface for PDF redline extraction."""

    def extract_redlines(self, path: str | Path, **options: Any) -> list[PdfRedline]:
        """Find all redlines in the PDF at ``path``."""
        ...

    def has_redlines(self, path: str | Path, **options: Any) -> bool:
        """Return True as soon as one redline is found."""
        ...


try:
    from .pdf_pymupdf import PyMuPDFBackend
except ImportError:
    # PyMuPDF is an optional extra
    DEFAULT_BACKEND: PdfRedlineBackend | None = None
else:
    DEFAULT_BACKEND = PyMuPDFBackend()


def resolve_backend(backend: PdfRedlineBackend | None = None) -> PdfRedlineBackend:
    """Pick the backend for a call: the one given, else the default.

    Raises:
        UnsupportedInputTypeError: If no backend is given and PyMuPDF is not
            installed
    """
    if backend is not None:
        return backend
    if DEFAULT_BACKEND is None:
        raise UnsupportedInputTypeError(
            "pdf", "PDF support requires PyMuPDF: pip install python-redlines[pdf]"
        )
    return DEFAULT_BACKEND


def extract_redlines(
    path: str | Path, *, backend: PdfRedlineBackend | None = None, **options: Any
) -> list[PdfRedline]:
    """Extract redlines from a PDF file.

    Args:
        path: Path to the PDF
        backend: Backend to use instead of the default
        **options: Forwarded to the backend

    Returns:
        Redlines in page order
    """
    redlines = resolve_backend(backend).extract_redlines(path, **options)
    logger.debug("Found %d PDF redline(s) in %s", len(redlines), path)
    return redlines


def has_redlines(
    path: str | Path, *, backend: PdfRedlineBackend | None = None, **options: Any
) -> bool:
    """Fast redline presence check for PDFs (early exit)."""
    return resolve_backend(backend).has_redlines(path, **options)


def to_changes(redlines: list[PdfRedline]) -> list[Change]:
    """Convert PDF redlines into normalized changes.

    Order is preserved; redlines without any text are dropped.
    """
    changes = [
        Change(
            kind=redline.kind,
            deleted_text=redline.deletion,
            inserted_text=redline.insertion,
            location=redline.location,
            metadata={"source": "pdf"},
        )
        for redline in redlines
    ]
    return [change for change in changes if not change.is_blank]
