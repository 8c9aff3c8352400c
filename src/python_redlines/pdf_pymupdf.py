"""
PyMuPDF implementation of the PDF redline backend.

Redlines are read from review annotations:

- StrikeOut marks a deletion (the struck text)
- Underline marks an insertion (the underlined text)
- Caret marks an insertion (the annotation's comment text)

A deletion immediately followed by an insertion on the same line is
reported as one paired replacement.
"""

import logging
import re
from pathlib import Path
from typing import Any

import fitz  # PyMuPDF

from .models.change import ChangeType, PdfRedline

logger = logging.getLogger(__name__)

DELETION_ANNOTATIONS = frozenset({"StrikeOut"})
INSERTION_ANNOTATIONS = frozenset({"Underline", "Caret"})

_WHITESPACE_RE = re.compile(r"\s+")


def _markup_rects(annot: Any) -> list[Any]:
    """Rectangles covered by a text markup annotation, one per quad."""
    vertices = annot.vertices or []
    if len(vertices) < 4:
        return [annot.rect]

    rects = []
    for i in range(0, len(vertices) - 3, 4):
        xs = [point[0] for point in vertices[i : i + 4]]
        ys = [point[1] for point in vertices[i : i + 4]]
        rects.append(fitz.Rect(min(xs), min(ys), max(xs), max(ys)))
    return rects


def _annotation_text(page: Any, annot: Any) -> str:
    if annot.type[1] == "Caret":
        text = annot.info.get("content", "")
    else:
        text = " ".join(page.get_textbox(rect) for rect in _markup_rects(annot))
    return _WHITESPACE_RE.sub(" ", text).strip()


def _same_line(first: Any, second: Any) -> bool:
    return min(first.y1, second.y1) - max(first.y0, second.y0) > 0


class PyMuPDFBackend:
    """Find redlines in PDF review annotations using PyMuPDF."""

    def _page_marks(self, page: Any) -> list[tuple[ChangeType, str, Any]]:
        marks = []
        for annot in page.annots():
            annot_type = annot.type[1]
            if annot_type in DELETION_ANNOTATIONS:
                kind = ChangeType.DELETION
            elif annot_type in INSERTION_ANNOTATIONS:
                kind = ChangeType.INSERTION
            else:
                logger.debug("Ignoring %s annotation on page %d", annot_type, page.number + 1)
                continue
            marks.append((kind, _annotation_text(page, annot), annot.rect))
        return marks

    def _page_redlines(self, page: Any) -> list[PdfRedline]:
        location = f"page {page.number + 1}"
        marks = self._page_marks(page)
        redlines = []

        i = 0
        while i < len(marks):
            kind, text, rect = marks[i]
            if kind is ChangeType.DELETION and i + 1 < len(marks):
                next_kind, next_text, next_rect = marks[i + 1]
                if next_kind is ChangeType.INSERTION and _same_line(rect, next_rect):
                    redlines.append(
                        PdfRedline(
                            kind=ChangeType.PAIRED,
                            deletion=text,
                            insertion=next_text,
                            location=location,
                        )
                    )
                    i += 2
                    continue

            if kind is ChangeType.DELETION:
                redlines.append(PdfRedline(kind=kind, deletion=text, location=location))
            else:
                redlines.append(PdfRedline(kind=kind, insertion=text, location=location))
            i += 1

        return redlines

    def extract_redlines(
        self, path: str | Path, *, pages: list[int] | None = None, **options: Any
    ) -> list[PdfRedline]:
        """Find redlines in the PDF at ``path``.

        Args:
            path: Path to the PDF
            pages: 1-based page numbers to scan (default: all pages)

        Returns:
            Redlines in page order, then annotation order
        """
        redlines = []
        with fitz.open(str(path)) as doc:
            for page in doc:
                if pages is not None and page.number + 1 not in pages:
                    continue
                redlines.extend(self._page_redlines(page))
        return redlines

    def has_redlines(self, path: str | Path, **options: Any) -> bool:
        """Return True as soon as one redline annotation is found."""
        tracked = DELETION_ANNOTATIONS | INSERTION_ANNOTATIONS
        with fitz.open(str(path)) as doc:
            for page in doc:
                if any(annot.type[1] in tracked for annot in page.annots()):
                    return True
        return False
