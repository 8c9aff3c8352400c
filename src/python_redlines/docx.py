"""
DOCX-level operations: extracting track changes and accepting them.

These functions apply the single-part extractor and cleaner to the parts of
a .docx package. Cleaning is all-or-nothing: every requested part is
rewritten before any of them is substituted, so a failure leaves the
package untouched.
"""

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Literal

from .cleaner import accept_tracked_changes_xml
from .constants import (
    DEFAULT_PARTS,
    HEADER_FOOTER_PART_PATTERN,
    MAIN_DOCUMENT_PART,
    NOTES_PARTS,
)
from .errors import MissingPartError, ParseError, PartCleanError, RedlinesError
from .extractor import parse_track_changes
from .models.change import TrackChanges
from .package import DocxPackage, DocxSource
from .results import CleanWarning

logger = logging.getLogger(__name__)

OnMissing = Literal["skip", "error"]


def _as_package(source: DocxSource | DocxPackage) -> DocxPackage:
    if isinstance(source, DocxPackage):
        return source
    return DocxPackage.open(source)


def discover_cleanable_parts(source: DocxSource | DocxPackage | Iterable[str]) -> list[str]:
    """List the parts that usually carry tracked changes.

    Picks the main document, headers, footers, footnotes and endnotes, in
    archive order. Falls back to the main document part when none of them
    is present.

    Args:
        source: A package, a package source, or an iterable of part names

    Returns:
        Part names to pass as ``parts=`` to clean_docx()
    """
    if isinstance(source, DocxPackage):
        names: Iterable[str] = source.part_names
    elif isinstance(source, str | bytes | Path) or hasattr(source, "read"):
        names = DocxPackage.open(source).part_names
    else:
        names = source

    parts = [
        name
        for name in names
        if name == MAIN_DOCUMENT_PART
        or name in NOTES_PARTS
        or HEADER_FOOTER_PART_PATTERN.match(name)
    ]
    return parts or list(DEFAULT_PARTS)


def extract_track_changes(source: DocxSource | DocxPackage) -> TrackChanges:
    """Extract raw insertions and deletions from the main document part.

    Args:
        source: Path to a .docx, its bytes, a file object, or a DocxPackage

    Returns:
        TrackChanges; empty when the package has no word/document.xml

    Raises:
        ParseError: If word/document.xml exists but is not well-formed
        UnsupportedInputTypeError: If the source is not a ZIP package
    """
    package = _as_package(source)
    xml = package.get_part(MAIN_DOCUMENT_PART)
    if xml is None:
        logger.warning("No %s found in DOCX; reporting no changes", MAIN_DOCUMENT_PART)
        return TrackChanges()

    try:
        return parse_track_changes(xml)
    except ParseError as e:
        e.part = MAIN_DOCUMENT_PART
        raise


def _clean_parts(
    package: DocxPackage,
    parts: Iterable[str],
    on_missing: OnMissing,
    collect_warnings: bool,
) -> tuple[dict[str, bytes], list[CleanWarning]]:
    """Accept changes in each requested part without touching the package."""
    cleaned: dict[str, bytes] = {}
    warnings: list[CleanWarning] = []

    for part in dict.fromkeys(parts):
        xml = package.get_part(part)
        if xml is None:
            if on_missing == "error":
                raise MissingPartError(part)
            logger.warning("Part %s not found; skipping", part)
            continue

        try:
            result = accept_tracked_changes_xml(xml, warnings=collect_warnings)
        except RedlinesError as e:
            if isinstance(e, ParseError):
                e.part = part
            raise PartCleanError(part, e) from e

        logger.debug("Cleaned %s (%d -> %d bytes)", part, len(xml), len(result.xml))
        cleaned[part] = result.xml
        warnings.extend(
            CleanWarning(element=w.element, count=w.count, part=part) for w in result.warnings
        )

    return cleaned, warnings


def clean_docx_with_warnings(
    source: DocxSource | DocxPackage,
    parts: Iterable[str] | None = None,
    *,
    on_missing: OnMissing = "skip",
) -> tuple[bytes, list[CleanWarning]]:
    """Accept tracked changes and report revision markup that was present.

    Args:
        source: Path to a .docx, its bytes, a file object, or a DocxPackage
        parts: Zip entry names to clean (default: word/document.xml)
        on_missing: "skip" to ignore parts that don't exist, "error" to raise

    Returns:
        Tuple of (cleaned .docx bytes, warnings tagged with their part)

    Raises:
        PartCleanError: If a part cannot be parsed or rewritten
        MissingPartError: If a part is missing and on_missing="error"
        UnsupportedInputTypeError: If the source is not a ZIP package
    """
    package = _as_package(source)
    cleaned, warnings = _clean_parts(
        package,
        DEFAULT_PARTS if parts is None else parts,
        on_missing,
        collect_warnings=True,
    )
    return package.save_to_bytes(replacements=cleaned), warnings


def clean_docx(
    source: DocxSource | DocxPackage,
    parts: Iterable[str] | None = None,
    *,
    on_missing: OnMissing = "skip",
) -> bytes:
    """Accept tracked changes in a .docx and return the cleaned package bytes.

    Deletions and move sources are removed, insertions and move destinations
    are unwrapped, and formatting-change bookkeeping is dropped. Parts not
    listed in ``parts`` are copied byte-for-byte.

    Args:
        source: Path to a .docx, its bytes, a file object, or a DocxPackage
        parts: Zip entry names to clean (default: word/document.xml)
        on_missing: "skip" to ignore parts that don't exist, "error" to raise

    Returns:
        The cleaned .docx as bytes

    Raises:
        PartCleanError: If a part cannot be parsed or rewritten
        MissingPartError: If a part is missing and on_missing="error"
        UnsupportedInputTypeError: If the source is not a ZIP package

    Example:
        >>> cleaned = clean_docx("contract.docx", parts=discover_cleanable_parts("contract.docx"))
        >>> Path("contract_clean.docx").write_bytes(cleaned)
    """
    package = _as_package(source)
    cleaned, _ = _clean_parts(
        package,
        DEFAULT_PARTS if parts is None else parts,
        on_missing,
        collect_warnings=False,
    )
    return package.save_to_bytes(replacements=cleaned)
