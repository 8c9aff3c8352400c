"""
Centralized constants for OOXML namespaces, revision markup and defaults.

Import from here so the extractor, the cleaner and the package orchestration
agree on which elements count as tracked-change markup.
"""

import re

# =============================================================================
# Word Processing Namespaces
# =============================================================================

# Main WordprocessingML namespace (Word 2007+, transitional)
WORD_NAMESPACE = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"

# Strict OOXML flavour of the same vocabulary
WORD_STRICT_NAMESPACE = "http://purl.oclc.org/ooxml/wordprocessingml/main"

WORD_NAMESPACES = frozenset({WORD_NAMESPACE, WORD_STRICT_NAMESPACE})


# =============================================================================
# Revision Markup
# =============================================================================

# Wrappers whose whole subtree is dropped when changes are accepted
DELETE_SUBTREE_ELEMENTS = frozenset({"del", "moveFrom"})

# Wrappers whose tags are dropped but whose content is kept
UNWRAP_ELEMENTS = frozenset({"ins", "moveTo"})

# Plain insertion/deletion wrappers, excluded from cleaning warnings
PLAIN_REVISION_ELEMENTS = frozenset({"ins", "del"})

# Property-change bookkeeping (w:rPrChange, w:pPrChange, w:sectPrChange, ...)
BOOKKEEPING_SUFFIX = "Change"

# Paired range boundaries for moves and custom XML revisions
# (w:moveFromRangeStart, w:customXmlDelRangeEnd, ...)
RANGE_MARKER_PATTERN = re.compile(
    r"^(?:customXml)?(?:[Ii]ns|[Dd]el|[Mm]oveFrom|[Mm]oveTo)Range(?:Start|End)$"
)


# =============================================================================
# Package Parts
# =============================================================================

MAIN_DOCUMENT_PART = "word/document.xml"

# Parts rewritten by default when accepting changes
DEFAULT_PARTS = (MAIN_DOCUMENT_PART,)

# Notes parts picked up by part discovery
NOTES_PARTS = ("word/footnotes.xml", "word/endnotes.xml")

HEADER_FOOTER_PART_PATTERN = re.compile(r"^word/(?:header|footer)\d*\.xml$")


# =============================================================================
# Formatting Defaults
# =============================================================================

DEFAULT_PAIR_SEPARATOR = "→"

DEFAULT_MAX_LEN = 150


# =============================================================================
# Helper Functions
# =============================================================================


def is_bookkeeping_element(local_name: str) -> bool:
    """Check whether a WordprocessingML local name records prior state.

    Covers the ``*Change`` property-change elements and the revision range
    boundary markers.
    """
    return (
        local_name.endswith(BOOKKEEPING_SUFFIX) and local_name != BOOKKEEPING_SUFFIX
    ) or RANGE_MARKER_PATTERN.match(local_name) is not None


def is_revision_element(local_name: str) -> bool:
    """Check whether a WordprocessingML local name is counted as revision markup.

    Plain w:ins wrappers are not counted: accepting them leaves nothing behind
    worth reporting.
    """
    return (
        local_name in DELETE_SUBTREE_ELEMENTS
        or local_name == "moveTo"
        or is_bookkeeping_element(local_name)
    )
