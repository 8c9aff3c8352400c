"""
Read-only extraction of tracked insertions and deletions.

Works on the bytes of a single WordprocessingML part. Each w:ins and w:del
element becomes a RawRevision; to_changes() turns those into normalized
Change records ordered by revision id.
"""

import logging
import re

from lxml import etree

from .constants import WORD_NAMESPACES
from .errors import ParseError
from .models.change import Change, ChangeType, RawRevision, TrackChanges

logger = logging.getLogger(__name__)

_LEADING_INT_RE = re.compile(r"^[+-]?\d+")


def _safe_fromstring(xml: bytes) -> etree._Element:
    """Parse XML without loading DTDs, resolving entities or touching the network.

    Entity declarations are refused, the same as when accepting changes.
    """
    parser = etree.XMLParser(resolve_entities=False, load_dtd=False, no_network=True)
    try:
        root = etree.fromstring(xml, parser)
    except etree.XMLSyntaxError as e:
        column = e.position[1] if e.position else None
        raise ParseError(e.msg or str(e), e.lineno, column) from e

    dtd = root.getroottree().docinfo.internalDTD
    if dtd is not None and any(True for _ in dtd.iterentities()):
        raise ParseError("Entity declarations are forbidden")
    return root


def _collect(root: etree._Element, wrapper: str, text_tag: str) -> list[RawRevision]:
    """Collect one RawRevision per wrapper element with non-blank text.

    Args:
        root: Parsed part
        wrapper: Local name of the wrapper ("ins" or "del")
        text_tag: Local name of the text-bearing descendants ("t" or "delText")
    """
    revisions = []
    for element in root.iter(*(f"{{{ns}}}{wrapper}" for ns in WORD_NAMESPACES)):
        ns = etree.QName(element).namespace
        text = "".join(node.text or "" for node in element.iter(f"{{{ns}}}{text_tag}")).strip()
        if not text:
            continue
        revisions.append(
            RawRevision(
                id=element.get(f"{{{ns}}}id", ""),
                author=element.get(f"{{{ns}}}author", ""),
                date=element.get(f"{{{ns}}}date", ""),
                text=text,
            )
        )
    return revisions


def parse_track_changes(xml: bytes) -> TrackChanges:
    """Extract insertions and deletions from one XML part.

    Args:
        xml: Bytes of the part (e.g., word/document.xml)

    Returns:
        TrackChanges with insertions (text from w:t) and deletions (text
        from w:delText) in document order; blank entries are dropped

    Raises:
        ParseError: If the XML cannot be parsed
    """
    root = _safe_fromstring(xml)
    track_changes = TrackChanges(
        insertions=_collect(root, "ins", "t"),
        deletions=_collect(root, "del", "delText"),
    )
    logger.debug(
        "Found %d insertion(s) and %d deletion(s)",
        len(track_changes.insertions),
        len(track_changes.deletions),
    )
    return track_changes


def _docx_metadata(revision: RawRevision) -> dict[str, str | None]:
    return {
        "source": "docx",
        "id": revision.id,
        "author": revision.author,
        "date": revision.date,
    }


def _id_sort_key(change: Change) -> tuple[int, int | str]:
    """Order by the leading integer of the revision id, else by the id itself.

    Numeric ids sort before non-numeric ones.
    """
    change_id = change.metadata.get("id")
    if not isinstance(change_id, str):
        return (0, 0)
    match = _LEADING_INT_RE.match(change_id)
    if match:
        return (0, int(match.group()))
    return (1, change_id)


def to_changes(track_changes: TrackChanges) -> list[Change]:
    """Normalize raw DOCX records into changes.

    Word revision ids are usually monotonic, so sorting by id interleaves
    the separately collected insertions and deletions in document order.

    Args:
        track_changes: Records returned by parse_track_changes()

    Returns:
        Non-blank changes sorted by revision id (stable)
    """
    changes = [
        Change(kind=ChangeType.INSERTION, inserted_text=r.text, metadata=_docx_metadata(r))
        for r in track_changes.insertions
    ]
    changes.extend(
        Change(kind=ChangeType.DELETION, deleted_text=r.text, metadata=_docx_metadata(r))
        for r in track_changes.deletions
    )
    return sorted((c for c in changes if not c.is_blank), key=_id_sort_key)
