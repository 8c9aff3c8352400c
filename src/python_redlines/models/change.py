"""
Change model classes for representing normalized tracked changes.

A Change is the single shape shared by every source (DOCX track changes,
PDF review markup). RawRevision and TrackChanges hold the DOCX records as
they come out of the extractor, before normalization.
"""

from dataclasses import dataclass, field
from enum import Enum


class ChangeType(Enum):
    """Kinds of normalized changes.

    Attributes:
        DELETION: Text that was removed
        INSERTION: Text that was added
        PAIRED: A deletion and an insertion forming one replacement
    """

    DELETION = "deletion"
    INSERTION = "insertion"
    PAIRED = "paired"


@dataclass(frozen=True)
class Change:
    """A single tracked change, normalized across sources.

    Attributes:
        kind: Type of change (deletion, insertion or paired)
        deleted_text: Removed text (deletions and paired changes)
        inserted_text: Added text (insertions and paired changes)
        location: Free-form location hint such as "page 3"
        metadata: Ordered string-keyed metadata; always has "source"

    Example:
        >>> result = extract("contract.docx")
        >>> for change in result.changes:
        ...     print(change.kind.value, change.inserted_text or change.deleted_text)
    """

    kind: ChangeType
    deleted_text: str | None = None
    inserted_text: str | None = None
    location: str | None = None
    metadata: dict[str, str | None] = field(default_factory=dict)

    @property
    def source(self) -> str | None:
        """Where the change came from ("docx" or "pdf")."""
        return self.metadata.get("source")

    @property
    def is_blank(self) -> bool:
        """True when neither side carries any non-whitespace text."""
        return not (self.deleted_text or "").strip() and not (self.inserted_text or "").strip()

    def __repr__(self) -> str:
        """String representation of the change."""
        if self.kind is ChangeType.PAIRED:
            body = f"{self.deleted_text!r} -> {self.inserted_text!r}"
        elif self.kind is ChangeType.DELETION:
            body = repr(self.deleted_text)
        else:
            body = repr(self.inserted_text)
        return f"<Change {self.kind.value}: {body}>"


@dataclass(frozen=True)
class RawRevision:
    """One w:ins or w:del element as read from the document.

    Attributes:
        id: The w:id attribute ("" when absent)
        author: The w:author attribute ("" when absent)
        date: The w:date attribute, unparsed ("" when absent)
        text: Trimmed text content of the wrapper
    """

    id: str
    author: str
    date: str
    text: str


@dataclass(frozen=True)
class PdfRedline:
    """One redline found by a PDF backend, before normalization.

    Attributes:
        kind: Deletion, insertion, or paired replacement
        deletion: Struck-out text, if any
        insertion: Added text, if any
        location: Where it was found (e.g., "page 2")
    """

    kind: ChangeType
    deletion: str | None = None
    insertion: str | None = None
    location: str | None = None


@dataclass(frozen=True)
class TrackChanges:
    """Raw insertion and deletion records of a single XML part."""

    insertions: list[RawRevision] = field(default_factory=list)
    deletions: list[RawRevision] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True when the part has no insertions and no deletions."""
        return not self.insertions and not self.deletions

    def to_changes(self) -> list[Change]:
        """Normalize these records into a sorted list of changes."""
        from python_redlines.extractor import to_changes

        return to_changes(self)
