"""
Result classes for extraction and cleaning operations.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field

from .models.change import Change


@dataclass(frozen=True)
class CleanWarning:
    """Revision markup that was present while accepting changes.

    Cleaning still succeeds; the warning lets callers report documents that
    carried move history or formatting revisions.

    Attributes:
        element: Qualified element name (e.g., "w:rPrChange")
        count: Number of occurrences, including inside removed content
        part: Zip entry the element was found in, when cleaning a package
        type: Warning category
    """

    element: str
    count: int
    part: str | None = None
    type: str = "revision_markup"

    def __str__(self) -> str:
        """Get string representation of the warning."""
        where = f" in {self.part}" if self.part else ""
        return f"{self.element} x{self.count}{where}"


@dataclass
class CleanedXml:
    """Result of accepting tracked changes in one XML part.

    Attributes:
        xml: The rewritten XML bytes
        warnings: Revision markup warnings (empty unless requested)
    """

    xml: bytes
    warnings: list[CleanWarning] = field(default_factory=list)


@dataclass
class ExtractionResult:
    """Normalized changes extracted from one document.

    Attributes:
        source: "docx" or "pdf"
        changes: Changes in document order
    """

    source: str
    changes: list[Change] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.changes)

    def __iter__(self) -> Iterator[Change]:
        return iter(self.changes)

    def __str__(self) -> str:
        """Get string representation of the result."""
        count = len(self.changes)
        return f"{count} change{'s' if count != 1 else ''} from {self.source}"
