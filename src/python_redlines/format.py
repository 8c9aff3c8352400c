"""
Formatting helpers for presenting tracked changes in LLM prompts.
"""

from collections.abc import Callable, Sequence

from .constants import DEFAULT_MAX_LEN, DEFAULT_PAIR_SEPARATOR
from .errors import UnsupportedInputTypeError
from .models.change import Change, ChangeType, PdfRedline, TrackChanges
from .pdf import to_changes as pdf_to_changes
from .results import ExtractionResult

FormatInput = ExtractionResult | TrackChanges | Sequence[Change] | Sequence[PdfRedline]


def _normalize_to_changes(changes: FormatInput) -> list[Change]:
    if isinstance(changes, ExtractionResult):
        return list(changes.changes)
    if isinstance(changes, TrackChanges):
        return changes.to_changes()
    if all(isinstance(item, Change) for item in changes):
        return list(changes)
    if all(isinstance(item, PdfRedline) for item in changes):
        return pdf_to_changes(list(changes))
    raise UnsupportedInputTypeError(
        type(changes).__name__, "expected changes, PDF redlines, or an extraction result"
    )


def _truncate(text: str | None, max_len: int) -> str:
    text = (text or "").strip()
    if len(text) > max_len:
        # Keep room for "..."
        return text[: max_len - 3] + "..."
    return text


def _format_paired(deleted: str, inserted: str, separator: str) -> str:
    if not deleted and not inserted:
        return ""
    left = f'"{deleted}"' if deleted else "(nothing)"
    right = f'"{inserted}"' if inserted else "(nothing)"
    return f"  {left} {separator} {right}"


def _add_section(sections: list[list[str]], title: str, lines: list[str]) -> None:
    lines = [line for line in lines if line]
    if lines:
        sections.append([title, *lines])


def format_for_llm(
    changes: FormatInput,
    *,
    pair_separator: str = DEFAULT_PAIR_SEPARATOR,
    max_len: int = DEFAULT_MAX_LEN,
) -> str:
    """Format tracked changes for an LLM prompt.

    Deletions, insertions and paired replacements are grouped under titled
    sections, in that order, separated by two blank lines. Empty groups are
    left out.

    Args:
        changes: An ExtractionResult, TrackChanges, or a sequence of Change
            or PdfRedline records
        pair_separator: Arrow placed between deleted and inserted text
        max_len: Maximum length of each quoted text (longer text is cut and
            ends in "...")

    Returns:
        The formatted text, or "" when there is nothing to show

    Example:
        >>> print(format_for_llm([Change(kind=ChangeType.DELETION, deleted_text="3")]))
        DELETIONS (removed content):
          - "3"
    """
    normalized = _normalize_to_changes(changes)
    if not normalized:
        return ""

    def texts(kind: ChangeType, get: Callable[[Change], str | None]) -> list[str]:
        return [_truncate(get(c), max_len) for c in normalized if c.kind is kind]

    sections: list[list[str]] = []
    _add_section(
        sections,
        "DELETIONS (removed content):",
        [f'  - "{text}"' for text in texts(ChangeType.DELETION, lambda c: c.deleted_text) if text],
    )
    _add_section(
        sections,
        "INSERTIONS (new content):",
        [f'  + "{text}"' for text in texts(ChangeType.INSERTION, lambda c: c.inserted_text) if text],
    )
    _add_section(
        sections,
        f"DELETED {pair_separator} INSERTED:",
        [
            _format_paired(
                _truncate(c.deleted_text, max_len),
                _truncate(c.inserted_text, max_len),
                pair_separator,
            )
            for c in normalized
            if c.kind is ChangeType.PAIRED
        ],
    )

    if not sections:
        return ""
    return "\n\n\n".join("\n".join(section) for section in sections) + "\n"
