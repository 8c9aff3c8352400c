"""
Data model classes for python_redlines.

These classes are plain immutable records; all parsing lives elsewhere.
"""

from python_redlines.models.change import (
    Change,
    ChangeType,
    PdfRedline,
    RawRevision,
    TrackChanges,
)

__all__ = [
    "Change",
    "ChangeType",
    "PdfRedline",
    "RawRevision",
    "TrackChanges",
]
