"""
DocxPackage class for reading and rewriting the parts of a .docx ZIP.

The whole package is held in memory. Parts that are not replaced are written
back byte-for-byte, with their original entry order, timestamps and
compression.
"""

import copy
import io
import logging
import zipfile
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any, BinaryIO

from .errors import UnsupportedInputTypeError

logger = logging.getLogger(__name__)

DocxSource = str | Path | bytes | BinaryIO


class DocxPackage:
    """An OOXML ZIP package held in memory.

    Example:
        >>> with DocxPackage.open("document.docx") as pkg:
        ...     doc_xml = pkg.get_part("word/document.xml")
        ...     # Modify doc_xml...
        ...     pkg.set_part("word/document.xml", doc_xml)
        ...     pkg.save("modified.docx")
    """

    def __init__(
        self,
        entries: list[tuple[zipfile.ZipInfo, bytes]],
        source_path: Path | None = None,
    ) -> None:
        """Initialize package from already-read entries.

        Use the class methods `open()` or `from_bytes()` instead of
        calling this constructor directly.

        Args:
            entries: (ZipInfo, content) pairs in archive order
            source_path: Original source file path, if any
        """
        self._infos = [info for info, _ in entries]
        self._contents = {info.filename: content for info, content in entries}
        self._source_path = source_path

    @classmethod
    def open(cls, source: DocxSource) -> "DocxPackage":
        """Open a package from a path, raw bytes, or a binary file object.

        Args:
            source: Path to a .docx file, its bytes, or a file-like object

        Returns:
            DocxPackage with every entry read into memory

        Raises:
            FileNotFoundError: If a path is given and does not exist
            UnsupportedInputTypeError: If the source is not a ZIP archive
        """
        source_path: Path | None = None

        if isinstance(source, bytes):
            zip_source: Path | BinaryIO = io.BytesIO(source)
        elif isinstance(source, str | Path):
            source_path = Path(source)
            if not source_path.exists():
                raise FileNotFoundError(f"Document not found: {source_path}")
            zip_source = source_path
        else:
            zip_source = source

        if not zipfile.is_zipfile(zip_source):
            raise UnsupportedInputTypeError("non-zip content", "expected a .docx (ZIP) package")

        # Reset stream position if it was checked by is_zipfile
        if hasattr(zip_source, "seek"):
            zip_source.seek(0)

        try:
            with zipfile.ZipFile(zip_source, "r") as zip_ref:
                entries = [(info, zip_ref.read(info)) for info in zip_ref.infolist()]
        except (zipfile.BadZipFile, zipfile.LargeZipFile) as e:
            raise UnsupportedInputTypeError("corrupt zip", str(e)) from e

        logger.debug("Opened package with %d part(s)", len(entries))
        return cls(entries, source_path)

    @classmethod
    def from_bytes(cls, data: bytes) -> "DocxPackage":
        """Open a package from bytes.

        Args:
            data: Bytes containing a .docx file

        Returns:
            DocxPackage instance
        """
        return cls.open(data)

    @property
    def source_path(self) -> Path | None:
        """Get the original source file path, if available."""
        return self._source_path

    @property
    def part_names(self) -> list[str]:
        """Names of all entries, in archive order."""
        return [info.filename for info in self._infos]

    def __iter__(self) -> Iterator[str]:
        return iter(self.part_names)

    def has_part(self, part_name: str) -> bool:
        """Check if a package part exists.

        Args:
            part_name: Entry name within the package (e.g., "word/document.xml")
        """
        return part_name in self._contents

    def get_part(self, part_name: str) -> bytes | None:
        """Get the raw bytes of a package part, or None if it doesn't exist."""
        return self._contents.get(part_name)

    def set_part(self, part_name: str, data: bytes) -> None:
        """Replace (or add) a package part.

        Args:
            part_name: Entry name within the package
            data: New content of the part
        """
        if part_name not in self._contents:
            self._infos.append(zipfile.ZipInfo(part_name))
        self._contents[part_name] = data

    def save(self, output_path: str | Path) -> None:
        """Save the package to a .docx file.

        Args:
            output_path: Path to save the .docx file
        """
        Path(output_path).write_bytes(self.save_to_bytes())

    def save_to_bytes(self, replacements: Mapping[str, bytes] | None = None) -> bytes:
        """Save the package to bytes.

        Args:
            replacements: Content to write instead of existing parts, by
                entry name; the package itself is not modified

        Returns:
            The complete .docx file as bytes
        """
        replacements = replacements or {}
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zip_ref:
            for info in self._infos:
                entry = copy.copy(info)
                if entry.compress_type not in (zipfile.ZIP_STORED, zipfile.ZIP_DEFLATED):
                    entry.compress_type = zipfile.ZIP_DEFLATED
                data = replacements.get(info.filename, self._contents[info.filename])
                zip_ref.writestr(entry, data)
        return buffer.getvalue()

    def close(self) -> None:
        """Release the in-memory parts."""
        self._contents.clear()
        self._infos.clear()

    def __enter__(self) -> "DocxPackage":
        """Context manager support."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager cleanup."""
        self.close()
