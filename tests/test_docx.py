"""
Tests for DOCX-level extraction and cleaning.

These tests verify:
- Parts other than the cleaned ones are copied byte-for-byte
- Missing parts are skipped or reported
- A failing part leaves the package untouched
- Cleanable part discovery
"""

import io
import logging
import zipfile
from pathlib import Path

import pytest

from python_redlines import (
    DocxPackage,
    MissingPartError,
    ParseError,
    PartCleanError,
    UnsupportedInputTypeError,
    clean_docx,
    clean_docx_with_warnings,
    discover_cleanable_parts,
)
from python_redlines.docx import extract_track_changes

WORD_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"

DOCUMENT_XML = f"""<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<w:document xmlns:w="{WORD_NS}">
  <w:body>
    <w:p>
      <w:r><w:t>Keep</w:t></w:r>
      <w:ins w:id="1" w:author="Alice" w:date="2026-02-01T00:00:00Z">
        <w:r><w:t>Inserted &amp; Content</w:t></w:r>
      </w:ins>
      <w:del w:id="2" w:author="Bob" w:date="2026-02-02T00:00:00Z">
        <w:r><w:delText>Deleted Content</w:delText></w:r>
      </w:del>
    </w:p>
  </w:body>
</w:document>"""

HEADER_XML = f"""<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<w:hdr xmlns:w="{WORD_NS}"><w:p>
  <w:ins w:id="3" w:author="Alice"><w:r><w:t>Draft</w:t></w:r></w:ins>
  <w:r><w:rPr><w:rPrChange w:id="4"/></w:rPr><w:t>Header</w:t></w:r>
</w:p></w:hdr>"""

OTHER_XML = "<root>unchanged</root>"


def create_test_docx(path: Path, entries: dict[str, str] | None = None) -> Path:
    """Create a .docx with the given entries (default: document and one other part)."""
    if entries is None:
        entries = {"word/document.xml": DOCUMENT_XML, "word/other.xml": OTHER_XML}
    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, content in entries.items():
            zf.writestr(name, content)
    return path


def read_entries(data: bytes) -> dict[str, bytes]:
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        return {info.filename: zf.read(info) for info in zf.infolist()}


class TestCleanDocx:
    """Tests for clean_docx()."""

    def test_accepts_changes_in_document(self, tmp_path):
        """Test that the main document is cleaned and stays well-formed."""
        docx = create_test_docx(tmp_path / "test.docx")

        entries = read_entries(clean_docx(docx))

        document = entries["word/document.xml"].decode()
        assert "Keep" in document
        assert "Inserted &amp; Content" in document
        assert f'xmlns:w="{WORD_NS}"' in document
        assert "<w:ins" not in document
        assert "</w:ins>" not in document
        assert "<w:del" not in document
        assert "Deleted Content" not in document

    def test_other_parts_byte_identical(self, tmp_path):
        """Test that parts which are not cleaned are copied unchanged."""
        docx = create_test_docx(tmp_path / "test.docx")

        entries = read_entries(clean_docx(docx))

        assert entries["word/other.xml"] == OTHER_XML.encode()

    def test_entry_order_and_timestamps_kept(self, tmp_path):
        """Test that the rebuilt archive keeps entry order and dates."""
        docx = tmp_path / "test.docx"
        with zipfile.ZipFile(docx, "w") as zf:
            zf.writestr(zipfile.ZipInfo("[Content_Types].xml", (2020, 5, 17, 8, 30, 0)), "<Types/>")
            zf.writestr(zipfile.ZipInfo("word/document.xml", (2021, 1, 2, 3, 4, 6)), DOCUMENT_XML)

        with zipfile.ZipFile(io.BytesIO(clean_docx(docx))) as zf:
            infos = zf.infolist()

        assert [info.filename for info in infos] == ["[Content_Types].xml", "word/document.xml"]
        assert infos[0].date_time == (2020, 5, 17, 8, 30, 0)
        assert infos[1].date_time == (2021, 1, 2, 3, 4, 6)

    def test_accepts_bytes_and_file_objects(self, tmp_path):
        """Test the different source types."""
        docx = create_test_docx(tmp_path / "test.docx")
        data = docx.read_bytes()

        from_path = clean_docx(docx)
        from_str = clean_docx(str(docx))
        from_bytes = clean_docx(data)
        from_stream = clean_docx(io.BytesIO(data))

        assert read_entries(from_path) == read_entries(from_str)
        assert read_entries(from_path) == read_entries(from_bytes)
        assert read_entries(from_path) == read_entries(from_stream)

    def test_several_parts(self, tmp_path):
        """Test cleaning the document and a header together."""
        docx = create_test_docx(
            tmp_path / "test.docx",
            {"word/document.xml": DOCUMENT_XML, "word/header1.xml": HEADER_XML},
        )

        entries = read_entries(clean_docx(docx, parts=["word/document.xml", "word/header1.xml"]))

        header = entries["word/header1.xml"].decode()
        assert "Draft" in header
        assert "<w:ins" not in header
        assert "rPrChange" not in header
        assert "Deleted Content" not in entries["word/document.xml"].decode()

    def test_header_untouched_by_default(self, tmp_path):
        """Test that only the main document is cleaned without parts=."""
        docx = create_test_docx(
            tmp_path / "test.docx",
            {"word/document.xml": DOCUMENT_XML, "word/header1.xml": HEADER_XML},
        )

        entries = read_entries(clean_docx(docx))

        assert entries["word/header1.xml"] == HEADER_XML.encode()

    def test_missing_part_skipped(self, tmp_path, caplog):
        """Test that a missing part is skipped by default."""
        docx = create_test_docx(tmp_path / "test.docx")

        with caplog.at_level(logging.WARNING, logger="python_redlines"):
            entries = read_entries(clean_docx(docx, parts=["word/header9.xml"]))

        assert entries["word/document.xml"] == DOCUMENT_XML.encode()
        assert "word/header9.xml" not in entries
        assert "word/header9.xml" in caplog.text

    def test_missing_part_error(self, tmp_path):
        """Test that a missing part raises when asked to."""
        docx = create_test_docx(tmp_path / "test.docx")

        with pytest.raises(MissingPartError) as exc_info:
            clean_docx(docx, parts=["word/header9.xml"], on_missing="error")

        assert exc_info.value.part == "word/header9.xml"

    def test_missing_document_skipped(self, tmp_path):
        """Test a package without word/document.xml."""
        docx = create_test_docx(tmp_path / "test.docx", {"word/other.xml": OTHER_XML})

        entries = read_entries(clean_docx(docx))

        assert entries == {"word/other.xml": OTHER_XML.encode()}

    def test_failing_part_leaves_package_untouched(self, tmp_path):
        """Test that one malformed part fails the whole operation."""
        docx = create_test_docx(
            tmp_path / "test.docx",
            {"word/document.xml": DOCUMENT_XML, "word/header1.xml": "<w:hdr><broken>"},
        )
        package = DocxPackage.open(docx)

        with pytest.raises(PartCleanError) as exc_info:
            clean_docx(package, parts=["word/document.xml", "word/header1.xml"])

        assert exc_info.value.part == "word/header1.xml"
        assert isinstance(exc_info.value.error, ParseError)
        assert exc_info.value.error.part == "word/header1.xml"
        assert package.get_part("word/document.xml") == DOCUMENT_XML.encode()

    def test_duplicate_parts_cleaned_once(self, tmp_path):
        """Test that a part listed twice is only cleaned once."""
        docx = create_test_docx(tmp_path / "test.docx")

        _, warnings = clean_docx_with_warnings(
            docx, parts=["word/document.xml", "word/document.xml"]
        )

        assert warnings == []

    def test_not_a_zip(self):
        """Test that non-ZIP input is rejected."""
        with pytest.raises(UnsupportedInputTypeError):
            clean_docx(b"plain text, not a package")

    def test_missing_file(self, tmp_path):
        """Test that a missing path raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            clean_docx(tmp_path / "missing.docx")


class TestCleanDocxWithWarnings:
    """Tests for clean_docx_with_warnings()."""

    def test_warnings_tagged_with_part(self, tmp_path):
        """Test that warnings name the part they were found in."""
        docx = create_test_docx(
            tmp_path / "test.docx",
            {"word/document.xml": DOCUMENT_XML, "word/header1.xml": HEADER_XML},
        )

        cleaned, warnings = clean_docx_with_warnings(
            docx, parts=["word/document.xml", "word/header1.xml"]
        )

        assert [(w.element, w.count, w.part) for w in warnings] == [
            ("w:rPrChange", 1, "word/header1.xml")
        ]
        assert "Draft" in read_entries(cleaned)["word/header1.xml"].decode()


class TestDiscoverCleanableParts:
    """Tests for discover_cleanable_parts()."""

    def test_finds_story_parts_in_archive_order(self, tmp_path):
        """Test that the document, headers, footers and notes are listed."""
        docx = create_test_docx(
            tmp_path / "test.docx",
            {
                "[Content_Types].xml": "<Types/>",
                "word/document.xml": DOCUMENT_XML,
                "word/styles.xml": "<w:styles/>",
                "word/header1.xml": HEADER_XML,
                "word/footer2.xml": "<w:ftr/>",
                "word/footnotes.xml": "<w:footnotes/>",
                "word/endnotes.xml": "<w:endnotes/>",
                "word/header.xml.rels": "<Relationships/>",
            },
        )

        assert discover_cleanable_parts(docx) == [
            "word/document.xml",
            "word/header1.xml",
            "word/footer2.xml",
            "word/footnotes.xml",
            "word/endnotes.xml",
        ]

    def test_accepts_part_names(self):
        """Test discovery from a plain list of names."""
        names = ["word/footer1.xml", "word/document.xml", "docProps/core.xml"]

        assert discover_cleanable_parts(names) == ["word/footer1.xml", "word/document.xml"]

    def test_falls_back_to_document(self):
        """Test that the main document is returned when nothing matches."""
        assert discover_cleanable_parts([]) == ["word/document.xml"]

    def test_accepts_package(self, tmp_path):
        """Test discovery from an open package."""
        package = DocxPackage.open(create_test_docx(tmp_path / "test.docx"))

        assert discover_cleanable_parts(package) == ["word/document.xml"]


class TestExtractTrackChanges:
    """Tests for extract_track_changes()."""

    def test_extracts_from_document(self, tmp_path):
        """Test extraction from word/document.xml."""
        docx = create_test_docx(tmp_path / "test.docx")

        track_changes = extract_track_changes(docx)

        assert [r.text for r in track_changes.insertions] == ["Inserted & Content"]
        assert [r.author for r in track_changes.deletions] == ["Bob"]

    def test_missing_document_is_empty(self, tmp_path, caplog):
        """Test that a package without word/document.xml has no changes."""
        docx = create_test_docx(tmp_path / "test.docx", {"word/other.xml": OTHER_XML})

        with caplog.at_level(logging.WARNING, logger="python_redlines"):
            track_changes = extract_track_changes(docx)

        assert track_changes.is_empty
        assert "word/document.xml" in caplog.text

    def test_malformed_document(self, tmp_path):
        """Test that a malformed document raises ParseError naming the part."""
        docx = create_test_docx(tmp_path / "test.docx", {"word/document.xml": "<w:document>"})

        with pytest.raises(ParseError) as exc_info:
            extract_track_changes(docx)

        assert exc_info.value.part == "word/document.xml"
        assert "word/document.xml" in str(exc_info.value)
