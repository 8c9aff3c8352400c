"""Tests for the command-line interface."""

import json
import zipfile
from pathlib import Path

from typer.testing import CliRunner

from python_redlines import __version__
from python_redlines.cli import app

runner = CliRunner()

WORD_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"


def create_test_docx(path: Path, with_header: bool = False) -> Path:
    """Create a minimal .docx with one insertion and one deletion."""
    doc_xml = f"""<?xml version="1.0" encoding="UTF-8"?>
<w:document xmlns:w="{WORD_NS}">
    <w:body>
        <w:p>
            <w:r><w:t>Hello </w:t></w:r>
            <w:ins w:id="1" w:author="Alice"><w:r><w:t>new</w:t></w:r></w:ins>
            <w:del w:id="2" w:author="Bob"><w:r><w:delText>old</w:delText></w:r></w:del>
        </w:p>
    </w:body>
</w:document>"""

    header_xml = f"""<?xml version="1.0" encoding="UTF-8"?>
<w:hdr xmlns:w="{WORD_NS}"><w:p><w:r><w:rPr><w:rPrChange w:id="3"/></w:rPr><w:t>Head</w:t></w:r></w:p></w:hdr>"""

    content_types = """<?xml version="1.0" encoding="UTF-8"?>
<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">
    <Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>
    <Default Extension="xml" ContentType="application/xml"/>
    <Override PartName="/word/document.xml" ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"/>
</Types>"""

    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
        zf.writestr("[Content_Types].xml", content_types)
        zf.writestr("word/document.xml", doc_xml)
        if with_header:
            zf.writestr("word/header1.xml", header_xml)
    return path


def read_part(path: Path, name: str) -> str:
    with zipfile.ZipFile(path) as zf:
        return zf.read(name).decode()


class TestCLIVersion:
    """Tests for version option."""

    def test_version_flag(self):
        """Test --version shows version."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_version_short_flag(self):
        """Test -v shows version."""
        result = runner.invoke(app, ["-v"])
        assert result.exit_code == 0
        assert "redlines version" in result.stdout


class TestCLIHelp:
    """Tests for help output."""

    def test_help(self):
        """Test --help lists the commands."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("extract", "prompt", "clean", "parts"):
            assert command in result.stdout


class TestCLIExtract:
    """Tests for the extract command."""

    def test_extract_lists_changes(self, tmp_path):
        """Test that changes are listed with their authors."""
        docx = create_test_docx(tmp_path / "test.docx")

        result = runner.invoke(app, ["extract", str(docx)])

        assert result.exit_code == 0
        assert '+ "new" (Alice)' in result.stdout
        assert '- "old" (Bob)' in result.stdout

    def test_extract_json(self, tmp_path):
        """Test JSON output."""
        docx = create_test_docx(tmp_path / "test.docx")

        result = runner.invoke(app, ["extract", str(docx), "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["source"] == "docx"
        assert [c["type"] for c in data["changes"]] == ["insertion", "deletion"]
        assert data["changes"][0]["meta"]["author"] == "Alice"

    def test_extract_unknown_type(self, tmp_path):
        """Test that an unsupported file type fails."""
        notes = tmp_path / "notes.txt"
        notes.write_text("hello")

        result = runner.invoke(app, ["extract", str(notes)])

        assert result.exit_code == 1
        assert "Error" in result.output

    def test_extract_type_override(self, tmp_path):
        """Test --type for a file without a .docx extension."""
        docx = create_test_docx(tmp_path / "test.bin")

        result = runner.invoke(app, ["extract", str(docx), "--type", "docx"])

        assert result.exit_code == 0
        assert "new" in result.stdout


class TestCLIPrompt:
    """Tests for the prompt command."""

    def test_prompt(self, tmp_path):
        """Test prompt-ready output."""
        docx = create_test_docx(tmp_path / "test.docx")

        result = runner.invoke(app, ["prompt", str(docx)])

        assert result.exit_code == 0
        assert result.stdout == (
            'DELETIONS (removed content):\n  - "old"\n\n\n'
            'INSERTIONS (new content):\n  + "new"\n'
        )


class TestCLIClean:
    """Tests for the clean command."""

    def test_clean_to_output(self, tmp_path):
        """Test writing the cleaned document to a new file."""
        docx = create_test_docx(tmp_path / "test.docx")
        output = tmp_path / "clean.docx"

        result = runner.invoke(app, ["clean", str(docx), "-o", str(output)])

        assert result.exit_code == 0
        document = read_part(output, "word/document.xml")
        assert "new" in document
        assert "old" not in document
        assert "<w:ins" not in document
        assert "<w:ins" in read_part(docx, "word/document.xml")

    def test_clean_in_place(self, tmp_path):
        """Test that the input is overwritten without -o."""
        docx = create_test_docx(tmp_path / "test.docx")

        result = runner.invoke(app, ["clean", str(docx)])

        assert result.exit_code == 0
        assert "<w:del" not in read_part(docx, "word/document.xml")

    def test_clean_all_parts_with_warnings(self, tmp_path):
        """Test --all-parts and --warnings together."""
        docx = create_test_docx(tmp_path / "test.docx", with_header=True)

        result = runner.invoke(app, ["clean", str(docx), "--all-parts", "--warnings"])

        assert result.exit_code == 0
        assert "rPrChange" not in read_part(docx, "word/header1.xml")
        assert "w:rPrChange x1 in word/header1.xml" in result.output

    def test_clean_strict_missing_part(self, tmp_path):
        """Test that --strict fails on a missing part."""
        docx = create_test_docx(tmp_path / "test.docx")

        result = runner.invoke(app, ["clean", str(docx), "--part", "word/header1.xml", "--strict"])

        assert result.exit_code == 1
        assert "word/header1.xml" in result.output

    def test_clean_missing_file(self, tmp_path):
        """Test that a missing input file fails."""
        result = runner.invoke(app, ["clean", str(tmp_path / "missing.docx")])

        assert result.exit_code == 1
        assert "Error" in result.output


class TestCLIParts:
    """Tests for the parts command."""

    def test_parts(self, tmp_path):
        """Test listing cleanable parts."""
        docx = create_test_docx(tmp_path / "test.docx", with_header=True)

        result = runner.invoke(app, ["parts", str(docx)])

        assert result.exit_code == 0
        assert result.stdout.splitlines() == ["word/document.xml", "word/header1.xml"]
