"""Command-line interface for python-redlines.

Provides commands for listing tracked changes and accepting them from the terminal.
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from . import __version__, extract, format_for_llm
from .constants import DEFAULT_MAX_LEN, DEFAULT_PAIR_SEPARATOR
from .docx import clean_docx_with_warnings, discover_cleanable_parts
from .package import DocxPackage

app = typer.Typer(
    name="redlines",
    help="Extract and accept tracked changes in Word documents and PDFs.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"redlines version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Extract and accept tracked changes in Word documents and PDFs."""
    pass


@app.command("extract")
def extract_command(
    file: Annotated[Path, typer.Argument(help="Path to the .docx or .pdf file")],
    doc_type: Annotated[
        str | None, typer.Option("--type", "-t", help="Override the inferred type (docx or pdf)")
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print changes as JSON")] = False,
) -> None:
    """List the tracked changes in a document."""
    try:
        result = extract(file, doc_type=doc_type)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if as_json:
        payload = [
            {
                "type": change.kind.value,
                "deletion": change.deleted_text,
                "insertion": change.inserted_text,
                "location": change.location,
                "meta": change.metadata,
            }
            for change in result.changes
        ]
        typer.echo(json.dumps({"source": result.source, "changes": payload}, indent=2))
        return

    if not result.changes:
        typer.echo("No tracked changes found")
        return

    for change in result.changes:
        author = change.metadata.get("author")
        by = f" ({author})" if author else ""
        if change.deleted_text and change.inserted_text:
            typer.echo(f'~ "{change.deleted_text}" -> "{change.inserted_text}"{by}')
        elif change.deleted_text:
            typer.echo(f'- "{change.deleted_text}"{by}')
        else:
            typer.echo(f'+ "{change.inserted_text}"{by}')


@app.command()
def prompt(
    file: Annotated[Path, typer.Argument(help="Path to the .docx or .pdf file")],
    doc_type: Annotated[
        str | None, typer.Option("--type", "-t", help="Override the inferred type (docx or pdf)")
    ] = None,
    separator: Annotated[
        str, typer.Option("--separator", help="Arrow between deleted and inserted text")
    ] = DEFAULT_PAIR_SEPARATOR,
    max_len: Annotated[
        int, typer.Option("--max-len", min=4, help="Truncate each quoted text to this length")
    ] = DEFAULT_MAX_LEN,
) -> None:
    """Print tracked changes formatted for an LLM prompt."""
    try:
        result = extract(file, doc_type=doc_type)
        typer.echo(format_for_llm(result, pair_separator=separator, max_len=max_len), nl=False)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def clean(
    file: Annotated[Path, typer.Argument(help="Path to the .docx file")],
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
    part: Annotated[
        list[str] | None,
        typer.Option("--part", "-p", help="Zip entry to clean (repeatable)"),
    ] = None,
    all_parts: Annotated[
        bool,
        typer.Option("--all-parts", help="Clean the body, headers, footers, footnotes and endnotes"),
    ] = False,
    show_warnings: Annotated[
        bool, typer.Option("--warnings", "-w", help="Report remaining revision markup")
    ] = False,
    strict: Annotated[
        bool, typer.Option("--strict", help="Fail when a requested part is missing")
    ] = False,
) -> None:
    """Accept all tracked changes in a .docx file."""
    try:
        package = DocxPackage.open(file)
        parts = list(part or [])
        if all_parts:
            parts.extend(discover_cleanable_parts(package))
        cleaned, warnings = clean_docx_with_warnings(
            package,
            parts or None,
            on_missing="error" if strict else "skip",
        )
        output_path = output or file
        output_path.write_bytes(cleaned)
        typer.echo(f"Accepted all changes and saved to {output_path}")
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if show_warnings:
        for warning in warnings:
            typer.echo(f"  Warning: {warning}", err=True)


@app.command()
def parts(
    file: Annotated[Path, typer.Argument(help="Path to the .docx file")],
) -> None:
    """List the parts that --all-parts would clean."""
    try:
        for name in discover_cleanable_parts(DocxPackage.open(file)):
            typer.echo(name)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
