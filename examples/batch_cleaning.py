"""
Example: Accepting tracked changes in a folder of documents.

This example cleans every .docx in a directory (body, headers, footers and
notes), writes the clean copies to another directory, and prints the
changes that were accepted in a form ready to paste into an LLM prompt.
"""

from pathlib import Path
from typing import Any

from python_redlines import (
    RedlinesError,
    clean_docx_with_warnings,
    discover_cleanable_parts,
    extract,
    format_for_llm,
)


def process_document(input_path: Path, output_path: Path) -> dict[str, Any]:
    """
    Accept all tracked changes in a single document.

    Args:
        input_path: Path to input document
        output_path: Path for the cleaned document

    Returns:
        Dictionary with processing results
    """
    try:
        result = extract(input_path)
        parts = discover_cleanable_parts(input_path)
        cleaned, warnings = clean_docx_with_warnings(input_path, parts)
        output_path.write_bytes(cleaned)

        return {
            "status": "success",
            "input": str(input_path),
            "output": str(output_path),
            "changes": len(result),
            "summary": format_for_llm(result),
            "warnings": [str(w) for w in warnings],
        }

    except (RedlinesError, OSError) as e:
        return {
            "status": "error",
            "input": str(input_path),
            "error": str(e),
        }


def batch_clean(
    input_dir: Path,
    output_dir: Path,
    pattern: str = "*.docx",
) -> list[dict[str, Any]]:
    """
    Clean all documents in a directory.

    Args:
        input_dir: Directory containing input documents
        output_dir: Directory for cleaned documents
        pattern: Glob pattern for files to process (default: *.docx)

    Returns:
        List of processing results for each document
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    results = []

    for input_path in input_dir.glob(pattern):
        if not input_path.is_file():
            continue

        output_path = output_dir / input_path.name

        print(f"Processing: {input_path.name}...")
        result = process_document(input_path, output_path)
        results.append(result)

        if result["status"] == "success":
            print(f"  ✓ {result['changes']} change(s) accepted")
            for warning in result["warnings"]:
                print(f"    note: {warning}")
        else:
            print(f"  ✗ Error: {result['error']}")

    return results


def main() -> None:
    """Example usage of batch cleaning."""
    input_dir = Path("./input_contracts")
    output_dir = Path("./clean_contracts")

    print("Starting batch cleaning...")
    print("-" * 60)

    results = batch_clean(input_dir, output_dir)

    print("-" * 60)
    print("\nBatch Cleaning Summary:")
    print(f"  Total documents: {len(results)}")
    successful = [r for r in results if r["status"] == "success"]
    print(f"  Successfully cleaned: {len(successful)}")
    print(f"  Failed: {len(results) - len(successful)}")

    for result in successful:
        if result["summary"]:
            print(f"\n{result['input']}:\n{result['summary']}")

    failures = [r for r in results if r["status"] == "error"]
    if failures:
        print("\nFailed documents:")
        for failure in failures:
            print(f"  • {failure['input']}: {failure['error']}")


if __name__ == "__main__":
    main()
