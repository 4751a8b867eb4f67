"""Command-line interface for extracting company names from documents.

Provides subcommands for single documents (JSON output), folders of
documents (CSV summary) and pushing a chosen name to HubSpot.
"""

import argparse
import csv
import json
import sys
from pathlib import Path

from company_extractor.crm.hubspot import HubSpotClient
from company_extractor.errors import CompanyExtractorError, CRMUpdateFailed
from company_extractor.orchestrator import CompanyNameOrchestrator, ExtractionResult
from company_extractor.parsing.types import EXTENSION_MEDIA_TYPES
from company_extractor.utils.config import Capabilities, load_config
from company_extractor.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

_CSV_COLUMNS = [
    "filename",
    "status",
    "best_name",
    "confidence",
    "strategy",
    "error",
]


def _build_orchestrator(config_path: Path | None = None) -> CompanyNameOrchestrator:
    config = load_config(config_path)
    return CompanyNameOrchestrator(config, Capabilities.detect(config))


def _media_type_for(path: Path) -> str:
    return EXTENSION_MEDIA_TYPES.get(path.suffix.lower(), "application/octet-stream")


def _find_documents(input_dir: Path) -> list[Path]:
    """Find all supported document files in a directory.

    Args:
        input_dir: Directory to scan for documents.

    Returns:
        Sorted list of document file paths.
    """
    return sorted(
        p
        for p in input_dir.iterdir()
        if p.is_file() and p.suffix.lower() in EXTENSION_MEDIA_TYPES
    )


def extract_single(
    file_path: Path, orchestrator: CompanyNameOrchestrator | None = None
) -> dict[str, object]:
    """Process a single document and return its result as a dictionary.

    Args:
        file_path: Path to the document file.
        orchestrator: Pipeline to use; built from the default config if omitted.

    Returns:
        Success or failure payload, as returned by the API.
    """
    orchestrator = orchestrator or _build_orchestrator()
    result = orchestrator.process(
        file_path.read_bytes(), _media_type_for(file_path), file_path.name
    )
    return result.to_dict()


def _summary_row(filename: str, result: ExtractionResult) -> dict[str, object]:
    if result.ok:
        return {
            "filename": filename,
            "status": "success",
            "best_name": result.best.name,
            "confidence": result.best.confidence,
            "strategy": result.strategy,
            "error": None,
        }
    return {
        "filename": filename,
        "status": "failed",
        "best_name": None,
        "confidence": None,
        "strategy": None,
        "error": result.error_code,
    }


def process_folder(
    input_dir: Path,
    output_csv: Path,
    verbose: bool = False,
    orchestrator: CompanyNameOrchestrator | None = None,
) -> dict[str, int]:
    """Process all documents in a folder and export a CSV summary.

    Args:
        input_dir: Directory containing document files.
        output_csv: Path for the output CSV file.
        verbose: Whether to print per-file progress.
        orchestrator: Pipeline to use; built from the default config if omitted.

    Returns:
        Summary dict with total, successful, and failed counts.
    """
    files = _find_documents(input_dir)
    if not files:
        logger.warning("No documents found in %s", input_dir)
        return {"total": 0, "successful": 0, "failed": 0}

    orchestrator = orchestrator or _build_orchestrator()
    logger.info("Found %d documents to process", len(files))

    rows: list[dict[str, object]] = []
    successful = 0

    for i, file_path in enumerate(files, 1):
        if verbose:
            print(f"Processing [{i}/{len(files)}]: {file_path.name}")
        try:
            result = orchestrator.process(
                file_path.read_bytes(), _media_type_for(file_path), file_path.name
            )
        except CompanyExtractorError as exc:
            logger.error("Failed to process %s: %s", file_path.name, exc)
            rows.append(
                {"filename": file_path.name, "status": "failed", "error": exc.code}
            )
            continue

        rows.append(_summary_row(file_path.name, result))
        if result.ok:
            successful += 1

    _write_csv(rows, output_csv)
    logger.info("Results written to %s", output_csv)

    summary = {
        "total": len(files),
        "successful": successful,
        "failed": len(files) - successful,
    }
    _print_summary(summary, output_csv)
    return summary


def _write_csv(rows: list[dict[str, object]], output_path: Path) -> None:
    """Write the per-document summary to a CSV file.

    Args:
        rows: One summary dictionary per document.
        output_path: Path for the output CSV file.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=_CSV_COLUMNS, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(rows)


def _print_summary(summary: dict[str, int], output_csv: Path) -> None:
    print(f"\n{'=' * 50}")
    print("Batch Processing Complete")
    print(f"{'=' * 50}")
    print(f"Total:      {summary['total']}")
    print(f"Successful: {summary['successful']}")
    print(f"Failed:     {summary['failed']}")
    print(f"Output:     {output_csv}")


def update_company(company_id: str, name: str, config_path: Path | None = None) -> None:
    """Push a company name to HubSpot.

    Raises:
        CRMUpdateFailed: If HubSpot rejects or never receives the update.
    """
    config = load_config(config_path)
    with HubSpotClient(config.crm) as crm:
        crm.update_company_name(company_id, name)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Company legal name extractor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-c", "--config", type=Path, default=None, help="Configuration YAML file"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    single_parser = subparsers.add_parser("extract", help="Process a single document")
    single_parser.add_argument("file", type=Path, help="Document file to process")
    single_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    batch_parser = subparsers.add_parser("batch", help="Process a folder of documents")
    batch_parser.add_argument(
        "input_dir", type=Path, help="Input directory with documents"
    )
    batch_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("results.csv"),
        help="Output CSV file (default: results.csv)",
    )
    batch_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose output"
    )

    update_parser = subparsers.add_parser(
        "update", help="Set a HubSpot company's name"
    )
    update_parser.add_argument("company_id", help="HubSpot company ID")
    update_parser.add_argument("name", help="Company name to apply")

    args = parser.parse_args(argv)

    setup_logging()

    if args.command == "batch":
        if not args.input_dir.is_dir():
            print(f"Error: {args.input_dir} is not a directory", file=sys.stderr)
            sys.exit(1)
        process_folder(
            args.input_dir,
            args.output,
            args.verbose,
            _build_orchestrator(args.config),
        )
    elif args.command == "extract":
        if not args.file.exists():
            print(f"Error: {args.file} does not exist", file=sys.stderr)
            sys.exit(1)
        try:
            result = extract_single(args.file, _build_orchestrator(args.config))
        except CompanyExtractorError as exc:
            print(f"Error: {exc.message}", file=sys.stderr)
            sys.exit(1)
        output_str = json.dumps(result, indent=2)
        if args.output:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            args.output.write_text(output_str)
            print(f"Output written to {args.output}")
        else:
            print(output_str)
        if not result["success"]:
            sys.exit(2)
    elif args.command == "update":
        try:
            update_company(args.company_id, args.name, args.config)
        except CRMUpdateFailed as exc:
            print(f"Error: {exc.message}", file=sys.stderr)
            sys.exit(1)
        print(f'Company {args.company_id} updated to "{args.name}"')
    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
