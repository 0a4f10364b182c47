# ============================================================================
# src/radiology_intake/cli.py
# ============================================================================
"""
Command line entry point.

Usage:
    radiology-intake batch reports.csv -o export.csv
    radiology-intake template -o radiology_batch_template.csv
    radiology-intake health
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from .config import batch_settings, logging_settings
from .core.batch_pipeline import BatchPipeline
from .export import render_export_csv, export_filename
from .extraction import create_client
from .ingestion import parse_batch_csv, build_template_csv
from .utils import BatchUploadError, ConfigurationError, setup_logging


def _print_progress(completed: int, total: int):
    print(f"  [{completed}/{total}]", flush=True)


async def _run_and_close(client, coro):
    try:
        return await coro
    finally:
        await client.close()


def cmd_batch(args) -> int:
    input_path = Path(args.input)
    if not input_path.exists():
        print(f"ERROR: Input file not found: {input_path}")
        return 1

    text = input_path.read_text(encoding="utf-8-sig")
    try:
        rows = parse_batch_csv(text, max_rows=batch_settings.MAX_BATCH_ROWS)
        client = create_client({'backend': args.backend} if args.backend else None)
    except (BatchUploadError, ConfigurationError) as e:
        print(f"ERROR: {e}")
        return 1

    print(f"Processing {len(rows)} reports with {client.backend_type.value} ({client.model_name})")
    pipeline = BatchPipeline(client)
    records = asyncio.run(_run_and_close(client, pipeline.run(rows, on_progress=_print_progress)))

    output_path = Path(args.output) if args.output else Path(export_filename())
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8", newline="") as f:
        f.write(render_export_csv(records))

    print(f"\n{'='*60}")
    print(f"Stored:   {len(records)}")
    print(f"Failed:   {len(pipeline.failures)}")
    print(f"Rejected: {len(pipeline.rejected)}")
    print(f"Skipped:  {len(pipeline.skipped)}")
    print(f"Export:   {output_path}")
    print(f"{'='*60}")

    for failure in pipeline.failures:
        print(f"  - row {failure.index + 1} ({failure.key_id or 'no key'}): {failure.error_type}: {failure.message}")

    return 0


def cmd_template(args) -> int:
    output_path = Path(args.output or batch_settings.TEMPLATE_FILENAME)
    with open(output_path, "w", encoding="utf-8", newline="") as f:
        f.write(build_template_csv())
    print(f"Template written to {output_path}")
    return 0


def cmd_health(args) -> int:
    try:
        client = create_client({'backend': args.backend} if args.backend else None)
    except ConfigurationError as e:
        print(f"ERROR: {e}")
        return 1

    status = asyncio.run(_run_and_close(client, client.health_check()))
    state = "OK" if status["healthy"] else "UNAVAILABLE"
    print(f"{status['backend']} / {status['model']}: {state}")
    print(f"  {status['details']}")
    return 0 if status["healthy"] else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="radiology-intake",
        description="Structured extraction of free-text radiology reports"
    )
    parser.add_argument("--log-level", type=str, help="Override LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    batch = subparsers.add_parser("batch", help="Extract every report in a CSV upload")
    batch.add_argument("input", help="CSV file: PatientID,OrderID,Report_Text")
    batch.add_argument("--output", "-o", type=str, help="Export CSV path")
    batch.add_argument("--backend", type=str, help="gemini | ollama | azure")
    batch.set_defaults(func=cmd_batch)

    template = subparsers.add_parser("template", help="Write the CSV upload template")
    template.add_argument("--output", "-o", type=str, help="Template path")
    template.set_defaults(func=cmd_template)

    health = subparsers.add_parser("health", help="Check the extraction backend")
    health.add_argument("--backend", type=str, help="gemini | ollama | azure")
    health.set_defaults(func=cmd_health)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    setup_logging(
        level=args.log_level or logging_settings.LOG_LEVEL,
        log_file=logging_settings.LOG_FILE,
        format_json=logging_settings.LOG_JSON,
    )

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
