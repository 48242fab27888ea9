#!/usr/bin/env python3
"""Command-line interface for the concert catalog.

Commands:
  - resolve : Resolve source batches (JSON) into canonical concerts
  - parse   : Validate extraction-service output for one source

Typical usage:
  python -m concert_catalog resolve --input batches.json --output catalog.json
  python -m concert_catalog parse --input raw.txt --source-name "Juilliard" --source-url https://...
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from concert_catalog import __version__
from concert_catalog.configs.config import Config
from concert_catalog.configs.settings import get_settings
from concert_catalog.errors import CatalogError
from concert_catalog.ingestion.extraction import parse_extraction_output
from concert_catalog.monitoring.logging import setup_logging
from concert_catalog.resolution.resolver import ConcertResolver
from concert_catalog.schemas.concert import SourceBatch

logger = logging.getLogger("concert_catalog.cli")

EXIT_OK = 0
EXIT_INVALID_INPUT = 2


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="concert-catalog", description="Concert Catalog CLI")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--json-logs", action="store_true", help="Emit JSON logs")
    p.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    sub = p.add_subparsers(dest="cmd", required=True)

    # resolve
    pr = sub.add_parser("resolve", help="Resolve source batches into canonical concerts")
    pr.add_argument("--input", "-i", required=True, help="JSON array of source batches")
    pr.add_argument("--output", "-o", default=None, help="Output file (default: stdout)")
    pr.add_argument("--config", "-c", default=None, help="Resolution tables YAML")

    # parse
    pp = sub.add_parser("parse", help="Validate extraction output for one source")
    pp.add_argument("--input", "-i", required=True, help="Raw extraction output text")
    pp.add_argument("--source-name", required=True)
    pp.add_argument("--source-url", default="")
    pp.add_argument("--output", "-o", default=None, help="Output file (default: stdout)")

    return p.parse_args(argv)


def _write_json(payload: Any, output: str | None) -> None:
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
    else:
        sys.stdout.write(text + "\n")


def load_batches(path: Path) -> list[SourceBatch]:
    """Read a JSON array of source batches."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON array of source batches")
    return [SourceBatch.model_validate(item) for item in data]


def cmd_resolve(args: argparse.Namespace) -> int:
    try:
        batches = load_batches(Path(args.input))
    except (OSError, ValueError, ValidationError) as e:
        logger.error(f"Cannot read batches: {e}")
        return EXIT_INVALID_INPUT

    try:
        tables = Config.load_resolution_tables(args.config)
    except (OSError, CatalogError) as e:
        logger.error(f"Cannot load resolution tables: {e}")
        return EXIT_INVALID_INPUT

    concerts = ConcertResolver(tables).resolve(batches)
    _write_json([c.model_dump(mode="json") for c in concerts], args.output)
    return EXIT_OK


def cmd_parse(args: argparse.Namespace) -> int:
    try:
        text = Path(args.input).read_text(encoding="utf-8")
        concerts = parse_extraction_output(text, args.source_name, args.source_url)
    except (OSError, CatalogError) as e:
        logger.error(f"Cannot parse extraction output: {e}")
        return EXIT_INVALID_INPUT

    _write_json([c.model_dump(mode="json") for c in concerts], args.output)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = get_settings()
    setup_logging(
        level=args.log_level or ("DEBUG" if settings.DEBUG else settings.LOG_LEVEL),
        json_logs=args.json_logs or settings.JSON_LOGS,
    )

    if args.cmd == "resolve":
        return cmd_resolve(args)
    if args.cmd == "parse":
        return cmd_parse(args)
    return EXIT_INVALID_INPUT


if __name__ == "__main__":
    sys.exit(main())
