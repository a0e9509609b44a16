#!/usr/bin/env python3
"""
dijnet_sync.py
==============

Incrementally mirror Dijnet invoices (PDF and/or XML) into a local archive:

    <invoice-path>/<provider>/<issuer id>/<YYYY-MM-DD>_<invoice id>.{pdf,xml}

On every run the archive is scanned for the newest issue date. When invoices
are already present you are offered to resume from the following day
(``--resume`` answers yes up front, ``--redownload`` ignores history and date
bounds altogether).

Usage:
    export DIJNET_USERNAME=... DIJNET_PASSWORD=...
    python -m dijsync.cli.dijnet_sync --list-providers
    python -m dijsync.cli.dijnet_sync --provider "elmu" --from 2024-01-01
    python -m dijsync.cli.dijnet_sync --resume --download-xml=false \
      --download-report report.json
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, List, Optional

from ..adapters.dijnet import DijnetService
from ..domain import constants
from ..domain.errors import ConfigurationError, SyncError
from ..usecases.plan_range import parse_date_flag, prompt_resume
from ..usecases.sync_invoices import SyncConfig, SyncResult, sync_invoices

TRUE_VALUES = {"1", "true", "yes", "y", "on"}
FALSE_VALUES = {"0", "false", "no", "n", "off"}


def parse_bool_flag(value: str) -> bool:
    normalized = (value or "").strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    raise argparse.ArgumentTypeError(f"expected true/false, got {value!r}")


def env_int(key: str, fallback: int) -> int:
    raw = os.environ.get(key)
    if not raw:
        return fallback
    try:
        return int(raw)
    except ValueError:
        logging.warning("Ignoring non-numeric %s=%r", key, raw)
        return fallback


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Download Dijnet invoices into a local archive, resuming where the last run stopped."
    )
    ap.add_argument(
        "--username",
        default=os.environ.get(constants.ENV_USERNAME, ""),
        help=f"Dijnet username (or {constants.ENV_USERNAME})",
    )
    ap.add_argument(
        "--password",
        default=os.environ.get(constants.ENV_PASSWORD, ""),
        help=f"Dijnet password (or {constants.ENV_PASSWORD})",
    )
    ap.add_argument(
        "--invoice-path",
        default=os.environ.get(constants.ENV_INVOICE_PATH) or constants.DEFAULT_INVOICE_PATH,
        help="Base directory where invoices are stored (default: invoices).",
    )
    ap.add_argument("--provider", default="", help="Provider name filter (exact, case-insensitive or partial)")
    ap.add_argument("--issuer-id", default="", help="Issuer ID filter")
    ap.add_argument("--from", dest="date_from", default="", help="From issue date, inclusive (YYYY-MM-DD)")
    ap.add_argument("--to", dest="date_to", default="", help="To issue date, inclusive (YYYY-MM-DD)")
    ap.add_argument(
        "--resume",
        action="store_true",
        help="Resume from one day after the newest local invoice without asking",
    )
    ap.add_argument(
        "--redownload",
        action="store_true",
        help="Ignore local invoice history and date bounds; redownload everything",
    )
    ap.add_argument("--list-providers", action="store_true", help="List available providers")
    ap.add_argument(
        "--list-invoices", action="store_true", help="List matching invoices before downloading"
    )
    ap.add_argument(
        "--download-pdf",
        type=parse_bool_flag,
        nargs="?",
        const=True,
        default=True,
        help="Download PDF files (default: true)",
    )
    ap.add_argument(
        "--download-xml",
        type=parse_bool_flag,
        nargs="?",
        const=True,
        default=True,
        help="Download XML files (default: true)",
    )
    ap.add_argument(
        "--ignore-empty",
        action="store_true",
        help="Do not count zero-byte archive files when looking for the resume date",
    )
    ap.add_argument("--download-report", default=None, help="Write a JSON summary of the run")
    ap.add_argument(
        "--timeout",
        type=int,
        default=env_int(constants.ENV_TIMEOUT, constants.DEFAULT_TIMEOUT),
        help="HTTP timeout in seconds (default: 60)",
    )
    ap.add_argument("--debug", action="store_true")
    return ap


def config_from_args(args: argparse.Namespace) -> SyncConfig:
    return SyncConfig(
        username=args.username,
        password=args.password,
        invoice_path=args.invoice_path,
        provider=args.provider,
        issuer_id=args.issuer_id,
        date_from=parse_date_flag("from", args.date_from),
        date_to=parse_date_flag("to", args.date_to),
        resume=args.resume,
        redownload=args.redownload,
        list_providers=args.list_providers,
        list_invoices=args.list_invoices,
        download_pdf=args.download_pdf,
        download_xml=args.download_xml,
        ignore_empty=args.ignore_empty,
    )


def build_report(result: SyncResult) -> dict:
    date_range = result.date_range
    downloads: List[dict] = []
    for invoice, target in zip(result.invoices, result.targets):
        downloads.append(
            {
                "invoice_id": invoice.invoice_id,
                "date_of_issue": invoice.date_of_issue.isoformat(),
                "pdf": target.pdf_path,
                "xml": target.xml_path,
            }
        )
    return {
        "from": date_range.date_from.isoformat() if date_range and date_range.date_from else None,
        "to": date_range.date_to.isoformat() if date_range and date_range.date_to else None,
        "provider": result.provider,
        "invoice_count": len(result.invoices),
        "downloads": downloads,
    }


def write_json(path: Path, obj: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(obj, ensure_ascii=False, indent=2), encoding="utf-8")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO, format="%(message)s")

    try:
        config = config_from_args(args)
        result = sync_invoices(
            DijnetService(timeout=args.timeout), config, echo=print, confirm=prompt_resume
        )
    except ConfigurationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    except SyncError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if args.download_report:
        report_path = Path(args.download_report)
        write_json(report_path, build_report(result))
        logging.info("Download report: %s", report_path.resolve())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
