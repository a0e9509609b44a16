"""Derive resume state from the invoices already stored on disk."""

from __future__ import annotations

import datetime as dt
import logging
import os
import stat
from dataclasses import dataclass
from typing import Optional

from . import constants
from .errors import ArchiveNotADirectoryError, ArchiveScanError


@dataclass(frozen=True)
class LocalInvoiceState:
    latest_date: Optional[dt.date] = None
    found: bool = False


def filename_issue_date(name: str) -> Optional[dt.date]:
    """Return the issue date encoded in an archived invoice file name, if any."""
    m = constants.INVOICE_FILENAME_RE.fullmatch(name)
    if not m:
        return None
    try:
        return dt.datetime.strptime(m.group(1), constants.DATE_FORMAT).date()
    except ValueError:
        # Matches the shape but not the calendar (e.g. 2024-02-30).
        return None


def _has_content(path: str) -> bool:
    try:
        return os.path.getsize(path) > 0
    except OSError:
        return False


def _raise_walk_error(err: OSError) -> None:
    raise err


def scan_archive(base_path: str, ignore_empty: bool = False) -> LocalInvoiceState:
    """Walk ``base_path`` and report the newest archived issue date.

    A missing directory is an empty archive. Files not following the
    ``YYYY-MM-DD_<id>.(pdf|xml)`` naming are ignored wherever they sit in the
    tree. With ``ignore_empty`` zero-byte matches are not trusted.
    """
    base_path = str(base_path)
    try:
        st = os.stat(base_path)
    except FileNotFoundError:
        return LocalInvoiceState()
    except OSError as exc:
        raise ArchiveScanError(f"unable to inspect invoice path {base_path}: {exc}") from exc
    if not stat.S_ISDIR(st.st_mode):
        raise ArchiveNotADirectoryError(base_path)

    latest: Optional[dt.date] = None
    try:
        for root, _dirs, files in os.walk(base_path, onerror=_raise_walk_error):
            for name in files:
                issued = filename_issue_date(name)
                if issued is None:
                    continue
                path = os.path.join(root, name)
                if ignore_empty and not _has_content(path):
                    logging.debug("Ignoring empty or unreadable archive file %s", path)
                    continue
                if latest is None or issued > latest:
                    latest = issued
    except OSError as exc:
        raise ArchiveScanError(f"unable to walk invoice path {base_path}: {exc}") from exc

    if latest is None:
        return LocalInvoiceState()
    return LocalInvoiceState(latest_date=latest, found=True)
