"""File-system naming and layout of the local invoice archive."""

from __future__ import annotations

import os
import pathlib
from dataclasses import dataclass
from typing import Optional

from . import constants
from .errors import DirectoryCreateError
from ..adapters.base import InvoiceRecord


@dataclass(frozen=True)
class DownloadTarget:
    directory: str
    pdf_path: Optional[str] = None
    xml_path: Optional[str] = None


def ensure_dir(path: str) -> str:
    try:
        pathlib.Path(path).mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise DirectoryCreateError(path, exc) from exc
    return path


def invoice_directory(invoice_path: str, record: InvoiceRecord) -> str:
    return os.path.join(str(invoice_path), record.provider, record.issuer_id)


def invoice_filename_stem(record: InvoiceRecord) -> str:
    """``<YYYY-MM-DD>_<invoice id>`` with path separators in the id replaced."""
    issued = record.date_of_issue.strftime(constants.DATE_FORMAT)
    return f"{issued}_{record.invoice_id.replace('/', '_')}"


def plan_download_target(
    invoice_path: str, record: InvoiceRecord, download_pdf: bool, download_xml: bool
) -> DownloadTarget:
    directory = invoice_directory(invoice_path, record)
    stem = invoice_filename_stem(record)
    return DownloadTarget(
        directory=directory,
        pdf_path=os.path.join(directory, stem + constants.PDF_SUFFIX) if download_pdf else None,
        xml_path=os.path.join(directory, stem + constants.XML_SUFFIX) if download_xml else None,
    )
