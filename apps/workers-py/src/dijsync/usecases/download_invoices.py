from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence

from ..adapters.base import InvoiceRecord
from ..domain import files as domain_files
from ..domain.errors import DownloadError

DownloadFn = Callable[[InvoiceRecord, Optional[str], Optional[str]], None]


def download_invoices(
    invoices: Sequence[InvoiceRecord],
    invoice_path: str,
    download_pdf: bool,
    download_xml: bool,
    download_fn: DownloadFn,
) -> List[domain_files.DownloadTarget]:
    """Fetch every invoice into ``<invoice_path>/<provider>/<issuer id>/``.

    Invoices are processed in the order given; the first failure aborts the
    run. Nothing is rolled back, the next run resumes past what was saved.
    """
    targets: List[domain_files.DownloadTarget] = []
    total = len(invoices)
    for idx, invoice in enumerate(invoices, start=1):
        logging.info("Downloading invoice %d/%d", idx, total)
        target = domain_files.plan_download_target(
            invoice_path, invoice, download_pdf, download_xml
        )
        domain_files.ensure_dir(target.directory)
        try:
            download_fn(invoice, target.pdf_path, target.xml_path)
        except Exception as exc:
            raise DownloadError(invoice.invoice_id, exc) from exc
        logging.debug("    saved %s", target.pdf_path or target.xml_path)
        targets.append(target)
    return targets
