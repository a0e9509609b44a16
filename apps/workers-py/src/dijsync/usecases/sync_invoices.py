from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from ..adapters.base import InvoiceRecord, InvoiceService, InvoicesQuery
from ..domain import constants
from ..domain.archive import scan_archive
from ..domain.errors import ConfigurationError, RemoteError
from ..domain.files import DownloadTarget
from ..domain.providers import resolve_provider
from .download_invoices import download_invoices
from .plan_range import DateRange, ResumeConfirm, check_flags, plan_date_range, prompt_resume


NO_INVOICES_MESSAGE = "No invoices found for the selected filters"


@dataclass
class SyncConfig:
    username: str
    password: str
    invoice_path: str = constants.DEFAULT_INVOICE_PATH
    provider: str = ""
    issuer_id: str = ""
    date_from: Optional[dt.date] = None
    date_to: Optional[dt.date] = None
    resume: bool = False
    redownload: bool = False
    list_providers: bool = False
    list_invoices: bool = False
    download_pdf: bool = True
    download_xml: bool = True
    ignore_empty: bool = False


@dataclass
class SyncResult:
    date_range: Optional[DateRange] = None
    provider: Optional[str] = None
    invoices: List[InvoiceRecord] = field(default_factory=list)
    targets: List[DownloadTarget] = field(default_factory=list)


def validate_config(config: SyncConfig) -> None:
    """Reject unusable configurations before the portal is contacted."""
    if not config.username or not config.password:
        raise ConfigurationError(
            "missing credentials: set --username/--password or "
            f"{constants.ENV_USERNAME}/{constants.ENV_PASSWORD}"
        )
    check_flags(config.date_from, config.date_to, config.resume, config.redownload)
    downloads = config.download_pdf or config.download_xml
    if not downloads and not config.list_invoices and not config.list_providers:
        raise ConfigurationError(
            "nothing to do: enable --download-pdf and/or --download-xml, "
            "or use --list-invoices/--list-providers"
        )


def format_invoice_line(invoice: InvoiceRecord) -> str:
    return " | ".join(
        [
            invoice.date_of_issue.strftime(constants.DATE_FORMAT),
            invoice.provider,
            invoice.issuer_id,
            invoice.invoice_id,
        ]
    )


Echo = Callable[[str], None]


def sync_invoices(
    service: InvoiceService,
    config: SyncConfig,
    echo: Echo,
    confirm: ResumeConfirm = prompt_resume,
) -> SyncResult:
    """Run one sync; operator-facing lines (listings, notices) go to ``echo``."""
    validate_config(config)
    result = SyncResult()

    try:
        service.login(config.username, config.password)
    except RemoteError as exc:
        raise RemoteError(f"login error: {exc}") from exc

    try:
        providers, token = service.providers()
    except RemoteError as exc:
        raise RemoteError(f"unable to get providers: {exc}") from exc

    if config.list_providers:
        for name in providers:
            echo(name)
        if not config.provider:
            return result

    local_state = scan_archive(config.invoice_path, ignore_empty=config.ignore_empty)
    if local_state.found:
        logging.debug("Newest archived invoice: %s", local_state.latest_date)
    result.date_range = plan_date_range(
        config.date_from,
        config.date_to,
        config.resume,
        config.redownload,
        local_state,
        confirm=confirm,
    )
    result.provider = resolve_provider(config.provider, providers)
    if result.date_range.is_empty:
        echo(NO_INVOICES_MESSAGE)
        return result

    query = InvoicesQuery(
        token=token,
        provider=result.provider,
        issuer_id=config.issuer_id or None,
        date_from=result.date_range.date_from,
        date_to=result.date_range.date_to,
    )
    try:
        result.invoices = list(service.invoices(query))
    except RemoteError as exc:
        raise RemoteError(f"unable to get invoices: {exc}") from exc

    if not result.invoices:
        echo(NO_INVOICES_MESSAGE)
        return result

    if config.list_invoices:
        for invoice in result.invoices:
            echo(format_invoice_line(invoice))
        if not config.download_pdf and not config.download_xml:
            return result

    result.targets = download_invoices(
        result.invoices,
        config.invoice_path,
        config.download_pdf,
        config.download_xml,
        service.download_invoice,
    )
    logging.info("Downloaded %d invoice(s) into %s", len(result.targets), config.invoice_path)
    return result
