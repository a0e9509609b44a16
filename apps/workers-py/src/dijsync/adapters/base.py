from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple


@dataclass(frozen=True)
class InvoiceRecord:
    provider: str
    issuer_id: str
    invoice_id: str
    date_of_issue: dt.date
    total: Optional[str] = None
    due_date: Optional[dt.date] = None
    status: Optional[str] = None
    row_id: int = 0


@dataclass(frozen=True)
class InvoicesQuery:
    token: str
    provider: Optional[str] = None
    issuer_id: Optional[str] = None
    date_from: Optional[dt.date] = None
    date_to: Optional[dt.date] = None


class InvoiceService(Protocol):
    """Contract of the authenticated billing portal the sync drives."""

    def login(self, username: str, password: str) -> None: ...

    def providers(self) -> Tuple[List[str], str]: ...

    def invoices(self, query: InvoicesQuery) -> List[InvoiceRecord]: ...

    def download_invoice(
        self, record: InvoiceRecord, pdf_path: Optional[str], xml_path: Optional[str]
    ) -> None: ...
