import datetime as dt
from pathlib import Path
from typing import Iterable

import pytest

from dijsync.adapters import base
from dijsync.usecases import download_invoices as download_uc


def test_invoice_record_defaults():
    record = base.InvoiceRecord(
        provider="ELMŰ", issuer_id="111", invoice_id="2024/001", date_of_issue=dt.date(2024, 3, 5)
    )
    assert record.total is None
    assert record.due_date is None
    assert record.status is None
    assert record.row_id == 0


def test_records_are_immutable():
    query = base.InvoicesQuery(token="tok")
    assert query.provider is None
    assert query.date_from is None and query.date_to is None
    with pytest.raises(AttributeError):
        query.token = "other"  # type: ignore[misc]


class DummyService:
    def __init__(self, records: Iterable[base.InvoiceRecord]):
        self._records = list(records)
        self.saved = []

    def login(self, username, password):
        return None

    def providers(self):
        return sorted({r.provider for r in self._records}), "tok"

    def invoices(self, query):
        return [r for r in self._records if not query.provider or r.provider == query.provider]

    def download_invoice(self, record, pdf_path, xml_path):
        self.saved.append(record.invoice_id)
        if pdf_path:
            Path(pdf_path).write_bytes(f"{record.invoice_id}".encode())


def test_dummy_service_drives_download_loop(tmp_path):
    records = [
        base.InvoiceRecord(provider="A", issuer_id="1", invoice_id="x-1", date_of_issue=dt.date(2024, 1, 1)),
        base.InvoiceRecord(provider="B", issuer_id="2", invoice_id="y-2", date_of_issue=dt.date(2024, 1, 2)),
    ]
    service = DummyService(records)
    providers, token = service.providers()
    assert providers == ["A", "B"]

    found = service.invoices(base.InvoicesQuery(token=token, provider="B"))
    download_uc.download_invoices(found, str(tmp_path), True, False, service.download_invoice)
    assert service.saved == ["y-2"]
    assert (tmp_path / "B" / "2" / "2024-01-02_y-2.pdf").read_bytes() == b"y-2"
