import datetime as dt
import os
from pathlib import Path

import pytest

from dijsync.adapters.base import InvoiceRecord
from dijsync.domain import errors
from dijsync.domain import files as domain_files
from dijsync.usecases import download_invoices as download_uc


def _invoice(invoice_id="2024/001", issued=dt.date(2024, 3, 5), provider="ELMU", issuer="111"):
    return InvoiceRecord(
        provider=provider, issuer_id=issuer, invoice_id=invoice_id, date_of_issue=issued
    )


class RecordingDownloader:
    def __init__(self, fail_on=None):
        self.calls = []
        self.fail_on = fail_on

    def __call__(self, record, pdf_path, xml_path):
        self.calls.append((record.invoice_id, pdf_path, xml_path))
        if record.invoice_id == self.fail_on:
            raise errors.DijnetError("GET /ekonto/control/szamla_pdf failed 500", status_code=500)
        for path in (pdf_path, xml_path):
            if path:
                Path(path).write_bytes(b"data")


def test_filename_stem_replaces_slashes():
    assert domain_files.invoice_filename_stem(_invoice()) == "2024-03-05_2024_001"
    assert domain_files.invoice_filename_stem(_invoice("a/b/c")) == "2024-03-05_a_b_c"


def test_plan_download_target_respects_toggles(tmp_path):
    inv = _invoice()
    both = domain_files.plan_download_target(str(tmp_path), inv, True, True)
    assert both.directory == os.path.join(str(tmp_path), "ELMU", "111")
    assert both.pdf_path == os.path.join(both.directory, "2024-03-05_2024_001.pdf")
    assert both.xml_path == os.path.join(both.directory, "2024-03-05_2024_001.xml")

    xml_only = domain_files.plan_download_target(str(tmp_path), inv, False, True)
    assert xml_only.pdf_path is None
    assert xml_only.xml_path.endswith(".xml")


def test_downloads_in_catalog_order_and_creates_dirs(tmp_path):
    invoices = [
        _invoice("B-2", dt.date(2024, 1, 2), provider="Water", issuer="9"),
        _invoice("A-1", dt.date(2024, 1, 1)),
        _invoice("A-1", dt.date(2024, 1, 1)),
    ]
    downloader = RecordingDownloader()

    targets = download_uc.download_invoices(invoices, str(tmp_path), True, False, downloader)

    assert [c[0] for c in downloader.calls] == ["B-2", "A-1", "A-1"]
    assert all(c[2] is None for c in downloader.calls)
    assert len(targets) == 3
    assert (tmp_path / "Water" / "9" / "2024-01-02_B-2.pdf").exists()
    assert (tmp_path / "ELMU" / "111" / "2024-01-01_A-1.pdf").exists()


def test_pdf_disabled_calls_once_with_absent_pdf(tmp_path):
    downloader = RecordingDownloader()
    download_uc.download_invoices([_invoice()], str(tmp_path), False, True, downloader)
    assert len(downloader.calls) == 1
    invoice_id, pdf_path, xml_path = downloader.calls[0]
    assert pdf_path is None
    assert xml_path == os.path.join(str(tmp_path), "ELMU", "111", "2024-03-05_2024_001.xml")


def test_first_failure_stops_and_names_invoice(tmp_path):
    invoices = [_invoice("ok-1"), _invoice("bad/2"), _invoice("never-3")]
    downloader = RecordingDownloader(fail_on="bad/2")

    with pytest.raises(errors.DownloadError) as excinfo:
        download_uc.download_invoices(invoices, str(tmp_path), True, True, downloader)

    assert [c[0] for c in downloader.calls] == ["ok-1", "bad/2"]
    assert excinfo.value.invoice_id == "bad/2"
    assert "download failed for invoice bad/2" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, errors.DijnetError)
    # Earlier work is left in place.
    assert (tmp_path / "ELMU" / "111" / "2024-03-05_ok-1.pdf").exists()


def test_directory_creation_failure(tmp_path):
    blocker = tmp_path / "ELMU"
    blocker.write_text("not a dir")
    downloader = RecordingDownloader()

    with pytest.raises(errors.DirectoryCreateError) as excinfo:
        download_uc.download_invoices([_invoice()], str(tmp_path), True, True, downloader)

    assert excinfo.value.path == os.path.join(str(tmp_path), "ELMU", "111")
    assert downloader.calls == []


def test_progress_is_logged(tmp_path, caplog):
    caplog.set_level("INFO")
    download_uc.download_invoices(
        [_invoice("1"), _invoice("2")], str(tmp_path), True, False, RecordingDownloader()
    )
    messages = [r.getMessage() for r in caplog.records]
    assert "Downloading invoice 1/2" in messages
    assert "Downloading invoice 2/2" in messages


def test_empty_list_is_a_no_op(tmp_path):
    assert download_uc.download_invoices([], str(tmp_path), True, True, RecordingDownloader()) == []
