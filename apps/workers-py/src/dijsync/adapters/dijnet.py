"""
dijnet.py
=========

Session-based client for the Dijnet e-billing portal (https://www.dijnet.hu).

The portal has no public API; everything is driven through the same pages the
web UI uses:

- login:      POST /ekonto/login/login_check_ajax  (JSON {"success": ...})
- providers:  GET  /ekonto/control/szamla_search   (``var ropts = [...]`` + vfw_token)
- invoices:   POST /ekonto/control/szamla_search_submit  (result table)
- download:   szamla_select -> szamla_letolt -> szamla_pdf / szamla_xml -> szamla_list

The portal keeps the selected invoice in the server-side session, so
downloads must run one at a time on the same session.
"""

from __future__ import annotations

import datetime as dt
import json
import logging
import re
from pathlib import Path
from typing import List, Optional, Tuple

import requests
from bs4 import BeautifulSoup

from ..domain.errors import DijnetError
from .base import InvoiceRecord, InvoicesQuery

DIJNET_BASE = "https://www.dijnet.hu"
LOGIN_PATH = "/ekonto/login/login_check_ajax"
SEARCH_PATH = "/ekonto/control/szamla_search"
SEARCH_SUBMIT_PATH = "/ekonto/control/szamla_search_submit"
SELECT_PATH = "/ekonto/control/szamla_select"
DOWNLOAD_PAGE_PATH = "/ekonto/control/szamla_letolt"
PDF_PATH = "/ekonto/control/szamla_pdf"
XML_PATH = "/ekonto/control/szamla_xml"
LIST_PATH = "/ekonto/control/szamla_list"

PORTAL_DATE_FORMAT = "%Y.%m.%d"
USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64) dijnet-sync"

_ROPTS_RE = re.compile(r"var\s+ropts\s*=\s*(\[.*?\])\s*;", re.S)
_ROWID_RE = re.compile(r"vfw_rowid=(\d+)")


# ---------- Parsing ----------
def portal_date(value: Optional[dt.date]) -> str:
    return value.strftime(PORTAL_DATE_FORMAT) if value else ""


def parse_portal_date(text: str) -> Optional[dt.date]:
    cleaned = (text or "").strip().rstrip(".")
    if not cleaned:
        return None
    try:
        return dt.datetime.strptime(cleaned, PORTAL_DATE_FORMAT).date()
    except ValueError:
        return None


def parse_providers(html: str) -> List[str]:
    m = _ROPTS_RE.search(html or "")
    if not m:
        raise DijnetError("provider list not found on search page")
    try:
        options = json.loads(m.group(1))
    except ValueError as exc:
        raise DijnetError(f"unreadable provider list: {exc}") from exc
    names = [str(o.get("szlaszolgnev") or "").strip() for o in options if isinstance(o, dict)]
    return list(dict.fromkeys(n for n in names if n))


def parse_token(html: str) -> str:
    soup = BeautifulSoup(html or "", "lxml")
    field = soup.find("input", attrs={"name": "vfw_token"})
    token = field.get("value") if field else None
    if not token:
        raise DijnetError("session token (vfw_token) not found on search page")
    return token


def parse_invoice_rows(html: str) -> List[InvoiceRecord]:
    """Turn the search result table into records, keeping portal order.

    Columns: provider, issuer id, invoice id, date of issue, total, due date,
    amount payable, status.
    """
    soup = BeautifulSoup(html or "", "lxml")
    table = soup.find("table", class_="szamla_table")
    if table is None:
        return []
    body = table.find("tbody") or table
    records: List[InvoiceRecord] = []
    for idx, tr in enumerate(body.find_all("tr", recursive=False)):
        cells = [td.get_text(" ", strip=True) for td in tr.find_all("td")]
        if len(cells) < 4:
            continue
        issued = parse_portal_date(cells[3])
        if issued is None:
            raise DijnetError(f"invalid date of issue {cells[3]!r} for invoice {cells[2]}")
        onclick = tr.get("onclick") or ""
        m = _ROWID_RE.search(onclick)
        records.append(
            InvoiceRecord(
                provider=cells[0],
                issuer_id=cells[1],
                invoice_id=cells[2],
                date_of_issue=issued,
                total=cells[4] if len(cells) > 4 else None,
                due_date=parse_portal_date(cells[5]) if len(cells) > 5 else None,
                status=cells[7] if len(cells) > 7 else None,
                row_id=int(m.group(1)) if m else idx,
            )
        )
    return records


# ---------- Client ----------
class DijnetService:
    def __init__(
        self,
        session: Optional[requests.Session] = None,
        base_url: str = DIJNET_BASE,
        timeout: int = 60,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": USER_AGENT})

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        logging.debug("%s %s", method, url)
        try:
            r = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise DijnetError(f"{method} {path} failed: {exc}") from exc
        if r.status_code >= 400:
            raise DijnetError(f"{method} {path} failed {r.status_code}", status_code=r.status_code)
        return r

    def login(self, username: str, password: str) -> None:
        r = self._request("POST", LOGIN_PATH, data={"username": username, "password": password})
        try:
            payload = r.json()
        except ValueError as exc:
            raise DijnetError("unexpected login response") from exc
        if not isinstance(payload, dict) or not payload.get("success"):
            reason = payload.get("error") if isinstance(payload, dict) else None
            raise DijnetError(f"login rejected: {reason or 'unknown error'}")

    def providers(self) -> Tuple[List[str], str]:
        r = self._request("GET", SEARCH_PATH)
        return parse_providers(r.text), parse_token(r.text)

    def invoices(self, query: InvoicesQuery) -> List[InvoiceRecord]:
        data = {
            "vfw_form": "szamla_search_submit",
            "vfw_token": query.token,
            "szlaszolgnev": query.provider or "",
            "regszolgid": query.issuer_id or "",
            "datumtol": portal_date(query.date_from),
            "datumig": portal_date(query.date_to),
        }
        r = self._request("POST", SEARCH_SUBMIT_PATH, data=data)
        return parse_invoice_rows(r.text)

    def _save(self, path: str, dest: str) -> None:
        r = self._request("GET", path, stream=True)
        with r:
            with open(dest, "wb") as f:
                for chunk in r.iter_content(chunk_size=1024 * 128):
                    if chunk:
                        f.write(chunk)

    def download_invoice(
        self, record: InvoiceRecord, pdf_path: Optional[str], xml_path: Optional[str]
    ) -> None:
        if not pdf_path and not xml_path:
            return
        self._request(
            "GET",
            SELECT_PATH,
            params={"vfw_coll": "szamla_list", "vfw_rowid": record.row_id, "exp": "K"},
        )
        self._request("GET", DOWNLOAD_PAGE_PATH)
        if pdf_path:
            Path(pdf_path).parent.mkdir(parents=True, exist_ok=True)
            self._save(PDF_PATH, pdf_path)
        if xml_path:
            Path(xml_path).parent.mkdir(parents=True, exist_ok=True)
            self._save(XML_PATH, xml_path)
        self._request("GET", LIST_PATH)
