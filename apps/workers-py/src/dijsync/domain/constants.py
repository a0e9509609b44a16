"""Shared layouts, patterns and defaults for the Dijnet invoice sync."""

import re

DATE_FORMAT = "%Y-%m-%d"
DATE_LAYOUT_HINT = "YYYY-MM-DD"

# <YYYY-MM-DD>_<anything>.pdf|xml; use fullmatch() against the bare file name.
INVOICE_FILENAME_RE = re.compile(r"([0-9]{4}-[0-9]{2}-[0-9]{2})_.*\.(pdf|xml)", re.IGNORECASE)

PDF_SUFFIX = ".pdf"
XML_SUFFIX = ".xml"

ENV_USERNAME = "DIJNET_USERNAME"
ENV_PASSWORD = "DIJNET_PASSWORD"
ENV_INVOICE_PATH = "DIJNET_INVOICE_PATH"
ENV_TIMEOUT = "DIJNET_TIMEOUT"

DEFAULT_INVOICE_PATH = "invoices"
DEFAULT_TIMEOUT = 60

AFFIRMATIVE_ANSWERS = {"", "y", "yes"}
