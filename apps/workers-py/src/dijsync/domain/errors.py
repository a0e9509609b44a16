"""Exception hierarchy for the invoice sync.

Every failure the sync can report derives from :class:`SyncError`, so the CLI
can print it and abort with a single ``except`` clause.
"""

from __future__ import annotations

import datetime as dt
from typing import Optional


class SyncError(RuntimeError):
    """Base class for every reportable sync failure."""


# ---------- Configuration ----------
class ConfigurationError(SyncError):
    pass


class ConflictingFlagsError(ConfigurationError):
    def __init__(self, message: str = "--resume and --redownload are mutually exclusive"):
        super().__init__(message)


class InvalidRangeError(ConfigurationError):
    def __init__(self, date_from: dt.date, date_to: dt.date):
        self.date_from = date_from
        self.date_to = date_to
        super().__init__(
            f"invalid range: --from ({date_from.isoformat()}) is after --to ({date_to.isoformat()})"
        )


# ---------- Remote ----------
class RemoteError(SyncError):
    pass


class DijnetError(RemoteError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class DownloadError(RemoteError):
    def __init__(self, invoice_id: str, cause: BaseException):
        self.invoice_id = invoice_id
        super().__init__(f"download failed for invoice {invoice_id}: {cause}")


# ---------- Filesystem ----------
class FilesystemError(SyncError):
    pass


class ArchiveNotADirectoryError(FilesystemError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"invoice path {path} is not a directory")


class ArchiveScanError(FilesystemError):
    pass


class DirectoryCreateError(FilesystemError):
    def __init__(self, path: str, cause: BaseException):
        self.path = path
        super().__init__(f"unable to create directory {path}: {cause}")


# ---------- Lookup ----------
class NotFoundError(SyncError):
    pass


class ProviderNotFoundError(NotFoundError):
    def __init__(self, query: str):
        self.query = query
        super().__init__(
            f"provider {query!r} not found; use --list-providers to inspect valid names"
        )


class PromptError(SyncError):
    pass
