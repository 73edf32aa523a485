"""Error taxonomy shared by the sync pipeline."""

from __future__ import annotations


class SyncError(Exception):
    """Base class for every pipeline error."""


class FetchError(SyncError):
    """Network failure, timeout or unusable HTTP status for a page or image."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class ParseError(SyncError):
    """Scraped markup held a reference that cannot be resolved."""


class StoreError(SyncError):
    """Document store or blob store operation failed."""


class FatalInitError(SyncError):
    """Configuration, credential or backend initialisation failure."""


__all__ = [
    "FatalInitError",
    "FetchError",
    "ParseError",
    "StoreError",
    "SyncError",
]
