"""Store SPI: document collections and public blobs."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterable, Mapping


class CollectionStore(ABC):
    """Named collections of records keyed by dense integer position.

    Implementations raise :class:`~newsroom_sync.errors.StoreError` on any
    backend failure.
    """

    @abstractmethod
    async def read_all(self, collection: str) -> list[dict[str, Any]]:
        """Return the records of ``collection`` in index order."""

    @abstractmethod
    async def clear(self, collection: str) -> None:
        """Remove every record of ``collection``."""

    @abstractmethod
    async def write(self, collection: str, index: int, payload: Mapping[str, Any]) -> None:
        """Store ``payload`` at ``index``."""

    async def replace(self, collection: str, payloads: Iterable[Mapping[str, Any]]) -> int:
        """Clear ``collection`` then write ``payloads`` at indices ``0..n-1``.

        A failure part way leaves a partially repopulated collection.
        """
        await self.clear(collection)
        count = 0
        for index, payload in enumerate(payloads):
            await self.write(collection, index, payload)
            count += 1
        return count


class BlobStore(ABC):
    """Object storage returning public URLs."""

    @abstractmethod
    async def upload(
        self,
        key: str,
        path: Path,
        content_type: str,
        metadata: Mapping[str, str] | None = None,
    ) -> str:
        """Store the file at ``key``, make it publicly readable, return its URL."""


def normalise_snapshot(value: Any) -> list[dict[str, Any]]:
    """Flatten a backend snapshot (list, index-keyed dict or ``None``)."""

    if value is None:
        return []
    if isinstance(value, list):
        return [item for item in value if isinstance(item, dict)]
    if isinstance(value, dict):

        def _order(key: str) -> tuple[int, int | str]:
            return (0, int(key)) if str(key).isdigit() else (1, str(key))

        return [value[key] for key in sorted(value, key=_order) if isinstance(value[key], dict)]
    return []


__all__ = ["BlobStore", "CollectionStore", "normalise_snapshot"]
