"""Store SPI and the filesystem implementation.

The Firebase implementation lives in :mod:`.firebase` and is imported by
:func:`open_backend` only when that backend is configured.
"""

from .backup import CollectionBackup
from .base import BlobStore, CollectionStore, normalise_snapshot
from .factory import open_backend
from .local import LocalBlobStore, LocalCollectionStore

__all__ = [
    "BlobStore",
    "CollectionBackup",
    "CollectionStore",
    "LocalBlobStore",
    "LocalCollectionStore",
    "normalise_snapshot",
    "open_backend",
]
