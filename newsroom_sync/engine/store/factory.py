"""Build the configured collection and blob stores."""

from __future__ import annotations

from pathlib import Path

from ...config import BackendConfig
from ...errors import FatalInitError
from .base import BlobStore, CollectionStore
from .local import LocalBlobStore, LocalCollectionStore


def open_backend(config: BackendConfig, base_dir: Path) -> tuple[CollectionStore, BlobStore]:
    """Return ``(collections, blobs)`` for ``config``.

    Relative paths are anchored at ``base_dir``. Any failure is raised as
    :class:`FatalInitError` before a run starts.
    """
    if config.kind == "local":
        root = config.local_root
        if not root.is_absolute():
            root = (base_dir / root).resolve()
        try:
            return (
                LocalCollectionStore(root / "collections"),
                LocalBlobStore(root / "blobs", config.public_base_url),
            )
        except OSError as exc:
            raise FatalInitError(f"Cannot prepare local store at {root}: {exc}") from exc

    try:
        from . import firebase
    except ImportError as exc:
        raise FatalInitError(
            "The firebase backend needs the 'firebase' extra (pip install newsroom-sync[firebase])"
        ) from exc
    resolved = config
    if config.credentials_path is not None and not config.credentials_path.is_absolute():
        resolved = config.model_copy(
            update={"credentials_path": (base_dir / config.credentials_path).resolve()}
        )
    app = firebase.initialise_app(resolved)
    try:
        return firebase.FirebaseCollectionStore(app), firebase.FirebaseBlobStore(app)
    except (ValueError, OSError) as exc:
        raise FatalInitError(f"Firebase stores unavailable: {exc}") from exc


__all__ = ["open_backend"]
