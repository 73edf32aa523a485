"""Firebase Realtime Database and Cloud Storage backends."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Mapping

import firebase_admin
from firebase_admin import credentials, db, storage

from ...config import BackendConfig
from ...errors import FatalInitError, StoreError
from .base import BlobStore, CollectionStore, normalise_snapshot

APP_NAME = "newsroom-sync"


def initialise_app(config: BackendConfig) -> firebase_admin.App:
    """Return the named Firebase app, creating it from the service account file."""

    try:
        return firebase_admin.get_app(APP_NAME)
    except ValueError:
        pass
    if config.credentials_path is None or not config.credentials_path.exists():
        raise FatalInitError(f"Service account file not found: {config.credentials_path}")
    try:
        cred = credentials.Certificate(str(config.credentials_path))
        return firebase_admin.initialize_app(
            cred,
            {"databaseURL": config.database_url, "storageBucket": config.storage_bucket},
            name=APP_NAME,
        )
    except (ValueError, OSError) as exc:
        raise FatalInitError(f"Firebase initialisation failed: {exc}") from exc


class FirebaseCollectionStore(CollectionStore):
    """Collections are top-level Realtime Database paths."""

    def __init__(self, app: firebase_admin.App) -> None:
        self.app = app

    def _ref(self, collection: str) -> db.Reference:
        return db.reference(collection, app=self.app)

    async def read_all(self, collection: str) -> list[dict[str, Any]]:
        try:
            snapshot = await asyncio.to_thread(self._ref(collection).get)
        except Exception as exc:  # noqa: BLE001
            raise StoreError(f"read {collection} failed: {exc}") from exc
        return normalise_snapshot(snapshot)

    async def clear(self, collection: str) -> None:
        try:
            await asyncio.to_thread(self._ref(collection).delete)
        except Exception as exc:  # noqa: BLE001
            raise StoreError(f"clear {collection} failed: {exc}") from exc

    async def write(self, collection: str, index: int, payload: Mapping[str, Any]) -> None:
        ref = self._ref(collection).child(str(index))
        try:
            await asyncio.to_thread(ref.set, dict(payload))
        except Exception as exc:  # noqa: BLE001
            raise StoreError(f"write {collection}/{index} failed: {exc}") from exc


class FirebaseBlobStore(BlobStore):
    """Public objects in the app's default Cloud Storage bucket."""

    def __init__(self, app: firebase_admin.App) -> None:
        self.bucket = storage.bucket(app=app)

    def _upload_sync(
        self, key: str, path: Path, content_type: str, metadata: Mapping[str, str] | None
    ) -> str:
        blob = self.bucket.blob(key)
        if metadata:
            blob.metadata = dict(metadata)
        blob.upload_from_filename(str(path), content_type=content_type)
        blob.make_public()
        return blob.public_url

    async def upload(
        self,
        key: str,
        path: Path,
        content_type: str,
        metadata: Mapping[str, str] | None = None,
    ) -> str:
        try:
            return await asyncio.to_thread(self._upload_sync, key, path, content_type, metadata)
        except Exception as exc:  # noqa: BLE001
            raise StoreError(f"upload {key} failed: {exc}") from exc


__all__ = ["FirebaseBlobStore", "FirebaseCollectionStore", "initialise_app"]
