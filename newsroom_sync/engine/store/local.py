"""Filesystem-backed stores for development runs and tests."""

from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import Any, Mapping

from ...errors import StoreError
from .base import BlobStore, CollectionStore, normalise_snapshot


class LocalCollectionStore(CollectionStore):
    """One JSON document per collection, ``{"0": {...}, "1": {...}}``."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def path(self, collection: str) -> Path:
        return self.root / f"{collection}.json"

    def _load(self, collection: str) -> dict[str, Any]:
        path = self.path(collection)
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreError(f"cannot read collection {collection}: {exc}") from exc
        if isinstance(data, list):
            return {str(index): item for index, item in enumerate(data) if item is not None}
        if not isinstance(data, dict):
            raise StoreError(f"collection {collection} is not a mapping")
        return data

    def _dump(self, collection: str, data: dict[str, Any]) -> None:
        try:
            self.path(collection).write_text(
                json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8"
            )
        except OSError as exc:
            raise StoreError(f"cannot write collection {collection}: {exc}") from exc

    async def read_all(self, collection: str) -> list[dict[str, Any]]:
        return normalise_snapshot(self._load(collection))

    async def clear(self, collection: str) -> None:
        try:
            self.path(collection).unlink(missing_ok=True)
        except OSError as exc:
            raise StoreError(f"cannot clear collection {collection}: {exc}") from exc

    async def write(self, collection: str, index: int, payload: Mapping[str, Any]) -> None:
        data = self._load(collection)
        data[str(index)] = dict(payload)
        self._dump(collection, data)


class LocalBlobStore(BlobStore):
    """Copy blobs under ``root`` with a JSON metadata sidecar."""

    def __init__(self, root: Path, public_base_url: str | None = None) -> None:
        self.root = root
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None
        self.root.mkdir(parents=True, exist_ok=True)

    async def upload(
        self,
        key: str,
        path: Path,
        content_type: str,
        metadata: Mapping[str, str] | None = None,
    ) -> str:
        target = self.root / key
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(path, target)
            sidecar = {"contentType": content_type, "metadata": dict(metadata or {})}
            target.with_name(target.name + ".meta.json").write_text(
                json.dumps(sidecar, ensure_ascii=False, indent=2), encoding="utf-8"
            )
        except OSError as exc:
            raise StoreError(f"cannot store blob {key}: {exc}") from exc
        if self.public_base_url:
            return f"{self.public_base_url}/{key}"
        return target.resolve().as_uri()


__all__ = ["LocalBlobStore", "LocalCollectionStore"]
