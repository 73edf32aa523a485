"""JSON snapshots of a collection taken before it is replaced."""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ...errors import StoreError


class CollectionBackup:
    """Write ``<collection>-<run_tag>.json`` files under ``output_dir``."""

    def __init__(self, output_dir: Path, run_tag: str | None = None) -> None:
        self.output_dir = output_dir
        self.run_tag = run_tag or datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")

    def path_for(self, collection: str) -> Path:
        slug = re.sub(r"[^0-9A-Za-z_-]+", "_", collection.strip()) or "collection"
        return self.output_dir / f"{slug}-{self.run_tag}.json"

    def write(self, collection: str, records: list[dict[str, Any]]) -> Path:
        path = self.path_for(collection)
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            payload = {str(index): record for index, record in enumerate(records)}
            path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as exc:
            raise StoreError(f"backup of {collection} failed: {exc}") from exc
        return path


__all__ = ["CollectionBackup"]
