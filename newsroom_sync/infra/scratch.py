"""Process-scoped scratch directory for transient downloads."""

from __future__ import annotations

import re
import shutil
import tempfile
from pathlib import Path

_UNSAFE = re.compile(r"[^0-9A-Za-z._-]+")


class ScratchSpace:
    """Own a temporary directory for one sync run.

    Individual files are released with :meth:`discard`; :meth:`sweep` removes
    whatever is left when the run ends.
    """

    def __init__(self, root: Path | None = None) -> None:
        if root is None:
            self.root = Path(tempfile.mkdtemp(prefix="newsroom-sync-"))
            self._owned = True
        else:
            root.mkdir(parents=True, exist_ok=True)
            self.root = root
            self._owned = False

    def path(self, name: str) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        safe = _UNSAFE.sub("_", name).strip("._") or "file"
        return self.root / safe

    def discard(self, *paths: Path) -> None:
        for path in paths:
            path.unlink(missing_ok=True)

    def sweep(self) -> None:
        if not self.root.exists():
            return
        if self._owned:
            shutil.rmtree(self.root, ignore_errors=True)
            return
        for entry in self.root.iterdir():
            if entry.is_dir():
                shutil.rmtree(entry, ignore_errors=True)
            else:
                entry.unlink(missing_ok=True)

    def __enter__(self) -> "ScratchSpace":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.sweep()


__all__ = ["ScratchSpace"]
