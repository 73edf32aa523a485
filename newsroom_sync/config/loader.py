"""Configuration loading helpers for newsroom-sync."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

import yaml
from pydantic import ValidationError

from ..errors import FatalInitError
from .models import SyncConfig

CONFIG_EXTENSIONS = (".yaml", ".yml", ".json")
CONFIG_FILENAME = "sync_config.yaml"


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def _write_file(path: Path, payload: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as stream:
        if path.suffix in (".yaml", ".yml"):
            yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)
        else:
            json.dump(payload, stream, indent=2, ensure_ascii=False)


@dataclass(slots=True)
class ConfigLocator:
    """Resolve important paths from the project home."""

    project_root: Path | None = None
    data_dir: Path | None = None
    logs_dir: Path | None = None

    def __post_init__(self) -> None:
        env_root = os.environ.get("NEWSROOM_SYNC_HOME")
        if env_root:
            root = Path(env_root).expanduser().resolve()
        else:
            root = (self.project_root or Path.cwd()).resolve()
        self.project_root = root
        self.data_dir = (root / "data").resolve()
        self.logs_dir = (root / "logs").resolve()
        self.ensure_directories()

    def ensure_directories(self) -> None:
        for directory in (
            self.data_dir,
            self.data_dir / "backups",
            self.data_dir / "local_store",
            self.logs_dir,
        ):
            directory.mkdir(parents=True, exist_ok=True)

    def config_path(self) -> Path:
        return self.data_dir / CONFIG_FILENAME

    def resolve(self, path: Path) -> Path:
        """Anchor a relative config path at the project root."""

        if path.is_absolute():
            return path
        return (self.project_root / path).resolve()


class ConfigRepository:
    """Repository encapsulating config IO and schema validation."""

    def __init__(self, locator: ConfigLocator | None = None, path: Path | None = None) -> None:
        self.locator = locator or ConfigLocator()
        self.path = path or self.locator.config_path()
        self._cache: SyncConfig | None = None

    def load(self) -> SyncConfig:
        """Return the validated config, writing defaults on first use.

        Unreadable or invalid files raise :class:`FatalInitError`; a run must
        not start against a half-understood configuration.
        """
        if self._cache is not None:
            return self._cache
        if self.path.exists():
            try:
                payload = _read_file(self.path)
                config = SyncConfig.model_validate(payload)
            except (OSError, ValueError, yaml.YAMLError, ValidationError) as exc:
                raise FatalInitError(f"Invalid configuration {self.path}: {exc}") from exc
        else:
            config = SyncConfig()
            self.save(config)
        self._cache = config
        return config

    def save(self, config: SyncConfig) -> Path:
        payload = config.model_dump(mode="json")
        _write_file(self.path, payload)
        self._cache = config
        return self.path

    def reload(self) -> SyncConfig:
        self._cache = None
        return self.load()


__all__ = ["CONFIG_EXTENSIONS", "ConfigLocator", "ConfigRepository"]
