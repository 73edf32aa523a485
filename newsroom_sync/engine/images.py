"""Download, recompress and re-host the representative image of an item."""

from __future__ import annotations

import mimetypes
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from urllib.parse import urlparse

import structlog
from PIL import Image

from ..config import ImageSettings
from ..errors import FetchError, StoreError
from ..infra import ScratchSpace
from .fetcher import Fetcher
from .outcome import Outcome
from .records import StoredImage, format_timestamp
from .store import BlobStore

_FORMATS = {".jpg": "JPEG", ".jpeg": "JPEG", ".png": "PNG", ".webp": "WEBP"}


def image_extension(url: str, supported: list[str]) -> str:
    """Extension used for the stored key; anything unsupported becomes ``.jpg``."""

    suffix = Path(urlparse(url).path).suffix.lower()
    if suffix and suffix in supported and suffix in _FORMATS:
        return suffix
    return ".jpg"


def transcode(source: Path, destination: Path, settings: ImageSettings) -> Path | None:
    """Fit ``source`` inside the configured bounds and re-encode it.

    The output format follows ``destination``'s extension. Returns ``None``
    when Pillow cannot decode or encode the file.
    """
    image_format = _FORMATS.get(destination.suffix.lower(), "JPEG")
    try:
        with Image.open(source) as image:
            image.load()
            # thumbnail() keeps the aspect ratio and never enlarges
            image.thumbnail((settings.max_width, settings.max_height), Image.Resampling.LANCZOS)
            if image_format == "JPEG":
                if image.mode not in ("RGB", "L"):
                    image = image.convert("RGB")
                image.save(
                    destination,
                    "JPEG",
                    quality=settings.quality,
                    progressive=True,
                    optimize=True,
                )
            elif image_format == "PNG":
                image.save(destination, "PNG", compress_level=settings.png_compress_level)
            else:
                image.save(
                    destination, "WEBP", quality=settings.quality, method=settings.webp_method
                )
    except (OSError, ValueError, Image.DecompressionBombError):
        destination.unlink(missing_ok=True)
        return None
    return destination


class ImagePipeline:
    """Materialise a remote image as a publicly readable stored asset."""

    def __init__(
        self,
        fetcher: Fetcher,
        blobs: BlobStore,
        scratch: ScratchSpace,
        settings: ImageSettings,
        timeout: float = 15.0,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.blobs = blobs
        self.scratch = scratch
        self.settings = settings
        self.timeout = timeout
        self.logger = logger or structlog.get_logger("newsroom_sync.images")

    def build_key(self, identifier: str, extension: str) -> str:
        stamp = int(time.time() * 1000)
        return f"{self.settings.folder}/{identifier}_{stamp}_{uuid.uuid4().hex[:8]}{extension}"

    async def materialize(self, url: str, identifier: str) -> Outcome[StoredImage]:
        extension = image_extension(url, self.settings.supported_formats)
        token = uuid.uuid4().hex[:8]
        downloaded = self.scratch.path(f"{identifier}_{token}_source{extension}")
        converted = self.scratch.path(f"{identifier}_{token}{extension}")
        try:
            original_size = await self.fetcher.download(url, downloaded, timeout=self.timeout)
            result = transcode(downloaded, converted, self.settings)
            upload_path = result or downloaded
            stored_size = upload_path.stat().st_size
            key = self.build_key(identifier, extension)
            content_type = mimetypes.guess_type(f"image{extension}")[0] or "image/jpeg"
            metadata = {
                "newsId": identifier,
                "originalUrl": url,
                "uploadedAt": format_timestamp(datetime.now(timezone.utc)),
                "originalSize": str(original_size),
                "compressedSize": str(stored_size),
                "compressionRatio": _ratio(original_size, stored_size),
                "compressed": "true" if result else "false",
            }
            public_url = await self.blobs.upload(key, upload_path, content_type, metadata)
        except FetchError as exc:
            self.logger.warning("image_download_failed", url=url, error=exc.reason)
            return Outcome.failed(StoredImage.passthrough(url), exc.reason)
        except StoreError as exc:
            self.logger.error("image_upload_failed", url=url, error=str(exc))
            return Outcome.failed(StoredImage.passthrough(url), str(exc))
        except OSError as exc:
            self.logger.error("image_scratch_failed", url=url, error=str(exc))
            return Outcome.failed(StoredImage.passthrough(url), str(exc))
        finally:
            self.scratch.discard(downloaded, converted)

        stored = StoredImage(
            url=public_url,
            source_url=url,
            key=key,
            transcoded=result is not None,
            original_size=original_size,
            stored_size=stored_size,
        )
        self.logger.info(
            "image_uploaded",
            url=url,
            key=key,
            original_size=original_size,
            stored_size=stored_size,
            transcoded=stored.transcoded,
        )
        if result is None:
            return Outcome.fallback(stored, "transcode_failed")
        return Outcome.ok(stored)


def _ratio(original: int, stored: int) -> str:
    if original <= 0:
        return "0%"
    return f"{(1 - stored / original) * 100:.1f}%"


__all__ = ["ImagePipeline", "image_extension", "transcode"]
