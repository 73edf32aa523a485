"""Pydantic models describing the sync configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_BASE_URL = "https://www.thk.edu.tr"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class FetchSettings(BaseModel):
    """HTTP behaviour towards the source site."""

    user_agent: str = DEFAULT_USER_AGENT
    # Optional rotation pool; when empty every request uses ``user_agent``.
    user_agents: list[str] = Field(default_factory=list)
    # The reference source serves an incomplete certificate chain.
    verify_tls: bool = False
    page_timeout: float = 30.0
    image_timeout: float = 15.0
    retries: int = 0
    retry_backoff: float = 1.0

    @model_validator(mode="after")
    def _validate_numbers(self) -> "FetchSettings":
        if self.page_timeout <= 0 or self.image_timeout <= 0:
            raise ValueError("timeouts must be > 0")
        if self.retries < 0:
            raise ValueError("retries must be >= 0")
        if self.retry_backoff < 0:
            raise ValueError("retry_backoff must be >= 0")
        return self


class ImageSettings(BaseModel):
    """Transcoding and upload parameters for the representative image."""

    max_width: int = 1200
    max_height: int = 800
    quality: int = 80
    png_compress_level: int = 8
    webp_method: int = 6
    folder: str = "news_images"
    supported_formats: list[str] = Field(
        default_factory=lambda: [".jpg", ".jpeg", ".png", ".webp"]
    )

    @field_validator("supported_formats", mode="before")
    @classmethod
    def _normalise_formats(cls, value: Any) -> list[str]:
        if not isinstance(value, (list, tuple)):
            raise ValueError("supported_formats expects a list of extensions")
        formats = []
        for item in value:
            ext = str(item).strip().lower()
            if not ext:
                continue
            formats.append(ext if ext.startswith(".") else f".{ext}")
        return formats

    @model_validator(mode="after")
    def _validate_bounds(self) -> "ImageSettings":
        if self.max_width < 1 or self.max_height < 1:
            raise ValueError("image bounds must be positive")
        if not 1 <= self.quality <= 100:
            raise ValueError("quality must be within 1..100")
        if not 0 <= self.png_compress_level <= 9:
            raise ValueError("png_compress_level must be within 0..9")
        if not 0 <= self.webp_method <= 6:
            raise ValueError("webp_method must be within 0..6")
        return self


class ListingSettings(BaseModel):
    """Selectors and limits for one listing page."""

    url: str
    item_selector: str
    title_selector: str = "h5"
    # Tried in order, first element carrying an href wins.
    link_selectors: list[str] = Field(default_factory=lambda: [".haberler-page-date a"])
    thumbnail_selector: str | None = None
    date_selector: str = ".date"
    category: str = "Genel"
    max_items: int = 15
    min_title_length: int = 5
    title_max_length: int = 200
    fallback_max_items: int = 10
    fallback_min_text_length: int = 20
    fallback_path_markers: list[str] = Field(
        default_factory=lambda: ["/haber", "/news", "/duyuru"]
    )
    fallback_category: str = "Genel"

    @model_validator(mode="after")
    def _validate_limits(self) -> "ListingSettings":
        if not self.item_selector:
            raise ValueError("item_selector cannot be empty")
        if not self.link_selectors:
            raise ValueError("link_selectors cannot be empty")
        if self.max_items < 1 or self.fallback_max_items < 0:
            raise ValueError("item caps must be positive")
        return self


class DetailSettings(BaseModel):
    """Selectors used on a detail page."""

    content_selector: str = ".content-title"
    paragraph_selector: str = "p"
    title_selector: str = ".content-title h3"
    date_selector: str = ".date-inner h6"
    category_selector: str = ".date h5"
    # Scope searched for thumbnail-variant images; ``None`` means whole page.
    thumbnail_scope_selector: str | None = ".duyuru-page-content"
    thumbnail_marker: str = "/tiny/"


class ContentTypeConfig(BaseModel):
    """One independently published content type (news, announcements...)."""

    name: str
    collection: str
    listing: ListingSettings
    detail: DetailSettings = Field(default_factory=DetailSettings)
    image_prefix: str = ""
    enabled: bool = True

    @field_validator("name", "collection")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name and collection cannot be blank")
        return value


class BackendConfig(BaseModel):
    """Where collections and images are published."""

    kind: Literal["firebase", "local"] = "local"
    credentials_path: Path | None = None
    database_url: str | None = None
    storage_bucket: str | None = None
    local_root: Path = Field(default=Path("data/local_store"))
    public_base_url: str | None = None

    @field_validator("credentials_path", mode="before")
    @classmethod
    def _coerce_credentials(cls, value: Any) -> Path | None:
        if value in (None, ""):
            return None
        return Path(value).expanduser()

    @field_validator("local_root", mode="before")
    @classmethod
    def _coerce_root(cls, value: Any) -> Path:
        if value in (None, ""):
            return Path("data/local_store")
        return Path(value)

    @model_validator(mode="after")
    def _validate_firebase(self) -> "BackendConfig":
        if self.kind == "firebase":
            missing = [
                name
                for name in ("credentials_path", "database_url", "storage_bucket")
                if not getattr(self, name)
            ]
            if missing:
                raise ValueError(f"firebase backend requires: {', '.join(missing)}")
        return self


def default_content_types(base_url: str = DEFAULT_BASE_URL) -> list[ContentTypeConfig]:
    return [
        ContentTypeConfig(
            name="news",
            collection="news",
            listing=ListingSettings(
                url=f"{base_url}/haberler",
                item_selector=".haberler-page-item",
                link_selectors=[".haberler-page-date a"],
                thumbnail_selector=".haberler-img img",
                category="THK Haberleri",
            ),
        ),
        ContentTypeConfig(
            name="announcements",
            collection="announcements",
            listing=ListingSettings(
                url=f"{base_url}/duyurular",
                item_selector=".duyuru-page-item",
                link_selectors=[".haberler-page-date a", 'a[href*="duyuru"]'],
                category="THK Duyuruları",
            ),
            image_prefix="announcement_",
        ),
    ]


class SyncConfig(BaseModel):
    """Top level configuration for a sync run."""

    base_url: str = DEFAULT_BASE_URL
    content_types: list[ContentTypeConfig] = Field(default_factory=default_content_types)
    fetch: FetchSettings = Field(default_factory=FetchSettings)
    images: ImageSettings = Field(default_factory=ImageSettings)
    backend: BackendConfig = Field(default_factory=BackendConfig)
    request_interval: float = 1.0
    summary_length: int = 200
    title_summary_length: int = 100
    refresh_existing: bool = False
    create_backup: bool = True
    backups_dir: Path = Field(default=Path("data/backups"))
    scratch_dir: Path | None = None

    @field_validator("backups_dir", mode="before")
    @classmethod
    def _coerce_backups(cls, value: Any) -> Path:
        if value in (None, ""):
            return Path("data/backups")
        return Path(value)

    @field_validator("scratch_dir", mode="before")
    @classmethod
    def _coerce_scratch(cls, value: Any) -> Path | None:
        if value in (None, ""):
            return None
        return Path(value)

    @model_validator(mode="after")
    def _validate_run(self) -> "SyncConfig":
        if self.request_interval < 0:
            raise ValueError("request_interval must be >= 0")
        names = [ct.name for ct in self.content_types]
        if len(names) != len(set(names)):
            raise ValueError("content type names must be unique")
        collections = [ct.collection for ct in self.content_types]
        if len(collections) != len(set(collections)):
            raise ValueError("each content type needs its own collection")
        return self

    def content_type(self, name: str) -> ContentTypeConfig:
        for content_type in self.content_types:
            if content_type.name == name:
                return content_type
        raise KeyError(f"Unknown content type: {name}")

    def resolve(self, path: Path, base_dir: Path) -> Path:
        """Return ``path`` anchored at ``base_dir`` when relative."""

        if not path.is_absolute():
            return (base_dir / path).resolve()
        return path


__all__ = [
    "BackendConfig",
    "ContentTypeConfig",
    "DEFAULT_BASE_URL",
    "DEFAULT_USER_AGENT",
    "DetailSettings",
    "FetchSettings",
    "ImageSettings",
    "ListingSettings",
    "SyncConfig",
    "default_content_types",
]
