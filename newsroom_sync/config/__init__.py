"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import (
    DEFAULT_USER_AGENT,
    BackendConfig,
    ContentTypeConfig,
    DetailSettings,
    FetchSettings,
    ImageSettings,
    ListingSettings,
    SyncConfig,
    default_content_types,
)

__all__ = [
    "DEFAULT_USER_AGENT",
    "BackendConfig",
    "ConfigLocator",
    "ConfigRepository",
    "ContentTypeConfig",
    "DetailSettings",
    "FetchSettings",
    "ImageSettings",
    "ListingSettings",
    "SyncConfig",
    "default_content_types",
]
