"""Shared fixtures: a stub source site, sample pages and local stores."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Callable, Iterable

import httpx
import pytest
from PIL import Image

from newsroom_sync.config import BackendConfig, FetchSettings, SyncConfig, default_content_types
from newsroom_sync.engine import Fetcher
from newsroom_sync.engine.store import LocalBlobStore, LocalCollectionStore

BASE_URL = "https://example.test"


def listing_page(
    items: Iterable[tuple[str, str, str]], item_class: str = "haberler-page-item"
) -> str:
    """Render ``(title, href, DD.MM.YYYY)`` tuples the way the source lists them."""

    blocks = []
    for index, (title, href, day) in enumerate(items):
        blocks.append(
            f'<div class="{item_class}">'
            f'<div class="haberler-img"><img src="/uploads/list-{index}.jpg"></div>'
            f"<h5>{title}</h5>"
            f'<div class="date">{day}</div>'
            f'<div class="haberler-page-date"><a href="{href}">Devamı</a></div>'
            "</div>"
        )
    return f"<html><body><main>{''.join(blocks)}</main></body></html>"


def detail_page(
    title: str,
    paragraphs: Iterable[str] = ("Body text",),
    images: Iterable[str] = (),
    category: str = "Kampüs",
    full_date: str = "12 Mayıs 2024",
    extra: str = "",
) -> str:
    body = "".join(f"<p>{paragraph}</p>" for paragraph in paragraphs)
    pictures = "".join(f'<img src="{src}">' for src in images)
    return (
        "<html><body>"
        f'<div class="date"><h5>{category}</h5></div>'
        f'<div class="date-inner"><h6>{full_date}</h6></div>'
        f'<div class="content-title"><h3>{title}</h3>{body}{pictures}</div>'
        f"{extra}"
        "</body></html>"
    )


def image_bytes(size: tuple[int, int] = (64, 48), fmt: str = "PNG") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(200, 40, 40)).save(buffer, fmt)
    return buffer.getvalue()


class StubSite:
    """In-memory site served through ``httpx.MockTransport``."""

    def __init__(self) -> None:
        self.routes: dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: list[httpx.Request] = []

    def page(self, path: str, html: str, status: int = 200) -> None:
        self.routes[path] = lambda request: httpx.Response(
            status, text=html, headers={"Content-Type": "text/html; charset=utf-8"}
        )

    def binary(self, path: str, payload: bytes, content_type: str = "image/png") -> None:
        self.routes[path] = lambda request: httpx.Response(
            200, content=payload, headers={"Content-Type": content_type}
        )

    def fail(self, path: str) -> None:
        def _raise(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        self.routes[path] = _raise

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, text="not found")
        return route(request)

    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture(autouse=True)
def sync_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("NEWSROOM_SYNC_HOME", str(tmp_path))
    return tmp_path


@pytest.fixture
def site() -> StubSite:
    return StubSite()


@pytest.fixture
def fetcher_for() -> Callable[..., Fetcher]:
    def _builder(site: StubSite, **overrides) -> Fetcher:
        settings = FetchSettings(**overrides)
        return Fetcher(settings, transport=site.transport, sleep=_no_sleep)

    return _builder


async def _no_sleep(_seconds: float) -> None:
    return None


@pytest.fixture
def sync_config(tmp_path: Path) -> SyncConfig:
    return SyncConfig(
        base_url=BASE_URL,
        content_types=default_content_types(BASE_URL),
        request_interval=0,
        backend=BackendConfig(kind="local", local_root=tmp_path / "store"),
        backups_dir=tmp_path / "backups",
        scratch_dir=tmp_path / "scratch",
    )


@pytest.fixture
def collections(tmp_path: Path) -> LocalCollectionStore:
    return LocalCollectionStore(tmp_path / "store" / "collections")


@pytest.fixture
def blobs(tmp_path: Path) -> LocalBlobStore:
    return LocalBlobStore(tmp_path / "store" / "blobs", public_base_url="https://cdn.example.test")
