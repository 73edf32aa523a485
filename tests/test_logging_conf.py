from __future__ import annotations

import json
from pathlib import Path

from newsroom_sync.logging_conf import (
    bind_run,
    clear_run,
    content_logger,
    resolve_log,
    tail_log,
)


def test_resolve_log_maps_names_to_files(sync_home: Path) -> None:
    assert resolve_log("sync") == sync_home / "logs" / "sync.log"
    assert resolve_log("error") == sync_home / "logs" / "error.log"
    assert resolve_log("announcements") == sync_home / "logs" / "content" / "announcements.log"


def test_content_log_lines_carry_run_tag_and_collection(sync_home: Path) -> None:
    log = content_logger("news", "news_feed")
    bind_run("20240601-093000")
    try:
        log.info("listing_fetched", candidates=3)
    finally:
        clear_run()

    lines = tail_log(resolve_log("news"), 5)
    entry = json.loads(lines[-1])
    assert entry["run_tag"] == "20240601-093000"
    assert entry["content_type"] == "news"
    assert entry["collection"] == "news_feed"
    assert entry["candidates"] == 3


def test_tail_log_missing_file_is_empty(sync_home: Path) -> None:
    assert tail_log(resolve_log("nowhere")) == []
