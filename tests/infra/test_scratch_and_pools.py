from __future__ import annotations

import asyncio

import pytest

from newsroom_sync.engine import RequestPacer
from newsroom_sync.infra import ScratchSpace, UserAgentPool


def test_scratch_paths_are_sanitised(tmp_path) -> None:
    scratch = ScratchSpace(tmp_path / "scratch")

    path = scratch.path("../../etc/passwd")

    assert path.parent == tmp_path / "scratch"
    assert "/" not in path.name


def test_owned_scratch_is_removed_on_exit() -> None:
    with ScratchSpace() as scratch:
        scratch.path("a.bin").write_bytes(b"x")
        root = scratch.root
    assert not root.exists()


def test_borrowed_scratch_is_emptied_but_kept(tmp_path) -> None:
    scratch = ScratchSpace(tmp_path / "scratch")
    scratch.path("a.bin").write_bytes(b"x")
    (scratch.root / "nested").mkdir()

    scratch.sweep()

    assert scratch.root.exists()
    assert list(scratch.root.iterdir()) == []


def test_ua_pool_defaults_and_rotation() -> None:
    assert UserAgentPool("default-agent").get() == "default-agent"
    assert UserAgentPool("default-agent", ["  ", ""]).get() == "default-agent"

    pool = UserAgentPool("default-agent", ["agent-one", " agent-two "])
    assert {pool.get() for _ in range(50)} <= {"agent-one", "agent-two"}


def test_pacer_skips_when_disabled() -> None:
    calls: list[float] = []

    async def record(seconds):
        calls.append(seconds)

    asyncio.run(RequestPacer(0, sleep=record).pause())
    pacer = RequestPacer(1.5, sleep=record)
    asyncio.run(pacer.pause())

    assert calls == [1.5]
    assert pacer.pauses == 1
    with pytest.raises(ValueError):
        RequestPacer(-1)
