"""Title based change detection against the published collection."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

import structlog

from ..errors import StoreError
from .outcome import Outcome
from .records import ListingCandidate, normalise_title
from .store import CollectionStore


@dataclass(slots=True)
class GateDecision:
    has_new: bool
    new_titles: set[str] = field(default_factory=set)
    # normalised title -> published payload
    known: dict[str, dict[str, Any]] = field(default_factory=dict)

    def is_known(self, candidate: ListingCandidate) -> bool:
        return normalise_title(candidate.title) in self.known


class DeduplicationGate:
    """Decide whether a listing batch contains anything not yet published.

    Titles are compared lower-cased and trimmed. When the collection cannot be
    read the gate reports new content so a run is never silently skipped.
    """

    def __init__(self, store: CollectionStore, logger: structlog.BoundLogger | None = None) -> None:
        self.store = store
        self.logger = logger or structlog.get_logger("newsroom_sync.dedup")

    async def check(
        self, collection: str, candidates: Iterable[ListingCandidate]
    ) -> Outcome[GateDecision]:
        candidates = list(candidates)
        try:
            published = await self.store.read_all(collection)
        except StoreError as exc:
            self.logger.warning("gate_read_failed", collection=collection, error=str(exc))
            titles = {normalise_title(candidate.title) for candidate in candidates}
            return Outcome.fallback(GateDecision(has_new=True, new_titles=titles), str(exc))

        known: dict[str, dict[str, Any]] = {}
        for payload in published:
            title = normalise_title(str(payload.get("title") or ""))
            if title:
                known.setdefault(title, payload)
        new_titles = {
            title
            for title in (normalise_title(candidate.title) for candidate in candidates)
            if title not in known
        }
        decision = GateDecision(has_new=bool(new_titles), new_titles=new_titles, known=known)
        self.logger.info(
            "gate_decision",
            collection=collection,
            candidates=len(candidates),
            published=len(published),
            new=len(new_titles),
        )
        return Outcome.ok(decision)


__all__ = ["DeduplicationGate", "GateDecision"]
