"""Sync coordinator wiring listing, gate, enrichment, images and publishing."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

import structlog

from .config import ContentTypeConfig, SyncConfig
from .engine import (
    DeduplicationGate,
    DetailEnricher,
    Fetcher,
    ImagePipeline,
    ListingCandidate,
    ListingExtractor,
    OutcomeStatus,
    Parser,
    PublishedRecord,
    RequestPacer,
    assemble_record,
    carry_forward,
    sort_records,
)
from .engine.records import normalise_title
from .engine.store import BlobStore, CollectionBackup, CollectionStore, open_backend
from .errors import StoreError
from .infra import ScratchSpace, UserAgentPool
from .logging_conf import bind_run, clear_run, configure_logging, content_logger, new_run_tag


@dataclass(slots=True)
class SyncReport:
    """What one content type pass did."""

    content_type: str
    collection: str
    listing_status: OutcomeStatus | None = None
    candidates: int = 0
    new_items: int = 0
    enriched: int = 0
    carried: int = 0
    images_uploaded: int = 0
    degraded: int = 0
    published: int | None = None
    backup_path: Path | None = None
    error: str | None = None

    @property
    def skipped(self) -> bool:
        return self.published is None and self.error is None

    @property
    def failed(self) -> bool:
        return self.error is not None


class SyncCoordinator:
    """Run one content type from listing page to published collection."""

    def __init__(
        self,
        content_type: ContentTypeConfig,
        listing: ListingExtractor,
        enricher: DetailEnricher,
        images: ImagePipeline,
        gate: DeduplicationGate,
        store: CollectionStore,
        pacer: RequestPacer,
        backup: CollectionBackup | None = None,
        *,
        summary_length: int = 200,
        title_summary_length: int = 100,
        refresh_existing: bool = False,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.content_type = content_type
        self.listing = listing
        self.enricher = enricher
        self.images = images
        self.gate = gate
        self.store = store
        self.pacer = pacer
        self.backup = backup
        self.summary_length = summary_length
        self.title_summary_length = title_summary_length
        self.refresh_existing = refresh_existing
        self.logger = logger or structlog.get_logger("newsroom_sync").bind(
            content_type=content_type.name
        )

    async def run(self) -> SyncReport:
        """Extract, gate, enrich and publish.

        Per-item problems degrade the record; only a publish
        :class:`StoreError` escapes.
        """
        collection = self.content_type.collection
        report = SyncReport(content_type=self.content_type.name, collection=collection)

        listing = await self.listing.extract()
        candidates = listing.value
        report.listing_status = listing.status
        report.candidates = len(candidates)
        if not candidates:
            self.logger.warning("listing_empty", status=listing.status.value, reason=listing.reason)
            return report

        gate = await self.gate.check(collection, candidates)
        decision = gate.value
        report.new_items = len(decision.new_titles)
        if not decision.has_new:
            self.logger.info("nothing_new", collection=collection, candidates=len(candidates))
            return report

        records: list[PublishedRecord] = []
        for candidate in candidates:
            previous = decision.known.get(normalise_title(candidate.title))
            if previous is not None and not self.refresh_existing:
                records.append(carry_forward(candidate, previous))
                report.carried += 1
                continue
            records.append(await self._process(candidate, report))
            await self.pacer.pause()

        await self._publish(sort_records(records), report)
        return report

    async def _process(self, candidate: ListingCandidate, report: SyncReport) -> PublishedRecord:
        detail = await self.enricher.enrich(candidate.link)
        details = detail.value
        if detail.degraded:
            report.degraded += 1
            self.logger.warning(
                "item_degraded", url=candidate.link, status=detail.status.value, reason=detail.reason
            )

        images: list[str] = []
        discovered = details.content_image_urls if details else []
        if discovered:
            identifier = f"{self.content_type.image_prefix}{candidate.ordinal}_main"
            stored = await self.images.materialize(discovered[0], identifier)
            if stored.value.uploaded:
                report.images_uploaded += 1
            if stored.status is OutcomeStatus.FAILED:
                report.degraded += 1
            images = [stored.value.url, *discovered[1:]]

        report.enriched += 1
        return assemble_record(
            candidate,
            details,
            images,
            summary_length=self.summary_length,
            title_summary_length=self.title_summary_length,
        )

    async def _publish(self, records: list[PublishedRecord], report: SyncReport) -> None:
        collection = self.content_type.collection
        if self.backup is not None:
            current = await self.store.read_all(collection)
            if current:
                report.backup_path = self.backup.write(collection, current)
                self.logger.info(
                    "collection_backed_up", collection=collection, path=str(report.backup_path)
                )
        report.published = await self.store.replace(
            collection, (record.to_payload() for record in records)
        )
        self.logger.info(
            "collection_published",
            collection=collection,
            records=report.published,
            enriched=report.enriched,
            carried=report.carried,
        )


@dataclass(slots=True)
class RunSummary:
    reports: list[SyncReport] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not any(report.failed for report in self.reports)

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1


class SyncRunner:
    """Build the shared resources of a run and drive every content type."""

    def __init__(
        self,
        config: SyncConfig,
        base_dir: Path,
        store: CollectionStore | None = None,
        blobs: BlobStore | None = None,
        fetcher: Fetcher | None = None,
        pacer: RequestPacer | None = None,
        scratch: ScratchSpace | None = None,
    ) -> None:
        self.config = config
        self.base_dir = base_dir
        self.logger = configure_logging().bind(component="runner")
        self.run_tag = new_run_tag()
        if store is None or blobs is None:
            # FatalInitError propagates before any work is done
            store, blobs = open_backend(config.backend, base_dir)
        self.store = store
        self.blobs = blobs
        if fetcher is None:
            ua_pool = UserAgentPool(config.fetch.user_agent, config.fetch.user_agents)
            fetcher = Fetcher(config.fetch, ua_pool=ua_pool)
        self.fetcher = fetcher
        self.pacer = pacer or RequestPacer(config.request_interval)
        if scratch is None:
            scratch_root = (
                config.resolve(config.scratch_dir, base_dir) if config.scratch_dir else None
            )
            scratch = ScratchSpace(scratch_root)
        self.scratch = scratch
        self.parser = Parser()
        if not config.fetch.verify_tls:
            self.logger.warning("tls_verification_disabled", base_url=config.base_url)

    def coordinator_for(self, content_type: ContentTypeConfig) -> SyncCoordinator:
        log = content_logger(content_type.name, content_type.collection)
        backup = None
        if self.config.create_backup:
            backup = CollectionBackup(
                self.config.resolve(self.config.backups_dir, self.base_dir), self.run_tag
            )
        return SyncCoordinator(
            content_type,
            listing=ListingExtractor(
                self.fetcher, content_type.listing, self.config.base_url, self.parser, logger=log
            ),
            enricher=DetailEnricher(
                self.fetcher, content_type.detail, self.config.base_url, self.parser, logger=log
            ),
            images=ImagePipeline(
                self.fetcher,
                self.blobs,
                self.scratch,
                self.config.images,
                timeout=self.config.fetch.image_timeout,
                logger=log,
            ),
            gate=DeduplicationGate(self.store, logger=log),
            store=self.store,
            pacer=self.pacer,
            backup=backup,
            summary_length=self.config.summary_length,
            title_summary_length=self.config.title_summary_length,
            refresh_existing=self.config.refresh_existing,
            logger=log,
        )

    def selected(self, only: Iterable[str] | None = None) -> list[ContentTypeConfig]:
        if only:
            return [self.config.content_type(name) for name in only]
        return [content_type for content_type in self.config.content_types if content_type.enabled]

    async def run(self, only: Iterable[str] | None = None) -> RunSummary:
        """Run the selected content types one after another."""

        summary = RunSummary()
        bind_run(self.run_tag)
        try:
            for content_type in self.selected(only):
                coordinator = self.coordinator_for(content_type)
                try:
                    report = await coordinator.run()
                except StoreError as exc:
                    report = SyncReport(
                        content_type=content_type.name,
                        collection=content_type.collection,
                        error=str(exc),
                    )
                    self.logger.error(
                        "publish_failed", content_type=content_type.name, error=str(exc)
                    )
                summary.reports.append(report)
        finally:
            self.scratch.sweep()
            await self.fetcher.aclose()
            self.logger.info(
                "sync_finished",
                content_types=len(summary.reports),
                failed=sum(1 for report in summary.reports if report.failed),
            )
            clear_run()
        return summary


__all__ = ["RunSummary", "SyncCoordinator", "SyncReport", "SyncRunner"]
