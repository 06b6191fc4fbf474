# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Similarity scan coordinator: on-demand scans and the pre-save check.

A scan is addressed by an opaque token. A caller starting a new scan for a
risk supersedes that caller's previous token for the risk; updates for a
superseded or cancelled token stop at the next tick and its results are
discarded. Finished background scans are kept for ``scan_result_ttl``
seconds so they can be polled.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import TypeVar

import httpx

from riskscope.core.config import Settings, get_settings
from riskscope.core.constants import ScanState
from riskscope.core.exceptions import (
    RiskNotFoundError,
    StaleScan,
    StorageError,
    UpstreamUnavailable,
    ValidationError,
)
from riskscope.embeddings.base import EmbeddingProvider
from riskscope.models.risk import CorpusEntry
from riskscope.models.similarity import (
    ProgressUpdate,
    ScanCompleted,
    ScanFailed,
    ScanProgress,
    ScanUpdate,
    SimilarityCandidate,
)
from riskscope.similarity.index import IndexedRisk, SimilarityIndex
from riskscope.similarity.progress import ProgressEstimator
from riskscope.similarity.text import combine_risk_text, entry_text, matched_fields
from riskscope.sources.base import CorpusSource, RiskReader

logger = logging.getLogger("riskscope.similarity.coordinator")

T = TypeVar("T")


@dataclass
class _ScanRecord:
    risk_id: str
    owner: tuple[str, str] | None = None
    state: ScanState = ScanState.IDLE
    progress: ScanProgress = field(default_factory=ScanProgress.zero)
    candidates: list[SimilarityCandidate] | None = None
    error: str | None = None
    exception: Exception | None = None
    finished_at: float | None = None


# Failures worth one more attempt; anything else is a bug and propagates as-is.
_RETRYABLE: tuple[type[BaseException], ...] = (
    UpstreamUnavailable,
    StorageError,
    httpx.HTTPError,
    OSError,
)


class SimilarityScanCoordinator:
    """Runs similarity scans against the corpus and tracks them per token.

    A scan started with a ``caller`` id supersedes that caller's previous
    scan of the same risk. Scans without a caller are private: nothing
    else can supersede them.
    """

    def __init__(
        self,
        corpus_source: CorpusSource,
        risk_reader: RiskReader,
        embedder: EmbeddingProvider,
        index: SimilarityIndex | None = None,
        settings: Settings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._settings = settings or get_settings()
        self._source = corpus_source
        self._reader = risk_reader
        self._embedder = embedder
        self._index = index or SimilarityIndex(
            shard_size=self._settings.index_shard_size,
            max_workers=self._settings.index_max_workers,
        )
        self._clock = clock
        self._scans: dict[str, _ScanRecord] = {}
        self._current: dict[tuple[str, str], str] = {}
        self._tasks: dict[str, asyncio.Task[None]] = {}

    @property
    def embedder(self) -> EmbeddingProvider:
        return self._embedder

    # ------------------------------------------------------------------
    # Token bookkeeping
    # ------------------------------------------------------------------

    def start_scan(self, risk_id: str, *, caller: str | None = None) -> str:
        """Allocate a token for *risk_id*.

        With a *caller*, any earlier scan that caller started for the same
        risk is superseded.
        """
        self._prune_finished()
        owner = (caller, risk_id) if caller is not None else None
        if owner is not None:
            previous = self._current.get(owner)
            if previous is not None:
                self._forget(previous)
                logger.debug("Scan superseded", extra={"scan_token": previous})
        token = uuid.uuid4().hex
        self._scans[token] = _ScanRecord(risk_id=risk_id, owner=owner)
        if owner is not None:
            self._current[owner] = token
        return token

    def _forget(self, token: str) -> _ScanRecord | None:
        record = self._scans.pop(token, None)
        if record is not None and record.owner is not None:
            if self._current.get(record.owner) == token:
                del self._current[record.owner]
        task = self._tasks.pop(token, None)
        if task is not None and not task.done():
            task.cancel()
        return record

    def _is_live(self, token: str) -> bool:
        record = self._scans.get(token)
        if record is None:
            return False
        return record.owner is None or self._current.get(record.owner) == token

    def _finish(self, record: _ScanRecord, state: ScanState) -> None:
        record.state = state
        record.finished_at = self._clock()

    def _prune_finished(self) -> None:
        """Drop finished scans whose results are older than ``scan_result_ttl``."""
        now = self._clock()
        ttl = self._settings.scan_result_ttl
        expired = [
            token
            for token, record in self._scans.items()
            if record.finished_at is not None and now - record.finished_at >= ttl
        ]
        for token in expired:
            self._forget(token)
        if expired:
            logger.debug("Pruned %d finished scans", len(expired))

    def cancel(self, token: str) -> bool:
        """Drop *token*; returns ``False`` if it was not being tracked."""
        record = self._forget(token)
        if record is None:
            return False
        if record.state == ScanState.RUNNING:
            logger.info(
                "Scan cancelled for risk %s", record.risk_id, extra={"scan_token": token}
            )
        return True

    def progress(self, token: str) -> ScanProgress | None:
        self._prune_finished()
        record = self._scans.get(token)
        return record.progress if record is not None else None

    def state(self, token: str) -> ScanState:
        """Current state; untracked tokens report ``IDLE``."""
        record = self._scans.get(token)
        return record.state if record is not None else ScanState.IDLE

    def result(self, token: str) -> list[SimilarityCandidate] | None:
        record = self._scans.get(token)
        return record.candidates if record is not None else None

    def error(self, token: str) -> str | None:
        record = self._scans.get(token)
        return record.error if record is not None else None

    def is_tracked(self, token: str) -> bool:
        return token in self._scans

    # ------------------------------------------------------------------
    # Upstream calls
    # ------------------------------------------------------------------

    async def _retry(self, what: str, call: Callable[[], Awaitable[T]]) -> T:
        """Run *call*, retrying transport and storage failures with no backoff.

        The final failure surfaces as :class:`UpstreamUnavailable`; any
        other exception propagates on the first attempt.
        """
        attempts = 1 + max(0, self._settings.upstream_retries)
        attempt = 0
        while True:
            attempt += 1
            try:
                return await call()
            except _RETRYABLE as exc:
                logger.warning("%s failed (attempt %d/%d): %s", what, attempt, attempts, exc)
                if attempt < attempts:
                    continue
                if isinstance(exc, UpstreamUnavailable):
                    raise
                raise UpstreamUnavailable(f"{what} failed: {exc}") from exc

    async def _embed(self, text: str) -> list[float]:
        return await self._retry("embedding", lambda: self._embedder.embed(text))

    async def _embed_corpus(self, entries: Sequence[CorpusEntry]) -> list[IndexedRisk]:
        semaphore = asyncio.Semaphore(max(1, self._settings.embedding_concurrency))

        async def embed_one(entry: CorpusEntry) -> IndexedRisk:
            async with semaphore:
                return IndexedRisk(entry=entry, vector=await self._embed(entry_text(entry)))

        tasks = [asyncio.ensure_future(embed_one(entry)) for entry in entries]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            raise

    @staticmethod
    def _with_fields(
        query: CorpusEntry,
        candidates: list[SimilarityCandidate],
        corpus: Sequence[CorpusEntry],
    ) -> list[SimilarityCandidate]:
        by_id = {entry.id: entry for entry in corpus}
        return [
            c.model_copy(update={"matched_fields": matched_fields(query, by_id[c.risk_id])})
            for c in candidates
        ]

    async def _compute(self, risk_id: str, limit: int) -> list[SimilarityCandidate]:
        risk = await self._retry("risk lookup", lambda: self._reader.get_risk_by_id(risk_id))
        if risk is None:
            raise RiskNotFoundError(risk_id)
        query = risk.to_corpus_entry()
        corpus = await self._retry(
            "corpus fetch", lambda: self._source.fetch_corpus(exclude_id=risk_id)
        )
        query_vector = await self._embed(entry_text(query))
        indexed = await self._embed_corpus(corpus)
        ranked = await asyncio.to_thread(self._index.rank, query_vector, indexed, limit)
        return self._with_fields(query, ranked, corpus)

    # ------------------------------------------------------------------
    # On-demand scan
    # ------------------------------------------------------------------

    async def scan_for_risk(
        self,
        risk_id: str,
        limit: int | None = None,
        *,
        token: str | None = None,
    ) -> AsyncIterator[ScanUpdate]:
        """Scan the corpus for risks similar to *risk_id*, yielding updates.

        Progress updates arrive every ``progress_interval`` seconds while
        the computation runs, then a 100% update, then (after
        ``completion_hold``) a single :class:`ScanCompleted`. Failures
        yield :class:`ScanFailed` with zeroed progress. Nothing follows the
        terminal event, and a stale token ends the stream with no terminal
        event at all.
        """
        limit = self._settings.scan_default_limit if limit is None else limit
        if limit <= 0:
            raise ValidationError(f"limit must be positive, got {limit}")

        token = token or self.start_scan(risk_id)
        record = self._scans.get(token)
        if record is None or not self._is_live(token):
            return
        record.state = ScanState.RUNNING
        record.progress = ScanProgress.zero()
        log_extra = {"scan_token": token}
        logger.info("Similarity scan started for risk %s", risk_id, extra=log_extra)

        try:
            total = await self._retry(
                "corpus count", lambda: self._source.count(exclude_id=risk_id)
            )
            if not self._is_live(token):
                raise StaleScan(token)
            estimator = ProgressEstimator(
                total,
                item_cost=self._settings.progress_item_cost,
                cap=self._settings.progress_cap,
            )

            compute = asyncio.create_task(self._compute(risk_id, limit))
            try:
                while True:
                    done, _ = await asyncio.wait(
                        {compute}, timeout=self._settings.progress_interval
                    )
                    if not self._is_live(token):
                        raise StaleScan(token)
                    if done:
                        break
                    record.progress = estimator.tick()
                    yield ProgressUpdate(token=token, progress=record.progress)
            finally:
                if not compute.done():
                    compute.cancel()

            candidates = compute.result()
            record.progress = estimator.finish()
            yield ProgressUpdate(token=token, progress=record.progress)

            await asyncio.sleep(self._settings.completion_hold)
            if not self._is_live(token):
                raise StaleScan(token)
            self._finish(record, ScanState.COMPLETED)
            record.candidates = candidates
            logger.info(
                "Similarity scan for risk %s complete: %d candidates",
                risk_id,
                len(candidates),
                extra=log_extra,
            )
            yield ScanCompleted(token=token, progress=record.progress, candidates=candidates)
        except StaleScan:
            logger.debug("Discarding stale scan for risk %s", risk_id, extra=log_extra)
            return
        except Exception as exc:
            if not self._is_live(token):
                return
            self._finish(record, ScanState.FAILED)
            record.progress = ScanProgress.zero()
            record.error = str(exc)
            record.exception = exc
            logger.error("Similarity scan for risk %s failed: %s", risk_id, exc, extra=log_extra)
            yield ScanFailed(token=token, progress=record.progress, error=record.error)

    async def find_similar(
        self, risk_id: str, limit: int | None = None
    ) -> list[SimilarityCandidate]:
        """Run a scan to completion and return its ranked candidates.

        The scan is private to this call, so concurrent callers never
        supersede each other. Raises the scan's failure, or
        :class:`StaleScan` if the token was cancelled before it finished.
        """
        token = self.start_scan(risk_id)
        try:
            async for update in self.scan_for_risk(risk_id, limit, token=token):
                if isinstance(update, ScanCompleted):
                    return update.candidates
                if isinstance(update, ScanFailed):
                    record = self._scans.get(token)
                    if record is not None and record.exception is not None:
                        raise record.exception
                    raise UpstreamUnavailable(update.error)
        finally:
            self._forget(token)
        raise StaleScan(token)

    def launch(
        self, risk_id: str, limit: int | None = None, *, caller: str | None = None
    ) -> str:
        """Start a scan in the background and return its token for polling.

        A *caller* id makes this scan supersede that caller's previous
        scan of the same risk.
        """
        token = self.start_scan(risk_id, caller=caller)

        async def drain() -> None:
            async for _ in self.scan_for_risk(risk_id, limit, token=token):
                pass

        task = asyncio.create_task(drain())
        self._tasks[token] = task
        task.add_done_callback(
            lambda t: self._tasks.pop(token, None) if self._tasks.get(token) is t else None
        )
        return token

    async def aclose(self) -> None:
        """Cancel background scans."""
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    # ------------------------------------------------------------------
    # Pre-save duplicate check
    # ------------------------------------------------------------------

    async def check_similarity(
        self,
        title: str | None,
        threat_description: str | None = None,
        description: str | None = None,
        *,
        exclude_id: str | None = None,
        limit: int | None = None,
    ) -> list[SimilarityCandidate]:
        """Return corpus risks scoring at least ``similarity_threshold``.

        Short titles skip the check entirely. Any failure is logged and
        reported as no matches, so a flaky embedding service never blocks
        the caller from saving.
        """
        clean_title = (title or "").strip()
        if len(clean_title) < self._settings.min_title_length:
            return []
        if limit is not None and limit <= 0:
            return []

        query = CorpusEntry(
            id=exclude_id or "",
            title=clean_title,
            threat_description=threat_description,
            description=description,
        )
        try:
            query_vector = await self._embed(
                combine_risk_text(clean_title, threat_description, description)
            )
            corpus = await self._retry(
                "corpus fetch", lambda: self._source.fetch_corpus(exclude_id=exclude_id)
            )
            indexed = await self._embed_corpus(corpus)
            matches = await asyncio.to_thread(
                self._index.threshold,
                query_vector,
                indexed,
                self._settings.similarity_threshold,
            )
        except Exception as exc:
            logger.warning("Similarity check failed, reporting no matches: %s", exc)
            return []

        if limit is not None:
            matches = matches[:limit]
        return self._with_fields(query, matches, corpus)
