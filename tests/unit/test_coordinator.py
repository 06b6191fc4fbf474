# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for the similarity scan coordinator."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from riskscope.core.constants import ScanState
from riskscope.core.exceptions import (
    RiskNotFoundError,
    StorageError,
    UpstreamUnavailable,
    ValidationError,
)
from riskscope.models.similarity import ProgressUpdate, ScanCompleted, ScanFailed
from riskscope.similarity.coordinator import SimilarityScanCoordinator
from riskscope.sources.memory import InMemoryRiskStore


@pytest.fixture
def coordinator(register, stub_embedder, fast_settings) -> SimilarityScanCoordinator:
    return SimilarityScanCoordinator(register, register, stub_embedder, settings=fast_settings)


@pytest.fixture
def slow_coordinator(make_risk, fast_settings, embedder_factory) -> SimilarityScanCoordinator:
    """Twenty risks behind a slow embedder; progress moves 1 item per 5 ms."""
    store = InMemoryRiskStore([make_risk(f"R-{i}", f"Risk number {i}") for i in range(20)])
    settings = fast_settings.model_copy(
        update={"progress_item_cost": 0.005, "embedding_concurrency": 4}
    )
    embedder = embedder_factory(default=[1.0, 0.0, 0.0], delay=0.03)
    return SimilarityScanCoordinator(store, store, embedder, settings=settings)


async def _collect(stream) -> list:
    return [update async for update in stream]


# ---------------------------------------------------------------------------
# Pre-save duplicate check
# ---------------------------------------------------------------------------
class TestCheckSimilarity:
    async def test_short_title_skips_embedding(self, coordinator, stub_embedder) -> None:
        assert await coordinator.check_similarity("ab") == []
        assert await coordinator.check_similarity("   ab   ") == []
        assert stub_embedder.calls == []

    async def test_finds_near_duplicates_only(self, coordinator) -> None:
        matches = await coordinator.check_similarity(
            "Database accessed by an insider", "Credentials reused"
        )
        assert [m.risk_id for m in matches] == ["R-3", "R-1"]
        assert all(m.score >= 70 for m in matches)
        assert matches[0].matched_fields == ["threatDescription"]

    async def test_excludes_edited_risk(self, coordinator) -> None:
        matches = await coordinator.check_similarity("Database accessed", exclude_id="R-3")
        assert [m.risk_id for m in matches] == ["R-1"]

    async def test_limit(self, coordinator) -> None:
        matches = await coordinator.check_similarity("Database accessed", limit=1)
        assert [m.risk_id for m in matches] == ["R-3"]
        assert await coordinator.check_similarity("Database accessed", limit=0) == []

    async def test_archived_risks_never_match(self, coordinator) -> None:
        matches = await coordinator.check_similarity("Unauthorized DB access")
        assert "R-4" not in {m.risk_id for m in matches}

    async def test_retries_once(self, coordinator, stub_embedder) -> None:
        stub_embedder.failures = 1
        matches = await coordinator.check_similarity("Database accessed")
        assert len(matches) == 2

    async def test_failure_reports_no_matches(self, coordinator, stub_embedder) -> None:
        stub_embedder.failures = 2
        assert await coordinator.check_similarity("Database accessed") == []


# ---------------------------------------------------------------------------
# find_similar
# ---------------------------------------------------------------------------
class TestFindSimilar:
    async def test_ranks_corpus(self, coordinator) -> None:
        candidates = await coordinator.find_similar("R-3")
        assert [c.risk_id for c in candidates] == ["R-1", "R-2"]
        assert candidates[0].score > 99
        assert candidates[1].score == pytest.approx(50.0)

    async def test_limit(self, coordinator) -> None:
        assert len(await coordinator.find_similar("R-3", limit=1)) == 1

    async def test_rejects_non_positive_limit(self, coordinator) -> None:
        with pytest.raises(ValidationError):
            await coordinator.find_similar("R-3", limit=0)

    async def test_unknown_risk(self, coordinator) -> None:
        with pytest.raises(RiskNotFoundError):
            await coordinator.find_similar("R-404")

    async def test_upstream_failure_after_retry(self, coordinator, stub_embedder) -> None:
        stub_embedder.failures = 2
        with pytest.raises(UpstreamUnavailable):
            await coordinator.find_similar("R-3")

    async def test_forgets_token(self, coordinator) -> None:
        await coordinator.find_similar("R-3")
        assert coordinator._scans == {}


# ---------------------------------------------------------------------------
# scan_for_risk
# ---------------------------------------------------------------------------
class TestScanForRisk:
    async def test_event_sequence(self, slow_coordinator) -> None:
        updates = await _collect(slow_coordinator.scan_for_risk("R-0", 5))

        assert isinstance(updates[-1], ScanCompleted)
        assert len(updates[-1].candidates) == 5
        ticks = updates[:-1]
        assert all(isinstance(u, ProgressUpdate) for u in ticks)
        assert ticks[-1].progress.percentage == 100.0

        running = [u.progress.percentage for u in ticks[:-1]]
        assert running, "expected progress ticks while the scan ran"
        assert all(0 <= p <= 95 for p in running)
        assert any(p > 0 for p in running)
        assert running == sorted(running)
        assert all(u.progress.total == 19 for u in updates)

    async def test_state_and_result(self, coordinator) -> None:
        token = coordinator.start_scan("R-3")
        assert coordinator.state(token) == ScanState.IDLE
        await _collect(coordinator.scan_for_risk("R-3", token=token))
        assert coordinator.state(token) == ScanState.COMPLETED
        assert [c.risk_id for c in coordinator.result(token)] == ["R-1", "R-2"]
        assert coordinator.progress(token).percentage == 100.0

    async def test_failure_event(self, coordinator) -> None:
        updates = await _collect(coordinator.scan_for_risk("R-404"))
        failed = updates[-1]
        assert isinstance(failed, ScanFailed)
        assert failed.progress.percentage == 0.0
        assert "R-404" in failed.error
        assert coordinator.state(failed.token) == ScanState.FAILED
        assert coordinator.error(failed.token) == failed.error

    async def test_superseded_scan_goes_quiet(self, slow_coordinator) -> None:
        first = slow_coordinator.start_scan("R-0", caller="tab-1")
        updates = []
        async for update in slow_coordinator.scan_for_risk("R-0", token=first):
            updates.append(update)
            if len(updates) == 1:
                second = slow_coordinator.start_scan("R-0", caller="tab-1")
        assert len(updates) == 1
        assert isinstance(updates[0], ProgressUpdate)
        assert not slow_coordinator.is_tracked(first)
        assert slow_coordinator.is_tracked(second)

    async def test_cancelled_scan_goes_quiet(self, slow_coordinator) -> None:
        token = slow_coordinator.start_scan("R-0")
        updates = []
        async for update in slow_coordinator.scan_for_risk("R-0", token=token):
            updates.append(update)
            assert slow_coordinator.cancel(token)
        assert len(updates) == 1
        assert slow_coordinator.state(token) == ScanState.IDLE
        assert not slow_coordinator.cancel(token)

    async def test_rejects_non_positive_limit(self, coordinator) -> None:
        with pytest.raises(ValidationError):
            await _collect(coordinator.scan_for_risk("R-3", 0))


# ---------------------------------------------------------------------------
# Background scans
# ---------------------------------------------------------------------------
class TestLaunch:
    async def test_launch_and_poll(self, coordinator) -> None:
        token = coordinator.launch("R-3", 1)
        for _ in range(200):
            if coordinator.state(token) == ScanState.COMPLETED:
                break
            await asyncio.sleep(0.01)
        assert coordinator.state(token) == ScanState.COMPLETED
        assert [c.risk_id for c in coordinator.result(token)] == ["R-1"]

    async def test_cancel_background_scan(self, slow_coordinator) -> None:
        token = slow_coordinator.launch("R-0")
        await asyncio.sleep(0.02)
        assert slow_coordinator.cancel(token)
        assert not slow_coordinator.is_tracked(token)
        assert slow_coordinator._tasks == {}

    async def test_aclose_cancels_tasks(self, slow_coordinator) -> None:
        slow_coordinator.launch("R-0")
        slow_coordinator.launch("R-1")
        await slow_coordinator.aclose()
        assert slow_coordinator._tasks == {}


# ---------------------------------------------------------------------------
# Concurrent callers
# ---------------------------------------------------------------------------
class TestConcurrentCallers:
    async def test_blocking_scans_of_same_risk_both_finish(self, slow_coordinator) -> None:
        first, second = await asyncio.gather(
            slow_coordinator.find_similar("R-0", 3),
            slow_coordinator.find_similar("R-0", 3),
        )
        assert len(first) == len(second) == 3
        assert slow_coordinator._scans == {}

    async def test_callers_do_not_supersede_each_other(self, slow_coordinator) -> None:
        mine = slow_coordinator.launch("R-0", caller="alice")
        theirs = slow_coordinator.launch("R-0", caller="bob")
        private = slow_coordinator.launch("R-0")
        for _ in range(300):
            states = {slow_coordinator.state(t) for t in (mine, theirs, private)}
            if states == {ScanState.COMPLETED}:
                break
            await asyncio.sleep(0.01)
        assert states == {ScanState.COMPLETED}

    async def test_same_caller_supersedes(self, slow_coordinator) -> None:
        old = slow_coordinator.launch("R-0", caller="alice")
        new = slow_coordinator.launch("R-0", caller="alice")
        assert not slow_coordinator.is_tracked(old)
        assert slow_coordinator.is_tracked(new)
        await slow_coordinator.aclose()


# ---------------------------------------------------------------------------
# Retry policy
# ---------------------------------------------------------------------------
class TestRetryPolicy:
    async def test_storage_error_is_retried(self, coordinator, stub_embedder) -> None:
        stub_embedder.failures = 1
        stub_embedder.error = StorageError("database is locked")
        assert [c.risk_id for c in await coordinator.find_similar("R-3")] == ["R-1", "R-2"]

    async def test_transport_error_surfaces_as_upstream(self, coordinator, stub_embedder) -> None:
        stub_embedder.failures = 2
        stub_embedder.error = httpx.ConnectError("connection refused")
        with pytest.raises(UpstreamUnavailable) as excinfo:
            await coordinator.find_similar("R-3")
        assert isinstance(excinfo.value.__cause__, httpx.ConnectError)
        assert len(stub_embedder.calls) == 2

    async def test_programming_errors_are_not_retried(self, coordinator, stub_embedder) -> None:
        stub_embedder.failures = 1
        stub_embedder.error = TypeError("unsupported operand")
        with pytest.raises(TypeError):
            await coordinator.find_similar("R-3")
        assert len(stub_embedder.calls) == 1


# ---------------------------------------------------------------------------
# Finished scan retention
# ---------------------------------------------------------------------------
class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class TestFinishedScanRetention:
    @pytest.fixture
    def clock(self) -> FakeClock:
        return FakeClock()

    @pytest.fixture
    def coordinator(self, register, stub_embedder, fast_settings, clock):
        settings = fast_settings.model_copy(update={"scan_result_ttl": 60.0})
        return SimilarityScanCoordinator(
            register, register, stub_embedder, settings=settings, clock=clock
        )

    async def _wait_done(self, coordinator, token) -> None:
        for _ in range(200):
            if coordinator.state(token) in (ScanState.COMPLETED, ScanState.FAILED):
                return
            await asyncio.sleep(0.01)

    async def test_result_expires_after_ttl(self, coordinator, clock) -> None:
        token = coordinator.launch("R-3")
        await self._wait_done(coordinator, token)

        clock.now += 59
        assert coordinator.progress(token) is not None
        assert coordinator.result(token) is not None

        clock.now += 2
        assert coordinator.progress(token) is None
        assert coordinator.state(token) == ScanState.IDLE
        assert coordinator._scans == {}

    async def test_failed_scans_expire_too(self, coordinator, clock) -> None:
        token = coordinator.launch("R-404")
        await self._wait_done(coordinator, token)
        assert coordinator.state(token) == ScanState.FAILED

        clock.now += 61
        coordinator.start_scan("R-1")
        assert not coordinator.is_tracked(token)

    async def test_running_scans_are_kept(self, coordinator, clock) -> None:
        token = coordinator.start_scan("R-3")
        clock.now += 3600
        assert coordinator.progress(token) is not None
