"""Tests for cache/coordinator.py: request cache, dedup, staleness and retries."""

from __future__ import annotations

import asyncio

import backoff
import pytest

from rmx.cache.coordinator import FetchCoordinator
from rmx.core.signature import character_signature, collection_signature
from rmx.exceptions import NotFoundError, RateLimitError, RequestTimeoutError, TransportError
from rmx.models.cache import CacheStatus


class CountingLoader:
    """Async loader returning queued results; exceptions in the queue are raised."""

    def __init__(self, *results, release: asyncio.Event | None = None):
        self.results = list(results)
        self.release = release
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.release is not None:
            await self.release.wait()
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return result


def _zero_wait(**kwargs) -> FetchCoordinator:
    return FetchCoordinator(wait_gen=backoff.constant, wait_gen_kwargs={"interval": 0}, **kwargs)


SIG = collection_signature(1)


class TestResolve:
    @pytest.mark.asyncio
    async def test_first_resolve_fetches_and_marks_fresh(self, coordinator):
        loader = CountingLoader("page-1")
        outcome = await coordinator.resolve(SIG, loader)
        assert outcome.ok
        assert outcome.payload == "page-1"
        assert outcome.signature == SIG
        entry = coordinator.get_entry(SIG)
        assert entry.status == CacheStatus.FRESH
        assert entry.payload == "page-1"
        assert entry.last_resolved_at is not None
        assert loader.calls == 1

    @pytest.mark.asyncio
    async def test_fresh_entry_served_without_fetch(self, coordinator):
        loader = CountingLoader("page-1")
        await coordinator.resolve(SIG, loader)
        outcome = await coordinator.resolve(SIG, loader)
        assert outcome.ok
        assert outcome.payload == "page-1"
        assert loader.calls == 1

    def test_unknown_signature_has_no_entry(self, coordinator):
        assert coordinator.get_entry(SIG) is None
        assert SIG not in coordinator
        assert len(coordinator) == 0

    @pytest.mark.asyncio
    async def test_signatures_are_independent(self, coordinator):
        await coordinator.resolve(SIG, CountingLoader("collection"))
        await coordinator.resolve(character_signature(2), CountingLoader("character"))
        assert coordinator.get_entry(SIG).payload == "collection"
        assert coordinator.get_entry(character_signature(2)).payload == "character"
        assert len(coordinator) == 2


class TestDeduplication:
    @pytest.mark.asyncio
    async def test_concurrent_requests_share_one_fetch(self, coordinator):
        release = asyncio.Event()
        loader = CountingLoader("page-1", release=release)

        first = asyncio.create_task(coordinator.resolve(SIG, loader))
        second = asyncio.create_task(coordinator.resolve(SIG, loader))
        await asyncio.sleep(0)

        assert coordinator.is_in_flight(SIG)
        assert coordinator.get_entry(SIG).status == CacheStatus.PENDING

        release.set()
        outcomes = await asyncio.gather(first, second)
        assert loader.calls == 1
        assert all(o.ok and o.payload == "page-1" for o in outcomes)
        assert not coordinator.is_in_flight(SIG)

    @pytest.mark.asyncio
    async def test_cancelled_caller_does_not_cancel_shared_fetch(self, coordinator):
        release = asyncio.Event()
        loader = CountingLoader("page-1", release=release)

        first = asyncio.create_task(coordinator.resolve(SIG, loader))
        second = asyncio.create_task(coordinator.resolve(SIG, loader))
        await asyncio.sleep(0)
        first.cancel()

        release.set()
        outcome = await second
        assert outcome.ok
        assert coordinator.get_entry(SIG).status == CacheStatus.FRESH


class TestStaleness:
    @pytest.mark.asyncio
    async def test_entry_goes_stale_after_window(self):
        now = [100.0]
        coordinator = _zero_wait(stale_time=10, clock=lambda: now[0])
        loader = CountingLoader("page-1")

        await coordinator.resolve(SIG, loader)
        now[0] = 109.9
        assert coordinator.get_entry(SIG).status == CacheStatus.FRESH

        now[0] = 110.0
        assert coordinator.get_entry(SIG).status == CacheStatus.STALE

    @pytest.mark.asyncio
    async def test_stale_entry_is_refetched(self):
        now = [0.0]
        coordinator = _zero_wait(stale_time=10, clock=lambda: now[0])
        loader = CountingLoader("old", "new")

        await coordinator.resolve(SIG, loader)
        now[0] = 60.0
        outcome = await coordinator.resolve(SIG, loader)

        assert loader.calls == 2
        assert outcome.payload == "new"
        assert coordinator.get_entry(SIG).status == CacheStatus.FRESH

    @pytest.mark.asyncio
    async def test_zero_stale_time_always_refetches(self):
        coordinator = _zero_wait(stale_time=0)
        loader = CountingLoader("page-1")
        await coordinator.resolve(SIG, loader)
        await coordinator.resolve(SIG, loader)
        assert loader.calls == 2


class TestRetries:
    @pytest.mark.asyncio
    async def test_transport_error_retried_then_settles_error(self, coordinator):
        loader = CountingLoader(TransportError(500, "Server error"))
        outcome = await coordinator.resolve(SIG, loader)

        assert loader.calls == 3  # first attempt + 2 retries
        assert not outcome.ok
        assert isinstance(outcome.error, TransportError)
        assert outcome.status == CacheStatus.ERROR
        entry = coordinator.get_entry(SIG)
        assert entry.status == CacheStatus.ERROR
        assert entry.payload is None

    @pytest.mark.asyncio
    async def test_transient_failure_recovers(self, coordinator):
        loader = CountingLoader(TransportError(None, "Connection reset"), "page-1")
        outcome = await coordinator.resolve(SIG, loader)
        assert outcome.ok
        assert outcome.payload == "page-1"
        assert loader.calls == 2

    @pytest.mark.asyncio
    async def test_not_found_is_not_retried(self, coordinator):
        loader = CountingLoader(NotFoundError())
        outcome = await coordinator.resolve(SIG, loader)
        assert loader.calls == 1
        assert isinstance(outcome.error, NotFoundError)
        assert coordinator.get_entry(SIG).status == CacheStatus.ERROR

    @pytest.mark.asyncio
    async def test_retry_attempts_configurable(self):
        coordinator = _zero_wait(retry_attempts=0)
        loader = CountingLoader(TransportError(503, "Unavailable"))
        await coordinator.resolve(SIG, loader)
        assert loader.calls == 1

    @pytest.mark.asyncio
    async def test_unexpected_exception_wrapped_and_not_retried(self, coordinator):
        loader = CountingLoader(ValueError("bad payload"))
        outcome = await coordinator.resolve(SIG, loader)
        assert loader.calls == 1
        assert isinstance(outcome.error, TransportError)
        assert outcome.error.status_code is None
        assert isinstance(outcome.error.__cause__, ValueError)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [200, 400, 403])
    async def test_permanent_failure_not_retried(self, coordinator, status_code):
        loader = CountingLoader(TransportError(status_code, "Deterministic failure"))
        outcome = await coordinator.resolve(SIG, loader)
        assert loader.calls == 1
        assert outcome.error.status_code == status_code
        assert coordinator.get_entry(SIG).status == CacheStatus.ERROR

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [None, 408, 429, 500, 503])
    async def test_transient_failure_retried(self, coordinator, status_code):
        loader = CountingLoader(TransportError(status_code, "Transient failure"))
        await coordinator.resolve(SIG, loader)
        assert loader.calls == 3


class TestTransportErrorClassification:
    @pytest.mark.parametrize(
        "status_code, transient",
        [(None, True), (408, True), (429, True), (500, True), (599, True), (200, False), (400, False), (403, False)],
    )
    def test_is_transient(self, status_code, transient):
        assert TransportError(status_code, "failure").is_transient is transient

    def test_subclasses(self):
        assert RateLimitError().is_transient
        assert RequestTimeoutError("GET /character", 30).is_transient


class TestInvalidate:
    @pytest.mark.asyncio
    async def test_invalidate_marks_stale_and_forces_fetch(self, coordinator):
        loader = CountingLoader("old", "new")
        await coordinator.resolve(SIG, loader)

        coordinator.invalidate(SIG)
        assert coordinator.get_entry(SIG).status == CacheStatus.STALE

        outcome = await coordinator.resolve(SIG, loader)
        assert loader.calls == 2
        assert outcome.payload == "new"

    @pytest.mark.asyncio
    async def test_failed_refetch_keeps_previous_payload(self, coordinator):
        loader = CountingLoader("old", TransportError(500, "Server error"))
        await coordinator.resolve(SIG, loader)

        coordinator.invalidate(SIG)
        outcome = await coordinator.resolve(SIG, loader)

        assert not outcome.ok
        assert outcome.payload == "old"
        entry = coordinator.get_entry(SIG)
        assert entry.status == CacheStatus.ERROR
        assert entry.payload == "old"
        assert isinstance(entry.error, TransportError)

    @pytest.mark.asyncio
    async def test_pending_refetch_keeps_previous_payload(self, coordinator):
        await coordinator.resolve(SIG, CountingLoader("old"))
        release = asyncio.Event()

        coordinator.invalidate(SIG)
        task = asyncio.create_task(coordinator.resolve(SIG, CountingLoader("new", release=release)))
        await asyncio.sleep(0)

        entry = coordinator.get_entry(SIG)
        assert entry.is_fetching
        assert entry.payload == "old"

        release.set()
        await task
        assert coordinator.get_entry(SIG).payload == "new"

    @pytest.mark.asyncio
    async def test_last_settlement_wins(self, coordinator):
        release_slow = asyncio.Event()
        slow = CountingLoader("slow", release=release_slow)
        fast = CountingLoader("fast")

        slow_task = asyncio.create_task(coordinator.resolve(SIG, slow))
        await asyncio.sleep(0)
        coordinator.invalidate(SIG)

        fast_outcome = await coordinator.resolve(SIG, fast)
        assert fast_outcome.payload == "fast"
        assert coordinator.get_entry(SIG).payload == "fast"

        release_slow.set()
        slow_outcome = await slow_task
        assert slow_outcome.payload == "slow"
        assert coordinator.get_entry(SIG).payload == "slow"
        assert slow.calls == 1
        assert fast.calls == 1

    def test_invalidate_unknown_signature_is_harmless(self, coordinator):
        coordinator.invalidate(SIG)
        assert coordinator.get_entry(SIG) is None


class TestReset:
    @pytest.mark.asyncio
    async def test_reset_drops_entries(self, coordinator):
        await coordinator.resolve(SIG, CountingLoader("page-1"))
        coordinator.reset()
        assert len(coordinator) == 0
        assert coordinator.get_entry(SIG) is None

    @pytest.mark.asyncio
    async def test_fetch_running_during_reset_does_not_write(self, coordinator):
        release = asyncio.Event()
        task = asyncio.create_task(coordinator.resolve(SIG, CountingLoader("page-1", release=release)))
        await asyncio.sleep(0)

        coordinator.reset()
        release.set()
        outcome = await task

        assert outcome.ok
        assert SIG not in coordinator
