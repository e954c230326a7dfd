"""In-memory request cache and fetch coordination."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

import backoff

from rmx.core.constants import APIConstants, CacheConstants
from rmx.exceptions import CatalogError, TransportError
from rmx.models.cache import CacheEntry, CacheStatus, FetchOutcome, RequestSignature

logger = logging.getLogger(__name__)

Loader = Callable[[], Awaitable[Any]]


class FetchCoordinator:
    """Single path through which every remote read flows.

    Entries are keyed by request signature. A fresh entry is served without a remote
    call, concurrent requests for one signature share a single in-flight fetch, and
    transport failures are retried with backoff before the entry settles. All state
    is mutated on the event loop thread only.
    """

    def __init__(
        self,
        stale_time: float = float(CacheConstants.STALE_TIME_SECONDS),
        retry_attempts: int = int(CacheConstants.RETRY_ATTEMPTS),
        wait_gen: Callable[..., Any] = backoff.expo,
        wait_gen_kwargs: dict[str, Any] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the coordinator.

        Args:
            stale_time: Seconds a successful result stays fresh
            retry_attempts: Additional attempts after a failed first one
            wait_gen: ``backoff`` wait generator used between attempts
            wait_gen_kwargs: Keyword arguments for ``wait_gen``
            clock: Monotonic time source
        """
        self.stale_time = stale_time
        self.retry_attempts = retry_attempts
        self.wait_gen = wait_gen
        if wait_gen_kwargs is None:
            wait_gen_kwargs = {"factor": APIConstants.BACKOFF_FACTOR, "max_value": APIConstants.BACKOFF_MAX_VALUE}
        self.wait_gen_kwargs = wait_gen_kwargs
        self.clock = clock

        self._entries: dict[RequestSignature, CacheEntry] = {}
        self._in_flight: dict[RequestSignature, asyncio.Task[FetchOutcome]] = {}
        self._invalidated: set[RequestSignature] = set()
        self._generation = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, signature: object) -> bool:
        return signature in self._entries

    def _age_entry(self, signature: RequestSignature) -> CacheEntry | None:
        """Apply the fresh -> stale transition if the entry has outlived the window."""
        entry = self._entries.get(signature)
        if entry is None or entry.status != CacheStatus.FRESH or entry.last_resolved_at is None:
            return entry

        if self.clock() - entry.last_resolved_at >= self.stale_time:
            logger.debug(f"Entry {signature} is stale")
            entry.status = CacheStatus.STALE
        return entry

    def get_entry(self, signature: RequestSignature) -> CacheEntry | None:
        """Get a snapshot of the entry for a signature.

        Args:
            signature: Request signature

        Returns:
            Copy of the entry, or None if the signature was never requested
        """
        entry = self._age_entry(signature)
        return entry.model_copy() if entry is not None else None

    def is_in_flight(self, signature: RequestSignature) -> bool:
        return signature in self._in_flight

    async def resolve(self, signature: RequestSignature, loader: Loader) -> FetchOutcome:
        """Resolve a signature from cache, an in-flight fetch, or the loader.

        Args:
            signature: Request signature
            loader: Coroutine function performing the remote read

        Returns:
            Outcome of the resolution; never raises for loader failures
        """
        entry = self._age_entry(signature)
        invalidated = signature in self._invalidated

        if not invalidated:
            if entry is not None and entry.status == CacheStatus.FRESH:
                logger.debug(f"Cache hit for {signature}")
                return FetchOutcome.success(signature, entry.payload)

            in_flight = self._in_flight.get(signature)
            if in_flight is not None:
                logger.debug(f"Attaching to in-flight fetch for {signature}")
                return await asyncio.shield(in_flight)

        self._invalidated.discard(signature)
        if entry is None:
            entry = CacheEntry(signature=signature)
            self._entries[signature] = entry
        else:
            entry.status = CacheStatus.PENDING

        task = asyncio.create_task(self._fetch(signature, loader, self._generation))
        self._in_flight[signature] = task
        return await asyncio.shield(task)

    def invalidate(self, signature: RequestSignature) -> None:
        """Force the next resolve of a signature to go to the loader.

        The cached payload is kept until the new fetch settles.
        """
        logger.debug(f"Invalidating {signature}")
        self._invalidated.add(signature)
        entry = self._entries.get(signature)
        if entry is not None and entry.status == CacheStatus.FRESH:
            entry.status = CacheStatus.STALE

    def reset(self) -> None:
        """Drop every entry. Fetches still running settle without touching the cache."""
        logger.info(f"Resetting request cache ({len(self._entries)} entries)")
        self._entries.clear()
        self._in_flight.clear()
        self._invalidated.clear()
        self._generation += 1

    def _on_backoff(self, details: dict[str, Any]) -> None:
        logger.warning(
            f"Attempt {details['tries']} failed ({details.get('exception')}), retrying in {details['wait']:.1f}s"
        )

    async def _fetch(self, signature: RequestSignature, loader: Loader, generation: int) -> FetchOutcome:
        async def attempt() -> Any:
            return await loader()

        fetch_with_retry = backoff.on_exception(
            self.wait_gen,
            TransportError,
            max_tries=self.retry_attempts + 1,
            giveup=lambda e: not e.is_transient,
            on_backoff=self._on_backoff,
            logger=None,
            **self.wait_gen_kwargs,
        )(attempt)

        try:
            payload = await fetch_with_retry()
        except CatalogError as e:
            logger.debug(f"Fetch for {signature} failed: {e}")
            return self._settle_failure(signature, e, generation)
        except Exception as e:
            logger.error(f"Unexpected loader failure for {signature}: {e}")
            error = TransportError(None, f"Unexpected failure while loading {signature}: {e}")
            error.__cause__ = e
            return self._settle_failure(signature, error, generation)
        finally:
            if self._in_flight.get(signature) is asyncio.current_task():
                del self._in_flight[signature]

        return self._settle_success(signature, payload, generation)

    def _settle_success(self, signature: RequestSignature, payload: Any, generation: int) -> FetchOutcome:
        entry = self._entries.get(signature)
        if generation == self._generation and entry is not None:
            entry.status = CacheStatus.FRESH
            entry.payload = payload
            entry.error = None
            entry.last_resolved_at = self.clock()
            logger.debug(f"Entry {signature} is fresh")
        return FetchOutcome.success(signature, payload)

    def _settle_failure(self, signature: RequestSignature, error: CatalogError, generation: int) -> FetchOutcome:
        entry = self._entries.get(signature)
        if generation == self._generation and entry is not None:
            entry.status = CacheStatus.ERROR
            entry.error = error
            # Previous payload is kept
            return FetchOutcome.failure(error, signature, payload=entry.payload)
        return FetchOutcome.failure(error, signature)
