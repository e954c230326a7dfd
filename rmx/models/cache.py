"""Request cache data models."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict


class CacheStatus(StrEnum):
    """Lifecycle status of a cache entry."""

    PENDING = "pending"
    FRESH = "fresh"
    STALE = "stale"
    ERROR = "error"


class RequestSignature(BaseModel):
    """Deterministic key identifying a logical remote query.

    ``params`` is always sorted by key, so two signatures built from the same inputs
    compare and hash equal regardless of the order the inputs were supplied in.
    """

    model_config = ConfigDict(frozen=True)

    kind: str
    params: tuple[tuple[str, str], ...] = ()

    @property
    def key(self) -> str:
        """Readable form used in logs."""
        if not self.params:
            return self.kind
        return self.kind + "?" + "&".join(f"{k}={v}" for k, v in self.params)

    def __str__(self) -> str:
        return self.key


class CacheEntry(BaseModel):
    """Cached state of one signature."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    signature: RequestSignature
    status: CacheStatus = CacheStatus.PENDING
    payload: Any = None
    error: Exception | None = None
    last_resolved_at: float | None = None  # Loop clock time of the last successful fetch

    @property
    def has_payload(self) -> bool:
        return self.payload is not None

    @property
    def is_fetching(self) -> bool:
        """A fetch is running; any payload present is from an earlier fetch."""
        return self.status == CacheStatus.PENDING


class FetchOutcome(BaseModel):
    """Tagged success/error result of a fallible operation."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    signature: RequestSignature | None = None
    ok: bool
    status: CacheStatus | None = None
    payload: Any = None
    error: Exception | None = None

    @classmethod
    def success(cls, signature: RequestSignature, payload: Any) -> "FetchOutcome":
        return cls(signature=signature, ok=True, status=CacheStatus.FRESH, payload=payload)

    @classmethod
    def failure(
        cls,
        error: Exception,
        signature: RequestSignature | None = None,
        payload: Any = None,
    ) -> "FetchOutcome":
        """Failed outcome; ``payload`` carries any previously cached value."""
        status = CacheStatus.ERROR if signature is not None else None
        return cls(signature=signature, ok=False, status=status, payload=payload, error=error)
