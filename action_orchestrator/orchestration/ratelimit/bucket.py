from __future__ import annotations

"""Token bucket with lazy refill.

A bucket holds a capped, time-replenished count of tokens. Tokens are added
lazily: nothing runs in the background, every access first credits
``elapsed * refill_rate`` tokens since the previous access.

The bucket never sleeps itself. ``try_consume`` either debits the tokens and
returns ``0.0`` or leaves the count untouched and returns how long the caller
should wait before trying again. Suspension is the limiter's job, so the
bucket's lock is only ever held for the refill+debit step.
"""

import threading
import time
from typing import Callable

from pydantic import ConfigDict, Field

from ..schemas.base import BaseSchema


class BucketConfig(BaseSchema):
    """Capacity and refill rate of one bucket."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    capacity: int = Field(..., ge=1, description="Maximum number of tokens held")
    refill_rate: float = Field(..., gt=0, description="Tokens added per second")

    @classmethod
    def per_minute(cls, requests: int) -> "BucketConfig":
        """Bucket allowing a burst of ``requests`` and ``requests`` per minute sustained."""
        return cls(capacity=requests, refill_rate=requests / 60)


class TokenBucket:
    """Token bucket for a single service key.

    Attributes
    ----------
    key:
        Service key the bucket belongs to.
    capacity:
        Maximum token count.
    refill_rate:
        Tokens credited per second.
    """

    def __init__(self, key: str, config: BucketConfig, *, clock: Callable[[], float] = time.monotonic) -> None:
        self.key = key
        self.capacity = config.capacity
        self.refill_rate = config.refill_rate
        self._clock = clock
        self._tokens = float(config.capacity)
        self._last_refill = clock()
        self._lock = threading.Lock()

    def _refill(self) -> None:
        now = self._clock()
        elapsed = now - self._last_refill
        if elapsed > 0:
            self._tokens = min(float(self.capacity), self._tokens + elapsed * self.refill_rate)
            self._last_refill = now

    def try_consume(self, tokens: float) -> float:
        """Debit ``tokens`` if available.

        Returns
        -------
        float
            ``0.0`` when the tokens were debited, otherwise the number of
            seconds after which enough tokens should have been refilled.
        """
        with self._lock:
            self._refill()
            if self._tokens >= tokens:
                self._tokens -= tokens
                return 0.0
            deficit = tokens - self._tokens
            return deficit / self.refill_rate

    def refund(self, tokens: float) -> None:
        """Return ``tokens`` to the bucket, capped at capacity."""
        with self._lock:
            self._refill()
            self._tokens = min(float(self.capacity), self._tokens + tokens)

    def available(self) -> float:
        """Current token count after crediting elapsed time."""
        with self._lock:
            self._refill()
            return self._tokens

    def __repr__(self) -> str:
        return f"TokenBucket(key={self.key!r}, capacity={self.capacity}, refill_rate={self.refill_rate})"
