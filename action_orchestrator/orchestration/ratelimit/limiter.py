from __future__ import annotations

"""Per-service rate limiter.

``RateLimiter`` owns one ``TokenBucket`` per service key and paces callers:
``consume`` suspends the calling task until the bucket can cover the request,
it never rejects a request for lack of quota.

Bucket configuration is a pure data table keyed by service name. Keys missing
from the table use ``default`` (60 tokens, 1 token/second).

The limiter is an explicitly constructed object shared by reference: the plan
generator, the executor's built-in handlers and any vendor client should all
receive the same instance so that they draw from the same buckets.
"""

import asyncio
import logging
import threading
import time
from typing import Awaitable, Callable, Dict, Mapping, Optional

from action_orchestrator.core.errors import RateLimitTimeoutError

from .bucket import BucketConfig, TokenBucket

logger = logging.getLogger(__name__)

REASONING_SERVICE_KEY = "reasoning-service"

DEFAULT_BUCKET_CONFIG = BucketConfig(capacity=60, refill_rate=1.0)

SERVICE_BUCKET_CONFIGS: Dict[str, BucketConfig] = {
    REASONING_SERVICE_KEY: BucketConfig.per_minute(15),
    "gemini": BucketConfig.per_minute(15),
    "virustotal": BucketConfig.per_minute(4),  # public API limit
    "abuseipdb": BucketConfig.per_minute(10),  # free tier
    "alienvault": BucketConfig.per_minute(100),
}


class RateLimiter:
    """Process-local collection of token buckets keyed by service name.

    Parameters
    ----------
    configs:
        Per-key bucket configuration. Defaults to ``SERVICE_BUCKET_CONFIGS``.
    default:
        Configuration for keys absent from ``configs``.
    clock:
        Monotonic time source in seconds.
    sleep:
        Coroutine function used to suspend while waiting for tokens.
    """

    def __init__(
        self,
        configs: Optional[Mapping[str, BucketConfig]] = None,
        *,
        default: BucketConfig = DEFAULT_BUCKET_CONFIG,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self._configs: Dict[str, BucketConfig] = dict(SERVICE_BUCKET_CONFIGS if configs is None else configs)
        self._default = default
        self._clock = clock
        self._sleep = sleep
        self._buckets: Dict[str, TokenBucket] = {}
        self._buckets_lock = threading.Lock()

    def config_for(self, key: str) -> BucketConfig:
        """Resolve the bucket configuration for ``key``."""
        return self._configs.get(key, self._default)

    def bucket(self, key: str) -> TokenBucket:
        """Return the bucket for ``key``, creating it on first reference."""
        with self._buckets_lock:
            bucket = self._buckets.get(key)
            if bucket is None:
                bucket = TokenBucket(key, self.config_for(key), clock=self._clock)
                self._buckets[key] = bucket
                logger.debug(f"Created rate limit bucket: {bucket!r}")
            return bucket

    def available(self, key: str) -> float:
        """Tokens currently available for ``key``."""
        return self.bucket(key).available()

    async def consume(self, key: str, tokens: float = 1, *, timeout: Optional[float] = None) -> None:
        """Wait until ``tokens`` are available for ``key`` and debit them.

        Requests larger than the bucket capacity are debited in capacity-sized
        chunks, so they still complete once enough time has passed.

        Args:
            key: Service key (e.g. ``"virustotal"``).
            tokens: Number of tokens to debit.
            timeout: Upper bound in seconds on the total time spent waiting.
                ``None`` waits as long as needed.

        Raises:
            ValueError: If ``tokens`` is not positive.
            RateLimitTimeoutError: If the wait would exceed ``timeout``. Nothing stays
                debited when it is raised.
        """
        if tokens <= 0:
            raise ValueError(f"tokens must be positive, got {tokens}")

        bucket = self.bucket(key)
        if timeout is not None and (tokens - bucket.available()) / bucket.refill_rate > timeout:
            raise RateLimitTimeoutError(key, tokens, timeout)

        remaining = float(tokens)
        debited = 0.0
        waited = 0.0
        try:
            while remaining > 0:
                chunk = min(remaining, float(bucket.capacity))
                while True:
                    wait = bucket.try_consume(chunk)
                    if wait <= 0:
                        break
                    if timeout is not None and waited + wait > timeout:
                        raise RateLimitTimeoutError(key, tokens, timeout)
                    logger.info(f"Throttling '{key}' for {wait * 1000:.0f}ms waiting for {chunk:g} token(s)")
                    await self._sleep(wait)
                    waited += wait
                debited += chunk
                remaining -= chunk
        except BaseException:
            # a failed or cancelled request gives back the chunks it already took
            if debited:
                bucket.refund(debited)
            raise
