"""Token bucket rate limiting for outbound calls.

Every quota-limited external API is paced through a ``RateLimiter``. Callers
``await limiter.consume(service_key)`` before calling out; the limiter
suspends them until the service's bucket has tokens.

This package exports:

- ``BucketConfig``: capacity/refill rate of a bucket.
- ``TokenBucket``: a single bucket with lazy refill.
- ``RateLimiter``: per-key bucket collection with the static config table.
"""

from .bucket import BucketConfig, TokenBucket
from .limiter import (
    DEFAULT_BUCKET_CONFIG,
    REASONING_SERVICE_KEY,
    SERVICE_BUCKET_CONFIGS,
    RateLimiter,
)

__all__ = [
    "BucketConfig",
    "DEFAULT_BUCKET_CONFIG",
    "REASONING_SERVICE_KEY",
    "RateLimiter",
    "SERVICE_BUCKET_CONFIGS",
    "TokenBucket",
]
