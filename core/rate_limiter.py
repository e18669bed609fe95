# =============================================================================
# core/rate_limiter.py  -  Admission Gate (token bucket)
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Keeps the server inside the OpenFEC hourly request budget.  One bucket
#   is shared by every operation; there is no per-tool or per-caller split.
#
# HOW IT WORKS:
#   - The bucket starts full (capacity tokens).
#   - can_admit() refills lazily from the elapsed time, then answers
#     "is there at least one token?".  It never takes a token.
#   - consume() takes one token.  The dispatcher calls it once per call,
#     after the arguments validate and before the remote request goes out.
#     A call rejected by validation costs nothing; a call that reaches
#     OpenFEC and fails still costs one.
#
# REFILL ARITHMETIC:
#   granted = floor(elapsed / window * capacity), capped at capacity.
#   The refill timestamp only moves when granted > 0, otherwise a stream of
#   checks a few milliseconds apart would each round down to zero and the
#   bucket would never refill.
#
# CONCURRENCY:
#   The dispatcher runs can_admit -> validate -> consume without an await in
#   between, so under one asyncio loop the pair cannot interleave with
#   another call.  Callers that share a bucket across threads must guard the
#   pair with try_acquire(), which holds the lock for both steps.
# =============================================================================

import logging
import math
import threading
import time
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 1000
DEFAULT_WINDOW_SECONDS = 3600.0


class TokenBucket:
    """Lazily refilled token bucket.

    Args:
        capacity: Maximum (and initial) number of tokens.
        window_seconds: Time for an empty bucket to refill completely.
        clock: Monotonic time source in seconds.  Injected in tests.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self._capacity = capacity
        self._window = float(window_seconds)
        self._clock = clock
        self._tokens = capacity
        self._last_refill = clock()
        self._lock = threading.Lock()

    @property
    def available(self) -> int:
        """Tokens left right now, including any refill earned since the last check."""
        with self._lock:
            self._refill()
            return self._tokens

    def can_admit(self) -> bool:
        with self._lock:
            self._refill()
            return self._tokens > 0

    def consume(self) -> None:
        with self._lock:
            if self._tokens > 0:
                self._tokens -= 1
            else:
                logger.warning("consume() called on an empty bucket; ignoring")

    def try_acquire(self) -> bool:
        """Check and consume in one critical section (for threaded callers)."""
        with self._lock:
            self._refill()
            if self._tokens <= 0:
                return False
            self._tokens -= 1
            return True

    def _refill(self) -> None:
        now = self._clock()
        elapsed = now - self._last_refill
        granted = math.floor(elapsed / self._window * self._capacity)
        if granted > 0:
            self._tokens = min(self._capacity, self._tokens + granted)
            self._last_refill = now
