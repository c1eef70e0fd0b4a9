# === NAVMAP v1 ===
# {
#   "module": "CrptClient.ratelimit",
#   "purpose": "Shared token-bucket admission gate for outbound registry calls.",
#   "sections": [
#     {
#       "id": "ratebudget",
#       "name": "RateBudget",
#       "anchor": "class-ratebudget",
#       "kind": "class"
#     },
#     {
#       "id": "ratelimiter",
#       "name": "RateLimiter",
#       "anchor": "class-ratelimiter",
#       "kind": "class"
#     }
#   ]
# }
# === /NAVMAP ===

"""Shared token-bucket admission gate for outbound registry calls.

Provides:
- :class:`RateBudget`, an immutable ``permits per window`` pair parsed from
  strings such as ``"10/second"`` or ``"1/3second"``
- :class:`RateLimiter`, a thread-safe token bucket that blocks callers until
  their permit slot arrives

Every request the client issues (challenge fetch, token exchange, document
submission) passes through one limiter instance, so the ceiling applies to
the aggregate traffic of the client.
"""

from __future__ import annotations

import logging
import re
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from CrptClient.errors import InvalidConfiguration

LOGGER = logging.getLogger(__name__)

_UNIT_SECONDS = {
    "MILLISECOND": 0.001,
    "SECOND": 1.0,
    "MINUTE": 60.0,
    "HOUR": 3600.0,
    "DAY": 86400.0,
}

_RATE_PATTERN = re.compile(r"^\s*(\d+)\s*/\s*(?:(\d+)\s*)?([A-Za-z]+)\s*$")


@dataclass(frozen=True)
class RateBudget:
    """Request budget: at most ``permits`` calls per ``window_s`` seconds."""

    permits: int
    window_s: float = 1.0

    def __post_init__(self) -> None:
        if self.permits <= 0:
            raise InvalidConfiguration(
                f"Rate limit permits must be positive, got: {self.permits}",
                details={"permits": self.permits},
            )
        if self.window_s <= 0:
            raise InvalidConfiguration(
                f"Rate limit window must be positive, got: {self.window_s}",
                details={"window_s": self.window_s},
            )

    @property
    def rate_per_sec(self) -> float:
        """Steady permit emission rate."""
        return self.permits / self.window_s

    @classmethod
    def parse(cls, text: str) -> RateBudget:
        """Parse rate strings like ``'10/second'``, ``'300/MINUTE'``, ``'1/3second'``.

        Raises:
            InvalidConfiguration: If the string is malformed or names an unknown unit.
        """
        match = _RATE_PATTERN.match(text)
        if not match:
            raise InvalidConfiguration(f"Invalid rate format: {text!r}")

        permits = int(match.group(1))
        multiplier = int(match.group(2)) if match.group(2) else 1
        unit = match.group(3).upper()
        if unit not in _UNIT_SECONDS and unit.endswith("S"):
            unit = unit[:-1]
        if unit not in _UNIT_SECONDS:
            raise InvalidConfiguration(f"Unknown rate unit {unit!r} in {text!r}")

        return cls(permits=permits, window_s=_UNIT_SECONDS[unit] * multiplier)

    def __str__(self) -> str:
        return f"{self.permits}/{self.window_s:g}s"


class RateLimiter:
    """Thread-safe token bucket shared by every outbound request.

    Permits accrue at ``budget.rate_per_sec`` and the balance is capped at one
    window's worth (``budget.permits``). The bucket starts full.

    A call to :meth:`acquire` debits its permit under the lock even when the
    balance is empty; the negative balance reserves the next free slot, and
    the caller sleeps outside the lock until that slot arrives. Concurrent
    callers therefore never share a slot and are admitted in arrival order.

    Examples:
        >>> limiter = RateLimiter(RateBudget(permits=2, window_s=1.0))
        >>> limiter.acquire()  # bucket starts full, returns immediately
    """

    def __init__(
        self,
        budget: RateBudget,
        *,
        now: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.budget = budget
        self._rate = budget.rate_per_sec
        self._capacity = float(budget.permits)
        self._now = now
        self._sleep = sleep

        self._lock = threading.Lock()
        self._tokens = self._capacity
        self._timestamp = now()

    def _refill(self, now: float) -> None:
        """Accrue permits for the time elapsed since the last update."""
        elapsed = now - self._timestamp
        if elapsed > 0:
            self._tokens = min(self._capacity, self._tokens + elapsed * self._rate)
            self._timestamp = now

    def acquire(self) -> None:
        """Block the calling thread until its permit is available."""
        with self._lock:
            self._refill(self._now())
            self._tokens -= 1.0
            wait_s = -self._tokens / self._rate if self._tokens < 0 else 0.0

        if wait_s > 0:
            LOGGER.debug(
                "Rate limiter wait",
                extra={"wait_ms": int(wait_s * 1000), "budget": str(self.budget)},
            )
            self._sleep(wait_s)

    @property
    def available(self) -> float:
        """Permits currently available; negative when callers are queued."""
        with self._lock:
            self._refill(self._now())
            return self._tokens
