"""Token-bucket admission tests for CrptClient.ratelimit."""

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from CrptClient.errors import InvalidConfiguration
from CrptClient.ratelimit import RateBudget, RateLimiter


@pytest.mark.parametrize("permits", [0, -1])
def test_budget_rejects_non_positive_permits(permits: int) -> None:
    with pytest.raises(InvalidConfiguration):
        RateBudget(permits=permits, window_s=1.0)


def test_budget_rejects_non_positive_window() -> None:
    with pytest.raises(InvalidConfiguration):
        RateBudget(permits=5, window_s=0)


def test_invalid_configuration_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        RateBudget(permits=0)


@pytest.mark.parametrize(
    ("text", "permits", "window_s"),
    [
        ("10/second", 10, 1.0),
        ("300/MINUTE", 300, 60.0),
        ("5000/hour", 5000, 3600.0),
        ("1/3second", 1, 3.0),
        ("2 / 10 seconds", 2, 10.0),
    ],
)
def test_budget_parse(text: str, permits: int, window_s: float) -> None:
    budget = RateBudget.parse(text)
    assert budget.permits == permits
    assert budget.window_s == pytest.approx(window_s)


@pytest.mark.parametrize("text", ["ten/second", "10", "10/fortnight", "0/second"])
def test_budget_parse_rejects_bad_input(text: str) -> None:
    with pytest.raises(InvalidConfiguration):
        RateBudget.parse(text)


def test_rate_per_sec() -> None:
    assert RateBudget(permits=30, window_s=60.0).rate_per_sec == pytest.approx(0.5)


def test_full_bucket_admits_one_window_without_waiting(fake_clock) -> None:
    limiter = RateLimiter(
        RateBudget(permits=3, window_s=1.0), now=fake_clock.now, sleep=fake_clock.sleep
    )

    for _ in range(3):
        limiter.acquire()

    assert fake_clock.sleeps == []


def test_simultaneous_callers_get_distinct_slots(fake_clock) -> None:
    """Callers arriving at the same instant queue behind each other's reservations."""
    limiter = RateLimiter(
        RateBudget(permits=2, window_s=1.0), now=fake_clock.now, sleep=fake_clock.sleep
    )

    for _ in range(5):
        limiter.acquire()

    assert fake_clock.sleeps == pytest.approx([0.5, 1.0, 1.5])


def test_waits_shrink_as_time_passes(fake_clock) -> None:
    limiter = RateLimiter(
        RateBudget(permits=2, window_s=1.0), now=fake_clock.now, sleep=fake_clock.sleep
    )
    limiter.acquire()
    limiter.acquire()

    fake_clock.advance(0.25)
    limiter.acquire()

    assert fake_clock.sleeps == pytest.approx([0.25])


def test_idle_time_banks_at_most_one_window(fake_clock) -> None:
    limiter = RateLimiter(
        RateBudget(permits=4, window_s=2.0), now=fake_clock.now, sleep=fake_clock.sleep
    )
    for _ in range(4):
        limiter.acquire()

    fake_clock.advance(3600)
    assert limiter.available == pytest.approx(4.0)

    for _ in range(5):
        limiter.acquire()

    assert fake_clock.sleeps == pytest.approx([0.5])


def test_concurrent_acquire_never_exceeds_rate() -> None:
    """3N permits across threads take at least two windows on a full bucket."""
    permits, window_s = 5, 0.2
    start = time.monotonic()
    limiter = RateLimiter(RateBudget(permits=permits, window_s=window_s))

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(lambda _: limiter.acquire(), range(3 * permits)))

    elapsed = time.monotonic() - start
    assert elapsed >= 2 * window_s - 0.01


def test_concurrent_reservations_are_unique(fake_clock) -> None:
    limiter = RateLimiter(
        RateBudget(permits=1, window_s=1.0), now=fake_clock.now, sleep=fake_clock.sleep
    )
    barrier = threading.Barrier(10)

    def _worker() -> None:
        barrier.wait()
        limiter.acquire()

    threads = [threading.Thread(target=_worker) for _ in range(10)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(fake_clock.sleeps) == pytest.approx([float(n) for n in range(1, 10)])
