from __future__ import annotations

import threading
import time
import unittest

from gcp_release_digest.communicator import RateLimiter, get_webhook_rate_limiter


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class TestRateLimiter(unittest.TestCase):
    def test_invalid_arguments(self) -> None:
        with self.assertRaises(ValueError):
            RateLimiter(0)
        with self.assertRaises(ValueError):
            RateLimiter(5, period_seconds=0)

    def test_never_exceeds_limit_within_a_window(self) -> None:
        clock = FakeClock()
        limiter = RateLimiter(50, 60.0, clock=clock)

        granted = sum(limiter.try_acquire() for _ in range(80))

        self.assertEqual(granted, 50)
        self.assertEqual(limiter.available(), 0)

    def test_refills_to_exactly_the_limit_after_the_window(self) -> None:
        clock = FakeClock()
        limiter = RateLimiter(3, 60.0, clock=clock)
        for _ in range(3):
            self.assertTrue(limiter.try_acquire())
        self.assertFalse(limiter.try_acquire())

        clock.advance(59.9)
        self.assertFalse(limiter.try_acquire())

        clock.advance(0.1)
        self.assertEqual(limiter.available(), 3)
        granted = sum(limiter.try_acquire() for _ in range(10))
        self.assertEqual(granted, 3)

    def test_unused_permits_do_not_accumulate(self) -> None:
        clock = FakeClock()
        limiter = RateLimiter(2, 60.0, clock=clock)
        clock.advance(600)
        self.assertEqual(limiter.available(), 2)

    def test_reset(self) -> None:
        limiter = RateLimiter(2, 60.0, clock=FakeClock())
        limiter.try_acquire()
        limiter.try_acquire()
        limiter.reset()
        self.assertEqual(limiter.available(), 2)

    def test_concurrent_callers_share_the_pool(self) -> None:
        limiter = RateLimiter(5, 60.0)
        results = []
        results_lock = threading.Lock()

        def worker() -> None:
            ok = limiter.try_acquire()
            with results_lock:
                results.append(ok)

        threads = [threading.Thread(target=worker) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(results.count(True), 5)
        self.assertEqual(results.count(False), 15)

    def test_acquire_blocks_until_the_window_resets(self) -> None:
        limiter = RateLimiter(2, period_seconds=0.3)
        start = time.monotonic()
        self.assertTrue(limiter.acquire())
        self.assertTrue(limiter.acquire())
        self.assertLess(time.monotonic() - start, 0.2)

        self.assertTrue(limiter.acquire())
        self.assertGreaterEqual(time.monotonic() - start, 0.25)

    def test_acquire_times_out(self) -> None:
        limiter = RateLimiter(1, period_seconds=60.0)
        self.assertTrue(limiter.acquire(timeout=0.05))
        self.assertFalse(limiter.acquire(timeout=0.05))

    def test_acquire_deadline_follows_the_injected_clock(self) -> None:
        clock = FakeClock()
        limiter = RateLimiter(1, 60.0, clock=clock)
        self.assertTrue(limiter.acquire(timeout=0))
        self.assertFalse(limiter.acquire(timeout=0))

        clock.advance(60.0)
        self.assertTrue(limiter.acquire(timeout=0))

    def test_acquire_gives_up_when_the_clock_passes_the_deadline(self) -> None:
        class SteppingClock(FakeClock):
            def __call__(self) -> float:
                self.now += 5.0
                return self.now

        limiter = RateLimiter(1, 3600.0, clock=SteppingClock())
        limiter.acquire()

        start = time.monotonic()
        self.assertFalse(limiter.acquire(timeout=2.0))
        self.assertLess(time.monotonic() - start, 1.0)

    def test_blocked_callers_are_released_together_up_to_the_limit(self) -> None:
        limiter = RateLimiter(2, period_seconds=0.3)
        limiter.acquire()
        limiter.acquire()

        acquired = []
        lock = threading.Lock()

        def worker() -> None:
            if limiter.acquire(timeout=0.45):
                with lock:
                    acquired.append(time.monotonic())

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(len(acquired), 2)

    def test_process_wide_limiter_is_shared(self) -> None:
        self.assertIs(get_webhook_rate_limiter(17), get_webhook_rate_limiter(17, 60))
        self.assertIsNot(get_webhook_rate_limiter(17), get_webhook_rate_limiter(18))


if __name__ == "__main__":
    unittest.main()
