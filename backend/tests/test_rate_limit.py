import asyncio
import time
import unittest

from myawesomelist.core.rate_limit import (
    AsyncTokenBucket,
    NoopLimiter,
    new_embedding_limiter,
    new_github_limiter,
)


class TestAsyncTokenBucket(unittest.IsolatedAsyncioTestCase):
    async def test_burst_is_immediate(self):
        bucket = AsyncTokenBucket(rate=1, burst=3)
        start = time.monotonic()

        for _ in range(3):
            await bucket.wait()

        self.assertLess(time.monotonic() - start, 0.1)

    async def test_waits_for_refill(self):
        bucket = AsyncTokenBucket(rate=20, burst=1)
        await bucket.wait()
        start = time.monotonic()

        await bucket.wait()

        self.assertGreaterEqual(time.monotonic() - start, 0.03)

    async def test_cancelled_wait_propagates(self):
        bucket = AsyncTokenBucket(rate=0.01, burst=1)
        await bucket.wait()

        with self.assertRaises(asyncio.TimeoutError):
            await asyncio.wait_for(bucket.wait(), timeout=0.05)

    def test_invalid_parameters(self):
        with self.assertRaises(ValueError):
            AsyncTokenBucket(rate=0)
        with self.assertRaises(ValueError):
            AsyncTokenBucket(rate=1, burst=0)


class TestLimiterFactories(unittest.TestCase):
    def test_github_limits(self):
        authenticated = new_github_limiter(True)
        anonymous = new_github_limiter(False)

        self.assertAlmostEqual(authenticated.rate, 5000 / 3600)
        self.assertEqual(authenticated.burst, 10)
        self.assertAlmostEqual(anonymous.rate, 60 / 3600)
        self.assertEqual(anonymous.burst, 1)

    def test_embedding_limiter_disabled(self):
        self.assertIsInstance(new_embedding_limiter(0, 5), NoopLimiter)
        self.assertEqual(new_embedding_limiter(2.0, 0).burst, 1)


if __name__ == "__main__":
    unittest.main()
