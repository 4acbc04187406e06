import unittest

from nft_owners.retry_policy import RetryPolicy


class TestRetryPolicy(unittest.TestCase):
    def test_delays_grow_then_cap(self) -> None:
        policy = RetryPolicy(max_attempts=5, base_delay=1000, growth_factor=2, max_delay=8000)
        self.assertEqual(
            [policy.next_delay(k) for k in range(1, 6)],
            [1000, 2000, 4000, 8000, 8000],
        )

    def test_seconds_defaults(self) -> None:
        policy = RetryPolicy()
        self.assertEqual(policy.next_delay(1), 1.0)
        self.assertEqual(policy.next_delay(3), 4.0)
        self.assertEqual(policy.next_delay(10), 8.0)

    def test_exhausted_only_past_max_attempts(self) -> None:
        policy = RetryPolicy(max_attempts=3)
        self.assertFalse(policy.is_exhausted(1))
        self.assertFalse(policy.is_exhausted(3))
        self.assertTrue(policy.is_exhausted(4))

    def test_pure_and_deterministic(self) -> None:
        policy = RetryPolicy(max_attempts=4, base_delay=0.5, growth_factor=3, max_delay=10)
        first = [policy.next_delay(k) for k in range(1, 5)]
        second = [policy.next_delay(k) for k in range(1, 5)]
        self.assertEqual(first, second)
        self.assertEqual(first, [0.5, 1.5, 4.5, 10])

    def test_rejects_invalid_parameters(self) -> None:
        with self.assertRaises(ValueError):
            RetryPolicy(max_attempts=0)
        with self.assertRaises(ValueError):
            RetryPolicy(base_delay=-1)
        with self.assertRaises(ValueError):
            RetryPolicy(growth_factor=0.5)
        with self.assertRaises(ValueError):
            RetryPolicy(base_delay=5, max_delay=1)
        with self.assertRaises(ValueError):
            RetryPolicy().next_delay(0)


if __name__ == "__main__":
    unittest.main()
