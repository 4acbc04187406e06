import unittest

from nft_owners.control import AttemptState, FetchStatus
from nft_owners.planning import BatchPlanner, TokenBatch


class TestBatchPlanner(unittest.TestCase):
    def test_windows_cover_range_with_short_tail(self) -> None:
        batches = list(BatchPlanner(1, 12, 5))
        self.assertEqual(
            [(b.batch_id, b.start_id, b.end_id) for b in batches],
            [(0, 1, 5), (1, 6, 10), (2, 11, 12)],
        )
        self.assertEqual([len(b) for b in batches], [5, 5, 2])

    def test_single_id_range(self) -> None:
        planner = BatchPlanner(7, 7, 10)
        self.assertEqual(planner.next_batch(), TokenBatch(0, 7, 7))
        self.assertTrue(planner.exhausted)
        self.assertIsNone(planner.next_batch())

    def test_zero_is_a_valid_token_id(self) -> None:
        ids = [i for b in BatchPlanner(0, 3, 2) for i in b.token_ids()]
        self.assertEqual(ids, [0, 1, 2, 3])

    def test_validation(self) -> None:
        with self.assertRaises(ValueError):
            BatchPlanner(5, 4, 1)
        with self.assertRaises(ValueError):
            BatchPlanner(-1, 4, 1)
        with self.assertRaises(ValueError):
            BatchPlanner(1, 4, 0)


class TestAttemptState(unittest.TestCase):
    def test_retry_cycle_then_success(self) -> None:
        state = AttemptState(token_id=3)
        self.assertIs(state.status, FetchStatus.PENDING)

        state.mark_inflight()
        state.mark_retry("connection reset")
        state.mark_inflight()
        state.mark_succeeded()

        self.assertIs(state.status, FetchStatus.SUCCEEDED)
        self.assertTrue(state.status.terminal)
        self.assertEqual(state.attempts_made, 2)
        self.assertEqual(state.last_error, "connection reset")

    def test_no_transition_out_of_terminal_state(self) -> None:
        state = AttemptState(token_id=3)
        state.mark_inflight()
        state.mark_absent("invalid token ID")
        with self.assertRaises(RuntimeError):
            state.mark_inflight()

    def test_cannot_skip_inflight(self) -> None:
        state = AttemptState(token_id=3)
        with self.assertRaises(RuntimeError):
            state.mark_succeeded()


if __name__ == "__main__":
    unittest.main()
