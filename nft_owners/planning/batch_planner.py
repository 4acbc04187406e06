from typing import Iterator, Optional
from .token_batch import TokenBatch

# -------------------------
# sequential generation
# unaware of fetch results
# no retry
# -------------------------
class BatchPlanner:
    """
    Bounded planner over a closed token-id range.
    - fixed start / end
    - every window has batch_size ids except possibly the last
    - exhausted once end is handed out
    """
    def __init__(self, start_id: int, end_id: int, batch_size: int):
        if start_id < 0:
            raise ValueError(f"start_id {start_id} must be >= 0")
        if start_id > end_id:
            raise ValueError(f"start_id {start_id} > end_id {end_id}")
        if batch_size < 1:
            raise ValueError(f"batch_size {batch_size} must be >= 1")

        self._next_id = start_id
        self._end_id = end_id
        self._batch_size = batch_size
        self._next_batch_id = 0

    def next_batch(self) -> Optional[TokenBatch]:
        if self.exhausted:
            return None

        start = self._next_id
        end = min(start + self._batch_size - 1, self._end_id)

        b = TokenBatch(
            batch_id=self._next_batch_id,
            start_id=start,
            end_id=end,
        )

        self._next_id = end + 1
        self._next_batch_id += 1

        return b

    def __iter__(self) -> Iterator[TokenBatch]:
        while True:
            b = self.next_batch()
            if b is None:
                return
            yield b

    @property
    def exhausted(self) -> bool:
        return self._next_id > self._end_id
