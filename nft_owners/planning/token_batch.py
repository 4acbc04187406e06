from dataclasses import dataclass


# contiguous window of token ids, pure concurrency / pacing unit
@dataclass(frozen=True)
class TokenBatch:
    batch_id: int
    start_id: int
    end_id: int

    def __len__(self) -> int:
        return self.end_id - self.start_id + 1

    def token_ids(self) -> range:
        return range(self.start_id, self.end_id + 1)
