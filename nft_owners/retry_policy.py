from dataclasses import dataclass


# -------------------------
# pure backoff arithmetic
# never sleeps, never reads a clock
# -------------------------
@dataclass(frozen=True)
class RetryPolicy:
    """
    Exponential backoff with an upper bound.

    ``attempt_index`` is 1-indexed: the delay after the first failed call is
    ``next_delay(1) == base_delay``. Units are whatever the caller uses
    (the job passes seconds).
    """

    max_attempts: int = 11
    base_delay: float = 1.0
    growth_factor: float = 2.0
    max_delay: float = 8.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.base_delay < 0:
            raise ValueError(f"base_delay must be >= 0, got {self.base_delay}")
        if self.growth_factor < 1:
            raise ValueError(f"growth_factor must be >= 1, got {self.growth_factor}")
        if self.max_delay < self.base_delay:
            raise ValueError(
                f"max_delay {self.max_delay} < base_delay {self.base_delay}"
            )

    def next_delay(self, attempt_index: int) -> float:
        if attempt_index < 1:
            raise ValueError(f"attempt_index is 1-indexed, got {attempt_index}")
        return min(
            self.base_delay * self.growth_factor ** (attempt_index - 1),
            self.max_delay,
        )

    def is_exhausted(self, attempt_index: int) -> bool:
        return attempt_index > self.max_attempts
