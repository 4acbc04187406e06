from dataclasses import dataclass, field
import time
from .fetch_status import FetchStatus


_TRANSITIONS = {
    FetchStatus.PENDING: {FetchStatus.INFLIGHT},
    FetchStatus.INFLIGHT: {
        FetchStatus.SUCCEEDED,
        FetchStatus.ABSENT,
        FetchStatus.RETRY_SCHEDULED,
        FetchStatus.FAILED,
    },
    FetchStatus.RETRY_SCHEDULED: {FetchStatus.INFLIGHT},
}


# control plane for one token, owned by a single fetch loop
@dataclass
class AttemptState:
    token_id: int

    status: FetchStatus = FetchStatus.PENDING
    attempts_made: int = 0
    last_error: str | None = None

    created_ts: float = field(default_factory=time.time)
    updated_ts: float = field(default_factory=time.time)

    def touch(self):
        self.updated_ts = time.time()

    def transition(self, target: FetchStatus):
        allowed = _TRANSITIONS.get(self.status, set())
        if target not in allowed:
            raise RuntimeError(
                f"token {self.token_id}: illegal transition {self.status.value} -> {target.value}"
            )
        self.status = target
        self.touch()

    def mark_inflight(self):
        self.transition(FetchStatus.INFLIGHT)
        self.attempts_made += 1

    def mark_retry(self, error: str):
        self.last_error = error
        self.transition(FetchStatus.RETRY_SCHEDULED)

    def mark_succeeded(self):
        self.transition(FetchStatus.SUCCEEDED)

    def mark_absent(self, error: str):
        self.last_error = error
        self.transition(FetchStatus.ABSENT)

    def mark_failed(self, error: str):
        self.last_error = error
        self.transition(FetchStatus.FAILED)
