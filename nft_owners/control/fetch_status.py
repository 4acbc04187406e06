from enum import Enum

# per-token state machine; only RETRY_SCHEDULED -> INFLIGHT loops back
class FetchStatus(str, Enum):
    PENDING = "PENDING"
    INFLIGHT = "INFLIGHT"
    RETRY_SCHEDULED = "RETRY_SCHEDULED"
    SUCCEEDED = "SUCCEEDED"
    ABSENT = "ABSENT"
    FAILED = "FAILED"

    @property
    def terminal(self) -> bool:
        return self in (FetchStatus.SUCCEEDED, FetchStatus.ABSENT, FetchStatus.FAILED)
