from .fetch_status import FetchStatus
from .attempt_state import AttemptState

__all__ = [
    "FetchStatus",
    "AttemptState",
]
