from .token_batch import TokenBatch
from .batch_planner import BatchPlanner

__all__ = [
    "TokenBatch",
    "BatchPlanner",
]
