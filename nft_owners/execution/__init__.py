from .outcome import Outcome, Owned, Absent, Failed
from .item_fetcher import ItemFetcher
from .result_sink import ResultSink, SinkMode
from .batch_scheduler import BatchScheduler, RunSummary

__all__ = [
    "Outcome",
    "Owned",
    "Absent",
    "Failed",
    "ItemFetcher",
    "ResultSink",
    "SinkMode",
    "BatchScheduler",
    "RunSummary",
]
