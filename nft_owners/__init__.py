# control
from nft_owners.control.fetch_status import FetchStatus
from nft_owners.control.attempt_state import AttemptState

# planning
from nft_owners.planning.token_batch import TokenBatch
from nft_owners.planning.batch_planner import BatchPlanner

# policy
from nft_owners.retry_policy import RetryPolicy
from nft_owners.classifier import CallClass, CallClassifier

# execution
from nft_owners.execution.outcome import Outcome, Owned, Absent, Failed
from nft_owners.execution.item_fetcher import ItemFetcher
from nft_owners.execution.result_sink import ResultSink, SinkMode
from nft_owners.execution.batch_scheduler import BatchScheduler, RunSummary

# persistence
from nft_owners.storage import CsvTableWriter, DiagnosticLog

__all__ = [
    # control
    "FetchStatus",
    "AttemptState",

    # planning
    "TokenBatch",
    "BatchPlanner",

    # policy
    "RetryPolicy",
    "CallClass",
    "CallClassifier",

    # execution
    "Outcome",
    "Owned",
    "Absent",
    "Failed",
    "ItemFetcher",
    "ResultSink",
    "SinkMode",
    "BatchScheduler",
    "RunSummary",

    # persistence
    "CsvTableWriter",
    "DiagnosticLog",
]
