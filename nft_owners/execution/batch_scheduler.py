import asyncio
import time
from dataclasses import dataclass

from nft_owners.control import FetchStatus
from nft_owners.errors import IncompleteRunError
from nft_owners.execution.item_fetcher import ItemFetcher, SleepFn
from nft_owners.execution.outcome import Outcome
from nft_owners.execution.result_sink import ResultSink
from nft_owners.logging import log
from nft_owners.metrics import MetricsContext
from nft_owners.planning import BatchPlanner, TokenBatch


@dataclass
class RunSummary:
    total: int = 0
    owned: int = 0
    absent: int = 0
    failed: int = 0
    batches: int = 0
    elapsed_sec: float = 0.0

    def count(self, status: FetchStatus):
        if status is FetchStatus.SUCCEEDED:
            self.owned += 1
        elif status is FetchStatus.ABSENT:
            self.absent += 1
        elif status is FetchStatus.FAILED:
            self.failed += 1


class BatchScheduler:
    """
    Window-by-window driver.

    Every id of a batch is fetched concurrently, the batch is a hard barrier
    (a slow or retrying token holds back the next window), and ``pacing_delay``
    separates consecutive batches. Batch boundaries never change the result.
    """

    def __init__(
        self,
        fetcher: ItemFetcher,
        sink: ResultSink,
        *,
        batch_size: int,
        pacing_delay: float,
        sleep: SleepFn = asyncio.sleep,
        progress=None,
        metrics: MetricsContext,
    ):
        if batch_size < 1:
            raise ValueError(f"batch_size {batch_size} must be >= 1")
        if pacing_delay < 0:
            raise ValueError(f"pacing_delay {pacing_delay} must be >= 0")

        self.fetcher = fetcher
        self.sink = sink
        self.batch_size = batch_size
        self.pacing_delay = pacing_delay
        self.sleep = sleep
        self.progress = progress
        self.metrics = metrics

    # --------------------------------------------------
    async def run(self, start_id: int, end_id: int) -> RunSummary:
        planner = BatchPlanner(start_id, end_id, self.batch_size)
        summary = RunSummary(total=end_id - start_id + 1)
        self.metrics.tokens_total_set(summary.total)
        run_start = time.perf_counter()

        for batch in planner:
            await self._run_batch(batch, summary)

            if not planner.exhausted and self.pacing_delay > 0:
                await self.sleep(self.pacing_delay)

        summary.elapsed_sec = round(time.perf_counter() - run_start, 3)
        self._check_complete(start_id, end_id)
        return summary

    # --------------------------------------------------
    async def _run_batch(self, batch: TokenBatch, summary: RunSummary):
        batch_start = time.perf_counter()

        # barrier: no partial-batch advancement
        tasks = [
            asyncio.create_task(self._fetch_and_record(token_id))
            for token_id in batch.token_ids()
        ]
        try:
            outcomes = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            raise

        for outcome in outcomes:
            summary.count(outcome.status)
            self.metrics.outcome_inc(outcome.status.value)

        if self.progress is not None:
            self.progress.update(len(batch))

        cost = time.perf_counter() - batch_start
        summary.batches += 1
        self.metrics.batch_done_observe(cost)

        log.info(
            "📦 batch_done",
            extra={
                "batch_id": batch.batch_id,
                "start_id": batch.start_id,
                "end_id": batch.end_id,
                "owned": sum(1 for o in outcomes if o.status is FetchStatus.SUCCEEDED),
                "absent": sum(1 for o in outcomes if o.status is FetchStatus.ABSENT),
                "failed": sum(1 for o in outcomes if o.status is FetchStatus.FAILED),
                "cost_sec": round(cost, 2),
            },
        )

    # --------------------------------------------------
    async def _fetch_and_record(self, token_id: int) -> Outcome:
        # sink sees outcomes in completion order
        outcome = await self.fetcher.fetch(token_id)
        await self.sink.record(outcome)
        return outcome

    # --------------------------------------------------
    def _check_complete(self, start_id: int, end_id: int):
        expected = set(range(start_id, end_id + 1))
        got = self.sink.token_ids()
        if got != expected:
            missing = sorted(expected - got)[:10]
            extra = sorted(got - expected)[:10]
            raise IncompleteRunError(
                f"result set mismatch: missing={missing} unexpected={extra}"
            )
