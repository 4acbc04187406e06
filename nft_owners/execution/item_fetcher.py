import asyncio
import time
from typing import Awaitable, Callable

from nft_owners.classifier import CallClass, CallClassifier
from nft_owners.control import AttemptState
from nft_owners.errors import RpcCallTimeout
from nft_owners.execution.outcome import Absent, Failed, Outcome, Owned
from nft_owners.logging import log
from nft_owners.metrics import MetricsContext
from nft_owners.retry_policy import RetryPolicy

FetchOwnerFn = Callable[[int], Awaitable[str]]
SleepFn = Callable[[float], Awaitable[None]]


class ItemFetcher:
    """
    Drives one token id to a terminal Outcome.

    PENDING -> INFLIGHT -> SUCCEEDED | ABSENT | FAILED
                        -> RETRY_SCHEDULED -> INFLIGHT ...

    Per-token failures never escape ``fetch``; only cancellation does.
    """

    def __init__(
        self,
        fetch_owner: FetchOwnerFn,
        retry_policy: RetryPolicy,
        classifier: CallClassifier,
        *,
        call_timeout: float = 10.0,
        sleep: SleepFn = asyncio.sleep,
        metrics: MetricsContext,
    ):
        self.fetch_owner = fetch_owner
        self.retry_policy = retry_policy
        self.classifier = classifier
        self.call_timeout = call_timeout
        self.sleep = sleep
        self.metrics = metrics

    async def fetch(self, token_id: int) -> Outcome:
        state = AttemptState(token_id=token_id)

        while True:
            state.mark_inflight()
            try:
                owner = await self._call_once(token_id)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                outcome = self._handle_failure(state, e)
                if outcome is not None:
                    return outcome
                await self.sleep(self.retry_policy.next_delay(state.attempts_made))
                continue

            state.mark_succeeded()
            return Owned(token_id=token_id, owner=owner)

    # --------------------------------------------------
    async def _call_once(self, token_id: int) -> str:
        self.metrics.rpc_attempt_inc()
        self.metrics.rpc_inflight_inc()
        start = time.perf_counter()
        try:
            return await asyncio.wait_for(
                self.fetch_owner(token_id),
                timeout=self.call_timeout,
            )
        except asyncio.TimeoutError as e:
            raise RpcCallTimeout(
                f"ownerOf({token_id}) timed out after {self.call_timeout}s"
            ) from e
        finally:
            self.metrics.rpc_inflight_dec()
            self.metrics.rpc_latency_observe((time.perf_counter() - start) * 1000)

    # --------------------------------------------------
    def _handle_failure(self, state: AttemptState, error: Exception) -> Outcome | None:
        """
        Returns a terminal Outcome, or None when another attempt is scheduled.
        """
        call_class = self.classifier.classify(error)
        message = self.classifier.describe(error)

        if call_class is CallClass.PERMANENT_ABSENCE:
            state.mark_absent(message)
            log.info(
                "token_absent",
                extra={"token_id": state.token_id, "error": message[:200]},
            )
            return Absent(token_id=state.token_id)

        if self.retry_policy.is_exhausted(state.attempts_made + 1):
            state.mark_failed(message)
            log.error(
                "❌ token_failed",
                extra={
                    "token_id": state.token_id,
                    "attempts": state.attempts_made,
                    "call_class": call_class.value,
                    "error_type": type(error).__name__,
                    "error": message[:200],
                },
            )
            return Failed(token_id=state.token_id, reason=message)

        state.mark_retry(message)
        self.metrics.rpc_retry_inc(call_class.value)
        log.warning(
            "⚠️ rpc_call_retry",
            extra={
                "token_id": state.token_id,
                "attempt": state.attempts_made,
                "max_attempts": self.retry_policy.max_attempts,
                "call_class": call_class.value,
                "error_type": type(error).__name__,
                "error": message[:200],
            },
        )
        return None
