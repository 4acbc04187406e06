# nft_owners/metrics/context.py
from dataclasses import dataclass
from . import definitions as m

@dataclass(frozen=True)
class MetricsContext:
    contract: str
    job: str

    # -------- Progress --------
    tokens_total: any
    tokens_processed: any
    token_outcomes: any

    # -------- Batches --------
    batches_done: any
    batch_duration: any

    # -------- RPC --------
    rpc_attempts: any
    rpc_retries: any
    rpc_inflight: any
    rpc_latency: any

    # ===== helpers =====
    def tokens_total_set(self, value: int):
        self.tokens_total.set(value)

    def outcome_inc(self, status: str):
        self.tokens_processed.inc()
        self.token_outcomes.labels(
            contract=self.contract,
            job=self.job,
            status=status,
        ).inc()

    def batch_done_observe(self, cost_sec: float):
        self.batches_done.inc()
        self.batch_duration.observe(cost_sec)

    def rpc_attempt_inc(self):
        self.rpc_attempts.inc()

    def rpc_retry_inc(self, call_class: str):
        self.rpc_retries.labels(
            contract=self.contract,
            job=self.job,
            call_class=call_class,
        ).inc()

    def rpc_inflight_inc(self):
        self.rpc_inflight.inc()

    def rpc_inflight_dec(self):
        self.rpc_inflight.dec()

    def rpc_latency_observe(self, value_ms: float):
        self.rpc_latency.observe(value_ms)

    @classmethod
    def for_job(cls, contract: str, job: str) -> "MetricsContext":
        base = dict(contract=contract, job=job)

        return cls(
            contract=contract,
            job=job,

            # Progress
            tokens_total=m.TOKENS_TOTAL.labels(**base),
            tokens_processed=m.TOKENS_PROCESSED.labels(**base),
            token_outcomes=m.TOKEN_OUTCOMES,

            # Batches
            batches_done=m.BATCHES_DONE.labels(**base),
            batch_duration=m.BATCH_DURATION.labels(**base),

            # RPC (fixed labels)
            rpc_attempts=m.RPC_ATTEMPTS.labels(**base),
            rpc_inflight=m.RPC_INFLIGHT.labels(**base),
            rpc_latency=m.RPC_LATENCY.labels(**base),

            # RPC (dynamic labels)
            rpc_retries=m.RPC_RETRIES,
        )
