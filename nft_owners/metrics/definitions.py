from prometheus_client import Counter, Gauge, Histogram

# -----------------------------
# Progress
# -----------------------------
TOKENS_TOTAL = Gauge(
    "nft_owners_tokens_total",
    "Number of token ids in the requested range",
    ["contract", "job"],
)
TOKENS_PROCESSED = Counter(
    "nft_owners_tokens_processed_total",
    "Token ids that reached a terminal outcome",
    ["contract", "job"],
)
TOKEN_OUTCOMES = Counter(
    "nft_owners_token_outcomes_total",
    "Terminal outcomes by status",
    ["contract", "job", "status"],
)

# -----------------------------
# Batches
# -----------------------------
BATCHES_DONE = Counter(
    "nft_owners_batches_total",
    "Batches that passed the barrier",
    ["contract", "job"],
)
BATCH_DURATION = Histogram(
    "nft_owners_batch_duration_sec",
    "Wall time of one batch, pacing excluded",
    ["contract", "job"],
    buckets=(0.5, 1, 2, 5, 10, 20, 30, 60, 120),
)

# -----------------------------
# RPC
# -----------------------------
RPC_ATTEMPTS = Counter(
    "nft_owners_rpc_attempts_total",
    "ownerOf calls issued",
    ["contract", "job"],
)
RPC_RETRIES = Counter(
    "nft_owners_rpc_retries_total",
    "Failed ownerOf calls scheduled for retry",
    ["contract", "job", "call_class"],
)
RPC_INFLIGHT = Gauge(
    "nft_owners_rpc_inflight",
    "Current inflight ownerOf calls",
    ["contract", "job"],
)
RPC_LATENCY = Histogram(
    "nft_owners_rpc_latency_ms",
    "ownerOf call latency",
    ["contract", "job"],
    buckets=(50, 100, 200, 500, 1000, 2000, 5000, 10000, 20000),
)
