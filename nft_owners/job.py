# -----------------------------
# import deps
# -----------------------------
import asyncio
import sys

from prometheus_client import start_http_server
from tqdm import tqdm

from nft_owners.classifier import CallClassifier
from nft_owners.config import JobConfig
from nft_owners.errors import SetupError
from nft_owners.execution import BatchScheduler, ItemFetcher, ResultSink, RunSummary
from nft_owners.logging import log, setup_logging
from nft_owners.metrics import MetricsContext
from nft_owners.rpc_provider import OwnerRpcClient
from nft_owners.storage import CsvTableWriter, DiagnosticLog

EXIT_OK = 0
EXIT_SETUP_ERROR = 1
EXIT_INTERRUPTED = 130


def build_sink(cfg: JobConfig) -> ResultSink:
    writer = CsvTableWriter(
        cfg.output_path,
        include_unresolved=cfg.output_unresolved,
        absent_owner=cfg.absent_owner,
        failed_owner=cfg.failed_owner,
        merge_existing=cfg.output_merge_existing,
    )
    return ResultSink(writer, DiagnosticLog(cfg.error_log_path), mode=cfg.sink_mode)


async def run_job(
    cfg: JobConfig,
    *,
    fetch_owner=None,
    sleep=asyncio.sleep,
    progress=None,
) -> RunSummary:
    """
    Fetch every owner in [start, end] and write the sorted table.

    ``fetch_owner`` defaults to a web3 client built from ``cfg``; the output
    table is only written once every token reached a terminal outcome.
    """
    # -----------------------------
    # Init metrics
    # -----------------------------
    metrics = MetricsContext.for_job(cfg.contract_address, cfg.job_name)

    # -----------------------------
    # RPC infra (SetupError aborts before any fetch)
    # -----------------------------
    client = None
    if fetch_owner is None:
        client = OwnerRpcClient.from_config(cfg)
        fetch_owner = client.fetch_owner

    try:
        if client is not None:
            await client.connect()

        fetcher = ItemFetcher(
            fetch_owner,
            cfg.retry_policy(),
            CallClassifier(cfg.absence_signatures),
            call_timeout=cfg.rpc_call_timeout,
            sleep=sleep,
            metrics=metrics,
        )
        sink = build_sink(cfg)
        scheduler = BatchScheduler(
            fetcher,
            sink,
            batch_size=cfg.batch_size,
            pacing_delay=cfg.pacing_delay,
            sleep=sleep,
            progress=progress,
            metrics=metrics,
        )

        log.info("▶️ job_start", extra={"run_id": cfg.run_id, **cfg.log_fields()})

        try:
            summary = await scheduler.run(cfg.start_token_id, cfg.end_token_id)
        except BaseException:
            await sink.abort()
            raise
    finally:
        if client is not None:
            await client.close()

    rows = await sink.finalize()

    log.info(
        "🏁 job_done",
        extra={
            "run_id": cfg.run_id,
            "total": summary.total,
            "owned": summary.owned,
            "absent": summary.absent,
            "failed": summary.failed,
            "batches": summary.batches,
            "rows": rows,
            "elapsed_sec": summary.elapsed_sec,
        },
    )
    return summary


def main(env: dict | None = None) -> int:
    try:
        cfg = JobConfig.from_env(env)
    except SetupError as e:
        log.error("❌ config_invalid", extra={"error": str(e)})
        return EXIT_SETUP_ERROR

    setup_logging(cfg.log_level)

    # Prometheus metrics endpoint
    if cfg.metrics_port > 0:
        start_http_server(cfg.metrics_port)

    bar = tqdm(total=cfg.token_count, unit="token", disable=not cfg.progress_bar)
    try:
        summary = asyncio.run(run_job(cfg, progress=bar))
    except SetupError as e:
        log.error("❌ setup_failed", extra={"error": str(e)})
        return EXIT_SETUP_ERROR
    except KeyboardInterrupt:
        log.warning("🛑 job_interrupted", extra={"run_id": cfg.run_id})
        return EXIT_INTERRUPTED
    finally:
        bar.close()

    if summary.failed:
        log.warning(
            "⚠️ job_finished_with_failures",
            extra={"failed": summary.failed, "error_log": str(cfg.error_log_path)},
        )
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
