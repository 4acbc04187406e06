import os
import uuid
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from nft_owners.classifier import DEFAULT_ABSENCE_SIGNATURES
from nft_owners.errors import ConfigError
from nft_owners.execution.result_sink import SinkMode
from nft_owners.retry_policy import RetryPolicy

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


# -----------------------------
# env parsing helpers
# -----------------------------
def _env_str(env: dict, name: str, default: str) -> str:
    value = env.get(name)
    if value is None or value.strip() == "":
        return default
    return value.strip()


def _env_int(env: dict, name: str, default: int) -> int:
    raw = _env_str(env, name, str(default))
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(env: dict, name: str, default: float) -> float:
    raw = _env_str(env, name, str(default))
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None


def _env_bool(env: dict, name: str, default: bool) -> bool:
    raw = _env_str(env, name, "true" if default else "false").lower()
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def _env_list(env: dict, name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return tuple(default)
    return tuple(s.strip() for s in raw.split(",") if s.strip())


@dataclass(frozen=True)
class JobConfig:
    """
    Everything the job needs, read once at startup and passed down explicitly.
    """

    # -------- RPC / contract --------
    rpc_url: str = "https://evm.astar.network"
    contract_address: str = "0x2A314f5611BA26D947b346537AEB685f911fc26A"
    abi_path: Path = Path("ContractABI.json")
    rpc_call_timeout: float = 10.0

    # -------- range / pacing --------
    start_token_id: int = 1
    end_token_id: int = 1000
    batch_size: int = 5
    pacing_delay: float = 1.5

    # -------- retry --------
    max_attempts: int = 11
    retry_base_delay: float = 1.0
    retry_growth_factor: float = 2.0
    retry_max_delay: float = 8.0
    absence_signatures: tuple[str, ...] = DEFAULT_ABSENCE_SIGNATURES

    # -------- output --------
    output_path: Path = Path("nft_holders.csv")
    error_log_path: Path = Path("error.log")
    sink_mode: SinkMode = SinkMode.BUFFERED
    output_unresolved: bool = True
    absent_owner: str = "nonexistent"
    failed_owner: str = "error"
    output_merge_existing: bool = False

    # -------- runtime --------
    job_name: str = "nft_owners"
    run_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    metrics_port: int = 0
    progress_bar: bool = True
    log_level: str = "INFO"

    def __post_init__(self):
        self.validate()

    def validate(self):
        if self.start_token_id < 0:
            raise ConfigError(f"START_TOKEN_ID {self.start_token_id} must be >= 0")
        if self.start_token_id > self.end_token_id:
            raise ConfigError(
                f"START_TOKEN_ID {self.start_token_id} > END_TOKEN_ID {self.end_token_id}"
            )
        if self.batch_size < 1:
            raise ConfigError(f"BATCH_SIZE {self.batch_size} must be >= 1")
        if self.pacing_delay < 0:
            raise ConfigError(f"PACING_DELAY {self.pacing_delay} must be >= 0")
        if self.rpc_call_timeout <= 0:
            raise ConfigError(f"RPC_CALL_TIMEOUT {self.rpc_call_timeout} must be > 0")
        if not self.absence_signatures:
            raise ConfigError("ABSENCE_SIGNATURES must not be empty")
        try:
            self.retry_policy()
        except ValueError as e:
            raise ConfigError(f"invalid retry settings: {e}") from None

    @property
    def token_count(self) -> int:
        return self.end_token_id - self.start_token_id + 1

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.max_attempts,
            base_delay=self.retry_base_delay,
            growth_factor=self.retry_growth_factor,
            max_delay=self.retry_max_delay,
        )

    @classmethod
    def from_env(cls, env: dict | None = None, *, dotenv: bool = True) -> "JobConfig":
        if env is None:
            if dotenv:
                load_dotenv()
            env = dict(os.environ)

        d = cls.__dataclass_fields__

        raw_mode = _env_str(env, "SINK_MODE", SinkMode.BUFFERED.value).lower()
        try:
            sink_mode = SinkMode(raw_mode)
        except ValueError:
            raise ConfigError(
                f"SINK_MODE must be one of {[m.value for m in SinkMode]}, got {raw_mode!r}"
            ) from None

        return cls(
            # RPC / contract (RPC_URL_ASTAR kept as fallback name)
            rpc_url=_env_str(env, "RPC_URL", _env_str(env, "RPC_URL_ASTAR", d["rpc_url"].default)),
            contract_address=_env_str(env, "CONTRACT_ADDRESS", d["contract_address"].default),
            abi_path=Path(_env_str(env, "ABI_PATH", str(d["abi_path"].default))),
            rpc_call_timeout=_env_float(env, "RPC_CALL_TIMEOUT", d["rpc_call_timeout"].default),

            # range / pacing
            start_token_id=_env_int(env, "START_TOKEN_ID", d["start_token_id"].default),
            end_token_id=_env_int(env, "END_TOKEN_ID", d["end_token_id"].default),
            batch_size=_env_int(env, "BATCH_SIZE", d["batch_size"].default),
            pacing_delay=_env_float(env, "PACING_DELAY", d["pacing_delay"].default),

            # retry
            max_attempts=_env_int(env, "MAX_ATTEMPTS", d["max_attempts"].default),
            retry_base_delay=_env_float(env, "RETRY_BASE_DELAY", d["retry_base_delay"].default),
            retry_growth_factor=_env_float(env, "RETRY_GROWTH_FACTOR", d["retry_growth_factor"].default),
            retry_max_delay=_env_float(env, "RETRY_MAX_DELAY", d["retry_max_delay"].default),
            absence_signatures=_env_list(env, "ABSENCE_SIGNATURES", DEFAULT_ABSENCE_SIGNATURES),

            # output
            output_path=Path(_env_str(env, "OUTPUT_PATH", str(d["output_path"].default))),
            error_log_path=Path(_env_str(env, "ERROR_LOG_PATH", str(d["error_log_path"].default))),
            sink_mode=sink_mode,
            output_unresolved=_env_bool(env, "OUTPUT_UNRESOLVED", d["output_unresolved"].default),
            absent_owner=_env_str(env, "ABSENT_OWNER", d["absent_owner"].default),
            failed_owner=_env_str(env, "FAILED_OWNER", d["failed_owner"].default),
            output_merge_existing=_env_bool(env, "OUTPUT_MERGE_EXISTING", d["output_merge_existing"].default),

            # runtime
            job_name=_env_str(env, "JOB_NAME", d["job_name"].default),
            run_id=_env_str(env, "RUN_ID", str(uuid.uuid4())),
            metrics_port=_env_int(env, "METRICS_PORT", d["metrics_port"].default),
            progress_bar=_env_bool(env, "PROGRESS_BAR", d["progress_bar"].default),
            log_level=_env_str(env, "LOG_LEVEL", d["log_level"].default).upper(),
        )

    def log_fields(self) -> dict:
        return {
            "rpc_url": self.rpc_url.split("?")[0],
            "contract": self.contract_address,
            "start_id": self.start_token_id,
            "end_id": self.end_token_id,
            "batch_size": self.batch_size,
            "pacing_delay": self.pacing_delay,
            "max_attempts": self.max_attempts,
            "sink_mode": self.sink_mode.value,
            "output": str(self.output_path),
        }
