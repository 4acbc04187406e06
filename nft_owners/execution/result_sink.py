import asyncio
from enum import Enum

from nft_owners.errors import DuplicateOutcomeError
from nft_owners.execution.outcome import Failed, Outcome
from nft_owners.logging import log
from nft_owners.storage import CsvTableWriter, DiagnosticLog, OutcomeJournal


class SinkMode(str, Enum):
    BUFFERED = "buffered"
    INCREMENTAL = "incremental"


# ResultSink - the only state shared across fetch tasks
# append-only while the run is live, sorted only on read
class ResultSink:
    def __init__(
        self,
        writer: CsvTableWriter,
        diagnostics: DiagnosticLog,
        mode: SinkMode = SinkMode.BUFFERED,
    ):
        self.writer = writer
        self.diagnostics = diagnostics
        self.mode = SinkMode(mode)
        self.journal = (
            OutcomeJournal(writer.path.with_name(writer.path.name + ".partial"))
            if self.mode is SinkMode.INCREMENTAL
            else None
        )

        self._results: dict[int, Outcome] = {}
        self._lock = asyncio.Lock()
        self._closed = False

    async def record(self, outcome: Outcome):
        async with self._lock:
            if self._closed:
                raise RuntimeError("ResultSink already closed")
            if outcome.token_id in self._results:
                raise DuplicateOutcomeError(
                    f"token {outcome.token_id} already has outcome "
                    f"{self._results[outcome.token_id].status.value}"
                )

            self._results[outcome.token_id] = outcome

            if self.journal is not None:
                self.journal.append(outcome)
            if isinstance(outcome, Failed):
                self.diagnostics.append(outcome.token_id, outcome.reason)

    def __len__(self) -> int:
        return len(self._results)

    def token_ids(self) -> set[int]:
        return set(self._results)

    def outcomes(self) -> list[Outcome]:
        return [self._results[k] for k in sorted(self._results)]

    async def finalize(self) -> int:
        async with self._lock:
            self._closed = True
            rows = self.writer.write(self.outcomes())
            if self.journal is not None:
                self.journal.discard()

        log.info(
            "✅ table_written",
            extra={
                "path": str(self.writer.path),
                "rows": rows,
                "outcomes": len(self._results),
                "mode": self.mode.value,
            },
        )
        return rows

    async def abort(self):
        """
        Drop everything not yet persisted; the main table is left untouched.
        """
        async with self._lock:
            self._closed = True
            if self.journal is not None:
                self.journal.discard()

        log.warning(
            "🛑 sink_aborted",
            extra={"path": str(self.writer.path), "outcomes": len(self._results)},
        )
