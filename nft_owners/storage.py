import csv
import os
from pathlib import Path
from typing import Iterable

from nft_owners.execution.outcome import Absent, Failed, Outcome, Owned
from nft_owners.logging import log

CSV_HEADER = ["Owner Address", "Token ID"]


def _atomic_write_rows(path: Path, header: list[str], rows: Iterable[list]):
    """
    Write to a sibling temp file then rename over the target, so readers never
    see a truncated table.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    try:
        with open(tmp, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f, lineterminator="\n")
            writer.writerow(header)
            writer.writerows(rows)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


# -----------------------------
# Main table: Owner Address, Token ID
# -----------------------------
class CsvTableWriter:
    def __init__(
        self,
        path: str | Path,
        *,
        include_unresolved: bool = True,
        absent_owner: str = "nonexistent",
        failed_owner: str = "error",
        merge_existing: bool = False,
    ):
        self.path = Path(path)
        self.include_unresolved = include_unresolved
        self.absent_owner = absent_owner
        self.failed_owner = failed_owner
        self.merge_existing = merge_existing

    def owner_cell(self, outcome: Outcome) -> str | None:
        if isinstance(outcome, Owned):
            return outcome.owner
        if not self.include_unresolved:
            return None
        if isinstance(outcome, Absent):
            return self.absent_owner
        if isinstance(outcome, Failed):
            return self.failed_owner
        raise TypeError(f"unknown outcome type: {type(outcome).__name__}")

    def read_existing(self) -> dict[int, str]:
        if not self.path.exists() or self.path.stat().st_size == 0:
            return {}

        rows = {}
        with open(self.path, newline="", encoding="utf-8") as f:
            reader = csv.reader(f)
            for line_no, row in enumerate(reader, start=1):
                if not row or row == CSV_HEADER:
                    continue
                if len(row) != 2:
                    log.warning(
                        "existing_row_skipped",
                        extra={"path": str(self.path), "line": line_no, "row": row},
                    )
                    continue
                owner, token_id = row
                try:
                    rows[int(token_id)] = owner
                except ValueError:
                    log.warning(
                        "existing_row_skipped",
                        extra={"path": str(self.path), "line": line_no, "row": row},
                    )
        return rows

    def write(self, outcomes: Iterable[Outcome]) -> int:
        """
        Rewrite the table sorted by token id ascending. Returns the data row count.

        When merging, a Failed outcome keeps the existing row. An Absent outcome
        replaces it (burned token) or drops it when unresolved rows are omitted.
        """
        table = self.read_existing() if self.merge_existing else {}

        for outcome in outcomes:
            if isinstance(outcome, Failed) and outcome.token_id in table:
                continue
            owner = self.owner_cell(outcome)
            if owner is None:
                table.pop(outcome.token_id, None)
                continue
            table[outcome.token_id] = owner

        rows = [[table[token_id], token_id] for token_id in sorted(table)]
        _atomic_write_rows(self.path, CSV_HEADER, rows)
        return len(rows)


# -----------------------------
# Arrival-order journal (incremental sink mode)
# -----------------------------
class OutcomeJournal:
    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._fh = None

    def open(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fh = open(self.path, "w", newline="", encoding="utf-8")
        self._writer = csv.writer(self._fh, lineterminator="\n")
        self._writer.writerow(["status", "token_id", "detail"])

    def append(self, outcome: Outcome):
        if self._fh is None:
            self.open()
        detail = getattr(outcome, "owner", None) or getattr(outcome, "reason", "")
        self._writer.writerow([outcome.status.value, outcome.token_id, detail])
        self._fh.flush()

    def discard(self):
        if self._fh is not None:
            self._fh.close()
            self._fh = None
        self.path.unlink(missing_ok=True)


# -----------------------------
# Diagnostic log: one line per Failed token
# -----------------------------
class DiagnosticLog:
    def __init__(self, path: str | Path):
        self.path = Path(path)

    @staticmethod
    def format_line(token_id: int, message: str) -> str:
        flat = " ".join(str(message).splitlines())
        return f"Error fetching owner for token ID {token_id}: {flat}\n"

    def append(self, token_id: int, message: str):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(self.format_line(token_id, message))
