"""SQLite-backed progress ledger: one durable record per node code."""

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from domain.schemas import ImportStatus, ProgressRecord

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS import_progress (
    code TEXT PRIMARY KEY,
    parent_code TEXT,
    status TEXT NOT NULL,
    remote_id INTEGER,
    error TEXT,
    retry_count INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_parent_code ON import_progress(parent_code);
CREATE INDEX IF NOT EXISTS idx_status ON import_progress(status);
"""

# Fields that update() may change; code and created_at are immutable
MUTABLE_FIELDS = frozenset({"parent_code", "status", "remote_id", "error", "retry_count"})


class LedgerError(RuntimeError):
    """Base class for ledger failures."""


class DuplicateRecordError(LedgerError):
    pass


class RecordNotFoundError(LedgerError):
    pass


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


class ProgressLedger:
    """
    Durable keyed-by-code store of per-node processing status.

    Writes are committed immediately, so a crash never loses a finished node.
    Only one process may use a ledger file at a time.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = str(path)
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)

        self.conn = sqlite3.connect(self.path)
        self.conn.row_factory = sqlite3.Row
        self._init_schema()

    def _init_schema(self) -> None:
        try:
            self.conn.execute("PRAGMA journal_mode = WAL")
            with self.conn:
                self.conn.executescript(_SCHEMA)
        except sqlite3.Error as e:
            logger.error("Failed to initialize ledger at %s: %s", self.path, e)
            raise
        logger.info("Progress ledger ready: %s", self.path)

    @staticmethod
    def _to_record(row: sqlite3.Row) -> ProgressRecord:
        return ProgressRecord(
            code=row["code"],
            parent_code=row["parent_code"],
            status=ImportStatus(row["status"]),
            remote_id=row["remote_id"],
            error=row["error"],
            retry_count=row["retry_count"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def insert(self, record: ProgressRecord) -> ProgressRecord:
        """Create the record for a new code; created_at/updated_at are set here."""
        now = _utcnow()
        stored = record.model_copy(update={"created_at": now, "updated_at": now})
        try:
            with self.conn:
                self.conn.execute(
                    """
                    INSERT INTO import_progress (
                        code, parent_code, status, remote_id, error, retry_count, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        stored.code,
                        stored.parent_code,
                        stored.status.value,
                        stored.remote_id,
                        stored.error,
                        stored.retry_count,
                        stored.created_at,
                        stored.updated_at,
                    ),
                )
        except sqlite3.IntegrityError as e:
            raise DuplicateRecordError(f"Progress record already exists for code {record.code!r}") from e
        return stored

    def update(self, code: str, **fields: Any) -> ProgressRecord:
        """
        Update the given mutable fields of an existing record and refresh updated_at.

        The merged record is validated before it is written, so status/remote_id/error
        stay consistent.

        Raises:
            ValueError: On unknown fields or an inconsistent merged record
            RecordNotFoundError: If no record exists for ``code``
        """
        unknown = set(fields) - MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update field(s) {sorted(unknown)} of progress record {code!r}")

        current = self.get(code)
        if current is None:
            raise RecordNotFoundError(f"No progress record for code {code!r}")

        if "status" in fields:
            fields["status"] = ImportStatus(fields["status"])
        merged = ProgressRecord.model_validate(
            {**current.model_dump(), **fields, "updated_at": _utcnow()}
        )

        columns = sorted(fields)
        values = [
            merged.status.value if col == "status" else getattr(merged, col)
            for col in columns
        ]
        assignments = ", ".join(f"{col} = ?" for col in [*columns, "updated_at"])
        with self.conn:
            self.conn.execute(
                f"UPDATE import_progress SET {assignments} WHERE code = ?",
                (*values, merged.updated_at, code),
            )
        return merged

    def get(self, code: str) -> ProgressRecord | None:
        row = self.conn.execute("SELECT * FROM import_progress WHERE code = ?", (code,)).fetchone()
        return self._to_record(row) if row is not None else None

    def list_by_status(self, status: ImportStatus | str) -> list[ProgressRecord]:
        rows = self.conn.execute(
            "SELECT * FROM import_progress WHERE status = ? ORDER BY created_at, code",
            (ImportStatus(status).value,),
        ).fetchall()
        return [self._to_record(r) for r in rows]

    def count_by_status(self) -> dict[ImportStatus, int]:
        counts = {s: 0 for s in ImportStatus}
        for row in self.conn.execute("SELECT status, COUNT(*) AS n FROM import_progress GROUP BY status"):
            counts[ImportStatus(row["status"])] = int(row["n"])
        return counts

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> "ProgressLedger":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
