"""Progress ledger: durable per-code import status (resumable, idempotent runs)."""

from infrastructure.ledger.sqlite import (
    DuplicateRecordError,
    LedgerError,
    ProgressLedger,
    RecordNotFoundError,
)

__all__ = [
    "ProgressLedger",
    "LedgerError",
    "DuplicateRecordError",
    "RecordNotFoundError",
]
