"""Inspect a progress ledger file: per-status counts and records of one status."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from domain.schemas import ImportStatus
from infrastructure.ledger import ProgressLedger


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description=__doc__)
    p.add_argument("database", type=str, help="Path to the ledger SQLite file")
    p.add_argument(
        "--status",
        type=str,
        default=None,
        choices=[s.value for s in ImportStatus],
        help="List the records with this status",
    )
    p.add_argument("--limit", type=int, default=50, help="Max records to list (default: 50)")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    path = Path(args.database)
    if not path.exists():
        # opening would silently create an empty ledger
        print(f"Ledger not found: {path}", file=sys.stderr)
        return 1

    with ProgressLedger(path) as ledger:
        counts = ledger.count_by_status()
        print(f"Ledger: {path}")
        for status, n in counts.items():
            print(f"  {status.value:<10} {n}")

        if args.status:
            records = ledger.list_by_status(args.status)
            print(f"\n{len(records)} record(s) with status={args.status}:")
            for rec in records[: args.limit]:
                detail = rec.remote_id if rec.remote_id is not None else (rec.error or "")
                print(f"  {rec.code:<12} parent={rec.parent_code or '-':<10} retries={rec.retry_count}  {detail}")
            if len(records) > args.limit:
                print(f"  ... {len(records) - args.limit} more")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
