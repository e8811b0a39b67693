"""I/O utilities: filesystem checks and taxonomy source loading."""

from infrastructure.io.datasets import read_records, read_table
from infrastructure.io.fs import ensure_exists

__all__ = [
    "ensure_exists",
    "read_table",
    "read_records",
]
