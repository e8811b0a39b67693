"""
Infrastructure layer: External dependencies and I/O boundaries.

Contains adapters for:
- Catalog API clients (BigCommerce, Mock) with rate limiting and retries
- Configuration loading (YAML, environment)
- Progress ledger (SQLite)
- Source data reading (JSON, CSV, Excel)
- Observability (logging)

This is the only layer that performs I/O operations.
"""

# Most commonly used - exposed at top level for convenience
from infrastructure.catalog import CatalogClient, make_client
from infrastructure.config import (
    MissingParentPolicy,
    RunConfig,
    load_run_config,
)
from infrastructure.ledger import ProgressLedger

__all__ = [
    # Catalog clients (most commonly used)
    "make_client",
    "CatalogClient",
    # Configuration (most commonly used)
    "load_run_config",
    "RunConfig",
    "MissingParentPolicy",
    # Ledger
    "ProgressLedger",
]
