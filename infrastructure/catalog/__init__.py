"""
Catalog clients.

Implements the remote create-category contract:
- BigCommerce (Category Trees API over httpx, rate limited and retried)
- Mock (dry runs and testing)

All clients implement the CatalogClient interface.
"""

from infrastructure.catalog.base import CatalogClient
from infrastructure.catalog.bigcommerce import BigCommerceClient
from infrastructure.catalog.errors import (
    CatalogApiError,
    CatalogError,
    MalformedResponseError,
    PermanentCatalogError,
)
from infrastructure.catalog.factory import make_client
from infrastructure.catalog.mock import MockCatalogClient
from infrastructure.catalog.retry import backoff_delay, retry_with_backoff
from infrastructure.catalog.scheduler import RequestScheduler

__all__ = [
    # Abstract base
    "CatalogClient",
    # Concrete implementations
    "BigCommerceClient",
    "MockCatalogClient",
    # Factory (most commonly used)
    "make_client",
    # Call plumbing
    "RequestScheduler",
    "retry_with_backoff",
    "backoff_delay",
    # Errors
    "CatalogError",
    "CatalogApiError",
    "PermanentCatalogError",
    "MalformedResponseError",
]
