"""Factory for creating catalog clients."""

import logging

from infrastructure.config.models import RunConfig

from .base import CatalogClient
from .bigcommerce import BigCommerceClient
from .mock import MockCatalogClient

logger = logging.getLogger(__name__)


def make_client(cfg: RunConfig, *, use_mock: bool = False) -> CatalogClient:
    """
    Factory function to create the catalog client.
    Args:
        cfg: Run configuration containing catalog, rate-limit and retry settings
        use_mock: If True, use the MockCatalogClient (dry run, no network)
    Returns:
        An instance of CatalogClient.
    """
    if use_mock:
        return MockCatalogClient()

    logger.info(
        "Catalog client: api_root=%s, min_interval=%.3fs, max_attempts=%d",
        cfg.catalog.api_root,
        cfg.rate_limit.min_interval_s,
        cfg.retry.max_attempts,
    )
    return BigCommerceClient.from_cfg(cfg)
