"""
Configuration management: models, loading, and validation.

Handles:
- RunConfig: Main import configuration
- Catalog connection, rate-limit and retry settings
- Field-mapping templates
- Environment variable overrides

The loader module performs file I/O; models are pure Pydantic classes.
"""

from infrastructure.config.loader import load_run_config
from infrastructure.config.models import (
    CatalogConfig,
    ImportConfig,
    MappingConfig,
    MissingParentPolicy,
    RateLimitConfig,
    RetryConfig,
    RunConfig,
    UrlConfig,
)

__all__ = [
    # Main config (most commonly used)
    "RunConfig",
    "load_run_config",
    # Enums
    "MissingParentPolicy",
    # Sections
    "CatalogConfig",
    "ImportConfig",
    "MappingConfig",
    "UrlConfig",
    "RateLimitConfig",
    "RetryConfig",
]
