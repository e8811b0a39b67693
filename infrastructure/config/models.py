"""Configuration models (Pydantic classes)."""

from enum import Enum
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, model_validator

from infrastructure.constants import DEFAULT_LEDGER_FILE

UrlTransformation = Literal["lowercase", "replace-spaces", "remove-special-chars"]


class MissingParentPolicy(str, Enum):
    """What to do with a node whose parent exists in the input but is not completed."""

    STRICT = "strict"
    FALLBACK_TO_DEFAULT = "fallback_to_default"


class CatalogConfig(BaseModel):
    """Catalog (BigCommerce) API connection settings."""

    store_hash: str = Field(..., min_length=1)
    api_token: str = Field(..., min_length=1, repr=False)
    api_version: str = "v3"
    base_url: str | None = Field(
        default=None,
        description="Override the API root (defaults to https://api.bigcommerce.com/stores/<hash>/<version>).",
    )
    timeout_s: float = Field(default=30.0, gt=0)

    @property
    def api_root(self) -> str:
        if self.base_url:
            return self.base_url.rstrip("/")
        return f"https://api.bigcommerce.com/stores/{self.store_hash}/{self.api_version}"


class ImportConfig(BaseModel):
    """Target tree and parent resolution settings."""

    category_tree_id: PositiveInt
    parent_category_id: PositiveInt | None = Field(
        default=None,
        description="Remote id used as parent for root nodes (and for the fallback policy).",
    )
    missing_parent_policy: MissingParentPolicy = MissingParentPolicy.STRICT


class UrlConfig(BaseModel):
    path: str
    transformations: list[UrlTransformation] = Field(default_factory=list)


class MappingConfig(BaseModel):
    """Templates used to build a category from a node (``${CodeValue}`` style placeholders)."""

    name: str = Field(..., min_length=1)
    description: str = ""
    url: UrlConfig | None = None
    is_visible: bool = True


class RateLimitConfig(BaseModel):
    # 4 calls per second
    min_interval_s: float = Field(default=0.25, ge=0)
    task_timeout_s: float | None = Field(
        default=None,
        gt=0,
        description="Fail a single queued call after this many seconds instead of blocking the queue.",
    )


class RetryConfig(BaseModel):
    max_attempts: PositiveInt = 5
    base_delay_s: float = Field(default=1.0, ge=0)
    permanent_statuses: list[int] = Field(
        default_factory=list,
        description="HTTP statuses that are never retried. Empty means every failure is retried.",
    )


class RunConfig(BaseModel):
    """
    Runtime configuration.
    - Loaded from the import config file (YAML or JSON)
    - Environment overrides applied by the configuration loader
    - Consumed by the catalog client, the ledger and the processor
    """

    catalog: CatalogConfig
    import_: ImportConfig = Field(..., alias="import")
    mapping: MappingConfig
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)

    database: Path = Field(
        default_factory=lambda: DEFAULT_LEDGER_FILE,
        description="SQLite file holding the progress ledger (':memory:' for throwaway runs).",
    )
    source_file: Path | None = Field(default=None, description="Taxonomy source file (JSON, CSV or Excel).")

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def _validate(self) -> "RunConfig":
        bad = [s for s in self.retry.permanent_statuses if not 100 <= s <= 599]
        if bad:
            raise ValueError(f"retry.permanent_statuses must be HTTP status codes, got {bad}")
        return self

    def masked_dump(self) -> dict:
        """JSON-ready dump with secrets masked (for the run snapshot)."""
        data = self.model_dump(mode="json", by_alias=True)
        data["catalog"]["api_token"] = "***"
        return data
