"""Configuration loading from YAML (or JSON) files."""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from infrastructure.config.models import RunConfig
from infrastructure.constants import ENV_API_TOKEN, ENV_STORE_HASH

logger = logging.getLogger(__name__)


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML file and return as dict."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Expected YAML dict in {path}, got {type(data)}")

    return data


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Let CATALOG_* environment variables (e.g. from .env) override the catalog credentials."""
    catalog = dict(data.get("catalog") or {})

    store_hash = os.environ.get(ENV_STORE_HASH)
    if store_hash:
        catalog["store_hash"] = store_hash

    api_token = os.environ.get(ENV_API_TOKEN)
    if api_token:
        catalog["api_token"] = api_token
        logger.debug("Using catalog API token from %s", ENV_API_TOKEN)

    data["catalog"] = catalog
    return data


def load_run_config(config_path: Path) -> RunConfig:
    """
    Load the import config file and construct a validated RunConfig.

    Relative paths (ledger database, source file) are kept as given, i.e. relative
    to the working directory, matching how the CLI resolves them.

    Raises:
        FileNotFoundError: If the config file does not exist
        ValueError: If the file cannot be parsed or fails validation
    """
    raw = _load_yaml(config_path)

    # catalog may come entirely from the environment, so it is left to model validation
    for key in ("import", "mapping"):
        if key not in raw:
            raise ValueError(f"{config_path} missing required key: {key}")

    data = _apply_env_overrides(raw)

    try:
        cfg = RunConfig.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration in {config_path}: {e}") from e

    logger.debug(
        "Loaded config: tree_id=%s, default_parent=%s, policy=%s, ledger=%s",
        cfg.import_.category_tree_id,
        cfg.import_.parent_category_id,
        cfg.import_.missing_parent_policy.value,
        cfg.database,
    )
    return cfg
