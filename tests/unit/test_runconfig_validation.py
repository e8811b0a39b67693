from pathlib import Path

import pytest

from infrastructure.config import load_run_config
from infrastructure.config.models import (
    CatalogConfig,
    ImportConfig,
    MappingConfig,
    MissingParentPolicy,
    RetryConfig,
    RunConfig,
)

VALID_YAML = """
catalog:
  store_hash: abc123
  api_token: test-token
import:
  category_tree_id: 1
mapping:
  name: "${CodeDescription}"
  description: "<p>${CodeNotes}</p>"
  url:
    path: "/${CodeValue}/${CodeDescription}/"
    transformations: [lowercase, replace-spaces]
database: import-progress.db
"""


def _write(tmp_path: Path, text: str, name: str = "import.yaml") -> Path:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_are_applied_when_sections_are_omitted(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CATALOG_API_TOKEN", raising=False)
    monkeypatch.delenv("CATALOG_STORE_HASH", raising=False)

    cfg = load_run_config(_write(tmp_path, VALID_YAML))

    assert cfg.import_.category_tree_id == 1
    assert cfg.import_.parent_category_id is None
    assert cfg.import_.missing_parent_policy is MissingParentPolicy.STRICT
    assert cfg.rate_limit.min_interval_s == 0.25
    assert cfg.retry.max_attempts == 5
    assert cfg.retry.base_delay_s == 1.0
    assert cfg.retry.permanent_statuses == []
    assert cfg.mapping.is_visible is True
    assert cfg.catalog.api_root == "https://api.bigcommerce.com/stores/abc123/v3"
    assert cfg.database == Path("import-progress.db")


def test_json_config_is_accepted(tmp_path: Path) -> None:
    text = (
        '{"catalog": {"store_hash": "h", "api_token": "t"},'
        ' "import": {"category_tree_id": 7},'
        ' "mapping": {"name": "${CodeDescription}"}}'
    )
    cfg = load_run_config(_write(tmp_path, text, "import.json"))
    assert cfg.import_.category_tree_id == 7


def test_missing_required_section_is_rejected(tmp_path: Path) -> None:
    text = VALID_YAML.replace("import:\n  category_tree_id: 1\n", "")
    with pytest.raises(ValueError, match="missing required key: import"):
        load_run_config(_write(tmp_path, text))


def test_missing_catalog_credentials_are_rejected(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CATALOG_API_TOKEN", raising=False)
    monkeypatch.delenv("CATALOG_STORE_HASH", raising=False)
    text = VALID_YAML.replace("  api_token: test-token\n", "")
    with pytest.raises(ValueError, match="Invalid configuration"):
        load_run_config(_write(tmp_path, text))


def test_environment_overrides_catalog_credentials(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CATALOG_API_TOKEN", "from-env")
    monkeypatch.setenv("CATALOG_STORE_HASH", "envhash")

    cfg = load_run_config(_write(tmp_path, VALID_YAML))

    assert cfg.catalog.api_token == "from-env"
    assert cfg.catalog.store_hash == "envhash"


def test_non_existent_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_run_config(tmp_path / "nope.yaml")


def test_unknown_url_transformation_is_rejected(tmp_path: Path) -> None:
    text = VALID_YAML.replace("[lowercase, replace-spaces]", "[lowercase, reverse]")
    with pytest.raises(ValueError):
        load_run_config(_write(tmp_path, text))


def test_non_positive_tree_and_parent_ids_are_rejected() -> None:
    with pytest.raises(ValueError):
        ImportConfig(category_tree_id=0)
    with pytest.raises(ValueError):
        ImportConfig(category_tree_id=1, parent_category_id=-5)


def test_permanent_statuses_must_be_http_codes() -> None:
    with pytest.raises(ValueError, match="permanent_statuses"):
        RunConfig(
            catalog=CatalogConfig(store_hash="h", api_token="t"),
            import_=ImportConfig(category_tree_id=1),
            mapping=MappingConfig(name="${CodeDescription}"),
            retry=RetryConfig(permanent_statuses=[42]),
        )


def test_masked_dump_hides_api_token() -> None:
    cfg = RunConfig(
        catalog=CatalogConfig(store_hash="h", api_token="secret"),
        import_=ImportConfig(category_tree_id=1),
        mapping=MappingConfig(name="${CodeDescription}"),
    )
    dumped = cfg.masked_dump()
    assert dumped["catalog"]["api_token"] == "***"
    assert dumped["import"]["category_tree_id"] == 1


def test_base_url_override_wins() -> None:
    catalog = CatalogConfig(store_hash="h", api_token="t", base_url="http://localhost:8080/v3/")
    assert catalog.api_root == "http://localhost:8080/v3"
