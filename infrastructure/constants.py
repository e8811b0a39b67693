from pathlib import Path

# Repo-root conventional directories/files (overrideable via CLI flags or the import config)
CONFIG_DIR = Path("configs")
IMPORT_CONFIG_FILE = CONFIG_DIR / "import.yaml"

DEFAULT_LEDGER_FILE = Path("import-progress.db")

# Environment variables that override values from the config file
ENV_STORE_HASH = "CATALOG_STORE_HASH"
ENV_API_TOKEN = "CATALOG_API_TOKEN"
