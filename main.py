"""
CLI entrypoint for the hierarchical taxonomy import.

This script performs the following steps:
- loads .env (optional) and the import config (configs/import.yaml)
- creates a per-run output folder under outputs/
- loads and validates the taxonomy source file
- imports every node into the catalog, parents before children, through the progress ledger
- saves a config snapshot and the import report to JSON
- logs a human-readable summary and exits non-zero on partial failure
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

from application import exit_code_for, import_taxonomy, log_import_summary, serialize_report
from application.constants import (
    CONFIG_SNAPSHOT_FILENAME,
    EXIT_STRUCTURAL_FAILURE,
    LOG_FILENAME,
    MOCK_LEDGER_FILENAME,
    OUTPUT_ROOT,
    REPORT_FILENAME,
)
from domain.taxonomy import parse_taxonomy_nodes
from infrastructure.config import load_run_config
from infrastructure.constants import IMPORT_CONFIG_FILE
from infrastructure.io import ensure_exists, read_records
from infrastructure.observability import configure_logging, make_run_tag, set_log_context

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Import a hierarchical taxonomy into the catalog")
    p.add_argument("--config", default=str(IMPORT_CONFIG_FILE), help="Import config, YAML or JSON (default: %(default)s)")
    p.add_argument("--source", default=None, help="Taxonomy source file (JSON/CSV/Excel); overrides source_file")
    p.add_argument("--database", default=None, help="Progress ledger SQLite file; overrides database")
    p.add_argument("--env", default=".env", help="Path to .env file (default: %(default)s, skipped if missing)")
    p.add_argument(
        "--mock",
        action="store_true",
        help="Dry run against the mock catalog client (no network; throwaway ledger in the run folder unless --database is given)",
    )
    p.add_argument("--console-level", default="INFO", choices=LOG_LEVELS, help="Console log level")
    p.add_argument("--file-level", default="DEBUG", choices=LOG_LEVELS, help="Run log file level")
    return p.parse_args(argv)


def _make_run_dir(tree_id: int, *, mock: bool) -> tuple[str, Path]:
    """outputs/<timestamp>_tree<id>[_mock]/"""
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    run_id = f"{stamp}_tree{tree_id}" + ("_mock" if mock else "")
    run_dir = OUTPUT_ROOT / run_id
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_id, run_dir


def run(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    env_file = Path(args.env)
    if env_file.exists():
        load_dotenv(env_file, override=True)

    config_path = ensure_exists(Path(args.config), "import config")
    cfg = load_run_config(config_path)

    overrides: dict[str, Path] = {}
    if args.source:
        overrides["source_file"] = Path(args.source)
    if args.database:
        overrides["database"] = Path(args.database)
    if overrides:
        cfg = cfg.model_copy(update=overrides)

    if cfg.source_file is None:
        raise ValueError("No taxonomy source file: pass --source or set source_file in the config")

    run_id, run_dir = _make_run_dir(cfg.import_.category_tree_id, mock=args.mock)

    log_path = run_dir / LOG_FILENAME
    configure_logging(
        log_file=log_path,
        console_level=getattr(logging, args.console_level),
        file_level=getattr(logging, args.file_level),
    )
    set_log_context(run_id_full=run_id, tree_id=cfg.import_.category_tree_id)

    logger.info("Starting import: run_id=%s (run_tag=%s)", run_id, make_run_tag(run_id))
    logger.info("Run output directory: %s", run_dir)

    if args.mock and not args.database:
        # mock ids must never land in the real ledger, where they would count as imported
        cfg = cfg.model_copy(update={"database": run_dir / MOCK_LEDGER_FILENAME})
        logger.info("Dry run: using throwaway ledger %s", cfg.database)

    (run_dir / CONFIG_SNAPSHOT_FILENAME).write_text(
        json.dumps(cfg.masked_dump(), ensure_ascii=False, indent=2, default=str),
        encoding="utf-8",
    )

    logger.info("Loading taxonomy codes from %s...", cfg.source_file)
    nodes = parse_taxonomy_nodes(read_records(cfg.source_file))

    report = import_taxonomy(cfg, nodes, use_mock=bool(args.mock))

    report_path = serialize_report(report, run_dir / REPORT_FILENAME)
    log_import_summary(report, report_path)
    logger.info("Detailed log: %s", log_path)

    return exit_code_for(report)


def main() -> None:
    try:
        code = run()
    except Exception as e:
        # before configure_logging this still reaches stderr via logging's last-resort handler
        logger.error("Error in main process: %s", e, exc_info=True)
        code = EXIT_STRUCTURAL_FAILURE
    sys.exit(code)


if __name__ == "__main__":
    main()
