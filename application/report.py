"""Import report serialization and summary logging."""

import json
import logging
from pathlib import Path

from application.constants import EXIT_OK, EXIT_PARTIAL_FAILURE
from domain.schemas import ImportReport

logger = logging.getLogger(__name__)


def serialize_report(report: ImportReport, report_path: Path) -> Path:
    """Write the run report (counts, per-node outcomes, unresolved codes) as JSON."""
    payload = {
        "total_input": report.total_input,
        "succeeded": report.succeeded,
        "failed": report.failed,
        "cached": report.cached,
        "unresolved_codes": report.unresolved_codes,
        "errors": report.errors,
        "results": [r.model_dump(mode="json") for r in report.results],
    }

    report_path.parent.mkdir(parents=True, exist_ok=True)
    with report_path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)

    logger.info("Saved import report: %s", report_path)
    return report_path


def exit_code_for(report: ImportReport) -> int:
    if report.failed or report.unresolved_codes:
        return EXIT_PARTIAL_FAILURE
    return EXIT_OK


def log_import_summary(report: ImportReport, report_path: Path | None = None, max_errors: int = 20) -> None:
    """
    Log a concise, human-readable import summary.

    Args:
        report: Run report
        report_path: Path to the report JSON file (optional)
        max_errors: How many per-node errors to list before truncating
    """
    logger.info("=== Import Summary ===")
    logger.info("Input nodes: %d", report.total_input)
    logger.info("Successfully imported: %d (already in ledger: %d)", report.succeeded, report.cached)
    logger.info("Failed: %d", report.failed)

    if report.errors:
        logger.info("--- Failures ---")
        for i, (code, error) in enumerate(report.errors.items()):
            if i >= max_errors:
                logger.info("... and %d more (see report)", len(report.errors) - max_errors)
                break
            logger.info("%s: %s", code, error)

    if report.unresolved_codes:
        logger.warning(
            "Unresolved (no processing order, likely a cycle): %s",
            ", ".join(report.unresolved_codes),
        )

    if report_path is not None:
        logger.info("--- Artifacts ---")
        logger.info("Report JSON: %s", report_path)
