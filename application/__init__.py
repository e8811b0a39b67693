"""
Application layer: Use cases and workflow orchestration.

This layer coordinates between domain logic and infrastructure,
implementing the hierarchical import workflow.

This module exposes high-level entry points for importing a taxonomy into the catalog.
"""

from application.importer import import_taxonomy, run_import
from application.processor import HierarchicalProcessor, ParentNotFoundError, ParentNotReadyError
from application.report import exit_code_for, log_import_summary, serialize_report

__all__ = [
    # Main workflows
    "import_taxonomy",
    "run_import",
    "HierarchicalProcessor",
    # Per-node dependency errors
    "ParentNotFoundError",
    "ParentNotReadyError",
    # Reporting
    "serialize_report",
    "log_import_summary",
    "exit_code_for",
]
