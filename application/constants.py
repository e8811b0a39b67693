"""Application-level constants."""

from pathlib import Path

# Output filenames
REPORT_FILENAME = "import_report.json"
CONFIG_SNAPSHOT_FILENAME = "config.resolved.json"

# Output directory structure
OUTPUT_ROOT = Path("outputs")
LOG_FILENAME = "run.log"
MOCK_LEDGER_FILENAME = "ledger.mock.db"

# Process exit codes
EXIT_OK = 0
EXIT_STRUCTURAL_FAILURE = 1
EXIT_PARTIAL_FAILURE = 2
