"""Source dataset loading utilities."""

import json
from pathlib import Path
from typing import Any

import pandas as pd

# Columns kept as text when reading tabular sources (codes like "1A" or "01" must not become numbers)
TEXT_COLUMNS = ("CodeValue", "CodeDescription", "CodeNotes", "CodeParent", "Modified")


def read_table(path: Path) -> pd.DataFrame:
    """
    Read tabular data file (Excel or CSV) based on file extension.

    Text columns are read as strings and empty cells become "" (not NaN).

    Raises:
        ValueError: If file format is not supported
        FileNotFoundError: If file does not exist
    """
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    suffix = path.suffix.lower()
    dtype = {col: str for col in TEXT_COLUMNS}

    if suffix in [".xlsx", ".xls"]:
        df = pd.read_excel(path, dtype=dtype, keep_default_na=False)
    elif suffix == ".csv":
        df = pd.read_csv(path, dtype=dtype, keep_default_na=False)
    else:
        raise ValueError(f"Unsupported file format: {suffix}. Supported formats: .xlsx, .xls, .csv")
    return df


def read_records(path: Path) -> list[dict[str, Any]]:
    """
    Read raw taxonomy records from a JSON array, CSV or Excel file.

    Raises:
        FileNotFoundError: If file does not exist
        ValueError: On invalid JSON, a non-array JSON document or an unsupported format
    """
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    if path.suffix.lower() == ".json":
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in source file {path}: {e}") from e
        if not isinstance(data, list):
            raise ValueError(f"Expected a JSON array of codes in {path}, got {type(data).__name__}")
        return data

    df = read_table(path)
    return df.to_dict(orient="records")
