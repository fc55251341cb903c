"""Load daily intake/weight series from CSV files."""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from tdeelab.tracking.models import DailyRecord

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["date"]

# Accepted spellings for each canonical column, first match wins
COLUMN_ALIASES = {
    "reported_intake_kcal": ["reported_intake_kcal", "calories", "energy", "EI_rep_kcal"],
    "weight_kg": ["weight_kg", "weight"],
}


def _canonicalize(df: pd.DataFrame) -> pd.DataFrame:
    renames = {}
    for canonical, aliases in COLUMN_ALIASES.items():
        for alias in aliases:
            if alias in df.columns:
                renames[alias] = canonical
                break
    return df.rename(columns=renames)


def records_from_frame(df: pd.DataFrame) -> list[DailyRecord]:
    """Convert a DataFrame with date/intake/weight columns to records.

    Missing intake or weight cells become None. Rows are returned in file
    order; the estimators sort them.

    Raises:
        ValueError: If the date column is missing
    """
    df = _canonicalize(df)

    missing = set(REQUIRED_COLUMNS) - set(df.columns)
    if missing:
        raise ValueError(
            f"Missing required columns: {missing}. "
            f"Required columns are: {REQUIRED_COLUMNS}"
        )

    for column in COLUMN_ALIASES:
        if column not in df.columns:
            df[column] = None

    df = df.astype({"date": str})
    records = [
        DailyRecord.from_mapping(row)
        for row in df[["date", *COLUMN_ALIASES]].to_dict(orient="records")
    ]
    logger.debug("Loaded %d daily records", len(records))
    return records


def load_series_csv(csv_path: Path) -> list[DailyRecord]:
    """Load a daily series from a CSV file.

    CSV format:
        date,reported_intake_kcal,weight_kg
        2025-01-15,1850,82.4
        2025-01-16,2100,

    ``calories``/``energy`` and ``weight`` are accepted as column names too,
    and dates may be written DD-MM-YYYY.

    Args:
        csv_path: Path to the CSV file

    Returns:
        List of DailyRecord in file order

    Raises:
        ValueError: If required columns are missing
    """
    df = pd.read_csv(csv_path)
    return records_from_frame(df)
