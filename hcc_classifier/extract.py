"""
Diagnosis extract reader.

Extracts are produced upstream with four columns: patient id, encounter
id, diagnosis code and diagnosis date (MM/DD/YYYY, optionally followed by
a time of day). The schema is checked here, at the boundary, and a
mismatch fails the run instead of being coerced.
"""

import logging
from pathlib import Path
from typing import Iterable, Union

import pandas as pd

from .exceptions import ConfigError, SchemaMismatch
from .models import DATE_FORMAT

logger = logging.getLogger(__name__)

EXTRACT_COLUMNS = ["patient_id", "encounter_id", "diagnosis_code", "diagnosis_date"]


def validate_extract(frame: pd.DataFrame, source: str = "<extract>") -> pd.DataFrame:
    """
    Validate a diagnosis extract.

    Header names are compared after stripping whitespace and lower-casing;
    nothing else is renamed.

    Args:
        frame: Raw extract with string columns
        source: Name used in error messages

    Returns:
        DataFrame with the canonical column names and a parsed
        diagnosis_date column

    Raises:
        SchemaMismatch: On wrong column count or names, missing patient
                        ids, or unparseable dates
    """
    names = [str(column).strip().lower() for column in frame.columns]
    if len(names) != len(EXTRACT_COLUMNS):
        raise SchemaMismatch(
            f"{source}: expected {len(EXTRACT_COLUMNS)} columns {EXTRACT_COLUMNS}, "
            f"found {len(names)}: {list(frame.columns)}"
        )
    if names != EXTRACT_COLUMNS:
        raise SchemaMismatch(f"{source}: expected columns {EXTRACT_COLUMNS}, found {list(frame.columns)}")

    validated = frame.copy()
    validated.columns = EXTRACT_COLUMNS

    patient_ids = validated["patient_id"].astype("string").str.strip()
    if (patient_ids.isna() | (patient_ids == "")).any():
        raise SchemaMismatch(f"{source}: patient_id is empty on one or more rows")
    validated["patient_id"] = patient_ids.astype(str)

    # Trailing time-of-day is ignored
    date_text = validated["diagnosis_date"].astype("string").str.strip().str.split(" ").str[0]
    dates = pd.to_datetime(date_text, format=DATE_FORMAT, errors="coerce")
    bad = dates.isna()
    if bad.any():
        example = validated.loc[bad, "diagnosis_date"].iloc[0]
        raise SchemaMismatch(
            f"{source}: {int(bad.sum())} diagnosis dates are not MM/DD/YYYY (e.g. {example!r})"
        )
    validated["diagnosis_date"] = dates

    return validated


def read_extract(path: Union[str, Path], sep: str = ",") -> pd.DataFrame:
    """
    Read and validate one diagnosis extract file.

    All columns are read as strings so codes keep their leading zeros.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise ConfigError(f"Diagnosis extract not found: {file_path}")

    with open(file_path, 'r', encoding='utf-8-sig', errors='replace') as f:
        frame = pd.read_csv(f, sep=sep, dtype=str, keep_default_na=False)

    validated = validate_extract(frame, source=file_path.name)
    logger.info(f"Read {len(validated):,} diagnosis records from {file_path.name}")
    return validated


def read_extracts(paths: Iterable[Union[str, Path]], sep: str = ",") -> pd.DataFrame:
    """Read, validate and concatenate several diagnosis extract files."""
    frames = [read_extract(path, sep=sep) for path in paths]
    if not frames:
        raise ConfigError("No diagnosis extract files given")
    return pd.concat(frames, ignore_index=True)
