"""
CSV loading for the command line and notebooks.

The aggregation core only consumes list[dict[str, str]]; this adapter turns
a CSV file (or text) into exactly that, keeping every cell as a raw string.
"""

import io
import logging
from pathlib import Path
from typing import Union

import pandas as pd

logger = logging.getLogger(__name__)

Row = dict[str, str]


def _frame_to_rows(df: pd.DataFrame) -> list[Row]:
    df.columns = [str(c).strip() for c in df.columns]
    return [
        {col: str(value).strip() for col, value in record.items()}
        for record in df.to_dict(orient="records")
    ]


def _read(source) -> pd.DataFrame:
    # utf-8-sig drops a leading BOM; no NA inference, cells stay raw strings
    return pd.read_csv(
        source,
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
        encoding="utf-8-sig",
    )


def read_csv_rows(path: Union[str, Path]) -> list[Row]:
    """Read a CSV file into raw string rows. A missing file yields []."""
    path = Path(path)
    if not path.exists():
        logger.info("[CSV_SOURCE] %s not found, treating as empty source", path)
        return []
    try:
        df = _read(path)
    except pd.errors.EmptyDataError:
        logger.info("[CSV_SOURCE] %s is empty", path)
        return []
    rows = _frame_to_rows(df)
    logger.debug("[CSV_SOURCE] Loaded %d rows from %s", len(rows), path)
    return rows


def parse_csv_text(text: str) -> list[Row]:
    """Parse CSV text into raw string rows."""
    if not text or not text.strip():
        return []
    try:
        df = _read(io.StringIO(text.lstrip("\ufeff")))
    except pd.errors.EmptyDataError:
        return []
    return _frame_to_rows(df)
