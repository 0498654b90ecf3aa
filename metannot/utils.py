"""
Small helpers shared by the table transforms.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Optional

import numpy as np
import pandas as pd


def is_missing(value: Any) -> bool:
    """True for None and pandas/numpy missing markers."""
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        # list-like cell values
        return False


def clean_text(value: Any) -> str:
    """
    Trimmed string form of a cell, '' for missing values.

    Integral floats lose their '.0' so that an ID stored as 2.0 (numeric
    columns holding nulls are float) reads the same as '2'.
    """
    if is_missing(value):
        return ''
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        return str(int(value))
    return str(value).strip()


def round_half_up(value: Any, precision: int) -> float:
    """
    Round to `precision` decimals, ties away from zero, NaN for missing values.

    Rounds the exact binary value of the float, so 0.0125 becomes 0.013
    where Series.round (half to even after scaling) gives 0.012.
    """
    if is_missing(value) or not np.isfinite(value):
        return np.nan
    quantum = Decimal(1).scaleb(-precision)
    return float(Decimal(float(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def parse_number(value: Any) -> Optional[float]:
    """Parse a cell as a float; None when missing or not numeric."""
    if is_missing(value) or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, np.integer, np.floating)):
        return float(value)
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    return None if np.isnan(number) else number


def to_numeric_frame(table: pd.DataFrame, columns: Iterable[str]) -> pd.DataFrame:
    """Numeric view of the given columns; anything unparseable becomes NaN."""
    return table[list(columns)].apply(pd.to_numeric, errors='coerce')


def normalize_nulls(table: pd.DataFrame, columns: Iterable[str]) -> pd.DataFrame:
    """Replace pandas missing markers with None in the given columns (in place)."""
    for col in columns:
        values = [None if is_missing(v) else v for v in table[col]]
        table[col] = pd.Series(values, index=table.index, dtype=object)
    return table


def find_prefixed_columns(headers: Iterable[str], prefixes: Iterable[str]) -> list:
    """Headers starting with any of the prefixes, case-insensitively, in header order."""
    upper_prefixes = tuple(p.upper() for p in prefixes)
    return [h for h in headers if str(h).upper().startswith(upper_prefixes)]


def drop_working_columns(table: pd.DataFrame, extra_columns: Iterable[str] = (),
                         prefix: str = '_') -> pd.DataFrame:
    """Copy of the table without derived/status columns (underscore-prefixed or listed)."""
    extra = set(extra_columns)
    keep = [c for c in table.columns if not str(c).startswith(prefix) and c not in extra]
    return table[keep].copy()
