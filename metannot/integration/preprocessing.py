"""
Column contracts and base-table preparation for the integration workflow.
"""

import re
from typing import Iterable, Optional

import pandas as pd

from ..config.base_config import BaseConfig
from ..exceptions import ValidationError
from ..utils import is_missing


def validate_columns(table: pd.DataFrame, required_columns: Iterable[str],
                     context: Optional[str] = None) -> None:
    """
    Raise ValidationError naming every required column the table lacks.

    Args:
        table: Table to check
        required_columns: Column names that must be present
        context: Prefix for the error message (e.g. the step name)
    """
    missing_cols = [col for col in required_columns if col not in table.columns]
    if missing_cols:
        raise ValidationError(missing_cols, context=context)


class BasePreprocessor:
    """Brings a feature export into the shape of the base (net) table."""

    def __init__(self, config: Optional[BaseConfig] = None):
        self.config = config or BaseConfig()

    @property
    def core_columns(self):
        return [self.config.id_column, self.config.mz_column, self.config.rt_column]

    def prepare_base_table(self, table: pd.DataFrame) -> pd.DataFrame:
        """
        Return a base table carrying ID, MZ and RT columns.

        Tables that already have the three columns pass through as a copy.
        Otherwise they are derived from the combined filename column
        ("<id>/<mz>mz/<rt>min"), inserted right after it.

        Raises:
            ValidationError: neither the core columns nor the filename column exist
        """
        id_col, mz_col, _ = self.core_columns

        if all(col in table.columns for col in self.core_columns):
            if self.config.verbose:
                print("Base table already contains the required columns.")
            prepared = table.copy()
        elif self.config.filename_column in table.columns:
            prepared = self._split_filename_column(table)
            if self.config.verbose:
                print(f"Derived {', '.join(self.core_columns)} from the "
                      f"'{self.config.filename_column}' column.")
        else:
            missing = [col for col in self.core_columns if col not in table.columns]
            raise ValidationError(missing + [self.config.filename_column],
                                  context='Base table needs ID/MZ/RT or a filename column')

        validate_columns(prepared, [id_col, mz_col], context='Prepared base table')
        return prepared

    def parse_filename(self, value) -> tuple:
        """Split one filename cell into (id, mz, rt); all None if it has fewer than 3 parts."""
        text = '' if is_missing(value) else str(value)
        parts = text.split(self.config.filename_separator)
        if len(parts) < 3:
            return None, None, None

        feature_id = parts[0].strip()
        mz = re.sub('mz', '', parts[1], count=1, flags=re.IGNORECASE).strip()
        rt = re.sub('min', '', parts[2], count=1, flags=re.IGNORECASE).strip()
        return feature_id, mz, rt

    def _split_filename_column(self, table: pd.DataFrame) -> pd.DataFrame:
        prepared = table.copy()
        parsed = [self.parse_filename(v) for v in prepared[self.config.filename_column]]

        new_columns = [col for col in self.core_columns if col not in prepared.columns]
        for position, col in enumerate(self.core_columns):
            prepared[col] = pd.Series([p[position] for p in parsed], index=prepared.index, dtype=object)

        # Place newly created columns directly after the filename column
        headers = [h for h in prepared.columns if h not in new_columns]
        insert_at = headers.index(self.config.filename_column) + 1
        headers[insert_at:insert_at] = new_columns
        return prepared[headers]
