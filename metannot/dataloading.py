"""
Reading spreadsheet/CSV tables into DataFrames and writing them back out.

These are the collaborators around the pure table transforms: the parser
turns a file into a table with None for empty cells, the exporter writes a
table after stripping the derived working columns.
"""

from pathlib import Path
from typing import Iterable, Optional, Union

import pandas as pd

from .config.base_config import BaseConfig
from .exceptions import EmptyDataError
from .utils import drop_working_columns, normalize_nulls

EXCEL_SUFFIXES = ('.xlsx', '.xls')
TEXT_SUFFIXES = {'.csv': ',', '.tsv': '\t', '.txt': '\t'}


class TableLoader:
    """Loads and exports annotation tables."""

    def __init__(self, config: Optional[BaseConfig] = None):
        self.config = config or BaseConfig()

    def load_table(self, file_path: Union[str, Path]) -> pd.DataFrame:
        """
        Load the first sheet of an Excel file or a delimited text file.

        Cells keep their parsed type (strings stay strings); empty cells become None.

        Raises:
            FileNotFoundError: file does not exist
            ValueError: unsupported extension
            EmptyDataError: the file has a header but no rows
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"Input table not found: {file_path}")

        suffix = file_path.suffix.lower()
        if suffix in EXCEL_SUFFIXES:
            table = pd.read_excel(file_path, sheet_name=0, dtype=object)
        elif suffix in TEXT_SUFFIXES:
            table = pd.read_csv(file_path, sep=TEXT_SUFFIXES[suffix], dtype=object)
        else:
            raise ValueError(f"Unsupported file format: {file_path}")

        if table.empty:
            raise EmptyDataError(f"File is empty or has no data rows: {file_path}")

        table.columns = [str(c) for c in table.columns]
        normalize_nulls(table, list(table.columns))

        if self.config.verbose:
            print(f"Loaded {len(table)} rows x {len(table.columns)} columns from {file_path.name}")
        return table

    def export_table(self, table: pd.DataFrame, file_path: Union[str, Path],
                     derived_columns: Iterable[str] = ()) -> Path:
        """
        Write a table to .xlsx or .csv, headers in order, derived columns removed.

        Args:
            table: Table to export
            file_path: Output path; the suffix selects the format (.xlsx when absent)
            derived_columns: Extra working columns to strip besides '_'-prefixed ones

        Returns:
            Path: The written file
        """
        file_path = Path(file_path)
        if not file_path.suffix:
            file_path = file_path.with_suffix('.xlsx')
        file_path.parent.mkdir(parents=True, exist_ok=True)

        export = drop_working_columns(table, derived_columns)

        suffix = file_path.suffix.lower()
        if suffix == '.xlsx':
            export.to_excel(file_path, index=False, sheet_name='Sheet1', engine='openpyxl')
        elif suffix in TEXT_SUFFIXES:
            export.to_csv(file_path, index=False, sep=TEXT_SUFFIXES[suffix])
        else:
            raise ValueError(f"Unsupported export format: {file_path}")

        if self.config.verbose:
            print(f"Exported {len(export)} rows to {file_path}")
        return file_path
