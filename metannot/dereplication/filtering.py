"""
Removal of known contaminants by resolved annotation.
"""

from typing import Iterable, Optional, Set

import pandas as pd

from ..config.dereplication_config import DereplicationConfig
from ..integration.preprocessing import validate_columns
from ..utils import clean_text


class ContaminantFilter:
    """Drops rows whose resolved annotation is on an exclusion list."""

    def __init__(self, config: Optional[DereplicationConfig] = None):
        self.config = config or DereplicationConfig()

    def apply(self, table: pd.DataFrame, excluded_names: Iterable[str]) -> pd.DataFrame:
        """
        Return a copy of the table without rows annotated with an excluded name.

        Matching is exact on the trimmed annotation. Rows without an annotation
        are kept since they cannot be decided. A single string is one name.
        """
        validate_columns(table, [self.config.annotation_column], context='Cannot filter contaminants')
        if isinstance(excluded_names, str):
            excluded_names = [excluded_names]
        excluded = {clean_text(name) for name in excluded_names}

        annotations = [clean_text(v) for v in table[self.config.annotation_column]]
        keep = [not annotation or annotation not in excluded for annotation in annotations]
        filtered = table[keep].copy()

        if self.config.verbose:
            print(f"Removed {len(table) - len(filtered)} contaminant rows "
                  f"({len(filtered)} remaining)")
        return filtered

    @staticmethod
    def parse_names(text: str) -> Set[str]:
        """Exclusion names from pasted text, one per line."""
        names = {line.strip() for line in (text or '').splitlines()}
        names.discard('')
        if not names:
            raise ValueError("Contaminant list is empty")
        return names

    def names_from_table(self, table: pd.DataFrame) -> Set[str]:
        """Exclusion names from the name column of an uploaded list."""
        column = self.config.contaminant_column
        validate_columns(table, [column], context='Contaminant list')
        names = {clean_text(v) for v in table[column]}
        names.discard('')
        if not names:
            raise ValueError(f"Contaminant list has no names in column '{column}'")
        return names
