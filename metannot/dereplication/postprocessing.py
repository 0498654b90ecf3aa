"""
Post-processing of dereplication results.
"""

from typing import Dict, List, Optional

import pandas as pd

from ..config.dereplication_config import DereplicationConfig
from ..utils import clean_text, is_missing
from .quality import DereplicationStatus


class DereplicationPostprocessor:
    """Turns a status-annotated table into export views and reports."""

    def __init__(self, config: Optional[DereplicationConfig] = None):
        self.config = config or DereplicationConfig()

    def retained_rows(self, table: pd.DataFrame) -> pd.DataFrame:
        """
        Keep only retained rows and drop the status column.

        Tables that were never dereplicated are returned unchanged (as a copy).
        """
        status_col = self.config.status_column
        if status_col not in table.columns:
            return table.copy()

        retained = table[table[status_col] == DereplicationStatus.RETAINED.value]
        return retained.drop(columns=[status_col])

    def removal_report(self, table: pd.DataFrame) -> List[str]:
        """One line per row that was not retained, in table order."""
        status_col = self.config.status_column
        if status_col not in table.columns:
            return []

        report = []
        for _, row in table[table[status_col] != DereplicationStatus.RETAINED.value].iterrows():
            annotation = clean_text(row.get(self.config.annotation_column)) or 'Unknown'
            report.append(f"ID: {row[self.config.id_column]}, Annotation: {annotation} - {row[status_col]}")
        return report

    def status_summary(self, table: pd.DataFrame) -> Dict[str, int]:
        """Number of rows per status, including statuses that did not occur."""
        counts = {status.value: 0 for status in DereplicationStatus}
        status_col = self.config.status_column
        if status_col in table.columns:
            for status, count in table[status_col].value_counts().items():
                counts[status] = int(count)
        return counts

    def unique_annotations(self, table: pd.DataFrame) -> List[str]:
        """
        Distinct annotations of retained rows, in first-seen order.

        Rows without a status count as retained.
        """
        annotation_col = self.config.annotation_column
        if annotation_col not in table.columns:
            return []

        status_col = self.config.status_column
        names = []
        seen = set()
        for _, row in table.iterrows():
            status = row.get(status_col)
            if not is_missing(status) and status != DereplicationStatus.RETAINED.value:
                continue
            name = clean_text(row[annotation_col])
            if name and name not in seen:
                seen.add(name)
                names.append(name)
        return names
