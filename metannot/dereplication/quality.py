"""
Quality metrics used to pick one row among repeated identifications.

Metrics are computed for the whole table at once from the replicate sample
columns and handed to the engine as QualityCandidate records; they never
become columns of an output table.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Optional

import numpy as np
import pandas as pd

from ..config.dereplication_config import DereplicationConfig
from ..utils import find_prefixed_columns, to_numeric_frame


class DereplicationStatus(str, Enum):
    RETAINED = 'Retained'
    REMOVED = 'Removed'
    EXCLUDED_HIGH_MISSING = 'ExcludedHighMissing'
    EXCLUDED_UNSTABLE_QC = 'ExcludedUnstableQC'


@dataclass
class QualityCandidate:
    """One row of the table with its derived quality metrics."""
    position: int
    identifier: Any
    missing_rate: float
    qc_rsd: Optional[float]
    avg_intensity: float
    exclusion: Optional[DereplicationStatus] = None

    @property
    def is_excluded(self) -> bool:
        return self.exclusion is not None

    @property
    def ranking_rsd(self) -> float:
        # Undefined RSD (too few QC values) counts as perfectly stable
        return 0.0 if self.qc_rsd is None else self.qc_rsd


class QualityAssessor:
    """Computes missing rate, QC RSD and mean intensity per row."""

    def __init__(self, config: Optional[DereplicationConfig] = None):
        self.config = config or DereplicationConfig()

    def biological_columns(self, headers: Iterable[str]) -> List[str]:
        return find_prefixed_columns(headers, self.config.biological_prefixes)

    def qc_columns(self, headers: Iterable[str]) -> List[str]:
        return find_prefixed_columns(headers, [self.config.qc_prefix])

    def missing_rates(self, table: pd.DataFrame, bio_cols: List[str]) -> pd.Series:
        """Percentage of biological samples without a positive value."""
        values = to_numeric_frame(table, bio_cols)
        positive_count = (values > 0).sum(axis=1)
        return 100.0 * (1.0 - positive_count / len(bio_cols))

    def average_intensities(self, table: pd.DataFrame, bio_cols: List[str]) -> pd.Series:
        """Mean of the positive biological values, 0 when there are none."""
        values = to_numeric_frame(table, bio_cols)
        return values.where(values > 0).mean(axis=1).fillna(0.0)

    def qc_statistics(self, table: pd.DataFrame, qc_cols: List[str]) -> pd.DataFrame:
        """
        Count, mean and RSD (%) of the positive QC values of each row.

        The RSD uses the sample standard deviation (n - 1) and is NaN when
        fewer than `min_qc_values` positive values exist or the mean is 0.
        """
        values = to_numeric_frame(table, qc_cols)
        positive = values.where(values > 0)

        stats = pd.DataFrame(index=table.index)
        stats['n'] = positive.count(axis=1)
        stats['mean'] = positive.mean(axis=1)
        std = positive.std(axis=1, ddof=1)
        with np.errstate(divide='ignore', invalid='ignore'):
            stats['rsd'] = 100.0 * std / stats['mean']
        stats.loc[stats['n'] < self.config.min_qc_values, 'rsd'] = np.nan
        return stats

    def assess(self, table: pd.DataFrame, id_column: str,
               bio_cols: List[str], qc_cols: List[str]) -> List[QualityCandidate]:
        """Quality candidates for every row, in table order."""
        missing = self.missing_rates(table, bio_cols).to_numpy()
        intensity = self.average_intensities(table, bio_cols).to_numpy()
        qc = self.qc_statistics(table, qc_cols)
        identifiers = table[id_column].tolist()

        candidates = []
        for position in range(len(table)):
            n_qc = int(qc['n'].iat[position])
            qc_mean = qc['mean'].iat[position]
            rsd = qc['rsd'].iat[position]

            candidate = QualityCandidate(
                position=position,
                identifier=identifiers[position],
                missing_rate=float(missing[position]),
                qc_rsd=None if np.isnan(rsd) else float(rsd),
                avg_intensity=float(intensity[position]),
            )
            candidate.exclusion = self._exclusion(candidate, n_qc, qc_mean)
            candidates.append(candidate)
        return candidates

    def _exclusion(self, candidate: QualityCandidate, n_qc: int,
                   qc_mean: float) -> Optional[DereplicationStatus]:
        if candidate.missing_rate > self.config.max_missing_rate:
            return DereplicationStatus.EXCLUDED_HIGH_MISSING
        if n_qc < self.config.min_qc_values:
            return None
        if qc_mean == 0:
            return DereplicationStatus.EXCLUDED_UNSTABLE_QC
        if candidate.qc_rsd is not None and candidate.qc_rsd > self.config.max_qc_rsd:
            return DereplicationStatus.EXCLUDED_UNSTABLE_QC
        return None
