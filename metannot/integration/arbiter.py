"""
Rule table deciding the final compound label from FBMN and SIRIUS results.
"""

from typing import Any, Mapping, Optional

import pandas as pd

from ..config.annotation_config import AnnotationConfig
from ..utils import clean_text, is_missing, parse_number
from .preprocessing import validate_columns


class AnnotationArbiter:
    """
    Resolves two competing per-row identifications into one label.

    Rules, first match wins:
    1. neither source named a compound -> ''
    2. only one source did -> that name
    3. both agree ignoring case -> the FBMN spelling
    4. otherwise the stronger source wins; SIRIUS when both are strong,
       FBMN when neither is.
    """

    def __init__(self, config: Optional[AnnotationConfig] = None):
        self.config = config or AnnotationConfig()

    def resolve(self, row: Mapping[str, Any]) -> str:
        """Final annotation for a single row (dict or pandas Series)."""
        fbmn_name = clean_text(row.get(self.config.fbmn_name_column))
        sirius_name = clean_text(row.get(self.config.sirius_name_column))

        if not fbmn_name and not sirius_name:
            return ''
        if fbmn_name and not sirius_name:
            return fbmn_name
        if sirius_name and not fbmn_name:
            return sirius_name
        if fbmn_name.lower() == sirius_name.lower():
            return fbmn_name

        fbmn_strong = self.is_fbmn_strong(row)
        sirius_strong = self.is_sirius_strong(row)

        if fbmn_strong and sirius_strong:
            return sirius_name
        if fbmn_strong:
            return fbmn_name
        if sirius_strong:
            return sirius_name
        return fbmn_name

    def is_fbmn_strong(self, row: Mapping[str, Any]) -> bool:
        """High-quality library match: score, Gold library, enough peaks, small mass error."""
        mq_score = parse_number(row.get(self.config.mq_score_column))
        shared_peaks = parse_number(row.get(self.config.shared_peaks_column))
        mz_error = parse_number(row.get(self.config.mz_error_column))
        if mq_score is None or shared_peaks is None or mz_error is None:
            return False

        library_quality = row.get(self.config.library_quality_column)
        library_quality = '' if is_missing(library_quality) else str(library_quality)

        return (mq_score > self.config.min_mq_score and
                library_quality == self.config.required_library_quality and
                int(shared_peaks) > self.config.min_shared_peaks and
                abs(mz_error) < self.config.max_mz_error_ppm)

    def is_sirius_strong(self, row: Mapping[str, Any]) -> bool:
        confidence = parse_number(row.get(self.config.confidence_column))
        return confidence is not None and confidence > self.config.min_confidence_score

    def annotate(self, table: pd.DataFrame) -> pd.DataFrame:
        """
        Add the resolved annotation column to a merged table.

        Args:
            table: Table carrying the FBMN and SIRIUS columns

        Returns:
            pd.DataFrame: Copy of the table with the annotation column filled
        """
        validate_columns(table, self.config.source_columns, context='Cannot generate annotations')

        annotated = table.copy()
        labels = [self.resolve(row) for _, row in table.iterrows()]
        annotated[self.config.annotation_column] = pd.Series(labels, index=table.index, dtype=object)

        if self.config.verbose:
            named = sum(1 for label in labels if label)
            print(f"Resolved annotations for {named}/{len(labels)} features")
        return annotated
