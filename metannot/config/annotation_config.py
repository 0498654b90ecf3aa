from dataclasses import dataclass
from .base_config import BaseConfig

@dataclass
class AnnotationConfig(BaseConfig):
    """Configuration parameters for arbitrating between FBMN and SIRIUS labels."""

    # Source A (FBMN library match) columns
    fbmn_name_column: str = 'Compound_Name'
    mq_score_column: str = 'MQScore'
    library_quality_column: str = 'LibraryQualityString'
    shared_peaks_column: str = 'SharedPeaks'
    mz_error_column: str = 'MZErrorPPM'

    # Source B (SIRIUS) columns
    sirius_name_column: str = 'name'
    confidence_column: str = 'ConfidenceScoreExact'

    # A library match is strong only when all of these hold
    min_mq_score: float = 0.9
    required_library_quality: str = 'Gold'
    min_shared_peaks: int = 10
    max_mz_error_ppm: float = 5.0

    # A SIRIUS hit is strong above this exact-structure confidence
    min_confidence_score: float = 0.8

    @property
    def source_columns(self):
        return [
            self.fbmn_name_column, self.sirius_name_column, self.mq_score_column,
            self.library_quality_column, self.shared_peaks_column, self.mz_error_column,
            self.confidence_column,
        ]
