from dataclasses import dataclass, field
from typing import List

from .base_config import BaseConfig


@dataclass
class DereplicationConfig(BaseConfig):
    """Configuration parameters for redundancy removal and contaminant filtering."""

    # Sample column detection (case-insensitive prefixes)
    biological_prefixes: List[str] = field(default_factory=lambda: ['CON_', 'HBO_'])
    qc_prefix: str = 'QC-'

    # Quality filters
    max_missing_rate: float = 50.0   # percent of biological samples without signal
    max_qc_rsd: float = 30.0         # percent
    min_qc_values: int = 2           # fewer positive QC values leave the RSD undefined

    # Candidates within this many RSD points of the most stable one compete on intensity
    rsd_window: float = 2.0

    status_column: str = '_derep_status'

    # False collapses the two exclusion statuses into Removed
    keep_exclusion_status: bool = True

    # Column read from an uploaded contaminant list
    contaminant_column: str = 'name'
