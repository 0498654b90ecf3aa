"""
metannot dereplication module.

Removes redundant identifications of the same compound using replicate
quality metrics, and filters known contaminants from annotated tables.
"""

from .core import DereplicationEngine
from .quality import DereplicationStatus, QualityAssessor, QualityCandidate
from .filtering import ContaminantFilter
from .postprocessing import DereplicationPostprocessor

__all__ = [
    'DereplicationEngine',
    'DereplicationStatus',
    'QualityAssessor',
    'QualityCandidate',
    'ContaminantFilter',
    'DereplicationPostprocessor',
]
