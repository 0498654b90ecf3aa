"""
metannot integration module for building the annotated feature table.

This module prepares the base feature table, joins FBMN, SIRIUS and
supplementary tables onto it and resolves one final annotation per feature.
"""

from .core import TableMerger
from .arbiter import AnnotationArbiter
from .preprocessing import BasePreprocessor, validate_columns

__all__ = [
    'TableMerger',
    'AnnotationArbiter',
    'BasePreprocessor',
    'validate_columns',
]
