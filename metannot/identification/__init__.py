"""
metannot identification module: client for an external MS/MS identification service.
"""

from .client import (
    CONFIDENCE_LEVELS,
    IdentificationClient,
    IdentificationResult,
    Peak,
    parse_peak_list,
)

__all__ = [
    'CONFIDENCE_LEVELS',
    'IdentificationClient',
    'IdentificationResult',
    'Peak',
    'parse_peak_list',
]
