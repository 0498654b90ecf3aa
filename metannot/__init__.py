"""
metannot: Metabolite annotation integration and dereplication tools
"""

__version__ = "0.1.0"

from . import config
from . import integration
from . import dereplication
from . import identification

# Configuration imports
from .config import BaseConfig, MergeConfig, AnnotationConfig, DereplicationConfig

from .exceptions import MetannotError, ValidationError, ConfigurationError, EmptyDataError
from .integration import TableMerger, AnnotationArbiter, BasePreprocessor
from .dereplication import DereplicationEngine, DereplicationStatus, ContaminantFilter
from .dataloading import TableLoader
from .workflows import AnnotationWorkflow, PipelineContext

__all__ = [
    'BaseConfig',
    'MergeConfig',
    'AnnotationConfig',
    'DereplicationConfig',
    'MetannotError',
    'ValidationError',
    'ConfigurationError',
    'EmptyDataError',
    'TableMerger',
    'AnnotationArbiter',
    'BasePreprocessor',
    'DereplicationEngine',
    'DereplicationStatus',
    'ContaminantFilter',
    'TableLoader',
    'AnnotationWorkflow',
    'PipelineContext',
    "config", "integration", "dereplication", "identification",
]
