from .base_config import BaseConfig
from .merge_config import MergeConfig, MergeStep, default_merge_steps
from .annotation_config import AnnotationConfig
from .dereplication_config import DereplicationConfig

__all__ = [
    'BaseConfig',
    'MergeConfig',
    'MergeStep',
    'default_merge_steps',
    'AnnotationConfig',
    'DereplicationConfig',
]
