"""Shared pytest fixtures for the metannot test suite."""

import pandas as pd
import pytest

from metannot.config import AnnotationConfig, DereplicationConfig, MergeConfig


@pytest.fixture
def merge_config():
    return MergeConfig(verbose=False)


@pytest.fixture
def annotation_config():
    return AnnotationConfig(verbose=False)


@pytest.fixture
def derep_config():
    return DereplicationConfig(verbose=False)


@pytest.fixture
def net_table():
    return pd.DataFrame({
        'ID': ['1', '2', '3'],
        'MZ': [100.1234, 200.5, 300.0],
        'RT': [1.2, 3.4, 5.6],
    })


@pytest.fixture
def derep_table():
    """
    Three rows annotated 'Caffeine' with QC RSDs of 5%, 6% and 40%, one
    single-row group and one unannotated row.
    """
    return pd.DataFrame({
        'ID': ['1', '2', '3', '4', '5'],
        'Final_Annotation': ['Caffeine', 'Caffeine', 'Caffeine', 'Adenine', None],
        'CON_1': [50, 80, 10, 5, 0],
        'HBO_1': [50, 80, 10, 5, 0],
        'QC-1': [95, 94, 60, 10, 1],
        'QC-2': [100, 100, 100, 10, 1],
        'QC-3': [105, 106, 140, 10, 1],
    })
