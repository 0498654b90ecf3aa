from dataclasses import dataclass, field
from typing import List, Optional

from .base_config import BaseConfig
from ..exceptions import ConfigurationError


DUPLICATE_KEY_POLICIES = ('first', 'last')


@dataclass
class MergeStep:
    """One upstream source joined onto the base table."""
    name: str
    file_type: str
    required_columns: List[str]
    match_column: str
    append_columns: List[str]
    # Set only for tolerance joins, where base and incoming keys differ
    match_column_base: Optional[str] = None

    @property
    def is_tolerance(self) -> bool:
        return self.match_column_base is not None


def default_merge_steps() -> List[MergeStep]:
    return [
        MergeStep(
            name='fbmn',
            file_type='fbmn',
            required_columns=['ID'],
            match_column='ID',
            append_columns=['Compound_Name', 'NAME (中文翻译)', 'Adduct', 'LibraryQualityString',
                            'MQScore', 'MZErrorPPM', 'SharedPeaks'],
        ),
        MergeStep(
            name='sirius',
            file_type='sirius',
            required_columns=['ID'],
            match_column='ID',
            append_columns=['name', 'molecularFormula', 'ConfidenceScoreExact', 'smiles',
                            'ConfidenceScoreApproximate', 'InChIkey2D'],
        ),
        MergeStep(
            name='supplementary',
            file_type='supplementary',
            required_columns=['ionMass'],
            match_column='ionMass',
            match_column_base='MZ',
            append_columns=['molecularFormula', 'NPC#superclass', 'ClassyFire#superclass',
                            'ClassyFire#class', 'InChI'],
        ),
    ]


@dataclass
class MergeConfig(BaseConfig):
    """Configuration parameters for joining upstream tables onto the base table."""

    # Decimal places both sides are rounded to for tolerance joins
    precision: int = 3

    # Which row wins when the incoming table repeats a key
    duplicate_key_policy: str = 'last'

    steps: List[MergeStep] = field(default_factory=default_merge_steps)

    def __post_init__(self):
        if self.duplicate_key_policy not in DUPLICATE_KEY_POLICIES:
            raise ConfigurationError(
                f"duplicate_key_policy must be one of {DUPLICATE_KEY_POLICIES}, "
                f"got '{self.duplicate_key_policy}'"
            )
        if self.precision < 0:
            raise ConfigurationError(f"precision must be non-negative, got {self.precision}")
        # Steps coming from YAML arrive as plain mappings
        self.steps = [s if isinstance(s, MergeStep) else MergeStep(**s) for s in self.steps]

    def get_step(self, name: str) -> MergeStep:
        for step in self.steps:
            if step.name == name:
                return step
        raise ConfigurationError(f"Unknown merge step '{name}'. Available: {[s.name for s in self.steps]}")
