"""
Redundancy removal for repeated compound identifications.

Rows sharing a resolved annotation form a group. Within each group rows with
too many missing biological values or unstable QC replicates are excluded,
and among the remaining rows the most stable, most intense one is kept. Rows
without an annotation are always kept. The output has the input's rows in
the input's order plus one status column.
"""

import math
from collections import OrderedDict
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd
from tqdm import tqdm

from ..config.dereplication_config import DereplicationConfig
from ..exceptions import ConfigurationError
from ..integration.preprocessing import validate_columns
from ..utils import clean_text, is_missing
from .quality import DereplicationStatus, QualityAssessor, QualityCandidate


class DereplicationEngine:
    """Assigns a DereplicationStatus to every row of an annotated table."""

    def __init__(self, config: Optional[DereplicationConfig] = None):
        self.config = config or DereplicationConfig()
        self.assessor = QualityAssessor(self.config)

    def dereplicate(self, table: pd.DataFrame) -> pd.DataFrame:
        """
        Run grouping, quality filtering and winner selection.

        Args:
            table: Annotated table with ID, annotation, biological and QC columns

        Returns:
            pd.DataFrame: Copy of the table, original row order, plus the status column

        Raises:
            ConfigurationError: no ID column, no biological or no QC sample columns
            ValidationError: no annotation column
        """
        id_col = self.config.id_column
        bio_cols, qc_cols = self.sample_columns(table)
        validate_columns(table, [self.config.annotation_column], context='Cannot dereplicate')

        groups, unknowns = self.group_by_annotation(table)
        candidates = self.assessor.assess(table, id_col, bio_cols, qc_cols)
        identifiers = table[id_col].tolist()

        if self.config.verbose:
            print(f"Dereplicating {len(table)} features in {len(groups)} annotation groups "
                  f"({len(bio_cols)} biological, {len(qc_cols)} QC columns)")

        statuses: Dict[int, DereplicationStatus] = {}
        for positions in tqdm(groups.values(), desc="Resolving annotation groups",
                              unit='group', disable=not self.config.verbose):
            statuses.update(self.resolve_group(positions, candidates, identifiers))
        for position in unknowns:
            statuses[position] = DereplicationStatus.RETAINED

        processed = [p for positions in groups.values() for p in positions] + unknowns
        ordered = self.restore_order(processed, identifiers)

        result = table.iloc[ordered].copy()
        result[self.config.status_column] = [statuses[p].value for p in ordered]

        if self.config.verbose:
            counts = result[self.config.status_column].value_counts().to_dict()
            print(f"Dereplication status counts: {counts}")
        return result

    def sample_columns(self, table: pd.DataFrame) -> Tuple[List[str], List[str]]:
        """Biological and QC sample columns; raises when either set or the ID column is absent."""
        headers = list(table.columns)
        if self.config.id_column not in headers:
            raise ConfigurationError(f"Data must contain an '{self.config.id_column}' column")

        bio_cols = self.assessor.biological_columns(headers)
        if not bio_cols:
            raise ConfigurationError(
                f"No biological sample columns found (prefixes: {self.config.biological_prefixes})")

        qc_cols = self.assessor.qc_columns(headers)
        if not qc_cols:
            raise ConfigurationError(f"No QC sample columns found (prefix: '{self.config.qc_prefix}')")
        return bio_cols, qc_cols

    def group_by_annotation(self, table: pd.DataFrame) -> Tuple["OrderedDict[str, List[int]]", List[int]]:
        """Row positions per trimmed annotation (first-seen order) and positions without one."""
        groups: "OrderedDict[str, List[int]]" = OrderedDict()
        unknowns: List[int] = []
        for position, value in enumerate(table[self.config.annotation_column]):
            key = clean_text(value)
            if key:
                groups.setdefault(key, []).append(position)
            else:
                unknowns.append(position)
        return groups, unknowns

    def resolve_group(self, positions: List[int], candidates: Sequence[QualityCandidate],
                      identifiers: Sequence) -> Dict[int, DereplicationStatus]:
        """Status of every row of one annotation group."""
        if len(positions) == 1:
            return {positions[0]: DereplicationStatus.RETAINED}

        survivors = [candidates[p] for p in positions if not candidates[p].is_excluded]
        winner = self.select_winner(survivors)
        # A group without a winner is dropped entirely
        if winner is None:
            return {position: DereplicationStatus.REMOVED for position in positions}

        statuses = {}
        for position in positions:
            candidate = candidates[position]
            if self._is_winner(position, winner, identifiers):
                statuses[position] = DereplicationStatus.RETAINED
            elif candidate.is_excluded and self.config.keep_exclusion_status:
                statuses[position] = candidate.exclusion
            else:
                statuses[position] = DereplicationStatus.REMOVED
        return statuses

    def select_winner(self, survivors: List[QualityCandidate]) -> Optional[QualityCandidate]:
        """
        Pick the row to keep among candidates that passed the quality filters.

        Candidates within `rsd_window` points of the lowest RSD compete on mean
        biological intensity; the first one wins a tie.
        """
        if not survivors:
            return None
        if len(survivors) == 1:
            return survivors[0]

        min_rsd = min(c.ranking_rsd for c in survivors)
        finalists = [c for c in survivors if c.ranking_rsd < min_rsd + self.config.rsd_window]
        if not finalists:
            return None
        return max(finalists, key=lambda c: c.avg_intensity)

    @staticmethod
    def restore_order(processed: List[int], identifiers: Sequence) -> List[int]:
        """
        Sort processed row positions back into input order by identifier.

        Duplicate identifiers share the position of their last occurrence and
        rows with a missing identifier go last; the sort is stable.
        """
        position_of = {}
        for position, identifier in enumerate(identifiers):
            if not is_missing(identifier):
                position_of[identifier] = position

        def rank(position):
            identifier = identifiers[position]
            if is_missing(identifier):
                return math.inf
            return position_of.get(identifier, math.inf)

        return sorted(processed, key=rank)

    @staticmethod
    def _is_winner(position: int, winner: QualityCandidate, identifiers: Sequence) -> bool:
        if position == winner.position:
            return True
        winner_id = identifiers[winner.position]
        return not is_missing(winner_id) and identifiers[position] == winner_id
