"""
Joining upstream annotation tables onto the base feature table.

Two kinds of join are supported:

* exact: keys are the trimmed string form of a column (feature IDs);
* tolerance: keys are numbers rounded to a fixed number of decimals (m/z).

Both return the merged table together with the incoming keys that found no
row in the base table. Those keys are diagnostics only; they never filter
anything.

You can use it like this
from .core import TableMerger

merger = TableMerger(config)
merged, unmatched = merger.merge_exact(net_table, fbmn_table, 'ID', ['Compound_Name'])
"""

from typing import List, Optional, Tuple

import pandas as pd

from ..config.merge_config import MergeConfig, MergeStep
from ..utils import clean_text, normalize_nulls, round_half_up
from .preprocessing import validate_columns


class TableMerger:
    """Appends columns from an incoming table to matching rows of a base table."""

    def __init__(self, config: Optional[MergeConfig] = None):
        self.config = config or MergeConfig()

    def exact_keys(self, values: pd.Series) -> pd.Series:
        """Trimmed string keys; None where the value is missing or blank."""
        keys = [clean_text(v) or None for v in values]
        return pd.Series(keys, index=values.index, dtype=object)

    def tolerance_keys(self, values: pd.Series, precision: Optional[int] = None) -> pd.Series:
        """Numeric keys rounded half up to `precision` decimals; NaN where not numeric."""
        if precision is None:
            precision = self.config.precision
        numbers = pd.to_numeric(values, errors='coerce')
        return numbers.map(lambda v: round_half_up(v, precision)).astype(float)

    def merge_exact(self, base: pd.DataFrame, incoming: pd.DataFrame,
                    key_column: str, append_columns: List[str]) -> Tuple[pd.DataFrame, List]:
        """
        Join on the trimmed string value of `key_column`.

        Args:
            base: Table receiving the new columns
            incoming: Table providing the values
            key_column: Column present in both tables
            append_columns: Columns copied from the matched incoming row

        Returns:
            Tuple of (merged table, unmatched incoming keys)
        """
        validate_columns(base, [key_column], context='Base table')
        validate_columns(incoming, [key_column], context='Incoming table')

        base_keys = self.exact_keys(base[key_column])
        incoming_keys = self.exact_keys(incoming[key_column])

        merged, matched_rows = self._join(base, base_keys, incoming, incoming_keys, append_columns)
        unmatched = self._unmatched_keys(incoming_keys, base_keys)
        self._report(key_column, base_keys, matched_rows, unmatched)
        return merged, unmatched

    def merge_tolerance(self, base: pd.DataFrame, incoming: pd.DataFrame,
                        base_key_column: str, incoming_key_column: str,
                        append_columns: List[str],
                        precision: Optional[int] = None) -> Tuple[pd.DataFrame, List]:
        """
        Join on numeric keys after rounding both sides to `precision` decimals.

        Non-numeric or missing keys are skipped on both sides.

        Returns:
            Tuple of (merged table, unmatched rounded incoming keys)
        """
        validate_columns(base, [base_key_column], context='Base table')
        validate_columns(incoming, [incoming_key_column], context='Incoming table')

        base_keys = self.tolerance_keys(base[base_key_column], precision)
        incoming_keys = self.tolerance_keys(incoming[incoming_key_column], precision)

        merged, matched_rows = self._join(base, base_keys, incoming, incoming_keys, append_columns)
        unmatched = self._unmatched_keys(incoming_keys, base_keys)
        self._report(f"{base_key_column}~{incoming_key_column}", base_keys, matched_rows, unmatched)
        return merged, unmatched

    def merge_step(self, base: pd.DataFrame, incoming: pd.DataFrame,
                   step: MergeStep) -> Tuple[pd.DataFrame, List]:
        """Validate the incoming table against a configured step and join it."""
        validate_columns(incoming, step.required_columns, context=f"Step '{step.name}'")

        if step.is_tolerance:
            return self.merge_tolerance(base, incoming, step.match_column_base,
                                        step.match_column, step.append_columns)
        return self.merge_exact(base, incoming, step.match_column, step.append_columns)

    def unmatched_base_keys(self, base: pd.DataFrame, incoming: pd.DataFrame,
                            base_key_column: str,
                            incoming_key_column: Optional[str] = None,
                            tolerance: bool = False) -> List:
        """Keys of the base table that have no counterpart in the incoming table."""
        incoming_key_column = incoming_key_column or base_key_column
        validate_columns(base, [base_key_column], context='Base table')
        validate_columns(incoming, [incoming_key_column], context='Incoming table')

        if tolerance:
            base_keys = self.tolerance_keys(base[base_key_column])
            incoming_keys = self.tolerance_keys(incoming[incoming_key_column])
        else:
            base_keys = self.exact_keys(base[base_key_column])
            incoming_keys = self.exact_keys(incoming[incoming_key_column])
        return self._unmatched_keys(base_keys, incoming_keys)

    def _build_lookup(self, incoming: pd.DataFrame, incoming_keys: pd.Series,
                      append_columns: List[str]) -> pd.DataFrame:
        """Key -> append-column values, one row per key according to the duplicate policy."""
        valid = incoming_keys.notna().to_numpy()
        # Columns the incoming table lacks come back as all-missing
        lookup = incoming[valid].reindex(columns=append_columns)
        lookup.index = pd.Index(incoming_keys[valid].tolist())
        return lookup[~lookup.index.duplicated(keep=self.config.duplicate_key_policy)]

    def _join(self, base: pd.DataFrame, base_keys: pd.Series, incoming: pd.DataFrame,
              incoming_keys: pd.Series, append_columns: List[str]) -> Tuple[pd.DataFrame, int]:
        lookup = self._build_lookup(incoming, incoming_keys, append_columns)

        merged = base.copy()
        for col in append_columns:
            if col not in merged.columns:
                merged[col] = None

        matched = base_keys.notna() & base_keys.isin(lookup.index)
        if matched.any():
            matched_keys = base_keys[matched].tolist()
            for col in append_columns:
                column = merged[col].astype(object)
                column[matched.to_numpy()] = lookup.loc[matched_keys, col].tolist()
                merged[col] = column

        normalize_nulls(merged, append_columns)
        return merged, int(matched.sum())

    @staticmethod
    def _unmatched_keys(keys: pd.Series, reference_keys: pd.Series) -> List:
        """Distinct non-missing `keys` absent from `reference_keys`, in first-seen order."""
        reference = set(reference_keys.dropna().tolist())
        return [k for k in keys.dropna().drop_duplicates().tolist() if k not in reference]

    def _report(self, key_label: str, base_keys: pd.Series, matched_rows: int, unmatched: List):
        if not self.config.verbose:
            return
        print(f"Matched {matched_rows}/{len(base_keys)} base rows on '{key_label}'")
        if unmatched:
            print(f"  {len(unmatched)} incoming keys have no base row")
