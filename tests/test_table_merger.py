"""
Tests for TableMerger exact and tolerance joins.
"""

import pandas as pd
import pytest

from metannot.config import MergeConfig
from metannot.exceptions import ConfigurationError, ValidationError
from metannot.integration import TableMerger


# ============================================================================
# Exact-key joins
# ============================================================================

class TestMergeExact:
    def test_matched_row_gets_values_unmatched_row_gets_null(self, merge_config):
        base = pd.DataFrame({'ID': ['1', '2']})
        incoming = pd.DataFrame({'ID': ['2'], 'Compound_Name': ['X']})

        merged, unmatched = TableMerger(merge_config).merge_exact(base, incoming, 'ID', ['Compound_Name'])

        assert list(merged.columns) == ['ID', 'Compound_Name']
        assert merged.loc[1, 'Compound_Name'] == 'X'
        assert merged.loc[0, 'Compound_Name'] is None
        assert unmatched == []

    def test_keys_are_trimmed_and_compared_as_strings(self, merge_config):
        base = pd.DataFrame({'ID': [' 7 ', 8]})
        incoming = pd.DataFrame({'ID': ['7', ' 8'], 'Adduct': ['[M-H]-', '[M+Cl]-']})

        merged, _ = TableMerger(merge_config).merge_exact(base, incoming, 'ID', ['Adduct'])

        assert merged['Adduct'].tolist() == ['[M-H]-', '[M+Cl]-']

    def test_absent_append_column_becomes_null(self, merge_config):
        base = pd.DataFrame({'ID': ['1']})
        incoming = pd.DataFrame({'ID': ['1'], 'Compound_Name': ['X']})

        merged, _ = TableMerger(merge_config).merge_exact(base, incoming, 'ID', ['Compound_Name', 'Adduct'])

        assert merged.loc[0, 'Compound_Name'] == 'X'
        assert merged.loc[0, 'Adduct'] is None

    def test_missing_incoming_value_becomes_null(self, merge_config):
        base = pd.DataFrame({'ID': ['1']})
        incoming = pd.DataFrame({'ID': ['1'], 'MQScore': [float('nan')]})

        merged, _ = TableMerger(merge_config).merge_exact(base, incoming, 'ID', ['MQScore'])

        assert merged.loc[0, 'MQScore'] is None

    def test_blank_base_keys_are_never_matched(self, merge_config):
        base = pd.DataFrame({'ID': ['', None, '1'], 'name': ['keep', 'keep', 'old']})
        incoming = pd.DataFrame({'ID': ['', '1'], 'name': ['blank', 'new']})

        merged, _ = TableMerger(merge_config).merge_exact(base, incoming, 'ID', ['name'])

        assert merged['name'].tolist() == ['keep', 'keep', 'new']

    def test_numeric_ids_with_nulls_match_string_ids(self, merge_config):
        # A numeric column holding a null is float64, so ID 2 is stored as 2.0
        base = pd.DataFrame({'ID': [1, 2, None]})
        incoming = pd.DataFrame({'ID': ['2'], 'Compound_Name': ['X']})

        merged, unmatched = TableMerger(merge_config).merge_exact(base, incoming, 'ID', ['Compound_Name'])

        assert merged['Compound_Name'].tolist() == [None, 'X', None]
        assert unmatched == []

    def test_unmatched_incoming_keys_are_distinct(self, merge_config):
        base = pd.DataFrame({'ID': ['1']})
        incoming = pd.DataFrame({'ID': ['9', '1', '9', ' 8 ', None]})

        _, unmatched = TableMerger(merge_config).merge_exact(base, incoming, 'ID', [])

        assert unmatched == ['9', '8']

    def test_existing_columns_keep_their_position(self, merge_config):
        base = pd.DataFrame({'name': ['a'], 'ID': ['1'], 'MZ': [1.0]})
        incoming = pd.DataFrame({'ID': ['1'], 'name': ['b'], 'smiles': ['C']})

        merged, _ = TableMerger(merge_config).merge_exact(base, incoming, 'ID', ['name', 'smiles'])

        assert list(merged.columns) == ['name', 'ID', 'MZ', 'smiles']
        assert merged.loc[0, 'name'] == 'b'

    def test_inputs_are_not_modified(self, merge_config):
        base = pd.DataFrame({'ID': ['1']})
        incoming = pd.DataFrame({'ID': ['1'], 'Compound_Name': ['X']})
        base_before = base.copy()

        TableMerger(merge_config).merge_exact(base, incoming, 'ID', ['Compound_Name'])

        pd.testing.assert_frame_equal(base, base_before)

    def test_row_order_is_preserved(self, merge_config):
        base = pd.DataFrame({'ID': ['3', '1', '2']})
        incoming = pd.DataFrame({'ID': ['1', '2', '3'], 'name': ['a', 'b', 'c']})

        merged, _ = TableMerger(merge_config).merge_exact(base, incoming, 'ID', ['name'])

        assert merged['ID'].tolist() == ['3', '1', '2']
        assert merged['name'].tolist() == ['c', 'a', 'b']

    def test_missing_key_column_raises(self, merge_config):
        base = pd.DataFrame({'ID': ['1']})
        incoming = pd.DataFrame({'id': ['1']})

        with pytest.raises(ValidationError) as excinfo:
            TableMerger(merge_config).merge_exact(base, incoming, 'ID', [])
        assert excinfo.value.missing_columns == ['ID']


# ============================================================================
# Duplicate key policy
# ============================================================================

class TestDuplicateKeys:
    def _tables(self):
        base = pd.DataFrame({'ID': ['1']})
        incoming = pd.DataFrame({'ID': ['1', '1'], 'name': ['first', 'last']})
        return base, incoming

    def test_last_write_wins_by_default(self):
        base, incoming = self._tables()
        merged, _ = TableMerger(MergeConfig(verbose=False)).merge_exact(base, incoming, 'ID', ['name'])
        assert merged.loc[0, 'name'] == 'last'

    def test_first_wins_policy(self):
        base, incoming = self._tables()
        config = MergeConfig(verbose=False, duplicate_key_policy='first')
        merged, _ = TableMerger(config).merge_exact(base, incoming, 'ID', ['name'])
        assert merged.loc[0, 'name'] == 'first'

    def test_unknown_policy_is_rejected(self):
        with pytest.raises(ConfigurationError):
            MergeConfig(duplicate_key_policy='random')


# ============================================================================
# Tolerance joins
# ============================================================================

class TestMergeTolerance:
    def test_values_rounding_to_same_key_match(self, merge_config):
        base = pd.DataFrame({'ID': ['1'], 'MZ': [100.1234]})
        incoming = pd.DataFrame({'ionMass': [100.1228], 'InChI': ['InChI=1S/X']})

        merged, unmatched = TableMerger(merge_config).merge_tolerance(
            base, incoming, 'MZ', 'ionMass', ['InChI'])

        assert merged.loc[0, 'InChI'] == 'InChI=1S/X'
        assert unmatched == []

    def test_halfway_values_round_up(self, merge_config):
        base = pd.DataFrame({'ID': ['1'], 'MZ': [0.0125]})
        incoming = pd.DataFrame({'ionMass': [0.013], 'InChI': ['InChI=1S/Y']})

        merged, unmatched = TableMerger(merge_config).merge_tolerance(
            base, incoming, 'MZ', 'ionMass', ['InChI'])

        assert merged.loc[0, 'InChI'] == 'InChI=1S/Y'
        assert unmatched == []

    def test_tolerance_keys_round_half_up(self, merge_config):
        keys = TableMerger(merge_config).tolerance_keys(pd.Series([0.0125, 2.5, 'x', None]), precision=3)

        assert keys.tolist()[:2] == [0.013, 2.5]
        assert keys.isna().tolist() == [False, False, True, True]

    def test_string_numbers_are_parsed(self, merge_config):
        base = pd.DataFrame({'ID': ['1'], 'MZ': ['250.0004']})
        incoming = pd.DataFrame({'ionMass': ['250.0001'], 'NPC#superclass': ['Alkaloids']})

        merged, _ = TableMerger(merge_config).merge_tolerance(
            base, incoming, 'MZ', 'ionMass', ['NPC#superclass'])

        assert merged.loc[0, 'NPC#superclass'] == 'Alkaloids'

    def test_non_numeric_keys_are_skipped_on_both_sides(self, merge_config):
        base = pd.DataFrame({'ID': ['1', '2'], 'MZ': ['n/a', 150.0]})
        incoming = pd.DataFrame({'ionMass': ['abc', None, 150.0004], 'InChI': ['bad', 'none', 'good']})

        merged, unmatched = TableMerger(merge_config).merge_tolerance(
            base, incoming, 'MZ', 'ionMass', ['InChI'])

        assert merged['InChI'].tolist() == [None, 'good']
        assert unmatched == []

    def test_custom_precision(self, merge_config):
        base = pd.DataFrame({'ID': ['1'], 'MZ': [100.12]})
        incoming = pd.DataFrame({'ionMass': [100.14], 'InChI': ['x']})

        merger = TableMerger(merge_config)
        strict, unmatched = merger.merge_tolerance(base, incoming, 'MZ', 'ionMass', ['InChI'])
        loose, _ = merger.merge_tolerance(base, incoming, 'MZ', 'ionMass', ['InChI'], precision=1)

        assert strict.loc[0, 'InChI'] is None
        assert unmatched == [100.14]
        assert loose.loc[0, 'InChI'] == 'x'


# ============================================================================
# Configured steps and diagnostics
# ============================================================================

class TestMergeStep:
    def test_step_requires_its_columns(self, merge_config, net_table):
        step = merge_config.get_step('supplementary')
        incoming = pd.DataFrame({'mass': [100.123]})

        with pytest.raises(ValidationError, match='ionMass'):
            TableMerger(merge_config).merge_step(net_table, incoming, step)

    def test_supplementary_step_uses_base_mz(self, merge_config, net_table):
        step = merge_config.get_step('supplementary')
        incoming = pd.DataFrame({'ionMass': [200.5002], 'molecularFormula': ['C10H12N2O']})

        merged, _ = TableMerger(merge_config).merge_step(net_table, incoming, step)

        assert merged['molecularFormula'].tolist() == [None, 'C10H12N2O', None]
        assert list(merged.columns[-5:]) == step.append_columns

    def test_unknown_step_name(self, merge_config):
        with pytest.raises(ConfigurationError):
            merge_config.get_step('gnps')

    def test_unmatched_base_keys(self, merge_config, net_table):
        incoming = pd.DataFrame({'ID': ['2', '99']})

        missing = TableMerger(merge_config).unmatched_base_keys(net_table, incoming, 'ID')

        assert missing == ['1', '3']
