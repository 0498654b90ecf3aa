"""
Tests for YAML-backed configuration loading.
"""

import pytest

from metannot.config import AnnotationConfig, DereplicationConfig, MergeConfig, MergeStep


class TestFromFile:
    def test_no_path_gives_defaults(self):
        config = DereplicationConfig.from_file(None)
        assert config.max_missing_rate == 50.0
        assert config.biological_prefixes == ['CON_', 'HBO_']

    def test_yaml_overrides_and_ignores_unknown_keys(self, tmp_path):
        path = tmp_path / 'params.yaml'
        path.write_text(
            'qc_prefix: "POOL-"\n'
            'max_qc_rsd: 20\n'
            'min_confidence_score: 0.7\n'
            'unrelated_key: 1\n',
            encoding='utf-8',
        )

        derep = DereplicationConfig.from_file(str(path))
        annotation = AnnotationConfig.from_file(str(path))

        assert derep.qc_prefix == 'POOL-'
        assert derep.max_qc_rsd == 20
        assert annotation.min_confidence_score == 0.7
        assert annotation.min_mq_score == 0.9

    def test_merge_steps_from_yaml(self, tmp_path):
        path = tmp_path / 'params.yaml'
        path.write_text(
            'precision: 2\n'
            'steps:\n'
            '  - name: gnps\n'
            '    file_type: fbmn\n'
            '    required_columns: [ID]\n'
            '    match_column: ID\n'
            '    append_columns: [Compound_Name]\n',
            encoding='utf-8',
        )

        config = MergeConfig.from_file(str(path))

        assert config.precision == 2
        assert config.steps == [MergeStep('gnps', 'fbmn', ['ID'], 'ID', ['Compound_Name'])]
        assert not config.get_step('gnps').is_tolerance


class TestDefaults:
    def test_default_steps_follow_the_workflow_order(self):
        assert [s.name for s in MergeConfig().steps] == ['fbmn', 'sirius', 'supplementary']

    def test_supplementary_step_is_a_tolerance_join(self):
        step = MergeConfig().get_step('supplementary')
        assert step.is_tolerance
        assert (step.match_column, step.match_column_base) == ('ionMass', 'MZ')

    def test_negative_precision_is_rejected(self):
        with pytest.raises(ValueError):
            MergeConfig(precision=-1)


class TestShippedParameters:
    def test_example_yaml_feeds_every_stage(self):
        from pathlib import Path
        from metannot.workflows import WorkflowConfigs

        path = Path(__file__).parent.parent / 'config' / 'metannot_params.yaml'
        configs = WorkflowConfigs.from_file(str(path))

        assert configs.merge.precision == 3
        assert configs.annotation.required_library_quality == 'Gold'
        assert configs.dereplication.qc_prefix == 'QC-'
        assert configs.dereplication.keep_exclusion_status is True
