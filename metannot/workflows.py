"""
End-to-end annotation workflows and CLI interface.

A workflow run is a sequence of pure table transforms. Every completed stage
is recorded in an immutable PipelineContext, so going back a step is just
returning to the previous context.
"""

import argparse
import dataclasses
import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from . import __version__
from .config.annotation_config import AnnotationConfig
from .config.dereplication_config import DereplicationConfig
from .config.merge_config import MergeConfig
from .dataloading import TableLoader
from .dereplication.core import DereplicationEngine
from .dereplication.filtering import ContaminantFilter
from .dereplication.postprocessing import DereplicationPostprocessor
from .integration.arbiter import AnnotationArbiter
from .integration.core import TableMerger
from .integration.preprocessing import BasePreprocessor


@dataclass(frozen=True, eq=False)
class StepRecord:
    """Output of one completed workflow stage."""
    name: str
    table: pd.DataFrame
    unmatched_keys: Tuple = ()


@dataclass(frozen=True, eq=False)
class PipelineContext:
    """Immutable history of table snapshots, one per completed stage."""
    steps: Tuple[StepRecord, ...] = ()

    @property
    def current(self) -> Optional[pd.DataFrame]:
        return self.steps[-1].table if self.steps else None

    @property
    def step_names(self) -> List[str]:
        return [s.name for s in self.steps]

    def advance(self, name: str, table: pd.DataFrame,
                unmatched_keys: Iterable = ()) -> 'PipelineContext':
        return PipelineContext(steps=self.steps + (StepRecord(name, table, tuple(unmatched_keys)),))

    def undo(self) -> 'PipelineContext':
        if not self.steps:
            raise ValueError("Nothing to undo")
        return PipelineContext(steps=self.steps[:-1])

    def rewind(self, n_steps: int) -> 'PipelineContext':
        """Context holding only the first `n_steps` stages, e.g. to redo a merge."""
        return PipelineContext(steps=self.steps[:n_steps])

    def snapshot(self, name: str) -> pd.DataFrame:
        """Table produced by the latest stage called `name`."""
        for step in reversed(self.steps):
            if step.name == name:
                return step.table
        raise KeyError(f"No completed step named '{name}'")

    def unmatched(self) -> Dict[str, list]:
        """Unmatched incoming keys per stage, only for stages that had any."""
        return {s.name: list(s.unmatched_keys) for s in self.steps if s.unmatched_keys}


@dataclass
class WorkflowConfigs:
    merge: MergeConfig = field(default_factory=MergeConfig)
    annotation: AnnotationConfig = field(default_factory=AnnotationConfig)
    dereplication: DereplicationConfig = field(default_factory=DereplicationConfig)

    @classmethod
    def from_file(cls, file_path: Optional[str]) -> 'WorkflowConfigs':
        """Load every stage config from one shared YAML file."""
        return cls(
            merge=MergeConfig.from_file(file_path),
            annotation=AnnotationConfig.from_file(file_path),
            dereplication=DereplicationConfig.from_file(file_path),
        )


class AnnotationWorkflow:
    """High-level orchestrator: base table -> merges -> annotation -> dereplication -> filter."""

    def __init__(self, configs: Optional[WorkflowConfigs] = None):
        self.configs = configs or WorkflowConfigs()
        self.loader = TableLoader(self.configs.merge)
        self.preprocessor = BasePreprocessor(self.configs.merge)
        self.merger = TableMerger(self.configs.merge)
        self.arbiter = AnnotationArbiter(self.configs.annotation)
        self.engine = DereplicationEngine(self.configs.dereplication)
        self.contaminant_filter = ContaminantFilter(self.configs.dereplication)
        self.postprocessor = DereplicationPostprocessor(self.configs.dereplication)

    def start(self, base_table: pd.DataFrame) -> PipelineContext:
        return PipelineContext().advance('base', self.preprocessor.prepare_base_table(base_table))

    def merge(self, context: PipelineContext, incoming: pd.DataFrame, step_name: str) -> PipelineContext:
        if context.current is None:
            raise ValueError("Base table is missing; start the workflow first")
        step = self.configs.merge.get_step(step_name)
        merged, unmatched = self.merger.merge_step(context.current, incoming, step)
        return context.advance(step.name, merged, unmatched)

    def annotate(self, context: PipelineContext) -> PipelineContext:
        if context.current is None:
            raise ValueError("No data available for annotation")
        return context.advance('annotation', self.arbiter.annotate(context.current))

    def dereplicate(self, context: PipelineContext) -> PipelineContext:
        if context.current is None:
            raise ValueError("No data available for dereplication")
        return context.advance('dereplication', self.engine.dereplicate(context.current))

    def filter_contaminants(self, context: PipelineContext, names: Iterable[str]) -> PipelineContext:
        """Filter the current table; dereplicated tables are reduced to retained rows first."""
        if context.current is None:
            raise ValueError("No data available for filtering")
        table = self.postprocessor.retained_rows(context.current)
        return context.advance('filter', self.contaminant_filter.apply(table, names))

    def load_contaminant_names(self, contaminants_file: Optional[str] = None,
                               names: Optional[List[str]] = None) -> set:
        if contaminants_file:
            return self.contaminant_filter.names_from_table(self.loader.load_table(contaminants_file))
        return self.contaminant_filter.parse_names('\n'.join(names or []))

    def run_annotation(self, base_file: str, source_files: Dict[str, str],
                       output_dir: str) -> PipelineContext:
        """
        Build the annotated table: prepare the base table, run every configured
        merge step that has a source file, then resolve final annotations.

        Args:
            base_file: Feature table export (ID/MZ/RT or Filename column)
            source_files: Merge step name -> file path
            output_dir: Directory receiving one export per step

        Returns:
            PipelineContext: History ending with the annotation stage
        """
        print("=== Annotation Workflow ===")
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        self._dump_config_to_json(output_dir)

        context = self.start(self.loader.load_table(base_file))
        for step in self.configs.merge.steps:
            if step.name not in source_files:
                print(f"No file given for step '{step.name}', skipping")
                continue
            print(f"\n--- Merging {step.name} ---")
            context = self.merge(context, self.loader.load_table(source_files[step.name]), step.name)

        print("\n--- Generating final annotations ---")
        context = self.annotate(context)

        self._export_steps(context, output_dir)
        self._write_unmatched_summary(context, output_dir)
        return context

    def run_dereplication(self, context: PipelineContext, output_dir: str) -> PipelineContext:
        print("\n--- Dereplication ---")
        output_dir = Path(output_dir)
        context = self.dereplicate(context)

        self.loader.export_table(self.postprocessor.retained_rows(context.current),
                                 output_dir / 'dereplicated_data.xlsx')
        report = self.postprocessor.removal_report(context.current)
        report_file = output_dir / 'dereplication_removed.txt'
        report_file.write_text('\n'.join(report) + ('\n' if report else ''), encoding='utf-8')
        print(f"Removed {len(report)} redundant or low-quality entries; report saved to {report_file}")
        return context

    def run_filter(self, context: PipelineContext, names: Iterable[str], output_dir: str) -> PipelineContext:
        print("\n--- Contaminant filtering ---")
        context = self.filter_contaminants(context, names)
        self.loader.export_table(context.current, Path(output_dir) / 'filtered_data.xlsx')
        return context

    def run_full(self, base_file: str, source_files: Dict[str, str], output_dir: str,
                 contaminant_names: Optional[Iterable[str]] = None) -> PipelineContext:
        print("=== Full metannot Workflow ===")
        context = self.run_annotation(base_file, source_files, output_dir)
        context = self.run_dereplication(context, output_dir)
        if contaminant_names:
            context = self.run_filter(context, contaminant_names, output_dir)

        annotations = self.postprocessor.unique_annotations(context.current)
        (Path(output_dir) / 'retained_annotations.txt').write_text(
            '\n'.join(annotations) + ('\n' if annotations else ''), encoding='utf-8')
        print(f"\nFull workflow complete! {len(annotations)} unique annotations retained.")
        return context

    def _export_steps(self, context: PipelineContext, output_dir: Path):
        for index, step in enumerate(context.steps, start=1):
            self.loader.export_table(step.table, output_dir / f"step_{index}_{step.name}_result.xlsx")

    def _write_unmatched_summary(self, context: PipelineContext, output_dir: Path):
        summary = {name: [str(k) for k in keys] for name, keys in context.unmatched().items()}
        summary_file = output_dir / 'unmatched_keys.json'
        with open(summary_file, 'w') as f:
            json.dump(summary, f, indent=2, ensure_ascii=False)
        for name, keys in summary.items():
            print(f"{len(keys)} unmatched keys in step '{name}'")
        print(f"Unmatched key summary saved to {summary_file}")

    def _dump_config_to_json(self, output_dir: Path):
        """Save configuration parameters to JSON file in output directory."""
        config_file = Path(output_dir) / "metannot_config.json"
        config_data = {
            "workflow_info": {
                "timestamp": datetime.now().isoformat(),
                "metannot_version": __version__,
            },
            "configuration": {
                "merge": dataclasses.asdict(self.configs.merge),
                "annotation": dataclasses.asdict(self.configs.annotation),
                "dereplication": dataclasses.asdict(self.configs.dereplication),
            },
        }
        with open(config_file, 'w') as f:
            json.dump(config_data, f, indent=2, default=str, ensure_ascii=False)
        print(f"Configuration saved to: {config_file}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='metannot annotation workflows')
    parser.add_argument('workflow', choices=['annotate', 'dereplicate', 'filter', 'full'],
                        help='Workflow to run')
    parser.add_argument('--output-dir', '-o', required=True,
                        help='Output directory for results')

    input_group = parser.add_argument_group('Input tables')
    input_group.add_argument('--base', help='MZmine export or net table (annotate/full)')
    input_group.add_argument('--fbmn', help='FBMN library match table')
    input_group.add_argument('--sirius', help='SIRIUS structure identification table')
    input_group.add_argument('--supplementary', help='Supplementary table matched on ionMass')
    input_group.add_argument('--input', help='Annotated table (dereplicate/filter)')

    contaminant_group = parser.add_mutually_exclusive_group()
    contaminant_group.add_argument('--contaminants-file',
                                   help="Table with a 'name' column of contaminants to remove")
    contaminant_group.add_argument('--contaminants', nargs='+',
                                   help='Contaminant names to remove')

    parser.add_argument('--config-file', help='YAML configuration file')
    parser.add_argument('--precision', type=int,
                        help='Decimal places for m/z tolerance matching (default: 3)')
    parser.add_argument('--duplicate-key-policy', choices=['first', 'last'],
                        help='Which incoming row wins for repeated keys (default: last)')
    parser.add_argument('--quiet', action='store_true', help='Silence stage-level progress output')
    return parser


def main(argv: Optional[List[str]] = None):
    """Command-line interface for metannot."""
    parser = build_parser()
    args = parser.parse_args(argv)

    configs = WorkflowConfigs.from_file(args.config_file)
    if args.precision is not None:
        configs.merge.precision = args.precision
    if args.duplicate_key_policy:
        configs.merge.duplicate_key_policy = args.duplicate_key_policy
    if args.quiet:
        for config in (configs.merge, configs.annotation, configs.dereplication):
            config.verbose = False

    workflow = AnnotationWorkflow(configs)
    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    source_files = {name: path for name, path in
                    (('fbmn', args.fbmn), ('sirius', args.sirius), ('supplementary', args.supplementary))
                    if path}

    contaminant_names = None
    if args.contaminants_file or args.contaminants:
        contaminant_names = workflow.load_contaminant_names(args.contaminants_file, args.contaminants)

    if args.workflow in ('annotate', 'full') and not args.base:
        parser.error(f"--base is required for the '{args.workflow}' workflow")
    if args.workflow in ('dereplicate', 'filter') and not args.input:
        parser.error(f"--input is required for the '{args.workflow}' workflow")
    if args.workflow == 'filter' and not contaminant_names:
        parser.error("--contaminants-file or --contaminants is required for the 'filter' workflow")

    if args.workflow == 'annotate':
        context = workflow.run_annotation(args.base, source_files, output_dir)
        print(f"Annotated table: {len(context.current)} features")

    elif args.workflow == 'dereplicate':
        context = PipelineContext().advance('input', workflow.loader.load_table(args.input))
        workflow.run_dereplication(context, output_dir)

    elif args.workflow == 'filter':
        context = PipelineContext().advance('input', workflow.loader.load_table(args.input))
        workflow.run_filter(context, contaminant_names, output_dir)

    elif args.workflow == 'full':
        workflow.run_full(args.base, source_files, output_dir, contaminant_names)


if __name__ == '__main__':
    main()
