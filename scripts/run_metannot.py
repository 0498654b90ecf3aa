#!/usr/bin/env python3
"""
Command line wrapper for the metannot annotation workflows.

Usage examples:
    # Merge FBMN and SIRIUS results onto an MZmine export and annotate
    python run_metannot.py annotate --base net.xlsx --fbmn fbmn.tsv --sirius sirius.tsv -o results

    # Dereplicate an annotated table
    python run_metannot.py dereplicate --input annotated.xlsx -o results

    # Everything, including contaminant removal
    python run_metannot.py full --base net.xlsx --fbmn fbmn.tsv --sirius sirius.tsv \
        --contaminants-file contaminants.xlsx -o results

    # With custom config
    python run_metannot.py full --config-file config/metannot_params.yaml --base net.xlsx -o results
"""

import logging
import sys
import time
import traceback
from pathlib import Path

# Add the parent directory to Python path so we can import metannot
sys.path.insert(0, str(Path(__file__).parent.parent))

from metannot.exceptions import MetannotError
from metannot.workflows import main as run_workflow

logger = logging.getLogger('metannot')


def setup_logging(verbose: bool = True):
    """Set up basic logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )


def main(argv=None):
    argv = list(sys.argv[1:] if argv is None else argv)
    quiet = '--quiet' in argv
    setup_logging(not quiet)

    start_time = time.time()
    try:
        run_workflow(argv)
    except (MetannotError, FileNotFoundError) as e:
        logger.error(str(e))
        return 1
    except Exception as e:
        logger.error(f"Unexpected failure: {e}")
        if not quiet:
            traceback.print_exc()
        return 1

    logger.info(f"Finished in {time.time() - start_time:.1f} seconds")
    return 0


if __name__ == "__main__":
    sys.exit(main())
