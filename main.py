#!/usr/bin/env python

"""
Tag Geotag - photo tag and geotag dataset preprocessor

Compacts a tag-membership file and a geotag/URL file into cross-referenced
derivative files, then keeps the most recent photos of every tag.

Usage:
    main.py [command] [paths...] [options]

    Default command is 'run-pipeline' if none specified.

Commands:
    run-pipeline: Run tag-pp, geotag-pp and ultimate on the files in --data-dir (default)
    tag-pp <tag> <to>: Aggregate tag assignments into an inverted index
    geotag-pp <tag_pp> <geotag> <to>: Compact geotag records, dropping untagged photos
    ultimate: Keep the most recent photos per tag (tag_pp.csv/geotag_pp.csv in --data-dir)
    gen-test <tag> <geotag> <to_dir> <num>: Extract a small coherent sample for testing
    hikaku <tag_file> <geotag_file>: Report ids referenced by tags but missing from geotags
    stats <geotag_file>: Summarize a preprocessed geotag file

Options:
    --data-dir: Directory holding the pipeline files (default: .)
    --strict: Fail the ultimate stage when a tagged photo has no geotag row
    --ultimate: hikaku tag file has no count column (tag_ultimate.csv)
    --dry-run: Show what would be done without making changes
    --resume: Skip pipeline steps whose outputs already exist
    --verbose: Enable verbose logging output
"""

import argparse
import logging
import sys
from config import (
    DATA_DIR,
    GEOTAG_PP_FILE,
    GEOTAG_SOURCE_FILE,
    GEOTAG_ULTIMATE_FILE,
    PIPELINE_STEPS,
    STRICT_ULTIMATE,
    TAG_PP_FILE,
    TAG_SOURCE_FILE,
    TAG_ULTIMATE_FILE,
)
from core.compare import CoverageComparer
from core.geotags import GeoTagCompactor
from core.sample import TestSetExtractor
from core.stats import GeotagStatistics
from core.tags import TagAggregator
from core.ultimate import UltimateRanker
from pathlib import Path

logger = logging.getLogger(__name__)

# Positional paths each command expects
COMMAND_ARGUMENTS = {
    'tag-pp': ['tag', 'to'],
    'geotag-pp': ['tag_pp', 'geotag', 'to'],
    'gen-test': ['tag', 'geotag', 'to_dir', 'num'],
    'ultimate': [],
    'hikaku': ['tag_file', 'geotag_file'],
    'stats': ['geotag_file'],
    'run-pipeline': [],
}


class PreprocessPipeline:
    """Orchestrates tag-pp, geotag-pp and ultimate over one data directory"""

    def __init__(self, data_dir: Path = DATA_DIR, dry_run: bool = False, strict: bool = STRICT_ULTIMATE):
        self.data_dir = data_dir
        self.dry_run = dry_run
        self.strict = strict
        self.pipeline_steps = []
        function_map = {
            'tag-pp': self._run_tag_pp,
            'geotag-pp': self._run_geotag_pp,
            'ultimate': self._run_ultimate,
        }

        for step in PIPELINE_STEPS:
            step_with_function = step.copy()
            step_with_function['function'] = function_map[step['name']]
            self.pipeline_steps.append(step_with_function)

    def check_prerequisites(self) -> tuple[bool, list[str]]:
        """Check if all required input files exist"""
        missing_files = []

        for step in self.pipeline_steps:
            for required_file in step['required_files']:
                file_path = self.data_dir / required_file
                if not file_path.exists():
                    missing_files.append(str(file_path))

        return len(missing_files) == 0, missing_files

    def get_next_runnable_steps(self, completed_steps: set[str]) -> list[dict]:
        """Get list of steps that can be run next"""
        runnable = []

        for step in self.pipeline_steps:
            if step['name'] in completed_steps:
                continue

            dependencies = step.get('dependencies', [])
            if all(dep in completed_steps for dep in dependencies):
                runnable.append(step)

        return runnable

    def run_pipeline(self, resume: bool = False) -> bool:
        """Execute tag-pp, geotag-pp and ultimate in dependency order"""
        logger.info(f"Starting preprocessing pipeline in {self.data_dir}")

        if self.dry_run:
            logger.info("DRY RUN MODE - No files will be modified")

        prerequisites_ok, missing_files = self.check_prerequisites()
        if not prerequisites_ok:
            logger.error("Missing required input files:")
            for file_path in missing_files:
                logger.error(f"  - {file_path}")
            return False

        completed_steps = set()
        if resume:
            for step in self.pipeline_steps:
                output_exists = all((self.data_dir / output_file).exists() for output_file in step['output_files'])
                if output_exists:
                    completed_steps.add(step['name'])
                    logger.info(f"Step '{step['name']}' already completed - skipping")

        total_steps = len(self.pipeline_steps)

        while len(completed_steps) < total_steps:
            runnable_steps = self.get_next_runnable_steps(completed_steps)

            if not runnable_steps:
                logger.error("No runnable steps found - pipeline may have circular dependencies")
                return False

            step = runnable_steps[0]
            step_num = len(completed_steps) + 1

            logger.info(f"[{step_num}/{total_steps}] Executing: {step['description']}")

            if self.dry_run:
                logger.info(f"DRY RUN: Would execute {step['name']}")
                completed_steps.add(step['name'])
                continue

            if step['function']():
                completed_steps.add(step['name'])
                logger.info(f"Completed: {step['name']}")
            else:
                logger.error(f"Failed: {step['name']}")
                return False

        logger.info("Pipeline completed successfully!")
        return True

    def _run_tag_pp(self) -> bool:
        return TagAggregator().process_tag_file(self.data_dir / TAG_SOURCE_FILE, self.data_dir / TAG_PP_FILE)

    def _run_geotag_pp(self) -> bool:
        return GeoTagCompactor().process_geotag_file(
            self.data_dir / TAG_PP_FILE, self.data_dir / GEOTAG_SOURCE_FILE, self.data_dir / GEOTAG_PP_FILE
        )

    def _run_ultimate(self) -> bool:
        ranker = UltimateRanker(strict=self.strict)
        return ranker.run(
            self.data_dir / TAG_PP_FILE,
            self.data_dir / GEOTAG_PP_FILE,
            self.data_dir / TAG_ULTIMATE_FILE,
            self.data_dir / GEOTAG_ULTIMATE_FILE,
        )


def parse_arguments(argv: list[str] | None = None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description="Tag Geotag - photo tag and geotag dataset preprocessor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument('command', nargs='?', default='run-pipeline', help='Command to execute (default: run-pipeline)')
    parser.add_argument('paths', nargs='*', help='Command arguments')
    parser.add_argument('--data-dir', type=Path, default=DATA_DIR, help='Directory holding the pipeline files')
    parser.add_argument('--strict', action='store_true', default=STRICT_ULTIMATE, help='Fail on tagged photos without geotag')
    parser.add_argument('--ultimate', action='store_true', help='hikaku tag file has no count column')
    parser.add_argument('--dry-run', action='store_true', help='Show what would be done without making changes')
    parser.add_argument('--resume', action='store_true', help='Skip pipeline steps whose outputs already exist')
    parser.add_argument('--verbose', action='store_true', help='Enable verbose logging output')

    return parser.parse_args(argv)


def setup_logging(verbose: bool = False):
    """Configure logging based on verbosity level"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format='%(asctime)s - %(levelname)s - %(message)s', force=True)


def require_inputs(*paths: Path) -> bool:
    """Report missing input files before any output is opened"""
    missing = [p for p in paths if not p.exists()]
    for p in missing:
        logger.error(f"Input file not found: {p}")
    return not missing


def run_command(args) -> bool:
    """Dispatch one command; returns True on success"""
    command = args.command
    expected = COMMAND_ARGUMENTS.get(command)
    if expected is None:
        print(__doc__.strip())
        return False

    if len(args.paths) != len(expected):
        usage = ' '.join(f"<{name}>" for name in expected)
        logger.error(f"Usage: main.py {command} {usage}".rstrip())
        return False

    paths = [Path(p) for p in args.paths]

    if command == "run-pipeline":
        pipeline = PreprocessPipeline(data_dir=args.data_dir, dry_run=args.dry_run, strict=args.strict)
        return pipeline.run_pipeline(resume=args.resume)

    elif command == "tag-pp":
        tag_file, output_file = paths
        if not require_inputs(tag_file):
            return False
        if args.dry_run:
            logger.info(f"DRY RUN: Would aggregate {tag_file} into {output_file}")
            return True
        return TagAggregator().process_tag_file(tag_file, output_file)

    elif command == "geotag-pp":
        tag_pp_file, geotag_file, output_file = paths
        if not require_inputs(tag_pp_file, geotag_file):
            return False
        if args.dry_run:
            logger.info(f"DRY RUN: Would compact {geotag_file} into {output_file}")
            return True
        return GeoTagCompactor().process_geotag_file(tag_pp_file, geotag_file, output_file)

    elif command == "ultimate":
        tag_pp_file = args.data_dir / TAG_PP_FILE
        geotag_pp_file = args.data_dir / GEOTAG_PP_FILE
        if not require_inputs(tag_pp_file, geotag_pp_file):
            return False
        if args.dry_run:
            logger.info(f"DRY RUN: Would rank {tag_pp_file} and {geotag_pp_file}")
            return True
        ranker = UltimateRanker(strict=args.strict)
        return ranker.run(
            tag_pp_file, geotag_pp_file, args.data_dir / TAG_ULTIMATE_FILE, args.data_dir / GEOTAG_ULTIMATE_FILE
        )

    elif command == "gen-test":
        tag_file, geotag_file, to_dir = paths[:3]
        try:
            count = int(args.paths[3])
        except ValueError:
            logger.error(f"Sample size must be an integer: {args.paths[3]}")
            return False
        if not require_inputs(tag_file, geotag_file):
            return False
        if args.dry_run:
            logger.info(f"DRY RUN: Would sample {count} rows into {to_dir}")
            return True
        return TestSetExtractor().extract(tag_file, geotag_file, to_dir, count)

    elif command == "hikaku":
        tag_file, geotag_file = paths
        if not require_inputs(tag_file, geotag_file):
            return False
        try:
            result = CoverageComparer(ultimate=args.ultimate).compare(tag_file, geotag_file)
        except (OSError, ValueError) as e:
            logger.error(f"Error comparing {tag_file} and {geotag_file}: {e}")
            return False

        print("\n=== Id Coverage ===")
        print(f"Tag ids: {result['tag_ids']}")
        print(f"Geotag ids: {result['geotag_ids']}")
        print(f"Missing from geotag ({len(result['missing_from_geotag'])}): {result['missing_from_geotag']}")
        print(f"Unreferenced geotags ({len(result['unreferenced'])}): {result['unreferenced']}")
        return True

    elif command == "stats":
        (geotag_file,) = paths
        if not require_inputs(geotag_file):
            return False
        try:
            summary = GeotagStatistics().summarize(geotag_file)
        except (OSError, ValueError) as e:
            logger.error(f"Error summarizing {geotag_file}: {e}")
            return False

        print("\n=== Geotag Statistics ===")
        print(f"Rows: {summary['rows']}")
        if summary['time_range']:
            print(f"Time range: {summary['time_range']['earliest']} to {summary['time_range']['latest']}")
            box = summary['bounding_box']
            print(f"Latitude: {box['min_latitude']} to {box['max_latitude']}")
            print(f"Longitude: {box['min_longitude']} to {box['max_longitude']}")
        for domain, count in summary['domains'].items():
            print(f"Domain {domain}: {count}")
        return True

    return False


def main():
    args = parse_arguments()

    setup_logging(args.verbose)

    success = run_command(args)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
