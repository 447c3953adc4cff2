#!/usr/bin/env python3
"""
ETL Pipeline CLI
Command-line entry point for the ISB procurement ETL pipeline.

Running it without arguments fetches every dataset of every family and then
converts the snapshot trees to Parquet in a single pass. The flags below
(--family, --convert-only, --verbose, --log-file) and the ISB_* environment
overrides are optional extensions of that plain run; with none of them set
its behaviour is unchanged.
"""

import asyncio
import argparse
import sys
from pathlib import Path
import logging

# Allow running as a script from a source checkout
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from isb_etl.src.catalog import FAMILIES
from isb_etl.src.orchestrator import ETLOrchestrator


def setup_logging(verbose: bool = False, log_file: str = None):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def print_results(results):
    """Print pipeline results."""
    print("\n" + "="*50)
    print(f"Pipeline Results: {results['family']}")
    print("="*50)

    print(f"Status: {results['status']}")

    if results['duration_seconds']:
        duration = results['duration_seconds']
        if duration < 60:
            print(f"Duration: {duration:.2f} seconds")
        else:
            minutes = int(duration // 60)
            seconds = duration % 60
            print(f"Duration: {minutes}m {seconds:.0f}s")

    for phase, summary in results.get('phases', {}).items():
        print(f"\n{phase.capitalize()}:")
        print(f"  Succeeded: {summary['succeeded']}")
        if summary['skipped']:
            print(f"  Skipped: {summary['skipped']}")
        print(f"  Failed: {summary['failed']}")
        for identity, error in summary['failures'].items():
            print(f"  - {identity}: {error}")

    print("="*50)


async def run(args):
    """Run the pipeline for the selected families."""
    orchestrator = ETLOrchestrator()

    if args.convert_only:
        results = await orchestrator.convert_only(args.family)
    else:
        results = await orchestrator.run(args.family)

    for result in results:
        print_results(result)
    return 0


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='ISB Procurement ETL Pipeline',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Fetch and convert every family
  python run_etl.py

  # Only the RUP family
  python run_etl.py --family rup

  # Re-run the Parquet conversion over existing snapshots
  python run_etl.py --convert-only
        """
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )

    parser.add_argument(
        '--family',
        action='append',
        choices=sorted(FAMILIES),
        help='Data family to process (repeatable, default: all)'
    )

    parser.add_argument(
        '--convert-only',
        action='store_true',
        help='Skip fetching and convert existing JSON snapshots'
    )

    parser.add_argument(
        '--log-file',
        help='Also write logs to this file'
    )

    args = parser.parse_args(argv)

    setup_logging(args.verbose, args.log_file)

    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        print("\n\nPipeline interrupted by user.")
        return 130
    except Exception as e:
        print(f"\nError: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == '__main__':
    sys.exit(main())
