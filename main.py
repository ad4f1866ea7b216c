"""
Main entry point for the Chittoor project tracker.

This script provides the command-line interface: browsing the reconciled
village/mandal mapping the project form uses, and generating analytics
reports from a project export.
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add the current directory to Python path for imports
sys.path.insert(0, str(Path(__file__).parent))

from chittoor_tracker.backend import CsvTableSource
from chittoor_tracker.config import TrackerConfig, VALID_LOG_LEVELS
from chittoor_tracker.data_loader import DataLoader
from chittoor_tracker.exceptions import (
    ConfigurationError, DataLoadError, FileAccessError, OutputGenerationError
)
from chittoor_tracker.locations.reconciler import LocationReconciler, LocationSession
from chittoor_tracker.locations.selector import LocationSelector
from chittoor_tracker.logging_config import setup_logging
from chittoor_tracker.models import ApprovalStatus
from chittoor_tracker.output.report_generator import ProjectReportGenerator


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Chittoor Project Tracker - locations and project analytics"
    )

    parser.add_argument(
        "--log-level",
        choices=VALID_LOG_LEVELS,
        default="WARNING",
        help="Logging level (default: WARNING)"
    )

    parser.add_argument(
        "--log-file",
        help="Also write log output to this file"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    locations = subparsers.add_parser(
        "locations",
        help="List mandals and villages from the reconciled location mapping"
    )
    locations.add_argument(
        "--villages",
        help="Path to a village,mandal file (default: bundled data)"
    )
    locations.add_argument(
        "--remote-csv",
        help="CSV export of the remote mandal_villages table to merge over the local data"
    )
    locations.add_argument(
        "--mandal-filter",
        default="",
        help="Filter text for the mandal list (applies from 2 characters)"
    )
    locations.add_argument(
        "--mandal",
        default="",
        help="Show the villages of this mandal"
    )
    locations.add_argument(
        "--village-filter",
        default="",
        help="Filter text for the village list (applies from 3 characters)"
    )

    report = subparsers.add_parser(
        "report",
        help="Generate analytics reports from a project export"
    )
    report.add_argument(
        "--projects",
        required=True,
        help="Path to a projects CSV or JSON export"
    )
    report.add_argument(
        "--output",
        required=True,
        help="Output directory for report files"
    )
    report.add_argument(
        "--status",
        choices=["all"] + [status.value for status in ApprovalStatus],
        default="all",
        help="Only include projects with this approval status (default: all)"
    )

    return parser.parse_args(argv)


def run_locations(args, config, logger) -> int:
    """Print the mandal and village lists the project form would offer."""
    loader = DataLoader(logger=logger)
    blob = loader.read_villages_blob(config.villages_file)

    remote = CsvTableSource(args.remote_csv) if args.remote_csv else None
    reconciler = LocationReconciler(remote, config.remote_locations_table, logger=logger)

    session = LocationSession(reconciler, logger=logger)
    session.mount(blob)
    asyncio.run(session.refresh())

    selector = LocationSelector.from_config(session.mapping, config)
    selector.set_mandal_filter(args.mandal_filter)
    if args.mandal:
        selector.select_mandal(args.mandal)
    selector.set_village_filter(args.village_filter)

    print(f"Location mapping: {len(session.mapping):,} villages ({session.source})")

    mandals = selector.mandal_options()
    print(f"\nMandals ({len(mandals)}):")
    for mandal in mandals:
        print(f"  {mandal}")

    villages = selector.village_options()
    heading = f"Villages in {selector.selected_mandal}" if selector.selected_mandal else "Villages"
    print(f"\n{heading} ({len(villages)}):")
    for village in villages:
        print(f"  {village} ({session.mapping.mandal_for(village)})")

    if selector.show_no_match_hint:
        print("\nNo villages match your search.")
        suggestions = selector.village_suggestions()
        if suggestions:
            print("Did you mean: " + ", ".join(suggestions))

    session.unmount()
    return 0


def run_report(args, config, logger) -> int:
    """Generate report files from a project export."""
    loader = DataLoader(logger=logger)
    records = loader.load_projects(args.projects)
    if args.status != "all":
        records = [r for r in records if r.approval_status.value == args.status]

    generator = ProjectReportGenerator(config, logger)
    generated_files = generator.generate_all_outputs(records)

    print("\n".join(generator.summary_lines(records)))
    print("\nGenerated Output Files:")
    for file_type, file_path in generated_files.items():
        print(f"  {file_type}: {Path(file_path).name}")
    return 0


def main(argv=None) -> int:
    """Main application entry point."""
    args = parse_arguments(argv)
    logger = None

    try:
        config = TrackerConfig(
            villages_file=getattr(args, 'villages', None),
            output_directory=getattr(args, 'output', None) or "output",
            log_level=args.log_level,
            log_file=args.log_file
        )
        logger = setup_logging(config)
        logger.debug(f"Configuration: {config.to_dict()}")

        if args.command == "locations":
            return run_locations(args, config, logger)
        return run_report(args, config, logger)

    except ConfigurationError as e:
        print(f"\nConfiguration Error: {e}", file=sys.stderr)
        return 2

    except (FileAccessError, DataLoadError) as e:
        print(f"\nFile Error: {e}", file=sys.stderr)
        print("Please check that all input files exist and are accessible.", file=sys.stderr)
        return 4

    except OutputGenerationError as e:
        print(f"\nOutput Error: {e}", file=sys.stderr)
        return 3

    except KeyboardInterrupt:
        print("\nProcess interrupted by user", file=sys.stderr)
        return 130

    finally:
        if logger is not None:
            logger.close()


if __name__ == "__main__":
    sys.exit(main())
