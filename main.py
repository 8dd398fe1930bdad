"""
Main entry point for the FRA atlas application.

This script provides the command-line interface for building an atlas map:
it loads the claims, drives the boundary drill-down or a district search,
applies claim filters and writes the resulting map as an HTML page.
"""

import argparse
import sys
import time

import psutil

from fra_atlas.atlas import AtlasSession
from fra_atlas.config import AtlasConfig, BASEMAPS, DEFAULT_BOUNDARY_BASE_URL, LOG_LEVELS
from fra_atlas.exceptions import AtlasError, ConfigurationError, RegionNotFound
from fra_atlas.logging_config import setup_logging


EXIT_OK = 0
EXIT_UNEXPECTED = 1
EXIT_REGION_NOT_FOUND = 2
EXIT_FETCH_FAILURE = 3
EXIT_CONFIGURATION = 4
EXIT_INTERRUPTED = 130


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="FRA Atlas - Map forest-rights claims over Indian administrative boundaries"
    )

    parser.add_argument(
        "--output",
        default="fra_atlas.html",
        help="Path of the HTML map to write (default: fra_atlas.html)"
    )

    parser.add_argument(
        "--claims",
        help="GeoJSON FeatureCollection of claims (default: bundled sample claims)"
    )

    # Boundary drill-down
    parser.add_argument(
        "--boundaries",
        action="store_true",
        help="Show the state boundaries"
    )

    parser.add_argument(
        "--state",
        help="Drill into this state (implies --boundaries)"
    )

    parser.add_argument(
        "--district",
        help="Focus this district of --state"
    )

    parser.add_argument(
        "--search-state",
        help="State of the district to search for"
    )

    parser.add_argument(
        "--search-district",
        help="District to search for; shows only that district"
    )

    parser.add_argument(
        "--prefetch",
        action="store_true",
        help="Fetch the districts of every state into the cache before drawing"
    )

    # Claim filters
    parser.add_argument("--filter-state", default="", help="Show claims whose state contains this text")
    parser.add_argument("--filter-district", default="", help="Show claims whose district contains this text")
    parser.add_argument("--filter-village", default="", help="Show claims whose village contains this text")
    parser.add_argument("--tribal-group", default="", help="Show claims whose tribal group contains this text")

    parser.add_argument(
        "--status",
        action="append",
        default=[],
        help="Show claims with this status; repeat for several (default: all)"
    )

    parser.add_argument(
        "--feature-type",
        default="",
        help="Show claims of this feature type (IFR, CR, CFR, ...)"
    )

    parser.add_argument(
        "--locate",
        help="Search claim locations and narrow the map to the first match"
    )

    # Map widget
    parser.add_argument(
        "--basemap",
        choices=sorted(BASEMAPS),
        default="openstreetmap",
        help="Basemap tiles (default: openstreetmap)"
    )

    parser.add_argument(
        "--draw",
        action="store_true",
        help="Add polygon, rectangle, circle and marker drawing tools"
    )

    # Boundary source
    parser.add_argument(
        "--base-url",
        default=DEFAULT_BOUNDARY_BASE_URL,
        help="Root URL of the boundary GeoJSON host"
    )

    parser.add_argument(
        "--timeout",
        type=float,
        help="Boundary request timeout in seconds (default: none)"
    )

    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default="INFO",
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-file",
        help="Also write the log to this file"
    )

    args = parser.parse_args(argv)

    if bool(args.search_state) != bool(args.search_district):
        parser.error("--search-state and --search-district must be given together")
    if args.district and not args.state:
        parser.error("--district requires --state")

    return args


class PerformanceMonitor:
    """Track elapsed time and memory use of the run's phases."""

    def __init__(self, logger=None):
        self.logger = logger
        self.process = psutil.Process()
        self.start_time = time.time()
        self.phases = {}
        self.peak_memory_mb = 0.0

    def _memory_mb(self) -> float:
        memory_mb = self.process.memory_info().rss / 1024 / 1024
        self.peak_memory_mb = max(self.peak_memory_mb, memory_mb)
        return memory_mb

    def start_phase(self, name: str):
        self.phases[name] = {'start': time.time(), 'memory_mb': self._memory_mb()}

    def end_phase(self, name: str):
        phase = self.phases.get(name)
        if phase is None:
            return

        phase['duration'] = time.time() - phase['start']
        memory_mb = self._memory_mb()
        if self.logger:
            self.logger.info(f"Phase {name} completed in {phase['duration']:.2f}s ({memory_mb:.1f} MB)")

    def get_summary(self) -> dict:
        return {
            'total_execution_time': time.time() - self.start_time,
            'peak_memory_mb': self.peak_memory_mb,
            'phases': {name: phase.get('duration', 0.0) for name, phase in self.phases.items()}
        }


def build_config(args) -> AtlasConfig:
    """Create the atlas configuration from parsed arguments."""
    return AtlasConfig(
        boundary_base_url=args.base_url,
        request_timeout=args.timeout,
        basemap=args.basemap,
        enable_drawing=args.draw,
        claims_file=args.claims,
        output_file=args.output,
        log_level=args.log_level,
        log_file=args.log_file
    )


def exit_code_for(error) -> int:
    """Map a reported atlas error to the process exit code."""
    if error is None:
        return EXIT_OK
    if isinstance(error, RegionNotFound):
        return EXIT_REGION_NOT_FOUND
    if isinstance(error, ConfigurationError):
        return EXIT_CONFIGURATION
    return EXIT_FETCH_FAILURE


def run(args, session: AtlasSession, monitor: PerformanceMonitor) -> str:
    """Apply the requested filters and map actions, then write the map."""
    monitor.start_phase("claims")
    session.set_filters(
        state=args.filter_state,
        district=args.filter_district,
        village=args.filter_village,
        tribal_group=args.tribal_group,
        claim_statuses=frozenset(args.status),
        feature_type=args.feature_type
    )
    if args.locate:
        matches = session.search_locations(args.locate)
        if matches:
            session.select_location(matches[0])
            print(f"Located: {matches[0].full_name}")
        else:
            print(f"No claim location matches '{args.locate}'")
    monitor.end_phase("claims")

    monitor.start_phase("boundaries")
    if args.boundaries or args.state or args.prefetch:
        session.set_boundaries_enabled(True)
        session.wait_for_pending(args.timeout)

    if args.prefetch:
        session.prefetch_districts()

    if args.state:
        session.click_state(args.state)
        session.wait_for_pending(args.timeout)
        if args.district:
            session.click_district(args.district)

    if args.search_state:
        session.search_district(args.search_state, args.search_district)
        session.wait_for_pending(args.timeout)
    monitor.end_phase("boundaries")

    monitor.start_phase("output")
    path = session.save(args.output)
    monitor.end_phase("output")
    return path


def print_summary(session: AtlasSession, path: str, monitor: PerformanceMonitor):
    """Print a summary of the atlas to console."""
    print("\n" + "=" * 60)
    print("FRA ATLAS MAP WRITTEN")
    print("=" * 60)

    state = session.state
    print(f"\nMap: {path}")
    print(f"  Level: {state.level.value}")
    if state.selected_state:
        print(f"  State: {state.selected_state}")
    if state.selected_district:
        print(f"  District: {state.selected_district}")
    if state.search_result is not None:
        print(f"  Search result: {state.search_result.district}, {state.search_result.state}")

    print(f"\nClaims shown:")
    for status, count in session.status_summary().items():
        print(f"  {status}: {count}")

    stats = session.stats
    print(f"\nBoundaries:")
    print(f"  Fetches issued: {stats.fetches_issued}")
    print(f"  Cache hits: {stats.cache_hits} ({stats.get_cache_hit_rate():.1f}%)")
    print(f"  Fetch failures: {stats.fetch_failures}")

    summary = monitor.get_summary()
    print(f"\nPerformance Summary:")
    print(f"  Total execution time: {summary['total_execution_time']:.2f} seconds")
    print(f"  Peak memory usage: {summary['peak_memory_mb']:.1f} MB")


def main(argv=None):
    """Main application entry point."""
    args = parse_arguments(argv)

    try:
        config = build_config(args)
        logger = setup_logging(config)
        monitor = PerformanceMonitor(logger.logger)

        logger.info(f"Configuration: {config.to_dict()}")

        with AtlasSession(config, logger=logger) as session:
            path = run(args, session, monitor)
            print_summary(session, path, monitor)
            error = session.last_error

        if error is not None:
            print(f"\nError: {error.message}", file=sys.stderr)
            if isinstance(error, RegionNotFound) and error.suggestions:
                print(f"Did you mean: {', '.join(error.suggestions)}?", file=sys.stderr)
        return exit_code_for(error)

    except ConfigurationError as e:
        print(f"\nConfiguration Error: {e.message}", file=sys.stderr)
        if e.valid_values:
            print(f"Valid values: {', '.join(map(str, e.valid_values))}", file=sys.stderr)
        return EXIT_CONFIGURATION

    except AtlasError as e:
        print(f"\nError: {e.message}", file=sys.stderr)
        return exit_code_for(e)

    except KeyboardInterrupt:
        print("\nProcess interrupted by user", file=sys.stderr)
        return EXIT_INTERRUPTED

    except Exception as e:
        print(f"\nUnexpected error: {e}", file=sys.stderr)
        print("Please check the log for more details.", file=sys.stderr)
        return EXIT_UNEXPECTED


if __name__ == "__main__":
    sys.exit(main())
