"""
Command-line interface for romtracker
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from . import __version__
from .filters import STATUS_CHOICES, ResultFilter, collection_stats, filter_results
from .monitor import log_event, setup_monitoring
from .parser import parse_catalog, parse_owned_list
from .platforms import find_matching_platform
from .reporter import MissingReporter
from .session_state import build_snapshot, load_snapshot, restore_orchestrator, save_snapshot
from .settings import load_settings, matching_options


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser"""
    parser = argparse.ArgumentParser(
        prog='romtracker',
        description='ROM collection tracker - compare owned files against DAT catalogs',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  %(prog)s --dat snes.dat --owned snes.txt
  %(prog)s --dat snes.dat --dat md.dat --owned "Sega - Mega Drive - Genesis=md.txt"
  %(prog)s --dat snes.dat --owned snes.txt --state state.json
  %(prog)s --dat snes.dat --owned snes.txt --report missing --report-output missing.csv
  %(prog)s --web --port 5000
        '''
    )

    parser.add_argument('--web', action='store_true', help='Launch the web API')
    parser.add_argument('--host', type=str, default=None, help='Web API host')
    parser.add_argument('--port', type=int, default=None, help='Web API port')

    cli_group = parser.add_argument_group('Matching')

    cli_group.add_argument(
        '--dat', '-d',
        type=str,
        action='append',
        default=[],
        help='Path to an XML DAT catalog (can be specified multiple times)'
    )

    cli_group.add_argument(
        '--owned', '-o',
        type=str,
        action='append',
        default=[],
        metavar='[PLATFORM=]PATH',
        help='Owned-list text file, one file name per line. Without PLATFORM '
             'the platform is guessed from the file name'
    )

    cli_group.add_argument(
        '--state',
        type=str,
        help='Match state file; when given, runs are incremental across invocations'
    )

    cli_group.add_argument(
        '--full-rematch',
        action='store_true',
        help='Discard previous results and match every platform again'
    )

    cli_group.add_argument(
        '--rematch',
        type=str,
        action='append',
        default=[],
        metavar='PLATFORM',
        help='Match one platform again (can be specified multiple times)'
    )

    cli_group.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Suppress progress output'
    )

    cli_group.add_argument(
        '--monitor',
        action='store_true',
        help='Echo log events to stderr while running'
    )

    cli_group.add_argument(
        '--monitor-file',
        type=str,
        help='Log file path'
    )

    report_group = parser.add_argument_group('Report')

    report_group.add_argument(
        '--report',
        type=str,
        choices=['missing'],
        help='Generate a report'
    )

    report_group.add_argument(
        '--report-output',
        type=str,
        help='Output file for report (.txt, .csv, or .json)'
    )

    report_group.add_argument(
        '--status',
        type=str,
        choices=STATUS_CHOICES,
        default='all',
        help='Restrict reported results by ownership status (default: all)'
    )

    parser.add_argument(
        '--version', '-v',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    return parser


def _read_text(path: str) -> str:
    with open(path, 'r', encoding='utf-8', errors='replace') as f:
        return f.read()


def _split_owned_arg(value: str):
    """'PLATFORM=PATH' -> (PLATFORM, PATH); a plain path -> (None, PATH)"""
    if '=' in value and not os.path.exists(value):
        platform, path = value.split('=', 1)
        return platform.strip() or None, path.strip()
    return None, value


def run_cli(args=None):
    """Run the CLI"""
    parser = create_parser()
    args = parser.parse_args(args)
    settings = load_settings()

    log_file = args.monitor_file or settings['logging'].get('file') or None
    echo = args.monitor or settings['logging'].get('echo', False)
    if log_file or echo:
        setup_monitoring(log_file=log_file, echo=echo)
    log_event('cli.start', 'CLI execution started')

    if args.web:
        from .web import run_server
        run_server(args.host or settings['web']['host'], args.port or settings['web']['port'])
        return 0

    quiet = args.quiet

    def log(msg):
        if not quiet:
            print(msg)

    options = matching_options(settings)
    snapshot = load_snapshot(Path(args.state)) if args.state else {}
    orchestrator = restore_orchestrator(snapshot, **options)

    if not args.dat and not orchestrator.catalogs:
        log_event('cli.error', 'No catalogs given', logging.ERROR)
        parser.print_help()
        print("\nError: at least one --dat is required.")
        return 1

    log("ROM Collection Tracker")
    log("=" * 50)

    for dat_path in args.dat:
        log(f"\nLoading DAT: {dat_path}")
        if not os.path.exists(dat_path):
            log_event('dat.load.error', f'DAT file not found: {dat_path}', logging.ERROR)
            print(f"Error: DAT file not found: {dat_path}", file=sys.stderr)
            return 1
        result = parse_catalog(_read_text(dat_path), os.path.basename(dat_path))
        if not result.ok:
            log_event('dat.load.error', str(result.error), logging.WARNING)
            print(f"Warning: skipping {dat_path}: {result.error.reason}", file=sys.stderr)
            continue
        orchestrator.add_catalog(result.catalog)
        log_event('dat.load.done', f'Loaded {result.catalog.platform_name} '
                                   f'({len(result.catalog.entries)} entries)')
        log(f"   Platform: {result.catalog.platform_name}")
        log(f"   Entries: {len(result.catalog.entries):,}")

    if not orchestrator.catalogs:
        print("Error: no usable catalogs were loaded.", file=sys.stderr)
        return 1

    for value in args.owned:
        platform, path = _split_owned_arg(value)
        if not os.path.exists(path):
            log_event('owned.load.error', f'Owned list not found: {path}', logging.ERROR)
            print(f"Error: owned list not found: {path}", file=sys.stderr)
            return 1
        if platform is None:
            platform = find_matching_platform(path, list(orchestrator.catalogs))
            if platform is None:
                print(f"Error: cannot tell which platform {path} belongs to; "
                      f"use --owned PLATFORM={path}", file=sys.stderr)
                return 1
        owned = parse_owned_list(_read_text(path), platform, os.path.basename(path))
        orchestrator.set_owned_list(owned)
        log(f"\nOwned list: {path} -> {platform} ({len(owned.items):,} files)")

    if args.full_rematch:
        orchestrator.full_rematch()
    for platform in args.rematch:
        orchestrator.rematch_platform(platform)

    def progress_callback(event):
        if not quiet:
            print(f"   Matching {event.platform_name}: "
                  f"{event.current_index:,} / {event.total_count:,}...", end='\r')

    log("\nMatching:")
    outcome = orchestrator.match(progress_callback=progress_callback)
    if not quiet:
        print()
    log_event('match.done', f'Processed={len(outcome.processed)} Results={len(outcome.results)}')

    if not orchestrator.platforms:
        log("   No platform has both a catalog and an owned list.")
    for platform in orchestrator.platforms:
        stats = collection_stats(orchestrator.results_for(platform))
        log(f"   {platform}: {stats['have']}/{stats['total']} ({stats['percentage']:.1f}%)")

    if args.state:
        save_snapshot(build_snapshot(orchestrator), Path(args.state))

    if args.report == 'missing':
        results = filter_results(orchestrator.results, ResultFilter(status=args.status))
        return _generate_report(args, results, orchestrator.platforms, log)

    return 0


def _generate_report(args, results, platforms, log):
    """Generate missing release report."""
    reporter = MissingReporter()
    report = reporter.generate_multi_report(results, platforms)

    if args.report_output:
        ext = os.path.splitext(args.report_output)[1].lower()
        fmt = {'.csv': 'csv', '.json': 'json'}.get(ext, 'txt')
        reporter.export(report, args.report_output, fmt)
        log(f"\nReport saved to: {args.report_output}")
    else:
        print()
        print(reporter.render_txt(report), end='')

    return 0


def main():
    """Entry point"""
    sys.exit(run_cli())


if __name__ == '__main__':
    main()
