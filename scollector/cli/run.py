"""
Run CLI handler.

Path: scollector/cli/run.py

Handles: scollector run <workbook> [options]

Fatal errors (bad config, bad pattern, unreadable credentials, workbook
that cannot be opened or saved) exit 1 before or instead of polling.
Per-host and per-sheet failures are reported but do not change the
exit code.
"""

import logging
from pathlib import Path

from scollector.cli.credentials import prompt_credentials
from scollector.core.config import get_config
from scollector.core.credentials import CredentialError
from scollector.core.log import configure_logging
from scollector.core.pattern import ExtractionPattern, PatternError
from scollector.jobs.runner import WorkbookRunner, RunResult
from scollector.workbook import WorkbookError, WorkbookOptions


def handle_run(args) -> int:
    """Handle run subcommand."""
    try:
        config = get_config(config_path=Path(args.config) if args.config else None)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    if args.debug:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    else:
        level = config.logging.level
    configure_logging(level=level, log_file=config.logging.file)

    # Validate everything before asking for credentials
    try:
        pattern = ExtractionPattern.compile(args.pattern or config.poll.pattern)
    except PatternError as e:
        print(f"Error: {e}")
        return 1

    options = config.executor_options()
    if args.remote_command:
        options.command = args.remote_command
    if args.port:
        options.port = args.port
    if args.max_workers is not None:
        options.max_workers = args.max_workers
    if args.timeout:
        options.connect_timeout = args.timeout
        options.command_timeout = args.timeout
    options.debug = args.debug
    options.capture_traceback = args.debug
    if options.max_workers < 1:
        print(f"Error: max_workers must be at least 1 (got {options.max_workers})")
        return 1

    wb_config = config.workbook
    try:
        workbook_options = WorkbookOptions(
            host_column=args.host_column or wb_config.host_column,
            result_column=args.result_column or wb_config.result_column,
            header_rows=args.header_rows if args.header_rows is not None else wb_config.header_rows,
            write_errors=args.write_errors if args.write_errors is not None else wb_config.write_errors,
        )
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    workbook_path = Path(args.workbook).expanduser()
    if not workbook_path.exists():
        print(f"Error: Workbook not found: {workbook_path}")
        return 1

    try:
        creds = prompt_credentials(args.username)
    except CredentialError as e:
        print(f"Error: {e}")
        return 1

    print(f"Workbook: {workbook_path}")
    print(f"Command: {options.command}")
    print(f"Pattern: {pattern.text}")
    print(f"User: {creds.username}")
    print("=" * 60)

    runner = WorkbookRunner(
        credentials=creds,
        pattern=pattern,
        options=options,
        workbook_options=workbook_options,
    )

    def progress(sheet, completed, total, result):
        if result.success:
            print(f"[{sheet}] {result.host} - {result.data}")
        else:
            print(f"[{sheet}] Error polling {result.host}: {result.error}")

    try:
        result = runner.run(
            workbook_path,
            sheets=args.sheets,
            output_path=args.output,
            progress_callback=None if args.quiet else progress,
        )
    except WorkbookError as e:
        print(f"Error: {e}")
        return 1

    print()
    print("=" * 60)
    _print_run_result(result)
    return 0


def _print_run_result(result: RunResult):
    """Print per-sheet and overall summary."""
    for sheet in result.sheets:
        if sheet.skipped:
            print(f"  - {sheet.sheet}: skipped ({sheet.skipped_reason})")
        else:
            print(f"  {'✓' if sheet.failed_count == 0 else '✗'} {sheet.sheet}: "
                  f"{sheet.success_count}/{sheet.total_hosts} hosts, "
                  f"{sheet.written} cells written")

    print(f"\nHosts: {result.success_count} success, {result.failed_count} failed")
    print(f"Total time: {result.duration_seconds:.1f}s")

    failures = [(s.sheet, r) for s in result.sheets if s.batch for r in s.batch.failures()]
    if failures:
        print(f"\nFailures ({len(failures)}):")
        for sheet, r in failures[:20]:
            print(f"  - [{sheet}] {r.host}: {r.error}")
        if len(failures) > 20:
            print(f"  ... and {len(failures) - 20} more")

    print(f"\nAll sheets processed. Result saved in \"{result.saved_to}\"")
