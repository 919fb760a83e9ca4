"""
SerialCollector CLI - Main entry point.

Usage:
    scollector run <workbook> [options]
    scollector config init [--force]
    scollector config show
"""

import argparse
import sys


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level argument parser."""
    parser = argparse.ArgumentParser(
        prog="scollector",
        description="Poll network devices over SSH and collect one field per device",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  run         Poll every host listed in a workbook
  config      Create or show the configuration file

Examples:
  # First-time setup
  scollector config init

  # Poll all sheets, write serial numbers into column C
  scollector run WiFi_Access_Points.xlsx --username admin

  # One sheet, different columns, save to a new file
  scollector run aps.xlsx --sheet Building1 --host-column A --result-column D \\
      --output aps_serials.xlsx

Use 'scollector <command> --help' for more information on a command.
""",
    )

    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")

    run_parser = subparsers.add_parser(
        "run",
        help="Poll hosts listed in a workbook",
        description="Poll every host listed in a workbook and write results back",
    )
    _setup_run_parser(run_parser)

    config_parser = subparsers.add_parser(
        "config",
        help="Manage configuration file",
        description="Create or show the configuration file",
    )
    _setup_config_parser(config_parser)

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    # Dispatch to subcommand handler
    if args.command == "run":
        from scollector.cli.run import handle_run

        return handle_run(args)
    elif args.command == "config":
        from scollector.cli.config import handle_config

        return handle_config(args)
    else:
        parser.print_help()
        return 1


def _setup_run_parser(parser: argparse.ArgumentParser):
    """Set up run subcommand parser."""
    parser.add_argument(
        "workbook",
        help="Path to the .xlsx workbook listing hosts"
    )
    parser.add_argument(
        "--sheet", "-s",
        action="append",
        dest="sheets",
        help="Sheet to process (repeatable, default: all sheets)"
    )
    parser.add_argument(
        "--output", "-o",
        help="Save results to this file instead of overwriting the workbook"
    )

    # Credentials
    parser.add_argument(
        "--username", "-u",
        help="SSH username (or set SCOLLECTOR_USER; prompted if missing)"
    )

    # Polling
    parser.add_argument(
        "--command",
        dest="remote_command",
        help="Command to run on each device (default from config)"
    )
    parser.add_argument(
        "--pattern",
        help="Regex with one capture group to extract (default from config)"
    )
    parser.add_argument(
        "--port",
        type=int,
        help="SSH port (default: 22)"
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        help="Max concurrent SSH connections"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Override connect and command timeout (seconds)"
    )

    # Workbook layout
    parser.add_argument(
        "--host-column",
        help="Column holding host addresses (default: B)"
    )
    parser.add_argument(
        "--result-column",
        help="Column to write results into (default: C)"
    )
    parser.add_argument(
        "--header-rows",
        type=int,
        help="Rows to skip at the top of each sheet (default: 1)"
    )
    parser.add_argument(
        "--write-errors",
        action="store_true",
        default=None,
        help="Write 'ERROR: ...' into rows whose host failed"
    )

    # Output control
    parser.add_argument(
        "--config", "-c",
        help="Config file (default: ~/.scollector/config.yaml)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only print the summary"
    )


def _setup_config_parser(parser: argparse.ArgumentParser):
    """Set up config subcommand parser."""
    subparsers = parser.add_subparsers(dest="config_command", metavar="<action>")

    init_parser = subparsers.add_parser("init", help="Write the default config file")
    init_parser.add_argument("--force", "-f", action="store_true", help="Overwrite an existing file")
    init_parser.add_argument("--config", "-c", help="Config file to write")

    show_parser = subparsers.add_parser("show", help="Show effective configuration")
    show_parser.add_argument("--config", "-c", help="Config file to read")


if __name__ == "__main__":
    sys.exit(main())
