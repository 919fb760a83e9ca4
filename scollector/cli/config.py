"""
Config CLI handler.

Handles: scollector config init | show
"""

from pathlib import Path

from scollector.core.config import Config


def handle_config(args) -> int:
    """Handle config subcommand."""
    if not args.config_command:
        print("Usage: scollector config <init|show>")
        return 1

    try:
        config = Config.load(Path(args.config) if args.config else None)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    if args.config_command == "init":
        return _config_init(config, force=args.force)
    elif args.config_command == "show":
        return _config_show(config)

    print(f"Unknown config command: {args.config_command}")
    return 1


def _config_init(config: Config, force: bool = False) -> int:
    if config.save_default_config(force=force):
        print(f"Wrote {config.config_file}")
        return 0
    print(f"Config already exists: {config.config_file} (use --force to overwrite)")
    return 1


def _config_show(config: Config) -> int:
    source = config.config_file if config.config_file.exists() else "defaults"
    print(f"Config: {source}")
    print()
    print("poll:")
    print(f"  command:         {config.poll.command}")
    print(f"  pattern:         {config.poll.pattern}")
    print(f"  port:            {config.poll.port}")
    print(f"  max_workers:     {config.poll.max_workers}")
    print(f"  connect_timeout: {config.poll.connect_timeout:g}s")
    print(f"  command_timeout: {config.poll.command_timeout:g}s")
    print("workbook:")
    print(f"  host_column:     {config.workbook.host_column}")
    print(f"  result_column:   {config.workbook.result_column}")
    print(f"  header_rows:     {config.workbook.header_rows}")
    print(f"  write_errors:    {config.workbook.write_errors}")
    print("logging:")
    print(f"  level:           {config.logging.level}")
    print(f"  file:            {config.logging.file or '-'}")
    return 0
