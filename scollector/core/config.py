"""
Configuration management for SerialCollector.

Handles loading config from ~/.scollector/config.yaml and providing
default values for all settings.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from scollector.core.pattern import DEFAULT_PATTERN


# Default paths
DEFAULT_BASE_DIR = Path.home() / ".scollector"
DEFAULT_CONFIG_FILE = DEFAULT_BASE_DIR / "config.yaml"
DEFAULT_LOG_DIR = DEFAULT_BASE_DIR / "logs"

DEFAULT_COMMAND = "show device info"


@dataclass
class PollConfig:
    """Polling settings shared by every host in a batch."""

    command: str = DEFAULT_COMMAND
    pattern: str = DEFAULT_PATTERN
    port: int = 22
    max_workers: int = 32
    connect_timeout: float = 30
    command_timeout: float = 60


@dataclass
class WorkbookConfig:
    """Where hosts are read from and results written to."""

    host_column: str = "B"
    result_column: str = "C"
    header_rows: int = 1
    write_errors: bool = False


@dataclass
class LoggingConfig:
    """Logging settings."""

    level: str = "INFO"
    file: Optional[Path] = None


@dataclass
class Config:
    """Main configuration container."""

    base_dir: Path = DEFAULT_BASE_DIR
    config_file: Path = DEFAULT_CONFIG_FILE
    log_dir: Path = DEFAULT_LOG_DIR

    poll: PollConfig = field(default_factory=PollConfig)
    workbook: WorkbookConfig = field(default_factory=WorkbookConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Config":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to config file. If None, uses default location.
                         Can also be set via SCOLLECTOR_CONFIG env var.

        Returns:
            Config instance with values from file merged with defaults.
        """
        if config_path is None:
            config_path = Path(
                os.environ.get("SCOLLECTOR_CONFIG", str(DEFAULT_CONFIG_FILE))
            )
        config_path = Path(config_path).expanduser()

        config = cls()
        config.config_file = config_path
        config.base_dir = config_path.parent
        config.log_dir = config_path.parent / "logs"

        # If config file doesn't exist, return defaults
        if not config_path.exists():
            return config

        try:
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid config YAML: {e}")

        if not isinstance(data, dict):
            raise ValueError(f"Invalid config: expected a mapping in {config_path}")

        if "poll" in data:
            poll_data = data["poll"] or {}
            defaults = PollConfig()
            config.poll = PollConfig(
                command=poll_data.get("command", defaults.command),
                pattern=poll_data.get("pattern", defaults.pattern),
                port=int(poll_data.get("port", defaults.port)),
                max_workers=int(poll_data.get("max_workers", defaults.max_workers)),
                connect_timeout=float(poll_data.get("connect_timeout", defaults.connect_timeout)),
                command_timeout=float(poll_data.get("command_timeout", defaults.command_timeout)),
            )

        if "workbook" in data:
            wb_data = data["workbook"] or {}
            defaults = WorkbookConfig()
            config.workbook = WorkbookConfig(
                host_column=str(wb_data.get("host_column", defaults.host_column)).upper(),
                result_column=str(wb_data.get("result_column", defaults.result_column)).upper(),
                header_rows=int(wb_data.get("header_rows", defaults.header_rows)),
                write_errors=bool(wb_data.get("write_errors", defaults.write_errors)),
            )

        if "logging" in data:
            log_data = data["logging"] or {}
            log_file = log_data.get("file")
            config.logging = LoggingConfig(
                level=log_data.get("level", "INFO"),
                file=Path(log_file).expanduser() if log_file else None,
            )

        return config

    def executor_options(self):
        """Build executor options from the poll section."""
        from scollector.ssh.executor import ExecutorOptions

        return ExecutorOptions(
            command=self.poll.command,
            port=self.poll.port,
            max_workers=self.poll.max_workers,
            connect_timeout=self.poll.connect_timeout,
            command_timeout=self.poll.command_timeout,
        )

    def ensure_directories(self):
        """Create required directories if they don't exist."""
        self.config_file.parent.mkdir(parents=True, exist_ok=True)

    def save_default_config(self, force: bool = False) -> bool:
        """
        Save a default config file.

        Returns:
            True if the file was written, False if it already existed.
        """
        if self.config_file.exists() and not force:
            return False

        self.ensure_directories()
        quoted_pattern = self.poll.pattern.replace("'", "''")

        default_config = f"""\
# SerialCollector Configuration

# =============================================================================
# Polling
# =============================================================================

poll:
  command: {self.poll.command}
  # Exactly one capture group; the first group of the first match is used
  pattern: '{quoted_pattern}'
  port: {self.poll.port}
  max_workers: {self.poll.max_workers}          # Concurrent SSH connections per sheet
  connect_timeout: {self.poll.connect_timeout:g}      # Seconds for connect + auth
  command_timeout: {self.poll.command_timeout:g}      # Seconds for command output

# =============================================================================
# Workbook layout
# =============================================================================

workbook:
  host_column: {self.workbook.host_column}
  result_column: {self.workbook.result_column}
  header_rows: {self.workbook.header_rows}
  write_errors: {str(self.workbook.write_errors).lower()}     # Write "ERROR: ..." into failed rows

# =============================================================================
# Logging
# =============================================================================

logging:
  level: INFO              # DEBUG, INFO, WARNING, ERROR
  file: {self.log_dir / 'scollector.log'}
"""

        with open(self.config_file, "w") as f:
            f.write(default_config)
        return True


# Singleton instance
_config: Optional[Config] = None


def get_config(reload: bool = False, config_path: Optional[Path] = None) -> Config:
    """
    Get the global configuration instance.

    Args:
        reload: Force reload from file.
        config_path: Explicit config file (implies reload).

    Returns:
        Config instance.
    """
    global _config

    if _config is None or reload or config_path is not None:
        _config = Config.load(config_path)

    return _config
