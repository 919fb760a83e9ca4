"""
SerialCollector - concurrent SSH polling of device serial numbers.

Usage:
    scollector config init
    scollector run access_points.xlsx --username admin
"""

__version__ = "0.1.0"

from scollector.core.config import Config, get_config
from scollector.core.credentials import SSHCredentials
from scollector.core.pattern import ExtractionPattern, PatternError
from scollector.ssh.executor import (
    SSHExecutorPool,
    ExecutorOptions,
    PollBatch,
    PollError,
    PollErrorKind,
    PollResult,
)
from scollector.jobs.runner import WorkbookRunner, RunResult

__all__ = [
    # Version
    "__version__",
    # Config
    "Config",
    "get_config",
    # Inputs
    "SSHCredentials",
    "ExtractionPattern",
    "PatternError",
    # Polling
    "SSHExecutorPool",
    "ExecutorOptions",
    "PollBatch",
    "PollError",
    "PollErrorKind",
    "PollResult",
    # Workbook runs
    "WorkbookRunner",
    "RunResult",
]
