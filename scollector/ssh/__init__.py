"""SSH polling - client and executor pool."""

from scollector.ssh.client import SSHClient, SSHClientOptions
from scollector.ssh.executor import (
    SSHExecutorPool,
    ExecutorOptions,
    PollBatch,
    PollError,
    PollErrorKind,
    PollResult,
)

__all__ = [
    "SSHClient",
    "SSHClientOptions",
    "SSHExecutorPool",
    "ExecutorOptions",
    "PollBatch",
    "PollError",
    "PollErrorKind",
    "PollResult",
]
