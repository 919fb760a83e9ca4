"""
SSH Executor Pool - Concurrent device polling.

Path: scollector/ssh/executor.py

Polls a batch of hosts concurrently using ThreadPoolExecutor. Every host
gets exactly one attempt and produces exactly one PollResult, success or
failure, so a batch is always complete.

Per-host flow: connect -> open channel -> run command -> extract field.
The channel and connection are released on every path.
"""

import logging
import socket
import time
import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Callable, Tuple, Any, Dict, Iterator
from concurrent.futures import ThreadPoolExecutor, as_completed

from scollector.core.credentials import SSHCredentials
from scollector.core.pattern import ExtractionPattern
from scollector.ssh.client import (
    SSHClient,
    SSHClientOptions,
    SSHChannelError,
    SSHCommandError,
)


# Module logger - configure at application level
logger = logging.getLogger(__name__)

PATTERN_NOT_FOUND = "pattern not found"


class PollErrorKind(Enum):
    """Stage at which a host poll failed."""
    CONNECTION = "connection"
    CHANNEL = "channel"
    EXECUTION = "execution"
    TIMEOUT = "timeout"
    PATTERN_NOT_FOUND = "pattern_not_found"


class SSHErrorCategory(Enum):
    """Categorized SSH error types for better diagnostics."""
    NONE = "none"
    CONNECTION_REFUSED = "connection_refused"
    CONNECTION_TIMEOUT = "connection_timeout"
    DNS_FAILURE = "dns_failure"
    AUTH_FAILURE = "auth_failure"
    KEY_EXCHANGE_FAILURE = "key_exchange"
    COMMAND_TIMEOUT = "command_timeout"
    CHANNEL_ERROR = "channel_error"
    PROTOCOL_ERROR = "protocol_error"
    SOCKET_ERROR = "socket_error"
    UNKNOWN = "unknown"


def categorize_ssh_error(exception: Exception) -> SSHErrorCategory:
    """
    Categorize an SSH exception for better error reporting.

    Args:
        exception: The caught exception.

    Returns:
        SSHErrorCategory indicating the type of failure.
    """
    error_msg = str(exception).lower()
    error_type = type(exception).__name__

    # Connection refused
    if isinstance(exception, ConnectionRefusedError) or "connection refused" in error_msg \
            or "errno 111" in error_msg or "unable to connect to port" in error_msg:
        return SSHErrorCategory.CONNECTION_REFUSED

    # Timeouts
    if isinstance(exception, (TimeoutError, socket.timeout)) or "timed out" in error_msg \
            or "timeout" in error_type.lower():
        if "command" in error_msg or "execute" in error_msg:
            return SSHErrorCategory.COMMAND_TIMEOUT
        return SSHErrorCategory.CONNECTION_TIMEOUT

    # DNS failure
    if isinstance(exception, socket.gaierror) or "name or service not known" in error_msg \
            or "getaddrinfo" in error_msg:
        return SSHErrorCategory.DNS_FAILURE

    # Authentication failure
    if "authentication" in error_type.lower() or \
            any(x in error_msg for x in ["auth", "permission denied", "no supported authentication"]):
        return SSHErrorCategory.AUTH_FAILURE

    # Key exchange
    if any(x in error_msg for x in ["key exchange", "kex", "incompatible", "no matching"]):
        return SSHErrorCategory.KEY_EXCHANGE_FAILURE

    # Channel errors
    if isinstance(exception, SSHChannelError) or "channel" in error_msg or "eof" in error_msg:
        return SSHErrorCategory.CHANNEL_ERROR

    # Socket errors
    if isinstance(exception, OSError) or "socket" in error_msg:
        return SSHErrorCategory.SOCKET_ERROR

    # Protocol errors (SSH-specific)
    if "ssh" in error_type.lower() or "paramiko" in error_type.lower():
        return SSHErrorCategory.PROTOCOL_ERROR

    return SSHErrorCategory.UNKNOWN


@dataclass(frozen=True)
class PollError:
    """Why a host produced no data."""
    kind: PollErrorKind
    message: str
    category: SSHErrorCategory = SSHErrorCategory.NONE

    def __str__(self) -> str:
        if self.category in (SSHErrorCategory.NONE, SSHErrorCategory.UNKNOWN):
            return f"{self.kind.value}: {self.message}"
        return f"{self.kind.value} ({self.category.value}): {self.message}"


@dataclass(frozen=True)
class PollResult:
    """
    Terminal outcome of polling one host.

    Exactly one of data/error is set.
    """
    host: str
    context: Any = None
    data: Optional[str] = None
    error: Optional[PollError] = None
    duration_ms: float = field(default=0, compare=False)
    exit_status: Optional[int] = None
    error_traceback: Optional[str] = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        if (self.data is None) == (self.error is None):
            raise ValueError(
                f"PollResult for {self.host} must carry exactly one of data or error"
            )

    @property
    def success(self) -> bool:
        return self.error is None

    def __repr__(self) -> str:
        if self.success:
            return f"PollResult(host={self.host}, data={self.data!r}, duration={self.duration_ms:.0f}ms)"
        return f"PollResult(host={self.host}, error={self.error})"


@dataclass
class ExecutorOptions:
    """Options for polling."""
    command: str = "show device info"
    port: int = 22
    connect_timeout: float = 30
    command_timeout: float = 60
    max_workers: int = 32
    debug: bool = False
    capture_traceback: bool = False


@dataclass
class BatchSummary:
    """Summary statistics for a batch."""
    total: int = 0
    success: int = 0
    failed: int = 0
    duration_ms: float = 0
    errors_by_kind: Dict[PollErrorKind, int] = field(default_factory=dict)

    def add_result(self, result: PollResult):
        """Add a result to the summary."""
        self.total += 1
        if result.success:
            self.success += 1
        else:
            self.failed += 1
            kind = result.error.kind
            self.errors_by_kind[kind] = self.errors_by_kind.get(kind, 0) + 1

    def __repr__(self) -> str:
        parts = [f"BatchSummary: {self.success}/{self.total} success"]
        if self.errors_by_kind:
            error_parts = [f"{kind.value}={count}" for kind, count in self.errors_by_kind.items()]
            parts.append(f"errors=[{', '.join(error_parts)}]")
        parts.append(f"duration={self.duration_ms:.0f}ms")
        return " | ".join(parts)


@dataclass
class PollBatch:
    """All results of one batch, in submission order."""
    targets: int = 0
    results: List[PollResult] = field(default_factory=list)
    summary: BatchSummary = field(default_factory=BatchSummary)

    @property
    def complete(self) -> bool:
        return len(self.results) == self.targets and all(r is not None for r in self.results)

    def successes(self) -> Iterator[Tuple[Any, str]]:
        """Yield (context, data) for every host that produced data."""
        for result in self.results:
            if result.success:
                yield result.context, result.data

    def failures(self) -> List[PollResult]:
        return [r for r in self.results if not r.success]

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self):
        return iter(self.results)


ClientFactory = Callable[[SSHClientOptions], Any]


class SSHExecutorPool:
    """
    Concurrent host poller.

    Runs the same command on every host, extracts one field from the output
    and returns one result per host.

    Usage:
        pool = SSHExecutorPool(
            credentials=creds,
            pattern=ExtractionPattern.compile(r"Serial Number\\s*:\\s*(\\S+)"),
            options=ExecutorOptions(max_workers=16),
        )

        batch = pool.poll([("192.168.1.1", 2), ("192.168.1.2", 3)])
        print(batch.summary)
        for row, serial in batch.successes():
            print(row, serial)
        for r in batch.failures():
            print(f"{r.host}: {r.error}")
    """

    def __init__(
        self,
        credentials: SSHCredentials,
        pattern: ExtractionPattern,
        options: Optional[ExecutorOptions] = None,
        client_factory: Optional[ClientFactory] = None,
    ):
        """
        Initialize executor pool.

        Args:
            credentials: SSH credentials shared by every host.
            pattern: Compiled extraction pattern shared by every host.
            options: Execution options (command, timeouts, concurrency).
            client_factory: Builds a client from SSHClientOptions (default: SSHClient).
        """
        self.credentials = credentials
        self.pattern = pattern
        self.options = options or ExecutorOptions()
        self.client_factory = client_factory or SSHClient

        if self.options.max_workers < 1:
            raise ValueError("max_workers must be at least 1")

        if self.options.debug:
            logger.setLevel(logging.DEBUG)

    def poll(
        self,
        targets: List[Tuple[str, Any]],
        progress_callback: Optional[Callable[[int, int, PollResult], None]] = None,
    ) -> PollBatch:
        """
        Poll multiple hosts concurrently.

        Args:
            targets: List of (host, context) tuples. The context is handed
                back untouched on the host's result.
            progress_callback: Optional callback(completed, total, result),
                called as each host finishes.

        Returns:
            PollBatch with one result per target, in target order.
        """
        batch_start = time.time()
        total = len(targets)
        summary = BatchSummary()

        if total == 0:
            logger.debug("No targets, nothing to poll")
            return PollBatch(targets=0, results=[], summary=summary)

        workers = min(self.options.max_workers, total)
        result_map: Dict[int, PollResult] = {}

        logger.info(f"Starting batch: {total} hosts, {workers} workers")

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(self.poll_host, host, context): (i, host, context)
                for i, (host, context) in enumerate(targets)
            }

            completed = 0

            for future in as_completed(futures):
                idx, host, context = futures[future]
                completed += 1

                try:
                    result = future.result()
                except Exception as e:
                    # poll_host catches everything it expects; keep the batch complete anyway
                    logger.error(f"Unexpected worker error for {host}: {e}", exc_info=self.options.debug)
                    result = PollResult(
                        host=host,
                        context=context,
                        error=PollError(PollErrorKind.EXECUTION, f"Worker error: {e}",
                                        categorize_ssh_error(e)),
                    )

                result_map[idx] = result
                summary.add_result(result)

                if result.success:
                    logger.debug(f"[{completed}/{total}] {host}: OK {result.data!r} ({result.duration_ms:.0f}ms)")
                else:
                    logger.warning(f"[{completed}/{total}] {host}: FAILED - {result.error}")
                    if result.error_traceback and self.options.debug:
                        logger.debug(f"Traceback for {host}:\n{result.error_traceback}")

                if progress_callback:
                    try:
                        progress_callback(completed, total, result)
                    except Exception as cb_error:
                        logger.warning(f"Progress callback error: {cb_error}")

        summary.duration_ms = (time.time() - batch_start) * 1000

        logger.info(str(summary))

        if summary.errors_by_kind:
            logger.info("Error breakdown:")
            for kind, count in sorted(summary.errors_by_kind.items(), key=lambda x: -x[1]):
                logger.info(f"  {kind.value}: {count}")

        return PollBatch(
            targets=total,
            results=[result_map[i] for i in range(total)],
            summary=summary,
        )

    def poll_host(self, host: str, context: Any = None) -> PollResult:
        """
        Poll a single host. Never raises.

        Args:
            host: Device IP/hostname.
            context: Caller token returned on the result.

        Returns:
            PollResult with extracted data or error.
        """
        start_time = time.time()
        client = None
        channel = None
        kind = PollErrorKind.CONNECTION
        exit_status = None

        logger.debug(f"{host}: Starting poll")

        try:
            ssh_options = SSHClientOptions(
                host=host,
                username=self.credentials.username,
                password=self.credentials.password,
                port=self.options.port,
                timeout=self.options.connect_timeout,
                command_timeout=self.options.command_timeout,
            )
            client = self.client_factory(ssh_options)

            logger.debug(f"{host}: Connecting...")
            client.connect()

            kind = PollErrorKind.CHANNEL
            channel = client.open_channel()

            kind = PollErrorKind.EXECUTION
            logger.debug(f"{host}: Executing {self.options.command!r}")
            output = client.run_command(channel, self.options.command)
            exit_status = output.exit_status

            data = self.pattern.extract(output.text)
            duration_ms = (time.time() - start_time) * 1000

            if data is None:
                message = PATTERN_NOT_FOUND
                if exit_status not in (0, -1, None):
                    message = f"{PATTERN_NOT_FOUND} (exit status {exit_status})"
                logger.debug(f"{host}: {message} in {len(output.text)} chars of output")
                return PollResult(
                    host=host,
                    context=context,
                    error=PollError(PollErrorKind.PATTERN_NOT_FOUND, message),
                    duration_ms=duration_ms,
                    exit_status=exit_status,
                )

            # A match is authoritative, whatever the exit status
            logger.debug(f"{host}: Extracted {data!r} ({duration_ms:.0f}ms, exit {exit_status})")
            return PollResult(
                host=host,
                context=context,
                data=data,
                duration_ms=duration_ms,
                exit_status=exit_status,
            )

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            category = categorize_ssh_error(e)

            if isinstance(e, (TimeoutError, socket.timeout)):
                kind = PollErrorKind.TIMEOUT
            elif isinstance(e, SSHChannelError):
                kind = PollErrorKind.CHANNEL
            elif isinstance(e, SSHCommandError):
                kind = PollErrorKind.EXECUTION

            error_traceback = traceback.format_exc() if self.options.capture_traceback else None
            logger.debug(f"{host}: Failed at {kind.value} ({category.value}): {e}")

            return PollResult(
                host=host,
                context=context,
                error=PollError(kind, str(e) or type(e).__name__, category),
                duration_ms=duration_ms,
                exit_status=exit_status,
                error_traceback=error_traceback,
            )

        finally:
            if channel is not None:
                try:
                    client.close_channel(channel)
                except Exception as close_err:
                    logger.warning(f"{host}: Channel close error (non-fatal): {close_err}")
            if client is not None:
                try:
                    client.disconnect()
                    logger.debug(f"{host}: Disconnected")
                except Exception as disc_err:
                    # The result stands; the command may already have succeeded
                    logger.warning(f"{host}: Disconnect error (non-fatal): {disc_err}")
