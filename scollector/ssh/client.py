"""
SSH Client - password authentication, single exec channel.

Path: scollector/ssh/client.py

Thin wrapper around paramiko that splits a poll into the stages the
executor reports on: connect, open channel, run command, disconnect.
Each stage raises a distinct exception so failures can be categorized.

Host keys are NOT verified. Any key offered by the device is accepted and
nothing is recorded (not even trust-on-first-use). This is a known gap,
acceptable only on trusted management networks.
"""

import logging
import re
import socket
import time
from dataclasses import dataclass

import paramiko


logger = logging.getLogger(__name__)

RECV_SIZE = 4096
EXIT_STATUS_POLL = 0.05


class SSHChannelError(Exception):
    """Session channel could not be opened on an established connection."""


class SSHCommandError(Exception):
    """Command could not be started on the remote device."""


class SSHTimeoutError(TimeoutError):
    """A stage did not finish within its deadline."""


def filter_ansi_sequences(text):
    """
    Filter ANSI escape sequences and control characters.

    Args:
        text (str): Input text with potential ANSI sequences

    Returns:
        str: Cleaned text
    """
    if not text:
        return text

    ansi_pattern = r'\x1b\[[0-9;?]*[a-zA-Z]|\x1b[()][AB012]|\x07|[\x00-\x08\x0B\x0C\x0E-\x1F]'
    return re.sub(ansi_pattern, '', text)


class IgnoreHostKeyPolicy(paramiko.MissingHostKeyPolicy):
    """Accept any host key without storing it."""

    def missing_host_key(self, client, hostname, key):
        logger.debug(f"{hostname}: accepting unverified {key.get_name()} host key")


@dataclass(frozen=True)
class CommandOutput:
    """Combined stdout/stderr of one command."""
    text: str
    exit_status: int = -1  # -1 = device closed the channel without a status


class SSHClientOptions:
    """SSH Client Options - Password Authentication Only"""

    def __init__(self, host, username, password=None, port=22,
                 timeout=30, command_timeout=60):

        # Connection parameters
        self.host = host
        self.port = port
        self.username = username
        self.password = password

        # Timeouts (seconds)
        self.timeout = timeout
        self.command_timeout = command_timeout


class SSHClient:
    """
    Single-command SSH client.

    Usage:
        client = SSHClient(SSHClientOptions(host="10.0.0.1", username="admin", password="x"))
        try:
            client.connect()
            channel = client.open_channel()
            try:
                output = client.run_command(channel, "show device info")
            finally:
                client.close_channel(channel)
        finally:
            client.disconnect()
    """

    def __init__(self, options):
        """
        Initialize SSHClient with an SSHClientOptions object

        Args:
            options: SSHClientOptions instance containing all configuration
        """
        self._options = options
        self._ssh_client = None

        if not options.host:
            raise ValueError("Host is required")
        if not options.username:
            raise ValueError("Username is required")

    @property
    def options(self):
        return self._options

    def connect(self):
        """
        Open the connection and authenticate.

        Raises:
            SSHTimeoutError: TCP connect, banner or auth exceeded the timeout.
            paramiko.SSHException / OSError: anything else (refused, DNS, auth).
        """
        opts = self._options
        client = paramiko.SSHClient()
        client.set_missing_host_key_policy(IgnoreHostKeyPolicy())

        try:
            client.connect(
                hostname=opts.host,
                port=opts.port,
                username=opts.username,
                password=opts.password,
                timeout=opts.timeout,
                banner_timeout=opts.timeout,
                auth_timeout=opts.timeout,
                allow_agent=False,
                look_for_keys=False,
            )
        except socket.timeout as e:
            client.close()
            raise SSHTimeoutError(f"Connection to {opts.host}:{opts.port} timed out") from e
        except BaseException:
            client.close()
            raise

        self._ssh_client = client

    def open_channel(self):
        """
        Open a session channel on the established connection.

        Raises:
            SSHChannelError: Not connected, or the device refused the channel.
            SSHTimeoutError: Channel open exceeded the timeout.
        """
        transport = self._ssh_client.get_transport() if self._ssh_client else None
        if transport is None or not transport.is_active():
            raise SSHChannelError("Not connected")

        try:
            return transport.open_session(timeout=self._options.timeout)
        except socket.timeout as e:
            raise SSHTimeoutError("Opening session channel timed out") from e
        except (paramiko.SSHException, EOFError) as e:
            if "timeout" in str(e).lower():
                raise SSHTimeoutError(f"Opening session channel timed out: {e}") from e
            raise SSHChannelError(f"Failed to open session channel: {e}") from e

    def run_command(self, channel, command: str) -> CommandOutput:
        """
        Execute a command and collect combined stdout/stderr until EOF.

        The exit status is reported but never raised on; callers decide what
        a non-zero status means.

        Raises:
            SSHCommandError: The device rejected the exec request.
            SSHTimeoutError: Output did not complete within command_timeout.
        """
        timeout = self._options.command_timeout
        deadline = time.monotonic() + timeout

        channel.settimeout(timeout)
        channel.set_combine_stderr(True)

        try:
            channel.exec_command(command)
        except socket.timeout as e:
            raise SSHTimeoutError(f"Command {command!r} timed out") from e
        except paramiko.SSHException as e:
            raise SSHCommandError(f"Failed to execute {command!r}: {e}") from e

        chunks = []
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise SSHTimeoutError(f"Command {command!r} timed out after {timeout}s")
            channel.settimeout(remaining)
            try:
                data = channel.recv(RECV_SIZE)
            except socket.timeout as e:
                raise SSHTimeoutError(f"Command {command!r} timed out after {timeout}s") from e
            if not data:
                break
            chunks.append(data)

        # Status normally follows EOF closely; don't wait past the deadline for it
        while not channel.exit_status_ready() and time.monotonic() < deadline:
            time.sleep(EXIT_STATUS_POLL)
        exit_status = channel.recv_exit_status() if channel.exit_status_ready() else -1

        text = b"".join(chunks).decode("utf-8", errors="replace")
        return CommandOutput(text=filter_ansi_sequences(text), exit_status=exit_status)

    def close_channel(self, channel):
        """Close a channel returned by open_channel()."""
        if channel is not None:
            channel.close()

    def disconnect(self):
        """Close the connection."""
        if self._ssh_client:
            self._ssh_client.close()
            self._ssh_client = None
