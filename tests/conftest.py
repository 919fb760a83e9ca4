import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import pytest

from scollector.core.credentials import SSHCredentials
from scollector.core.pattern import ExtractionPattern
from scollector.ssh.client import CommandOutput


@dataclass
class FakeDevice:
    """Scripted behaviour of one remote host."""
    output: str = ""
    exit_status: int = 0
    connect_error: Optional[BaseException] = None
    channel_error: Optional[BaseException] = None
    run_error: Optional[BaseException] = None
    disconnect_error: Optional[BaseException] = None
    delay: float = 0
    before_output: Optional[Callable[[], None]] = None


@dataclass
class FakeBackend:
    """Hosts by address plus a shared event log of (host, action)."""
    devices: dict = field(default_factory=dict)
    events: List[tuple] = field(default_factory=list)
    lock: threading.Lock = field(default_factory=threading.Lock)
    active: int = 0
    peak: int = 0

    def record(self, host, action):
        with self.lock:
            self.events.append((host, action))

    def actions(self, host):
        with self.lock:
            return [a for h, a in self.events if h == host]

    def factory(self, options):
        return FakeSSHClient(options, self)


class FakeSSHClient:
    """Stands in for scollector.ssh.client.SSHClient."""

    def __init__(self, options, backend):
        self.options = options
        self.backend = backend
        self.device = backend.devices.get(options.host, FakeDevice(connect_error=OSError("No route to host")))

    def connect(self):
        self.backend.record(self.options.host, "connect")
        if self.device.connect_error:
            raise self.device.connect_error
        with self.backend.lock:
            self.backend.active += 1
            self.backend.peak = max(self.backend.peak, self.backend.active)

    def open_channel(self):
        self.backend.record(self.options.host, "open_channel")
        if self.device.channel_error:
            raise self.device.channel_error
        return object()

    def run_command(self, channel, command):
        self.backend.record(self.options.host, f"run:{command}")
        if self.device.delay:
            time.sleep(self.device.delay)
        if self.device.before_output:
            self.device.before_output()
        if self.device.run_error:
            raise self.device.run_error
        return CommandOutput(text=self.device.output, exit_status=self.device.exit_status)

    def close_channel(self, channel):
        self.backend.record(self.options.host, "close_channel")

    def disconnect(self):
        self.backend.record(self.options.host, "disconnect")
        if self.device.connect_error is None:
            with self.backend.lock:
                self.backend.active -= 1
        if self.device.disconnect_error:
            raise self.device.disconnect_error


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def creds():
    return SSHCredentials(username="admin", password="secret")


@pytest.fixture
def pattern():
    return ExtractionPattern.compile(r"Serial Number\s*:\s*(\S+)")


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    logger = logging.getLogger("scollector")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
