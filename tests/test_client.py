import socket
from unittest.mock import Mock

import paramiko
import pytest

from scollector.ssh import client as client_module
from scollector.ssh.client import (
    IgnoreHostKeyPolicy,
    SSHChannelError,
    SSHClient,
    SSHClientOptions,
    SSHCommandError,
    SSHTimeoutError,
    filter_ansi_sequences,
)


def make_client(**kwargs):
    options = SSHClientOptions(host="10.0.0.1", username="admin", password="secret", **kwargs)
    return SSHClient(options)


def make_channel(chunks, exit_status=0):
    channel = Mock()
    channel.recv.side_effect = list(chunks) + [b""]
    channel.exit_status_ready.return_value = True
    channel.recv_exit_status.return_value = exit_status
    return channel


def test_requires_host_and_username():
    with pytest.raises(ValueError):
        SSHClient(SSHClientOptions(host="", username="admin", password="x"))
    with pytest.raises(ValueError):
        SSHClient(SSHClientOptions(host="h", username="", password="x"))


def test_filter_ansi_sequences():
    assert filter_ansi_sequences("\x1b[1;24rSerial\x1b[2K Number") == "Serial Number"
    assert filter_ansi_sequences("") == ""


def test_ignore_host_key_policy_accepts_any_key():
    key = Mock()
    key.get_name.return_value = "ssh-ed25519"
    ssh = Mock()

    IgnoreHostKeyPolicy().missing_host_key(ssh, "10.0.0.1", key)

    ssh.get_host_keys.assert_not_called()


def test_connect_uses_password_only_and_ignores_host_keys(monkeypatch):
    fake = Mock()
    monkeypatch.setattr(client_module.paramiko, "SSHClient", Mock(return_value=fake))

    make_client(port=2222, timeout=7).connect()

    policy = fake.set_missing_host_key_policy.call_args.args[0]
    assert isinstance(policy, IgnoreHostKeyPolicy)
    kwargs = fake.connect.call_args.kwargs
    assert kwargs["hostname"] == "10.0.0.1"
    assert kwargs["port"] == 2222
    assert kwargs["password"] == "secret"
    assert kwargs["timeout"] == 7
    assert kwargs["allow_agent"] is False
    assert kwargs["look_for_keys"] is False


def test_connect_timeout_raises_timeout_and_closes(monkeypatch):
    fake = Mock()
    fake.connect.side_effect = socket.timeout("timed out")
    monkeypatch.setattr(client_module.paramiko, "SSHClient", Mock(return_value=fake))

    with pytest.raises(SSHTimeoutError):
        make_client().connect()
    fake.close.assert_called_once()


def test_connect_auth_failure_propagates(monkeypatch):
    fake = Mock()
    fake.connect.side_effect = paramiko.AuthenticationException("Authentication failed.")
    monkeypatch.setattr(client_module.paramiko, "SSHClient", Mock(return_value=fake))

    with pytest.raises(paramiko.AuthenticationException):
        make_client().connect()
    fake.close.assert_called_once()


def test_open_channel_requires_connection():
    with pytest.raises(SSHChannelError):
        make_client().open_channel()


def test_open_channel_failure_is_channel_error(monkeypatch):
    fake = Mock()
    fake.get_transport.return_value.is_active.return_value = True
    fake.get_transport.return_value.open_session.side_effect = paramiko.ChannelException(1, "prohibited")
    monkeypatch.setattr(client_module.paramiko, "SSHClient", Mock(return_value=fake))

    client = make_client()
    client.connect()
    with pytest.raises(SSHChannelError):
        client.open_channel()


def test_run_command_collects_combined_output():
    channel = make_channel([b"Serial Number ", b"\x1b[2K: SN1\n"], exit_status=0)

    output = make_client().run_command(channel, "show device info")

    channel.set_combine_stderr.assert_called_once_with(True)
    channel.exec_command.assert_called_once_with("show device info")
    assert output.text == "Serial Number : SN1\n"
    assert output.exit_status == 0


def test_run_command_reports_nonzero_exit_without_raising():
    channel = make_channel([b"% Unknown command"], exit_status=1)

    output = make_client().run_command(channel, "show device info")

    assert output.exit_status == 1


def test_run_command_exec_rejected():
    channel = make_channel([])
    channel.exec_command.side_effect = paramiko.SSHException("Channel closed.")

    with pytest.raises(SSHCommandError):
        make_client().run_command(channel, "show device info")


def test_run_command_read_timeout():
    channel = Mock()
    channel.recv.side_effect = socket.timeout("timed out")

    with pytest.raises(SSHTimeoutError):
        make_client(command_timeout=1).run_command(channel, "show device info")


def test_disconnect_is_idempotent(monkeypatch):
    fake = Mock()
    monkeypatch.setattr(client_module.paramiko, "SSHClient", Mock(return_value=fake))

    client = make_client()
    client.connect()
    client.disconnect()
    client.disconnect()

    fake.close.assert_called_once()
