import pytest

from scollector.cli.credentials import prompt_credentials
from scollector.core.credentials import CredentialError, SSHCredentials


def test_username_required():
    with pytest.raises(CredentialError):
        SSHCredentials(username="", password="x")


def test_password_hidden_from_repr():
    creds = SSHCredentials(username="admin", password="hunter2")
    assert "hunter2" not in repr(creds)
    assert creds.has_password


def test_credentials_are_immutable():
    creds = SSHCredentials(username="admin", password="x")
    with pytest.raises(AttributeError):
        creds.username = "root"


def test_prompt_uses_environment(monkeypatch):
    monkeypatch.setenv("SCOLLECTOR_USER", "netops")
    monkeypatch.setenv("SCOLLECTOR_PASS", "pw")

    creds = prompt_credentials()

    assert creds == SSHCredentials(username="netops", password="pw")


def test_prompt_reads_terminal(monkeypatch):
    monkeypatch.delenv("SCOLLECTOR_USER", raising=False)
    monkeypatch.delenv("SCOLLECTOR_PASS", raising=False)
    monkeypatch.setattr("builtins.input", lambda prompt: "  admin \n")
    monkeypatch.setattr("getpass.getpass", lambda prompt: "secret")

    creds = prompt_credentials()

    assert creds.username == "admin"
    assert creds.password == "secret"


def test_argument_username_wins(monkeypatch):
    monkeypatch.setenv("SCOLLECTOR_USER", "netops")
    monkeypatch.setenv("SCOLLECTOR_PASS", "pw")

    assert prompt_credentials("admin").username == "admin"


def test_blank_username_is_fatal(monkeypatch):
    monkeypatch.delenv("SCOLLECTOR_USER", raising=False)
    monkeypatch.setenv("SCOLLECTOR_PASS", "pw")
    monkeypatch.setattr("builtins.input", lambda prompt: "   ")

    with pytest.raises(CredentialError):
        prompt_credentials()


def test_closed_stdin_is_fatal(monkeypatch):
    monkeypatch.delenv("SCOLLECTOR_USER", raising=False)

    def eof(prompt):
        raise EOFError

    monkeypatch.setattr("builtins.input", eof)

    with pytest.raises(CredentialError):
        prompt_credentials()
