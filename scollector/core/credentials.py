"""
Credential data model.

Credentials are supplied once per run and shared read-only by every
worker in a batch.
"""

from dataclasses import dataclass, field


class CredentialError(ValueError):
    """Raised when credentials cannot be obtained or are unusable."""


@dataclass(frozen=True)
class SSHCredentials:
    """SSH username/password pair for device authentication."""

    username: str
    password: str = field(default="", repr=False)

    def __post_init__(self):
        if not self.username:
            raise CredentialError("Username is required")

    @property
    def has_password(self) -> bool:
        """Check if a password is available."""
        return bool(self.password)
