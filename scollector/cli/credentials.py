"""
Credential prompt - reads the SSH username and password once per run.

Environment variables SCOLLECTOR_USER / SCOLLECTOR_PASS skip the prompts
(useful for scheduled runs).
"""

import getpass
import os
from typing import Optional

from scollector.core.credentials import CredentialError, SSHCredentials


def prompt_credentials(username: Optional[str] = None) -> SSHCredentials:
    """
    Collect SSH credentials from arguments, environment or the terminal.

    Raises:
        CredentialError: Empty username, or the terminal could not be read.
    """
    try:
        username = username or os.environ.get("SCOLLECTOR_USER")
        if not username:
            username = input("Username: ")
        username = username.strip()

        password = os.environ.get("SCOLLECTOR_PASS")
        if password is None:
            password = getpass.getpass("Password: ")
    except EOFError as e:
        raise CredentialError("Failed to read credentials") from e

    if not username:
        raise CredentialError("Username is required")

    return SSHCredentials(username=username, password=password)
