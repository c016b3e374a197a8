"""
Credential providers.

Endpoints refer to passwords through an opaque credential reference. A
provider turns that reference into the plaintext password just before a
command is built, so passwords never live in configuration objects.
"""

import logging
import os
import re
from abc import ABC, abstractmethod
from typing import Mapping, Optional

logger = logging.getLogger(__name__)


class CredentialProvider(ABC):
    """Resolves a credential reference to a plaintext password."""

    @abstractmethod
    def get_password(self, credential_ref: Optional[str]) -> Optional[str]:
        """Return the password for credential_ref, or None if unknown."""


class NullCredentialStore(CredentialProvider):
    """Provider for endpoints that never authenticate."""

    def get_password(self, credential_ref: Optional[str]) -> Optional[str]:
        return None


class StaticCredentialStore(CredentialProvider):
    """In-memory mapping of credential reference to password."""

    def __init__(self, passwords: Optional[Mapping[str, str]] = None):
        self._passwords = dict(passwords or {})

    def set_password(self, credential_ref: str, password: str) -> None:
        self._passwords[credential_ref] = password

    def get_password(self, credential_ref: Optional[str]) -> Optional[str]:
        if credential_ref is None:
            return None
        return self._passwords.get(credential_ref)


class EnvironmentCredentialStore(CredentialProvider):
    """
    Reads passwords from environment variables.

    The reference "garage door" resolves to CBW_PASSWORD_GARAGE_DOOR with
    the default prefix.
    """

    def __init__(self, prefix: str = "CBW_PASSWORD_"):
        self.prefix = prefix

    def variable_name(self, credential_ref: str) -> str:
        suffix = re.sub(r"[^A-Za-z0-9]+", "_", credential_ref).strip("_").upper()
        return f"{self.prefix}{suffix}"

    def get_password(self, credential_ref: Optional[str]) -> Optional[str]:
        if not credential_ref:
            return None
        name = self.variable_name(credential_ref)
        password = os.environ.get(name)
        if password is None:
            logger.debug(f"No password found in environment variable {name}")
        return password
