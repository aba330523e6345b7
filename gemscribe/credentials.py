"""
gemscribe.credentials - API key storage.

The pipeline only sees the minimal CredentialStore interface; the default
backend stores the key in the OS keychain through the keyring library.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Protocol

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from gemscribe.exceptions import CredentialError, MissingCredentialError

SERVICE_NAME = "gemscribe"
API_KEY_ENTRY = "gemini_api_key"
API_KEY_ENV_VAR = "GEMINI_API_KEY"


class CredentialStore(Protocol):
    """Minimal secret storage interface."""

    def get(self) -> str: ...

    def set(self, secret: str) -> None: ...

    def delete(self) -> None: ...


class KeyringCredentialStore:
    """Stores the API key in the system keyring."""

    def __init__(self, service: str = SERVICE_NAME, account: str = API_KEY_ENTRY) -> None:
        self.service = service
        self.account = account

    def get(self) -> str:
        """Return the stored key, or an empty string if none is configured."""
        try:
            password = keyring.get_password(self.service, self.account)
        except KeyringError as e:
            raise CredentialError(f"Failed to retrieve API key: {e}") from e
        return password or ""

    def set(self, secret: str) -> None:
        if not secret.strip():
            raise MissingCredentialError("API key cannot be empty")
        try:
            keyring.set_password(self.service, self.account, secret.strip())
        except KeyringError as e:
            raise CredentialError(f"Failed to store API key: {e}") from e

    def delete(self) -> None:
        """Delete the stored key. Deleting a missing key is not an error."""
        try:
            keyring.delete_password(self.service, self.account)
        except PasswordDeleteError:
            return
        except KeyringError as e:
            raise CredentialError(f"Failed to delete API key: {e}") from e


def resolve_api_key(
    store: CredentialStore,
    env: Mapping[str, str] | None = None,
) -> str:
    """Resolve the API key from the environment, then the credential store.

    Raises:
        MissingCredentialError: If no key is configured anywhere
    """
    env = os.environ if env is None else env
    api_key = env.get(API_KEY_ENV_VAR, "").strip() or store.get().strip()
    if not api_key:
        raise MissingCredentialError(
            f"No API key configured. Run 'gemscribe key set' or set {API_KEY_ENV_VAR}."
        )
    return api_key
