"""
Credential storage with a fallback chain.

API keys are looked up in priority order:
- OS keychain via ``keyring`` (macOS Keychain, Windows Credential Manager,
  libsecret/KWallet)
- Config file at ~/.writecraft/config.json (per profile, mode 0600)
- Process memory, for the current session only
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
import json
import os
from pathlib import Path
import string
import time
from typing import Any
import warnings

import keyring
import keyring.errors

SERVICE_NAME = "writecraft"
DEFAULT_PROFILE = "default"


class CredentialStore(ABC):
    """Capability for reading, writing and removing one secret."""

    name: str = ""

    @abstractmethod
    def get(self) -> str | None:
        """Return the stored value, or None if absent or unavailable."""

    @abstractmethod
    def set(self, value: str) -> bool:
        """Store the value. Returns False if this backend could not."""

    @abstractmethod
    def delete(self) -> bool:
        """Remove the value. Returns True if nothing is stored afterwards."""


class KeyringStore(CredentialStore):
    """OS keychain backend."""

    name = "keyring"

    def __init__(self, profile: str = DEFAULT_PROFILE, max_retries: int = 3):
        self.profile = profile
        self.max_retries = max_retries

    @property
    def account(self) -> str:
        return f"{self.profile}_api_key"

    def get(self) -> str | None:
        result = self._retry(lambda: keyring.get_password(SERVICE_NAME, self.account))
        return result if isinstance(result, str) else None

    def set(self, value: str) -> bool:
        sentinel = object()

        def _set() -> object:
            keyring.set_password(SERVICE_NAME, self.account, value)
            return sentinel

        return self._retry(_set) is sentinel

    def delete(self) -> bool:
        sentinel = object()

        def _delete() -> object:
            try:
                keyring.delete_password(SERVICE_NAME, self.account)
            except keyring.errors.PasswordDeleteError:
                # Nothing was stored, which is fine
                pass
            return sentinel

        return self._retry(_delete) is sentinel

    def _retry(self, operation: Callable[[], Any]) -> Any:
        """
        Retry keychain operations to handle transient failures.

        Returns the operation result, or None once every attempt has failed.
        """
        for attempt in range(self.max_retries):
            try:
                return operation()
            except keyring.errors.NoKeyringError as e:
                # No backend on this machine; retrying will not help
                warnings.warn(f"Keychain unavailable: {e}", UserWarning, stacklevel=3)
                return None
            except keyring.errors.KeyringError as e:
                if attempt < self.max_retries - 1:
                    time.sleep(0.1 * (2**attempt))
                    continue
                warnings.warn(f"Keychain operation failed: {e}", UserWarning, stacklevel=3)
        return None


class FileStore(CredentialStore):
    """Plain-text fallback in the per-user config file."""

    name = "file"

    CONFIG_DIR = Path.home() / ".writecraft"
    CONFIG_FILE = CONFIG_DIR / "config.json"

    def __init__(self, profile: str = DEFAULT_PROFILE):
        self.profile = profile

    def _ensure_config_dir(self) -> None:
        """Ensure config directory exists with proper permissions."""
        self.CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        # Managed filesystems may refuse the chmod; keep going without it.
        try:
            os.chmod(self.CONFIG_DIR, 0o700)
        except PermissionError:
            return

    def load(self) -> dict:
        """Load configuration with profiles structure from file."""
        if not self.CONFIG_FILE.exists():
            return {"profiles": {}}

        try:
            with open(self.CONFIG_FILE) as f:
                config = json.load(f)
        except (OSError, ValueError) as e:
            warnings.warn(f"Ignoring unreadable config file: {e}", UserWarning, stacklevel=2)
            return {"profiles": {}}
        if not isinstance(config, dict):
            return {"profiles": {}}
        config.setdefault("profiles", {})
        return config

    def save(self, config: dict) -> bool:
        """Save configuration with profiles structure to file."""
        try:
            self._ensure_config_dir()
            with open(self.CONFIG_FILE, "w") as f:
                json.dump(config, f, indent=2)
            os.chmod(self.CONFIG_FILE, 0o600)
            return True
        except OSError as e:
            warnings.warn(f"Failed to save config: {e}", UserWarning, stacklevel=2)
            return False

    def get(self) -> str | None:
        profile_config = self.load()["profiles"].get(self.profile, {})
        api_key = profile_config.get("api_key")
        return api_key if isinstance(api_key, str) else None

    def set(self, value: str) -> bool:
        config = self.load()
        config["profiles"].setdefault(self.profile, {})["api_key"] = value
        return self.save(config)

    def delete(self) -> bool:
        config = self.load()
        profile_config = config["profiles"].get(self.profile, {})
        if "api_key" not in profile_config:
            return True
        profile_config.pop("api_key")
        if not profile_config:
            config["profiles"].pop(self.profile)
        return self.save(config)


class MemoryStore(CredentialStore):
    """Session-only storage. Always succeeds."""

    name = "memory"

    def __init__(self) -> None:
        self._value: str | None = None

    def get(self) -> str | None:
        return self._value

    def set(self, value: str) -> bool:
        self._value = value
        return True

    def delete(self) -> bool:
        self._value = None
        return True


def is_valid_token(token: str) -> bool:
    """
    Sanity-check a stored key.

    Rejects sentinel strings, whitespace and serialized payloads that point to
    corrupted storage. Accepts API-key style strings of safe characters.
    """
    if not token or not isinstance(token, str):
        return False

    token = token.strip()
    if not token:
        return False

    if token.lower() in {"none", "null"}:
        return False

    if any(char.isspace() for char in token):
        return False
    if token.startswith("{") and token.endswith("}"):
        return False

    allowed_chars = set(string.ascii_letters + string.digits + "-_.~+/=:")
    return all(char in allowed_chars for char in token)


class CredentialManager:
    """API key lookup across stores tried in priority order."""

    def __init__(
        self, profile: str = DEFAULT_PROFILE, stores: list[CredentialStore] | None = None
    ):
        """
        Initialize credential manager.

        Args:
            profile: Profile name for multi-account support (default: "default")
            stores: Backends in priority order. Defaults to keychain, config
                file, then memory.
        """
        self.profile = profile
        self.memory = MemoryStore()
        if stores is None:
            stores = [KeyringStore(profile), FileStore(profile)]
        self.stores = [s for s in stores if not isinstance(s, MemoryStore)] + [self.memory]

    def get_api_key(self) -> str | None:
        """
        Return the first valid key found.

        Invalid values are deleted from the store they came from so they do
        not shadow lower-priority stores on the next lookup.
        """
        for store in self.stores:
            value = store.get()
            if value is None:
                continue
            if is_valid_token(value):
                return value.strip()
            warnings.warn(
                f"Stored API key in {store.name or type(store).__name__} has invalid format; "
                "removing it. Store a new one with: writecraft key set",
                UserWarning,
                stacklevel=2,
            )
            store.delete()
        return None

    def save_api_key(self, api_key: str) -> str | None:
        """
        Save the key in the first store that accepts it.

        The key is mirrored into memory so it stays usable for this session
        even when persistent storage failed.

        Returns:
            Name of the store that accepted the key, or None for an empty key
        """
        if not api_key:
            return None
        self.memory.set(api_key)
        for store in self.stores:
            if store is self.memory:
                continue
            if store.set(api_key):
                return store.name or type(store).__name__
        return self.memory.name

    def delete_api_key(self) -> bool:
        """Remove the key from every store."""
        results = [store.delete() for store in self.stores]
        return all(results)

    def describe(self) -> list[tuple[str, bool]]:
        """Which stores currently hold a key, in priority order."""
        return [
            (store.name or type(store).__name__, store.get() is not None) for store in self.stores
        ]
