"""Credential storage for the writecraft SDK."""

from .credentials import (
    CredentialManager,
    CredentialStore,
    FileStore,
    KeyringStore,
    MemoryStore,
)

__all__ = [
    "CredentialManager",
    "CredentialStore",
    "FileStore",
    "KeyringStore",
    "MemoryStore",
]
