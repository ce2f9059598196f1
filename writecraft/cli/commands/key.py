"""
API key commands for the writecraft CLI.

Stores, removes, inspects and verifies the key kept in the credential chain.
"""

from argparse import ArgumentParser, Namespace
import getpass
from typing import TYPE_CHECKING, ClassVar, Optional

from ...auth.credentials import CredentialManager
from ...exceptions import APIError, NetworkError
from ..base import Command, CommandGroup

if TYPE_CHECKING:
    from ...client import Writecraft


def _credentials(args: Namespace) -> CredentialManager:
    return CredentialManager(profile=getattr(args, "profile", "default"))


class KeyCommandGroup(CommandGroup):
    """API key command group."""

    name = "key"
    aliases: ClassVar[list[str]] = ["k"]
    description = "Manage the stored API key"
    requires_api_key = False
    top_level = True

    def __init__(self) -> None:
        super().__init__()
        self.add_subcommand(SetKeyCommand())
        self.add_subcommand(DeleteKeyCommand())
        self.add_subcommand(StatusCommand())
        self.add_subcommand(TestKeyCommand())


class SetKeyCommand(Command):
    """Store an API key."""

    name = "set"
    aliases: ClassVar[list[str]] = []
    description = "Store an API key in the keychain (or config file fallback)"
    requires_api_key = False

    def add_arguments(self, parser: ArgumentParser) -> None:
        parser.add_argument("value", nargs="?", help="API key (prompted for when omitted)")

    def execute(self, args: Namespace, client: Optional["Writecraft"] = None) -> int:
        value = args.value or getpass.getpass("API key: ")
        value = value.strip()
        if not value:
            print("❌ No API key given")
            return 1
        store = _credentials(args).save_api_key(value)
        if store == "memory":
            print("⚠️  Persistent storage unavailable; key kept for this session only")
        else:
            print(f"✅ API key saved ({store})")
        return 0


class DeleteKeyCommand(Command):
    """Remove the stored API key."""

    name = "delete"
    aliases: ClassVar[list[str]] = ["rm"]
    description = "Remove the stored API key from every store"
    requires_api_key = False

    def add_arguments(self, parser: ArgumentParser) -> None:
        pass

    def execute(self, args: Namespace, client: Optional["Writecraft"] = None) -> int:
        if _credentials(args).delete_api_key():
            print("✅ API key removed")
            return 0
        print("❌ Could not remove the API key from every store")
        return 1


class StatusCommand(Command):
    """Show where a key is stored."""

    name = "status"
    aliases: ClassVar[list[str]] = ["s"]
    description = "Show which credential stores hold a key"
    requires_api_key = False

    def add_arguments(self, parser: ArgumentParser) -> None:
        pass

    def execute(self, args: Namespace, client: Optional["Writecraft"] = None) -> int:
        found = False
        for store_name, present in _credentials(args).describe():
            marker = "✅" if present else "·"
            print(f"  {marker} {store_name}")
            found = found or present
        if not found:
            print("No stored API key. Run: writecraft key set")
        return 0


class TestKeyCommand(Command):
    """Verify a key against the API."""

    name = "test"
    aliases: ClassVar[list[str]] = ["t"]
    description = "Check that the API accepts a key"
    requires_api_key = False

    def add_arguments(self, parser: ArgumentParser) -> None:
        parser.add_argument("value", nargs="?", help="Key to test (defaults to the stored key)")

    def execute(self, args: Namespace, client: Optional["Writecraft"] = None) -> int:
        if client is None:
            print("❌ Client unavailable")
            return 1
        value = args.value or client.api_key
        if not value:
            print("❌ No API key to test. Run: writecraft key set")
            return 1
        try:
            valid = client.test_api_key(value)
        except (APIError, NetworkError) as e:
            print(f"❌ Could not check key: {e}")
            return 1
        if valid:
            print("✅ API key is valid")
            return 0
        print("❌ API key was rejected")
        return 1
