"""
Base classes for CLI commands.
"""

from abc import ABC, abstractmethod
from argparse import ArgumentParser, Namespace
from typing import TYPE_CHECKING, ClassVar, Optional

if TYPE_CHECKING:
    from ..client import Writecraft


class Command(ABC):
    """
    Abstract base class for CLI commands.

    Subclasses are picked up by the command registry.
    """

    name: str = ""
    aliases: ClassVar[list[str]] = []
    description: str = ""

    # Whether the command needs a client with a resolved API key
    requires_api_key: bool = True

    # Registered directly on the root parser (subcommands leave this False)
    top_level: ClassVar[bool] = False

    def __init_subclass__(cls, **kwargs: object) -> None:
        super().__init_subclass__(**kwargs)
        if cls.__name__ == "CommandGroup":
            return
        if not cls.name:
            raise ValueError(f"Command class {cls.__name__} must define a 'name' attribute")
        if not cls.description:
            raise ValueError(f"Command class {cls.__name__} must define a 'description' attribute")

    @abstractmethod
    def add_arguments(self, parser: ArgumentParser) -> None:
        """Add command-specific arguments to the subparser."""

    @abstractmethod
    def execute(self, args: Namespace, client: Optional["Writecraft"] = None) -> int:
        """
        Execute the command with the given arguments.

        Args:
            args: Parsed command arguments
            client: Writecraft client instance

        Returns:
            Exit code (0 for success, non-zero for error)
        """

    def get_all_names(self) -> list[str]:
        """Get all names (primary + aliases) for this command."""
        return [self.name, *self.aliases]


class CommandGroup(Command):
    """
    Command that dispatches to subcommands.

    Example: key (set, delete, status, test)
    """

    name: str = ""
    aliases: ClassVar[list[str]] = []
    description: str = ""

    def __init__(self) -> None:
        self.subcommands: list[Command] = []

    def add_subcommand(self, command: Command) -> None:
        self.subcommands.append(command)

    def add_arguments(self, parser: ArgumentParser) -> None:
        """Add subparser for all subcommands."""
        if not self.subcommands:
            return

        subparsers = parser.add_subparsers(
            dest=f"{self.name}_command", help=f"{self.description} commands"
        )
        for command in self.subcommands:
            subparser = subparsers.add_parser(
                command.name, aliases=command.aliases, help=command.description
            )
            command.add_arguments(subparser)

    def execute(self, args: Namespace, client: Optional["Writecraft"] = None) -> int:
        """Execute the appropriate subcommand based on parsed arguments."""
        subcommand_name = getattr(args, f"{self.name}_command", None)
        if not subcommand_name:
            print(f"Error: No subcommand specified for '{self.name}'")
            print(f"Available subcommands: {', '.join(cmd.name for cmd in self.subcommands)}")
            return 1

        for command in self.subcommands:
            if subcommand_name in command.get_all_names():
                return command.execute(args, client)

        print(f"Error: Unknown subcommand '{subcommand_name}' for '{self.name}'")
        return 1
