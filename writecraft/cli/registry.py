"""
Command registry for CLI command discovery.
"""

import importlib
import inspect

from .base import Command

COMMAND_MODULES = ("ask", "key")


class CommandRegistry:
    """Maps command names and aliases to command instances."""

    def __init__(self) -> None:
        self._commands: dict[str, Command] = {}

    def register_command(self, command: Command) -> None:
        """
        Register a single command instance under its name and aliases.

        Raises:
            TypeError: If ``command`` is not a Command
            ValueError: If a name is already taken
        """
        if not isinstance(command, Command):
            raise TypeError(f"Expected Command instance, got {type(command)}")

        for name in command.get_all_names():
            if name in self._commands:
                raise ValueError(f"Command '{name}' is already registered")
            self._commands[name] = command

    def discover_commands_from_module(self, module_name: str) -> None:
        """
        Register every top-level command class defined in a module.

        A class is top-level when it sets ``top_level = True``; subcommands
        are registered by their parent groups instead.
        """
        module = importlib.import_module(module_name)
        for _name, obj in inspect.getmembers(module, inspect.isclass):
            if (
                issubclass(obj, Command)
                and obj.__module__ == module.__name__
                and not inspect.isabstract(obj)
                and getattr(obj, "top_level", False)
            ):
                self.register_command(obj())

    def auto_discover_commands(self, package_name: str = "writecraft.cli.commands") -> None:
        """Discover commands from the known command modules."""
        for module_name in COMMAND_MODULES:
            self.discover_commands_from_module(f"{package_name}.{module_name}")

    def get_command(self, name: str) -> Command:
        """
        Get a registered command by name or alias.

        Raises:
            KeyError: If command is not found
        """
        if name not in self._commands:
            raise KeyError(f"Command '{name}' not found")
        return self._commands[name]

    def get_primary_commands(self) -> list[Command]:
        """Unique command instances, in registration order."""
        primary_commands = []
        for name, command in self._commands.items():
            if name == command.name:
                primary_commands.append(command)
        return primary_commands

    def has_command(self, name: str) -> bool:
        return name in self._commands

    def clear(self) -> None:
        self._commands.clear()


registry = CommandRegistry()
