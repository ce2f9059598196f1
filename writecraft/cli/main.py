"""
Main CLI entry point for writecraft.
"""

import argparse
import sys

from writecraft import __version__

from ..client import Writecraft
from ..exceptions import NoApiKeyError
from .registry import registry
from .util import configure_logging, graceful_main


def build_parser() -> argparse.ArgumentParser:
    """Create the root parser with every discovered command attached."""
    if not registry.get_primary_commands():
        registry.auto_discover_commands()

    parser = argparse.ArgumentParser(
        prog="writecraft",
        description="writecraft - stream replies from the Messages API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--api-key", help="API key (or set WRITECRAFT_API_KEY environment variable)"
    )
    parser.add_argument("--base-url", help="Custom API base URL")
    parser.add_argument("--profile", default="default", help="Credential profile name")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    for command in registry.get_primary_commands():
        subparser = subparsers.add_parser(
            command.name, aliases=command.aliases, help=command.description
        )
        command.add_arguments(subparser)
    return parser


def _real_main(argv: list[str]) -> int:
    """Parse arguments, build the client and run the selected command."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if not args.command:
        parser.print_help()
        return 0

    try:
        command = registry.get_command(args.command)
    except KeyError:
        print(f"❌ Unknown command: {args.command}")
        return 1

    client = Writecraft(api_key=args.api_key, base_url=args.base_url, profile=args.profile)
    if command.requires_api_key and not client.api_key:
        print(f"❌ {NoApiKeyError()}")
        return 1

    try:
        return command.execute(args, client)
    finally:
        client.close()


def main() -> None:
    """Main CLI entry point with graceful interrupt handling."""
    code = graceful_main(_real_main, sys.argv[1:])
    raise SystemExit(code)


if __name__ == "__main__":
    main()
