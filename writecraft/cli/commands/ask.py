"""
Ask command for the writecraft CLI: stream one reply to the terminal.
"""

from argparse import ArgumentParser, Namespace
import json
from pathlib import Path
import sys
from typing import TYPE_CHECKING, ClassVar, Optional

from ...exceptions import APIError, NetworkError, NoApiKeyError, RateLimitError
from ..base import Command
from ..display import create_display

if TYPE_CHECKING:
    from ...client import Writecraft


def _load_tools(path: str) -> list[dict]:
    """Read a JSON list of tool definitions ({name, description, input_schema})."""
    data = json.loads(Path(path).read_text())
    if not isinstance(data, list):
        raise ValueError("tools file must contain a JSON list")
    return data


class AskCommand(Command):
    """Send a prompt and stream the reply."""

    name = "ask"
    aliases: ClassVar[list[str]] = ["a"]
    description = "Send a prompt and stream the reply"
    requires_api_key = True
    top_level = True

    def add_arguments(self, parser: ArgumentParser) -> None:
        parser.add_argument("prompt", nargs="*", help="Prompt text (read from stdin when omitted)")
        parser.add_argument("--system", help="System prompt")
        parser.add_argument("--model", help="Model name")
        parser.add_argument("--tools", metavar="FILE", help="JSON file with tool definitions")
        parser.add_argument(
            "--format",
            choices=["verbose", "compact", "json"],
            default="verbose",
            help="Output format (default: verbose)",
        )

    def execute(self, args: Namespace, client: Optional["Writecraft"] = None) -> int:
        if client is None:
            print("❌ Client unavailable")
            return 1

        prompt = " ".join(args.prompt) if args.prompt else sys.stdin.read()
        if not prompt.strip():
            print("❌ Empty prompt")
            return 1

        try:
            tools = _load_tools(args.tools) if args.tools else None
        except (OSError, ValueError) as e:
            print(f"❌ Could not load tools: {e}")
            return 1

        display = create_display(args.format)
        messages = [{"role": "user", "content": prompt}]
        try:
            client.send_message_with_tools(
                messages,
                system_prompt=args.system,
                tools=tools,
                model=args.model,
                sink=display,
            )
        except NoApiKeyError as e:
            print(f"❌ {e}")
            return 1
        except RateLimitError as e:
            hint = f" (retry after {e.retry_after:g}s)" if e.retry_after else ""
            print(f"❌ Rate limited{hint}: {e}")
            return 1
        except (APIError, NetworkError) as e:
            if not display.error_shown:
                print(f"❌ {e}")
            return 1
        finally:
            display.finish()
        return 0
