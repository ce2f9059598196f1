"""
CLI display sinks for streamed replies.

Provides different output formats for rendering stream notifications:
- VerboseDisplay: Rich terminal output with tool-call panels and colors
- CompactDisplay: Reply text only
- JsonDisplay: One JSON object per notification for scripting and debugging
"""

import json

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax

from .._types import ToolUse
from ..sinks import StreamSink


class StreamDisplay(StreamSink):
    """Base class for display sinks."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()
        self.text_emitted = False
        self.error_shown = False

    def finish(self) -> None:
        """Finish the display (called after the last notification or on error)."""


class CompactDisplay(StreamDisplay):
    """
    Compact display showing only reply text.

    Tool calls and stop reasons are not shown.
    """

    def on_text(self, chunk: str, done: bool) -> None:
        if chunk:
            print(chunk, end="", flush=True)
            self.text_emitted = True

    def on_error(self, message: str) -> None:
        self.error_shown = True
        self.console.print(f"\n[red]❌ Error: {message}[/red]")

    def finish(self) -> None:
        """Finish with newline."""
        if self.text_emitted:
            print()


class VerboseDisplay(StreamDisplay):
    """
    Verbose display with rich terminal UI.

    Shows:
    - Real-time text streaming
    - Completed tool calls with their JSON input
    - The stop reason
    - Errors in a panel
    """

    def __init__(self, console: Console | None = None) -> None:
        super().__init__(console=console)
        self.tool_count = 0

    def on_text(self, chunk: str, done: bool) -> None:
        if chunk:
            self.console.print(chunk, end="", style="white", markup=False, highlight=False)
            self.text_emitted = True

    def on_tool_use(self, tool_use: ToolUse) -> None:
        self.tool_count += 1
        if self.text_emitted:
            self.console.print()
        body = Syntax(json.dumps(tool_use.input, indent=2), "json", theme="monokai")
        self.console.print(
            Panel(
                body,
                title=f"[bold cyan]⚡ {tool_use.name or 'Unknown tool'}[/bold cyan]",
                subtitle=f"[dim]{tool_use.id}[/dim]",
                border_style="cyan",
            )
        )

    def on_message_stop(self, stop_reason: str) -> None:
        if self.text_emitted:
            self.console.print()
        self.console.print(f"[dim]stop reason: {stop_reason}[/dim]")

    def on_error(self, message: str) -> None:
        self.error_shown = True
        if self.text_emitted:
            self.console.print()
        self.console.print(
            Panel(f"[red]{message}[/red]", title="[red]❌ Error[/red]", border_style="red")
        )


class JsonDisplay(StreamDisplay):
    """Raw notifications as JSON lines."""

    def _emit(self, payload: dict) -> None:
        print(json.dumps(payload), flush=True)

    def on_text(self, chunk: str, done: bool) -> None:
        self._emit({"type": "text", "chunk": chunk, "done": done})

    def on_tool_use(self, tool_use: ToolUse) -> None:
        self._emit({"type": "tool_use", **tool_use.to_dict()})

    def on_message_stop(self, stop_reason: str) -> None:
        self._emit({"type": "message_stop", "stop_reason": stop_reason})

    def on_error(self, message: str) -> None:
        self.error_shown = True
        self._emit({"type": "error", "error": message})


def create_display(format: str = "verbose") -> StreamDisplay:
    """
    Factory function to create appropriate display.

    Args:
        format: Display format ("verbose", "compact", or "json")

    Returns:
        StreamDisplay instance
    """
    if format == "compact":
        return CompactDisplay()
    elif format == "json":
        return JsonDisplay()
    else:  # "verbose" is default
        return VerboseDisplay()
