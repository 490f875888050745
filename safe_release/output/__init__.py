"""Output formatting for the release CLI."""

from safe_release.output.console import ConsoleProtocol, MockConsole, RichConsole, Style

__all__ = ["ConsoleProtocol", "MockConsole", "RichConsole", "Style"]
