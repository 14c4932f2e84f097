"""Logging setup shared by the CLI, dashboard and scripts."""

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: str = "WARNING", console: Console = None) -> None:
    """Route the ``src`` loggers through a rich handler."""
    handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    root = logging.getLogger("src")
    root.handlers = [handler]
    root.setLevel(level)
    root.propagate = False
