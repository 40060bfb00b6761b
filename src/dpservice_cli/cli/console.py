"""CLI console and logging helpers built on Rich.

Diagnostics, errors and log records go to stderr; rendered command
output goes to stdout through the renderers.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

console = Console(stderr=True)
"""Shared stderr console for errors, hints and diagnostics."""


def configure_logging(verbose: bool = False) -> None:
    """Route ``logging`` records to stderr through Rich.

    ``WARNING`` and above by default, everything with *verbose*.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=verbose, rich_tracebacks=True)],
        force=True,
    )
