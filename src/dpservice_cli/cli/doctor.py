"""``dpservice-cli doctor``: environment and connectivity diagnostics.

Gathers runtime information and renders a Rich table summarising
whether the environment satisfies dpservice-cli's requirements and
whether the configured dpservice daemon answers.

This module lives in the CLI layer.  It may import from ``infra``
and ``core``, and it renders via Rich.  It only collects and displays
diagnostic data.
"""

from __future__ import annotations

import platform
import sys
from importlib.metadata import PackageNotFoundError, version

from rich.markup import escape
from rich.table import Table

from dpservice_cli.cli import exit_codes
from dpservice_cli.cli.console import console
from dpservice_cli.config import config_path
from dpservice_cli.exceptions import TransportError
from dpservice_cli.infra.grpc_stub import open_stub
from dpservice_cli.version import __version__

_OK = "[green]OK[/green]"
_WARN = "[yellow]WARN[/yellow]"
_FAIL = "[red]FAIL[/red]"

Check = tuple[str, str, str]


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _cli_version_check() -> Check:
    return "dpservice-cli", __version__, _OK


def _python_version_check() -> Check:
    """Return (label, value, status) for the Python version row."""
    ok = sys.version_info[:2] >= (3, 10)
    status = _OK if ok else "[red]FAIL (>=3.10 required)[/red]"
    return "Python", platform.python_version(), status


def _distribution_check(distribution: str) -> Check:
    """Return (label, value, status) for an installed library."""
    try:
        return distribution, version(distribution), _OK
    except PackageNotFoundError:
        return distribution, "NOT INSTALLED", _FAIL


def _config_check() -> Check:
    path = config_path()
    if path.exists():
        return "config", str(path), _OK
    return "config", f"{path} (not found, using defaults)", _WARN


def _connectivity_check(address: str, connect_timeout: float) -> Check:
    """Return (label, value, status) after trying to reach dpservice."""
    try:
        with open_stub(address, connect_timeout=connect_timeout):
            pass
    except TransportError:
        return "dpservice", f"{address} (unreachable)", _FAIL
    return "dpservice", address, _OK


def _os_check() -> Check:
    value = f"{platform.system()} {platform.release()} ({platform.machine()})"
    return "OS", value, _OK


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor(address: str, *, connect_timeout: float) -> int:
    """Execute all diagnostic checks and render a Rich summary table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when all critical checks pass,
        :data:`exit_codes.GENERAL_ERROR` if a critical check fails.
    """
    checks = [
        _cli_version_check(),
        _python_version_check(),
        _distribution_check("grpcio"),
        _distribution_check("protobuf"),
        _distribution_check("PyYAML"),
        _config_check(),
        _connectivity_check(address, connect_timeout),
        _os_check(),
    ]

    has_failure = any("FAIL" in status for _, _, status in checks)

    table = Table(
        title="dpservice-cli doctor",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("Component", style="bold", min_width=12)
    table.add_column("Value", min_width=20)
    table.add_column("Status", justify="center", min_width=8)

    for label, value, status in checks:
        table.add_row(label, escape(value), status)

    console.print()
    console.print(table)
    console.print()

    if has_failure:
        console.print("[bold red]Some checks failed.[/bold red]")
        return exit_codes.GENERAL_ERROR

    console.print("[bold green]All checks passed.[/bold green]")
    return exit_codes.SUCCESS
