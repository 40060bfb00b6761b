"""CLI application entry point and command routing for dpservice-cli.

This module is the **sole error boundary** for the entire application.
It catches :class:`~dpservice_cli.exceptions.DpserviceCliError`,
``KeyboardInterrupt`` and any unexpected ``Exception``, rendering
user-friendly messages via Rich and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here; the resource handlers in
  :mod:`dpservice_cli.cli.commands` call the core client.
* Diagnostics go to stderr through the Rich console.  Only rendered
  command output is written to stdout.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import argparse
import logging
import sys

from rich.markup import escape

from dpservice_cli.cli import exit_codes
from dpservice_cli.cli.commands import VERB_DEFAULT_OUTPUT, Deleted, Outcome, register_commands
from dpservice_cli.cli.console import configure_logging, console
from dpservice_cli.cli.renderers import OUTPUT_FORMATS, default_registry
from dpservice_cli.config import CliConfig, load_config
from dpservice_cli.core.dataplane_client import DataplaneClient
from dpservice_cli.exceptions import DpserviceCliError, TransportError
from dpservice_cli.infra.grpc_stub import open_stub
from dpservice_cli.version import __version__

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    ``dpservice-cli [global options] <verb> <resource> [options]`` where
    *verb* is ``add``, ``get``, ``list``, ``delete`` or ``doctor``.
    """
    parser = argparse.ArgumentParser(
        prog="dpservice-cli",
        description="Command-line client for the dpservice dataplane.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--address",
        default=None,
        help="dpservice gRPC address (default: from config, localhost:1337).",
    )
    parser.add_argument(
        "--connect-timeout",
        type=float,
        default=None,
        help="Seconds to wait for the connection (default: 4).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-call deadline in seconds (default: none).",
    )
    parser.add_argument(
        "-o",
        "--output",
        choices=OUTPUT_FORMATS,
        default=None,
        help="Output format (default: table for get/list, name for add/delete).",
    )
    parser.add_argument(
        "--pretty",
        action="store_true",
        help="Indent JSON output.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    verbs = parser.add_subparsers(dest="command", metavar="<verb>")
    register_commands(verbs)
    doctor = verbs.add_parser("doctor", help="Check the environment and connectivity.")
    doctor.set_defaults(verb="doctor")
    return parser


def _resolve_config(args: argparse.Namespace, config: CliConfig) -> CliConfig:
    """Apply command-line overrides on top of the loaded configuration."""
    return CliConfig(
        address=args.address or config.address,
        connect_timeout=(
            args.connect_timeout if args.connect_timeout is not None
            else config.connect_timeout
        ),
        output=args.output or config.output,
    )


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _emit(result: Outcome | Deleted, output: str, pretty: bool) -> None:
    if isinstance(result, Deleted):
        sys.stdout.write(f"{result}\n")
        return
    registry = default_registry(pretty=pretty, operation=result.operation)
    registry.new(output, sys.stdout).render(result.value)


def _handle_resource(args: argparse.Namespace, config: CliConfig) -> int:
    """Open a channel, run the resource handler once, render its result."""
    output = config.output or VERB_DEFAULT_OUTPUT[args.verb]
    logger.debug("Connecting to %s", config.address)
    with open_stub(config.address, connect_timeout=config.connect_timeout) as stub:
        result = args.handler(DataplaneClient(stub), args)
    _emit(result, output, args.pretty)
    return exit_codes.SUCCESS


def _handle_doctor(config: CliConfig) -> int:
    """Dispatch the ``doctor`` diagnostics command."""
    from dpservice_cli.cli.doctor import run_doctor

    return run_doctor(config.address, connect_timeout=config.connect_timeout)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the dpservice-cli CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return exit_codes.SUCCESS

    configure_logging(args.verbose)
    config = _resolve_config(args, load_config())

    if args.verb == "doctor":
        return _handle_doctor(config)

    return _handle_resource(args, config)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def _print_error(exc: DpserviceCliError) -> None:
    console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}", highlight=False)
    if exc.hint:
        console.print(f"[yellow]Hint:[/yellow] {escape(exc.hint)}", highlight=False)


def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except TransportError as exc:
        logger.debug("Remote call failed", exc_info=True)
        _print_error(exc)
        sys.exit(exit_codes.CONNECTION_ERROR)
    except DpserviceCliError as exc:
        logger.debug("Command failed", exc_info=True)
        _print_error(exc)
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {escape(str(exc))}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
