"""Allow ``python -m dpservice_cli`` invocation.

Delegates to the CLI error-boundary entry point so that
``python -m dpservice_cli`` behaves identically to the ``dpservice-cli``
console script.
"""

from __future__ import annotations

from dpservice_cli.cli.app import cli

if __name__ == "__main__":
    cli()
