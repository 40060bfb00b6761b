"""Custom exception hierarchy for dpservice-cli.

All exceptions that cross layer boundaries must inherit from
:class:`DpserviceCliError`.  Raw ``grpc`` exceptions must NEVER
propagate beyond the infrastructure layer.  They are caught there and
re-raised as :class:`TransportError`.

Hierarchy
---------
DpserviceCliError
├── TransportError
├── StatusError
│   ├── NotFoundError
│   └── AlreadyExistsError
├── DecodeError
├── InvalidRequestError
├── RendererError
└── ConfigError
"""

from __future__ import annotations

NOT_FOUND: int = 201
"""Status code reported by dpservice when the addressed object is missing."""

ALREADY_EXISTS: int = 202
"""Status code reported by dpservice when the object already exists."""


class DpserviceCliError(Exception):
    """Base exception for all dpservice-cli errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Transport -------------------------------------------------------------

class TransportError(DpserviceCliError):
    """Raised when the remote call itself failed (connection, gRPC status)."""

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.code: str | None = code
        """Name of the gRPC status code (e.g. ``UNAVAILABLE``), if known."""


# --- Service-reported status -----------------------------------------------

class StatusError(DpserviceCliError):
    """Raised when dpservice executed the call but reported a failure.

    The code and message are preserved verbatim from the response's
    status sub-structure.
    """

    def __init__(self, code: int, message: str) -> None:
        super().__init__(f"[error code {code}] {message}")
        self.code: int = code
        self.message: str = message


class NotFoundError(StatusError):
    """Raised when dpservice reports that the object does not exist."""


class AlreadyExistsError(StatusError):
    """Raised when dpservice reports that the object already exists."""


_STATUS_ERRORS: dict[int, type[StatusError]] = {
    NOT_FOUND: NotFoundError,
    ALREADY_EXISTS: AlreadyExistsError,
}


def status_error(code: int, message: str) -> StatusError:
    """Build the most specific :class:`StatusError` for *code*."""
    return _STATUS_ERRORS.get(code, StatusError)(code, message)


# --- Local failures --------------------------------------------------------

class DecodeError(DpserviceCliError):
    """Raised when a response field cannot be parsed into a structured value."""


class InvalidRequestError(DpserviceCliError):
    """Raised when a request fails local validation before any RPC."""


class RendererError(DpserviceCliError):
    """Raised for unknown or duplicate renderers and unsupported values."""


class ConfigError(DpserviceCliError):
    """Raised when the configuration file cannot be read or parsed."""
