"""gRPC-backed implementation of :class:`~dpservice_cli.core.protocols.DataplaneStub`.

This module is the **only** place in the codebase that imports ``grpc``.
All ``grpc.RpcError`` exceptions are caught here and re-raised as
:class:`~dpservice_cli.exceptions.TransportError`, so nothing raw escapes
the infrastructure boundary.  The original error stays attached as
``__cause__``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

import grpc

from dpservice_cli import wire
from dpservice_cli.exceptions import TransportError

_HINTS: dict[str, str] = {
    "UNAVAILABLE": "Check that dpservice is running and --address is correct.",
    "DEADLINE_EXCEEDED": "The call did not finish in time; try a larger --timeout.",
    "UNIMPLEMENTED": "The dpservice daemon does not support this operation.",
}


def map_rpc_error(method: str, exc: grpc.RpcError) -> TransportError:
    """Translate a ``grpc.RpcError`` raised by *method* into a TransportError."""
    if isinstance(exc, grpc.Call):
        code = exc.code()
        code_name = code.name if code is not None else None
        details = exc.details() or ""
    else:
        code_name = None
        details = str(exc)
    message = f"{method} failed: {code_name or 'RPC error'}"
    if details:
        message = f"{message}: {details}"
    return TransportError(
        message,
        code=code_name,
        hint=_HINTS.get(code_name or ""),
    )


class GrpcUnaryCall:
    """One dpservice RPC; satisfies :class:`~dpservice_cli.core.protocols.UnaryCall`."""

    def __init__(self, method: str, call: Callable[..., Any]) -> None:
        self._method = method
        self._call = call

    def __call__(self, request: Any, *, timeout: float | None = None) -> Any:
        try:
            return self._call(request, timeout=timeout)
        except grpc.RpcError as exc:
            raise map_rpc_error(self._method, exc) from exc


class GrpcDataplaneStub:
    """Exposes every method of :data:`dpservice_cli.wire.METHODS` on a channel.

    Usage::

        with open_stub("localhost:1337", connect_timeout=4) as stub:
            client = DataplaneClient(stub)
    """

    def __init__(self, channel: grpc.Channel) -> None:
        for method, (request_name, response_name) in wire.METHODS.items():
            request_cls = wire.message_class(request_name)
            response_cls = wire.message_class(response_name)
            call = channel.unary_unary(
                wire.method_path(method),
                request_serializer=request_cls.SerializeToString,
                response_deserializer=response_cls.FromString,
            )
            setattr(self, method, GrpcUnaryCall(method, call))


@contextmanager
def open_stub(address: str, *, connect_timeout: float) -> Iterator[GrpcDataplaneStub]:
    """Open an insecure channel to *address* and yield a ready stub.

    The channel is closed when the context exits.

    Raises
    ------
    TransportError
        If the channel does not become ready within *connect_timeout*
        seconds.
    """
    channel = grpc.insecure_channel(address)
    try:
        try:
            grpc.channel_ready_future(channel).result(timeout=connect_timeout)
        except grpc.FutureTimeoutError as exc:
            raise TransportError(
                f"Could not connect to dpservice at {address} "
                f"within {connect_timeout:g}s.",
                code="UNAVAILABLE",
                hint=_HINTS["UNAVAILABLE"],
            ) from exc
        yield GrpcDataplaneStub(channel)
    finally:
        channel.close()
