"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols, never on ``grpc`` or on
the concrete stub.
"""

from __future__ import annotations

from typing import Any, Protocol


class UnaryCall(Protocol):
    """A single remote procedure: one request message in, one response out."""

    def __call__(self, request: Any, *, timeout: float | None = None) -> Any:
        """Perform the call and return the response message.

        *timeout* is the caller's per-call deadline in seconds and is
        passed to the transport unchanged.

        Implementations must map transport failures to
        :class:`~dpservice_cli.exceptions.TransportError`.
        """
        ...  # pragma: no cover


class DataplaneStub(Protocol):
    """Contract for the dpservice RPC surface.

    One :class:`UnaryCall` attribute per RPC method of
    :data:`dpservice_cli.wire.METHODS`.  Any object exposing these
    attributes satisfies the protocol structurally.
    """

    CreateLoadBalancer: UnaryCall
    GetLoadBalancer: UnaryCall
    DeleteLoadBalancer: UnaryCall
    AddLoadBalancerTarget: UnaryCall
    DeleteLoadBalancerTarget: UnaryCall
    GetLoadBalancerTargets: UnaryCall
    CreateInterfaceLoadBalancerPrefix: UnaryCall
    DeleteInterfaceLoadBalancerPrefix: UnaryCall
    ListInterfaceLoadBalancerPrefixes: UnaryCall
    CreateInterface: UnaryCall
    GetInterface: UnaryCall
    ListInterfaces: UnaryCall
    DeleteInterface: UnaryCall
    AddInterfaceVIP: UnaryCall
    GetInterfaceVIP: UnaryCall
    DeleteInterfaceVIP: UnaryCall
    AddInterfacePrefix: UnaryCall
    DeleteInterfacePrefix: UnaryCall
    ListInterfacePrefixes: UnaryCall
    AddRoute: UnaryCall
    DeleteRoute: UnaryCall
    ListRoutes: UnaryCall
    AddNAT: UnaryCall
    GetNAT: UnaryCall
    DeleteNAT: UnaryCall
    GetNATInfo: UnaryCall
    GetVersion: UnaryCall
    CheckInitialized: UnaryCall
    IsVniInUse: UnaryCall
