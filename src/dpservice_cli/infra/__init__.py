"""Infrastructure layer: external system integration.

This layer wraps all interaction with ``grpc`` and the dpservice
daemon.  Every raw gRPC exception must be caught here and re-raised
as a :class:`~dpservice_cli.exceptions.DpserviceCliError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from dpservice_cli.infra.grpc_stub import GrpcDataplaneStub, GrpcUnaryCall, open_stub

__all__: list[str] = [
    "GrpcDataplaneStub",
    "GrpcUnaryCall",
    "open_stub",
]
