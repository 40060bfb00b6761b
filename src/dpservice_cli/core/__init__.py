"""Core / service layer: resource models and the dataplane client.

Rules
-----
* No ``print()`` calls.
* No network I/O of its own; RPCs go through the injected stub.
* No imports from ``cli`` or ``infra``.
"""

from dpservice_cli.core.dataplane_client import ROUTE_WEIGHT, DataplaneClient
from dpservice_cli.core.models import (
    Init,
    Interface,
    LBPort,
    LoadBalancer,
    LoadBalancerPrefix,
    LoadBalancerTarget,
    Nat,
    Prefix,
    ResourceList,
    ResourceStatus,
    Route,
    Version,
    VirtualIP,
    Vni,
)
from dpservice_cli.core.protocols import DataplaneStub, UnaryCall

__all__: list[str] = [
    "ROUTE_WEIGHT",
    "DataplaneClient",
    "DataplaneStub",
    "Init",
    "Interface",
    "LBPort",
    "LoadBalancer",
    "LoadBalancerPrefix",
    "LoadBalancerTarget",
    "Nat",
    "Prefix",
    "ResourceList",
    "ResourceStatus",
    "Route",
    "UnaryCall",
    "Version",
    "VirtualIP",
    "Vni",
]
