"""Domain models for dpservice-cli.

All models are **frozen** dataclasses: immutable value objects built
fresh for every call, either from command-line input or from a
translated wire response.  Each resource kind has the same shape:

* ``meta``: stable identity (ID, parent reference)
* ``spec``: declared configuration
* ``status``: service-reported outcome (:class:`ResourceStatus`)

Addresses are :mod:`ipaddress` values.  An ``IPv4Address`` or
``IPv6Address`` carries its family with it, so the family tag sent on
the wire can never disagree with the address text.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, fields, is_dataclass
from enum import IntEnum
from ipaddress import IPv4Address, IPv4Network, IPv6Address, IPv6Network
from typing import Any, ClassVar, Iterator

from dpservice_cli.exceptions import InvalidRequestError
from dpservice_cli.wire import Protocol, VniType

IPAddress = IPv4Address | IPv6Address
IPNetwork = IPv4Network | IPv6Network

_PROTOCOLS_BY_NAME: dict[str, Protocol] = {p.name.lower(): p for p in Protocol}


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def to_jsonable(value: Any) -> Any:
    """Convert a model value into JSON-compatible primitives."""
    if isinstance(value, (IPv4Address, IPv6Address, IPv4Network, IPv6Network, LBPort)):
        return str(value)
    if isinstance(value, IntEnum):
        return value.name
    if is_dataclass(value) and not isinstance(value, type):
        return {
            _camel(f.name): to_jsonable(getattr(value, f.name))
            for f in fields(value)
        }
    if isinstance(value, (tuple, list)):
        return [to_jsonable(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# Shared value objects
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class LBPort:
    """A load-balancer port: L4 protocol plus port number."""

    protocol: Protocol
    port: int

    @classmethod
    def parse(cls, text: str) -> LBPort:
        """Parse ``"TCP/443"`` (protocol name is case-insensitive).

        Raises
        ------
        InvalidRequestError
            If *text* is not ``<protocol>/<port>`` with a known protocol
            and a port in ``0..65535``.
        """
        proto_name, sep, port_text = text.strip().partition("/")
        protocol = _PROTOCOLS_BY_NAME.get(proto_name.lower())
        if not sep or protocol is None or not port_text.isdigit():
            raise InvalidRequestError(
                f"Invalid load balancer port: {text!r}",
                hint="Use <protocol>/<port>, e.g. TCP/443 or UDP/53.",
            )
        port = int(port_text)
        if port > 65535:
            raise InvalidRequestError(f"Port out of range: {port}")
        return cls(protocol=protocol, port=port)

    def __str__(self) -> str:
        return f"{self.protocol.name}/{self.port}"


@dataclass(frozen=True, slots=True)
class ResourceStatus:
    """Outcome reported by dpservice for a resource."""

    underlay_route: IPAddress | None = None
    """Service-assigned underlay address, when the call reports one."""

    error: int = 0
    message: str = ""


class Resource(ABC):
    """Behaviour shared by every resource kind."""

    __slots__ = ()

    kind: ClassVar[str] = ""

    @property
    @abstractmethod
    def name(self) -> str:
        """Identity shown by the ``name`` output format."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "metadata": to_jsonable(self.meta),  # type: ignore[attr-defined]
            "spec": to_jsonable(self.spec),  # type: ignore[attr-defined]
            "status": to_jsonable(self.status),  # type: ignore[attr-defined]
        }


# ---------------------------------------------------------------------------
# Interface
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class InterfaceMeta:
    id: str


@dataclass(frozen=True, slots=True)
class InterfaceSpec:
    vni: int = 0
    device: str = ""
    ips: tuple[IPAddress, ...] = ()
    """Primary addresses; at most one of each family is used."""


@dataclass(frozen=True, slots=True)
class Interface(Resource):
    kind: ClassVar[str] = "Interface"

    meta: InterfaceMeta
    spec: InterfaceSpec = field(default_factory=InterfaceSpec)
    status: ResourceStatus = field(default_factory=ResourceStatus)

    @property
    def name(self) -> str:
        return self.meta.id


# ---------------------------------------------------------------------------
# Virtual IP
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class VirtualIPMeta:
    interface_id: str


@dataclass(frozen=True, slots=True)
class VirtualIPSpec:
    ip: IPAddress


@dataclass(frozen=True, slots=True)
class VirtualIP(Resource):
    kind: ClassVar[str] = "VirtualIP"

    meta: VirtualIPMeta
    spec: VirtualIPSpec
    status: ResourceStatus = field(default_factory=ResourceStatus)

    @property
    def name(self) -> str:
        return self.meta.interface_id


# ---------------------------------------------------------------------------
# Prefixes (plain and load-balancer scoped)
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class PrefixMeta:
    interface_id: str


@dataclass(frozen=True, slots=True)
class PrefixSpec:
    prefix: IPNetwork


@dataclass(frozen=True, slots=True)
class Prefix(Resource):
    kind: ClassVar[str] = "Prefix"

    meta: PrefixMeta
    spec: PrefixSpec
    status: ResourceStatus = field(default_factory=ResourceStatus)

    @property
    def name(self) -> str:
        return str(self.spec.prefix)


@dataclass(frozen=True, slots=True)
class LoadBalancerPrefix(Resource):
    kind: ClassVar[str] = "LoadBalancerPrefix"

    meta: PrefixMeta
    spec: PrefixSpec
    status: ResourceStatus = field(default_factory=ResourceStatus)

    @property
    def name(self) -> str:
        return str(self.spec.prefix)


# ---------------------------------------------------------------------------
# Route
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class RouteMeta:
    vni: int


@dataclass(frozen=True, slots=True)
class RouteNextHop:
    vni: int
    ip: IPAddress


@dataclass(frozen=True, slots=True)
class RouteSpec:
    prefix: IPNetwork
    next_hop: RouteNextHop


@dataclass(frozen=True, slots=True)
class Route(Resource):
    kind: ClassVar[str] = "Route"

    meta: RouteMeta
    spec: RouteSpec
    status: ResourceStatus = field(default_factory=ResourceStatus)

    @property
    def name(self) -> str:
        hop = self.spec.next_hop
        return f"{self.spec.prefix}-{hop.vni}:{hop.ip}"


# ---------------------------------------------------------------------------
# Load balancer and targets
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class LoadBalancerMeta:
    id: str


@dataclass(frozen=True, slots=True)
class LoadBalancerSpec:
    vni: int
    vip: IPAddress
    ports: tuple[LBPort, ...] = ()


@dataclass(frozen=True, slots=True)
class LoadBalancer(Resource):
    kind: ClassVar[str] = "LoadBalancer"

    meta: LoadBalancerMeta
    spec: LoadBalancerSpec
    status: ResourceStatus = field(default_factory=ResourceStatus)

    @property
    def name(self) -> str:
        return self.meta.id


@dataclass(frozen=True, slots=True)
class LoadBalancerTargetMeta:
    load_balancer_id: str


@dataclass(frozen=True, slots=True)
class LoadBalancerTargetSpec:
    target_ip: IPAddress


@dataclass(frozen=True, slots=True)
class LoadBalancerTarget(Resource):
    kind: ClassVar[str] = "LoadBalancerTarget"

    meta: LoadBalancerTargetMeta
    spec: LoadBalancerTargetSpec
    status: ResourceStatus = field(default_factory=ResourceStatus)

    @property
    def name(self) -> str:
        return str(self.spec.target_ip)


# ---------------------------------------------------------------------------
# NAT
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class NatMeta:
    interface_id: str


@dataclass(frozen=True, slots=True)
class NatSpec:
    nat_ip: IPAddress
    min_port: int
    max_port: int
    vni: int = 0
    """VNI of the entry; only reported when listing NAT entries."""


@dataclass(frozen=True, slots=True)
class Nat(Resource):
    kind: ClassVar[str] = "Nat"

    meta: NatMeta
    spec: NatSpec
    status: ResourceStatus = field(default_factory=ResourceStatus)

    @property
    def name(self) -> str:
        return self.meta.interface_id or (
            f"{self.spec.nat_ip}:{self.spec.min_port}-{self.spec.max_port}"
        )


# ---------------------------------------------------------------------------
# Service information
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class VersionMeta:
    client_protocol: str
    client_name: str
    client_version: str


@dataclass(frozen=True, slots=True)
class VersionSpec:
    service_protocol: str = ""
    service_version: str = ""


@dataclass(frozen=True, slots=True)
class Version(Resource):
    """Versions exchanged with dpservice by ``getVersion``."""

    kind: ClassVar[str] = "Version"

    meta: VersionMeta
    spec: VersionSpec = field(default_factory=VersionSpec)
    status: ResourceStatus = field(default_factory=ResourceStatus)

    @property
    def name(self) -> str:
        return self.spec.service_version


@dataclass(frozen=True, slots=True)
class InitMeta:
    pass


@dataclass(frozen=True, slots=True)
class InitSpec:
    uuid: str


@dataclass(frozen=True, slots=True)
class Init(Resource):
    """Initialisation state of dpservice, identified by its UUID."""

    kind: ClassVar[str] = "Init"

    spec: InitSpec
    meta: InitMeta = field(default_factory=InitMeta)
    status: ResourceStatus = field(default_factory=ResourceStatus)

    @property
    def name(self) -> str:
        return self.spec.uuid


@dataclass(frozen=True, slots=True)
class VniMeta:
    vni: int
    vni_type: VniType = VniType.VniIpv4


@dataclass(frozen=True, slots=True)
class VniSpec:
    in_use: bool


@dataclass(frozen=True, slots=True)
class Vni(Resource):
    """Whether a VNI is in use by any interface, route or load balancer."""

    kind: ClassVar[str] = "Vni"

    meta: VniMeta
    spec: VniSpec
    status: ResourceStatus = field(default_factory=ResourceStatus)

    @property
    def name(self) -> str:
        return str(self.meta.vni)


# ---------------------------------------------------------------------------
# Typed collection wrapper
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ResourceList:
    """Immutable, ordered result of a list operation.

    Items keep the order in which dpservice returned them.
    """

    kind: str
    """List kind, e.g. ``"PrefixList"``."""

    items: tuple[Resource, ...] = ()

    def __len__(self) -> int:
        return len(self.items)

    def __bool__(self) -> bool:
        return len(self.items) > 0

    def __iter__(self) -> Iterator[Resource]:
        return iter(self.items)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "items": [item.to_dict() for item in self.items]}
