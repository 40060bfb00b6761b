"""Verb/resource sub-commands: ``add``, ``get``, ``list`` and ``delete``.

Each resource parser stores a *handler* in its defaults.  A handler
turns the parsed options into models, calls exactly one
:class:`~dpservice_cli.core.DataplaneClient` operation and returns an
:class:`Outcome` (something to render) or a :class:`Deleted` record.
Rendering and error handling stay in :mod:`dpservice_cli.cli.app`.
"""

from __future__ import annotations

import argparse
import ipaddress
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from dpservice_cli.core.dataplane_client import DataplaneClient
from dpservice_cli.core.models import (
    Interface,
    InterfaceMeta,
    InterfaceSpec,
    IPAddress,
    IPNetwork,
    LBPort,
    LoadBalancer,
    LoadBalancerMeta,
    LoadBalancerPrefix,
    LoadBalancerSpec,
    LoadBalancerTarget,
    LoadBalancerTargetMeta,
    LoadBalancerTargetSpec,
    Nat,
    NatMeta,
    NatSpec,
    Prefix,
    PrefixMeta,
    PrefixSpec,
    Resource,
    ResourceList,
    Route,
    RouteMeta,
    RouteNextHop,
    RouteSpec,
    VirtualIP,
    VirtualIPMeta,
    VirtualIPSpec,
)
from dpservice_cli import wire
from dpservice_cli.core.sorting import sort_columns, sort_resources
from dpservice_cli.exceptions import InvalidRequestError
from dpservice_cli.version import __version__

VERB_DEFAULT_OUTPUT: dict[str, str] = {
    "add": "name",
    "delete": "name",
    "get": "table",
    "list": "table",
}

_UINT32_MAX = 2**32 - 1


@dataclass(frozen=True, slots=True)
class Outcome:
    """A value to render plus the operation label for the ``name`` format."""

    value: Resource | ResourceList
    operation: str = ""


@dataclass(frozen=True, slots=True)
class Deleted:
    """Identity of a removed object, printed as ``<kind>/<name> deleted``."""

    kind: str
    name: str

    def __str__(self) -> str:
        return f"{self.kind.lower()}/{self.name} deleted"


Handler = Callable[[DataplaneClient, argparse.Namespace], "Outcome | Deleted"]


# ---------------------------------------------------------------------------
# Argument types
# ---------------------------------------------------------------------------

def ip_address_arg(text: str) -> IPAddress:
    try:
        return ipaddress.ip_address(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid IP address: {text!r}") from None


def _ip_of_version(version: int) -> Callable[[str], IPAddress]:
    def parse(text: str) -> IPAddress:
        address = ip_address_arg(text)
        if address.version != version:
            raise argparse.ArgumentTypeError(f"not an IPv{version} address: {text!r}")
        return address

    parse.__name__ = f"ipv{version}_address"
    return parse


def ip_network_arg(text: str) -> IPNetwork:
    """Parse a prefix; host bits are masked off (``10.0.0.5/24`` → ``10.0.0.0/24``)."""
    try:
        return ipaddress.ip_network(text, strict=False)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid prefix: {text!r}") from None


def uint32_arg(text: str) -> int:
    try:
        value = int(text, 10)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}") from None
    if not 0 <= value <= _UINT32_MAX:
        raise argparse.ArgumentTypeError(f"out of range 0..{_UINT32_MAX}: {value}")
    return value


def port_arg(text: str) -> int:
    value = uint32_arg(text)
    if value > 65535:
        raise argparse.ArgumentTypeError(f"port out of range 0..65535: {value}")
    return value


def lbports_arg(text: str) -> tuple[LBPort, ...]:
    """Parse ``TCP/443,UDP/53`` into load-balancer ports."""
    try:
        return tuple(LBPort.parse(part) for part in text.split(",") if part.strip())
    except InvalidRequestError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


_NAT_TYPES: dict[str, wire.NATInfoType] = {
    "0": wire.NATInfoType.NATInfoAny,
    "any": wire.NATInfoType.NATInfoAny,
    "1": wire.NATInfoType.NATInfoLocal,
    "local": wire.NATInfoType.NATInfoLocal,
    "2": wire.NATInfoType.NATInfoNeighbor,
    "neigh": wire.NATInfoType.NATInfoNeighbor,
    "neighbor": wire.NATInfoType.NATInfoNeighbor,
}

_VNI_TYPES: dict[str, wire.VniType] = {
    "0": wire.VniType.VniIpv4,
    "ipv4": wire.VniType.VniIpv4,
    "1": wire.VniType.VniIpv6,
    "ipv6": wire.VniType.VniIpv6,
    "2": wire.VniType.VniBoth,
    "both": wire.VniType.VniBoth,
}


def nat_type_arg(text: str) -> wire.NATInfoType:
    """Parse ``any``/``local``/``neigh(bor)`` or the numbers 0/1/2."""
    try:
        return _NAT_TYPES[text.strip().lower()]
    except KeyError:
        raise argparse.ArgumentTypeError(
            f"invalid NAT type: {text!r} (use any=0, local=1 or neighbor=2)",
        ) from None


def vni_type_arg(text: str) -> wire.VniType:
    """Parse ``ipv4``/``ipv6``/``both`` or the numbers 0/1/2."""
    try:
        return _VNI_TYPES[text.strip().lower()]
    except KeyError:
        raise argparse.ArgumentTypeError(
            f"invalid VNI type: {text!r} (use ipv4=0, ipv6=1 or both=2)",
        ) from None


def _timeout(args: argparse.Namespace) -> float | None:
    return getattr(args, "timeout", None)


def _added(resource: Resource, *, with_underlay: bool = False) -> Outcome:
    if with_underlay:
        return Outcome(resource, f"added, underlay route: {resource.status.underlay_route}")  # type: ignore[attr-defined]
    return Outcome(resource, "added")


def _listed(result: ResourceList, args: argparse.Namespace) -> Outcome:
    return Outcome(sort_resources(result, args.sort_by))


# ---------------------------------------------------------------------------
# add
# ---------------------------------------------------------------------------

def _add_interface(client: DataplaneClient, args: argparse.Namespace) -> Outcome:
    ips = tuple(ip for ip in (args.ipv4, args.ipv6) if ip is not None)
    iface = Interface(
        meta=InterfaceMeta(id=args.id),
        spec=InterfaceSpec(vni=args.vni, device=args.device, ips=ips),
    )
    return _added(client.create_interface(iface, timeout=_timeout(args)), with_underlay=True)


def _add_virtual_ip(client: DataplaneClient, args: argparse.Namespace) -> Outcome:
    vip = VirtualIP(
        meta=VirtualIPMeta(interface_id=args.interface_id),
        spec=VirtualIPSpec(ip=args.vip),
    )
    return _added(client.create_virtual_ip(vip, timeout=_timeout(args)))


def _add_prefix(client: DataplaneClient, args: argparse.Namespace) -> Outcome:
    prefix = Prefix(
        meta=PrefixMeta(interface_id=args.interface_id),
        spec=PrefixSpec(prefix=args.prefix),
    )
    return _added(client.create_prefix(prefix, timeout=_timeout(args)))


def _add_lb_prefix(client: DataplaneClient, args: argparse.Namespace) -> Outcome:
    prefix = LoadBalancerPrefix(
        meta=PrefixMeta(interface_id=args.interface_id),
        spec=PrefixSpec(prefix=args.prefix),
    )
    return _added(client.create_load_balancer_prefix(prefix, timeout=_timeout(args)))


def _route_from_args(args: argparse.Namespace) -> Route:
    return Route(
        meta=RouteMeta(vni=args.vni),
        spec=RouteSpec(
            prefix=args.prefix,
            next_hop=RouteNextHop(vni=args.next_hop_vni, ip=args.next_hop_ip),
        ),
    )


def _add_route(client: DataplaneClient, args: argparse.Namespace) -> Outcome:
    return _added(client.create_route(_route_from_args(args), timeout=_timeout(args)))


def _add_load_balancer(client: DataplaneClient, args: argparse.Namespace) -> Outcome:
    lb = LoadBalancer(
        meta=LoadBalancerMeta(id=args.id),
        spec=LoadBalancerSpec(vni=args.vni, vip=args.vip, ports=args.lbports),
    )
    return _added(client.create_load_balancer(lb, timeout=_timeout(args)), with_underlay=True)


def _add_lb_target(client: DataplaneClient, args: argparse.Namespace) -> Outcome:
    target = LoadBalancerTarget(
        meta=LoadBalancerTargetMeta(load_balancer_id=args.lb_id),
        spec=LoadBalancerTargetSpec(target_ip=args.target_ip),
    )
    return _added(client.create_load_balancer_target(target, timeout=_timeout(args)))


def _add_nat(client: DataplaneClient, args: argparse.Namespace) -> Outcome:
    if args.min_port > args.max_port:
        raise InvalidRequestError(
            f"--min-port {args.min_port} is greater than --max-port {args.max_port}.",
        )
    nat = Nat(
        meta=NatMeta(interface_id=args.interface_id),
        spec=NatSpec(nat_ip=args.nat_ip, min_port=args.min_port, max_port=args.max_port),
    )
    return _added(client.create_nat(nat, timeout=_timeout(args)), with_underlay=True)


# ---------------------------------------------------------------------------
# get
# ---------------------------------------------------------------------------

def _get_interface(client: DataplaneClient, args: argparse.Namespace) -> Outcome:
    return Outcome(client.get_interface(args.id, timeout=_timeout(args)))


def _get_virtual_ip(client: DataplaneClient, args: argparse.Namespace) -> Outcome:
    return Outcome(client.get_virtual_ip(args.interface_id, timeout=_timeout(args)))


def _get_load_balancer(client: DataplaneClient, args: argparse.Namespace) -> Outcome:
    return Outcome(client.get_load_balancer(args.id, timeout=_timeout(args)))


def _get_nat(client: DataplaneClient, args: argparse.Namespace) -> Outcome:
    return Outcome(client.get_nat(args.interface_id, timeout=_timeout(args)))


def _get_vni(client: DataplaneClient, args: argparse.Namespace) -> Outcome:
    return Outcome(client.get_vni(args.vni, args.vni_type, timeout=_timeout(args)))


def _get_version(client: DataplaneClient, args: argparse.Namespace) -> Outcome:
    return Outcome(client.get_version("dpservice-cli", __version__, timeout=_timeout(args)))


def _get_init(client: DataplaneClient, args: argparse.Namespace) -> Outcome:
    return Outcome(client.get_init(timeout=_timeout(args)))


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------

def _list_interfaces(client: DataplaneClient, args: argparse.Namespace) -> Outcome:
    return _listed(client.list_interfaces(timeout=_timeout(args)), args)


def _list_prefixes(client: DataplaneClient, args: argparse.Namespace) -> Outcome:
    return _listed(client.list_prefixes(args.interface_id, timeout=_timeout(args)), args)


def _list_lb_prefixes(client: DataplaneClient, args: argparse.Namespace) -> Outcome:
    result = client.list_load_balancer_prefixes(args.interface_id, timeout=_timeout(args))
    return _listed(result, args)


def _list_routes(client: DataplaneClient, args: argparse.Namespace) -> Outcome:
    return _listed(client.list_routes(args.vni, timeout=_timeout(args)), args)


def _list_lb_targets(client: DataplaneClient, args: argparse.Namespace) -> Outcome:
    return _listed(client.list_load_balancer_targets(args.lb_id, timeout=_timeout(args)), args)


def _list_nats(client: DataplaneClient, args: argparse.Namespace) -> Outcome:
    result = client.list_nats(args.nat_ip, args.nat_type, timeout=_timeout(args))
    return _listed(result, args)


# ---------------------------------------------------------------------------
# delete
# ---------------------------------------------------------------------------

def _delete_interface(client: DataplaneClient, args: argparse.Namespace) -> Deleted:
    client.delete_interface(args.id, timeout=_timeout(args))
    return Deleted(Interface.kind, args.id)


def _delete_virtual_ip(client: DataplaneClient, args: argparse.Namespace) -> Deleted:
    client.delete_virtual_ip(args.interface_id, timeout=_timeout(args))
    return Deleted(VirtualIP.kind, args.interface_id)


def _delete_prefix(client: DataplaneClient, args: argparse.Namespace) -> Deleted:
    client.delete_prefix(args.interface_id, args.prefix, timeout=_timeout(args))
    return Deleted(Prefix.kind, str(args.prefix))


def _delete_lb_prefix(client: DataplaneClient, args: argparse.Namespace) -> Deleted:
    client.delete_load_balancer_prefix(args.interface_id, args.prefix, timeout=_timeout(args))
    return Deleted(LoadBalancerPrefix.kind, str(args.prefix))


def _delete_route(client: DataplaneClient, args: argparse.Namespace) -> Deleted:
    client.delete_route(
        args.vni,
        args.prefix,
        args.next_hop_vni,
        args.next_hop_ip,
        timeout=_timeout(args),
    )
    return Deleted(Route.kind, _route_from_args(args).name)


def _delete_load_balancer(client: DataplaneClient, args: argparse.Namespace) -> Deleted:
    client.delete_load_balancer(args.id, timeout=_timeout(args))
    return Deleted(LoadBalancer.kind, args.id)


def _delete_lb_target(client: DataplaneClient, args: argparse.Namespace) -> Deleted:
    client.delete_load_balancer_target(args.lb_id, args.target_ip, timeout=_timeout(args))
    return Deleted(LoadBalancerTarget.kind, str(args.target_ip))


def _delete_nat(client: DataplaneClient, args: argparse.Namespace) -> Deleted:
    client.delete_nat(args.interface_id, timeout=_timeout(args))
    return Deleted(Nat.kind, args.interface_id)


# ---------------------------------------------------------------------------
# Parser construction
# ---------------------------------------------------------------------------

_ALIASES: dict[str, list[str]] = {
    "interface": ["iface"],
    "interfaces": ["interface", "ifaces"],
    "virtualip": ["vip"],
    "prefixes": ["prefix"],
    "lbprefixes": ["lbprefix"],
    "routes": ["route"],
    "loadbalancer": ["lb"],
    "lbtargets": ["lbtarget"],
    "nats": ["nat"],
}


def _resource(
    resources: Any,
    name: str,
    handler: Handler,
    help_text: str,
) -> argparse.ArgumentParser:
    parser = resources.add_parser(name, aliases=_ALIASES.get(name, []), help=help_text)
    parser.set_defaults(handler=handler)
    return parser


def _interface_id(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--interface-id", required=True, help="Interface ID.")


def _route_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--vni", type=uint32_arg, required=True, help="VNI of the route.")
    parser.add_argument("--prefix", type=ip_network_arg, required=True, help="Route prefix.")
    parser.add_argument("--next-hop-vni", type=uint32_arg, required=True, help="Next hop VNI.")
    parser.add_argument(
        "--next-hop-ip", type=ip_address_arg, required=True, help="Next hop IP.",
    )


def _sort_by(parser: argparse.ArgumentParser, kind: str) -> None:
    parser.add_argument(
        "--sort-by",
        default=None,
        help=f"Column to sort by ({', '.join(sort_columns(kind))}).",
    )


def _register_add(verbs: Any) -> None:
    add = verbs.add_parser("add", help="Create a dataplane object.")
    add.set_defaults(verb="add")
    resources = add.add_subparsers(dest="resource", metavar="<resource>", required=True)

    p = _resource(resources, "interface", _add_interface, "Create an interface.")
    p.add_argument("--id", required=True, help="Interface ID.")
    p.add_argument("--vni", type=uint32_arg, required=True, help="VNI of the interface.")
    p.add_argument("--ipv4", type=_ip_of_version(4), default=None, help="Primary IPv4 address.")
    p.add_argument("--ipv6", type=_ip_of_version(6), default=None, help="Primary IPv6 address.")
    p.add_argument("--device", default="", help="PCI device name; assigned by dpservice if omitted.")

    p = _resource(resources, "virtualip", _add_virtual_ip, "Assign a virtual IP to an interface.")
    _interface_id(p)
    p.add_argument("--vip", type=ip_address_arg, required=True, help="Virtual IP.")

    p = _resource(resources, "prefix", _add_prefix, "Add a prefix to an interface.")
    _interface_id(p)
    p.add_argument("--prefix", type=ip_network_arg, required=True, help="Prefix to add.")

    p = _resource(resources, "lbprefix", _add_lb_prefix, "Add a load balancer prefix.")
    _interface_id(p)
    p.add_argument("--prefix", type=ip_network_arg, required=True, help="Prefix to add.")

    p = _resource(resources, "route", _add_route, "Add a route to a VNI.")
    _route_options(p)

    p = _resource(resources, "loadbalancer", _add_load_balancer, "Create a load balancer.")
    p.add_argument("--id", required=True, help="Load balancer ID.")
    p.add_argument("--vni", type=uint32_arg, required=True, help="VNI of the load balancer.")
    p.add_argument("--vip", type=ip_address_arg, required=True, help="Virtual IP.")
    p.add_argument(
        "--lbports",
        type=lbports_arg,
        required=True,
        help="Comma-separated ports, e.g. TCP/443,UDP/53.",
    )

    p = _resource(resources, "lbtarget", _add_lb_target, "Add a load balancer target.")
    p.add_argument("--lb-id", required=True, help="Load balancer ID.")
    p.add_argument("--target-ip", type=ip_address_arg, required=True, help="Target IP.")

    p = _resource(resources, "nat", _add_nat, "Add a NAT to an interface.")
    _interface_id(p)
    p.add_argument("--nat-ip", type=ip_address_arg, required=True, help="NAT IP.")
    p.add_argument("--min-port", type=port_arg, required=True, help="First NAT port.")
    p.add_argument("--max-port", type=port_arg, required=True, help="Last NAT port.")


def _register_get(verbs: Any) -> None:
    get = verbs.add_parser("get", help="Show one dataplane object.")
    get.set_defaults(verb="get")
    resources = get.add_subparsers(dest="resource", metavar="<resource>", required=True)

    p = _resource(resources, "interface", _get_interface, "Show an interface.")
    p.add_argument("--id", required=True, help="Interface ID.")

    p = _resource(resources, "virtualip", _get_virtual_ip, "Show an interface's virtual IP.")
    _interface_id(p)

    p = _resource(resources, "loadbalancer", _get_load_balancer, "Show a load balancer.")
    p.add_argument("--id", required=True, help="Load balancer ID.")

    p = _resource(resources, "nat", _get_nat, "Show an interface's NAT.")
    _interface_id(p)

    p = _resource(resources, "vni", _get_vni, "Show whether a VNI is in use.")
    p.add_argument("--vni", type=uint32_arg, required=True, help="VNI to check.")
    p.add_argument(
        "--vni-type",
        type=vni_type_arg,
        default=wire.VniType.VniIpv4,
        help="Address family: ipv4 (0, default), ipv6 (1) or both (2).",
    )

    _resource(resources, "version", _get_version, "Show client and dpservice versions.")

    _resource(resources, "init", _get_init, "Show whether dpservice is initialised.")


def _register_list(verbs: Any) -> None:
    list_ = verbs.add_parser("list", help="List dataplane objects.")
    list_.set_defaults(verb="list")
    resources = list_.add_subparsers(dest="resource", metavar="<resource>", required=True)

    p = _resource(resources, "interfaces", _list_interfaces, "List all interfaces.")
    _sort_by(p, "InterfaceList")

    p = _resource(resources, "prefixes", _list_prefixes, "List an interface's prefixes.")
    _interface_id(p)
    _sort_by(p, "PrefixList")

    p = _resource(resources, "lbprefixes", _list_lb_prefixes, "List load balancer prefixes.")
    _interface_id(p)
    _sort_by(p, "LoadBalancerPrefixList")

    p = _resource(resources, "routes", _list_routes, "List the routes of a VNI.")
    p.add_argument("--vni", type=uint32_arg, required=True, help="VNI to list.")
    _sort_by(p, "RouteList")

    p = _resource(resources, "lbtargets", _list_lb_targets, "List load balancer targets.")
    p.add_argument("--lb-id", required=True, help="Load balancer ID.")
    _sort_by(p, "LoadBalancerTargetList")

    p = _resource(resources, "nats", _list_nats, "List the entries sharing a NAT IP.")
    p.add_argument("--nat-ip", type=ip_address_arg, required=True, help="NAT IP to list.")
    p.add_argument(
        "--nat-type",
        type=nat_type_arg,
        default=wire.NATInfoType.NATInfoAny,
        help="Entries to list: any (0, default), local (1) or neighbor (2).",
    )
    _sort_by(p, "NatList")


def _register_delete(verbs: Any) -> None:
    delete = verbs.add_parser("delete", aliases=["del"], help="Remove a dataplane object.")
    delete.set_defaults(verb="delete")
    resources = delete.add_subparsers(dest="resource", metavar="<resource>", required=True)

    p = _resource(resources, "interface", _delete_interface, "Delete an interface.")
    p.add_argument("--id", required=True, help="Interface ID.")

    p = _resource(resources, "virtualip", _delete_virtual_ip, "Remove an interface's virtual IP.")
    _interface_id(p)

    p = _resource(resources, "prefix", _delete_prefix, "Remove a prefix from an interface.")
    _interface_id(p)
    p.add_argument("--prefix", type=ip_network_arg, required=True, help="Prefix to remove.")

    p = _resource(resources, "lbprefix", _delete_lb_prefix, "Remove a load balancer prefix.")
    _interface_id(p)
    p.add_argument("--prefix", type=ip_network_arg, required=True, help="Prefix to remove.")

    p = _resource(resources, "route", _delete_route, "Remove a route.")
    _route_options(p)

    p = _resource(resources, "loadbalancer", _delete_load_balancer, "Delete a load balancer.")
    p.add_argument("--id", required=True, help="Load balancer ID.")

    p = _resource(resources, "lbtarget", _delete_lb_target, "Remove a load balancer target.")
    p.add_argument("--lb-id", required=True, help="Load balancer ID.")
    p.add_argument("--target-ip", type=ip_address_arg, required=True, help="Target IP.")

    p = _resource(resources, "nat", _delete_nat, "Remove an interface's NAT.")
    _interface_id(p)


def register_commands(verbs: Any) -> None:
    """Attach the ``add``/``get``/``list``/``delete`` verbs to *verbs*.

    *verbs* is the object returned by ``ArgumentParser.add_subparsers``.
    Every resource parser sets ``handler`` and ``verb`` defaults.
    """
    _register_add(verbs)
    _register_get(verbs)
    _register_list(verbs)
    _register_delete(verbs)
