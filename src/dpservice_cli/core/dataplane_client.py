"""Core dataplane client: one remote call per resource operation.

This is the central service consumed by the CLI layer.  It depends on
a :class:`~dpservice_cli.core.protocols.DataplaneStub` injected at
construction time (dependency inversion), keeping the core free of any
``grpc`` import.

Every operation follows the same template:

1. Validate identity fields and assemble the wire request.
2. Invoke exactly one RPC, passing the caller's timeout unchanged.
3. Raise :class:`~dpservice_cli.exceptions.StatusError` when the
   response's status sub-structure carries a non-zero code.
4. Decode the response into a semantic model.

Guarantees
----------
* No retries, no caching, no shared state between calls.
* Lists keep service order; one undecodable element fails the call.
* A create returns a valid model or raises, never both.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import replace
from typing import Any

from dpservice_cli import wire
from dpservice_cli.core.codec import (
    decode_ip,
    decode_prefix,
    decode_tagged_ip,
    decode_underlay_route,
    encode_ip,
    encode_ip_config,
    encode_prefix,
    first_of_version,
    ip_version,
)
from dpservice_cli.core.models import (
    Init,
    InitSpec,
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
    ResourceList,
    ResourceStatus,
    Route,
    RouteMeta,
    RouteNextHop,
    RouteSpec,
    VirtualIP,
    VirtualIPMeta,
    VirtualIPSpec,
    Version,
    VersionMeta,
    VersionSpec,
    Vni,
    VniMeta,
    VniSpec,
)
from dpservice_cli.core.protocols import DataplaneStub
from dpservice_cli.exceptions import DecodeError, InvalidRequestError, status_error

logger = logging.getLogger(__name__)

ROUTE_WEIGHT: int = 100
"""Weight sent with every route add/delete; fixed by the dpservice protocol."""

_StatusGetter = Callable[[Any], Any]


def _embedded_status(response: Any) -> Any:
    return response.status


def _own_status(response: Any) -> Any:
    return response


def _interface_creation_status(response: Any) -> Any:
    return response.response.status


def raise_for_status(status: Any) -> None:
    """Raise the matching :class:`StatusError` for a non-zero status code."""
    if status.error != 0:
        raise status_error(status.error, status.message)


def _require(value: str, what: str) -> str:
    if not value:
        raise InvalidRequestError(f"{what} must not be empty.")
    return value


def _reported_status(
    status: Any,
    underlay_route: bytes = b"",
    *,
    required: bool = False,
) -> ResourceStatus:
    return ResourceStatus(
        underlay_route=decode_underlay_route(underlay_route, required=required),
        error=status.error,
        message=status.message,
    )


def _decode_port(message: Any) -> LBPort:
    try:
        protocol = wire.Protocol(message.protocol)
    except ValueError as exc:
        raise DecodeError(f"Unknown load balancer protocol {message.protocol}") from exc
    return LBPort(protocol=protocol, port=message.port)


def _encode_route(
    vni: int,
    prefix: IPNetwork,
    next_hop_vni: int,
    next_hop_ip: IPAddress,
) -> Any:
    return wire.VNIRouteMsg(
        vni=wire.VNIMsg(vni=vni),
        route=wire.Route(
            ip_version=ip_version(next_hop_ip),
            weight=ROUTE_WEIGHT,
            prefix=encode_prefix(prefix),
            nexthop_vni=next_hop_vni,
            nexthop_address=str(next_hop_ip).encode(),
        ),
    )


def _interface_prefix_msg(interface_id: str, prefix: IPNetwork) -> Any:
    return wire.InterfacePrefixMsg(
        interface_id=wire.InterfaceIDMsg(interface_id=interface_id.encode()),
        prefix=encode_prefix(prefix),
    )


class DataplaneClient:
    """Stateless client mapping resource operations onto dpservice RPCs.

    Parameters
    ----------
    stub:
        Any object satisfying the :class:`DataplaneStub` protocol.
    """

    def __init__(self, stub: DataplaneStub) -> None:
        self._stub: DataplaneStub = stub

    # ------------------------------------------------------------------
    # Call templates
    # ------------------------------------------------------------------

    def _call(
        self,
        method: str,
        request: Any,
        *,
        timeout: float | None,
        status: _StatusGetter | None = _embedded_status,
    ) -> Any:
        """Invoke *method* once and check the response's status code."""
        logger.debug("Calling %s", method)
        response = getattr(self._stub, method)(request, timeout=timeout)
        if status is not None:
            raise_for_status(status(response))
        return response

    def _list(
        self,
        method: str,
        request: Any,
        *,
        kind: str,
        items: Callable[[Any], Iterable[Any]],
        decode: Callable[[Any], Any],
        timeout: float | None,
        status: _StatusGetter | None = _embedded_status,
    ) -> ResourceList:
        response = self._call(method, request, timeout=timeout, status=status)
        return ResourceList(
            kind=kind,
            items=tuple(decode(item) for item in items(response)),
        )

    # ------------------------------------------------------------------
    # Load balancers
    # ------------------------------------------------------------------

    def get_load_balancer(self, lb_id: str, *, timeout: float | None = None) -> LoadBalancer:
        _require(lb_id, "Load balancer ID")
        res = self._call(
            "GetLoadBalancer",
            wire.GetLoadBalancerRequest(load_balancer_id=lb_id.encode()),
            timeout=timeout,
        )
        return LoadBalancer(
            meta=LoadBalancerMeta(id=lb_id),
            spec=LoadBalancerSpec(
                vni=res.vni,
                vip=decode_tagged_ip(res.lb_vip_ip, field="load balancer VIP"),
                ports=tuple(_decode_port(p) for p in res.lbports),
            ),
            status=_reported_status(res.status, res.underlay_route),
        )

    def create_load_balancer(
        self,
        lb: LoadBalancer,
        *,
        timeout: float | None = None,
    ) -> LoadBalancer:
        _require(lb.meta.id, "Load balancer ID")
        res = self._call(
            "CreateLoadBalancer",
            wire.CreateLoadBalancerRequest(
                load_balancer_id=lb.meta.id.encode(),
                vni=lb.spec.vni,
                lb_vip_ip=encode_ip(wire.LBIP, lb.spec.vip),
                lbports=[
                    wire.LBPort(port=p.port, protocol=p.protocol) for p in lb.spec.ports
                ],
            ),
            timeout=timeout,
        )
        return replace(
            lb,
            status=_reported_status(res.status, res.underlay_route, required=True),
        )

    def delete_load_balancer(self, lb_id: str, *, timeout: float | None = None) -> None:
        _require(lb_id, "Load balancer ID")
        self._call(
            "DeleteLoadBalancer",
            wire.DeleteLoadBalancerRequest(load_balancer_id=lb_id.encode()),
            timeout=timeout,
            status=_own_status,
        )

    # ------------------------------------------------------------------
    # Load balancer targets
    # ------------------------------------------------------------------

    def list_load_balancer_targets(
        self,
        lb_id: str,
        *,
        timeout: float | None = None,
    ) -> ResourceList:
        _require(lb_id, "Load balancer ID")

        def decode(message: Any) -> LoadBalancerTarget:
            return LoadBalancerTarget(
                meta=LoadBalancerTargetMeta(load_balancer_id=lb_id),
                spec=LoadBalancerTargetSpec(
                    target_ip=decode_tagged_ip(message, field="target IP"),
                ),
            )

        return self._list(
            "GetLoadBalancerTargets",
            wire.GetLoadBalancerTargetsRequest(load_balancer_id=lb_id.encode()),
            kind="LoadBalancerTargetList",
            items=lambda res: res.target_ips,
            decode=decode,
            timeout=timeout,
        )

    def create_load_balancer_target(
        self,
        target: LoadBalancerTarget,
        *,
        timeout: float | None = None,
    ) -> LoadBalancerTarget:
        _require(target.meta.load_balancer_id, "Load balancer ID")
        res = self._call(
            "AddLoadBalancerTarget",
            wire.AddLoadBalancerTargetRequest(
                load_balancer_id=target.meta.load_balancer_id.encode(),
                target_ip=encode_ip(wire.LBIP, target.spec.target_ip),
            ),
            timeout=timeout,
            status=_own_status,
        )
        return replace(target, status=_reported_status(res))

    def delete_load_balancer_target(
        self,
        lb_id: str,
        target_ip: IPAddress,
        *,
        timeout: float | None = None,
    ) -> None:
        _require(lb_id, "Load balancer ID")
        self._call(
            "DeleteLoadBalancerTarget",
            wire.DeleteLoadBalancerTargetRequest(
                load_balancer_id=lb_id.encode(),
                target_ip=encode_ip(wire.LBIP, target_ip),
            ),
            timeout=timeout,
            status=_own_status,
        )

    # ------------------------------------------------------------------
    # Load balancer prefixes
    # ------------------------------------------------------------------

    def list_load_balancer_prefixes(
        self,
        interface_id: str,
        *,
        timeout: float | None = None,
    ) -> ResourceList:
        _require(interface_id, "Interface ID")

        def decode(message: Any) -> LoadBalancerPrefix:
            return LoadBalancerPrefix(
                meta=PrefixMeta(interface_id=interface_id),
                spec=PrefixSpec(prefix=decode_prefix(message)),
                status=ResourceStatus(
                    underlay_route=decode_underlay_route(
                        message.underlay_route, required=False,
                    ),
                ),
            )

        return self._list(
            "ListInterfaceLoadBalancerPrefixes",
            wire.ListInterfaceLoadBalancerPrefixesRequest(
                interface_id=interface_id.encode(),
            ),
            kind="LoadBalancerPrefixList",
            items=lambda res: res.prefixes,
            decode=decode,
            timeout=timeout,
        )

    def create_load_balancer_prefix(
        self,
        prefix: LoadBalancerPrefix,
        *,
        timeout: float | None = None,
    ) -> LoadBalancerPrefix:
        _require(prefix.meta.interface_id, "Interface ID")
        res = self._call(
            "CreateInterfaceLoadBalancerPrefix",
            wire.CreateInterfaceLoadBalancerPrefixRequest(
                interface_id=wire.InterfaceIDMsg(
                    interface_id=prefix.meta.interface_id.encode(),
                ),
                prefix=encode_prefix(prefix.spec.prefix),
            ),
            timeout=timeout,
        )
        return replace(prefix, status=_reported_status(res.status, res.underlay_route))

    def delete_load_balancer_prefix(
        self,
        interface_id: str,
        prefix: IPNetwork,
        *,
        timeout: float | None = None,
    ) -> None:
        _require(interface_id, "Interface ID")
        self._call(
            "DeleteInterfaceLoadBalancerPrefix",
            wire.DeleteInterfaceLoadBalancerPrefixRequest(
                interface_id=wire.InterfaceIDMsg(interface_id=interface_id.encode()),
                prefix=encode_prefix(prefix),
            ),
            timeout=timeout,
            status=_own_status,
        )

    # ------------------------------------------------------------------
    # Interfaces
    # ------------------------------------------------------------------

    @staticmethod
    def _decode_interface(message: Any) -> Interface:
        ips: list[IPAddress] = []
        if message.primary_ipv4_address:
            ips.append(decode_ip(
                message.primary_ipv4_address,
                field="primary IPv4 address",
                version=wire.IPVersion.IPv4,
            ))
        if message.primary_ipv6_address:
            ips.append(decode_ip(
                message.primary_ipv6_address,
                field="primary IPv6 address",
                version=wire.IPVersion.IPv6,
            ))
        return Interface(
            meta=InterfaceMeta(id=message.interface_id.decode()),
            spec=InterfaceSpec(vni=message.vni, device=message.pci_name, ips=tuple(ips)),
            status=ResourceStatus(
                underlay_route=decode_underlay_route(message.underlay_route, required=False),
            ),
        )

    def get_interface(self, interface_id: str, *, timeout: float | None = None) -> Interface:
        _require(interface_id, "Interface ID")
        res = self._call(
            "GetInterface",
            wire.InterfaceIDMsg(interface_id=interface_id.encode()),
            timeout=timeout,
        )
        return self._decode_interface(res.interface)

    def list_interfaces(self, *, timeout: float | None = None) -> ResourceList:
        return self._list(
            "ListInterfaces",
            wire.Empty(),
            kind="InterfaceList",
            items=lambda res: res.interfaces,
            decode=self._decode_interface,
            timeout=timeout,
            status=None,
        )

    def create_interface(
        self,
        iface: Interface,
        *,
        timeout: float | None = None,
    ) -> Interface:
        _require(iface.meta.id, "Interface ID")
        request = wire.CreateInterfaceRequest(
            interface_type=wire.InterfaceType.VirtualInterface,
            interface_id=iface.meta.id.encode(),
            vni=iface.spec.vni,
            device_name=iface.spec.device,
        )
        ipv4 = first_of_version(iface.spec.ips, 4)
        if ipv4 is not None:
            request.ipv4_config.CopyFrom(encode_ip_config(ipv4))
        ipv6 = first_of_version(iface.spec.ips, 6)
        if ipv6 is not None:
            request.ipv6_config.CopyFrom(encode_ip_config(ipv6))

        res = self._call(
            "CreateInterface",
            request,
            timeout=timeout,
            status=_interface_creation_status,
        )
        status = _reported_status(
            res.response.status, res.response.underlay_route, required=True,
        )
        spec = iface.spec
        if not spec.device and res.vf.name:
            spec = replace(spec, device=res.vf.name)
        return replace(iface, spec=spec, status=status)

    def delete_interface(self, interface_id: str, *, timeout: float | None = None) -> None:
        _require(interface_id, "Interface ID")
        self._call(
            "DeleteInterface",
            wire.InterfaceIDMsg(interface_id=interface_id.encode()),
            timeout=timeout,
            status=_own_status,
        )

    # ------------------------------------------------------------------
    # Virtual IPs
    # ------------------------------------------------------------------

    def get_virtual_ip(self, interface_id: str, *, timeout: float | None = None) -> VirtualIP:
        _require(interface_id, "Interface ID")
        res = self._call(
            "GetInterfaceVIP",
            wire.InterfaceIDMsg(interface_id=interface_id.encode()),
            timeout=timeout,
        )
        return VirtualIP(
            meta=VirtualIPMeta(interface_id=interface_id),
            spec=VirtualIPSpec(ip=decode_tagged_ip(res.interface_vip_ip, field="virtual IP")),
            status=_reported_status(res.status, res.underlay_route),
        )

    def create_virtual_ip(
        self,
        vip: VirtualIP,
        *,
        timeout: float | None = None,
    ) -> VirtualIP:
        _require(vip.meta.interface_id, "Interface ID")
        res = self._call(
            "AddInterfaceVIP",
            wire.InterfaceVIPMsg(
                interface_id=vip.meta.interface_id.encode(),
                interface_vip_ip=encode_ip(wire.InterfaceVIPIP, vip.spec.ip),
            ),
            timeout=timeout,
        )
        return replace(vip, status=_reported_status(res.status, res.underlay_route))

    def delete_virtual_ip(self, interface_id: str, *, timeout: float | None = None) -> None:
        _require(interface_id, "Interface ID")
        self._call(
            "DeleteInterfaceVIP",
            wire.InterfaceIDMsg(interface_id=interface_id.encode()),
            timeout=timeout,
            status=_own_status,
        )

    # ------------------------------------------------------------------
    # Prefixes
    # ------------------------------------------------------------------

    def list_prefixes(self, interface_id: str, *, timeout: float | None = None) -> ResourceList:
        _require(interface_id, "Interface ID")

        def decode(message: Any) -> Prefix:
            return Prefix(
                meta=PrefixMeta(interface_id=interface_id),
                spec=PrefixSpec(prefix=decode_prefix(message)),
            )

        return self._list(
            "ListInterfacePrefixes",
            wire.InterfaceIDMsg(interface_id=interface_id.encode()),
            kind="PrefixList",
            items=lambda res: res.prefixes,
            decode=decode,
            timeout=timeout,
            status=None,
        )

    def create_prefix(self, prefix: Prefix, *, timeout: float | None = None) -> Prefix:
        _require(prefix.meta.interface_id, "Interface ID")
        res = self._call(
            "AddInterfacePrefix",
            _interface_prefix_msg(prefix.meta.interface_id, prefix.spec.prefix),
            timeout=timeout,
        )
        return replace(prefix, status=_reported_status(res.status, res.underlay_route))

    def delete_prefix(
        self,
        interface_id: str,
        prefix: IPNetwork,
        *,
        timeout: float | None = None,
    ) -> None:
        _require(interface_id, "Interface ID")
        self._call(
            "DeleteInterfacePrefix",
            _interface_prefix_msg(interface_id, prefix),
            timeout=timeout,
            status=_own_status,
        )

    # ------------------------------------------------------------------
    # Routes
    # ------------------------------------------------------------------

    def list_routes(self, vni: int, *, timeout: float | None = None) -> ResourceList:
        def decode(message: Any) -> Route:
            return Route(
                meta=RouteMeta(vni=vni),
                spec=RouteSpec(
                    prefix=decode_prefix(message.prefix),
                    next_hop=RouteNextHop(
                        vni=message.nexthop_vni,
                        ip=decode_ip(
                            message.nexthop_address,
                            field="next hop IP",
                            version=message.ip_version,
                        ),
                    ),
                ),
            )

        return self._list(
            "ListRoutes",
            wire.VNIMsg(vni=vni),
            kind="RouteList",
            items=lambda res: res.routes,
            decode=decode,
            timeout=timeout,
            status=None,
        )

    def create_route(self, route: Route, *, timeout: float | None = None) -> Route:
        hop = route.spec.next_hop
        res = self._call(
            "AddRoute",
            _encode_route(route.meta.vni, route.spec.prefix, hop.vni, hop.ip),
            timeout=timeout,
            status=_own_status,
        )
        return replace(route, status=_reported_status(res))

    def delete_route(
        self,
        vni: int,
        prefix: IPNetwork,
        next_hop_vni: int,
        next_hop_ip: IPAddress,
        *,
        timeout: float | None = None,
    ) -> None:
        """Delete the route keyed by ``(vni, prefix, next_hop_vni, next_hop_ip)``."""
        self._call(
            "DeleteRoute",
            _encode_route(vni, prefix, next_hop_vni, next_hop_ip),
            timeout=timeout,
            status=_own_status,
        )

    # ------------------------------------------------------------------
    # NAT
    # ------------------------------------------------------------------

    def get_nat(self, interface_id: str, *, timeout: float | None = None) -> Nat:
        _require(interface_id, "Interface ID")
        res = self._call(
            "GetNAT",
            wire.GetNATRequest(interface_id=interface_id.encode()),
            timeout=timeout,
        )
        return Nat(
            meta=NatMeta(interface_id=interface_id),
            spec=NatSpec(
                nat_ip=decode_tagged_ip(res.nat_vip_ip, field="NAT IP"),
                min_port=res.min_port,
                max_port=res.max_port,
            ),
            status=_reported_status(res.status, res.underlay_route),
        )

    def create_nat(self, nat: Nat, *, timeout: float | None = None) -> Nat:
        _require(nat.meta.interface_id, "Interface ID")
        res = self._call(
            "AddNAT",
            wire.AddNATRequest(
                interface_id=nat.meta.interface_id.encode(),
                nat_vip_ip=encode_ip(wire.NATIP, nat.spec.nat_ip),
                min_port=nat.spec.min_port,
                max_port=nat.spec.max_port,
            ),
            timeout=timeout,
        )
        return replace(
            nat,
            status=_reported_status(res.status, res.underlay_route, required=True),
        )

    def delete_nat(self, interface_id: str, *, timeout: float | None = None) -> None:
        _require(interface_id, "Interface ID")
        self._call(
            "DeleteNAT",
            wire.DeleteNATRequest(interface_id=interface_id.encode()),
            timeout=timeout,
            status=_own_status,
        )

    def list_nats(
        self,
        nat_ip: IPAddress,
        nat_type: wire.NATInfoType = wire.NATInfoType.NATInfoAny,
        *,
        timeout: float | None = None,
    ) -> ResourceList:
        """List the local and/or neighbor entries sharing the NAT IP *nat_ip*.

        An entry without an address of its own (a neighbor entry) is
        reported under *nat_ip*; its underlay route is parsed when set.
        """

        def decode(entry: Any) -> Nat:
            address = (
                decode_ip(entry.address, field="NAT entry IP", version=entry.ip_version)
                if entry.address
                else nat_ip
            )
            return Nat(
                meta=NatMeta(interface_id=""),
                spec=NatSpec(
                    nat_ip=address,
                    min_port=entry.min_port,
                    max_port=entry.max_port,
                    vni=entry.vni,
                ),
                status=ResourceStatus(
                    underlay_route=decode_underlay_route(entry.underlay_route, required=False),
                ),
            )

        return self._list(
            "GetNATInfo",
            wire.GetNATInfoRequest(
                nat_info_type=nat_type,
                nat_vip_ip=encode_ip(wire.NATIP, nat_ip),
            ),
            kind="NatList",
            items=lambda res: res.nat_info_entries,
            decode=decode,
            timeout=timeout,
        )

    # ------------------------------------------------------------------
    # Service information
    # ------------------------------------------------------------------

    def get_version(
        self,
        client_name: str,
        client_version: str,
        *,
        timeout: float | None = None,
    ) -> Version:
        """Exchange protocol and software versions with dpservice."""
        meta = VersionMeta(
            client_protocol=wire.PROTOCOL_VERSION,
            client_name=client_name,
            client_version=client_version,
        )
        res = self._call(
            "GetVersion",
            wire.GetVersionRequest(
                client_protocol=meta.client_protocol,
                client_name=meta.client_name,
                client_version=meta.client_version,
            ),
            timeout=timeout,
        )
        return Version(
            meta=meta,
            spec=VersionSpec(
                service_protocol=res.service_protocol,
                service_version=res.service_version,
            ),
            status=_reported_status(res.status),
        )

    def get_init(self, *, timeout: float | None = None) -> Init:
        """Return the UUID of the running dpservice instance.

        dpservice reports a non-zero status until it has been initialised.
        """
        res = self._call("CheckInitialized", wire.Empty(), timeout=timeout)
        return Init(spec=InitSpec(uuid=res.uuid), status=_reported_status(res.status))

    def get_vni(
        self,
        vni: int,
        vni_type: wire.VniType = wire.VniType.VniIpv4,
        *,
        timeout: float | None = None,
    ) -> Vni:
        """Report whether *vni* is in use for the given address family."""
        res = self._call(
            "IsVniInUse",
            wire.IsVniInUseRequest(vni=vni, type=vni_type),
            timeout=timeout,
        )
        return Vni(
            meta=VniMeta(vni=vni, vni_type=vni_type),
            spec=VniSpec(in_use=res.in_use),
            status=_reported_status(res.status),
        )
