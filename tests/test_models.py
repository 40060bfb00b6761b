"""Tests for core/models.py: value objects, names and dict conversion."""

from __future__ import annotations

import dataclasses
from ipaddress import ip_address, ip_network

import pytest

from dpservice_cli.core.models import (
    Init,
    InitSpec,
    Interface,
    InterfaceMeta,
    InterfaceSpec,
    LBPort,
    LoadBalancer,
    LoadBalancerMeta,
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
    to_jsonable,
)
from dpservice_cli.exceptions import InvalidRequestError
from dpservice_cli.wire import Protocol, VniType


def _route() -> Route:
    return Route(
        meta=RouteMeta(vni=100),
        spec=RouteSpec(
            prefix=ip_network("10.0.0.0/24"),
            next_hop=RouteNextHop(vni=200, ip=ip_address("fc00::1")),
        ),
    )


# ---------------------------------------------------------------------------
# LBPort
# ---------------------------------------------------------------------------

class TestLBPort:
    def test_parse_tcp(self) -> None:
        port = LBPort.parse("TCP/443")
        assert port.protocol is Protocol.TCP
        assert port.port == 443

    def test_parse_is_case_insensitive(self) -> None:
        assert LBPort.parse("udp/53") == LBPort(protocol=Protocol.UDP, port=53)

    def test_str(self) -> None:
        assert str(LBPort(protocol=Protocol.TCP, port=443)) == "TCP/443"

    @pytest.mark.parametrize("text", ["TCP", "FOO/80", "TCP/abc", "TCP/", "/443"])
    def test_parse_rejects_malformed(self, text: str) -> None:
        with pytest.raises(InvalidRequestError):
            LBPort.parse(text)

    def test_parse_rejects_large_port(self) -> None:
        with pytest.raises(InvalidRequestError, match="out of range"):
            LBPort.parse("TCP/70000")


# ---------------------------------------------------------------------------
# Immutability
# ---------------------------------------------------------------------------

class TestFrozen:
    def test_resource_is_frozen(self) -> None:
        iface = Interface(meta=InterfaceMeta(id="vm1"))
        with pytest.raises(dataclasses.FrozenInstanceError):
            iface.meta = InterfaceMeta(id="vm2")  # type: ignore[misc]

    def test_default_status_is_empty(self) -> None:
        iface = Interface(meta=InterfaceMeta(id="vm1"))
        assert iface.status == ResourceStatus()
        assert iface.status.underlay_route is None


# ---------------------------------------------------------------------------
# Names and kinds
# ---------------------------------------------------------------------------

class TestNames:
    def test_interface(self) -> None:
        iface = Interface(meta=InterfaceMeta(id="vm1"))
        assert iface.kind == "Interface"
        assert iface.name == "vm1"

    def test_virtual_ip(self) -> None:
        vip = VirtualIP(
            meta=VirtualIPMeta(interface_id="vm1"),
            spec=VirtualIPSpec(ip=ip_address("20.0.0.1")),
        )
        assert vip.name == "vm1"

    def test_prefix(self) -> None:
        prefix = Prefix(
            meta=PrefixMeta(interface_id="vm1"),
            spec=PrefixSpec(prefix=ip_network("10.0.0.0/24")),
        )
        assert prefix.name == "10.0.0.0/24"

    def test_route(self) -> None:
        assert _route().name == "10.0.0.0/24-200:fc00::1"

    def test_load_balancer(self) -> None:
        lb = LoadBalancer(
            meta=LoadBalancerMeta(id="lb1"),
            spec=LoadBalancerSpec(vni=100, vip=ip_address("10.20.30.40")),
        )
        assert lb.name == "lb1"

    def test_load_balancer_target(self) -> None:
        target = LoadBalancerTarget(
            meta=LoadBalancerTargetMeta(load_balancer_id="lb1"),
            spec=LoadBalancerTargetSpec(target_ip=ip_address("fc00::2")),
        )
        assert target.name == "fc00::2"

    def test_nat(self) -> None:
        nat = Nat(
            meta=NatMeta(interface_id="vm1"),
            spec=NatSpec(nat_ip=ip_address("10.0.0.9"), min_port=100, max_port=200),
        )
        assert nat.kind == "Nat"
        assert nat.name == "vm1"

    def test_listed_nat_entry_is_named_by_ip_and_ports(self) -> None:
        nat = Nat(
            meta=NatMeta(interface_id=""),
            spec=NatSpec(nat_ip=ip_address("172.16.0.2"), min_port=100, max_port=200, vni=7),
        )
        assert nat.name == "172.16.0.2:100-200"

    def test_service_info(self) -> None:
        assert Init(spec=InitSpec(uuid="0f3c-42")).name == "0f3c-42"
        assert Vni(meta=VniMeta(vni=100), spec=VniSpec(in_use=True)).name == "100"
        version = Version(
            meta=VersionMeta(client_protocol="0.3.0", client_name="cli", client_version="1"),
            spec=VersionSpec(service_protocol="0.3.0", service_version="v0.1.9"),
        )
        assert version.kind == "Version"
        assert version.name == "v0.1.9"


class TestResourceBase:
    def test_resource_is_abstract(self) -> None:
        with pytest.raises(TypeError):
            Resource()  # type: ignore[abstract]

    def test_subclass_without_name_is_abstract(self) -> None:
        class Nameless(Resource):
            __slots__ = ()

        with pytest.raises(TypeError):
            Nameless()  # type: ignore[abstract]


# ---------------------------------------------------------------------------
# Dict conversion
# ---------------------------------------------------------------------------

class TestToDict:
    def test_interface_shape(self) -> None:
        iface = Interface(
            meta=InterfaceMeta(id="vm1"),
            spec=InterfaceSpec(
                vni=100,
                device="net_tap2",
                ips=(ip_address("10.0.0.1"), ip_address("fc00::1")),
            ),
            status=ResourceStatus(underlay_route=ip_address("fc00:1::5")),
        )
        assert iface.to_dict() == {
            "kind": "Interface",
            "metadata": {"id": "vm1"},
            "spec": {"vni": 100, "device": "net_tap2", "ips": ["10.0.0.1", "fc00::1"]},
            "status": {"underlayRoute": "fc00:1::5", "error": 0, "message": ""},
        }

    def test_route_nested_keys_are_camel_case(self) -> None:
        data = _route().to_dict()
        assert data["spec"] == {
            "prefix": "10.0.0.0/24",
            "nextHop": {"vni": 200, "ip": "fc00::1"},
        }

    def test_ports_render_as_strings(self) -> None:
        lb = LoadBalancer(
            meta=LoadBalancerMeta(id="lb1"),
            spec=LoadBalancerSpec(
                vni=100,
                vip=ip_address("10.20.30.40"),
                ports=(LBPort(Protocol.TCP, 443), LBPort(Protocol.UDP, 53)),
            ),
        )
        assert lb.to_dict()["spec"]["ports"] == ["TCP/443", "UDP/53"]

    def test_vni_type_renders_by_name(self) -> None:
        vni = Vni(meta=VniMeta(vni=100, vni_type=VniType.VniBoth), spec=VniSpec(in_use=False))
        assert vni.to_dict() == {
            "kind": "Vni",
            "metadata": {"vni": 100, "vniType": "VniBoth"},
            "spec": {"inUse": False},
            "status": {"underlayRoute": None, "error": 0, "message": ""},
        }

    def test_init_has_empty_metadata(self) -> None:
        assert Init(spec=InitSpec(uuid="u1")).to_dict()["metadata"] == {}

    def test_to_jsonable_passes_plain_values(self) -> None:
        assert to_jsonable(5) == 5
        assert to_jsonable("x") == "x"
        assert to_jsonable(None) is None


# ---------------------------------------------------------------------------
# ResourceList
# ---------------------------------------------------------------------------

class TestResourceList:
    def test_empty(self) -> None:
        result = ResourceList(kind="RouteList")
        assert len(result) == 0
        assert not result
        assert result.to_dict() == {"kind": "RouteList", "items": []}

    def test_items_keep_order(self) -> None:
        first = Interface(meta=InterfaceMeta(id="b"))
        second = Interface(meta=InterfaceMeta(id="a"))
        result = ResourceList(kind="InterfaceList", items=(first, second))
        assert [r.name for r in result] == ["b", "a"]
        assert len(result) == 2
        assert result

    def test_to_dict_nests_items(self) -> None:
        result = ResourceList(kind="RouteList", items=(_route(),))
        data = result.to_dict()
        assert data["kind"] == "RouteList"
        assert data["items"][0]["kind"] == "Route"
