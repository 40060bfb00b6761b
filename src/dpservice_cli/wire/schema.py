"""Wire schema of the dpservice gRPC API.

The ``dpdkonmetal`` protobuf package is described here as plain tables
and compiled into a private :class:`~google.protobuf.descriptor_pool.DescriptorPool`
at import time, so no generated ``*_pb2`` modules are needed.  Message
classes are obtained with :func:`message_class`.

Field names are snake_case; only field numbers and types travel on the
wire, so they stay compatible with the daemon's ``dpdk.proto``.
"""

from __future__ import annotations

from enum import IntEnum

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.message import Message

PACKAGE: str = "dpdkonmetal"
SERVICE: str = "DPDKonmetal"

PROTOCOL_VERSION: str = "0.3.0"
"""Revision of the dpdkonmetal API described below, sent with ``getVersion``."""


# ---------------------------------------------------------------------------
# Enums (member names are the protobuf value names)
# ---------------------------------------------------------------------------

class IPVersion(IntEnum):
    IPv4 = 0
    IPv6 = 1


class InterfaceType(IntEnum):
    VirtualInterface = 0
    BareMetalInterface = 1


class Protocol(IntEnum):
    """L4 protocol numbers used for load-balancer ports."""

    Undefined = 0
    ICMP = 1
    TCP = 6
    UDP = 17
    ICMPv6 = 58
    SCTP = 132


class NATInfoType(IntEnum):
    """Which NAT entries of a NAT IP to list."""

    NATInfoAny = 0
    NATInfoLocal = 1
    NATInfoNeighbor = 2


class VniType(IntEnum):
    VniIpv4 = 0
    VniIpv6 = 1
    VniBoth = 2


_ENUMS: tuple[type[IntEnum], ...] = (
    IPVersion,
    InterfaceType,
    Protocol,
    NATInfoType,
    VniType,
)


# ---------------------------------------------------------------------------
# Field type helpers
# ---------------------------------------------------------------------------

_F = descriptor_pb2.FieldDescriptorProto

_FieldType = tuple[int, str, int]

_UINT32: _FieldType = (_F.TYPE_UINT32, "", _F.LABEL_OPTIONAL)
_STRING: _FieldType = (_F.TYPE_STRING, "", _F.LABEL_OPTIONAL)
_BYTES: _FieldType = (_F.TYPE_BYTES, "", _F.LABEL_OPTIONAL)
_BOOL: _FieldType = (_F.TYPE_BOOL, "", _F.LABEL_OPTIONAL)


def _enum(name: str) -> _FieldType:
    return (_F.TYPE_ENUM, f".{PACKAGE}.{name}", _F.LABEL_OPTIONAL)


def _msg(name: str) -> _FieldType:
    return (_F.TYPE_MESSAGE, f".{PACKAGE}.{name}", _F.LABEL_OPTIONAL)


def _repeated(field_type: _FieldType) -> _FieldType:
    return (field_type[0], field_type[1], _F.LABEL_REPEATED)


_IP_VERSION = _enum("IPVersion")


# ---------------------------------------------------------------------------
# Messages: name -> ((field, number, type), ...)
# ---------------------------------------------------------------------------

MESSAGES: dict[str, tuple[tuple[str, int, _FieldType], ...]] = {
    "Empty": (),
    "Status": (
        ("error", 1, _UINT32),
        ("message", 2, _STRING),
    ),
    # Addresses and prefixes
    "Prefix": (
        ("ip_version", 1, _IP_VERSION),
        ("address", 2, _BYTES),
        ("prefix_length", 3, _UINT32),
    ),
    "LBPrefix": (
        ("ip_version", 1, _IP_VERSION),
        ("address", 2, _BYTES),
        ("prefix_length", 3, _UINT32),
        ("underlay_route", 4, _BYTES),
    ),
    "IPConfig": (
        ("ip_version", 1, _IP_VERSION),
        ("primary_address", 2, _BYTES),
    ),
    "InterfaceVIPIP": (
        ("ip_version", 1, _IP_VERSION),
        ("address", 2, _BYTES),
    ),
    "LBIP": (
        ("ip_version", 1, _IP_VERSION),
        ("address", 2, _BYTES),
    ),
    "NATIP": (
        ("ip_version", 1, _IP_VERSION),
        ("address", 2, _BYTES),
    ),
    "IpAdditionResponse": (
        ("status", 1, _msg("Status")),
        ("underlay_route", 2, _BYTES),
    ),
    # Interfaces
    "Interface": (
        ("interface_id", 1, _BYTES),
        ("vni", 2, _UINT32),
        ("primary_ipv4_address", 3, _BYTES),
        ("primary_ipv6_address", 4, _BYTES),
        ("pci_name", 5, _STRING),
        ("underlay_route", 6, _BYTES),
    ),
    "InterfaceIDMsg": (
        ("interface_id", 1, _BYTES),
    ),
    "InterfacesMsg": (
        ("interfaces", 1, _repeated(_msg("Interface"))),
    ),
    "GetInterfaceResponse": (
        ("status", 1, _msg("Status")),
        ("interface", 2, _msg("Interface")),
    ),
    "VirtualFunction": (
        ("name", 1, _STRING),
        ("domain", 2, _UINT32),
        ("bus", 3, _UINT32),
        ("slot", 4, _UINT32),
        ("function", 5, _UINT32),
    ),
    "CreateInterfaceRequest": (
        ("interface_type", 1, _enum("InterfaceType")),
        ("interface_id", 2, _BYTES),
        ("vni", 3, _UINT32),
        ("ipv4_config", 4, _msg("IPConfig")),
        ("ipv6_config", 5, _msg("IPConfig")),
        ("device_name", 6, _STRING),
    ),
    "CreateInterfaceResponse": (
        ("response", 1, _msg("IpAdditionResponse")),
        ("vf", 2, _msg("VirtualFunction")),
    ),
    # Virtual IPs
    "InterfaceVIPMsg": (
        ("interface_id", 1, _BYTES),
        ("interface_vip_ip", 2, _msg("InterfaceVIPIP")),
    ),
    "GetInterfaceVIPResponse": (
        ("status", 1, _msg("Status")),
        ("interface_vip_ip", 2, _msg("InterfaceVIPIP")),
        ("underlay_route", 3, _BYTES),
    ),
    # Prefixes
    "InterfacePrefixMsg": (
        ("interface_id", 1, _msg("InterfaceIDMsg")),
        ("prefix", 2, _msg("Prefix")),
    ),
    "PrefixesMsg": (
        ("prefixes", 1, _repeated(_msg("Prefix"))),
    ),
    # Routes
    "VNIMsg": (
        ("vni", 1, _UINT32),
    ),
    "Route": (
        ("ip_version", 1, _IP_VERSION),
        ("weight", 2, _UINT32),
        ("prefix", 3, _msg("Prefix")),
        ("nexthop_vni", 4, _UINT32),
        ("nexthop_address", 5, _BYTES),
    ),
    "VNIRouteMsg": (
        ("vni", 1, _msg("VNIMsg")),
        ("route", 2, _msg("Route")),
    ),
    "RoutesMsg": (
        ("routes", 1, _repeated(_msg("Route"))),
    ),
    # Load balancers
    "LBPort": (
        ("port", 1, _UINT32),
        ("protocol", 2, _enum("Protocol")),
    ),
    "CreateLoadBalancerRequest": (
        ("load_balancer_id", 1, _BYTES),
        ("vni", 2, _UINT32),
        ("lb_vip_ip", 3, _msg("LBIP")),
        ("lbports", 4, _repeated(_msg("LBPort"))),
    ),
    "CreateLoadBalancerResponse": (
        ("status", 1, _msg("Status")),
        ("underlay_route", 2, _BYTES),
    ),
    "GetLoadBalancerRequest": (
        ("load_balancer_id", 1, _BYTES),
    ),
    "GetLoadBalancerResponse": (
        ("status", 1, _msg("Status")),
        ("vni", 2, _UINT32),
        ("lb_vip_ip", 3, _msg("LBIP")),
        ("lbports", 4, _repeated(_msg("LBPort"))),
        ("underlay_route", 5, _BYTES),
    ),
    "DeleteLoadBalancerRequest": (
        ("load_balancer_id", 1, _BYTES),
    ),
    "AddLoadBalancerTargetRequest": (
        ("load_balancer_id", 1, _BYTES),
        ("target_ip", 2, _msg("LBIP")),
    ),
    "DeleteLoadBalancerTargetRequest": (
        ("load_balancer_id", 1, _BYTES),
        ("target_ip", 2, _msg("LBIP")),
    ),
    "GetLoadBalancerTargetsRequest": (
        ("load_balancer_id", 1, _BYTES),
    ),
    "GetLoadBalancerTargetsResponse": (
        ("status", 1, _msg("Status")),
        ("target_ips", 2, _repeated(_msg("LBIP"))),
    ),
    "CreateInterfaceLoadBalancerPrefixRequest": (
        ("interface_id", 1, _msg("InterfaceIDMsg")),
        ("prefix", 2, _msg("Prefix")),
    ),
    "CreateInterfaceLoadBalancerPrefixResponse": (
        ("status", 1, _msg("Status")),
        ("underlay_route", 2, _BYTES),
    ),
    "DeleteInterfaceLoadBalancerPrefixRequest": (
        ("interface_id", 1, _msg("InterfaceIDMsg")),
        ("prefix", 2, _msg("Prefix")),
    ),
    "ListInterfaceLoadBalancerPrefixesRequest": (
        ("interface_id", 1, _BYTES),
    ),
    "ListInterfaceLoadBalancerPrefixesResponse": (
        ("status", 1, _msg("Status")),
        ("prefixes", 2, _repeated(_msg("LBPrefix"))),
    ),
    # NAT
    "AddNATRequest": (
        ("interface_id", 1, _BYTES),
        ("nat_vip_ip", 2, _msg("NATIP")),
        ("min_port", 3, _UINT32),
        ("max_port", 4, _UINT32),
    ),
    "AddNATResponse": (
        ("status", 1, _msg("Status")),
        ("underlay_route", 2, _BYTES),
    ),
    "GetNATRequest": (
        ("interface_id", 1, _BYTES),
    ),
    "GetNATResponse": (
        ("status", 1, _msg("Status")),
        ("nat_vip_ip", 2, _msg("NATIP")),
        ("min_port", 3, _UINT32),
        ("max_port", 4, _UINT32),
        ("underlay_route", 5, _BYTES),
    ),
    "DeleteNATRequest": (
        ("interface_id", 1, _BYTES),
    ),
    "GetNATInfoRequest": (
        ("nat_info_type", 1, _enum("NATInfoType")),
        ("nat_vip_ip", 2, _msg("NATIP")),
    ),
    "NATInfoEntry": (
        ("ip_version", 1, _IP_VERSION),
        ("address", 2, _BYTES),
        ("min_port", 3, _UINT32),
        ("max_port", 4, _UINT32),
        ("underlay_route", 5, _BYTES),
        ("vni", 6, _UINT32),
    ),
    "GetNATInfoResponse": (
        ("status", 1, _msg("Status")),
        ("nat_vip_ip", 2, _msg("NATIP")),
        ("nat_info_type", 3, _enum("NATInfoType")),
        ("nat_info_entries", 4, _repeated(_msg("NATInfoEntry"))),
    ),
    # Service
    "GetVersionRequest": (
        ("client_protocol", 1, _STRING),
        ("client_name", 2, _STRING),
        ("client_version", 3, _STRING),
    ),
    "GetVersionResponse": (
        ("status", 1, _msg("Status")),
        ("service_protocol", 2, _STRING),
        ("service_version", 3, _STRING),
    ),
    "CheckInitializedResponse": (
        ("status", 1, _msg("Status")),
        ("uuid", 2, _STRING),
    ),
    "IsVniInUseRequest": (
        ("vni", 1, _UINT32),
        ("type", 2, _enum("VniType")),
    ),
    "IsVniInUseResponse": (
        ("status", 1, _msg("Status")),
        ("in_use", 2, _BOOL),
    ),
}


# ---------------------------------------------------------------------------
# RPC methods: name -> (request message, response message)
# ---------------------------------------------------------------------------

METHODS: dict[str, tuple[str, str]] = {
    "CreateLoadBalancer": ("CreateLoadBalancerRequest", "CreateLoadBalancerResponse"),
    "GetLoadBalancer": ("GetLoadBalancerRequest", "GetLoadBalancerResponse"),
    "DeleteLoadBalancer": ("DeleteLoadBalancerRequest", "Status"),
    "AddLoadBalancerTarget": ("AddLoadBalancerTargetRequest", "Status"),
    "DeleteLoadBalancerTarget": ("DeleteLoadBalancerTargetRequest", "Status"),
    "GetLoadBalancerTargets": (
        "GetLoadBalancerTargetsRequest",
        "GetLoadBalancerTargetsResponse",
    ),
    "CreateInterfaceLoadBalancerPrefix": (
        "CreateInterfaceLoadBalancerPrefixRequest",
        "CreateInterfaceLoadBalancerPrefixResponse",
    ),
    "DeleteInterfaceLoadBalancerPrefix": (
        "DeleteInterfaceLoadBalancerPrefixRequest",
        "Status",
    ),
    "ListInterfaceLoadBalancerPrefixes": (
        "ListInterfaceLoadBalancerPrefixesRequest",
        "ListInterfaceLoadBalancerPrefixesResponse",
    ),
    "CreateInterface": ("CreateInterfaceRequest", "CreateInterfaceResponse"),
    "GetInterface": ("InterfaceIDMsg", "GetInterfaceResponse"),
    "ListInterfaces": ("Empty", "InterfacesMsg"),
    "DeleteInterface": ("InterfaceIDMsg", "Status"),
    "AddInterfaceVIP": ("InterfaceVIPMsg", "IpAdditionResponse"),
    "GetInterfaceVIP": ("InterfaceIDMsg", "GetInterfaceVIPResponse"),
    "DeleteInterfaceVIP": ("InterfaceIDMsg", "Status"),
    "AddInterfacePrefix": ("InterfacePrefixMsg", "IpAdditionResponse"),
    "DeleteInterfacePrefix": ("InterfacePrefixMsg", "Status"),
    "ListInterfacePrefixes": ("InterfaceIDMsg", "PrefixesMsg"),
    "AddRoute": ("VNIRouteMsg", "Status"),
    "DeleteRoute": ("VNIRouteMsg", "Status"),
    "ListRoutes": ("VNIMsg", "RoutesMsg"),
    "AddNAT": ("AddNATRequest", "AddNATResponse"),
    "GetNAT": ("GetNATRequest", "GetNATResponse"),
    "DeleteNAT": ("DeleteNATRequest", "Status"),
    "GetNATInfo": ("GetNATInfoRequest", "GetNATInfoResponse"),
    "GetVersion": ("GetVersionRequest", "GetVersionResponse"),
    "CheckInitialized": ("Empty", "CheckInitializedResponse"),
    "IsVniInUse": ("IsVniInUseRequest", "IsVniInUseResponse"),
}


def method_path(method: str) -> str:
    """Return the gRPC path of *method* (``/dpdkonmetal.DPDKonmetal/addRoute``)."""
    return f"/{PACKAGE}.{SERVICE}/{method[0].lower()}{method[1:]}"


# ---------------------------------------------------------------------------
# Descriptor construction
# ---------------------------------------------------------------------------

def build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    """Assemble the ``dpdk.proto`` file descriptor from the tables above."""
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="dpdk.proto",
        package=PACKAGE,
        syntax="proto3",
    )

    for enum_cls in _ENUMS:
        enum_proto = file_proto.enum_type.add(name=enum_cls.__name__)
        for member in enum_cls:
            enum_proto.value.add(name=member.name, number=int(member))

    for message_name, fields in MESSAGES.items():
        message_proto = file_proto.message_type.add(name=message_name)
        for field_name, number, (field_type, type_name, label) in fields:
            field_proto = message_proto.field.add(
                name=field_name,
                number=number,
                type=field_type,
                label=label,
            )
            if type_name:
                field_proto.type_name = type_name

    service_proto = file_proto.service.add(name=SERVICE)
    for method, (request, response) in METHODS.items():
        service_proto.method.add(
            name=method[0].lower() + method[1:],
            input_type=f".{PACKAGE}.{request}",
            output_type=f".{PACKAGE}.{response}",
        )

    return file_proto


_POOL = descriptor_pool.DescriptorPool()
_POOL.AddSerializedFile(build_file_descriptor().SerializeToString())
_FILE = _POOL.FindFileByName("dpdk.proto")


def message_class(name: str) -> type[Message]:
    """Return the generated message class for the message called *name*."""
    return message_factory.GetMessageClass(_FILE.message_types_by_name[name])
