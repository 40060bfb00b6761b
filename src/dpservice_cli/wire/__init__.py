"""Wire layer: protobuf messages and enums of the dpservice gRPC API.

Rules
-----
* No business logic, no I/O.
* Importable by ``core`` and ``infra`` alike.
"""

from dpservice_cli.wire.schema import (
    METHODS,
    PROTOCOL_VERSION,
    InterfaceType,
    IPVersion,
    NATInfoType,
    Protocol,
    VniType,
    message_class,
    method_path,
)

Empty = message_class("Empty")
Status = message_class("Status")

Prefix = message_class("Prefix")
LBPrefix = message_class("LBPrefix")
IPConfig = message_class("IPConfig")
InterfaceVIPIP = message_class("InterfaceVIPIP")
LBIP = message_class("LBIP")
NATIP = message_class("NATIP")
IpAdditionResponse = message_class("IpAdditionResponse")

Interface = message_class("Interface")
InterfaceIDMsg = message_class("InterfaceIDMsg")
InterfacesMsg = message_class("InterfacesMsg")
GetInterfaceResponse = message_class("GetInterfaceResponse")
VirtualFunction = message_class("VirtualFunction")
CreateInterfaceRequest = message_class("CreateInterfaceRequest")
CreateInterfaceResponse = message_class("CreateInterfaceResponse")

InterfaceVIPMsg = message_class("InterfaceVIPMsg")
GetInterfaceVIPResponse = message_class("GetInterfaceVIPResponse")

InterfacePrefixMsg = message_class("InterfacePrefixMsg")
PrefixesMsg = message_class("PrefixesMsg")

VNIMsg = message_class("VNIMsg")
Route = message_class("Route")
VNIRouteMsg = message_class("VNIRouteMsg")
RoutesMsg = message_class("RoutesMsg")

LBPort = message_class("LBPort")
CreateLoadBalancerRequest = message_class("CreateLoadBalancerRequest")
CreateLoadBalancerResponse = message_class("CreateLoadBalancerResponse")
GetLoadBalancerRequest = message_class("GetLoadBalancerRequest")
GetLoadBalancerResponse = message_class("GetLoadBalancerResponse")
DeleteLoadBalancerRequest = message_class("DeleteLoadBalancerRequest")
AddLoadBalancerTargetRequest = message_class("AddLoadBalancerTargetRequest")
DeleteLoadBalancerTargetRequest = message_class("DeleteLoadBalancerTargetRequest")
GetLoadBalancerTargetsRequest = message_class("GetLoadBalancerTargetsRequest")
GetLoadBalancerTargetsResponse = message_class("GetLoadBalancerTargetsResponse")
CreateInterfaceLoadBalancerPrefixRequest = message_class(
    "CreateInterfaceLoadBalancerPrefixRequest"
)
CreateInterfaceLoadBalancerPrefixResponse = message_class(
    "CreateInterfaceLoadBalancerPrefixResponse"
)
DeleteInterfaceLoadBalancerPrefixRequest = message_class(
    "DeleteInterfaceLoadBalancerPrefixRequest"
)
ListInterfaceLoadBalancerPrefixesRequest = message_class(
    "ListInterfaceLoadBalancerPrefixesRequest"
)
ListInterfaceLoadBalancerPrefixesResponse = message_class(
    "ListInterfaceLoadBalancerPrefixesResponse"
)

AddNATRequest = message_class("AddNATRequest")
AddNATResponse = message_class("AddNATResponse")
GetNATRequest = message_class("GetNATRequest")
GetNATResponse = message_class("GetNATResponse")
DeleteNATRequest = message_class("DeleteNATRequest")
GetNATInfoRequest = message_class("GetNATInfoRequest")
NATInfoEntry = message_class("NATInfoEntry")
GetNATInfoResponse = message_class("GetNATInfoResponse")

GetVersionRequest = message_class("GetVersionRequest")
GetVersionResponse = message_class("GetVersionResponse")
CheckInitializedResponse = message_class("CheckInitializedResponse")
IsVniInUseRequest = message_class("IsVniInUseRequest")
IsVniInUseResponse = message_class("IsVniInUseResponse")

__all__: list[str] = [
    "METHODS",
    "PROTOCOL_VERSION",
    "IPVersion",
    "InterfaceType",
    "NATInfoType",
    "Protocol",
    "VniType",
    "message_class",
    "method_path",
]
