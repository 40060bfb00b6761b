"""Table conversion for the ``table`` output format.

Turns a resource or a resource list into headers plus rows of plain
strings.  Pure transforms only; rendering happens in
:mod:`dpservice_cli.cli.renderers`.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from dpservice_cli.core.models import Resource, ResourceList
from dpservice_cli.exceptions import RendererError


@dataclass(frozen=True, slots=True)
class TableData:
    headers: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]


class TableConverter(Protocol):
    """Anything that can turn a rendered value into :class:`TableData`."""

    def convert(self, value: Any) -> TableData:
        ...  # pragma: no cover


def _cell(value: Any) -> str:
    """Render one cell: blank for ``None``, comma-joined for sequences."""
    if value is None:
        return ""
    if isinstance(value, (tuple, list)):
        return ",".join(str(item) for item in value)
    return str(value)


_Columns = tuple[tuple[str, Callable[[Any], Any]], ...]

_COLUMNS: dict[str, _Columns] = {
    "Interface": (
        ("ID", lambda r: r.meta.id),
        ("VNI", lambda r: r.spec.vni),
        ("Device", lambda r: r.spec.device),
        ("IPs", lambda r: r.spec.ips),
        ("UnderlayRoute", lambda r: r.status.underlay_route),
    ),
    "VirtualIP": (
        ("InterfaceID", lambda r: r.meta.interface_id),
        ("IP", lambda r: r.spec.ip),
        ("UnderlayRoute", lambda r: r.status.underlay_route),
    ),
    "Prefix": (
        ("Prefix", lambda r: r.spec.prefix),
        ("UnderlayRoute", lambda r: r.status.underlay_route),
    ),
    "LoadBalancerPrefix": (
        ("Prefix", lambda r: r.spec.prefix),
        ("UnderlayRoute", lambda r: r.status.underlay_route),
    ),
    "Route": (
        ("Prefix", lambda r: r.spec.prefix),
        ("NextHopVNI", lambda r: r.spec.next_hop.vni),
        ("NextHopIP", lambda r: r.spec.next_hop.ip),
    ),
    "LoadBalancer": (
        ("ID", lambda r: r.meta.id),
        ("VNI", lambda r: r.spec.vni),
        ("VIP", lambda r: r.spec.vip),
        ("Ports", lambda r: r.spec.ports),
        ("UnderlayRoute", lambda r: r.status.underlay_route),
    ),
    "LoadBalancerTarget": (
        ("LoadBalancerID", lambda r: r.meta.load_balancer_id),
        ("TargetIP", lambda r: r.spec.target_ip),
    ),
    "Nat": (
        ("InterfaceID", lambda r: r.meta.interface_id),
        ("NatIP", lambda r: r.spec.nat_ip),
        ("MinPort", lambda r: r.spec.min_port),
        ("MaxPort", lambda r: r.spec.max_port),
        ("UnderlayRoute", lambda r: r.status.underlay_route),
    ),
    "NatList": (
        ("NatIP", lambda r: r.spec.nat_ip),
        ("MinPort", lambda r: r.spec.min_port),
        ("MaxPort", lambda r: r.spec.max_port),
        ("VNI", lambda r: r.spec.vni),
        ("UnderlayRoute", lambda r: r.status.underlay_route),
    ),
    "Version": (
        ("ClientProtocol", lambda r: r.meta.client_protocol),
        ("ClientName", lambda r: r.meta.client_name),
        ("ClientVersion", lambda r: r.meta.client_version),
        ("ServiceProtocol", lambda r: r.spec.service_protocol),
        ("ServiceVersion", lambda r: r.spec.service_version),
    ),
    "Init": (
        ("UUID", lambda r: r.spec.uuid),
    ),
    "Vni": (
        ("VNI", lambda r: r.meta.vni),
        ("Type", lambda r: r.meta.vni_type.name),
        ("InUse", lambda r: r.spec.in_use),
    ),
}


class DefaultTableConverter:
    """Column layout for every resource kind dpservice-cli knows."""

    def convert(self, value: Any) -> TableData:
        if isinstance(value, ResourceList):
            # A list may have its own layout, e.g. NAT entries.
            kind = value.kind if value.kind in _COLUMNS else value.kind.removesuffix("List")
            items: Sequence[Resource] = value.items
        elif isinstance(value, Resource):
            kind = value.kind
            items = (value,)
        else:
            raise RendererError(f"Unsupported type {type(value).__name__}")

        columns = _COLUMNS.get(kind)
        if columns is None:
            raise RendererError(f"No table layout for {kind}")

        return TableData(
            headers=tuple(header for header, _ in columns),
            rows=tuple(
                tuple(_cell(getter(item)) for _, getter in columns) for item in items
            ),
        )


DEFAULT_TABLE_CONVERTER = DefaultTableConverter()
