"""Pure sorting of list results for presentation.

The dataplane client keeps the order dpservice returns; the CLI may ask
for a different order with ``--sort-by``.  Every function here is a
pure transformation and the sort is stable, so equal keys keep the
service order.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from typing import Any

from dpservice_cli.core.models import IPAddress, IPNetwork, ResourceList
from dpservice_cli.exceptions import InvalidRequestError


# ---------------------------------------------------------------------------
# Key helpers
# ---------------------------------------------------------------------------

def _address_key(address: IPAddress | None) -> tuple[int, int, int]:
    """Order IPv4 before IPv6, numerically; missing addresses last."""
    if address is None:
        return (1, 0, 0)
    return (0, address.version, int(address))


def _network_key(network: IPNetwork) -> tuple[int, int, int]:
    return (network.version, int(network.network_address), network.prefixlen)


_SortKey = Callable[[Any], Any]

_SORT_KEYS: dict[str, dict[str, _SortKey]] = {
    "InterfaceList": {
        "id": lambda r: r.meta.id,
        "vni": lambda r: r.spec.vni,
        "device": lambda r: r.spec.device,
        "underlayroute": lambda r: _address_key(r.status.underlay_route),
    },
    "PrefixList": {
        "prefix": lambda r: _network_key(r.spec.prefix),
    },
    "LoadBalancerPrefixList": {
        "prefix": lambda r: _network_key(r.spec.prefix),
        "underlayroute": lambda r: _address_key(r.status.underlay_route),
    },
    "RouteList": {
        "prefix": lambda r: _network_key(r.spec.prefix),
        "nexthopvni": lambda r: r.spec.next_hop.vni,
        "nexthopip": lambda r: _address_key(r.spec.next_hop.ip),
    },
    "LoadBalancerTargetList": {
        "ip": lambda r: _address_key(r.spec.target_ip),
    },
    "NatList": {
        "ip": lambda r: _address_key(r.spec.nat_ip),
        "minport": lambda r: r.spec.min_port,
        "maxport": lambda r: r.spec.max_port,
        "underlayroute": lambda r: _address_key(r.status.underlay_route),
        "vni": lambda r: r.spec.vni,
    },
}


def _normalise_column(column: str) -> str:
    return column.lower().replace("-", "").replace("_", "")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def sort_columns(kind: str) -> tuple[str, ...]:
    """Return the column names a list of *kind* can be sorted by."""
    return tuple(_SORT_KEYS.get(kind, {}))


def sort_resources(resources: ResourceList, sort_by: str | None) -> ResourceList:
    """Return *resources* stably sorted by the column *sort_by*.

    ``None`` or an empty string leaves the service order untouched.

    Raises
    ------
    InvalidRequestError
        If *sort_by* is not a known column for this list kind.
    """
    if not sort_by:
        return resources

    keys = _SORT_KEYS.get(resources.kind, {})
    key = keys.get(_normalise_column(sort_by))
    if key is None:
        columns = ", ".join(keys) or "none"
        raise InvalidRequestError(
            f"Cannot sort {resources.kind} by {sort_by!r}.",
            hint=f"Valid columns: {columns}",
        )
    return replace(resources, items=tuple(sorted(resources.items, key=key)))
