"""Address encoding between :mod:`ipaddress` values and wire messages.

Every IP-bearing wire field pairs the textual address bytes with an
``IPVersion`` tag.  The tag is always computed here from the address
itself, never from a separate flag.  On the way back a tag
that disagrees with the parsed address is rejected.

Every function in this module is a pure transformation.
"""

from __future__ import annotations

import ipaddress
from typing import Any

from dpservice_cli import wire
from dpservice_cli.core.models import IPAddress, IPNetwork
from dpservice_cli.exceptions import DecodeError

_VERSIONS: dict[int, wire.IPVersion] = {
    4: wire.IPVersion.IPv4,
    6: wire.IPVersion.IPv6,
}


# ---------------------------------------------------------------------------
# Encoding (semantic -> wire)
# ---------------------------------------------------------------------------

def ip_version(address: IPAddress | IPNetwork) -> wire.IPVersion:
    """Return the wire family tag of *address* (or of a network)."""
    return _VERSIONS[address.version]


def encode_ip(message_cls: Any, address: IPAddress) -> Any:
    """Build a tagged-address message (``LBIP``, ``NATIP``, ``InterfaceVIPIP``)."""
    return message_cls(
        ip_version=ip_version(address),
        address=str(address).encode(),
    )


def encode_ip_config(address: IPAddress) -> Any:
    """Build an interface ``IPConfig`` for a primary address."""
    return wire.IPConfig(
        ip_version=ip_version(address),
        primary_address=str(address).encode(),
    )


def encode_prefix(network: IPNetwork) -> Any:
    """Build a wire ``Prefix`` carrying the network address and length."""
    return wire.Prefix(
        ip_version=ip_version(network),
        address=str(network.network_address).encode(),
        prefix_length=network.prefixlen,
    )


def first_of_version(addresses: tuple[IPAddress, ...], version: int) -> IPAddress | None:
    """Return the first address of the given family, or ``None``."""
    return next((a for a in addresses if a.version == version), None)


# ---------------------------------------------------------------------------
# Decoding (wire -> semantic)
# ---------------------------------------------------------------------------

def decode_ip(
    raw: bytes,
    *,
    field: str,
    version: int | None = None,
) -> IPAddress:
    """Parse textual address bytes from the wire.

    Parameters
    ----------
    raw:
        The address bytes as sent by dpservice.
    field:
        Name of the wire field, used in error messages.
    version:
        The ``IPVersion`` tag sent alongside, when the message has one.

    Raises
    ------
    DecodeError
        If *raw* is not a valid address, or the tag does not match.
    """
    text = raw.decode(errors="replace")
    try:
        address = ipaddress.ip_address(text)
    except ValueError as exc:
        raise DecodeError(f"Error parsing {field}: invalid address {text!r}") from exc
    if version is not None and ip_version(address) != version:
        raise DecodeError(
            f"Error parsing {field}: address {text} does not match "
            f"family tag {wire.IPVersion(version).name}",
        )
    return address


def decode_tagged_ip(message: Any, *, field: str) -> IPAddress:
    """Decode a tagged-address message (``LBIP``, ``NATIP``, ...)."""
    return decode_ip(message.address, field=field, version=message.ip_version)


def decode_prefix(message: Any, *, field: str = "prefix") -> IPNetwork:
    """Decode a wire ``Prefix`` or ``LBPrefix`` into a network.

    Raises
    ------
    DecodeError
        If the address or length is invalid, or the tag does not match.
    """
    address = decode_ip(message.address, field=field, version=message.ip_version)
    try:
        return ipaddress.ip_network(f"{address}/{message.prefix_length}", strict=False)
    except ValueError as exc:
        raise DecodeError(
            f"Error parsing {field}: invalid prefix length {message.prefix_length}",
        ) from exc


def decode_underlay_route(raw: bytes, *, required: bool) -> IPAddress | None:
    """Parse an underlay route returned by dpservice.

    An empty value yields ``None`` unless *required* is set, in which
    case it is a :class:`DecodeError` like any other unparsable value.
    """
    if not raw and not required:
        return None
    return decode_ip(raw, field="underlay route")
