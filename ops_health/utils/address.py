"""Bind address parsing for the health server."""

from typing import Tuple

from ops_health.utils.exceptions import AddressParseError


def parse_address(address: str) -> Tuple[str, int]:
    """Split a ``host:port`` string into its parts.

    IPv6 hosts must be bracketed (``[::1]:3000``); the brackets are removed.

    Args:
        address: Address such as ``0.0.0.0:3000``

    Returns:
        Tuple of (host, port)

    Raises:
        AddressParseError: If the host is empty or the port is missing,
            non-numeric or outside 0-65535
    """
    host, sep, port_text = address.strip().rpartition(":")
    if not sep:
        raise AddressParseError(f"invalid socket address syntax: {address!r}")

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise AddressParseError(
            f"invalid socket address syntax: {address!r} (bracket IPv6 hosts)"
        )

    if not host:
        raise AddressParseError(f"invalid socket address syntax: {address!r}")

    try:
        port = int(port_text)
    except ValueError as e:
        raise AddressParseError(f"invalid port in {address!r}") from e

    if not 0 <= port <= 65535:
        raise AddressParseError(f"port out of range in {address!r}")

    return host, port
