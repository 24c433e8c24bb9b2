"""Parsing and formatting of compound resource identifiers."""

import ipaddress

from fleetsync.errors import InvalidIdentifierError
from fleetsync.models import IpPermission, Protocol


def _split(value: str, parts: int, expected: str) -> list[str]:
    pieces = value.split("/")
    if len(pieces) != parts or not all(pieces):
        raise InvalidIdentifierError(f"Invalid identifier {value!r} (expected {expected!r})")
    return pieces


def format_peering_connection_id(fleet_id: str, peer_account_id: str, peer_vpc_id: str) -> str:
    return f"{fleet_id}/{peer_account_id}/{peer_vpc_id}"


def parse_peering_connection_id(value: str) -> tuple[str, str, str]:
    fleet_id, peer_account_id, peer_vpc_id = _split(
        value, 3, "fleet_id/peer_account_id/peer_vpc_id"
    )
    return fleet_id, peer_account_id, peer_vpc_id


def format_peering_authorization_id(gamelift_account_id: str, peer_vpc_id: str) -> str:
    return f"{gamelift_account_id}/{peer_vpc_id}"


def parse_peering_authorization_id(value: str) -> tuple[str, str]:
    account_id, peer_vpc_id = _split(value, 2, "gamelift_account_id/peer_vpc_id")
    return account_id, peer_vpc_id


def parse_port_rule(value: str) -> IpPermission:
    """Parse ``PROTOCOL:PORT[-PORT]:CIDR``, e.g. ``TCP:8000-8100:10.0.0.0/8``."""
    protocol, sep, rest = value.partition(":")
    ports, sep2, ip_range = rest.partition(":")
    if not sep or not sep2:
        raise InvalidIdentifierError(
            f"Invalid port rule {value!r} (expected 'PROTOCOL:PORT[-PORT]:CIDR')"
        )

    try:
        proto = Protocol(protocol.upper())
    except ValueError:
        raise InvalidIdentifierError(f"Unknown protocol {protocol!r} in rule {value!r}") from None

    from_port, _, to_port = ports.partition("-")
    try:
        start = int(from_port)
        end = int(to_port) if to_port else start
        network = ipaddress.ip_network(ip_range)
    except ValueError as exc:
        raise InvalidIdentifierError(f"Invalid port rule {value!r}: {exc}") from None

    if not (1 <= start <= end <= 60000):
        raise InvalidIdentifierError(f"Invalid port range {ports!r} in rule {value!r}")

    return IpPermission(from_port=start, to_port=end, ip_range=str(network), protocol=proto)
