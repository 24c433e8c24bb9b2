"""Core data models for GameLift resource lifecycle management."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class PeeringStatus(StrEnum):
    """Known status codes of a VPC peering connection.

    The remote side may report codes not listed here; they are kept as plain
    strings on ``PeeringConnection.status``.
    """

    INITIATING_REQUEST = "initiating-request"
    PENDING_ACCEPTANCE = "pending-acceptance"
    PROVISIONING = "provisioning"
    ACTIVE = "active"
    DELETING = "deleting"
    DELETED = "deleted"
    REJECTED = "rejected"
    EXPIRED = "expired"
    FAILED = "failed"


class FleetStatus(StrEnum):
    """Known fleet lifecycle statuses.

    Kept as plain strings on ``FleetAttributes.status`` so that codes not
    listed here reach the waiter unchanged.
    """

    NEW = "NEW"
    DOWNLOADING = "DOWNLOADING"
    VALIDATING = "VALIDATING"
    BUILDING = "BUILDING"
    ACTIVATING = "ACTIVATING"
    ACTIVE = "ACTIVE"
    DELETING = "DELETING"
    ERROR = "ERROR"
    TERMINATED = "TERMINATED"
    NOT_FOUND = "NOT_FOUND"


class BuildStatus(StrEnum):
    """Build upload status."""

    INITIALIZED = "INITIALIZED"
    READY = "READY"
    FAILED = "FAILED"


class ChangeAction(StrEnum):
    """Incremental mutation applied to a fleet's inbound port rules."""

    AUTHORIZE = "authorize"
    REVOKE = "revoke"


class Protocol(StrEnum):
    """Network protocol for an inbound port rule."""

    TCP = "TCP"
    UDP = "UDP"


@dataclass(frozen=True)
class IpPermission:
    """An inbound port rule. Rules have no identity beyond their field values."""

    from_port: int
    to_port: int
    ip_range: str
    protocol: Protocol

    def to_api(self) -> dict[str, Any]:
        return {
            "FromPort": self.from_port,
            "ToPort": self.to_port,
            "IpRange": self.ip_range,
            "Protocol": self.protocol.value,
        }

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "IpPermission":
        return cls(
            from_port=data["FromPort"],
            to_port=data["ToPort"],
            ip_range=data["IpRange"],
            protocol=Protocol(data["Protocol"]),
        )


@dataclass(frozen=True)
class PeeringConnection:
    """A VPC peering connection between a fleet and a peer VPC."""

    fleet_id: str
    peer_vpc_id: str
    status: str
    status_message: str | None = None
    connection_id: str | None = None
    gamelift_vpc_id: str | None = None
    ipv4_cidr_block: str | None = None


@dataclass(frozen=True)
class PeeringAuthorization:
    """Authorization allowing a GameLift account to peer with a VPC."""

    gamelift_account_id: str
    peer_vpc_id: str
    peer_vpc_account_id: str | None = None


@dataclass(frozen=True)
class FleetAttributes:
    """The subset of fleet attributes needed to track its lifecycle."""

    fleet_id: str
    name: str
    status: str
    build_id: str | None = None


@dataclass(frozen=True)
class Build:
    """A game server build."""

    build_id: str
    name: str
    status: str


@dataclass(frozen=True)
class PortChange:
    """One planned authorize or revoke call."""

    action: ChangeAction
    permission: IpPermission


@dataclass(frozen=True)
class FailedChange:
    """A planned change whose API call raised."""

    change: PortChange
    error: str


@dataclass(frozen=True)
class ApplyReport:
    """Outcome of applying a port settings plan change by change."""

    fleet_id: str
    applied: list[PortChange]
    failed: list[FailedChange]

    @property
    def complete(self) -> bool:
        return not self.failed
