"""Thin boto3 wrapper for the GameLift API calls fleetsync needs."""

import boto3
from botocore.exceptions import ClientError

from fleetsync.models import (
    Build,
    FleetAttributes,
    IpPermission,
    PeeringAuthorization,
    PeeringConnection,
)


def _is_not_found(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") == "NotFoundException"


class GameLiftClient:
    """Wraps boto3 GameLift calls and returns fleetsync dataclasses.

    A boto3 client can be passed in; otherwise one is created for ``region``.
    """

    def __init__(self, region: str | None = None, client=None):
        self._client = client or boto3.client(
            "gamelift", **({"region_name": region} if region else {})
        )

    def create_vpc_peering_connection(
        self, fleet_id: str, peer_account_id: str, peer_vpc_id: str
    ) -> None:
        """Request a peering connection. The connection becomes active later."""
        self._client.create_vpc_peering_connection(
            FleetId=fleet_id,
            PeerVpcAwsAccountId=peer_account_id,
            PeerVpcId=peer_vpc_id,
        )

    def describe_vpc_peering_connections(self, fleet_id: str) -> list[PeeringConnection]:
        resp = self._client.describe_vpc_peering_connections(FleetId=fleet_id)
        results = []
        for conn in resp.get("VpcPeeringConnections", []):
            status = conn.get("Status", {})
            results.append(
                PeeringConnection(
                    fleet_id=conn.get("FleetId", fleet_id),
                    peer_vpc_id=conn["PeerVpcId"],
                    status=status["Code"],
                    status_message=status.get("Message"),
                    connection_id=conn.get("VpcPeeringConnectionId"),
                    gamelift_vpc_id=conn.get("GameLiftVpcId"),
                    ipv4_cidr_block=conn.get("IpV4CidrBlock"),
                )
            )
        return results

    def delete_vpc_peering_connection(self, fleet_id: str, connection_id: str) -> None:
        self._client.delete_vpc_peering_connection(
            FleetId=fleet_id,
            VpcPeeringConnectionId=connection_id,
        )

    def create_vpc_peering_authorization(
        self, gamelift_account_id: str, peer_vpc_id: str
    ) -> PeeringAuthorization:
        resp = self._client.create_vpc_peering_authorization(
            GameLiftAwsAccountId=gamelift_account_id,
            PeerVpcId=peer_vpc_id,
        )
        auth = resp.get("VpcPeeringAuthorization", {})
        return PeeringAuthorization(
            gamelift_account_id=gamelift_account_id,
            peer_vpc_id=peer_vpc_id,
            peer_vpc_account_id=auth.get("PeerVpcAwsAccountId"),
        )

    def describe_vpc_peering_authorizations(self) -> list[PeeringAuthorization]:
        resp = self._client.describe_vpc_peering_authorizations()
        return [
            PeeringAuthorization(
                gamelift_account_id=auth["GameLiftAwsAccountId"],
                peer_vpc_id=auth["PeerVpcId"],
                peer_vpc_account_id=auth.get("PeerVpcAwsAccountId"),
            )
            for auth in resp.get("VpcPeeringAuthorizations", [])
        ]

    def delete_vpc_peering_authorization(self, gamelift_account_id: str, peer_vpc_id: str) -> None:
        self._client.delete_vpc_peering_authorization(
            GameLiftAwsAccountId=gamelift_account_id,
            PeerVpcId=peer_vpc_id,
        )

    def describe_fleet(self, fleet_id: str) -> FleetAttributes | None:
        """Fetch fleet attributes. Returns None if the fleet does not exist."""
        try:
            resp = self._client.describe_fleet_attributes(FleetIds=[fleet_id])
        except ClientError as exc:
            if _is_not_found(exc):
                return None
            raise

        fleets = resp.get("FleetAttributes", [])
        if not fleets:
            return None

        attrs = fleets[0]
        return FleetAttributes(
            fleet_id=attrs["FleetId"],
            name=attrs.get("Name", ""),
            status=attrs["Status"],
            build_id=attrs.get("BuildId"),
        )

    def delete_fleet(self, fleet_id: str) -> None:
        self._client.delete_fleet(FleetId=fleet_id)

    def describe_build(self, build_id: str) -> Build | None:
        """Fetch a build. Returns None if the build does not exist."""
        try:
            resp = self._client.describe_build(BuildId=build_id)
        except ClientError as exc:
            if _is_not_found(exc):
                return None
            raise

        build = resp["Build"]
        return Build(
            build_id=build["BuildId"],
            name=build.get("Name", ""),
            status=build["Status"],
        )

    def describe_port_settings(self, fleet_id: str) -> list[IpPermission]:
        resp = self._client.describe_fleet_port_settings(FleetId=fleet_id)
        return [IpPermission.from_api(p) for p in resp.get("InboundPermissions", [])]

    def update_port_settings(
        self,
        fleet_id: str,
        authorize: list[IpPermission] | None = None,
        revoke: list[IpPermission] | None = None,
    ) -> None:
        kwargs: dict = {"FleetId": fleet_id}
        if authorize:
            kwargs["InboundPermissionAuthorizations"] = [p.to_api() for p in authorize]
        if revoke:
            kwargs["InboundPermissionRevocations"] = [p.to_api() for p in revoke]
        self._client.update_fleet_port_settings(**kwargs)
