"""Lifecycle operations that wait for GameLift resources to settle."""

import logging
from collections.abc import Iterable

from botocore.exceptions import BotoCoreError, ClientError

from fleetsync.aws.client import GameLiftClient
from fleetsync.config import (
    BUILD_READY_TIMEOUT,
    FLEET_ACTIVE_TIMEOUT,
    FLEET_DELETE_TIMEOUT,
    PEERING_CREATE_TIMEOUT,
    PEERING_DELETE_TIMEOUT,
)
from fleetsync.models import (
    ApplyReport,
    Build,
    BuildStatus,
    ChangeAction,
    FailedChange,
    FleetAttributes,
    FleetStatus,
    IpPermission,
    PeeringAuthorization,
    PeeringConnection,
    PeeringStatus,
    PortChange,
)
from fleetsync.reconciler import Reconciliation, reconcile
from fleetsync.waiter import Probe, Refresh, StateWaiter, WaitOutcome, WaitSpec

logger = logging.getLogger(__name__)

FLEET_PENDING = {
    FleetStatus.NEW,
    FleetStatus.DOWNLOADING,
    FleetStatus.VALIDATING,
    FleetStatus.BUILDING,
    FleetStatus.ACTIVATING,
}


def plan_changes(plan: Reconciliation) -> list[PortChange]:
    """Order a port settings plan as individual calls, revocations first."""
    return [PortChange(ChangeAction.REVOKE, p) for p in plan.to_remove] + [
        PortChange(ChangeAction.AUTHORIZE, p) for p in plan.to_add
    ]


class FleetLifecycle:
    """Creates, deletes and updates GameLift resources, blocking until they settle."""

    def __init__(self, client: GameLiftClient, waiter: StateWaiter | None = None):
        self._client = client
        self._waiter = waiter or StateWaiter()

    # Peering connections

    def find_peering_connection(self, fleet_id: str, peer_vpc_id: str) -> PeeringConnection | None:
        logger.debug("Looking for peering connection of %s with peer VPC %s", fleet_id, peer_vpc_id)
        for conn in self._client.describe_vpc_peering_connections(fleet_id):
            if conn.peer_vpc_id == peer_vpc_id:
                return conn
        return None

    def _peering_refresh(self, fleet_id: str, peer_vpc_id: str, missing_status: str | None) -> Refresh:
        def refresh() -> Probe:
            conn = self.find_peering_connection(fleet_id, peer_vpc_id)
            if conn is None:
                return Probe(None, missing_status)
            return Probe(conn, conn.status, conn.status_message)

        return refresh

    def create_peering_connection(
        self,
        fleet_id: str,
        peer_account_id: str,
        peer_vpc_id: str,
        timeout: float = PEERING_CREATE_TIMEOUT,
    ) -> PeeringConnection:
        """Request a peering connection and wait until it is active."""
        logger.info(
            "Creating peering connection: fleet=%s peer_account=%s peer_vpc=%s",
            fleet_id,
            peer_account_id,
            peer_vpc_id,
        )
        self._client.create_vpc_peering_connection(fleet_id, peer_account_id, peer_vpc_id)

        # A connection that is not listed yet is unrecognized and keeps the wait going.
        spec = WaitSpec(
            pending={
                PeeringStatus.DELETED,
                PeeringStatus.INITIATING_REQUEST,
                PeeringStatus.PENDING_ACCEPTANCE,
                PeeringStatus.PROVISIONING,
            },
            target={PeeringStatus.ACTIVE},
            failure={PeeringStatus.FAILED, PeeringStatus.REJECTED, PeeringStatus.EXPIRED},
            timeout=timeout,
            refresh=self._peering_refresh(fleet_id, peer_vpc_id, missing_status=None),
            description=f"peering connection {fleet_id}/{peer_vpc_id}",
        )
        return self._waiter.wait(spec)

    def delete_peering_connection(
        self,
        fleet_id: str,
        peer_vpc_id: str,
        timeout: float = PEERING_DELETE_TIMEOUT,
    ) -> None:
        """Delete a peering connection and wait until it is gone."""
        conn = self.find_peering_connection(fleet_id, peer_vpc_id)
        if conn is None or conn.status == PeeringStatus.DELETED:
            logger.info("Peering connection %s/%s already gone", fleet_id, peer_vpc_id)
            return

        logger.info("Deleting peering connection %s (%s)", conn.connection_id, fleet_id)
        self._client.delete_vpc_peering_connection(fleet_id, conn.connection_id)

        spec = WaitSpec(
            pending={
                PeeringStatus.ACTIVE,
                PeeringStatus.PENDING_ACCEPTANCE,
                PeeringStatus.PROVISIONING,
                PeeringStatus.DELETING,
            },
            target={PeeringStatus.DELETED},
            failure={PeeringStatus.FAILED},
            timeout=timeout,
            refresh=self._peering_refresh(fleet_id, peer_vpc_id, missing_status=PeeringStatus.DELETED),
            description=f"peering connection {fleet_id}/{peer_vpc_id}",
        )
        self._waiter.wait(spec)

    # Peering authorizations

    def find_peering_authorization(
        self, gamelift_account_id: str, peer_vpc_id: str
    ) -> PeeringAuthorization | None:
        for auth in self._client.describe_vpc_peering_authorizations():
            if auth.gamelift_account_id == gamelift_account_id and auth.peer_vpc_id == peer_vpc_id:
                return auth
        return None

    def create_peering_authorization(
        self, gamelift_account_id: str, peer_vpc_id: str
    ) -> PeeringAuthorization:
        logger.info("Creating peering authorization for %s/%s", gamelift_account_id, peer_vpc_id)
        return self._client.create_vpc_peering_authorization(gamelift_account_id, peer_vpc_id)

    def delete_peering_authorization(self, gamelift_account_id: str, peer_vpc_id: str) -> None:
        logger.info("Deleting peering authorization for %s/%s", gamelift_account_id, peer_vpc_id)
        self._client.delete_vpc_peering_authorization(gamelift_account_id, peer_vpc_id)

    # Fleets and builds

    def _fleet_active_spec(self, fleet_id: str, timeout: float) -> WaitSpec:
        def refresh() -> Probe:
            fleet = self._client.describe_fleet(fleet_id)
            if fleet is None:
                return Probe(None, None)
            return Probe(fleet, fleet.status)

        return WaitSpec(
            pending=FLEET_PENDING,
            target={FleetStatus.ACTIVE},
            failure={FleetStatus.ERROR},
            timeout=timeout,
            refresh=refresh,
            description=f"fleet {fleet_id}",
        )

    def wait_for_fleet_active(
        self, fleet_id: str, timeout: float = FLEET_ACTIVE_TIMEOUT
    ) -> FleetAttributes:
        return self._waiter.wait(self._fleet_active_spec(fleet_id, timeout))

    def wait_for_fleets_active(
        self,
        fleet_ids: Iterable[str],
        timeout: float = FLEET_ACTIVE_TIMEOUT,
        max_concurrent: int = 5,
    ) -> dict[str, WaitOutcome]:
        """Wait for several fleets at once; each gets its own clock and refresh."""
        specs = {fleet_id: self._fleet_active_spec(fleet_id, timeout) for fleet_id in fleet_ids}
        return self._waiter.wait_many(specs, max_concurrent=max_concurrent)

    def delete_fleet(self, fleet_id: str, timeout: float = FLEET_DELETE_TIMEOUT) -> None:
        """Delete a fleet and wait until it is terminated."""
        logger.info("Deleting fleet %s", fleet_id)
        self._client.delete_fleet(fleet_id)

        def refresh() -> Probe:
            fleet = self._client.describe_fleet(fleet_id)
            if fleet is None:
                return Probe(None, FleetStatus.TERMINATED)
            return Probe(fleet, fleet.status)

        self._waiter.wait(
            WaitSpec(
                pending={FleetStatus.ACTIVE, FleetStatus.DELETING, FleetStatus.ERROR},
                target={FleetStatus.TERMINATED, FleetStatus.NOT_FOUND},
                timeout=timeout,
                refresh=refresh,
                description=f"fleet {fleet_id} deletion",
            )
        )

    def wait_for_build_ready(self, build_id: str, timeout: float = BUILD_READY_TIMEOUT) -> Build:
        def refresh() -> Probe:
            build = self._client.describe_build(build_id)
            if build is None:
                return Probe(None, None)
            return Probe(build, build.status)

        return self._waiter.wait(
            WaitSpec(
                pending={BuildStatus.INITIALIZED},
                target={BuildStatus.READY},
                failure={BuildStatus.FAILED},
                timeout=timeout,
                refresh=refresh,
                description=f"build {build_id}",
            )
        )

    # Port settings

    def plan_port_settings(self, fleet_id: str, desired: Iterable[IpPermission]) -> Reconciliation:
        """Diff the fleet's live inbound rules against the desired ones."""
        current = self._client.describe_port_settings(fleet_id)
        return reconcile(current, desired)

    def sync_port_settings(self, fleet_id: str, desired: Iterable[IpPermission]) -> ApplyReport:
        """Move the fleet's inbound rules to ``desired`` one call per changed rule.

        Unchanged rules are never touched. A failing call does not stop the
        remaining ones; the report lists what was and was not applied.
        """
        plan = self.plan_port_settings(fleet_id, desired)
        applied: list[PortChange] = []
        failed: list[FailedChange] = []

        for change in plan_changes(plan):
            logger.info(
                "%s %s ports %d-%d from %s on fleet %s",
                change.action.value.capitalize(),
                change.permission.protocol.value,
                change.permission.from_port,
                change.permission.to_port,
                change.permission.ip_range,
                fleet_id,
            )
            try:
                if change.action == ChangeAction.REVOKE:
                    self._client.update_port_settings(fleet_id, revoke=[change.permission])
                else:
                    self._client.update_port_settings(fleet_id, authorize=[change.permission])
            except (BotoCoreError, ClientError) as exc:
                logger.warning("Failed to %s rule on %s: %s", change.action.value, fleet_id, exc)
                failed.append(FailedChange(change=change, error=str(exc)))
            else:
                applied.append(change)

        return ApplyReport(fleet_id=fleet_id, applied=applied, failed=failed)
