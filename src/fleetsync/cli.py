"""CLI entrypoint for fleetsync."""

import logging
import sys

import click

from fleetsync.aws.client import GameLiftClient
from fleetsync.config import (
    BUILD_READY_TIMEOUT,
    FLEET_ACTIVE_TIMEOUT,
    FLEET_DELETE_TIMEOUT,
    PEERING_CREATE_TIMEOUT,
    PEERING_DELETE_TIMEOUT,
    Settings,
)
from fleetsync.errors import InvalidIdentifierError, WaitError
from fleetsync.formatter import format_json, format_markdown, format_table
from fleetsync.identifiers import (
    format_peering_authorization_id,
    format_peering_connection_id,
    parse_peering_authorization_id,
    parse_peering_connection_id,
    parse_port_rule,
)
from fleetsync.lifecycle import FleetLifecycle, plan_changes
from fleetsync.waiter import StateWaiter

FORMATTERS = {
    "table": format_table,
    "json": format_json,
    "markdown": format_markdown,
}


def _parse_rules(ctx, param, values):
    try:
        return [parse_port_rule(v) for v in values]
    except InvalidIdentifierError as exc:
        raise click.BadParameter(str(exc)) from None


def _parse_connection_id(ctx, param, value):
    try:
        return parse_peering_connection_id(value)
    except InvalidIdentifierError as exc:
        raise click.BadParameter(str(exc)) from None


def _parse_authorization_id(ctx, param, value):
    try:
        return parse_peering_authorization_id(value)
    except InvalidIdentifierError as exc:
        raise click.BadParameter(str(exc)) from None


def _fail(exc: Exception) -> None:
    click.echo(f"Error: {exc}", err=True)
    sys.exit(1)


rule_option = click.option(
    "--rule",
    "rules",
    multiple=True,
    callback=_parse_rules,
    help="Desired inbound rule, PROTOCOL:PORT[-PORT]:CIDR. Repeatable.",
)
format_option = click.option(
    "--format",
    "output_format",
    type=click.Choice(sorted(FORMATTERS)),
    default="table",
    help="Output format.",
)


@click.group()
@click.option("--region", default=None, help="AWS region.")
@click.option(
    "--poll-interval",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds between status probes.",
)
@click.option("--verbose", is_flag=True, help="Log every status probe.")
@click.pass_context
def main(ctx, region, poll_interval, verbose):
    """Manage GameLift fleets, peering and port settings, waiting until they settle."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        settings = Settings.from_env()
    except ValueError as exc:
        raise click.UsageError(str(exc)) from None

    if poll_interval is not None:
        settings.poll_interval = poll_interval

    client = GameLiftClient(region=region or settings.region)
    waiter = StateWaiter(poll_interval=settings.poll_interval)
    ctx.obj = {"lifecycle": FleetLifecycle(client, waiter), "settings": settings}


@main.group()
def peer():
    """VPC peering connections and authorizations."""


@peer.command("create")
@click.argument("fleet_id")
@click.argument("peer_account_id")
@click.argument("peer_vpc_id")
@click.option("--timeout", type=float, default=PEERING_CREATE_TIMEOUT, show_default=True)
@click.pass_obj
def peer_create(obj, fleet_id, peer_account_id, peer_vpc_id, timeout):
    """Create a peering connection and wait until it is active."""
    try:
        conn = obj["lifecycle"].create_peering_connection(
            fleet_id, peer_account_id, peer_vpc_id, timeout=timeout
        )
    except WaitError as exc:
        _fail(exc)
    click.echo(
        f"{format_peering_connection_id(fleet_id, peer_account_id, peer_vpc_id)} "
        f"{conn.status} {conn.connection_id or ''} {conn.ipv4_cidr_block or ''}".rstrip()
    )


@peer.command("delete")
@click.argument(
    "connection_id", callback=_parse_connection_id, metavar="FLEET_ID/PEER_ACCOUNT/PEER_VPC"
)
@click.option("--timeout", type=float, default=PEERING_DELETE_TIMEOUT, show_default=True)
@click.pass_obj
def peer_delete(obj, connection_id, timeout):
    """Delete a peering connection and wait until it is gone."""
    fleet_id, peer_account_id, peer_vpc_id = connection_id
    try:
        obj["lifecycle"].delete_peering_connection(fleet_id, peer_vpc_id, timeout=timeout)
    except WaitError as exc:
        _fail(exc)
    click.echo(f"{format_peering_connection_id(fleet_id, peer_account_id, peer_vpc_id)} deleted")


@peer.command("authorize")
@click.argument("gamelift_account_id")
@click.argument("peer_vpc_id")
@click.pass_obj
def peer_authorize(obj, gamelift_account_id, peer_vpc_id):
    """Authorize a GameLift account to peer with a VPC."""
    obj["lifecycle"].create_peering_authorization(gamelift_account_id, peer_vpc_id)
    click.echo(f"{format_peering_authorization_id(gamelift_account_id, peer_vpc_id)} authorized")


@peer.command("deauthorize")
@click.argument(
    "authorization_id", callback=_parse_authorization_id, metavar="GAMELIFT_ACCOUNT/PEER_VPC"
)
@click.pass_obj
def peer_deauthorize(obj, authorization_id):
    """Remove a peering authorization."""
    gamelift_account_id, peer_vpc_id = authorization_id
    obj["lifecycle"].delete_peering_authorization(gamelift_account_id, peer_vpc_id)
    click.echo(f"{format_peering_authorization_id(gamelift_account_id, peer_vpc_id)} deauthorized")


@main.group()
def fleet():
    """Fleet lifecycle."""


@fleet.command("wait")
@click.argument("fleet_ids", nargs=-1, required=True)
@click.option("--timeout", type=float, default=FLEET_ACTIVE_TIMEOUT, show_default=True)
@click.option("--max-concurrent", type=int, default=None, help="Max concurrent waits.")
@click.pass_obj
def fleet_wait(obj, fleet_ids, timeout, max_concurrent):
    """Wait until every given fleet is ACTIVE."""
    outcomes = obj["lifecycle"].wait_for_fleets_active(
        fleet_ids,
        timeout=timeout,
        max_concurrent=max_concurrent or obj["settings"].max_concurrent,
    )

    for fleet_id in fleet_ids:
        outcome = outcomes[fleet_id]
        if outcome.ok:
            click.echo(f"{fleet_id} {outcome.value.status}")
        else:
            click.echo(f"{fleet_id} FAILED: {outcome.error}", err=True)

    sys.exit(0 if all(o.ok for o in outcomes.values()) else 1)


@fleet.command("delete")
@click.argument("fleet_id")
@click.option("--timeout", type=float, default=FLEET_DELETE_TIMEOUT, show_default=True)
@click.pass_obj
def fleet_delete(obj, fleet_id, timeout):
    """Delete a fleet and wait until it is terminated."""
    try:
        obj["lifecycle"].delete_fleet(fleet_id, timeout=timeout)
    except WaitError as exc:
        _fail(exc)
    click.echo(f"{fleet_id} TERMINATED")


@main.group()
def build():
    """Game server builds."""


@build.command("wait")
@click.argument("build_id")
@click.option("--timeout", type=float, default=BUILD_READY_TIMEOUT, show_default=True)
@click.pass_obj
def build_wait(obj, build_id, timeout):
    """Wait until a build is READY."""
    try:
        result = obj["lifecycle"].wait_for_build_ready(build_id, timeout=timeout)
    except WaitError as exc:
        _fail(exc)
    click.echo(f"{build_id} {result.status}")


@main.group()
def ports():
    """Fleet inbound port settings."""


@ports.command("plan")
@click.argument("fleet_id")
@rule_option
@format_option
@click.pass_obj
def ports_plan(obj, fleet_id, rules, output_format):
    """Show which rules would be authorized and revoked."""
    plan = obj["lifecycle"].plan_port_settings(fleet_id, rules)
    click.echo(FORMATTERS[output_format](fleet_id, plan_changes(plan), dry_run=True))


@ports.command("sync")
@click.argument("fleet_id")
@rule_option
@format_option
@click.pass_obj
def ports_sync(obj, fleet_id, rules, output_format):
    """Authorize and revoke rules until the fleet matches the given ones."""
    report = obj["lifecycle"].sync_port_settings(fleet_id, rules)
    click.echo(FORMATTERS[output_format](fleet_id, report.applied, report.failed))
    sys.exit(0 if report.complete else 1)
