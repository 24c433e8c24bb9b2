"""Output formatters for port settings plans and apply reports."""

import json

from rich.console import Console
from rich.markup import escape
from rich.text import Text
from rich.tree import Tree

from fleetsync.models import ChangeAction, FailedChange, PortChange

ACTION_COLORS = {
    ChangeAction.AUTHORIZE: "green",
    ChangeAction.REVOKE: "red",
}


def _ports(change: PortChange) -> str:
    p = change.permission
    return str(p.from_port) if p.from_port == p.to_port else f"{p.from_port}-{p.to_port}"


def _escape_md_cell(value: str) -> str:
    """Escape characters that break markdown table cells."""
    return value.replace("|", "\\|").replace("\n", " ")


def _change_dict(change: PortChange) -> dict:
    return {
        "action": change.action.value,
        "protocol": change.permission.protocol.value,
        "from_port": change.permission.from_port,
        "to_port": change.permission.to_port,
        "ip_range": change.permission.ip_range,
    }


def _summary(changes: list[PortChange], failed: list[FailedChange]) -> dict[str, int]:
    return {
        "authorize": sum(1 for c in changes if c.action == ChangeAction.AUTHORIZE),
        "revoke": sum(1 for c in changes if c.action == ChangeAction.REVOKE),
        "failed": len(failed),
    }


def format_json(
    fleet_id: str,
    changes: list[PortChange],
    failed: list[FailedChange] | None = None,
    *,
    dry_run: bool = False,
) -> str:
    """Format changes as JSON."""
    failed = failed or []
    return json.dumps(
        {
            "fleet_id": fleet_id,
            "dry_run": dry_run,
            "summary": _summary(changes, failed),
            "changes": [_change_dict(c) for c in changes],
            "failed": [{**_change_dict(f.change), "error": f.error} for f in failed],
        },
        indent=2,
    )


def format_markdown(
    fleet_id: str,
    changes: list[PortChange],
    failed: list[FailedChange] | None = None,
    *,
    dry_run: bool = False,
) -> str:
    """Format changes as Markdown."""
    failed = failed or []
    if not changes and not failed:
        return "No port settings changes."

    summary = _summary(changes, failed)
    verb = "Planned" if dry_run else "Applied"
    lines = [
        f"## {verb} port settings for {_escape_md_cell(fleet_id)} — "
        f"{summary['authorize']} to authorize, {summary['revoke']} to revoke",
        "",
        "| Action | Protocol | Ports | IP range | Result |",
        "|--------|----------|-------|----------|--------|",
    ]

    result = "planned" if dry_run else "ok"
    rows = [(c, result) for c in changes] + [(f.change, f"failed: {f.error}") for f in failed]
    for change, outcome in rows:
        lines.append(
            f"| {change.action.value} | {change.permission.protocol.value} "
            f"| {_ports(change)} | `{change.permission.ip_range}` "
            f"| {_escape_md_cell(outcome)} |"
        )

    lines.append("")
    return "\n".join(lines)


def format_table(
    fleet_id: str,
    changes: list[PortChange],
    failed: list[FailedChange] | None = None,
    *,
    dry_run: bool = False,
) -> str:
    """Format changes as a Rich tree view, returned as a string."""
    failed = failed or []
    if not changes and not failed:
        return "No port settings changes."

    console = Console(record=True, width=120)
    label = "Planned changes" if dry_run else "Applied changes"
    tree = Tree(f"[bold]{label}[/bold] — {escape(fleet_id)}")

    for change in changes:
        color = ACTION_COLORS[change.action]
        tree.add(
            Text.from_markup(
                f"[{color}]{change.action.value}[/{color}] "
                f"{change.permission.protocol.value} {_ports(change)} "
                f"from {change.permission.ip_range}"
            )
        )

    for f in failed:
        tree.add(
            Text.from_markup(
                f"[bold red]FAILED[/bold red] {f.change.action.value} "
                f"{f.change.permission.protocol.value} {_ports(f.change)} "
                f"from {f.change.permission.ip_range}: {escape(f.error)}"
            )
        )

    console.print(tree)
    return console.export_text()
