"""
Console output for safe-gh.

Renders human-facing views with Rich: the loaded configuration as one
table per resource, and the results of `safe-gh doctor`.

Machine-facing output (every operation command) is JSON and lives in
safegh.report.json.
"""

from dataclasses import dataclass
from typing import Any

from rich.console import Console
from rich.table import Table

from safegh.schema import Config, ResourceType, Rule


# Status icons
ICON_OK = "[green]✓[/green]"
ICON_FAIL = "[red]✗[/red]"


@dataclass
class DoctorCheck:
    """One line of `safe-gh doctor` output."""

    name: str
    ok: bool
    value: str = ""
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "ok": self.ok, "value": self.value, "message": self.message}


def print_config(console: Console, config: Config, path: str) -> None:
    """
    Print the loaded configuration.

    Args:
        console: Rich Console to print to
        config: Loaded configuration
        path: Where the configuration was loaded from
    """
    console.print(f"[bold]Config[/bold] [dim]{path}[/dim]")
    console.print(f"  selfUserId: {config.self_user_id or '[yellow](not set)[/yellow]'}")
    console.print(f"  defaultPermission: {config.default_permission.value}")
    owners = ", ".join(config.allowed_owners) if config.allowed_owners else "(any)"
    console.print(f"  allowedOwners: {owners}")
    marker = "enabled" if config.ai_marker.enabled else "disabled"
    console.print(f"  aiMarker: {marker}")
    console.print()

    for resource in ResourceType:
        rules = config.rules_for(resource)
        console.print(_rules_table(resource, rules))
        console.print()


def _rules_table(resource: ResourceType, rules: list[Rule]) -> Table:
    table = Table(title=f"{resource.value} rules", title_justify="left")
    table.add_column("#", style="dim", width=3)
    table.add_column("Name", style="cyan")
    table.add_column("Operations")
    table.add_column("Condition")
    table.add_column("Enforce")

    if not rules:
        table.add_row("", "[dim](none)[/dim]", "", "", "")
        return table

    for index, rule in enumerate(rules, start=1):
        enforce = getattr(rule, "enforce", None)
        table.add_row(
            str(index),
            rule.name,
            ", ".join(op.value for op in rule.operations),
            _compact(rule.condition),
            _compact(enforce),
        )
    return table


def _compact(model: Any) -> str:
    """One-line rendering of an optional model, camelCase keys."""
    if model is None:
        return "[dim]-[/dim]"
    data = model.model_dump(mode="json", by_alias=True, exclude_none=True)
    if not data:
        return "[dim]-[/dim]"
    return ", ".join(f"{key}={value}" for key, value in data.items())


def print_doctor(console: Console, version: str, checks: list[DoctorCheck]) -> None:
    """Print doctor results with one status line per check."""
    console.print(f"[bold]safe-gh doctor[/bold] v{version}")
    console.print()

    for check in checks:
        icon = ICON_OK if check.ok else ICON_FAIL
        if check.ok:
            console.print(f"{icon} {check.name}: [dim]{check.value}[/dim] - {check.message}")
        else:
            console.print(f"{icon} {check.name}: [red]{check.message}[/red]")

    console.print()
    if all(check.ok for check in checks):
        console.print("[green]All checks passed.[/green]")
    else:
        console.print("[yellow]Some checks failed.[/yellow]")
