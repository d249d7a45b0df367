"""CLI entry point for accesstree.

Invoked as::

    accesstree [--config access.yaml] COMMAND [ARGS]...

or during development::

    python -m accesstree.cli.main

Commands
--------
- init          Write a starter access.yaml and seed the access database
- resolve       Show the canonical form of a path
- check         Decide whether a principal holds a level at a path
- level         Show the effective level at a path and which tree decided
- grant         Grant (or with level ``none`` remove) access
- group add     Add a player to a group
- group remove  Remove a player from a group
- groups        List all groups, or the groups of one principal
- show          List the access trees of a principal
- reset         Reset a principal to default access
- audit show    Display recent audit entries
- version       Show version information

Exit codes: 0 success, 1 refused or denied, 2 configuration or storage failure.
"""
from __future__ import annotations

import sys
from pathlib import Path

import click
import yaml
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from accesstree.audit.access_log import AccessAuditLog, NullAuditLog
from accesstree.audit.logger import AuditLogger
from accesstree.config.config_loader import AccessConfig, ConfigError, ConfigLoader
from accesstree.display.renderer import TreeRenderer
from accesstree.engine.results import ListingMode
from accesstree.engine.service import AuthorizationService, UnknownPrincipalError
from accesstree.principals.database import AuthorizationDatabase
from accesstree.storage.store import PersistenceError, StoreFormatError, YamlFileStore
from accesstree.tree.levels import AccessLevel
from accesstree.tree.resolver import InvalidPathError, PathResolver

console = Console()
err_console = Console(stderr=True)

_DEFAULT_CONFIG = Path("access.yaml")

EXIT_REFUSED = 1
EXIT_FAILURE = 2


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _parse_level(ctx: click.Context, param: click.Parameter, value: str) -> AccessLevel:
    try:
        return AccessLevel.parse(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc


def _config(ctx: click.Context) -> AccessConfig:
    config_path: Path = ctx.obj["config_path"]
    loader = ConfigLoader()
    try:
        return loader.load(config_path) if config_path.exists() else loader.defaults()
    except ConfigError as exc:
        err_console.print(f"[red]Invalid configuration:[/red] {exc}")
        sys.exit(EXIT_FAILURE)


def _service(ctx: click.Context, actor: str | None = None) -> AuthorizationService:
    config = _config(ctx)
    rules = config.principals.to_rules()
    directory = config.identity.to_directory(current=actor)
    if config.audit.enabled:
        audit = AccessAuditLog(config.audit.log_path, config.audit.session_id, rules)
    else:
        audit = NullAuditLog()
    try:
        return AuthorizationService(
            store=YamlFileStore(config.store.path, rules),
            identity=directory,
            affiliations=directory,
            audit=audit,
            rules=rules,
            tiers=config.tiers.to_policy(),
            layout=config.layout.to_layout(),
        )
    except StoreFormatError as exc:
        err_console.print(f"[red]Unreadable access database:[/red] {exc}")
        sys.exit(EXIT_FAILURE)
    except PersistenceError as exc:
        err_console.print(f"[bold red]PANIC:[/bold red] {exc}")
        sys.exit(EXIT_FAILURE)


def _persistence_failure(exc: PersistenceError) -> None:
    err_console.print(f"[bold red]PANIC:[/bold red] {exc}")
    err_console.print("[yellow]The change is applied in memory only.[/yellow]")
    sys.exit(EXIT_FAILURE)


# ---------------------------------------------------------------------------
# Root command group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="accesstree")
@click.option(
    "--config",
    "-c",
    "config_path",
    default=str(_DEFAULT_CONFIG),
    show_default=True,
    type=click.Path(dir_okay=False),
    help="Path to access.yaml.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: str) -> None:
    """accesstree CLI: path-based access trees for principals and groups."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config_path)


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from accesstree import __version__

    console.print(
        Panel(
            f"[bold]accesstree[/bold]  v[cyan]{__version__}[/cyan]\n"
            "Hierarchical path-based authorization engine.",
            title="Version",
            border_style="blue",
        )
    )


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------


@cli.command(name="init")
@click.option("--force", is_flag=True, help="Overwrite an existing config and database.")
@click.pass_context
def init_command(ctx: click.Context, force: bool) -> None:
    """Write a starter access.yaml and seed the access database."""
    config_path: Path = ctx.obj["config_path"]
    if config_path.exists() and not force:
        err_console.print(f"[red]Refusing to overwrite[/red] {config_path} (use --force).")
        sys.exit(EXIT_REFUSED)

    config = ConfigLoader().defaults()
    starter: dict[str, object] = {
        "version": "1",
        "store": {"path": str(config.store.path)},
        "audit": {"enabled": True, "log_path": str(config.audit.log_path)},
        "layout": config.layout.model_dump(),
        "principals": config.principals.model_dump(),
        "tiers": config.tiers.model_dump(),
        "identity": {"players": {"admin": {"level": config.tiers.archwizard_level}}},
    }
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w", encoding="utf-8") as fh:
        yaml.safe_dump(starter, fh, default_flow_style=False, sort_keys=False, allow_unicode=True)

    store = YamlFileStore(config.store.path, config.principals.to_rules())
    seeded = False
    if force or not store.path.exists():
        try:
            store.save(AuthorizationDatabase.seeded(config.principals.to_rules()))
        except PersistenceError as exc:
            _persistence_failure(exc)
        seeded = True

    console.print(f"[green]Initialised[/green] access config: [bold]{config_path}[/bold]")
    if seeded:
        console.print(f"  Seeded access database: [cyan]{store.path}[/cyan]")
    else:
        console.print(f"  Kept existing access database: [cyan]{store.path}[/cyan]")


# ---------------------------------------------------------------------------
# resolve / check / level
# ---------------------------------------------------------------------------


@cli.command(name="resolve")
@click.argument("path")
@click.option("--as", "principal", required=True, help="Principal the path is resolved for.")
@click.option("--cwd", default=None, help="Working directory for relative paths.")
@click.option("--dots", is_flag=True, help="Keep '.' segments.")
@click.pass_context
def resolve_command(ctx: click.Context, path: str, principal: str, cwd: str | None, dots: bool) -> None:
    """Show the canonical form of PATH."""
    config = _config(ctx)
    resolver = PathResolver(
        config.identity.to_directory(current=principal),
        config.layout.domain_root,
        config.layout.player_root,
    )
    try:
        segments = resolver.resolve(path, acting=principal, cwd=cwd, allow_dots=dots)
    except InvalidPathError as exc:
        err_console.print(f"[red]{exc}[/red]")
        sys.exit(EXIT_REFUSED)
    console.print("/" + "/".join(segments), markup=False, highlight=False)


@cli.command(name="check")
@click.argument("path")
@click.option("--as", "principal", required=True, help="Principal to check.")
@click.option(
    "--level", "required", required=True, callback=_parse_level,
    help="Required level (read, grant-read, write, grant-write, grant).",
)
@click.option("--cwd", default=None, help="Working directory for relative paths.")
@click.option("--session", "own_session", is_flag=True, help="Request comes from the principal's own session.")
@click.pass_context
def check_command(
    ctx: click.Context,
    path: str,
    principal: str,
    required: AccessLevel,
    cwd: str | None,
    own_session: bool,
) -> None:
    """Decide whether a principal holds at least LEVEL at PATH."""
    service = _service(ctx, actor=principal)
    try:
        result = service.check(path, principal, required, cwd=cwd, own_session=own_session)
    except PersistenceError as exc:
        _persistence_failure(exc)

    status_str = "[green]ALLOWED[/green]" if result.allowed else "[red]DENIED[/red]"
    console.print(Panel(status_str, title="Access Check Result", border_style="blue"))
    console.print(f"  Path: {result.path or path}", markup=False)
    console.print(f"  Required: [cyan]{result.required.display_name}[/cyan]")
    console.print(f"  Effective: [cyan]{result.level.display_name}[/cyan]")
    if result.source is not None:
        console.print(f"  Decided by: [magenta]{result.source}[/magenta]")
    sys.exit(0 if result.allowed else EXIT_REFUSED)


@cli.command(name="level")
@click.argument("path")
@click.option("--as", "principal", required=True, help="Principal to evaluate.")
@click.option("--cwd", default=None, help="Working directory for relative paths.")
@click.pass_context
def level_command(ctx: click.Context, path: str, principal: str, cwd: str | None) -> None:
    """Show the effective level of a principal at PATH."""
    service = _service(ctx, actor=principal)
    try:
        result = service.effective_level(path, principal, cwd=cwd)
    except InvalidPathError as exc:
        err_console.print(f"[red]{exc}[/red]")
        sys.exit(EXIT_REFUSED)
    except PersistenceError as exc:
        _persistence_failure(exc)

    table = Table(box=box.SIMPLE, show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="bold")
    table.add_row("Path", "/" + "/".join(result.segments))
    table.add_row("Principal", principal)
    table.add_row("Level", result.level.display_name)
    table.add_row("Source", result.source if result.source is not None else "(none)")
    console.print(table)


# ---------------------------------------------------------------------------
# grant
# ---------------------------------------------------------------------------


@cli.command(name="grant")
@click.argument("target")
@click.argument("level", callback=_parse_level)
@click.argument("path")
@click.option("--actor", required=True, help="Principal performing the grant.")
@click.option("--cwd", default=None, help="Working directory for relative paths.")
@click.pass_context
def grant_command(
    ctx: click.Context,
    target: str,
    level: AccessLevel,
    path: str,
    actor: str,
    cwd: str | None,
) -> None:
    """Grant TARGET access LEVEL at PATH (LEVEL 'none' removes the entry)."""
    service = _service(ctx, actor=actor)
    try:
        result = service.grant(actor, target, path, level, cwd=cwd)
    except PersistenceError as exc:
        _persistence_failure(exc)

    if not result:
        err_console.print(f"[red]Refused ({result.error.value}):[/red] {result.message}")
        sys.exit(EXIT_REFUSED)
    if result.outcome is not None and result.outcome.value.endswith("removed"):
        console.print(f"[green]Removed[/green] access of [bold]{target}[/bold] at {result.path}")
    else:
        console.print(
            f"[green]Granted[/green] [bold]{target}[/bold] "
            f"[cyan]{level.display_name}[/cyan] at {result.path}"
        )
    if result.outcome is not None:
        console.print(f"  Outcome: [cyan]{result.outcome.value}[/cyan]")


# ---------------------------------------------------------------------------
# group / groups
# ---------------------------------------------------------------------------


@cli.group(name="group")
def group_group() -> None:
    """Group membership commands."""


def _membership(ctx: click.Context, actor: str, target: str, group: str, add: bool) -> None:
    service = _service(ctx, actor=actor)
    try:
        result = service.set_group_membership(actor, target, group, add=add)
    except PersistenceError as exc:
        _persistence_failure(exc)
    if not result:
        err_console.print(f"[red]Refused ({result.error.value}):[/red] {result.message}")
        sys.exit(EXIT_REFUSED)
    verb = "Added" if add else "Removed"
    console.print(f"[green]{verb}[/green] [bold]{target}[/bold] {'to' if add else 'from'} {group}")
    console.print(f"  Groups now: [cyan]{', '.join(result.groups) or '(none)'}[/cyan]")


@group_group.command(name="add")
@click.argument("target")
@click.argument("group")
@click.option("--actor", required=True, help="Principal performing the change.")
@click.pass_context
def group_add_command(ctx: click.Context, target: str, group: str, actor: str) -> None:
    """Add player TARGET to GROUP."""
    _membership(ctx, actor, target, group, add=True)


@group_group.command(name="remove")
@click.argument("target")
@click.argument("group")
@click.option("--actor", required=True, help="Principal performing the change.")
@click.pass_context
def group_remove_command(ctx: click.Context, target: str, group: str, actor: str) -> None:
    """Remove player TARGET from GROUP."""
    _membership(ctx, actor, target, group, add=False)


@cli.command(name="groups")
@click.argument("name", required=False)
@click.pass_context
def groups_command(ctx: click.Context, name: str | None) -> None:
    """List every group, or the ordered groups of NAME."""
    service = _service(ctx)
    try:
        groups = service.groups_of(name) if name else service.database.all_groups()
    except PersistenceError as exc:
        _persistence_failure(exc)

    title = f"Groups of {name}" if name else "All Groups"
    table = Table(title=title, box=box.SIMPLE)
    table.add_column("#", style="dim")
    table.add_column("Group", style="cyan")
    table.add_column("Exists")
    for number, group in enumerate(groups, start=1):
        exists = "[green]yes[/green]" if group in service.database else "[yellow]no[/yellow]"
        table.add_row(str(number), group, exists)
    console.print(table)
    if not groups:
        console.print("[yellow]No groups.[/yellow]")


# ---------------------------------------------------------------------------
# show
# ---------------------------------------------------------------------------


@cli.command(name="show")
@click.argument("name")
@click.option(
    "--mode",
    type=click.Choice([m.value for m in ListingMode]),
    default=None,
    help="detailed (every tree), effective (merged), or raw (stored form).",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["rich", "plain", "json"]),
    default="rich",
    show_default=True,
    help="Output format.",
)
@click.pass_context
def show_command(ctx: click.Context, name: str, mode: str | None, output_format: str) -> None:
    """List the access trees that apply to NAME."""
    service = _service(ctx)
    try:
        listing = service.list_effective_tree(name, ListingMode(mode) if mode else None)
    except UnknownPrincipalError as exc:
        err_console.print(f"[red]{exc}[/red]")
        if exc.name != exc.name.lower():
            err_console.print("Archwizards can create a group: accesstree grant <Group> <level> <path>")
        sys.exit(EXIT_REFUSED)
    except PersistenceError as exc:
        _persistence_failure(exc)

    renderer = TreeRenderer()
    if output_format == "json":
        click.echo(renderer.render_json(listing))
    elif output_format == "plain":
        click.echo(renderer.render_plain(listing))
    else:
        click.echo(renderer.render_rich(listing), nl=False)


# ---------------------------------------------------------------------------
# reset
# ---------------------------------------------------------------------------


@cli.command(name="reset")
@click.argument("target")
@click.option("--actor", required=True, help="Principal performing the reset.")
@click.pass_context
def reset_command(ctx: click.Context, target: str, actor: str) -> None:
    """Reset TARGET to default access privileges."""
    service = _service(ctx, actor=actor)
    try:
        result = service.reset_principal(actor, target)
    except PersistenceError as exc:
        _persistence_failure(exc)
    if not result:
        err_console.print(f"[red]Refused ({result.error.value}):[/red] {result.message}")
        sys.exit(EXIT_REFUSED)
    console.print(f"[green]Reset[/green] [bold]{target}[/bold] to default access.")


# ---------------------------------------------------------------------------
# audit group
# ---------------------------------------------------------------------------


@cli.group(name="audit")
def audit_group() -> None:
    """Audit trail commands."""


@audit_group.command(name="show")
@click.option("--last", "-n", default=20, show_default=True, type=int, help="Number of recent entries to show.")
@click.option("--event", default=None, help="Only show this event type.")
@click.pass_context
def audit_show_command(ctx: click.Context, last: int, event: str | None) -> None:
    """Show recent audit log entries."""
    config = _config(ctx)
    audit = AuditLogger(config.audit.log_path)
    records = audit.query(event=event) if event else audit.read_all()
    records = records[-last:] if last > 0 else []

    if not records:
        console.print("[yellow]No audit entries found.[/yellow]")
        return

    table = Table(title=f"Last {len(records)} Audit Events", box=box.SIMPLE)
    table.add_column("Timestamp", style="dim", no_wrap=True)
    table.add_column("Event", style="cyan")
    table.add_column("Principal", style="magenta")
    table.add_column("Path")
    table.add_column("Details")

    for record in records:
        ts = str(record.get("timestamp", ""))[:19].replace("T", " ")
        details = ", ".join(
            f"{k}={v}"
            for k, v in record.items()
            if k in ("actor", "level", "required", "actual")
        )
        table.add_row(
            ts,
            str(record.get("event", "")),
            str(record.get("principal", "")),
            str(record.get("path", "")),
            details,
        )

    console.print(table)
    console.print(f"  Total audit records: [cyan]{audit.count()}[/cyan]")


if __name__ == "__main__":
    cli()
