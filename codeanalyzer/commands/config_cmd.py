"""CLI commands for configuration management."""
from __future__ import annotations

import typer
from rich.markup import escape

from codeanalyzer import ui
from codeanalyzer.error_handler import handle_errors
from codeanalyzer.ui import console

app = typer.Typer(
    name="config",
    help="Manage codeanalyzer configuration.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _flatten(data: dict, prefix: str = "") -> list[tuple[str, object]]:
    rows = []
    for key, value in data.items():
        full_key = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict):
            rows.extend(_flatten(value, full_key))
        else:
            rows.append((full_key, value))
    return rows


@app.command()
@handle_errors
def show():
    """Display the resolved configuration (all layers merged)."""
    from rich.panel import Panel
    from rich.table import Table

    from codeanalyzer.core.config_service import get_config_service

    info = get_config_service().show()

    if ui.is_json():
        ui.print_json_output(info)
        return

    sources = info["sources"]
    console.print(Panel(
        f"Global:  {sources['global_config'] or '[dim]not found[/dim]'}\n"
        f"Project: {sources['project_config'] or '[dim]not found[/dim]'}",
        title="Config Sources",
        border_style="cyan",
    ))

    for section in ("analysis", "criteria", "providers"):
        values = info["resolved"].get(section, {})
        if not values:
            continue
        table = Table(title=section.capitalize(), show_header=True)
        table.add_column("Setting", style="cyan")
        table.add_column("Value")
        for key, val in _flatten(values):
            if isinstance(val, list):
                val = ", ".join(str(v) for v in val)
            table.add_row(key, escape(str(val)) if val not in ("", None) else "[dim]not set[/dim]")
        console.print(table)


@app.command("set")
@handle_errors
def set_value(
    key: str = typer.Argument(..., help="Config key in dotted notation (e.g. providers.default)"),
    value: str = typer.Argument(..., help="Value to set (comma-separated for lists)"),
):
    """Set a global configuration value."""
    from codeanalyzer.core.config_service import get_config_service

    get_config_service().set_global(key, value)
    console.print(f"[green]Set[/green] {key} = {escape(value)}")


@app.command()
@handle_errors
def path():
    """Show config file locations."""
    from codeanalyzer.core.config_service import get_config_service

    paths = get_config_service().config_paths()
    if ui.is_json():
        ui.print_json_output(paths)
        return
    for name, location in paths.items():
        console.print(f"[cyan]{name}:[/cyan] {escape(location)}")


@app.command()
@handle_errors
def init():
    """Create a .codeanalyzer.toml in the current directory."""
    from codeanalyzer.core.config_service import get_config_service

    try:
        created = get_config_service().init_project_config()
    except FileExistsError as e:
        console.print(f"[yellow]{escape(str(e))}[/yellow]")
        raise typer.Exit(1)
    console.print(f"[green]Created[/green] {created}")
