"""Criteria template management commands."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
import yaml
from rich.markup import escape
from rich.table import Table

from codeanalyzer import ui
from codeanalyzer.error_handler import handle_errors
from codeanalyzer.errors import CriteriaValidationError
from codeanalyzer.ui import console

app = typer.Typer(no_args_is_help=True)


def _service():
    from codeanalyzer.core.criteria_service import CriteriaService
    return CriteriaService()


def parse_rule(text: str) -> dict:
    """Parse ``"property operator [value]"`` into a rule mapping.

    Raises:
        CriteriaValidationError: If the text has fewer than two parts.
    """
    parts = text.split(None, 2)
    if len(parts) < 2:
        raise CriteriaValidationError(
            [f"Rule '{text}' must look like 'property operator [value]'"]
        )
    rule = {"property": parts[0], "operator": parts[1]}
    if len(parts) == 3:
        rule["value"] = parts[2]
    return rule


def _data_from_options(
    file: Optional[Path],
    name: Optional[str],
    description: Optional[str],
    rules: Optional[list[str]],
    category: Optional[str],
    priority: Optional[int],
    criteria_type: Optional[str],
) -> dict:
    data: dict = {}
    if file is not None:
        with open(file, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise CriteriaValidationError([f"{file} must contain a mapping"])
        data.update(loaded)
    if name is not None:
        data["name"] = name
    if description is not None:
        data["description"] = description
    if rules:
        data["rules"] = [parse_rule(r) for r in rules]
    if category is not None:
        data["category"] = category
    if priority is not None:
        data["priority"] = priority
    if criteria_type is not None:
        data["type"] = criteria_type
    return data


@app.command("list")
@handle_errors
def list_criteria(
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Only this category"),
    active_only: bool = typer.Option(False, "--active", help="Hide inactive templates"),
    user: Optional[str] = typer.Option(None, "--user", "-u", help="Only criteria created by this user"),
):
    """List stored criteria templates."""
    svc = _service()
    templates = svc.user_criteria(user) if user else svc.list_templates(include_inactive=not active_only)
    if category:
        templates = [t for t in templates if t.category.lower() == category.lower()]
    if active_only:
        templates = [t for t in templates if t.is_active]

    if ui.is_json():
        ui.print_json_output([t.to_dict() for t in templates])
        return

    if not templates:
        console.print("[yellow]No criteria found.[/yellow]")
        console.print("Run: codeanalyzer criteria init")
        return

    table = Table(title="Criteria Templates")
    table.add_column("ID", style="bold cyan")
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Type")
    table.add_column("Priority", justify="center")
    table.add_column("Rules", justify="center")
    table.add_column("Active", justify="center")
    for t in templates:
        table.add_row(
            t.id, escape(t.name), escape(t.category), t.type.value,
            str(t.priority), str(len(t.rules)), "yes" if t.is_active else "[dim]no[/dim]",
        )
    console.print(table)


@app.command("show")
@handle_errors
def show_criteria(criteria_id: str = typer.Argument(..., help="Criteria template id")):
    """Show one criteria template with its rules."""
    t = _service().get_template(criteria_id)

    if ui.is_json():
        ui.print_json_output(t.to_dict())
        return

    console.print(f"\n[bold cyan]{escape(t.name)}[/bold cyan] [dim]({t.id})[/dim]")
    console.print(f"[dim]{escape(t.description)}[/dim]\n")
    console.print(f"  Category: {escape(t.category)}   Priority: {t.priority}   Type: {t.type.value}")
    console.print(f"  Created by {escape(t.created_by)} at {t.created_at}, updated {t.updated_at}\n")
    for i, rule in enumerate(t.rules, 1):
        value = f" {rule.value}" if rule.value else ""
        console.print(f"  [bold]{i}.[/bold] {escape(rule.property)} {rule.operator}{escape(value)}")
        if rule.error_message:
            console.print(f"     [dim]On failure: {escape(rule.error_message)}[/dim]")


@app.command("add")
@handle_errors
def add_criteria(
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="YAML file with the template"),
    name: Optional[str] = typer.Option(None, "--name", "-n"),
    description: Optional[str] = typer.Option(None, "--description", "-d"),
    rules: Optional[list[str]] = typer.Option(
        None, "--rule", "-r", help="'property operator [value]' (repeatable)",
    ),
    category: Optional[str] = typer.Option(None, "--category", "-c"),
    priority: Optional[int] = typer.Option(None, "--priority"),
    criteria_type: Optional[str] = typer.Option(None, "--type", "-t", help="Structural or FullContent"),
    user: Optional[str] = typer.Option(None, "--user", "-u", help="Record as a user's custom criterion"),
):
    """Create a criteria template."""
    data = _data_from_options(file, name, description, rules, category, priority, criteria_type)
    svc = _service()
    t = svc.add_user_criteria(user, data) if user else svc.create_template(data)

    if ui.is_json():
        ui.print_json_output(t.to_dict())
        return
    console.print(f"[green]Created[/green] {escape(t.name)} [dim]({t.id})[/dim]")


@app.command("update")
@handle_errors
def update_criteria(
    criteria_id: str = typer.Argument(..., help="Criteria template id"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="YAML file with replacement fields"),
    name: Optional[str] = typer.Option(None, "--name", "-n"),
    description: Optional[str] = typer.Option(None, "--description", "-d"),
    rules: Optional[list[str]] = typer.Option(None, "--rule", "-r", help="Replaces all rules (repeatable)"),
    category: Optional[str] = typer.Option(None, "--category", "-c"),
    priority: Optional[int] = typer.Option(None, "--priority"),
    criteria_type: Optional[str] = typer.Option(None, "--type", "-t"),
    active: Optional[bool] = typer.Option(None, "--active/--inactive"),
    user: Optional[str] = typer.Option(None, "--user", "-u", help="Only update if created by this user"),
):
    """Update fields of a criteria template."""
    data = _data_from_options(file, name, description, rules, category, priority, criteria_type)
    if active is not None:
        data["is_active"] = active
    svc = _service()
    t = svc.update_user_criteria(user, criteria_id, data) if user else svc.update_template(criteria_id, data)

    if ui.is_json():
        ui.print_json_output(t.to_dict())
        return
    console.print(f"[green]Updated[/green] {escape(t.name)} [dim]({t.id})[/dim]")


@app.command("delete")
@handle_errors
def delete_criteria(
    criteria_id: str = typer.Argument(..., help="Criteria template id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    user: Optional[str] = typer.Option(None, "--user", "-u", help="Only delete if created by this user"),
):
    """Delete a criteria template."""
    svc = _service()
    t = svc.get_template(criteria_id)
    if not yes and not ui.is_json():
        typer.confirm(f"Delete '{t.name}' ({t.id})?", abort=True)
    if user:
        svc.delete_user_criteria(user, criteria_id)
    else:
        svc.delete_template(criteria_id)

    if ui.is_json():
        ui.print_json_output({"deleted": criteria_id})
        return
    console.print(f"[green]Deleted[/green] {escape(t.name)}")


@app.command("duplicate")
@handle_errors
def duplicate_criteria(criteria_id: str = typer.Argument(..., help="Criteria template id")):
    """Copy a criteria template under a new id."""
    t = _service().duplicate_template(criteria_id)
    if ui.is_json():
        ui.print_json_output(t.to_dict())
        return
    console.print(f"[green]Created[/green] {escape(t.name)} [dim]({t.id})[/dim]")


@app.command("categories")
@handle_errors
def list_categories():
    """List categories with their templates."""
    groups = _service().categories()

    if ui.is_json():
        ui.print_json_output([
            {"name": g.name, "count": g.count, "templates": [t.id for t in g.templates]}
            for g in groups
        ])
        return

    if not groups:
        console.print("[yellow]No criteria found.[/yellow]")
        return
    for g in groups:
        console.print(f"[bold]{escape(g.name)}[/bold] [dim]({g.count})[/dim]")
        for t in g.templates:
            console.print(f"  {ui.status_icon('bullet')} {escape(t.name)} [dim]{t.id}[/dim]")


@app.command("init")
@handle_errors
def init_criteria(
    overwrite: bool = typer.Option(False, "--overwrite", help="Replace built-in templates that already exist"),
):
    """Install the built-in criteria templates."""
    installed = _service().install_defaults(overwrite=overwrite)
    if ui.is_json():
        ui.print_json_output([t.id for t in installed])
        return
    if not installed:
        console.print("[dim]Built-in criteria already installed.[/dim]")
        return
    console.print(f"[green]Installed {len(installed)} criteria template(s)[/green]")
    for t in installed:
        console.print(f"  {ui.status_icon('bullet')} {escape(t.name)} [dim]{t.id}[/dim]")
