#!/usr/bin/env python3
"""
codeanalyzer: classify a project's files into architectural roles,
check them against quantitative criteria, and optionally ask an AI model
for a narrative review.
"""
import logging
import os
import signal
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

import typer
import yaml
from rich.markup import escape

from codeanalyzer import ui
from codeanalyzer.error_handler import handle_errors
from codeanalyzer.ui import console

app = typer.Typer(
    name="codeanalyzer",
    help="Project structure analysis & criteria checking CLI.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

from codeanalyzer.commands import config_cmd, criteria_cmd  # noqa: E402

app.add_typer(criteria_cmd.app, name="criteria", help="Manage stored criteria", rich_help_panel="Management")
app.add_typer(config_cmd.app, name="config", help="Manage configuration", rich_help_panel="Management")

# Env var that carries --model for each provider
MODEL_ENV_VARS = {
    "ollama": "OLLAMA_MODEL",
    "anthropic": "ANTHROPIC_MODEL",
}


def _configure_logging(verbose: bool) -> None:
    from rich.logging import RichHandler

    root = logging.getLogger("codeanalyzer")
    root.handlers.clear()
    if verbose:
        handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        root.addHandler(handler)
        root.setLevel(logging.DEBUG)
    else:
        root.setLevel(logging.WARNING)


@app.callback()
def main_callback(
    provider: str = typer.Option(
        None, "--provider", "-P",
        help="AI provider to use (ollama, anthropic). Overrides CODEANALYZER_PROVIDER.",
    ),
    model: str = typer.Option(
        None, "--model", "-m",
        help="AI model to use. Overrides OLLAMA_MODEL / ANTHROPIC_MODEL.",
    ),
    plain: bool = typer.Option(False, "--plain", help="Plain text output (no colors or panels)."),
    json_output: bool = typer.Option(False, "--json", help="Machine-readable JSON output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging."),
):
    """Project structure analysis & criteria checking CLI."""
    _configure_logging(verbose)
    ui.set_plain_mode(plain)
    ui.set_json_mode(json_output)

    if provider:
        os.environ["CODEANALYZER_PROVIDER"] = provider
    if model:
        from codeanalyzer.core.config_service import get_config_service

        provider_name = provider or get_config_service().get_provider_name()
        os.environ[MODEL_ENV_VARS.get(provider_name, f"{provider_name.upper()}_MODEL")] = model

    if provider or model:
        from codeanalyzer.core.config_service import reset_config_service
        from codeanalyzer.providers import reset_provider

        reset_config_service()
        reset_provider()


def _load_criteria_file(path: Path) -> list:
    """Read criteria from a YAML/JSON file (a list, or a mapping with ``criteria``)."""
    from codeanalyzer.criteria.models import AnalysisCriteria
    from codeanalyzer.errors import ConfigError

    if not path.is_file():
        raise ConfigError(f"Criteria file not found: {path}")
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or []
    if isinstance(data, dict):
        data = data.get("criteria", [])
    if not isinstance(data, list):
        raise ConfigError(f"{path} must contain a list of criteria")
    return [AnalysisCriteria.from_dict(item) for item in data]


@contextmanager
def _cancel_on_sigint(token):
    """While active, the first Ctrl-C cancels the walk instead of killing the process."""
    previous = signal.getsignal(signal.SIGINT)

    def _cancel(signum, frame):
        token.cancel()
        signal.signal(signal.SIGINT, previous)

    try:
        signal.signal(signal.SIGINT, _cancel)
    except ValueError:
        # Not on the main thread (e.g. embedded); Ctrl-C keeps its default behaviour
        yield
        return
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def _print_structure(structure, show_files: bool = False) -> None:
    from rich.panel import Panel
    from rich.table import Table

    console.print(Panel(
        f"[bold]{escape(structure.root_path)}[/bold]\n"
        f"{structure.total_files} files, {structure.total_controllers} controllers, "
        f"{structure.total_pages} pages",
        title="Project Structure",
        border_style="cyan",
    ))

    table = Table(title="Roles", show_header=True, expand=False)
    table.add_column("Role", style="role")
    table.add_column("Files", justify="right")
    table.add_column("Examples", style="path")
    rows = [
        ("Controllers", structure.controllers),
        ("Base controllers", structure.base_controllers),
        ("Pages", structure.pages),
        ("DbContexts", structure.db_contexts),
        ("Migrations", structure.migrations),
        ("Services", structure.services),
        ("Models", structure.models),
        ("Entities", structure.entities),
        ("Config files", structure.config_files),
        ("Program files", structure.program_files),
    ]
    for label, files in rows:
        examples = escape(", ".join(f.name for f in files[:4]))
        if len(files) > 4:
            examples += f", … (+{len(files) - 4})"
        table.add_row(label, str(len(files)), examples)
    console.print(table)

    if structure.database_connection_strings:
        ui.section_divider("Database connections")
        for value in structure.database_connection_strings:
            console.print(f"  {ui.status_icon('bullet')} {escape(value)}", highlight=False)
    if structure.migration_commands:
        ui.section_divider("Migration commands")
        for value in structure.migration_commands:
            console.print(f"  {ui.status_icon('bullet')} {escape(value)}", highlight=False)

    degraded = structure.degraded_files
    if degraded:
        ui.section_divider(f"{len(degraded)} file(s) classified by name only")
        for outcome in degraded:
            console.print(f"  {ui.status_icon('degraded')} {escape(outcome.path)}: {escape(outcome.reason)}")

    if show_files:
        files_table = Table(title="Files", show_header=True, expand=False)
        files_table.add_column("Path", style="path")
        files_table.add_column("Role", style="role")
        files_table.add_column("Confidence", justify="right")
        files_table.add_column("Evidence", style="muted")
        for f in structure.files:
            files_table.add_row(
                escape(f.path), f.role.value, f"{f.confidence:.2f}", escape("; ".join(f.found_patterns)),
            )
        console.print(files_table)


def _print_results(results, summary) -> None:
    from rich.table import Table

    if not results:
        console.print("\n[dim]No criteria evaluated.[/dim]")
        return

    table = Table(title="Criteria", show_header=True, expand=False)
    table.add_column("", justify="center")
    table.add_column("Criterion", style="bold")
    table.add_column("Message")
    table.add_column("Evidence", style="muted")
    for r in results:
        table.add_row(
            ui.status_icon("passed" if r.passed else "failed"),
            escape(r.criteria_name),
            escape(r.message),
            escape("\n".join(r.evidence)),
        )
    console.print(table)
    style = "green" if summary.failed == 0 else "yellow"
    console.print(f"[{style}]{summary.message}[/{style}]")


@app.command(rich_help_panel="Analysis")
@handle_errors
def analyze(
    path: str = typer.Argument(".", help="Path to project directory"),
    extensions: Optional[list[str]] = typer.Option(
        None, "--ext", "-e", help="File extension to include (repeatable). Defaults from config.",
    ),
    mode: str = typer.Option(None, "--mode", "-M", help="Structural or FullContent. Defaults from config."),
    criteria_ids: Optional[list[str]] = typer.Option(
        None, "--criteria", "-c", help="Stored criteria id to check (repeatable). Default: all active.",
    ),
    criteria_file: Optional[Path] = typer.Option(
        None, "--criteria-file", "-f", help="YAML/JSON file with criteria to check instead of stored ones.",
    ),
    use_ai: bool = typer.Option(False, "--ai", help="Ask the AI provider for a narrative analysis."),
    prompt: str = typer.Option("", "--prompt", "-p", help="Extra instruction for the AI analysis."),
    show_files: bool = typer.Option(False, "--files", help="List every file with its role and evidence."),
    strict: bool = typer.Option(False, "--strict", help="Exit with code 2 if any criterion fails."),
):
    """[bold cyan]Analyze[/bold cyan] a project and check it against criteria."""
    from codeanalyzer.analyzers.models import AnalysisMode
    from codeanalyzer.analyzers.walker import CancellationToken
    from codeanalyzer.core import AnalysisRequest
    from codeanalyzer.core.analysis_service import AnalysisService, response_to_dict
    from codeanalyzer.core.config_service import get_config_service
    from codeanalyzer.core.criteria_service import CriteriaService

    config = get_config_service()
    if criteria_file is not None:
        criteria = _load_criteria_file(criteria_file)
    else:
        criteria = CriteriaService().to_analysis_criteria(criteria_ids or None)

    request = AnalysisRequest(
        folder_path=path,
        extensions=extensions or config.get_extensions(),
        mode=AnalysisMode.parse(mode or config.get_mode()),
        criteria=criteria,
        use_ai=use_ai,
        custom_prompt=prompt,
    )

    token = CancellationToken()
    service = AnalysisService()
    with _cancel_on_sigint(token):
        if ui.is_json():
            response = service.analyze(request, cancel=token)
        else:
            with console.status("[bold cyan]Analyzing project...[/bold cyan]"):
                response = service.analyze(request, cancel=token)

    if ui.is_json():
        ui.print_json_output(response_to_dict(response))
        if not response.success:
            raise typer.Exit(1)
    else:
        if not response.success:
            ui.error_panel("Analysis failed", escape(response.error))
            raise typer.Exit(1)

        _print_structure(response.structure, show_files=show_files)
        _print_results(response.results, response.summary)

        if response.ai_analysis:
            from rich.panel import Panel
            console.print(Panel(escape(response.ai_analysis), title="AI Analysis", border_style="green"))

        console.print(f"[dim]Analyzed in {response.analysis_time:.2f}s[/dim]")

    if strict and response.summary and response.summary.failed:
        raise typer.Exit(2)


@app.command(rich_help_panel="Analysis")
@handle_errors
def structure(
    path: str = typer.Argument(".", help="Path to project directory"),
    extensions: Optional[list[str]] = typer.Option(None, "--ext", "-e", help="File extension to include (repeatable)."),
    mode: str = typer.Option(None, "--mode", "-M", help="Structural or FullContent."),
    show_files: bool = typer.Option(True, "--files/--no-files", help="List every file with its role."),
):
    """Show the detected [bold]structure[/bold] only (no criteria, no AI)."""
    from codeanalyzer.analyzers.models import AnalysisMode
    from codeanalyzer.core.analysis_service import AnalysisService, structure_to_dict
    from codeanalyzer.core.config_service import get_config_service

    config = get_config_service()
    result = AnalysisService().analyze_structure(
        path,
        extensions or config.get_extensions(),
        mode=AnalysisMode.parse(mode or config.get_mode()),
    )

    if ui.is_json():
        ui.print_json_output(structure_to_dict(result))
    elif result.error:
        ui.error_panel("Analysis failed", escape(result.error))
    else:
        _print_structure(result, show_files=show_files)

    if result.error:
        raise typer.Exit(1)


@app.command("check-connection", rich_help_panel="Info")
@handle_errors
def check_connection_cmd():
    """Check that the AI provider answers a one-word probe."""
    from codeanalyzer.analyzers.ai_analyzer import check_connection
    from codeanalyzer.providers import get_provider

    provider = get_provider()
    if ui.is_json():
        result = check_connection(provider)
    else:
        with console.status(f"[bold cyan]Contacting {provider.name}...[/bold cyan]"):
            result = check_connection(provider)

    if ui.is_json():
        ui.print_json_output({
            "connected": result.connected,
            "response": result.response,
            "message": result.message,
            "provider": result.provider,
            "model": result.model,
        })
    elif result.connected:
        ui.success_panel(result.message, f"{result.provider} ({result.model})")
    else:
        detail = f"Response: {escape(result.response)}" if result.response else ""
        ui.error_panel(result.message, detail)

    if not result.connected:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
