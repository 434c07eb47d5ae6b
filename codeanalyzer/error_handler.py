"""Unified CLI error handler for codeanalyzer commands."""

from __future__ import annotations

import functools
import logging
import os
import traceback

import typer

from codeanalyzer.errors import (
    AnalysisCancelledError,
    CodeAnalyzerError,
    ConfigError,
    CriteriaNotFoundError,
    CriteriaValidationError,
    ProviderAuthError,
    ProviderUnavailableError,
)
from codeanalyzer.ui import console

logger = logging.getLogger("codeanalyzer.error_handler")


def _debug_mode() -> bool:
    """Check if debug output is enabled via CODEANALYZER_DEBUG env var."""
    return os.environ.get("CODEANALYZER_DEBUG", "").lower() in ("1", "true", "yes")


def _render_error(e: CodeAnalyzerError) -> None:
    """Render a CodeAnalyzerError with Rich formatting and context."""
    console.print(f"\n[bold red]Error:[/bold red] {e}")

    if isinstance(e, CriteriaValidationError):
        for err in e.errors:
            console.print(f"  [red]-[/red] {err}")

    if e.context and _debug_mode():
        context_parts = [
            f"  [dim]{key}:[/dim] {value}" for key, value in e.context.items() if value
        ]
        if context_parts:
            console.print("[dim]Context:[/dim]")
            for part in context_parts:
                console.print(part)

    # Actionable hints based on error type
    if isinstance(e, CriteriaNotFoundError):
        console.print("[dim]Run 'codeanalyzer criteria list' to see stored criteria.[/dim]")
    elif isinstance(e, ProviderAuthError):
        console.print("[dim]Set ANTHROPIC_API_KEY in your environment or a .env file.[/dim]")
    elif isinstance(e, ProviderUnavailableError):
        console.print("[dim]Run 'codeanalyzer check-connection' to test your provider.[/dim]")
    elif isinstance(e, ConfigError):
        console.print("[dim]Run 'codeanalyzer config show' to inspect the resolved configuration.[/dim]")
    elif isinstance(e, AnalysisCancelledError):
        console.print("[dim]No partial results were kept.[/dim]")


def handle_errors(func):
    """Decorator that catches CodeAnalyzerError and renders formatted CLI output.

    Usage::

        @app.command()
        @handle_errors
        def my_command(...):
            ...  # no try/except needed
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except CodeAnalyzerError as e:
            _render_error(e)
            if _debug_mode():
                console.print(f"\n[dim]{traceback.format_exc()}[/dim]")
            raise typer.Exit(e.exit_code)
        except KeyboardInterrupt:
            console.print("\n[dim]Interrupted.[/dim]")
            raise typer.Exit(130)
        except (typer.Exit, typer.Abort, SystemExit):
            raise
        except Exception as e:
            console.print(f"\n[bold red]Unexpected error:[/bold red] {e}")
            if _debug_mode():
                console.print(f"\n[dim]{traceback.format_exc()}[/dim]")
            else:
                console.print("[dim]Set CODEANALYZER_DEBUG=1 for full traceback.[/dim]")
            raise typer.Exit(1)

    return wrapper
