"""Shared UI theme, console, and display helpers for codeanalyzer."""

import json
import sys

from rich.console import Console
from rich.panel import Panel
from rich.theme import Theme

# ── Output Mode State ──
_plain_mode: bool = False
_json_mode: bool = False


def set_plain_mode(enabled: bool = True) -> None:
    """Enable or disable plain text output (no colors, no panels, ASCII only)."""
    global _plain_mode
    _plain_mode = enabled
    console.no_color = enabled


def set_json_mode(enabled: bool = True) -> None:
    """Enable or disable JSON output mode."""
    global _json_mode
    _json_mode = enabled


def is_plain() -> bool:
    return _plain_mode


def is_json() -> bool:
    return _json_mode


def print_json_output(data: dict | list) -> None:
    """Print data as formatted JSON to stdout."""
    print(json.dumps(data, indent=2, default=str, ensure_ascii=False))


# ── Theme ──
CODEANALYZER_THEME = Theme({
    "info": "cyan",
    "success": "bold green",
    "warning": "yellow",
    "error": "bold red",
    "role": "bold blue",
    "path": "yellow",
    "muted": "dim",
})

console = Console(theme=CODEANALYZER_THEME)

# ── Status Icons ──
ICONS = {
    "passed": "[green]✔[/green]",    # checkmark
    "failed": "[red]✘[/red]",        # cross
    "degraded": "[yellow]◉[/yellow]",
    "bullet": "[cyan]•[/cyan]",
}

# ASCII equivalents for plain mode
PLAIN_ICONS = {
    "passed": "[OK]",
    "failed": "[!!]",
    "degraded": "[~~]",
    "bullet": "*",
}


def status_icon(status: str) -> str:
    if _plain_mode:
        return PLAIN_ICONS.get(status, PLAIN_ICONS["bullet"])
    return ICONS.get(status, ICONS["bullet"])


def success_panel(title: str, content=None):
    """Display a success panel."""
    if _json_mode:
        return
    if _plain_mode:
        print(f"OK: {title}")
        if content:
            print(f"  {content}")
        return

    console.print(Panel(
        content or "",
        title=f"[bold green]{title}[/bold green]",
        border_style="green",
    ))


def error_panel(title: str, content: str = ""):
    """Display an error panel."""
    if _json_mode:
        print_json_output({"error": title, "detail": content})
        return
    if _plain_mode:
        print(f"ERROR: {title}", file=sys.stderr)
        if content:
            print(f"  {content}", file=sys.stderr)
        return

    console.print(Panel(
        content,
        title=f"[bold red]{title}[/bold red]",
        border_style="red",
    ))


def section_divider(text: str = ""):
    """Print a subtle section divider."""
    if _json_mode:
        return
    if _plain_mode:
        if text:
            print(f"\n-- {text} --")
        else:
            print()
        return

    if text:
        console.print(f"\n[dim]── {text} ──[/dim]")
    else:
        console.print()
