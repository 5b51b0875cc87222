"""
Rendering functions for subsync output.

This module handles all pretty-printing and table formatting.
Core functions return data, this module makes it human-readable.
"""

from rich.table import Table
from rich.console import Console
from rich import box
from rich.markup import escape
from typing import List, Dict, Any, Optional

from .domain.operation import OperationStatus, SyncOutcome, SyncSummary, outcome_messages

console = Console()

STATUS_STYLES = {
    OperationStatus.SUCCESS: "green",
    OperationStatus.DRY_RUN: "cyan",
    OperationStatus.SKIPPED: "yellow",
    OperationStatus.FAILED: "red",
}

STATE_STYLES = {
    'registered_healthy': "green",
    'registered_broken': "yellow",
    'unregistered': "blue",
    'invalid': "red",
}

OUTCOME_STYLES = {
    SyncOutcome.CHANGES_CLEAN: "bold green",
    SyncOutcome.CHANGES_WITH_ERRORS: "bold yellow",
    SyncOutcome.NO_CHANGES_WITH_ERRORS: "bold red",
    SyncOutcome.NO_CHANGES_CLEAN: "bold",
}


def commit_hint(commit_message: str) -> List[str]:
    """Lines telling the user how to commit what was staged."""
    return [
        "Please review them with 'git status' and then commit:",
        f"  git commit -m \"{commit_message}\"",
    ]


def summary_lines(summary: SyncSummary, commit_message: Optional[str] = None) -> List[str]:
    """Plain-text final report for a run."""
    lines = list(outcome_messages(summary.outcome))
    if summary.changes_staged and not summary.dry_run and commit_message:
        lines.extend(commit_hint(commit_message))
    return lines


def render_sync_table(summary: SyncSummary, title: str = "Submodule Sync") -> None:
    """
    Render per-entry sync results as a pretty table.

    Args:
        summary: Result of a sync run
        title: Table title
    """
    if not summary.details:
        console.print("[yellow]No entries in the submodule list.[/yellow]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Name", style="cyan")
    table.add_column("State")
    table.add_column("Action")
    table.add_column(".gitignore", justify="center")
    table.add_column("Details", overflow="fold")

    for detail in summary.details:
        style = STATUS_STYLES.get(detail.status, "white")
        table.add_row(
            escape(detail.name),
            detail.state.value if detail.state else "-",
            f"[{style}]{detail.action}[/{style}]",
            "updated" if detail.ignore_changed else "",
            escape(detail.error or detail.message or ""),
        )

    console.print(table)


def render_sync_summary(summary: SyncSummary, commit_message: Optional[str] = None) -> None:
    """Print counts and the final outcome."""
    console.print("\n[bold]Summary:[/bold]")
    console.print(f"  Total entries: {summary.total}")
    console.print(f"  [green]Successful: {summary.successful}[/green]")
    if summary.skipped:
        console.print(f"  [yellow]Skipped: {summary.skipped}[/yellow]")
    if summary.failed:
        console.print(f"  [red]Failed: {summary.failed}[/red]")
        for error in summary.errors:
            console.print(f"    [red]✗[/red] {escape(error)}")

    style = OUTCOME_STYLES[summary.outcome]
    console.print()
    for line in summary_lines(summary, commit_message):
        console.print(f"[{style}]{escape(line)}[/{style}]", highlight=False)


def render_status_table(rows: List[Dict[str, Any]]) -> None:
    """
    Render entry status as a pretty table.

    Args:
        rows: Dictionaries from SyncService.status()
    """
    if not rows:
        console.print("[yellow]No entries in the submodule list.[/yellow]")
        return

    table = Table(
        title="Submodule Status",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Line", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("State")
    table.add_column(".gitignore", justify="center")
    table.add_column("Locator", overflow="fold")

    for row in rows:
        style = STATE_STYLES.get(row['state'], "white")
        rule = row.get('ignore_rule', '-')
        rule_style = "green" if rule == 'ok' else "yellow"
        table.add_row(
            str(row['line']),
            escape(row['name'] or "-"),
            f"[{style}]{row['state']}[/{style}]",
            f"[{rule_style}]{rule}[/{rule_style}]",
            escape(row['locator']),
        )

    console.print(table)
