"""
Handles the 'sync' command: bring submodules in line with submodules.txt.

Output modes follow the rest of the CLI:
- default: progress lines and a plain summary on stderr
- --json: JSONL on stdout (progress, one record per entry, summary)
- --pretty: rich tables
"""

import json
import sys
from typing import Optional

import click

from ..config import configure_logging, load_config
from ..domain.operation import SyncSummary
from ..exit_codes import CommandError, PartialSuccessError, get_exit_code_for_exception
from ..render import render_sync_summary, render_sync_table, summary_lines
from ..services.sync_service import SyncOptions, SyncService


@click.command('sync')
@click.option('--list-file', '-f', default=None,
              help='Submodule list, relative to the repository root (default: submodules.txt)')
@click.option('--dry-run', is_flag=True, help='Show what would change without touching anything')
@click.option('--json', 'output_json', is_flag=True, help='Output as JSONL')
@click.option('--pretty', is_flag=True, help='Display with rich formatting')
@click.option('--strict', is_flag=True, help='Exit with status 71 if any entry failed')
@click.option('--debug', is_flag=True, help='Enable debug logging')
def sync_handler(
    list_file: Optional[str],
    dry_run: bool,
    output_json: bool,
    pretty: bool,
    strict: bool,
    debug: bool,
):
    """
    Synchronize the repositories in submodules.txt as submodules.

    Each locator becomes a submodule named after its last path segment,
    un-ignored in .gitignore. Missing or broken submodules are (re)added,
    healthy ones are updated to their remote branch. Changes are staged,
    never committed.

    \b
    Examples:
        # Preview
        subsync sync --dry-run
        # Sync from another list
        subsync sync --list-file deps.txt
        # Machine-readable results
        subsync sync --json
    """
    config = load_config()
    configure_logging(config, debug)

    options = SyncOptions.from_config(config, list_file=list_file, dry_run=dry_run)
    commit_message = config.get('commit_message', 'Sync submodules')

    try:
        service = SyncService(config=config)
        root = service.locate_root()
        progress_iter = service.sync(root, options)
        if output_json:
            _sync_output_json(service, progress_iter, root)
        elif pretty:
            _sync_output_pretty(service, progress_iter, options, root, commit_message)
        else:
            _sync_output_simple(service, progress_iter, options, root, commit_message)
    except CommandError as e:
        _fail(e, output_json)
    except KeyboardInterrupt as e:
        click.echo("Interrupted. Changes made so far are left staged.", err=True)
        sys.exit(get_exit_code_for_exception(e))

    result = service.last_result
    if strict and result is not None and result.failed:
        _fail(PartialSuccessError(
            f"{result.failed} of {result.total} entries failed",
            succeeded=result.successful,
            failed=result.failed,
        ), output_json)


def _fail(error: CommandError, output_json: bool):
    """Report a fatal error and exit with its code."""
    if output_json:
        error_obj = {
            "error": str(error),
            "type": type(error).__name__,
            "exit_code": error.exit_code,
        }
        if isinstance(error, PartialSuccessError):
            error_obj['succeeded'] = error.succeeded
            error_obj['failed'] = error.failed
        click.echo(json.dumps(error_obj, ensure_ascii=False))
    else:
        click.echo(f"ERROR: {error}", err=True)
    sys.exit(get_exit_code_for_exception(error))


def _sync_output_simple(service: SyncService, progress_iter, options: SyncOptions, root: str,
                        commit_message: str):
    """Line-oriented progress and summary on stderr."""
    mode = "[dry run] " if options.dry_run else ""

    click.echo(f"Operating from Git repository root: {root}", err=True)
    click.echo("-" * 57, err=True)
    for progress in progress_iter:
        click.echo(f"{mode}{progress}", err=True)
    click.echo("-" * 57, err=True)

    result: Optional[SyncSummary] = service.last_result
    if result:
        for line in summary_lines(result, commit_message):
            click.echo(f"{mode}{line}", err=True)


def _sync_output_json(service: SyncService, progress_iter, root: str):
    """JSONL output: progress records, one record per entry, then the summary."""
    click.echo(json.dumps({'progress': f"Operating from Git repository root: {root}"}))
    for progress in progress_iter:
        click.echo(json.dumps({'progress': progress}))

    result = service.last_result
    if result:
        for detail in result.details:
            click.echo(json.dumps(detail.to_dict()))
        click.echo(json.dumps(result.to_dict()))


def _sync_output_pretty(service: SyncService, progress_iter, options: SyncOptions, root: str,
                        commit_message: str):
    """Rich formatted output with a spinner while entries are processed."""
    from rich.console import Console
    from rich.markup import escape
    from rich.progress import Progress, SpinnerColumn, TextColumn

    console = Console()
    dry_run = options.dry_run
    mode = "[bold yellow]DRY RUN[/bold yellow] " if dry_run else ""

    console.print(f"\n{mode}[bold]Submodule Sync[/bold]")
    console.print(f"[bold]Repository:[/bold] {root}")
    console.print()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Processing...", total=None)

        for message in progress_iter:
            progress.update(task, description=escape(message.strip()))

    result = service.last_result
    if not result:
        console.print("[red]Submodule sync failed - no result[/red]")
        sys.exit(1)

    render_sync_table(result, title=f"{'Dry Run: ' if dry_run else ''}Submodule Sync")
    render_sync_summary(result, commit_message)
