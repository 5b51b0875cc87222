"""
Handles the 'status' command: report each listed entry without changing anything.
"""

import json
import sys
from typing import Optional

import click

from ..config import configure_logging, load_config
from ..exit_codes import CommandError, get_exit_code_for_exception
from ..render import render_status_table
from ..services.sync_service import SyncOptions, SyncService


@click.command('status')
@click.option('--list-file', '-f', default=None,
              help='Submodule list, relative to the repository root (default: submodules.txt)')
@click.option('--json', 'output_json', is_flag=True, help='Output as JSONL')
@click.option('--pretty', is_flag=True, help='Display with rich formatting')
@click.option('--debug', is_flag=True, help='Enable debug logging')
def status_handler(list_file: Optional[str], output_json: bool, pretty: bool, debug: bool):
    """
    Show the registry state and .gitignore rule of every listed entry.

    \b
    States:
        registered_healthy  configured and checked out
        registered_broken   configured, but missing or not a repository
        unregistered        not in .gitmodules yet
    """
    config = load_config()
    configure_logging(config, debug)

    options = SyncOptions.from_config(config, list_file=list_file)

    try:
        service = SyncService(config=config)
        root = service.locate_root()
        rows = service.status(root, options)
    except CommandError as e:
        if output_json:
            click.echo(json.dumps({"error": str(e), "type": type(e).__name__, "exit_code": get_exit_code_for_exception(e)}))
        else:
            click.echo(f"ERROR: {e}", err=True)
        sys.exit(get_exit_code_for_exception(e))

    if output_json:
        for row in rows:
            click.echo(json.dumps(row, ensure_ascii=False))
    elif pretty:
        render_status_table(rows)
    else:
        for row in rows:
            detail = row.get('error') or f".gitignore: {row.get('ignore_rule')}"
            click.echo(f"{row['name'] or '-':<24} {row['state']:<20} {detail}")
