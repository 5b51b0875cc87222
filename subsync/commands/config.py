"""
Handles the 'config' command group.
"""

import json

import click

from ..config import get_config_path, load_config


@click.group("config")
def config_cmd():
    """Inspect subsync configuration."""


@config_cmd.command("show")
@click.option("--pretty", is_flag=True, help="Indent the JSON output")
@click.option("--path", is_flag=True, help="Print which config file is read instead")
def show_config(pretty, path):
    """Print the effective configuration as JSON.

    Defaults, the config file and SUBSYNC_* variables are already merged.
    """
    if path:
        config_path = get_config_path()
        payload = {"config_path": str(config_path), "exists": config_path.exists()}
    else:
        payload = load_config()

    click.echo(json.dumps(payload, indent=2 if pretty else None, ensure_ascii=False))
