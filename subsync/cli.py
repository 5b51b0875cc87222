#!/usr/bin/env python3

import click

from subsync.commands.sync import sync_handler
from subsync.commands.status import status_handler
from subsync.commands.config import config_cmd


@click.group()
@click.version_option(package_name="submodule-sync")
def cli():
    """subsync - Keep git submodules in line with a plain list of repositories.

    Reads submodules.txt at the repository root, one repository URL per
    line, and makes each one a submodule un-ignored in .gitignore.
    """
    pass


cli.add_command(sync_handler, name='sync')
cli.add_command(status_handler, name='status')
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()
