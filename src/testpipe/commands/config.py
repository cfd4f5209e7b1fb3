# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Config command for testpipe.

Shows where each resource in the resource map is checked out, and flags
entries that cannot be used to locate task files.
"""

from pathlib import Path
from typing import Optional

import typer

from testpipe.errors import ConfigLoadError
from testpipe.loader import load_config

app = typer.Typer(help="Inspect and validate the testpipe config")


@app.command()
def validate(
    config_path: Optional[str] = typer.Option(
        None, "--config", "-c", envvar="TESTPIPE_CONFIG", help="Path to config file",
    ),
):
    """
    Validate a config file.

    Checks that the file is valid YAML with a resource_map mapping, and
    warns about resources whose directory does not exist.
    """
    if not config_path:
        typer.echo("Error: no config given (use --config or TESTPIPE_CONFIG)", err=True)
        raise typer.Exit(1)

    typer.echo("Validating configuration...")
    typer.echo()

    try:
        resource_map = load_config(config_path)
    except ConfigLoadError as e:
        typer.echo(f"Validation failed: {e}", err=True)
        raise typer.Exit(1)

    if not resource_map:
        typer.echo("resource_map is empty; tasks loaded from files will not resolve")
        return

    problems = 0
    for name, path in resource_map.items():
        if not path:
            typer.echo(f"  {name}: (no path)")
            problems += 1
        elif not Path(path).is_dir():
            typer.echo(f"  {name}: {path} (not found)")
            problems += 1
        else:
            typer.echo(f"  {name}: {path}")

    typer.echo()
    if problems:
        typer.echo(f"{problems} of {len(resource_map)} resources cannot be located")
    else:
        typer.echo("Configuration validation complete!")
