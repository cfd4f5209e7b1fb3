# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Main CLI entry point for testpipe.

Dumb trigger: parses args, loads documents, runs the engine, renders output.
No checking logic lives here.
"""

import logging
from typing import List, Optional

import typer

from testpipe import __version__
from testpipe.engine import check_pipeline
from testpipe.errors import ConfigLoadError, TestpipeError
from testpipe.loader import load_config, load_pipeline
from testpipe.report import render_error
from testpipe.resolver import TaskResolver


app = typer.Typer(
    name="testpipe",
    help="Statically check pipeline definitions before they are deployed",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Check task params and inputs across every job of a pipeline."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def check(
    pipelines: List[str] = typer.Option(..., "--pipeline", "-p", help="Path to pipeline (repeatable)"),
    config_path: Optional[str] = typer.Option(
        None, "--config", "-c", envvar="TESTPIPE_CONFIG", help="Path to config with resource_map",
    ),
    keep_going: bool = typer.Option(
        False, "--keep-going", help="Check remaining pipelines after a failure",
    ),
):
    """Check one or more pipelines. Exits 1 on the first failure."""
    try:
        resource_map = load_config(config_path)
    except ConfigLoadError as e:
        typer.echo(render_error(e), err=True)
        raise typer.Exit(1)

    # One resolver for the whole run so task files are read once
    resolver = TaskResolver()
    failed = False

    for path in pipelines:
        try:
            pipeline = load_pipeline(path)
            record = check_pipeline(pipeline, resource_map, resolver)
        except TestpipeError as e:
            typer.echo(render_error(e, pipeline_path=path), err=True)
            failed = True
            if not keep_going:
                raise typer.Exit(1)
            continue

        typer.echo(f"{path}: ok ({len(record.jobs)} jobs, {record.tasks_checked} tasks)")

    if failed:
        raise typer.Exit(1)


@app.command()
def version():
    """Show version information."""
    typer.echo(f"testpipe version {__version__}")


# Static commands
from testpipe.commands import config

app.add_typer(config.app, name="config")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
