# SPDX-License-Identifier: Apache-2.0
"""Command line interface for EventBinder."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import NoReturn, Optional

import typer

from eventbinder.config import (
    dump_binding_table,
    load_binding_table,
    resolve_reference,
    write_binding_table,
)
from eventbinder.errors import EventBinderError
from eventbinder.generator import BindingTable, generate_binding_table

app = typer.Typer(add_completion=False, help="EventBinder binding table commands")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Generate and check event handler binding tables."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _fail(message: str) -> NoReturn:
    typer.echo(f"❌ {message}", err=True)
    raise typer.Exit(1)


def _scan(target: str) -> BindingTable:
    try:
        cls = resolve_reference(target)
    except EventBinderError as e:
        _fail(str(e))

    if not isinstance(cls, type):
        _fail(f"{target} is not a class")

    try:
        return generate_binding_table(cls)
    except EventBinderError as e:
        _fail(str(e))


def _print_table(table: BindingTable) -> None:
    if not len(table):
        typer.echo(f"{table.target.__qualname__} declares no event handlers")
        return
    for event_type, entry in table.pairs():
        suffix = "" if entry.passes_event else " (no event argument)"
        typer.echo(f"{event_type.__qualname__} -> {entry.method_name}{suffix}")


@app.command()
def inspect(
    target: str = typer.Argument(..., help="Handler class reference (package.module:ClassName)"),
):
    """Show the event type to handler method bindings of a class.

    Examples:
        eventbinder inspect myapp.presenters:ProfilePresenter
    """
    _print_table(_scan(target))


@app.command()
def generate(
    target: str = typer.Argument(..., help="Handler class reference (package.module:ClassName)"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the binding table to this file instead of stdout"
    ),
):
    """Generate a binding table file for a class.

    Examples:
        eventbinder generate myapp.presenters:ProfilePresenter
        eventbinder generate myapp.presenters:ProfilePresenter -o bindings/profile.yaml
    """
    table = _scan(target)
    if output is None:
        typer.echo(dump_binding_table(table), nl=False)
        return
    write_binding_table(table, output)
    typer.echo(f"✅ Wrote {len(table)} binding(s) to {output}")


@app.command()
def check(
    path: Path = typer.Argument(..., help="Binding table file to validate"),
):
    """Validate a binding table file against its target class.

    Examples:
        eventbinder check bindings/profile.yaml
    """
    try:
        table = load_binding_table(path)
    except (EventBinderError, FileNotFoundError, ValueError) as e:
        _fail(str(e))

    _print_table(table)
    typer.echo(f"✅ {path} is valid")
