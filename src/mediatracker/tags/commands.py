"""CLI commands for the tag registry."""

from __future__ import annotations

import json as json_module
import re
from collections import Counter

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from mediatracker.core.errors import MediaTrackerError

console = Console()

DEFAULT_COLOR = "#3b82f6"
HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}){1,2}$")


def _open(ctx):
    from mediatracker.core.tracker import open_tracker

    return open_tracker(dry_run=ctx.dry_run if ctx else False)


def _check_color(ctx, param, value):
    if value is not None and not HEX_COLOR.match(value):
        raise click.BadParameter(f"Expected a hex colour like #ff8800, got {value}")
    return value


def _require_tag(tracker, ref: str):
    try:
        tag = tracker.find_tag(ref)
    except MediaTrackerError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise SystemExit(1) from e
    if tag is None:
        console.print(f"[red]Tag not found: {escape(ref)}[/red]")
        raise SystemExit(1)
    return tag


@click.group()
def tags():
    """Manage tags.

    Renaming, recolouring or deleting a tag updates every title that has it.
    """
    pass


@tags.command(name="add")
@click.argument("name")
@click.option("--color", "-c", default=DEFAULT_COLOR, show_default=True, callback=_check_color)
@click.pass_obj
def add_cmd(ctx, name, color):
    """Create a tag."""
    tracker = _open(ctx)
    if tracker.tags.find_by_name(name):
        console.print(f"[yellow]Note: a tag named '{escape(name)}' already exists[/yellow]")
    tag = tracker.tags.add_tag(name, color)
    console.print(f"[dim]id: {tag.id}[/dim]")


@tags.command(name="list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def list_cmd(ctx, as_json):
    """List tags with how many titles use each."""
    tracker = _open(ctx)
    usage = Counter(t.id for item in tracker.store for t in item.tags)

    if as_json:
        output = [{**tag.to_dict(), "count": usage[tag.id]} for tag in tracker.tags]
        click.echo(json_module.dumps(output, indent=2))
        return

    if not len(tracker.tags):
        console.print("[yellow]No tags yet.[/yellow]")
        console.print("[dim]Create one with: mediatracker tags add NAME[/dim]")
        return

    table = Table(title=f"Tags ({len(tracker.tags)})")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Color", style="dim")
    table.add_column("Titles", style="bold")
    for tag in tracker.tags:
        table.add_row(tag.id[:8], escape(tag.name), tag.color, str(usage[tag.id]))
    console.print(table)


@tags.command(name="edit")
@click.argument("tag_ref")
@click.option("--name", help="New name")
@click.option("--color", "-c", callback=_check_color, help="New hex colour")
@click.pass_obj
def edit_cmd(ctx, tag_ref, name, color):
    """Rename or recolour a tag everywhere it is used."""
    from mediatracker.core.models import Tag

    if name is None and color is None:
        raise click.UsageError("Nothing to do: pass --name and/or --color")

    tracker = _open(ctx)
    tag = _require_tag(tracker, tag_ref)
    tracker.tags.update_tag(
        Tag(id=tag.id, name=name if name is not None else tag.name, color=color or tag.color)
    )


@tags.command(name="delete")
@click.argument("tag_ref")
@click.option("--force", "-f", is_flag=True, help="Skip confirmation prompt")
@click.pass_obj
def delete_cmd(ctx, tag_ref, force):
    """Delete a tag and remove it from every title."""
    tracker = _open(ctx)
    tag = _require_tag(tracker, tag_ref)

    in_use = sum(1 for item in tracker.store if item.has_tag(tag.id))
    if not force and not click.confirm(f"Delete tag '{tag.name}' (used by {in_use} titles)?"):
        console.print("[yellow]Cancelled[/yellow]")
        return

    tracker.tags.delete_tag(tag.id)
