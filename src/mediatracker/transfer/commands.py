"""CLI commands for exporting and importing media items."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from mediatracker.core.errors import (
    EmptySelectionError,
    ImportValidationError,
    MediaTrackerError,
)
from mediatracker.transfer.exchange import (
    default_export_name,
    export_filename,
    export_media,
    import_media,
    select_items,
)

console = Console()


@click.group()
def transfer():
    """Export titles to a JSON file or import them from one."""
    pass


@transfer.command(name="export")
@click.option("--id", "media_ids", multiple=True, help="Title id or id prefix to export (repeatable)")
@click.option("--all", "export_all", is_flag=True, help="Export the whole collection")
@click.option("--name", help="File name (default: mediatracker-export-YYYY-MM-DD)")
@click.option(
    "--output", "-o", "output_dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory to write to (default: the collection root)",
)
@click.pass_obj
def export_cmd(ctx, media_ids, export_all, name, output_dir):
    """Export selected titles as a JSON array.

    \b
    Examples:
        mediatracker transfer export --all
        mediatracker transfer export --id 3f2a --id 91bc --name favourites
    """
    from mediatracker.core.config import get_paths
    from mediatracker.core.tracker import open_tracker

    tracker = open_tracker()

    if export_all:
        items = tracker.store.items
    else:
        ids = []
        for ref in media_ids:
            try:
                item = tracker.find_media(ref)
            except MediaTrackerError as e:
                console.print(f"[red]{escape(str(e))}[/red]")
                raise SystemExit(1) from e
            if item is None:
                console.print(f"[yellow]Skipping unknown id: {escape(ref)}[/yellow]")
            else:
                ids.append(item.id)
        items = select_items(tracker.store, ids)

    path = (output_dir or get_paths().exports) / export_filename(name or default_export_name())

    if ctx and ctx.dry_run:
        if items:
            console.print(f"[yellow]Would export {len(items)} item(s) to {path}[/yellow]")
        else:
            console.print("[yellow]No items selected[/yellow]")
        return

    try:
        count = export_media(items, path)
    except EmptySelectionError as e:
        console.print("[yellow]No items selected[/yellow]")
        console.print(f"[dim]{e} Use --id or --all.[/dim]")
        return

    console.print(f"[green]Exported {count} item(s)[/green] to {path}")


@transfer.command(name="import")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def import_cmd(ctx, file):
    """Add the titles from an export file to the collection.

    Every entry must have an id, title, type and seasons list; if any
    entry is invalid nothing is imported.
    """
    from mediatracker.core.tracker import open_tracker

    tracker = open_tracker(dry_run=ctx.dry_run if ctx else False)

    try:
        added = import_media(tracker.store, file)
    except ImportValidationError as e:
        console.print("[red]Import failed[/red]")
        console.print(f"[red]{escape(str(e))}[/red]")
        raise SystemExit(1) from e

    if not added:
        console.print("[yellow]The file contains no items.[/yellow]")
        return

    tracker.notifier.success("Imported", f"{len(added)} item(s) added to your collection")
