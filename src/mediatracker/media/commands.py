"""
CLI commands for the media collection.

Adding, browsing, editing and deleting tracked titles, season progress,
favorites and tag assignment.
"""

from __future__ import annotations

import json as json_module

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from mediatracker.core.errors import MediaTrackerError
from mediatracker.core.models import (
    SEASON_RATINGS,
    MediaDraft,
    MediaItem,
    MediaType,
    Season,
    build_seasons,
    validate_rating,
)

console = Console()

TYPE_CHOICES = [t.value for t in MediaType]
RATING_MARKS = {"good": "[green]+[/green]", "bad": "[red]-[/red]"}


def _open(ctx):
    from mediatracker.core.tracker import open_tracker

    return open_tracker(dry_run=ctx.dry_run if ctx else False)


def _require_media(tracker, ref: str) -> MediaItem:
    try:
        item = tracker.find_media(ref)
    except MediaTrackerError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise SystemExit(1) from e
    if item is None:
        console.print(f"[red]Media not found: {escape(ref)}[/red]")
        raise SystemExit(1)
    return item


def _require_tags(tracker, refs: tuple[str, ...]):
    found = []
    for ref in refs:
        try:
            tag = tracker.find_tag(ref)
        except MediaTrackerError as e:
            console.print(f"[red]{escape(str(e))}[/red]")
            raise SystemExit(1) from e
        if tag is None:
            console.print(f"[red]Tag not found: {escape(ref)}[/red]")
            raise SystemExit(1)
        found.append(tag)
    return found


def _check_rating(ctx, param, value):
    try:
        return validate_rating(value)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


def _format_rating(rating: float | None) -> str:
    return f"{rating:g}/10" if rating is not None else "[dim]-[/dim]"


def _progress(item: MediaItem) -> str:
    if not item.type.has_seasons:
        return "watched" if item.completed_seasons else ""
    return f"{item.completed_seasons}/{len(item.seasons)}"


def _resize_seasons(seasons: list[Season], count: int) -> list[Season]:
    """Trim or extend a season list to *count*, keeping existing progress."""
    kept = [s for s in seasons if s.number <= count]
    numbers = {s.number for s in kept}
    for season in build_seasons(count):
        if season.number not in numbers:
            kept.append(season)
    return sorted(kept, key=lambda s: s.number)


def print_media_table(items: list[MediaItem], title: str = "Collection") -> None:
    table = Table(title=title)
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Type")
    table.add_column("Rating")
    table.add_column("Seasons")
    table.add_column("Tags", style="magenta")

    for item in items:
        name = escape(item.title)
        if item.is_favorite:
            name = f"[yellow]*[/yellow] {name}"
        table.add_row(
            item.id[:8],
            name,
            item.type.value,
            _format_rating(item.rating),
            _progress(item),
            escape(", ".join(t.name for t in item.tags)),
        )

    console.print(table)


@click.group()
def media():
    """Manage tracked series, movies and anime."""
    pass


@media.command(name="add")
@click.argument("title")
@click.option(
    "--type", "-t", "media_type",
    type=click.Choice(TYPE_CHOICES), default=MediaType.SERIES.value, show_default=True,
)
@click.option("--description", "-d", default="", help="Synopsis")
@click.option("--image", default="", help="Poster image URL")
@click.option("--rating", "-r", type=float, callback=_check_rating, help="Rating 0-10 in 0.5 steps")
@click.option("--seasons", "-s", "season_count", type=click.IntRange(min=1), default=1, show_default=True)
@click.option("--favorite", is_flag=True, help="Mark as favorite")
@click.option("--in-emission", is_flag=True, help="Still airing")
@click.option("--tag", "tag_refs", multiple=True, help="Tag id or name (repeatable)")
@click.pass_obj
def add_cmd(ctx, title, media_type, description, image, rating, season_count, favorite,
            in_emission, tag_refs):
    """Add a title to the collection.

    \b
    Examples:
        mediatracker media add "Breaking Bad" --seasons 5 --rating 9.5
        mediatracker media add "Spirited Away" -t movie --favorite
        mediatracker media add "Frieren" -t anime --in-emission --tag fantasy
    """
    tracker = _open(ctx)
    tags = _require_tags(tracker, tag_refs)

    kind = MediaType(media_type)
    draft = MediaDraft(
        type=kind,
        title=title,
        description=description,
        image_url=image,
        rating=rating,
        is_favorite=favorite,
        in_emission=in_emission,
        seasons=build_seasons(season_count if kind.has_seasons else 1),
        tags=tags,
    )
    item = tracker.store.add_media(draft)
    console.print(f"[dim]id: {item.id}[/dim]")


@media.command(name="list")
@click.option("--type", "-t", "media_type", type=click.Choice(TYPE_CHOICES), help="Filter by type")
@click.option("--query", "-q", default="", help="Search title and description")
@click.option("--favorites", is_flag=True, help="Only favorites")
@click.option("--tag", "tag_refs", multiple=True, help="Require tag (repeatable, all must match)")
@click.option("--min-rating", type=float, default=0.0, show_default=True)
@click.option("--max-rating", type=float, default=10.0, show_default=True)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def list_cmd(ctx, media_type, query, favorites, tag_refs, min_rating, max_rating, as_json):
    """List the collection, optionally filtered.

    \b
    Examples:
        mediatracker media list -t anime
        mediatracker media list --tag drama --tag crime --min-rating 8
        mediatracker media list -q "space" --favorites --json
    """
    from mediatracker.filtering import FilterSpec, filter_media

    tracker = _open(ctx)
    tags = _require_tags(tracker, tag_refs)

    try:
        spec = FilterSpec(
            media_type=media_type,
            query=query,
            favorites_only=favorites,
            tag_ids=frozenset(t.id for t in tags),
            min_rating=min_rating,
            max_rating=max_rating,
        )
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    items = filter_media(tracker.store.items, spec)

    if as_json:
        click.echo(json_module.dumps([item.to_dict() for item in items], indent=2))
        return

    if not items:
        if spec.is_active:
            console.print("[yellow]No titles match the current filters.[/yellow]")
        else:
            console.print("[yellow]Your collection is empty.[/yellow]")
            console.print("[dim]Add something with: mediatracker media add TITLE[/dim]")
        return

    print_media_table(items, title=f"Collection ({len(items)} of {len(tracker.store)})")


@media.command(name="show")
@click.argument("media_ref")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def show_cmd(ctx, media_ref, as_json):
    """Show one title with its seasons."""
    tracker = _open(ctx)
    item = _require_media(tracker, media_ref)

    if as_json:
        click.echo(json_module.dumps(item.to_dict(), indent=2))
        return

    star = " [yellow]*[/yellow]" if item.is_favorite else ""
    console.print(f"[bold cyan]{escape(item.title)}[/bold cyan]{star}")
    console.print(f"[dim]{item.id}[/dim]")
    console.print(f"  Type: {item.type.value}")
    console.print(f"  Rating: {_format_rating(item.rating)}")
    console.print(f"  Added: {item.date_added:%Y-%m-%d %H:%M}")
    if item.in_emission:
        console.print("  [green]Still airing[/green]")
    if item.tags:
        console.print(f"  Tags: {escape(', '.join(t.name for t in item.tags))}")
    if item.description:
        console.print()
        console.print(escape(item.description))

    if item.seasons:
        console.print()
        table = Table(title="Seasons")
        table.add_column("#", style="dim")
        table.add_column("Title")
        table.add_column("Status")
        table.add_column("Rating")
        for season in item.seasons:
            if season.completed:
                status = "[green]watched[/green]"
            elif season.in_progress:
                status = "[yellow]watching[/yellow]"
            else:
                status = "[dim]-[/dim]"
            table.add_row(
                str(season.number),
                escape(season.title or ""),
                status,
                RATING_MARKS.get(season.rating or "", ""),
            )
        console.print(table)


@media.command(name="edit")
@click.argument("media_ref")
@click.option("--title", help="New title")
@click.option(
    "--type", "-t", "media_type", type=click.Choice(TYPE_CHOICES), help="New type",
)
@click.option("--description", "-d", help="New synopsis")
@click.option("--image", help="New poster image URL")
@click.option("--rating", "-r", type=float, callback=_check_rating, help="New rating")
@click.option("--clear-rating", is_flag=True, help="Remove the rating")
@click.option("--seasons", "-s", "season_count", type=click.IntRange(min=1), help="New season count")
@click.option("--in-emission/--finished", default=None, help="Airing status")
@click.pass_obj
def edit_cmd(ctx, media_ref, title, media_type, description, image, rating, clear_rating,
             season_count, in_emission):
    """Edit a title's details.

    Changing the season count keeps progress on the seasons that remain.
    """
    tracker = _open(ctx)
    item = _require_media(tracker, media_ref)

    if title is not None:
        item.title = title
    if media_type is not None:
        item.type = MediaType(media_type)
    if description is not None:
        item.description = description
    if image is not None:
        item.image_url = image
    if clear_rating:
        item.rating = None
    elif rating is not None:
        item.rating = rating
    if season_count is not None:
        item.seasons = _resize_seasons(item.seasons, season_count)
    if in_emission is not None:
        item.in_emission = in_emission

    tracker.store.update_media(item)


@media.command(name="delete")
@click.argument("media_ref")
@click.option("--force", "-f", is_flag=True, help="Skip confirmation prompt")
@click.pass_obj
def delete_cmd(ctx, media_ref, force):
    """Delete a title from the collection."""
    tracker = _open(ctx)
    item = _require_media(tracker, media_ref)

    if not force and not click.confirm(f"Delete '{item.title}'?"):
        console.print("[yellow]Cancelled[/yellow]")
        return

    tracker.store.delete_media(item.id)


@media.command(name="favorite")
@click.argument("media_ref")
@click.pass_obj
def favorite_cmd(ctx, media_ref):
    """Toggle a title's favorite flag."""
    tracker = _open(ctx)
    item = _require_media(tracker, media_ref)

    if tracker.store.toggle_favorite(item.id):
        console.print(f"[yellow]*[/yellow] {escape(item.title)} marked as favorite")
    else:
        console.print(f"{escape(item.title)} removed from favorites")


@media.command(name="season")
@click.argument("media_ref")
@click.argument("number", type=int)
@click.option("--watched/--unwatched", default=None, help="Mark the season watched or not")
@click.option("--watching", is_flag=True, help="Mark the season as in progress")
@click.option(
    "--rate", type=click.Choice(SEASON_RATINGS),
    help="Like or dislike the season (repeat the same rating to clear it)",
)
@click.pass_obj
def season_cmd(ctx, media_ref, number, watched, watching, rate):
    """Update progress or rating of one season.

    \b
    Examples:
        mediatracker media season 3f2a 1 --watched
        mediatracker media season 3f2a 2 --watching
        mediatracker media season 3f2a 1 --rate good
    """
    tracker = _open(ctx)
    item = _require_media(tracker, media_ref)

    if item.get_season(number) is None:
        console.print(f"[red]{escape(item.title)} has no season {number}[/red]")
        raise SystemExit(1)
    if watched is None and not watching and rate is None:
        raise click.UsageError("Nothing to do: pass --watched, --unwatched, --watching or --rate")

    store = tracker.store
    if watching:
        store.update_season_status(item.id, number, completed=False, in_progress=True)
    elif watched is not None:
        store.set_season_completed(item.id, number, watched)
    if rate is not None:
        store.rate_season(item.id, number, rate)

    season = item.get_season(number)
    status = "watched" if season.completed else "watching" if season.in_progress else "not watched"
    rating = f", rated {season.rating}" if season.rating else ""
    console.print(f"{escape(item.title)} season {number}: {status}{rating}")


@media.command(name="tag")
@click.argument("media_ref")
@click.argument("tag_refs", nargs=-1, required=True)
@click.pass_obj
def tag_cmd(ctx, media_ref, tag_refs):
    """Attach one or more tags to a title."""
    tracker = _open(ctx)
    item = _require_media(tracker, media_ref)

    for tag in _require_tags(tracker, tag_refs):
        if not tracker.attach_tag(item.id, tag.id):
            console.print(f"[dim]{escape(item.title)} already has tag {escape(tag.name)}[/dim]")


@media.command(name="untag")
@click.argument("media_ref")
@click.argument("tag_refs", nargs=-1, required=True)
@click.pass_obj
def untag_cmd(ctx, media_ref, tag_refs):
    """Remove one or more tags from a title."""
    tracker = _open(ctx)
    item = _require_media(tracker, media_ref)

    for tag in _require_tags(tracker, tag_refs):
        if tracker.detach_tag(item.id, tag.id):
            console.print(f"Removed tag {escape(tag.name)} from {escape(item.title)}")
        else:
            console.print(f"[dim]{escape(item.title)} does not have tag {escape(tag.name)}[/dim]")


@media.command(name="recent")
@click.option("--limit", "-n", type=int, default=3, show_default=True)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def recent_cmd(ctx, limit, as_json):
    """Show the most recently added titles."""
    tracker = _open(ctx)
    items = tracker.store.recent_media(limit)

    if as_json:
        click.echo(json_module.dumps([item.to_dict() for item in items], indent=2))
        return

    if not items:
        console.print("[yellow]Your collection is empty.[/yellow]")
        return

    print_media_table(items, title="Recently Added")
