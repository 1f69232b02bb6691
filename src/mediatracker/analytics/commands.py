"""CLI commands for collection statistics."""

from __future__ import annotations

import json as json_module

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from mediatracker.analytics.aggregator import (
    DEFAULT_TAG_LIMIT,
    DEFAULT_TOP_N,
    MIN_ITEMS_FOR_STATS,
    CollectionStats,
)

console = Console()

BAR_WIDTH = 30


def _load_stats() -> CollectionStats | None:
    """Open the collection and check it is big enough for statistics."""
    from mediatracker.core.tracker import open_tracker

    tracker = open_tracker()
    stats = CollectionStats(tracker.store.items, tracker.tags.tags)
    if not stats.has_enough_data():
        console.print("[yellow]Not enough data[/yellow]")
        console.print(
            f"Add at least {MIN_ITEMS_FOR_STATS} items to your collection to see statistics."
        )
        console.print(f"[dim]Your collection currently has {len(stats.items)} item(s).[/dim]")
        return None
    return stats


def _setting(key: str, default: int) -> int:
    from mediatracker.config.commands import get_config_value

    return int(get_config_value(key, default))


def _bar(count: int, largest: int) -> str:
    if largest <= 0:
        return ""
    return "#" * max(1 if count else 0, round(count / largest * BAR_WIDTH))


@click.group(name="stats")
def stats() -> None:
    """Collection statistics.

    Distributions, ratings, tag usage, progress and activity over time.
    Statistics need at least 3 items in the collection.
    """
    pass


@stats.command(name="types")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def stats_types(as_json: bool) -> None:
    """Show how many series, movies and anime are tracked, and the favorite split."""
    collection = _load_stats()
    if collection is None:
        return

    types = collection.type_distribution()
    favorites = collection.favorite_distribution()

    if as_json:
        output = {
            "types": [b.to_dict() for b in types],
            "favorites": [b.to_dict() for b in favorites],
        }
        click.echo(json_module.dumps(output, indent=2))
        return

    table = Table(title="Collection by Type")
    table.add_column("Type", style="cyan")
    table.add_column("Count", style="bold")
    table.add_column("")
    largest = max(b.count for b in types)
    for b in types:
        table.add_row(b.name, str(b.count), _bar(b.count, largest))
    console.print(table)

    fav, not_fav = favorites
    console.print(f"[yellow]Favorites:[/yellow] {fav.count}  [dim]Not favorite: {not_fav.count}[/dim]")


@stats.command(name="ratings")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def stats_ratings(as_json: bool) -> None:
    """Show the rating histogram.

    Buckets are inclusive at both ends, so a rating of exactly 2, 4, 6 or 8
    is counted in both neighbouring buckets.
    """
    collection = _load_stats()
    if collection is None:
        return

    histogram = collection.rating_histogram()

    if as_json:
        click.echo(json_module.dumps([b.to_dict() for b in histogram], indent=2))
        return

    table = Table(title="Rating Distribution")
    table.add_column("Range", style="cyan")
    table.add_column("Count", style="bold")
    table.add_column("")
    largest = max(b.count for b in histogram)
    for b in histogram:
        table.add_row(b.name, str(b.count), f"[green]{_bar(b.count, largest)}[/green]")
    console.print(table)


@stats.command(name="tags")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--limit", "-n", type=int, default=None, help="Limit number of results")
def stats_tags(as_json: bool, limit: int | None) -> None:
    """Show the most used tags."""
    collection = _load_stats()
    if collection is None:
        return

    if limit is None:
        limit = _setting("stats.tag_limit", DEFAULT_TAG_LIMIT)
    tags = collection.tag_frequency(limit=limit)

    if as_json:
        click.echo(json_module.dumps([t.to_dict() for t in tags], indent=2))
        return

    if not tags:
        console.print("[yellow]No tags defined yet.[/yellow]")
        return

    table = Table(title=f"Tag Usage (Top {len(tags)})")
    table.add_column("Rank", style="dim")
    table.add_column("Tag", style="cyan")
    table.add_column("Color", style="dim")
    table.add_column("Count", style="bold")
    for i, t in enumerate(tags, 1):
        table.add_row(str(i), escape(t.name), t.color, str(t.count))
    console.print(table)


@stats.command(name="seasons")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def stats_seasons(as_json: bool) -> None:
    """Show good/bad/unrated season counts for series and anime."""
    collection = _load_stats()
    if collection is None:
        return

    tally = collection.season_ratings()

    if as_json:
        click.echo(json_module.dumps(tally.to_dict(), indent=2))
        return

    table = Table(title="Season Ratings")
    table.add_column("Rating", style="cyan")
    table.add_column("Seasons", style="bold")
    table.add_row("[green]Liked[/green]", str(tally.good))
    table.add_row("[red]Disliked[/red]", str(tally.bad))
    table.add_row("[dim]Unrated[/dim]", str(tally.unrated))
    console.print(table)


@stats.command(name="timeline")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--months", "-m", type=int, default=None, help="Only show the last N months")
def stats_timeline(as_json: bool, months: int | None) -> None:
    """Show how many items were added each month.

    \b
    Examples:
        mediatracker stats timeline              # All months
        mediatracker stats timeline --months 6   # Last 6 months
    """
    collection = _load_stats()
    if collection is None:
        return

    timeline = collection.timeline()
    if months:
        timeline = timeline[-months:]

    if as_json:
        click.echo(json_module.dumps([t.to_dict() for t in timeline], indent=2))
        return

    table = Table(title="Additions Over Time")
    table.add_column("Month", style="cyan")
    table.add_column("Added", style="bold")
    table.add_column("")
    largest = max(t.count for t in timeline)
    for t in timeline:
        table.add_row(t.month, str(t.count), _bar(t.count, largest))
    console.print(table)


@stats.command(name="top")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--limit", "-n", type=int, default=None, help="Number of titles to show")
def stats_top(as_json: bool, limit: int | None) -> None:
    """Show the highest rated titles."""
    collection = _load_stats()
    if collection is None:
        return

    if limit is None:
        limit = _setting("stats.top_n", DEFAULT_TOP_N)
    entries = collection.top_rated(limit=limit)

    if as_json:
        click.echo(json_module.dumps([e.to_dict() for e in entries], indent=2))
        return

    if not entries:
        console.print("[yellow]No rated titles yet.[/yellow]")
        return

    table = Table(title="Top Rated")
    table.add_column("#", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Type", style="dim")
    table.add_column("Rating", style="bold")
    for i, e in enumerate(entries, 1):
        table.add_row(str(i), escape(e.title), e.type.value, f"{e.rating:g}/10")
    console.print(table)


@stats.command(name="completion")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--limit", "-n", type=int, default=None, help="Number of titles to show")
def stats_completion(as_json: bool, limit: int | None) -> None:
    """Show season completion for series and anime."""
    collection = _load_stats()
    if collection is None:
        return

    if limit is None:
        limit = _setting("stats.top_n", DEFAULT_TOP_N)
    entries = collection.completion(limit=limit)

    if as_json:
        click.echo(json_module.dumps([e.to_dict() for e in entries], indent=2))
        return

    if not entries:
        console.print("[yellow]No series or anime with seasons yet.[/yellow]")
        return

    table = Table(title="Completion")
    table.add_column("Title", style="cyan")
    table.add_column("Type", style="dim")
    table.add_column("Seasons")
    table.add_column("Done", style="bold")
    for e in entries:
        color = "green" if e.percentage == 100 else "yellow" if e.percentage >= 50 else "red"
        table.add_row(
            escape(e.title),
            e.type.value,
            f"{e.completed}/{e.total}",
            f"[{color}]{e.percentage}%[/{color}]",
        )
    console.print(table)


@stats.command(name="summary")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def stats_summary(as_json: bool) -> None:
    """Show a full statistics overview.

    \b
    Examples:
        mediatracker stats summary         # Full overview
        mediatracker stats summary --json  # JSON output
    """
    collection = _load_stats()
    if collection is None:
        return

    summary = collection.get_summary(
        top_n=_setting("stats.top_n", DEFAULT_TOP_N),
        tag_limit=_setting("stats.tag_limit", DEFAULT_TAG_LIMIT),
    )

    if as_json:
        click.echo(json_module.dumps(summary, indent=2))
        return

    console.print()
    console.print("[bold cyan]Collection Overview[/bold cyan]")
    console.print(f"  Total items: {summary['total']}")
    for b in summary["types"]:
        console.print(f"    {b['name']}: {b['count']}")
    console.print(f"  Favorites: {summary['favorites'][0]['count']}")

    console.print()
    console.print("[bold cyan]Ratings[/bold cyan]")
    console.print("  " + ", ".join(f"{b['name']}: {b['count']}" for b in summary["ratings"]))

    season_ratings = summary["season_ratings"]
    console.print()
    console.print("[bold cyan]Season Ratings[/bold cyan]")
    console.print(
        f"  Liked: {season_ratings['good']}  Disliked: {season_ratings['bad']}"
        f"  Unrated: {season_ratings['unrated']}"
    )

    if summary["tags"]:
        console.print()
        console.print("[bold cyan]Top Tags[/bold cyan]")
        console.print("  " + ", ".join(f"{escape(t['name'])} ({t['count']})" for t in summary["tags"]))

    if summary["top_rated"]:
        console.print()
        console.print("[bold cyan]Top Rated[/bold cyan]")
        for i, r in enumerate(summary["top_rated"], 1):
            console.print(f"  {i}. {escape(r['title'])} ({r['rating']:g}/10)")

    if summary["completion"]:
        console.print()
        console.print("[bold cyan]Completion[/bold cyan]")
        for c in summary["completion"]:
            console.print(f"  {escape(c['title'])}: {c['percentage']}% ({c['completed']}/{c['total']})")

    recent = summary["timeline"][-6:]
    if recent:
        console.print()
        console.print("[bold cyan]Recent Activity[/bold cyan]")
        for t in recent:
            console.print(f"  {t['month']}: {t['count']} added")

    console.print()
