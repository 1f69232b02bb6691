"""
CLI commands for TMDB metadata lookup.

Requires a TMDB API read access token in the TMDB_TOKEN environment
variable. Without one, titles can still be added by hand with
``mediatracker media add``.
"""

from __future__ import annotations

import json as json_module

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from mediatracker.core.models import MediaType
from mediatracker.metadata.search import DEFAULT_DEBOUNCE_MS, MIN_QUERY_LENGTH, SearchSession
from mediatracker.metadata.tmdb import (
    DEFAULT_LANGUAGE,
    TMDBClient,
    draft_from_details,
    draft_from_result,
)

console = Console()


def _client() -> TMDBClient | None:
    from mediatracker.config.commands import get_config_value

    client = TMDBClient(language=get_config_value("tmdb.language", DEFAULT_LANGUAGE))
    if not client.configured:
        console.print("[yellow]TMDB_TOKEN is not set; metadata lookup is unavailable.[/yellow]")
        console.print("[dim]Add titles by hand with: mediatracker media add TITLE[/dim]")
        return None
    return client


def _save_draft(ctx, draft, favorite: bool) -> None:
    from mediatracker.core.tracker import open_tracker

    draft.is_favorite = favorite
    tracker = open_tracker(dry_run=ctx.dry_run if ctx else False)
    item = tracker.store.add_media(draft)
    console.print(f"[dim]id: {item.id}[/dim]")


@click.group()
def lookup():
    """Search TMDB and add titles with their details pre-filled."""
    pass


@lookup.command(name="search")
@click.argument("query")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--pick", type=click.IntRange(min=1), help="Add the Nth result to the collection")
@click.option("--anime", is_flag=True, help="With --pick, track a TV show as anime")
@click.option("--favorite", is_flag=True, help="With --pick, mark as favorite")
@click.pass_obj
def search_cmd(ctx, query: str, as_json: bool, pick: int | None, anime: bool, favorite: bool):
    """Search movies and TV shows by title.

    \b
    Examples:
        mediatracker lookup search "the expanse"
        mediatracker lookup search dune --json
        mediatracker lookup search frieren --pick 1 --anime
    """
    from mediatracker.config.commands import get_config_value

    client = _client()
    if client is None:
        return

    session = SearchSession(
        client.search,
        delay=int(get_config_value("search.debounce_ms", DEFAULT_DEBOUNCE_MS)) / 1000,
        min_length=int(get_config_value("search.min_query_length", MIN_QUERY_LENGTH)),
    )
    if len(query.strip()) < session.min_length:
        console.print(f"[yellow]Type at least {session.min_length} characters to search.[/yellow]")
        return

    session.submit(query)
    results = session.wait(timeout=session.delay + client.timeout + 1)

    if pick is not None:
        if pick > len(results):
            console.print(f"[red]Only {len(results)} result(s) for '{escape(query)}'[/red]")
            raise SystemExit(1)
        chosen = results[pick - 1]
        draft = draft_from_result(client, chosen, MediaType.ANIME if anime else None)
        if draft is None:
            console.print(f"[yellow]Could not fetch TMDB details for {escape(chosen.title)}.[/yellow]")
            console.print("[dim]Add the title by hand with: mediatracker media add TITLE[/dim]")
            raise SystemExit(1)
        _save_draft(ctx, draft, favorite)
        return

    if as_json:
        output = [
            {
                "id": r.id,
                "title": r.title,
                "media_type": r.media_type,
                "year": r.year,
                "vote_average": r.vote_average,
                "overview": r.overview,
                "poster_path": r.poster_path,
            }
            for r in results
        ]
        click.echo(json_module.dumps(output, indent=2))
        return

    if not results:
        console.print(f"[yellow]No results for '{escape(query)}'[/yellow]")
        return

    table = Table(title=f"TMDB results for '{escape(query)}'")
    table.add_column("#", style="bold")
    table.add_column("TMDB ID", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Kind")
    table.add_column("Year")
    table.add_column("Score")
    for n, r in enumerate(results, 1):
        table.add_row(str(n), str(r.id), escape(r.title), r.media_type, r.year, f"{r.vote_average:.1f}")
    console.print(table)
    console.print("[dim]Add one with: mediatracker lookup search QUERY --pick N[/dim]")


@lookup.command(name="add")
@click.argument("tmdb_id", type=int)
@click.option("--kind", type=click.Choice(["tv", "movie"]), required=True, help="TMDB kind")
@click.option("--anime", is_flag=True, help="Track a TV show as anime")
@click.option("--favorite", is_flag=True, help="Mark as favorite")
@click.pass_obj
def add_cmd(ctx, tmdb_id: int, kind: str, anime: bool, favorite: bool):
    """Add a title using its TMDB details.

    TV shows get one season per TMDB season and their airing status;
    movies get a single season.
    """
    client = _client()
    if client is None:
        return

    details = client.get_details(tmdb_id, kind)
    if details is None:
        console.print(f"[yellow]Could not fetch TMDB details for {kind} {tmdb_id}.[/yellow]")
        console.print("[dim]Add the title by hand with: mediatracker media add TITLE[/dim]")
        raise SystemExit(1)

    _save_draft(ctx, draft_from_details(details, kind, MediaType.ANIME if anime else None), favorite)
