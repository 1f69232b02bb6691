"""
Main CLI dispatcher for mediatracker.

Usage:
    mediatracker init                    # Initialize .mediatracker/ directory
    mediatracker media [add|list|show|edit|delete|favorite|season|tag|untag|recent]
    mediatracker tags [add|list|edit|delete]
    mediatracker stats [types|ratings|tags|seasons|timeline|top|completion|summary]
    mediatracker transfer [export|import]
    mediatracker lookup [search|add]
"""

import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from mediatracker import __version__

console = Console()


class Context:
    """Shared context for all commands."""

    def __init__(self, verbose: bool = False, dry_run: bool = False):
        self.verbose = verbose
        self.dry_run = dry_run
        self.console = console


pass_context = click.make_pass_decorator(Context, ensure=True)


def setup_logging(verbose: bool) -> None:
    """Route package logging through rich on stderr."""
    logger = logging.getLogger("mediatracker")
    logger.handlers.clear()
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=verbose,
        markup=False,
        rich_tracebacks=True,
    )
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False


@click.group()
@click.version_option(version=__version__, prog_name="mediatracker")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("-n", "--dry-run", is_flag=True, help="Preview without making changes")
@click.pass_context
def main(ctx: click.Context, verbose: bool, dry_run: bool) -> None:
    """Personal media collection tracker.

    Track series, movies and anime: seasons watched, ratings, favorites
    and tags, with statistics and JSON import/export.
    """
    ctx.obj = Context(verbose=verbose, dry_run=dry_run)
    setup_logging(verbose)

    if dry_run:
        console.print("[yellow]DRY RUN MODE - No changes will be made[/yellow]")


@main.command()
@click.option("--force", "-f", is_flag=True, help="Reinitialize an existing .mediatracker/ directory")
@click.pass_obj
def init(ctx, force: bool) -> None:
    """Initialize .mediatracker/ in the current directory.

    Commands run anywhere below this directory use its collection.
    """
    from mediatracker.core.config import DATA_DIR_NAME

    dry_run = ctx.dry_run if ctx else False

    root = Path.cwd()
    data_dir = root / DATA_DIR_NAME

    if data_dir.exists() and not force:
        console.print(f"[yellow]{DATA_DIR_NAME}/ directory already exists at {data_dir}[/yellow]")
        console.print("[dim]Use --force to reinitialize.[/dim]")
        return

    console.print(f"[cyan]Initializing {DATA_DIR_NAME}/ directory at {root}[/cyan]")

    for dir_path in (data_dir, data_dir / "backups"):
        if not dry_run:
            dir_path.mkdir(parents=True, exist_ok=True)
        console.print(f"  [green]Created[/green] {dir_path.relative_to(root)}")

    console.print()
    if dry_run:
        console.print("[yellow]DRY RUN - no changes made[/yellow]")
    else:
        console.print(f"[green]Done![/green] {DATA_DIR_NAME}/ directory initialized.")


# Command groups import the core, so they are registered after main exists
from mediatracker.analytics.commands import stats  # noqa: E402
from mediatracker.config.commands import config  # noqa: E402
from mediatracker.media.commands import media  # noqa: E402
from mediatracker.metadata.commands import lookup  # noqa: E402
from mediatracker.tags.commands import tags  # noqa: E402
from mediatracker.transfer.commands import transfer  # noqa: E402

main.add_command(media)
main.add_command(tags)
main.add_command(stats)
main.add_command(transfer)
main.add_command(lookup)
main.add_command(config)


if __name__ == "__main__":
    main()
