"""
Per-collection settings.

Settings live in ``.mediatracker/config.yaml`` as nested YAML mappings and
are addressed with dotted keys such as ``stats.top_n``. Anything missing
from the file falls back to the default listed in CONFIG_SCHEMA.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import click
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from mediatracker.analytics.aggregator import DEFAULT_TAG_LIMIT, DEFAULT_TOP_N
from mediatracker.core.backup import DEFAULT_KEEP_COUNT, DEFAULT_KEEP_DAYS
from mediatracker.core.config import get_paths
from mediatracker.metadata.search import DEFAULT_DEBOUNCE_MS, MIN_QUERY_LENGTH
from mediatracker.metadata.tmdb import DEFAULT_LANGUAGE

console = Console()


@dataclass(frozen=True)
class Setting:
    key: str
    default: Any
    type: type
    description: str

    def coerce(self, raw: str) -> Any:
        """Convert a command-line string to this setting's type."""
        return self.type(raw)


CONFIG_SCHEMA: dict[str, Setting] = {
    s.key: s
    for s in (
        Setting("tmdb.language", DEFAULT_LANGUAGE, str, "Language for TMDB titles and overviews"),
        Setting("search.debounce_ms", DEFAULT_DEBOUNCE_MS, int, "Pause before a lookup is sent"),
        Setting("search.min_query_length", MIN_QUERY_LENGTH, int, "Shortest query worth looking up"),
        Setting("stats.top_n", DEFAULT_TOP_N, int, "Length of the top-rated and completion lists"),
        Setting("stats.tag_limit", DEFAULT_TAG_LIMIT, int, "Tags listed under tag usage"),
        Setting("backup.keep_days", DEFAULT_KEEP_DAYS, int, "Backups older than this may be pruned"),
        Setting("backup.keep_count", DEFAULT_KEEP_COUNT, int, "Newest backups that are never pruned"),
    )
}


def get_config_path() -> Path:
    return get_paths().config_file


def load_config() -> dict[str, Any]:
    """Read the settings file. A missing, empty or non-mapping file reads as {}."""
    path = get_config_path()
    if not path.is_file():
        return {}
    loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    return loaded if isinstance(loaded, dict) else {}


def save_config(config: dict[str, Any]) -> None:
    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(config, default_flow_style=False, sort_keys=False), encoding="utf-8")


def _parent_of(config: dict[str, Any], key: str, create: bool = False) -> tuple[dict | None, str]:
    """Mapping that holds the last part of *key*, and that last part.

    With *create*, intermediate mappings are made (or replaced when they are
    scalars); otherwise a missing branch gives None.
    """
    *branches, leaf = key.split(".")
    node = config
    for name in branches:
        child = node.get(name)
        if not isinstance(child, dict):
            if not create:
                return None, leaf
            child = node[name] = {}
        node = child
    return node, leaf


def get_config_value(key: str, default: Any = None) -> Any:
    """Look up a dotted key, returning *default* when it is not set."""
    parent, leaf = _parent_of(load_config(), key)
    if parent is None or leaf not in parent:
        return default
    return parent[leaf]


def set_config_value(key: str, value: Any) -> None:
    config = load_config()
    parent, leaf = _parent_of(config, key, create=True)
    parent[leaf] = value
    save_config(config)


def _setting_or_exit(key: str) -> Setting:
    setting = CONFIG_SCHEMA.get(key)
    if setting is None:
        console.print(f"[red]Unknown setting: {escape(key)}[/red]")
        console.print("[dim]Known settings: " + ", ".join(CONFIG_SCHEMA) + "[/dim]")
        raise SystemExit(1)
    return setting


@click.group()
def config():
    """View and change settings for this collection."""
    pass


@config.command(name="show")
@click.option("--all", "show_all", is_flag=True, help="Include settings left at their default")
def show_cmd(show_all: bool):
    """List customised settings (or every setting with --all)."""
    path = get_config_path()
    overrides = {key: get_config_value(key) for key in CONFIG_SCHEMA}
    rows = [
        (setting, overrides[key])
        for key, setting in CONFIG_SCHEMA.items()
        if show_all or overrides[key] not in (None, setting.default)
    ]

    if not rows:
        console.print("[dim]Nothing customised. Using defaults.[/dim]")
        console.print(f"[dim]Settings file: {path}[/dim]")
        return

    table = Table(title="Settings", header_style="bold cyan")
    table.add_column("Key")
    table.add_column("Value", style="green")
    table.add_column("Default", style="dim")
    table.add_column("Meaning", style="dim")
    for setting, value in rows:
        shown = escape(str(value)) if value is not None else f"[dim]{setting.default}[/dim]"
        table.add_row(setting.key, shown, str(setting.default), setting.description)

    console.print(table)
    console.print(f"[dim]Settings file: {path}[/dim]")


@config.command(name="get")
@click.argument("key")
def get_cmd(key: str):
    """Print one setting.

    \b
    Examples:
        mediatracker config get stats.top_n
    """
    setting = _setting_or_exit(key)
    value = get_config_value(key)
    if value is None:
        console.print(f"{key} = {setting.default} [dim](default)[/dim]")
    else:
        console.print(f"{key} = {escape(str(value))}")


@config.command(name="set")
@click.argument("key")
@click.argument("value")
def set_cmd(key: str, value: str):
    """Change one setting.

    \b
    Examples:
        mediatracker config set stats.top_n 10
        mediatracker config set tmdb.language ja-JP
    """
    setting = _setting_or_exit(key)
    try:
        typed = setting.coerce(value)
    except ValueError as e:
        console.print(f"[red]Invalid value type for {key}: expected {setting.type.__name__}[/red]")
        raise SystemExit(1) from e

    set_config_value(key, typed)
    console.print(f"[green]{key} = {escape(str(typed))}[/green]")


@config.command(name="reset")
@click.argument("key", required=False)
@click.option("--all", "reset_all", is_flag=True, help="Forget every customised setting")
@click.option("--force", "-f", is_flag=True, help="Skip confirmation prompt")
def reset_cmd(key: str | None, reset_all: bool, force: bool):
    """Return one setting, or all of them, to the default."""
    if reset_all:
        if not force and not click.confirm("Forget all customised settings?"):
            console.print("[yellow]Cancelled[/yellow]")
            return
        get_config_path().unlink(missing_ok=True)
        console.print("[green]Every setting is back to its default[/green]")
        return

    if not key:
        console.print("[red]Specify a key, or pass --all[/red]")
        raise SystemExit(1)

    setting = _setting_or_exit(key)
    config = load_config()
    parent, leaf = _parent_of(config, key)
    if parent is None or leaf not in parent:
        console.print(f"[dim]{key} was not customised[/dim]")
        return

    del parent[leaf]
    save_config(config)
    console.print(f"[green]Reset {key} (now {setting.default})[/green]")


@config.command(name="path")
def path_cmd():
    """Print where the settings file lives."""
    click.echo(str(get_config_path()))
