"""Rich console rendering utilities for shortcut and recipe tables."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from reccall.models import Recipe, RepoConfig
from reccall.service import ShortcutPreview, StoreInfo, build_preview


def render_shortcut_table(console: Console, previews: Iterable[ShortcutPreview], *, title: str) -> int:
    """Render shortcut previews as a table and return how many rows were shown.

    Args:
        console: Rich console for output.
        previews: Shortcut previews to display.
        title: Table title.

    Returns:
        Number of rendered shortcuts.
    """
    table = Table(title=title, header_style="bold", show_lines=False, box=box.MINIMAL_DOUBLE_HEAD)
    table.add_column("Shortcut", style="info", no_wrap=True)
    table.add_column("Context", style="text")

    count = 0
    for preview in previews:
        table.add_row(preview.name, preview.preview)
        count += 1

    if count:
        console.print(table)
    return count


def render_recipe_table(console: Console, recipes: Sequence[Recipe], *, title: str) -> None:
    """Render repository recipes with their metadata.

    Args:
        console: Rich console for output.
        recipes: Recipes to display.
        title: Table title.
    """
    table = Table(title=title, header_style="bold", show_lines=False, box=box.MINIMAL_DOUBLE_HEAD)
    table.add_column("Shortcut", style="info", no_wrap=True)
    table.add_column("Name", style="text")
    table.add_column("Description")
    table.add_column("Context", style="text")

    for recipe in recipes:
        table.add_row(
            recipe.shortcut,
            recipe.name or "-",
            recipe.description or "-",
            build_preview(recipe.context),
        )

    console.print(table)


def render_store_info(console: Console, info: StoreInfo, *, version: str) -> None:
    """Render store statistics for the info command.

    Args:
        console: Rich console for output.
        info: Store summary to display.
        version: Installed package version.
    """
    console.print("[bold]RecCall Information[/bold]")
    console.print(f"  Version: [text]{version}[/text]")
    console.print(f"  Storage file: [text]{escape(str(info.store_path))}[/text]")
    console.print(f"  Total shortcuts: [text]{info.total}[/text]")

    if not info.categories:
        return

    table = Table(title="Categories", header_style="bold", show_lines=False, box=box.MINIMAL_DOUBLE_HEAD)
    table.add_column("Category", style="info")
    table.add_column("Shortcuts", justify="right")
    for category, count in info.categories.items():
        table.add_row(category, str(count))
    console.print(table)


def render_repo_config(console: Console, config: RepoConfig) -> None:
    """Render the current repository configuration.

    Args:
        console: Rich console for output.
        config: Repository configuration to display.
    """
    status = "[success]enabled[/success]" if config.enabled else "[warning]disabled[/warning]"
    console.print("[bold]Repository configuration[/bold]")
    console.print(f"  defaultRepo: [text]{escape(config.default_repo)}[/text]")
    console.print(f"  cacheDir: [text]{escape(str(config.cache_dir))}[/text]")
    console.print(f"  enabled: {status}")
