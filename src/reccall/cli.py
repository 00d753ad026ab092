"""Typer CLI application for RecCall."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Final, NoReturn

import typer
from rich.markup import escape

from reccall import (
    ConfigError,
    ConfirmationRequiredError,
    ImportFormatError,
    InvalidShortcutNameError,
    RecCallSettings,
    Recipe,
    RepositoryClient,
    RepositoryError,
    ShortcutExistsError,
    ShortcutNotFoundError,
    ShortcutPreview,
    __version__,
    load_repo_config,
    update_repo_config,
)
from reccall._internal.output.renderers import (
    render_recipe_table,
    render_repo_config,
    render_shortcut_table,
    render_store_info,
)
from reccall._internal.state import CLIState, build_console, configure_logging

_DEFAULT_EXPORT_FILE: Final[str] = "reccall-shortcuts.json"

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    pretty_exceptions_enable=False,
    help="Record and call context shortcuts across AI IDEs and environments.",
)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose console output."),
) -> None:
    """Parse global options and configure shared state.

    Args:
        ctx: Typer context that stores shared CLI state.
        verbose: Whether to enable verbose console logging.
    """
    _get_state(ctx, verbose=verbose)


@app.command()
def version(ctx: typer.Context) -> None:
    """Display the installed reccall version."""
    state = _ensure_state(ctx)
    state.console.print(f"[success]reccall {__version__}[/success]")


@app.command()
def rec(
    ctx: typer.Context,
    shortcut: str = typer.Argument(..., help="The shortcut name/alias."),
    context: str = typer.Argument(..., help="The context or instruction to store."),
) -> None:
    """Record a new context shortcut.

    Args:
        ctx: Typer context for the current invocation.
        shortcut: Name to record the context under.
        context: Text recalled by the shortcut.
    """
    state = _ensure_state(ctx)
    shortcut = shortcut.strip()
    try:
        state.build_service().record(shortcut, context)
    except InvalidShortcutNameError as exc:
        _abort(state, str(exc))
        return
    except ShortcutExistsError as exc:
        state.console.print(f"[warning]Shortcut '{escape(shortcut)}' already exists![/warning]")
        state.console.print(f"Current context: {escape(exc.existing_context)}")
        _abort(state, f"To update it, use: reccall update {shortcut} <new_context>")
        return

    state.console.print(f"[success]Shortcut '{escape(shortcut)}' has been recorded successfully![/success]")
    state.console.print(f"Stored context: {escape(context)}")


def list_shortcuts(ctx: typer.Context) -> None:
    """List all stored shortcuts.

    Args:
        ctx: Typer context for the current invocation.
    """
    state = _ensure_state(ctx)
    previews = list(state.build_service().list())
    if not previews:
        state.console.print(
            '[warning]No shortcuts stored yet. Use "reccall rec <shortcut> <context>" '
            "to create your first shortcut.[/warning]"
        )
        return

    render_shortcut_table(state.console, _escaped(previews), title=f"Stored shortcuts ({len(previews)})")


app.command("list")(list_shortcuts)
app.command("ls", hidden=True)(list_shortcuts)


@app.command()
def call(
    ctx: typer.Context,
    shortcut: str = typer.Argument(..., help="The shortcut name to retrieve."),
) -> None:
    """Call (retrieve) a stored shortcut.

    Args:
        ctx: Typer context for the current invocation.
        shortcut: Name of the shortcut to recall.
    """
    state = _ensure_state(ctx)
    try:
        context = state.build_service().call(shortcut)
    except ShortcutNotFoundError as exc:
        _abort(state, _not_found_message(exc))
        return

    state.console.print(context, markup=False, emoji=False)


@app.command()
def update(
    ctx: typer.Context,
    shortcut: str = typer.Argument(..., help="The shortcut name to update."),
    context: str = typer.Argument(..., help="The new context or instruction."),
) -> None:
    """Update an existing shortcut.

    Args:
        ctx: Typer context for the current invocation.
        shortcut: Name of the shortcut to update.
        context: Replacement context.
    """
    state = _ensure_state(ctx)
    try:
        previous = state.build_service().update(shortcut, context)
    except ShortcutNotFoundError as exc:
        _abort(state, _not_found_message(exc))
        return

    state.console.print(f"[success]Shortcut '{escape(shortcut)}' has been updated successfully![/success]")
    state.console.print(f"Previous context: {escape(previous)}")
    state.console.print(f"New context: {escape(context)}")


def delete(
    ctx: typer.Context,
    shortcut: str = typer.Argument(..., help="The shortcut name to delete."),
) -> None:
    """Delete a shortcut.

    Args:
        ctx: Typer context for the current invocation.
        shortcut: Name of the shortcut to remove.
    """
    state = _ensure_state(ctx)
    if not state.build_service().delete(shortcut):
        state.console.print(f"[warning]Shortcut '{escape(shortcut)}' not found. Nothing to delete.[/warning]")
        return
    state.console.print(f"[success]Shortcut '{escape(shortcut)}' has been deleted successfully![/success]")


app.command("delete")(delete)
app.command("rm", hidden=True)(delete)


@app.command()
def purge(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Confirm deletion of every shortcut."),
) -> None:
    """Delete all shortcuts (requires --yes).

    Args:
        ctx: Typer context for the current invocation.
        yes: Whether the user confirmed the purge.
    """
    state = _ensure_state(ctx)
    try:
        count = state.build_service().purge(confirm=yes)
    except ConfirmationRequiredError as exc:
        state.console.print(
            f"[warning]This will delete ALL {exc.count} shortcuts. This action cannot be undone.[/warning]"
        )
        _abort(state, "Use --yes flag to confirm deletion.")
        return

    if count == 0:
        state.console.print("[info]No shortcuts to delete.[/info]")
        return
    state.console.print(f"[success]All {count} shortcuts have been deleted successfully![/success]")


@app.command("reload-starter-pack")
def reload_starter_pack(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Confirm overwriting existing shortcuts."),
) -> None:
    """Reload starter pack recipes (overwrites existing shortcuts).

    Args:
        ctx: Typer context for the current invocation.
        yes: Whether the user confirmed the overwrite.
    """
    state = _ensure_state(ctx)
    try:
        count = state.build_service().reload_starter_pack(confirm=yes)
    except ConfirmationRequiredError as exc:
        state.console.print(
            f"[warning]This will overwrite ALL {exc.count} existing shortcuts with starter pack recipes.[/warning]"
        )
        _abort(state, "Use --yes flag to confirm reload.")
        return

    state.console.print(f"[success]Starter pack loaded successfully! {count} recipes loaded.[/success]")


@app.command()
def search(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Text to match against shortcut names and contexts."),
) -> None:
    """Search shortcuts by name or content.

    Args:
        ctx: Typer context for the current invocation.
        query: Case-insensitive substring to look for.
    """
    state = _ensure_state(ctx)
    results = state.build_service().search(query)
    if not results:
        state.console.print(f'[warning]No shortcuts found matching "{escape(query)}".[/warning]')
        return

    render_shortcut_table(
        state.console,
        _escaped(results),
        title=f'Found {len(results)} shortcut(s) matching "{escape(query)}"',
    )


@app.command("export")
def export_shortcuts(
    ctx: typer.Context,
    file: Path = typer.Argument(Path(_DEFAULT_EXPORT_FILE), help="Output file path."),
) -> None:
    """Export shortcuts to a JSON file.

    Args:
        ctx: Typer context for the current invocation.
        file: Destination path.
    """
    state = _ensure_state(ctx)
    try:
        count = state.build_service().export_shortcuts(file)
    except OSError as exc:
        _abort(state, f"Unable to export shortcuts: {exc}")
        return
    state.console.print(f"[success]Exported {count} shortcuts to {escape(str(file))}[/success]")


@app.command("import")
def import_shortcuts(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="Input file path."),
    merge: bool = typer.Option(False, "--merge", "-m", help="Merge with existing shortcuts instead of overwriting."),
) -> None:
    """Import shortcuts from a JSON file.

    Args:
        ctx: Typer context for the current invocation.
        file: Source path.
        merge: Whether to merge into the existing shortcuts.
    """
    state = _ensure_state(ctx)
    try:
        count = state.build_service().import_shortcuts(file, merge=merge)
    except ImportFormatError as exc:
        _abort(state, str(exc))
        return

    mode = "merged with existing" if merge else "overwrote existing"
    state.console.print(f"[success]Imported {count} shortcuts ({mode})[/success]")


@app.command()
def info(ctx: typer.Context) -> None:
    """Show RecCall information and statistics."""
    state = _ensure_state(ctx)
    render_store_info(state.console, state.build_service().info(), version=__version__)


@app.command("repo-list")
def repo_list(
    ctx: typer.Context,
    repo: str | None = typer.Option(None, "--repo", "-r", help="Repository URL (defaults to the configured repo)."),
    refresh: bool = typer.Option(False, "--refresh", help="Clear the recipe cache before listing."),
) -> None:
    """List recipes published by a repository.

    Args:
        ctx: Typer context for the current invocation.
        repo: Repository base URL override.
        refresh: Whether to bypass cached listings.
    """
    state = _ensure_state(ctx)
    with _repository_client(state) as client:
        try:
            if refresh:
                client.clear_cache()
            recipes = client.list_recipes_cached(repo)
        except RepositoryError as exc:
            _abort(state, str(exc))
            return

    if not recipes:
        state.console.print("[warning]The repository does not publish any recipes.[/warning]")
        return
    render_recipe_table(state.console, _escaped_recipes(recipes), title=f"Repository recipes ({len(recipes)})")


@app.command("repo-search")
def repo_search(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Text to match against recipe shortcuts, names, and contexts."),
    repo: str | None = typer.Option(None, "--repo", "-r", help="Repository URL (defaults to the configured repo)."),
) -> None:
    """Search recipes published by a repository.

    Args:
        ctx: Typer context for the current invocation.
        query: Case-insensitive substring to look for.
        repo: Repository base URL override.
    """
    state = _ensure_state(ctx)
    with _repository_client(state) as client:
        try:
            recipes = client.search_recipes(query, repo)
        except RepositoryError as exc:
            _abort(state, str(exc))
            return

    if not recipes:
        state.console.print(f'[warning]No recipes found matching "{escape(query)}".[/warning]')
        return
    render_recipe_table(
        state.console,
        _escaped_recipes(recipes),
        title=f'Found {len(recipes)} recipe(s) matching "{escape(query)}"',
    )


@app.command("repo-install")
def repo_install(
    ctx: typer.Context,
    shortcut: str = typer.Argument(..., help="Shortcut of the recipe to install."),
    repo: str | None = typer.Option(None, "--repo", "-r", help="Repository URL (defaults to the configured repo)."),
) -> None:
    """Install a recipe from a repository into the local store.

    Args:
        ctx: Typer context for the current invocation.
        shortcut: Recipe shortcut to install.
        repo: Repository base URL override.
    """
    state = _ensure_state(ctx)
    with _repository_client(state) as client:
        try:
            recipe = client.install_recipe(shortcut, repo)
        except RepositoryError as exc:
            _abort(state, str(exc))
            return

    label = f" ({escape(recipe.name)})" if recipe.name else ""
    state.console.print(f"[success]Installed recipe '{escape(recipe.shortcut)}'{label}.[/success]")


@app.command("repo-config")
def repo_config(
    ctx: typer.Context,
    default_repo: str | None = typer.Option(None, "--default-repo", help="Set the default repository URL."),
    cache_dir: Path | None = typer.Option(None, "--cache-dir", help="Set the recipe cache directory."),
    enabled: bool | None = typer.Option(
        None,
        "--enable/--disable",
        help="Enable or disable repository features.",
        show_default=False,
    ),
) -> None:
    """Show or change the repository configuration.

    Args:
        ctx: Typer context for the current invocation.
        default_repo: New default repository URL.
        cache_dir: New cache directory.
        enabled: Whether repository features should be enabled.
    """
    state = _ensure_state(ctx)
    try:
        config = update_repo_config(
            state.settings.repo_config_path,
            default_repo=default_repo,
            cache_dir=cache_dir,
            enabled=enabled,
        )
    except ConfigError as exc:
        _abort(state, str(exc))
        return

    if any(value is not None for value in (default_repo, cache_dir, enabled)):
        state.console.print("[success]Repository configuration updated.[/success]")
    render_repo_config(state.console, config)


@app.command("repo-cache-clear")
def repo_cache_clear(ctx: typer.Context) -> None:
    """Delete all cached repository listings."""
    state = _ensure_state(ctx)
    with _repository_client(state) as client:
        removed = client.clear_cache()
    state.console.print(f"[success]Cleared {removed} cached repository listing(s).[/success]")


def _repository_client(state: CLIState) -> RepositoryClient:
    """Return a repository client built from the persisted repo configuration.

    Args:
        state: CLI state.

    Returns:
        RepositoryClient bound to the shortcut service.
    """
    try:
        config = load_repo_config(state.settings.repo_config_path)
    except ConfigError as exc:
        _abort(state, str(exc))
    return RepositoryClient(
        config,
        state.build_service(),
        timeout=state.settings.http_timeout_seconds,
    )


def _not_found_message(exc: ShortcutNotFoundError) -> str:
    """Return the not-found message listing the available shortcuts."""
    available = ", ".join(exc.available) or "none"
    return f"Shortcut '{exc.name}' not found. Available shortcuts: {available}"


def _escaped(previews: Iterable[ShortcutPreview]) -> Iterator[ShortcutPreview]:
    """Yield previews with Rich markup escaped."""
    for preview in previews:
        yield ShortcutPreview(name=escape(preview.name), preview=escape(preview.preview))


def _escaped_recipes(recipes: Iterable[Recipe]) -> list[Recipe]:
    """Return recipes with Rich markup escaped for table rendering."""
    return [
        recipe.model_copy(
            update={
                "shortcut": escape(recipe.shortcut),
                "context": escape(recipe.context),
                "name": escape(recipe.name) if recipe.name else None,
                "description": escape(recipe.description) if recipe.description else None,
            }
        )
        for recipe in recipes
    ]


def _get_state(ctx: typer.Context, *, verbose: bool) -> CLIState:
    """Return the CLI state stored on the Typer context, creating it if necessary.

    Args:
        ctx: Typer context.
        verbose: Whether verbose logging is enabled.

    Returns:
        CLIState instance.
    """
    console = build_console(verbose)
    configure_logging(console, verbose)
    state = ctx.obj
    if not isinstance(state, CLIState):
        ctx.obj = state = CLIState(
            console=console,
            settings=RecCallSettings.from_env(),
            verbose=verbose,
        )
        return state

    state.console = console
    state.verbose = verbose
    return state


def _abort(state: CLIState, message: str, *, exit_code: int = 1) -> NoReturn:
    """Print a styled error message and exit the CLI.

    Args:
        state: CLI state.
        message: Error message to display.
        exit_code: Exit code to use.
    """
    state.console.print(f"[error]Error:[/error] {escape(message)}")
    raise typer.Exit(code=exit_code)


def _ensure_state(ctx: typer.Context) -> CLIState:
    """Return the CLI state, creating a minimal default if the callback was bypassed.

    Args:
        ctx: Typer context.

    Returns:
        CLIState instance.
    """
    state = ctx.obj
    if isinstance(state, CLIState):
        return state
    console = build_console(verbose=False)
    configure_logging(console, verbose=False)
    fallback_state = CLIState(
        console=console,
        settings=RecCallSettings.from_env(),
        verbose=False,
    )
    ctx.obj = fallback_state
    return fallback_state
