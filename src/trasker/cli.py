"""CLI entrypoint for trasker."""

from __future__ import annotations

from pathlib import Path
import sys
from typing import Annotated

import typer

from . import __version__, render, storage
from .index import TaskIndex
from .logging_setup import setup_logging
from .models import TaskError
from .shell import TaskShell, delete_without_prompt, open_in_editor, prompt_and_delete

TasksRootOption = Annotated[
    Path | None,
    typer.Option("--tasks-root", help="Explicit .tasks path (default: ./.tasks)"),
]


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


app = typer.Typer(
    help="Track small personal tasks as directories on disk",
    add_completion=False,
)


def _can_render_rich_output() -> bool:
    return sys.stdout.isatty()


def _print_rich(renderable) -> None:
    from rich.console import Console

    Console().print(renderable)


def _warn_config(message: str) -> None:
    typer.echo(f"Warning: {message}", err=True)


def _resolve_root(tasks_root: Path | None) -> Path:
    if tasks_root is not None:
        return tasks_root.expanduser().resolve()
    return storage.default_tasks_root(Path.cwd())


def _run_and_handle(fn) -> None:
    try:
        fn()
    except TaskError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def build_shell(root: Path) -> TaskShell:
    settings = storage.resolve_settings(root, warn=_warn_config)
    return TaskShell(
        root,
        editor=lambda path: open_in_editor(path, settings.editor),
        confirm_and_delete=prompt_and_delete if settings.confirm_delete else delete_without_prompt,
        rich_output=settings.rich_output and _can_render_rich_output(),
    )


@app.callback(invoke_without_command=True)
def root_callback(
    ctx: typer.Context,
    tasks_root: TasksRootOption = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output to stderr")] = False,
    log_file: Annotated[Path | None, typer.Option("--log-file", help="Also write logs to this file")] = None,
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Print the version"),
    ] = False,
) -> None:
    """Start the interactive task shell when no command is provided."""
    setup_logging(verbose=verbose, log_file=log_file)
    if ctx.invoked_subcommand is not None:
        return
    build_shell(_resolve_root(tasks_root)).run()


@app.command("init")
def init_cmd(tasks_root: TasksRootOption = None) -> None:
    """Create the .tasks directory and default config."""
    root = _resolve_root(tasks_root)
    if not storage.init_tasks_root(root):
        typer.echo(f"`{root.name}` directory already exists. Skipping initialization.")
    else:
        typer.echo(f"Initialized tasks root: {root}")
    if storage.write_default_config_if_missing(root):
        typer.echo(f"Created config: {storage.config_path(root)}")


@app.command("ls")
def ls_cmd(
    filters: Annotated[
        list[str] | None,
        typer.Argument(
            help="STATUS, CATEGORY, a status (ACTIVE|COMPLETED|DROPPED) or a category (TODO|FIX|PERF|SPIKE)",
            show_default=False,
        ),
    ] = None,
    tasks_root: TasksRootOption = None,
) -> None:
    """List tasks grouped by status (default), by category, or filtered."""

    def _inner() -> None:
        root = _resolve_root(tasks_root)
        storage.require_initialized(root)
        mode = render.parse_list_mode(filters or [])
        index = TaskIndex()
        index.load(storage.iter_task_entries(root))
        listing = render.build_listing(index, mode)
        settings = storage.resolve_settings(root, warn=_warn_config)
        if settings.rich_output and _can_render_rich_output():
            _print_rich(render.render_listing_rich(listing))
        else:
            typer.echo(render.render_listing_plain(listing))

    _run_and_handle(_inner)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
