"""Interactive command loop for trasker."""

from __future__ import annotations

import datetime as dt
import logging
from pathlib import Path
from typing import Callable, Sequence

import click
import typer

from . import __version__, render, storage
from .index import TaskIndex
from .models import TaskError, UsageError

logger = logging.getLogger(__name__)

PROMPT = "> "

HELP_TEXT = """\
COMMANDS
  init                          initialize Trasker in current directory
  new                           create and edit a new task
  ls                            list all tasks
    [CATEGORY|STATUS]           list tasks grouped by category/status
    [TODO|FIX|PERF|SPIKE]       list tasks filtered by given category
    [ACTIVE|COMPLETED|DROPPED]  list tasks filtered by given status
  edit <index>                  edit mentioned task from list (see `ls`)
  rm <index>                    delete mentioned task from list (see `ls`)
  cat <index>                   display mentioned task from list (see `ls`)
  cls                           clear the screen
  help                          display this help
  version                       print the version
  exit                          exit the program"""

Editor = Callable[[Path], None]
ConfirmAndDelete = Callable[[Path], bool]


def open_in_editor(path: Path, editor: str | None = None) -> None:
    """Block until the user closes `editor` (or $VISUAL/$EDITOR) on `path`."""
    click.edit(filename=str(path), editor=editor)


def prompt_and_delete(path: Path) -> bool:
    try:
        confirmed = typer.confirm(f"Delete task directory {path}?", default=False)
    except (typer.Abort, click.Abort, EOFError, KeyboardInterrupt):
        return False
    if not confirmed:
        return False
    storage.hard_delete(path)
    return not path.exists()


def delete_without_prompt(path: Path) -> bool:
    storage.hard_delete(path)
    return not path.exists()


def _read_line() -> str:
    return typer.prompt("", default="", show_default=False, prompt_suffix=PROMPT)


def _position_arg(args: Sequence[str], action: str) -> str:
    if len(args) != 1:
        raise UsageError(f"Index of task to {action} not provided. Check `help` for correct usage.")
    return args[0]


class TaskShell:
    def __init__(
        self,
        tasks_root: Path,
        *,
        index: TaskIndex | None = None,
        editor: Editor | None = None,
        confirm_and_delete: ConfirmAndDelete | None = None,
        echo: Callable[[str], None] | None = None,
        rich_output: bool = False,
        clock: Callable[[], dt.datetime] | None = None,
    ) -> None:
        self.tasks_root = tasks_root
        self.index = index if index is not None else TaskIndex()
        self._editor = editor or open_in_editor
        self._confirm_and_delete = confirm_and_delete or prompt_and_delete
        self._echo = echo or typer.echo
        self._rich_output = rich_output
        self._clock = clock or dt.datetime.now
        self._commands: dict[str, Callable[[Sequence[str]], None]] = {
            "init": self.init_cmd,
            "new": self.new_cmd,
            "ls": self.ls_cmd,
            "edit": self.edit_cmd,
            "rm": self.rm_cmd,
            "cat": self.cat_cmd,
            "cls": self.cls_cmd,
            "help": self.help_cmd,
            "version": self.version_cmd,
        }

    def run(self, read_line: Callable[[], str] | None = None) -> None:
        read_line = read_line or _read_line
        while True:
            try:
                line = read_line()
            except (typer.Abort, click.Abort, EOFError, KeyboardInterrupt):
                self._echo("")
                return
            if not self.execute(line):
                return

    def execute(self, line: str) -> bool:
        """Run one command line. Returns False when the loop should stop."""
        tokens = line.split()
        if not tokens:
            return True
        command, args = tokens[0], tokens[1:]
        if command == "exit":
            return False

        handler = self._commands.get(command)
        if handler is None:
            self._echo(f"Unknown command: `{command}`")
            return True

        try:
            handler(args)
        except TaskError as exc:
            logger.debug("Command %r failed: %s", line, exc)
            self._echo(str(exc))
        except click.ClickException as exc:
            logger.debug("Command %r failed: %s", line, exc)
            self._echo(f"Error: {exc.format_message()}")
        except OSError as exc:
            logger.debug("Command %r failed", line, exc_info=True)
            self._echo(f"Error: {exc}")
        return True

    def _emit(self, plain: str, rich_factory: Callable[[], object]) -> None:
        if self._rich_output:
            from rich.console import Console

            Console().print(rich_factory())
        else:
            self._echo(plain)

    def _loaded_index(self) -> TaskIndex:
        storage.require_initialized(self.tasks_root)
        self.index.load(storage.iter_task_entries(self.tasks_root))
        return self.index

    def init_cmd(self, args: Sequence[str]) -> None:
        if not storage.init_tasks_root(self.tasks_root):
            self._echo(
                f"`{self.tasks_root.name}` directory already exists. Skipping initialization."
            )
            if storage.write_default_config_if_missing(self.tasks_root):
                self._echo(f"Created config: {storage.config_path(self.tasks_root)}")
            return
        storage.write_default_config_if_missing(self.tasks_root)
        self.index.reset()
        logger.info("Initialized tasks root at %s", self.tasks_root)
        self._echo("Trasker initialized.")

    def new_cmd(self, args: Sequence[str]) -> None:
        index = self._loaded_index()
        task_dir = storage.allocate_task_dir(self.tasks_root, self._clock())
        task_id = task_dir.name
        path = storage.write_task_text(self.tasks_root, task_id, storage.render_template())
        try:
            self._editor(path)
        finally:
            # the directory is on disk now; index it even if the editor fails
            index.upsert(storage.read_task(self.tasks_root, task_id))
        self._echo(f"Task `{task_id}` created successfully.")

    def ls_cmd(self, args: Sequence[str]) -> None:
        storage.require_initialized(self.tasks_root)
        mode = render.parse_list_mode(args)
        index = self._loaded_index()
        listing = render.build_listing(index, mode)
        index.replace_display(listing.tasks)
        self._emit(
            render.render_listing_plain(listing),
            lambda: render.render_listing_rich(listing),
        )

    def edit_cmd(self, args: Sequence[str]) -> None:
        storage.require_initialized(self.tasks_root)
        task = self.index.resolve(_position_arg(args, "edit"))
        self._editor(storage.task_md_path(self.tasks_root, task.task_id))
        self.index.upsert(storage.read_task(self.tasks_root, task.task_id))
        self._echo(f"Task `{task.task_id}` updated successfully.")

    def rm_cmd(self, args: Sequence[str]) -> None:
        storage.require_initialized(self.tasks_root)
        task = self.index.resolve(_position_arg(args, "delete"))
        task_dir = storage.task_dir(self.tasks_root, task.task_id)
        deleted = self._confirm_and_delete(task_dir)
        if not deleted or task_dir.exists():
            self._echo("Skipped deleting task. HINT: Enter `y` on deletion confirmation.")
            return
        self.index.remove(task)
        self._echo(f"Task `{task.task_id}` deleted successfully.")

    def cat_cmd(self, args: Sequence[str]) -> None:
        storage.require_initialized(self.tasks_root)
        task = self.index.resolve(_position_arg(args, "display"))
        text = storage.read_task_text(self.tasks_root, task.task_id)
        self._emit(
            render.render_task_detail_plain(text),
            lambda: render.render_task_detail_rich(text),
        )

    def cls_cmd(self, args: Sequence[str]) -> None:
        click.clear()

    def help_cmd(self, args: Sequence[str]) -> None:
        self._echo(HELP_TEXT)

    def version_cmd(self, args: Sequence[str]) -> None:
        self._echo(__version__)
