"""Filesystem operations, TASK.md parsing and config IO for trasker."""

from __future__ import annotations

from dataclasses import dataclass
import datetime as dt
import logging
from pathlib import Path
import shutil
from typing import Any, Callable, Iterator

import yaml

from .models import (
    TASK_ID_FORMAT,
    TASK_MD_FILE,
    TASKS_DIR_NAME,
    Category,
    MalformedRecordError,
    NotInitializedError,
    Status,
    Task,
)

logger = logging.getLogger(__name__)

NAME_PREFIX = "# "
CATEGORY_PREFIX = "- CATEGORY: "
STATUS_PREFIX = "- STATUS: "
MIN_TASK_LINES = 4

DEFAULT_TASK_NAME = "New Task"
DEFAULT_TASK_DESCRIPTION = "This is a new task."
CATEGORY_PLACEHOLDER = "|".join(Category.tokens())
STATUS_PLACEHOLDER = "|".join(Status.tokens())

DEFAULT_EDITOR: str | None = None
DEFAULT_RICH_OUTPUT = True
DEFAULT_CONFIRM_DELETE = True


def default_tasks_root(start: Path) -> Path:
    return start.resolve() / TASKS_DIR_NAME


def is_initialized(tasks_root: Path) -> bool:
    return tasks_root.is_dir()


def require_initialized(tasks_root: Path) -> None:
    if not is_initialized(tasks_root):
        raise NotInitializedError(
            f"`{tasks_root.name}` directory not found. Run `init` to setup Trasker in this project."
        )


def task_dir(tasks_root: Path, task_id: str) -> Path:
    return tasks_root / task_id


def task_md_path(tasks_root: Path, task_id: str) -> Path:
    return task_dir(tasks_root, task_id) / TASK_MD_FILE


def render_template(
    name: str = DEFAULT_TASK_NAME,
    category: str = CATEGORY_PLACEHOLDER,
    status: str = STATUS_PLACEHOLDER,
    description: str = DEFAULT_TASK_DESCRIPTION,
) -> str:
    return (
        f"{NAME_PREFIX}{name}\n"
        "\n"
        f"{CATEGORY_PREFIX}{category}\n"
        f"{STATUS_PREFIX}{status}\n"
        "\n"
        f"{description}"
    )


def format_task(task: Task) -> str:
    return render_template(
        name=task.name,
        category=task.category.label,
        status=task.status.label,
        description=task.description,
    )


def _field(task_id: str, lines: list[str], lineno: int, prefix: str) -> str:
    line = lines[lineno - 1]
    if not line.startswith(prefix):
        raise MalformedRecordError(
            f"Task `{task_id}`: line {lineno} must start with '{prefix.strip()}'"
        )
    return line[len(prefix) :]


def parse_task_text(task_id: str, text: str) -> Task:
    lines = [line.rstrip("\r") for line in text.split("\n")]
    if len(lines) < MIN_TASK_LINES:
        raise MalformedRecordError(
            f"Task `{task_id}`: expected at least {MIN_TASK_LINES} lines, found {len(lines)}"
        )

    name = _field(task_id, lines, 1, NAME_PREFIX)
    category = Category.from_token(_field(task_id, lines, 3, CATEGORY_PREFIX).strip())
    status = Status.from_token(_field(task_id, lines, 4, STATUS_PREFIX).strip())
    description = "\n".join(lines[5:]).strip("\n ")
    return Task(
        task_id=task_id,
        name=name,
        category=category,
        status=status,
        description=description,
    )


def read_task_text(tasks_root: Path, task_id: str) -> str:
    path = task_md_path(tasks_root, task_id)
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise MalformedRecordError(f"Task `{task_id}`: unable to read {path} ({exc})") from exc


def read_task(tasks_root: Path, task_id: str) -> Task:
    return parse_task_text(task_id, read_task_text(tasks_root, task_id))


def write_task_text(tasks_root: Path, task_id: str, text: str) -> Path:
    path = task_md_path(tasks_root, task_id)
    path.write_text(text, encoding="utf-8")
    return path


def iter_task_ids(tasks_root: Path) -> list[str]:
    require_initialized(tasks_root)
    return sorted(child.name for child in tasks_root.iterdir() if child.is_dir())


def iter_task_entries(tasks_root: Path) -> Iterator[tuple[str, str]]:
    """Yield `(task_id, TASK.md text)` for every task directory, sorted by id."""
    for task_id in iter_task_ids(tasks_root):
        logger.debug("Reading task %s", task_id)
        yield task_id, read_task_text(tasks_root, task_id)


def allocate_task_dir(tasks_root: Path, now: dt.datetime) -> Path:
    """Create a fresh task directory, probing later seconds on collision."""
    require_initialized(tasks_root)
    when = now.replace(microsecond=0)
    while True:
        candidate = task_dir(tasks_root, when.strftime(TASK_ID_FORMAT))
        try:
            candidate.mkdir()
        except FileExistsError:
            logger.debug("Task id %s taken, probing next second", candidate.name)
            when += dt.timedelta(seconds=1)
            continue
        return candidate


def init_tasks_root(tasks_root: Path) -> bool:
    """Create the tasks root. Returns False when it already existed."""
    if tasks_root.exists():
        return False
    tasks_root.mkdir(parents=True)
    return True


def hard_delete(path: Path) -> None:
    if path.exists():
        shutil.rmtree(path)


def config_path(tasks_root: Path) -> Path:
    return tasks_root / "config.yaml"


def default_config(
    *,
    editor: str | None = DEFAULT_EDITOR,
    rich_output: bool = DEFAULT_RICH_OUTPUT,
    confirm_delete: bool = DEFAULT_CONFIRM_DELETE,
) -> dict[str, Any]:
    return {
        "settings": {
            "editor": editor,
            "rich_output": rich_output,
            "confirm_delete": confirm_delete,
        }
    }


def write_default_config_if_missing(tasks_root: Path) -> bool:
    path = config_path(tasks_root)
    if path.exists():
        return False
    payload = yaml.safe_dump(
        default_config(),
        sort_keys=False,
        default_flow_style=False,
    )
    path.write_text(payload, encoding="utf-8")
    return True


def read_config(tasks_root: Path, warn: Callable[[str], None] | None = None) -> dict[str, Any]:
    path = config_path(tasks_root)
    if not path.exists():
        return {}
    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError):
        if warn is not None:
            warn(f"Unable to parse config at {path}. Falling back to defaults.")
        return {}
    if not isinstance(payload, dict):
        if warn is not None:
            warn(f"Invalid config format at {path}. Falling back to defaults.")
        return {}
    return payload


@dataclass(frozen=True)
class Settings:
    editor: str | None = DEFAULT_EDITOR
    rich_output: bool = DEFAULT_RICH_OUTPUT
    confirm_delete: bool = DEFAULT_CONFIRM_DELETE


def _resolve_bool(
    settings: dict[str, Any],
    key: str,
    default: bool,
    path: Path,
    warn: Callable[[str], None] | None,
) -> bool:
    value = settings.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        if warn is not None:
            warn(f"Invalid settings.{key} in {path}. Using default '{default}'.")
        return default
    return value


def resolve_settings(tasks_root: Path, warn: Callable[[str], None] | None = None) -> Settings:
    path = config_path(tasks_root)
    data = read_config(tasks_root, warn=warn)
    for key in data.keys():
        if key != "settings" and warn is not None:
            warn(f"Unsupported config key '{key}' in {path}. Ignoring.")

    settings = data.get("settings", {})
    if not isinstance(settings, dict):
        if warn is not None:
            warn(f"Invalid settings section in {path}. Using defaults.")
        return Settings()

    supported = set(default_config()["settings"])
    for key in settings.keys():
        if key not in supported and warn is not None:
            warn(f"Unsupported settings key '{key}' in {path}. Ignoring.")

    editor = settings.get("editor")
    if editor is not None and (not isinstance(editor, str) or not editor.strip()):
        if warn is not None:
            warn(f"Invalid settings.editor in {path}. Using $EDITOR.")
        editor = DEFAULT_EDITOR

    return Settings(
        editor=editor.strip() if editor else DEFAULT_EDITOR,
        rich_output=_resolve_bool(settings, "rich_output", DEFAULT_RICH_OUTPUT, path, warn),
        confirm_delete=_resolve_bool(
            settings, "confirm_delete", DEFAULT_CONFIRM_DELETE, path, warn
        ),
    )
