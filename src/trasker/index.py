"""In-memory task index with by-category and by-status views."""

from __future__ import annotations

import logging
from typing import Iterable

from .models import Category, InvalidIndexError, Status, Task
from .storage import parse_task_text

logger = logging.getLogger(__name__)


def _drop(bucket: list[Task], task_id: str) -> None:
    for position, task in enumerate(bucket):
        if task.task_id == task_id:
            del bucket[position]
            return


class TaskIndex:
    """Owns every loaded task and keeps the grouped views in sync.

    Each task sits in exactly one category bucket and one status bucket,
    keyed by its current fields. Buckets hold references to the stored
    task objects and keep insertion order. The display list is the order
    of the most recent listing and is what positional commands resolve
    against.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}
        self._keys: dict[str, tuple[Category, Status]] = {}
        self._by_category: dict[Category, list[Task]] = {value: [] for value in Category}
        self._by_status: dict[Status, list[Task]] = {value: [] for value in Status}
        self._display: list[Task] = []
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    def load(self, entries: Iterable[tuple[str, str]]) -> None:
        """Parse and index `(task_id, text)` entries once per index lifetime.

        Every entry is parsed before anything is indexed, so a malformed
        record leaves the index empty and unloaded.
        """
        if self._loaded:
            return
        parsed = [parse_task_text(task_id, text) for task_id, text in entries]
        for task in parsed:
            self.upsert(task)
        self._loaded = True
        logger.debug("Loaded %d tasks", len(parsed))

    def reset(self) -> None:
        self._tasks.clear()
        self._keys.clear()
        for bucket in self._by_category.values():
            bucket.clear()
        for bucket in self._by_status.values():
            bucket.clear()
        self._display.clear()
        self._loaded = False

    def upsert(self, task: Task) -> Task:
        stored = self._tasks.get(task.task_id)
        if stored is None:
            self._tasks[task.task_id] = task
            self._keys[task.task_id] = (task.category, task.status)
            self._by_category[task.category].append(task)
            self._by_status[task.status].append(task)
            return task

        # buckets follow the recorded keys; the stored object may be mutated by callers
        old_category, old_status = self._keys[task.task_id]
        stored.name = task.name
        stored.category = task.category
        stored.status = task.status
        stored.description = task.description

        if stored.category is not old_category:
            _drop(self._by_category[old_category], stored.task_id)
            self._by_category[stored.category].append(stored)
        if stored.status is not old_status:
            _drop(self._by_status[old_status], stored.task_id)
            self._by_status[stored.status].append(stored)
        self._keys[stored.task_id] = (stored.category, stored.status)
        return stored

    def remove(self, task: Task | str) -> None:
        task_id = task if isinstance(task, str) else task.task_id
        if self._tasks.pop(task_id, None) is not None:
            category, status = self._keys.pop(task_id)
            _drop(self._by_category[category], task_id)
            _drop(self._by_status[status], task_id)
        _drop(self._display, task_id)

    def max_label_width(self, kind: type[Category] | type[Status]) -> int:
        buckets = self._by_category if kind is Category else self._by_status
        return max((len(value.label) for value, bucket in buckets.items() if bucket), default=0)

    def bucket(self, value: Category | Status) -> tuple[Task, ...]:
        if isinstance(value, Category):
            return tuple(self._by_category[value])
        return tuple(self._by_status[value])

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks.values())

    def get(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    @property
    def display(self) -> tuple[Task, ...]:
        return tuple(self._display)

    def replace_display(self, tasks: Iterable[Task]) -> None:
        self._display = [self._tasks[task.task_id] for task in tasks if task.task_id in self._tasks]

    def resolve(self, position: int | str) -> Task:
        """Return the task shown at a 1-based list position."""
        try:
            number = int(position)
        except (TypeError, ValueError):
            raise InvalidIndexError("Invalid index provided.") from None
        if number < 1 or number > len(self._display):
            raise InvalidIndexError("Invalid index provided.")
        return self._display[number - 1]
