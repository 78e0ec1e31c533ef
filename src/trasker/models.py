"""Core task models and constants."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

TASKS_DIR_NAME = ".tasks"
TASK_MD_FILE = "TASK.md"
TASK_ID_FORMAT = "%Y%m%d-%H%M%S"


class _Label(Enum):
    @property
    def label(self) -> str:
        return str(self.value)

    @classmethod
    def from_token(cls, token: str):
        for member in cls:
            if member.value and member.value == token:
                return member
        return cls.UNRECOGNIZED  # type: ignore[attr-defined]

    @classmethod
    def listed(cls) -> tuple:
        """Members shown as listing groups, in declaration order."""
        return tuple(member for member in cls if member.value)

    @classmethod
    def tokens(cls) -> tuple[str, ...]:
        return tuple(member.label for member in cls.listed())


class Category(_Label):
    TODO = "TODO"
    FIX = "FIX"
    PERF = "PERF"
    SPIKE = "SPIKE"
    UNRECOGNIZED = ""


class Status(_Label):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    DROPPED = "DROPPED"
    UNRECOGNIZED = ""


@dataclass(slots=True)
class Task:
    task_id: str
    name: str
    category: Category
    status: Status
    description: str = ""


class TaskError(Exception):
    """Base error for task operations."""


class MalformedRecordError(TaskError):
    """Raised when a TASK.md file does not follow the expected layout."""


class NotInitializedError(TaskError):
    """Raised when the tasks root does not exist."""


class InvalidIndexError(TaskError):
    """Raised when a list position does not resolve to a displayed task."""


class UnknownFilterError(TaskError):
    """Raised for an unrecognized `ls` filter."""


class UsageError(TaskError):
    """Raised for malformed command arguments."""
