"""Renderers for list and detail command output."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .index import TaskIndex
from .models import Category, Status, Task, UnknownFilterError

GROUP_BY_STATUS = "STATUS"
GROUP_BY_CATEGORY = "CATEGORY"
UNKNOWN_FILTER_MESSAGE = "Unknown filter for `ls`. Check `help` for correct filters."


@dataclass(frozen=True)
class ListMode:
    """How `ls` arranges tasks.

    `group` is the enum the listing is organised by. `value` narrows the
    listing to a single bucket of that enum; None lists every group.
    """

    group: type[Category] | type[Status]
    value: Category | Status | None = None

    @property
    def secondary(self) -> type[Category] | type[Status]:
        return Category if self.group is Status else Status


def parse_list_mode(args: Sequence[str]) -> ListMode:
    if len(args) > 1:
        raise UnknownFilterError(UNKNOWN_FILTER_MESSAGE)
    token = args[0] if args else GROUP_BY_STATUS
    if token == GROUP_BY_STATUS:
        return ListMode(Status)
    if token == GROUP_BY_CATEGORY:
        return ListMode(Category)
    status = Status.from_token(token)
    if status is not Status.UNRECOGNIZED:
        return ListMode(Status, status)
    category = Category.from_token(token)
    if category is not Category.UNRECOGNIZED:
        return ListMode(Category, category)
    raise UnknownFilterError(UNKNOWN_FILTER_MESSAGE)


@dataclass(frozen=True)
class ListingRow:
    position: int
    task_id: str
    label: str
    name: str


@dataclass
class ListingSection:
    header: str
    rows: list[ListingRow] = field(default_factory=list)


@dataclass
class Listing:
    sections: list[ListingSection]
    tasks: list[Task]
    position_width: int
    label_width: int

    def format_row(self, row: ListingRow) -> str:
        return (
            f"{row.position:>{self.position_width}} - {row.task_id} | "
            f"{row.label:<{self.label_width}} | {row.name}"
        )

    def lines(self) -> list[str]:
        lines: list[str] = []
        for section in self.sections:
            lines.append(section.header)
            lines.extend(self.format_row(row) for row in section.rows)
        return lines


def _label(task: Task, kind: type[Category] | type[Status]) -> str:
    return task.category.label if kind is Category else task.status.label


def build_listing(index: TaskIndex, mode: ListMode) -> Listing:
    """Lay out the index for `mode`, numbering rows across all sections."""
    groups = mode.group.listed() if mode.value is None else (mode.value,)
    listing = Listing(
        sections=[],
        tasks=[],
        position_width=2 if len(index) > 10 else 1,
        label_width=index.max_label_width(mode.secondary),
    )
    for value in groups:
        section = ListingSection(header=f"{value.label} Tasks:")
        for task in index.bucket(value):
            listing.tasks.append(task)
            section.rows.append(
                ListingRow(
                    position=len(listing.tasks),
                    task_id=task.task_id,
                    label=_label(task, mode.secondary),
                    name=task.name,
                )
            )
        listing.sections.append(section)
    return listing


def render_listing_plain(listing: Listing) -> str:
    return "\n".join(listing.lines())


def _label_style(label: str) -> str:
    return {
        "ACTIVE": "cyan",
        "COMPLETED": "green",
        "DROPPED": "dim",
        "TODO": "magenta",
        "FIX": "red",
        "PERF": "yellow",
        "SPIKE": "blue",
    }.get(label, "white")


def render_listing_rich(listing: Listing):
    from rich.console import Group
    from rich.text import Text

    renderables = []
    for section in listing.sections:
        title = section.header.removesuffix(" Tasks:")
        header = Text(title, style=f"bold {_label_style(title)}")
        header.append(" Tasks:", style="bold")
        renderables.append(header)
        for row in section.rows:
            line = Text()
            line.append(f"{row.position:>{listing.position_width}}", style="bold")
            line.append(" - ")
            line.append(row.task_id, style="dim")
            line.append(" | ")
            line.append(f"{row.label:<{listing.label_width}}", style=_label_style(row.label))
            line.append(" | ")
            line.append(row.name)
            renderables.append(line)
    return Group(*renderables)


def render_task_detail_plain(text: str) -> str:
    return text.rstrip("\n")


def render_task_detail_rich(text: str):
    from rich.markdown import Markdown

    return Markdown(text)
