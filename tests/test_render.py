from __future__ import annotations

import pytest

from trasker import render
from trasker.index import TaskIndex
from trasker.models import Category, Status, Task, UnknownFilterError


def _task(task_id: str, category: Category, status: Status, name: str) -> Task:
    return Task(task_id=task_id, name=name, category=category, status=status)


def _index(*tasks: Task) -> TaskIndex:
    index = TaskIndex()
    for task in tasks:
        index.upsert(task)
    return index


def _two_active() -> TaskIndex:
    return _index(
        _task("20260101-000001", Category.TODO, Status.ACTIVE, "alpha"),
        _task("20260101-000002", Category.FIX, Status.ACTIVE, "beta"),
    )


@pytest.mark.parametrize(
    ("args", "expected"),
    [
        ([], render.ListMode(Status)),
        (["STATUS"], render.ListMode(Status)),
        (["CATEGORY"], render.ListMode(Category)),
        (["COMPLETED"], render.ListMode(Status, Status.COMPLETED)),
        (["SPIKE"], render.ListMode(Category, Category.SPIKE)),
    ],
)
def test_parse_list_mode(args: list[str], expected: render.ListMode) -> None:
    assert render.parse_list_mode(args) == expected


@pytest.mark.parametrize("args", [["BOGUS"], [""], ["todo"], ["FIX", "TODO"]])
def test_parse_list_mode_rejects_unknown(args: list[str]) -> None:
    with pytest.raises(UnknownFilterError) as excinfo:
        render.parse_list_mode(args)
    assert "Unknown filter for `ls`" in str(excinfo.value)


def test_group_by_status_lists_every_status() -> None:
    index = _two_active()
    listing = render.build_listing(index, render.ListMode(Status))
    assert render.render_listing_plain(listing).splitlines() == [
        "ACTIVE Tasks:",
        "1 - 20260101-000001 | TODO | alpha",
        "2 - 20260101-000002 | FIX  | beta",
        "COMPLETED Tasks:",
        "DROPPED Tasks:",
    ]
    assert [task.task_id for task in listing.tasks] == ["20260101-000001", "20260101-000002"]


def test_filter_by_category_numbers_from_one() -> None:
    index = _two_active()
    listing = render.build_listing(index, render.parse_list_mode(["FIX"]))
    assert render.render_listing_plain(listing).splitlines() == [
        "FIX Tasks:",
        "1 - 20260101-000002 | ACTIVE | beta",
    ]
    assert [task.task_id for task in listing.tasks] == ["20260101-000002"]


def test_filter_by_status_pads_category_column() -> None:
    index = _index(
        _task("1", Category.SPIKE, Status.DROPPED, "research"),
        _task("2", Category.FIX, Status.ACTIVE, "bug"),
    )
    listing = render.build_listing(index, render.parse_list_mode(["ACTIVE"]))
    assert listing.lines() == ["ACTIVE Tasks:", "1 - 2 | FIX   | bug"]


def test_group_by_category_numbers_across_groups() -> None:
    index = _index(
        _task("1", Category.PERF, Status.ACTIVE, "p"),
        _task("2", Category.TODO, Status.COMPLETED, "t1"),
        _task("3", Category.SPIKE, Status.DROPPED, "s"),
        _task("4", Category.TODO, Status.ACTIVE, "t2"),
    )
    listing = render.build_listing(index, render.ListMode(Category))
    assert listing.lines() == [
        "TODO Tasks:",
        "1 - 2 | COMPLETED | t1",
        "2 - 4 | ACTIVE    | t2",
        "FIX Tasks:",
        "PERF Tasks:",
        "3 - 1 | ACTIVE    | p",
        "SPIKE Tasks:",
        "4 - 3 | DROPPED   | s",
    ]
    positions = [row.position for section in listing.sections for row in section.rows]
    assert positions == [1, 2, 3, 4]
    assert [task.task_id for task in listing.tasks] == ["2", "4", "1", "3"]


def test_grouped_listing_skips_unrecognized_group() -> None:
    index = _index(
        _task("1", Category.UNRECOGNIZED, Status.ACTIVE, "odd"),
        _task("2", Category.TODO, Status.UNRECOGNIZED, "odder"),
    )
    listing = render.build_listing(index, render.ListMode(Status))
    assert listing.lines() == [
        "ACTIVE Tasks:",
        "1 - 1 |      | odd",
        "COMPLETED Tasks:",
        "DROPPED Tasks:",
    ]
    assert [task.task_id for task in listing.tasks] == ["1"]


def test_position_width_grows_past_ten_tasks() -> None:
    tasks = [_task(f"{n:02d}", Category.TODO, Status.ACTIVE, f"t{n}") for n in range(1, 12)]
    listing = render.build_listing(_index(*tasks), render.ListMode(Status))
    lines = listing.lines()
    assert lines[1] == " 1 - 01 | TODO | t1"
    assert lines[11] == "11 - 11 | TODO | t11"


def test_position_width_stays_single_for_ten_tasks() -> None:
    tasks = [_task(f"{n:02d}", Category.TODO, Status.ACTIVE, f"t{n}") for n in range(1, 11)]
    listing = render.build_listing(_index(*tasks), render.parse_list_mode(["TODO"]))
    assert listing.lines()[1] == "1 - 01 | ACTIVE | t1"
    assert listing.lines()[10] == "10 - 10 | ACTIVE | t10"


def test_render_listing_rich_matches_plain_text() -> None:
    pytest.importorskip("rich")
    from rich.console import Console

    listing = render.build_listing(_two_active(), render.ListMode(Status))
    console = Console(record=True, width=140, force_terminal=False, color_system=None)
    console.print(render.render_listing_rich(listing))
    text = console.export_text()
    assert text.splitlines() == render.render_listing_plain(listing).splitlines()


def test_render_task_detail_plain_strips_trailing_newlines() -> None:
    assert render.render_task_detail_plain("# a\n\nbody\n\n") == "# a\n\nbody"


def test_render_task_detail_rich_shows_markdown() -> None:
    pytest.importorskip("rich")
    from rich.console import Console

    console = Console(record=True, width=80, force_terminal=False, color_system=None)
    console.print(render.render_task_detail_rich("# Title\n\n- CATEGORY: TODO\n"))
    text = console.export_text()
    assert "Title" in text
    assert "CATEGORY: TODO" in text
