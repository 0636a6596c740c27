"""Collect tasks from every daily note into a grouped summary."""

import logging
from pathlib import Path

from .composer import UNGROUPED, format_summary
from .notes import SUMMARY_FILENAME, list_period_documents, read_note, write_note
from .parser import get_uncompleted_tasks, parse_tasks_from_content

logger = logging.getLogger(__name__)


def scan_all_tasks(folder: Path, date_format: str, warnings: list | None = None) -> list[dict]:
    """Parse tasks from every period document, newest note first.

    Unreadable notes are skipped.
    """
    all_tasks = []
    for note in list_period_documents(folder, date_format, warnings):
        content = read_note(note['path'])
        if content is None:
            continue
        all_tasks.extend(parse_tasks_from_content(content, note['label'], note['filename']))
    return all_tasks


def group_tasks_by_project(tasks: list[dict]) -> dict[str, list[dict]]:
    """Group tasks by project; a task with several projects is in each group once."""
    groups: dict[str, list[dict]] = {}
    for task in tasks:
        for key in dict.fromkeys(task['projects']) or [UNGROUPED]:
            groups.setdefault(key, []).append(task)
    return groups


def open_tasks_by_project(folder: Path, date_format: str, warnings: list | None = None) -> dict[str, list[dict]]:
    """Live view: uncompleted tasks across all notes, grouped by project."""
    return group_tasks_by_project(get_uncompleted_tasks(scan_all_tasks(folder, date_format, warnings)))


def write_summary(folder: Path, date_format: str, warnings: list | None = None) -> tuple[int, Path | None]:
    """Regenerate the summary document from all tasks (open and done).

    Returns (task_count, path). Nothing is written when there are no tasks.
    """
    tasks = scan_all_tasks(folder, date_format, warnings)
    if not tasks:
        return 0, None

    summary_path = Path(folder) / SUMMARY_FILENAME
    write_note(summary_path, format_summary(group_tasks_by_project(tasks)))
    logger.debug(f"Wrote summary of {len(tasks)} task(s) to {summary_path}")
    return len(tasks), summary_path
