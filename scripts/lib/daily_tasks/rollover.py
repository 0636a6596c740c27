"""Carry unfinished tasks from one period document into a newer one.

The original line gains a ``~[[target]]`` decorator; the carried copy keeps
body, priority and tags but no metadata, so the next normalization pass
gives it a fresh id and creation stamp.
"""

import logging

from .metadata import encode
from .parser import (
    add_migration_decorator,
    migration_targets,
    parse_tasks_from_content,
    sort_tasks_by_priority,
    strip_migration_decorators,
    task_metadata,
)

logger = logging.getLogger(__name__)


def is_rollover_candidate(task: dict, target: str) -> bool:
    return not task['completed'] and target not in migration_targets(task['text'])


def mark_migrated(task: dict, target: str) -> str:
    """Rebuild the task's line with a migration decorator before its metadata."""
    priority = f"({task['priority']}) " if task['priority'] else ''
    text = add_migration_decorator(task['text'], target)
    return f"{task['prefix']}{priority}{text}{encode(task_metadata(task))}"


def carried_copy(task: dict) -> dict:
    """Return the task as it should appear in the target period."""
    return {
        'completed': False,
        'priority': task['priority'],
        'text': strip_migration_decorators(task['text']),
    }


def _replace_line(content: str, line_no: int, new_line: str) -> str:
    lines = content.split('\n')
    lines[line_no] = new_line
    return '\n'.join(lines)


def roll_forward(content: str, target: str, source_label: str = None) -> tuple[str, list[dict]]:
    """Roll every uncompleted task in content forward to target.

    Returns the updated source content and the carried tasks sorted by
    priority. Tasks already migrated to target are skipped.
    """
    carried = []
    for task in parse_tasks_from_content(content, source_label):
        if not task['text'] or not is_rollover_candidate(task, target):
            continue
        content = _replace_line(content, task['line_no'], mark_migrated(task, target))
        carried.append(carried_copy(task))

    if carried:
        logger.info(f"Rolling {len(carried)} task(s) from {source_label or 'source'} to {target}")
    return content, sort_tasks_by_priority(carried)


def roll_single(content: str, line_no: int, target: str) -> tuple[str, dict | None]:
    """Roll the task on line_no (0-based) forward to target.

    Returns (content, None) unchanged when the line is not an open task or
    was already rolled to target.
    """
    for task in parse_tasks_from_content(content):
        if task['line_no'] != line_no:
            continue
        if not task['text'] or not is_rollover_candidate(task, target):
            return content, None
        return _replace_line(content, line_no, mark_migrated(task, target)), carried_copy(task)
    return content, None
