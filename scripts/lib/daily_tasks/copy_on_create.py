"""Mirror tasks authored in ordinary documents into today's daily note.

The first save of a document only records which task ids it already holds
(its baseline). On later saves every id that is neither in the baseline
nor already copied is new: its line is copied into the current period's
note with a ``>[[source]]`` decorator, and the original gains
``~[[period]]``. Copied ids are kept so nothing is mirrored twice.
"""

import logging

from .metadata import encode
from .parser import (
    add_migration_decorator,
    add_origin_decorator,
    parse_tasks_from_content,
    task_metadata,
)
from .state import BASELINE_CAPTURED, MONITORED

logger = logging.getLogger(__name__)


def _line_for(task: dict, text: str, prefix: str = None) -> str:
    priority = f"({task['priority']}) " if task['priority'] else ''
    prefix = task['prefix'] if prefix is None else prefix
    return f"{prefix}{priority}{text}{encode(task_metadata(task))}"


def mirrored_line(task: dict, source_name: str) -> str:
    """The copy written into the period note; keeps the task's id."""
    checkbox = '[x]' if task['completed'] else '[ ]'
    return _line_for(task, add_origin_decorator(task['text'], source_name), prefix=f"- {checkbox} ")


def process_save(state: dict, doc_key: str, content: str, period: str, source_name: str) -> dict:
    """Run copy-on-create for one save of a non-period document.

    ``state`` is mutated in place. Returns::

        {'action': 'baseline' | 'copied' | 'none',
         'content': updated source content,
         'copied_lines': lines to append to the period note,
         'copied_ids': ids mirrored on this save}
    """
    tasks = [t for t in parse_tasks_from_content(content) if t.get('id')]
    result = {'action': 'none', 'content': content, 'copied_lines': [], 'copied_ids': []}

    entry = state['documents'].get(doc_key)
    if entry is None:
        state['documents'][doc_key] = {
            'state': BASELINE_CAPTURED,
            'baseline_ids': {t['id'].lower() for t in tasks},
        }
        logger.info(f"Captured baseline of {len(tasks)} task(s) for {source_name}")
        result['action'] = 'baseline'
        return result

    entry['state'] = MONITORED
    known = entry['baseline_ids'] | state['copied_ids']
    lines = content.split('\n')

    for task in tasks:
        task_id = task['id'].lower()
        if task_id in known:
            continue
        known.add(task_id)

        result['copied_lines'].append(mirrored_line(task, source_name))
        lines[task['line_no']] = _line_for(task, add_migration_decorator(task['text'], period))
        state['copied_ids'].add(task_id)
        result['copied_ids'].append(task_id)

    if result['copied_ids']:
        logger.info(f"Copied {len(result['copied_ids'])} new task(s) from {source_name} to {period}")
        result['action'] = 'copied'
        result['content'] = '\n'.join(lines)
    return result
