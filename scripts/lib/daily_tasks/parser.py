"""Markdown checkbox task parser.

Supported format (todo.txt-inspired)::

    - [ ] (A) Do something +Project @context id:k3f cd:2026-02-21
    - [x] (B) Done thing +Project @context
"""

import re

from .metadata import decode, encode

# prefix keeps indentation, list marker, checkbox and the spacing after it
TASK_LINE_RE = re.compile(
    r'^(?P<prefix>(?P<indent>\s*)[-*+]\s+\[(?P<check>[ xX])\]\s*)'
    r'(?:\((?P<priority>[A-Z])\)\s+)?'
    r'(?P<body>.*?)\s*$'
)
PROJECT_TAG_RE = re.compile(r'(?<!\S)\+(\S+)')
CONTEXT_TAG_RE = re.compile(r'(?<!\S)@(\S+)')

# Decorators live in the free text, never in the metadata suffix.
MIGRATED_RE = re.compile(r'~\[\[([^\]]+)\]\]')
ORIGIN_RE = re.compile(r'>\[\[([^\]]+)\]\]')


def parse_task_line(line: str, source_date: str = None, source_file: str = None) -> dict | None:
    """Parse one line into a task dict, or return None if it is not a task."""
    match = TASK_LINE_RE.match(line.rstrip('\r\n'))
    if not match or not match.group('body'):
        return None

    text, meta = decode(match.group('body'))

    return {
        'completed': match.group('check').lower() == 'x',
        'priority': match.group('priority'),
        'text': text,
        'projects': PROJECT_TAG_RE.findall(text),
        'contexts': CONTEXT_TAG_RE.findall(text),
        'id': meta.get('id'),
        'cd': meta.get('cd'),
        'due': meta.get('due'),
        'dd': meta.get('dd'),
        'prefix': match.group('prefix'),
        'indent': match.group('indent'),
        'source_date': source_date,
        'source_file': source_file,
        'raw_line': line.rstrip('\r\n'),
    }


def parse_tasks_from_content(content: str, source_date: str = None, source_file: str = None) -> list[dict]:
    """Parse every task line in content; each task records its 0-based line_no."""
    tasks = []
    for line_no, line in enumerate(content.split('\n')):
        task = parse_task_line(line, source_date, source_file)
        if task:
            task['line_no'] = line_no
            tasks.append(task)
    return tasks


def get_uncompleted_tasks(tasks: list[dict]) -> list[dict]:
    return [t for t in tasks if not t['completed']]


def sort_tasks_by_priority(tasks: list[dict]) -> list[dict]:
    """Sort (A) first, then (B)..., unprioritised last; ties keep input order."""
    return sorted(tasks, key=lambda t: (t['priority'] is None, t['priority'] or ''))


def task_metadata(task: dict) -> dict:
    return {key: task[key] for key in ('id', 'cd', 'due', 'dd') if task.get(key)}


def migration_targets(text: str) -> list[str]:
    """Return the periods a task was migrated/copied to (``~[[X]]``)."""
    return MIGRATED_RE.findall(text)


def origin_sources(text: str) -> list[str]:
    """Return the documents a task originated from (``>[[X]]``)."""
    return ORIGIN_RE.findall(text)


def add_migration_decorator(text: str, target: str) -> str:
    """Append ``~[[target]]`` unless the text already carries it."""
    if target in migration_targets(text):
        return text
    return f"{text} ~[[{target}]]"


def add_origin_decorator(text: str, source: str) -> str:
    """Append ``>[[source]]`` unless the text already carries it."""
    if source in origin_sources(text):
        return text
    return f"{text} >[[{source}]]"


def strip_migration_decorators(text: str) -> str:
    cleaned = MIGRATED_RE.sub('', text)
    return re.sub(r'\s{2,}', ' ', cleaned).strip()


def format_task_line(task: dict, include_date: bool = False, include_meta: bool = False) -> str:
    """Format a task as a markdown checkbox line.

    ``include_date`` appends a back-reference to the source period;
    ``include_meta`` renders the trailing metadata tokens.
    """
    checkbox = '[x]' if task['completed'] else '[ ]'
    priority = f"({task['priority']}) " if task.get('priority') else ''
    meta = encode(task_metadata(task)) if include_meta else ''
    date = f" — {task['source_date']}" if include_date and task.get('source_date') else ''
    return f"- {checkbox} {priority}{task['text']}{meta}{date}"
