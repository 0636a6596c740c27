"""Canonical rewriting of task lines.

Every task line is brought into the form::

    <prefix>[(<P>) ]<text>[ id:..][ cd:..][ due:..][ dd:..]

Missing ids and creation stamps are assigned, the completion stamp follows
the checkbox, and only lines whose text actually changes produce an edit,
so running the pass twice is a no-op.
"""

import logging

from .ids import generate_short_id
from .metadata import encode, find_ids
from .parser import parse_task_line, task_metadata

logger = logging.getLogger(__name__)


def normalize_task_line(line: str, created_stamp: str, done_stamp: str, known_ids: set[str]) -> str | None:
    """Return the canonical form of one line, or None if it is not a task.

    ``created_stamp`` fills a missing ``cd``; ``done_stamp`` fills a missing
    ``dd`` on checked tasks. New ids are reserved in ``known_ids``.
    """
    task = parse_task_line(line)
    if task is None or not task['text']:
        return None

    meta = task_metadata(task)
    if not meta.get('id'):
        meta['id'] = generate_short_id(known_ids)
    if not meta.get('cd'):
        meta['cd'] = created_stamp

    if task['completed']:
        if not meta.get('dd'):
            meta['dd'] = done_stamp
    else:
        meta.pop('dd', None)

    priority = f"({task['priority']}) " if task['priority'] else ''
    return f"{task['prefix']}{priority}{task['text']}{encode(meta)}"


def compute_normalization_edits(
    content: str,
    created_stamp: str,
    done_stamp: str,
    known_ids: set[str] | None = None,
) -> list[dict]:
    """Return the line replacements needed to normalize content.

    Each edit is ``{'line_no': int, 'old': str, 'new': str}``. ``known_ids``
    (lowercased) is extended with every id already in the document before
    any new id is generated.
    """
    if known_ids is None:
        known_ids = set()
    known_ids |= find_ids(content)

    edits = []
    for line_no, raw in enumerate(content.split('\n')):
        line = raw[:-1] if raw.endswith('\r') else raw
        normalized = normalize_task_line(line, created_stamp, done_stamp, known_ids)
        if normalized is not None and normalized != line:
            edits.append({'line_no': line_no, 'old': line, 'new': normalized})

    if edits:
        logger.debug(f"{len(edits)} task line(s) need normalization")
    return edits


def apply_edits(content: str, edits: list[dict]) -> str:
    """Apply line edits, keeping each line's original line ending."""
    lines = content.split('\n')
    for edit in edits:
        eol = '\r' if lines[edit['line_no']].endswith('\r') else ''
        lines[edit['line_no']] = edit['new'] + eol
    return '\n'.join(lines)


def normalize_content(
    content: str,
    created_stamp: str,
    done_stamp: str,
    known_ids: set[str] | None = None,
) -> str:
    edits = compute_normalization_edits(content, created_stamp, done_stamp, known_ids)
    return apply_edits(content, edits) if edits else content
