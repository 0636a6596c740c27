"""Persistent synchronization state for copy-on-create.

Stored as JSON::

    {
      "version": 1,
      "copied_ids": ["k3f", ...],
      "documents": {
        "/abs/path/Project.md": {"state": "monitored", "baseline_ids": ["a1b"]}
      }
    }

Document states go ``unseen -> baseline-captured -> monitored``; an unseen
document simply has no entry. Nothing is ever pruned.
"""

import json
import logging
from pathlib import Path

from .notes import write_note

logger = logging.getLogger(__name__)

STATE_VERSION = 1
UNSEEN = 'unseen'
BASELINE_CAPTURED = 'baseline-captured'
MONITORED = 'monitored'


def empty_state() -> dict:
    return {'version': STATE_VERSION, 'copied_ids': set(), 'documents': {}}


def load_sync_state(path: Path) -> dict:
    """Load state from path; missing or corrupt files yield empty state."""
    path = Path(path)
    if not path.exists():
        return empty_state()

    try:
        raw = json.loads(path.read_text(encoding='utf-8'))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning(f"Ignoring unreadable sync state {path}: {e}")
        return empty_state()

    if not isinstance(raw, dict):
        logger.warning(f"Ignoring malformed sync state {path}")
        return empty_state()

    state = empty_state()
    state['copied_ids'] = {str(i).lower() for i in raw.get('copied_ids', [])}
    for doc_path, entry in (raw.get('documents') or {}).items():
        if not isinstance(entry, dict):
            continue
        state['documents'][doc_path] = {
            'state': entry.get('state', BASELINE_CAPTURED),
            'baseline_ids': {str(i).lower() for i in entry.get('baseline_ids', [])},
        }
    return state


def save_sync_state(path: Path, state: dict) -> None:
    payload = {
        'version': STATE_VERSION,
        'copied_ids': sorted(state['copied_ids']),
        'documents': {
            doc_path: {
                'state': entry['state'],
                'baseline_ids': sorted(entry['baseline_ids']),
            }
            for doc_path, entry in sorted(state['documents'].items())
        },
    }
    write_note(path, json.dumps(payload, indent=2) + '\n')


def document_state(state: dict, doc_path: str) -> str:
    entry = state['documents'].get(doc_path)
    return entry['state'] if entry else UNSEEN
