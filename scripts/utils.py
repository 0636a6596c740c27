#!/usr/bin/env python3
"""
Shared utilities for task tracker scripts.

Configuration via environment variables:
- TASK_TRACKER_WORKSPACE: Workspace root; every .md file below it may hold tasks
- TASK_TRACKER_NOTES_FOLDER: Daily notes folder, relative to the workspace (required)
- TASK_TRACKER_DATE_FORMAT: 'yyyy-mm-dd' (default) or 'yyyymmdd'
- TASK_TRACKER_AUTOSAVE: '1'/'true'/'yes'/'on' to enable the autosave watcher
- TASK_TRACKER_AUTOSAVE_INTERVAL: Watcher poll interval in seconds (default 10)
- TASK_TRACKER_STATE_FILE: Copy-on-create state file
"""

import logging
import os
import sys
from datetime import datetime, date
from pathlib import Path

_SCRIPT_DIR = Path(__file__).parent.resolve()
if str(_SCRIPT_DIR / "lib") not in sys.path:
    sys.path.insert(0, str(_SCRIPT_DIR / "lib"))

from daily_tasks.notes import DATE_FORMATS, DEFAULT_DATE_FORMAT

logger = logging.getLogger(__name__)

DEFAULT_WORKSPACE = Path.home() / "Notes"
DEFAULT_AUTOSAVE_INTERVAL = 10.0
TRUTHY = {'1', 'true', 'yes', 'on'}


def load_config() -> dict:
    """Build the session config dict from TASK_TRACKER_* variables.

    'notes_folder' is None when no folder is configured.
    """
    workspace = Path(os.getenv('TASK_TRACKER_WORKSPACE', str(DEFAULT_WORKSPACE))).expanduser()

    folder_raw = os.getenv('TASK_TRACKER_NOTES_FOLDER', '').strip()
    notes_folder = (workspace / Path(folder_raw).expanduser()) if folder_raw else None

    date_format = os.getenv('TASK_TRACKER_DATE_FORMAT', DEFAULT_DATE_FORMAT).strip().lower()
    if date_format not in DATE_FORMATS:
        logger.warning(
            f"Unknown TASK_TRACKER_DATE_FORMAT '{date_format}', using {DEFAULT_DATE_FORMAT}"
        )
        date_format = DEFAULT_DATE_FORMAT

    try:
        interval = float(os.getenv('TASK_TRACKER_AUTOSAVE_INTERVAL', DEFAULT_AUTOSAVE_INTERVAL))
    except ValueError:
        interval = DEFAULT_AUTOSAVE_INTERVAL

    state_file = Path(os.getenv(
        'TASK_TRACKER_STATE_FILE',
        workspace / ".task-tracker" / "sync-state.json",
    )).expanduser()

    return {
        'workspace': workspace,
        'notes_folder': notes_folder,
        'date_format': date_format,
        'autosave': os.getenv('TASK_TRACKER_AUTOSAVE', '').strip().lower() in TRUTHY,
        'autosave_interval': interval,
        'state_file': state_file,
    }


def require_notes_folder(config: dict) -> Path:
    """Return the notes folder, or explain how to configure it and exit."""
    if config.get('notes_folder') is None:
        print("\n❌ Daily notes folder is not configured.\n", file=sys.stderr)
        print("Configure paths via environment variables:", file=sys.stderr)
        print("  TASK_TRACKER_WORKSPACE=~/path/to/workspace", file=sys.stderr)
        print("  TASK_TRACKER_NOTES_FOLDER=Daily", file=sys.stderr)
        print("", file=sys.stderr)
        sys.exit(1)
    return config['notes_folder']


def parse_cli_date(value: str | None) -> date | None:
    """Parse a --date style YYYY-MM-DD argument; None passes through."""
    if value is None:
        return None
    return datetime.strptime(value, '%Y-%m-%d').date()
