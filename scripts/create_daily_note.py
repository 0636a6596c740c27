#!/usr/bin/env python3
"""
Daily note creator with carry-forward from the previous note.

Creating today's note rolls uncompleted tasks of the most recent earlier
note into it and marks the originals with ~[[today]].

Usage:
    python3 scripts/create_daily_note.py [--date YYYY-MM-DD] [--dry-run]
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))
from utils import load_config, require_notes_folder

from daily_tasks.composer import compose_daily_note
from daily_tasks.notes import format_date, most_recent_before, note_filename, read_note
from daily_tasks.rollover import roll_forward
from daily_tasks.session import Session

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def preview_daily_note(config: dict, day) -> str:
    """Compose the note that would be created, without touching any file."""
    folder = config['notes_folder']
    label = format_date(day, config['date_format'])
    carried = []
    if day == datetime.now().date():
        source = most_recent_before(folder, day, config['date_format'])
        content = read_note(source['path']) if source else None
        if content:
            _, carried = roll_forward(content, label, source['label'])
    return compose_daily_note(label, carried)


def main():
    parser = argparse.ArgumentParser(description="Create daily note with carry-forward")
    parser.add_argument("--date", help="Target date (YYYY-MM-DD), default: today")
    parser.add_argument("--dry-run", action="store_true", help="Print to stdout instead of writing")
    args = parser.parse_args()

    config = load_config()
    folder = require_notes_folder(config)

    if args.date:
        try:
            day = datetime.strptime(args.date, "%Y-%m-%d").date()
        except ValueError:
            logger.error(f"Invalid date format: {args.date}")
            sys.exit(1)
    else:
        day = datetime.now().date()

    note_path = folder / note_filename(day, config['date_format'])
    if note_path.exists():
        logger.warning(f"Daily note already exists: {note_path}")
        print(note_path)
        sys.exit(0)

    if args.dry_run:
        print(preview_daily_note(config, day))
        return

    session = Session(config)
    try:
        written_path = session.open_note(day)
    except OSError as e:
        print(f"❌ Failed to create daily note: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        session.dispose()
    print(f"Created: {written_path}")


if __name__ == "__main__":
    main()
