"""Period documents: daily notes whose filename is a calendar date."""

import logging
import os
import re
import tempfile
from datetime import date, datetime
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_DATE_FORMAT = 'yyyy-mm-dd'
DATE_FORMATS = {
    'yyyymmdd': '%Y%m%d',
    'yyyy-mm-dd': '%Y-%m-%d',
}
NOTE_FILENAME_RES = {
    'yyyymmdd': re.compile(r'^(\d{8})\.md$'),
    'yyyy-mm-dd': re.compile(r'^(\d{4}-\d{2}-\d{2})\.md$'),
}
SUMMARY_FILENAME = 'todo.md'


def format_date(day: date, date_format: str = DEFAULT_DATE_FORMAT) -> str:
    """Format a date the way period-document filenames spell it."""
    return day.strftime(DATE_FORMATS[date_format])


def parse_date(value: str, date_format: str = DEFAULT_DATE_FORMAT) -> date | None:
    """Parse a filename-style date string; None if it is not a real date."""
    try:
        return datetime.strptime(value, DATE_FORMATS[date_format]).date()
    except (KeyError, ValueError):
        return None


def note_filename(day: date, date_format: str = DEFAULT_DATE_FORMAT) -> str:
    return f"{format_date(day, date_format)}.md"


def period_date_for(path: Path, folder: Path, date_format: str = DEFAULT_DATE_FORMAT) -> date | None:
    """Return the period date of path if it is a period document in folder."""
    path = Path(path)
    pattern = NOTE_FILENAME_RES.get(date_format)
    if pattern is None:
        return None
    if path.resolve().parent != Path(folder).resolve():
        return None
    match = pattern.fullmatch(path.name)
    if not match:
        return None
    return parse_date(match.group(1), date_format)


def list_period_documents(folder: Path, date_format: str = DEFAULT_DATE_FORMAT, warnings: list | None = None) -> list[dict]:
    """List period documents in folder, newest first.

    Each entry is ``{'filename', 'path', 'date', 'label'}`` where label is
    the filename stem. Names that look like dates but are not valid
    calendar days are excluded and reported through ``warnings``.
    """
    pattern = NOTE_FILENAME_RES.get(date_format)
    if pattern is None:
        logger.warning(f"Unknown date format: {date_format}")
        return []

    try:
        filenames = sorted(entry.name for entry in Path(folder).iterdir() if entry.is_file())
    except OSError as e:
        logger.warning(f"Cannot list notes folder {folder}: {e}")
        return []

    notes = []
    for filename in filenames:
        match = pattern.fullmatch(filename)
        if not match:
            continue
        note_date = parse_date(match.group(1), date_format)
        if note_date is None:
            message = f"Skipping {filename}: not a valid calendar date"
            logger.warning(message)
            if warnings is not None:
                warnings.append(message)
            continue
        notes.append({
            'filename': filename,
            'path': Path(folder) / filename,
            'date': note_date,
            'label': match.group(1),
        })

    notes.sort(key=lambda n: n['date'], reverse=True)
    return notes


def most_recent_before(folder: Path, target: date, date_format: str = DEFAULT_DATE_FORMAT) -> dict | None:
    """Return the newest period document dated strictly before target."""
    for note in list_period_documents(folder, date_format):
        if note['date'] < target:
            return note
    return None


def read_note(path: Path) -> str | None:
    """Read a document, or None if it cannot be read."""
    try:
        return Path(path).read_text(encoding='utf-8')
    except (PermissionError, UnicodeDecodeError, OSError) as e:
        logger.warning(f"Failed to read {path}: {e}")
        return None


def write_note(path: Path, content: str) -> Path:
    """Atomically write a document."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent)
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline='') as tmp:
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
    finally:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)

    return path


def filename_to_title(stem: str) -> str:
    """Turn a filename stem into a title: split on - and _, capitalize words."""
    return ' '.join(word[:1].upper() + word[1:].lower() for word in re.split(r'[-_]', stem))
