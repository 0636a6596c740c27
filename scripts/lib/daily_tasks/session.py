"""Session: the event handlers and commands over one workspace.

Create one ``Session`` per process and call ``dispose()`` on shutdown.
It owns the mutable runtime state:

- ``normalizing``: paths whose rewrite-then-save is in progress. A save
  event for such a path is the session's own write and is ignored.
- ``known_ids``: every task id seen in the workspace (lowercased).
- ``state``: copy-on-create synchronization state, persisted on change.
- ``_mtimes``: modification times for the autosave poller.

Config is a plain dict (see ``scripts/utils.py``)::

    {'workspace': Path, 'notes_folder': Path, 'date_format': str,
     'autosave': bool, 'autosave_interval': float, 'state_file': Path}
"""

import logging
import time
from datetime import date
from pathlib import Path

from . import aggregator, copy_on_create, rollover
from .composer import (
    SAMPLE_NOTE_FILENAME,
    build_sample_append_block,
    build_sample_note,
    compose_daily_note,
    insert_task_lines,
    insert_title,
)
from .metadata import find_ids
from .normalizer import apply_edits, compute_normalization_edits
from .notes import (
    SUMMARY_FILENAME,
    filename_to_title,
    format_date,
    list_period_documents,
    most_recent_before,
    note_filename,
    period_date_for,
    read_note,
    write_note,
)
from .parser import format_task_line
from .state import load_sync_state, save_sync_state

logger = logging.getLogger(__name__)


class Session:
    def __init__(self, config: dict, today: date | None = None):
        self.config = config
        self.workspace = Path(config['workspace']).resolve()
        self.folder = Path(config['notes_folder']).resolve()
        self.date_format = config['date_format']
        self.state_file = Path(config['state_file'])
        self._fixed_today = today

        self.normalizing: set[str] = set()
        self.known_ids: set[str] | None = None
        self.state = load_sync_state(self.state_file)
        self._mtimes: dict[str, int] = {}
        self._polled = False
        self._running = False
        self.warnings: list[str] = []

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def dispose(self) -> None:
        self._running = False
        self.normalizing.clear()
        self._mtimes.clear()
        self._polled = False

    def today(self) -> date:
        return self._fixed_today or date.today()

    def today_label(self) -> str:
        return format_date(self.today(), self.date_format)

    # ------------------------------------------------------------------
    # Document classification
    # ------------------------------------------------------------------

    def period_date(self, path: Path) -> date | None:
        return period_date_for(path, self.folder, self.date_format)

    def is_task_document(self, path: Path) -> bool:
        """Markdown files in the workspace, minus the summary and hidden dirs."""
        path = Path(path).resolve()
        if path.suffix.lower() != '.md':
            return False
        if path == self.folder / SUMMARY_FILENAME:
            return False
        for root in (self.workspace, self.folder):
            try:
                relative = path.relative_to(root)
            except ValueError:
                continue
            return not any(part.startswith('.') for part in relative.parts[:-1])
        return False

    def task_documents(self) -> list[Path]:
        found = set()
        for root in (self.workspace, self.folder):
            if root.is_dir():
                found.update(p.resolve() for p in root.rglob('*.md') if self.is_task_document(p))
        return sorted(found)

    def _workspace_ids(self) -> set[str]:
        if self.known_ids is None:
            self.known_ids = set()
            for path in self.task_documents():
                content = read_note(path)
                if content is not None:
                    self.known_ids |= find_ids(content)
        return self.known_ids

    # ------------------------------------------------------------------
    # Save pipeline
    # ------------------------------------------------------------------

    def _write(self, path: Path, content: str) -> None:
        write_note(path, content)
        try:
            self._mtimes[str(path)] = path.stat().st_mtime_ns
        except OSError:
            pass

    def normalization_edits(self, path: Path, content: str) -> list[dict]:
        period = self.period_date(path)
        created = format_date(period, self.date_format) if period else self.today_label()
        return compute_normalization_edits(content, created, self.today_label(), self._workspace_ids())

    def will_save(self, path: Path, content: str) -> str:
        """Return content normalized for writing to path."""
        path = Path(path).resolve()
        if str(path) in self.normalizing or not self.is_task_document(path):
            return content
        edits = self.normalization_edits(path, content)
        return apply_edits(content, edits) if edits else content

    def save_document(self, path: Path, content: str) -> None:
        """Write a document the way an editor save would, firing the handlers."""
        path = Path(path).resolve()
        self._write(path, self.will_save(path, content))
        self.did_save(path)

    def _guarded_save(self, path: Path, content: str) -> None:
        key = str(path)
        self.normalizing.add(key)
        try:
            self.save_document(path, content)
        finally:
            self.normalizing.discard(key)

    def normalize_document(self, path: Path) -> bool:
        """Normalize the document on disk; True if it was rewritten."""
        path = Path(path).resolve()
        content = read_note(path)
        if content is None:
            return False
        edits = self.normalization_edits(path, content)
        if not edits:
            return False
        self._guarded_save(path, apply_edits(content, edits))
        return True

    def did_save(self, path: Path) -> None:
        """Handle a saved document: normalize, then refresh or mirror."""
        path = Path(path).resolve()
        if str(path) in self.normalizing:
            logger.debug(f"Ignoring own save of {path}")
            return
        if not self.is_task_document(path):
            return

        self.normalize_document(path)

        if self.period_date(path):
            self.regenerate_summary()
        else:
            self._copy_on_create(path)

    def _copy_on_create(self, path: Path) -> None:
        content = read_note(path)
        if content is None:
            return

        period = self.today_label()
        result = copy_on_create.process_save(self.state, str(path), content, period, path.stem)
        if result['action'] == 'none':
            return

        if result['action'] == 'copied':
            try:
                today_path = self.open_note()
                today_content = read_note(today_path) or ''
                self.save_document(today_path, insert_task_lines(today_content, result['copied_lines']))
            except OSError:
                # Nothing was mirrored; drop the ids process_save recorded.
                self.state = load_sync_state(self.state_file)
                raise

        save_sync_state(self.state_file, self.state)
        if result['action'] == 'copied':
            self._guarded_save(path, result['content'])

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def refresh_all(self) -> dict:
        """Return both views: the period-document list and open tasks by project."""
        self.warnings = []
        return {
            'notes': list_period_documents(self.folder, self.date_format, self.warnings),
            'open_tasks': aggregator.open_tasks_by_project(self.folder, self.date_format),
            'warnings': self.warnings,
        }

    def open_note(self, day: date | None = None) -> Path:
        """Open or create the period document for day (default today).

        Creating today's note rolls over open tasks from the previous note.
        """
        day = day or self.today()
        path, _ = self._open_or_create(day, roll=day == self.today())
        return path

    def _open_or_create(self, day: date, roll: bool) -> tuple[Path, int]:
        path = self.folder / note_filename(day, self.date_format)
        if path.exists():
            return path, 0

        source_path, updated, carried = self._plan_rollover(day) if roll else (None, None, [])
        self.save_document(path, compose_daily_note(format_date(day, self.date_format), carried))
        logger.info(f"Created daily note: {path}")
        if carried:
            self.save_document(source_path, updated)
        return path, len(carried)

    def _plan_rollover(self, target: date) -> tuple[Path | None, str | None, list[dict]]:
        """Return (source path, marked source content, carried tasks).

        Nothing is written. The target note must be saved before the source
        so a failed target write leaves the originals unmarked.
        """
        source = most_recent_before(self.folder, target, self.date_format)
        if source is None:
            logger.info("No earlier daily note to roll over from")
            return None, None, []
        content = read_note(source['path'])
        if content is None:
            return None, None, []

        updated, carried = rollover.roll_forward(content, format_date(target, self.date_format), source['label'])
        return source['path'], updated, carried

    def rollover(self, target: date | None = None) -> int:
        """Roll all uncompleted tasks of the previous note into target's note.

        Returns the number of tasks carried.
        """
        target = target or self.today()
        path = self.folder / note_filename(target, self.date_format)
        if not path.exists():
            _, count = self._open_or_create(target, roll=True)
            return count

        source_path, updated, carried = self._plan_rollover(target)
        if carried:
            content = read_note(path) or ''
            self.save_document(path, insert_task_lines(content, [format_task_line(t) for t in carried]))
            self.save_document(source_path, updated)
        return len(carried)

    def roll_task(self, path: Path, line_no: int, target: date | None = None) -> bool:
        """Roll the task on line_no (0-based) of path into target's note."""
        path = Path(path).resolve()
        target = target or self.today()
        target_path = self.folder / note_filename(target, self.date_format)
        if path == target_path.resolve():
            logger.warning(f"{path.name} is already the note for {format_date(target, self.date_format)}")
            return False

        content = read_note(path)
        if content is None:
            return False
        updated, carried = rollover.roll_single(content, line_no, format_date(target, self.date_format))
        if carried is None:
            logger.info(f"Nothing to roll on line {line_no + 1} of {path.name}")
            return False

        target_path, _ = self._open_or_create(target, roll=False)
        target_content = read_note(target_path) or ''
        self.save_document(target_path, insert_task_lines(target_content, [format_task_line(carried)]))
        self.save_document(path, updated)
        return True

    def add_title(self, path: Path, line_no: int = 0) -> str:
        path = Path(path).resolve()
        title = filename_to_title(path.stem)
        content = read_note(path)
        if content is None:
            raise OSError(f"Cannot read {path}")
        self.save_document(path, insert_title(content, title, line_no))
        return title

    def regenerate_summary(self) -> tuple[int, Path | None]:
        self.warnings = []
        return aggregator.write_summary(self.folder, self.date_format, self.warnings)

    def generate_sample(self) -> tuple[Path, str]:
        """Create or extend the sample note, normalize it, refresh the summary."""
        path = self.folder / SAMPLE_NOTE_FILENAME
        existing = read_note(path) if path.exists() else None

        if existing is None:
            content, action = build_sample_note(), 'created'
        else:
            separator = '\n' if existing.endswith('\n') else '\n\n'
            content, action = f"{existing}{separator}{build_sample_append_block()}", 'appended'

        self.save_document(path, content)
        return path, action

    # ------------------------------------------------------------------
    # Autosave poller
    # ------------------------------------------------------------------

    def poll(self) -> list[Path]:
        """Dispatch saves for documents modified since the previous poll.

        The first poll only records modification times.
        """
        first = not self._polled
        self._polled = True
        changed = []
        for path in self.task_documents():
            try:
                mtime = path.stat().st_mtime_ns
            except OSError:
                continue
            key = str(path)
            previous = self._mtimes.get(key)
            self._mtimes[key] = mtime
            if not first and previous != mtime:
                changed.append(path)

        for path in changed:
            logger.info(f"Detected save: {path}")
            self.did_save(path)
        return changed

    def run_autosave(self, interval: float | None = None, max_polls: int | None = None) -> None:
        interval = interval if interval is not None else self.config.get('autosave_interval', 10)
        self._running = True
        polls = 0
        self.poll()
        while self._running and (max_polls is None or polls < max_polls):
            time.sleep(interval)
            self.poll()
            polls += 1
