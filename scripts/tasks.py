#!/usr/bin/env python3
"""
Daily Notes Task CLI - keeps task metadata, rollover and summaries in sync.

Usage:
    tasks.py refresh [--json]
    tasks.py open [--date YYYY-MM-DD]
    tasks.py add-title FILE [--line N]
    tasks.py rollover [--to YYYY-MM-DD]
    tasks.py roll-task FILE LINE [--to YYYY-MM-DD]
    tasks.py summary
    tasks.py sample
    tasks.py save FILE
    tasks.py normalize FILE [--check]
    tasks.py watch [--interval SECONDS]
"""

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))
from utils import load_config, parse_cli_date, require_notes_folder

from daily_tasks.composer import group_label, sorted_group_keys
from daily_tasks.notes import read_note
from daily_tasks.parser import sort_tasks_by_priority
from daily_tasks.session import Session

logger = logging.getLogger(__name__)


def _session() -> Session:
    config = load_config()
    require_notes_folder(config)
    return Session(config)


def _cli_date(value: str | None) -> date | None:
    try:
        return parse_cli_date(value)
    except ValueError:
        print(f"❌ Invalid date (expected YYYY-MM-DD): {value}", file=sys.stderr)
        sys.exit(1)


def _task_label(task: dict) -> str:
    priority = f"({task['priority']}) " if task.get('priority') else ''
    task_id = f" id:{task['id']}" if task.get('id') else ''
    return f"{priority}{task['text']}{task_id}"


def cmd_refresh(args, session: Session):
    """Print the daily notes list and open tasks grouped by project."""
    views = session.refresh_all()

    if args.json:
        print(json.dumps({
            'notes': [
                {'filename': n['filename'], 'date': n['date'].isoformat()}
                for n in views['notes']
            ],
            'open_tasks': {
                group_label(key): [
                    {
                        'priority': t['priority'],
                        'text': t['text'],
                        'id': t['id'],
                        'cd': t['cd'],
                        'due': t['due'],
                        'source_file': t['source_file'],
                    }
                    for t in sort_tasks_by_priority(views['open_tasks'][key])
                ]
                for key in sorted_group_keys(views['open_tasks'])
            },
            'warnings': views['warnings'],
        }, indent=2))
        return

    print("📅 Daily Notes")
    if not views['notes']:
        print("  No daily notes yet. Run `tasks.py sample` to generate demo data.")
    for note in views['notes']:
        star = " ⭐" if note['date'] == session.today() else ""
        print(f"  {note['filename']}{star}")
    print()

    print("📋 Open Tasks")
    groups = views['open_tasks']
    if not groups:
        print("  No open tasks found. Add tasks to a daily note or run the demo command.")
    for key in sorted_group_keys(groups):
        print(f"  {group_label(key)} ({len(groups[key])})")
        for task in sort_tasks_by_priority(groups[key]):
            print(f"    - {_task_label(task)}  [{task['source_date']}]")

    for warning in views['warnings']:
        print(f"⚠️  {warning}", file=sys.stderr)


def cmd_open(args, session: Session):
    path = session.open_note(_cli_date(args.date))
    print(path)


def cmd_add_title(args, session: Session):
    title = session.add_title(Path(args.file), max(args.line - 1, 0))
    print(f"Inserted heading: # {title}")


def cmd_rollover(args, session: Session):
    count = session.rollover(_cli_date(args.to))
    if count == 0:
        print("No tasks to roll over.")
        return
    print(f"Rolled over {count} task(s).")


def cmd_roll_task(args, session: Session):
    if session.roll_task(Path(args.file), args.line - 1, _cli_date(args.to)):
        print(f"Rolled task on line {args.line} forward.")
    else:
        print(f"No open task to roll on line {args.line}.")


def cmd_summary(args, session: Session):
    total, path = session.regenerate_summary()
    if total == 0:
        print("No tasks found in daily notes.")
        return
    print(f"Generated {path} with {total} tasks.")


def cmd_sample(args, session: Session):
    path, action = session.generate_sample()
    action_text = 'Created' if action == 'created' else 'Appended sample tasks in'
    print(f"{action_text} {path.name}.")


def cmd_save(args, session: Session):
    session.did_save(Path(args.file))
    print(f"Processed {args.file}")


def cmd_normalize(args, session: Session):
    path = Path(args.file).resolve()
    if args.check:
        content = read_note(path)
        if content is None:
            raise OSError(f"Cannot read {path}")
        edits = session.normalization_edits(path, content)
        for edit in edits:
            print(f"{edit['line_no'] + 1}: {edit['new']}")
        if not edits:
            print("Already normalized.")
        return

    if session.normalize_document(path):
        print(f"Normalized {path.name}")
    else:
        print("Already normalized.")


def cmd_watch(args, session: Session):
    if not session.config.get('autosave'):
        print("Autosave is disabled (set TASK_TRACKER_AUTOSAVE=1); run `tasks.py save FILE` after editing.")
        return
    interval = args.interval if args.interval is not None else session.config['autosave_interval']
    logger.info(f"Watching {session.workspace} every {interval:g}s (Ctrl-C to stop)")
    try:
        session.run_autosave(interval)
    except KeyboardInterrupt:
        pass


def main(argv=None):
    parser = argparse.ArgumentParser(description='Daily Notes Task CLI')
    parser.add_argument('--verbose', action='store_true', help='Debug logging')

    subparsers = parser.add_subparsers(dest='command', required=True)

    refresh_parser = subparsers.add_parser('refresh', help='Show daily notes and open tasks')
    refresh_parser.add_argument('--json', action='store_true')
    refresh_parser.set_defaults(func=cmd_refresh)

    open_parser = subparsers.add_parser('open', help="Open or create a daily note (today by default)")
    open_parser.add_argument('--date', help='Note date (YYYY-MM-DD)')
    open_parser.set_defaults(func=cmd_open)

    title_parser = subparsers.add_parser('add-title', help='Insert a heading derived from the filename')
    title_parser.add_argument('file')
    title_parser.add_argument('--line', type=int, default=1, help='1-based line to insert at')
    title_parser.set_defaults(func=cmd_add_title)

    rollover_parser = subparsers.add_parser('rollover', help='Roll uncompleted tasks forward')
    rollover_parser.add_argument('--to', help='Target note date (YYYY-MM-DD), default: today')
    rollover_parser.set_defaults(func=cmd_rollover)

    roll_task_parser = subparsers.add_parser('roll-task', help='Roll one task forward')
    roll_task_parser.add_argument('file')
    roll_task_parser.add_argument('line', type=int, help='1-based line of the task')
    roll_task_parser.add_argument('--to', help='Target note date (YYYY-MM-DD), default: today')
    roll_task_parser.set_defaults(func=cmd_roll_task)

    subparsers.add_parser('summary', help='Regenerate todo.md').set_defaults(func=cmd_summary)
    subparsers.add_parser('sample', help='Generate sample task data').set_defaults(func=cmd_sample)

    save_parser = subparsers.add_parser('save', help='Process a saved document')
    save_parser.add_argument('file')
    save_parser.set_defaults(func=cmd_save)

    normalize_parser = subparsers.add_parser('normalize', help='Normalize task metadata in a document')
    normalize_parser.add_argument('file')
    normalize_parser.add_argument('--check', action='store_true', help='Print edits without writing')
    normalize_parser.set_defaults(func=cmd_normalize)

    watch_parser = subparsers.add_parser('watch', help='Process saves automatically (autosave)')
    watch_parser.add_argument('--interval', type=float)
    watch_parser.set_defaults(func=cmd_watch)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    session = _session()
    try:
        args.func(args, session)
    except OSError as e:
        print(f"❌ {args.command} failed: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        session.dispose()


if __name__ == '__main__':
    main()
