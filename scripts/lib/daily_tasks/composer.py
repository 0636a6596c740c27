"""Daily note, summary and sample document composer."""

import re

from .parser import format_task_line, parse_task_line, sort_tasks_by_priority

SUMMARY_HEADING = '# Tasks'
GENERATED_MARKER = '<!-- Generated from daily notes. Do not edit by hand; changes are overwritten. -->'
UNGROUPED = ''
UNGROUPED_LABEL = 'Ungrouped'

SAMPLE_NOTE_FILENAME = '2000-01-01.md'
SAMPLE_NOTE_HEADER = '# Daily Note - 2000-01-01'
SAMPLE_NOTE_INTRO = 'This is a sample note.'
SAMPLE_TASKS = [
    '- [ ] (A) Fix critical login bug due:2000-01-05 +Backend @work',
    '- [ ] (A) Draft weekly roadmap +Planning @work',
    '- [ ] (B) Review UI spacing updates +UI due:2000-01-03 +Web @work',
    '- [ ] (B) Follow up with vendor about invoices +Finance @office',
    '- [ ] (C) Write release notes for the sprint +Docs @work',
    '- [x] (C) Update dependency versions +Backend',
    '- [ ] Buy groceries @home',
    '- [ ] Plan weekend trip +Personal @phone',
]

_HEADING_RE = re.compile(r'^#{1,6}\s')
_TASKS_HEADING_RE = re.compile(r'^##\s+Tasks\s*$', re.IGNORECASE)


def build_rollover_section(tasks: list[dict]) -> str:
    """Render carried tasks as open checkbox lines, highest priority first."""
    if not tasks:
        return ''
    return '\n'.join(format_task_line(task) for task in sort_tasks_by_priority(tasks)) + '\n'


def compose_daily_note(date_str: str, carried: list[dict] | None = None) -> str:
    """
    Compose a new daily note.

    Sections:
    - # Daily Note - <date>
    - ## Tasks (carried tasks, then an empty checkbox)
    - ## Notes
    """
    return (
        f"# Daily Note - {date_str}\n\n"
        "## Tasks\n\n"
        f"{build_rollover_section(carried or [])}"
        "- [ ] \n\n"
        "## Notes\n\n"
    )


def insert_task_lines(content: str, new_lines: list[str]) -> str:
    """Insert task lines into a note's ``## Tasks`` section.

    Lines go after the last real task in the section (before an empty
    placeholder checkbox), or directly under the heading if the section has
    no tasks. Without a Tasks heading they are appended at the end.
    """
    if not new_lines:
        return content

    lines = content.split('\n')
    heading_idx = next((i for i, line in enumerate(lines) if _TASKS_HEADING_RE.match(line)), None)

    if heading_idx is None:
        body = content.rstrip('\n')
        joined = '\n'.join(new_lines)
        return f"{body}\n\n{joined}\n" if body else f"{joined}\n"

    insert_at = heading_idx + 1
    if insert_at < len(lines) and not lines[insert_at].strip():
        insert_at += 1
    for i in range(heading_idx + 1, len(lines)):
        if _HEADING_RE.match(lines[i]):
            break
        if parse_task_line(lines[i]):
            insert_at = i + 1

    lines[insert_at:insert_at] = new_lines
    return '\n'.join(lines)


def insert_title(content: str, title: str, line_no: int = 0) -> str:
    """Insert ``# title`` and a blank line before line_no."""
    lines = content.split('\n')
    line_no = max(0, min(line_no, len(lines)))
    lines[line_no:line_no] = [f"# {title}", '']
    return '\n'.join(lines)


def sorted_group_keys(groups: dict) -> list[str]:
    """Project names alphabetically, the ungrouped bucket always last."""
    named = sorted((k for k in groups if k != UNGROUPED), key=lambda k: (k.casefold(), k))
    return named + ([UNGROUPED] if UNGROUPED in groups else [])


def group_label(key: str) -> str:
    return UNGROUPED_LABEL if key == UNGROUPED else f"+{key}"


def format_summary(groups: dict) -> str:
    """Render grouped tasks as the generated summary document."""
    lines = [SUMMARY_HEADING, '', GENERATED_MARKER, '']

    for key in sorted_group_keys(groups):
        lines.append(f"## {group_label(key)}")
        lines.append('')
        for task in sort_tasks_by_priority(groups[key]):
            lines.append(format_task_line(task, include_date=True))
        lines.append('')

    return '\n'.join(lines)


def build_sample_note() -> str:
    tasks = '\n'.join(SAMPLE_TASKS)
    return f"{SAMPLE_NOTE_HEADER}\n\n{SAMPLE_NOTE_INTRO}\n\n## Tasks\n\n{tasks}\n\n## Notes\n\n"


def build_sample_append_block() -> str:
    tasks = '\n'.join(SAMPLE_TASKS)
    return f"\n---\n\n## Sample Tasks (Generated)\n\n{SAMPLE_NOTE_INTRO}\n\n{tasks}\n"
