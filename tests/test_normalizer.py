"""Tests for canonical task line normalization."""

import re
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "scripts" / "lib"))

from daily_tasks.normalizer import (
    apply_edits,
    compute_normalization_edits,
    normalize_content,
    normalize_task_line,
)
from daily_tasks.parser import parse_tasks_from_content

PERIOD = "2026-02-21"
TODAY = "2026-02-21"


# ---------------------------------------------------------------------------
# normalize_task_line()
# ---------------------------------------------------------------------------

class TestNormalizeTaskLine:
    def test_assigns_id_and_creation_date(self):
        line = normalize_task_line("- [ ] Buy milk", PERIOD, TODAY, set())
        assert re.fullmatch(r"- \[ \] Buy milk id:[a-z0-9]{3,10} cd:2026-02-21", line)

    def test_checking_adds_completion_date(self):
        line = normalize_task_line("- [x] Buy milk id:k3f cd:2026-02-10", PERIOD, TODAY, set())
        assert line == "- [x] Buy milk id:k3f cd:2026-02-10 dd:2026-02-21"

    def test_existing_completion_date_kept(self):
        line = "- [x] Buy milk id:k3f cd:2026-02-10 dd:2026-02-12"
        assert normalize_task_line(line, PERIOD, TODAY, set()) == line

    def test_unchecking_removes_completion_date(self):
        line = normalize_task_line("- [ ] Buy milk id:k3f cd:2026-02-10 dd:2026-02-12", PERIOD, TODAY, set())
        assert line == "- [ ] Buy milk id:k3f cd:2026-02-10"

    def test_reorders_tokens_and_keeps_due(self):
        line = normalize_task_line("- [X] Pay rent due:2026-03-01 dd:2026-02-20 cd:2026-02-10 id:k3f", PERIOD, TODAY, set())
        assert line == "- [X] Pay rent id:k3f cd:2026-02-10 due:2026-03-01 dd:2026-02-20"

    def test_creation_date_never_overwritten(self):
        line = "- [ ] Old task id:k3f cd:2025-12-31"
        assert normalize_task_line(line, PERIOD, TODAY, set()) == line

    def test_priority_indent_and_decorators_preserved(self):
        line = normalize_task_line(
            "  - [ ] (B) Write docs ~[[2026-02-22]] >[[Project]] +Docs id:k3f",
            PERIOD, TODAY, set(),
        )
        assert line == "  - [ ] (B) Write docs ~[[2026-02-22]] >[[Project]] +Docs id:k3f cd:2026-02-21"

    def test_non_task_lines_skipped(self):
        assert normalize_task_line("## Tasks", PERIOD, TODAY, set()) is None
        assert normalize_task_line("- [ ] ", PERIOD, TODAY, set()) is None
        assert normalize_task_line("- [ ] id:abc", PERIOD, TODAY, set()) is None

    def test_generated_id_avoids_known_ids(self):
        known = {"abc"}
        line = normalize_task_line("- [ ] New", PERIOD, TODAY, known)
        new_id = re.search(r"id:(\S+)", line).group(1)
        assert new_id != "abc"
        assert new_id in known


# ---------------------------------------------------------------------------
# document pass
# ---------------------------------------------------------------------------

DOCUMENT = """\
# Daily Note - 2026-02-21

## Tasks

- [ ] (A) Fix login bug +Backend
- [x] Update dependencies +Backend
- [ ] Buy groceries @home
- [ ] Already done id:k3f cd:2026-02-20
- [ ] 

## Notes
Some text with id:abc mentioned.
"""


class TestDocumentPass:
    def test_only_changed_lines_are_edited(self):
        edits = compute_normalization_edits(DOCUMENT, PERIOD, TODAY)
        assert [e["line_no"] for e in edits] == [4, 5, 6]
        assert edits[0]["old"] == "- [ ] (A) Fix login bug +Backend"

    def test_second_pass_is_a_no_op(self):
        once = normalize_content(DOCUMENT, PERIOD, TODAY)
        assert compute_normalization_edits(once, PERIOD, TODAY) == []
        assert normalize_content(once, PERIOD, TODAY) == once

    def test_ids_are_distinct_and_avoid_document_ids(self):
        content = "\n".join(f"- [ ] Task {n}" for n in range(50)) + "\nnote id:abc\n"
        tasks = parse_tasks_from_content(normalize_content(content, PERIOD, TODAY))
        ids = [t["id"] for t in tasks]
        assert len(ids) == 50
        assert len(set(ids)) == 50
        assert "abc" not in ids

    def test_completion_stamp_matches_checkbox(self):
        tasks = parse_tasks_from_content(normalize_content(DOCUMENT, PERIOD, TODAY))
        for task in tasks:
            assert task["completed"] == (task["dd"] is not None)

    def test_non_task_text_untouched(self):
        result = normalize_content(DOCUMENT, PERIOD, TODAY)
        assert "Some text with id:abc mentioned." in result
        assert "- [ ] \n" in result
        assert result.startswith("# Daily Note - 2026-02-21\n\n## Tasks\n")

    def test_apply_edits_keeps_crlf(self):
        content = "- [ ] One\r\n- [ ] Two id:x1y cd:2026-02-20\r\n"
        edits = compute_normalization_edits(content, PERIOD, TODAY)
        assert len(edits) == 1
        result = apply_edits(content, edits)
        assert result.endswith("- [ ] Two id:x1y cd:2026-02-20\r\n")
        assert result.split("\r\n")[0].endswith("cd:2026-02-21")
