"""Tests for rolling unfinished tasks into a newer daily note."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "scripts" / "lib"))

from daily_tasks.rollover import roll_forward, roll_single

TARGET = "2026-02-21"

YESTERDAY = """\
# Daily Note - 2026-02-20

## Tasks

- [ ] (B) Write docs +Docs id:aaa cd:2026-02-20
- [x] Ship release id:bbb cd:2026-02-19 dd:2026-02-20
- [ ] Call vendor @phone id:ccc cd:2026-02-20
- [ ] (A) Fix login bug +Backend ~[[2026-02-19]] id:ddd cd:2026-02-18
- [ ] 

## Notes
"""


# ---------------------------------------------------------------------------
# roll_forward()
# ---------------------------------------------------------------------------

class TestRollForward:
    def test_carries_open_tasks_sorted_by_priority(self):
        _, carried = roll_forward(YESTERDAY, TARGET, "2026-02-20")
        assert [(t["priority"], t["text"]) for t in carried] == [
            ("A", "Fix login bug +Backend"),
            ("B", "Write docs +Docs"),
            (None, "Call vendor @phone"),
        ]
        assert all(t["completed"] is False for t in carried)

    def test_marks_originals_before_metadata(self):
        updated, _ = roll_forward(YESTERDAY, TARGET)
        lines = updated.split("\n")
        assert lines[4] == "- [ ] (B) Write docs +Docs ~[[2026-02-21]] id:aaa cd:2026-02-20"
        assert lines[5] == "- [x] Ship release id:bbb cd:2026-02-19 dd:2026-02-20"
        assert lines[6] == "- [ ] Call vendor @phone ~[[2026-02-21]] id:ccc cd:2026-02-20"
        assert lines[7] == "- [ ] (A) Fix login bug +Backend ~[[2026-02-19]] ~[[2026-02-21]] id:ddd cd:2026-02-18"
        assert lines[8] == "- [ ] "

    def test_second_run_carries_nothing(self):
        once, first = roll_forward(YESTERDAY, TARGET)
        twice, second = roll_forward(once, TARGET)
        assert len(first) == 3
        assert second == []
        assert twice == once
        assert twice.count("~[[2026-02-21]]") == 3

    def test_no_open_tasks(self):
        content = "- [x] Done id:aaa cd:2026-02-20 dd:2026-02-20\n"
        assert roll_forward(content, TARGET) == (content, [])


# ---------------------------------------------------------------------------
# roll_single()
# ---------------------------------------------------------------------------

class TestRollSingle:
    def test_rolls_only_that_line(self):
        updated, carried = roll_single(YESTERDAY, 6, TARGET)
        assert carried["text"] == "Call vendor @phone"
        assert updated.count("~[[2026-02-21]]") == 1
        assert "Call vendor @phone ~[[2026-02-21]] id:ccc" in updated

    def test_completed_or_non_task_lines_are_ignored(self):
        assert roll_single(YESTERDAY, 5, TARGET) == (YESTERDAY, None)
        assert roll_single(YESTERDAY, 2, TARGET) == (YESTERDAY, None)
        assert roll_single(YESTERDAY, 99, TARGET) == (YESTERDAY, None)

    def test_already_rolled_line_is_ignored(self):
        once, _ = roll_single(YESTERDAY, 4, TARGET)
        assert roll_single(once, 4, TARGET) == (once, None)
