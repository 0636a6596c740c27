"""Tests for short id generation."""

import re
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "scripts" / "lib"))

from daily_tasks import ids
from daily_tasks.ids import generate_short_id


def test_starts_short_and_reserves():
    existing = set()
    new_id = generate_short_id(existing)
    assert re.fullmatch(r"[a-z0-9]{3}", new_id)
    assert new_id in existing


def test_many_ids_are_unique():
    existing = set()
    generated = [generate_short_id(existing) for _ in range(500)]
    assert len(set(generated)) == 500


def test_grows_when_short_ids_collide(monkeypatch):
    monkeypatch.setattr(ids.secrets, "choice", lambda seq: "a")
    existing = {"aaa"}
    assert generate_short_id(existing) == "aaaa"
    assert existing == {"aaa", "aaaa"}


def test_falls_back_to_long_random_id(monkeypatch):
    monkeypatch.setattr(ids.secrets, "choice", lambda seq: "a")
    existing = {"a" * n for n in range(3, 11)}
    new_id = generate_short_id(existing)
    assert re.fullmatch(r"[0-9a-f]{32}", new_id)
    assert new_id in existing
