"""Tests for the trailing metadata token codec."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "scripts" / "lib"))

from daily_tasks.metadata import decode, encode, find_ids


# ---------------------------------------------------------------------------
# decode()
# ---------------------------------------------------------------------------

class TestDecode:
    def test_strips_trailing_tokens(self):
        text, meta = decode("Buy milk id:abc cd:2026-02-21")
        assert text == "Buy milk"
        assert meta == {"id": "abc", "cd": "2026-02-21"}

    def test_keys_are_case_insensitive(self):
        text, meta = decode("Call Bob ID:Xy1 Due:2026-03-01")
        assert text == "Call Bob"
        assert meta == {"id": "Xy1", "due": "2026-03-01"}

    def test_tokens_in_the_middle_collapse_whitespace(self):
        text, meta = decode("Call  id:abc   Bob")
        assert text == "Call Bob"
        assert meta == {"id": "abc"}

    def test_unknown_key_value_tokens_are_kept(self):
        text, meta = decode("Meet at time:10am id:abc")
        assert text == "Meet at time:10am"
        assert meta == {"id": "abc"}

    def test_keys_must_be_whole_words(self):
        text, meta = decode("Invoice paid:yes xid:123 dd_note:x")
        assert text == "Invoice paid:yes xid:123 dd_note:x"
        assert meta == {}

    def test_empty_value_is_not_a_token(self):
        text, meta = decode("Write id: later")
        assert text == "Write id: later"
        assert meta == {}

    def test_decorators_are_not_tokens(self):
        text, meta = decode("Task ~[[2026-02-22]] >[[Project]] cd:2026-02-20")
        assert text == "Task ~[[2026-02-22]] >[[Project]]"
        assert meta == {"cd": "2026-02-20"}

    def test_repeated_calls_are_independent(self):
        first = decode("A id:one")
        second = decode("B id:two cd:2026-01-01")
        again = decode("A id:one")
        assert first == again == ("A", {"id": "one"})
        assert second == ("B", {"id": "two", "cd": "2026-01-01"})


# ---------------------------------------------------------------------------
# encode()
# ---------------------------------------------------------------------------

class TestEncode:
    def test_fixed_order(self):
        meta = {"dd": "2026-02-22", "due": "2026-03-01", "cd": "2026-02-20", "id": "k3f"}
        assert encode(meta) == " id:k3f cd:2026-02-20 due:2026-03-01 dd:2026-02-22"

    def test_absent_fields_omitted(self):
        assert encode({"cd": "2026-02-20"}) == " cd:2026-02-20"
        assert encode({"id": "abc", "due": None}) == " id:abc"

    def test_empty(self):
        assert encode({}) == ""

    def test_round_trip(self):
        for meta in (
            {},
            {"id": "abc"},
            {"id": "abc", "cd": "2026-02-21", "due": "2026-03-01", "dd": "2026-02-22"},
            {"cd": "20260221", "dd": "20260222"},
        ):
            assert decode("Buy milk +Home @store" + encode(meta)) == ("Buy milk +Home @store", meta)


# ---------------------------------------------------------------------------
# find_ids()
# ---------------------------------------------------------------------------

def test_find_ids_lowercases():
    content = "- [ ] a id:ABC\nplain id:zz9 text\n- [ ] b id:x1y cd:2026-02-21\n"
    assert find_ids(content) == {"abc", "zz9", "x1y"}
