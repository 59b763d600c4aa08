import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from trigger import DEFAULT_TRIGGER, contains_trigger, matching_lines


def test_contains_trigger_matches_substring():
    line = f"[12:00:01] {DEFAULT_TRIGGER}; seed 4242"
    assert contains_trigger(line, DEFAULT_TRIGGER) is True


def test_contains_trigger_is_case_sensitive():
    assert contains_trigger(DEFAULT_TRIGGER.lower(), DEFAULT_TRIGGER) is False


def test_contains_trigger_needs_the_whole_text():
    assert contains_trigger("Players finished generating", DEFAULT_TRIGGER) is False


def test_matching_lines_keeps_order_and_duplicates():
    lines = ["foo", "hit one", "bar", "hit two", "hit one"]
    assert list(matching_lines(lines, "hit")) == ["hit one", "hit two", "hit one"]


def test_matching_lines_is_lazy():
    def lines():
        yield "hit"
        raise AssertionError("consumed past the first match")

    assert next(matching_lines(lines(), "hit")) == "hit"
