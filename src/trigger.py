"""Trigger line detection."""

from __future__ import annotations

from typing import Iterable, Iterator

DEFAULT_TRIGGER = "Players finished generating the new floor"


def contains_trigger(line: str, trigger: str) -> bool:
    """Exact, case-sensitive substring check."""

    return trigger in line


def matching_lines(lines: Iterable[str], trigger: str) -> Iterator[str]:
    """Yield every line containing ``trigger``, in input order, one per match."""

    for line in lines:
        if contains_trigger(line, trigger):
            yield line


__all__ = ["DEFAULT_TRIGGER", "contains_trigger", "matching_lines"]
