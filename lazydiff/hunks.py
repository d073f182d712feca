"""Cursor-relative hunk lookups.

Comparisons are strict: a cursor sitting exactly on a hunk start moves to the
adjacent hunk, so repeated presses step through every hunk.
"""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from collections.abc import Sequence


def next_hunk(positions: Sequence[int], cursor_line: int) -> int | None:
    """Return the first hunk line strictly after ``cursor_line``."""
    idx = bisect_right(positions, cursor_line)
    if idx < len(positions):
        return positions[idx]
    return None


def prev_hunk(positions: Sequence[int], cursor_line: int) -> int | None:
    """Return the last hunk line strictly before ``cursor_line``."""
    idx = bisect_left(positions, cursor_line)
    if idx > 0:
        return positions[idx - 1]
    return None


def first_hunk(positions: Sequence[int]) -> int | None:
    return positions[0] if positions else None


def last_hunk(positions: Sequence[int]) -> int | None:
    return positions[-1] if positions else None
