"""Display-line construction for the left/right diff panes.

Turns aligned rows into per-side text lines annotated with highlight span
categories. The result is what the rendering surface is asked to draw; no
terminal codes are produced here.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..payload import LEFT, RIGHT, ChangedFile, Side
from ..ui_theme import ADDED, ADDED_INLINE, FILLER, REMOVED, REMOVED_INLINE

EMPTY_FILE_TEXT = "-- Empty --"


@dataclass(frozen=True)
class DisplaySpan:
    """Highlighted column range; ``end is None`` runs to the end of the line."""

    start: int
    end: int | None
    category: str


@dataclass(frozen=True)
class DisplayLine:
    text: str
    spans: tuple[DisplaySpan, ...] = ()
    is_filler: bool = False


def _side_line(side: Side, side_name: str) -> DisplayLine:
    if side.is_filler:
        return DisplayLine(text="", spans=(DisplaySpan(0, None, FILLER),), is_filler=True)
    full_category, inline_category = (REMOVED, REMOVED_INLINE) if side_name == LEFT else (ADDED, ADDED_INLINE)
    spans = tuple(
        DisplaySpan(
            span.start,
            span.end,
            full_category if span.end is None else inline_category,
        )
        for span in side.highlights
    )
    text = side.content[:-1] if side.content.endswith("\r") else side.content
    return DisplayLine(text=text, spans=spans)


def build_display_lines(changed: ChangedFile) -> tuple[list[DisplayLine], list[DisplayLine]]:
    """Return ``(left_lines, right_lines)`` with one entry per aligned row."""
    if not changed.rows:
        placeholder = DisplayLine(text=EMPTY_FILE_TEXT)
        return [placeholder], [placeholder]
    left = [_side_line(row.left, LEFT) for row in changed.rows]
    right = [_side_line(row.right, RIGHT) for row in changed.rows]
    return left, right
