"""ANSI-aware width measurement and clipping for composed screen rows."""

from __future__ import annotations

import re
import unicodedata

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
TAB_STOP = 8


def char_display_width(ch: str, col: int) -> int:
    """Return terminal column width for one character at visual column ``col``.

    Tabs expand to the next 8-column stop, combining marks consume no columns,
    and East Asian wide/fullwidth characters consume two.
    """
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def visible_width(text: str) -> int:
    """Return display columns of ``text`` ignoring escape sequences."""
    col = 0
    for ch in ANSI_ESCAPE_RE.sub("", text):
        col += char_display_width(ch, col)
    return col


def fit_ansi_line(text: str, width: int) -> str:
    """Clip a styled line to ``width`` columns and pad it with spaces.

    Escape sequences are kept verbatim; a trailing reset is added whenever
    the line carried any styling so colours never bleed into the next pane.
    """
    if width <= 0:
        return ""
    out: list[str] = []
    col = 0
    pos = 0
    styled = False
    while pos < len(text) and col < width:
        match = ANSI_ESCAPE_RE.match(text, pos) if text[pos] == "\x1b" else None
        if match is not None:
            out.append(match.group(0))
            styled = True
            pos = match.end()
            continue
        ch = text[pos]
        ch_width = char_display_width(ch, col)
        if col + ch_width > width:
            break
        out.append(" " * ch_width if ch == "\t" else ch)
        col += ch_width
        pos += 1
    if styled:
        out.append("\033[0m")
    if col < width:
        out.append(" " * (width - col))
    return "".join(out)
