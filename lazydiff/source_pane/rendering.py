"""ANSI painting of display lines for the terminal surface.

Each character gets at most one background/foreground fragment from diff
spans and, in syntax mode, a foreground from Pygments. Runs of equal style
are emitted together and every painted line ends with a reset.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from ..ansi import char_display_width
from ..ui_theme import (
    DEFAULT_THEME,
    HIGHLIGHT_MODE_DIFFTASTIC,
    HIGHLIGHT_MODE_SYNTAX,
    DiffTheme,
)
from .display import DisplayLine

FILLER_CHAR = "╱"
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b-\x1f\x7f-\x9f]")


def sanitize_terminal_text(text: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(text) is None:
        return text
    return _CONTROL_RE.sub(lambda match: f"\\x{ord(match.group(0)):02x}", text)


def _span_styles(line: DisplayLine, theme: DiffTheme, highlight_mode: str) -> tuple[list[str], str]:
    """Return per-character span SGR plus the style carried past line end."""
    styles = [""] * len(line.text)
    trailing = ""
    # Full-line spans first so inline spans win where they overlap.
    ordered = sorted(line.spans, key=lambda span: span.end is not None)
    for span in ordered:
        sgr = theme.span_sgr(span.category, highlight_mode)
        if not sgr:
            continue
        end = len(line.text) if span.end is None else min(span.end, len(line.text))
        for idx in range(max(0, span.start), end):
            styles[idx] = sgr
        if span.end is None and highlight_mode == HIGHLIGHT_MODE_SYNTAX:
            trailing = sgr
    return styles, trailing


def paint_display_line(
    line: DisplayLine,
    width: int,
    theme: DiffTheme | None = None,
    highlight_mode: str = HIGHLIGHT_MODE_SYNTAX,
    syntax_colors: Sequence[str] | None = None,
    text_x: int = 0,
    is_cursor_line: bool = False,
) -> str:
    """Paint one display line clipped to ``width`` columns from ``text_x``."""
    active_theme = theme or DEFAULT_THEME
    reset = active_theme.reset
    cursor = active_theme.reverse if is_cursor_line else ""
    if width <= 0:
        return ""
    if line.is_filler:
        return f"{cursor}{active_theme.filler}{FILLER_CHAR * width}{reset}"

    span_styles, trailing = _span_styles(line, active_theme, highlight_mode)
    use_syntax = syntax_colors is not None and highlight_mode != HIGHLIGHT_MODE_DIFFTASTIC

    out: list[str] = []
    current_style: str | None = None
    col = 0
    shown = 0
    for idx, ch in enumerate(line.text):
        if ch == "\t":
            ch_width = char_display_width(ch, col)
            text = " " * ch_width
        else:
            text = sanitize_terminal_text(ch)
            ch_width = char_display_width(ch, col) if text == ch else len(text)
        start_col = col
        col += ch_width
        if col <= text_x:
            continue
        if start_col < text_x:
            # Wide glyph or tab straddling the viewport edge.
            text = " " * (col - text_x)
            ch_width = col - text_x
        if shown + ch_width > width:
            break
        style = cursor + span_styles[idx]
        if use_syntax and idx < len(syntax_colors):
            style += syntax_colors[idx]
        if style != current_style:
            out.append(reset + style if current_style is not None else style)
            current_style = style
        out.append(text)
        shown += ch_width

    fill_style = cursor + trailing
    if fill_style and shown < width:
        if fill_style != current_style:
            out.append(reset + fill_style)
        out.append(" " * (width - shown))
        shown = width
    out.append(reset)
    if shown < width:
        out.append(" " * (width - shown))
    return "".join(out)
