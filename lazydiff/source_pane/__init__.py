"""Left/right diff panes: display lines, syntax colours, and ANSI painting."""

from __future__ import annotations

from .display import EMPTY_FILE_TEXT, DisplayLine, DisplaySpan, build_display_lines
from .rendering import FILLER_CHAR, paint_display_line, sanitize_terminal_text
from .syntax import LANGUAGE_LEXERS, lexer_for, syntax_foregrounds

__all__ = [
    "EMPTY_FILE_TEXT",
    "DisplayLine",
    "DisplaySpan",
    "build_display_lines",
    "FILLER_CHAR",
    "paint_display_line",
    "sanitize_terminal_text",
    "LANGUAGE_LEXERS",
    "lexer_for",
    "syntax_foregrounds",
]
