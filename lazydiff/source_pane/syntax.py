"""Per-character syntax colours for diff panes.

Each side of a file is lexed as one document with Pygments so multi-line
tokens (strings, comments) colour correctly, then the foreground SGR of every
character is mapped back onto its display row. Diff backgrounds are layered
on top by the pane renderer.
"""

from __future__ import annotations

from collections.abc import Sequence
from functools import lru_cache

from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name, get_lexer_for_filename
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from .display import DisplayLine

DEFAULT_STYLE = "monokai"

# Language tags emitted by the structural diff engine mapped to Pygments aliases.
LANGUAGE_LEXERS = {
    "Rust": "rust",
    "Lua": "lua",
    "TOML": "toml",
    "JSON": "json",
    "JavaScript": "javascript",
    "TypeScript": "typescript",
    "TypeScript TSX": "tsx",
    "Python": "python",
    "Go": "go",
    "C": "c",
    "C++": "cpp",
    "C#": "csharp",
    "Java": "java",
    "Kotlin": "kotlin",
    "Ruby": "ruby",
    "Shell": "bash",
    "Bash": "bash",
    "Markdown": "markdown",
    "YAML": "yaml",
    "HTML": "html",
    "CSS": "css",
    "SQL": "sql",
    "Nix": "nix",
    "Zig": "zig",
}


@lru_cache(maxsize=64)
def lexer_for(language: str | None, path: str) -> Lexer | None:
    """Resolve a lexer from the language tag, then from the file name."""
    alias = LANGUAGE_LEXERS.get(language or "")
    if alias is None and language:
        alias = language.lower()
    if alias:
        try:
            return get_lexer_by_name(alias, stripnl=False, ensurenl=False)
        except ClassNotFound:
            pass
    try:
        return get_lexer_for_filename(path, stripnl=False, ensurenl=False)
    except ClassNotFound:
        return None


@lru_cache(maxsize=16)
def _style_class(style: str):
    try:
        return get_style_by_name(style)
    except ClassNotFound:
        return get_style_by_name(DEFAULT_STYLE)


@lru_cache(maxsize=1024)
def _token_sgr(style: str, token_type) -> str:
    token_style = _style_class(style).style_for_token(token_type)
    params: list[str] = []
    if token_style.get("bold"):
        params.append("1")
    if token_style.get("italic"):
        params.append("3")
    color = token_style.get("color")
    if color:
        params.append("38;2;" + ";".join(str(int(color[idx : idx + 2], 16)) for idx in (0, 2, 4)))
    return f"\033[{';'.join(params)}m" if params else ""


def syntax_foregrounds(
    lines: Sequence[DisplayLine],
    language: str | None,
    path: str,
    style: str = DEFAULT_STYLE,
) -> list[list[str] | None]:
    """Return per-character SGR fragments for each display line.

    Filler lines get ``None``. Lines are ``None`` throughout when no lexer
    matches the file.
    """
    lexer = lexer_for(language, path)
    if lexer is None:
        return [None] * len(lines)

    source_rows = [idx for idx, line in enumerate(lines) if not line.is_filler]
    # Pygments folds CR into newlines; keep one colour per character.
    source = "\n".join(lines[idx].text.replace("\r", " ") for idx in source_rows)
    flat: list[str] = []
    for token_type, value in lexer.get_tokens(source):
        sgr = _token_sgr(style, token_type)
        flat.extend([sgr] * len(value))

    result: list[list[str] | None] = [None] * len(lines)
    offset = 0
    for idx in source_rows:
        width = len(lines[idx].text)
        colours = flat[offset : offset + width]
        if len(colours) < width:
            colours.extend([""] * (width - len(colours)))
        result[idx] = colours
        offset += width + 1
    return result
