"""Highlight groups and ANSI palettes for the diff viewer.

Groups are declared as hex colours (the same shape users write in the config
``highlights`` table) and resolved to truecolor SGR fragments once per run.
Syntax colouring for unchanged lines is a separate Pygments style setting.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, replace

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{6})$")

HIGHLIGHT_MODE_SYNTAX = "syntax"
HIGHLIGHT_MODE_DIFFTASTIC = "difftastic"
HIGHLIGHT_MODES = (HIGHLIGHT_MODE_SYNTAX, HIGHLIGHT_MODE_DIFFTASTIC)

# Span categories requested from the rendering surface.
ADDED = "added"
REMOVED = "removed"
ADDED_INLINE = "added-inline"
REMOVED_INLINE = "removed-inline"
FILLER = "filler"
SPAN_CATEGORIES = (ADDED, REMOVED, ADDED_INLINE, REMOVED_INLINE, FILLER)


@dataclass(frozen=True)
class HighlightStyle:
    fg: str | None = None
    bg: str | None = None
    bold: bool = False

    def merged(self, override: Mapping[str, object]) -> HighlightStyle:
        """Return a copy with valid keys from ``override`` applied."""
        fg = override.get("fg", self.fg)
        bg = override.get("bg", self.bg)
        bold = override.get("bold", self.bold)
        return HighlightStyle(
            fg=fg if isinstance(fg, str) and _HEX_RE.match(fg) else self.fg,
            bg=bg if isinstance(bg, str) and _HEX_RE.match(bg) else self.bg,
            bold=bold if isinstance(bold, bool) else self.bold,
        )

    def sgr(self) -> str:
        params: list[str] = []
        if self.bold:
            params.append("1")
        if self.fg:
            params.append("38;2;" + _hex_to_rgb_params(self.fg))
        if self.bg:
            params.append("48;2;" + _hex_to_rgb_params(self.bg))
        if not params:
            return ""
        return f"\033[{';'.join(params)}m"


def _hex_to_rgb_params(value: str) -> str:
    match = _HEX_RE.match(value)
    if match is None:
        raise ValueError(f"invalid hex colour {value!r}")
    digits = match.group(1)
    return ";".join(str(int(digits[idx : idx + 2], 16)) for idx in (0, 2, 4))


DEFAULT_HIGHLIGHTS: dict[str, HighlightStyle] = {
    "added": HighlightStyle(bg="#2d4a3e"),
    "removed": HighlightStyle(bg="#4a2d2d"),
    "added_inline": HighlightStyle(bg="#3d6a4e"),
    "removed_inline": HighlightStyle(bg="#6a3d3d"),
    "added_fg": HighlightStyle(fg="#9ece6a"),
    "removed_fg": HighlightStyle(fg="#f7768e"),
    "added_inline_fg": HighlightStyle(fg="#9ece6a", bold=True),
    "removed_inline_fg": HighlightStyle(fg="#f7768e", bold=True),
    "file_added": HighlightStyle(fg="#9ece6a"),
    "file_deleted": HighlightStyle(fg="#f7768e"),
    "tree_current": HighlightStyle(bg="#3b4261", bold=True),
    "directory": HighlightStyle(fg="#7aa2f7", bold=True),
    "filler": HighlightStyle(fg="#3b4261"),
}


@dataclass(frozen=True)
class DiffTheme:
    """Resolved ANSI fragments used by the tree and diff renderers."""

    name: str
    reset: str
    reverse: str
    divider: str
    added: str
    removed: str
    added_inline: str
    removed_inline: str
    added_fg: str
    removed_fg: str
    added_inline_fg: str
    removed_inline_fg: str
    file_added: str
    file_deleted: str
    tree_current: str
    directory: str
    filler: str

    def span_sgr(self, category: str, highlight_mode: str = HIGHLIGHT_MODE_SYNTAX) -> str:
        """Return the SGR fragment for a span category in ``highlight_mode``."""
        if category == FILLER:
            return self.filler
        if highlight_mode == HIGHLIGHT_MODE_DIFFTASTIC:
            return {
                ADDED: self.added_fg,
                REMOVED: self.removed_fg,
                ADDED_INLINE: self.added_inline_fg,
                REMOVED_INLINE: self.removed_inline_fg,
            }.get(category, "")
        return {
            ADDED: self.added,
            REMOVED: self.removed,
            ADDED_INLINE: self.added_inline,
            REMOVED_INLINE: self.removed_inline,
        }.get(category, "")


def build_theme(overrides: Mapping[str, Mapping[str, object]] | None = None) -> DiffTheme:
    """Resolve default highlight groups merged with user overrides."""
    styles = dict(DEFAULT_HIGHLIGHTS)
    for group, override in (overrides or {}).items():
        if group in styles and isinstance(override, Mapping):
            styles[group] = styles[group].merged(override)
    return DiffTheme(
        name="default",
        reset="\033[0m",
        reverse="\033[7m",
        divider="\033[2m",
        **{group: style.sgr() for group, style in styles.items()},
    )


DEFAULT_THEME = build_theme()

PLAIN_THEME = replace(
    DEFAULT_THEME,
    name="plain",
    **{field: "" for field in ("reset", "reverse", "divider", *DEFAULT_HIGHLIGHTS)},
)
