"""Highlight group resolution and config overrides."""

import unittest

from lazydiff.ui_theme import (
    ADDED,
    ADDED_INLINE,
    DEFAULT_THEME,
    FILLER,
    HIGHLIGHT_MODE_DIFFTASTIC,
    PLAIN_THEME,
    HighlightStyle,
    build_theme,
)


class HighlightStyleTests(unittest.TestCase):
    def test_sgr_combines_bold_fg_and_bg(self) -> None:
        style = HighlightStyle(fg="#ff0000", bg="000010", bold=True)

        self.assertEqual(style.sgr(), "\033[1;38;2;255;0;0;48;2;0;0;16m")

    def test_empty_style_has_no_sgr(self) -> None:
        self.assertEqual(HighlightStyle().sgr(), "")

    def test_invalid_override_values_are_ignored(self) -> None:
        merged = HighlightStyle(fg="#111111").merged({"fg": "red", "bg": "#222222", "bold": "yes"})

        self.assertEqual(merged, HighlightStyle(fg="#111111", bg="#222222", bold=False))


class DiffThemeTests(unittest.TestCase):
    def test_overrides_change_only_named_group(self) -> None:
        theme = build_theme({"added": {"bg": "#010203"}, "unknown": {"bg": "#010203"}})

        self.assertEqual(theme.added, "\033[48;2;1;2;3m")
        self.assertEqual(theme.removed, DEFAULT_THEME.removed)

    def test_span_sgr_depends_on_mode(self) -> None:
        self.assertEqual(DEFAULT_THEME.span_sgr(ADDED), DEFAULT_THEME.added)
        self.assertEqual(DEFAULT_THEME.span_sgr(ADDED_INLINE, HIGHLIGHT_MODE_DIFFTASTIC), DEFAULT_THEME.added_inline_fg)
        self.assertEqual(DEFAULT_THEME.span_sgr(FILLER, HIGHLIGHT_MODE_DIFFTASTIC), DEFAULT_THEME.filler)
        self.assertEqual(DEFAULT_THEME.span_sgr("bogus"), "")

    def test_plain_theme_has_no_escapes(self) -> None:
        self.assertEqual(PLAIN_THEME.reset, "")
        self.assertEqual(PLAIN_THEME.reverse, "")
        self.assertEqual(PLAIN_THEME.span_sgr(ADDED), "")
        self.assertEqual(PLAIN_THEME.tree_current, "")


if __name__ == "__main__":
    unittest.main()
