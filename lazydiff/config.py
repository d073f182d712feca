"""Persistent JSON config helpers.

Stores keymaps, tree pane options, highlight overrides, and navigation
preferences. All access is defensive: malformed or missing config falls back
to defaults, and values are handed to components as one frozen ``ViewConfig``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from platformdirs import user_config_dir

from .ui_theme import DEFAULT_HIGHLIGHTS, HIGHLIGHT_MODE_SYNTAX, HIGHLIGHT_MODES

logger = logging.getLogger(__name__)

APP_NAME = "lazydiff"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

DEFAULT_KEYMAPS: dict[str, str | None] = {
    "next_file": "]f",
    "prev_file": "[f",
    "next_hunk": "]c",
    "prev_hunk": "[c",
    "first_hunk": "gg",
    "last_hunk": "G",
    "close": "q",
    "focus_tree": "TAB",
    "focus_diff": "TAB",
    "select": "ENTER",
    "goto_file": "gf",
    "toggle_hunk_wrap": "W",
    "tree_narrower": "<",
    "tree_wider": ">",
    "expand_all": "zR",
    "collapse_all": "zM",
}
DEFAULT_TREE_WIDTH = 40
MIN_TREE_WIDTH = 12


@dataclass(frozen=True)
class TreeConfig:
    width: int = DEFAULT_TREE_WIDTH
    dir_open_icon: str = "▼"
    dir_closed_icon: str = "▶"


@dataclass(frozen=True)
class ViewConfig:
    """Resolved viewer settings passed explicitly to each component."""

    hunk_wrap_across_files: bool = True
    highlight_mode: str = HIGHLIGHT_MODE_SYNTAX
    style: str = "monokai"
    keymaps: Mapping[str, str | None] = field(default_factory=lambda: dict(DEFAULT_KEYMAPS))
    tree: TreeConfig = field(default_factory=TreeConfig)
    highlights: Mapping[str, Mapping[str, object]] = field(default_factory=dict)

    def bound_keys(self) -> dict[str, str]:
        """Return ``key sequence -> action`` for every bound action."""
        bindings: dict[str, str] = {}
        for action, sequence in self.keymaps.items():
            if sequence:
                bindings.setdefault(sequence, action)
        return bindings

    def with_overrides(self, **changes: object) -> ViewConfig:
        """Return a copy with non-``None`` keyword overrides applied."""
        return replace(self, **{key: value for key, value in changes.items() if value is not None})


def load_config(path: Path | None = None) -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    config_path = path or CONFIG_PATH
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable config %s: %s", config_path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object], path: Path | None = None) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem errors are logged and otherwise ignored so a read-only config
    directory never breaks a diff session.
    """
    config_path = path or CONFIG_PATH
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        logger.warning("could not write config %s: %s", config_path, exc)


def _coerce_keymaps(value: object) -> dict[str, str | None]:
    keymaps: dict[str, str | None] = dict(DEFAULT_KEYMAPS)
    if not isinstance(value, dict):
        return keymaps
    for action, sequence in value.items():
        if action not in DEFAULT_KEYMAPS:
            continue
        # ``null`` (or "") unbinds an action.
        if sequence is None or (isinstance(sequence, str) and not sequence.strip()):
            keymaps[action] = None
        elif isinstance(sequence, str):
            keymaps[action] = sequence.strip()
    return keymaps


def _coerce_tree(value: object) -> TreeConfig:
    if not isinstance(value, dict):
        return TreeConfig()
    width = value.get("width", DEFAULT_TREE_WIDTH)
    if isinstance(width, bool) or not isinstance(width, int) or width < MIN_TREE_WIDTH:
        width = DEFAULT_TREE_WIDTH
    icons = value.get("icons")
    dir_open = "▼"
    dir_closed = "▶"
    if isinstance(icons, dict):
        if isinstance(icons.get("dir_open"), str):
            dir_open = icons["dir_open"]
        if isinstance(icons.get("dir_closed"), str):
            dir_closed = icons["dir_closed"]
    return TreeConfig(width=width, dir_open_icon=dir_open, dir_closed_icon=dir_closed)


def _coerce_highlights(value: object) -> dict[str, dict[str, object]]:
    if not isinstance(value, dict):
        return {}
    return {
        group: dict(override)
        for group, override in value.items()
        if group in DEFAULT_HIGHLIGHTS and isinstance(override, dict)
    }


def view_config_from_dict(data: Mapping[str, object]) -> ViewConfig:
    """Decode a config mapping into ``ViewConfig``; invalid values use defaults."""
    wrap = data.get("hunk_wrap_across_files")
    mode = data.get("highlight_mode")
    style = data.get("style")
    return ViewConfig(
        hunk_wrap_across_files=wrap if isinstance(wrap, bool) else True,
        highlight_mode=mode if mode in HIGHLIGHT_MODES else HIGHLIGHT_MODE_SYNTAX,
        style=style.strip() if isinstance(style, str) and style.strip() else "monokai",
        keymaps=_coerce_keymaps(data.get("keymaps")),
        tree=_coerce_tree(data.get("tree")),
        highlights=_coerce_highlights(data.get("highlights")),
    )


def load_view_config(path: Path | None = None) -> ViewConfig:
    return view_config_from_dict(load_config(path))


def save_hunk_wrap_across_files(enabled: bool, path: Path | None = None) -> None:
    """Persist the cross-file hunk wrap preference."""
    config = load_config(path)
    config["hunk_wrap_across_files"] = bool(enabled)
    save_config(config, path)


def save_tree_width(width: int, path: Path | None = None) -> None:
    """Persist tree pane width, clamped to the minimum usable width."""
    config = load_config(path)
    tree = config.get("tree")
    if not isinstance(tree, dict):
        tree = {}
    tree["width"] = max(MIN_TREE_WIDTH, int(width))
    config["tree"] = tree
    save_config(config, path)
