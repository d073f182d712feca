"""Per-file row alignment and hunk positions.

Row offsets and ``hunk_starts`` are zero-based as delivered by the diff
engine. Everything handed to the cursor/rendering side is 1-based, and this
module is the only place that converts between the two.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .payload import LEFT, SIDES, ChangedFile


@dataclass(frozen=True)
class TargetLine:
    """Resolved source line (1-based) plus the text found on that row."""

    line: int
    row: int | None
    content: str = ""


class AlignmentModel:
    """Row/hunk lookups for every file of one diff session, keyed by file index."""

    def __init__(self, files: Sequence[ChangedFile]) -> None:
        self._files = list(files)
        self._hunk_positions: dict[int, list[int]] = {}

    def __len__(self) -> int:
        return len(self._files)

    def file(self, file_index: int) -> ChangedFile:
        return self._files[file_index]

    def hunk_positions(self, file_index: int) -> list[int]:
        """Return 1-based line numbers where the file's hunks start."""
        cached = self._hunk_positions.get(file_index)
        if cached is None:
            cached = [start + 1 for start in self._files[file_index].hunk_starts]
            self._hunk_positions[file_index] = cached
        return list(cached)

    def _resolve_row(self, file_index: int, row: int, side: str) -> int | None:
        """Return the nearest row with a source line on ``side``.

        Searches outward one row at a time; at every distance the row above
        is checked before the row below, so equal-distance ties land above
        the filler gap.
        """
        if side not in SIDES:
            raise ValueError(f"unknown side {side!r}")
        aligned = self._files[file_index].aligned_lines
        total = len(aligned)
        if total == 0:
            return None
        slot = 0 if side == LEFT else 1

        def mapped(idx: int) -> bool:
            return 0 <= idx < total and aligned[idx][slot] is not None

        if mapped(row):
            return row
        # Any radius past both ends of the file cannot resolve anything new.
        max_distance = max(row, total - 1 - row)
        for distance in range(1, max_distance + 1):
            if mapped(row - distance):
                return row - distance
            if mapped(row + distance):
                return row + distance
        return None

    def resolve_target(self, file_index: int, row: int, side: str) -> TargetLine:
        """Map a zero-based display row to a source line and its text."""
        resolved = self._resolve_row(file_index, row, side)
        if resolved is None:
            return TargetLine(line=1, row=None)
        changed = self._files[file_index]
        source_line = changed.aligned_lines[resolved][0 if side == LEFT else 1]
        assert source_line is not None
        content = changed.rows[resolved].side(side).content
        return TargetLine(line=source_line + 1, row=resolved, content=content)

    def map_row_to_target_line(self, file_index: int, row: int, side: str) -> int:
        """Return the 1-based source line on ``side`` for display row ``row``.

        Falls back to line 1 when the file has no rows or no row maps to a
        source line on that side.
        """
        return self.resolve_target(file_index, row, side).line
