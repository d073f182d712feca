"""Changed-file payload types and boundary validation.

The structural diff engine hands the viewer one list of changed files per
session. Everything downstream trusts these records, so malformed input is
rejected here with ``InvalidDiffPayload`` instead of producing wrong
positions later.
"""

from __future__ import annotations

import enum
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

LEFT = "left"
RIGHT = "right"
SIDES = (LEFT, RIGHT)


class InvalidDiffPayload(ValueError):
    """Raised when the diff payload violates the changed-file contract."""

    def __init__(self, reason: str, file_index: int | None = None) -> None:
        self.reason = reason
        self.file_index = file_index
        if file_index is None:
            super().__init__(reason)
        else:
            super().__init__(f"file #{file_index}: {reason}")


class FileStatus(str, enum.Enum):
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"


_STATUS_ALIASES = {
    "added": FileStatus.ADDED,
    "created": FileStatus.ADDED,
    "modified": FileStatus.MODIFIED,
    "changed": FileStatus.MODIFIED,
    "deleted": FileStatus.DELETED,
    "removed": FileStatus.DELETED,
    "renamed": FileStatus.RENAMED,
}


@dataclass(frozen=True)
class HighlightSpan:
    """Changed column range; ``end is None`` highlights to line end."""

    start: int
    end: int | None = None


@dataclass(frozen=True)
class Side:
    content: str
    is_filler: bool = False
    highlights: tuple[HighlightSpan, ...] = ()


@dataclass(frozen=True)
class Row:
    left: Side
    right: Side

    def side(self, name: str) -> Side:
        return self.left if name == LEFT else self.right


@dataclass(frozen=True)
class ChangedFile:
    """One changed file as produced by the diff engine."""

    path: str
    status: FileStatus
    additions: int = 0
    deletions: int = 0
    rows: tuple[Row, ...] = ()
    hunk_starts: tuple[int, ...] = ()
    aligned_lines: tuple[tuple[int | None, int | None], ...] = ()
    language: str | None = None


def _require_int(value: object, what: str, file_index: int, minimum: int = 0) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidDiffPayload(f"{what} must be an integer, got {value!r}", file_index)
    if value < minimum:
        raise InvalidDiffPayload(f"{what} must be >= {minimum}, got {value}", file_index)
    return value


def _require_list(value: object, what: str, file_index: int) -> list:
    if not isinstance(value, list):
        raise InvalidDiffPayload(f"{what} must be a list", file_index)
    return value


def _optional_line(value: object, what: str, file_index: int) -> int | None:
    if value is None:
        return None
    return _require_int(value, what, file_index)


def _parse_status(raw: object, file_index: int) -> FileStatus:
    if isinstance(raw, FileStatus):
        return raw
    if isinstance(raw, str):
        status = _STATUS_ALIASES.get(raw.strip().lower())
        if status is not None:
            return status
    raise InvalidDiffPayload(f"unknown status {raw!r}", file_index)


def _parse_span(raw: object, file_index: int) -> HighlightSpan:
    if isinstance(raw, dict):
        start, end = raw.get("start", 0), raw.get("end")
    elif isinstance(raw, (list, tuple)) and len(raw) == 2:
        start, end = raw
    else:
        raise InvalidDiffPayload(f"malformed highlight {raw!r}", file_index)
    start = _require_int(start, "highlight start", file_index)
    # -1 is the engine's "to line end" sentinel.
    if end is None or end == -1:
        return HighlightSpan(start, None)
    end = _require_int(end, "highlight end", file_index)
    if end < start:
        raise InvalidDiffPayload(f"highlight end {end} precedes start {start}", file_index)
    return HighlightSpan(start, end)


def _parse_side(raw: object, file_index: int) -> Side:
    if not isinstance(raw, dict):
        raise InvalidDiffPayload("row side must be an object", file_index)
    content = raw.get("content", "")
    if not isinstance(content, str):
        raise InvalidDiffPayload("row content must be a string", file_index)
    is_filler = raw.get("is_filler", False)
    if not isinstance(is_filler, bool):
        raise InvalidDiffPayload(f"is_filler must be a boolean, got {is_filler!r}", file_index)
    highlights = tuple(
        _parse_span(span, file_index) for span in _require_list(raw.get("highlights", []), "highlights", file_index)
    )
    if is_filler and highlights:
        raise InvalidDiffPayload("filler side carries highlights", file_index)
    return Side(content=content, is_filler=is_filler, highlights=highlights)


def _derive_aligned_lines(rows: tuple[Row, ...]) -> tuple[tuple[int | None, int | None], ...]:
    """Number non-filler sides consecutively when the engine omitted alignment."""
    left_line = 0
    right_line = 0
    aligned: list[tuple[int | None, int | None]] = []
    for row in rows:
        left: int | None = None
        right: int | None = None
        if not row.left.is_filler:
            left = left_line
            left_line += 1
        if not row.right.is_filler:
            right = right_line
            right_line += 1
        aligned.append((left, right))
    return tuple(aligned)


def parse_changed_file(raw: object, file_index: int) -> ChangedFile:
    """Validate one decoded JSON object into a ``ChangedFile``."""
    if not isinstance(raw, dict):
        raise InvalidDiffPayload("file entry must be an object", file_index)

    path = raw.get("path")
    if not isinstance(path, str) or not path.strip("/"):
        raise InvalidDiffPayload(f"invalid path {path!r}", file_index)

    parsed_rows: list[Row] = []
    for item in _require_list(raw.get("rows", []), "rows", file_index):
        if not isinstance(item, dict):
            raise InvalidDiffPayload("row must be an object", file_index)
        parsed_rows.append(
            Row(
                left=_parse_side(item.get("left", {}), file_index),
                right=_parse_side(item.get("right", {}), file_index),
            )
        )
    rows = tuple(parsed_rows)

    hunk_starts = tuple(
        _require_int(value, "hunk start", file_index)
        for value in _require_list(raw.get("hunk_starts", []), "hunk_starts", file_index)
    )
    for previous, current in zip(hunk_starts, hunk_starts[1:]):
        if current <= previous:
            raise InvalidDiffPayload("hunk_starts must be strictly increasing", file_index)
    if hunk_starts and hunk_starts[-1] >= len(rows):
        raise InvalidDiffPayload(
            f"hunk start {hunk_starts[-1]} outside of {len(rows)} rows",
            file_index,
        )

    raw_aligned = raw.get("aligned_lines")
    if raw_aligned is None:
        aligned_lines = _derive_aligned_lines(rows)
    else:
        pairs: list[tuple[int | None, int | None]] = []
        for pair in _require_list(raw_aligned, "aligned_lines", file_index):
            if not isinstance(pair, (list, tuple)) or len(pair) != 2:
                raise InvalidDiffPayload(f"malformed aligned line {pair!r}", file_index)
            pairs.append(
                (
                    _optional_line(pair[0], "left line", file_index),
                    _optional_line(pair[1], "right line", file_index),
                )
            )
        aligned_lines = tuple(pairs)
    if len(aligned_lines) != len(rows):
        raise InvalidDiffPayload(
            f"aligned_lines has {len(aligned_lines)} entries for {len(rows)} rows",
            file_index,
        )

    language = raw.get("language")
    if language is not None and not isinstance(language, str):
        raise InvalidDiffPayload("language must be a string", file_index)

    return ChangedFile(
        path=path.strip("/"),
        status=_parse_status(raw.get("status"), file_index),
        additions=_require_int(raw.get("additions", 0), "additions", file_index),
        deletions=_require_int(raw.get("deletions", 0), "deletions", file_index),
        rows=rows,
        hunk_starts=hunk_starts,
        aligned_lines=aligned_lines,
        language=language or None,
    )


def parse_changed_files(data: object) -> list[ChangedFile]:
    """Validate a decoded payload (list, or object with a ``files`` list)."""
    if isinstance(data, dict):
        data = data.get("files")
    if not isinstance(data, list):
        raise InvalidDiffPayload("payload must be a list of files")
    files = [parse_changed_file(raw, idx) for idx, raw in enumerate(data)]
    logger.debug("parsed diff payload with %d files", len(files))
    return files


def load_payload(source: Path | str) -> list[ChangedFile]:
    """Read and validate a JSON payload from ``source`` (``"-"`` is stdin)."""
    if str(source) == "-":
        text = sys.stdin.read()
    else:
        text = Path(source).read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidDiffPayload(f"payload is not valid JSON: {exc}") from exc
    try:
        return parse_changed_files(data)
    except InvalidDiffPayload as exc:
        logger.warning("rejected diff payload: %s", exc)
        raise
