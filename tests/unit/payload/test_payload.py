"""Boundary validation tests for the changed-file payload.

Malformed payloads must be rejected with ``InvalidDiffPayload`` before any
tree or cursor math runs on them.
"""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from lazydiff.payload import (
    FileStatus,
    HighlightSpan,
    InvalidDiffPayload,
    load_payload,
    parse_changed_file,
    parse_changed_files,
)


def _row(left: str | None, right: str | None, left_hl=None, right_hl=None) -> dict[str, object]:
    def side(content: str | None, highlights) -> dict[str, object]:
        if content is None:
            return {"content": "", "is_filler": True}
        return {"content": content, "highlights": highlights or []}

    return {"left": side(left, left_hl), "right": side(right, right_hl)}


def _raw_file(**overrides: object) -> dict[str, object]:
    raw: dict[str, object] = {
        "path": "src/main.py",
        "status": "modified",
        "additions": 1,
        "deletions": 1,
        "rows": [
            _row("a = 1", "a = 1"),
            _row("b = 2", "b = 3", left_hl=[[4, 5]], right_hl=[[4, 5]]),
            _row(None, "c = 4", right_hl=[[0, -1]]),
        ],
        "hunk_starts": [1],
        "aligned_lines": [[0, 0], [1, 1], [None, 2]],
        "language": "python",
    }
    raw.update(overrides)
    return raw


class ParseChangedFileTests(unittest.TestCase):
    def test_valid_file_round_trips_into_typed_record(self) -> None:
        changed = parse_changed_file(_raw_file(), 0)

        self.assertEqual(changed.path, "src/main.py")
        self.assertEqual(changed.status, FileStatus.MODIFIED)
        self.assertEqual(len(changed.rows), 3)
        self.assertEqual(changed.hunk_starts, (1,))
        self.assertEqual(changed.aligned_lines, ((0, 0), (1, 1), (None, 2)))
        self.assertTrue(changed.rows[2].left.is_filler)
        self.assertEqual(changed.language, "python")

    def test_minus_one_highlight_end_means_full_line(self) -> None:
        changed = parse_changed_file(_raw_file(), 0)

        span = changed.rows[2].right.highlights[0]
        self.assertEqual(span, HighlightSpan(0, None))
        self.assertEqual(changed.rows[1].left.highlights, (HighlightSpan(4, 5),))

    def test_status_aliases_are_accepted(self) -> None:
        self.assertEqual(parse_changed_file(_raw_file(status="created"), 0).status, FileStatus.ADDED)
        self.assertEqual(parse_changed_file(_raw_file(status="Removed"), 0).status, FileStatus.DELETED)

    def test_unknown_status_is_rejected(self) -> None:
        with self.assertRaises(InvalidDiffPayload) as ctx:
            parse_changed_file(_raw_file(status="copied"), 3)
        self.assertEqual(ctx.exception.file_index, 3)
        self.assertIn("file #3", str(ctx.exception))

    def test_hunk_start_outside_rows_is_rejected(self) -> None:
        with self.assertRaises(InvalidDiffPayload):
            parse_changed_file(_raw_file(hunk_starts=[3]), 0)

    def test_non_increasing_hunk_starts_are_rejected(self) -> None:
        with self.assertRaises(InvalidDiffPayload):
            parse_changed_file(_raw_file(hunk_starts=[1, 1]), 0)
        with self.assertRaises(InvalidDiffPayload):
            parse_changed_file(_raw_file(hunk_starts=[2, 1]), 0)

    def test_aligned_lines_length_must_match_rows(self) -> None:
        with self.assertRaises(InvalidDiffPayload):
            parse_changed_file(_raw_file(aligned_lines=[[0, 0], [1, 1]]), 0)

    def test_missing_aligned_lines_are_derived_from_filler_flags(self) -> None:
        raw = _raw_file()
        del raw["aligned_lines"]

        changed = parse_changed_file(raw, 0)

        self.assertEqual(changed.aligned_lines, ((0, 0), (1, 1), (None, 2)))

    def test_filler_side_with_highlights_is_rejected(self) -> None:
        raw = _raw_file(rows=[{"left": {"is_filler": True, "highlights": [[0, 1]]}, "right": {"content": "x"}}])
        raw["aligned_lines"] = [[None, 0]]
        raw["hunk_starts"] = [0]
        with self.assertRaises(InvalidDiffPayload):
            parse_changed_file(raw, 0)

    def test_non_boolean_filler_flag_is_rejected(self) -> None:
        raw = _raw_file(rows=[{"left": {"content": "x", "is_filler": "false"}, "right": {"content": "x"}}])
        raw["aligned_lines"] = [[0, 0]]
        raw["hunk_starts"] = [0]
        with self.assertRaises(InvalidDiffPayload) as ctx:
            parse_changed_file(raw, 0)

        self.assertIn("is_filler", str(ctx.exception))

    def test_negative_counts_and_bool_counts_are_rejected(self) -> None:
        with self.assertRaises(InvalidDiffPayload):
            parse_changed_file(_raw_file(additions=-1), 0)
        with self.assertRaises(InvalidDiffPayload):
            parse_changed_file(_raw_file(deletions=True), 0)

    def test_highlight_end_before_start_is_rejected(self) -> None:
        raw = _raw_file(rows=[_row("abc", "abd", right_hl=[[2, 1]])], hunk_starts=[0], aligned_lines=[[0, 0]])
        with self.assertRaises(InvalidDiffPayload):
            parse_changed_file(raw, 0)

    def test_empty_path_is_rejected(self) -> None:
        with self.assertRaises(InvalidDiffPayload):
            parse_changed_file(_raw_file(path="/"), 0)

    def test_empty_file_has_no_rows_and_no_hunks(self) -> None:
        changed = parse_changed_file({"path": "empty.txt", "status": "added"}, 0)

        self.assertEqual(changed.rows, ())
        self.assertEqual(changed.hunk_starts, ())
        self.assertEqual(changed.aligned_lines, ())


class ParseChangedFilesTests(unittest.TestCase):
    def test_accepts_list_or_files_object(self) -> None:
        self.assertEqual(len(parse_changed_files([_raw_file()])), 1)
        self.assertEqual(len(parse_changed_files({"files": [_raw_file(), _raw_file(path="b.py")]})), 2)

    def test_rejects_non_list_payload(self) -> None:
        with self.assertRaises(InvalidDiffPayload):
            parse_changed_files({"files": "nope"})

    def test_load_payload_reads_json_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "diff.json"
            path.write_text(json.dumps([_raw_file()]), encoding="utf-8")

            files = load_payload(path)

        self.assertEqual([changed.path for changed in files], ["src/main.py"])

    def test_load_payload_rejects_invalid_json(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "diff.json"
            path.write_text("{not json", encoding="utf-8")

            with self.assertRaises(InvalidDiffPayload):
                load_payload(path)


if __name__ == "__main__":
    unittest.main()
