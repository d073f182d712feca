"""Low-level terminal input decoding.

Reads raw bytes from stdin and translates them into normalized key tokens.
Multi-byte UTF-8 characters are decoded whole; unknown escape sequences
collapse to ``ESC``.
"""

from __future__ import annotations

import os
import select

ESC_SEQUENCE_TIMEOUT_MS = 25
_PENDING_BYTES: list[bytes] = []

_CONTROL_KEYS = {
    b"\t": "TAB",
    b"\r": "ENTER",
    b"\n": "ENTER",
    b"\x08": "BACKSPACE",
    b"\x7f": "BACKSPACE",
    b"\x04": "CTRL_D",
    b"\x15": "CTRL_U",
    b"\x06": "CTRL_F",
    b"\x02": "CTRL_B",
    b"\x0c": "CTRL_L",
    b"\x03": "CTRL_C",
}
_CSI_KEYS = {
    b"A": "UP",
    b"B": "DOWN",
    b"C": "RIGHT",
    b"D": "LEFT",
    b"H": "HOME",
    b"F": "END",
}
_TILDE_KEYS = {
    b"5": "PAGE_UP",
    b"6": "PAGE_DOWN",
}
# Token names that may appear verbatim in keymap config values.
KEY_NAMES = frozenset(
    {*_CONTROL_KEYS.values(), *_CSI_KEYS.values(), *_TILDE_KEYS.values(), "ESC"}
)


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _utf8_length(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


def read_key(fd: int, timeout_ms: int | None = None) -> str:
    """Read one key token; returns ``""`` on timeout or EOF."""
    if _PENDING_BYTES:
        ch = _PENDING_BYTES.pop(0)
    else:
        if timeout_ms is not None:
            ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return ""
        ch = os.read(fd, 1)
        if not ch:
            return ""

    named = _CONTROL_KEYS.get(ch)
    if named is not None:
        return named

    if ch != b"\x1b":
        raw = ch
        for _ in range(_utf8_length(ch[0]) - 1):
            extra = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
            if extra is None:
                break
            raw += extra
        return raw.decode("utf-8", errors="replace")

    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    if seq not in {b"[", b"O"}:
        _PENDING_BYTES.append(seq)
        return "ESC"
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    if seq in _CSI_KEYS:
        return _CSI_KEYS[seq]
    if seq in _TILDE_KEYS:
        tail = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if tail == b"~":
            return _TILDE_KEYS[seq]
    return "ESC"


def parse_key_sequence(sequence: str) -> tuple[str, ...]:
    """Split a keymap value into key tokens (``"]c"`` -> ``("]", "c")``)."""
    if sequence in KEY_NAMES:
        return (sequence,)
    return tuple(sequence)
