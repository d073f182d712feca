"""Key-sequence dispatch for configurable multi-key bindings like ``]c``."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from .input import parse_key_sequence


@dataclass(frozen=True)
class KeySequenceBinding:
    """Mapping from one or more key sequences to a single action callback."""

    sequences: tuple[tuple[str, ...], ...]
    handler: Callable[[], bool | None]

    @classmethod
    def from_strings(cls, sequences: Iterable[str | None], handler: Callable[[], bool | None]) -> KeySequenceBinding:
        parsed = tuple(parse_key_sequence(sequence) for sequence in sequences if sequence)
        return cls(sequences=parsed, handler=handler)


class KeySequenceRegistry:
    """Dispatch table that buffers keys while they form a bound prefix."""

    def __init__(self) -> None:
        self._handlers: dict[tuple[str, ...], Callable[[], bool | None]] = {}
        self._prefixes: set[tuple[str, ...]] = set()
        self._pending: tuple[str, ...] = ()

    @property
    def pending(self) -> tuple[str, ...]:
        return self._pending

    def register_binding(self, binding: KeySequenceBinding) -> KeySequenceRegistry:
        """Register one binding; an already bound sequence keeps its first handler."""
        for sequence in binding.sequences:
            if not sequence or sequence in self._handlers:
                continue
            self._handlers[sequence] = binding.handler
            for end in range(1, len(sequence)):
                self._prefixes.add(sequence[:end])
        return self

    def register_bindings(self, *bindings: KeySequenceBinding) -> KeySequenceRegistry:
        for binding in bindings:
            self.register_binding(binding)
        return self

    def reset(self) -> None:
        self._pending = ()

    def feed(self, key: str) -> bool | None:
        """Consume one key token.

        Returns the handler result for a completed sequence, ``True`` while a
        bound prefix is being typed, and ``None`` when the key is unbound.
        """
        candidate = (*self._pending, key)
        handler = self._handlers.get(candidate)
        if handler is not None and candidate not in self._prefixes:
            self._pending = ()
            return handler()
        if candidate in self._prefixes:
            self._pending = candidate
            return True
        if self._pending:
            # A buffered sequence that is itself bound fires before the retry.
            shorter = self._handlers.get(self._pending)
            self._pending = ()
            fired = shorter() if shorter is not None else None
            retried = self.feed(key)
            return fired if retried is None else retried
        return None
