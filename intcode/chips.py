"""
Storage primitives for the Intcode machine.

Models the few components the machine needs: growable word Memory,
unbounded Register, and the WordFIFO used for the input and output queues.
"""

from __future__ import annotations

import collections
from typing import Iterable, Iterator

from .errors import AddressingError


class Memory:
    """Zero-indexed, zero-filled word memory that grows on demand.

    Any address at or beyond the current length is valid: the backing list
    is extended with zeros before the access. Reads grow exactly like writes.
    """

    def __init__(self, words: Iterable[int] = ()):
        self.data: list[int] = list(words)

    def _ensure(self, addr: int):
        if addr < 0:
            raise AddressingError(address=addr)
        missing = addr + 1 - len(self.data)
        if missing > 0:
            self.data.extend([0] * missing)

    def read(self, addr: int) -> int:
        self._ensure(addr)
        return self.data[addr]

    def write(self, addr: int, val: int):
        self._ensure(addr)
        self.data[addr] = val

    def dump(self) -> list[int]:
        return list(self.data)

    def __getitem__(self, addr: int) -> int:
        return self.read(addr)

    def __setitem__(self, addr: int, val: int):
        self.write(addr, val)

    def __len__(self) -> int:
        return len(self.data)

    def __iter__(self) -> Iterator[int]:
        return iter(self.data)


class Register:
    """Unbounded integer register."""

    def __init__(self, value: int = 0):
        self.value = value

    def load(self, val: int):
        self.value = val


class WordFIFO:
    """Unbounded queue of integer words, consumed front to back."""

    def __init__(self, words: Iterable[int] = ()):
        self.buffer: collections.deque[int] = collections.deque(words)

    def push(self, word: int):
        self.buffer.append(word)

    def extend(self, words: Iterable[int]):
        self.buffer.extend(words)

    def pop(self) -> int | None:
        return self.buffer.popleft() if self.buffer else None

    def drain(self) -> list[int]:
        words = list(self.buffer)
        self.buffer.clear()
        return words

    def ready(self) -> bool:
        return len(self.buffer) > 0

    def __len__(self) -> int:
        return len(self.buffer)
