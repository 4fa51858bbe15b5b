"""Storage primitive checks: Memory growth, Register, WordFIFO."""

from __future__ import annotations

import pytest

from intcode.chips import Memory, Register, WordFIFO
from intcode.errors import AddressingError


def test_memory_reads_zero_and_grows():
    mem = Memory([5, 6])
    assert mem.read(9) == 0
    assert len(mem) == 10
    assert mem.dump() == [5, 6] + [0] * 8


def test_memory_write_grows_without_truncating():
    mem = Memory([1, 2, 3])
    mem.write(5, 7)
    assert mem.dump() == [1, 2, 3, 0, 0, 7]
    mem.write(1, 9)
    assert len(mem) == 6
    assert mem[1] == 9


def test_memory_in_range_access_does_not_grow():
    mem = Memory([1, 2, 3])
    mem[2] = 4
    assert mem[0] == 1
    assert len(mem) == 3


def test_memory_negative_address():
    mem = Memory([1])
    with pytest.raises(AddressingError):
        mem.read(-1)
    with pytest.raises(AddressingError):
        mem.write(-2, 0)
    assert len(mem) == 1


def test_memory_dump_is_a_copy():
    mem = Memory([1, 2])
    snapshot = mem.dump()
    snapshot[0] = 99
    assert list(mem) == [1, 2]


def test_register():
    reg = Register()
    assert reg.value == 0
    reg.load(-12)
    assert reg.value == -12


def test_fifo_order():
    fifo = WordFIFO([1, 2])
    fifo.push(3)
    fifo.extend([4, 5])
    assert len(fifo) == 5
    assert fifo.pop() == 1
    assert fifo.drain() == [2, 3, 4, 5]
    assert not fifo.ready()
    assert fifo.pop() is None
