"""
Disassembler for Intcode memory.

Renders instruction words the way the machine's trace reads them:
position operands as [addr], relative operands as [rel+n], immediates bare.
"""

from __future__ import annotations

from typing import Sequence

from .errors import DecodeError
from .machine import OPCODES, MODE_IMMEDIATE, MODE_POSITION, decode_instruction


def format_operand(raw: int, mode: int) -> str:
    if mode == MODE_IMMEDIATE:
        return str(raw)
    if mode == MODE_POSITION:
        return f"[{raw}]"
    sign = "-" if raw < 0 else "+"
    return f"[rel{sign}{abs(raw)}]"


def format_instruction(memory: Sequence[int], addr: int) -> tuple[str, int]:
    """Disassemble the instruction at `addr`. Returns (text, width).

    Words that do not decode render as `.word N` with width 1. Operands
    past the end of `memory` read as zero, matching the machine.
    """
    word = memory[addr] if addr < len(memory) else 0
    try:
        opcode, modes = decode_instruction(word, addr)
    except DecodeError:
        return f".word {word}", 1

    mnemonic, width = OPCODES[opcode]
    operands = []
    for param, mode in enumerate(modes, start=1):
        pos = addr + param
        raw = memory[pos] if pos < len(memory) else 0
        operands.append(format_operand(raw, mode))
    if not operands:
        return mnemonic, width
    return f"{mnemonic} {', '.join(operands)}", width


def disassemble(words: Sequence[int], start: int = 0,
                count: int | None = None) -> list[tuple[int, str]]:
    """Walk `words` from `start` by instruction width.

    Stops at the end of `words` or after `count` instructions.
    """
    lines: list[tuple[int, str]] = []
    addr = start
    while addr < len(words) and (count is None or len(lines) < count):
        text, width = format_instruction(words, addr)
        lines.append((addr, text))
        addr += width
    return lines


def disassemble_around(words: Sequence[int], addr: int, before: int = 5,
                       after: int = 30, lookback: int = 64) -> list[tuple[int, str]]:
    """Listing of up to `before` instructions ahead of `addr` and `after` from it.

    Only a window of `words` is swept, starting `lookback` words before
    `addr`. If that sweep does not land on `addr`, the listing restarts at
    `addr` itself.
    """
    start = max(0, addr - lookback)
    lines = disassemble(words, start=start, count=lookback + after + 1)
    idx = next((i for i, (a, _) in enumerate(lines) if a == addr), None)
    if idx is None:
        lines = disassemble(words, start=addr, count=after)
        idx = 0
    return lines[max(0, idx - before):idx + after]
