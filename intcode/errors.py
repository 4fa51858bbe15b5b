"""
errors — exception hierarchy for the Intcode machine and its tooling.

ProgramError and its subclasses are defects in the program being run and
are fatal to the machine that hit them. MachineHaltedError is caller misuse.
"""

from __future__ import annotations

from dataclasses import dataclass


class IntcodeError(Exception):
    """Base class for every error raised by the intcode package."""


class ProgramError(IntcodeError):
    """Defect in the supplied program. Fatal to the machine running it."""


class DecodeError(ProgramError, ValueError):
    """Instruction word that cannot be decoded or executed as written."""


@dataclass(frozen=True)
class UnknownOpcodeError(DecodeError):
    position: int
    word: int

    @property
    def opcode(self) -> int:
        return self.word % 100 if self.word >= 0 else self.word

    def __str__(self) -> str:
        return (f"unknown opcode {self.opcode} in instruction {self.word} "
                f"at position {self.position}")


@dataclass(frozen=True)
class UnknownModeError(DecodeError):
    position: int
    word: int
    parameter: int
    mode: int

    def __str__(self) -> str:
        return (f"unknown mode {self.mode} for parameter {self.parameter} "
                f"of instruction {self.word} at position {self.position}")


@dataclass(frozen=True)
class ImmediateDestinationError(DecodeError):
    position: int
    word: int
    parameter: int

    def __str__(self) -> str:
        return (f"parameter {self.parameter} of instruction {self.word} "
                f"at position {self.position} writes through immediate mode")


@dataclass(frozen=True)
class AddressingError(ProgramError, IndexError):
    address: int
    position: int | None = None
    word: int | None = None

    def __str__(self) -> str:
        if self.position is None:
            return f"negative address {self.address}"
        if self.word is None:
            return f"negative address {self.address} at position {self.position}"
        return (f"negative address {self.address} from instruction "
                f"{self.word} at position {self.position}")


@dataclass(frozen=True)
class MachineHaltedError(IntcodeError, RuntimeError):
    position: int

    def __str__(self) -> str:
        # Caller misuse, not a program defect.
        return f"machine already halted at position {self.position}"


@dataclass(frozen=True)
class PipelineError(IntcodeError, RuntimeError):
    message: str
    stage: int | None = None

    def __str__(self) -> str:
        if self.stage is None:
            return self.message
        return f"stage {self.stage}: {self.message}"


@dataclass(frozen=True)
class ProgramLoadError(IntcodeError, ValueError):
    token: str
    index: int
    source: str | None = None

    def __str__(self) -> str:
        where = f" in {self.source}" if self.source else ""
        return f"invalid program word {self.token!r} at index {self.index}{where}"


__all__ = [
    "IntcodeError",
    "ProgramError",
    "DecodeError",
    "UnknownOpcodeError",
    "UnknownModeError",
    "ImmediateDestinationError",
    "AddressingError",
    "MachineHaltedError",
    "PipelineError",
    "ProgramLoadError",
]
