"""
Intcode machine — suspendable interpreter for the integer-word instruction set.

Owns a growable memory, the instruction pointer and the relative base.
Each execute() call runs instructions until the program halts or asks for
input that has not been supplied yet; in the latter case the machine
suspends with pc still on the input instruction, so the next call retries it.
"""

from __future__ import annotations

import copy
import logging
from typing import Iterable

from .chips import Memory, Register, WordFIFO
from .errors import (
    AddressingError, ImmediateDestinationError, MachineHaltedError,
    ProgramError, UnknownModeError, UnknownOpcodeError,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Instruction set
# ---------------------------------------------------------------------------

OP_ADD = 1
OP_MUL = 2
OP_IN  = 3
OP_OUT = 4
OP_JNZ = 5
OP_JZ  = 6
OP_LT  = 7
OP_EQ  = 8
OP_ARB = 9
OP_HLT = 99

# opcode -> (mnemonic, width in words)
OPCODES = {
    OP_ADD: ("add", 4),
    OP_MUL: ("mul", 4),
    OP_IN:  ("in", 2),
    OP_OUT: ("out", 2),
    OP_JNZ: ("jnz", 3),
    OP_JZ:  ("jz", 3),
    OP_LT:  ("lt", 4),
    OP_EQ:  ("eq", 4),
    OP_ARB: ("arb", 2),
    OP_HLT: ("hlt", 1),
}

# Parameter addressing modes
MODE_POSITION  = 0
MODE_IMMEDIATE = 1
MODE_RELATIVE  = 2

MODE_NAMES = {
    MODE_POSITION: "position",
    MODE_IMMEDIATE: "immediate",
    MODE_RELATIVE: "relative",
}

# Execution states
S_RUNNING = 0   # only observable between tick() calls
S_WAITING = 1   # blocked on an input instruction with an empty queue
S_HALTED  = 2

STATE_NAMES = {
    S_RUNNING: "RUNNING",
    S_WAITING: "WAITING",
    S_HALTED: "HALTED",
}


def decode_instruction(word: int, position: int = 0) -> tuple[int, tuple[int, ...]]:
    """Split an instruction word into its opcode and parameter modes.

    Only the mode digits of parameters the opcode actually takes are
    decoded; higher digits are ignored.
    """
    if word < 0:
        raise UnknownOpcodeError(position=position, word=word)
    opcode = word % 100
    if opcode not in OPCODES:
        raise UnknownOpcodeError(position=position, word=word)
    _, width = OPCODES[opcode]
    modes = []
    divisor = 100
    for param in range(1, width):
        mode = word // divisor % 10
        if mode not in MODE_NAMES:
            raise UnknownModeError(position=position, word=word,
                                   parameter=param, mode=mode)
        modes.append(mode)
        divisor *= 10
    return opcode, tuple(modes)


# ---------------------------------------------------------------------------
# Machine
# ---------------------------------------------------------------------------

class IntcodeMachine:
    """Intcode interpreter with a cooperative suspend/resume contract."""

    def __init__(self, program: Iterable[int], trace: bool = False):
        # --- Storage ---
        self.memory = Memory(program)

        # --- Registers ---
        self.pc = Register()        # instruction pointer
        self.rel = Register()       # relative base
        self.state = Register(S_RUNNING)

        # --- IO ---
        self.inputs = WordFIFO()
        self.outputs = WordFIFO()

        self.trace = trace
        self.fault: ProgramError | None = None   # first program error, sticky

        # --- Counters ---
        self.steps = 0
        self.mem_reads = 0
        self.mem_writes = 0
        self.inputs_read = 0
        self.outputs_written = 0
        self.suspensions = 0

    @property
    def halted(self) -> bool:
        return self.state.value == S_HALTED

    @property
    def waiting(self) -> bool:
        return self.state.value == S_WAITING

    @property
    def faulted(self) -> bool:
        return self.fault is not None

    # -------------------------------------------------------------------
    # Memory helpers
    # -------------------------------------------------------------------

    def mem_read(self, addr: int) -> int:
        self.mem_reads += 1
        return self.memory.read(addr)

    def mem_write(self, addr: int, val: int):
        self.mem_writes += 1
        self.memory.write(addr, val)

    def _fetch(self) -> int:
        pc = self.pc.value
        if pc < 0:
            raise AddressingError(address=pc, position=pc)
        return self.mem_read(pc)

    # -------------------------------------------------------------------
    # Addressing-mode resolution
    # -------------------------------------------------------------------

    def _param_addr(self, param: int, mode: int, word: int) -> int:
        """Effective address of parameter `param` of the current instruction.

        Immediate parameters resolve to the address of the parameter word
        itself, so reading through the result yields the literal value.
        """
        pc = self.pc.value
        if mode == MODE_IMMEDIATE:
            return pc + param
        raw = self.mem_read(pc + param)
        addr = raw if mode == MODE_POSITION else self.rel.value + raw
        if addr < 0:
            raise AddressingError(address=addr, position=pc, word=word)
        return addr

    def _read_param(self, param: int, mode: int, word: int) -> int:
        return self.mem_read(self._param_addr(param, mode, word))

    def _dest_param(self, param: int, mode: int, word: int) -> int:
        if mode == MODE_IMMEDIATE:
            raise ImmediateDestinationError(position=self.pc.value, word=word,
                                            parameter=param)
        return self._param_addr(param, mode, word)

    # -------------------------------------------------------------------
    # Instruction execution
    # -------------------------------------------------------------------

    def tick(self) -> bool:
        """Execute one instruction. Returns True if still running.

        Uses the machine-held input and output queues. A halted machine is
        left untouched and reports False. A program error is recorded and
        re-raised by every later call, whatever the caller patches.
        """
        if self.fault is not None:
            raise self.fault
        if self.state.value == S_HALTED:
            return False
        try:
            return self._step()
        except ProgramError as e:
            self.fault = e
            logger.debug("faulted at pc=%d: %s", self.pc.value, e)
            raise

    def _step(self) -> bool:
        pc = self.pc.value
        word = self._fetch()
        opcode, modes = decode_instruction(word, pc)

        if opcode == OP_HLT:
            if self.trace:
                logger.debug("PC %d: halt", pc)
            self.state.load(S_HALTED)
            self.steps += 1
            return False

        if opcode in (OP_ADD, OP_MUL, OP_LT, OP_EQ):
            # op in1 in2 out_addr
            a = self._read_param(1, modes[0], word)
            b = self._read_param(2, modes[1], word)
            dest = self._dest_param(3, modes[2], word)
            if opcode == OP_ADD:
                result = a + b
            elif opcode == OP_MUL:
                result = a * b
            elif opcode == OP_LT:
                result = 1 if a < b else 0
            else:
                result = 1 if a == b else 0
            if self.trace:
                logger.debug("PC %d: %s %d %d -> [%d] = %d",
                             pc, OPCODES[opcode][0], a, b, dest, result)
            self.mem_write(dest, result)
            self.pc.load(pc + 4)

        elif opcode == OP_IN:
            # in write_addr
            dest = self._dest_param(1, modes[0], word)
            value = self.inputs.pop()
            if value is None:
                # Leave pc on this instruction so the next call retries it.
                if self.state.value != S_WAITING:
                    self.suspensions += 1
                    logger.debug("suspended for input at pc=%d", pc)
                self.state.load(S_WAITING)
                return False
            if self.trace:
                logger.debug("PC %d: read %d -> [%d]", pc, value, dest)
            self.mem_write(dest, value)
            self.inputs_read += 1
            self.pc.load(pc + 2)

        elif opcode == OP_OUT:
            # out value
            value = self._read_param(1, modes[0], word)
            if self.trace:
                logger.debug("PC %d: output %d", pc, value)
            self.outputs.push(value)
            self.outputs_written += 1
            self.pc.load(pc + 2)

        elif opcode in (OP_JNZ, OP_JZ):
            # jnz/jz cond target
            cond = self._read_param(1, modes[0], word)
            target = self._read_param(2, modes[1], word)
            taken = (cond != 0) if opcode == OP_JNZ else (cond == 0)
            if self.trace:
                logger.debug("PC %d: %s %d %d (%s)", pc, OPCODES[opcode][0],
                             cond, target, "taken" if taken else "not taken")
            self.pc.load(target if taken else pc + 3)

        else:
            # arb value
            value = self._read_param(1, modes[0], word)
            if self.trace:
                logger.debug("PC %d: rel(%d) + %d", pc, self.rel.value, value)
            self.rel.load(self.rel.value + value)
            self.pc.load(pc + 2)

        self.state.load(S_RUNNING)
        self.steps += 1
        return True

    # -------------------------------------------------------------------
    # Suspend/resume execution
    # -------------------------------------------------------------------

    def execute(self, inputs: Iterable[int] = ()) -> tuple[int, list[int]]:
        """Run until halt or until input is needed and none is queued.

        Returns (state, outputs) where state is S_HALTED or S_WAITING and
        outputs holds every value written during this call, in order.
        Inputs left over when the program halts are discarded.
        """
        if self.state.value == S_HALTED:
            raise MachineHaltedError(position=self.pc.value)
        if self.fault is not None:
            raise self.fault

        self.inputs = WordFIFO(inputs)
        self.outputs = WordFIFO()
        self.state.load(S_RUNNING)

        while self.tick():
            pass

        if self.state.value == S_HALTED:
            logger.debug("halted at pc=%d after %d steps", self.pc.value, self.steps)
        return self.state.value, self.outputs.drain()

    def fork(self) -> IntcodeMachine:
        """Independent copy of this machine, memory and queues included.

        A recorded fault is shared, not copied.
        """
        return copy.deepcopy(self, {id(self.fault): self.fault})

    # -------------------------------------------------------------------
    # Counters
    # -------------------------------------------------------------------

    def reset_counters(self):
        self.steps = 0
        self.mem_reads = 0
        self.mem_writes = 0
        self.inputs_read = 0
        self.outputs_written = 0
        self.suspensions = 0

    def stats(self) -> dict:
        return {
            "steps": self.steps,
            "mem_reads": self.mem_reads,
            "mem_writes": self.mem_writes,
            "inputs_read": self.inputs_read,
            "outputs_written": self.outputs_written,
            "suspensions": self.suspensions,
            "memory_size": len(self.memory),
        }

    def stats_summary(self) -> str:
        s = self.stats()
        return (
            f"Steps: {s['steps']}\n"
            f"Memory: {s['mem_reads']}R/{s['mem_writes']}W "
            f"({s['memory_size']} words)\n"
            f"IO: {s['inputs_read']} in / {s['outputs_written']} out\n"
            f"Suspensions: {s['suspensions']}"
        )
