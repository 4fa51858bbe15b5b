"""
program_runner — step-controlled execution of an Intcode program.

Wraps IntcodeMachine with a pending-input buffer and an accumulated output
log so the debugger and the command line can drive a program one
instruction at a time or until it blocks.

Usage:
    python -m intcode.program_runner examples/compare8.ic -i 8
    python -m intcode.program_runner examples/quine.ic --stats -v
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable

from .errors import ProgramError, ProgramLoadError
from .loader import load_program, parse_program, parse_values
from .machine import IntcodeMachine, S_HALTED, S_WAITING

logger = logging.getLogger(__name__)


class ProgramRunner:
    """Holds one machine plus the IO a caller has fed it and received."""

    def __init__(self, trace: bool = False):
        self.trace = trace
        self.machine: IntcodeMachine | None = None
        self.program: list[int] = []
        self.source: str = ""
        self.output_values: list[int] = []
        self.phase: str = "idle"  # "idle" | "running" | "waiting" | "halted" | "error"
        self.error: Exception | None = None

    # -------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------

    def load_program(self, words: Iterable[int], source: str = "<program>"):
        self.program = list(words)
        self.source = source
        self.machine = IntcodeMachine(self.program, trace=self.trace)
        self.output_values = []
        self.error = None
        self.phase = "idle"
        logger.debug("loaded %d words from %s", len(self.program), source)

    def load_text(self, text: str):
        self.load_program(parse_program(text), source="<text>")

    def load_file(self, path: str | Path):
        self.load_program(load_program(path), source=str(path))

    def reset(self):
        """Reload the original program, dropping all state and IO."""
        self.load_program(self.program, source=self.source)

    # -------------------------------------------------------------------
    # IO
    # -------------------------------------------------------------------

    def feed(self, values: Iterable[int]):
        """Queue input values. A waiting machine becomes runnable again."""
        self.machine.inputs.extend(values)
        if self.phase == "waiting" and self.machine.inputs.ready():
            self.phase = "running"

    @property
    def pending_input(self) -> list[int]:
        return list(self.machine.inputs.buffer) if self.machine else []

    # -------------------------------------------------------------------
    # Execution control
    # -------------------------------------------------------------------

    def tick(self) -> bool:
        """Execute one instruction. Returns True if another step can run."""
        if self.machine is None or self.phase in ("halted", "error"):
            return False
        self.phase = "running"
        try:
            running = self.machine.tick()
        except ProgramError as e:
            self.error = e
            self.phase = "error"
            raise
        self.output_values.extend(self.machine.outputs.drain())
        if self.machine.state.value == S_HALTED:
            self.phase = "halted"
        elif self.machine.state.value == S_WAITING:
            self.phase = "waiting"
        return running

    def run(self) -> list[int]:
        """Step until the machine halts or waits. Returns outputs produced."""
        start = len(self.output_values)
        while self.tick():
            pass
        return self.output_values[start:]


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Run an Intcode program",
        prog="python -m intcode.program_runner",
    )
    parser.add_argument("file", help="Path to a comma-separated program file")
    parser.add_argument("-i", "--input", default="",
                        help="Comma-separated input values")
    parser.add_argument("--stats", action="store_true",
                        help="Print machine counters to stderr when done")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Trace every instruction")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    runner = ProgramRunner(trace=args.verbose)
    path = Path(args.file)
    if not path.exists():
        print(f"Error: File not found: {path}", file=sys.stderr)
        return 1
    try:
        runner.load_file(path)
        runner.feed(parse_values(args.input, source="--input"))
    except ProgramLoadError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        for value in runner.run():
            print(value)
    except ProgramError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.stats:
        print(runner.machine.stats_summary(), file=sys.stderr)
    if runner.phase == "waiting":
        print(f"Machine waiting for input at pc={runner.machine.pc.value}",
              file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
