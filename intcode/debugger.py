"""
Textual TUI debugger for the Intcode machine.

Instruction-stepping debugger that loads a program file, runs it on an
IntcodeMachine, and displays disassembly, registers, memory and IO at
every step. Values typed into the input box are queued for the program.

Usage:
    python -m intcode.debugger examples/compare8.ic
    python -m intcode.debugger examples/compare8.ic -i 8 --run
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import ScrollableContainer
from textual.widgets import Footer, Input, RichLog, Static
from textual import work

from intcode.disasm import disassemble_around
from intcode.errors import IntcodeError, ProgramLoadError
from intcode.loader import parse_values
from intcode.machine import STATE_NAMES
from intcode.program_runner import ProgramRunner

DISASM_BEFORE = 5
DISASM_AFTER = 30
DISASM_LOOKBACK = 64   # words swept ahead of pc to find instruction boundaries
MEMORY_ROW = 8
MEMORY_ROWS = 16


def _esc(text: str) -> str:
    """Escape Rich markup characters in text."""
    return text.replace("[", "\\[")


# ---------------------------------------------------------------------------
# CSS
# ---------------------------------------------------------------------------

DEBUGGER_CSS = """
Screen {
    layout: grid;
    grid-size: 2 5;
    grid-columns: 1fr 1fr;
    grid-rows: 1fr 1fr 1fr auto auto;
}

.panel {
    border: solid $accent;
    border-title-align: left;
    overflow-y: auto;
    height: 100%;
}

#output-panel { column-span: 2; }

#input-box {
    column-span: 2;
}

Footer {
    column-span: 2;
}
"""


# ---------------------------------------------------------------------------
# Panel widgets
# ---------------------------------------------------------------------------

class DisasmPanel(ScrollableContainer):
    """Disassembly around pc, with breakpoints marked."""
    BORDER_TITLE = "Code"

    def compose(self) -> ComposeResult:
        yield Static("", id="disasm-content")


class StatePanel(ScrollableContainer):
    """Machine state: registers, counters."""
    BORDER_TITLE = "Machine State"

    def compose(self) -> ComposeResult:
        yield Static("", id="state-content")


class MemoryPanel(ScrollableContainer):
    """Memory rows around pc."""
    BORDER_TITLE = "Memory"

    def compose(self) -> ComposeResult:
        yield Static("", id="memory-content")


class IOPanel(ScrollableContainer):
    """Pending input and output totals."""
    BORDER_TITLE = "IO"

    def compose(self) -> ComposeResult:
        yield Static("", id="io-content")


class OutputPanel(ScrollableContainer):
    """Accumulated program output."""
    BORDER_TITLE = "Output"

    def compose(self) -> ComposeResult:
        yield RichLog(id="output-log", markup=True, wrap=True)


# ---------------------------------------------------------------------------
# Main debugger app
# ---------------------------------------------------------------------------

class IntcodeDebugger(App):
    """Textual TUI debugger for the Intcode machine."""

    CSS = DEBUGGER_CSS
    TITLE = "Intcode Debugger"

    BINDINGS = [
        Binding("s", "step_1", "Step"),
        Binding("space", "step_1", "Step", show=False),
        Binding("n", "step_10", "x10"),
        Binding("f", "step_100", "x100"),
        Binding("r", "run_to_end", "Run"),
        Binding("b", "toggle_breakpoint", "Break"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(self, runner: ProgramRunner, auto_run: bool = False):
        super().__init__()
        self.runner = runner
        self.auto_run = auto_run
        self.breakpoints: set[int] = set()
        self._output_count = 0

    def compose(self) -> ComposeResult:
        yield DisasmPanel(id="disasm-panel", classes="panel")
        yield StatePanel(id="state-panel", classes="panel")
        yield MemoryPanel(id="memory-panel", classes="panel")
        yield IOPanel(id="io-panel", classes="panel")
        yield OutputPanel(id="output-panel", classes="panel")
        yield Input(placeholder="input values, e.g. 1,2,3", id="input-box")
        yield Footer()

    def on_mount(self) -> None:
        self.refresh_panels()
        if self.auto_run:
            self.action_run_to_end()

    # -------------------------------------------------------------------
    # Panel refresh
    # -------------------------------------------------------------------

    def refresh_panels(self) -> None:
        self._refresh_disasm()
        self._refresh_state()
        self._refresh_memory()
        self._refresh_io()
        self._refresh_output()

    def _refresh_disasm(self) -> None:
        m = self.runner.machine
        pc = m.pc.value
        lines = disassemble_around(m.memory.data, pc, before=DISASM_BEFORE,
                                   after=DISASM_AFTER, lookback=DISASM_LOOKBACK)
        out = []
        for addr, text in lines:
            prefix = "●" if addr in self.breakpoints else " "
            marker = "▸" if addr == pc else " "
            line = f"{prefix}{marker} {addr:5d}│ {_esc(text)}"
            if addr == pc:
                line = f"[bold reverse]{line}[/bold reverse]"
            out.append(line)
        content = self.query_one("#disasm-content", Static)
        content.update("\n".join(out) if out else "(empty program)")

    def _refresh_state(self) -> None:
        m = self.runner.machine
        s = m.stats()
        state_name = STATE_NAMES.get(m.state.value, f"?({m.state.value})")
        text = (
            f"[bold]State:[/bold] {state_name}    [bold]Steps:[/bold] {s['steps']}\n"
            f"[bold]PC:[/bold] {m.pc.value}  [bold]REL:[/bold] {m.rel.value}\n"
            f"[bold]Memory:[/bold] {s['memory_size']} words  "
            f"{s['mem_reads']}R/{s['mem_writes']}W\n"
            f"[bold]IO:[/bold] {s['inputs_read']} in / {s['outputs_written']} out  "
            f"[bold]Suspensions:[/bold] {s['suspensions']}\n"
            f"[bold]Phase:[/bold] {self.runner.phase}"
        )
        if self.runner.error is not None:
            text += f"\n[bold red]Error:[/bold red] {_esc(str(self.runner.error))}"
        content = self.query_one("#state-content", Static)
        content.update(text)

    def _refresh_memory(self) -> None:
        m = self.runner.machine
        words = m.memory.data
        pc = m.pc.value
        first_row = max(0, pc // MEMORY_ROW - MEMORY_ROWS // 4)
        lines = []
        for row in range(first_row, first_row + MEMORY_ROWS):
            base = row * MEMORY_ROW
            if base >= len(words):
                break
            cells = []
            for addr in range(base, min(base + MEMORY_ROW, len(words))):
                cell = f"{words[addr]:>7d}"
                if addr == pc:
                    cell = f"[green]{cell}[/green]"
                cells.append(cell)
            lines.append(f"{base:5d}: {' '.join(cells)}")
        content = self.query_one("#memory-content", Static)
        content.update("\n".join(lines) if lines else "(empty)")

    def _refresh_io(self) -> None:
        pending = self.runner.pending_input
        outputs = self.runner.output_values
        pending_str = ", ".join(str(v) for v in pending) if pending else "(empty)"
        last_str = str(outputs[-1]) if outputs else "-"
        text = (
            f"[bold]Pending input:[/bold] {pending_str}\n"
            f"[bold]Outputs:[/bold] {len(outputs)}  [bold]Last:[/bold] {last_str}"
        )
        content = self.query_one("#io-content", Static)
        content.update(text)

    def _refresh_output(self) -> None:
        log = self.query_one("#output-log", RichLog)
        while self._output_count < len(self.runner.output_values):
            log.write(str(self.runner.output_values[self._output_count]))
            self._output_count += 1

    # -------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------

    def _report_error(self, err: Exception) -> None:
        """Show an error in the output panel."""
        self.query_one("#output-log", RichLog).write(f"\\[ERROR] {_esc(str(err))}")
        self.refresh_panels()

    def _do_steps(self, count: int) -> None:
        try:
            for _ in range(count):
                if not self.runner.tick():
                    break
        except IntcodeError as e:
            self._report_error(e)
            return
        self.refresh_panels()

    def action_step_1(self) -> None:
        self._do_steps(1)

    def action_step_10(self) -> None:
        self._do_steps(10)

    def action_step_100(self) -> None:
        self._do_steps(100)

    def action_toggle_breakpoint(self) -> None:
        pc = self.runner.machine.pc.value
        if pc in self.breakpoints:
            self.breakpoints.discard(pc)
        else:
            self.breakpoints.add(pc)
        self._refresh_disasm()

    @work(thread=True)
    def action_run_to_end(self) -> None:
        """Run until halt, input wait, or breakpoint in a background thread."""
        try:
            steps = 0
            while self.runner.tick():
                steps += 1
                if self.runner.machine.pc.value in self.breakpoints:
                    break
                if steps % 500 == 0:
                    self.call_from_thread(self.refresh_panels)
        except IntcodeError as e:
            self.call_from_thread(self._report_error, e)
            return
        self.call_from_thread(self.refresh_panels)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        try:
            values = parse_values(event.value, source="input box")
        except ProgramLoadError as e:
            self._report_error(e)
            return
        event.input.value = ""
        self.runner.feed(values)
        self.refresh_panels()


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def main():
    parser = argparse.ArgumentParser(
        description="Intcode machine TUI debugger",
        prog="python -m intcode.debugger",
    )
    parser.add_argument("file", help="Path to a comma-separated program file")
    parser.add_argument("-i", "--input", default="",
                        help="Comma-separated values to queue before starting")
    parser.add_argument("--run", action="store_true",
                        help="Run immediately (auto-run mode)")
    parser.add_argument("--log", metavar="PATH",
                        help="Write an instruction trace to PATH")
    args = parser.parse_args()

    if args.log:
        logging.basicConfig(filename=args.log, filemode="w", level=logging.DEBUG,
                            format="%(name)s: %(message)s")

    runner = ProgramRunner(trace=bool(args.log))
    path = Path(args.file)
    if not path.exists():
        print(f"Error: File not found: {path}", file=sys.stderr)
        sys.exit(1)
    try:
        runner.load_file(path)
        runner.feed(parse_values(args.input, source="--input"))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    app = IntcodeDebugger(runner, auto_run=args.run)
    app.run()


if __name__ == "__main__":
    main()
