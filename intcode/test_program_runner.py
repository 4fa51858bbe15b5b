"""ProgramRunner stepping and the command-line entry point."""

from __future__ import annotations

import pytest

from intcode.errors import UnknownOpcodeError
from intcode.program_runner import ProgramRunner, main

QUINE = [109, 1, 204, -1, 1001, 100, 1, 100, 1008, 100, 16, 101, 1006, 101, 0, 99]

COMPARE_8 = [
    3, 21, 1008, 21, 8, 20, 1005, 20, 22, 107, 8, 21, 20, 1006, 20, 31,
    1106, 0, 36, 98, 0, 0, 1002, 21, 125, 20, 4, 20, 1105, 1, 46, 104,
    999, 1105, 1, 46, 1101, 1000, 1, 20, 4, 20, 1105, 1, 46, 98, 99,
]


def _write(tmp_path, words, name="prog.ic"):
    path = tmp_path / name
    path.write_text(",".join(str(w) for w in words) + "\n")
    return path


def test_runner_waits_then_resumes():
    runner = ProgramRunner()
    runner.load_text("3,0,4,0,99")
    assert runner.run() == []
    assert runner.phase == "waiting"
    runner.feed([5])
    assert runner.phase == "running"
    assert runner.pending_input == [5]
    assert runner.run() == [5]
    assert runner.phase == "halted"
    assert runner.output_values == [5]
    assert runner.tick() is False


def test_runner_single_steps():
    runner = ProgramRunner()
    runner.load_program([104, 7, 104, 8, 99])
    assert runner.tick() is True
    assert runner.output_values == [7]
    assert runner.machine.pc.value == 2
    assert runner.tick() is True
    assert runner.tick() is False
    assert runner.output_values == [7, 8]


def test_runner_error_phase():
    runner = ProgramRunner()
    runner.load_text("42")
    with pytest.raises(UnknownOpcodeError):
        runner.tick()
    assert runner.phase == "error"
    assert isinstance(runner.error, UnknownOpcodeError)
    assert runner.tick() is False


def test_runner_reset():
    runner = ProgramRunner()
    runner.load_program([3, 0, 4, 0, 99])
    runner.feed([9])
    runner.run()
    runner.reset()
    assert runner.phase == "idle"
    assert runner.output_values == []
    assert runner.machine.memory.dump() == [3, 0, 4, 0, 99]


def test_runner_load_file(tmp_path):
    runner = ProgramRunner()
    runner.load_file(_write(tmp_path, QUINE))
    assert runner.run() == QUINE


def test_main_prints_outputs(tmp_path, capsys):
    assert main([str(_write(tmp_path, QUINE))]) == 0
    out = capsys.readouterr().out
    assert out.split() == [str(w) for w in QUINE]


def test_main_with_input(tmp_path, capsys):
    assert main([str(_write(tmp_path, COMPARE_8)), "-i", "8", "--stats"]) == 0
    captured = capsys.readouterr()
    assert captured.out.strip() == "1000"
    assert "Steps:" in captured.err


def test_main_waiting(tmp_path, capsys):
    assert main([str(_write(tmp_path, [3, 0, 4, 0, 99]))]) == 2
    assert "waiting for input" in capsys.readouterr().err


def test_main_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "nope.ic")]) == 1
    assert "not found" in capsys.readouterr().err


def test_main_bad_program(tmp_path, capsys):
    path = tmp_path / "bad.ic"
    path.write_text("1,x,3\n")
    assert main([str(path)]) == 1
    assert "invalid program word" in capsys.readouterr().err


def test_main_program_error(tmp_path, capsys):
    assert main([str(_write(tmp_path, [1101, 1, 1, 0, 42]))]) == 1
    assert "unknown opcode 42" in capsys.readouterr().err
