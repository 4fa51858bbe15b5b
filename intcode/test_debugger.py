"""Headless smoke test for the TUI debugger."""

from __future__ import annotations

import asyncio

from intcode.debugger import IntcodeDebugger
from intcode.program_runner import ProgramRunner


def test_debugger_steps_until_halt():
    runner = ProgramRunner()
    runner.load_program([3, 0, 4, 0, 99])

    async def scenario():
        app = IntcodeDebugger(runner)
        async with app.run_test() as pilot:
            app.action_step_1()
            assert runner.phase == "waiting"
            app.action_toggle_breakpoint()
            assert app.breakpoints == {0}
            app.action_toggle_breakpoint()
            assert app.breakpoints == set()
            runner.feed([6])
            app.action_step_10()
            await pilot.pause()
            assert runner.phase == "halted"
            assert runner.output_values == [6]

    asyncio.run(scenario())


def test_debugger_reports_program_errors():
    runner = ProgramRunner()
    runner.load_program([42])

    async def scenario():
        app = IntcodeDebugger(runner)
        async with app.run_test() as pilot:
            app.action_step_1()
            await pilot.pause()
            assert runner.phase == "error"

    asyncio.run(scenario())
