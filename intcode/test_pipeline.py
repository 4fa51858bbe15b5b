"""
Pipeline checks: straight chains and feedback loops of machines that share
one program, driven round-robin by the caller.
"""

from __future__ import annotations

import pytest

from intcode.errors import PipelineError
from intcode.machine import S_HALTED, S_WAITING
from intcode.pipeline import Pipeline, run_chain

CHAIN_A = [3, 15, 3, 16, 1002, 16, 10, 16, 1, 16, 15, 15, 4, 15, 99, 0, 0]
CHAIN_B = [3, 23, 3, 24, 1002, 24, 10, 24, 1002, 23, -1, 23, 101, 5, 23, 23,
           1, 24, 23, 23, 4, 23, 99, 0, 0]

FEEDBACK_A = [3, 26, 1001, 26, -4, 26, 3, 27, 1002, 27, 2, 27, 1, 27, 26, 27,
              4, 27, 1001, 28, -1, 28, 1005, 28, 6, 99, 0, 0, 5]
FEEDBACK_B = [3, 52, 1001, 52, -5, 52, 3, 53, 1, 52, 56, 54, 1007, 54, 5, 55,
              1005, 55, 26, 1001, 54, -5, 54, 1105, 1, 12, 1, 53, 54, 53, 1008,
              54, 0, 55, 1001, 55, 1, 55, 2, 53, 55, 53, 4, 53, 1001, 56, -1,
              56, 1005, 56, 6, 99, 0, 0, 0, 0, 10]


@pytest.mark.parametrize("program, phases, expected", [
    (CHAIN_A, [4, 3, 2, 1, 0], 43210),
    (CHAIN_B, [0, 1, 2, 3, 4], 54321),
])
def test_chain(program, phases, expected):
    pipeline = Pipeline(program, phases=phases)
    assert pipeline.states() == [S_WAITING] * 5
    assert pipeline.run_once([0]) == [expected]
    assert pipeline.states() == [S_HALTED] * 5
    assert pipeline.halted


@pytest.mark.parametrize("program, phases, expected", [
    (FEEDBACK_A, [9, 8, 7, 6, 5], 139629729),
    (FEEDBACK_B, [9, 7, 8, 5, 6], 18216),
])
def test_feedback(program, phases, expected):
    pipeline = Pipeline(program, phases=phases)
    assert pipeline.run_feedback([0]) == [expected]
    assert pipeline.halted
    assert pipeline.rounds > 1


def test_run_chain_helper():
    assert run_chain(CHAIN_A, [4, 3, 2, 1, 0], [0]) == [43210]
    assert run_chain(FEEDBACK_A, [9, 8, 7, 6, 5], [0], feedback=True) == [139629729]


def test_stages_do_not_share_memory():
    pipeline = Pipeline(CHAIN_A, phases=[4, 3])
    assert pipeline.memory(0)[15] == 4
    assert pipeline.memory(1)[15] == 3


def test_needs_phases_or_stages():
    with pytest.raises(PipelineError):
        Pipeline(CHAIN_A)


@pytest.mark.parametrize("kwargs", [{"phases": []}, {"stages": -1}])
def test_needs_at_least_one_stage(kwargs):
    with pytest.raises(PipelineError, match="at least one stage"):
        Pipeline([99], **kwargs)


def test_phase_must_leave_stage_waiting():
    with pytest.raises(PipelineError) as info:
        Pipeline([3, 0, 99], phases=[1, 2])
    assert info.value.stage == 0


def test_stalled_feedback():
    pipeline = Pipeline([3, 0, 3, 0, 99], stages=2)
    with pytest.raises(PipelineError, match="stalled"):
        pipeline.run_feedback()


def test_halted_stage_with_pending_values():
    pipeline = Pipeline([104, 1, 99], stages=2)
    assert pipeline.run_once() == [1]
    assert pipeline.run_once() == []
    with pytest.raises(PipelineError) as info:
        pipeline.run_once([5])
    assert info.value.stage == 0
