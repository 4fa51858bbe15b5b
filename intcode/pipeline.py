"""
pipeline — chains of Intcode machines driven by a single caller loop.

Each stage's outputs become the next stage's inputs. In feedback mode the
last stage's outputs are routed back to the first stage until the last
stage halts. The machines never see each other; all scheduling happens here.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from .errors import PipelineError
from .machine import IntcodeMachine, S_WAITING, STATE_NAMES

logger = logging.getLogger(__name__)


class Pipeline:
    """Fixed linear topology of machines sharing one program.

    Args:
        program: Initial memory for every stage. Each stage gets its own copy.
        phases: Optional per-stage setting, fed as the first input of each
            stage. The stage must then be waiting for its next input.
        stages: Number of stages when no phases are given.
        trace: Passed through to every machine.
    """

    def __init__(self, program: Sequence[int], phases: Sequence[int] | None = None,
                 stages: int | None = None, trace: bool = False):
        if phases is None and not stages:
            raise PipelineError("a pipeline needs phases or a stage count")
        count = len(phases) if phases is not None else stages
        if count < 1:
            raise PipelineError("a pipeline needs at least one stage")
        self.machines = [IntcodeMachine(program, trace=trace) for _ in range(count)]
        self.rounds = 0
        if phases is not None:
            for idx, (machine, phase) in enumerate(zip(self.machines, phases)):
                state, output = machine.execute([phase])
                if state != S_WAITING or output:
                    raise PipelineError(
                        f"phase {phase} left stage {STATE_NAMES[state]} "
                        f"with {len(output)} outputs", stage=idx)

    def __len__(self) -> int:
        return len(self.machines)

    def states(self) -> list[int]:
        return [m.state.value for m in self.machines]

    @property
    def halted(self) -> bool:
        return self.machines[-1].halted

    def _run_stage(self, idx: int, values: list[int]) -> list[int]:
        machine = self.machines[idx]
        if machine.halted:
            if values:
                raise PipelineError(
                    f"halted stage received {len(values)} values", stage=idx)
            return []
        _, output = machine.execute(values)
        return output

    def run_once(self, inputs: Iterable[int] = ()) -> list[int]:
        """One pass through every stage. Returns the last stage's outputs."""
        values = list(inputs)
        for idx in range(len(self.machines)):
            values = self._run_stage(idx, values)
        self.rounds += 1
        return values

    def run_feedback(self, inputs: Iterable[int] = ()) -> list[int]:
        """Loop the last stage's outputs back to the first until it halts.

        Returns the outputs of the final pass.
        """
        values = list(inputs)
        while True:
            before = [m.steps for m in self.machines]
            values = self.run_once(values)
            logger.debug("round %d: %s -> %s", self.rounds,
                         [STATE_NAMES[s] for s in self.states()], values)
            if self.machines[-1].halted:
                return values
            if not values and before == [m.steps for m in self.machines]:
                raise PipelineError("pipeline stalled with every stage waiting")

    def memory(self, stage: int) -> list[int]:
        return self.machines[stage].memory.dump()


def run_chain(program: Sequence[int], phases: Sequence[int],
              inputs: Iterable[int] = (), feedback: bool = False) -> list[int]:
    """Build a pipeline for `phases` and run it once or in feedback mode."""
    pipeline = Pipeline(program, phases=phases)
    if feedback:
        return pipeline.run_feedback(inputs)
    return pipeline.run_once(inputs)


__all__ = ["Pipeline", "run_chain"]
