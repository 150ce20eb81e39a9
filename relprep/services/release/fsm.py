"""Table-driven state machine runner.

A machine is a transition table (stage -> ordered guarded transitions) plus
entry actions keyed by stage. On each step the first transition whose guard
accepts the current state wins, the target stage's entry action runs, and
its returned state replaces the current one. A stage with no outgoing
transitions is terminal.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from typing import Generic, TypeVar

from relprep.core.result import Err, Ok, Result
from relprep.services.release.errors import ReleaseError

S = TypeVar("S")

Guard = Callable[[S], bool]
StageAction = Callable[[S], Result[S, ReleaseError]]
OnEnter = Callable[[str], None]


@dataclass(frozen=True, slots=True)
class Transition(Generic[S]):
    target: str
    guard: Callable[[S], bool]


@dataclass(frozen=True, slots=True)
class MachineRun(Generic[S]):
    state: S
    stages: tuple[str, ...]

    @property
    def final_stage(self) -> str:
        return self.stages[-1]


def always(_: object) -> bool:
    return True


def run_state_machine(
    *,
    initial_state: S,
    initial_stage: str,
    transitions: Mapping[str, tuple[Transition[S], ...]],
    actions: Mapping[str, StageAction[S]],
    on_enter: OnEnter | None = None,
) -> Result[MachineRun[S], ReleaseError]:
    """Drive ``initial_state`` from ``initial_stage`` to a terminal stage.

    Errors returned by an entry action are tagged with the stage they
    happened in and end the run.
    """
    state = initial_state
    stage = initial_stage
    history = [stage]

    while True:
        outgoing = transitions.get(stage)
        if outgoing is None:
            return Err(
                ReleaseError(kind="invalid_input", message=f"unknown stage: {stage}", stage=stage)
            )
        if not outgoing:
            return Ok(MachineRun(state=state, stages=tuple(history)))

        target = next((t.target for t in outgoing if t.guard(state)), None)
        if target is None:
            return Err(
                ReleaseError(
                    kind="invalid_input",
                    message=f"no transition out of stage: {stage}",
                    stage=stage,
                )
            )

        if on_enter is not None:
            on_enter(target)

        action = actions.get(target)
        if action is not None:
            outcome = action(state)
            if isinstance(outcome, Err):
                return Err(replace(outcome.error, stage=target))
            state = outcome.value

        stage = target
        history.append(stage)
