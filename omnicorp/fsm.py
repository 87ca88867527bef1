from __future__ import annotations

from statemachine import State, StateMachine

from omnicorp.api.models import ClockPhase


class ClockFSM(StateMachine):
    """Run state of the game clock.

    - phases: stopped <-> running
    - the clock owns the asyncio tasks; the FSM only guards transitions.
    """

    stopped = State(ClockPhase.stopped.value, value=ClockPhase.stopped.value, initial=True)
    running = State(ClockPhase.running.value, value=ClockPhase.running.value)

    resume = stopped.to(running)
    halt = running.to(stopped)

    def __init__(self, phase: ClockPhase = ClockPhase.stopped):
        super().__init__(start_value=phase.value)

    @property
    def phase(self) -> ClockPhase:
        return ClockPhase(str(self.current_state.value))

    @property
    def is_running(self) -> bool:
        return self.current_state == self.running
