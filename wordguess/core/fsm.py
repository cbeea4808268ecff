from __future__ import annotations

from statemachine import State, StateMachine

from wordguess.core.models import GameState, RoundPhase


class RoundFSM(StateMachine):
    """FSM wrapper around a single round of GameState.

    - idle -> running (new round)
    - running <-> paused (operator toggle)
    - running/paused -> finished (correct guess, timeout, or explicit end)
    - any state -> running via a fresh round

    The FSM only guards transitions; the reducer owns the round-scoped fields.
    """

    idle = State(RoundPhase.idle.value, value=RoundPhase.idle.value, initial=True)
    running = State(RoundPhase.running.value, value=RoundPhase.running.value)
    paused = State(RoundPhase.paused.value, value=RoundPhase.paused.value)
    finished = State(RoundPhase.finished.value, value=RoundPhase.finished.value)

    begin_round = idle.to(running) | running.to.itself() | paused.to(running) | finished.to(running)
    pause_round = running.to(paused)
    resume_round = paused.to(running)
    finish_round = running.to(finished) | paused.to(finished)

    def __init__(self, game: GameState):
        self.game = game
        super().__init__(start_value=game.phase.value)

    @property
    def phase(self) -> RoundPhase:
        return RoundPhase(str(self.current_state.value))

    def sync_phase_to_model(self) -> None:
        self.game.phase = self.phase
