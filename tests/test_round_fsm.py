from __future__ import annotations

import pytest
from statemachine.exceptions import TransitionNotAllowed

from wordguess.core.fsm import RoundFSM
from wordguess.core.models import GameState, RoundPhase


def test_round_fsm_full_cycle() -> None:
    game = GameState()
    fsm = RoundFSM(game)
    assert fsm.phase == RoundPhase.idle

    fsm.begin_round()
    fsm.sync_phase_to_model()
    assert game.phase == RoundPhase.running

    fsm.pause_round()
    fsm.sync_phase_to_model()
    assert game.phase == RoundPhase.paused

    fsm.resume_round()
    fsm.finish_round()
    fsm.sync_phase_to_model()
    assert game.phase == RoundPhase.finished

    # A fresh round is allowed from any state.
    fsm.begin_round()
    assert fsm.phase == RoundPhase.running


def test_round_fsm_resumes_from_persisted_phase() -> None:
    game = GameState(phase=RoundPhase.paused)
    fsm = RoundFSM(game)

    assert fsm.phase == RoundPhase.paused
    fsm.finish_round()
    assert fsm.phase == RoundPhase.finished


def test_round_fsm_rejects_finish_without_round() -> None:
    fsm = RoundFSM(GameState())

    with pytest.raises(TransitionNotAllowed):
        fsm.finish_round()
    with pytest.raises(TransitionNotAllowed):
        fsm.pause_round()
