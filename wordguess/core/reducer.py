"""Pure round transitions: `reduce(state, action) -> Transition`.

Every state change (remote triggers, the round clock, operator controls) is expressed as
one of the actions below and applied through `reduce`. The input state is never mutated;
rejected or inapplicable actions return the original state with `changed=False`.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field

from wordguess.core.events import GameAlert
from wordguess.core.fsm import RoundFSM
from wordguess.core.models import GameConfig, GameState, RoundPhase, Winner


@dataclass(frozen=True, slots=True)
class StartRound:
    word: str
    hint: str = ""


@dataclass(frozen=True, slots=True)
class EndRound:
    winner: str | None = None
    points: int = 0


@dataclass(frozen=True, slots=True)
class TogglePause:
    pass


@dataclass(frozen=True, slots=True)
class RevealLetter:
    pass


@dataclass(frozen=True, slots=True)
class RevealAll:
    pass


@dataclass(frozen=True, slots=True)
class ActivateDoublePoints:
    duration_s: int | None = None
    activated_by: str | None = None


@dataclass(frozen=True, slots=True)
class SubmitGuess:
    user: str
    # Canonical form (uppercased, trimmed) as produced at ingest.
    word: str


@dataclass(frozen=True, slots=True)
class Tick:
    """One second of round clock."""


GameAction = StartRound | EndRound | TogglePause | RevealLetter | RevealAll | ActivateDoublePoints | SubmitGuess | Tick


@dataclass(frozen=True, slots=True)
class Transition:
    state: GameState
    changed: bool
    note: str
    alerts: list[GameAlert] = field(default_factory=list)
    # Set when a correct guess earned points in this transition.
    winner: Winner | None = None


def _noop(state: GameState, note: str) -> Transition:
    return Transition(state=state, changed=False, note=note)


def _start_round(action: StartRound, *, config: GameConfig, prev: GameState, now_ms: int) -> Transition:
    word = action.word.strip().upper()
    if not word:
        return _noop(prev, "no word provided")

    s = GameState(
        round_number=prev.round_number + 1,
        current_word=word,
        current_hint=action.hint.strip(),
        started_at_ms=now_ms,
        duration_s=config.round_duration_s,
        time_left_s=config.round_duration_s,
    )
    fsm = RoundFSM(s)
    fsm.begin_round()
    fsm.sync_phase_to_model()

    alert = GameAlert.at(
        type="ROUND_START",
        now_ms=now_ms,
        data={"word": s.current_word, "hint": s.current_hint, "duration": s.duration_s},
    )
    return Transition(state=s, changed=True, note=f"round {s.round_number} started", alerts=[alert])


def _finish(s: GameState, *, winner: str | None, points: int, now_ms: int, reason: str) -> list[GameAlert]:
    fsm = RoundFSM(s)
    fsm.finish_round()
    fsm.sync_phase_to_model()

    s.winner = winner
    s.winner_points = points if winner else 0
    s.revealed_indices = list(range(len(s.current_word)))

    if winner:
        return [
            GameAlert.at(
                type="GAME_WIN",
                now_ms=now_ms,
                data={"playerName": winner, "points": points, "word": s.current_word, "timestamp": now_ms},
            )
        ]
    return [
        GameAlert.at(
            type="ROUND_END",
            now_ms=now_ms,
            data={"word": s.current_word, "timeElapsed": s.duration_s - s.time_left_s, "reason": reason},
        )
    ]


def _end_round(action: EndRound, *, prev: GameState, now_ms: int) -> Transition:
    if not prev.is_active:
        return _noop(prev, "no active round")

    s = prev.model_copy(deep=True)
    alerts = _finish(s, winner=action.winner, points=action.points, now_ms=now_ms, reason="ended")
    return Transition(state=s, changed=True, note="round ended", alerts=alerts)


def _toggle_pause(*, prev: GameState) -> Transition:
    s = prev.model_copy(deep=True)
    fsm = RoundFSM(s)
    if fsm.current_state == fsm.running:
        fsm.pause_round()
    elif fsm.current_state == fsm.paused:
        fsm.resume_round()
    else:
        return _noop(prev, "no active round")
    fsm.sync_phase_to_model()
    return Transition(state=s, changed=True, note=s.phase.value)


def _reveal_one(s: GameState, *, now_ms: int, rng: random.Random) -> GameAlert | None:
    unrevealed = s.unrevealed_indices()
    if not unrevealed:
        return None

    position = rng.choice(unrevealed)
    s.revealed_indices.append(position)
    total = len(s.revealed_indices)
    length = len(s.current_word)
    return GameAlert.at(
        type="LETTER_REVEALED",
        now_ms=now_ms,
        data={
            "letter": s.current_word[position],
            "position": position,
            "totalRevealed": total,
            "wordLength": length,
            "progress": round(total / length * 100),
        },
    )


def _reveal_letter(*, prev: GameState, now_ms: int, rng: random.Random) -> Transition:
    if prev.phase != RoundPhase.running:
        return _noop(prev, "no running round")

    s = prev.model_copy(deep=True)
    alert = _reveal_one(s, now_ms=now_ms, rng=rng)
    if alert is None:
        return _noop(prev, "all letters already revealed")
    return Transition(state=s, changed=True, note=f"revealed position {alert.data['position']}", alerts=[alert])


def _reveal_all(*, prev: GameState) -> Transition:
    if not prev.current_word or not prev.unrevealed_indices():
        return _noop(prev, "nothing to reveal")

    s = prev.model_copy(deep=True)
    s.revealed_indices = list(range(len(s.current_word)))
    return Transition(state=s, changed=True, note="all letters revealed")


def _activate_double_points(action: ActivateDoublePoints, *, config: GameConfig, prev: GameState, now_ms: int) -> Transition:
    if prev.phase != RoundPhase.running:
        return _noop(prev, "no running round")

    duration = action.duration_s if action.duration_s and action.duration_s > 0 else config.double_points_duration_s
    s = prev.model_copy(deep=True)
    s.double_points_until_ms = now_ms + duration * 1000

    data: dict[str, object] = {"duration": duration, "activatedAt": now_ms}
    if action.activated_by:
        data["activatedBy"] = action.activated_by
    alert = GameAlert.at(type="DOUBLE_POINTS", now_ms=now_ms, data=data)
    return Transition(state=s, changed=True, note=f"double points for {duration}s", alerts=[alert])


def _submit_guess(action: SubmitGuess, *, config: GameConfig, prev: GameState, now_ms: int) -> Transition:
    if prev.phase != RoundPhase.running:
        return _noop(prev, "no running round")
    if action.word != prev.current_word:
        return _noop(prev, "wrong guess")

    multiplier = 2 if prev.double_points_active(now_ms) else 1
    points = config.base_points * multiplier
    winner = Winner(player_name=action.user, points=points, timestamp_ms=now_ms)

    s = prev.model_copy(deep=True)
    s.winners.append(winner)
    alerts = _finish(s, winner=action.user, points=points, now_ms=now_ms, reason="guessed")
    return Transition(state=s, changed=True, note=f"{action.user} won {points} points", alerts=alerts, winner=winner)


def _tick(*, config: GameConfig, prev: GameState, now_ms: int, rng: random.Random) -> Transition:
    s = prev.model_copy(deep=True)
    changed = False
    alerts: list[GameAlert] = []

    if s.double_points_until_ms and s.double_points_until_ms <= now_ms:
        s.double_points_until_ms = 0
        changed = True

    if s.phase != RoundPhase.running:
        return Transition(state=s, changed=True, note="double points expired") if changed else _noop(prev, "clock idle")

    s.time_left_s = max(0, s.time_left_s - 1)

    if config.timer_warning_s and s.time_left_s == config.timer_warning_s:
        alerts.append(GameAlert.at(type="TIMER_WARNING", now_ms=now_ms, data={"timeLeft": s.time_left_s}))

    if s.time_left_s == 0:
        alerts.extend(_finish(s, winner=None, points=0, now_ms=now_ms, reason="timeout"))
        return Transition(state=s, changed=True, note="round timed out", alerts=alerts)

    elapsed = s.duration_s - s.time_left_s
    due = elapsed // config.reveal_interval_s
    if due > len(s.revealed_indices):
        alert = _reveal_one(s, now_ms=now_ms, rng=rng)
        if alert is not None:
            alerts.append(alert)

    return Transition(state=s, changed=True, note=f"{s.time_left_s}s left", alerts=alerts)


def reduce(
    state: GameState,
    action: GameAction,
    *,
    config: GameConfig,
    now_ms: int,
    rng: random.Random,
) -> Transition:
    if isinstance(action, StartRound):
        return _start_round(action, config=config, prev=state, now_ms=now_ms)
    if isinstance(action, SubmitGuess):
        return _submit_guess(action, config=config, prev=state, now_ms=now_ms)
    if isinstance(action, RevealLetter):
        return _reveal_letter(prev=state, now_ms=now_ms, rng=rng)
    if isinstance(action, ActivateDoublePoints):
        return _activate_double_points(action, config=config, prev=state, now_ms=now_ms)
    if isinstance(action, EndRound):
        return _end_round(action, prev=state, now_ms=now_ms)
    if isinstance(action, TogglePause):
        return _toggle_pause(prev=state)
    if isinstance(action, RevealAll):
        return _reveal_all(prev=state)
    if isinstance(action, Tick):
        return _tick(config=config, prev=state, now_ms=now_ms, rng=rng)
    raise ValueError(f"Unknown action: {action!r}")
