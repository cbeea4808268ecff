from __future__ import annotations

import logging
import random
import time

from wordguess.alerts import AlertSink, NullAlertSink
from wordguess.assets.registry import WordBank
from wordguess.core.models import GameConfig, GameState, PlayerScore
from wordguess.core.reducer import GameAction, StartRound, Transition, reduce

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class GameSession:
    """The single authoritative game: round state, scoreboard and config.

    Every mutation (remote triggers via the apply engine, the round clock, operator
    calls) goes through `dispatch`. It is synchronous, so on the host's event loop no
    two actions can interleave.
    """

    def __init__(
        self,
        *,
        config: GameConfig | None = None,
        word_bank: WordBank | None = None,
        alerts: AlertSink | None = None,
        rng: random.Random | None = None,
    ):
        self.config = config or GameConfig()
        self.word_bank = word_bank or WordBank(entries=())
        self.alerts = alerts or NullAlertSink()
        self.rng = rng or random.Random()
        self.state = GameState(duration_s=self.config.round_duration_s, time_left_s=self.config.round_duration_s)
        self.players: dict[str, PlayerScore] = {}

    def dispatch(self, action: GameAction, *, now_ms: int | None = None) -> Transition:
        now = _now_ms() if now_ms is None else now_ms
        t = reduce(self.state, action, config=self.config, now_ms=now, rng=self.rng)
        if not t.changed:
            logger.debug("%s: no-op (%s)", type(action).__name__, t.note)
            return t

        self.state = t.state
        if t.winner is not None:
            self.add_points(t.winner.player_name, t.winner.points, now_ms=now)
        for alert in t.alerts:
            self.alerts.notify(alert)
        return t

    def start_new_round(self, *, now_ms: int | None = None) -> Transition | None:
        """Start a round with a random word from the bank (avoiding the current word).

        Returns None when the bank is empty.
        """

        entry = self.word_bank.random_word(exclude=self.state.current_word or None, rng=self.rng)
        if entry is None:
            logger.warning("Cannot start a round: the word bank is empty")
            return None
        return self.dispatch(StartRound(word=entry.word, hint=entry.hint), now_ms=now_ms)

    def add_points(self, name: str, points: int, *, now_ms: int | None = None) -> PlayerScore:
        now = _now_ms() if now_ms is None else now_ms
        current = self.players.get(name)
        total = (current.points if current else 0) + points
        score = PlayerScore(name=name, points=total, last_updated_ms=now)
        self.players[name] = score
        return score

    def reset_players(self) -> None:
        self.players.clear()

    def ranking(self, limit: int = 5) -> list[PlayerScore]:
        # Stable sort: ties keep first-scored order.
        return sorted(self.players.values(), key=lambda p: -p.points)[:limit]

    def update_config(self, **fields: object) -> GameConfig:
        self.config = GameConfig.model_validate({**self.config.model_dump(), **fields})
        return self.config

    def snapshot(self) -> dict[str, object]:
        return {
            "state": self.state.model_dump(mode="json"),
            "masked_word": self.state.masked_word(),
            "ranking": [p.model_dump(mode="json") for p in self.ranking()],
            "config": self.config.model_dump(mode="json"),
            "words": len(self.word_bank),
        }
