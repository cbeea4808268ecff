from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class RoundPhase(StrEnum):
    idle = "idle"
    running = "running"
    paused = "paused"
    finished = "finished"


class GameConfig(BaseModel):
    round_duration_s: int = Field(180, ge=1)
    # Auto-reveal cadence driven by the round clock.
    reveal_interval_s: int = Field(15, ge=1)
    double_points_duration_s: int = Field(30, ge=1)
    base_points: int = Field(10, ge=0)
    timer_warning_s: int = Field(10, ge=0)
    # When true, a reveal_letter trigger with no running round starts one first.
    reveal_starts_round: bool = False


class Winner(BaseModel):
    player_name: str
    points: int
    timestamp_ms: int


class PlayerScore(BaseModel):
    name: str
    points: int = 0
    last_updated_ms: int = 0


class GameState(BaseModel):
    phase: RoundPhase = RoundPhase.idle
    round_number: int = 0

    current_word: str = ""
    current_hint: str = ""
    revealed_indices: list[int] = Field(default_factory=list)

    started_at_ms: int = 0
    duration_s: int = 180
    time_left_s: int = 180

    # Absolute expiry; the window is active while this is in the future.
    double_points_until_ms: int = 0

    winners: list[Winner] = Field(default_factory=list)
    winner: str | None = None
    winner_points: int = 0

    @property
    def is_active(self) -> bool:
        return self.phase in (RoundPhase.running, RoundPhase.paused)

    def double_points_active(self, now_ms: int) -> bool:
        return self.double_points_until_ms > now_ms

    def unrevealed_indices(self) -> list[int]:
        revealed = set(self.revealed_indices)
        return [i for i in range(len(self.current_word)) if i not in revealed]

    def masked_word(self, mask: str = "_") -> str:
        revealed = set(self.revealed_indices)
        return "".join(ch if i in revealed else mask for i, ch in enumerate(self.current_word))
