from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class ActionKind(StrEnum):
    """Closed set of remote actions. Values are the wire names accepted by `/event`."""

    reveal_letter = "reveal_letter"
    double_points = "double_points"
    new_round = "nueva_ronda"


VALID_EVENTS: tuple[str, ...] = tuple(k.value for k in ActionKind)

GUESS_ID_PREFIX = "guess-"
EVENT_ID_PREFIX = "event-"


class GuessRecord(BaseModel):
    id: str
    user: str
    word: str
    # Epoch milliseconds at ingest.
    timestamp: int
    processed: bool = False


class ActionRecord(BaseModel):
    id: str
    user: str
    event: ActionKind
    # Seconds; only meaningful for double_points.
    duration: int | None = None
    timestamp: int
    processed: bool = False


PendingRecord = GuessRecord | ActionRecord


class PendingSnapshot(BaseModel):
    guesses: list[GuessRecord] = Field(default_factory=list)
    events: list[ActionRecord] = Field(default_factory=list)

    def ids(self) -> list[str]:
        return [g.id for g in self.guesses] + [e.id for e in self.events]

    def is_empty(self) -> bool:
        return not self.guesses and not self.events


class MarkProcessedRequest(BaseModel):
    key: str | None = None
