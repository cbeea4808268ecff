from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

AlertType = Literal[
    "GAME_WIN",
    "ROUND_END",
    "LETTER_REVEALED",
    "ROUND_START",
    "DOUBLE_POINTS",
    "TIMER_WARNING",
]


@dataclass(frozen=True, slots=True)
class GameAlert:
    """Outbound notification produced by a state transition (fan-out to the alert sink)."""

    type: AlertType
    data: dict[str, Any]
    timestamp_ms: int

    @staticmethod
    def at(*, type: AlertType, now_ms: int, data: dict[str, Any]) -> "GameAlert":
        return GameAlert(type=type, data=data, timestamp_ms=now_ms)
