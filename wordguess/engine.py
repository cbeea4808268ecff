"""Dedup & apply: the only path from relay records to game-state changes.

Records arrive at least once (the poller re-delivers everything still queued on each
tick). The engine turns that into at most one effect per record id: the id is recorded
in the dedup set before the action is applied, and every record is acknowledged after
the attempt whatever its outcome.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass, field

from wordguess.api.models import ActionKind, ActionRecord, GuessRecord, PendingRecord, PendingSnapshot
from wordguess.core.reducer import ActivateDoublePoints, RevealLetter, SubmitGuess
from wordguess.dedup import DedupSet
from wordguess.session import GameSession

logger = logging.getLogger(__name__)

RECENT_LOG_LINES = 20


@dataclass(slots=True)
class EngineStats:
    applied: int = 0
    duplicates: int = 0
    errors: int = 0
    recent: deque[str] = field(default_factory=lambda: deque(maxlen=RECENT_LOG_LINES))

    def log(self, line: str) -> None:
        self.recent.append(f"{time.strftime('%H:%M:%S')} {line}")

    def as_dict(self) -> dict[str, object]:
        return {
            "applied": self.applied,
            "duplicates": self.duplicates,
            "errors": self.errors,
            "recent": list(self.recent),
        }


class ApplyEngine:
    def __init__(self, *, session: GameSession, dedup: DedupSet | None = None):
        self.session = session
        self.dedup = dedup or DedupSet()
        self.stats = EngineStats()

    def process(self, snapshot: PendingSnapshot, *, now_ms: int | None = None) -> list[str]:
        """Apply every new record in `snapshot`; return the ids to acknowledge.

        Guesses are handled before events, each in snapshot order.
        """

        now = int(time.time() * 1000) if now_ms is None else now_ms
        to_ack: list[str] = []

        records: list[PendingRecord] = [*snapshot.guesses, *snapshot.events]
        for record in records:
            if not self.dedup.add(record.id, now_ms=now):
                self.stats.duplicates += 1
                logger.debug("Skipping already applied record %s", record.id)
                to_ack.append(record.id)
                continue

            try:
                self._apply(record, now_ms=now)
                self.stats.applied += 1
            except Exception:
                self.stats.errors += 1
                self.stats.log(f"error applying {record.id}")
                logger.exception("Failed to apply record %s", record.id)

            # Ack regardless; the id is already in the dedup set so a retry could not apply it.
            to_ack.append(record.id)

        return to_ack

    def prune(self, *, now_ms: int | None = None) -> int:
        return self.dedup.prune(now_ms=now_ms)

    def _apply(self, record: PendingRecord, *, now_ms: int) -> None:
        if isinstance(record, GuessRecord):
            self._apply_guess(record, now_ms=now_ms)
        elif isinstance(record, ActionRecord):
            self._apply_action(record, now_ms=now_ms)
        else:
            raise ValueError(f"Unsupported record: {record!r}")

    def _apply_guess(self, record: GuessRecord, *, now_ms: int) -> None:
        t = self.session.dispatch(SubmitGuess(user=record.user, word=record.word), now_ms=now_ms)
        if t.winner is not None:
            self.stats.log(f"{record.user} guessed {record.word} (+{t.winner.points})")
            logger.info("%s guessed the word %s for %d points", record.user, record.word, t.winner.points)
        else:
            logger.info("Guess %s from %s: %s", record.word, record.user, t.note)

    def _apply_action(self, record: ActionRecord, *, now_ms: int) -> None:
        if record.event == ActionKind.new_round:
            self._new_round(record, now_ms=now_ms)
            return

        if record.event == ActionKind.reveal_letter:
            if not self.session.state.is_active and self.session.config.reveal_starts_round:
                if not self._new_round(record, now_ms=now_ms):
                    return
            t = self.session.dispatch(RevealLetter(), now_ms=now_ms)
        elif record.event == ActionKind.double_points:
            t = self.session.dispatch(
                ActivateDoublePoints(duration_s=record.duration, activated_by=record.user),
                now_ms=now_ms,
            )
        else:
            raise ValueError(f"Unknown event: {record.event}")

        self.stats.log(f"{record.event.value} from {record.user}: {t.note}")
        logger.info("Event %s from %s: %s", record.event.value, record.user, t.note)

    def _new_round(self, record: ActionRecord, *, now_ms: int) -> bool:
        t = self.session.start_new_round(now_ms=now_ms)
        if t is None:
            self.stats.log(f"{record.event.value} from {record.user}: word bank is empty, add words first")
            return False
        self.stats.log(f"{record.event.value} from {record.user}: {t.note}")
        logger.info("Event %s from %s: %s", record.event.value, record.user, t.note)
        return True
