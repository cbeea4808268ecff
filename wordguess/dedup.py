from __future__ import annotations

import time

from wordguess.event_store import DEFAULT_TTL_MS

BUCKET_MS = 60_000


class DedupSet:
    """Record ids already applied by this host.

    Ids are grouped into one bucket per minute of first sighting. Buckets older than
    `retain_ms` (two TTL windows by default) are dropped by `prune`; by then the relay
    can no longer return the record, so forgetting the id is safe.
    """

    def __init__(self, *, retain_ms: int = 2 * DEFAULT_TTL_MS):
        self.retain_ms = retain_ms
        self._buckets: dict[int, set[str]] = {}

    @staticmethod
    def _bucket(now_ms: int) -> int:
        return now_ms // BUCKET_MS

    def __contains__(self, record_id: object) -> bool:
        return any(record_id in ids for ids in self._buckets.values())

    def __len__(self) -> int:
        return sum(len(ids) for ids in self._buckets.values())

    def add(self, record_id: str, *, now_ms: int | None = None) -> bool:
        """Remember `record_id`. Returns False if it was already known."""

        if record_id in self:
            return False
        now = int(time.time() * 1000) if now_ms is None else now_ms
        self._buckets.setdefault(self._bucket(now), set()).add(record_id)
        return True

    def prune(self, *, now_ms: int | None = None) -> int:
        now = int(time.time() * 1000) if now_ms is None else now_ms
        oldest_kept = self._bucket(now - self.retain_ms)
        stale = [b for b in self._buckets if b < oldest_kept]
        removed = 0
        for b in stale:
            removed += len(self._buckets.pop(b))
        return removed
