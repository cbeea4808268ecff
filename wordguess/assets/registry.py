from __future__ import annotations

import csv
import logging
import os
import random
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DIFFICULTIES = ("easy", "medium", "hard")
DEFAULT_WORDS_FILE = Path("assets") / "words.csv"


class WordListLoadError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class WordEntry:
    word: str
    hint: str
    difficulty: str = "medium"
    category: str = "custom"

    @staticmethod
    def normalized(*, word: str, hint: str, difficulty: str = "", category: str = "") -> "WordEntry | None":
        """Canonical entry, or None when the row lacks a word or a hint."""

        w = word.strip().upper()
        h = hint.strip()
        if not w or not h:
            return None
        d = difficulty.strip().casefold()
        return WordEntry(
            word=w,
            hint=h,
            difficulty=d if d in DIFFICULTIES else "medium",
            category=category.strip() or "custom",
        )


@dataclass(frozen=True, slots=True)
class WordBank:
    """Words a new round can be drawn from.

    Entries are unique by word. The bank is immutable; edits return a new bank.
    """

    entries: tuple[WordEntry, ...]

    @staticmethod
    def from_entries(rows: list[WordEntry]) -> "WordBank":
        seen: set[str] = set()
        out: list[WordEntry] = []
        for e in rows:
            if e.word in seen:
                continue
            seen.add(e.word)
            out.append(e)
        return WordBank(entries=tuple(out))

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, item: object) -> bool:
        return isinstance(item, str) and self.get(item) is not None

    def get(self, word: str) -> WordEntry | None:
        key = word.strip().upper()
        return next((e for e in self.entries if e.word == key), None)

    def random_word(self, *, exclude: str | None = None, rng: random.Random | None = None) -> WordEntry | None:
        if not self.entries:
            return None

        pool = list(self.entries)
        if exclude:
            key = exclude.strip().upper()
            # Excluding the only word would leave nothing to play; use the full list then.
            pool = [e for e in pool if e.word != key] or pool

        return (rng or random).choice(pool)

    def with_word(self, entry: WordEntry) -> "WordBank":
        return WordBank.from_entries([*self.entries, entry])

    def without_word(self, word: str) -> "WordBank":
        key = word.strip().upper()
        return WordBank(entries=tuple(e for e in self.entries if e.word != key))


def load_word_csv(path: Path) -> WordBank:
    try:
        with path.open(encoding="utf-8-sig", newline="") as f:
            rows = [row for row in csv.reader(f) if any(c.strip() for c in row)]
    except FileNotFoundError as e:
        raise WordListLoadError(f"Word list not found: {path}") from e

    if not rows:
        raise WordListLoadError(f"Empty word list: {path}")

    header = [c.strip().casefold() for c in rows[0]]
    if header[:2] != ["word", "hint"]:
        raise WordListLoadError(f"Unexpected header in {path}: {rows[0]}")

    out: list[WordEntry] = []
    for row in rows[1:]:
        if len(row) < 2:
            continue
        difficulty = row[2] if len(row) > 2 else ""
        category = row[3] if len(row) > 3 else ""
        entry = WordEntry.normalized(word=row[0], hint=row[1], difficulty=difficulty, category=category)
        if entry is not None:
            out.append(entry)

    return WordBank.from_entries(out)


def _words_path(root: Path) -> Path:
    configured = os.getenv("WORDGUESS_WORDS_FILE", "").strip()
    if not configured:
        return root / DEFAULT_WORDS_FILE
    p = Path(configured)
    return p if p.is_absolute() else root / p


def load_word_bank(*, root: Path) -> WordBank:
    path = _words_path(root)

    # A missing list is playable (rounds just can't start); WORDGUESS_STRICT_ASSETS=1 makes it fatal.
    strict = os.getenv("WORDGUESS_STRICT_ASSETS", "").strip().lower() in {"1", "true", "yes"}

    try:
        bank = load_word_csv(path)
    except WordListLoadError:
        if strict:
            raise
        logger.warning("Word list unavailable at %s; starting with an empty bank", path)
        return WordBank(entries=())

    logger.info("Loaded %d words from %s", len(bank), path)
    return bank
