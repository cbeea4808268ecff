from __future__ import annotations

from pathlib import Path

from wordguess.assets.registry import WordBank, load_word_bank


_WORD_BANK: WordBank | None = None


def init_word_bank(*, project_root: Path) -> WordBank:
    """Load the word bank once and cache it.

    Safe to call multiple times; subsequent calls return the already loaded bank.
    """

    global _WORD_BANK
    if _WORD_BANK is None:
        _WORD_BANK = load_word_bank(root=project_root)
    return _WORD_BANK


def set_word_bank(bank: WordBank) -> WordBank:
    """Replace the cached bank (operator edits go through here)."""

    global _WORD_BANK
    _WORD_BANK = bank
    return bank


def reset_word_bank_for_tests() -> None:
    global _WORD_BANK
    _WORD_BANK = None


def get_word_bank() -> WordBank:
    if _WORD_BANK is None:
        raise RuntimeError("Word bank not initialized. Call init_word_bank() at startup.")
    return _WORD_BANK
