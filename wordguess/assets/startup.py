from __future__ import annotations

from pathlib import Path

from wordguess.assets.registry import WordBank
from wordguess.assets.singleton import init_word_bank


def init_word_bank_for_host() -> WordBank:
    # project root is two levels up from this file: wordguess/assets/startup.py
    project_root = Path(__file__).resolve().parents[2]
    return init_word_bank(project_root=project_root)
