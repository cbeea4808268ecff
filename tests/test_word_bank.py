from __future__ import annotations

import random
from pathlib import Path

import pytest

from wordguess.assets.registry import WordBank, WordEntry, WordListLoadError, load_word_bank, load_word_csv
from wordguess.assets.singleton import get_word_bank

TEST_ROOT = Path(__file__).resolve().parent


def test_word_csv_rows_are_normalized_and_deduplicated() -> None:
    bank = load_word_csv(TEST_ROOT / "assets" / "words.csv")

    assert [e.word for e in bank.entries] == ["GATO", "PERRO"]
    gato = bank.get(" gato ")
    assert gato == WordEntry(word="GATO", hint="Animal", difficulty="easy", category="animales")
    # Blank difficulty/category fall back to defaults.
    assert bank.get("PERRO") == WordEntry(word="PERRO", hint="Mascota", difficulty="medium", category="custom")
    assert "SOLO" not in bank


def test_session_singleton_uses_test_fixtures() -> None:
    assert len(get_word_bank()) == 2


def test_random_word_excludes_current_when_possible() -> None:
    bank = WordBank.from_entries([WordEntry(word="GATO", hint="Animal"), WordEntry(word="PERRO", hint="Mascota")])
    rng = random.Random(0)

    for _ in range(10):
        entry = bank.random_word(exclude="gato", rng=rng)
        assert entry is not None and entry.word == "PERRO"

    single = WordBank.from_entries([WordEntry(word="GATO", hint="Animal")])
    only = single.random_word(exclude="GATO", rng=rng)
    assert only is not None and only.word == "GATO"

    assert WordBank(entries=()).random_word(rng=rng) is None


def test_with_and_without_word_return_new_banks() -> None:
    bank = WordBank(entries=())
    grown = bank.with_word(WordEntry(word="SOL", hint="Estrella"))
    assert len(bank) == 0
    assert "sol" in grown

    assert len(grown.with_word(WordEntry(word="SOL", hint="Otra"))) == 1
    assert len(grown.without_word(" sol ")) == 0


def test_missing_word_list(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WORDGUESS_STRICT_ASSETS", "0")
    assert len(load_word_bank(root=tmp_path)) == 0

    monkeypatch.setenv("WORDGUESS_STRICT_ASSETS", "1")
    with pytest.raises(WordListLoadError):
        load_word_bank(root=tmp_path)


def test_words_file_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "mine.csv").write_text("word,hint\nluna,Satélite\n", encoding="utf-8")
    monkeypatch.setenv("WORDGUESS_WORDS_FILE", "mine.csv")

    bank = load_word_bank(root=tmp_path)
    assert [e.word for e in bank.entries] == ["LUNA"]


def test_unexpected_header_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "words.csv"
    path.write_text("palabra,pista\nluna,Satélite\n", encoding="utf-8")

    with pytest.raises(WordListLoadError):
        load_word_csv(path)


def test_word_csv_with_bom_and_quoted_fields(tmp_path: Path) -> None:
    path = tmp_path / "words.csv"
    path.write_bytes('word,hint\r\nluna,"Satélite, de noche"\r\n'.encode("utf-8-sig"))

    bank = load_word_csv(path)
    assert bank.entries == (WordEntry(word="LUNA", hint="Satélite, de noche"),)
