import json
import logging
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from freqdist import FreqDist, NgramType, count_ngrams


def test_count_ngrams():
    counts = count_ngrams("abab")
    assert counts[NgramType.MONOGRAM] == {"a": 2, "b": 2}
    assert counts[NgramType.BIGRAM] == {"ab": 2, "ba": 1}
    assert counts[NgramType.TRIGRAM] == {"aba": 1, "bab": 1}


def test_count_ngrams_short_text():
    counts = count_ngrams("a")
    assert counts[NgramType.MONOGRAM] == {"a": 1}
    assert not counts[NgramType.BIGRAM]
    assert not counts[NgramType.TRIGRAM]


def test_ngram_type_of():
    assert NgramType.of("x") == NgramType.MONOGRAM
    assert NgramType.of("xyz") == NgramType.TRIGRAM
    with pytest.raises(ValueError):
        NgramType.of("wxyz")
    with pytest.raises(ValueError):
        NgramType.of("")


def test_from_texts_does_not_span_texts():
    freqdist = FreqDist.from_texts("two", ["ab", "cd"], expand_accents=False)
    assert freqdist["ab"] == 1
    assert freqdist["cd"] == 1
    assert "bc" not in freqdist
    assert freqdist.total() == 4


def test_from_texts_expands_accents():
    freqdist = FreqDist.from_texts("accents", ["çà"])
    assert freqdist["c"] == 1
    assert freqdist[","] == 1
    assert freqdist["`"] == 1
    assert freqdist["a"] == 1
    assert "ç" not in freqdist
    assert freqdist["c,`"] == 1

    raw = FreqDist.from_texts("accents", ["çà"], expand_accents=False)
    assert raw["ç"] == 1
    assert raw["çà"] == 1


def test_from_texts_keeps_layout_characters():
    freqdist = FreqDist.from_texts("accents", ["où"], keep=("o", "u", "ù"))
    assert freqdist["ù"] == 1
    assert freqdist["où"] == 1
    assert "`" not in freqdist


def test_from_texts_lowercase():
    freqdist = FreqDist.from_texts("case", ["Aa"], lowercase=True)
    assert freqdist["a"] == 2
    assert freqdist["aa"] == 1


def test_combined_table_view():
    freqdist = FreqDist.from_counts("mixed", {"a": 3, "ab": 2, "abc": 1})
    assert len(freqdist) == 3
    assert dict(freqdist.items()) == {"a": 3, "ab": 2, "abc": 1}
    assert freqdist["zz"] == 0
    assert "ab" in freqdist
    assert "abcd" not in freqdist
    assert freqdist.table(NgramType.BIGRAM) == {"ab": 2}


def test_from_counts_rejects_long_ngrams():
    with pytest.raises(ValueError):
        FreqDist.from_counts("bad", {"abcd": 1})


def test_rejects_negative_counts():
    with pytest.raises(ValueError):
        FreqDist("bad", {NgramType.BIGRAM: {"ab": -1}})


def test_rejects_wrong_length():
    with pytest.raises(ValueError):
        FreqDist("bad", {"bigrams": {"abc": 1}})


def test_unknown_table_name_is_ignored(caplog):
    with caplog.at_level(logging.WARNING):
        freqdist = FreqDist("odd", {"skipgrams": {"ab": 1}, "MONOGRAM": {"a": 1}})
    assert "skipgrams" in caplog.text
    assert freqdist["a"] == 1
    assert len(freqdist) == 1


def test_select():
    freqdist = FreqDist.from_counts("t", {"a": 5, "b": 3, "c": 1, "ab": 2, "bc": 1, "abc": 1})
    selected = freqdist.select({"a", "b"})
    assert selected["ab"] == 2
    assert "bc" not in selected
    assert "abc" not in selected
    assert freqdist.select({"b", "c"})["bc"] == 1


def test_scaled():
    freqdist = FreqDist.from_counts("t", {"a": 2, "ab": 1})
    assert freqdist.scaled(1.5)["a"] == 3.0
    with pytest.raises(ValueError):
        freqdist.scaled(0)


def test_save_and_load(tmp_path):
    freqdist = FreqDist.from_texts("french", ["été à la plage"])
    path = tmp_path / "fq.json"
    freqdist.save(path)

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert set(payload) == {"corpus_name", "monograms", "bigrams", "trigrams"}

    loaded = FreqDist.load(path)
    assert loaded.corpus_name == "french"
    assert dict(loaded.items()) == dict(freqdist.items())
