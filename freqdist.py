"""N-gram frequency tables counted from a corpus of texts."""

from __future__ import annotations

import json
import logging
from collections import Counter
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from tqdm import tqdm

import accents

logger = logging.getLogger(__name__)


class NgramType(Enum):
    MONOGRAM = 1
    BIGRAM = 2
    TRIGRAM = 3

    @property
    def order(self) -> int:
        return self.value

    @classmethod
    def of(cls, ngram: str) -> NgramType:
        try:
            return cls(len(ngram))
        except ValueError:
            raise ValueError(f"Unsupported ngram {ngram!r}: only 1, 2 and 3 character ngrams are counted") from None


NGRAM_KEYS: dict[NgramType, str] = {
    NgramType.MONOGRAM: "monograms",
    NgramType.BIGRAM: "bigrams",
    NgramType.TRIGRAM: "trigrams",
}


def count_ngrams(text: str) -> dict[NgramType, Counter]:
    '''
    count every contiguous 1, 2 and 3 character substring of text
    '''
    return {
        ngram_type: Counter(
            text[i:i + ngram_type.order] for i in range(len(text) - ngram_type.order + 1)
        )
        for ngram_type in NgramType
    }


class FreqDist:
    '''
    Frequency table of n-grams, kept as one table per n-gram length.
    Callers can treat it as a single table through items(), [] and len().
    '''

    def __init__(self, corpus_name: str, freqdist: Mapping[str | NgramType, Mapping[str, float]] | None = None):
        self.corpus_name = corpus_name
        self.freqdist: dict[NgramType, dict[str, float]] = {t: {} for t in NgramType}

        if freqdist is None:
            return

        for ngram_name_or_type, table in freqdist.items():
            if isinstance(ngram_name_or_type, str):
                ngram_name = ngram_name_or_type
                if ngram_name in NgramType.__members__:
                    ngram_type = NgramType[ngram_name]
                elif ngram_name in NGRAM_KEYS.values():
                    ngram_type = next(t for t, key in NGRAM_KEYS.items() if key == ngram_name)
                else:
                    logger.warning("'%s' in %s is not a valid ngram type. Ignoring.", ngram_name, corpus_name)
                    continue
            else:
                ngram_type = ngram_name_or_type

            for ngram, count in table.items():
                if len(ngram) != ngram_type.order:
                    raise ValueError(f"ngram {ngram!r} does not have length {ngram_type.order} of {ngram_type.name}")
                if isinstance(count, bool) or not isinstance(count, (int, float)) or count < 0:
                    raise ValueError(f"ngram {ngram!r} must have a non-negative count, got {count!r}")
            self.freqdist[ngram_type] = dict(table)

    @classmethod
    def from_counts(cls, corpus_name: str, counts: Mapping[str, float]) -> FreqDist:
        '''
        build from one combined table of 1, 2 and 3 character ngrams
        '''
        freqdist: dict[NgramType, dict[str, float]] = {t: {} for t in NgramType}
        for ngram, count in counts.items():
            freqdist[NgramType.of(ngram)][ngram] = count
        return cls(corpus_name, freqdist)

    @classmethod
    def from_texts(
        cls,
        corpus_name: str,
        texts: Iterable[str],
        expand_accents: bool = True,
        lowercase: bool = False,
        progress: bool = False,
        keep: Iterable[str] = (),
    ) -> FreqDist:
        '''
        count the ngrams of every text. Ngrams never span two texts.

        expand_accents rewrites each text into its keystroke sequence first (see accents.expand),
        except for the characters in keep, usually the characters of the layout being scored
        '''
        keep = frozenset(keep)
        totals = {t: Counter() for t in NgramType}
        n_texts = 0
        for text in tqdm(texts, desc="Counting", unit="text", disable=not progress):
            if lowercase:
                text = text.lower()
            if expand_accents:
                text = accents.expand(text, keep)
            for ngram_type, counter in count_ngrams(text).items():
                totals[ngram_type].update(counter)
            n_texts += 1

        logger.debug("counted %d texts, %d keystrokes", n_texts, sum(totals[NgramType.MONOGRAM].values()))
        return cls(corpus_name, {t: dict(counter) for t, counter in totals.items()})

    @classmethod
    def load(cls, path: str | Path) -> FreqDist:
        """Load a frequency table saved with `save`.

        Raises
        ------
        FileNotFoundError
            If the file does not exist.
        json.JSONDecodeError
            If the file is malformed.
        """
        path = Path(path)
        with path.open("r", encoding="utf-8") as fp:
            payload = json.load(fp)
        return cls(
            payload.get("corpus_name", path.stem),
            {t: payload.get(key, {}) for t, key in NGRAM_KEYS.items()},
        )

    def save(self, path: str | Path) -> None:
        payload: dict[str, object] = {"corpus_name": self.corpus_name}
        for ngram_type, key in NGRAM_KEYS.items():
            payload[key] = self.freqdist[ngram_type]
        with Path(path).open("w", encoding="utf-8") as fp:
            json.dump(payload, fp, ensure_ascii=False, indent=1)

    def table(self, ngram_type: NgramType) -> Mapping[str, float]:
        return MappingProxyType(self.freqdist[ngram_type])

    def items(self) -> Iterator[tuple[str, float]]:
        for ngram_type in NgramType:
            yield from self.freqdist[ngram_type].items()

    def __getitem__(self, ngram: str) -> float:
        return self.freqdist[NgramType.of(ngram)].get(ngram, 0)

    def __contains__(self, ngram: object) -> bool:
        return isinstance(ngram, str) and 1 <= len(ngram) <= 3 and ngram in self.freqdist[NgramType(len(ngram))]

    def __len__(self) -> int:
        return sum(len(table) for table in self.freqdist.values())

    def total(self, ngram_type: NgramType = NgramType.MONOGRAM) -> float:
        return sum(self.freqdist[ngram_type].values())

    def select(self, char_set: set[str]) -> FreqDist:
        """Select a subset of the frequency distribution for the given list of characters."""
        return FreqDist(
            self.corpus_name,
            freqdist={
                t: {
                    ngram: v
                    for ngram, v in self.freqdist[t].items()
                    if all(c in char_set for c in ngram)
                } for t in self.freqdist
            }
        )
    def scaled(self, factor: float) -> FreqDist:
        """Multiply every count by a positive factor."""
        if factor <= 0:
            raise ValueError(f"Scale factor must be positive, got {factor}")
        return FreqDist(
            self.corpus_name,
            freqdist={
                t: {ngram: v * factor for ngram, v in self.freqdist[t].items()} for t in self.freqdist
            }
        )
