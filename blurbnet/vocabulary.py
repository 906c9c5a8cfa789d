from __future__ import annotations

import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, List, Mapping, Tuple, Union

from .errors import InvalidConfiguration
from .tokenizer import Tokenizer, text_to_word_sequence

log = logging.getLogger(__name__)

PAD_INDEX = 0


def check_positive_int(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidConfiguration(f"{name} must be a positive int, got {value!r}")


@dataclass(frozen=True)
class Vocabulary:
    """
    Frozen token <-> index mapping fit on a training corpus.

    ``tokens[i]`` has index ``i + 1``; index 0 is padding and never maps to a
    token. Tokens are ordered by descending training frequency, equal counts
    keep the order in which the tokens were first seen in the corpus.
    """
    tokens: Tuple[str, ...]
    counts: Tuple[int, ...] = ()
    document_count: int = 0
    word_index: Mapping[str, int] = field(init=False, repr=False, compare=False)
    index_word: Mapping[int, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if self.counts and len(self.counts) != len(self.tokens):
            raise InvalidConfiguration("counts and tokens must have the same length")
        if len(set(self.tokens)) != len(self.tokens):
            raise InvalidConfiguration("vocabulary tokens must be unique")
        wi = {tok: i for i, tok in enumerate(self.tokens, start=1)}
        object.__setattr__(self, "word_index", MappingProxyType(wi))
        object.__setattr__(self, "index_word", MappingProxyType({i: tok for tok, i in wi.items()}))

    # -------- construction --------
    @classmethod
    def fit(cls, documents: Iterable[str], num_words: int,
            tokenizer: Tokenizer = text_to_word_sequence) -> "Vocabulary":
        check_positive_int("num_words", num_words)
        if isinstance(documents, str):
            raise InvalidConfiguration("expected a collection of documents, got a single string")
        freq: Counter = Counter()
        n_docs = 0
        for doc in documents:
            freq.update(tokenizer(doc))
            n_docs += 1
        # Counter keeps insertion order and sorted() is stable -> first-seen tie-break
        ranked = sorted(freq.items(), key=lambda kv: kv[1], reverse=True)[:num_words]
        log.debug("fit vocabulary: %d docs, %d distinct tokens, kept %d",
                  n_docs, len(freq), len(ranked))
        return cls(tokens=tuple(t for t, _ in ranked),
                   counts=tuple(c for _, c in ranked),
                   document_count=n_docs)

    # -------- lookups --------
    def __len__(self) -> int:
        return len(self.tokens)

    def __contains__(self, token: object) -> bool:
        return token in self.word_index

    @property
    def size(self) -> int:
        """Embedding table size: every index plus the padding row."""
        return len(self.tokens) + 1

    @property
    def word_counts(self) -> Mapping[str, int]:
        return MappingProxyType(dict(zip(self.tokens, self.counts)))

    def lookup(self, tokens: Iterable[str]) -> List[int]:
        """Indices for in-vocabulary tokens; out-of-vocabulary tokens are dropped."""
        wi = self.word_index
        return [wi[t] for t in tokens if t in wi]

    def decode(self, indices: Iterable[int]) -> str:
        iw = self.index_word
        return " ".join(iw[int(i)] for i in indices if int(i) in iw)

    # -------- persistence --------
    def to_dict(self) -> dict:
        return {"tokens": list(self.tokens), "counts": list(self.counts),
                "document_count": self.document_count}

    @classmethod
    def from_dict(cls, d: Mapping) -> "Vocabulary":
        return cls(tokens=tuple(d["tokens"]), counts=tuple(d.get("counts", ())),
                   document_count=int(d.get("document_count", 0)))

    def save(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        path.write_text(json.dumps(self.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
        return path

    @classmethod
    def load(cls, path: Union[str, Path]) -> "Vocabulary":
        return cls.from_dict(json.loads(Path(path).read_text(encoding="utf-8")))

