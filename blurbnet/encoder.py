from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

import torch

from .errors import InvalidConfiguration, UnfitVocabulary, VocabularyFrozen
from .tokenizer import Tokenizer, text_to_word_sequence
from .vocabulary import PAD_INDEX, Vocabulary, check_positive_int

log = logging.getLogger(__name__)

SIDES = ("pre", "post")


def _check_side(name: str, value: str):
    if value not in SIDES:
        raise InvalidConfiguration(f"{name} must be one of {SIDES}, got {value!r}")


@dataclass(frozen=True)
class EncoderConfig:
    max_len: int = 100          # L
    num_words: int = 10000      # V, inclusive cap
    padding: str = "pre"
    truncating: str = "pre"

    def __post_init__(self):
        check_positive_int("max_len", self.max_len)
        check_positive_int("num_words", self.num_words)
        _check_side("padding", self.padding)
        _check_side("truncating", self.truncating)


def pad_row(seq: Sequence[int], maxlen: int, padding: str = "pre",
            truncating: str = "pre", value: int = PAD_INDEX) -> List[int]:
    seq = list(seq)
    if len(seq) > maxlen:
        seq = seq[-maxlen:] if truncating == "pre" else seq[:maxlen]
    fill = [value] * (maxlen - len(seq))
    return fill + seq if padding == "pre" else seq + fill


def pad_sequences(sequences: Iterable[Sequence[int]], maxlen: int,
                  padding: str = "pre", truncating: str = "pre",
                  value: int = PAD_INDEX) -> torch.Tensor:
    """
    Truncate then pad every sequence to exactly ``maxlen`` -> LongTensor [N, maxlen].

    ``truncating="pre"`` drops the exceeding prefix, ``"post"`` the suffix.
    ``padding="pre"`` puts the fill in front, ``"post"`` after the content.
    The two sides are independent: with ``padding="pre"`` the first real token
    of a short row lands at a column that depends on its length, with
    ``padding="post"`` it is always column 0.
    """
    check_positive_int("maxlen", maxlen)
    _check_side("padding", padding)
    _check_side("truncating", truncating)
    rows = [pad_row(s, maxlen, padding, truncating, value) for s in sequences]
    if not rows:
        return torch.empty((0, maxlen), dtype=torch.long)
    return torch.tensor(rows, dtype=torch.long)


class SequenceEncoder:
    """
    Documents -> fixed-shape [N, L] index matrix.

    Fit once on the training corpus, then encode any number of document sets
    with the same frozen vocabulary. Out-of-vocabulary tokens are dropped,
    not mapped to a sentinel, so they silently shorten a row's content; a
    document with no known tokens becomes an all-padding row.
    """
    def __init__(self, cfg: EncoderConfig = EncoderConfig(),
                 vocabulary: Optional[Vocabulary] = None,
                 tokenizer: Tokenizer = text_to_word_sequence):
        self.cfg = cfg
        self.tokenizer = tokenizer
        self._vocab = vocabulary

    @property
    def fitted(self) -> bool:
        return self._vocab is not None

    @property
    def vocabulary(self) -> Vocabulary:
        if self._vocab is None:
            raise UnfitVocabulary("encoder has no vocabulary yet; call fit() on the training texts first")
        return self._vocab

    def fit(self, documents: Iterable[str]) -> "SequenceEncoder":
        if self._vocab is not None:
            raise VocabularyFrozen("vocabulary is already fit; build a new encoder to refit")
        self._vocab = Vocabulary.fit(documents, self.cfg.num_words, tokenizer=self.tokenizer)
        log.info("vocabulary fit: %d tokens (cap %d)", len(self._vocab), self.cfg.num_words)
        return self

    def texts_to_sequences(self, documents: Iterable[str]) -> List[List[int]]:
        vocab = self.vocabulary
        if isinstance(documents, str):
            raise InvalidConfiguration("expected a collection of documents, got a single string")
        return [vocab.lookup(self.tokenizer(doc)) for doc in documents]

    def encode_one(self, document: str) -> List[int]:
        seq = self.vocabulary.lookup(self.tokenizer(document))
        return pad_row(seq, self.cfg.max_len, self.cfg.padding, self.cfg.truncating)

    def encode(self, documents: Iterable[str]) -> torch.Tensor:
        seqs = self.texts_to_sequences(documents)
        cut = sum(len(s) > self.cfg.max_len for s in seqs)
        if cut:
            log.debug("truncated %d of %d documents to %d tokens", cut, len(seqs), self.cfg.max_len)
        return pad_sequences(seqs, self.cfg.max_len, self.cfg.padding, self.cfg.truncating)

    def __call__(self, documents: Iterable[str]) -> torch.Tensor:
        return self.encode(documents)
