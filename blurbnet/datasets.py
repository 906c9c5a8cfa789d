from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

import pandas as pd
import torch
import torch.utils.data as data

from .errors import InvalidConfiguration
from .tokenizer import Tokenizer, text_to_word_sequence

log = logging.getLogger(__name__)


class BlurbDataset(data.Dataset):
    def __init__(self, sequences: torch.Tensor, labels: Sequence[float]):
        self.data = sequences
        self.labels = torch.as_tensor(labels, dtype=torch.float32)
        if self.labels.shape[0] != self.data.shape[0]:
            raise InvalidConfiguration(
                f"{self.data.shape[0]} sequences but {self.labels.shape[0]} labels")
    def __len__(self):
        return self.data.shape[0]
    def __getitem__(self, idx):
        return self.data[idx].long(), self.labels[idx]


def load_blurbs(path: Union[str, Path],
                text_column: str = "blurb",
                label_column: str = "state",
                positive_label: str = "successful",
                date_column: Optional[str] = None) -> pd.DataFrame:
    """
    Read a campaigns CSV into a frame with ``text`` and ``label`` columns.

    Rows without text are dropped. A label is 1 when it equals
    ``positive_label``; numeric label columns are taken as already binary
    (nonzero -> 1). ``date_column``, when given, is parsed into ``launched``
    for exploratory use only.
    """
    df = pd.read_csv(path)
    wanted = [text_column, label_column] + ([date_column] if date_column else [])
    missing = [c for c in wanted if c not in df.columns]
    if missing:
        raise InvalidConfiguration(f"{path}: missing column(s) {missing}; have {list(df.columns)}")

    before = len(df)
    df = df.dropna(subset=[text_column])
    if len(df) < before:
        log.warning("%s: dropped %d rows without text", path, before - len(df))

    raw = df[label_column]
    if pd.api.types.is_numeric_dtype(raw):
        label = (raw.fillna(0) != 0).astype(int)
    else:
        label = (raw.astype(str).str.strip() == positive_label).astype(int)

    out = pd.DataFrame({"text": df[text_column].astype(str), "label": label})
    if date_column:
        out["launched"] = pd.to_datetime(df[date_column], errors="coerce")
    log.info("loaded %d blurbs from %s (%.1f%% positive)", len(out), path,
             100.0 * out["label"].mean() if len(out) else 0.0)
    return out.reset_index(drop=True)


def train_test_split(texts: Sequence[str], labels: Sequence[int],
                     test_size: float = 0.2,
                     seed: Optional[int] = None) -> Tuple[List[str], List[str], List[int], List[int]]:
    """Shuffled split -> (train_texts, test_texts, train_labels, test_labels)."""
    if not 0.0 < test_size < 1.0:
        raise InvalidConfiguration(f"test_size must be in (0, 1), got {test_size}")
    if len(texts) != len(labels):
        raise InvalidConfiguration(f"{len(texts)} texts but {len(labels)} labels")
    texts, labels = list(texts), list(labels)
    gen = torch.Generator()
    if seed is not None:
        gen.manual_seed(seed)
    else:
        gen.seed()
    order = torch.randperm(len(texts), generator=gen).tolist()
    n_test = int(round(len(texts) * test_size))
    if n_test == 0 or n_test == len(texts):
        raise InvalidConfiguration(
            f"test_size={test_size} on {len(texts)} rows leaves an empty train or test split")
    test_idx, train_idx = order[:n_test], order[n_test:]
    return ([texts[i] for i in train_idx], [texts[i] for i in test_idx],
            [labels[i] for i in train_idx], [labels[i] for i in test_idx])


def length_report(documents: Sequence[str],
                  tokenizer: Tokenizer = text_to_word_sequence) -> Dict[str, float]:
    """Token-count statistics, for choosing a max_len that truncates few documents."""
    lengths = torch.tensor([len(tokenizer(d)) for d in documents], dtype=torch.float32)
    if lengths.numel() == 0:
        return {"count": 0, "mean": 0.0, "median": 0.0, "p90": 0.0, "p95": 0.0, "max": 0.0}
    q = torch.quantile(lengths, torch.tensor([0.5, 0.9, 0.95]))
    return {
        "count": int(lengths.numel()),
        "mean": lengths.mean().item(),
        "median": q[0].item(),
        "p90": q[1].item(),
        "p95": q[2].item(),
        "max": lengths.max().item(),
    }
