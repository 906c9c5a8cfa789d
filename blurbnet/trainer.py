from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Tuple, List, Dict, Any, Sequence

import torch
import torch.nn as nn
import torch.utils.data as data

from .datasets import BlurbDataset
from .encoder import EncoderConfig, SequenceEncoder
from .errors import InvalidConfiguration
from .model import Architecture

log = logging.getLogger(__name__)

OPTIMIZERS = {
    "adam": torch.optim.Adam,
    "rmsprop": torch.optim.RMSprop,
    "sgd": torch.optim.SGD,
}


@dataclass
class TrainerConfig:
    max_len: int = 100               # L
    num_words: int = 10000           # V
    padding: str = "pre"
    truncating: str = "pre"
    epochs: int = 10
    batch_size: int = 32
    lr: float = 1e-3
    optimizer: str = "adam"
    emb_dim: int = 32
    hidden: int = 16
    validation_split: float = 0.2    # last fraction of the training texts, not shuffled
    seed: int | None = None          # training RNG (None = non-deterministic)
    outdir: str | None = None        # default artifacts/YYYYMMDD-HHMMSS
    use_cpu: bool = False            # force CPU
    num_workers: int = 0
    pin_memory: bool = False

    def __post_init__(self):
        if self.optimizer not in OPTIMIZERS:
            raise InvalidConfiguration(f"optimizer must be one of {sorted(OPTIMIZERS)}, got {self.optimizer!r}")
        if not 0.0 <= self.validation_split < 1.0:
            raise InvalidConfiguration(f"validation_split must be in [0, 1), got {self.validation_split}")
        if self.epochs <= 0 or self.batch_size <= 0:
            raise InvalidConfiguration("epochs and batch_size must be positive")
        self.encoder_config()

    def encoder_config(self) -> EncoderConfig:
        return EncoderConfig(max_len=self.max_len, num_words=self.num_words,
                             padding=self.padding, truncating=self.truncating)


class BlurbTrainer:
    """
    Trains the embedding + dense classifier on campaign blurbs.

    The vocabulary is fit on the training portion only (validation rows are
    encoded with it, never fit on). Instantiating this class runs training
    if autostart=True.

    Artifacts:
      - model.pth, model_best.pth
      - vocab.json
      - config.json    (full TrainerConfig)
      - history.json   (per-epoch metrics)
      - README.txt
    """
    def __init__(self, texts: Sequence[str], labels: Sequence[int],
                 cfg: TrainerConfig = TrainerConfig(), autostart: bool = True):
        if len(texts) != len(labels):
            raise InvalidConfiguration(f"{len(texts)} texts but {len(labels)} labels")
        self.cfg = cfg
        self.device = torch.device("cpu" if cfg.use_cpu or not torch.cuda.is_available() else "cuda")

        if cfg.seed is not None:
            torch.manual_seed(cfg.seed)
            if self.device.type == "cuda":
                torch.cuda.manual_seed_all(cfg.seed)

        # Keras-style hold-out: the tail of the given order
        texts, labels = list(texts), [int(y) for y in labels]
        n_val = int(len(texts) * cfg.validation_split)
        n_train = len(texts) - n_val
        if n_train <= 0:
            raise InvalidConfiguration("no training rows left after validation_split")
        train_texts, val_texts = texts[:n_train], texts[n_train:]
        train_labels, val_labels = labels[:n_train], labels[n_train:]

        self.encoder = SequenceEncoder(cfg.encoder_config()).fit(train_texts)
        self.train_ds = BlurbDataset(self.encoder.encode(train_texts), train_labels)
        self.val_ds = BlurbDataset(self.encoder.encode(val_texts), val_labels) if n_val else None
        self.train_loader = data.DataLoader(
            self.train_ds, batch_size=cfg.batch_size, shuffle=True,
            num_workers=cfg.num_workers, pin_memory=cfg.pin_memory
        )

        self.model = Architecture(self.encoder.vocabulary.size, cfg.max_len,
                                  emb_dim=cfg.emb_dim, hidden=cfg.hidden).to(self.device)
        self.criterion = nn.BCEWithLogitsLoss()
        self.opt = OPTIMIZERS[cfg.optimizer](self.model.parameters(), lr=cfg.lr)

        ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
        self.outdir = Path(cfg.outdir or f"artifacts/{ts}")
        self.outdir.mkdir(parents=True, exist_ok=True)

        self.best_acc = -1.0
        self.history: List[Dict[str, Any]] = []

        if autostart:
            self.run()

    # -------- public API --------
    def run(self):
        for epoch in range(1, self.cfg.epochs + 1):
            loss_tr = self._train_one()
            _, acc_tr = self._evaluate(self.train_ds.data, self.train_ds.labels)
            row: Dict[str, Any] = {"epoch": epoch, "train_loss": loss_tr, "train_acc": acc_tr}
            line = f"Epoch {epoch:03d} | train loss {loss_tr:.4f} acc {acc_tr:.3f}"

            if self.val_ds is not None:
                loss_ev, acc_ev = self._evaluate(self.val_ds.data, self.val_ds.labels)
                row.update(val_loss=loss_ev, val_acc=acc_ev)
                line += f" | val loss {loss_ev:.4f} acc {acc_ev:.3f}"
                score = acc_ev
            else:
                score = acc_tr
            self.history.append(row)
            print(line)

            if score > self.best_acc:
                torch.save(self.model.state_dict(), self.outdir / "model_best.pth")
                self.best_acc = score

        self._finalize()

    def evaluate(self, texts: Sequence[str], labels: Sequence[int]) -> Tuple[float, float]:
        """Loss and accuracy on held-out texts, encoded with the frozen vocabulary."""
        return self._evaluate(self.encoder.encode(texts), torch.as_tensor(labels, dtype=torch.float32))

    # -------- internals --------
    def _train_one(self) -> float:
        self.model.train()
        total = 0.0
        count = 0
        for x, y in self.train_loader:
            x = x.to(self.device, non_blocking=self.cfg.pin_memory)
            y = y.to(self.device, non_blocking=self.cfg.pin_memory)
            self.opt.zero_grad(set_to_none=True)
            logits = self.model(x)  # [B]
            loss = self.criterion(logits, y)
            loss.backward()
            self.opt.step()
            total += loss.item() * y.size(0)
            count += y.size(0)
        return total / max(count, 1)

    @torch.no_grad()
    def _evaluate(self, x: torch.Tensor, y: torch.Tensor) -> Tuple[float, float]:
        return evaluate_model(self.model, self.criterion, x, y, self.device)

    def _finalize(self):
        torch.save(self.model.state_dict(), self.outdir / "model.pth")
        self.encoder.vocabulary.save(self.outdir / "vocab.json")
        (self.outdir / "history.json").write_text(json.dumps(self.history, indent=2), encoding="utf-8")
        (self.outdir / "config.json").write_text(json.dumps(asdict(self.cfg), indent=2), encoding="utf-8")

        (self.outdir / "README.txt").write_text(
            "Artifacts for an embedding + dense blurb classifier.\n"
            f"- device: {self.device}\n"
            f"- vocabulary: {len(self.encoder.vocabulary)} tokens, fit on {self.encoder.vocabulary.document_count} training blurbs\n"
            f"- see config.json for full TrainerConfig\n"
            f"- see history.json for per-epoch metrics\n",
            encoding="utf-8",
        )
        log.info("saved artifacts to %s", self.outdir)


@torch.no_grad()
def evaluate_model(model: nn.Module, criterion: nn.Module, x: torch.Tensor, y: torch.Tensor,
                   device: torch.device) -> Tuple[float, float]:
    if x.shape[0] == 0:
        return float("nan"), float("nan")
    model.eval()
    x, y = x.to(device), y.to(device)
    logits = model(x)
    loss = criterion(logits, y).item()
    acc = ((logits > 0).float() == y).float().mean().item()
    return loss, acc
