from __future__ import annotations
from dataclasses import dataclass, fields
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union
import json, torch
from .encoder import SequenceEncoder
from .model import Architecture
from .trainer import TrainerConfig, evaluate_model
from .vocabulary import Vocabulary

@dataclass
class Classifier:
    model: torch.nn.Module
    encoder: SequenceEncoder
    device: torch.device
    outdir: Optional[Path] = None

    def predict_proba(self, texts: Sequence[str]) -> List[float]:
        self.model.eval()
        x = self.encoder.encode(texts).to(self.device)
        if x.shape[0] == 0: return []
        with torch.no_grad(): return torch.sigmoid(self.model(x)).tolist()

    def predict(self, texts: Sequence[str], threshold: float = 0.5) -> List[int]:
        return [int(p >= threshold) for p in self.predict_proba(texts)]

    def evaluate(self, texts: Sequence[str], labels: Sequence[int]) -> Tuple[float, float]:
        y = torch.as_tensor(labels, dtype=torch.float32)
        return evaluate_model(self.model, torch.nn.BCEWithLogitsLoss(), self.encoder.encode(texts), y, self.device)

    @classmethod
    def from_artifacts(cls, path: Union[str, Path], device: Optional[torch.device] = None,
                       best: bool = False) -> "Classifier":
        path = Path(path); device = device or torch.device("cuda" if torch.cuda.is_available() else "cpu")
        raw = json.loads((path / "config.json").read_text(encoding="utf-8"))
        known = {f.name for f in fields(TrainerConfig)}
        cfg = TrainerConfig(**{k: v for k, v in raw.items() if k in known})
        vocab = Vocabulary.load(path / "vocab.json")
        encoder = SequenceEncoder(cfg.encoder_config(), vocabulary=vocab)
        model = Architecture(vocab.size, cfg.max_len, emb_dim=cfg.emb_dim, hidden=cfg.hidden).to(device)
        weights = path / ("model_best.pth" if best else "model.pth")
        model.load_state_dict(torch.load(weights, map_location=device))
        return cls(model=model, encoder=encoder, device=device, outdir=path)
