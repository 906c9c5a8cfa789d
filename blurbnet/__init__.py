from .errors import BlurbnetError, InvalidConfiguration, UnfitVocabulary, VocabularyFrozen
from .tokenizer import text_to_word_sequence
from .vocabulary import Vocabulary
from .encoder import EncoderConfig, SequenceEncoder, pad_sequences
from .datasets import BlurbDataset, load_blurbs, train_test_split, length_report
from .model import Architecture
from .trainer import BlurbTrainer, TrainerConfig
from .runtime import Classifier

__all__ = [
    "BlurbnetError", "InvalidConfiguration", "UnfitVocabulary", "VocabularyFrozen",
    "text_to_word_sequence", "Vocabulary", "EncoderConfig", "SequenceEncoder",
    "pad_sequences", "BlurbDataset", "load_blurbs", "train_test_split",
    "length_report", "Architecture", "BlurbTrainer", "TrainerConfig", "Classifier",
    "train", "load",
]
__version__ = "0.1.0"

def train(texts, labels, *,
          max_len: int = 100,
          num_words: int = 10000,
          padding: str = "pre",
          truncating: str = "pre",
          epochs: int = 10,
          batch_size: int = 32,
          lr: float = 1e-3,
          optimizer: str = "adam",
          validation_split: float = 0.2,
          seed: int | None = None,
          outdir: str | None = None,
          use_cpu: bool = False) -> Classifier:
    """Fit a vocabulary and classifier on the given blurbs and return a Classifier runtime."""
    cfg = TrainerConfig(
        max_len=max_len, num_words=num_words, padding=padding, truncating=truncating,
        epochs=epochs, batch_size=batch_size, lr=lr, optimizer=optimizer,
        validation_split=validation_split, seed=seed, outdir=outdir, use_cpu=use_cpu
    )
    trainer = BlurbTrainer(texts, labels, cfg=cfg, autostart=True)
    return Classifier.from_artifacts(trainer.outdir, device=trainer.device)

def load(path: str) -> Classifier:
    """Load a previously trained classifier from an artifacts folder."""
    return Classifier.from_artifacts(path)
