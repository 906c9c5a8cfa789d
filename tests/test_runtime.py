import pytest

import blurbnet
from blurbnet import BlurbTrainer, InvalidConfiguration, TrainerConfig

GOOD = ["amazing", "brilliant", "wonderful", "inspiring"]
BAD = ["boring", "broken", "useless", "dull"]
NOUNS = ["board game", "solar lamp", "comic book", "film", "album"]


def toy_blurbs():
    texts, labels = [], []
    for i, noun in enumerate(NOUNS * 2):
        texts.append(f"an {GOOD[i % 4]} {noun} for everyone")
        labels.append(1)
        texts.append(f"a {BAD[i % 4]} {noun} nobody asked for")
        labels.append(0)
    return texts, labels


def test_train_predict_and_reload(tmp_path):
    texts, labels = toy_blurbs()
    clf = blurbnet.train(texts, labels, max_len=8, epochs=40, batch_size=8, lr=1e-2,
                         validation_split=0.2, seed=0, outdir=str(tmp_path), use_cpu=True)
    for name in ("model.pth", "model_best.pth", "vocab.json", "config.json", "history.json", "README.txt"):
        assert (tmp_path / name).exists()

    probe = ["an amazing film for everyone", "a boring album nobody asked for"]
    assert clf.predict(probe) == [1, 0]
    loss, acc = clf.evaluate(texts, labels)
    assert acc >= 0.9

    again = blurbnet.load(str(tmp_path))
    assert again.predict_proba(probe) == pytest.approx(clf.predict_proba(probe), abs=1e-6)
    assert again.encoder.vocabulary == clf.encoder.vocabulary


def test_vocabulary_never_sees_validation_rows(tmp_path):
    texts, labels = toy_blurbs()
    texts[-1] = "zzzunseen words only in validation"
    cfg = TrainerConfig(max_len=8, epochs=1, validation_split=0.2, seed=0,
                        outdir=str(tmp_path), use_cpu=True)
    trainer = BlurbTrainer(texts, labels, cfg=cfg, autostart=True)
    assert "zzzunseen" not in trainer.encoder.vocabulary
    assert trainer.encoder.vocabulary.document_count == 16
    assert len(trainer.history) == 1 and "val_acc" in trainer.history[0]


def test_history_without_validation(tmp_path):
    texts, labels = toy_blurbs()
    cfg = TrainerConfig(max_len=8, epochs=2, validation_split=0.0, outdir=str(tmp_path), use_cpu=True)
    trainer = BlurbTrainer(texts, labels, cfg=cfg)
    assert [r["epoch"] for r in trainer.history] == [1, 2]
    assert "val_loss" not in trainer.history[0]
    loss, acc = trainer.evaluate(["an amazing film for everyone"], [1])
    assert 0.0 <= acc <= 1.0


@pytest.mark.parametrize("kw", [
    {"optimizer": "adagradx"}, {"validation_split": 1.0}, {"max_len": 0}, {"padding": "left"},
])
def test_trainer_config_validation(kw):
    with pytest.raises(InvalidConfiguration):
        TrainerConfig(**kw)
