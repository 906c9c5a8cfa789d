#!/usr/bin/env python3
"""
Entry point to train the blurb classifier via BlurbTrainer.

Run:
    python3 -m blurbnet.cli --data campaigns.csv --epochs 10 --outdir artifacts/run1
"""

from __future__ import annotations
import argparse
import logging

from .datasets import load_blurbs, train_test_split, length_report
from .trainer import BlurbTrainer, TrainerConfig


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Train an embedding + dense classifier on campaign blurbs.")
    p.add_argument("--data", type=str, required=True, help="CSV with one campaign per row")
    p.add_argument("--text-column", type=str, default="blurb")
    p.add_argument("--label-column", type=str, default="state")
    p.add_argument("--positive-label", type=str, default="successful")
    p.add_argument("--max-len", type=int, default=100)
    p.add_argument("--num-words", type=int, default=10000)
    p.add_argument("--padding", choices=("pre", "post"), default="pre")
    p.add_argument("--truncating", choices=("pre", "post"), default="pre")
    p.add_argument("--epochs", type=int, default=10)
    p.add_argument("--batch-size", type=int, default=32)
    p.add_argument("--lr", type=float, default=1e-3)
    p.add_argument("--optimizer", choices=("adam", "rmsprop", "sgd"), default="adam")
    p.add_argument("--validation-split", type=float, default=0.2)
    p.add_argument("--test-size", type=float, default=0.2)
    p.add_argument("--seed", type=int, default=None, help="Split/training seed (None=non-deterministic)")
    p.add_argument("--outdir", type=str, default=None)
    p.add_argument("--cpu", action="store_true")
    p.add_argument("-v", "--verbose", action="store_true")
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="[%(levelname)s] %(name)s: %(message)s")

    df = load_blurbs(args.data, text_column=args.text_column,
                     label_column=args.label_column, positive_label=args.positive_label)
    x_train, x_test, y_train, y_test = train_test_split(
        df["text"].tolist(), df["label"].tolist(), test_size=args.test_size, seed=args.seed)

    stats = length_report(x_train)
    print(f"train blurbs: {stats['count']} | tokens mean {stats['mean']:.1f} "
          f"p95 {stats['p95']:.0f} max {stats['max']:.0f} | max_len {args.max_len}")

    cfg = TrainerConfig(
        max_len=args.max_len,
        num_words=args.num_words,
        padding=args.padding,
        truncating=args.truncating,
        epochs=args.epochs,
        batch_size=args.batch_size,
        lr=args.lr,
        optimizer=args.optimizer,
        validation_split=args.validation_split,
        seed=args.seed,
        outdir=args.outdir,
        use_cpu=args.cpu,
    )
    # Training runs during initialization
    trainer = BlurbTrainer(x_train, y_train, cfg=cfg, autostart=True)
    loss, acc = trainer.evaluate(x_test, y_test)
    print(f"test loss {loss:.4f} acc {acc:.3f} ({len(x_test)} blurbs) | artifacts in {trainer.outdir}")


if __name__ == "__main__":
    main()
