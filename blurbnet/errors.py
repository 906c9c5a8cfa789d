class BlurbnetError(Exception):
    """Base class for everything blurbnet raises on purpose."""


class InvalidConfiguration(BlurbnetError, ValueError):
    """Non-positive length/cap, unknown padding or truncating side, bad split."""


class UnfitVocabulary(BlurbnetError, RuntimeError):
    """Encoding was attempted before the vocabulary was fit."""


class VocabularyFrozen(BlurbnetError, RuntimeError):
    """An encoder that already holds a vocabulary was asked to fit again."""
