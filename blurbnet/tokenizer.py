from typing import Callable, List

DEFAULT_FILTERS = '!"#$%&()*+,-./:;<=>?@[\\]^_`{|}~\t\n'

Tokenizer = Callable[[str], List[str]]


def text_to_word_sequence(text: str,
                          filters: str = DEFAULT_FILTERS,
                          lower: bool = True,
                          split: str = " ") -> List[str]:
    """Lowercase, blank out filter characters, split. Empty pieces are dropped."""
    if lower:
        text = text.lower()
    text = text.translate(str.maketrans({c: split for c in filters}))
    return [t for t in text.split(split) if t]
