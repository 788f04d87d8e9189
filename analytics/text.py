"""Tokenization helpers shared by the analytics engine and the normalizer."""

import re
from typing import Iterable, List

_NON_WORD = re.compile(r"[^\w]")


def split_words(text: str) -> List[str]:
    """Whitespace tokenization; punctuation stays attached to its word."""
    return (text or "").split()


def clean_word(word: str) -> str:
    """Lowercase and drop every non-word character ("Well," -> "well")."""
    return _NON_WORD.sub("", word.lower())


def phrase_regex(phrase: str, gap: str = r"\s+") -> str:
    """
    Word-bounded regex for a phrase. ``gap`` is the pattern placed between
    its words; the default tolerates repeated internal whitespace.
    """
    return r"\b" + gap.join(re.escape(part) for part in phrase.split()) + r"\b"


def alternation(phrases: Iterable[str]) -> str:
    return "|".join(r"\s+".join(re.escape(p) for p in phrase.split()) for phrase in phrases)
