"""
Filler-word rules and counting.

Rules are plain records evaluated in order. Word-level rules (pure sounds,
discourse markers) match a cleaned token exactly; contextual rules match
multi-word patterns over the lowercased transcript.
"""

import re
import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Pattern, Sequence

from analytics import lexicon
from analytics.text import alternation, clean_word, phrase_regex

logger = logging.getLogger(__name__)


class FillerClass(str, Enum):
    PURE_SOUND = "pure_sound"
    DISCOURSE_MARKER = "discourse_marker"
    CONTEXTUAL = "contextual"


@dataclass(frozen=True)
class FillerRule:
    label: str
    matcher: Pattern[str]
    classification: FillerClass
    weight: int = 1


def _word_rule(word: str, classification: FillerClass) -> FillerRule:
    return FillerRule(word, re.compile(re.escape(word)), classification)


def _context_rule(label: str, pattern: str) -> FillerRule:
    return FillerRule(label, re.compile(pattern, re.IGNORECASE), FillerClass.CONTEXTUAL)


# Gap between the words of a phrase; may hold hesitation sounds ("you um, know")
PHRASE_GAP = rf"(?:\s+(?:{alternation(lexicon.PURE_FILLER_SOUNDS)})\b[^\w\s]*)*\s+"

CONTEXTUAL_RULES: List[FillerRule] = [
    # "like" as a stall, not a comparison
    _context_rule("like", rf"\blike\s+({alternation(lexicon.LIKE_FOLLOWERS)})\b"),
    # "so" next to a hesitation
    _context_rule("so", rf"\b({alternation(lexicon.SO_PRECEDERS)})\s+so\b"),
    _context_rule("so", rf"\bso\s+({alternation(lexicon.SO_FOLLOWERS)})\b"),
    _context_rule("you know", phrase_regex("you know", PHRASE_GAP)),
    _context_rule("i mean", phrase_regex("i mean", PHRASE_GAP)),
    _context_rule("sort of", rf"\bsort{PHRASE_GAP}of\b(?!\s+(?:{alternation(lexicon.SORT_OF_COMPARISONS)}))"),
    _context_rule("kind of", rf"\bkind{PHRASE_GAP}of\b(?!\s+(?:{alternation(lexicon.KIND_OF_COMPARISONS)}))"),
] + [_context_rule(phrase, phrase_regex(phrase, PHRASE_GAP)) for phrase in lexicon.STALLING_PHRASES]

DEFAULT_FILLER_RULES: List[FillerRule] = (
    [_word_rule(w, FillerClass.PURE_SOUND) for w in lexicon.PURE_FILLER_SOUNDS]
    + [_word_rule(w, FillerClass.DISCOURSE_MARKER) for w in lexicon.DISCOURSE_MARKERS + lexicon.HEDGE_WORDS]
    + CONTEXTUAL_RULES
)


def overuse_threshold(word_count: int) -> int:
    """Occurrences of a discourse marker tolerated before the excess counts as filler."""
    return 3 if word_count > 100 else 2


@dataclass
class FillerTally:
    total: int = 0
    counts: Dict[str, int] = field(default_factory=dict)

    def add(self, label: str, amount: int) -> None:
        if amount <= 0:
            return
        self.counts[label] = self.counts.get(label, 0) + amount
        self.total += amount


class FillerDetector:
    """Counts fillers in a tokenized transcript using an ordered rule list."""

    def __init__(self, rules: Sequence[FillerRule] = DEFAULT_FILLER_RULES):
        self.rules = list(rules)

    def _rules_of(self, classification: FillerClass) -> List[FillerRule]:
        return [r for r in self.rules if r.classification is classification]

    def count(self, words: Sequence[str]) -> FillerTally:
        tally = FillerTally()
        cleaned = [clean_word(w) for w in words]

        pure = self._rules_of(FillerClass.PURE_SOUND)
        content_words = 0
        for word in cleaned:
            for rule in pure:
                if rule.matcher.fullmatch(word):
                    tally.add(rule.label, rule.weight)
                    break
            else:
                content_words += 1

        # Threshold ignores pure sounds so adding one can never lower the tally
        frequency = Counter(cleaned)
        threshold = overuse_threshold(content_words)
        for rule in self._rules_of(FillerClass.DISCOURSE_MARKER):
            occurrences = sum(n for w, n in frequency.items() if rule.matcher.fullmatch(w))
            tally.add(rule.label, (occurrences - threshold) * rule.weight)

        full_text = " ".join(words).lower()
        for rule in self._rules_of(FillerClass.CONTEXTUAL):
            matches = sum(1 for _ in rule.matcher.finditer(full_text))
            if matches:
                logger.debug("Contextual filler %r matched %d times", rule.label, matches)
            tally.add(rule.label, matches * rule.weight)

        return tally
