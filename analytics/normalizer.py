"""
Display-only filler stripping.

Produces a cleaner reading of a transcript. The result only ever removes
text; the raw transcript used for scoring is never touched.
"""

import re
import logging
from typing import Sequence

from analytics.fillers import DEFAULT_FILLER_RULES, FillerClass, FillerRule
from analytics.text import alternation

logger = logging.getLogger(__name__)

_PUNCT = ",.!?;:"
_WHITESPACE = re.compile(r"\s+")
_SPACE_BEFORE_PUNCT = re.compile(rf"\s+([{_PUNCT}])")
_PUNCT_RUN = re.compile(rf"([{_PUNCT}])(?:\s*[{_PUNCT}])+")
_LEADING_PUNCT = re.compile(rf"^\s*[{_PUNCT}]\s*")


def _keep_last_group(match: re.Match) -> str:
    groups = [g for g in match.groups() if g]
    return groups[-1] if groups else ""


class TextNormalizer:
    def __init__(self, rules: Sequence[FillerRule] = DEFAULT_FILLER_RULES, keep_budget: int = 2):
        self.keep_budget = keep_budget
        pure = [r.label for r in rules if r.classification is FillerClass.PURE_SOUND]
        self._pure = re.compile(rf"\b(?:{alternation(pure)})\b", re.IGNORECASE) if pure else None
        self._contextual = [r.matcher for r in rules if r.classification is FillerClass.CONTEXTUAL]
        self._markers = [
            re.compile(rf"\b{re.escape(r.label)}\b", re.IGNORECASE)
            for r in rules if r.classification is FillerClass.DISCOURSE_MARKER
        ]

    def strip(self, text: str) -> str:
        """
        Repeat single passes until the text stops changing, so stripping an
        already stripped transcript is a no-op. After the first pass every
        change deletes characters, which bounds the loop.
        """
        if not text:
            return ""

        out = self._strip_once(text)
        while True:
            again = self._strip_once(out)
            if again == out:
                break
            out = again

        logger.debug("Stripped transcript from %d to %d characters", len(text), len(out))
        return out

    def _strip_once(self, text: str) -> str:
        out = self._pure.sub("", text) if self._pure else text

        for matcher in self._contextual:
            out = matcher.sub(_keep_last_group, out)

        for marker in self._markers:
            out = self._trim_marker(marker, out)

        out = _WHITESPACE.sub(" ", out)
        out = _SPACE_BEFORE_PUNCT.sub(r"\1", out)
        out = _PUNCT_RUN.sub(r"\1", out)
        out = _LEADING_PUNCT.sub("", out)
        return out.strip()

    def _trim_marker(self, marker: re.Pattern, text: str) -> str:
        """Keep the first ``keep_budget`` occurrences of a marker, drop the rest."""
        seen = 0

        def _replace(match: re.Match) -> str:
            nonlocal seen
            seen += 1
            return match.group(0) if seen <= self.keep_budget else ""

        return marker.sub(_replace, text)
