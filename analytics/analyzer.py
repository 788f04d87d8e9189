"""
Speech analytics over a raw transcript.

Scores four dimensions on a 1-10 scale and combines them into a weighted
overall score:

- pace: words per minute against fixed bands
- fillers: pure sounds, overused discourse markers and contextual phrases
- vocabulary: type-token ratio plus a word-length distribution
- confidence: assertive vs. hedging phrases per 100 words

The engine is pure and deterministic: the same text and duration always give
the same result, and the input text is never modified.
"""

import re
import logging
from typing import Dict, List, Sequence

from analytics import lexicon
from analytics.bands import (
    COMPLEXITY_COMPLEX,
    COMPLEXITY_MEDIUM,
    COMPLEXITY_SIMPLE,
    DEFAULT_POLICY,
    PACE_FEEDBACK,
    ScoringPolicy,
    complexity_tier,
    confidence_feedback,
    filler_band,
    pace_category,
    vocabulary_band,
)
from analytics.fillers import DEFAULT_FILLER_RULES, FillerDetector, FillerRule
from analytics.models import (
    ConfidenceAnalysis,
    FillerWordAnalysis,
    PaceAnalysis,
    SpeechAnalytics,
    VocabularyAnalysis,
)
from analytics.recommendations import RecommendationBuilder
from analytics.text import clean_word, phrase_regex, split_words
from utils.logging import log_execution_time
from utils.math import clamp, round_half_up

logger = logging.getLogger(__name__)


def _compile_phrases(phrases: Sequence[str]) -> List[re.Pattern]:
    return [re.compile(phrase_regex(p), re.IGNORECASE) for p in phrases]


class SpeechAnalyticsEngine:
    def __init__(
        self,
        policy: ScoringPolicy = DEFAULT_POLICY,
        filler_rules: Sequence[FillerRule] = DEFAULT_FILLER_RULES,
    ):
        self.policy = policy
        self.fillers = FillerDetector(filler_rules)
        self.recommendations = RecommendationBuilder(policy)
        self._confidence_patterns = _compile_phrases(lexicon.CONFIDENCE_WORDS)
        self._uncertainty_patterns = _compile_phrases(lexicon.UNCERTAINTY_WORDS)

    @log_execution_time(logger, logging.DEBUG)
    def analyze(self, raw_text: str, duration_minutes: float) -> SpeechAnalytics:
        words = split_words(raw_text)
        total_words = len(words)
        wpm = total_words / duration_minutes if duration_minutes > 0 else 0.0

        pace = self.analyze_pace(wpm)
        fillers = self.analyze_fillers(words)
        vocabulary = self.analyze_vocabulary(words)
        confidence = self.analyze_confidence(raw_text or "")

        overall = self.overall_score(pace, fillers, vocabulary, confidence)
        tips = self.recommendations.build(pace, fillers, vocabulary, confidence, duration_minutes)

        logger.info(
            "Speech analysis: %d words, %.1f wpm, overall %.1f",
            total_words, wpm, overall,
        )
        return SpeechAnalytics(
            overall_score=overall,
            total_words=total_words,
            words_per_minute=wpm,
            pace_analysis=pace,
            filler_word_analysis=fillers,
            vocabulary_analysis=vocabulary,
            confidence_analysis=confidence,
            recommendations=tips,
        )

    def analyze_pace(self, wpm: float) -> PaceAnalysis:
        category = pace_category(wpm, self.policy)
        return PaceAnalysis(
            pace_category=category,
            pace_score=self.policy.pace_scores[category],
            pace_recommendation=PACE_FEEDBACK[category],
        )

    def analyze_fillers(self, words: Sequence[str]) -> FillerWordAnalysis:
        tally = self.fillers.count(words)
        # Overlapping rules can count more fillers than words
        percentage = min(100.0, tally.total / len(words) * 100) if words else 0.0
        score, feedback = filler_band(percentage, self.policy)
        return FillerWordAnalysis(
            total_filler_words=tally.total,
            filler_word_percentage=percentage,
            filler_word_score=score,
            filler_word_feedback=feedback,
            filler_word_counts=tally.counts,
        )

    def analyze_vocabulary(self, words: Sequence[str]) -> VocabularyAnalysis:
        cleaned = [w for w in (clean_word(word) for word in words) if w]
        unique = len(set(cleaned))
        diversity = unique / len(cleaned) if cleaned else 0.0
        score, feedback = vocabulary_band(diversity, self.policy)

        distribution: Dict[str, int] = {COMPLEXITY_SIMPLE: 0, COMPLEXITY_MEDIUM: 0, COMPLEXITY_COMPLEX: 0}
        for word in cleaned:
            distribution[complexity_tier(word)] += 1

        return VocabularyAnalysis(
            unique_words=unique,
            vocabulary_diversity=diversity,
            vocabulary_score=score,
            vocabulary_feedback=feedback,
            word_complexity_distribution=distribution,
        )

    def analyze_confidence(self, text: str) -> ConfidenceAnalysis:
        lowered = text.lower()
        confident = sum(len(p.findall(lowered)) for p in self._confidence_patterns)
        uncertain = sum(len(p.findall(lowered)) for p in self._uncertainty_patterns)

        per_hundred = max(len(split_words(lowered)) / 100, 1)
        policy = self.policy
        raw = (
            policy.confidence_base
            + min(confident / per_hundred * policy.confidence_points_per_rate, policy.confidence_bonus_cap)
            - min(uncertain / per_hundred * policy.confidence_points_per_rate, policy.uncertainty_penalty_cap)
        )
        score = int(clamp(round_half_up(raw), 1, 10))

        return ConfidenceAnalysis(
            confidence_score=score,
            confidence_feedback=confidence_feedback(score, policy),
            confidence_words=confident,
            uncertainty_words=uncertain,
        )

    def overall_score(
        self,
        pace: PaceAnalysis,
        fillers: FillerWordAnalysis,
        vocabulary: VocabularyAnalysis,
        confidence: ConfidenceAnalysis,
    ) -> float:
        w = self.policy.weights
        weighted = (
            pace.pace_score * w["pace"]
            + fillers.filler_word_score * w["fillers"]
            + vocabulary.vocabulary_score * w["vocabulary"]
            + confidence.confidence_score * w["confidence"]
        )
        return clamp(round_half_up(weighted, 1), 1.0, 10.0)
