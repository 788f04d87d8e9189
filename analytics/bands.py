"""
Scoring bands for the speech analytics engine.

Each dimension maps a raw metric onto a 1-10 score with fixed feedback text.
Thresholds are grouped in ``ScoringPolicy`` so deployments can tune them
without touching the engine.
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple

# (upper bound exclusive on filler %, score, feedback); last row is the fallback
FILLER_BANDS: Tuple[Tuple[float, int, str], ...] = (
    (1.0, 10, "Excellent! You maintain very clean speech with minimal filler words."),
    (2.0, 8, "Great job keeping filler words to a minimum."),
    (4.0, 6, "Good control, but try to reduce filler words for more professional delivery."),
    (7.0, 4, "Practice pausing instead of using filler words to improve clarity."),
    (float("inf"), 2, "Focus on reducing filler words significantly. Practice speaking more slowly and deliberately."),
)

# (lower bound exclusive on type-token ratio, score, feedback); last row is the fallback
VOCABULARY_BANDS: Tuple[Tuple[float, int, str], ...] = (
    (0.7, 10, "Outstanding vocabulary diversity! You use a rich variety of words."),
    (0.5, 8, "Good vocabulary diversity. Your word choice keeps the content engaging."),
    (0.35, 6, "Decent vocabulary, but try to vary your word choices more for better engagement."),
    (0.2, 4, "Limited vocabulary diversity. Practice using more varied expressions and synonyms."),
    (float("-inf"), 2, "Very repetitive vocabulary. Focus on expanding your word choices and expressions."),
)

# (minimum score, feedback)
CONFIDENCE_FEEDBACK: Tuple[Tuple[int, str], ...] = (
    (9, "You speak with exceptional confidence and authority!"),
    (7, "Good confidence level. Your assertions are clear and strong."),
    (5, "Moderate confidence. Consider using more definitive language."),
    (3, "Work on speaking more confidently. Reduce uncertain language."),
    (0, "Focus on building confidence. Use stronger, more assertive statements."),
)

PACE_FEEDBACK = {
    "Optimal": "Excellent speaking pace! You maintain an ideal rhythm for audience comprehension.",
    "Too Slow": "Consider speaking faster to maintain audience engagement and energy.",
    "Slow": "Try to increase your speaking pace slightly for better flow and engagement.",
    "Fast": "Good pace, but consider slowing down slightly for better clarity.",
    "Too Fast": "Slow down to ensure your audience can follow and understand your message.",
}

COMPLEXITY_SIMPLE = "Simple (1-4 letters)"
COMPLEXITY_MEDIUM = "Medium (5-7 letters)"
COMPLEXITY_COMPLEX = "Complex (8+ letters)"


@dataclass(frozen=True)
class ScoringPolicy:
    optimal_wpm: Tuple[float, float] = (140.0, 180.0)
    too_slow_below_wpm: float = 100.0
    too_fast_above_wpm: float = 200.0
    pace_scores: Dict[str, int] = field(default_factory=lambda: {
        "Optimal": 10, "Too Slow": 4, "Slow": 6, "Fast": 7, "Too Fast": 4,
    })

    filler_bands: Tuple[Tuple[float, int, str], ...] = FILLER_BANDS
    vocabulary_bands: Tuple[Tuple[float, int, str], ...] = VOCABULARY_BANDS

    confidence_base: float = 6.0
    confidence_points_per_rate: float = 2.0
    confidence_bonus_cap: float = 3.0
    uncertainty_penalty_cap: float = 4.0
    confidence_feedback: Tuple[Tuple[int, str], ...] = CONFIDENCE_FEEDBACK

    weights: Dict[str, float] = field(default_factory=lambda: {
        "pace": 0.25, "fillers": 0.30, "vocabulary": 0.25, "confidence": 0.20,
    })
    recommendation_threshold: int = 7
    short_sample_minutes: float = 1.0


DEFAULT_POLICY = ScoringPolicy()


def pace_category(wpm: float, policy: ScoringPolicy = DEFAULT_POLICY) -> str:
    low, high = policy.optimal_wpm
    if low <= wpm <= high:
        return "Optimal"
    if wpm < policy.too_slow_below_wpm:
        return "Too Slow"
    if wpm < low:
        return "Slow"
    if wpm <= policy.too_fast_above_wpm:
        return "Fast"
    return "Too Fast"


def filler_band(percentage: float, policy: ScoringPolicy = DEFAULT_POLICY) -> Tuple[int, str]:
    for upper, score, feedback in policy.filler_bands:
        if percentage < upper:
            return score, feedback
    _, score, feedback = policy.filler_bands[-1]
    return score, feedback


def vocabulary_band(diversity: float, policy: ScoringPolicy = DEFAULT_POLICY) -> Tuple[int, str]:
    for lower, score, feedback in policy.vocabulary_bands:
        if diversity > lower:
            return score, feedback
    _, score, feedback = policy.vocabulary_bands[-1]
    return score, feedback


def confidence_feedback(score: int, policy: ScoringPolicy = DEFAULT_POLICY) -> str:
    for minimum, feedback in policy.confidence_feedback:
        if score >= minimum:
            return feedback
    return policy.confidence_feedback[-1][1]


def complexity_tier(word: str) -> str:
    if len(word) <= 4:
        return COMPLEXITY_SIMPLE
    if len(word) <= 7:
        return COMPLEXITY_MEDIUM
    return COMPLEXITY_COMPLEX
