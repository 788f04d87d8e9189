"""
Turns analytics scores into an ordered list of coaching tips.
"""

from typing import List, Tuple

from analytics.bands import DEFAULT_POLICY, ScoringPolicy
from analytics.models import ConfidenceAnalysis, FillerWordAnalysis, PaceAnalysis, VocabularyAnalysis

PRACTICE_TIPS = [
    "Practice Regularly: Record yourself speaking daily to track improvement",
    "Study Great Speakers: Watch TED talks and note speaking techniques",
]
KEEP_IT_UP = "Keep it Up: Your speaking skills are developing well!"
SHORT_SAMPLE = (
    "Record a Longer Sample: Recordings under a minute give less reliable pace "
    "and vocabulary measurements"
)


class RecommendationBuilder:
    """Encapsulates logic for creating tips from analysis results."""

    def __init__(self, policy: ScoringPolicy = DEFAULT_POLICY):
        self.policy = policy

    def build(
        self,
        pace: PaceAnalysis,
        fillers: FillerWordAnalysis,
        vocabulary: VocabularyAnalysis,
        confidence: ConfidenceAnalysis,
        duration_minutes: float,
    ) -> List[str]:
        """
        Ordered, deterministic tips: one per weak dimension, then the standing
        practice tips, then a "keep it up" line when delivery needed no tip.
        """
        pace_tips = self._pace_tips(pace)
        filler_tips = self._filler_tips(fillers)

        tips: List[str] = []
        tips.extend(pace_tips)
        tips.extend(filler_tips)
        tips.extend(self._vocabulary_tips(vocabulary))
        tips.extend(self._confidence_tips(confidence))
        if 0 < duration_minutes < self.policy.short_sample_minutes:
            tips.append(SHORT_SAMPLE)
        tips.extend(PRACTICE_TIPS)
        if not pace_tips and not filler_tips:
            tips.append(KEEP_IT_UP)
        return tips

    def _pace_tips(self, pace: PaceAnalysis) -> List[str]:
        if pace.pace_score >= self.policy.recommendation_threshold:
            return []
        return [f"Pace Improvement: {pace.pace_recommendation}"]

    def _filler_tips(self, fillers: FillerWordAnalysis) -> List[str]:
        if fillers.filler_word_score >= self.policy.recommendation_threshold:
            return []
        top = top_fillers(fillers, 2)
        if not top:
            return []
        quoted = '", "'.join(word for word, _ in top)
        return [f'Reduce Filler Words: Focus on eliminating "{quoted}" from your speech']

    def _vocabulary_tips(self, vocabulary: VocabularyAnalysis) -> List[str]:
        if vocabulary.vocabulary_score >= self.policy.recommendation_threshold:
            return []
        return [f"Expand Vocabulary: {vocabulary.vocabulary_feedback}"]

    def _confidence_tips(self, confidence: ConfidenceAnalysis) -> List[str]:
        if confidence.confidence_score >= self.policy.recommendation_threshold:
            return []
        return [f"Boost Confidence: {confidence.confidence_feedback}"]


def top_fillers(fillers: FillerWordAnalysis, n: int) -> List[Tuple[str, int]]:
    """Most frequent fillers; ties keep the order in which they were first counted."""
    return sorted(fillers.filler_word_counts.items(), key=lambda kv: -kv[1])[:n]
