from typing import Dict, List
from pydantic import BaseModel, ConfigDict, Field


class PaceAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    pace_category: str
    pace_score: int = Field(..., ge=1, le=10)
    pace_recommendation: str


class FillerWordAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_filler_words: int = Field(..., ge=0)
    filler_word_percentage: float = Field(..., ge=0)
    filler_word_score: int = Field(..., ge=1, le=10)
    filler_word_feedback: str
    filler_word_counts: Dict[str, int] = Field(default_factory=dict)


class VocabularyAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    unique_words: int = Field(..., ge=0)
    vocabulary_diversity: float = Field(..., ge=0, le=1)
    vocabulary_score: int = Field(..., ge=1, le=10)
    vocabulary_feedback: str
    word_complexity_distribution: Dict[str, int] = Field(default_factory=dict)


class ConfidenceAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    confidence_score: int = Field(..., ge=1, le=10)
    confidence_feedback: str
    confidence_words: int = Field(..., ge=0)
    uncertainty_words: int = Field(..., ge=0)


class SpeechAnalytics(BaseModel):
    model_config = ConfigDict(frozen=True)

    overall_score: float = Field(..., ge=1, le=10)
    total_words: int = Field(..., ge=0)
    words_per_minute: float = Field(..., ge=0)
    pace_analysis: PaceAnalysis
    filler_word_analysis: FillerWordAnalysis
    vocabulary_analysis: VocabularyAnalysis
    confidence_analysis: ConfidenceAnalysis
    recommendations: List[str] = Field(default_factory=list)
