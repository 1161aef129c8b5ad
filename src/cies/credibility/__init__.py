# src/cies/credibility/__init__.py

"""
Credibility scoring system for CIES.
Assigns a score, level and explanation to information based on its source, author, citations and style.
"""

from .schema import (
    AuthorDescriptor,
    BatchItemResult,
    ContentMetadata,
    CredibilityLevel,
    EvaluationInput,
    EvaluationResult,
    ScoreBreakdown,
    SourceDescriptor,
    SourceType,
    StoredEvaluation,
)
from .scorer import CredibilityScorer, calculate_confidence, determine_level
from .sources import SOURCE_TYPE_ADJUSTMENTS
from .scenarios import TEST_SCENARIOS

__all__ = [
    "AuthorDescriptor",
    "BatchItemResult",
    "ContentMetadata",
    "CredibilityLevel",
    "EvaluationInput",
    "EvaluationResult",
    "ScoreBreakdown",
    "SourceDescriptor",
    "SourceType",
    "StoredEvaluation",
    "CredibilityScorer",
    "calculate_confidence",
    "determine_level",
    "SOURCE_TYPE_ADJUSTMENTS",
    "TEST_SCENARIOS",
]
