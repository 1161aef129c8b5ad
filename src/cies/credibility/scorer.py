# src/cies/credibility/scorer.py

import logging
from typing import Callable, Dict, List, Optional

from cies.credibility.schema import (
    CredibilityLevel,
    EvaluationInput,
    EvaluationResult,
    ScoreBreakdown,
)
from cies.credibility.sources import get_source_adjustment

logger = logging.getLogger(__name__)

ContradictionDetector = Callable[[EvaluationInput], float]


def _clamp(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))


def determine_level(
    score: float,
    suspect_threshold: float = 30,
    doubtful_threshold: float = 60,
) -> CredibilityLevel:
    """Map a final score to its credibility level (upper bounds inclusive)."""
    if score <= suspect_threshold:
        return CredibilityLevel.SUSPECT
    if score <= doubtful_threshold:
        return CredibilityLevel.DOUBTFUL
    return CredibilityLevel.CREDIBLE


def calculate_confidence(breakdown: ScoreBreakdown) -> float:
    """
    Confidence in an assessment, from how far the components sit from 50.

    Extreme component scores (near 0 or 100) give high confidence, scores
    clustered around the midpoint give low confidence.
    """
    components = breakdown.components()
    avg_deviation = sum(abs(score - 50) for score in components) / len(components)
    return round(min(100, avg_deviation / 50 * 100), 2)


class CredibilityScorer:
    """
    Multi-criteria credibility scorer.

    Combines source, citation, language and contradiction sub-scores into a
    weighted final score, a credibility level and a list of explanations.
    Scoring is pure: the same input always gives the same numbers.
    """

    def __init__(
        self,
        source_weight: float = 0.4,
        citation_weight: float = 0.3,
        language_weight: float = 0.2,
        contradiction_weight: float = 0.1,
        points_per_citation: int = 20,
        references_bonus: int = 20,
        emotional_language_penalty: int = 40,
        missing_date_penalty: int = 20,
        expert_bonus: int = 20,
        anonymous_penalty: int = 30,
        default_contradiction_score: float = 80,
        suspect_threshold: float = 30,
        doubtful_threshold: float = 60,
        source_adjustments: Optional[Dict[str, int]] = None,
        contradiction_detector: Optional[ContradictionDetector] = None,
    ):
        """
        Initialize scorer with configurable parameters.

        Args:
            source_weight: Weight of the source score in the final score
            citation_weight: Weight of the citation score
            language_weight: Weight of the language score
            contradiction_weight: Weight of the contradiction score
            points_per_citation: Citation score points per citation (capped at 100)
            references_bonus: Points added when references are present
            emotional_language_penalty: Points deducted for emotional language
            missing_date_penalty: Points deducted when no publication date is given
            expert_bonus: Points added for a known expert author
            anonymous_penalty: Points deducted for an anonymous author
            default_contradiction_score: Contradiction score used without a detector
            suspect_threshold: Highest score still classified as suspect
            doubtful_threshold: Highest score still classified as doubtful
            source_adjustments: Per-source-type overrides of the registry
            contradiction_detector: Optional callable returning a 0-100 contradiction score
        """
        self.weights = {
            "source": source_weight,
            "citation": citation_weight,
            "language": language_weight,
            "contradiction": contradiction_weight,
        }
        self.points_per_citation = points_per_citation
        self.references_bonus = references_bonus
        self.emotional_language_penalty = emotional_language_penalty
        self.missing_date_penalty = missing_date_penalty
        self.expert_bonus = expert_bonus
        self.anonymous_penalty = anonymous_penalty
        self.default_contradiction_score = default_contradiction_score
        self.suspect_threshold = suspect_threshold
        self.doubtful_threshold = doubtful_threshold
        self.source_adjustments = dict(source_adjustments or {})
        self.contradiction_detector = contradiction_detector

    @classmethod
    def from_config(cls, config, **kwargs) -> "CredibilityScorer":
        """Build a scorer from a CredibilityConfig."""
        return cls(**config.model_dump(), **kwargs)

    def score(self, info: EvaluationInput) -> EvaluationResult:
        """
        Score a piece of information.

        Args:
            info: Validated evaluation input

        Returns:
            EvaluationResult with score, level, breakdown, reasoning and confidence.
        """
        breakdown = self.calculate_breakdown(info)
        final_score = self.calculate_final_score(breakdown)
        level = self.determine_level(final_score)

        result = EvaluationResult(
            score=final_score,
            level=level,
            breakdown=breakdown,
            reasoning=self.generate_reasoning(info, breakdown, level),
            confidence=calculate_confidence(breakdown),
        )

        logger.info(f"Evaluation completed. Score: {result.score}, Level: {result.level.value}")
        return result

    def calculate_breakdown(self, info: EvaluationInput) -> ScoreBreakdown:
        """Compute the four clamped sub-scores, rounded to 2 decimals."""
        return ScoreBreakdown(
            source_score=round(self._source_score(info), 2),
            citation_score=round(self._citation_score(info), 2),
            language_score=round(self._language_score(info), 2),
            contradiction_score=round(self._contradiction_score(info), 2),
        )

    def calculate_final_score(self, breakdown: ScoreBreakdown) -> float:
        """Weighted sum of the breakdown components, clamped and rounded."""
        total = (
            breakdown.source_score * self.weights["source"]
            + breakdown.citation_score * self.weights["citation"]
            + breakdown.language_score * self.weights["language"]
            + breakdown.contradiction_score * self.weights["contradiction"]
        )
        return round(_clamp(total), 2)

    def determine_level(self, score: float) -> CredibilityLevel:
        return determine_level(score, self.suspect_threshold, self.doubtful_threshold)

    def _source_adjustment(self, source_type: str) -> int:
        if source_type in self.source_adjustments:
            return self.source_adjustments[source_type]
        return get_source_adjustment(source_type)

    def _source_score(self, info: EvaluationInput) -> float:
        score = info.source.reputation * 100
        score += self._source_adjustment(info.source.type.value)
        return _clamp(score)

    def _citation_score(self, info: EvaluationInput) -> float:
        metadata = info.metadata
        score = 0
        if metadata.has_citations:
            score = min(100, metadata.citation_count * self.points_per_citation)
        if metadata.has_references:
            score += self.references_bonus
        return _clamp(score)

    def _language_score(self, info: EvaluationInput) -> float:
        score = 100
        if info.metadata.has_emotional_language:
            score -= self.emotional_language_penalty
        if not info.metadata.publication_date:
            score -= self.missing_date_penalty

        # Expertise and anonymity are independent signals
        if info.author.known_expert:
            score += self.expert_bonus
        if info.author.is_anonymous:
            score -= self.anonymous_penalty
        return _clamp(score)

    def _contradiction_score(self, info: EvaluationInput) -> float:
        if self.contradiction_detector is None:
            return _clamp(self.default_contradiction_score)
        return _clamp(self.contradiction_detector(info))

    def generate_reasoning(
        self,
        info: EvaluationInput,
        breakdown: ScoreBreakdown,
        level: CredibilityLevel,
    ) -> List[str]:
        """Build one explanatory sentence per signal that is present."""
        reasoning = [
            f"Information classified as {level.value} based on multi-criteria analysis."
        ]
        source_type = info.source.type.value

        if breakdown.source_score > 70:
            reasoning.append(
                f"Source appears reliable ({source_type} source with good reputation)."
            )
        elif breakdown.source_score < 40:
            reasoning.append(
                f"Source credibility is questionable ({source_type} source with limited reputation)."
            )

        if info.metadata.has_citations and info.metadata.citation_count > 0:
            reasoning.append(
                f"Information includes {info.metadata.citation_count} citations, supporting credibility."
            )
        else:
            reasoning.append("No citations found, reducing credibility assessment.")

        if info.metadata.has_emotional_language:
            reasoning.append("Emotional language detected, which may indicate bias.")

        if info.author.known_expert:
            reasoning.append("Author appears to be a recognized expert in the field.")
        if info.author.is_anonymous:
            reasoning.append("Anonymous authorship raises credibility concerns.")

        return reasoning

