# tests/unit/test_scorer.py

from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from cies.core.config import CredibilityConfig
from cies.credibility import sources
from cies.credibility.scenarios import TEST_SCENARIOS, get_scenario
from cies.credibility.schema import (
    CredibilityLevel,
    EvaluationInput,
    ScoreBreakdown,
    SourceType,
)
from cies.credibility.scorer import (
    CredibilityScorer,
    calculate_confidence,
    determine_level,
)


@pytest.fixture
def scorer():
    return CredibilityScorer()


class TestEvaluationInput:
    """Test input validation and the camelCase JSON shape."""

    def test_camel_case_aliases(self):
        info = EvaluationInput.model_validate(
            {
                "content": "x",
                "source": {"type": "news", "reputation": 0.7},
                "author": {"isAnonymous": True},
                "metadata": {"citationCount": 3, "hasCitations": True},
            }
        )
        assert info.author.is_anonymous is True
        assert info.author.known_expert is False
        assert info.metadata.citation_count == 3
        assert info.source.type == SourceType.NEWS

    def test_empty_content_rejected(self):
        with pytest.raises(ValidationError, match="content"):
            EvaluationInput.model_validate(
                {"content": "   ", "source": {"type": "news", "reputation": 0.5},
                 "author": {"isAnonymous": False}}
            )

    @pytest.mark.parametrize("reputation", [-0.1, 1.5])
    def test_reputation_out_of_range_rejected(self, reputation):
        with pytest.raises(ValidationError):
            EvaluationInput.model_validate(
                {"content": "x", "source": {"type": "news", "reputation": reputation},
                 "author": {"isAnonymous": False}}
            )

    def test_unknown_source_type_rejected(self):
        with pytest.raises(ValidationError):
            EvaluationInput.model_validate(
                {"content": "x", "source": {"type": "tabloid", "reputation": 0.5},
                 "author": {"isAnonymous": False}}
            )

    def test_missing_author_rejected(self):
        with pytest.raises(ValidationError):
            EvaluationInput.model_validate(
                {"content": "x", "source": {"type": "news", "reputation": 0.5}}
            )


class TestLevels:
    """Test the score -> level mapping."""

    @pytest.mark.parametrize(
        "score,expected",
        [
            (0, CredibilityLevel.SUSPECT),
            (30, CredibilityLevel.SUSPECT),
            (30.01, CredibilityLevel.DOUBTFUL),
            (60, CredibilityLevel.DOUBTFUL),
            (60.01, CredibilityLevel.CREDIBLE),
            (100, CredibilityLevel.CREDIBLE),
        ],
    )
    def test_upper_bounds_are_inclusive(self, score, expected):
        assert determine_level(score) == expected

    def test_custom_thresholds(self):
        scorer = CredibilityScorer(suspect_threshold=10, doubtful_threshold=20)
        assert scorer.determine_level(15) == CredibilityLevel.DOUBTFUL
        assert scorer.determine_level(21) == CredibilityLevel.CREDIBLE


class TestScenarios:
    """Test the built-in scenarios end to end through the scorer."""

    def test_false_info_is_suspect(self, scorer):
        result = scorer.score(get_scenario("case1_false_info"))

        assert result.breakdown.source_score == 0
        assert result.breakdown.citation_score == 0
        # 100 - 40 emotional - 20 undated - 30 anonymous
        assert result.breakdown.language_score == 10
        assert result.breakdown.contradiction_score == 80
        assert result.score == pytest.approx(10)
        assert result.level == CredibilityLevel.SUSPECT
        assert result.confidence == pytest.approx(85)

    def test_false_info_with_date_is_still_suspect(self, scorer):
        info = get_scenario("case1_false_info").model_copy(deep=True)
        info.metadata.publication_date = "2024-01-01"

        result = scorer.score(info)
        assert result.breakdown.language_score == 30
        assert result.score == pytest.approx(14)
        assert result.level == CredibilityLevel.SUSPECT

    def test_credible_info(self, scorer):
        result = scorer.score(get_scenario("case2_credible_info"))

        assert result.breakdown.source_score == 100
        assert result.breakdown.citation_score == 100
        assert result.breakdown.language_score == 100
        assert result.score == pytest.approx(98)
        assert result.level == CredibilityLevel.CREDIBLE
        assert result.confidence == pytest.approx(90)

    def test_doubtful_info(self, scorer):
        result = scorer.score(get_scenario("case3_doubtful_info"))

        assert result.breakdown.source_score == 50
        assert result.breakdown.citation_score == 40
        assert result.breakdown.language_score == 80
        assert result.score == pytest.approx(56)
        assert result.level == CredibilityLevel.DOUBTFUL
        assert result.confidence == pytest.approx(35)

    def test_scoring_is_deterministic(self, scorer):
        info = get_scenario("case3_doubtful_info")
        first = scorer.score(info)
        second = scorer.score(info)
        assert first.model_dump(exclude={"timestamp"}) == second.model_dump(exclude={"timestamp"})

    def test_unknown_scenario(self):
        with pytest.raises(KeyError, match="case1_false_info"):
            get_scenario("case9")

    def test_every_scenario_scores(self, scorer):
        levels = {scorer.score(info).level for info in TEST_SCENARIOS.values()}
        assert levels == set(CredibilityLevel)


class TestSubScores:
    """Test the individual criteria and clamping."""

    def test_source_score_clamped_high(self, scorer, make_input):
        info = make_input(source={"type": "official", "reputation": 1.0})
        assert scorer.calculate_breakdown(info).source_score == 100

    def test_source_score_clamped_low(self, scorer, make_input):
        info = make_input(source={"type": "social", "reputation": 0.05})
        assert scorer.calculate_breakdown(info).source_score == 0

    def test_news_adjustment(self, scorer, make_input):
        info = make_input(source={"type": "news", "reputation": 0.6})
        assert scorer.calculate_breakdown(info).source_score == pytest.approx(70)

    def test_citations_capped_before_references_bonus(self, scorer, make_input):
        info = make_input(
            metadata={"hasCitations": True, "citationCount": 4, "hasReferences": True}
        )
        # 4 * 20 + 20
        assert scorer.calculate_breakdown(info).citation_score == 100

    def test_citation_count_ignored_without_flag(self, scorer, make_input):
        info = make_input(
            metadata={"hasCitations": False, "citationCount": 7, "hasReferences": True}
        )
        assert scorer.calculate_breakdown(info).citation_score == 20

    def test_expert_and_anonymous_apply_independently(self, scorer, make_input):
        info = make_input(
            author={"isAnonymous": True, "knownExpert": True},
            metadata={"publicationDate": "2024-01-01"},
        )
        # 100 + 20 - 30
        assert scorer.calculate_breakdown(info).language_score == 90

    def test_language_score_never_negative(self, make_input):
        scorer = CredibilityScorer(emotional_language_penalty=90)
        info = make_input(
            author={"isAnonymous": True},
            metadata={"hasEmotionalLanguage": True},
        )
        assert scorer.calculate_breakdown(info).language_score == 0

    def test_breakdown_values_rounded(self, scorer, make_input):
        info = make_input(source={"type": "blog", "reputation": 0.3333})
        assert scorer.calculate_breakdown(info).source_score == 33.33


class TestContradiction:
    """Test the contradiction detector extension point."""

    def test_default_score(self, scorer, make_input):
        assert scorer.calculate_breakdown(make_input()).contradiction_score == 80

    def test_detector_is_used(self, make_input):
        detector = MagicMock(return_value=25)
        scorer = CredibilityScorer(contradiction_detector=detector)
        info = make_input()

        assert scorer.calculate_breakdown(info).contradiction_score == 25
        detector.assert_called_once_with(info)

    def test_detector_result_clamped(self, make_input):
        scorer = CredibilityScorer(contradiction_detector=lambda info: 250)
        assert scorer.calculate_breakdown(make_input()).contradiction_score == 100


class TestConfidence:
    def test_midpoint_components_give_zero(self):
        breakdown = ScoreBreakdown(
            source_score=50, citation_score=50, language_score=50, contradiction_score=50
        )
        assert calculate_confidence(breakdown) == 0

    def test_extreme_components_give_full(self):
        breakdown = ScoreBreakdown(
            source_score=0, citation_score=100, language_score=0, contradiction_score=100
        )
        assert calculate_confidence(breakdown) == 100

    def test_rounded_to_two_decimals(self):
        breakdown = ScoreBreakdown(
            source_score=33.33, citation_score=50, language_score=50, contradiction_score=50
        )
        confidence = calculate_confidence(breakdown)
        assert confidence == round(confidence, 2)
        assert confidence == pytest.approx(8.335, abs=0.006)


class TestReasoning:
    """Test the explanation sentences."""

    def test_suspect_reasoning(self, scorer):
        result = scorer.score(get_scenario("case1_false_info"))
        assert result.reasoning == [
            "Information classified as suspect based on multi-criteria analysis.",
            "Source credibility is questionable (unknown source with limited reputation).",
            "No citations found, reducing credibility assessment.",
            "Emotional language detected, which may indicate bias.",
            "Anonymous authorship raises credibility concerns.",
        ]

    def test_credible_reasoning(self, scorer):
        result = scorer.score(get_scenario("case2_credible_info"))
        assert result.reasoning == [
            "Information classified as credible based on multi-criteria analysis.",
            "Source appears reliable (official source with good reputation).",
            "Information includes 5 citations, supporting credibility.",
            "Author appears to be a recognized expert in the field.",
        ]

    def test_mid_range_source_has_no_source_sentence(self, scorer):
        result = scorer.score(get_scenario("case3_doubtful_info"))
        assert not any(s.startswith("Source") for s in result.reasoning)
        assert "Information includes 2 citations, supporting credibility." in result.reasoning

    def test_expert_and_anonymous_both_reported(self, scorer, make_input):
        result = scorer.score(make_input(author={"isAnonymous": True, "knownExpert": True}))
        assert "Author appears to be a recognized expert in the field." in result.reasoning
        assert "Anonymous authorship raises credibility concerns." in result.reasoning


class TestSourceAdjustments:
    """Test the source-type registry and per-scorer overrides."""

    def test_registry_defaults(self):
        assert sources.get_source_adjustment("official") == 20
        assert sources.get_source_adjustment(SourceType.UNKNOWN) == -30
        assert sources.get_source_adjustment("unregistered") == 0

    def test_update_adjustment(self, monkeypatch, scorer, make_input):
        monkeypatch.setitem(sources.SOURCE_TYPE_ADJUSTMENTS, "blog", 0)
        sources.update_source_adjustment("blog", 15)

        info = make_input(source={"type": "blog", "reputation": 0.5})
        assert scorer.calculate_breakdown(info).source_score == 65

    def test_update_adjustment_out_of_range(self):
        with pytest.raises(ValueError):
            sources.update_source_adjustment("blog", 150)

    def test_config_override_wins_over_registry(self, make_input):
        config = CredibilityConfig(source_adjustments={"blog": -10})
        scorer = CredibilityScorer.from_config(config)

        info = make_input(source={"type": "blog", "reputation": 0.5})
        assert scorer.calculate_breakdown(info).source_score == 40

    def test_from_config_weights(self, make_input):
        config = CredibilityConfig(
            source_weight=1, citation_weight=0, language_weight=0, contradiction_weight=0
        )
        scorer = CredibilityScorer.from_config(config)
        info = make_input(source={"type": "blog", "reputation": 0.42})
        assert scorer.score(info).score == pytest.approx(42)
