# src/cies/core/coordinator.py

import logging
import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence, Union

from dateutil import parser as date_parser
from pydantic import ValidationError

from cies.core.config import CIESConfig
from cies.credibility.schema import (
    BatchItemResult,
    CredibilityLevel,
    EvaluationInput,
    EvaluationResult,
    ScoreBreakdown,
    StoredEvaluation,
)
from cies.credibility.scorer import CredibilityScorer, calculate_confidence
from cies.knowledge.filters import ArgumentFilter, matches_all
from cies.knowledge.schema import Fact, FactValidationError
from cies.knowledge.store import FactStore, FactStoreError

logger = logging.getLogger(__name__)

EVALUATION_PREDICATE = "evaluation"
EVALUATED_AT_PREFIX = "evaluated_at="

# Breakdown fields, each persisted under a predicate of the same name
SCORE_PREDICATES = (
    "source_score",
    "citation_score",
    "language_score",
    "contradiction_score",
)

SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")


def collapse_whitespace(text: str) -> str:
    return " ".join(text.split())


def content_identifier(content: str, length: int = 100) -> str:
    """
    Natural key for a piece of content.

    Trimmed, lowercased, whitespace-collapsed and truncated to ``length``
    characters. Contents that only differ past the prefix share a key.
    """
    return collapse_whitespace(content).lower()[:length]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class EvaluationCoordinator:
    """
    Evaluate-or-reuse workflow on top of the scorer and the fact store.

    A stored evaluation for equivalent content is reconstructed from facts
    without rescoring; otherwise the input is scored and the result is
    persisted as a batch of facts. Persistence failures never fail an
    evaluation.
    """

    def __init__(
        self,
        store: FactStore,
        scorer: Optional[CredibilityScorer] = None,
        identifier_length: int = 100,
        provenance: str = "auto-evaluation",
        expiration_days: int = 365,
        max_batch_size: int = 10,
    ):
        """
        Initialize the coordinator.

        Args:
            store: Shared fact store handle
            scorer: Credibility scorer (default parameters if omitted)
            identifier_length: Content prefix length used as the natural key
            provenance: Label written with every persisted evaluation batch
            expiration_days: Advisory retention written with every batch
            max_batch_size: Largest accepted batch for evaluate_batch()
        """
        self.store = store
        self.scorer = scorer or CredibilityScorer()
        self.identifier_length = identifier_length
        self.provenance = provenance
        self.expiration_days = expiration_days
        self.max_batch_size = max_batch_size

    @classmethod
    def from_config(
        cls, config: CIESConfig, store: Optional[FactStore] = None
    ) -> "EvaluationCoordinator":
        return cls(
            store=store or FactStore(config.store.facts_path),
            scorer=CredibilityScorer.from_config(config.credibility),
            identifier_length=config.evaluation.identifier_length,
            provenance=config.evaluation.provenance,
            expiration_days=config.evaluation.expiration_days,
            max_batch_size=config.evaluation.max_batch_size,
        )

    def identifier(self, content: str) -> str:
        return content_identifier(content, self.identifier_length)

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate_and_save(self, info: EvaluationInput) -> EvaluationResult:
        """
        Return the stored evaluation for equivalent content, or score and persist.

        Args:
            info: Validated evaluation input

        Returns:
            EvaluationResult, reconstructed from facts on a cache hit.
        """
        existing = self.find_existing(info.content)
        if existing is not None:
            logger.info(
                f"Reusing stored evaluation for '{self.identifier(info.content)[:50]}'"
            )
            return existing

        result = self.scorer.score(info)
        facts = self.build_facts(info, result)
        expires_at = date.today() + timedelta(days=self.expiration_days)

        try:
            self.store.append(facts, provenance=self.provenance, expires_at=expires_at)
        except (FactStoreError, FactValidationError) as e:
            logger.error(f"Failed to persist evaluation: {e}")

        return result

    def evaluate_batch(
        self, items: Sequence[Union[EvaluationInput, Dict[str, Any]]]
    ) -> List[BatchItemResult]:
        """
        Evaluate several items independently.

        Args:
            items: EvaluationInput objects or raw dicts in the JSON input shape

        Returns:
            One BatchItemResult per item, in input order.

        Raises:
            ValueError: If the batch is empty or larger than max_batch_size
        """
        if not items:
            raise ValueError("Invalid batch request: items are required")
        if len(items) > self.max_batch_size:
            raise ValueError(
                f"Batch size limit exceeded (max {self.max_batch_size} items)"
            )

        logger.info(f"Processing batch evaluation for {len(items)} items")
        results = []
        for index, item in enumerate(items):
            try:
                if not isinstance(item, EvaluationInput):
                    item = EvaluationInput.model_validate(item)
                results.append(
                    BatchItemResult(index=index, success=True, data=self.evaluate_and_save(item))
                )
            except ValidationError as e:
                logger.warning(f"Batch item {index} rejected: {e.error_count()} validation errors")
                results.append(BatchItemResult(index=index, success=False, error=str(e)))
        return results

    # ------------------------------------------------------------------
    # Fact construction
    # ------------------------------------------------------------------

    def build_facts(self, info: EvaluationInput, result: EvaluationResult) -> List[Fact]:
        """
        Decompose an input and its result into the facts persisted for it.

        The evaluation fact comes last so a reader that sees it also sees
        every sibling fact of the same batch.
        """
        content = collapse_whitespace(info.content)

        def fact(predicate: str, *args, comment: Optional[str] = None) -> Fact:
            return Fact(predicate=predicate, arguments=[content, *args], comment=comment)

        facts = [
            fact("source_type", info.source.type.value),
            fact("source_reputation", info.source.reputation),
        ]
        if info.source.url:
            facts.append(fact("source_url", info.source.url))
        if info.source.domain:
            facts.append(fact("source_domain", info.source.domain))

        facts.append(fact("author_anonymous", info.author.is_anonymous))
        facts.append(fact("author_expert", info.author.known_expert))
        if info.author.name:
            facts.append(fact("author_name", info.author.name))

        metadata = info.metadata
        facts.append(fact("has_emotional_language", metadata.has_emotional_language))
        facts.append(fact("has_citations", metadata.has_citations))
        facts.append(fact("citation_count", metadata.citation_count))
        facts.append(fact("has_references", metadata.has_references))
        if metadata.publication_date:
            facts.append(fact("publication_date", metadata.publication_date))

        facts.extend(fact(predicate) for predicate in self.derive_predicates(info))

        for predicate in SCORE_PREDICATES:
            facts.append(fact(predicate, getattr(result.breakdown, predicate)))

        facts.append(
            fact(
                EVALUATION_PREDICATE,
                result.level.value,
                result.score,
                " ".join(result.reasoning),
                comment=f"{EVALUATED_AT_PREFIX}{result.timestamp}",
            )
        )
        return facts

    def derive_predicates(
        self, info: EvaluationInput, now: Optional[datetime] = None
    ) -> List[str]:
        """
        Derive unary facts from citation counts and publication age.

        Returns:
            Predicate names among well_cited, poorly_cited, newly_published
            and outdated_content.
        """
        derived = []
        count = info.metadata.citation_count
        if count >= 5:
            derived.append("well_cited")
        elif count < 1:
            derived.append("poorly_cited")

        pub_date = info.metadata.publication_date
        if pub_date:
            try:
                published = date_parser.parse(pub_date)
            except (ValueError, OverflowError):
                logger.debug(f"Unparseable publication date '{pub_date}'")
                return derived

            if now is None:
                now = datetime.now(timezone.utc) if published.tzinfo else datetime.now()
            age_days = (now - published).days
            if age_days < 7:
                derived.append("newly_published")
            elif age_days > 365:
                derived.append("outdated_content")

        return derived

    # ------------------------------------------------------------------
    # Reading evaluations back
    # ------------------------------------------------------------------

    def _index_by_identifier(self, facts: Sequence[Fact]) -> Dict[str, Dict[str, Fact]]:
        """Latest fact per (identifier, predicate), in file order."""
        index: Dict[str, Dict[str, Fact]] = {}
        for fact in facts:
            content = fact.arguments[0]
            if not isinstance(content, str):
                continue
            index.setdefault(self.identifier(content), {})[fact.predicate] = fact
        return index

    @staticmethod
    def _breakdown_from(facts: Dict[str, Fact]) -> Optional[ScoreBreakdown]:
        values = {}
        for predicate in SCORE_PREDICATES:
            fact = facts.get(predicate)
            if fact is None or fact.arity != 2 or not _is_number(fact.arguments[1]):
                return None
            values[predicate] = fact.arguments[1]
        try:
            return ScoreBreakdown(**values)
        except ValidationError:
            return None

    @staticmethod
    def _evaluated_at(fact: Fact) -> Optional[str]:
        if fact.comment and fact.comment.startswith(EVALUATED_AT_PREFIX):
            return fact.comment[len(EVALUATED_AT_PREFIX):].strip()
        return None

    @staticmethod
    def _is_evaluation(fact: Optional[Fact]) -> bool:
        return (
            fact is not None
            and fact.arity == 4
            and isinstance(fact.arguments[1], str)
            and _is_number(fact.arguments[2])
        )

    def find_existing(self, content: str) -> Optional[EvaluationResult]:
        """
        Reconstruct a stored evaluation for equivalent content.

        Returns:
            The reconstructed EvaluationResult, or None if no complete
            evaluation (evaluation fact plus all four score facts) is stored.
        """
        key = self.identifier(content)
        facts = self.store.list(
            conditions=[(0, lambda v: isinstance(v, str) and self.identifier(v) == key)]
        )
        siblings = self._index_by_identifier(facts).get(key, {})

        evaluation = siblings.get(EVALUATION_PREDICATE)
        if not self._is_evaluation(evaluation):
            return None

        breakdown = self._breakdown_from(siblings)
        if breakdown is None:
            logger.warning(f"Stored evaluation for '{key[:50]}' has no complete score breakdown")
            return None

        _, level, score, explanation = evaluation.arguments
        try:
            return EvaluationResult(
                score=score,
                level=CredibilityLevel(level),
                breakdown=breakdown,
                reasoning=[s for s in SENTENCE_BOUNDARY.split(str(explanation).strip()) if s],
                confidence=calculate_confidence(breakdown),
                timestamp=self._evaluated_at(evaluation) or datetime.now(timezone.utc).isoformat(),
            )
        except ValueError as e:
            logger.warning(f"Stored evaluation for '{key[:50]}' is invalid: {e}")
            return None

    def query_evaluations(
        self,
        content: Optional[str] = None,
        level: Optional[Union[CredibilityLevel, str]] = None,
        min_score: Optional[float] = None,
        max_score: Optional[float] = None,
    ) -> List[StoredEvaluation]:
        """
        Search stored evaluations (latest per content identifier).

        Args:
            content: Case-insensitive substring of the evaluated content
            level: Credibility level to match
            min_score: Inclusive lower score bound
            max_score: Inclusive upper score bound

        Returns:
            Matching StoredEvaluation records in first-stored order.
        """
        conditions = []
        if content:
            conditions.append(ArgumentFilter.contains(0, content))
        if level is not None:
            conditions.append(ArgumentFilter.equals(1, CredibilityLevel(level).value))
        if min_score is not None or max_score is not None:
            conditions.append(ArgumentFilter.between(2, min_score, max_score))

        results = []
        for siblings in self._index_by_identifier(self.store.list()).values():
            evaluation = siblings.get(EVALUATION_PREDICATE)
            if not self._is_evaluation(evaluation) or not matches_all(evaluation, conditions):
                continue

            stored_content, stored_level, score, explanation = evaluation.arguments
            try:
                results.append(
                    StoredEvaluation(
                        content=stored_content,
                        level=CredibilityLevel(stored_level),
                        score=score,
                        explanation=str(explanation),
                        breakdown=self._breakdown_from(siblings),
                        timestamp=self._evaluated_at(evaluation),
                    )
                )
            except ValueError as e:
                logger.debug(f"Skipping invalid stored evaluation: {e}")

        logger.info(f"Found {len(results)} stored evaluations")
        return results
