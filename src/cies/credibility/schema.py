# src/cies/credibility/schema.py
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class SourceType(str, Enum):
    OFFICIAL = "official"
    NEWS = "news"
    BLOG = "blog"
    SOCIAL = "social"
    UNKNOWN = "unknown"


class CredibilityLevel(str, Enum):
    SUSPECT = "suspect"
    DOUBTFUL = "doubtful"
    CREDIBLE = "credible"


class SourceDescriptor(BaseModel):
    type: SourceType = Field(..., description="Source category")
    reputation: float = Field(..., ge=0, le=1, description="Reputation (0-1)")
    url: Optional[str] = None
    domain: Optional[str] = None


class AuthorDescriptor(BaseModel):
    is_anonymous: bool = Field(..., alias="isAnonymous")
    known_expert: bool = Field(False, alias="knownExpert")
    name: Optional[str] = None
    credentials: Optional[str] = None

    class Config:
        populate_by_name = True


class ContentMetadata(BaseModel):
    has_emotional_language: bool = Field(False, alias="hasEmotionalLanguage")
    has_citations: bool = Field(False, alias="hasCitations")
    citation_count: int = Field(0, ge=0, alias="citationCount")
    has_references: bool = Field(False, alias="hasReferences")
    publication_date: Optional[str] = Field(None, alias="publicationDate")
    last_modified: Optional[str] = Field(None, alias="lastModified")
    language: Optional[str] = None
    reference_urls: List[str] = Field(default_factory=list, alias="referenceUrls")

    class Config:
        populate_by_name = True


class EvaluationInput(BaseModel):
    content: str = Field(..., description="Information to evaluate (natural key)")
    source: SourceDescriptor
    author: AuthorDescriptor
    metadata: ContentMetadata = Field(default_factory=ContentMetadata)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("content must not be empty")
        return v


class ScoreBreakdown(BaseModel):
    source_score: float = Field(..., ge=0, le=100, alias="sourceScore")
    citation_score: float = Field(..., ge=0, le=100, alias="citationScore")
    language_score: float = Field(..., ge=0, le=100, alias="languageScore")
    contradiction_score: float = Field(..., ge=0, le=100, alias="contradictionScore")

    def components(self) -> List[float]:
        return [
            self.source_score,
            self.citation_score,
            self.language_score,
            self.contradiction_score,
        ]

    class Config:
        frozen = True
        populate_by_name = True


class EvaluationResult(BaseModel):
    score: float = Field(..., ge=0, le=100, description="Final score (0-100)")
    level: CredibilityLevel
    breakdown: ScoreBreakdown
    reasoning: List[str] = Field(default_factory=list)
    confidence: float = Field(..., ge=0, le=100)
    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    class Config:
        frozen = True
        populate_by_name = True


class StoredEvaluation(BaseModel):
    """An evaluation as read back from the fact store."""

    content: str
    level: CredibilityLevel
    score: float
    explanation: str
    breakdown: Optional[ScoreBreakdown] = None
    timestamp: Optional[str] = None


class BatchItemResult(BaseModel):
    index: int
    success: bool
    data: Optional[EvaluationResult] = None
    error: Optional[str] = None
