"""Models describing source text analysis and generation options."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

ContentType = Literal["vocabulary", "concepts", "mixed", "other"]
GuidanceApproach = Literal["one-per-term", "concept-coverage", "balanced"]

CONTENT_TYPES: tuple[str, ...] = ("vocabulary", "concepts", "mixed", "other")
GUIDANCE_APPROACHES: tuple[str, ...] = ("one-per-term", "concept-coverage", "balanced")


class VocabularyTerm(BaseModel):
    term: str
    definition: Optional[str] = None


class ContentGuidance(BaseModel):
    approach: GuidanceApproach = "balanced"
    rationale: str = "Balanced approach recommended"
    expected_range: str = "5-15 cards"


class ContentAnalysis(BaseModel):
    content_type: ContentType = "other"
    confidence: float = 0.5
    summary: str = "Content analysis completed"
    key_topics: list[str] = Field(default_factory=list)
    vocabulary_terms: list[VocabularyTerm] = Field(default_factory=list)
    content_guidance: ContentGuidance = Field(default_factory=ContentGuidance)
    suggested_focus: list[str] = Field(default_factory=list)
    reasoning: str = "Analysis completed"


class RawVocabularyTerm(BaseModel):
    term: str = ""
    definition: Optional[str] = None


class RawContentGuidance(BaseModel):
    approach: str = ""
    rationale: str = ""
    expected_range: str = ""


class RawContentAnalysis(BaseModel):
    """Lenient structured output; sanitized into ``ContentAnalysis``."""

    content_type: str = ""
    confidence: Optional[float] = None
    summary: str = ""
    key_topics: list[str] = Field(default_factory=list)
    vocabulary_terms: list[RawVocabularyTerm] = Field(default_factory=list)
    content_guidance: RawContentGuidance = Field(default_factory=RawContentGuidance)
    suggested_focus: list[str] = Field(default_factory=list)
    reasoning: str = ""


class GenerationOptions(BaseModel):
    """Inputs for generating a fresh set of cards from text."""

    text: str
    analysis: Optional[ContentAnalysis] = None
    card_count: Optional[int] = Field(default=None, ge=1, le=100)
    focus_areas: Optional[list[str]] = None
    custom_instructions: Optional[str] = None
