from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from app.modules.flashcards.models import ContentAnalysis, Flashcard, GeneratedCard


class GenerateRequest(BaseModel):
    text: str = Field(..., description="Source text to build flashcards from")
    analysis: Optional[ContentAnalysis] = None
    card_count: Optional[int] = Field(default=None, ge=1, le=100)
    focus_areas: Optional[list[str]] = None
    custom_instructions: Optional[str] = None


class GenerateMetadata(BaseModel):
    content_type: str
    requested_count: int | str
    actual_count: int
    content_length: int
    word_count: int
    focus_areas: list[str] = Field(default_factory=list)


class GenerateResponse(BaseModel):
    flashcards: list[Flashcard]
    metadata: GenerateMetadata


class RegenerateCardRequest(BaseModel):
    original_card: Flashcard
    instruction: str
    context: Optional[str] = None
    content_type: Optional[str] = None


class RegenerateMetadata(BaseModel):
    instruction: str
    content_type: str
    original_length: int
    new_length: int
    has_context: bool


class RegenerateCardResponse(BaseModel):
    card: Flashcard
    metadata: RegenerateMetadata


class ImproveSetRequest(BaseModel):
    cards: list[GeneratedCard] = Field(..., min_length=1)
    improvement: str
    custom_instruction: Optional[str] = None
    context: Optional[str] = None
    content_type: Optional[str] = None
    target_card_count: Optional[int] = Field(default=None, ge=1, le=100)


class ImproveSetResponse(BaseModel):
    cards: list[GeneratedCard]
    metadata: dict[str, Any] = Field(default_factory=dict)


class ExtractTextRequest(BaseModel):
    url: str = Field(..., min_length=1)


class ExtractTextResponse(BaseModel):
    text: str
