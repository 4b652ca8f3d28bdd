"""Pydantic models for flashcard drafts produced by generation.

Note: To keep provider structured-output schemas simple, we avoid complex
constraints (min/max lengths, formats, etc.). Validation is applied
post-generation instead.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Flashcard(BaseModel):
    """Simple question/answer flashcard."""

    question: str
    answer: str


class GeneratedCard(Flashcard):
    """A card returned by set improvement; may map back to an input card."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    id: Optional[str] = None
    is_new: Optional[bool] = Field(default=None, alias="isNew")
