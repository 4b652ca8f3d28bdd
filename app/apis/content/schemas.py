from pydantic import BaseModel, Field

from app.modules.flashcards.models import ContentAnalysis


class AnalyzeRequest(BaseModel):
    text: str = Field(..., description="Source text to classify")


class AnalyzeMetadata(BaseModel):
    content_length: int
    word_count: int


class AnalyzeResponse(BaseModel):
    analysis: ContentAnalysis
    metadata: AnalyzeMetadata
