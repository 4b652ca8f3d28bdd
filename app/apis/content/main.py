from fastapi import APIRouter, HTTPException, status

from app.apis.deps import LLMModel, raise_http_error
from app.core.config import settings
from app.modules.flashcards.errors import FlashcardServiceError
from app.modules.flashcards.generator import analyze_content
from app.modules.flashcards.prompts import word_count
from .schemas import AnalyzeMetadata, AnalyzeRequest, AnalyzeResponse

MIN_TEXT_LENGTH = 10

router = APIRouter()


@router.post(
    f"/{settings.app.version}/content/analyze",
    response_model=AnalyzeResponse,
    tags=["content"],
)
async def analyze(req: AnalyzeRequest, model: LLMModel) -> AnalyzeResponse:
    """Classify the text and suggest how to build cards from it."""
    if len(req.text.strip()) < MIN_TEXT_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Text content is required and must be at least 10 characters long",
        )
    try:
        analysis = await analyze_content(req.text, model=model)
    except FlashcardServiceError as e:
        raise_http_error(e)
    return AnalyzeResponse(
        analysis=analysis,
        metadata=AnalyzeMetadata(
            content_length=len(req.text), word_count=word_count(req.text)
        ),
    )
