from __future__ import annotations

from typing import Annotated, AsyncIterator, NoReturn

import httpx
from fastapi import Depends, HTTPException
from pydantic_ai.models import Model

from app.core.config import settings
from app.core.db.schemas.auth import User
from app.core.logging import get_logger, user_id_var
from app.modules.auth import current_active_user
from app.modules.flashcards.errors import FlashcardServiceError
from app.modules.flashcards.generator import build_model

logger = get_logger(__name__)


async def get_current_user(user: User = Depends(current_active_user)) -> User:
    user_id_var.set(str(user.id))
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


def get_llm_model() -> Model:
    """Completion model for this request, chosen from settings."""
    try:
        return build_model()
    except FlashcardServiceError as e:
        raise_http_error(e)


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(
        timeout=settings.extraction.fetch_timeout_seconds
    ) as client:
        yield client


LLMModel = Annotated[Model, Depends(get_llm_model)]
HTTPClient = Annotated[httpx.AsyncClient, Depends(get_http_client)]


def raise_http_error(error: FlashcardServiceError) -> NoReturn:
    """Log a service error and re-raise it as an HTTP response."""
    logger.error(
        "%s: %s (%s)", type(error).__name__, error.message, error.details or "no details"
    )
    raise HTTPException(status_code=error.status_code, detail=error.message) from error
