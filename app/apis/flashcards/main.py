from __future__ import annotations

from typing import AsyncIterator

from fastapi import APIRouter, File, HTTPException, UploadFile, status

from app.apis.deps import HTTPClient, LLMModel, raise_http_error
from app.core.config import settings
from app.modules.flashcards.errors import FlashcardServiceError
from app.modules.flashcards.extraction import (
    extract_text_from_bytes,
    extract_text_from_url,
    read_limited,
)
from app.modules.flashcards.generator import (
    generate_cards,
    improve_set as _improve_set,
    regenerate_card as _regenerate_card,
)
from app.modules.flashcards.models import GenerationOptions
from app.modules.flashcards.prompts import word_count
from .schemas import (
    ExtractTextRequest,
    ExtractTextResponse,
    GenerateMetadata,
    GenerateRequest,
    GenerateResponse,
    ImproveSetRequest,
    ImproveSetResponse,
    RegenerateCardRequest,
    RegenerateCardResponse,
    RegenerateMetadata,
)

MIN_TEXT_LENGTH = 10
UPLOAD_CHUNK_SIZE = 64 * 1024

router = APIRouter()


async def _upload_chunks(file: UploadFile) -> AsyncIterator[bytes]:
    while True:
        chunk = await file.read(UPLOAD_CHUNK_SIZE)
        if not chunk:
            break
        yield chunk


@router.post(
    f"/{settings.app.version}/flashcards/generate",
    response_model=GenerateResponse,
    status_code=status.HTTP_200_OK,
    tags=["flashcards"],
)
async def generate(req: GenerateRequest, model: LLMModel) -> GenerateResponse:
    if len(req.text.strip()) < MIN_TEXT_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Text content is required and must be at least 10 characters long",
        )

    options = GenerationOptions(**req.model_dump(exclude={"analysis"}), analysis=req.analysis)
    try:
        cards = await generate_cards(options, model=model)
    except FlashcardServiceError as e:
        raise_http_error(e)

    focus = req.focus_areas or (req.analysis.suggested_focus if req.analysis else [])
    return GenerateResponse(
        flashcards=cards,
        metadata=GenerateMetadata(
            content_type=req.analysis.content_type if req.analysis else "unknown",
            requested_count=req.card_count or "auto",
            actual_count=len(cards),
            content_length=len(req.text),
            word_count=word_count(req.text),
            focus_areas=focus,
        ),
    )


@router.post(
    f"/{settings.app.version}/flashcards/regenerate-card",
    response_model=RegenerateCardResponse,
    tags=["flashcards"],
)
async def regenerate_card(
    req: RegenerateCardRequest, model: LLMModel
) -> RegenerateCardResponse:
    original = req.original_card
    if not original.question.strip() or not original.answer.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Original card with question and answer is required",
        )
    if not req.instruction.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Improvement instruction is required",
        )

    try:
        card = await _regenerate_card(
            original,
            req.instruction,
            context=req.context,
            content_type=req.content_type,
            model=model,
        )
    except FlashcardServiceError as e:
        raise_http_error(e)

    return RegenerateCardResponse(
        card=card,
        metadata=RegenerateMetadata(
            instruction=req.instruction.strip(),
            content_type=req.content_type or "unknown",
            original_length=len(original.question) + len(original.answer),
            new_length=len(card.question) + len(card.answer),
            has_context=bool(req.context),
        ),
    )


@router.post(
    f"/{settings.app.version}/flashcards/improve-set",
    response_model=ImproveSetResponse,
    response_model_by_alias=True,
    tags=["flashcards"],
)
async def improve_set(req: ImproveSetRequest, model: LLMModel) -> ImproveSetResponse:
    if not req.improvement.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Improvement type is required",
        )
    if any(not c.question.strip() or not c.answer.strip() for c in req.cards):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="All cards must have valid question and answer strings",
        )

    try:
        cards = await _improve_set(
            req.cards,
            req.improvement.strip(),
            custom_instruction=req.custom_instruction,
            context=req.context,
            content_type=req.content_type,
            target_card_count=req.target_card_count,
            model=model,
        )
    except FlashcardServiceError as e:
        raise_http_error(e)

    return ImproveSetResponse(
        cards=cards,
        metadata={
            "improvement": req.improvement.strip(),
            "original_count": len(req.cards),
            "improved_count": len(cards),
            "new_cards": sum(1 for c in cards if c.is_new),
            "content_type": req.content_type or "unknown",
        },
    )


@router.post(
    f"/{settings.app.version}/flashcards/extract-text",
    response_model=ExtractTextResponse,
    tags=["flashcards"],
)
async def extract_text(req: ExtractTextRequest, client: HTTPClient) -> ExtractTextResponse:
    try:
        text = await extract_text_from_url(req.url, client=client)
    except FlashcardServiceError as e:
        raise_http_error(e)
    return ExtractTextResponse(text=text)


@router.post(
    f"/{settings.app.version}/flashcards/extract-text/upload",
    response_model=ExtractTextResponse,
    tags=["flashcards"],
)
async def extract_text_upload(file: UploadFile = File(...)) -> ExtractTextResponse:
    try:
        content = await read_limited(_upload_chunks(file))
        text = extract_text_from_bytes(
            content, filename=file.filename, content_type=file.content_type
        )
    except FlashcardServiceError as e:
        raise_http_error(e)
    return ExtractTextResponse(text=text)
