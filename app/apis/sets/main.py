from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.apis.deps import CurrentUser
from app.core.config import settings
from app.core.db.base import get_session
from app.core.db_services import FlashcardSetService
from app.core.logging import get_logger
from .schemas import (
    CardIn,
    CardRead,
    CardsInserted,
    SetCardsAppend,
    SetCreate,
    SetDetail,
    SetRead,
    SetRename,
    SetSummary,
)

logger = get_logger(__name__)

router = APIRouter()


def _set_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Set not found")


def _card_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Card not found")


@router.get(
    f"/{settings.app.version}/sets",
    response_model=list[SetSummary],
    tags=["sets"],
)
async def list_sets(
    current_user: CurrentUser,
    session: AsyncSession = Depends(get_session),
):
    rows = await FlashcardSetService(session).list_sets(current_user.id)
    return [
        SetSummary(**SetRead.model_validate(s).model_dump(), card_count=count)
        for s, count in rows
    ]


@router.post(
    f"/{settings.app.version}/sets",
    response_model=SetDetail,
    status_code=status.HTTP_201_CREATED,
    tags=["sets"],
)
async def create_set(
    payload: SetCreate,
    current_user: CurrentUser,
    session: AsyncSession = Depends(get_session),
):
    """Save a named set of cards for the current user."""
    db_set = await FlashcardSetService(session).create_set(
        current_user.id, payload.name, payload.cards
    )
    logger.info("Created set %s with %d cards", db_set.id, len(db_set.flashcards))
    return SetDetail.model_validate(db_set)


@router.get(
    f"/{settings.app.version}/sets/{{set_id}}",
    response_model=SetDetail,
    tags=["sets"],
)
async def get_set(
    set_id: int,
    current_user: CurrentUser,
    session: AsyncSession = Depends(get_session),
):
    db_set = await FlashcardSetService(session).get_set(current_user.id, set_id)
    if db_set is None:
        raise _set_not_found()
    return SetDetail.model_validate(db_set)


@router.patch(
    f"/{settings.app.version}/sets/{{set_id}}",
    response_model=SetRead,
    tags=["sets"],
)
async def rename_set(
    set_id: int,
    payload: SetRename,
    current_user: CurrentUser,
    session: AsyncSession = Depends(get_session),
):
    db_set = await FlashcardSetService(session).rename_set(
        current_user.id, set_id, payload.name
    )
    if db_set is None:
        raise _set_not_found()
    return SetRead.model_validate(db_set)


@router.delete(
    f"/{settings.app.version}/sets/{{set_id}}",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["sets"],
)
async def delete_set(
    set_id: int,
    current_user: CurrentUser,
    session: AsyncSession = Depends(get_session),
):
    if not await FlashcardSetService(session).delete_set(current_user.id, set_id):
        raise _set_not_found()
    logger.info("Deleted set %s", set_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    f"/{settings.app.version}/sets/{{set_id}}/cards",
    response_model=CardsInserted,
    status_code=status.HTTP_201_CREATED,
    tags=["sets"],
)
async def add_cards(
    set_id: int,
    payload: SetCardsAppend,
    current_user: CurrentUser,
    session: AsyncSession = Depends(get_session),
):
    """Append cards to the end of an existing set."""
    inserted = await FlashcardSetService(session).add_cards(
        current_user.id, set_id, payload.cards
    )
    if inserted is None:
        raise _set_not_found()
    return CardsInserted(inserted=inserted)


@router.patch(
    f"/{settings.app.version}/sets/{{set_id}}/cards/{{card_id}}",
    response_model=CardRead,
    tags=["sets"],
)
async def update_card(
    set_id: int,
    card_id: int,
    payload: CardIn,
    current_user: CurrentUser,
    session: AsyncSession = Depends(get_session),
):
    card = await FlashcardSetService(session).update_card(
        current_user.id, set_id, card_id, payload.question, payload.answer
    )
    if card is None:
        raise _card_not_found()
    return CardRead.model_validate(card)


@router.delete(
    f"/{settings.app.version}/sets/{{set_id}}/cards/{{card_id}}",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["sets"],
)
async def delete_card(
    set_id: int,
    card_id: int,
    current_user: CurrentUser,
    session: AsyncSession = Depends(get_session),
):
    if not await FlashcardSetService(session).delete_card(current_user.id, set_id, card_id):
        raise _card_not_found()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
