"""Database service for user-owned flashcard sets and their cards."""

from __future__ import annotations

from typing import Iterable, Optional, Protocol
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from app.core.db.schemas.flashcards import Flashcard, FlashcardSet


class CardLike(Protocol):
    question: str
    answer: str


class FlashcardSetService:
    """All queries are scoped to the owning user; foreign sets look missing."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _owned_set(
        self, user_id: int, set_id: int, *, with_cards: bool = False
    ) -> Optional[FlashcardSet]:
        query = select(FlashcardSet).where(
            FlashcardSet.id == set_id, FlashcardSet.user_id == user_id
        )
        if with_cards:
            query = query.options(selectinload(FlashcardSet.flashcards)).execution_options(
                populate_existing=True
            )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_sets(self, user_id: int) -> list[tuple[FlashcardSet, int]]:
        """Return ``(set, card_count)`` pairs, newest first."""
        rows = await self.session.execute(
            select(FlashcardSet, func.count(Flashcard.id))
            .outerjoin(Flashcard, Flashcard.flashcard_set_id == FlashcardSet.id)
            .where(FlashcardSet.user_id == user_id)
            .group_by(FlashcardSet.id)
            .order_by(FlashcardSet.created_at.desc(), FlashcardSet.id.desc())
        )
        return [(s, count) for s, count in rows.all()]

    async def create_set(
        self, user_id: int, name: str, cards: Iterable[CardLike]
    ) -> FlashcardSet:
        """Create a named set with its cards in the given order."""
        db_set = FlashcardSet(user_id=user_id, name=name.strip())
        self.session.add(db_set)
        await self.session.flush()

        for index, card in enumerate(cards):
            self.session.add(
                Flashcard(
                    flashcard_set_id=db_set.id,
                    question=card.question,
                    answer=card.answer,
                    order_index=index,
                )
            )

        await self.session.commit()
        return await self.get_set(user_id, db_set.id)

    async def get_set(self, user_id: int, set_id: int) -> Optional[FlashcardSet]:
        return await self._owned_set(user_id, set_id, with_cards=True)

    async def rename_set(self, user_id: int, set_id: int, name: str) -> Optional[FlashcardSet]:
        db_set = await self._owned_set(user_id, set_id)
        if db_set is None:
            return None
        db_set.name = name.strip()
        await self.session.commit()
        await self.session.refresh(db_set)
        return db_set

    async def delete_set(self, user_id: int, set_id: int) -> bool:
        db_set = await self._owned_set(user_id, set_id, with_cards=True)
        if db_set is None:
            return False
        await self.session.delete(db_set)
        await self.session.commit()
        return True

    async def add_cards(
        self, user_id: int, set_id: int, cards: Iterable[CardLike]
    ) -> Optional[int]:
        """Append cards after the current last position; ``None`` if no such set."""
        db_set = await self._owned_set(user_id, set_id)
        if db_set is None:
            return None

        last_index = (
            await self.session.execute(
                select(func.max(Flashcard.order_index)).where(
                    Flashcard.flashcard_set_id == set_id
                )
            )
        ).scalar()
        start = 0 if last_index is None else last_index + 1

        inserted = 0
        for offset, card in enumerate(cards):
            self.session.add(
                Flashcard(
                    flashcard_set_id=set_id,
                    question=card.question,
                    answer=card.answer,
                    order_index=start + offset,
                )
            )
            inserted += 1

        await self.session.commit()
        return inserted

    async def _owned_card(
        self, user_id: int, set_id: int, card_id: int
    ) -> Optional[Flashcard]:
        result = await self.session.execute(
            select(Flashcard)
            .join(FlashcardSet, Flashcard.flashcard_set_id == FlashcardSet.id)
            .where(
                Flashcard.id == card_id,
                Flashcard.flashcard_set_id == set_id,
                FlashcardSet.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def update_card(
        self, user_id: int, set_id: int, card_id: int, question: str, answer: str
    ) -> Optional[Flashcard]:
        card = await self._owned_card(user_id, set_id, card_id)
        if card is None:
            return None
        card.question = question
        card.answer = answer
        await self.session.commit()
        await self.session.refresh(card)
        return card

    async def delete_card(self, user_id: int, set_id: int, card_id: int) -> bool:
        card = await self._owned_card(user_id, set_id, card_id)
        if card is None:
            return False
        await self.session.delete(card)
        await self.session.commit()
        return True
