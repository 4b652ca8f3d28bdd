from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CardIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)


class CardRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    question: str
    answer: str
    order_index: int


class SetCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=200)
    cards: list[CardIn] = Field(..., min_length=1)


class SetRename(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=200)


class SetCardsAppend(BaseModel):
    cards: list[CardIn] = Field(..., min_length=1)


class SetRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    created_at: datetime
    updated_at: datetime


class SetSummary(SetRead):
    card_count: int


class SetDetail(SetRead):
    flashcards: list[CardRead] = Field(default_factory=list)


class CardsInserted(BaseModel):
    inserted: int
