"""Flashcards module exports."""

from .models.flashcards import Flashcard, GeneratedCard
from .parser import parse_completion_to_cards
from .generator import (
    analyze_content,
    generate_cards,
    improve_set,
    regenerate_card,
)

__all__ = [
    "Flashcard",
    "GeneratedCard",
    "parse_completion_to_cards",
    "analyze_content",
    "generate_cards",
    "improve_set",
    "regenerate_card",
]
