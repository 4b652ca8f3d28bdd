from .flashcards import Flashcard, GeneratedCard
from .analysis import (
    ContentAnalysis,
    ContentGuidance,
    GenerationOptions,
    RawContentAnalysis,
    VocabularyTerm,
)

__all__ = [
    "Flashcard",
    "GeneratedCard",
    "ContentAnalysis",
    "ContentGuidance",
    "GenerationOptions",
    "RawContentAnalysis",
    "VocabularyTerm",
]
