"""Errors raised by flashcard generation and document extraction.

Each error carries the HTTP status the API layer should answer with and a
message safe to show to the user.
"""

from __future__ import annotations


class FlashcardServiceError(Exception):
    """Base class for failures surfaced to API clients."""

    status_code: int = 500
    default_message: str = "Failed to process flashcards"

    def __init__(self, message: str | None = None, *, details: str | None = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ProviderNotConfiguredError(FlashcardServiceError):
    status_code = 500
    default_message = "AI provider configuration error"


class CompletionFormatError(FlashcardServiceError):
    status_code = 502
    default_message = "AI response format error - please try again"


class ModelProviderError(FlashcardServiceError):
    status_code = 502
    default_message = "AI provider request failed - please try again"


class NoValidCardsError(FlashcardServiceError):
    status_code = 400
    default_message = (
        "Could not generate flashcards from this content. "
        "Try providing more detailed text."
    )


class DocumentFetchError(FlashcardServiceError):
    status_code = 502
    default_message = "Failed to fetch file"


class DocumentTooLargeError(FlashcardServiceError):
    status_code = 413
    default_message = "Document is too large"


class DocumentParseError(FlashcardServiceError):
    status_code = 400
    default_message = "Could not read text from document"
