"""Turn a raw LLM completion into flashcard drafts.

Two independent strategies are tried in order:

1. ``parse_json_cards``: the completion is a strict JSON array in which every
   element carries non-empty string ``question`` and ``answer`` fields. The
   array is accepted whole (extra properties included) or not at all.
2. ``parse_qa_cards``: a line scanner for the loose ``Q:`` / ``A:`` format,
   with multi-line answers.

``parse_completion_to_cards`` selects between them and is the only place
that logs. It never raises for string input.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from app.core.logging import get_logger

QUESTION_MARKER = "Q:"
ANSWER_MARKER = "A:"

log = get_logger(__name__)


def _reject_constant(name: str) -> Any:
    # json accepts NaN/Infinity by default; strict JSON does not
    raise ValueError(f"Invalid JSON constant: {name}")


def is_valid_card(item: Any) -> bool:
    """True when ``item`` is a mapping with non-blank string question/answer."""
    if not isinstance(item, dict):
        return False
    question = item.get("question")
    answer = item.get("answer")
    return (
        isinstance(question, str)
        and isinstance(answer, str)
        and question.strip() != ""
        and answer.strip() != ""
    )


def parse_json_cards(text: str) -> Optional[list[dict[str, Any]]]:
    """Strict JSON tier.

    Returns shallow copies of the cards when ``text`` is a non-empty JSON
    array of valid cards, ``None`` when it is well-formed JSON of any other
    shape. Raises ``ValueError`` when ``text`` is not JSON at all.
    """
    parsed = json.loads(text, parse_constant=_reject_constant)

    if isinstance(parsed, list) and parsed and all(is_valid_card(c) for c in parsed):
        return [dict(card) for card in parsed]
    return None


def parse_qa_cards(text: str) -> list[dict[str, str]]:
    """Line-based ``Q:`` / ``A:`` tier."""
    cards: list[dict[str, str]] = []
    question = ""
    answer = ""
    in_answer = False

    def flush() -> None:
        if question and answer:
            cards.append({"question": question.strip(), "answer": answer.strip()})

    for raw_line in text.split("\n"):
        line = raw_line.strip()

        if line.startswith(QUESTION_MARKER):
            flush()
            question = line[len(QUESTION_MARKER):].strip()
            answer = ""
            in_answer = False
        elif line.startswith(ANSWER_MARKER):
            answer = line[len(ANSWER_MARKER):].strip()
            in_answer = True
        elif in_answer and line:
            answer += "\n" + line
        else:
            # Blank line, or stray text outside an answer
            in_answer = False

    flush()
    return cards


def parse_completion_to_cards(
    text: Optional[str], *, logger: Optional[logging.Logger] = None
) -> list[dict[str, Any]]:
    """Parse a completion into ``{question, answer, ...}`` drafts.

    ``logger`` receives the single diagnostic this function emits: an error
    when text that looks like JSON (leading ``[`` or ``{``) fails to parse.
    """
    active = logger or log

    if not text or not text.strip():
        return []

    trimmed = text.strip()

    try:
        cards = parse_json_cards(trimmed)
    except (ValueError, RecursionError) as exc:
        if trimmed.startswith(("[", "{")):
            active.error("Failed to parse flashcards: %s", exc)
    else:
        if cards is not None:
            return cards

    return parse_qa_cards(trimmed)


__all__ = [
    "is_valid_card",
    "parse_json_cards",
    "parse_qa_cards",
    "parse_completion_to_cards",
]
