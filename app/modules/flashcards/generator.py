"""Flashcard generation using pydantic-ai.

Card lists are requested as plain-text completions and run through the
completion parser, so both JSON arrays and ``Q:``/``A:`` text are accepted.
Single-card regeneration and content analysis use structured output.

Imports for the LLM providers are kept lazy to avoid import-time errors when
credentials or optional provider packages are missing.
"""

from __future__ import annotations

import json
import re
from typing import Any, Optional, Sequence, TypeVar

from pydantic_ai import Agent
from pydantic_ai.exceptions import ModelHTTPError, UnexpectedModelBehavior
from pydantic_ai.models import Model
from pydantic_ai.settings import ModelSettings

from app.core.config import settings
from app.core.logging import get_logger
from app.modules.flashcards.errors import (
    CompletionFormatError,
    ModelProviderError,
    NoValidCardsError,
    ProviderNotConfiguredError,
)
from app.modules.flashcards.models import (
    ContentAnalysis,
    ContentGuidance,
    Flashcard,
    GeneratedCard,
    GenerationOptions,
    RawContentAnalysis,
    VocabularyTerm,
)
from app.modules.flashcards.models.analysis import CONTENT_TYPES, GUIDANCE_APPROACHES
from app.modules.flashcards.parser import is_valid_card, parse_completion_to_cards
from app.modules.flashcards import prompts

logger = get_logger(__name__)

OutputT = TypeVar("OutputT")

_FENCE_RE = re.compile(r"```json\n?|\n?```")
_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


def _build_google_model() -> Model:
    """Build Google Gemini model for pydantic-ai (lazy import)."""
    from pydantic_ai.models.google import GoogleModel
    from pydantic_ai.providers.google import GoogleProvider

    if not settings.llm.gemini_api_key:
        raise ProviderNotConfiguredError(details="GEMINI_API_KEY is not set")
    provider = GoogleProvider(api_key=settings.llm.gemini_api_key)
    return GoogleModel(settings.llm.generation_model, provider=provider)


def _build_openai_model() -> Model:
    from pydantic_ai.models.openai import OpenAIChatModel
    from pydantic_ai.providers.openai import OpenAIProvider

    if not settings.llm.openai_api_key:
        raise ProviderNotConfiguredError(details="OPENAI_API_KEY is not set")
    provider = OpenAIProvider(api_key=settings.llm.openai_api_key)
    return OpenAIChatModel(settings.llm.openai_model, provider=provider)


def _build_openrouter_model() -> Model:
    """Build OpenRouter model via OpenAI-compatible provider (lazy import)."""
    from pydantic_ai.models.openai import OpenAIChatModel
    from pydantic_ai.providers.openai import OpenAIProvider

    if not settings.llm.openrouter_api_key:
        raise ProviderNotConfiguredError(details="OPENROUTER_API_KEY is not set")
    provider = OpenAIProvider(
        api_key=settings.llm.openrouter_api_key,
        base_url="https://openrouter.ai/api/v1",
    )
    return OpenAIChatModel(settings.llm.openrouter_model, provider=provider)


def build_model() -> Model:
    """Build the completion model selected by ``MODEL_PROVIDER``."""
    provider = (settings.llm.provider or "google").lower()
    if provider == "openrouter":
        return _build_openrouter_model()
    if provider == "openai":
        return _build_openai_model()
    return _build_google_model()


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text).strip()


def _unwrap_card_list(text: str) -> str:
    """Turn ``{"flashcards": [...]}`` into the bare array; leave anything else."""
    try:
        parsed = json.loads(text)
    except ValueError:
        return text
    if isinstance(parsed, dict) and isinstance(parsed.get("flashcards"), list):
        return json.dumps(parsed["flashcards"])
    return text


async def _run_agent(
    prompt: str,
    *,
    system_prompt: str,
    output_type: type[OutputT],
    model: Optional[Model],
    temperature: float,
    max_tokens: int,
    retries: int = 1,
) -> OutputT:
    agent: Agent[None, OutputT] = Agent[None, OutputT](
        model=model or build_model(),
        output_type=output_type,
        system_prompt=system_prompt,
        retries=retries,
    )
    try:
        res = await agent.run(
            prompt,
            model_settings=ModelSettings(temperature=temperature, max_tokens=max_tokens),
        )
    except UnexpectedModelBehavior as e:
        raise CompletionFormatError(details=str(e)) from e
    except ModelHTTPError as e:
        raise ModelProviderError(details=str(e)) from e
    return res.output


def _salvage_cards(text: str) -> list[dict[str, Any]]:
    """Keep the valid elements of the first `[...]` span, ignoring surrounding prose."""
    match = _ARRAY_RE.search(text)
    if match is None:
        return []
    try:
        parsed = json.loads(match.group(0))
    except (ValueError, RecursionError):
        return []
    if not isinstance(parsed, list):
        return []
    return [dict(c) for c in parsed if is_valid_card(c)]


def _clean_cards(raw_cards: Sequence[dict[str, Any]]) -> list[dict[str, Any]]:
    """Trim question/answer text and drop cards left empty."""
    cleaned = []
    for card in raw_cards:
        q = str(card.get("question", "")).strip()
        a = str(card.get("answer", "")).strip()
        if q and a:
            cleaned.append({**card, "question": q, "answer": a})
    return cleaned


async def generate_cards(
    options: GenerationOptions, *, model: Optional[Model] = None
) -> list[Flashcard]:
    """Generate flashcards from source text."""
    logger.info(
        "Generating flashcards: text_length=%d word_count=%d content_type=%s requested=%s",
        len(options.text),
        prompts.word_count(options.text),
        options.analysis.content_type if options.analysis else "unknown",
        options.card_count or "auto",
    )
    completion = await _run_agent(
        prompts.build_generation_prompt(options),
        system_prompt=prompts.GENERATION_SYSTEM_PROMPT,
        output_type=str,
        model=model,
        temperature=settings.llm.temperature,
        max_tokens=settings.llm.max_tokens,
    )

    text = _unwrap_card_list(strip_code_fences(completion or ""))
    parsed = parse_completion_to_cards(text)
    if not parsed:
        parsed = _salvage_cards(text)
        if parsed:
            logger.warning("Recovered %d flashcards from a partially valid response", len(parsed))
    cards = [
        Flashcard(question=c["question"], answer=c["answer"])
        for c in _clean_cards(parsed)
    ]
    if not cards:
        raise NoValidCardsError(details="No valid flashcards were generated from the content")

    logger.info("Successfully generated %d flashcards", len(cards))
    return cards


async def regenerate_card(
    card: Flashcard,
    instruction: str,
    *,
    context: Optional[str] = None,
    content_type: Optional[str] = None,
    model: Optional[Model] = None,
) -> Flashcard:
    """Rewrite a single card according to ``instruction``."""
    instruction = instruction.strip()
    logger.info(
        "Regenerating card: instruction=%r content_type=%s has_context=%s",
        instruction,
        content_type or "unknown",
        bool(context),
    )
    result = await _run_agent(
        prompts.build_regeneration_prompt(card, instruction, context, content_type),
        system_prompt=prompts.REGENERATION_SYSTEM_PROMPT,
        output_type=Flashcard,
        model=model,
        temperature=settings.llm.temperature,
        max_tokens=800,
        retries=2,
    )

    final = Flashcard(question=result.question.strip(), answer=result.answer.strip())
    if not final.question or not final.answer:
        raise CompletionFormatError(
            "Generated card format is invalid - please try again",
            details="Regenerated card has an empty question or answer",
        )
    if final.question == card.question and final.answer == card.answer:
        logger.warning(
            "Regenerated card is identical to original - model may not have understood instruction"
        )
    return final


async def improve_set(
    cards: Sequence[GeneratedCard],
    improvement: str,
    *,
    custom_instruction: Optional[str] = None,
    context: Optional[str] = None,
    content_type: Optional[str] = None,
    target_card_count: Optional[int] = None,
    model: Optional[Model] = None,
) -> list[GeneratedCard]:
    """Apply a set-wide improvement; returned cards keep ``id``/``isNew`` when echoed."""
    logger.info(
        "Improving flashcard set: card_count=%d improvement=%s content_type=%s",
        len(cards),
        improvement,
        content_type or "unknown",
    )
    payload = [c.model_dump(include={"id", "question", "answer"}) for c in cards]
    completion = await _run_agent(
        prompts.build_improvement_prompt(
            payload,
            improvement,
            custom_instruction=custom_instruction,
            context=context,
            content_type=content_type,
            target_count=target_card_count,
        ),
        system_prompt=prompts.IMPROVEMENT_SYSTEM_PROMPT,
        output_type=str,
        model=model,
        temperature=settings.llm.temperature,
        max_tokens=settings.llm.max_tokens,
    )

    parsed = _clean_cards(parse_completion_to_cards(strip_code_fences(completion or "")))
    if not parsed:
        raise NoValidCardsError(
            "AI response format error - please try again",
            details="No valid improved cards were returned",
        )

    improved = []
    for c in parsed:
        card_id = c.get("id")
        is_new = c.get("isNew", c.get("is_new"))
        improved.append(
            GeneratedCard(
                question=c["question"],
                answer=c["answer"],
                id=str(card_id) if card_id is not None else None,
                is_new=is_new if isinstance(is_new, bool) else None,
            )
        )
    logger.info("Successfully improved set: %d cards", len(improved))
    return improved


def _clip(value: Any, limit: int) -> str:
    return str(value)[:limit]


def sanitize_analysis(raw: RawContentAnalysis) -> ContentAnalysis:
    """Coerce a loosely-shaped analysis into bounded, valid values."""
    guidance = raw.content_guidance
    confidence = raw.confidence or 0.5

    return ContentAnalysis(
        content_type=raw.content_type if raw.content_type in CONTENT_TYPES else "other",
        confidence=max(0.0, min(1.0, confidence)),
        summary=_clip(raw.summary or "Content analysis completed", 200),
        key_topics=[_clip(t, 50) for t in raw.key_topics[:8]],
        vocabulary_terms=[
            VocabularyTerm(
                term=_clip(t.term or "", 100),
                definition=_clip(t.definition, 300) if t.definition else None,
            )
            for t in raw.vocabulary_terms[:50]
        ],
        content_guidance=ContentGuidance(
            approach=guidance.approach if guidance.approach in GUIDANCE_APPROACHES else "balanced",
            rationale=_clip(guidance.rationale or "Balanced approach recommended", 300),
            expected_range=_clip(guidance.expected_range or "5-15 cards", 50),
        ),
        suggested_focus=[_clip(f, 50) for f in raw.suggested_focus[:6]],
        reasoning=_clip(raw.reasoning or "Analysis completed", 500),
    )


async def analyze_content(text: str, *, model: Optional[Model] = None) -> ContentAnalysis:
    """Classify source text and recommend a generation approach."""
    logger.info(
        "Analyzing content: text_length=%d word_count=%d",
        len(text),
        prompts.word_count(text),
    )
    raw = await _run_agent(
        prompts.build_analysis_prompt(text),
        system_prompt=prompts.ANALYSIS_SYSTEM_PROMPT,
        output_type=RawContentAnalysis,
        model=model,
        temperature=0.3,
        max_tokens=1500,
        retries=2,
    )
    analysis = sanitize_analysis(raw)
    logger.info(
        "Content analysis completed: content_type=%s confidence=%.2f approach=%s terms=%d",
        analysis.content_type,
        analysis.confidence,
        analysis.content_guidance.approach,
        len(analysis.vocabulary_terms),
    )
    return analysis
