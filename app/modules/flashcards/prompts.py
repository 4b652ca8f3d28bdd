"""Prompt builders for flashcard generation, refinement and analysis."""

from __future__ import annotations

from typing import Optional, Sequence

from app.modules.flashcards.models import Flashcard, GenerationOptions

MIN_AUTO_CARDS = 5
MAX_AUTO_CARDS = 25
WORDS_PER_CARD = 50
MAX_LISTED_TERMS = 10
REGENERATION_CONTEXT_CHARS = 500
IMPROVEMENT_CONTEXT_CHARS = 800
DEFAULT_ADDITIONAL_CARDS = 3
DEFAULT_FOCUS = ["definitions", "explanations"]


GENERATION_SYSTEM_PROMPT = (
    "You are an expert educational content creator who excels at making "
    "high-quality flashcards. Always return valid JSON arrays with question "
    "and answer fields."
)

REGENERATION_SYSTEM_PROMPT = (
    "You are an expert educational content creator focused on improving "
    "flashcards. Always return a question and answer for the improved card."
)

IMPROVEMENT_SYSTEM_PROMPT = (
    "You are an expert educational content creator who improves flashcard "
    "sets. Always return valid JSON arrays of flashcard objects."
)

ANALYSIS_SYSTEM_PROMPT = (
    "You are an expert educational content analyzer. Always return the exact "
    "structure requested."
)


CONTENT_TYPE_GUIDANCE = {
    "vocabulary": [
        "Prioritize term definitions and usage",
        "Include context and examples where helpful",
        "Create synonym/antonym questions if applicable",
    ],
    "concepts": [
        "Focus on explanations and applications",
        "Create comparison questions between concepts",
        "Include cause-and-effect relationships",
    ],
    "mixed": [
        "Balance vocabulary and conceptual questions",
        "Connect terms to broader concepts",
        "Vary question difficulty and type",
    ],
}

IMPROVEMENT_DESCRIPTIONS = {
    "make_harder": "Increase difficulty by adding complexity, nuance, or requiring deeper analysis",
    "make_easier": "Simplify language and concepts while maintaining educational value",
    "add_examples": "Include concrete examples, scenarios, or practical applications",
    "add_context": "Provide more background information and contextual details",
    "diversify_questions": "Create more varied question types and formats to avoid repetition",
    "improve_clarity": "Enhance wording and structure for better understanding",
    "add_more_cards": "Add cards to improve coverage",
    "fix_grammar": "Correct grammatical errors and improve language quality",
}

IMPROVEMENT_STEPS = {
    "make_harder": [
        "Add complexity to questions (multi-step reasoning, analysis)",
        "Include edge cases or exceptions",
        "Require deeper understanding rather than simple recall",
        'Add "why" or "how" elements to questions',
    ],
    "make_easier": [
        "Simplify vocabulary and sentence structure",
        "Break complex concepts into simpler parts",
        "Use clearer, more direct language",
        "Focus on fundamental understanding",
    ],
    "add_examples": [
        "Include concrete examples in questions or answers",
        "Add real-world applications or scenarios",
        "Provide context that helps understanding",
        "Use specific cases to illustrate concepts",
    ],
    "add_context": [
        "Provide background information where helpful",
        "Explain relationships to other concepts",
        "Add historical or practical context",
        "Help users understand the broader picture",
    ],
    "diversify_questions": [
        "Use different question formats (fill-in-blank, multiple choice style, scenarios)",
        "Vary the cognitive load (recall, understanding, application)",
        "Avoid repetitive question patterns",
        "Create questions that test the same concept differently",
    ],
    "improve_clarity": [
        "Make questions more specific and unambiguous",
        "Improve answer completeness and accuracy",
        "Fix confusing wording or unclear instructions",
        "Ensure questions have only one correct interpretation",
    ],
    "fix_grammar": [
        "Correct grammatical errors and typos",
        "Improve sentence structure and flow",
        "Fix punctuation and capitalization",
        "Ensure professional language quality",
    ],
}


def word_count(text: str) -> int:
    return len(text.split())


def truncate(text: str, limit: int, *, ellipsis: str = "...") -> str:
    return text[:limit] + (ellipsis if len(text) > limit else "")


def _bullets(items: Sequence[str], indent: str = "- ") -> str:
    return "\n".join(f"{indent}{item}" for item in items)


def target_card_count(text: str, requested: Optional[int] = None) -> int:
    """Requested count, else one card per ~50 words clamped to 5..25."""
    if requested:
        return requested
    return max(MIN_AUTO_CARDS, min(MAX_AUTO_CARDS, word_count(text) // WORDS_PER_CARD))


def build_generation_prompt(options: GenerationOptions) -> str:
    analysis = options.analysis
    content_type = analysis.content_type if analysis else "other"
    key_topics = analysis.key_topics if analysis else []
    terms = analysis.vocabulary_terms if analysis else []
    focus = options.focus_areas or (analysis.suggested_focus if analysis else None) or DEFAULT_FOCUS
    target = target_card_count(options.text, options.card_count)

    sections = [
        "You are an expert at creating educational flashcards. "
        f"Create exactly {target} high-quality flashcards from the analyzed content below.",
        "CONTENT ANALYSIS:\n"
        + _bullets(
            [
                f"Content Type: {content_type}",
                f"Word Count: {word_count(options.text)}",
                f"Key Topics: {', '.join(key_topics) or 'Not specified'}",
                f"Vocabulary Terms Found: {len(terms)}",
                f"Focus Areas: {', '.join(focus)}",
            ]
        ),
    ]

    instructions = [
        f"1. Create {target} diverse, educational flashcards",
        f"2. Focus on: {', '.join(focus)}",
        "3. Content type considerations:",
    ]
    if content_type in CONTENT_TYPE_GUIDANCE:
        instructions.append(_bullets(CONTENT_TYPE_GUIDANCE[content_type], "   - "))
    sections.append("GENERATION INSTRUCTIONS:\n" + "\n".join(instructions))

    if terms:
        listed = [
            f"{t.term}: {t.definition}" if t.definition else t.term
            for t in terms[:MAX_LISTED_TERMS]
        ]
        block = "VOCABULARY TERMS DETECTED:\n" + _bullets(listed)
        if len(terms) > MAX_LISTED_TERMS:
            block += f"\n... and {len(terms) - MAX_LISTED_TERMS} more terms"
        sections.append(block)

    if key_topics:
        sections.append("KEY TOPICS TO COVER:\n" + _bullets(key_topics))

    sections.append(
        "\n".join(
            [
                "4. Make questions clear and concise",
                "5. Provide complete, accurate answers",
                "6. Vary question difficulty to promote deeper learning",
                "7. Avoid redundant or overly similar questions",
            ]
        )
    )
    sections.append(
        'FORMAT: Return a JSON array of objects with "question" and "answer" fields only.'
    )
    if options.custom_instructions:
        sections.append(f"ADDITIONAL INSTRUCTIONS: {options.custom_instructions}")
    sections.append(f"CONTENT TO CREATE FLASHCARDS FROM:\n{options.text}")
    sections.append(f"Generate exactly {target} flashcards now:")

    return "\n\n".join(sections)


def build_regeneration_prompt(
    card: Flashcard,
    instruction: str,
    context: Optional[str] = None,
    content_type: Optional[str] = None,
) -> str:
    sections = [
        "You are an expert at improving educational flashcards. Take the original "
        "flashcard and improve it based on the specific instruction.",
        f"ORIGINAL FLASHCARD:\nQuestion: {card.question}\nAnswer: {card.answer}",
        f"IMPROVEMENT INSTRUCTION: {instruction}",
    ]
    if content_type:
        sections.append(f"CONTENT TYPE: {content_type}")
    if context:
        sections.append(
            "ORIGINAL CONTEXT (for reference):\n"
            + truncate(context, REGENERATION_CONTEXT_CHARS)
        )
    sections.append(
        "IMPROVEMENT GUIDELINES:\n"
        + _bullets(
            [
                "Keep the core educational value of the original card",
                "Make the requested improvement without changing the fundamental concept",
                "Ensure question and answer remain accurate and clear",
                "Maintain appropriate difficulty for the content type",
            ]
        )
    )
    sections.append(
        "COMMON IMPROVEMENTS:\n"
        + _bullets(
            [
                '"make harder" → Add complexity, nuance, or application',
                '"make easier" → Simplify language, break down complex concepts',
                '"add examples" → Include concrete examples or scenarios',
                '"add context" → Provide more background information',
                '"fix grammar" → Correct any grammatical or clarity issues',
                '"make clearer" → Improve wording for better understanding',
                '"add detail" → Expand on the answer with more information',
                '"focus on definition" → Emphasize the core definition',
                '"focus on application" → Emphasize practical use',
            ]
        )
    )
    sections.append(
        'Return the improved flashcard with "question" and "answer" fields.'
    )
    return "\n\n".join(sections)


def build_improvement_prompt(
    cards: Sequence[dict],
    improvement: str,
    custom_instruction: Optional[str] = None,
    context: Optional[str] = None,
    content_type: Optional[str] = None,
    target_count: Optional[int] = None,
) -> str:
    """Prompt for improving a whole set; ``cards`` are dicts with optional ``id``."""
    if improvement == "add_more_cards":
        additional = (target_count - len(cards)) if target_count else DEFAULT_ADDITIONAL_CARDS
        description = f"Add {additional} cards to improve coverage"
    else:
        additional = 0
        description = IMPROVEMENT_DESCRIPTIONS.get(improvement, improvement)

    listing = "\n\n".join(
        f"{i}. Q: {c['question']}\n   A: {c['answer']}"
        + (f"\n   ID: {c['id']}" if c.get("id") else "")
        for i, c in enumerate(cards, start=1)
    )

    sections = [
        "You are an expert at improving educational flashcard sets. Improve the "
        "following flashcard set based on the specific instruction.",
        f"IMPROVEMENT TYPE: {improvement}\nDESCRIPTION: {description}",
    ]
    if content_type:
        sections.append(f"CONTENT TYPE: {content_type}")
    sections.append(f"CURRENT FLASHCARD SET ({len(cards)} cards):\n{listing}")
    if context:
        sections.append(
            "ORIGINAL CONTEXT (for reference):\n"
            + truncate(context, IMPROVEMENT_CONTEXT_CHARS)
        )
    if custom_instruction:
        sections.append(f"CUSTOM INSTRUCTION: {custom_instruction}")

    if improvement == "add_more_cards":
        guidelines = [
            f"Return ALL existing cards (improved if needed) PLUS {additional} new cards",
            "New cards should cover gaps or provide additional practice",
            'Mark new cards with "isNew": true in the response',
            f"Total cards should be {target_count or len(cards) + additional}",
        ]
    else:
        guidelines = [
            "Improve ALL cards in the set according to the instruction",
            f"Maintain the same number of cards ({len(cards)})",
            "Keep the educational content accurate and valuable",
            "Apply the improvement consistently across all cards",
        ]
    guidelines += [
        "Preserve any provided card IDs for matching back to originals",
        "Ensure questions remain clear and answers remain accurate",
        "Don't change the fundamental concepts being taught",
    ]
    sections.append("IMPROVEMENT GUIDELINES:\n" + _bullets(guidelines))

    if improvement in IMPROVEMENT_STEPS:
        sections.append(
            "SPECIFIC IMPROVEMENT INSTRUCTIONS:\n" + _bullets(IMPROVEMENT_STEPS[improvement])
        )

    sections.append(
        "Return a JSON array of objects with these fields:\n"
        + _bullets(
            [
                '"question": improved question text',
                '"answer": improved answer text',
                '"id": original card ID if provided',
                '"isNew": true only for newly added cards',
            ]
        )
    )
    sections.append("Generate the improved flashcard set now:")
    return "\n\n".join(sections)


def build_analysis_prompt(text: str) -> str:
    return "\n\n".join(
        [
            "You are an expert educational content analyzer. Analyze the following "
            "text and provide a structured analysis for flashcard creation.",
            f"TEXT TO ANALYZE ({word_count(text)} words):\n{text}",
            "ANALYSIS GUIDELINES:\n"
            + _bullets(
                [
                    '"vocabulary": Primarily word definitions, terms, translations',
                    '"concepts": Ideas, processes, explanations, theories',
                    '"mixed": Both vocabulary and conceptual content',
                    '"other": Lists, facts, data that don\'t fit above categories',
                ]
            ),
            "CONTENT GUIDANCE APPROACHES:\n"
            + _bullets(
                [
                    '"one-per-term": For vocabulary lists - create one card per vocabulary term',
                    '"concept-coverage": For conceptual content - ensure comprehensive coverage of concepts',
                    '"balanced": For mixed content - balance vocabulary and conceptual cards',
                ]
            ),
            _bullets(
                [
                    "key_topics: 3-5 main subjects/themes in the content",
                    "vocabulary_terms: Extract clear term-definition pairs if they exist",
                    "content_guidance: Recommend generation approach and provide expected range",
                    "suggested_focus: What types of questions would work best",
                    "confidence: How sure you are about the content type (0.0-1.0)",
                    "reasoning: Help the user understand your analysis",
                ]
            ),
            "Be thorough but concise. Focus on what would make effective flashcards.",
        ]
    )
