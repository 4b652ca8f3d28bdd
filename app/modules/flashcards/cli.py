from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from app.modules.flashcards.errors import FlashcardServiceError
from app.modules.flashcards.generator import generate_cards
from app.modules.flashcards.models import GenerationOptions
from app.modules.flashcards.parser import parse_completion_to_cards


def _read_file_or_stdin(path: str | None) -> str:
    if path:
        return Path(path).read_text(encoding="utf-8")
    return sys.stdin.read()


def _load_text(args: argparse.Namespace) -> str:
    if args.text and args.text_file:
        raise SystemExit("Provide either --text or --text-file, not both")
    if args.text_file:
        return Path(args.text_file).read_text(encoding="utf-8")
    if args.text:
        return args.text
    raise SystemExit("--text or --text-file is required")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="flashcards", description="Flashcards parser and generator CLI"
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    p = sub.add_parser("parse", help="Parse a model completion into flashcards")
    p.add_argument("--file", "-f", help="Completion file (defaults to stdin)")

    g = sub.add_parser("generate", help="Generate flashcards from source text")
    g.add_argument("--text", "-t", help="Source text")
    g.add_argument("--text-file", help="Path to a file containing the source text")
    g.add_argument("--count", "-n", type=int, help="Number of cards to request")

    args = parser.parse_args(argv)
    if args.cmd == "parse":
        cards = parse_completion_to_cards(_read_file_or_stdin(args.file))
        print(json.dumps(cards, indent=2, ensure_ascii=False))
        return 0
    if args.cmd == "generate":
        options = GenerationOptions(text=_load_text(args), card_count=args.count)
        try:
            cards = asyncio.run(generate_cards(options))
        except FlashcardServiceError as e:
            print(f"error: {e.message}", file=sys.stderr)
            return 1
        print(json.dumps([c.model_dump() for c in cards], indent=2, ensure_ascii=False))
        return 0

    parser.print_help()
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
