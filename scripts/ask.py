#!/usr/bin/env python
"""Terminal chat with the Lee Kuan Yew persona.

Usage:
    python scripts/ask.py                          # Built-in knowledge base
    python scripts/ask.py --corpus corpus.yaml     # Custom knowledge base
    python scripts/ask.py --verbose                # Console logs on stderr
"""
import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from asklky.conversation import ConversationController, ConversationSnapshot, Role, TurnState
from asklky.corpus import get_corpus
from asklky.errors import CorpusError
from asklky.llm_client import generation_client
from asklky.logging_setup import configure_logging

EXIT_WORDS = {"exit", "quit"}


def render(snapshot: ConversationSnapshot) -> None:
    """Print the part of the conversation that changed."""
    if snapshot.state is TurnState.PENDING:
        print("\nLee Kuan Yew: Thinking...", flush=True)
    elif snapshot.state is TurnState.ERRORED:
        print(f"\n[!] {snapshot.error}")
    elif snapshot.history and snapshot.history[-1].role is Role.ASSISTANT:
        print(f"\nLee Kuan Yew: {snapshot.history[-1].text}")


async def main() -> int:
    parser = argparse.ArgumentParser(description="Ask Lee Kuan Yew (RAG chatbot)")
    parser.add_argument("--corpus", type=Path, help="YAML knowledge base file")
    parser.add_argument("--verbose", action="store_true", help="Show debug logs")
    args = parser.parse_args()

    configure_logging(
        level="DEBUG" if args.verbose else "WARNING",
        fmt="console",
    )

    try:
        corpus = get_corpus(args.corpus)
    except CorpusError as e:
        print(f"Could not load knowledge base: {e}", file=sys.stderr)
        return 1

    controller = ConversationController(corpus, generation_client)
    controller.subscribe(render)

    print("Ask Lee Kuan Yew. Press Enter to send, type 'exit' to quit.")

    while True:
        try:
            line = input("\nYou: ")
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if line.strip().lower() in EXIT_WORDS:
            break

        controller.update_query(line)
        await controller.submit_query()

    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
