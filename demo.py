"""
Career Bot - Demo Script

This script runs the whole flow from the command line:
1. Load and index the profile
2. Ask a few sample questions
3. Drop into an interactive loop

BEFORE RUNNING:
1. Put your LinkedIn CSV export in ./data (or set PROFILE_SOURCE to a
   .txt/.md/.pdf file)
2. Set OPENROUTER_API_KEY (and QDRANT_URL with VECTOR_BACKEND=qdrant)

RUN:
    python demo.py
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from careerbot.exceptions import CareerBotError
from careerbot.rag_pipeline import CareerBotPipeline
from config.settings import get_settings


SAMPLE_QUESTIONS = [
    "Where do you currently work?",
    "What did you study?",
    "Which programming languages do you know?",
    "Do you hold any certifications?",
]


async def ask_and_print(bot: CareerBotPipeline, question: str) -> None:
    try:
        result = await bot.ask(question)
    except CareerBotError as e:
        print(f"Error: {e}\n")
        return

    print(f"A: {result.reply}")
    print(f"📚 Passages: {len(result.context)}  ⏱️ {result.timing['total_ms']:.0f}ms")


async def main():
    print("=" * 60)
    print("Career Bot Demo")
    print("=" * 60)
    print()

    # Fail before indexing when credentials are missing
    try:
        get_settings()
    except ValueError as e:
        print(f"Configuration error: {e}")
        sys.exit(1)

    bot = CareerBotPipeline()

    try:
        print("Step 1: Indexing profile...")
        result = await bot.initialize()
        print(f"✓ Created {result.chunks_created} chunks")
        print(f"✓ Stored {result.documents_stored} chunks in {result.batches} batches")
        if result.failed_chunk_ids:
            print(f"⚠ Skipped chunks: {result.failed_chunk_ids}")
        print(f"✓ Indexed in {result.time_seconds:.2f} seconds\n")

        print("Step 2: Asking questions...\n")
        print("-" * 60)
        for question in SAMPLE_QUESTIONS:
            print(f"Q: {question}")
            await ask_and_print(bot, question)
            print("-" * 60)
        print()

        print("=" * 60)
        print("Interactive Mode - Ask your own questions!")
        print("Type 'quit' to exit")
        print("=" * 60)
        print()

        while True:
            question = input("Your question: ").strip()

            if question.lower() in ["quit", "exit", "q"]:
                print("Goodbye!")
                break

            if not question:
                continue

            await ask_and_print(bot, question)
            print()
    finally:
        await bot.close()


if __name__ == "__main__":
    asyncio.run(main())
