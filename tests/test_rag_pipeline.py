"""End-to-end tests of the pipeline facade with fake model clients."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from careerbot.generator import GenerationResult
from careerbot.qdrant_store import QdrantVectorStore
from careerbot.rag_pipeline import CareerBotPipeline, create_vector_store
from careerbot.vector_store import InMemoryVectorStore

from conftest import FakeEmbeddingClient

CORPUS = (
    "Profile: Jane Doe. Backend engineer. "
    "Positions: Staff Engineer at Acme. "
    "Education: Computer Science at State University. "
    "Skills: Python and Go."
)


def _fake_generator(answer="I work at Acme."):
    generator = MagicMock()

    async def generate(question, context, include_prompt_in_result=False):
        return GenerationResult(answer=answer, context=list(context), model="fake", usage={})

    generator.generate = AsyncMock(side_effect=generate)
    return generator


def _pipeline(test_settings, embedder=None, generator=None):
    test_settings.chunking.chunk_size = 40
    test_settings.chunking.chunk_overlap = 0
    return CareerBotPipeline(
        settings=test_settings,
        vector_store=InMemoryVectorStore(),
        embedding_client=embedder or FakeEmbeddingClient(),
        generator=generator or _fake_generator(),
    )


@pytest.mark.asyncio
async def test_initialize_then_ask(test_settings):
    generator = _fake_generator()
    bot = _pipeline(test_settings, generator=generator)

    indexing = await bot.initialize(CORPUS)
    result = await bot.ask("Where do you work?")

    assert indexing.documents_stored == indexing.chunks_created > 1
    assert result.reply == "I work at Acme."
    assert 1 <= len(result.context) <= test_settings.retrieval.top_k
    assert [p.document for p in result.passages] == result.context
    assert all(0.0 <= p.score <= 1.0 + 1e-9 for p in result.passages)
    generator.generate.assert_awaited_once_with("Where do you work?", result.context)
    assert set(result.timing) == {"retrieval_ms", "generation_ms", "total_ms"}


@pytest.mark.asyncio
async def test_ask_still_answers_when_retrieval_fails(test_settings):
    embedder = FakeEmbeddingClient(fail_on={"Where do you work?"})
    generator = _fake_generator(answer="No")
    bot = _pipeline(test_settings, embedder=embedder, generator=generator)
    await bot.initialize(CORPUS)

    result = await bot.ask("Where do you work?")

    assert result.context == []
    assert result.passages == []
    assert result.reply == "No"
    generator.generate.assert_awaited_once_with("Where do you work?", [])


@pytest.mark.asyncio
async def test_stats_report_backend_and_count(test_settings):
    bot = _pipeline(test_settings)
    await bot.initialize(CORPUS)

    stats = await bot.get_stats()

    assert stats["backend"] == "memory"
    assert stats["total_chunks"] == bot.last_indexing.documents_stored


@pytest.mark.asyncio
async def test_initialize_loads_profile_source_file(test_settings, tmp_path):
    source = tmp_path / "profile.txt"
    source.write_text(CORPUS, encoding="utf-8")
    test_settings.profile.source_file = str(source)
    bot = _pipeline(test_settings)

    result = await bot.initialize()

    assert result.chunks_created > 1
    assert bot.load_corpus() == CORPUS


def test_load_corpus_from_csv_export(test_settings, tmp_path):
    (tmp_path / "Skills.csv").write_text("Name\nPython\n", encoding="utf-8")
    test_settings.profile.data_dir = str(tmp_path)
    bot = _pipeline(test_settings)

    assert bot.load_corpus().endswith("Skills:\n- Python")


def test_memory_backend_factory(test_settings):
    store = create_vector_store(test_settings)

    assert isinstance(store, InMemoryVectorStore)
    assert store.dimension == test_settings.vector_store.vector_size


def test_qdrant_backend_factory(test_settings):
    test_settings.vector_store.backend = "qdrant"
    test_settings.vector_store.qdrant_url = "http://localhost:6333"

    store = create_vector_store(test_settings)

    assert isinstance(store, QdrantVectorStore)
    assert store.collection_name == "career-bot-collection"
    assert store.vector_size == 26
