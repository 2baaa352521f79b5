"""Tests for batched, rate-limited corpus indexing."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from careerbot.chunking import SentenceChunker
from careerbot.embeddings import EmbeddingClient
from careerbot.exceptions import DimensionMismatchError, VectorStoreError
from careerbot.indexer import Indexer
from careerbot.vector_store import InMemoryVectorStore

from conftest import FakeEmbeddingClient, embeddings_api, letter_vector

# chunk_size=1 with no overlap turns every sentence into its own chunk
ONE_SENTENCE_PER_CHUNK = SentenceChunker(chunk_size=1, chunk_overlap=0)

TEN_SENTENCES = (
    "Alpha. Bravo. Charlie. Delta. Echo. "
    "Foxtrot. Golf. Hotel. India. Juliett."
)


class CountingStore(InMemoryVectorStore):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.add_calls = []

    async def add(self, ids, embeddings, documents):
        self.add_calls.append(list(ids))
        await super().add(ids, embeddings, documents)


def _indexer(embedder, store, batch_size=5):
    return Indexer(
        embedding_client=embedder,
        vector_store=store,
        chunker=ONE_SENTENCE_PER_CHUNK,
        batch_size=batch_size,
        delay_seconds=0,
    )


@pytest.mark.asyncio
async def test_index_stores_every_chunk_with_positional_ids():
    store = CountingStore()
    result = await _indexer(FakeEmbeddingClient(), store).index(TEN_SENTENCES)

    assert store.ids == list(range(10))
    assert store.documents[:3] == ["Alpha", "Bravo", "Charlie"]
    assert store.add_calls == [[0, 1, 2, 3, 4], [5, 6, 7, 8, 9]]
    assert result.chunks_created == 10
    assert result.documents_stored == 10
    assert result.batches == 2
    assert result.tokens_used == 10
    assert result.failed_chunk_ids == []


@pytest.mark.asyncio
async def test_embeddings_are_requested_in_corpus_order():
    embedder = FakeEmbeddingClient()
    await _indexer(embedder, InMemoryVectorStore()).index(TEN_SENTENCES)

    assert embedder.calls == [
        "Alpha", "Bravo", "Charlie", "Delta", "Echo",
        "Foxtrot", "Golf", "Hotel", "India", "Juliett",
    ]


@pytest.mark.asyncio
async def test_one_failed_chunk_is_skipped_and_indexing_continues(caplog):
    store = CountingStore()
    embedder = FakeEmbeddingClient(fail_on={"Charlie"})

    result = await _indexer(embedder, store).index(TEN_SENTENCES)

    assert store.add_calls == [[0, 1, 3, 4], [5, 6, 7, 8, 9]]
    assert len(store) == 9
    assert "Charlie" not in store.documents
    assert result.failed_chunk_ids == [2]
    assert result.documents_stored == 9
    assert "Error processing chunk 2" in caplog.text


@pytest.mark.asyncio
async def test_failed_chunks_are_not_retried():
    embedder = FakeEmbeddingClient(fail_on={"Charlie"})

    await _indexer(embedder, InMemoryVectorStore()).index(TEN_SENTENCES)

    assert embedder.calls.count("Charlie") == 1


@pytest.mark.asyncio
async def test_batch_without_successes_writes_nothing():
    store = CountingStore()
    embedder = FakeEmbeddingClient(fail_on={"Foxtrot", "Golf", "Hotel", "India", "Juliett"})

    result = await _indexer(embedder, store).index(TEN_SENTENCES)

    assert store.add_calls == [[0, 1, 2, 3, 4]]
    assert result.failed_chunk_ids == [5, 6, 7, 8, 9]


@pytest.mark.asyncio
async def test_batch_size_is_independent_of_chunk_count():
    store = CountingStore()

    result = await _indexer(FakeEmbeddingClient(), store, batch_size=3).index(TEN_SENTENCES)

    assert store.add_calls == [[0, 1, 2], [3, 4, 5], [6, 7, 8], [9]]
    assert result.batches == 4


@pytest.mark.asyncio
async def test_reindexing_gives_identical_results():
    store = InMemoryVectorStore()
    indexer = _indexer(FakeEmbeddingClient(), store)
    query_vector = letter_vector("Hotel India")

    await indexer.index(TEN_SENTENCES)
    first = await store.query(query_vector, 4)
    first_ids = list(store.ids)

    await store.clear()
    await indexer.index(TEN_SENTENCES)

    assert await store.query(query_vector, 4) == first
    assert store.ids == first_ids
    assert len(store) == 10


@pytest.mark.asyncio
async def test_collection_is_ensured_and_cleared_before_writing():
    store = MagicMock()
    store.ensure_collection = AsyncMock()
    store.clear = AsyncMock()
    store.add = AsyncMock()

    await _indexer(FakeEmbeddingClient(), store).index("Alpha. Bravo.")

    names = [c[0] for c in store.mock_calls]
    assert names == ["ensure_collection", "clear", "add"]


@pytest.mark.asyncio
async def test_rate_limit_delay_after_each_embedding(monkeypatch):
    sleep = AsyncMock()
    monkeypatch.setattr("careerbot.indexer.asyncio.sleep", sleep)
    indexer = Indexer(
        embedding_client=FakeEmbeddingClient(fail_on={"Bravo"}),
        vector_store=InMemoryVectorStore(),
        chunker=ONE_SENTENCE_PER_CHUNK,
        delay_seconds=0.1,
    )

    await indexer.index("Alpha. Bravo. Charlie.")

    assert sleep.await_count == 2
    sleep.assert_awaited_with(0.1)


@pytest.mark.asyncio
async def test_store_write_failure_skips_the_batch(caplog):
    store = CountingStore()
    original_add = store.add
    calls = {"n": 0}

    async def flaky_add(ids, embeddings, documents):
        calls["n"] += 1
        if calls["n"] == 1:
            raise VectorStoreError("upsert timed out")
        await original_add(ids, embeddings, documents)

    store.add = flaky_add

    result = await _indexer(FakeEmbeddingClient(), store).index(TEN_SENTENCES)

    assert store.ids == [5, 6, 7, 8, 9]
    assert result.failed_chunk_ids == [0, 1, 2, 3, 4]
    assert "Error storing batch 1" in caplog.text


@pytest.mark.asyncio
async def test_dimension_mismatch_aborts_indexing():
    store = InMemoryVectorStore(dimension=3)

    with pytest.raises(DimensionMismatchError):
        await _indexer(FakeEmbeddingClient(), store).index(TEN_SENTENCES)


@pytest.mark.asyncio
async def test_collection_failure_propagates():
    store = MagicMock()
    store.ensure_collection = AsyncMock(side_effect=VectorStoreError("qdrant down"))

    with pytest.raises(VectorStoreError):
        await _indexer(FakeEmbeddingClient(), store).index(TEN_SENTENCES)


@pytest.mark.asyncio
async def test_empty_corpus_indexes_nothing():
    store = CountingStore()

    result = await _indexer(FakeEmbeddingClient(), store).index("   ")

    assert store.add_calls == []
    assert result.chunks_created == 0
    assert result.batches == 0


def test_batch_size_must_be_positive():
    with pytest.raises(ValueError):
        Indexer(FakeEmbeddingClient(), InMemoryVectorStore(), ONE_SENTENCE_PER_CHUNK, batch_size=0)


@pytest.mark.asyncio
async def test_error_body_from_provider_skips_only_that_chunk():
    store = InMemoryVectorStore()
    embedder = EmbeddingClient(model="m", client=embeddings_api(fail_on={"Bravo"}))

    result = await _indexer(embedder, store).index("Alpha. Bravo. Charlie.")

    assert store.documents == ["Alpha", "Charlie"]
    assert result.failed_chunk_ids == [1]
    assert result.documents_stored == 2
    await embedder.close()
