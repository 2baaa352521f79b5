"""
Indexer - corpus ingestion

INDEXING FLOW (run once at startup, the whole corpus every time):

┌──────────┐    ┌──────────┐    ┌───────────────────┐    ┌──────────┐
│ Profile  │───▶│ Chunking │───▶│ Embedding, in     │───▶│  Vector  │
│  text    │    │          │    │ batches of 5      │    │  Store   │
└──────────┘    └──────────┘    └───────────────────┘    └──────────┘

WHY BATCHES:
- One store write per batch instead of one per chunk
- Embedding calls run one after another with a short pause between them,
  which keeps us under the provider's rate limit

WHY BEST EFFORT:
A chunk whose embedding fails is logged and skipped. It is not retried and
never stored; the rest of the batch and the following batches carry on.
A profile with one missing chunk is still a useful profile.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import List

from careerbot.chunking import SentenceChunker
from careerbot.embeddings import EmbeddingClient
from careerbot.exceptions import DimensionMismatchError, EmbeddingError, VectorStoreError
from careerbot.logging_utils import get_class_logger
from careerbot.vector_store import VectorStore


@dataclass
class IndexingResult:
    """
    Result of indexing the corpus.

    - chunks_created: how many chunks the corpus produced
    - documents_stored: how many of them made it into the store
    - failed_chunk_ids: chunks skipped because embedding or the write failed
    - batches: number of batches processed
    - tokens_used: embedding tokens reported by the provider
    """
    chunks_created: int
    documents_stored: int
    batches: int
    tokens_used: int
    time_seconds: float
    failed_chunk_ids: List[int] = field(default_factory=list)


class Indexer:
    """
    The only writer of a vector store.

    USAGE:
        indexer = Indexer(embedding_client, store, SentenceChunker())
        result = await indexer.index(profile_text)
    """

    def __init__(
        self,
        embedding_client: EmbeddingClient,
        vector_store: VectorStore,
        chunker: SentenceChunker,
        batch_size: int = 5,
        delay_seconds: float = 0.1
    ):
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")

        self.embedding_client = embedding_client
        self.vector_store = vector_store
        self.chunker = chunker
        self.batch_size = batch_size
        self.delay_seconds = delay_seconds
        self.logger = get_class_logger(self.__class__)

    async def index(self, corpus_text: str) -> IndexingResult:
        """
        Replace the store's contents with the embedded corpus.

        WHAT HAPPENS:
        1. Make sure the collection exists, then clear it
        2. Split the corpus into chunks; a chunk's id is its position
        3. For each batch: embed chunk by chunk, pausing after each call
        4. Write the successful triples of the batch with one add()

        Failures while preparing the collection propagate: without a store
        there is nothing to index into. A vector of the wrong size
        (DimensionMismatchError) propagates too.
        """
        start_time = time.time()

        await self.vector_store.ensure_collection()
        await self.vector_store.clear()

        chunks = self.chunker.chunk_text(corpus_text)
        self.logger.info("Text split into %d chunks", len(chunks))

        total_batches = (len(chunks) + self.batch_size - 1) // self.batch_size
        stored = 0
        tokens_used = 0
        failed: List[int] = []

        for batch_number, offset in enumerate(range(0, len(chunks), self.batch_size), 1):
            batch = chunks[offset:offset + self.batch_size]
            ids: List[int] = []
            embeddings: List[List[float]] = []
            documents: List[str] = []

            for chunk in batch:
                try:
                    result = await self.embedding_client.create_embedding(chunk.text)
                except EmbeddingError as e:
                    self.logger.error("Error processing chunk %d: %s", chunk.id, e)
                    failed.append(chunk.id)
                    continue

                ids.append(chunk.id)
                embeddings.append(result.embedding)
                documents.append(chunk.text)
                tokens_used += result.token_count

                # Rate limiting delay
                await asyncio.sleep(self.delay_seconds)

            if embeddings:
                try:
                    await self.vector_store.add(ids, embeddings, documents)
                    stored += len(ids)
                except DimensionMismatchError:
                    raise
                except VectorStoreError as e:
                    self.logger.error("Error storing batch %d: %s", batch_number, e)
                    failed.extend(ids)

            self.logger.info("Processed batch %d/%d", batch_number, total_batches)

        elapsed = time.time() - start_time
        self.logger.info(
            "Vector store initialized with %d of %d chunks in %.2f seconds",
            stored, len(chunks), elapsed
        )

        return IndexingResult(
            chunks_created=len(chunks),
            documents_stored=stored,
            batches=total_batches,
            tokens_used=tokens_used,
            time_seconds=elapsed,
            failed_chunk_ids=failed
        )
