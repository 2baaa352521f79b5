"""
Career Bot Pipeline - The Complete System

Wires every component together:
1. Startup: Profile → Chunking → Embedding → Vector Store   (Indexer)
2. Each chat turn: Question → Embedding → Search → Passages (Retriever)
                   Passages + Question → Chat model → Reply (Generator)

WHICH VECTOR STORE:
Chosen once, at construction, from settings.vector_store.backend:
- "memory": InMemoryVectorStore, rebuilt on every start
- "qdrant": QdrantVectorStore, the collection is cleared and refilled on start
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from config.settings import Settings, get_settings
from careerbot.chunking import DocumentLoader, SentenceChunker
from careerbot.embeddings import EmbeddingClient
from careerbot.generator import GenerationResult, Generator
from careerbot.indexer import Indexer, IndexingResult
from careerbot.logging_utils import get_class_logger
from careerbot.profile_extractor import ProfileExtractor
from careerbot.retriever import Retriever
from careerbot.vector_store import InMemoryVectorStore, SearchResult, VectorStore


def create_vector_store(settings: Settings) -> VectorStore:
    """Build the backend named in the settings."""
    config = settings.vector_store

    if config.backend == "qdrant":
        from careerbot.qdrant_store import QdrantVectorStore

        return QdrantVectorStore.from_url(
            config.qdrant_url,
            api_key=config.qdrant_api_key,
            collection_name=config.collection_name,
            vector_size=config.vector_size,
            distance=config.distance,
        )

    return InMemoryVectorStore(dimension=config.vector_size)


@dataclass
class ChatResult:
    """
    Result of one chat turn.

    - reply: the generated answer
    - context: passages that were retrieved (may be empty)
    - passages: the same passages with their similarity scores
    - timing: milliseconds spent in retrieval and generation
    """
    question: str
    reply: str
    context: List[str]
    generation_result: GenerationResult
    passages: List[SearchResult] = field(default_factory=list)
    timing: Dict[str, float] = field(default_factory=dict)


class CareerBotPipeline:
    """
    USAGE:
        bot = CareerBotPipeline()
        await bot.initialize()          # once, at startup
        result = await bot.ask("Where do you work?")
        print(result.reply)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        vector_store: Optional[VectorStore] = None,
        embedding_client: Optional[Any] = None,
        generator: Optional[Any] = None
    ):
        self.settings = settings or get_settings()
        self.logger = get_class_logger(self.__class__)

        # An empty in-memory store is falsy, so compare against None
        if vector_store is None:
            vector_store = create_vector_store(self.settings)
        self.vector_store = vector_store
        self.embedding_client = embedding_client if embedding_client is not None else EmbeddingClient(settings=self.settings)
        self.generator = generator if generator is not None else Generator(settings=self.settings)

        self.indexer = Indexer(
            embedding_client=self.embedding_client,
            vector_store=self.vector_store,
            chunker=SentenceChunker(
                chunk_size=self.settings.chunking.chunk_size,
                chunk_overlap=self.settings.chunking.chunk_overlap
            ),
            batch_size=self.settings.indexing.batch_size,
            delay_seconds=self.settings.indexing.delay_seconds
        )
        self.retriever = Retriever(
            embedding_client=self.embedding_client,
            vector_store=self.vector_store,
            top_k=self.settings.retrieval.top_k
        )

        self.last_indexing: Optional[IndexingResult] = None

    def load_corpus(self) -> str:
        """Profile text from PROFILE_SOURCE if set, else from the CSV export."""
        profile = self.settings.profile

        if profile.source_file:
            text, _ = DocumentLoader.load(profile.source_file)
            self.logger.info("Loaded profile from %s", profile.source_file)
            return text

        text = ProfileExtractor(profile.data_dir).get_content()
        self.logger.info("Loaded profile export from %s", profile.data_dir)
        return text

    async def initialize(self, corpus_text: Optional[str] = None) -> IndexingResult:
        """Index the corpus (loading it first unless it is passed in)."""
        if corpus_text is None:
            corpus_text = self.load_corpus()

        self.last_indexing = await self.indexer.index(corpus_text)
        return self.last_indexing

    async def ask(self, question: str, top_k: Optional[int] = None) -> ChatResult:
        """
        Answer one question.

        Retrieval never fails (it returns no passages instead); a failing
        chat model raises GenerationError for the caller to report.
        """
        timing = {}

        start = time.time()
        passages = await self.retriever.retrieve_scored(question, top_k)
        context = [passage.document for passage in passages]
        timing["retrieval_ms"] = (time.time() - start) * 1000

        start = time.time()
        generation_result = await self.generator.generate(question, context)
        timing["generation_ms"] = (time.time() - start) * 1000

        timing["total_ms"] = sum(timing.values())

        return ChatResult(
            question=question,
            reply=generation_result.answer,
            context=context,
            generation_result=generation_result,
            passages=passages,
            timing=timing
        )

    async def get_stats(self) -> Dict[str, Any]:
        """Get statistics about the bot."""
        return {
            "backend": self.settings.vector_store.backend,
            "total_chunks": await self.vector_store.count(),
            "last_indexing": self.last_indexing,
        }

    async def close(self) -> None:
        for component in (self.embedding_client, self.generator, self.vector_store):
            close = getattr(component, "close", None)
            if close is not None:
                await close()


def create_pipeline() -> CareerBotPipeline:
    """Create a pipeline with settings from the environment."""
    return CareerBotPipeline()
