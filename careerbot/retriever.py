"""
Retriever - query time

QUERY FLOW:
┌──────────┐    ┌──────────┐    ┌──────────┐    ┌──────────────┐
│ Question │───▶│Embedding │───▶│  Vector  │───▶│ Top k chunk  │
│          │    │          │    │  Search  │    │ texts        │
└──────────┘    └──────────┘    └──────────┘    └──────────────┘

WHY IT NEVER RAISES:
The chat layer always wants to answer. If embedding the question or
searching the store fails, the error is logged and the caller gets an empty
list, which it treats as "no relevant context found".
"""

from typing import List, Optional

from careerbot.embeddings import EmbeddingClient
from careerbot.logging_utils import get_class_logger
from careerbot.vector_store import SearchResult, VectorStore


class Retriever:
    """Read-only view of a vector store, driven by natural-language questions."""

    def __init__(
        self,
        embedding_client: EmbeddingClient,
        vector_store: VectorStore,
        top_k: int = 3
    ):
        self.embedding_client = embedding_client
        self.vector_store = vector_store
        self.top_k = top_k
        self.logger = get_class_logger(self.__class__)

    async def retrieve(self, query: str, top_k: Optional[int] = None) -> List[str]:
        """
        Find the passages most relevant to a question.

        Args:
            query: The user's question
            top_k: Override the default number of passages

        Returns:
            Up to top_k document texts, most similar first. Empty on any error.
        """
        k = self.top_k if top_k is None else top_k

        try:
            query_embedding = await self.embedding_client.embed(query)
            return list(await self.vector_store.query(query_embedding, k))
        except Exception as e:
            self.logger.error("Error searching context: %s", e)
            return []

    async def retrieve_scored(self, query: str, top_k: Optional[int] = None) -> List[SearchResult]:
        """
        Same as retrieve(), keeping each passage's cosine score for display.

        Empty on any error.
        """
        k = self.top_k if top_k is None else top_k

        try:
            query_embedding = await self.embedding_client.embed(query)
            return list(await self.vector_store.search(query_embedding, k))
        except Exception as e:
            self.logger.error("Error searching context: %s", e)
            return []
