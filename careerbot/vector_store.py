"""
Vector Store Module

WHAT IS A VECTOR STORE:
A database optimized for storing and searching vectors (embeddings).
Instead of searching by keywords, we search by meaning similarity.

TWO BACKENDS, ONE INTERFACE:

1. In-Memory (InMemoryVectorStore, this module):
   - Three parallel lists: ids, embeddings, documents
   - Search compares the query against every stored vector
   - Pros: no setup, nothing to run
   - Cons: lost when the process ends, linear search

2. Qdrant (QdrantVectorStore, see qdrant_store.py):
   - Collection with a fixed vector size and cosine distance
   - Search runs inside Qdrant on its own index
   - Survives restarts (but we re-index on startup anyway)

Both implement VectorStore, so the Indexer and Retriever never check
which one they were given.

ONE DELIBERATE DIFFERENCE:
Re-adding an id to the in-memory store appends a duplicate, while Qdrant
upserts and replaces the point. Callers only re-add after clear(), so the
two behave the same in practice.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from dataclasses import dataclass

from careerbot.embeddings import cosine_similarity
from careerbot.exceptions import DimensionMismatchError


@dataclass
class SearchResult:
    """
    A single search result.

    WHY SEPARATE FROM THE PLAIN TEXT RESULT:
    - query() returns only document text (what the chat layer needs)
    - search() keeps the score and id for the UI and for debugging
    """
    id: object
    document: str
    score: float

    def __repr__(self):
        preview = self.document[:50] + "..." if len(self.document) > 50 else self.document
        return f"SearchResult(id={self.id}, score={self.score:.4f}, text='{preview}')"


class VectorStore(ABC):
    """Capability interface shared by both backends."""

    @abstractmethod
    async def ensure_collection(self) -> None:
        """Make sure there is somewhere to write to. Must be idempotent."""

    @abstractmethod
    async def add(
        self,
        ids: List[int],
        embeddings: List[List[float]],
        documents: List[str]
    ) -> None:
        """Store aligned (id, vector, document) triples."""

    @abstractmethod
    async def search(self, query_embedding: List[float], top_k: int = 3) -> List[SearchResult]:
        """Return the top_k most similar documents with their scores."""

    async def query(self, query_embedding: List[float], top_k: int = 3) -> List[str]:
        """Return the text of the top_k most similar documents, best first."""
        results = await self.search(query_embedding, top_k)
        return [result.document for result in results]

    @abstractmethod
    async def clear(self) -> None:
        """Remove every stored document."""

    @abstractmethod
    async def count(self) -> int:
        """Number of stored documents."""


def _check_aligned(ids, embeddings, documents) -> None:
    if not (len(ids) == len(embeddings) == len(documents)):
        raise ValueError(
            f"ids, embeddings and documents must have the same length. "
            f"Got {len(ids)} ids, {len(embeddings)} embeddings "
            f"and {len(documents)} documents."
        )


class InMemoryVectorStore(VectorStore):
    """
    Simple in-process vector store.

    STATE:
    Three index-aligned lists. Position i of each list belongs to the same
    document.

    DIMENSIONALITY:
    Every vector must have the same length. The length is either given up
    front or taken from the first vector added; anything else raises
    DimensionMismatchError.

    The store is an ordinary object: create one, hand it to the Indexer and
    the Retriever, and clear() it to start over.
    """

    def __init__(self, dimension: Optional[int] = None):
        self._fixed_dimension = dimension
        self.dimension = dimension
        self.ids: List[int] = []
        self.embeddings: List[List[float]] = []
        self.documents: List[str] = []

    async def ensure_collection(self) -> None:
        # Nothing to create: the lists exist as long as the object does
        return None

    async def add(
        self,
        ids: List[int],
        embeddings: List[List[float]],
        documents: List[str]
    ) -> None:
        """
        Append aligned triples.

        No deduplication: adding an id that is already stored creates a
        second entry.

        Raises:
            ValueError: if the three lists differ in length
            DimensionMismatchError: if a vector has the wrong length
        """
        _check_aligned(ids, embeddings, documents)

        expected = self.dimension
        for embedding in embeddings:
            if expected is None:
                expected = len(embedding)
            elif len(embedding) != expected:
                raise DimensionMismatchError(expected, len(embedding))
        self.dimension = expected

        for doc_id, embedding, document in zip(ids, embeddings, documents):
            self.ids.append(doc_id)
            self.embeddings.append(list(embedding))
            self.documents.append(document)

    async def search(self, query_embedding: List[float], top_k: int = 3) -> List[SearchResult]:
        """
        Rank every stored document against the query.

        HOW IT WORKS:
        1. Cosine similarity with every stored vector
        2. Sort by score, highest first (equal scores keep insertion order)
        3. Return the first top_k

        TIME COMPLEXITY: O(n * d) where n=docs, d=dimensions
        """
        if not self.embeddings or top_k <= 0:
            return []

        if self.dimension is not None and len(query_embedding) != self.dimension:
            raise DimensionMismatchError(self.dimension, len(query_embedding))

        results = [
            SearchResult(
                id=doc_id,
                document=document,
                score=cosine_similarity(query_embedding, embedding)
            )
            for doc_id, embedding, document in zip(self.ids, self.embeddings, self.documents)
        ]

        results.sort(key=lambda x: x.score, reverse=True)

        return results[:top_k]

    async def clear(self) -> None:
        """Remove all documents. There is no undo."""
        self.ids = []
        self.embeddings = []
        self.documents = []
        self.dimension = self._fixed_dimension

    async def count(self) -> int:
        return len(self.documents)

    def __len__(self):
        """Number of documents in store."""
        return len(self.documents)
