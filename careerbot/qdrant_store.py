"""
Qdrant-backed vector store.

Storage and nearest-neighbor search are delegated to a Qdrant collection
created with a fixed vector size and cosine distance. Each chunk becomes a
point whose payload carries the chunk text:

    {"id": 7, "vector": [...], "payload": {"document": "...", "chunk_id": 7}}

Writes are upserts, so re-adding an id replaces the stored point. clear()
drops the collection and creates it again; a query that races with it may
find no collection and then simply returns no results.
"""

from typing import Any, List, Optional

from qdrant_client import AsyncQdrantClient, models
from qdrant_client.http.exceptions import ResponseHandlingException, UnexpectedResponse

from careerbot.exceptions import DimensionMismatchError, VectorStoreError
from careerbot.logging_utils import get_class_logger
from careerbot.vector_store import SearchResult, VectorStore, _check_aligned

QDRANT_ERRORS = (UnexpectedResponse, ResponseHandlingException)


class QdrantVectorStore(VectorStore):
    """
    Persistent vector store on top of ``AsyncQdrantClient``.

    Args:
        client: An AsyncQdrantClient (or anything with the same async methods)
        collection_name: Name of the collection holding the profile chunks
        vector_size: Dimensionality every point must have
        distance: Qdrant distance name, "Cosine" to match the in-memory store
    """

    def __init__(
        self,
        client: Any,
        collection_name: str = "career-bot-collection",
        vector_size: int = 1536,
        distance: str = "Cosine"
    ):
        self.client = client
        self.collection_name = collection_name
        self.vector_size = vector_size
        self.distance = models.Distance(distance)
        self.logger = get_class_logger(self.__class__)

    @classmethod
    def from_url(
        cls,
        url: str,
        api_key: Optional[str] = None,
        **kwargs
    ) -> "QdrantVectorStore":
        return cls(AsyncQdrantClient(url=url, api_key=api_key), **kwargs)

    async def _collection_exists(self) -> bool:
        response = await self.client.get_collections()
        return any(
            collection.name == self.collection_name
            for collection in response.collections
        )

    async def create_collection(self) -> None:
        """
        Create the collection unless a collection with that name exists.

        Safe to call any number of times.
        """
        try:
            if await self._collection_exists():
                self.logger.info("Collection already exists: %s", self.collection_name)
                return

            self.logger.info("Creating collection: %s", self.collection_name)
            await self.client.create_collection(
                collection_name=self.collection_name,
                vectors_config=models.VectorParams(
                    size=self.vector_size,
                    distance=self.distance,
                ),
            )
            self.logger.info("Collection created successfully")
        except QDRANT_ERRORS as e:
            self.logger.error("Error creating collection %s: %s", self.collection_name, e)
            raise VectorStoreError(f"Could not create collection '{self.collection_name}'") from e

    async def ensure_collection(self) -> None:
        await self.create_collection()

    async def add(
        self,
        ids: List[int],
        embeddings: List[List[float]],
        documents: List[str]
    ) -> None:
        """
        Upsert aligned triples as points.

        Raises:
            ValueError: if the three lists differ in length
            DimensionMismatchError: if a vector does not match vector_size
            VectorStoreError: if Qdrant rejects the write
        """
        _check_aligned(ids, embeddings, documents)

        for embedding in embeddings:
            if len(embedding) != self.vector_size:
                raise DimensionMismatchError(self.vector_size, len(embedding))

        points = [
            models.PointStruct(
                id=doc_id,
                vector=list(embedding),
                payload={"document": document, "chunk_id": doc_id},
            )
            for doc_id, embedding, document in zip(ids, embeddings, documents)
        ]

        try:
            await self.client.upsert(
                collection_name=self.collection_name,
                points=points,
                wait=True,
            )
        except QDRANT_ERRORS as e:
            self.logger.error("Error adding documents to Qdrant: %s", e)
            raise VectorStoreError("Could not upsert points") from e

    async def search(self, query_embedding: List[float], top_k: int = 3) -> List[SearchResult]:
        response = await self.client.query_points(
            collection_name=self.collection_name,
            query=list(query_embedding),
            limit=top_k,
            with_payload=True,
        )

        return [
            SearchResult(
                id=point.id,
                document=(point.payload or {}).get("document", ""),
                score=point.score,
            )
            for point in response.points
        ]

    async def query(self, query_embedding: List[float], top_k: int = 3) -> List[str]:
        """
        Nearest-neighbor search inside Qdrant, unwrapped to document text.

        Any failure (collection missing, network, bad request) is logged and
        turned into an empty list.
        """
        try:
            results = await self.search(query_embedding, top_k)
        except Exception as e:
            self.logger.error("Error querying Qdrant: %s", e)
            return []

        return [result.document for result in results]

    async def clear(self) -> None:
        """Delete the collection and create it again."""
        try:
            await self.client.delete_collection(collection_name=self.collection_name)
        except QDRANT_ERRORS as e:
            self.logger.error("Error clearing collection: %s", e)
            raise VectorStoreError(f"Could not delete collection '{self.collection_name}'") from e

        await self.create_collection()

    async def get_info(self) -> Optional[Any]:
        """Collection metadata (including points_count), or None on error."""
        try:
            return await self.client.get_collection(collection_name=self.collection_name)
        except Exception as e:
            self.logger.error("Error getting collection info: %s", e)
            return None

    async def count(self) -> int:
        info = await self.get_info()
        return (getattr(info, "points_count", None) or 0) if info is not None else 0

    async def close(self) -> None:
        await self.client.close()
