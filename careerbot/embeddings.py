"""
Embeddings Module

WHAT ARE EMBEDDINGS:
Embeddings convert text into vectors (lists of numbers) that capture meaning.
Similar texts have similar vectors, so "Where did you study?" lands close to
the Education section of the profile even without shared keywords.

HOW WE GET THEM:
- One request per text to an OpenAI-compatible /embeddings endpoint
  (OpenRouter by default, Azure OpenAI when configured)
- Request body: {model, input: <text>, encoding_format: "float"}
- Some providers answer HTTP 200 with an {"error": ...} body, which has no data
- The vector is read from data[0].embedding
- text-embedding-3-small returns 1536 numbers

FAILURES:
Anything that goes wrong (bad key, network, HTTP error, a response without a
numeric data[0].embedding) raises EmbeddingError. No fallback vector is made
up: a chunk without a real embedding must not end up in the store.

DISTANCE METRIC:
- Cosine Similarity: measures the angle between vectors
  - 1.0 = identical direction
  - 0.0 = perpendicular (unrelated)
  - -1.0 = opposite
"""

from numbers import Real
from typing import Any, List, Optional
from dataclasses import dataclass
import numpy as np
import openai
from openai import AsyncAzureOpenAI, AsyncOpenAI

from config.settings import Settings, get_settings
from careerbot.exceptions import EmbeddingError
from careerbot.logging_utils import get_logger

logger = get_logger("embeddings")


@dataclass
class EmbeddingResult:
    """
    Result of embedding a piece of text.

    - embedding: the vector
    - model: which model produced it (vectors of different models never mix)
    - token_count: usage reported by the provider, 0 if it reports none
    """
    text: str
    embedding: List[float]
    model: str
    token_count: int

    @property
    def dimension(self) -> int:
        """Get the embedding dimension (1536 for text-embedding-3-small)."""
        return len(self.embedding)


class EmbeddingClient:
    """
    Async client for generating embeddings.

    WHY A CLASS:
    - Owns the SDK client (and its connection pool)
    - One place that checks the response shape
    - Easy to replace with a stub in tests (pass client=...)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[Any] = None,
        settings: Optional[Settings] = None
    ):
        """
        Initialize the embedding client.

        Args:
            api_key: Provider API key (defaults to settings)
            base_url: OpenAI-compatible base URL (defaults to settings)
            model: Embedding model name (defaults to settings)
            client: Pre-built AsyncOpenAI-like client, mostly for tests
            settings: Settings to read defaults from (defaults to get_settings())

        Settings are only read for values that were not passed in.
        """
        if client is not None and model is not None:
            self.model = model
            self.client = client
            return

        provider = (settings or get_settings()).provider

        self.model = model or provider.embeddings_model

        if client is not None:
            self.client = client
        elif provider.use_azure and api_key is None and base_url is None:
            self.client = AsyncAzureOpenAI(
                azure_endpoint=provider.azure_endpoint,
                api_key=provider.azure_api_key,
                api_version=provider.azure_api_version
            )
        else:
            self.client = AsyncOpenAI(
                api_key=api_key or provider.api_key,
                base_url=base_url or provider.base_url
            )

    async def create_embedding(self, text: str) -> EmbeddingResult:
        """
        Embed a single text and keep the usage metadata.

        Raises:
            EmbeddingError: provider failure or malformed response
        """
        try:
            # Ask for plain floats so the response shape is checked here, not
            # by the SDK's base64 decoder
            response = await self.client.embeddings.create(
                model=self.model,
                input=text,
                encoding_format="float"
            )
        except (openai.OpenAIError, ValueError) as e:
            logger.error("Embedding request failed: %s", e)
            raise EmbeddingError(f"Embedding request failed: {e}") from e

        embedding = _extract_embedding(response)

        usage = getattr(response, "usage", None)
        token_count = getattr(usage, "total_tokens", None) or 0

        return EmbeddingResult(
            text=text,
            embedding=embedding,
            model=self.model,
            token_count=token_count
        )

    async def embed(self, text: str) -> List[float]:
        """Embed a single text and return only the vector."""
        result = await self.create_embedding(text)
        return result.embedding

    async def close(self) -> None:
        close = getattr(self.client, "close", None)
        if close is not None:
            await close()


def _extract_embedding(response: Any) -> List[float]:
    """Read data[0].embedding, refusing anything that is not a list of numbers."""
    data = getattr(response, "data", None)
    if not data:
        raise EmbeddingError("Malformed embedding response: missing 'data'")

    embedding = getattr(data[0], "embedding", None)
    if not isinstance(embedding, list) or not embedding:
        raise EmbeddingError("Malformed embedding response: missing 'data[0].embedding'")

    if not all(isinstance(x, Real) and not isinstance(x, bool) for x in embedding):
        raise EmbeddingError("Malformed embedding response: embedding is not numeric")

    return [float(x) for x in embedding]


def cosine_similarity(vec1: List[float], vec2: List[float]) -> float:
    """
    Calculate cosine similarity between two vectors.

    FORMULA:
    cosine_similarity = (A · B) / (||A|| * ||B||)

    A zero vector has no direction, so it scores 0.0 against anything.
    """
    a = np.asarray(vec1, dtype=float)
    b = np.asarray(vec2, dtype=float)

    dot_product = np.dot(a, b)
    magnitude_a = np.linalg.norm(a)
    magnitude_b = np.linalg.norm(b)

    if magnitude_a == 0 or magnitude_b == 0:
        return 0.0

    return float(dot_product / (magnitude_a * magnitude_b))
