"""
Shared test fixtures.

Provides: a deterministic embedding client that can be told to fail on
given texts, and settings that need no environment variables.
"""

import json
import string
import sys
from pathlib import Path
from typing import Iterable, List, Optional

import httpx
import openai
import pytest

# add project root to sys.path
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from careerbot.embeddings import EmbeddingResult  # noqa: E402
from careerbot.exceptions import EmbeddingError  # noqa: E402
from config.settings import IndexingConfig, ProviderConfig, Settings  # noqa: E402


def letter_vector(text: str) -> List[float]:
    """26-dimensional letter histogram: same text, same vector."""
    lowered = text.lower()
    return [float(lowered.count(letter)) for letter in string.ascii_lowercase]


class FakeEmbeddingClient:
    """Stands in for EmbeddingClient without any network."""

    def __init__(self, fail_on: Optional[Iterable[str]] = None):
        self.fail_on = set(fail_on or [])
        self.calls: List[str] = []
        self.model = "fake-embedding"

    async def create_embedding(self, text: str) -> EmbeddingResult:
        self.calls.append(text)
        if text in self.fail_on:
            raise EmbeddingError(f"provider refused: {text}")
        return EmbeddingResult(
            text=text,
            embedding=letter_vector(text),
            model=self.model,
            token_count=1
        )

    async def embed(self, text: str) -> List[float]:
        result = await self.create_embedding(text)
        return result.embedding


@pytest.fixture
def fake_embedder():
    return FakeEmbeddingClient()


@pytest.fixture
def test_settings():
    """Settings for an in-memory bot that index without pauses."""
    settings = Settings(provider=ProviderConfig(api_key="test-key"))
    settings.indexing = IndexingConfig(batch_size=5, delay_seconds=0)
    settings.vector_store.vector_size = 26
    return settings


def embeddings_api(fail_on: Optional[Iterable[str]] = None, failure_body: Optional[dict] = None):
    """
    A real AsyncOpenAI client whose HTTP layer is an in-process fake.

    Texts in fail_on get HTTP 200 with failure_body (an OpenRouter-style
    error object by default); every other text gets its letter_vector.
    """
    fail_on = set(fail_on or [])
    if failure_body is None:
        failure_body = {"error": {"message": "Upstream provider error", "code": 502}}

    def handler(request: httpx.Request) -> httpx.Response:
        text = json.loads(request.content)["input"]
        if text in fail_on:
            return httpx.Response(200, json=failure_body)
        return httpx.Response(200, json={
            "object": "list",
            "data": [{"object": "embedding", "index": 0, "embedding": letter_vector(text)}],
            "model": "test-embedding",
            "usage": {"prompt_tokens": 1, "total_tokens": 1},
        })

    return openai.AsyncOpenAI(
        api_key="test-key",
        base_url="http://embeddings.test/v1",
        max_retries=0,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
