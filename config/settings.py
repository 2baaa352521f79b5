"""
Configuration settings for the Career Bot.

WHY THIS FILE EXISTS:
- Centralizes all configuration in one place
- Makes it easy to switch backends (in-memory vs Qdrant) without code changes
- Keeps secrets separate from code (loaded from .env)

PROVIDER CONCEPTS:
- OpenRouter exposes an OpenAI-compatible API, so the same SDK is used
  with a different base URL
- Azure OpenAI is supported too: when both Azure variables are present
  the Azure client is used and the OpenRouter key becomes optional
"""

import os
from dataclasses import dataclass, field
from typing import Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_EMBEDDINGS_MODEL = "openai/text-embedding-3-small"
DEFAULT_LLM_MODEL = "meta-llama/llama-3.3-70b-instruct:free"
DEFAULT_COLLECTION_NAME = "career-bot-collection"

VECTOR_BACKENDS = ("memory", "qdrant")


@dataclass
class ProviderConfig:
    """
    Configuration for the OpenAI-compatible provider.

    WHY ONE CONFIG FOR BOTH SERVICES:
    - Embeddings and chat completions go through the same account
    - Only the model names differ
    """
    api_key: Optional[str]
    base_url: str = OPENROUTER_BASE_URL
    embeddings_model: str = DEFAULT_EMBEDDINGS_MODEL
    llm_model: str = DEFAULT_LLM_MODEL
    azure_endpoint: Optional[str] = None
    azure_api_key: Optional[str] = None
    azure_api_version: str = "2024-02-15-preview"

    @property
    def use_azure(self) -> bool:
        return bool(self.azure_endpoint and self.azure_api_key)


@dataclass
class VectorStoreConfig:
    """
    Configuration for the vector store backend.

    WHY THESE DEFAULTS:
    - backend="memory": works without any external service
    - vector_size=1536: output size of text-embedding-3-small
    - distance="Cosine": same ranking as the in-memory store
    """
    backend: str = "memory"
    qdrant_url: Optional[str] = None
    qdrant_api_key: Optional[str] = None
    collection_name: str = DEFAULT_COLLECTION_NAME
    vector_size: int = 1536
    distance: str = "Cosine"


@dataclass
class ChunkingConfig:
    """
    Configuration for profile chunking.

    - chunk_size=1000: characters per chunk before a split is considered
    - chunk_overlap=200: roughly 40 words carried into the next chunk
    """
    chunk_size: int = 1000
    chunk_overlap: int = 200


@dataclass
class IndexingConfig:
    """
    Configuration for the batched embedding loop.

    WHY THESE DEFAULTS:
    - batch_size=5: one store write per five chunks
    - delay_seconds=0.1: pause between embedding calls to respect rate limits
    """
    batch_size: int = 5
    delay_seconds: float = 0.1


@dataclass
class RetrievalConfig:
    """Number of context passages handed to the chat layer."""
    top_k: int = 3


@dataclass
class ProfileConfig:
    """Where the profile corpus comes from and who the bot speaks as."""
    name: str = "the profile owner"
    data_dir: str = "data"
    source_file: Optional[str] = None


@dataclass
class Settings:
    """
    Main settings container.

    WHY NESTED CONFIGS:
    - Organized by concern (provider, store, chunking, indexing, retrieval)
    - Easy to override one area in tests
    """
    provider: ProviderConfig
    vector_store: VectorStoreConfig = field(default_factory=VectorStoreConfig)
    chunking: ChunkingConfig = field(default_factory=ChunkingConfig)
    indexing: IndexingConfig = field(default_factory=IndexingConfig)
    retrieval: RetrievalConfig = field(default_factory=RetrievalConfig)
    profile: ProfileConfig = field(default_factory=ProfileConfig)


def load_settings() -> Settings:
    """
    Load settings from environment variables.

    REQUIRED ENVIRONMENT VARIABLES:
    - OPENROUTER_API_KEY (unless AZURE_OPENAI_ENDPOINT and
      AZURE_OPENAI_API_KEY are both set)
    - QDRANT_URL when VECTOR_BACKEND=qdrant

    Raises:
        ValueError: if a required variable is missing or invalid. This
        happens before any indexing so a misconfigured bot never starts.
    """
    provider = ProviderConfig(
        api_key=os.getenv("OPENROUTER_API_KEY"),
        base_url=os.getenv("OPENROUTER_BASE_URL", OPENROUTER_BASE_URL),
        embeddings_model=os.getenv("EMBEDDINGS_MODEL", DEFAULT_EMBEDDINGS_MODEL),
        llm_model=os.getenv("LLM_MODEL", DEFAULT_LLM_MODEL),
        azure_endpoint=os.getenv("AZURE_OPENAI_ENDPOINT"),
        azure_api_key=os.getenv("AZURE_OPENAI_API_KEY"),
        azure_api_version=os.getenv("AZURE_OPENAI_API_VERSION", "2024-02-15-preview"),
    )

    if not provider.use_azure and not provider.api_key:
        raise ValueError(
            "OPENROUTER_API_KEY not set. "
            "Add it to your .env file or set it as an environment variable."
        )

    backend = os.getenv("VECTOR_BACKEND", "memory").strip().lower()
    if backend not in VECTOR_BACKENDS:
        raise ValueError(
            f"VECTOR_BACKEND must be one of {', '.join(VECTOR_BACKENDS)}, got '{backend}'."
        )

    vector_store = VectorStoreConfig(
        backend=backend,
        qdrant_url=os.getenv("QDRANT_URL"),
        qdrant_api_key=os.getenv("QDRANT_API_KEY"),
        collection_name=os.getenv("QDRANT_COLLECTION", DEFAULT_COLLECTION_NAME),
        vector_size=int(os.getenv("EMBEDDING_DIMENSION", "1536")),
    )

    if backend == "qdrant" and not vector_store.qdrant_url:
        raise ValueError(
            "QDRANT_URL not set. "
            "It is required when VECTOR_BACKEND=qdrant."
        )

    return Settings(
        provider=provider,
        vector_store=vector_store,
        profile=ProfileConfig(
            name=os.getenv("PROFILE_NAME", "the profile owner"),
            data_dir=os.getenv("PROFILE_DATA_DIR", "data"),
            source_file=os.getenv("PROFILE_SOURCE") or None,
        ),
    )


# Load settings once and reuse
_settings = None

def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Forget the cached settings (used by tests after changing the environment)."""
    global _settings
    _settings = None
