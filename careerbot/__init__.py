# Career Bot package
from .chunking import Chunk, SentenceChunker, split_into_chunks
from .embeddings import EmbeddingClient, cosine_similarity
from .vector_store import InMemoryVectorStore, SearchResult, VectorStore
from .indexer import Indexer, IndexingResult
from .retriever import Retriever
from .rag_pipeline import CareerBotPipeline, create_pipeline
