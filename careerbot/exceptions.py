"""Exceptions raised by the retrieval pipeline."""


class CareerBotError(Exception):
    """Base class for all Career Bot errors."""


class EmbeddingError(CareerBotError):
    """
    The embedding provider failed or answered with an unexpected shape.

    Covers authentication failures, network failures, HTTP errors and
    responses without a numeric ``data[0].embedding``.
    """


class VectorStoreError(CareerBotError):
    """A vector store operation failed on the backend."""


class DimensionMismatchError(VectorStoreError, ValueError):
    """A vector does not have the store's fixed dimensionality."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Vector has {actual} dimensions but the store holds "
            f"{expected}-dimensional vectors."
        )


class GenerationError(CareerBotError):
    """The chat completion call failed."""
