"""Embedding data models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class EmbeddingSource(str, Enum):
    """Which path produced an embedding."""

    REMOTE = "remote"
    FALLBACK = "fallback"


class EmbeddingResult(BaseModel):
    """Result of an embedding operation.

    Attributes:
        text: The original text that was embedded.
        embedding: The embedding vector.
        model: The model used to generate the embedding.
        dimensions: Number of dimensions in the embedding.
        source: Remote model or deterministic fallback.
    """

    model_config = ConfigDict(frozen=True)

    text: str = Field(description="Original text")
    embedding: list[float] = Field(description="Embedding vector")
    model: str = Field(description="Model used for embedding")
    dimensions: int = Field(description="Vector dimensions")
    source: EmbeddingSource = Field(
        default=EmbeddingSource.REMOTE,
        description="Path that produced the vector",
    )

    def model_post_init(self, __context: object) -> None:
        """Validate dimensions match embedding length."""
        if self.dimensions != len(self.embedding):
            raise ValueError(
                f"dimensions ({self.dimensions}) does not match "
                f"embedding length ({len(self.embedding)})"
            )

    @property
    def is_fallback(self) -> bool:
        """Whether the vector came from the deterministic fallback."""
        return self.source == EmbeddingSource.FALLBACK
