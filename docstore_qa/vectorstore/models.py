"""Vector store data models."""

from typing import Any

from pydantic import BaseModel, Field


class IndexedPoint(BaseModel):
    """A point to store in the vector database.

    Attributes:
        id: Unique identifier, fresh for every indexing pass.
        vector: The embedding vector.
        payload: Serialized text, source location and record snapshot.
    """

    id: str = Field(description="Unique point identifier")
    vector: list[float] = Field(description="Embedding vector")
    payload: dict[str, Any] = Field(
        default_factory=dict,
        description="Metadata payload",
    )


class SearchResult(BaseModel):
    """Result from a vector similarity search.

    Attributes:
        id: Point identifier.
        score: Similarity score (higher is more similar).
        payload: Stored metadata.
    """

    id: str = Field(description="Point identifier")
    score: float = Field(description="Similarity score")
    payload: dict[str, Any] = Field(
        default_factory=dict,
        description="Point metadata",
    )
