"""Retrieval data models."""

from typing import Any

from pydantic import BaseModel, Field


class RetrievalResult(BaseModel):
    """A record retrieved for a query.

    Attributes:
        text: Serialized text of the record, as it was embedded.
        collection: Source collection name.
        document_id: Identifier of the record in its collection.
        data: Snapshot of the original record.
        score: Similarity score (higher is more relevant).
    """

    text: str = Field(description="Serialized record text")
    collection: str = Field(description="Source collection name")
    document_id: str = Field(description="Source record identifier")
    data: dict[str, Any] = Field(
        default_factory=dict,
        description="Original record snapshot",
    )
    score: float = Field(description="Similarity score")


class IndexReport(BaseModel):
    """Outcome of indexing the whole document store.

    Attributes:
        points_indexed: Points written to the vector index.
        collections: Points prepared per source collection.
        error: Failure message when the run degraded, else None.
    """

    points_indexed: int = Field(default=0, description="Points written")
    collections: dict[str, int] = Field(
        default_factory=dict,
        description="Points prepared per source collection",
    )
    error: str | None = Field(default=None, description="Failure message")

    @property
    def ok(self) -> bool:
        return self.error is None
