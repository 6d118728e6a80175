"""Pytest configuration and shared fixtures."""

import math
import re
from typing import Any

import pytest
from qdrant_client.models import Distance

from docstore_qa.documents import DocumentStore
from docstore_qa.embeddings import EmbeddingResult, EmbeddingService, EmbeddingSource
from docstore_qa.exceptions import DocumentStoreError, ErrorCode, VectorStoreError
from docstore_qa.vectorstore import IndexedPoint, SearchResult, VectorStore

_WORD = re.compile(r"[a-z0-9]+")


class KeywordEmbeddingService(EmbeddingService):
    """One-hot keyword embedder, so cosine similarity ranks keyword overlap."""

    def __init__(self, dimensions: int = 384, model: str = "keyword-test") -> None:
        self._dimensions = dimensions
        self._model = model
        self._vocabulary: dict[str, int] = {}
        self.calls: list[str] = []

    async def initialize(self) -> bool:
        return True

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def _index(self, word: str) -> int:
        if word not in self._vocabulary:
            self._vocabulary[word] = len(self._vocabulary) % self._dimensions
        return self._vocabulary[word]

    async def embed(self, text: str) -> EmbeddingResult:
        self.calls.append(text)
        vector = [0.0] * self._dimensions
        for word in set(_WORD.findall(text.lower())):
            vector[self._index(word)] = 1.0

        norm = math.sqrt(sum(v * v for v in vector))
        if norm > 0:
            vector = [v / norm for v in vector]

        return EmbeddingResult(
            text=text,
            embedding=vector,
            model=self._model,
            dimensions=self._dimensions,
            source=EmbeddingSource.REMOTE,
        )


class InMemoryVectorStore(VectorStore):
    """Cosine-similarity vector store kept in a dict."""

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, IndexedPoint]] = {}
        self.dimensions: dict[str, int] = {}
        self.upsert_calls = 0

    async def ensure_collection(
        self,
        name: str,
        dimensions: int,
        distance: Distance = Distance.COSINE,
    ) -> bool:
        if name in self.collections:
            if self.dimensions[name] != dimensions:
                raise VectorStoreError(
                    f"Collection {name} has {self.dimensions[name]} dimensions",
                    code=ErrorCode.EMBEDDING_DIMENSION_MISMATCH,
                )
            return False
        self.collections[name] = {}
        self.dimensions[name] = dimensions
        return True

    async def delete_collection(self, name: str) -> None:
        self.collections.pop(name, None)
        self.dimensions.pop(name, None)

    async def collection_exists(self, name: str) -> bool:
        return name in self.collections

    async def upsert(self, collection: str, points: list[IndexedPoint]) -> int:
        self.upsert_calls += 1
        if collection not in self.collections:
            raise VectorStoreError(
                f"Collection not found: {collection}",
                code=ErrorCode.COLLECTION_NOT_FOUND,
            )
        for point in points:
            self.collections[collection][point.id] = point
        return len(points)

    async def search(
        self,
        collection: str,
        vector: list[float],
        limit: int = 5,
        filters: dict[str, Any] | None = None,
    ) -> list[SearchResult]:
        if collection not in self.collections:
            raise VectorStoreError(
                f"Collection not found: {collection}",
                code=ErrorCode.COLLECTION_NOT_FOUND,
            )

        results = []
        for point in self.collections[collection].values():
            if filters and any(point.payload.get(k) != v for k, v in filters.items()):
                continue
            results.append(
                SearchResult(
                    id=point.id,
                    score=_cosine(vector, point.vector),
                    payload=point.payload,
                )
            )

        results.sort(key=lambda r: r.score, reverse=True)
        return results[:limit]

    async def count(self, collection: str) -> int:
        return len(self.collections.get(collection, {}))


def _cosine(a: list[float], b: list[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b, strict=True))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


class InMemoryDocumentStore(DocumentStore):
    """Document store backed by a dict of collection name to records."""

    def __init__(
        self,
        collections: dict[str, list[dict[str, Any]]] | None = None,
        failing: set[str] | None = None,
    ) -> None:
        self.collections = collections or {}
        self.failing = failing or set()

    async def list_collection_names(self) -> list[str]:
        return [n for n in self.collections if not self.is_system_collection(n)]

    async def find_all(self, collection: str) -> list[dict[str, Any]]:
        if collection in self.failing:
            raise DocumentStoreError(
                f"Failed to read collection: {collection}",
                code=ErrorCode.DOCUMENT_STORE_ERROR,
            )
        return list(self.collections.get(collection, []))

    async def count(self, collection: str) -> int:
        if collection in self.failing:
            raise DocumentStoreError(
                f"Failed to count collection: {collection}",
                code=ErrorCode.DOCUMENT_STORE_ERROR,
            )
        return len(self.collections.get(collection, []))


@pytest.fixture
def employee_records() -> list[dict[str, Any]]:
    """Two employees in different departments."""
    return [
        {
            "_id": "emp-1",
            "name": "John Doe",
            "department": "Engineering",
            "skills": ["JavaScript", "Node.js"],
        },
        {
            "_id": "emp-2",
            "name": "Jane Smith",
            "department": "Marketing",
            "skills": ["Analytics"],
        },
    ]


@pytest.fixture
def document_store(employee_records: list[dict[str, Any]]) -> InMemoryDocumentStore:
    """Store with an employees collection and a reserved system collection."""
    return InMemoryDocumentStore(
        {
            "employees": employee_records,
            "system.profile": [{"_id": "p1", "op": "query"}],
        }
    )


@pytest.fixture
def embedding_service() -> KeywordEmbeddingService:
    """Keyword-overlap embedder."""
    return KeywordEmbeddingService()


@pytest.fixture
def vector_store() -> InMemoryVectorStore:
    """Empty in-memory vector store."""
    return InMemoryVectorStore()
