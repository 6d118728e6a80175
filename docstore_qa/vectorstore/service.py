"""Vector store interface and Qdrant implementation."""

from abc import ABC, abstractmethod
from typing import Any

from qdrant_client import AsyncQdrantClient
from qdrant_client.models import (
    Distance,
    FieldCondition,
    Filter,
    MatchValue,
    PointStruct,
    VectorParams,
)

from docstore_qa.config import QdrantSettings, get_settings
from docstore_qa.exceptions import ErrorCode, VectorStoreError
from docstore_qa.logging_config import get_logger
from docstore_qa.vectorstore.models import IndexedPoint, SearchResult

logger = get_logger(__name__)


class VectorStore(ABC):
    """Abstract base class for vector stores.

    Defines the interface for storing and searching vectors.
    """

    @abstractmethod
    async def ensure_collection(
        self,
        name: str,
        dimensions: int,
        distance: Distance = Distance.COSINE,
    ) -> bool:
        """Create a collection unless it already exists.

        Args:
            name: Collection name.
            dimensions: Vector dimensions.
            distance: Similarity metric.

        Returns:
            True if the collection was created by this call.

        Raises:
            VectorStoreError: If the check or creation fails.
        """
        ...

    @abstractmethod
    async def delete_collection(self, name: str) -> None:
        """Delete a collection if present.

        Args:
            name: Collection name.

        Raises:
            VectorStoreError: If deletion fails.
        """
        ...

    @abstractmethod
    async def collection_exists(self, name: str) -> bool:
        """Check if a collection exists.

        Args:
            name: Collection name.

        Returns:
            True if collection exists.
        """
        ...

    @abstractmethod
    async def upsert(
        self,
        collection: str,
        points: list[IndexedPoint],
    ) -> int:
        """Write points and wait until the write is acknowledged.

        Args:
            collection: Collection name.
            points: Points to upsert.

        Returns:
            Number of points written.

        Raises:
            VectorStoreError: If upsert fails or a vector has the wrong size.
        """
        ...

    @abstractmethod
    async def search(
        self,
        collection: str,
        vector: list[float],
        limit: int = 5,
        filters: dict[str, Any] | None = None,
    ) -> list[SearchResult]:
        """Search for similar vectors.

        Args:
            collection: Collection name.
            vector: Query vector.
            limit: Maximum results to return.
            filters: Optional exact-match payload filters.

        Returns:
            Search results ordered by descending similarity.

        Raises:
            VectorStoreError: If search fails.
        """
        ...

    @abstractmethod
    async def count(self, collection: str) -> int:
        """Count points in a collection.

        Raises:
            VectorStoreError: If counting fails.
        """
        ...


class QdrantVectorStore(VectorStore):
    """Qdrant vector store implementation."""

    def __init__(
        self,
        settings: QdrantSettings | None = None,
        client: AsyncQdrantClient | None = None,
    ) -> None:
        """Initialize Qdrant vector store.

        Args:
            settings: Qdrant configuration.
            client: Existing client (for testing).
        """
        self._settings = settings or get_settings().qdrant
        self._client = client
        self._owns_client = client is None
        self._dimensions: dict[str, int] = {}

    async def _get_client(self) -> AsyncQdrantClient:
        """Get or create Qdrant client."""
        if self._client is None:
            api_key = None
            if self._settings.api_key:
                api_key = self._settings.api_key.get_secret_value()

            self._client = AsyncQdrantClient(
                url=self._settings.url,
                api_key=api_key,
            )
        return self._client

    async def close(self) -> None:
        """Close the Qdrant client."""
        if self._owns_client and self._client is not None:
            await self._client.close()
            self._client = None

    async def ensure_collection(
        self,
        name: str,
        dimensions: int,
        distance: Distance = Distance.COSINE,
    ) -> bool:
        """Create the collection if it is missing.

        Raises:
            VectorStoreError: If an existing collection holds vectors of a
                different size, or the database cannot be reached.
        """
        client = await self._get_client()

        try:
            exists = await client.collection_exists(name)
        except Exception as e:
            raise VectorStoreError(
                f"Failed to ensure collection: {e}",
                code=ErrorCode.VECTOR_STORE_ERROR,
                details={"collection": name, "error": str(e)},
            ) from e

        if exists:
            logger.debug(f"Collection already exists: {name}")
            self._dimensions.pop(name, None)
            actual = await self._collection_dimensions(name)
            if actual is not None and actual != dimensions:
                raise VectorStoreError(
                    f"Collection {name} has {actual} dimensions, expected {dimensions}",
                    code=ErrorCode.EMBEDDING_DIMENSION_MISMATCH,
                    details={
                        "collection": name,
                        "expected": dimensions,
                        "actual": actual,
                    },
                )
            return False

        try:
            await client.create_collection(
                collection_name=name,
                vectors_config=VectorParams(size=dimensions, distance=distance),
            )
        except Exception as e:
            raise VectorStoreError(
                f"Failed to ensure collection: {e}",
                code=ErrorCode.VECTOR_STORE_ERROR,
                details={"collection": name, "error": str(e)},
            ) from e

        self._dimensions[name] = dimensions
        logger.info(
            f"Created collection: {name}",
            extra={"dimensions": dimensions, "distance": str(distance)},
        )
        return True

    async def delete_collection(self, name: str) -> None:
        """Delete a Qdrant collection."""
        client = await self._get_client()

        try:
            if await client.collection_exists(name):
                await client.delete_collection(name)
                logger.info(f"Deleted collection: {name}")
        except Exception as e:
            raise VectorStoreError(
                f"Failed to delete collection: {e}",
                code=ErrorCode.VECTOR_STORE_ERROR,
                details={"collection": name, "error": str(e)},
            ) from e

        self._dimensions.pop(name, None)

    async def collection_exists(self, name: str) -> bool:
        """Check if collection exists."""
        client = await self._get_client()
        try:
            return await client.collection_exists(name)
        except Exception as e:
            raise VectorStoreError(
                f"Failed to check collection: {e}",
                code=ErrorCode.VECTOR_STORE_ERROR,
                details={"collection": name, "error": str(e)},
            ) from e

    async def _collection_dimensions(self, name: str) -> int | None:
        """Configured vector size of a collection, if it can be determined."""
        if name in self._dimensions:
            return self._dimensions[name]

        client = await self._get_client()
        try:
            info = await client.get_collection(name)
        except Exception as e:
            raise VectorStoreError(
                f"Collection not found: {name}",
                code=ErrorCode.COLLECTION_NOT_FOUND,
                details={"collection": name, "error": str(e)},
            ) from e

        # Named-vector collections have no single size
        size = getattr(info.config.params.vectors, "size", None)
        if not isinstance(size, int):
            return None
        self._dimensions[name] = size
        return size

    async def upsert(
        self,
        collection: str,
        points: list[IndexedPoint],
    ) -> int:
        """Upsert points into collection."""
        if not points:
            return 0

        expected = await self._collection_dimensions(collection)
        if expected is not None:
            for point in points:
                if len(point.vector) != expected:
                    raise VectorStoreError(
                        f"Point {point.id} has {len(point.vector)} dimensions, "
                        f"collection expects {expected}",
                        code=ErrorCode.EMBEDDING_DIMENSION_MISMATCH,
                        details={"collection": collection, "point_id": point.id},
                    )

        client = await self._get_client()

        try:
            await client.upsert(
                collection_name=collection,
                points=[
                    PointStruct(id=point.id, vector=point.vector, payload=point.payload)
                    for point in points
                ],
                wait=True,
            )
        except Exception as e:
            raise VectorStoreError(
                f"Failed to upsert points: {e}",
                code=ErrorCode.VECTOR_STORE_ERROR,
                details={"collection": collection, "error": str(e)},
            ) from e

        logger.debug(
            f"Upserted {len(points)} points",
            extra={"collection": collection},
        )
        return len(points)

    async def search(
        self,
        collection: str,
        vector: list[float],
        limit: int = 5,
        filters: dict[str, Any] | None = None,
    ) -> list[SearchResult]:
        """Search for similar vectors."""
        client = await self._get_client()

        try:
            query_filter = None
            if filters:
                conditions = [
                    FieldCondition(key=k, match=MatchValue(value=v))
                    for k, v in filters.items()
                ]
                query_filter = Filter(must=conditions)  # type: ignore[arg-type]

            results = await client.query_points(
                collection_name=collection,
                query=vector,
                limit=limit,
                query_filter=query_filter,
            )

            return [
                SearchResult(
                    id=str(point.id),
                    score=point.score if point.score is not None else 0.0,
                    payload=dict(point.payload) if point.payload else {},
                )
                for point in results.points
            ]

        except Exception as e:
            raise VectorStoreError(
                f"Failed to search: {e}",
                code=ErrorCode.VECTOR_STORE_ERROR,
                details={"collection": collection, "error": str(e)},
            ) from e

    async def count(self, collection: str) -> int:
        """Count points in a collection."""
        client = await self._get_client()
        try:
            result = await client.count(collection_name=collection, exact=True)
        except Exception as e:
            raise VectorStoreError(
                f"Failed to count points: {e}",
                code=ErrorCode.VECTOR_STORE_ERROR,
                details={"collection": collection, "error": str(e)},
            ) from e
        return result.count
