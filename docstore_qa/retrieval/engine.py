"""Indexing of source collections and similarity retrieval."""

from typing import Any
from uuid import uuid4

from pydantic_core import to_jsonable_python
from qdrant_client.models import Distance

from docstore_qa.documents.serializer import DocumentSerializer
from docstore_qa.documents.store import DocumentStore
from docstore_qa.embeddings.service import EmbeddingService
from docstore_qa.logging_config import get_logger
from docstore_qa.observability.metrics import track_indexing, track_retrieval_request
from docstore_qa.retrieval.models import IndexReport, RetrievalResult
from docstore_qa.vectorstore.models import IndexedPoint
from docstore_qa.vectorstore.service import VectorStore

logger = get_logger(__name__)

DEFAULT_LIMIT = 5


class RetrievalEngine:
    """Turns source records into indexed points and finds them again.

    The same ``EmbeddingService`` instance embeds both records and queries.
    Every point records which embedding path produced its vector, and
    searches only consider points from the query's own path, so vectors from
    the remote model and from the fallback are never compared.

    Indexing is append-only: every pass writes points with fresh ids and
    never removes older ones. ``reset`` clears the index explicitly.
    """

    def __init__(
        self,
        document_store: DocumentStore,
        embedding_service: EmbeddingService,
        vector_store: VectorStore,
        collection: str,
        serializer: DocumentSerializer | None = None,
        system_prefix: str = "system.",
    ) -> None:
        """Initialize the retrieval engine.

        Args:
            document_store: Store whose records are indexed.
            embedding_service: Shared embedder for records and queries.
            vector_store: Vector database holding the points.
            collection: Name of the vector collection.
            serializer: Record-to-text renderer.
            system_prefix: Source collections with this prefix are skipped.
        """
        self._document_store = document_store
        self._embedding_service = embedding_service
        self._vector_store = vector_store
        self._collection = collection
        self._serializer = serializer or DocumentSerializer()
        self._system_prefix = system_prefix

    @property
    def collection(self) -> str:
        return self._collection

    async def ensure_index(self) -> bool:
        """Create the vector collection if needed.

        Returns:
            True if the collection is ready.
        """
        try:
            await self._vector_store.ensure_collection(
                self._collection,
                dimensions=self._embedding_service.dimensions,
                distance=Distance.COSINE,
            )
        except Exception as e:
            logger.error(
                f"Could not prepare vector collection: {e}",
                extra={"collection": self._collection},
            )
            return False
        return True

    async def reset(self) -> bool:
        """Drop every indexed point by recreating the vector collection."""
        try:
            await self._vector_store.delete_collection(self._collection)
        except Exception as e:
            logger.error(
                f"Could not reset vector collection: {e}",
                extra={"collection": self._collection},
            )
            return False
        return await self.ensure_index()

    def _document_id(self, record: dict[str, Any]) -> str:
        value = record.get(self._serializer.id_field)
        return "" if value is None else str(value)

    async def build_points(self, name: str) -> list[IndexedPoint]:
        """Serialize and embed every record of a source collection.

        Raises:
            DocumentStoreError: If the collection cannot be read.
        """
        records = await self._document_store.find_all(name)
        points: list[IndexedPoint] = []

        for record in records:
            text = self._serializer.serialize(name, record)
            embedding = await self._embedding_service.embed(text)
            points.append(
                IndexedPoint(
                    id=str(uuid4()),
                    vector=embedding.embedding,
                    payload={
                        "text": text,
                        "collection": name,
                        "document_id": self._document_id(record),
                        "data": to_jsonable_python(record, fallback=str),
                        "embedding_model": embedding.model,
                    },
                )
            )

        return points

    async def index_collection(self, name: str) -> int:
        """Index one source collection in a single upsert.

        Args:
            name: Source collection name.

        Returns:
            Number of points written; 0 for reserved, empty or failed runs.
        """
        if name.startswith(self._system_prefix):
            logger.debug(f"Skipping system collection: {name}")
            return 0

        try:
            points = await self.build_points(name)
            if not points:
                return 0
            written = await self._vector_store.upsert(self._collection, points)
        except Exception as e:
            logger.error(
                f"Indexing failed: {e}",
                extra={"source_collection": name, "collection": self._collection},
            )
            return 0

        track_indexing(name, written)
        logger.info(
            f"Indexed {written} documents",
            extra={"source_collection": name, "collection": self._collection},
        )
        return written

    async def index_all(self) -> IndexReport:
        """Index every non-system source collection in a single upsert."""
        report = IndexReport()

        try:
            names = await self._document_store.list_collection_names()
        except Exception as e:
            logger.error(f"Could not list source collections: {e}")
            report.error = str(e)
            return report

        points: list[IndexedPoint] = []
        for name in names:
            if name.startswith(self._system_prefix):
                continue

            logger.info(f"Processing collection: {name}")
            try:
                collection_points = await self.build_points(name)
            except Exception as e:
                logger.error(
                    f"Skipping collection that could not be read: {e}",
                    extra={"source_collection": name},
                )
                report.error = str(e)
                continue

            report.collections[name] = len(collection_points)
            points.extend(collection_points)

        if not points:
            return report

        try:
            report.points_indexed = await self._vector_store.upsert(
                self._collection, points
            )
        except Exception as e:
            logger.error(
                f"Indexing failed: {e}",
                extra={"collection": self._collection, "points": len(points)},
            )
            report.error = str(e)
            return report

        for name, count in report.collections.items():
            track_indexing(name, count)
        logger.info(
            f"Indexed {report.points_indexed} documents",
            extra={"collection": self._collection, "sources": report.collections},
        )
        return report

    async def retrieve(
        self,
        query: str,
        limit: int = DEFAULT_LIMIT,
    ) -> list[RetrievalResult]:
        """Find the records most similar to a query.

        Args:
            query: Natural-language query.
            limit: Maximum number of results.

        Returns:
            Results ordered by descending score; empty on any failure.
        """
        if not query.strip():
            return []

        try:
            embedding = await self._embedding_service.embed(query)
            search_results = await self._vector_store.search(
                collection=self._collection,
                vector=embedding.embedding,
                limit=limit,
                filters={"embedding_model": embedding.model},
            )
            results = [
                RetrievalResult(
                    text=sr.payload.get("text", ""),
                    collection=sr.payload.get("collection", ""),
                    document_id=str(sr.payload.get("document_id", sr.id)),
                    data=sr.payload.get("data") or {},
                    score=sr.score,
                )
                for sr in search_results
            ]
        except Exception as e:
            logger.error(
                f"Retrieval failed: {e}",
                extra={"query_length": len(query), "collection": self._collection},
            )
            return []

        track_retrieval_request(
            results_returned=len(results),
            top_score=results[0].score if results else 0.0,
        )
        logger.debug(
            f"Retrieved {len(results)} results for query",
            extra={
                "query_length": len(query),
                "limit": limit,
                "embedding_model": embedding.model,
            },
        )
        return results
