"""Question-answering system over a document store.

``QASystem`` owns the connections to the document store, the embedding
model, the vector database and the generation model. It is built once,
passed explicitly to whatever needs it, and used as an ``async with`` scope.
"""

from datetime import UTC, datetime
from types import TracebackType
from typing import Any

from docstore_qa import __version__
from docstore_qa.config import Settings, get_settings
from docstore_qa.documents import DocumentSerializer, DocumentStore, MongoDocumentStore
from docstore_qa.embeddings import EmbeddingService, OllamaEmbeddingService
from docstore_qa.llm import LLMClient, OllamaClient
from docstore_qa.logging_config import get_logger, setup_logging
from docstore_qa.rag import AnswerResult, AnswerSynthesizer
from docstore_qa.retrieval import DEFAULT_LIMIT, IndexReport, RetrievalEngine, RetrievalResult
from docstore_qa.vectorstore import QdrantVectorStore, VectorStore

logger = get_logger(__name__)


class QASystem:
    """Indexes a document store and answers questions about its contents.

    Example:
        async with QASystem.from_settings() as qa:
            await qa.index_collection()
            print(await qa.answer("Who works in engineering?"))
    """

    def __init__(
        self,
        document_store: DocumentStore,
        embedding_service: EmbeddingService,
        vector_store: VectorStore,
        llm_client: LLMClient,
        collection: str = "mongodb_content",
        serializer: DocumentSerializer | None = None,
        default_model: str = "phi",
    ) -> None:
        """Initialize the system from its collaborators.

        Args:
            document_store: Source of records.
            embedding_service: Shared embedder for records and queries.
            vector_store: Vector database.
            llm_client: Generation model client.
            collection: Vector collection name.
            serializer: Record-to-text renderer.
            default_model: Model whose tuning applies to unknown models.
        """
        self.document_store = document_store
        self.embedding_service = embedding_service
        self.vector_store = vector_store
        self.llm_client = llm_client

        self.engine = RetrievalEngine(
            document_store=document_store,
            embedding_service=embedding_service,
            vector_store=vector_store,
            collection=collection,
            serializer=serializer,
            system_prefix=document_store.system_prefix,
        )
        self.synthesizer = AnswerSynthesizer(
            retriever=self.engine,
            llm_client=llm_client,
            default_model=default_model,
        )
        self._ready = False

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "QASystem":
        """Build a system with the default clients for the given settings."""
        settings = settings or get_settings()
        setup_logging(level=settings.log_level)
        return cls(
            document_store=MongoDocumentStore(settings.mongo),
            embedding_service=OllamaEmbeddingService(settings.embedding),
            vector_store=QdrantVectorStore(settings.qdrant),
            llm_client=OllamaClient(settings.llm),
            collection=settings.qdrant.collection_name,
            serializer=DocumentSerializer(id_field=settings.mongo.id_field),
            default_model=settings.llm.default_model,
        )

    async def __aenter__(self) -> "QASystem":
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def open(self) -> bool:
        """Probe the embedding model and prepare the vector collection.

        Returns:
            True if the vector collection is ready.
        """
        logger.info(
            "Starting document store QA",
            extra={"version": __version__, "collection": self.engine.collection},
        )
        await self.embedding_service.initialize()
        self._ready = await self.engine.ensure_index()
        return self._ready

    async def close(self) -> None:
        """Close every client the system owns."""
        for component in (
            self.llm_client,
            self.vector_store,
            self.embedding_service,
            self.document_store,
        ):
            close = getattr(component, "close", None)
            if close is None:
                continue
            try:
                await close()
            except Exception as e:
                logger.warning(
                    f"Error closing {type(component).__name__}: {e}",
                )
        self._ready = False
        logger.info("Shutting down document store QA")

    @property
    def ready(self) -> bool:
        return self._ready

    async def index_collection(self) -> int:
        """Index every non-system collection of the document store.

        Returns:
            Number of points written; 0 on failure.
        """
        report = await self.index_report()
        if not report.ok:
            logger.warning(
                f"Indexing finished with errors: {report.error}",
                extra={"points_indexed": report.points_indexed},
            )
        return report.points_indexed

    async def index_report(self) -> IndexReport:
        """Index the whole document store and report per-collection counts."""
        return await self.engine.index_all()

    async def reset(self) -> bool:
        """Remove every indexed point."""
        return await self.engine.reset()

    async def retrieve(
        self,
        query: str,
        limit: int = DEFAULT_LIMIT,
    ) -> list[RetrievalResult]:
        """Find the records most similar to a query; empty on failure."""
        return await self.engine.retrieve(query, limit=limit)

    async def answer(self, question: str) -> str:
        """Answer a question about the document store."""
        return await self.synthesizer.answer(question)

    async def ask(self, question: str) -> AnswerResult:
        """Answer a question, with status and source attributions."""
        return await self.synthesizer.synthesize(question)

    async def collection_stats(self) -> dict[str, int]:
        """Count the records of every non-system collection.

        Returns:
            Mapping of collection name to record count; empty on failure.
        """
        try:
            names = await self.document_store.list_collection_names()
            return {
                name: await self.document_store.count(name)
                for name in names
                if not self.document_store.is_system_collection(name)
            }
        except Exception as e:
            logger.error(f"Error getting collection stats: {e}")
            return {}

    async def health(self) -> dict[str, Any]:
        """Report which dependencies are reachable.

        Returns:
            Readiness status with component checks and the number of
            indexed points.
        """
        checks: dict[str, str] = {}
        indexed_points = 0

        try:
            reachable = await self.document_store.ping()
        except Exception:
            reachable = False
        checks["document_store"] = "ok" if reachable else "error"

        try:
            if await self.vector_store.collection_exists(self.engine.collection):
                indexed_points = await self.vector_store.count(self.engine.collection)
            checks["vector_store"] = "ok"
        except Exception:
            checks["vector_store"] = "error"

        try:
            models = await self.llm_client.list_models()
            checks["llm"] = "ok" if models else "no_models"
        except Exception:
            checks["llm"] = "error"

        available = getattr(self.embedding_service, "available", True)
        checks["embedding"] = "ok" if available else "fallback"

        all_ok = checks["document_store"] == "ok" and checks["vector_store"] == "ok"
        return {
            "status": "ready" if all_ok else "not_ready",
            "checks": checks,
            "indexed_points": indexed_points,
            "timestamp": datetime.now(UTC).isoformat(),
        }
