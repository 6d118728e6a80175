"""Embedding service interface and Ollama implementation."""

import time
from abc import ABC, abstractmethod

import httpx

from docstore_qa.config import EmbeddingSettings, get_settings
from docstore_qa.embeddings.fallback import DeterministicFallbackEmbedder
from docstore_qa.embeddings.models import EmbeddingResult, EmbeddingSource
from docstore_qa.exceptions import EmbeddingError, ErrorCode
from docstore_qa.logging_config import get_logger
from docstore_qa.observability.metrics import track_embedding_request

logger = get_logger(__name__)


class EmbeddingService(ABC):
    """Abstract base class for embedding services.

    Implementations never raise from ``embed``: when the underlying model
    cannot produce a vector they return a fallback embedding instead, marked
    through ``EmbeddingResult.source``.
    """

    @abstractmethod
    async def initialize(self) -> bool:
        """Probe whether the embedding model is available.

        Returns:
            True if the remote model will be used.
        """
        ...

    @abstractmethod
    async def embed(self, text: str) -> EmbeddingResult:
        """Generate embedding for a single text.

        Args:
            text: Text to embed.

        Returns:
            EmbeddingResult with vector.
        """
        ...

    async def embed_batch(self, texts: list[str]) -> list[EmbeddingResult]:
        """Generate embeddings for multiple texts, one request at a time.

        Args:
            texts: List of texts to embed.

        Returns:
            List of EmbeddingResult objects in input order.
        """
        return [await self.embed(text) for text in texts]

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model name used for embeddings."""
        ...

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Get the embedding dimensions."""
        ...


class OllamaEmbeddingService(EmbeddingService):
    """Embedding service backed by an Ollama host.

    Uses ``/api/tags`` to detect the model and ``/api/embeddings`` to embed.
    Falls back to ``DeterministicFallbackEmbedder`` when the model is missing,
    the host is unreachable, or a returned vector has the wrong size.
    """

    def __init__(
        self,
        settings: EmbeddingSettings | None = None,
        client: httpx.AsyncClient | None = None,
        fallback: DeterministicFallbackEmbedder | None = None,
    ) -> None:
        """Initialize the Ollama embedding service.

        Args:
            settings: Embedding configuration. Uses defaults if not provided.
            client: HTTP client. Creates new one if not provided.
            fallback: Embedder used on the degraded path.
        """
        self._settings = settings or get_settings().embedding
        self._client = client
        self._owns_client = client is None
        self._fallback = fallback or DeterministicFallbackEmbedder(
            dimensions=self._settings.dimensions
        )
        self._available = False

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._settings.timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def model_name(self) -> str:
        """Get the model name."""
        return self._settings.model

    @property
    def dimensions(self) -> int:
        """Get embedding dimensions."""
        return self._settings.dimensions

    @property
    def available(self) -> bool:
        """Whether the last probe found the remote model."""
        return self._available

    def _matches_model(self, listed_name: str) -> bool:
        wanted = self._settings.model.split(":", 1)[0]
        return listed_name == self._settings.model or listed_name.split(":", 1)[0] == wanted

    async def initialize(self) -> bool:
        """Check the Ollama model listing for the configured embedding model."""
        client = await self._get_client()
        url = f"{self._settings.base_url}/api/tags"

        try:
            response = await client.get(url)
            response.raise_for_status()
            models = response.json().get("models", [])
            names = [m.get("name", "") for m in models]
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            logger.warning(
                f"Could not reach embedding host, using fallback embeddings: {e}",
                extra={"url": url},
            )
            self._available = False
            return False

        self._available = any(self._matches_model(name) for name in names)
        if self._available:
            logger.info(f"Using embedding model: {self._settings.model}")
        else:
            logger.warning(
                f"Embedding model {self._settings.model} not found, "
                "using fallback embeddings",
                extra={"available_models": names},
            )
        return self._available

    async def embed(self, text: str) -> EmbeddingResult:
        """Embed text remotely, or deterministically when that is not possible."""
        start_time = time.perf_counter()

        if self._available:
            try:
                vector = await self._embed_remote(text)
            except EmbeddingError as e:
                logger.warning(
                    f"Remote embedding failed, using fallback: {e.message}",
                    extra={"code": e.code.value, "details": e.details},
                )
            else:
                track_embedding_request(
                    model=self._settings.model,
                    duration=time.perf_counter() - start_time,
                    source=EmbeddingSource.REMOTE.value,
                )
                return EmbeddingResult(
                    text=text,
                    embedding=vector,
                    model=self._settings.model,
                    dimensions=len(vector),
                    source=EmbeddingSource.REMOTE,
                )

        vector = self._fallback.embed(text)
        track_embedding_request(
            model=self._fallback.model_name,
            duration=time.perf_counter() - start_time,
            source=EmbeddingSource.FALLBACK.value,
        )
        return EmbeddingResult(
            text=text,
            embedding=vector,
            model=self._fallback.model_name,
            dimensions=len(vector),
            source=EmbeddingSource.FALLBACK,
        )

    async def _embed_remote(self, text: str) -> list[float]:
        """Call the embeddings endpoint.

        Raises:
            EmbeddingError: If the request fails or the vector is unusable.
        """
        client = await self._get_client()
        url = f"{self._settings.base_url}/api/embeddings"
        payload = {"model": self._settings.model, "prompt": text}

        try:
            response = await client.post(url, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise EmbeddingError(
                f"Embedding service returned {e.response.status_code}",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                details={"status_code": e.response.status_code},
            ) from e
        except httpx.RequestError as e:
            raise EmbeddingError(
                f"Failed to connect to embedding service: {e}",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                details={"url": url},
            ) from e

        try:
            vector = [float(v) for v in response.json()["embedding"]]
        except (KeyError, TypeError, ValueError) as e:
            raise EmbeddingError(
                f"Invalid response from embedding service: {e}",
                code=ErrorCode.EMBEDDING_SERVICE_ERROR,
                details={"error": str(e)},
            ) from e

        if len(vector) != self._settings.dimensions:
            raise EmbeddingError(
                f"Embedding has {len(vector)} dimensions, "
                f"expected {self._settings.dimensions}",
                code=ErrorCode.EMBEDDING_DIMENSION_MISMATCH,
                details={"model": self._settings.model, "dimensions": len(vector)},
            )

        return vector
