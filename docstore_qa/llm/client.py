"""LLM client interface and Ollama implementation."""

import time
from abc import ABC, abstractmethod

import httpx

from docstore_qa.config import LLMSettings, get_settings
from docstore_qa.exceptions import ErrorCode, LLMError
from docstore_qa.llm.models import GenerationResult, ModelConfig
from docstore_qa.logging_config import get_logger
from docstore_qa.observability.metrics import track_llm_request

logger = get_logger(__name__)


class LLMClient(ABC):
    """Abstract base class for LLM clients.

    Defines the interface for generating text with a locally hosted model.
    """

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        options: ModelConfig | None = None,
    ) -> GenerationResult:
        """Generate a completion for a prompt, without streaming.

        Args:
            prompt: Full prompt text.
            options: Sampling options for this call.

        Returns:
            GenerationResult with generated text.

        Raises:
            LLMError: If generation fails.
        """
        ...

    @abstractmethod
    async def list_models(self) -> list[str]:
        """List model names available on the host.

        Raises:
            LLMError: If the host cannot be reached.
        """
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model name."""
        ...


class OllamaClient(LLMClient):
    """LLM client for the native Ollama REST API.

    Uses ``/api/generate`` with ``stream`` disabled and ``/api/tags`` for
    model discovery.
    """

    def __init__(
        self,
        settings: LLMSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the Ollama client.

        Args:
            settings: LLM configuration.
            client: HTTP client (for testing).
        """
        self._settings = settings or get_settings().llm
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._settings.timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def model_name(self) -> str:
        """Get the model name."""
        return self._settings.model

    async def list_models(self) -> list[str]:
        """List models installed on the Ollama host."""
        client = await self._get_client()
        url = f"{self._settings.base_url}/api/tags"

        try:
            response = await client.get(url)
            response.raise_for_status()
            return [m.get("name", "") for m in response.json().get("models", [])]
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            raise LLMError(
                f"Failed to list models: {e}",
                code=ErrorCode.LLM_SERVICE_ERROR,
                details={"url": url},
            ) from e

    async def generate(
        self,
        prompt: str,
        options: ModelConfig | None = None,
    ) -> GenerationResult:
        """Generate text using the generate endpoint."""
        client = await self._get_client()
        url = f"{self._settings.base_url}/api/generate"

        payload: dict = {
            "model": self._settings.model,
            "prompt": prompt,
            "stream": False,
        }
        if options is not None:
            payload["options"] = options.to_options()

        start_time = time.perf_counter()

        try:
            response = await client.post(url, json=payload)
            response.raise_for_status()

        except httpx.TimeoutException as e:
            logger.error(f"LLM request timed out: {e}")
            self._track_failure(start_time)
            raise LLMError(
                "LLM request timed out",
                code=ErrorCode.LLM_TIMEOUT,
                details={"timeout": self._settings.timeout},
            ) from e

        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"LLM request failed: {status}")
            self._track_failure(start_time)

            if status == 404:
                raise LLMError(
                    f"Model not found: {self._settings.model}",
                    code=ErrorCode.LLM_MODEL_NOT_FOUND,
                    details={"status_code": status, "model": self._settings.model},
                ) from e

            raise LLMError(
                f"LLM service returned {status}",
                code=ErrorCode.LLM_SERVICE_ERROR,
                details={"status_code": status},
            ) from e

        except httpx.RequestError as e:
            logger.error(f"LLM connection error: {e}")
            self._track_failure(start_time)
            raise LLMError(
                f"Failed to connect to LLM service: {e}",
                code=ErrorCode.LLM_SERVICE_ERROR,
                details={"url": url},
            ) from e

        try:
            data = response.json()
            prompt_tokens = data.get("prompt_eval_count", 0) or 0
            completion_tokens = data.get("eval_count", 0) or 0
            result = GenerationResult(
                content=data["response"],
                model=data.get("model", self._settings.model),
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            self._track_failure(start_time)
            raise LLMError(
                f"Invalid response from LLM: {e}",
                code=ErrorCode.LLM_SERVICE_ERROR,
                details={"error": str(e)},
            ) from e

        track_llm_request(
            model=self._settings.model,
            duration=time.perf_counter() - start_time,
            prompt_tokens=result.prompt_tokens,
            completion_tokens=result.completion_tokens,
        )
        return result

    def _track_failure(self, start_time: float) -> None:
        track_llm_request(
            model=self._settings.model,
            duration=time.perf_counter() - start_time,
            prompt_tokens=0,
            completion_tokens=0,
            success=False,
        )
