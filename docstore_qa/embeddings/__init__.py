"""Embedding service module."""

from docstore_qa.embeddings.fallback import (
    FALLBACK_MODEL_NAME,
    DeterministicFallbackEmbedder,
)
from docstore_qa.embeddings.models import EmbeddingResult, EmbeddingSource
from docstore_qa.embeddings.service import EmbeddingService, OllamaEmbeddingService

__all__ = [
    "DeterministicFallbackEmbedder",
    "EmbeddingResult",
    "EmbeddingService",
    "EmbeddingSource",
    "FALLBACK_MODEL_NAME",
    "OllamaEmbeddingService",
]
