"""Observability module for metrics and monitoring."""

from docstore_qa.observability.metrics import (
    get_metrics,
    track_answer,
    track_embedding_request,
    track_indexing,
    track_llm_request,
    track_retrieval_request,
)

__all__ = [
    "get_metrics",
    "track_answer",
    "track_embedding_request",
    "track_indexing",
    "track_llm_request",
    "track_retrieval_request",
]
