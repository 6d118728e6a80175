"""Indexing and retrieval module."""

from docstore_qa.retrieval.engine import DEFAULT_LIMIT, RetrievalEngine
from docstore_qa.retrieval.models import IndexReport, RetrievalResult

__all__ = [
    "DEFAULT_LIMIT",
    "IndexReport",
    "RetrievalEngine",
    "RetrievalResult",
]
