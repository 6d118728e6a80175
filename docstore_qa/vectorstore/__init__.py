"""Vector store module."""

from docstore_qa.vectorstore.models import IndexedPoint, SearchResult
from docstore_qa.vectorstore.service import QdrantVectorStore, VectorStore

__all__ = [
    "IndexedPoint",
    "QdrantVectorStore",
    "SearchResult",
    "VectorStore",
]
