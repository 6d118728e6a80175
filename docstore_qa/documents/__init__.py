"""Source documents: store access and text serialization."""

from docstore_qa.documents.serializer import DocumentSerializer
from docstore_qa.documents.store import DocumentStore, MongoDocumentStore

__all__ = [
    "DocumentSerializer",
    "DocumentStore",
    "MongoDocumentStore",
]
