"""Question answering over a document store with retrieval-augmented generation."""

__version__ = "0.1.0"
