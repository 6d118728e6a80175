"""Deterministic embedding used when no embedding model is reachable.

The vector is a structural hash of the characters of each token spread
over a fixed number of buckets. Identical text always yields an identical
vector, which keeps indexing and search working with degraded relevance.
"""

import math
import re

FALLBACK_MODEL_NAME = "deterministic-fallback"
DEFAULT_DIMENSIONS = 384

_NON_WORD = re.compile(r"[^\w\s]")


class DeterministicFallbackEmbedder:
    """Dependency-free text embedder.

    Example:
        >>> embedder = DeterministicFallbackEmbedder()
        >>> len(embedder.embed("John Doe works in Engineering"))
        384
    """

    def __init__(self, dimensions: int = DEFAULT_DIMENSIONS) -> None:
        self.dimensions = dimensions

    @property
    def model_name(self) -> str:
        return FALLBACK_MODEL_NAME

    def tokenize(self, text: str) -> list[str]:
        """Lowercase, drop punctuation and split on whitespace."""
        return _NON_WORD.sub("", text.lower()).split()

    def embed(self, text: str) -> list[float]:
        """Embed text into a unit-length (or all-zero) vector."""
        accumulator = [0.0] * self.dimensions

        for i, token in enumerate(self.tokenize(text)):
            for j, char in enumerate(token):
                code = ord(char)
                bucket = (code * (i + 1) + j) % self.dimensions
                accumulator[bucket] += math.sin(code * 0.1) * 0.1

        magnitude = math.sqrt(sum(value * value for value in accumulator))
        if magnitude > 0:
            return [value / magnitude for value in accumulator]
        return [0.0] * self.dimensions
