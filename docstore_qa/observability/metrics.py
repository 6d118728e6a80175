"""Prometheus metrics for the document QA pipeline.

Provides metrics instrumentation for:
- Embedding requests, split by remote model and deterministic fallback
- LLM token usage and latency
- Retrieval metrics (results, scores)
- Indexed points per source collection
- Answer outcomes
"""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)

# Embedding Metrics
EMBEDDING_REQUEST_DURATION = Histogram(
    "embedding_request_duration_seconds",
    "Embedding request duration in seconds",
    ["model", "source"],
    buckets=[0.001, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0],
)

EMBEDDING_REQUEST_TOTAL = Counter(
    "embedding_requests_total",
    "Total embedding requests",
    ["model", "source"],  # "source" label values: remote, fallback
)

# LLM Metrics
LLM_REQUEST_DURATION = Histogram(
    "llm_request_duration_seconds",
    "LLM request duration in seconds",
    ["model", "status"],
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
)

LLM_TOKENS_TOTAL = Counter(
    "llm_tokens_total",
    "Total LLM tokens used",
    ["model", "type"],  # "type" label values: prompt, completion
)

LLM_REQUEST_TOTAL = Counter(
    "llm_requests_total",
    "Total LLM requests",
    ["model", "status"],
)

# Retrieval Metrics
RETRIEVAL_RESULTS_RETURNED = Histogram(
    "retrieval_results_returned",
    "Number of records returned per retrieval",
    buckets=[0, 1, 2, 3, 5, 10, 20, 50],
)

RETRIEVAL_TOP_SCORE = Histogram(
    "retrieval_top_score",
    "Top retrieval score per query",
    buckets=[0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0],
)

# Indexing Metrics
INDEXED_POINTS_TOTAL = Counter(
    "indexed_points_total",
    "Total points written to the vector index",
    ["collection"],
)

# Answer Metrics
ANSWERS_TOTAL = Counter(
    "answers_total",
    "Total answered questions",
    ["status"],
)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    """Get the content type for metrics response."""
    return CONTENT_TYPE_LATEST


def track_llm_request(
    model: str,
    duration: float,
    prompt_tokens: int,
    completion_tokens: int,
    success: bool = True,
) -> None:
    """Track LLM request metrics.

    Args:
        model: LLM model name.
        duration: Request duration in seconds.
        prompt_tokens: Number of prompt tokens.
        completion_tokens: Number of completion tokens.
        success: Whether the request succeeded.
    """
    status = "success" if success else "error"

    LLM_REQUEST_DURATION.labels(model=model, status=status).observe(duration)
    LLM_REQUEST_TOTAL.labels(model=model, status=status).inc()

    if success:
        LLM_TOKENS_TOTAL.labels(model=model, type="prompt").inc(prompt_tokens)
        LLM_TOKENS_TOTAL.labels(model=model, type="completion").inc(completion_tokens)


def track_embedding_request(
    model: str,
    duration: float,
    source: str,
) -> None:
    """Track embedding request metrics.

    Args:
        model: Embedding model name.
        duration: Request duration in seconds.
        source: Which path produced the vector ("remote" or "fallback").
    """
    EMBEDDING_REQUEST_DURATION.labels(model=model, source=source).observe(duration)
    EMBEDDING_REQUEST_TOTAL.labels(model=model, source=source).inc()


def track_retrieval_request(
    results_returned: int,
    top_score: float,
) -> None:
    """Track retrieval request metrics.

    Args:
        results_returned: Number of records returned.
        top_score: Highest relevance score.
    """
    RETRIEVAL_RESULTS_RETURNED.observe(results_returned)
    if top_score > 0:
        RETRIEVAL_TOP_SCORE.observe(top_score)


def track_indexing(collection: str, points: int) -> None:
    """Count points written for a source collection."""
    if points > 0:
        INDEXED_POINTS_TOTAL.labels(collection=collection).inc(points)


def track_answer(status: str) -> None:
    """Count an answered question by outcome."""
    ANSWERS_TOTAL.labels(status=status).inc()
