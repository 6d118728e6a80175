"""Answer synthesis module."""

from docstore_qa.rag.models import AnswerResult, AnswerStatus, SourceAttribution
from docstore_qa.rag.synthesizer import (
    NO_CONTEXT_ANSWER,
    AnswerSynthesizer,
    clean_answer,
    needs_retry,
)

__all__ = [
    "AnswerResult",
    "AnswerStatus",
    "AnswerSynthesizer",
    "NO_CONTEXT_ANSWER",
    "SourceAttribution",
    "clean_answer",
    "needs_retry",
]
