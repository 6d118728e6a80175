"""Answer synthesis data models."""

from enum import Enum

from pydantic import BaseModel, Field


class AnswerStatus(str, Enum):
    """How an answer was produced."""

    ANSWERED = "answered"
    RETRIED = "retried"
    NO_CONTEXT = "no_context"
    ERROR = "error"


class SourceAttribution(BaseModel):
    """Attribution to a source record.

    Attributes:
        collection: Source collection name.
        document_id: Source record identifier.
        score: Relevance score.
    """

    collection: str = Field(description="Source collection name")
    document_id: str = Field(description="Source record identifier")
    score: float = Field(description="Relevance score")


class AnswerResult(BaseModel):
    """Answer to a question together with how it was reached.

    Attributes:
        answer: Final answer text (or the no-context/error message).
        status: Outcome of the synthesis.
        model: Generation model identifier.
        attempts: Generation calls made (0, 1 or 2).
        temperature: Temperature of the last generation call.
        sources: Records used as context.
    """

    answer: str = Field(description="Final answer text")
    status: AnswerStatus = Field(description="Synthesis outcome")
    model: str = Field(description="Generation model identifier")
    attempts: int = Field(default=0, ge=0, le=2, description="Generation calls made")
    temperature: float | None = Field(
        default=None,
        description="Temperature of the last generation call",
    )
    sources: list[SourceAttribution] = Field(
        default_factory=list,
        description="Source attributions",
    )
