"""Prompt templates for answering over retrieved records."""

from abc import ABC, abstractmethod
from typing import Any


class PromptTemplate(ABC):
    """Abstract base class for prompt templates."""

    @abstractmethod
    def format(self, **kwargs: Any) -> str:
        """Format the template with provided variables.

        Args:
            **kwargs: Template variables.

        Returns:
            Formatted prompt string.
        """
        ...


class GroundingPromptTemplate(PromptTemplate):
    """Prompt that restricts the model to the retrieved records.

    The context is a numbered list of serialized records followed by the
    question and a directive asking for a short factual answer.
    """

    DEFAULT_TEMPLATE = """You are a helpful database analyst. Your job is to answer questions based ONLY on the provided data.

DATABASE CONTEXT:
{context}

INSTRUCTIONS:
- Only use information from the database context above
- If you need to count or calculate, do it step by step
- Be specific and accurate
- If the data doesn't contain enough information, say so

QUESTION: {question}

ANSWER (be concise and factual):"""

    CONTEXT_HEADER = "Based on the following database records:\n\n"

    def __init__(self, template: str | None = None) -> None:
        """Initialize the grounding prompt template.

        Args:
            template: Custom template with ``{context}`` and ``{question}``.
        """
        self.template = template or self.DEFAULT_TEMPLATE

    def format(self, **kwargs: Any) -> str:
        """Format the template.

        Args:
            **kwargs: Must include 'context' and 'question'.

        Returns:
            Formatted prompt.
        """
        return self.template.format(**kwargs)

    def format_context(self, entries: list[str]) -> str:
        """Number the entries starting at 1, one per line."""
        numbered = "".join(f"{i}. {entry}\n" for i, entry in enumerate(entries, start=1))
        return self.CONTEXT_HEADER + numbered

    def build_prompt(self, question: str, entries: list[str]) -> str:
        """Build the complete prompt from the question and retrieved texts.

        Args:
            question: User question.
            entries: Serialized text of each retrieved record.

        Returns:
            Prompt string.
        """
        return self.format(context=self.format_context(entries), question=question)
