"""Answer synthesis from retrieved records."""

import re

from docstore_qa.exceptions import QAPlatformError
from docstore_qa.llm.client import LLMClient
from docstore_qa.llm.models import DEFAULT_MODEL_ID, ModelConfig, get_model_config
from docstore_qa.llm.prompts import GroundingPromptTemplate
from docstore_qa.logging_config import get_logger
from docstore_qa.observability.metrics import track_answer
from docstore_qa.rag.models import AnswerResult, AnswerStatus, SourceAttribution
from docstore_qa.retrieval.engine import DEFAULT_LIMIT, RetrievalEngine

logger = get_logger(__name__)

NO_CONTEXT_ANSWER = (
    "I couldn't find relevant information in the document store "
    "to answer your question."
)
ERROR_ANSWER_PREFIX = "Error generating response: "

MIN_ANSWER_LENGTH = 20
INCOMPLETE_MARKER = "..."
RETRY_TEMPERATURE_STEP = 0.2

_ANSWER_LABEL = re.compile(r"^(?:answer:|a:)", re.IGNORECASE)
_BLANK_LINES = re.compile(r"\n{2,}")


def clean_answer(raw: str) -> str:
    """Trim, drop a leading ``Answer:``/``A:`` label and collapse blank lines."""
    answer = _ANSWER_LABEL.sub("", raw.strip(), count=1).strip()
    return _BLANK_LINES.sub("\n", answer)


def needs_retry(answer: str) -> bool:
    """Whether an answer looks truncated or too short to be useful."""
    return len(answer) < MIN_ANSWER_LENGTH or INCOMPLETE_MARKER in answer


class AnswerSynthesizer:
    """Answers questions from retrieved records.

    Each question is handled independently: retrieve, build a grounding
    prompt, generate once, and generate a second time at a higher
    temperature when the first answer fails the quality gate.
    """

    def __init__(
        self,
        retriever: RetrievalEngine,
        llm_client: LLMClient,
        prompt_template: GroundingPromptTemplate | None = None,
        default_model: str = DEFAULT_MODEL_ID,
        limit: int = DEFAULT_LIMIT,
    ) -> None:
        """Initialize the synthesizer.

        Args:
            retriever: Source of context records.
            llm_client: Generation model client.
            prompt_template: Grounding prompt template.
            default_model: Model whose tuning applies to unknown models.
            limit: Records retrieved per question.
        """
        self._retriever = retriever
        self._llm_client = llm_client
        self._prompt_template = prompt_template or GroundingPromptTemplate()
        self._default_model = default_model
        self._limit = limit

    def model_config_for(self, model: str) -> ModelConfig:
        return get_model_config(model, self._default_model)

    async def answer(self, question: str) -> str:
        """Answer a question, returning only the text."""
        result = await self.synthesize(question)
        return result.answer

    async def synthesize(self, question: str) -> AnswerResult:
        """Answer a question.

        Args:
            question: Natural-language question.

        Returns:
            AnswerResult; never raises.
        """
        model = self._llm_client.model_name
        logger.info(
            "Processing question",
            extra={"question_length": len(question), "model": model},
        )

        retrieved = await self._retriever.retrieve(question, limit=self._limit)
        if not retrieved:
            track_answer(AnswerStatus.NO_CONTEXT.value)
            return AnswerResult(
                answer=NO_CONTEXT_ANSWER,
                status=AnswerStatus.NO_CONTEXT,
                model=model,
            )

        sources = [
            SourceAttribution(
                collection=r.collection,
                document_id=r.document_id,
                score=r.score,
            )
            for r in retrieved
        ]
        prompt = self._prompt_template.build_prompt(
            question=question,
            entries=[r.text for r in retrieved],
        )
        config = self.model_config_for(model)
        attempts = 0
        temperature = config.temperature

        try:
            attempts += 1
            generation = await self._llm_client.generate(prompt, options=config)
            answer = clean_answer(generation.content)
            status = AnswerStatus.ANSWERED

            if needs_retry(answer):
                logger.info(
                    "Response seems incomplete, trying with higher temperature",
                    extra={"answer_length": len(answer)},
                )
                temperature = config.temperature + RETRY_TEMPERATURE_STEP
                attempts += 1
                retry = await self._llm_client.generate(
                    prompt,
                    options=config.with_temperature(temperature),
                )
                answer = clean_answer(retry.content)
                status = AnswerStatus.RETRIED

        except Exception as e:
            reason = e.message if isinstance(e, QAPlatformError) else str(e)
            logger.error(
                f"Error generating answer: {reason}",
                extra={"model": model, "attempts": attempts},
            )
            track_answer(AnswerStatus.ERROR.value)
            return AnswerResult(
                answer=f"{ERROR_ANSWER_PREFIX}{reason}",
                status=AnswerStatus.ERROR,
                model=model,
                attempts=attempts,
                temperature=temperature,
                sources=sources,
            )

        track_answer(status.value)
        logger.info(
            "Question answered",
            extra={"status": status.value, "attempts": attempts, "sources": len(sources)},
        )
        return AnswerResult(
            answer=answer,
            status=status,
            model=model,
            attempts=attempts,
            temperature=temperature,
            sources=sources,
        )
