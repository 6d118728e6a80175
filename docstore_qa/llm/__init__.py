"""LLM client module."""

from docstore_qa.llm.client import LLMClient, OllamaClient
from docstore_qa.llm.models import (
    DEFAULT_MODEL_ID,
    MODEL_CONFIGS,
    GenerationResult,
    ModelConfig,
    get_model_config,
)
from docstore_qa.llm.prompts import GroundingPromptTemplate, PromptTemplate

__all__ = [
    "DEFAULT_MODEL_ID",
    "GenerationResult",
    "GroundingPromptTemplate",
    "LLMClient",
    "MODEL_CONFIGS",
    "ModelConfig",
    "OllamaClient",
    "PromptTemplate",
    "get_model_config",
]
