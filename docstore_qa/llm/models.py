"""LLM data models and per-model tuning."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_MODEL_ID = "phi"


class ModelConfig(BaseModel):
    """Sampling options sent to the generation model.

    Field names follow the Ollama ``options`` keys.
    """

    model_config = ConfigDict(frozen=True)

    temperature: float = Field(description="Sampling temperature")
    top_k: int = Field(description="Top-k sampling cutoff")
    top_p: float = Field(description="Nucleus sampling cutoff")
    repeat_penalty: float = Field(description="Penalty for repeated tokens")
    num_ctx: int = Field(description="Context window size in tokens")
    num_predict: int = Field(description="Maximum tokens to generate")

    def with_temperature(self, temperature: float) -> "ModelConfig":
        """Copy of this config with a different temperature."""
        return self.model_copy(update={"temperature": temperature})

    def to_options(self) -> dict[str, Any]:
        return self.model_dump()


MODEL_CONFIGS: dict[str, ModelConfig] = {
    "phi": ModelConfig(
        temperature=0.6,
        top_k=10,
        top_p=0.3,
        repeat_penalty=1.1,
        num_ctx=2048,
        num_predict=256,
    ),
    "llama2": ModelConfig(
        temperature=0.2,
        top_k=40,
        top_p=0.9,
        repeat_penalty=1.1,
        num_ctx=4096,
        num_predict=512,
    ),
    "mistral": ModelConfig(
        temperature=0.1,
        top_k=20,
        top_p=0.5,
        repeat_penalty=1.1,
        num_ctx=4096,
        num_predict=512,
    ),
}


def get_model_config(model: str, default_model: str = DEFAULT_MODEL_ID) -> ModelConfig:
    """Select tuning for a model identifier.

    Tries the exact identifier, then the identifier without its ``:tag``
    (so ``phi:latest`` uses ``phi``), then ``default_model``.

    Args:
        model: Model identifier as passed to the model host.
        default_model: Identifier whose config is used for unknown models.

    Returns:
        The selected ModelConfig.
    """
    if model in MODEL_CONFIGS:
        return MODEL_CONFIGS[model]

    base_name = model.split(":", 1)[0]
    if base_name in MODEL_CONFIGS:
        return MODEL_CONFIGS[base_name]

    return MODEL_CONFIGS.get(default_model, MODEL_CONFIGS[DEFAULT_MODEL_ID])


class GenerationResult(BaseModel):
    """Result from LLM generation.

    Attributes:
        content: The generated text.
        model: Model used for generation.
        prompt_tokens: Number of tokens in the prompt.
        completion_tokens: Number of tokens in the completion.
        total_tokens: Total tokens used.
    """

    content: str = Field(description="Generated text")
    model: str = Field(description="Model used")
    prompt_tokens: int = Field(default=0, description="Prompt token count")
    completion_tokens: int = Field(default=0, description="Completion token count")
    total_tokens: int = Field(default=0, description="Total token count")
