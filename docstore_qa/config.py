"""Application configuration using Pydantic Settings.

All configuration is loaded from environment variables.
No secrets are hardcoded.
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LLMSettings(BaseSettings):
    """Generation model configuration.

    Targets the native Ollama REST API.
    """

    model_config = SettingsConfigDict(env_prefix="LLM_")

    base_url: str = Field(
        default="http://localhost:11434",
        description="Ollama host URL",
    )
    model: str = Field(
        default="phi",
        description="Model name to use for generation",
    )
    default_model: str = Field(
        default="phi",
        description="Model whose tuning is used when the configured model is unknown",
    )
    timeout: float = Field(
        default=120.0,
        description="Request timeout in seconds",
    )


class EmbeddingSettings(BaseSettings):
    """Embedding model configuration."""

    model_config = SettingsConfigDict(env_prefix="EMBEDDING_")

    base_url: str = Field(
        default="http://localhost:11434",
        description="Ollama host URL serving the embedding model",
    )
    model: str = Field(
        default="all-minilm",
        description="Embedding model name",
    )
    dimensions: int = Field(
        default=384,
        description="Vector dimensions shared by every embedding path",
    )
    timeout: float = Field(
        default=60.0,
        description="Request timeout in seconds",
    )


class QdrantSettings(BaseSettings):
    """Qdrant vector database configuration."""

    model_config = SettingsConfigDict(env_prefix="QDRANT_")

    url: str = Field(
        default="http://localhost:6333",
        description="Qdrant server URL",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="Qdrant API key (optional for local)",
    )
    collection_name: str = Field(
        default="mongodb_content",
        description="Collection holding the indexed documents",
    )


class MongoSettings(BaseSettings):
    """MongoDB document store configuration."""

    model_config = SettingsConfigDict(env_prefix="MONGO_")

    uri: SecretStr = Field(
        default=SecretStr("mongodb://localhost:27017"),
        description="MongoDB connection string (may embed credentials)",
    )
    database: str = Field(
        default="sampledb",
        description="Database whose collections are indexed",
    )
    system_prefix: str = Field(
        default="system.",
        description="Collections with this prefix are never indexed",
    )
    id_field: str = Field(
        default="_id",
        description="Primary identifier field of every record",
    )


class Settings(BaseSettings):
    """Main application settings.

    Aggregates all configuration sections.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application settings
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    # Nested settings
    llm: LLMSettings = Field(default_factory=LLMSettings)
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    qdrant: QdrantSettings = Field(default_factory=QdrantSettings)
    mongo: MongoSettings = Field(default_factory=MongoSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()
