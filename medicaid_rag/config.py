"""Configuration objects for the Minnesota Medicaid RAG pipeline."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from typing import Any, Literal, Mapping, Optional

from dotenv import load_dotenv

from . import logger
from .errors import ConfigurationError

VectorProvider = Literal["pinecone", "memory"]

FALLBACK_MESSAGE = (
    "I'm sorry, I couldn't find relevant information about your query in the Minnesota "
    "Medicaid documentation. Please try rephrasing your question or contact the Minnesota "
    "Department of Human Services for assistance."
)


def _require_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise ConfigurationError(f"{name} environment variable is required")
    return value


@dataclass
class EmbeddingConfig:
    """Settings for the embedding stage."""

    model_name: str = "text-embedding-3-small"
    dimensions: int = 1024
    batch_size: int = 64
    max_retries: int = 3
    timeout: float = 60.0
    api_key_env: str = "OPENAI_API_KEY"

    def api_key(self) -> str:
        return _require_env(self.api_key_env)


@dataclass
class VectorStoreConfig:
    """Settings required to connect to the vector store."""

    provider: VectorProvider = "pinecone"
    index_name: str = "medicaid-v1"
    namespace: str = ""
    api_key_env: str = "PINECONE_API_KEY"
    text_field: str = field(
        default="text",
        metadata={"description": "Metadata key holding the segment text in Pinecone"},
    )

    def api_key(self) -> str:
        """Return the API key defined in the configured environment variable."""

        return _require_env(self.api_key_env)


@dataclass
class SegmenterConfig:
    """Parameters for the segmentation stage (character based)."""

    chunk_size: int = 300
    chunk_overlap: int = 50


@dataclass
class RetrievalConfig:
    """Parameters for multi-query vector retrieval."""

    top_k: int = 5
    min_score: float = 0.7


@dataclass
class ExpansionConfig:
    """Parameters for query rewriting."""

    enabled: bool = True
    max_rewrites: int = 3


@dataclass
class PromptConfig:
    """Settings for prompt construction and the no-context answer."""

    history_window: int = 6
    fallback_message: str = FALLBACK_MESSAGE


@dataclass
class LLMConfig:
    """Settings for the chat completion model."""

    model: str = "gpt-3.5-turbo"
    temperature: float = 0.1
    timeout: float = 60.0
    api_key_env: str = "OPENAI_API_KEY"

    def api_key(self) -> str:
        return _require_env(self.api_key_env)


@dataclass
class PipelineConfig:
    """Aggregate configuration for the full pipeline."""

    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    vector_store: VectorStoreConfig = field(default_factory=VectorStoreConfig)
    segmenter: SegmenterConfig = field(default_factory=SegmenterConfig)
    retrieval: RetrievalConfig = field(default_factory=RetrievalConfig)
    expansion: ExpansionConfig = field(default_factory=ExpansionConfig)
    prompt: PromptConfig = field(default_factory=PromptConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PipelineConfig":
        """Build a configuration from a mapping nested by section name.

        Unknown sections or keys raise :class:`ConfigurationError` so typos in a
        JSON config file do not silently fall back to defaults.
        """

        config = cls()
        section_names = {f.name for f in fields(cls)}
        for section, values in data.items():
            if section not in section_names:
                raise ConfigurationError(f"Unknown configuration section: {section}")
            current = getattr(config, section)
            allowed = {f.name for f in fields(current)}
            unknown = set(values) - allowed
            if unknown:
                raise ConfigurationError(
                    f"Unknown keys in section '{section}': {', '.join(sorted(unknown))}"
                )
            setattr(config, section, replace(current, **values))
        return config

    @classmethod
    def from_env(cls, base: Optional["PipelineConfig"] = None) -> "PipelineConfig":
        """Apply environment overrides (``.env`` included) on top of ``base``.

        ``LOG_LEVEL`` from the environment or ``.env`` resets the logger level.
        """

        load_dotenv()
        config = base or cls()
        env = os.environ

        if "LOG_LEVEL" in env:
            logger.set_level(env["LOG_LEVEL"])

        if "VECTOR_PROVIDER" in env:
            provider = env["VECTOR_PROVIDER"].lower()
            if provider not in ("pinecone", "memory"):
                raise ConfigurationError(f"Unknown vector provider: {provider}")
            config.vector_store.provider = provider  # type: ignore[assignment]
        if "PINECONE_INDEX_NAME" in env:
            config.vector_store.index_name = env["PINECONE_INDEX_NAME"]
        if "OPENAI_CHAT_MODEL" in env:
            config.llm.model = env["OPENAI_CHAT_MODEL"]
        if "OPENAI_EMBEDDING_MODEL" in env:
            config.embedding.model_name = env["OPENAI_EMBEDDING_MODEL"]
        try:
            if "RAG_MIN_SCORE" in env:
                config.retrieval.min_score = float(env["RAG_MIN_SCORE"])
            if "RAG_TOP_K" in env:
                config.retrieval.top_k = int(env["RAG_TOP_K"])
        except ValueError as exc:
            raise ConfigurationError(f"Invalid retrieval setting in environment: {exc}") from exc
        return config
