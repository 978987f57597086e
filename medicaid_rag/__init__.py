"""Retrieval-Augmented Generation assistant for Minnesota Medicaid documentation.

The package exposes the main pipeline object and configuration helpers so that
the CLI and the web front-end can run ingestion and question answering.
"""

from .config import (
    EmbeddingConfig,
    ExpansionConfig,
    LLMConfig,
    PipelineConfig,
    PromptConfig,
    RetrievalConfig,
    SegmenterConfig,
    VectorStoreConfig,
)
from .errors import GenerationFailure, RagError
from .pipeline import RAGPipeline
from .schemas import Match, PipelineResponse, RawDocument, RetrievalResult, Segment

__version__ = "1.0.0"

__all__ = [
    "EmbeddingConfig",
    "ExpansionConfig",
    "LLMConfig",
    "PipelineConfig",
    "PromptConfig",
    "RetrievalConfig",
    "SegmenterConfig",
    "VectorStoreConfig",
    "GenerationFailure",
    "RagError",
    "RAGPipeline",
    "Match",
    "PipelineResponse",
    "RawDocument",
    "RetrievalResult",
    "Segment",
]
