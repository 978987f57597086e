"""OpenAI embeddings for stored segments and incoming search queries."""

from __future__ import annotations

import time
from typing import Callable, Iterable, List, TypeVar

from langchain_openai import OpenAIEmbeddings

from . import logger
from .config import EmbeddingConfig
from .schemas import Segment

T = TypeVar("T")


class EmbeddingGenerator:
    """Turn segment texts and queries into vectors of ``config.dimensions`` floats.

    Every call to the embeddings API is retried with exponential backoff
    (2, 4, ... seconds) until ``config.max_retries`` attempts have failed.
    """

    def __init__(self, config: EmbeddingConfig, embeddings: OpenAIEmbeddings | None = None):
        self.config = config
        self._client = embeddings or OpenAIEmbeddings(
            model=config.model_name,
            dimensions=config.dimensions,
            api_key=config.api_key(),
            timeout=config.timeout,
        )

    def _call_with_backoff(self, call: Callable[..., T], payload) -> T:
        failures = 0
        while True:
            try:
                return call(payload)
            except Exception as exc:
                failures += 1
                if failures >= self.config.max_retries:
                    raise
                delay = 2**failures
                logger.warning(
                    f"Embedding request failed ({exc}); retry {failures} in {delay}s",
                    "medicaid_rag.embeddings",
                )
                time.sleep(delay)

    def embed_texts(self, texts: Iterable[str]) -> List[List[float]]:
        """Embed ``texts`` in batches of ``config.batch_size``, keeping their order."""

        pending = list(texts)
        size = self.config.batch_size
        vectors: List[List[float]] = []
        for offset in range(0, len(pending), size):
            vectors.extend(self._call_with_backoff(self._client.embed_documents, pending[offset : offset + size]))
        return vectors

    def embed_all(self, segments: Iterable[Segment]) -> List[List[float]]:
        return self.embed_texts(segment.text for segment in segments)

    def embed(self, text: str) -> List[float]:
        """Embed a single search query."""

        return self._call_with_backoff(self._client.embed_query, text)
