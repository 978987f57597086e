"""Vector store adapters for Pinecone and in-memory usage."""

from __future__ import annotations

import hashlib
from importlib import import_module
from typing import Any, Dict, List, Mapping, Sequence, Tuple

import numpy as np

from . import logger
from .config import VectorStoreConfig
from .errors import ConfigurationError
from .schemas import Match, Segment

UPSERT_BATCH_SIZE = 100


def vector_id(segment: Segment) -> str:
    """Deterministic vector id so re-ingesting a document overwrites its segments."""

    raw = f"{segment.metadata.get('document_id', '')}::{segment.metadata.get('segment_index', '')}"
    return hashlib.sha1(raw.encode("utf-8")).hexdigest()


def _restore_metadata(metadata: Mapping[str, Any], text_field: str) -> Tuple[str, Dict[str, Any]]:
    restored = dict(metadata)
    text = str(restored.pop(text_field, ""))
    index = restored.get("segment_index")
    # Pinecone stores every number as a float
    if isinstance(index, float) and index.is_integer():
        restored["segment_index"] = int(index)
    return text, restored


class MedicaidVectorStore:
    """Abstraction layer over the supported vector store providers."""

    def __init__(self, config: VectorStoreConfig, index=None):
        self.config = config
        self._index = index
        self._memory: Dict[str, Tuple[np.ndarray, Segment]] = {}

        if config.provider == "pinecone":
            if self._index is None:
                pinecone_module = import_module("pinecone")
                client = pinecone_module.Pinecone(api_key=config.api_key())
                self._index = client.Index(config.index_name)
        elif config.provider != "memory":
            raise ConfigurationError(f"Unknown vector provider: {config.provider}")

    def add(self, vectors: Sequence[Sequence[float]], segments: Sequence[Segment]) -> None:
        """Upsert ``segments`` with their embeddings."""

        if len(vectors) != len(segments):
            raise ValueError("vectors and segments must have the same length")
        if not segments:
            return

        if self.config.provider == "memory":
            for vector, segment in zip(vectors, segments):
                self._memory[vector_id(segment)] = (np.asarray(vector, dtype="float32"), segment)
            return

        records = [
            {
                "id": vector_id(segment),
                "values": list(vector),
                "metadata": {**segment.metadata, self.config.text_field: segment.text},
            }
            for vector, segment in zip(vectors, segments)
        ]
        for start in range(0, len(records), UPSERT_BATCH_SIZE):
            self._index.upsert(
                vectors=records[start : start + UPSERT_BATCH_SIZE],
                namespace=self.config.namespace,
            )

    def remove_all(self) -> None:
        """Delete every stored vector."""

        if self.config.provider == "memory":
            self._memory.clear()
        else:
            self._index.delete(delete_all=True, namespace=self.config.namespace)
        logger.info("Vector store cleared", "medicaid_rag.vector_store")

    def search(self, query_vector: Sequence[float], max_results: int, min_score: float = 0.0) -> List[Match]:
        """Return up to ``max_results`` matches scoring at least ``min_score``, best first."""

        if self.config.provider == "memory":
            return self._search_memory(query_vector, max_results, min_score)

        response = self._index.query(
            vector=list(query_vector),
            top_k=max_results,
            include_metadata=True,
            namespace=self.config.namespace,
        )
        matches: List[Match] = []
        for item in response.matches:
            if item.score < min_score:
                continue
            text, metadata = _restore_metadata(item.metadata or {}, self.config.text_field)
            matches.append(Match(segment=Segment(text=text, metadata=metadata), score=float(item.score)))
        return matches

    def _search_memory(self, query_vector: Sequence[float], max_results: int, min_score: float) -> List[Match]:
        if not self._memory:
            return []

        entries = list(self._memory.values())
        query_vec = np.asarray(query_vector, dtype="float32")
        doc_matrix = np.vstack([vector for vector, _ in entries])
        norms = np.linalg.norm(doc_matrix, axis=1) * (np.linalg.norm(query_vec) + 1e-12)
        similarities = (doc_matrix @ query_vec) / np.maximum(norms, 1e-12)
        # stable sort keeps insertion order among equal scores
        top_indices = np.argsort(-similarities, kind="stable")[:max_results]

        results = []
        for idx in top_indices:
            score = float(similarities[idx])
            if score < min_score:
                continue
            results.append(Match(segment=entries[idx][1], score=score))
        return results
