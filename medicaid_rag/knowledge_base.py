"""Administrative operations on the document collection: add and clear."""

from __future__ import annotations

from typing import Iterable

from . import logger
from .schemas import RawDocument


class KnowledgeBase:
    """Split, embed, tag and upsert documents into the vector store."""

    def __init__(self, segmenter, embedding_generator, vector_store):
        self.segmenter = segmenter
        self.embedding_generator = embedding_generator
        self.vector_store = vector_store

    def add_document(self, document: RawDocument) -> int:
        """Store one document and return the number of segments written."""

        segments = self.segmenter.segment(document)
        if not segments:
            logger.warning(
                f"No segments produced for {document.metadata.get('source')}",
                "medicaid_rag.knowledge_base",
            )
            return 0

        vectors = self.embedding_generator.embed_all(segments)
        self.vector_store.add(vectors, segments)
        logger.info(
            f"Added {len(segments)} segments from document: {document.metadata.get('title')}",
            "medicaid_rag.knowledge_base",
        )
        return len(segments)

    def add_documents(self, documents: Iterable[RawDocument]) -> int:
        return sum(self.add_document(document) for document in documents)

    def clear_all(self) -> None:
        self.vector_store.remove_all()
