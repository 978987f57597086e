"""Orchestration of query expansion, retrieval, prompting, and generation."""

from __future__ import annotations

import os
from typing import Iterable

from . import logger
from .config import PipelineConfig
from .context import build_context
from .embeddings import EmbeddingGenerator
from .errors import GenerationFailure, attempt
from .expansion import QueryExpander
from .ingestion import DocumentLoader
from .knowledge_base import KnowledgeBase
from .llm import LLMClient, build_pipeline_response
from .prompt import compose_prompt
from .retrieval import Retriever
from .schemas import ConversationHistory, PipelineResponse, RawDocument
from .segment import DocumentSegmenter
from .vector_store import MedicaidVectorStore


class RAGPipeline:
    """Answer Minnesota Medicaid questions from the stored documentation.

    The pipeline keeps no per-conversation state: every call copies the history
    it is given and builds its own query set, retrieval result, and prompt, so
    one instance can serve concurrent callers.
    """

    def __init__(
        self,
        config: PipelineConfig | None = None,
        embedding_generator=None,
        llm_client=None,
        vector_store=None,
        segmenter=None,
        loader=None,
    ) -> None:
        self.config = config or PipelineConfig()
        self.embedding_generator = embedding_generator or EmbeddingGenerator(self.config.embedding)
        self.llm_client = llm_client or LLMClient(self.config.llm)
        self.vector_store = vector_store or MedicaidVectorStore(self.config.vector_store)
        self.segmenter = segmenter or DocumentSegmenter(self.config.segmenter)
        self.loader = loader or DocumentLoader()

        self.expander = QueryExpander(
            self.llm_client,
            self.config.expansion,
            history_window=self.config.prompt.history_window,
        )
        self.retriever = Retriever(self.config.retrieval, self.vector_store, self.embedding_generator)
        self.knowledge_base = KnowledgeBase(self.segmenter, self.embedding_generator, self.vector_store)

    # ---------------- ADMIN ----------------

    def add_documents(self, documents: Iterable[RawDocument]) -> int:
        """Split, embed, tag and upsert ``documents``; returns the segment count."""

        return self.knowledge_base.add_documents(documents)

    def clear_all(self) -> None:
        """Remove every stored vector."""

        self.knowledge_base.clear_all()

    def ingest(self, sources: Iterable[str | os.PathLike[str]]) -> int:
        """Load ``sources`` (URLs or file paths) and add them to the knowledge base."""

        documents = self.loader.load_all(os.fspath(source) for source in sources)
        return self.add_documents(documents)

    # ---------------- QUERY ----------------

    def respond(self, user_query: str, history: ConversationHistory = ()) -> PipelineResponse:
        """Answer ``user_query`` and return the answer with its queries, prompt and references.

        Raises :class:`GenerationFailure` when the final language model call fails.
        """

        if not user_query or not user_query.strip():
            raise ValueError("Question must not be empty")

        turns = list(history)
        queries = self.expander.expand(user_query, turns)
        result = self.retriever.retrieve(queries)

        if not result:
            logger.info("No relevant segments found, returning fallback answer", "medicaid_rag.pipeline")
            return PipelineResponse(
                answer=self.config.prompt.fallback_message,
                prompt="",
                queries=queries,
                references=[],
                found_context=False,
            )

        context = build_context(result)
        prompt = compose_prompt(context, user_query, turns, self.config.prompt.history_window)
        logger.debug(
            f"Generating answer from {len(result)} segments across {len(queries)} queries",
            "medicaid_rag.pipeline",
        )

        outcome = attempt(self.llm_client.complete, prompt)
        if not outcome.ok:
            logger.error(f"Answer generation failed: {outcome.error}", "medicaid_rag.pipeline")
            raise GenerationFailure("The language model failed to generate an answer") from outcome.error

        return build_pipeline_response(outcome.value or "", prompt, queries, result.segments())

    def answer(self, user_query: str, history: ConversationHistory = ()) -> str:
        """Return only the answer text for ``user_query``."""

        return self.respond(user_query, history).answer
