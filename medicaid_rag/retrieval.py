"""Multi-query vector retrieval with first-seen de-duplication."""

from __future__ import annotations

from typing import Iterable, List

from . import logger
from .config import RetrievalConfig
from .errors import Outcome, RetrievalFailure, attempt
from .schemas import Match, RetrievalResult


class Retriever:
    """Search the vector store once per candidate query and merge the matches."""

    def __init__(self, config: RetrievalConfig, vector_store, embedding_generator) -> None:
        self.config = config
        self.vector_store = vector_store
        self.embedding_generator = embedding_generator

    def _search(self, query: str) -> List[Match]:
        query_vector = self.embedding_generator.embed(query)
        return self.vector_store.search(query_vector, self.config.top_k, self.config.min_score)

    def search(self, query: str) -> Outcome[List[Match]]:
        """Run one query; embedding and store errors are returned, not raised."""

        return attempt(self._search, query)

    def retrieve(self, queries: Iterable[str]) -> RetrievalResult:
        """Return the deduplicated segments for ``queries`` in first-seen order."""

        result = RetrievalResult()
        for query in queries:
            outcome = self.search(query)
            if not outcome.ok:
                failure = RetrievalFailure(f"Retrieval failed for query {query!r}: {outcome.error}")
                logger.warning(str(failure), "medicaid_rag.retrieval")
                continue

            added = 0
            for match in outcome.value or []:
                if match.score < self.config.min_score:
                    continue
                if result.add(match):
                    added += 1
            logger.debug(f"Query {query!r} contributed {added} new segments", "medicaid_rag.retrieval")
        return result
