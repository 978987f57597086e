"""Deterministic stand-ins for the language model, embedder and vector store."""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

import pytest

from medicaid_rag.schemas import Match, Segment

REWRITE_MARKER = "Original Question:"


def make_segment(text: str, document_id: str = "doc-a", index: int = 0, **extra) -> Segment:
    metadata = {
        "document_id": document_id,
        "segment_index": index,
        "source": f"https://example.org/{document_id}",
        "title": document_id.title(),
        "category": "web",
        **extra,
    }
    return Segment(text=text, metadata=metadata)


class ScriptedLLM:
    """Language model stub that answers rewrite and answer prompts differently."""

    def __init__(self, rewrites: str = "", answer: str = "Scripted answer.", fail_rewrite: bool = False,
                 fail_answer: bool = False) -> None:
        self.rewrites = rewrites
        self.answer = answer
        self.fail_rewrite = fail_rewrite
        self.fail_answer = fail_answer
        self.calls: List[str] = []

    @property
    def answer_prompts(self) -> List[str]:
        return [prompt for prompt in self.calls if REWRITE_MARKER not in prompt]

    def complete(self, prompt: str) -> str:
        self.calls.append(prompt)
        if REWRITE_MARKER in prompt:
            if self.fail_rewrite:
                raise TimeoutError("rewrite timed out")
            return self.rewrites
        if self.fail_answer:
            raise ConnectionError("model unavailable")
        return self.answer


class EchoEmbedder:
    """Returns the text itself as a one-element "vector" so the scripted store can look it up."""

    def __init__(self, fail_on: Iterable[str] = ()) -> None:
        self.fail_on = set(fail_on)

    def embed(self, text: str) -> list:
        if text in self.fail_on:
            raise RuntimeError(f"embedding rate limited for {text!r}")
        return [text]

    def embed_all(self, segments: Iterable[Segment]) -> list:
        return [[segment.text] for segment in segments]


class ScriptedStore:
    """Vector store stub returning canned matches per query text."""

    def __init__(self, results: Dict[str, List[Match]] | None = None, fail_on: Iterable[str] = (),
                 honor_min_score: bool = True) -> None:
        self.results = results or {}
        self.fail_on = set(fail_on)
        self.honor_min_score = honor_min_score
        self.searched: List[str] = []
        self.added: List[Segment] = []
        self.cleared = False

    def search(self, query_vector: Sequence, max_results: int, min_score: float = 0.0) -> List[Match]:
        query = query_vector[0]
        self.searched.append(query)
        if query in self.fail_on:
            raise ConnectionError("vector store unreachable")
        matches = self.results.get(query, [])
        if self.honor_min_score:
            matches = [match for match in matches if match.score >= min_score]
        return matches[:max_results]

    def add(self, vectors, segments) -> None:
        self.added.extend(segments)

    def remove_all(self) -> None:
        self.cleared = True
        self.added.clear()


class VocabularyEmbedder:
    """Bag-of-words embedder over a small fixed vocabulary."""

    VOCABULARY = ("income", "limit", "medical", "assistance", "estate", "recovery", "waiver", "drug", "minnesota")

    def _vector(self, text: str) -> List[float]:
        words = [word.strip(".,?!").lower() for word in text.split()]
        return [float(words.count(term)) + 0.01 for term in self.VOCABULARY]

    def embed(self, text: str) -> List[float]:
        return self._vector(text)

    def embed_all(self, segments: Iterable[Segment]) -> List[List[float]]:
        return [self._vector(segment.text) for segment in segments]


@pytest.fixture()
def llm() -> ScriptedLLM:
    return ScriptedLLM()


@pytest.fixture()
def embedder() -> EchoEmbedder:
    return EchoEmbedder()


@pytest.fixture()
def store() -> ScriptedStore:
    return ScriptedStore()
