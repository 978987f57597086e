"""Shared dataclasses used across the RAG pipeline modules."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Sequence

# Ordered "User: ..." / "Assistant: ..." turns owned by the caller.
ConversationHistory = Sequence[str]


@dataclass(slots=True)
class RawDocument:
    """Represents a source document before segmentation."""

    text: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Segment:
    """Immutable unit of retrievable text."""

    text: str
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Read-only snapshot; later changes to the caller's dict do not leak in
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    def with_metadata(self, **extra: Any) -> "Segment":
        """Return a copy of the segment with ``extra`` merged into its metadata."""

        return Segment(text=self.text, metadata={**self.metadata, **extra})

    @property
    def key(self) -> str:
        return segment_key(self)


def segment_key(segment: Segment) -> str:
    """Deduplication identity: document (or source) plus position (or text hash)."""

    document = segment.metadata.get("document_id") or segment.metadata.get("source", "")
    index = segment.metadata.get("segment_index")
    if index is None or index == "":
        index = hashlib.sha1(segment.text.encode("utf-8")).hexdigest()
    return f"{document}#{index}"


@dataclass(frozen=True, slots=True)
class Match:
    """A segment returned by the vector store together with its similarity score."""

    segment: Segment
    score: float


class RetrievalResult:
    """Insertion-ordered collection of segments keyed by :func:`segment_key`.

    The first segment seen for a key wins; later duplicates are dropped.
    """

    def __init__(self) -> None:
        self._segments: Dict[str, Segment] = {}

    def add(self, match: Match) -> bool:
        """Insert the match's segment unless its key is already present."""

        key = match.segment.key
        if key in self._segments:
            return False
        self._segments[key] = match.segment
        return True

    def keys(self) -> List[str]:
        return list(self._segments)

    def segments(self) -> List[Segment]:
        return list(self._segments.values())

    def __contains__(self, key: object) -> bool:
        return key in self._segments

    def __getitem__(self, key: str) -> Segment:
        return self._segments[key]

    def __iter__(self) -> Iterator[Segment]:
        return iter(self._segments.values())

    def __len__(self) -> int:
        return len(self._segments)

    def __bool__(self) -> bool:
        return bool(self._segments)


@dataclass(slots=True)
class PipelineResponse:
    """Final answer returned by the RAG pipeline query stage."""

    answer: str
    prompt: str
    queries: List[str]
    references: List[Dict[str, Any]]
    found_context: bool = True
