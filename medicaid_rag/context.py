"""Context block assembly from retrieved segments."""

from __future__ import annotations

from .schemas import RetrievalResult

CONTEXT_DIVIDER = "\n\n---\n\n"


def build_context(result: RetrievalResult) -> str:
    """Join segment texts in retrieval order, separated by :data:`CONTEXT_DIVIDER`."""

    return CONTEXT_DIVIDER.join(segment.text for segment in result)
