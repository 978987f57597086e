"""Language model client and response helpers."""

from __future__ import annotations

from typing import Iterable

from openai import OpenAI

from .config import LLMConfig
from .schemas import PipelineResponse, Segment


class LLMClient:
    """Wrapper around the OpenAI chat completion API exposing ``complete(prompt)``."""

    def __init__(self, config: LLMConfig, client: OpenAI | None = None) -> None:
        self.config = config
        self.client = client or OpenAI(api_key=config.api_key(), timeout=config.timeout)

    def complete(self, prompt: str) -> str:
        """Send ``prompt`` as a single user message and return the completion text."""

        response = self.client.chat.completions.create(
            model=self.config.model,
            temperature=self.config.temperature,
            messages=[{"role": "user", "content": prompt}],
        )
        return (response.choices[0].message.content or "").strip()


def build_references(segments: Iterable[Segment]) -> list[dict]:
    """Return one reference entry per distinct source, in retrieval order."""

    references = []
    seen = set()
    for segment in segments:
        source = segment.metadata.get("source")
        if source in seen:
            continue
        seen.add(source)
        references.append(
            {
                "label": f"Source {len(references) + 1}",
                "title": segment.metadata.get("title"),
                "source": source,
                "category": segment.metadata.get("category"),
            }
        )
    return references


def build_pipeline_response(
    answer: str,
    prompt: str,
    queries: list[str],
    segments: Iterable[Segment],
) -> PipelineResponse:
    """Create a :class:`PipelineResponse` object with references."""

    return PipelineResponse(
        answer=answer,
        prompt=prompt,
        queries=list(queries),
        references=build_references(segments),
        found_context=True,
    )
