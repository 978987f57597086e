"""Error taxonomy for the Medicaid assistant and the ``Outcome`` call-site wrapper."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class RagError(Exception):
    """Base class for every error raised by the assistant."""


class ConfigurationError(RagError):
    """A required setting (API key, provider, index) is missing or invalid."""


class DocumentLoadError(RagError):
    """A single document source could not be fetched or parsed."""


class RewriteFailure(RagError):
    """The language model failed while rewriting the user query."""


class RetrievalFailure(RagError):
    """Embedding or vector search failed for one candidate query."""


class GenerationFailure(RagError):
    """The language model failed while producing the final answer."""


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Result of a collaborator call: either a value or the error it raised."""

    value: Optional[T] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def attempt(func: Callable[..., T], *args, **kwargs) -> Outcome[T]:
    """Call ``func`` and capture its return value or exception as an :class:`Outcome`."""

    try:
        return Outcome(value=func(*args, **kwargs))
    except Exception as exc:  # collaborators may raise anything (HTTP, auth, rate limits)
        return Outcome(error=exc)
