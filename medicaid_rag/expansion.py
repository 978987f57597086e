"""Query rewriting: turn follow-up questions into standalone search queries."""

from __future__ import annotations

import re
from textwrap import dedent
from typing import List

from . import logger
from .config import ExpansionConfig
from .errors import RewriteFailure, attempt
from .prompt import window_history
from .schemas import ConversationHistory

NO_HISTORY_MARKER = "(none provided)"

_LIST_MARKER = re.compile(r"^(?:\d+[.)]|[-*•])\s*")

_REWRITE_TEMPLATE = dedent(
    """
    You rewrite questions about Minnesota Medicaid into search queries for a document retrieval system.

    Conversation History:
    {history}

    Original Question: {question}

    Write up to 3 alternative search queries that:
    - stand on their own, replacing references such as "that", "it" or "this program" with what they refer to in the conversation history
    - expand acronyms (for example MA = Medical Assistance, DHS = Department of Human Services, LTSS = long-term services and supports)
    - keep the user's original intent

    Return one query per line, with no numbering, bullets or extra text.
    If the question is already self-contained, return it unchanged.
    """
).strip()


def build_rewrite_prompt(question: str, history: ConversationHistory, history_window: int = 6) -> str:
    """Return the rewriting instruction for ``question`` given the recent history."""

    recent = window_history(history, history_window)
    history_block = "\n".join(recent) if recent else NO_HISTORY_MARKER
    return _REWRITE_TEMPLATE.format(history=history_block, question=question)


def parse_rewrites(raw_output: str, question: str, limit: int = 3) -> List[str]:
    """Extract distinct rewrites from the model output.

    Blank lines and list markers are dropped. Duplicates are compared
    case-insensitively, so "MA income limits" and "ma income limits" count as
    one rewrite, and a line matching ``question`` in any case is skipped before
    the ``limit`` is applied. The result therefore holds at most ``limit``
    rewrites, none of which repeats the question.
    """

    seen = {question.strip().casefold()}
    rewrites: List[str] = []
    for line in raw_output.splitlines():
        candidate = _LIST_MARKER.sub("", line.strip()).strip()
        if not candidate:
            continue
        folded = candidate.casefold()
        if folded in seen:
            continue
        seen.add(folded)
        rewrites.append(candidate)
        if len(rewrites) >= limit:
            break
    return rewrites


class QueryExpander:
    """Produce the ordered search-query set for a user question."""

    def __init__(self, llm_client, config: ExpansionConfig | None = None, history_window: int = 6):
        self.llm_client = llm_client
        self.config = config or ExpansionConfig()
        self.history_window = history_window

    def expand(self, user_query: str, history: ConversationHistory = ()) -> List[str]:
        """Return ``[user_query, *rewrites]``; rewriting failures leave only ``user_query``."""

        if not self.config.enabled:
            return [user_query]

        prompt = build_rewrite_prompt(user_query, history, self.history_window)
        outcome = attempt(self.llm_client.complete, prompt)
        if not outcome.ok:
            failure = RewriteFailure(f"Query rewriting failed: {outcome.error}")
            logger.warning(str(failure), "medicaid_rag.expansion")
            return [user_query]

        rewrites = parse_rewrites(outcome.value or "", user_query, self.config.max_rewrites)
        queries = [user_query, *rewrites]
        logger.debug(f"Search queries: {queries}", "medicaid_rag.expansion")
        return queries
