"""Prompt construction utilities for the LLM stage."""

from __future__ import annotations

from textwrap import dedent
from typing import List

from .schemas import ConversationHistory

HISTORY_WINDOW = 6

SYSTEM_FRAMING = (
    "You are a helpful assistant specializing in Minnesota Medicaid eligibility and benefits information.\n"
    "Use the following context from official Minnesota Medicaid documentation to answer the user's question."
)

_INSTRUCTIONS = dedent(
    """
    1. Answer based ONLY on the provided context
    2. If the context doesn't contain enough information to fully answer the question, say so
    3. Be specific about eligibility requirements, benefits, and processes
    4. Include relevant contact information or next steps when appropriate
    5. If discussing income limits, mention that they are subject to change and should be verified
    6. Always remind users that this is general information and they should contact the Minnesota Department of Human Services for their specific situation
    """
).strip()

_FOLLOW_UP_INSTRUCTION = (
    "7. Use the previous conversation to understand follow-up questions and what words like "
    '"that", "it" or "this program" refer to'
)

_PROMPT_TEMPLATE = dedent(
    """
    {framing}

    Context:
    {context}

    User Question: {question}

    Instructions:
    {instructions}

    Answer:"""
).strip()

_CONVERSATIONAL_TEMPLATE = dedent(
    """
    {framing}

    Context:
    {context}

    Previous Conversation:
    {history}

    Current User Question: {question}

    Instructions:
    {instructions}

    Answer:"""
).strip()


def window_history(history: ConversationHistory, size: int = HISTORY_WINDOW) -> List[str]:
    """Return a copy of the last ``size`` whole turns of ``history``."""

    if size <= 0:
        return []
    return list(history)[-size:]


def build_prompt(context: str, question: str) -> str:
    """Prompt for a first question, with no conversation history."""

    return _PROMPT_TEMPLATE.format(
        framing=SYSTEM_FRAMING,
        context=context,
        question=question,
        instructions=_INSTRUCTIONS,
    )


def build_conversational_prompt(context: str, question: str, history: ConversationHistory) -> str:
    """Prompt that includes the given history turns verbatim, one per line."""

    return _CONVERSATIONAL_TEMPLATE.format(
        framing=SYSTEM_FRAMING,
        context=context,
        history="\n".join(history),
        question=question,
        instructions=f"{_INSTRUCTIONS}\n{_FOLLOW_UP_INSTRUCTION}",
    )


def compose_prompt(
    context: str,
    question: str,
    history: ConversationHistory = (),
    history_window: int = HISTORY_WINDOW,
) -> str:
    """Select the template by whether any history remains after windowing."""

    recent = window_history(history, history_window)
    if not recent:
        return build_prompt(context, question)
    return build_conversational_prompt(context, question, recent)
