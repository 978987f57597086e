"""Tests for query rewriting and parsing."""

from __future__ import annotations

from conftest import ScriptedLLM

from medicaid_rag.config import ExpansionConfig
from medicaid_rag.expansion import NO_HISTORY_MARKER, QueryExpander, build_rewrite_prompt, parse_rewrites

QUESTION = "What is the income limit for Medical Assistance?"


def test_original_query_is_first() -> None:
    llm = ScriptedLLM(rewrites="Medical Assistance income limits in Minnesota\nMA income eligibility thresholds")
    queries = QueryExpander(llm).expand(QUESTION, [])
    assert queries == [
        QUESTION,
        "Medical Assistance income limits in Minnesota",
        "MA income eligibility thresholds",
    ]


def test_parse_strips_list_markers_and_blank_lines() -> None:
    raw = "\n1. Medical Assistance eligibility\n\n- MinnesotaCare costs\n* Estate recovery rules\n• Waiver programs\n"
    assert parse_rewrites(raw, QUESTION) == [
        "Medical Assistance eligibility",
        "MinnesotaCare costs",
        "Estate recovery rules",
    ]


def test_parse_removes_case_insensitive_duplicates() -> None:
    llm = ScriptedLLM(rewrites="Q\nQ\nq")
    queries = QueryExpander(llm).expand("What is MA?", [])
    assert queries == ["What is MA?", "Q"]


def test_parse_drops_copies_of_the_original_question() -> None:
    raw = f"{QUESTION.upper()}\n  {QUESTION}  \nIncome limits for MA"
    assert parse_rewrites(raw, QUESTION) == ["Income limits for MA"]


def test_self_contained_question_yields_single_query() -> None:
    llm = ScriptedLLM(rewrites=QUESTION)
    assert QueryExpander(llm).expand(QUESTION, []) == [QUESTION]


def test_rewrites_are_capped() -> None:
    raw = "\n".join(f"rewrite {number}" for number in range(6))
    assert len(parse_rewrites(raw, QUESTION)) == 3
    assert parse_rewrites(raw, QUESTION, limit=1) == ["rewrite 0"]


def test_model_failure_falls_back_to_original_query() -> None:
    llm = ScriptedLLM(fail_rewrite=True)
    queries = QueryExpander(llm).expand(QUESTION, ["User: hi", "Assistant: hello"])
    assert queries == [QUESTION]
    assert len(llm.calls) == 1


def test_disabled_expansion_skips_the_model() -> None:
    llm = ScriptedLLM(rewrites="something else")
    queries = QueryExpander(llm, ExpansionConfig(enabled=False)).expand(QUESTION, [])
    assert queries == [QUESTION]
    assert llm.calls == []


def test_rewrite_prompt_marks_missing_history() -> None:
    prompt = build_rewrite_prompt(QUESTION, [])
    assert NO_HISTORY_MARKER in prompt
    assert QUESTION in prompt


def test_rewrite_prompt_uses_recent_history_only() -> None:
    history = [f"User: question number {number}." for number in range(10)]
    prompt = build_rewrite_prompt(QUESTION, history)
    for number in range(4):
        assert f"question number {number}." not in prompt
    for number in range(4, 10):
        assert f"question number {number}." in prompt
    assert NO_HISTORY_MARKER not in prompt


def test_question_copies_do_not_use_up_the_rewrite_limit() -> None:
    raw = f"{QUESTION.lower()}\nIncome limits for MA\nMA asset limits\nMA eligibility for adults\nMA for children"
    assert parse_rewrites(raw, QUESTION, limit=3) == [
        "Income limits for MA",
        "MA asset limits",
        "MA eligibility for adults",
    ]
