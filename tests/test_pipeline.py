"""End-to-end tests for the RAG pipeline with scripted collaborators."""

from __future__ import annotations

from pathlib import Path

import pytest
from conftest import EchoEmbedder, ScriptedLLM, ScriptedStore, VocabularyEmbedder, make_segment

from medicaid_rag.config import (
    FALLBACK_MESSAGE,
    PipelineConfig,
    RetrievalConfig,
    SegmenterConfig,
    VectorStoreConfig,
)
from medicaid_rag.context import CONTEXT_DIVIDER
from medicaid_rag.errors import GenerationFailure
from medicaid_rag.pipeline import RAGPipeline
from medicaid_rag.schemas import Match
from medicaid_rag.vector_store import MedicaidVectorStore

INCOME_QUESTION = "What is the income limit for Medical Assistance?"
INCOME_REWRITE = "Minnesota Medical Assistance income limits by household size"


def _pipeline(llm: ScriptedLLM, store, embedder=None, config: PipelineConfig | None = None) -> RAGPipeline:
    return RAGPipeline(
        config=config or PipelineConfig(),
        embedding_generator=embedder or EchoEmbedder(),
        llm_client=llm,
        vector_store=store,
    )


@pytest.fixture()
def income_store() -> ScriptedStore:
    return ScriptedStore(
        {
            INCOME_QUESTION: [
                Match(make_segment("Adults with income at or below 133% FPG qualify.", "income", 0), 0.91),
                Match(make_segment("Children qualify up to 275% FPG.", "income", 1), 0.85),
                Match(make_segment("Pregnant people qualify up to 278% FPG.", "income", 2), 0.8),
            ],
            INCOME_REWRITE: [
                Match(make_segment("Duplicate of the adults passage.", "income", 0), 0.93),
                Match(make_segment("Asset limits apply to people over 65.", "assets", 0), 0.78),
            ],
        }
    )


def test_scenario_multi_query_context(income_store: ScriptedStore) -> None:
    llm = ScriptedLLM(rewrites=INCOME_REWRITE, answer="Adults qualify up to 133% FPG.")
    response = _pipeline(llm, income_store).respond(INCOME_QUESTION, [])

    assert response.answer == "Adults qualify up to 133% FPG."
    assert response.queries == [INCOME_QUESTION, INCOME_REWRITE]
    assert response.found_context is True

    prompt = llm.answer_prompts[0]
    assert INCOME_QUESTION in prompt
    expected = [
        "Adults with income at or below 133% FPG qualify.",
        "Children qualify up to 275% FPG.",
        "Pregnant people qualify up to 278% FPG.",
        "Asset limits apply to people over 65.",
    ]
    assert CONTEXT_DIVIDER.join(expected) in prompt
    assert prompt.count(CONTEXT_DIVIDER) == 3
    assert "Duplicate of the adults passage." not in prompt
    assert [reference["source"] for reference in response.references] == [
        "https://example.org/income",
        "https://example.org/assets",
    ]


def test_scenario_follow_up_question_is_rewritten() -> None:
    follow_up = "Is there a specific program for that?"
    rewrite = "What is the Minnesota Medical Assistance estate recovery program?"
    history = [
        "User: What happens to my house under estate recovery?",
        "Assistant: Minnesota may recover Medical Assistance costs from an estate.",
    ]
    store = ScriptedStore({rewrite: [Match(make_segment("Estate recovery program details.", "estate", 0), 0.88)]})
    llm = ScriptedLLM(rewrites=rewrite, answer="Yes, the estate recovery program.")

    response = _pipeline(llm, store).respond(follow_up, history)

    assert response.queries[0] == follow_up
    assert response.queries[1] != follow_up
    assert "estate recovery program" in response.queries[1]
    assert store.searched == [follow_up, rewrite]
    assert "What happens to my house under estate recovery?" in llm.calls[0]
    assert "Previous Conversation:" in llm.answer_prompts[0]


def test_empty_retrieval_returns_fallback_without_generation(llm: ScriptedLLM, store: ScriptedStore) -> None:
    answer = _pipeline(llm, store).answer("What is the weather in Duluth?", [])
    assert answer == FALLBACK_MESSAGE
    assert len(llm.calls) == 1
    assert llm.answer_prompts == []


def test_fallback_response_has_no_references(llm: ScriptedLLM, store: ScriptedStore) -> None:
    response = _pipeline(llm, store).respond("Unrelated question", [])
    assert response.found_context is False
    assert response.references == []
    assert response.prompt == ""
    assert "Minnesota Department of Human Services" in response.answer


def test_generation_failure_propagates(income_store: ScriptedStore) -> None:
    llm = ScriptedLLM(fail_answer=True)
    with pytest.raises(GenerationFailure) as excinfo:
        _pipeline(llm, income_store).answer(INCOME_QUESTION, [])
    assert isinstance(excinfo.value.__cause__, ConnectionError)


def test_rewrite_failure_still_answers(income_store: ScriptedStore) -> None:
    llm = ScriptedLLM(fail_rewrite=True, answer="Grounded answer.")
    response = _pipeline(llm, income_store).respond(INCOME_QUESTION, [])
    assert response.answer == "Grounded answer."
    assert response.queries == [INCOME_QUESTION]
    assert income_store.searched == [INCOME_QUESTION]


def test_history_is_windowed_and_not_mutated(income_store: ScriptedStore) -> None:
    history = [f"User: earlier question {chr(ord('a') + number)}" for number in range(10)]
    snapshot = list(history)
    llm = ScriptedLLM()

    _pipeline(llm, income_store).answer(INCOME_QUESTION, history)

    assert history == snapshot
    prompt = llm.answer_prompts[0]
    assert "earlier question a" not in prompt
    assert "earlier question d" not in prompt
    assert "earlier question e" in prompt
    assert "earlier question j" in prompt


def test_blank_question_is_rejected(llm: ScriptedLLM, store: ScriptedStore) -> None:
    with pytest.raises(ValueError):
        _pipeline(llm, store).answer("   ", [])
    assert llm.calls == []


def test_ingest_and_answer_with_memory_store(tmp_path: Path) -> None:
    document = tmp_path / "estate_recovery.txt"
    document.write_text(
        "Estate recovery lets Minnesota recover Medical Assistance costs after death.\n\n"
        "Waiver programs help people stay at home instead of a nursing facility.\n\n"
        "The preferred drug list shows which drug products are covered.",
        encoding="utf-8",
    )
    config = PipelineConfig(
        vector_store=VectorStoreConfig(provider="memory"),
        segmenter=SegmenterConfig(chunk_size=90, chunk_overlap=0),
        retrieval=RetrievalConfig(top_k=1, min_score=0.5),
    )
    llm = ScriptedLLM(answer="Estate recovery applies after death.")
    pipeline = RAGPipeline(
        config=config,
        embedding_generator=VocabularyEmbedder(),
        llm_client=llm,
        vector_store=MedicaidVectorStore(config.vector_store),
    )

    assert pipeline.ingest([document]) == 3
    response = pipeline.respond("How does estate recovery work?")

    assert response.answer == "Estate recovery applies after death."
    assert "Estate recovery lets Minnesota recover" in llm.answer_prompts[0]
    assert "Waiver programs" not in llm.answer_prompts[0]
    assert response.references[0]["title"] == "estate_recovery"

    pipeline.clear_all()
    assert pipeline.answer("How does estate recovery work?") == FALLBACK_MESSAGE
