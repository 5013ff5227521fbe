"""
Silver medalist matching: LLM scoring, zero-match fallback, batch failures
and the keyword matcher.
"""

import pytest

from recruitops.services.ats_parsing import Stage
from recruitops.services.llm_client import LLMClient, LLMConfigError, LLMError
from recruitops.services.matching_service import (
    METHOD_AI, METHOD_FALLBACK, METHOD_KEYWORD, CandidateMatcher, expand_with_synonyms,
    extract_keywords, keyword_match,
)
from recruitops.services.silver_medalists import SilverMedalist


def medalist(candidate_id, title, date="2026-05-01T00:00:00Z", tags=()):
    return SilverMedalist(
        candidate_id=candidate_id,
        name=f"Candidate {candidate_id}",
        furthest_stage=Stage(name="Offer"),
        furthest_stage_date=date,
        previous_offer_title=title,
        previous_offer_company="Kader Group",
        tags=list(tags),
    )


@pytest.fixture
def candidates():
    return [
        medalist(1, "Marketing Associate"),
        medalist(2, "Allround Secretaresse"),
        medalist(3, "Content Marketeer"),
    ]


def test_ai_scores_are_clamped_filtered_and_sorted(llm, documents, candidates):
    llm.responses = [{"results": [
        {"index": 0, "score": 72, "reasoning": "Related marketing role"},
        {"index": 1, "score": "30", "reasoning": "Different field"},
        {"index": 2, "score": 150, "reasoning": "Same role"},
        {"index": 9, "score": 99, "reasoning": "Out of range"},
    ]}]

    outcome = CandidateMatcher(llm, documents).match(candidates, "Content Marketeer", job_id=104)

    assert outcome.method == METHOD_AI
    assert [(m.candidate.candidate_id, m.score) for m in outcome.matches] == [(3, 100), (1, 72)]
    assert all(m.method == METHOD_AI for m in outcome.matches)


def test_fenced_json_answer_is_accepted(llm, candidates):
    llm.responses = ['```json\n{"matches": [{"index": 0, "score": 64, "reasoning": "ok"}]}\n```']

    outcome = CandidateMatcher(llm).match(candidates, "Marketing Manager")

    assert [m.score for m in outcome.matches] == [64]


def test_zero_matches_fall_back_to_every_candidate(llm, documents, candidates, caplog):
    llm.responses = [{"results": []}]

    outcome = CandidateMatcher(llm, documents, fallback_score=50).match(
        candidates, "Operator", job_id=7
    )

    assert outcome.method == METHOD_FALLBACK
    assert len(outcome.matches) == len(candidates)
    assert {m.score for m in outcome.matches} == {50}
    assert {m.method for m in outcome.matches} == {METHOD_FALLBACK}
    assert "returning all 3 candidates" in caplog.text

    run = documents.collection("match_runs").find_one({"job_id": 7})
    assert run["method"] == METHOD_FALLBACK
    assert run["match_count"] == 3


def test_failed_batch_is_skipped(llm, candidates):
    llm.responses = [
        LLMError("timeout"),
        {"results": [{"index": 0, "score": 88, "reasoning": "Close fit"}]},
    ]

    outcome = CandidateMatcher(llm, batch_size=2).match(candidates, "Content Marketeer")

    assert outcome.batches_total == 2
    assert outcome.batches_failed == 1
    assert [(m.candidate.candidate_id, m.score) for m in outcome.matches] == [(3, 88)]


def test_every_batch_failing_raises(llm, candidates):
    llm.responses = [LLMError("down"), LLMError("down")]

    with pytest.raises(LLMError):
        CandidateMatcher(llm, batch_size=2).match(candidates, "Content Marketeer")


def test_missing_api_key_is_not_treated_as_batch_failure(candidates):
    with pytest.raises(LLMConfigError):
        CandidateMatcher(LLMClient(api_key="")).match(candidates, "Content Marketeer")


def test_no_candidates_skips_the_llm(llm):
    outcome = CandidateMatcher(llm).match([], "Content Marketeer")
    assert outcome.matches == []
    assert llm.calls == []


def test_prompt_lists_every_candidate_of_the_batch(llm, candidates):
    CandidateMatcher(llm).match(candidates, "Content Marketeer", "Schrijven van content")

    prompt = llm.calls[0]
    assert "Title: Content Marketeer" in prompt
    assert '0: "Marketing Associate" at Kader Group' in prompt
    assert '2: "Content Marketeer"' in prompt


def test_extract_keywords_and_synonyms():
    assert extract_keywords("Senior Developer voor de backend") == [
        "senior", "developer", "backend", "senior developer", "developer backend",
    ]
    expanded = expand_with_synonyms(["developer"])
    assert "engineer" in expanded and "ontwikkelaar" in expanded


def test_keyword_match_scores_title_overlap():
    results = keyword_match(
        [
            medalist(1, "Marketing Associate"),
            medalist(2, "Allround Secretaresse"),
            medalist(3, "Senior Engineer"),
        ],
        "Marketing Associate",
    )
    assert [(r.candidate.candidate_id, r.score) for r in results] == [(1, 100)]
    assert results[0].method == METHOD_KEYWORD


def test_keyword_match_without_title_is_empty():
    assert keyword_match([medalist(1, "Marketing Associate")], "") == []


def test_keyword_run_is_recorded(llm, documents, candidates):
    outcome = CandidateMatcher(llm, documents).keyword(candidates, "Marketing Associate", job_id=103)

    assert outcome.method == METHOD_KEYWORD
    assert llm.calls == []
    assert documents.collection("match_runs").count_documents({"job_id": 103}) == 1
