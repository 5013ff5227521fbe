"""
Silver Medalist Matching Service

PURPOSE:
Rank silver medalists against an open vacancy so recruiters know whom to
re-engage first.

HOW IT WORKS:
1. Candidates are sent to the LLM in batches of 50 (token limits)
2. The model scores each candidate 0-100 with a short reasoning
3. Scores are clamped, results below the minimum score (40) dropped
4. Every run is stored in MongoDB (match_runs) for audit

MODES (reported as `method`):
- ai:       scores come from the model
- fallback: the model returned zero matches, so every candidate is
            returned at a flat score; logged as a warning
- keyword:  deterministic title/keyword overlap, no LLM involved
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from recruitops.core.log import get_logger
from recruitops.db.mongodb import DocumentStore
from recruitops.services.llm_client import LLMClient, LLMConfigError, LLMError
from recruitops.services.silver_medalists import SilverMedalist, UNKNOWN_OFFER_TITLE

logger = get_logger(__name__)

METHOD_AI = "ai"
METHOD_FALLBACK = "fallback"
METHOD_KEYWORD = "keyword"


@dataclass
class MatchResult:
    candidate: SilverMedalist
    score: int
    reasoning: str
    method: str


@dataclass
class MatchOutcome:
    method: str
    matches: List[MatchResult] = field(default_factory=list)
    batches_total: int = 0
    batches_failed: int = 0


# ============================================================
# LLM MATCHING
# ============================================================

SYSTEM_PROMPT = (
    "You are an expert recruitment assistant. You compare candidates with a "
    "vacancy and give accurate match scores (0-100) with a short explanation. "
    "You always answer with valid JSON."
)

MATCH_INSTRUCTIONS = """Silver medalists are strong candidates who reached a late stage of an
earlier process (hiring manager interview, offer) but were not hired.

Score every candidate from 0 to 100:
- 80-100: excellent match, very similar role
- 60-79: good match, relevant experience
- 40-59: moderate match, some overlap
- 0-39: weak match

Dutch and English job titles are equivalent ("Marketeer" = "Marketing").
Give a short reasoning (max 60 words) per candidate.
Only return candidates with score >= 40, highest first.

Return ONLY JSON in this format:
{"results": [{"index": 0, "score": 85, "reasoning": "string"}]}"""


class CandidateMatcher:
    """
    Scores silver medalists against a vacancy with the LLM.

    Usage:
        matcher = CandidateMatcher(llm_client, documents)
        outcome = matcher.match(candidates, "Content Marketeer", description)
    """

    def __init__(
        self,
        llm_client: LLMClient,
        documents: Optional[DocumentStore] = None,
        batch_size: int = 50,
        min_score: int = 40,
        fallback_score: int = 50,
    ):
        self.llm_client = llm_client
        self.documents = documents
        self.batch_size = batch_size
        self.min_score = min_score
        self.fallback_score = fallback_score

    def _build_prompt(
        self, job_title: str, job_description: Optional[str], batch: List[SilverMedalist]
    ) -> str:
        lines = []
        for index, candidate in enumerate(batch):
            title = candidate.previous_offer_title or UNKNOWN_OFFER_TITLE
            company = f" at {candidate.previous_offer_company}" if candidate.previous_offer_company else ""
            stage = candidate.furthest_stage.name or "Unknown"
            date = candidate.furthest_stage_date or candidate.updated_at or "Unknown"
            lines.append(f'{index}: "{title}"{company} | Last stage: {stage} | Date: {date}')

        description = (job_description or "").strip()[:800] or "No description available"
        return (
            f"VACANCY:\nTitle: {job_title}\nDescription: {description}\n\n"
            f"CANDIDATES:\n" + "\n".join(lines) + "\n\n" + MATCH_INSTRUCTIONS
        )

    @staticmethod
    def _results_from(parsed) -> List[dict]:
        if isinstance(parsed, list):
            results = parsed
        elif isinstance(parsed, dict):
            results = parsed.get("results") or parsed.get("matches") or parsed.get("candidates") or []
        else:
            results = []
        return [r for r in results if isinstance(r, dict)] if isinstance(results, list) else []

    def _score_batch(
        self, job_title: str, job_description: Optional[str], batch: List[SilverMedalist]
    ) -> List[MatchResult]:
        parsed = self.llm_client.complete_json(
            SYSTEM_PROMPT, self._build_prompt(job_title, job_description, batch)
        )

        results = []
        for item in self._results_from(parsed):
            index = item.get("index")
            if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < len(batch):
                continue
            try:
                score = float(item.get("score") or 0)
            except (TypeError, ValueError):
                score = 0.0
            score = int(round(max(0.0, min(100.0, score))))
            if score < self.min_score:
                continue
            reasoning = item.get("reasoning") or item.get("explanation") or "Match found"
            results.append(MatchResult(batch[index], score, str(reasoning), METHOD_AI))
        return results

    def match(
        self,
        candidates: List[SilverMedalist],
        job_title: str,
        job_description: Optional[str] = None,
        job_id: Optional[int] = None,
    ) -> MatchOutcome:
        """
        Score candidates for a vacancy.

        A failing batch is logged and skipped; LLMError is raised only when
        every batch fails. Zero matches switch to the fallback mode.
        """
        outcome = MatchOutcome(method=METHOD_AI)
        if not candidates:
            return outcome

        for start in range(0, len(candidates), self.batch_size):
            batch = candidates[start:start + self.batch_size]
            outcome.batches_total += 1
            try:
                outcome.matches.extend(self._score_batch(job_title, job_description, batch))
            except LLMConfigError:
                raise
            except LLMError as e:
                outcome.batches_failed += 1
                logger.warning("Matching batch starting at %s failed: %s", start, e)

        if outcome.batches_failed == outcome.batches_total:
            raise LLMError(f"All {outcome.batches_total} matching batches failed")

        if not outcome.matches:
            logger.warning(
                "LLM returned no matches for job %s (%s); returning all %s candidates at score %s",
                job_id, job_title, len(candidates), self.fallback_score,
            )
            outcome.method = METHOD_FALLBACK
            outcome.matches = [
                MatchResult(c, self.fallback_score, "No AI match; shown unfiltered", METHOD_FALLBACK)
                for c in candidates
            ]
        else:
            outcome.matches.sort(key=lambda m: m.score, reverse=True)

        self._record_run(job_id, job_title, len(candidates), outcome)
        return outcome

    def keyword(
        self,
        candidates: List[SilverMedalist],
        job_title: str,
        job_tags: Optional[List[str]] = None,
        job_id: Optional[int] = None,
    ) -> MatchOutcome:
        """Deterministic keyword matching, recorded like an LLM run."""
        outcome = MatchOutcome(method=METHOD_KEYWORD, matches=keyword_match(candidates, job_title, job_tags))
        self._record_run(job_id, job_title, len(candidates), outcome)
        return outcome

    def _record_run(self, job_id, job_title: str, candidate_count: int, outcome: MatchOutcome) -> None:
        if self.documents is None:
            return
        self.documents.collection("match_runs").insert_one({
            "job_id": job_id,
            "job_title": job_title,
            "method": outcome.method,
            "candidate_count": candidate_count,
            "match_count": len(outcome.matches),
            "batches_total": outcome.batches_total,
            "batches_failed": outcome.batches_failed,
            "results": [
                {"candidate_id": m.candidate.candidate_id, "score": m.score, "reasoning": m.reasoning}
                for m in outcome.matches
            ],
            "created_at": datetime.now(timezone.utc),
        })


# ============================================================
# KEYWORD MATCHING
# ============================================================

JOB_TITLE_SYNONYMS: Dict[str, List[str]] = {
    "developer": ["engineer", "programmer", "coder", "ontwikkelaar"],
    "engineer": ["developer", "programmer", "coder", "ingenieur"],
    "programmer": ["developer", "engineer", "coder"],
    "coder": ["developer", "engineer", "programmer"],
    "ontwikkelaar": ["developer", "engineer", "programmer"],
    "ingenieur": ["engineer", "developer"],
    "frontend": ["front-end", "front end", "client-side", "ui"],
    "front-end": ["frontend", "front end", "client-side", "ui"],
    "ui": ["frontend", "front-end", "user interface", "interface"],
    "ux": ["user experience", "usability", "designer"],
    "backend": ["back-end", "back end", "server-side", "api"],
    "back-end": ["backend", "back end", "server-side", "api"],
    "api": ["backend", "back-end", "rest", "graphql"],
    "fullstack": ["full-stack", "full stack"],
    "full-stack": ["fullstack", "full stack"],
    "senior": ["sr", "lead", "principal", "experienced"],
    "junior": ["jr", "entry", "starter", "beginner"],
    "medior": ["mid", "middle", "intermediate"],
    "lead": ["manager", "head", "supervisor"],
    "principal": ["senior", "lead", "architect"],
    "manager": ["lead", "head", "director", "supervisor"],
    "head": ["manager", "director", "lead"],
    "designer": ["design", "ui designer", "ux designer"],
    "design": ["designer", "ui", "ux"],
    "analyst": ["analist", "specialist", "consultant"],
    "analist": ["analyst", "specialist"],
    "specialist": ["analyst", "expert", "consultant"],
    "consultant": ["consultant", "advisor", "specialist"],
    "advisor": ["consultant", "specialist"],
    "architect": ["architect", "solution architect", "system architect"],
    "solution": ["architect", "designer"],
    "javascript": ["js", "typescript", "node"],
    "typescript": ["javascript", "ts", "node"],
    "react": ["reactjs", "react.js"],
    "angular": ["angularjs", "angular.js"],
    "vue": ["vuejs", "vue.js"],
    "node": ["nodejs", "node.js"],
    "python": ["py"],
    "java": ["java"],
    "c#": ["csharp", "c sharp"],
    "c++": ["cpp", "c plus plus"],
    ".net": ["dotnet", "dot net"],
}

STOP_WORDS = {"voor", "van", "met", "een", "het", "de", "en", "of", "the", "a", "an", "and", "or"}

KEYWORD_THRESHOLD = 0.2


def normalize_text(text: str) -> str:
    text = re.sub(r"[^\w\s]", " ", (text or "").lower())
    return " ".join(text.split())


def extract_keywords(title: str) -> List[str]:
    """Words longer than two letters (minus stop words) plus their bigrams."""
    words = [w for w in normalize_text(title).split() if len(w) > 2 and w not in STOP_WORDS]
    bigrams = [f"{a} {b}" for a, b in zip(words, words[1:])]
    return words + bigrams


def expand_with_synonyms(keywords: List[str]) -> List[str]:
    expanded: List[str] = []

    def add(word: str) -> None:
        if word not in expanded:
            expanded.append(word)

    for keyword in keywords:
        add(keyword)
        for synonym in JOB_TITLE_SYNONYMS.get(keyword, []):
            add(synonym)
        for key, synonyms in JOB_TITLE_SYNONYMS.items():
            if keyword in synonyms:
                add(key)
                for synonym in synonyms:
                    add(synonym)
    return expanded


def keyword_score(keywords: List[str], candidate_title: str, candidate_tags: List[str]) -> float:
    """
    0-1 overlap score.

    An exact hit in the title counts 2, a word-prefix hit 1.5, a hit in the
    tags 1; the normalized total weighs 0.7 and the share of matched
    keywords 0.3.
    """
    if not keywords:
        return 0.0

    title = normalize_text(candidate_title)
    tags = [normalize_text(tag) for tag in candidate_tags]
    score = 0.0
    matches = 0

    for keyword in keywords:
        keyword = keyword.lower()
        if keyword in title:
            score += 2
            matches += 1
        elif re.search(rf"\b{re.escape(keyword)}\w*", title):
            score += 1.5
            matches += 1
        elif any(keyword in tag for tag in tags):
            score += 1
            matches += 1

    normalized = min(score / (len(keywords) * 2), 1.0)
    return normalized * 0.7 + (matches / len(keywords)) * 0.3


def keyword_match(
    candidates: List[SilverMedalist], job_title: str, job_tags: Optional[List[str]] = None
) -> List[MatchResult]:
    """Candidates whose previous vacancy title overlaps the job title."""
    if not job_title:
        return []

    keywords = expand_with_synonyms(extract_keywords(job_title))
    for tag in job_tags or []:
        keywords.extend(k for k in extract_keywords(tag) if k not in keywords)

    results = []
    for candidate in candidates:
        score = keyword_score(keywords, candidate.previous_offer_title or "", candidate.tags)
        if score > KEYWORD_THRESHOLD:
            results.append(MatchResult(
                candidate, int(round(score * 100)), "Keyword overlap with job title", METHOD_KEYWORD
            ))

    # Most recent stage first, then stable sort by score
    results.sort(key=lambda m: m.candidate.furthest_stage_date or "", reverse=True)
    results.sort(key=lambda m: m.score, reverse=True)
    return results
