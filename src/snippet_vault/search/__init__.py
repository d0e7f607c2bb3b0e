"""Search helpers for stored snippets."""

from .orchestrator import (
    KEYWORD_RESULT_LIMIT,
    RELEVANCE_THRESHOLD,
    SEMANTIC_CANDIDATE_LIMIT,
    SEMANTIC_RESULT_LIMIT,
    CandidateScores,
    SearchMode,
    SearchOrchestrator,
    score_candidates,
)
from .ranker import ScoredSnippet, rank_snippets
from .similarity import (
    check_vector,
    cosine_similarity,
    parse_embedding,
    serialize_embedding,
)

__all__ = [
    "KEYWORD_RESULT_LIMIT",
    "RELEVANCE_THRESHOLD",
    "SEMANTIC_CANDIDATE_LIMIT",
    "SEMANTIC_RESULT_LIMIT",
    "CandidateScores",
    "SearchMode",
    "SearchOrchestrator",
    "score_candidates",
    "ScoredSnippet",
    "rank_snippets",
    "check_vector",
    "cosine_similarity",
    "parse_embedding",
    "serialize_embedding",
]
