"""
Keyword and semantic snippet search.

Keyword mode is a store-level substring match. Semantic mode embeds the query,
scores the user's most recent snippets by cosine similarity, then applies a
fixed relevance threshold and result cap.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, TypeAlias

from ..embeddings import Embedder
from ..errors import InvalidVectorError, MalformedDataError, ProviderError, ValidationError
from ..storage import SnippetRecord, SnippetStore
from .ranker import ScoredSnippet, rank_snippets
from .similarity import check_vector, cosine_similarity, parse_embedding

logger = logging.getLogger(__name__)

SearchMode: TypeAlias = Literal["keyword", "semantic"]

RELEVANCE_THRESHOLD = 0.7
SEMANTIC_RESULT_LIMIT = 50
SEMANTIC_CANDIDATE_LIMIT = 1000
KEYWORD_RESULT_LIMIT = 100


@dataclass(frozen=True)
class CandidateScores:
    """Similarity scores for one candidate snapshot."""

    scored: list[ScoredSnippet]
    without_embedding: int
    malformed: int


def score_candidates(
    query_embedding: list[float],
    candidates: list[SnippetRecord],
) -> CandidateScores:
    """Score every candidate that has a usable stored embedding.

    Candidates whose embedding cannot be decoded or compared are dropped and
    logged rather than failing the search.
    """
    scored: list[ScoredSnippet] = []
    without_embedding = 0
    malformed = 0
    for position, snippet in enumerate(candidates):
        if not snippet.embedding:
            without_embedding += 1
            continue
        try:
            vector = parse_embedding(snippet.embedding)
            similarity = cosine_similarity(query_embedding, vector)
        except (MalformedDataError, InvalidVectorError) as exc:
            malformed += 1
            logger.warning("Skipping snippet %s with unusable embedding: %s", snippet.id, exc)
            continue
        scored.append(ScoredSnippet(snippet=snippet, similarity=similarity, position=position))
    return CandidateScores(scored=scored, without_embedding=without_embedding, malformed=malformed)


class SearchOrchestrator:
    """Run keyword or semantic search over one user's snippets."""

    def __init__(self, store: SnippetStore, embedder: Embedder) -> None:
        self.store = store
        self.embedder = embedder

    def search(
        self,
        *,
        user_id: str,
        query: str,
        mode: SearchMode = "keyword",
    ) -> list[SnippetRecord]:
        if not query:
            raise ValidationError("Query parameter is required")
        if mode == "semantic":
            results = self.semantic_search(user_id=user_id, query=query)
        elif mode == "keyword":
            results = self.keyword_search(user_id=user_id, query=query)
        else:
            raise ValidationError(f"Unsupported search mode: {mode!r}")
        logger.debug("%s search for user %s returned %d results", mode, user_id, len(results))
        return results

    def keyword_search(self, *, user_id: str, query: str) -> list[SnippetRecord]:
        return self.store.search_by_owner(
            user_id=user_id,
            query=query,
            limit=KEYWORD_RESULT_LIMIT,
        )

    def semantic_search(self, *, user_id: str, query: str) -> list[SnippetRecord]:
        # Provider errors propagate: no silent fallback to keyword mode.
        query_embedding = self.embedder.embed_query(query)
        try:
            check_vector(query_embedding)
        except InvalidVectorError as exc:
            raise ProviderError("Provider returned an unusable query embedding") from exc

        candidates = self.store.find_recent_by_owner(
            user_id=user_id,
            limit=SEMANTIC_CANDIDATE_LIMIT,
        )
        scores = score_candidates(query_embedding, candidates)
        if scores.malformed:
            logger.warning(
                "Dropped %d of %d candidates with malformed embeddings for user %s",
                scores.malformed,
                len(candidates),
                user_id,
            )

        ranked = rank_snippets(
            scores.scored,
            threshold=RELEVANCE_THRESHOLD,
            limit=SEMANTIC_RESULT_LIMIT,
        )
        return [item.snippet for item in ranked]
