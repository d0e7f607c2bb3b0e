"""
Ranking helpers for semantic search candidates.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..storage import SnippetRecord


@dataclass(frozen=True)
class ScoredSnippet:
    """A candidate snippet with its similarity to the query."""

    snippet: SnippetRecord
    similarity: float
    # Index in the candidate set (0 = most recently created).
    position: int


def rank_snippets(
    scored: list[ScoredSnippet],
    *,
    threshold: float,
    limit: int,
) -> list[ScoredSnippet]:
    """Keep candidates strictly above *threshold*, best first, capped at *limit*.

    Equal similarities keep candidate order, so newer snippets win ties.
    """
    relevant = [item for item in scored if item.similarity > threshold]
    ordered = sorted(relevant, key=lambda item: (-item.similarity, item.position))
    return ordered[: max(limit, 0)]
