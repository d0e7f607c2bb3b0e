"""
Vector similarity and embedding (de)serialization.

Embeddings are stored as JSON array text alongside each snippet and decoded
per candidate at query time.
"""

from __future__ import annotations

import json
import math
from typing import Sequence

from ..errors import InvalidVectorError, MalformedDataError


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Return the cosine of the angle between *a* and *b*.

    Raises InvalidVectorError for empty, mismatched-length, all-zero, or
    non-finite input instead of returning NaN.
    """
    if not a or not b:
        raise InvalidVectorError("Cannot compare empty vectors.")
    if len(a) != len(b):
        raise InvalidVectorError(
            f"Vector length mismatch: {len(a)} != {len(b)}."
        )

    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y

    if norm_a == 0.0 or norm_b == 0.0:
        raise InvalidVectorError("Cannot compare an all-zero vector.")

    similarity = dot / (math.sqrt(norm_a) * math.sqrt(norm_b))
    if not math.isfinite(similarity):
        raise InvalidVectorError("Vector contains non-finite values.")
    # Rounding can push |similarity| a hair past 1.0.
    return max(-1.0, min(1.0, similarity))


def serialize_embedding(vector: Sequence[float]) -> str:
    return json.dumps([float(value) for value in vector])


def parse_embedding(raw: str) -> list[float]:
    """Decode a stored embedding, raising MalformedDataError on bad data."""
    try:
        decoded = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise MalformedDataError(f"Embedding is not valid JSON: {exc}") from exc

    if not isinstance(decoded, list) or not decoded:
        raise MalformedDataError("Embedding must be a non-empty JSON array.")

    vector: list[float] = []
    for value in decoded:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise MalformedDataError(f"Embedding has non-numeric entry: {value!r}")
        number = float(value)
        if not math.isfinite(number):
            raise MalformedDataError("Embedding has non-finite entry.")
        vector.append(number)
    return vector


def check_vector(vector: Sequence[float]) -> None:
    """Raise InvalidVectorError unless *vector* can take part in a comparison."""
    if not vector:
        raise InvalidVectorError("Vector is empty.")
    if not all(math.isfinite(value) for value in vector):
        raise InvalidVectorError("Vector contains non-finite values.")
    if not any(value != 0.0 for value in vector):
        raise InvalidVectorError("Vector is all zeros.")
