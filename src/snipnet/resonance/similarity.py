"""Exact cosine similarity helpers.

These define the reference semantics of the vector store: the LanceDB-backed
`VectorRepository.top_similar` must agree with `top_similar` here on small
corpora.
"""

from collections.abc import Mapping, Sequence

import numpy as np

from snipnet.resonance.exceptions import DimensionMismatchError


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity between two vectors. Returns 0.0 if either has zero norm."""
    if len(a) != len(b):
        raise DimensionMismatchError(len(a), len(b))
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return float(np.dot(va, vb) / (norm_a * norm_b))


def top_similar(
    vector: Sequence[float],
    candidates: Mapping[str, Sequence[float]],
    exclude_id: str | None,
    k: int,
    min_score: float,
) -> list[tuple[str, float]]:
    """Brute-force k nearest neighbours by cosine similarity.

    Returns (node_id, score) pairs with score > min_score, excluding
    `exclude_id`, ordered by descending score and capped at k.
    """
    if k <= 0:
        return []

    scored = [
        (node_id, cosine_similarity(vector, candidate))
        for node_id, candidate in candidates.items()
        if node_id != exclude_id
    ]
    scored = [(node_id, score) for node_id, score in scored if score > min_score]
    scored.sort(key=lambda item: item[1], reverse=True)
    return scored[:k]
