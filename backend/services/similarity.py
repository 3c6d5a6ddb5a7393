"""Vector similarity helpers for embedding comparison."""

from collections.abc import Sequence

import numpy as np


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity in [-1, 1] over the overlapping prefix of a and b.

    Vectors from one model always share a width; the prefix rule only
    matters if a stale entry from another model slips through. Returns 0.0
    when either vector has zero norm.
    """
    n = min(len(a), len(b))
    if n == 0:
        return 0.0
    va = np.asarray(a[:n], dtype=np.float64)
    vb = np.asarray(b[:n], dtype=np.float64)
    norm_a = float(np.linalg.norm(va))
    norm_b = float(np.linalg.norm(vb))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    score = float(np.dot(va, vb)) / (norm_a * norm_b)
    return max(-1.0, min(1.0, score))


def best_match(target: Sequence[float], candidates: list[Sequence[float]]) -> tuple[int, float]:
    """Index and similarity of the candidate closest to target (top-1).

    Ties go to the earliest candidate. Returns (-1, 0.0) for no candidates.
    """
    best_idx, best_sim = -1, 0.0
    for i, vec in enumerate(candidates):
        sim = cosine_similarity(target, vec)
        if best_idx == -1 or sim > best_sim:
            best_idx, best_sim = i, sim
    return best_idx, best_sim
