"""Vector similarity helpers."""
from __future__ import annotations

from typing import Sequence

import numpy as np

from domain.errors import DimensionMismatch


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Return the cosine similarity of two equal-length vectors.

    A zero-magnitude vector has similarity 0.0 with anything.

    Raises:
        DimensionMismatch: if the vectors differ in length.
    """
    left = np.asarray(a, dtype=np.float64)
    right = np.asarray(b, dtype=np.float64)
    if left.shape != right.shape:
        raise DimensionMismatch(left.size, right.size)

    norm_left = float(np.linalg.norm(left))
    norm_right = float(np.linalg.norm(right))
    if norm_left == 0.0 or norm_right == 0.0:
        return 0.0
    return float(np.dot(left, right) / (norm_left * norm_right))


__all__ = ["cosine_similarity"]
