# src/core/similarity.py — v3
"""Cosine similarity between a query embedding and stored embeddings.

Embeddings are L2-normalized by the embedder, but stored vectors are
re-normalized here so a foreign or legacy row cannot skew scores.
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

logger = logging.getLogger(__name__)

_EPS = 1e-10


def cosine_similarities(
    query: Sequence[float], matrix: Sequence[Sequence[float]]
) -> np.ndarray:
    """Compute cosine similarity of ``query`` against each row of ``matrix``.

    Args:
        query: 1D query vector.
        matrix: Stored vectors, one per row.

    Returns:
        1D array of similarities in [-1, 1], one per row.

    Raises:
        ValueError: If dimensions of query and rows disagree.
    """
    q = np.asarray(query, dtype=np.float64)
    if q.ndim != 1:
        raise ValueError(f"Expected 1D query, got {q.ndim}D")

    if len(matrix) == 0:
        return np.empty((0,), dtype=np.float64)

    m = np.asarray(matrix, dtype=np.float64)
    if m.ndim != 2:
        raise ValueError(f"Expected 2D matrix, got {m.ndim}D")
    if m.shape[1] != q.shape[0]:
        raise ValueError(
            f"Dimension mismatch: query has {q.shape[0]}, rows have {m.shape[1]}"
        )

    q_norm = q / max(float(np.linalg.norm(q)), _EPS)
    row_norms = np.maximum(np.linalg.norm(m, axis=1), _EPS)
    return (m @ q_norm) / row_norms


def l2_normalize(vector: Sequence[float]) -> list[float]:
    """Return ``vector`` scaled to unit length (zero vectors are returned as-is)."""
    v = np.asarray(vector, dtype=np.float64)
    norm = float(np.linalg.norm(v))
    if norm < _EPS:
        return v.tolist()
    return (v / norm).tolist()
