from __future__ import annotations
import numpy as np
from .gopts import DEFAULT_DIM, DEFAULT_INIT_FILL, DEFAULT_LEARNING_RATE, NORM_EPS
from .utils import as_vec, normalize

def default_centroid(dim: int = DEFAULT_DIM, fill: float = DEFAULT_INIT_FILL) -> np.ndarray:
    # stored raw, not renormalized: keeps the first cosine denominator non-degenerate
    return np.full(int(dim), float(fill), dtype=np.float32)

def update_centroid(centroid: np.ndarray, embedding: np.ndarray,
                    learning_rate: float = DEFAULT_LEARNING_RATE) -> np.ndarray:
    """EMA step toward ``embedding`` followed by unit renorm. Returns a new array."""
    lr = float(learning_rate)
    if not (0.0 <= lr <= 1.0):
        raise ValueError(f"learning_rate must be in [0, 1], got {learning_rate}")
    c = as_vec(centroid)
    e = as_vec(embedding)
    if c.shape != e.shape:
        raise ValueError(f"centroid dim {c.size} != embedding dim {e.size}")
    new = np.float32(1.0 - lr) * c + np.float32(lr) * e
    return normalize(new, NORM_EPS)
