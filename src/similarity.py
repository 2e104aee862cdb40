from __future__ import annotations
from typing import Sequence
import math
import numpy as np
from .gopts import COSINE_EPS
from .utils import as_vec

def resonance(embedding: np.ndarray, centroid: np.ndarray, eps: float = COSINE_EPS) -> float:
    """Cosine of ``embedding`` against ``centroid``; 0.0 on empty or mismatched input."""
    a = as_vec(embedding).astype(np.float64)
    b = as_vec(centroid).astype(np.float64)
    if a.size == 0 or a.size != b.size:
        return 0.0
    dot = float(np.dot(a, b))
    den = math.sqrt(float(np.dot(a, a))) * math.sqrt(float(np.dot(b, b))) + eps
    v = dot / den
    return v if math.isfinite(v) else 0.0

def coherence(embedding: np.ndarray) -> float:
    # mean |x|, clamped at 1; downstream thresholds are calibrated on this exact form
    a = as_vec(embedding)
    if a.size == 0:
        return 0.0
    return min(1.0, float(np.mean(np.abs(a.astype(np.float64)))))

def stability(history: Sequence[float]) -> float:
    """Delta-I: 1 - mean absolute step between consecutive resonance values.

    Returns 1.0 for fewer than two samples. Can be negative.
    """
    h = np.asarray(list(history), dtype=np.float64)
    if h.size < 2:
        return 1.0
    return 1.0 - float(np.mean(np.abs(np.diff(h))))
