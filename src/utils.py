from __future__ import annotations
import logging
import math
import numpy as np
from .gopts import NORM_EPS

# ---------- Logging ----------
logger = logging.getLogger("resonance_gate")
if not logger.handlers:
    h = logging.StreamHandler()
    h.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    logger.addHandler(h)
logger.setLevel(logging.INFO)

def as_vec(x) -> np.ndarray:
    return np.asarray(x, dtype=np.float32).reshape(-1)

def normalize(x: np.ndarray, eps: float = NORM_EPS) -> np.ndarray:
    """Unit-normalize with divisor sqrt(max(eps, sum(x**2))); never divides by zero."""
    x = as_vec(x)
    ss = float(np.dot(x.astype(np.float64), x.astype(np.float64)))
    return (x / np.float32(math.sqrt(max(eps, ss)))).astype(np.float32)

class DummyLock:
    def __enter__(self): return self
    def __exit__(self, exc_type, exc, tb): return False
