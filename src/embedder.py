from __future__ import annotations
from typing import List, Optional, Sequence
import numpy as np
from .gopts import DEFAULT_DIM, NORM_EPS
from .utils import normalize

_K = 0x45D9F3B
_M32 = 0xFFFFFFFF

def mix(a: int, b: int, c: int) -> int:
    """Fold three byte values into a signed 32-bit hash (multiply-xor-shift cascade)."""
    x = (a * _K) & _M32
    x ^= x >> 16
    x = (x + b * _K) & _M32
    x ^= x >> 16
    x = (x + c * _K) & _M32
    x ^= x >> 16
    return x - (1 << 32) if x & 0x80000000 else x

def _signed_bytes(s: str) -> List[int]:
    return [b - 256 if b > 127 else b for b in s.encode("utf-8")]

def embed(text: Optional[str], dim: int = DEFAULT_DIM) -> np.ndarray:
    """Deterministic hashed 3-gram embedding of ``text``.

    Input is trimmed and lowercased; empty input gives the zero vector, which
    callers must accept as a valid rest state.
    """
    v = np.zeros(dim, dtype=np.float32)
    s = (text or "").strip().lower()
    if not s:
        return v

    mask = dim - 1
    bs = _signed_bytes(s)
    n = len(bs)
    for i in range(n):
        b0 = bs[i]
        b1 = bs[i + 1] if i + 1 < n else 0
        b2 = bs[i + 2] if i + 2 < n else 0
        h = mix(b0, b1, b2)
        sign = -1.0 if (h >> 8) & 1 else 1.0
        v[h & mask] += np.float32(sign * (1.0 + (abs(h) % 7) / 7.0))
    return normalize(v, NORM_EPS)


class HashEmbedder:
    """Encoder-shaped wrapper around :func:`embed` (``encode`` / dimension query)."""
    def __init__(self, dim: int = DEFAULT_DIM):
        d = int(dim)
        if d <= 0 or (d & (d - 1)) != 0:
            raise ValueError(f"dim must be a positive power of two, got {dim}")
        self.dim = d

    def get_sentence_embedding_dimension(self) -> int:
        return self.dim

    def embed(self, text: Optional[str]) -> np.ndarray:
        return embed(text, self.dim)

    def encode(self, texts: Sequence[str]) -> np.ndarray:
        if isinstance(texts, str):
            texts = [texts]
        if not texts:
            return np.zeros((0, self.dim), dtype=np.float32)
        return np.stack([embed(t, self.dim) for t in texts], axis=0)
