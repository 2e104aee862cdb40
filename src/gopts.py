from __future__ import annotations
import os
from dataclasses import dataclass, fields
from typing import Optional

DEFAULT_DIM = 128
DEFAULT_LEARNING_RATE = 0.02
DEFAULT_RESONANCE_THRESHOLD = 0.85
DEFAULT_COHERENCE_THRESHOLD = 0.50
DEFAULT_HISTORY_WINDOW = 256
DEFAULT_INIT_FILL = 0.1

NORM_EPS = 1e-8        # embedder / centroid renorm divisor floor
COSINE_EPS = 1e-9      # additive term in the resonance denominator

@dataclass
class GateOpts:
    # ---- Embedding ----
    dim: int = DEFAULT_DIM                  # power of two, bucket mask = dim - 1

    # ---- Centroid drift ----
    learning_rate: float = DEFAULT_LEARNING_RATE
    init_fill: float = DEFAULT_INIT_FILL    # cold-start centroid value, stored raw

    # ---- Short-circuit policy ----
    resonance_threshold: float = DEFAULT_RESONANCE_THRESHOLD
    coherence_threshold: float = DEFAULT_COHERENCE_THRESHOLD

    # ---- Persistence ----
    history_window: int = DEFAULT_HISTORY_WINDOW
    state_path: Optional[str] = None        # None -> in-memory only
    autosave: bool = True

    def validate(self) -> "GateOpts":
        d = int(self.dim)
        if d <= 0 or (d & (d - 1)) != 0:
            raise ValueError(f"dim must be a positive power of two, got {self.dim}")
        if not (0.0 <= float(self.learning_rate) <= 1.0):
            raise ValueError(f"learning_rate must be in [0, 1], got {self.learning_rate}")
        if int(self.history_window) < 1:
            raise ValueError(f"history_window must be >= 1, got {self.history_window}")
        return self

    @classmethod
    def from_env(cls, prefix: str = "RESONANCE_GATE_", **overrides) -> "GateOpts":
        """Build options from ``<prefix><FIELD>`` environment variables.

        Explicit keyword overrides win over the environment.
        """
        kwargs = {}
        for f in fields(cls):
            raw = os.environ.get(prefix + f.name.upper())
            if raw is None or raw == "":
                continue
            kwargs[f.name] = _parse_field(f.name, raw)
        kwargs.update(overrides)
        return cls(**kwargs).validate()


def _parse_field(name: str, raw: str):
    kind = {
        "dim": int, "history_window": int,
        "learning_rate": float, "init_fill": float,
        "resonance_threshold": float, "coherence_threshold": float,
    }.get(name)
    if name == "autosave":
        v = raw.strip().lower()
        if v in ("1", "true", "yes", "on"): return True
        if v in ("0", "false", "no", "off"): return False
        raise ValueError(f"autosave: cannot parse {raw!r} as a boolean")
    if name == "state_path":
        return os.path.expanduser(raw)
    try:
        return kind(raw)
    except ValueError as exc:
        raise ValueError(f"{name}: cannot parse {raw!r}") from exc
