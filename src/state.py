from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List
import numpy as np
from .centroid import default_centroid
from .gopts import GateOpts

@dataclass
class GateState:
    """Centroid plus chronological resonance history owned by one gate."""
    centroid: np.ndarray
    history: List[float] = field(default_factory=list)

    @classmethod
    def initial(cls, x: GateOpts) -> "GateState":
        return cls(default_centroid(x.dim, x.init_fill), [])

    def copy(self) -> "GateState":
        return GateState(np.array(self.centroid, dtype=np.float32, copy=True), list(self.history))

    def truncated(self, window: int) -> "GateState":
        w = max(0, int(window))
        return GateState(np.array(self.centroid, dtype=np.float32, copy=True),
                         list(self.history[-w:]) if w else [])

    def to_json(self, window: int) -> Dict[str, Any]:
        t = self.truncated(window)
        return {"centroid": [float(v) for v in t.centroid.tolist()],
                "history": [float(v) for v in t.history]}

@dataclass(frozen=True)
class GateDecision:
    resonance: float
    coherence: float
    stability: float
    short_circuit: bool

    def as_dict(self) -> Dict[str, Any]:
        return {"resonance": self.resonance, "coherence": self.coherence,
                "stability": self.stability, "shortCircuit": self.short_circuit}
