from __future__ import annotations
from dataclasses import dataclass
from .gopts import GateOpts, DEFAULT_RESONANCE_THRESHOLD, DEFAULT_COHERENCE_THRESHOLD

@dataclass(frozen=True)
class GatePolicy:
    """Short-circuit when both scores strictly exceed their thresholds."""
    resonance_threshold: float = DEFAULT_RESONANCE_THRESHOLD
    coherence_threshold: float = DEFAULT_COHERENCE_THRESHOLD

    @classmethod
    def from_opts(cls, x: GateOpts) -> "GatePolicy":
        return cls(float(x.resonance_threshold), float(x.coherence_threshold))

    def decide(self, resonance: float, coherence: float) -> bool:
        return resonance > self.resonance_threshold and coherence > self.coherence_threshold
