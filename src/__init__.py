
"""
resonance_gate: local pre-inference gate for chat runtimes

Modules:
 - gopts:      GateOpts dataclass + named default constants
 - utils:      Shared helpers (logger, eps-guarded normalize, DummyLock)
 - embedder:   Hashed byte 3-gram embedding (embed, mix, HashEmbedder)
 - similarity: resonance / coherence / stability (delta-I)
 - centroid:   Cold-start centroid and EMA drift update
 - policy:     GatePolicy short-circuit thresholds
 - state:      GateState / GateDecision records
 - store:      StateStore (JSON, atomic replace, fallback on corruption)
 - gate:       evaluate_state (pure core) and ResonanceGate (locked shell)
 - cli:        resonance-gate command

Usage:
    from resonance_gate import ResonanceGate, GateOpts
    gate = ResonanceGate(GateOpts(state_path="manifold_state.json"))
    d = gate.evaluate("hello there")
    if d.short_circuit:
        ...  # answer from cache, skip inference
"""
from .gopts import GateOpts
from .embedder import embed, HashEmbedder
from .similarity import resonance, coherence, stability
from .centroid import default_centroid, update_centroid
from .policy import GatePolicy
from .state import GateState, GateDecision
from .store import StateStore, StateStoreError
from .gate import ResonanceGate, evaluate_state
__all__ = [
    "GateOpts", "embed", "HashEmbedder", "resonance", "coherence", "stability",
    "default_centroid", "update_centroid", "GatePolicy", "GateState", "GateDecision",
    "StateStore", "StateStoreError", "ResonanceGate", "evaluate_state",
]
