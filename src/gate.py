from __future__ import annotations
import threading
from typing import List, Optional, Tuple
from .centroid import update_centroid
from .embedder import HashEmbedder
from .gopts import GateOpts
from .policy import GatePolicy
from .similarity import resonance, coherence, stability
from .state import GateDecision, GateState
from .store import StateStore
from .utils import logger, DummyLock

def evaluate_state(state: GateState, text: Optional[str], x: GateOpts,
                   embedder: Optional[HashEmbedder] = None,
                   policy: Optional[GatePolicy] = None) -> Tuple[GateDecision, GateState]:
    """Score ``text`` against ``state`` and return the decision plus the next state.

    Pure: ``state`` is left untouched and nothing is written to disk. The
    returned history includes this call's resonance and stability is
    measured over that extended history.
    """
    emb_model = embedder if embedder is not None else HashEmbedder(x.dim)
    pol = policy if policy is not None else GatePolicy.from_opts(x)

    e = emb_model.embed(text)
    r = resonance(e, state.centroid)
    k = coherence(e)
    history = list(state.history)
    history.append(r)
    dI = stability(history)
    short = pol.decide(r, k)

    # drift runs on every call, short-circuited or not
    centroid = update_centroid(state.centroid, e, x.learning_rate)
    return GateDecision(r, k, dI, short), GateState(centroid, history)


class ResonanceGate:
    """Stateful shell around :func:`evaluate_state`.

    Owns the centroid/history and optionally a :class:`StateStore`. Every
    public method holds the gate lock, so evaluate-then-persist runs as one
    unit with respect to other threads.
    """
    def __init__(self, x: Optional[GateOpts] = None, store: Optional[StateStore] = None,
                 *, threadsafe: bool = True):
        self.x = (x if x is not None else GateOpts()).validate()
        if store is None and self.x.state_path:
            store = StateStore(self.x.state_path, self.x)
        self.store = store
        self.embedder = HashEmbedder(self.x.dim)
        self.policy = GatePolicy.from_opts(self.x)
        self._lock = threading.RLock() if threadsafe else DummyLock()
        with self._lock:
            self._state = self.store.load() if self.store is not None else GateState.initial(self.x)

    def evaluate(self, text: Optional[str]) -> GateDecision:
        with self._lock:
            decision, self._state = evaluate_state(self._state, text, self.x,
                                                   self.embedder, self.policy)
            if self.x.autosave:
                self.persist()
        logger.debug(
            "Gate resonance=%.6f coherence=%.6f deltaI=%.6f shortCircuit=%s",
            decision.resonance, decision.coherence, decision.stability, decision.short_circuit,
        )
        return decision

    def persist(self) -> bool:
        if self.store is None:
            return False
        with self._lock:
            return self.store.save(self._state)

    def history(self) -> List[float]:
        with self._lock:
            return list(self._state.history)

    def state(self) -> GateState:
        with self._lock:
            return self._state.copy()

    def reset(self) -> None:
        with self._lock:
            self._state = GateState.initial(self.x)
