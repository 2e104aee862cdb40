from __future__ import annotations
import json
import math
import os
import tempfile
from typing import Any, List, Optional
import numpy as np
from .gopts import GateOpts
from .state import GateState
from .utils import logger

class StateStoreError(Exception):
    """Raised internally for unreadable, invalid or unwritable state files."""

def _numbers(value: Any, key: str) -> List[float]:
    if not isinstance(value, list):
        raise StateStoreError(f"'{key}' must be a list, got {type(value).__name__}")
    out: List[float] = []
    for i, v in enumerate(value):
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise StateStoreError(f"'{key}'[{i}] is not a number: {v!r}")
        try:
            f = float(v)
        except OverflowError as e:
            raise StateStoreError(f"'{key}'[{i}] does not fit a float") from e
        if not math.isfinite(f):
            raise StateStoreError(f"'{key}'[{i}] is not finite")
        out.append(f)
    return out

def _fit_vec(values: List[float], dim: int) -> np.ndarray:
    out = np.zeros(dim, dtype=np.float32)
    n = min(dim, len(values))
    if n:
        with np.errstate(over="ignore"):
            out[:n] = np.asarray(values[:n], dtype=np.float32)
    return out


class StateStore:
    """JSON persistence for the gate centroid and recent resonance history.

    Layout: ``{"centroid": [dim floats], "history": [<= window floats, oldest first]}``.
    Reads fall back to a cold-start state; writes go through a temp file and
    ``os.replace`` so an interrupted save never clobbers the previous file.
    Neither ``load`` nor ``save`` raises.
    """
    def __init__(self, path: str, x: Optional[GateOpts] = None):
        self.path = os.path.abspath(os.path.expanduser(str(path)))
        self.x = x if x is not None else GateOpts()
        self.last_error: Optional[StateStoreError] = None

    # ---------- read ----------
    def _parse(self, data: Any) -> GateState:
        if not isinstance(data, dict):
            raise StateStoreError("state document must be a JSON object")
        if "centroid" not in data:
            raise StateStoreError("missing 'centroid'")
        dim = int(self.x.dim)
        raw = _numbers(data["centroid"], "centroid")
        if len(raw) != dim:
            logger.info("State centroid has %d values, fitting to dim=%d", len(raw), dim)
        centroid = _fit_vec(raw, dim)
        if not np.isfinite(centroid).all():
            raise StateStoreError("centroid overflows float32")
        if float(np.linalg.norm(centroid.astype(np.float64))) <= 0.0:
            raise StateStoreError("centroid has zero norm")
        hist = data.get("history")
        history = [] if hist is None else _numbers(hist, "history")
        w = int(self.x.history_window)
        if len(history) > w:
            history = history[-w:]
        return GateState(centroid, history)

    def load(self) -> GateState:
        if not os.path.exists(self.path):
            logger.info(f"No gate state at {self.path}; starting from default centroid")
            return GateState.initial(self.x)
        try:
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    data = json.load(f)
            except (OSError, ValueError, RecursionError) as e:
                raise StateStoreError(f"cannot read {self.path}: {e}") from e
            st = self._parse(data)
        except StateStoreError as e:
            self.last_error = e
            logger.warning(f"Failed to load gate state; resetting. ({e})")
            return GateState.initial(self.x)
        logger.info(f"Loaded gate state: {self.path} (history={len(st.history)})")
        return st

    # ---------- write ----------
    def _write(self, state: GateState) -> None:
        payload = state.to_json(int(self.x.history_window))
        parent = os.path.dirname(self.path)
        tmp = None
        try:
            os.makedirs(parent, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=".gate-", suffix=".tmp", dir=parent)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False, allow_nan=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
            tmp = None
        except (OSError, TypeError, ValueError) as e:
            raise StateStoreError(f"cannot write {self.path}: {e}") from e
        finally:
            if tmp is not None:
                try:
                    os.unlink(tmp)
                except OSError:
                    pass

    def save(self, state: GateState) -> bool:
        try:
            self._write(state)
        except StateStoreError as e:
            self.last_error = e
            logger.warning(f"Gate state save failed: {e}")
            return False
        self.last_error = None
        return True

    def clear(self) -> bool:
        try:
            os.remove(self.path)
        except FileNotFoundError:
            return True
        except OSError as e:
            self.last_error = StateStoreError(f"cannot remove {self.path}: {e}")
            logger.warning(f"Gate state clear failed: {e}")
            return False
        return True
