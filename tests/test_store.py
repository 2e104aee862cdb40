"""
State Store Tests
=================

Load-or-fallback reads, truncating atomic writes, swallowed failures.
"""

import json
import logging
import os

import numpy as np
import pytest

from resonance_gate import (
    GateOpts, GateState, StateStore, StateStoreError, embed, update_centroid, default_centroid,
)
import resonance_gate.store as store_mod


@pytest.fixture
def state_path(tmp_path):
    return str(tmp_path / "manifold_state.json")


@pytest.fixture
def warm_state():
    c = update_centroid(default_centroid(), embed("warm start"), 0.3)
    return GateState(c, [0.1 * i for i in range(10)])


def _assert_default(st):
    np.testing.assert_allclose(st.centroid, np.full(128, 0.1, dtype=np.float32))
    assert st.history == []


class TestLoadFallback:
    """Missing or broken files load as the cold-start state, never raising."""

    def test_missing_file(self, state_path):
        _assert_default(StateStore(state_path).load())

    def test_not_json(self, state_path, caplog):
        with open(state_path, "w", encoding="utf-8") as f:
            f.write("{not json")
        with caplog.at_level(logging.WARNING, logger="resonance_gate"):
            st = StateStore(state_path).load()
        _assert_default(st)
        assert "Failed to load gate state" in caplog.text

    def test_path_is_directory(self, tmp_path):
        store = StateStore(str(tmp_path))
        _assert_default(store.load())
        assert isinstance(store.last_error, StateStoreError)

    @pytest.mark.parametrize("doc", [
        [1, 2, 3],
        {"history": [0.1]},
        {"centroid": "abc"},
        {"centroid": [0.1, "x"]},
        {"centroid": [0.0] * 128},
        {"centroid": [True] * 128},
        {"centroid": [10 ** 400] + [0.1] * 127},
        {"centroid": [1e39] * 128},
        {"centroid": [0.1] * 128, "history": [10 ** 400]},
        {"centroid": [0.1] * 128, "history": "nope"},
        {"centroid": [0.1] * 128, "history": [0.2, "bad"]},
    ])
    def test_structurally_invalid(self, state_path, doc):
        with open(state_path, "w", encoding="utf-8") as f:
            json.dump(doc, f)
        _assert_default(StateStore(state_path).load())

    def test_non_finite_rejected(self, state_path):
        with open(state_path, "w", encoding="utf-8") as f:
            f.write('{"centroid": [NaN, 1.0], "history": []}')
        _assert_default(StateStore(state_path).load())

    def test_deeply_nested_document(self, state_path):
        with open(state_path, "w", encoding="utf-8") as f:
            f.write("[" * 200000 + "]" * 200000)
        store = StateStore(state_path)
        _assert_default(store.load())
        assert isinstance(store.last_error, StateStoreError)

    def test_float32_overflow_centroid_rejected(self, state_path):
        with open(state_path, "w", encoding="utf-8") as f:
            json.dump({"centroid": [1e39] * 128, "history": []}, f)
        st = StateStore(state_path).load()
        _assert_default(st)
        assert np.isfinite(st.centroid).all()


class TestLoadLenient:
    """Recoverable shapes are read rather than discarded."""

    def test_history_optional(self, state_path):
        with open(state_path, "w", encoding="utf-8") as f:
            json.dump({"centroid": [0.2] * 128}, f)
        st = StateStore(state_path).load()
        np.testing.assert_allclose(st.centroid, 0.2)
        assert st.history == []

    def test_short_centroid_zero_padded(self, state_path):
        with open(state_path, "w", encoding="utf-8") as f:
            json.dump({"centroid": [1.0, 0.5], "history": [0.3]}, f)
        st = StateStore(state_path).load()
        assert st.centroid.shape == (128,)
        assert st.centroid[0] == 1.0 and st.centroid[1] == 0.5
        assert not np.any(st.centroid[2:])
        assert st.history == [0.3]

    def test_long_history_truncated_on_load(self, state_path):
        with open(state_path, "w", encoding="utf-8") as f:
            json.dump({"centroid": [0.1] * 128, "history": list(range(300))}, f)
        st = StateStore(state_path).load()
        assert st.history == [float(v) for v in range(44, 300)]

    def test_extra_fields_ignored(self, state_path):
        with open(state_path, "w", encoding="utf-8") as f:
            json.dump({"centroid": [0.1] * 128, "history": [0.5], "version": 2}, f)
        assert StateStore(state_path).load().history == [0.5]


class TestSave:
    """Round-trip and write semantics."""

    def test_round_trip(self, state_path, warm_state):
        store = StateStore(state_path)
        assert store.save(warm_state) is True
        st = store.load()
        np.testing.assert_allclose(st.centroid, warm_state.centroid, atol=1e-7)
        assert st.history == pytest.approx(warm_state.history)

    def test_history_truncated_to_window(self, state_path, warm_state):
        warm_state.history = [float(i) for i in range(300)]
        store = StateStore(state_path)
        store.save(warm_state)
        with open(state_path, "r", encoding="utf-8") as f:
            doc = json.load(f)
        assert set(doc) == {"centroid", "history"}
        assert len(doc["centroid"]) == 128
        assert doc["history"] == [float(i) for i in range(44, 300)]
        assert store.load().history == [float(i) for i in range(44, 300)]

    def test_custom_window(self, state_path, warm_state):
        store = StateStore(state_path, GateOpts(history_window=3))
        store.save(warm_state)
        assert store.load().history == pytest.approx([0.7, 0.8, 0.9])

    def test_save_does_not_touch_state(self, state_path, warm_state):
        warm_state.history = [float(i) for i in range(300)]
        StateStore(state_path).save(warm_state)
        assert len(warm_state.history) == 300

    def test_creates_parent_dirs(self, tmp_path, warm_state):
        path = tmp_path / "a" / "b" / "state.json"
        assert StateStore(str(path)).save(warm_state)
        assert path.exists()

    def test_no_temp_files_left(self, tmp_path, warm_state):
        store = StateStore(str(tmp_path / "s.json"))
        store.save(warm_state)
        store.save(warm_state)
        assert sorted(os.listdir(tmp_path)) == ["s.json"]

    def test_failed_replace_keeps_previous_file(self, state_path, warm_state, monkeypatch, caplog):
        store = StateStore(state_path)
        store.save(GateState(default_centroid(), [0.25]))
        with open(state_path, "r", encoding="utf-8") as f:
            before = f.read()

        def boom(src, dst):
            raise OSError("disk full")
        monkeypatch.setattr(store_mod.os, "replace", boom)
        with caplog.at_level(logging.WARNING, logger="resonance_gate"):
            ok = store.save(warm_state)
        monkeypatch.undo()

        assert ok is False
        assert isinstance(store.last_error, StateStoreError)
        assert "save failed" in caplog.text
        with open(state_path, "r", encoding="utf-8") as f:
            assert f.read() == before
        assert os.listdir(os.path.dirname(state_path)) == ["manifold_state.json"]

    def test_unwritable_target(self, tmp_path, warm_state):
        store = StateStore(str(tmp_path))
        assert store.save(warm_state) is False

    def test_non_finite_state_not_written(self, state_path, warm_state):
        store = StateStore(state_path)
        store.save(warm_state)
        with open(state_path, "r", encoding="utf-8") as f:
            before = f.read()
        bad = GateState(np.full(128, np.nan, dtype=np.float32), [0.5])
        assert store.save(bad) is False
        with open(state_path, "r", encoding="utf-8") as f:
            assert f.read() == before

    def test_success_clears_last_error(self, state_path, warm_state):
        store = StateStore(state_path)
        store.last_error = StateStoreError("old")
        assert store.save(warm_state)
        assert store.last_error is None


class TestClear:

    def test_clear_removes_file(self, state_path, warm_state):
        store = StateStore(state_path)
        store.save(warm_state)
        assert store.clear()
        assert not os.path.exists(state_path)
        _assert_default(store.load())

    def test_clear_missing_is_ok(self, state_path):
        assert StateStore(state_path).clear()
