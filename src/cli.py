from __future__ import annotations
import argparse
import json
import logging
import sys
from typing import Iterable, Iterator, Optional, TextIO
from .gate import ResonanceGate
from .gopts import GateOpts
from .store import StateStore
from .utils import logger


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="resonance-gate",
        description="Score messages against the resonance gate and print its decision",
    )
    parser.add_argument(
        "texts",
        nargs="*",
        help="Messages to evaluate in order (default: one per stdin line)",
    )
    parser.add_argument(
        "--state",
        type=str,
        help="JSON state file carrying the centroid and resonance history",
    )
    parser.add_argument(
        "--lr",
        type=float,
        help="Centroid learning rate",
    )
    parser.add_argument(
        "--resonance-threshold",
        type=float,
        help="Resonance needed to short-circuit",
    )
    parser.add_argument(
        "--coherence-threshold",
        type=float,
        help="Coherence needed to short-circuit",
    )
    parser.add_argument(
        "--no-save",
        action="store_true",
        help="Do not write the state file after evaluating",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Discard persisted state before evaluating",
    )
    parser.add_argument(
        "--history",
        action="store_true",
        help="Print the resonance history as a JSON array at the end",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log per-evaluation metrics",
    )
    return parser


def _inputs(texts: Iterable[str], stream: TextIO) -> Iterator[str]:
    texts = list(texts)
    if texts:
        yield from texts
        return
    for line in stream:
        yield line.rstrip("\n")


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    if args.verbose:
        logger.setLevel(logging.DEBUG)

    overrides = {}
    if args.state:
        overrides["state_path"] = args.state
    if args.lr is not None:
        overrides["learning_rate"] = args.lr
    if args.resonance_threshold is not None:
        overrides["resonance_threshold"] = args.resonance_threshold
    if args.coherence_threshold is not None:
        overrides["coherence_threshold"] = args.coherence_threshold
    if args.no_save:
        overrides["autosave"] = False
    try:
        x = GateOpts.from_env(**overrides)
    except ValueError as exc:
        parser.error(str(exc))

    store = StateStore(x.state_path, x) if x.state_path else None
    if args.reset:
        if store is None:
            parser.error("--reset needs --state or RESONANCE_GATE_STATE_PATH")
        store.clear()
    gate = ResonanceGate(x, store)

    for text in _inputs(args.texts, sys.stdin):
        print(json.dumps(gate.evaluate(text).as_dict()))
    if args.history:
        print(json.dumps(gate.history()))
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
