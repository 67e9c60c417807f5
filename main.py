from __future__ import annotations

import argparse
import json
import logging
import math
import sys
from pathlib import Path
from typing import Any, Dict, List

from cafe import CafeSim

logger = logging.getLogger(__name__)


def load_decisions(path: Path) -> List[Dict[str, Any]]:
    """Read a scripted decision schedule: a JSON list of ``{"at": t, "thought": ..., "actions": [...]}``."""
    raw = json.loads(path.read_text())
    if not isinstance(raw, list):
        raise ValueError(f"{path} must contain a JSON list of decisions")

    decisions: List[Dict[str, Any]] = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        at = entry.get("at", 0.0)
        if isinstance(at, bool) or not isinstance(at, (int, float)) or not math.isfinite(at):
            continue
        decisions.append({**entry, "at": float(at)})
    decisions.sort(key=lambda d: d["at"])
    return decisions


def run_headless(ticks: int, dt: float, seed: int, decisions: List[Dict[str, Any]] | None = None) -> CafeSim:
    sim = CafeSim(seed=seed)
    pending = list(decisions or [])

    for _ in range(ticks):
        while pending and pending[0]["at"] <= sim.time:
            decision = pending.pop(0)
            applied = sim.apply_decision(decision)
            logger.debug("Decision at t=%.1f applied %d action(s)", sim.time, applied)
        sim.update(dt)

    return sim


def format_summary(sim: CafeSim) -> str:
    stats = sim.stats()
    return (
        f"headless_done t={sim.time:.1f} day={stats['day']} "
        f"customers={stats['active_customers']} queue={stats['queue_length']} "
        f"kpi[rating={stats['rating']:.1f},wait={stats['avg_wait_time']:.1f},served={stats['customers_served']}]"
        f" economy[funds=${stats['funds']:.2f},revenue=${stats['revenue']:.2f},tips=${stats['tips']:.2f},"
        f"margin={stats['profit_margin']:.1f}%,walkouts={stats['walkouts']}]"
        f" staff={stats['baristas_count']}"
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Café floor simulator")
    parser.add_argument("--ticks", type=int, default=1800, help="frames to simulate")
    parser.add_argument("--dt", type=float, default=0.1, help="seconds per frame (clamped by the engine)")
    parser.add_argument("--seed", type=int, default=7, help="random seed")
    parser.add_argument("--decisions", type=Path, help="JSON file of scripted external decisions")
    parser.add_argument("--json", action="store_true", help="print the final state snapshot as JSON")
    parser.add_argument("--verbose", action="store_true", help="debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s:%(name)s:%(message)s",
    )

    decisions: List[Dict[str, Any]] = []
    if args.decisions is not None:
        try:
            decisions = load_decisions(args.decisions)
        except (OSError, ValueError) as exc:
            print(f"Startup error: {exc}", file=sys.stderr)
            raise SystemExit(1) from exc

    sim = run_headless(args.ticks, args.dt, args.seed, decisions)
    if args.json:
        print(json.dumps(sim.to_dict(), indent=2))
        return
    print(format_summary(sim))
    for thought in sim.thoughts()[:5]:
        print(f"  [{thought['type']}] {thought['text']}")


if __name__ == "__main__":
    main()
