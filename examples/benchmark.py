#!/usr/bin/env python3
"""MouseGestures Benchmark: per-event latency and stroke throughput.

Drives the engine with synthetic pointer strokes. No browser required.

Usage:
    python examples/benchmark.py
    python examples/benchmark.py --iterations 5000 --step 1
"""

from __future__ import annotations

import argparse
import gc
import os
import sys
import time
from pathlib import Path

import numpy as np

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from mouse_gestures.directions import DirectionClassifier
from mouse_gestures.engine import GestureEngine, PointerEvent, recognize
from mouse_gestures.trail import TrailScheduler


def generate_strokes(n: int, step: float, rng: np.random.Generator) -> list[np.ndarray]:
    """Random polylines of 1-4 legs, sampled every ``step`` px."""
    strokes = []
    for _ in range(n):
        legs = rng.integers(1, 5)
        waypoints = np.cumsum(rng.normal(0, 60, size=(legs + 1, 2)), axis=0)
        waypoints[0] = 0
        pts = [waypoints[0]]
        for a, b in zip(waypoints, waypoints[1:]):
            count = max(1, int(np.linalg.norm(b - a) / step))
            t = np.linspace(0, 1, count + 1)[1:, None]
            pts.extend(a + (b - a) * t)
        strokes.append(np.array(pts))
    return strokes


def summarize(times: list[float]) -> dict:
    times_us = np.array(times) * 1e6
    return {
        "mean_us": float(np.mean(times_us)),
        "p95_us": float(np.percentile(times_us, 95)),
        "p99_us": float(np.percentile(times_us, 99)),
        "max_us": float(np.max(times_us)),
        "per_sec": 1e6 / float(np.mean(times_us)),
    }


def benchmark_classifier(n: int, rng: np.random.Generator) -> dict:
    clf = DirectionClassifier()
    vectors = rng.normal(0, 30, size=(n, 2))
    gc.collect()
    times = []
    for dx, dy in vectors:
        t0 = time.perf_counter()
        clf(dx, dy)
        times.append(time.perf_counter() - t0)
    return summarize(times)


def benchmark_moves(strokes: list[np.ndarray]) -> tuple[dict, int]:
    """Latency of pointer_move, the hot path while a gesture is live."""
    trail = TrailScheduler()
    engine = GestureEngine(page_url="https://example.com/", trail=trail)
    emitted = 0
    times = []
    gc.collect()
    for stroke in strokes:
        engine.pointer_down(PointerEvent(2, *stroke[0], timestamp=0.0))
        for i, (x, y) in enumerate(stroke[1:], start=1):
            t0 = time.perf_counter()
            engine.pointer_move(PointerEvent(2, x, y, timestamp=i * 0.004))
            times.append(time.perf_counter() - t0)
            if i % 4 == 0:
                trail.flush()  # ~60 Hz paint against 250 Hz input
        if engine.pointer_up(PointerEvent(2, *stroke[-1])) is not None:
            emitted += 1
        trail.flush()
    return summarize(times), emitted


def benchmark_recognize(strokes: list[np.ndarray]) -> dict:
    gc.collect()
    times = []
    for stroke in strokes:
        t0 = time.perf_counter()
        recognize(stroke)
        times.append(time.perf_counter() - t0)
    return summarize(times)


def print_table(title: str, rows: list[tuple[str, str]]):
    max_key = max(len(r[0]) for r in rows)
    max_val = max(len(r[1]) for r in rows)
    width = max_key + max_val + 7

    print()
    print(f"  ╭{'─' * width}╮")
    print(f"  │ {title:<{width-2}} │")
    print(f"  ├{'─' * width}┤")
    for key, val in rows:
        print(f"  │ {key:<{max_key}}   {val:>{max_val}} │")
    print(f"  ╰{'─' * width}╯")


def latency_rows(results: dict, unit: str) -> list[tuple[str, str]]:
    return [
        ("Mean latency", f"{results['mean_us']:.2f} us"),
        ("P95 latency", f"{results['p95_us']:.2f} us"),
        ("P99 latency", f"{results['p99_us']:.2f} us"),
        ("Max latency", f"{results['max_us']:.2f} us"),
        ("Throughput", f"{results['per_sec']:.0f} {unit}/sec"),
    ]


def main():
    parser = argparse.ArgumentParser(description="MouseGestures Benchmark")
    parser.add_argument("-n", "--iterations", type=int, default=2000, help="Number of strokes")
    parser.add_argument("--step", type=float, default=2.0, help="Pixels between move events")
    parser.add_argument("--seed", type=int, default=0)
    args = parser.parse_args()

    rng = np.random.default_rng(args.seed)
    print(f"\n  Generating {args.iterations} synthetic strokes...")
    strokes = generate_strokes(args.iterations, args.step, rng)
    total_moves = sum(len(s) - 1 for s in strokes)

    print("  Running direction classification benchmark...")
    clf_results = benchmark_classifier(args.iterations * 10, rng)

    print("  Running pointer_move benchmark...")
    move_results, emitted = benchmark_moves(strokes)

    print("  Running batch recognition benchmark...")
    rec_results = benchmark_recognize(strokes)

    print_table("Direction Classification", latency_rows(clf_results, "vectors"))
    print_table("pointer_move (engine + trail)", latency_rows(move_results, "events"))
    print_table("recognize() per stroke", latency_rows(rec_results, "strokes"))
    print_table("System", [
        ("Strokes", f"{len(strokes):,}"),
        ("Move events", f"{total_moves:,}"),
        ("Actions emitted", f"{emitted:,}"),
        ("Platform", f"{sys.platform} / {os.uname().machine}"),
        ("Python", f"{sys.version.split()[0]}"),
        ("NumPy", f"{np.__version__}"),
    ])
    print()


if __name__ == "__main__":
    main()
