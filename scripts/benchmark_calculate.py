#!/usr/bin/env python3
"""Benchmark catalog indicators as history grows.

Two modes:
  - catalog: ``calculate(kind, bars)`` over the full history
  - step: seed a state machine from history, then time one ``*_update_raw``
    step per new bar (true streaming cost; should stay flat)
"""
from __future__ import annotations

import argparse
import copy
import os
import sys
from time import perf_counter
from typing import List

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import numpy as np
import pandas as pd
import pandas_ta_pine as ta
from pandas_ta_pine.stateful import STATEFUL_REGISTRY


def make_ohlcv(rows: int, seed: int) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    idx = pd.date_range("2025-01-01", periods=rows, freq="1min")
    base = 100 + rng.standard_normal(rows).cumsum()
    close = base + rng.normal(0, 0.2, rows)
    open_ = base + rng.normal(0, 0.2, rows)
    high = np.maximum(open_, close) + rng.random(rows) * 0.5
    low = np.minimum(open_, close) - rng.random(rows) * 0.5
    volume = rng.integers(100, 1000, rows)
    df = pd.DataFrame(
        {
            "open": open_,
            "high": high,
            "low": low,
            "close": close,
            "volume": volume,
        },
        index=idx,
    )
    df["timestamp"] = (df.index - pd.Timestamp("1970-01-01")) // pd.Timedelta(seconds=1)
    return df


def parse_list(value: str) -> List[int]:
    return [int(v.strip()) for v in value.split(",") if v.strip()]


def parse_kinds(value: str | None, available: List[str]) -> List[str]:
    if not value:
        return available
    kinds = [v.strip() for v in value.split(",") if v.strip()]
    unknown = [k for k in kinds if k not in available]
    if unknown:
        raise SystemExit(f"[X] unknown kinds: {', '.join(unknown)}")
    return kinds


def time_call(fn, runs: int) -> float:
    times = []
    for _ in range(max(runs, 1)):
        start = perf_counter()
        fn()
        times.append(perf_counter() - start)
    return sum(times) / len(times)


def bench_catalog(df: pd.DataFrame, kinds: List[str], runs: int, warmup: int) -> None:
    for kind in kinds:
        for _ in range(max(warmup, 0)):
            ta.calculate(kind, df)
        avg = time_call(lambda: ta.calculate(kind, df), runs)
        print(f"[catalog] rows={len(df)} kind={kind} avg_s={avg:.6f}")


def bench_step(df: pd.DataFrame, tail: int, runs: int) -> None:
    frame = ta.to_frame(df)
    split = len(frame) - tail
    for kind in ta.stateful_supported_kinds():
        indicator = STATEFUL_REGISTRY[kind]
        if any(name not in ta.SOURCES for name in indicator.inputs):
            continue
        cols = [ta.source(frame, name).to_numpy() for name in indicator.inputs]
        state = indicator.init({})
        for i in range(split):
            _, state = indicator.update(state, {n: c[i] for n, c in zip(indicator.inputs, cols)}, {})

        def run_tail():
            s = copy.deepcopy(state)
            for i in range(split, len(frame)):
                _, s = indicator.update(s, {n: c[i] for n, c in zip(indicator.inputs, cols)}, {})

        avg = time_call(run_tail, runs)
        print(f"[step] rows={len(frame)} kind={kind} s_per_bar={avg / max(tail, 1):.8f}")


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument(
        "--sizes",
        type=str,
        default="1000,5000,20000",
        help="comma-separated total row counts",
    )
    ap.add_argument("--tail", type=int, default=10, help="new rows per streaming update")
    ap.add_argument("--seed", type=int, default=7)
    ap.add_argument("--kinds", type=str, default="", help="comma-separated catalog kinds")
    ap.add_argument("--warmup", type=int, default=1, help="warmup runs (not timed)")
    ap.add_argument("--runs", type=int, default=3, help="timed runs")
    ap.add_argument(
        "--mode",
        type=str,
        default="both",
        choices=("catalog", "step", "both"),
        help="benchmark mode",
    )
    args = ap.parse_args()

    sizes = parse_list(args.sizes)
    kinds = parse_kinds(args.kinds, ta.indicator_kinds())

    print(f"[i] sizes: {sizes}")
    print(f"[i] tail: {args.tail}")
    print(f"[i] runs: {args.runs} (warmup: {args.warmup})")
    print(f"[i] mode: {args.mode}")

    for rows in sizes:
        if rows <= args.tail + 1:
            print(f"[i] skip rows={rows} (need > tail+1)")
            continue
        df = make_ohlcv(rows, args.seed)
        if args.mode in ("catalog", "both"):
            bench_catalog(df, kinds, args.runs, args.warmup)
        if args.mode in ("step", "both"):
            bench_step(df, args.tail, args.runs)


if __name__ == "__main__":
    main()
