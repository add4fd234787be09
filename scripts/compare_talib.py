#!/usr/bin/env python3
"""Compare TA-Lib vectorized outputs vs pandas_ta_pine streaming outputs.

Recursive averages are seeded differently (TA-Lib seeds EMA with an SMA),
so only the tail rows are compared, after the seeds have decayed.
"""
from __future__ import annotations

import argparse
from typing import Callable, Dict, Tuple

import numpy as np
import pandas as pd
import pandas_ta_pine as ta
from pandas_ta_pine.maps import Imports


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


def pairs(df: pd.DataFrame, length: int) -> Dict[str, Tuple[Callable, Callable]]:
    import talib

    close, high, low = df["close"], df["high"], df["low"]
    volume = df["volume"].astype(float)
    hlc3 = (high + low + close) / 3.0
    return {
        "sma": (lambda: talib.SMA(close, length), lambda: ta.sma(close, length)),
        "ema": (lambda: talib.EMA(close, length), lambda: ta.ema(close, length)),
        "wma": (lambda: talib.WMA(close, length), lambda: ta.wma(close, length)),
        "stdev": (lambda: talib.STDDEV(close, length, 1), lambda: ta.stdev(close, length)),
        "rsi": (lambda: talib.RSI(close, length), lambda: ta.rsi(close, length)),
        "atr": (lambda: talib.ATR(high, low, close, length), lambda: ta.atr(df, length)),
        "mfi": (lambda: talib.MFI(high, low, close, volume, length),
                lambda: ta.mfi(hlc3, volume, length)),
        "linreg": (lambda: talib.LINEARREG(close, length), lambda: ta.linreg(close, length)),
        "correl": (lambda: talib.CORREL(high, low, length), lambda: ta.correlation(high, low, length)),
    }


def compare(ref: pd.Series, test: pd.Series, eps: float) -> Dict[str, float]:
    ref = pd.Series(np.asarray(ref, dtype=float))
    test = pd.Series(np.asarray(test, dtype=float))
    diff = (test - ref).abs()
    return {
        "nan_ref": int(ref.isna().sum()),
        "nan_test": int(test.isna().sum()),
        "max_abs": float(diff.max()),
        "mean_abs": float(diff.mean()),
        "mean_rel": float((diff / (ref.abs() + eps)).mean()),
    }


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--rows", type=int, default=2000)
    ap.add_argument("--tail", type=int, default=200)
    ap.add_argument("--length", type=int, default=14)
    ap.add_argument("--seed", type=int, default=11)
    ap.add_argument("--eps", type=float, default=1e-12)
    args = ap.parse_args()

    if not Imports.get("talib", False):
        raise SystemExit("[X] TA-Lib not available. Install ta-lib to run this script.")
    if args.tail >= args.rows:
        raise SystemExit("[X] --tail must be < --rows")

    df = make_ohlcv(args.rows, args.seed)
    rows = {}
    for kind, (reference, streaming) in pairs(df, args.length).items():
        ref = pd.Series(np.asarray(reference(), dtype=float)).iloc[-args.tail:]
        test = pd.Series(np.asarray(streaming(), dtype=float)).iloc[-args.tail:]
        rows[kind] = compare(ref, test, args.eps)
    summary = pd.DataFrame(rows).T

    print("[i] rows:", args.rows)
    print("[i] compare rows:", args.tail)
    print("[i] length:", args.length)
    print("\nBy max_abs:")
    print(summary.sort_values("max_abs", ascending=False))


if __name__ == "__main__":
    main()
