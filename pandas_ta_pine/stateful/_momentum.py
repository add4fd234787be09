# -*- coding: utf-8 -*-
"""pandas-ta-pine stateful -- momentum oscillators.

Each section follows the pattern:
  1. State dataclass  (if beyond what _base already provides)
  2. ``*_update_raw`` step, or init / update / output_names helpers for
     multi-input transforms
  3. STATEFUL_REGISTRY["<kind>"] = StatefulIndicator(...)   (multi-input)
  4. Series / DataFrame wrapper

Bounded oscillators stay in [0, 100] (RCI in [-100, 100]); zero ranges use
the documented fallback of each transform instead of dividing by zero.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from ._base import (
    NAN,
    _param,
    _as_int,
    _as_float,
    EMAState,
    rma_make,
    ema_update_raw,
    fold,
    replay,
    StatefulIndicator,
    STATEFUL_REGISTRY,
)
from ._rolling import WindowState, window_make, sma, highest, lowest
from ._overlap import ema


# ===========================================================================
# RSI  (Wilder)
# ===========================================================================
# avg_loss == 0 -> 100 (or 50 when avg_gain is also 0).
# First value at the `length`-th change, i.e. index `length`.

@dataclass
class RSIState:
    gain: EMAState
    loss: EMAState
    prev: Optional[float] = None


def rsi_make(length: int) -> RSIState:
    length = max(int(length), 1)
    return RSIState(gain=rma_make(length), loss=rma_make(length))


def rsi_update_raw(state: RSIState, x: float) -> Tuple[Optional[float], RSIState]:
    if state.prev is None:
        state.prev = x
        return None, state
    change = x - state.prev
    state.prev = x
    avg_gain, state.gain = ema_update_raw(state.gain, max(change, 0.0))
    avg_loss, state.loss = ema_update_raw(state.loss, max(-change, 0.0))
    if avg_gain is None or avg_loss is None:
        return None, state
    if avg_loss == 0:
        return (100.0 if avg_gain > 0 else 50.0), state
    return 100.0 - 100.0 / (1.0 + avg_gain / avg_loss), state


def rsi(src: pd.Series, length: int = 14) -> pd.Series:
    return fold(rsi_update_raw, rsi_make(length), src, name=f"RSI_{length}")


# ===========================================================================
# STOCH / STOCH RSI
# ===========================================================================

def stoch(close: pd.Series, high: pd.Series, low: pd.Series, length: int = 14,
          fallback: float = 50.0) -> pd.Series:
    """Raw %K: 100 * (close - lowest(low)) / (highest(high) - lowest(low)).

    A zero range yields *fallback*; NaN during the window warmup.
    """
    hh = highest(high, length)
    ll = lowest(low, length)
    rng = hh - ll
    k = 100.0 * (close - ll) / rng
    return k.mask(rng == 0, fallback).rename(f"STOCHk_{length}")


def stochrsi(src: pd.Series, rsi_length: int = 14, stoch_length: int = 14,
             k: int = 3, d: int = 3, fallback: float = 50.0) -> pd.DataFrame:
    """Stochastic of the RSI series itself, smoothed into %K and %D."""
    r = rsi(src, rsi_length)
    raw = stoch(r, r, r, stoch_length, fallback)
    k_line = sma(raw, k)
    d_line = sma(k_line, d)
    props = f"_{rsi_length}_{stoch_length}_{k}_{d}"
    return pd.DataFrame({f"STOCHRSIk{props}": k_line, f"STOCHRSId{props}": d_line}, index=src.index)


# ===========================================================================
# MFI  (money flow over `length` changes)
# ===========================================================================
# Inputs: src, volume.  Both flows zero -> 50.  Default length = 14.

@dataclass
class MFIState:
    length: int
    pos: deque = field(default_factory=deque)
    neg: deque = field(default_factory=deque)
    prev: Optional[float] = None


def _mfi_init(params: Dict[str, Any]) -> MFIState:
    length = max(_as_int(_param(params, "length", 14), 14), 1)
    return MFIState(length=length, pos=deque(maxlen=length), neg=deque(maxlen=length))


def _mfi_update(
    state: MFIState, bar: Dict[str, float], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], MFIState]:
    x = bar["src"]
    if state.prev is None:
        state.prev = x
        return [None], state
    flow = x * bar["volume"]
    state.pos.append(flow if x > state.prev else 0.0)
    state.neg.append(flow if x < state.prev else 0.0)
    state.prev = x
    if len(state.pos) < state.length:
        return [None], state
    pos, neg = sum(state.pos), sum(state.neg)
    if pos + neg == 0:
        return [50.0], state
    return [100.0 * pos / (pos + neg)], state


STATEFUL_REGISTRY["mfi"] = StatefulIndicator(
    kind="mfi",
    inputs=("src", "volume"),
    init=_mfi_init,
    update=_mfi_update,
    output_names=lambda params: [f"MFI_{_as_int(_param(params, 'length', 14), 14)}"],
)


def mfi(src: pd.Series, volume: pd.Series, length: int = 14) -> pd.Series:
    return replay("mfi", {"src": src, "volume": volume}, {"length": length}).iloc[:, 0]


# ===========================================================================
# RCI  (Spearman rank correlation of time vs price, x100)
# ===========================================================================
# Time rank: newest = 1.  Price rank: highest = 1, ties share the average.

def _price_ranks(values: List[float]) -> List[float]:
    order = sorted(range(len(values)), key=lambda j: -values[j])
    ranks = [0.0] * len(values)
    i = 0
    while i < len(order):
        j = i
        while j + 1 < len(order) and values[order[j + 1]] == values[order[i]]:
            j += 1
        avg = (i + j) / 2.0 + 1.0
        for k in range(i, j + 1):
            ranks[order[k]] = avg
        i = j + 1
    return ranks


def rci_update_raw(state: WindowState, x: float) -> Tuple[Optional[float], WindowState]:
    state.buf.append(x)
    n = state.length
    if len(state.buf) < n:
        return None, state
    if n == 1:
        return 0.0, state
    ranks = _price_ranks(list(state.buf))
    d2 = sum(((n - k) - r) ** 2 for k, r in enumerate(ranks))
    return (1.0 - 6.0 * d2 / (n * (n * n - 1))) * 100.0, state


def rci(src: pd.Series, length: int = 9) -> pd.Series:
    length = max(int(length), 1)
    return fold(rci_update_raw, window_make(length), src, name=f"RCI_{length}")


# ===========================================================================
# STC  (Schaff Trend Cycle)
# ===========================================================================
# MACD -> stochastic over the MACD window -> factor smoothing -> stochastic
# over the smoothed series -> factor smoothing.  A zero range carries the
# previous stochastic value (initially 0).  NaN for index < slow.

@dataclass
class STCState:
    length: int
    factor: float
    macd_buf: deque = field(default_factory=deque)
    pf_buf: deque = field(default_factory=deque)
    f1: float = 0.0
    f2: float = 0.0
    pf: Optional[float] = None
    pff: Optional[float] = None


def stc_make(length: int, factor: float) -> STCState:
    length = max(int(length), 1)
    return STCState(length=length, factor=float(factor),
                    macd_buf=deque(maxlen=length), pf_buf=deque(maxlen=length))


def stc_update_raw(state: STCState, x: float) -> Tuple[Optional[float], STCState]:
    state.macd_buf.append(x)
    if len(state.macd_buf) < state.length:
        return None, state
    lo, hi = min(state.macd_buf), max(state.macd_buf)
    if hi - lo > 0:
        state.f1 = (x - lo) / (hi - lo) * 100.0
    state.pf = state.f1 if state.pf is None else state.pf + state.factor * (state.f1 - state.pf)

    state.pf_buf.append(state.pf)
    lo, hi = min(state.pf_buf), max(state.pf_buf)
    if hi - lo > 0:
        state.f2 = (state.pf - lo) / (hi - lo) * 100.0
    state.pff = state.f2 if state.pff is None else state.pff + state.factor * (state.f2 - state.pff)
    return state.pff, state


def stc(src: pd.Series, length: int = 10, fast: int = 23, slow: int = 50,
        factor: float = 0.5) -> pd.Series:
    macd = ema(src, fast) - ema(src, slow)
    out = fold(stc_update_raw, stc_make(length, factor), macd, name=f"STC_{length}_{fast}_{slow}_{factor}")
    out.iloc[:slow] = NAN
    return out


# ===========================================================================
# STOCH VX3  (raw %K through three cascaded SMAs)
# ===========================================================================
# Raw %K falls back to 0 while the window is filling (index < length) and
# to 50 on a zero range afterwards.

def stoch_vx3(frame: pd.DataFrame, length: int = 14, smooth1: int = 3,
              smooth2: int = 3, smooth3: int = 3) -> pd.DataFrame:
    hh = highest(frame["high"], length).to_numpy()
    ll = lowest(frame["low"], length).to_numpy()
    close = frame["close"].to_numpy(dtype=float)
    early = np.arange(close.size) < length
    with np.errstate(divide="ignore", invalid="ignore"):
        raw = (close - ll) / (hh - ll) * 100.0
    flat = np.isnan(hh) | np.isnan(ll) | (hh == ll)
    raw = np.where(flat, np.where(early, 0.0, 50.0), raw)

    k2 = sma(pd.Series(raw, index=frame.index), smooth1)
    k3 = sma(k2, smooth2)
    signal = sma(k3, smooth3)
    props = f"_{length}_{smooth1}_{smooth2}_{smooth3}"
    return pd.DataFrame({f"VX3k{props}": k3, f"VX3s{props}": signal}, index=frame.index)


# ===========================================================================
# QQE  (smoothed RSI with trailing long / short bands)
# ===========================================================================
# Inputs: rsi_ma (ema of rsi), dar (ema of |delta rsi_ma| * factor).
# Initial trend = 1.

@dataclass
class QQEState:
    prev_rsi: Optional[float] = None
    long: float = NAN
    short: float = NAN
    trend: int = 1


def _qqe_update(
    state: QQEState, bar: Dict[str, float], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], QQEState]:
    sr, dar = bar["rsi_ma"], bar["dar"]
    new_long, new_short = sr - dar, sr + dar
    if state.prev_rsi is None:
        state.long, state.short, state.trend = new_long, new_short, 1
    else:
        prev_sr, prev_long, prev_short = state.prev_rsi, state.long, state.short
        if prev_sr > prev_long and sr > prev_long:
            state.long = max(prev_long, new_long)
        else:
            state.long = new_long
        if prev_sr < prev_short and sr < prev_short:
            state.short = min(prev_short, new_short)
        else:
            state.short = new_short
        if prev_sr <= prev_long and sr > prev_long:
            state.trend = 1
        elif prev_sr >= prev_short and sr < prev_short:
            state.trend = -1
    state.prev_rsi = sr
    trailing = state.long if state.trend == 1 else state.short
    return [trailing, float(state.trend), state.long, state.short], state


STATEFUL_REGISTRY["qqe"] = StatefulIndicator(
    kind="qqe",
    inputs=("rsi_ma", "dar"),
    init=lambda params: QQEState(),
    update=_qqe_update,
    output_names=lambda params: ["QQE_trail", "QQE_trend", "QQE_long", "QQE_short"],
)


def qqe(src: pd.Series, rsi_length: int = 14, smooth: int = 5, factor: float = 4.236) -> pd.DataFrame:
    """QQE: ``rsi_ma``, trailing band, trend (+1/-1) and both raw bands."""
    rsi_ma = ema(rsi(src, rsi_length), smooth)
    wilders = max(2 * int(rsi_length) - 1, 1)
    dar = ema((rsi_ma - rsi_ma.shift(1)).abs(), wilders) * _as_float(factor, 4.236)
    machine = replay("qqe", {"rsi_ma": rsi_ma, "dar": dar})
    machine.insert(0, "QQE_rsi_ma", rsi_ma)
    return machine
