# -*- coding: utf-8 -*-
"""pandas-ta-pine stateful -- overlap / moving-average transforms.

Each section follows the pattern:
  1. State dataclass  (if beyond what _base already provides)
  2. ``*_update_raw`` step and a Series wrapper built on ``fold``
  3. STATEFUL_REGISTRY["<kind>"] = StatefulIndicator(...)   (close-driven)

Cascaded smoothers (HMA family, T3, MavilimW, ZLSMA) are plain compositions
of the primitives: every stage starts on the first defined sample of the
stage before it.
"""
from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from ._base import (
    _param,
    _as_int,
    EMAState,
    ema_make,
    rma_make,
    ema_update_raw,
    fold,
    StatefulIndicator,
    STATEFUL_REGISTRY,
)
from ._rolling import sma, wma, linreg
from ..maps import MA_MODES


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


# ===========================================================================
# EMA / RMA
# ===========================================================================
# EMA: alpha = 2/(length+1), first output = first defined sample.
# RMA: alpha = 1/length, first output = mean of the first `length` samples.
# WWMA: alpha = 1/length, first output = first defined sample.

def ema(src: pd.Series, length: int) -> pd.Series:
    length = max(int(length), 1)
    return fold(ema_update_raw, ema_make(length), src, name=f"EMA_{length}")


def rma(src: pd.Series, length: int) -> pd.Series:
    length = max(int(length), 1)
    return fold(ema_update_raw, rma_make(length), src, name=f"RMA_{length}")


def wwma(src: pd.Series, length: int) -> pd.Series:
    length = max(int(length), 1)
    return fold(ema_update_raw, rma_make(length, presma=False), src, name=f"WWMA_{length}")


def _ema_init(params: Dict[str, Any]) -> EMAState:
    return ema_make(max(_as_int(_param(params, "length", 10), 10), 1))


def _rma_init(params: Dict[str, Any]) -> EMAState:
    return rma_make(max(_as_int(_param(params, "length", 10), 10), 1))


def _wwma_init(params: Dict[str, Any]) -> EMAState:
    return rma_make(max(_as_int(_param(params, "length", 10), 10), 1), presma=False)


def _ema_update(
    state: EMAState, bar: Dict[str, float], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], EMAState]:
    val, state = ema_update_raw(state, bar["close"])
    return [val], state


STATEFUL_REGISTRY["ema"] = StatefulIndicator(
    kind="ema",
    inputs=("close",),
    init=_ema_init,
    update=_ema_update,
    output_names=lambda p: [f"EMA_{_as_int(_param(p, 'length', 10), 10)}"],
)

STATEFUL_REGISTRY["rma"] = StatefulIndicator(
    kind="rma",
    inputs=("close",),
    init=_rma_init,
    update=_ema_update,
    output_names=lambda p: [f"RMA_{_as_int(_param(p, 'length', 10), 10)}"],
)

STATEFUL_REGISTRY["wwma"] = StatefulIndicator(
    kind="wwma",
    inputs=("close",),
    init=_wwma_init,
    update=_ema_update,
    output_names=lambda p: [f"WWMA_{_as_int(_param(p, 'length', 10), 10)}"],
)


# ===========================================================================
# VWMA / MA dispatch
# ===========================================================================

def vwma(src: pd.Series, volume: pd.Series, length: int) -> pd.Series:
    den = sma(volume, length)
    out = sma(src * volume, length) / den
    return out.where(den != 0).rename(f"VWMA_{length}")


def ma(mode: str, src: pd.Series, length: int, volume: Optional[pd.Series] = None) -> pd.Series:
    """Moving average selected by *mode* (sma, ema, rma, wwma, wma, hma, vwma)."""
    mode = str(mode).lower()
    if mode not in MA_MODES:
        raise ValueError(f"Unknown moving average mode '{mode}', expected one of {', '.join(MA_MODES)}")
    if mode == "sma":
        return sma(src, length)
    if mode == "ema":
        return ema(src, length)
    if mode == "rma":
        return rma(src, length)
    if mode == "wwma":
        return wwma(src, length)
    if mode == "wma":
        return wma(src, length)
    if mode == "hma":
        return hma(src, length)
    if volume is None:
        raise ValueError("vwma requires a volume series")
    return vwma(src, volume, length)


# ===========================================================================
# Hull family
# ===========================================================================
#   HMA  = wma(2*wma(src, n/2) - wma(src, n), round(sqrt(n)))
#   EHMA = ema(2*ema(src, n/2) - ema(src, n), round(sqrt(n)))
#   THMA = wma(3*wma(src, n/3) - wma(src, n/2) - wma(src, n), n)

def hma(src: pd.Series, length: int) -> pd.Series:
    length = max(int(length), 1)
    half = max(length // 2, 1)
    sqrt_len = max(_round_half_up(math.sqrt(length)), 1)
    diff = 2.0 * wma(src, half) - wma(src, length)
    return wma(diff, sqrt_len).rename(f"HMA_{length}")


def ehma(src: pd.Series, length: int) -> pd.Series:
    length = max(int(length), 1)
    half = max(length // 2, 1)
    sqrt_len = max(_round_half_up(math.sqrt(length)), 1)
    diff = 2.0 * ema(src, half) - ema(src, length)
    return ema(diff, sqrt_len).rename(f"EHMA_{length}")


def thma(src: pd.Series, length: int) -> pd.Series:
    length = max(int(length), 1)
    third = max(length // 3, 1)
    half = max(length // 2, 1)
    diff = 3.0 * wma(src, third) - wma(src, half) - wma(src, length)
    return wma(diff, length).rename(f"THMA_{length}")


# ===========================================================================
# T3  (Tillson)
# ===========================================================================

def t3(src: pd.Series, length: int, b: float = 0.7) -> pd.Series:
    e1 = ema(src, length)
    e2 = ema(e1, length)
    e3 = ema(e2, length)
    e4 = ema(e3, length)
    e5 = ema(e4, length)
    e6 = ema(e5, length)
    b2, b3 = b * b, b * b * b
    c1 = -b3
    c2 = 3 * b2 + 3 * b3
    c3 = -6 * b2 - 3 * b - 3 * b3
    c4 = 1 + 3 * b + b3 + 3 * b2
    return (c1 * e6 + c2 * e5 + c3 * e4 + c4 * e3).rename(f"T3_{length}_{b}")


# ===========================================================================
# MavilimW
# ===========================================================================
# Six chained WMAs, each length the sum of the previous two.

def mavilimw_lengths(fmal: int = 3, smal: int = 5) -> Tuple[int, ...]:
    tmal = fmal + smal
    big = smal + tmal
    ftmal = tmal + big
    return (fmal, smal, tmal, big, ftmal, big + ftmal)


def mavilimw(src: pd.Series, fmal: int = 3, smal: int = 5) -> pd.Series:
    out = src
    for length in mavilimw_lengths(fmal, smal):
        out = wma(out, length)
    return out.rename(f"MAVW_{fmal}_{smal}")


# ===========================================================================
# VAR  (VIDYA on a 9-bar Chande momentum)
# ===========================================================================

@dataclass
class VARState:
    alpha: float
    up: deque = field(default_factory=lambda: deque(maxlen=9))
    down: deque = field(default_factory=lambda: deque(maxlen=9))
    prev_src: Optional[float] = None
    last: Optional[float] = None


def var_make(length: int) -> VARState:
    return VARState(alpha=2.0 / (max(int(length), 1) + 1.0))


def var_update_raw(state: VARState, x: float) -> Tuple[Optional[float], VARState]:
    diff = 0.0 if state.prev_src is None else x - state.prev_src
    state.prev_src = x
    state.up.append(diff if diff > 0 else 0.0)
    state.down.append(-diff if diff < 0 else 0.0)
    up, down = sum(state.up), sum(state.down)
    cmo = 0.0 if up + down == 0 else (up - down) / (up + down)
    if state.last is None:
        state.last = x
        return x, state
    k = state.alpha * abs(cmo)
    state.last = k * x + (1.0 - k) * state.last
    return state.last, state


def var(src: pd.Series, length: int) -> pd.Series:
    return fold(var_update_raw, var_make(length), src, name=f"VAR_{length}")


# ===========================================================================
# VMA  (variable MA from smoothed directional movement)
# ===========================================================================

@dataclass
class VMAState:
    k: float
    inv_len: float
    prev_src: Optional[float] = None
    pdm_s: float = 0.0
    mdm_s: float = 0.0
    last: Optional[float] = None


def vma_make(length: int) -> VMAState:
    length = max(int(length), 1)
    return VMAState(k=2.0 / (length + 1.0), inv_len=1.0 / length)


def vma_update_raw(state: VMAState, x: float) -> Tuple[Optional[float], VMAState]:
    prev = x if state.prev_src is None else state.prev_src
    state.prev_src = x
    pdm = max(x - prev, 0.0)
    mdm = max(prev - x, 0.0)
    if state.last is None:
        state.pdm_s, state.mdm_s, state.last = pdm, mdm, x
        return x, state
    state.pdm_s = state.pdm_s * (1.0 - state.inv_len) + pdm * state.inv_len
    state.mdm_s = state.mdm_s * (1.0 - state.inv_len) + mdm * state.inv_len
    total = state.pdm_s + state.mdm_s
    pdi = state.pdm_s / total if total != 0 else 0.0
    mdi = state.mdm_s / total if total != 0 else 0.0
    vi = abs(pdi - mdi) / (pdi + mdi) if pdi + mdi != 0 else 0.0
    state.last = state.k * vi * x + (1.0 - state.k * vi) * state.last
    return state.last, state


def vma(src: pd.Series, length: int) -> pd.Series:
    return fold(vma_update_raw, vma_make(length), src, name=f"VMA_{length}")


# ===========================================================================
# Zero-lag EMA / ZLSMA
# ===========================================================================
# zlema: lag = (length-1)//2; bars before the lag is available use the
# current sample as the lagged one.

def zlema(src: pd.Series, length: int) -> pd.Series:
    length = max(int(length), 1)
    lag = (length - 1) // 2
    lagged = src.shift(lag).fillna(src)
    return ema(2.0 * src - lagged, length).rename(f"ZLEMA_{length}")


def zlsma(src: pd.Series, length: int, offset: int = 0) -> pd.Series:
    lsma = linreg(src, length, offset)
    lsma2 = linreg(lsma, length, offset)
    return (lsma + (lsma - lsma2)).rename(f"ZLSMA_{length}")
