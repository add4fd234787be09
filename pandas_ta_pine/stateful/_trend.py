# -*- coding: utf-8 -*-
"""pandas-ta-pine stateful -- trend / trailing-stop state machines.

Each section follows the pattern:
  1. State dataclass
  2. init / update / output_names helpers
  3. STATEFUL_REGISTRY["<kind>"] = StatefulIndicator(...)
  4. DataFrame wrapper preparing the inputs and calling ``replay``

Machines start on the first row where every input is defined; ``replay``
holds the state across rows with an undefined input.

Trailing stops share one shape: compute the raw long and short stops for
the bar; while long the level ratchets up with max() and flips short when
close drops below the previous level, reseeding from the raw short stop
(symmetric while short).
"""
from __future__ import annotations

import warnings
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from ._base import (
    _param,
    _as_int,
    _as_float,
    ATRState,
    atr_make,
    atr_update_raw,
    replay,
    StatefulIndicator,
    STATEFUL_REGISTRY,
)
from ._rolling import sma, highest, lowest, highestbars, lowestbars
from ._overlap import var
from ._volatility import tr, atr
from ._momentum import rsi, mfi


# ===========================================================================
# Shared trailing-stop step
# ===========================================================================

@dataclass
class TrailState:
    direction: int = 0
    level: Optional[float] = None


def trail_step(state: TrailState, close: float, mid: float,
               long_stop: float, short_stop: float) -> TrailState:
    """Advance a trailing stop by one bar (initial direction: close vs mid)."""
    if state.level is None:
        state.direction = 1 if close >= mid else -1
        state.level = long_stop if state.direction == 1 else short_stop
    elif state.direction == 1:
        if close < state.level:
            state.direction, state.level = -1, short_stop
        else:
            state.level = max(long_stop, state.level)
    else:
        if close > state.level:
            state.direction, state.level = 1, long_stop
        else:
            state.level = min(short_stop, state.level)
    return state


def _split(state: TrailState) -> List[Optional[float]]:
    long_ = state.level if state.direction == 1 else None
    short = state.level if state.direction == -1 else None
    return [state.level, float(state.direction), long_, short]


# ===========================================================================
# SUPERTREND
# ===========================================================================
# Bands: hl2 -/+ factor * ATR (Wilder).  Defaults: length=10, factor=3.

@dataclass
class SupertrendState:
    factor: float
    atr: ATRState
    trail: TrailState


def _supertrend_init(params: Dict[str, Any]) -> SupertrendState:
    length = max(_as_int(_param(params, "length", 10), 10), 1)
    factor = _as_float(_param(params, "factor", 3.0), 3.0)
    return SupertrendState(factor=factor, atr=atr_make(length), trail=TrailState())


def _supertrend_update(
    state: SupertrendState, bar: Dict[str, float], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], SupertrendState]:
    high, low, close = bar["high"], bar["low"], bar["close"]
    atr_val, state.atr = atr_update_raw(state.atr, high, low, close)
    if atr_val is None:
        return [None] * 4, state
    hl2 = 0.5 * (high + low)
    band = state.factor * atr_val
    state.trail = trail_step(state.trail, close, hl2, hl2 - band, hl2 + band)
    return _split(state.trail), state


def _supertrend_output_names(params: Dict[str, Any]) -> List[str]:
    length = _as_int(_param(params, "length", 10), 10)
    factor = _as_float(_param(params, "factor", 3.0), 3.0)
    props = f"_{length}_{factor}"
    return [f"SUPERT{props}", f"SUPERTd{props}", f"SUPERTl{props}", f"SUPERTs{props}"]


STATEFUL_REGISTRY["supertrend"] = StatefulIndicator(
    kind="supertrend",
    inputs=("high", "low", "close"),
    init=_supertrend_init,
    update=_supertrend_update,
    output_names=_supertrend_output_names,
)


def supertrend(frame: pd.DataFrame, length: int = 10, factor: float = 3.0) -> pd.DataFrame:
    inputs = {k: frame[k] for k in ("high", "low", "close")}
    return replay("supertrend", inputs, {"length": length, "factor": factor})


# ===========================================================================
# ALPHATREND
# ===========================================================================
# Inputs: high, low, atr (sma of TR), filter (MFI of hlc3 or RSI of close).
# filter >= 50 -> max(low - atr*coeff, prev) else min(high + atr*coeff, prev).

@dataclass
class AlphaTrendState:
    coeff: float
    last: Optional[float] = None


def _alphatrend_update(
    state: AlphaTrendState, bar: Dict[str, float], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], AlphaTrendState]:
    up_t = bar["low"] - bar["atr"] * state.coeff
    down_t = bar["high"] + bar["atr"] * state.coeff
    prev = state.last
    if bar["filter"] >= 50:
        state.last = up_t if prev is None or up_t >= prev else prev
    else:
        state.last = down_t if prev is None or down_t <= prev else prev
    return [state.last], state


STATEFUL_REGISTRY["alphatrend"] = StatefulIndicator(
    kind="alphatrend",
    inputs=("high", "low", "atr", "filter"),
    init=lambda params: AlphaTrendState(coeff=_as_float(_param(params, "coeff", 1.0), 1.0)),
    update=_alphatrend_update,
    output_names=lambda params: ["ALPHAT"],
)


def alphatrend(frame: pd.DataFrame, coeff: float = 1.0, period: int = 14,
               use_rsi: bool = False, lag: int = 2) -> pd.DataFrame:
    """AlphaTrend line and its *lag*-bar delayed copy."""
    period = max(int(period), 1)
    atr_sma = sma(tr(frame), period)
    has_volume = "volume" in frame and frame["volume"].notna().any()
    if not use_rsi and not has_volume:
        warnings.warn(
            "alphatrend: bars carry no volume, using the RSI filter instead of MFI",
            UserWarning,
            stacklevel=2,
        )
        use_rsi = True
    if use_rsi:
        filt = rsi(frame["close"], period)
    else:
        hlc3 = (frame["high"] + frame["low"] + frame["close"]) / 3.0
        filt = mfi(hlc3, frame["volume"], period)

    inputs = {"high": frame["high"], "low": frame["low"], "atr": atr_sma, "filter": filt}
    out = replay("alphatrend", inputs, {"coeff": coeff})
    line = out.iloc[:, 0]
    props = f"_{coeff}_{period}"
    return pd.DataFrame({f"ALPHAT{props}": line, f"ALPHATl{props}": line.shift(lag)}, index=frame.index)


# ===========================================================================
# HALFTREND
# ===========================================================================
# trend 0 = up (direction +1), 1 = down (direction -1).  On a flip the new
# level starts from the last level of the opposite side.  Channel:
# ht -/+ channel_deviation * ATR(100) / 2.  Defaults: amplitude=2, dev=2.

@dataclass
class HalfTrendState:
    trend: int = 0
    next_trend: int = 0
    prev_trend: Optional[int] = None
    max_low: Optional[float] = None
    min_high: Optional[float] = None
    up: Optional[float] = None
    down: Optional[float] = None


def _halftrend_update(
    state: HalfTrendState, bar: Dict[str, float], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], HalfTrendState]:
    if state.max_low is None:
        state.max_low, state.min_high = bar["prev_low"], bar["prev_high"]

    if state.next_trend == 1:
        state.max_low = max(bar["low_price"], state.max_low)
        if bar["high_ma"] < state.max_low and bar["close"] < bar["prev_low"]:
            state.trend, state.next_trend = 1, 0
            state.min_high = bar["high_price"]
    else:
        state.min_high = min(bar["high_price"], state.min_high)
        if bar["low_ma"] > state.min_high and bar["close"] > bar["prev_high"]:
            state.trend, state.next_trend = 0, 1
            state.max_low = bar["low_price"]

    flipped = state.prev_trend is not None and state.prev_trend != state.trend
    if state.trend == 0:
        if flipped and state.down is not None:
            state.up = state.down
        elif state.up is None:
            state.up = state.max_low
        else:
            state.up = max(state.max_low, state.up)
        value, direction = state.up, 1.0
    else:
        if flipped and state.up is not None:
            state.down = state.up
        elif state.down is None:
            state.down = state.min_high
        else:
            state.down = min(state.min_high, state.down)
        value, direction = state.down, -1.0
    state.prev_trend = state.trend
    return [value, direction], state


STATEFUL_REGISTRY["halftrend"] = StatefulIndicator(
    kind="halftrend",
    inputs=("close", "prev_high", "prev_low", "high_price", "low_price", "high_ma", "low_ma"),
    init=lambda params: HalfTrendState(),
    update=_halftrend_update,
    output_names=lambda params: ["HALFT", "HALFTd"],
)


def _at_offset(values: pd.Series, offsets: pd.Series) -> pd.Series:
    """values[i + offsets[i]] where the offset is defined, else NaN."""
    arr = values.to_numpy(dtype=float)
    off = offsets.to_numpy(dtype=float)
    out = np.full(arr.size, np.nan)
    ok = ~np.isnan(off)
    idx = np.arange(arr.size)[ok] + off[ok].astype(int)
    out[ok] = arr[idx]
    return pd.Series(out, index=values.index)


def halftrend(frame: pd.DataFrame, amplitude: int = 2, channel_deviation: float = 2.0,
              atr_length: int = 100) -> pd.DataFrame:
    amplitude = max(int(amplitude), 1)
    high, low = frame["high"], frame["low"]
    inputs = {
        "close": frame["close"],
        "prev_high": high.shift(1).fillna(high),
        "prev_low": low.shift(1).fillna(low),
        "high_price": _at_offset(high, highestbars(high, amplitude)),
        "low_price": _at_offset(low, lowestbars(low, amplitude)),
        "high_ma": sma(high, amplitude),
        "low_ma": sma(low, amplitude),
    }
    out = replay("halftrend", inputs)
    dev = channel_deviation * atr(frame, atr_length) / 2.0
    ht = out["HALFT"]
    props = f"_{amplitude}_{channel_deviation}"
    return pd.DataFrame(
        {
            f"HALFT{props}": ht,
            f"HALFTd{props}": out["HALFTd"],
            f"HALFTh{props}": ht + dev,
            f"HALFTl{props}": ht - dev,
        },
        index=frame.index,
    )


# ===========================================================================
# OTT  (Optimized Trend Tracker on a VAR support line)
# ===========================================================================
# Input: mavg.  Defaults: period=2, percent=1.4.

@dataclass
class OTTState:
    percent: float
    long: Optional[float] = None
    short: Optional[float] = None
    direction: int = 1


def _ott_update(
    state: OTTState, bar: Dict[str, float], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], OTTState]:
    mavg = bar["mavg"]
    fark = mavg * state.percent * 0.01
    long_stop, short_stop = mavg - fark, mavg + fark
    if state.long is not None:
        prev_long, prev_short = state.long, state.short
        if mavg > prev_long:
            long_stop = max(long_stop, prev_long)
        if mavg < prev_short:
            short_stop = min(short_stop, prev_short)
        if state.direction == -1 and mavg > prev_short:
            state.direction = 1
        elif state.direction == 1 and mavg < prev_long:
            state.direction = -1
    state.long, state.short = long_stop, short_stop
    mt = long_stop if state.direction == 1 else short_stop
    p = state.percent
    ott = mt * (200.0 + p) / 200.0 if mavg > mt else mt * (200.0 - p) / 200.0
    return [ott, float(state.direction), long_stop, short_stop], state


STATEFUL_REGISTRY["ott"] = StatefulIndicator(
    kind="ott",
    inputs=("mavg",),
    init=lambda params: OTTState(percent=_as_float(_param(params, "percent", 1.4), 1.4)),
    update=_ott_update,
    output_names=lambda params: ["OTT", "OTTd", "OTTl", "OTTs"],
)


def ott(src: pd.Series, period: int = 2, percent: float = 1.4) -> pd.DataFrame:
    """OTT line, direction and stops, plus the VAR support line as ``OTTmavg``."""
    mavg = var(src, period)
    out = replay("ott", {"mavg": mavg}, {"percent": percent})
    out.insert(0, "OTTmavg", mavg)
    return out


# ===========================================================================
# AUTOTRAIL  (swing low / high -/+ offset)
# ===========================================================================
# Offset: "ATR" -> atr * mult, "Percent" -> close * perc / 100,
# "Price" -> first ATR * mult held constant.  The trail starts on bar
# max(atr_length, lookback).

def _autotrail_update(
    state: TrailState, bar: Dict[str, float], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], TrailState]:
    mid = 0.5 * (bar["high"] + bar["low"])
    long_stop = bar["swing_low"] - bar["offset"]
    short_stop = bar["swing_high"] + bar["offset"]
    state = trail_step(state, bar["close"], mid, long_stop, short_stop)
    return [state.level, float(state.direction)], state


STATEFUL_REGISTRY["autotrail"] = StatefulIndicator(
    kind="autotrail",
    inputs=("high", "low", "close", "offset", "swing_low", "swing_high"),
    init=lambda params: TrailState(),
    update=_autotrail_update,
    output_names=lambda params: ["AUTOTRAIL", "AUTOTRAILd"],
)


def autotrail(frame: pd.DataFrame, trail_type: str = "ATR", atr_length: int = 14,
              atr_mult: float = 1.0, perc: float = 2.0, lookback: int = 5) -> pd.DataFrame:
    atr_values = atr(frame, atr_length)
    kind = str(trail_type).lower()
    if kind == "atr":
        offset = atr_values * atr_mult
    elif kind == "percent":
        offset = frame["close"] * (perc / 100.0)
    elif kind == "price":
        defined = atr_values.dropna()
        first = float(defined.iloc[0]) if len(defined) else 1.0
        offset = pd.Series(first * atr_mult, index=frame.index)
    else:
        raise ValueError(f"Unknown trail type '{trail_type}', expected ATR, Percent or Price")
    warmup = max(int(atr_length), int(lookback))
    offset = offset.where(np.arange(len(frame)) >= warmup)

    inputs = {
        "high": frame["high"],
        "low": frame["low"],
        "close": frame["close"],
        "offset": offset,
        "swing_low": lowest(frame["low"], lookback),
        "swing_high": highest(frame["high"], lookback),
    }
    return replay("autotrail", inputs)


# ===========================================================================
# DARVAS  (box top / bottom)
# ===========================================================================
# A new high resets the box; a close above the top or below the bottom
# rebuilds it from the current window.  The machine starts on bar `length`.

@dataclass
class DarvasState:
    top: Optional[float] = None
    bottom: Optional[float] = None


def _darvas_update(
    state: DarvasState, bar: Dict[str, float], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], DarvasState]:
    if bar["high"] >= bar["hh"]:
        state.top, state.bottom = bar["high"], bar["ll"]
    elif state.top is not None:
        if bar["close"] > state.top:
            state.top, state.bottom = bar["high"], bar["ll"]
        elif bar["close"] < state.bottom:
            state.top, state.bottom = bar["hh"], bar["ll"]
    return [state.top, state.bottom], state


STATEFUL_REGISTRY["darvas"] = StatefulIndicator(
    kind="darvas",
    inputs=("high", "close", "hh", "ll"),
    init=lambda params: DarvasState(),
    update=_darvas_update,
    output_names=lambda params: ["DARVASt", "DARVASb"],
)


def darvas(frame: pd.DataFrame, length: int = 5) -> pd.DataFrame:
    length = max(int(length), 1)
    started = np.arange(len(frame)) >= length
    inputs = {
        "high": frame["high"],
        "close": frame["close"],
        "hh": highest(frame["high"], length).where(started),
        "ll": lowest(frame["low"], length).where(started),
    }
    return replay("darvas", inputs)
