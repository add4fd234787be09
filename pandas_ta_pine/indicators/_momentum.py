# -*- coding: utf-8 -*-
"""pandas-ta-pine indicators -- momentum oscillators.

Each section: DEFAULTS, METADATA, ``calculate(bars, inputs=None)`` and a
``register`` call.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

import numpy as np

from pandas_ta_pine.core import BarsLike, source
from pandas_ta_pine.maps import COLORS
from pandas_ta_pine.result import BgColor, Fill, HLine, IndicatorResult, Metadata
from pandas_ta_pine.stateful import bbands, mfi, qqe, rci, rsi, sma, stc, stoch, stoch_vx3
from ._base import (
    SMOOTHING_DEFAULTS,
    crossover,
    crossunder,
    markers_at,
    plot,
    prepare,
    register,
    smoothing,
    sort_markers,
)


# ===========================================================================
# RSI
# ===========================================================================

RSI_DEFAULTS: Dict[str, Any] = {"length": 14, "source": "close", **SMOOTHING_DEFAULTS, "ma_type": "SMA"}
RSI_METADATA = Metadata("Relative Strength Index", "RSI", False)


def _rsi_calculate(bars: BarsLike, inputs: Optional[Dict[str, Any]] = None) -> IndicatorResult:
    frame, p = prepare(bars, RSI_DEFAULTS, inputs)
    line = rsi(source(frame, p["source"]), int(p["length"]))
    result = IndicatorResult(metadata=RSI_METADATA)
    result.plots["rsi"] = plot(frame, line)
    smoothing(frame, line, p, result)
    result.hlines = [
        HLine(70, title="Upper Band"),
        HLine(50, linestyle="dotted", title="Middle Band"),
        HLine(30, title="Lower Band"),
    ]
    return result


register("rsi", RSI_METADATA, RSI_DEFAULTS, _rsi_calculate)


# ===========================================================================
# STOCH
# ===========================================================================

STOCH_DEFAULTS: Dict[str, Any] = {"period_k": 14, "smooth_k": 1, "period_d": 3}
STOCH_METADATA = Metadata("Stochastic", "Stoch", False)


def _stoch_calculate(bars: BarsLike, inputs: Optional[Dict[str, Any]] = None) -> IndicatorResult:
    frame, p = prepare(bars, STOCH_DEFAULTS, inputs)
    raw = stoch(frame["close"], frame["high"], frame["low"], int(p["period_k"]))
    k = sma(raw, int(p["smooth_k"]))
    d = sma(k, int(p["period_d"]))
    result = IndicatorResult(metadata=STOCH_METADATA)
    result.plots["k"] = plot(frame, k)
    result.plots["d"] = plot(frame, d)
    result.hlines = [HLine(80, title="Upper Band"), HLine(50, linestyle="dotted", title="Middle Band"),
                     HLine(20, title="Lower Band")]
    return result


register("stoch", STOCH_METADATA, STOCH_DEFAULTS, _stoch_calculate)


# ===========================================================================
# STOCH RSI  (Bollinger Bands with stochastic-RSI exhaustion signals)
# ===========================================================================
# The stochastic runs over the RSI series itself; a flat RSI window gives
# NaN.  K and D go to extras.

STOCH_RSI_DEFAULTS: Dict[str, Any] = {
    "source": "close",
    "bb_length": 20,
    "bb_mult": 2.0,
    "k_smooth": 3,
    "d_smooth": 3,
    "rsi_length": 14,
    "stoch_length": 14,
    "upper_limit": 90,
    "lower_limit": 10,
}
STOCH_RSI_METADATA = Metadata("Bollinger Bands + Stochastic RSI", "BB StochRSI", True)


def _stoch_rsi_calculate(bars: BarsLike, inputs: Optional[Dict[str, Any]] = None) -> IndicatorResult:
    frame, p = prepare(bars, STOCH_RSI_DEFAULTS, inputs)
    src = source(frame, p["source"])
    bb_length = int(p["bb_length"])
    bands = bbands(src, bb_length, float(p["bb_mult"]))
    lower, basis, upper = (bands.iloc[:, j] for j in range(3))

    r = rsi(src, int(p["rsi_length"]))
    raw = stoch(r, r, r, int(p["stoch_length"]), fallback=np.nan)
    k = sma(raw, int(p["k_smooth"]))
    d = sma(k, int(p["d_smooth"]))

    close = frame["close"]
    k_prev, d_prev = k.shift(1), d.shift(1)
    bear = (close.shift(1) > upper.shift(1)) & (close < upper) & \
           (k_prev > p["upper_limit"]) & (d_prev > p["upper_limit"])
    bull = (close.shift(1) < lower.shift(1)) & (close > lower) & \
           (k_prev < p["lower_limit"]) & (d_prev < p["lower_limit"])

    result = IndicatorResult(metadata=STOCH_RSI_METADATA)
    result.plots["basis"] = plot(frame, basis, warmup=bb_length)
    result.plots["upper"] = plot(frame, upper, warmup=bb_length)
    result.plots["lower"] = plot(frame, lower, warmup=bb_length)
    result.fills.append(Fill("upper", "lower", color="rgba(25,135,135,0.05)"))
    result.markers = sort_markers(
        markers_at(frame, bear, "aboveBar", "triangleDown", "#FF5252")
        + markers_at(frame, bull, "belowBar", "triangleUp", "#4CAF50")
    )
    result.extras = {"k": k.tolist(), "d": d.tolist()}
    return result


register("stoch_rsi", STOCH_RSI_METADATA, STOCH_RSI_DEFAULTS, _stoch_rsi_calculate)


# ===========================================================================
# MFI
# ===========================================================================

MFI_DEFAULTS: Dict[str, Any] = {"length": 14, "source": "hlc3"}
MFI_METADATA = Metadata("Money Flow Index", "MFI", False)


def _mfi_calculate(bars: BarsLike, inputs: Optional[Dict[str, Any]] = None) -> IndicatorResult:
    frame, p = prepare(bars, MFI_DEFAULTS, inputs)
    line = mfi(source(frame, p["source"]), frame["volume"], int(p["length"]))
    result = IndicatorResult(metadata=MFI_METADATA)
    result.plots["mfi"] = plot(frame, line)
    result.hlines = [HLine(80, title="Overbought"), HLine(50, linestyle="dotted", title="Middle Band"),
                     HLine(20, title="Oversold")]
    return result


register("mfi", MFI_METADATA, MFI_DEFAULTS, _mfi_calculate)


# ===========================================================================
# RCI  (rank correlation index)
# ===========================================================================

RCI_DEFAULTS: Dict[str, Any] = {"length": 10, "source": "close", **SMOOTHING_DEFAULTS, "ma_type": "SMA"}
RCI_METADATA = Metadata("Rank Correlation Index", "RCI", False)


def _rci_calculate(bars: BarsLike, inputs: Optional[Dict[str, Any]] = None) -> IndicatorResult:
    frame, p = prepare(bars, RCI_DEFAULTS, inputs)
    line = rci(source(frame, p["source"]), int(p["length"]))
    result = IndicatorResult(metadata=RCI_METADATA)
    result.plots["rci"] = plot(frame, line)
    smoothing(frame, line, p, result)
    result.hlines = [HLine(80, title="Upper Band"), HLine(0, linestyle="dotted", title="Middle Band"),
                     HLine(-80, title="Lower Band")]
    return result


register("rci", RCI_METADATA, RCI_DEFAULTS, _rci_calculate)


# ===========================================================================
# SCHAFF TREND CYCLE
# ===========================================================================
# Breakout coloring: > 75 green, <= 25 red, orange between.

STC_DEFAULTS: Dict[str, Any] = {
    "length": 10,
    "fast_length": 23,
    "slow_length": 50,
    "factor": 0.5,
    "source": "close",
    "highlight_breakouts": True,
}
STC_METADATA = Metadata("Schaff Trend Cycle", "STC", False)
_STC_UPPER, _STC_LOWER = 75.0, 25.0


def _stc_calculate(bars: BarsLike, inputs: Optional[Dict[str, Any]] = None) -> IndicatorResult:
    frame, p = prepare(bars, STC_DEFAULTS, inputs)
    slow = int(p["slow_length"])
    line = stc(source(frame, p["source"]), int(p["length"]), int(p["fast_length"]), slow, float(p["factor"]))
    values = line.to_numpy()
    prev = line.shift(1).fillna(line).to_numpy()
    if p["highlight_breakouts"]:
        colors = ["#008000" if v > _STC_UPPER else "#FF0000" if v <= _STC_LOWER else "#FF8C00" for v in values]
    else:
        colors = ["#008000" if v > pv else "#FF0000" for v, pv in zip(values, prev)]

    result = IndicatorResult(metadata=STC_METADATA)
    result.plots["stc"] = plot(frame, line, colors)
    result.plots["upper"] = plot(frame, _STC_UPPER, warmup=slow)
    result.plots["lower"] = plot(frame, _STC_LOWER, warmup=slow)
    result.hlines = [HLine(50, linestyle="dotted", title="Middle")]

    defined = ~np.isnan(values)
    warm = np.arange(values.size) >= slow
    above = [
        "rgba(0,128,0,0.20)" if p["highlight_breakouts"] and ok and v > _STC_UPPER else "transparent"
        for v, ok in zip(values, defined)
    ]
    below = [
        "rgba(255,0,0,0.20)" if p["highlight_breakouts"] and ok and v < _STC_LOWER else "transparent"
        for v, ok in zip(values, defined)
    ]
    result.fills = [
        Fill("upper", "lower", colors=["rgba(249,203,156,0.10)" if w else "transparent" for w in warm]),
        Fill("upper", "stc", colors=above),
        Fill("lower", "stc", colors=below),
    ]
    result.markers = sort_markers(
        markers_at(frame, crossunder(values, _STC_UPPER), "aboveBar", "circle", "#FF0000")
        + markers_at(frame, crossover(values, _STC_LOWER), "belowBar", "circle", "#008000")
    )
    return result


register("schaff_trend_cycle", STC_METADATA, STC_DEFAULTS, _stc_calculate)


# ===========================================================================
# STOCH VX3
# ===========================================================================

STOCH_VX3_DEFAULTS: Dict[str, Any] = {"length": 14, "smooth1": 3, "smooth2": 3, "smooth3": 3}
STOCH_VX3_METADATA = Metadata("Stochastic VX3", "StochVX3", False)


def _stoch_vx3_calculate(bars: BarsLike, inputs: Optional[Dict[str, Any]] = None) -> IndicatorResult:
    frame, p = prepare(bars, STOCH_VX3_DEFAULTS, inputs)
    length, s1, s2, s3 = (int(p[k]) for k in ("length", "smooth1", "smooth2", "smooth3"))
    out = stoch_vx3(frame, length, s1, s2, s3)
    warmup = length + s1 + s2 + s3
    k3 = out.iloc[:, 0].to_numpy().copy()
    signal = out.iloc[:, 1].to_numpy().copy()
    k3[:warmup] = np.nan
    signal[:warmup] = np.nan

    result = IndicatorResult(metadata=STOCH_VX3_METADATA)
    result.plots["k3"] = plot(frame, k3)
    result.plots["signal"] = plot(frame, signal)
    result.hlines = [HLine(80, title="Overbought"), HLine(20, title="Oversold")]

    with np.errstate(invalid="ignore"):
        up_cross = crossover(k3, signal)
        down_cross = crossunder(k3, signal)
    result.markers = sort_markers(
        markers_at(frame, down_cross, "aboveBar", "circle", "#000000")
        + markers_at(frame, up_cross, "belowBar", "circle", "#000000")
    )
    times = frame["time"].to_numpy(dtype=float)
    result.bg_colors = [
        BgColor(time=float(times[i]),
                color="rgba(0, 0, 0, 0.20)" if k3[i] < signal[i] else "rgba(18, 142, 137, 0.20)")
        for i in range(times.size)
        if not (np.isnan(k3[i]) or np.isnan(signal[i]))
    ]
    return result


register("stoch_vx3", STOCH_VX3_METADATA, STOCH_VX3_DEFAULTS, _stoch_vx3_calculate)


# ===========================================================================
# QQE
# ===========================================================================

QQE_DEFAULTS: Dict[str, Any] = {"rsi_length": 14, "smooth_factor": 5, "qqe_factor": 4.236, "source": "close"}
QQE_METADATA = Metadata("QQE", "QQE", False)


def _qqe_calculate(bars: BarsLike, inputs: Optional[Dict[str, Any]] = None) -> IndicatorResult:
    frame, p = prepare(bars, QQE_DEFAULTS, inputs)
    rsi_length, smooth = int(p["rsi_length"]), int(p["smooth_factor"])
    out = qqe(source(frame, p["source"]), rsi_length, smooth, float(p["qqe_factor"]))
    warmup = 2 * rsi_length + smooth
    result = IndicatorResult(metadata=QQE_METADATA)
    result.plots["rsi_ma"] = plot(frame, out["QQE_rsi_ma"], warmup=warmup)
    result.plots["trailing"] = plot(frame, out["QQE_trail"], warmup=warmup)
    result.hlines = [HLine(50, color=COLORS["gray"], linestyle="dotted", title="Midline")]
    return result


register("qqe", QQE_METADATA, QQE_DEFAULTS, _qqe_calculate)
