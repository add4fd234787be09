# -*- coding: utf-8 -*-
"""pandas-ta-pine indicators -- trend / trailing-stop overlays.

Each section: DEFAULTS, METADATA, ``calculate(bars, inputs=None)`` and a
``register`` call.  Direction series are +1 (long / up) and -1 (short /
down).
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from pandas_ta_pine.core import BarsLike, source
from pandas_ta_pine.maps import COLORS
from pandas_ta_pine.result import Box, Fill, IndicatorResult, Metadata
from pandas_ta_pine.stateful import alphatrend, autotrail, darvas, halftrend, ott, supertrend
from ._base import (
    crossover,
    crossunder,
    direction_colors,
    markers_at,
    plot,
    prepare,
    register,
    sort_markers,
)


def flips(direction: Any) -> Tuple[np.ndarray, np.ndarray]:
    """Masks of bars where the direction turns up / turns down."""
    d = np.asarray(direction, dtype=float)
    prev = np.full(d.size, np.nan)
    prev[1:] = d[:-1]
    return (d == 1) & (prev == -1), (d == -1) & (prev == 1)


# ===========================================================================
# SUPERTREND
# ===========================================================================

SUPERTREND_DEFAULTS: Dict[str, Any] = {"atr_period": 10, "factor": 3.0}
SUPERTREND_METADATA = Metadata("Supertrend", "ST", True)


def _supertrend_calculate(bars: BarsLike, inputs: Optional[Dict[str, Any]] = None) -> IndicatorResult:
    frame, p = prepare(bars, SUPERTREND_DEFAULTS, inputs)
    out = supertrend(frame, int(p["atr_period"]), float(p["factor"]))
    level, direction = out.iloc[:, 0], out.iloc[:, 1]
    result = IndicatorResult(metadata=SUPERTREND_METADATA)
    result.plots["up_trend"] = plot(frame, level.where(direction == 1))
    result.plots["down_trend"] = plot(frame, level.where(direction == -1))
    result.plots["body_middle"] = plot(frame, (frame["open"] + frame["close"]) / 2.0)
    result.fills = [
        Fill("body_middle", "up_trend", color="rgba(38,166,154,0.10)"),
        Fill("body_middle", "down_trend", color="rgba(239,83,80,0.10)"),
    ]
    to_up, to_down = flips(direction)
    result.markers = sort_markers(
        markers_at(frame, to_up, "belowBar", "labelUp", COLORS["up"], "Buy")
        + markers_at(frame, to_down, "aboveBar", "labelDown", COLORS["down"], "Sell")
    )
    result.extras = {"direction": direction.tolist()}
    return result


register("supertrend", SUPERTREND_METADATA, SUPERTREND_DEFAULTS, _supertrend_calculate)


# ===========================================================================
# ALPHATREND
# ===========================================================================
# Buy when AlphaTrend crosses above its 2-bar lagged copy, Sell below.

ALPHATREND_DEFAULTS: Dict[str, Any] = {"coeff": 1.0, "period": 14, "use_rsi": False}
ALPHATREND_METADATA = Metadata("AlphaTrend", "AlphaTrend", True)


def _alphatrend_calculate(bars: BarsLike, inputs: Optional[Dict[str, Any]] = None) -> IndicatorResult:
    frame, p = prepare(bars, ALPHATREND_DEFAULTS, inputs)
    period = int(p["period"])
    out = alphatrend(frame, float(p["coeff"]), period, bool(p["use_rsi"]))
    line, lagged = out.iloc[:, 0], out.iloc[:, 1]
    result = IndicatorResult(metadata=ALPHATREND_METADATA)
    result.plots["alpha_trend"] = plot(frame, line, warmup=period)
    result.plots["lagged"] = plot(frame, lagged, warmup=period + 2)
    result.fills.append(Fill("alpha_trend", "lagged", color=COLORS["blue"]))
    result.markers = sort_markers(
        markers_at(frame, crossover(line, lagged), "belowBar", "arrowUp", COLORS["blue"], "Buy")
        + markers_at(frame, crossunder(line, lagged), "aboveBar", "arrowDown", "#FF6D00", "Sell")
    )
    return result


register("alphatrend", ALPHATREND_METADATA, ALPHATREND_DEFAULTS, _alphatrend_calculate)


# ===========================================================================
# HALFTREND
# ===========================================================================

HALFTREND_DEFAULTS: Dict[str, Any] = {"amplitude": 2, "channel_deviation": 2.0}
HALFTREND_METADATA = Metadata("HalfTrend", "HT", True)
_HALFTREND_WARMUP = 100


def _halftrend_calculate(bars: BarsLike, inputs: Optional[Dict[str, Any]] = None) -> IndicatorResult:
    frame, p = prepare(bars, HALFTREND_DEFAULTS, inputs)
    out = halftrend(frame, int(p["amplitude"]), float(p["channel_deviation"]), _HALFTREND_WARMUP)
    ht, direction, atr_high, atr_low = (out.iloc[:, j] for j in range(4))
    colors = direction_colors(direction, up=COLORS["blue"], down=COLORS["down"])

    result = IndicatorResult(metadata=HALFTREND_METADATA)
    result.plots["half_trend"] = plot(frame, ht, colors, warmup=_HALFTREND_WARMUP)
    result.plots["atr_high"] = plot(frame, atr_high, warmup=_HALFTREND_WARMUP)
    result.plots["atr_low"] = plot(frame, atr_low, warmup=_HALFTREND_WARMUP)
    result.fills = [Fill("half_trend", "atr_high"), Fill("half_trend", "atr_low")]

    to_up, to_down = flips(direction)
    warm = np.arange(len(frame)) >= _HALFTREND_WARMUP
    result.markers = sort_markers(
        markers_at(frame, to_up & warm, "belowBar", "arrowUp", COLORS["blue"], "Buy")
        + markers_at(frame, to_down & warm, "aboveBar", "arrowDown", "#FF6D00", "Sell")
    )
    return result


register("halftrend", HALFTREND_METADATA, HALFTREND_DEFAULTS, _halftrend_calculate)


# ===========================================================================
# OTT  (Optimized Trend Tracker)
# ===========================================================================
# Support is defined from bar period + 9; OTT is drawn two bars back and
# starts two bars later.  Support/OTT crossings always mark; price/OTT
# crossings (show_signals_c) and OTT turning points (show_signals_r) are
# optional.

OTT_DEFAULTS: Dict[str, Any] = {
    "source": "close",
    "period": 2,
    "percent": 1.4,
    "highlight": True,
    "show_signals_c": False,
    "show_signals_r": False,
}
OTT_METADATA = Metadata("Optimized Trend Tracker", "OTT", True)
_OTT_COLOR, _OTT_UP, _OTT_DOWN = "#B800D9", "#008000", "#FF0000"


def _ott_calculate(bars: BarsLike, inputs: Optional[Dict[str, Any]] = None) -> IndicatorResult:
    frame, p = prepare(bars, OTT_DEFAULTS, inputs)
    src = source(frame, p["source"])
    period = max(int(p["period"]), 1)
    out = ott(src, period, float(p["percent"]))
    warmup = period + 9
    n = len(frame)
    bar = np.arange(n)

    support = out["OTTmavg"].to_numpy()
    lagged = out["OTT"].shift(2).to_numpy()
    lagged[: warmup + 2] = np.nan
    before = out["OTT"].shift(3).to_numpy()
    before[: warmup + 3] = lagged[: warmup + 3]

    if p["highlight"]:
        colors = [_OTT_UP if cur > prev else _OTT_DOWN for cur, prev in zip(lagged, before)]
    else:
        colors = [_OTT_COLOR] * n
    with np.errstate(invalid="ignore"):
        fill_colors = np.where(support > lagged, "rgba(0,128,0,0.15)",
                               np.where(support < lagged, "rgba(255,0,0,0.15)", "transparent"))

    result = IndicatorResult(metadata=OTT_METADATA)
    result.plots["support"] = plot(frame, support, warmup=warmup)
    result.plots["ott"] = plot(frame, lagged, colors)
    result.fills.append(Fill("support", "ott", colors=fill_colors.tolist()))

    signals = bar >= warmup + 3
    markers = (
        markers_at(frame, crossover(support, lagged) & signals, "belowBar", "labelUp", _OTT_UP, "Buy")
        + markers_at(frame, crossunder(support, lagged) & signals, "aboveBar", "labelDown", _OTT_DOWN, "Sell")
    )
    if p["show_signals_c"]:
        markers += markers_at(frame, crossover(src, lagged) & signals, "belowBar", "labelUp", _OTT_UP, "Buy")
        markers += markers_at(frame, crossunder(src, lagged) & signals, "aboveBar", "labelDown", _OTT_DOWN, "Sell")
    if p["show_signals_r"]:
        turning = bar >= warmup + 4
        lagged3 = out["OTT"].shift(3).to_numpy()
        markers += markers_at(frame, crossover(lagged, lagged3) & turning, "belowBar", "labelUp", _OTT_UP, "Buy")
        markers += markers_at(frame, crossunder(lagged, lagged3) & turning, "aboveBar", "labelDown", _OTT_DOWN, "Sell")
    result.markers = sort_markers(markers)
    return result


register("ott", OTT_METADATA, OTT_DEFAULTS, _ott_calculate)


# ===========================================================================
# AUTOTRAIL
# ===========================================================================

AUTOTRAIL_DEFAULTS: Dict[str, Any] = {
    "trail_type": "ATR",
    "atr_length": 14,
    "atr_mult": 1.0,
    "perc": 2.0,
    "lookback": 5,
}
AUTOTRAIL_METADATA = Metadata("Bjorgum AutoTrail", "AutoTrail", True)


def _autotrail_calculate(bars: BarsLike, inputs: Optional[Dict[str, Any]] = None) -> IndicatorResult:
    frame, p = prepare(bars, AUTOTRAIL_DEFAULTS, inputs)
    out = autotrail(frame, str(p["trail_type"]), int(p["atr_length"]), float(p["atr_mult"]),
                    float(p["perc"]), int(p["lookback"]))
    trail, direction = out.iloc[:, 0], out.iloc[:, 1]
    colors = direction_colors(direction, up=COLORS["blue"], down="#FF0000")

    result = IndicatorResult(metadata=AUTOTRAIL_METADATA)
    result.plots["trail"] = plot(frame, trail, colors)
    to_up, to_down = flips(direction)
    result.markers = sort_markers(
        markers_at(frame, to_down, "aboveBar", "xcross", COLORS["blue"], "Stop")
        + markers_at(frame, to_up, "belowBar", "xcross", "#FF0000", "Stop")
    )
    return result


register("autotrail", AUTOTRAIL_METADATA, AUTOTRAIL_DEFAULTS, _autotrail_calculate)


# ===========================================================================
# DARVAS BOX
# ===========================================================================

DARVAS_BOX_DEFAULTS: Dict[str, Any] = {"box_length": 5}
DARVAS_BOX_METADATA = Metadata("Darvas Box", "Darvas", True)


def _box_segments(frame: pd.DataFrame, top: np.ndarray, bottom: np.ndarray) -> List[Box]:
    """One Box per run of bars sharing the same top and bottom."""
    times = frame["time"].to_numpy(dtype=float)
    boxes: List[Box] = []
    start = None
    for i in range(top.size + 1):
        same = (
            i < top.size and start is not None
            and top[i] == top[start] and bottom[i] == bottom[start]
        )
        if same:
            continue
        if start is not None:
            boxes.append(Box(time1=float(times[start]), price1=float(top[start]),
                             time2=float(times[i - 1]), price2=float(bottom[start]),
                             bg_color="rgba(41,98,255,0.10)", border_color=COLORS["blue"]))
        start = i if i < top.size and not (np.isnan(top[i]) or np.isnan(bottom[i])) else None
    return boxes


def _darvas_box_calculate(bars: BarsLike, inputs: Optional[Dict[str, Any]] = None) -> IndicatorResult:
    frame, p = prepare(bars, DARVAS_BOX_DEFAULTS, inputs)
    out = darvas(frame, int(p["box_length"]))
    top, bottom = out.iloc[:, 0].to_numpy(), out.iloc[:, 1].to_numpy()
    result = IndicatorResult(metadata=DARVAS_BOX_METADATA)
    result.plots["top"] = plot(frame, top)
    result.plots["bottom"] = plot(frame, bottom)
    result.boxes = _box_segments(frame, top, bottom)
    return result


register("darvas_box", DARVAS_BOX_METADATA, DARVAS_BOX_DEFAULTS, _darvas_box_calculate)
