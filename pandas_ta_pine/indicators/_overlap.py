# -*- coding: utf-8 -*-
"""pandas-ta-pine indicators -- overlap (price-scale) indicators.

Each section: DEFAULTS, METADATA, ``calculate(bars, inputs=None)`` and a
``register`` call.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

import numpy as np

from pandas_ta_pine.core import BarsLike, source
from pandas_ta_pine.maps import COLORS, EMA_RIBBON_LENGTHS
from pandas_ta_pine.result import BarColor, Fill, IndicatorResult, Metadata
from pandas_ta_pine.stateful import (
    ema,
    ehma,
    hma,
    mavilimw,
    mavilimw_lengths,
    sma,
    t3,
    thma,
    vma,
    wma,
    zlema,
    zlsma,
)
from ._base import (
    SMOOTHING_DEFAULTS,
    direction_colors,
    plot,
    prepare,
    register,
    slope_colors,
    smoothing,
)


# ===========================================================================
# SMA / EMA  (with optional smoothing line)
# ===========================================================================

SMA_DEFAULTS: Dict[str, Any] = {"length": 9, "source": "close", "offset": 0, **SMOOTHING_DEFAULTS}
SMA_METADATA = Metadata("Simple Moving Average", "SMA", True)


def _sma_calculate(bars: BarsLike, inputs: Optional[Dict[str, Any]] = None) -> IndicatorResult:
    frame, p = prepare(bars, SMA_DEFAULTS, inputs)
    line = sma(source(frame, p["source"]), int(p["length"]))
    result = IndicatorResult(metadata=SMA_METADATA)
    result.plots["sma"] = plot(frame, line.shift(int(p["offset"])))
    smoothing(frame, line, p, result)
    return result


EMA_DEFAULTS: Dict[str, Any] = {"length": 9, "source": "close", "offset": 0, **SMOOTHING_DEFAULTS}
EMA_METADATA = Metadata("Moving Average Exponential", "EMA", True)


def _ema_calculate(bars: BarsLike, inputs: Optional[Dict[str, Any]] = None) -> IndicatorResult:
    frame, p = prepare(bars, EMA_DEFAULTS, inputs)
    line = ema(source(frame, p["source"]), int(p["length"]))
    result = IndicatorResult(metadata=EMA_METADATA)
    result.plots["ema"] = plot(frame, line.shift(int(p["offset"])))
    smoothing(frame, line, p, result)
    return result


register("sma", SMA_METADATA, SMA_DEFAULTS, _sma_calculate)
register("ema", EMA_METADATA, EMA_DEFAULTS, _ema_calculate)


# ===========================================================================
# WMA
# ===========================================================================

WMA_DEFAULTS: Dict[str, Any] = {"length": 9, "source": "close", "offset": 0}
WMA_METADATA = Metadata("Moving Average Weighted", "WMA", True)


def _wma_calculate(bars: BarsLike, inputs: Optional[Dict[str, Any]] = None) -> IndicatorResult:
    frame, p = prepare(bars, WMA_DEFAULTS, inputs)
    line = wma(source(frame, p["source"]), int(p["length"]))
    result = IndicatorResult(metadata=WMA_METADATA)
    result.plots["wma"] = plot(frame, line.shift(int(p["offset"])))
    return result


register("wma", WMA_METADATA, WMA_DEFAULTS, _wma_calculate)


# ===========================================================================
# EMA RIBBON  (Fibonacci lengths 5 .. 144)
# ===========================================================================

EMA_RIBBON_DEFAULTS: Dict[str, Any] = {"source": "close"}
EMA_RIBBON_METADATA = Metadata("EMA Ribbon", "EMA Ribbon", True)


def _ema_ribbon_calculate(bars: BarsLike, inputs: Optional[Dict[str, Any]] = None) -> IndicatorResult:
    frame, p = prepare(bars, EMA_RIBBON_DEFAULTS, inputs)
    src = source(frame, p["source"])
    result = IndicatorResult(metadata=EMA_RIBBON_METADATA)
    for length in EMA_RIBBON_LENGTHS:
        result.plots[f"ema_{length}"] = plot(frame, ema(src, length), warmup=length)
    return result


register("ema_ribbon", EMA_RIBBON_METADATA, EMA_RIBBON_DEFAULTS, _ema_ribbon_calculate)


# ===========================================================================
# HULL SUITE  (Hma | Ehma | Thma)
# ===========================================================================
# mhull vs shull (= mhull two bars back) sets the trend color.

HULL_SUITE_DEFAULTS: Dict[str, Any] = {"source": "close", "mode": "Hma", "length": 55, "color_bars": False}
HULL_SUITE_METADATA = Metadata("Hull Suite", "HS", True)
_HULL_MODES = {"hma": hma, "ehma": ehma, "thma": thma}


def _hull_suite_calculate(bars: BarsLike, inputs: Optional[Dict[str, Any]] = None) -> IndicatorResult:
    frame, p = prepare(bars, HULL_SUITE_DEFAULTS, inputs)
    mode = str(p["mode"]).lower()
    if mode not in _HULL_MODES:
        raise ValueError(f"Unknown Hull mode '{p['mode']}', expected Hma, Ehma or Thma")
    length = int(p["length"])
    mhull = _HULL_MODES[mode](source(frame, p["source"]), length)
    shull = mhull.shift(2)
    trend = np.where(shull.isna(), np.nan, np.where(mhull > shull, 1.0, -1.0))
    colors = direction_colors(trend)

    result = IndicatorResult(metadata=HULL_SUITE_METADATA)
    result.plots["mhull"] = plot(frame, mhull, colors, warmup=length)
    result.plots["shull"] = plot(frame, shull, colors, warmup=length + 2)
    result.fills.append(Fill("mhull", "shull", colors=[c or "transparent" for c in colors]))
    if p["color_bars"]:
        times = frame["time"].to_numpy(dtype=float)
        result.bar_colors = [
            BarColor(time=float(times[i]), color=c)
            for i, c in enumerate(colors) if c is not None and i >= length
        ]
    return result


register("hull_suite", HULL_SUITE_METADATA, HULL_SUITE_DEFAULTS, _hull_suite_calculate)


# ===========================================================================
# TILLSON T3  (on (h + l + 2c) / 4, optional Fibonacci-factor T3)
# ===========================================================================

TILLSON_T3_DEFAULTS: Dict[str, Any] = {
    "length": 8,
    "volume_factor": 0.7,
    "length_fibo": 5,
    "volume_factor_fibo": 0.618,
    "show_fibo": True,
}
TILLSON_T3_METADATA = Metadata("Tillson T3", "T3", True)


def _tillson_t3_calculate(bars: BarsLike, inputs: Optional[Dict[str, Any]] = None) -> IndicatorResult:
    frame, p = prepare(bars, TILLSON_T3_DEFAULTS, inputs)
    src = source(frame, "hlcc4")
    length = int(p["length"])
    line = t3(src, length, float(p["volume_factor"]))

    result = IndicatorResult(metadata=TILLSON_T3_METADATA)
    result.plots["t3"] = plot(frame, line, slope_colors(line), warmup=6 * length)
    if p["show_fibo"]:
        length_fibo = int(p["length_fibo"])
        fibo = t3(src, length_fibo, float(p["volume_factor_fibo"]))
        result.plots["t3_fibo"] = plot(frame, fibo, warmup=6 * length_fibo)
        result.fills.append(Fill("t3", "t3_fibo", color="rgba(41,98,255,0.10)"))
    return result


register("tillson_t3", TILLSON_T3_METADATA, TILLSON_T3_DEFAULTS, _tillson_t3_calculate)


# ===========================================================================
# MAVILIMW
# ===========================================================================

MAVILIMW_DEFAULTS: Dict[str, Any] = {"first_length": 3, "second_length": 5}
MAVILIMW_METADATA = Metadata("MavilimW", "MAVW", True)


def _mavilimw_calculate(bars: BarsLike, inputs: Optional[Dict[str, Any]] = None) -> IndicatorResult:
    frame, p = prepare(bars, MAVILIMW_DEFAULTS, inputs)
    fmal, smal = int(p["first_length"]), int(p["second_length"])
    line = mavilimw(frame["close"], fmal, smal)
    colors = slope_colors(line, up=COLORS["blue"], down=COLORS["down"], flat=COLORS["neutral"])
    result = IndicatorResult(metadata=MAVILIMW_METADATA)
    result.plots["mavw"] = plot(frame, line, colors, warmup=mavilimw_lengths(fmal, smal)[-1])
    return result


register("mavilimw", MAVILIMW_METADATA, MAVILIMW_DEFAULTS, _mavilimw_calculate)


# ===========================================================================
# VARIABLE MA
# ===========================================================================

VARIABLE_MA_DEFAULTS: Dict[str, Any] = {"length": 6, "source": "close"}
VARIABLE_MA_METADATA = Metadata("Variable Moving Average", "VMA", True)


def _variable_ma_calculate(bars: BarsLike, inputs: Optional[Dict[str, Any]] = None) -> IndicatorResult:
    frame, p = prepare(bars, VARIABLE_MA_DEFAULTS, inputs)
    length = int(p["length"])
    line = vma(source(frame, p["source"]), length)
    colors = slope_colors(line, flat=COLORS["purple"])
    result = IndicatorResult(metadata=VARIABLE_MA_METADATA)
    result.plots["vma"] = plot(frame, line, colors, warmup=3 * length)
    return result


register("variable_ma", VARIABLE_MA_METADATA, VARIABLE_MA_DEFAULTS, _variable_ma_calculate)


# ===========================================================================
# ZERO LAG EMA / ZLSMA
# ===========================================================================

ZERO_LAG_EMA_DEFAULTS: Dict[str, Any] = {"length": 21, "source": "close"}
ZERO_LAG_EMA_METADATA = Metadata("Zero Lag EMA", "ZLEMA", True)


def _zero_lag_ema_calculate(bars: BarsLike, inputs: Optional[Dict[str, Any]] = None) -> IndicatorResult:
    frame, p = prepare(bars, ZERO_LAG_EMA_DEFAULTS, inputs)
    length = int(p["length"])
    line = zlema(source(frame, p["source"]), length)
    result = IndicatorResult(metadata=ZERO_LAG_EMA_METADATA)
    result.plots["zlema"] = plot(frame, line, warmup=length + (length - 1) // 2)
    return result


ZLSMA_DEFAULTS: Dict[str, Any] = {"length": 32, "offset": 0, "source": "close"}
ZLSMA_METADATA = Metadata("Zero Lag Least Squares Moving Average", "ZLSMA", True)


def _zlsma_calculate(bars: BarsLike, inputs: Optional[Dict[str, Any]] = None) -> IndicatorResult:
    frame, p = prepare(bars, ZLSMA_DEFAULTS, inputs)
    line = zlsma(source(frame, p["source"]), int(p["length"]), int(p["offset"]))
    result = IndicatorResult(metadata=ZLSMA_METADATA)
    result.plots["zlsma"] = plot(frame, line)
    return result


register("zero_lag_ema", ZERO_LAG_EMA_METADATA, ZERO_LAG_EMA_DEFAULTS, _zero_lag_ema_calculate)
register("zlsma", ZLSMA_METADATA, ZLSMA_DEFAULTS, _zlsma_calculate)
