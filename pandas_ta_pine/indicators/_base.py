# -*- coding: utf-8 -*-
"""pandas-ta-pine indicators - shared base: descriptor, registry, helpers.

Category modules (``_overlap``, ``_momentum``, ``_trend``, ``_pivots``)
populate INDICATOR_REGISTRY at load time.  Each entry pairs a DEFAULTS dict
and Metadata with ``calculate(bars, inputs=None) -> IndicatorResult``.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from pandas_ta_pine.core import BarsLike, to_frame
from pandas_ta_pine.maps import COLORS
from pandas_ta_pine.result import Fill, IndicatorResult, Marker, Metadata, PlotPoint
from pandas_ta_pine.stateful import ema, rma, sma, stdev, vwma, wma
from pandas_ta_pine.stateful._base import _param


@dataclass(frozen=True)
class Indicator:
    """Immutable descriptor for one catalog indicator."""
    kind:      str
    metadata:  Metadata
    defaults:  Dict[str, Any]
    calculate: Callable[..., IndicatorResult]


# Populated by category modules at import time.
INDICATOR_REGISTRY: Dict[str, Indicator] = {}


def register(kind: str, metadata: Metadata, defaults: Dict[str, Any],
             calculate: Callable[..., IndicatorResult]) -> Indicator:
    indicator = Indicator(kind=kind, metadata=metadata, defaults=dict(defaults), calculate=calculate)
    INDICATOR_REGISTRY[kind] = indicator
    return indicator


def merge_inputs(defaults: Dict[str, Any], inputs: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Defaults overlaid with *inputs*; None means "use the default"."""
    return {key: _param(inputs, key, default) for key, default in defaults.items()}


def prepare(bars: BarsLike, defaults: Dict[str, Any],
            inputs: Optional[Dict[str, Any]]) -> tuple:
    return to_frame(bars), merge_inputs(defaults, inputs)


# ---------------------------------------------------------------------------
# Plot helpers
# ---------------------------------------------------------------------------

def _floats(values: Any, n: int) -> np.ndarray:
    if np.isscalar(values):
        return np.full(n, float(values))
    return np.asarray(values, dtype=float)


def plot(frame: pd.DataFrame, values: Any, colors: Optional[Sequence[Optional[str]]] = None,
         warmup: int = 0) -> List[PlotPoint]:
    """One PlotPoint per bar; NaN for index < warmup.  Colors are dropped on
    undefined points."""
    times = frame["time"].to_numpy(dtype=float)
    arr = _floats(values, times.size).copy()
    arr[: max(int(warmup), 0)] = np.nan
    points = []
    for i in range(times.size):
        value = float(arr[i])
        color = None if colors is None or math.isnan(value) else colors[i]
        points.append(PlotPoint(time=float(times[i]), value=value, color=color))
    return points


def slope_colors(values: Any, up: str = COLORS["up"], down: str = COLORS["down"],
                 flat: str = COLORS["neutral"]) -> List[Optional[str]]:
    """Color each point by comparison with the previous one."""
    arr = np.asarray(values, dtype=float)
    colors: List[Optional[str]] = [None] * arr.size
    for i in range(1, arr.size):
        if np.isnan(arr[i]) or np.isnan(arr[i - 1]):
            continue
        colors[i] = up if arr[i] > arr[i - 1] else down if arr[i] < arr[i - 1] else flat
    return colors


def direction_colors(direction: Any, up: str = COLORS["up"],
                     down: str = COLORS["down"]) -> List[Optional[str]]:
    arr = np.asarray(direction, dtype=float)
    return [None if np.isnan(d) else (up if d > 0 else down) for d in arr]


# ---------------------------------------------------------------------------
# Cross helpers
# ---------------------------------------------------------------------------

def _prev(arr: np.ndarray) -> np.ndarray:
    out = np.full(arr.size, np.nan)
    out[1:] = arr[:-1]
    return out


def crossover(a: Any, b: Any) -> np.ndarray:
    """a crosses above b: a > b now and a <= b on the previous bar."""
    a = np.asarray(a, dtype=float)
    b = _floats(b, a.size)
    with np.errstate(invalid="ignore"):
        return (a > b) & (_prev(a) <= _prev(b))


def crossunder(a: Any, b: Any) -> np.ndarray:
    a = np.asarray(a, dtype=float)
    b = _floats(b, a.size)
    with np.errstate(invalid="ignore"):
        return (a < b) & (_prev(a) >= _prev(b))


def markers_at(frame: pd.DataFrame, mask: Any, position: str, shape: str,
               color: str, text: str = "") -> List[Marker]:
    times = frame["time"].to_numpy(dtype=float)
    return [
        Marker(time=float(times[i]), position=position, shape=shape, color=color, text=text)
        for i in np.flatnonzero(np.asarray(mask, dtype=bool))
    ]


def sort_markers(markers: List[Marker]) -> List[Marker]:
    return sorted(markers, key=lambda m: m.time)


# ---------------------------------------------------------------------------
# Optional smoothing line (+ Bollinger Bands) over an indicator series
# ---------------------------------------------------------------------------
# ma_type: None | SMA | EMA | SMMA (RMA) | WMA | VWMA | SMA + Bollinger Bands

SMOOTHING_DEFAULTS: Dict[str, Any] = {"ma_type": "None", "ma_length": 14, "bb_mult": 2.0}


def smoothing(frame: pd.DataFrame, series: pd.Series, params: Dict[str, Any],
              result: IndicatorResult) -> None:
    """Add ``ma``, ``bb_upper`` and ``bb_lower`` plots to *result*."""
    ma_type = str(params["ma_type"])
    length = max(int(params["ma_length"]), 1)
    nan = np.full(len(frame), np.nan)
    ma_line, upper, lower = nan, nan, nan
    if ma_type != "None":
        if ma_type == "EMA":
            line = ema(series, length)
        elif ma_type == "SMMA (RMA)":
            line = rma(series, length)
        elif ma_type == "WMA":
            line = wma(series, length)
        elif ma_type == "VWMA":
            line = vwma(series, frame["volume"].fillna(0.0), length)
        else:
            line = sma(series, length)
        ma_line = line
        if ma_type == "SMA + Bollinger Bands":
            dev = stdev(series, length) * float(params["bb_mult"])
            upper, lower = line + dev, line - dev
            result.fills.append(Fill("bb_upper", "bb_lower", color="rgba(8,153,129,0.10)"))
    result.plots["ma"] = plot(frame, ma_line)
    result.plots["bb_upper"] = plot(frame, upper)
    result.plots["bb_lower"] = plot(frame, lower)
