# -*- coding: utf-8 -*-
"""pandas-ta-pine indicators -- pivots, zig-zag and Fibonacci levels.

Pivot-based drawings are placed where the pivot becomes known: a pivot at
bar ``i`` confirmed by ``right`` later bars is reported on bar
``i + right``.
"""
from __future__ import annotations

import math
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from pandas_ta_pine.core import BarsLike
from pandas_ta_pine.maps import FIB_EXTENSIONS, FIB_RATIOS
from pandas_ta_pine.result import IndicatorResult, Label, LineDrawing, Marker, Metadata
from pandas_ta_pine.stateful import (
    ZigZagPivot,
    highestbars,
    lowestbars,
    pivothigh,
    pivotlow,
    zigzag,
)
from ._base import markers_at, plot, prepare, register, sort_markers


# ===========================================================================
# ZIGZAG
# ===========================================================================
# depth -> pivot window left = right = depth // 2.  extend_last adds a
# provisional point on the last bar (its low after a high pivot, its high
# after a low pivot).

ZIGZAG_DEFAULTS: Dict[str, Any] = {
    "deviation": 5.0,
    "depth": 10,
    "extend_last": True,
    "show_price": True,
    "show_change": True,
}
ZIGZAG_METADATA = Metadata("Zig Zag", "ZigZag", True)
_ZIGZAG_COLOR = "#2962FF"


def _zigzag_text(points: List[ZigZagPivot], i: int, show_price: bool, show_change: bool) -> str:
    text = f"{points[i].value:.2f}" if show_price else ""
    if show_change and i > 0:
        prev = points[i - 1].value
        change = points[i].value - prev
        pct = change / prev * 100.0 if prev != 0 else 0.0
        sign = "+" if change >= 0 else ""
        text += f"\n({sign}{change:.2f}, {sign}{pct:.2f}%)"
    return text.strip()


def _zigzag_calculate(bars: BarsLike, inputs: Optional[Dict[str, Any]] = None) -> IndicatorResult:
    frame, p = prepare(bars, ZIGZAG_DEFAULTS, inputs)
    result = IndicatorResult(metadata=ZIGZAG_METADATA)
    n = len(frame)
    if n == 0:
        result.extras = {"pivots": [], "extension": None}
        return result

    half = max(int(p["depth"]) // 2, 1)
    pivots = zigzag(frame["high"], frame["low"], half, half, float(p["deviation"]))
    extension = None
    if p["extend_last"] and pivots and pivots[-1].index < n - 1:
        last = n - 1
        if pivots[-1].kind == "high":
            extension = ZigZagPivot(last, float(frame["low"].iloc[last]), "low")
        else:
            extension = ZigZagPivot(last, float(frame["high"].iloc[last]), "high")

    points = pivots + ([extension] if extension is not None else [])
    times = frame["time"].to_numpy(dtype=float)
    for a, b in zip(points, points[1:]):
        result.lines.append(LineDrawing(time1=float(times[a.index]), price1=a.value,
                                        time2=float(times[b.index]), price2=b.value,
                                        color=_ZIGZAG_COLOR, width=2))
    if p["show_price"] or p["show_change"]:
        for i, point in enumerate(points):
            text = _zigzag_text(points, i, bool(p["show_price"]), bool(p["show_change"]))
            if text:
                result.labels.append(Label(
                    time=float(times[point.index]), price=point.value, text=text,
                    color=_ZIGZAG_COLOR, text_color="#FFFFFF",
                    style="label_down" if point.kind == "high" else "label_up", size="small",
                ))
    result.extras = {"pivots": pivots, "extension": extension}
    return result


register("zigzag", ZIGZAG_METADATA, ZIGZAG_DEFAULTS, _zigzag_calculate)


# ===========================================================================
# PIVOT POINTS HH / HL / LH / LL
# ===========================================================================
# Plots: average of the last pivot high and low, and the last pivot high /
# low levels (broken for one bar when the level changes).  show_fb adds
# breakout markers when a bar opens inside and closes beyond a level.

PIVOT_HH_HL_DEFAULTS: Dict[str, Any] = {"left_bars": 4, "right_bars": 2, "show_fb": True}
PIVOT_HH_HL_METADATA = Metadata("Pivot Points HH/HL/LH/LL", "PivotHHLL", True)
_HIGH_COLOR, _LOW_COLOR = "rgba(0,128,128,0.5)", "rgba(255,0,0,0.5)"


def _pivot_hh_hl_calculate(bars: BarsLike, inputs: Optional[Dict[str, Any]] = None) -> IndicatorResult:
    frame, p = prepare(bars, PIVOT_HH_HL_DEFAULTS, inputs)
    left, right = int(p["left_bars"]), int(p["right_bars"])
    ph = pivothigh(frame["high"], left, right).shift(right).to_numpy()
    pl = pivotlow(frame["low"], left, right).shift(right).to_numpy()
    times = frame["time"].to_numpy(dtype=float)
    close, open_ = frame["close"].to_numpy(), frame["open"].to_numpy()

    result = IndicatorResult(metadata=PIVOT_HH_HL_METADATA)
    n = len(frame)
    avg = np.full(n, np.nan)
    top = np.full(n, np.nan)
    bottom = np.full(n, np.nan)
    avg_colors: List[Optional[str]] = [None] * n
    buy = np.zeros(n, dtype=bool)
    sell = np.zeros(n, dtype=bool)
    last_high = last_low = math.nan

    for i in range(n):
        if not math.isnan(ph[i]):
            if not math.isnan(last_high):
                text = "HH" if ph[i] > last_high else "LH"
                result.markers.append(Marker(float(times[i]), "aboveBar", "triangleDown", _HIGH_COLOR, text))
            result.labels.append(Label(time=float(times[i]), price=float(ph[i]), text=f"[{ph[i]:.2f}]",
                                       text_color=_HIGH_COLOR, style="label_down", size="tiny"))
            top_changed = last_high != ph[i]
            last_high = float(ph[i])
        else:
            top_changed = False
        if not math.isnan(pl[i]):
            if not math.isnan(last_low):
                text = "HL" if pl[i] > last_low else "LL"
                result.markers.append(Marker(float(times[i]), "belowBar", "triangleUp", _LOW_COLOR, text))
            result.labels.append(Label(time=float(times[i]), price=float(pl[i]), text=f"[{pl[i]:.2f}]",
                                       text_color=_LOW_COLOR, style="label_up", size="tiny"))
            bottom_changed = last_low != pl[i]
            last_low = float(pl[i])
        else:
            bottom_changed = False

        if not (math.isnan(last_high) or math.isnan(last_low)):
            avg[i] = (last_high + last_low) / 2.0
            avg_colors[i] = _HIGH_COLOR if close[i] > avg[i] else _LOW_COLOR
            if p["show_fb"]:
                buy[i] = close[i] > last_high and open_[i] <= last_high
                sell[i] = close[i] < last_low and open_[i] >= last_low
        if not top_changed or i == 0:
            top[i] = last_high
        if not bottom_changed or i == 0:
            bottom[i] = last_low

    result.plots["pivot_avg"] = plot(frame, avg, avg_colors)
    result.plots["pivot_high"] = plot(frame, top)
    result.plots["pivot_low"] = plot(frame, bottom)
    result.markers = sort_markers(
        result.markers
        + markers_at(frame, buy, "belowBar", "triangleUp", _HIGH_COLOR, "↑↑")
        + markers_at(frame, sell, "aboveBar", "triangleDown", _LOW_COLOR, "↓↓")
    )
    return result


register("pivot_hh_hl", PIVOT_HH_HL_METADATA, PIVOT_HH_HL_DEFAULTS, _pivot_hh_hl_calculate)


# ===========================================================================
# ZIGZAG FIBONACCI
# ===========================================================================
# Pivots: a bar holding the highest high (lowest low) of the last `period`
# bars.  Keeps the five newest points, newest first.  Retracement levels run
# from the third-newest pivot across the last leg; extension levels are
# tried until one passes the newest pivot.

ZIGZAG_FIBONACCI_DEFAULTS: Dict[str, Any] = {
    "period": 15,
    "show_zigzag": True,
    "show_fibo": True,
    "enable_236": True,
    "enable_382": True,
    "enable_500": True,
    "enable_618": True,
    "enable_786": True,
}
ZIGZAG_FIBONACCI_METADATA = Metadata("ZigZag with Fibonacci Levels", "ZZ Fibo", True)
_FIB_KEYS = ("enable_236", "enable_382", "enable_500", "enable_618", "enable_786")
_MAX_POINTS = 5


def _zigzag_fibonacci_calculate(bars: BarsLike, inputs: Optional[Dict[str, Any]] = None) -> IndicatorResult:
    frame, p = prepare(bars, ZIGZAG_FIBONACCI_DEFAULTS, inputs)
    period = max(int(p["period"]), 1)
    n = len(frame)
    result = IndicatorResult(metadata=ZIGZAG_FIBONACCI_METADATA)
    if n < 2 * period:
        return result

    ratios = [0.0] + [r for r, key in zip(FIB_RATIOS, _FIB_KEYS) if p[key]]
    shown = len(ratios)
    ratios += list(FIB_EXTENSIONS)

    high, low = frame["high"].to_numpy(), frame["low"].to_numpy()
    hb = highestbars(frame["high"], period).to_numpy()
    lb = lowestbars(frame["low"], period).to_numpy()
    times = frame["time"].to_numpy(dtype=float)

    points: List[Tuple[float, int]] = []    # (value, bar index), newest first
    direction = 0
    for i in range(n):
        ph = high[i] if hb[i] == 0 else math.nan
        pl = low[i] if lb[i] == 0 else math.nan
        if math.isnan(ph) and math.isnan(pl):
            continue
        prev_dir = direction
        if not math.isnan(ph) and math.isnan(pl):
            direction = 1
        elif math.isnan(ph) and not math.isnan(pl):
            direction = -1

        before = points[:2]
        value = float(ph if direction == 1 else pl)
        if direction != prev_dir and prev_dir != 0:
            points.insert(0, (value, i))
            del points[_MAX_POINTS:]
        elif not points:
            points.insert(0, (value, i))
        elif (direction == 1 and value > points[0][0]) or (direction == -1 and value < points[0][0]):
            points[0] = (value, i)

        if p["show_zigzag"] and len(points) >= 2 and points[:1] != before[:1]:
            newest, older = points[0], points[1]
            if before[1:] == [older] and result.lines:
                last = result.lines[-1]
                if last.time2 == times[older[1]] and last.price2 == older[0]:
                    result.lines.pop()
            result.lines.append(LineDrawing(
                time1=float(times[newest[1]]), price1=newest[0],
                time2=float(times[older[1]]), price2=older[0],
                color="#00FF00" if direction == 1 else "#FF0000", width=2,
            ))

    if p["show_fibo"] and len(points) >= 3:
        base, prev = points[1][0], points[2][0]
        diff = prev - base
        start = points[2][1]
        recent = points[0][0]
        stop = False
        for x, ratio in enumerate(ratios):
            if stop and x > shown:
                break
            price = base + diff * ratio if diff != 0 else math.nan
            if math.isnan(price):
                break
            result.lines.append(LineDrawing(
                time1=float(times[start]), price1=price, time2=float(times[-1]), price2=price,
                color="#00FF00", width=1, extend="right",
            ))
            result.labels.append(Label(
                time=float(times[start]), price=price, text=f"{ratio:.3f} ({price:.2f})",
                text_color="#0000FF", style="label_right", size="small",
            ))
            if (direction == 1 and price > recent) or (direction == -1 and price < recent):
                stop = True
    result.extras = {"points": [{"index": i, "value": v} for v, i in reversed(points)]}
    return result


register("zigzag_fibonacci", ZIGZAG_FIBONACCI_METADATA, ZIGZAG_FIBONACCI_DEFAULTS,
         _zigzag_fibonacci_calculate)
