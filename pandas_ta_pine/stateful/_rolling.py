# -*- coding: utf-8 -*-
"""pandas-ta-pine stateful -- rolling-window primitives.

Each section follows the pattern:
  1. State dataclass  (if beyond what _base already provides)
  2. ``*_update_raw(state, x)`` single-step update
  3. Series wrapper folding the update over the bar index
  4. STATEFUL_REGISTRY["<kind>"] = StatefulIndicator(...)   (where the
     transform is useful straight from a bar frame)

Warmup shared by every window: NaN for i < length - 1, finite afterwards
for finite input.
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
    fold,
    replay,
    StatefulIndicator,
    STATEFUL_REGISTRY,
)


# ===========================================================================
# Window state  (shared by SMA / WMA / STDEV / HIGHEST / LOWEST / LINREG)
# ===========================================================================

@dataclass
class WindowState:
    length: int
    buf: deque = field(default_factory=deque)
    offset: int = 0


def window_make(length: int, offset: int = 0) -> WindowState:
    length = max(int(length), 1)
    return WindowState(length=length, buf=deque(maxlen=length), offset=offset)


def _push(state: WindowState, x: float) -> bool:
    """Append *x*; True once the window is full."""
    state.buf.append(x)
    return len(state.buf) == state.length


# ===========================================================================
# SMA / WMA
# ===========================================================================

def sma_update_raw(state: WindowState, x: float) -> Tuple[Optional[float], WindowState]:
    if not _push(state, x):
        return None, state
    return sum(state.buf) / state.length, state


def wma_update_raw(state: WindowState, x: float) -> Tuple[Optional[float], WindowState]:
    if not _push(state, x):
        return None, state
    n = state.length
    num = sum((k + 1) * v for k, v in enumerate(state.buf))
    return num / (n * (n + 1) / 2.0), state


def sma(src: pd.Series, length: int) -> pd.Series:
    length = max(int(length), 1)
    return fold(sma_update_raw, window_make(length), src, name=f"SMA_{length}")


def wma(src: pd.Series, length: int) -> pd.Series:
    length = max(int(length), 1)
    return fold(wma_update_raw, window_make(length), src, name=f"WMA_{length}")


# ===========================================================================
# STDEV  (population)
# ===========================================================================

def stdev_update_raw(state: WindowState, x: float) -> Tuple[Optional[float], WindowState]:
    if not _push(state, x):
        return None, state
    n = state.length
    mean = sum(state.buf) / n
    var = sum((v - mean) ** 2 for v in state.buf) / n
    return math.sqrt(var), state


def stdev(src: pd.Series, length: int) -> pd.Series:
    length = max(int(length), 1)
    return fold(stdev_update_raw, window_make(length), src, name=f"STDEV_{length}")


# ===========================================================================
# HIGHEST / LOWEST and their bar offsets
# ===========================================================================
# Offsets are 0 (current bar) or negative.  Ties resolve to the most recent
# bar.

def highest_update_raw(state: WindowState, x: float) -> Tuple[Optional[float], WindowState]:
    if not _push(state, x):
        return None, state
    return max(state.buf), state


def lowest_update_raw(state: WindowState, x: float) -> Tuple[Optional[float], WindowState]:
    if not _push(state, x):
        return None, state
    return min(state.buf), state


def _extreme_offset(buf: deque, pick) -> int:
    target = pick(buf)
    last = len(buf) - 1
    for k in range(last, -1, -1):
        if buf[k] == target:
            return k - last
    return 0


def highestbars_update_raw(state: WindowState, x: float) -> Tuple[Optional[float], WindowState]:
    if not _push(state, x):
        return None, state
    return float(_extreme_offset(state.buf, max)), state


def lowestbars_update_raw(state: WindowState, x: float) -> Tuple[Optional[float], WindowState]:
    if not _push(state, x):
        return None, state
    return float(_extreme_offset(state.buf, min)), state


def highest(src: pd.Series, length: int) -> pd.Series:
    length = max(int(length), 1)
    return fold(highest_update_raw, window_make(length), src, name=f"HIGHEST_{length}")


def lowest(src: pd.Series, length: int) -> pd.Series:
    length = max(int(length), 1)
    return fold(lowest_update_raw, window_make(length), src, name=f"LOWEST_{length}")


def highestbars(src: pd.Series, length: int) -> pd.Series:
    length = max(int(length), 1)
    return fold(highestbars_update_raw, window_make(length), src, name=f"HIGHESTBARS_{length}")


def lowestbars(src: pd.Series, length: int) -> pd.Series:
    length = max(int(length), 1)
    return fold(lowestbars_update_raw, window_make(length), src, name=f"LOWESTBARS_{length}")


# ===========================================================================
# LINREG  (least squares over x = 0..length-1, evaluated at length-1-offset)
# ===========================================================================

def linreg_update_raw(state: WindowState, x: float) -> Tuple[Optional[float], WindowState]:
    if not _push(state, x):
        return None, state
    n = state.length
    sum_x = n * (n - 1) / 2.0
    sum_xx = (n - 1) * n * (2 * n - 1) / 6.0
    sum_y = sum(state.buf)
    sum_xy = sum(k * v for k, v in enumerate(state.buf))
    denom = n * sum_xx - sum_x * sum_x
    slope = 0.0 if denom == 0 else (n * sum_xy - sum_x * sum_y) / denom
    intercept = (sum_y - slope * sum_x) / n
    return intercept + slope * (n - 1 - state.offset), state


def linreg(src: pd.Series, length: int, offset: int = 0) -> pd.Series:
    length = max(int(length), 1)
    return fold(linreg_update_raw, window_make(length, int(offset)), src,
                name=f"LINREG_{length}_{offset}")


# ===========================================================================
# CORRELATION  (Pearson over paired windows)
# ===========================================================================
# Inputs: a, b.  NaN when either window has zero variance.

@dataclass
class CorrelationState:
    length: int
    a_buf: deque = field(default_factory=deque)
    b_buf: deque = field(default_factory=deque)


def _correlation_init(params: Dict[str, Any]) -> CorrelationState:
    length = max(_as_int(_param(params, "length", 20), 20), 1)
    return CorrelationState(length=length, a_buf=deque(maxlen=length), b_buf=deque(maxlen=length))


def _correlation_update(
    state: CorrelationState, bar: Dict[str, float], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], CorrelationState]:
    state.a_buf.append(bar["a"])
    state.b_buf.append(bar["b"])
    n = state.length
    if len(state.a_buf) < n:
        return [None], state
    mean_a = sum(state.a_buf) / n
    mean_b = sum(state.b_buf) / n
    cov = var_a = var_b = 0.0
    for a, b in zip(state.a_buf, state.b_buf):
        da, db = a - mean_a, b - mean_b
        cov += da * db
        var_a += da * da
        var_b += db * db
    if var_a == 0 or var_b == 0:
        return [None], state
    return [cov / math.sqrt(var_a * var_b)], state


def _correlation_output_names(params: Dict[str, Any]) -> List[str]:
    length = _as_int(_param(params, "length", 20), 20)
    return [f"CORREL_{length}"]


STATEFUL_REGISTRY["correlation"] = StatefulIndicator(
    kind="correlation",
    inputs=("a", "b"),
    init=_correlation_init,
    update=_correlation_update,
    output_names=_correlation_output_names,
)


def correlation(a: pd.Series, b: pd.Series, length: int) -> pd.Series:
    out = replay("correlation", {"a": a, "b": b}, {"length": length})
    return out.iloc[:, 0]


# ===========================================================================
# SMA / WMA from a bar frame  (close only)
# ===========================================================================
# Default length = 10.

def _window_init(params: Dict[str, Any]) -> WindowState:
    return window_make(_as_int(_param(params, "length", 10), 10))


def _make_close_update(step):
    def _update(state: WindowState, bar: Dict[str, float], params: Dict[str, Any]):
        value, state = step(state, bar["close"])
        return [value], state
    return _update


def _make_names(prefix: str):
    def _names(params: Dict[str, Any]) -> List[str]:
        return [f"{prefix}_{_as_int(_param(params, 'length', 10), 10)}"]
    return _names


for _kind, _step in (("sma", sma_update_raw), ("wma", wma_update_raw),
                     ("stdev", stdev_update_raw), ("linreg", linreg_update_raw)):
    STATEFUL_REGISTRY[_kind] = StatefulIndicator(
        kind=_kind,
        inputs=("close",),
        init=_window_init,
        update=_make_close_update(_step),
        output_names=_make_names(_kind.upper()),
    )
