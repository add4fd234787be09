# -*- coding: utf-8 -*-
"""pandas-ta-pine stateful -- pivots and zig-zag threading.

Pivots are strict: the center must be strictly greater (high) or strictly
lower (low) than every other sample in ``[i - left, i + right]``, so equal
neighbours never form a pivot.  The pivot value is carried at its own bar
``i`` and is only known once bar ``i + right`` exists.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import List, Optional

from numba import njit
from numpy import asarray, full, isnan, nan
from pandas import Series


@dataclass(frozen=True)
class ZigZagPivot:
    index: int
    value: float
    kind: str   # "high" | "low"


# Strict pivot scan over a centered window.
@njit(cache=True)
def nb_pivots(x, left, right, high):
    m = x.size
    out = full(m, nan)
    for i in range(left, m - right):
        center = x[i]
        if isnan(center):
            continue
        found = True
        for j in range(i - left, i + right + 1):
            if j == i:
                continue
            v = x[j]
            if isnan(v):
                found = False
                break
            if high and v >= center:
                found = False
                break
            if not high and v <= center:
                found = False
                break
        if found:
            out[i] = center
    return out


def pivothigh(src: Series, left: int, right: int) -> Series:
    values = asarray(src, dtype=float)
    out = nb_pivots(values, int(left), int(right), True)
    return Series(out, index=src.index, name=f"PIVH_{left}_{right}")


def pivotlow(src: Series, left: int, right: int) -> Series:
    values = asarray(src, dtype=float)
    out = nb_pivots(values, int(left), int(right), False)
    return Series(out, index=src.index, name=f"PIVL_{left}_{right}")


# ===========================================================================
# ZIGZAG
# ===========================================================================
# Same kind as the last point -> replace it when more extreme.
# Opposite kind -> append when the move from the last point is at least
# `deviation` percent.  A bounded deque evicts the oldest point.

@dataclass
class ZigZagState:
    deviation: float = 0.0
    points: deque = field(default_factory=deque)


def zigzag_make(deviation: float = 0.0, max_pivots: Optional[int] = None) -> ZigZagState:
    maxlen = int(max_pivots) if max_pivots else None
    return ZigZagState(deviation=float(deviation), points=deque(maxlen=maxlen))


def zigzag_update_raw(state: ZigZagState, pivot: ZigZagPivot) -> ZigZagState:
    points = state.points
    if not points:
        points.append(pivot)
        return state
    last = points[-1]
    if pivot.kind == last.kind:
        if (pivot.kind == "high" and pivot.value > last.value) or \
                (pivot.kind == "low" and pivot.value < last.value):
            points[-1] = pivot
        return state
    if pivot.index == last.index:
        return state
    if last.value != 0:
        move = abs(pivot.value - last.value) / abs(last.value) * 100.0
        if move < state.deviation:
            return state
    points.append(pivot)
    return state


def zigzag(high: Series, low: Series, left: int, right: int,
           deviation: float = 0.0, max_pivots: Optional[int] = None) -> List[ZigZagPivot]:
    """Alternating high / low pivots, oldest first.

    Lows are threaded before highs on the same bar.
    """
    ph = pivothigh(high, left, right).to_numpy()
    pl = pivotlow(low, left, right).to_numpy()
    state = zigzag_make(deviation, max_pivots)
    for i in range(ph.size):
        if not isnan(pl[i]):
            state = zigzag_update_raw(state, ZigZagPivot(i, float(pl[i]), "low"))
        if not isnan(ph[i]):
            state = zigzag_update_raw(state, ZigZagPivot(i, float(ph[i]), "high"))
    return list(state.points)
