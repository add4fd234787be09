# -*- coding: utf-8 -*-
import numpy as np
import pandas as pd

from pandas_ta_pine.stateful import (
    ZigZagPivot,
    pivothigh,
    pivotlow,
    zigzag,
    zigzag_make,
    zigzag_update_raw,
)


def test_pivothigh_is_strict_and_carried_at_its_bar():
    s = pd.Series([1.0, 2.0, 5.0, 2.0, 1.0, 3.0, 3.0, 1.0, 0.0])
    out = pivothigh(s, 2, 2)
    assert out.iloc[2] == 5.0
    assert out.drop(index=2).isna().all()


def test_pivotlow_needs_full_window():
    s = pd.Series([0.0, 2.0, 1.0, 2.0, 3.0])
    out = pivotlow(s, 1, 1)
    assert out.iloc[2] == 1.0
    assert np.isnan(out.iloc[0])
    assert np.isnan(out.iloc[-1])


def test_pivot_window_with_nan_blocks_pivot():
    s = pd.Series([1.0, np.nan, 5.0, 2.0, 1.0])
    assert pivothigh(s, 2, 2).isna().all()


def test_zigzag_update_replaces_same_kind_when_more_extreme():
    state = zigzag_make()
    state = zigzag_update_raw(state, ZigZagPivot(1, 10.0, "high"))
    state = zigzag_update_raw(state, ZigZagPivot(3, 9.0, "high"))
    assert list(state.points) == [ZigZagPivot(1, 10.0, "high")]
    state = zigzag_update_raw(state, ZigZagPivot(5, 12.0, "high"))
    assert list(state.points) == [ZigZagPivot(5, 12.0, "high")]


def test_zigzag_deviation_filter():
    state = zigzag_make(deviation=5.0)
    state = zigzag_update_raw(state, ZigZagPivot(1, 100.0, "high"))
    state = zigzag_update_raw(state, ZigZagPivot(3, 98.0, "low"))
    assert len(state.points) == 1
    state = zigzag_update_raw(state, ZigZagPivot(5, 90.0, "low"))
    assert [p.kind for p in state.points] == ["high", "low"]


def test_zigzag_alternates_and_is_bounded():
    t = np.arange(200, dtype=float)
    wave = 100.0 + 10.0 * np.sin(t / 5.0)
    high, low = pd.Series(wave + 0.5), pd.Series(wave - 0.5)
    points = zigzag(high, low, 3, 3)
    assert len(points) > 4
    kinds = [p.kind for p in points]
    assert all(a != b for a, b in zip(kinds, kinds[1:]))
    assert [p.index for p in points] == sorted(p.index for p in points)
    assert len(zigzag(high, low, 3, 3, max_pivots=3)) == 3


def test_zigzag_max_pivots_keeps_newest():
    t = np.arange(200, dtype=float)
    wave = 100.0 + 10.0 * np.sin(t / 5.0)
    high, low = pd.Series(wave + 0.5), pd.Series(wave - 0.5)
    full = zigzag(high, low, 3, 3)
    assert zigzag(high, low, 3, 3, max_pivots=3) == full[-3:]
