# -*- coding: utf-8 -*-
import warnings

import numpy as np
import pandas as pd
import pytest

from pandas_ta_pine.stateful import (
    TrailState,
    alphatrend,
    autotrail,
    darvas,
    halftrend,
    ott,
    supertrend,
    trail_step,
)
from conftest import PEAK, make_ohlcv


def first_flip(direction: pd.Series, to: float) -> int:
    d = direction.to_numpy()
    for i in range(1, d.size):
        if d[i] == to and d[i - 1] == -to:
            return i
    return -1


def test_trail_step_ratchets_and_flips():
    state = TrailState()
    state = trail_step(state, close=10.0, mid=9.0, long_stop=8.0, short_stop=12.0)
    assert (state.direction, state.level) == (1, 8.0)
    state = trail_step(state, close=11.0, mid=10.0, long_stop=7.0, short_stop=13.0)
    assert state.level == 8.0
    state = trail_step(state, close=7.5, mid=8.0, long_stop=6.0, short_stop=9.5)
    assert (state.direction, state.level) == (-1, 9.5)


def test_supertrend_flips_after_the_peak(trend_bars):
    out = supertrend(trend_bars, 10, 3.0)
    assert list(out.columns) == ["SUPERT_10_3.0", "SUPERTd_10_3.0", "SUPERTl_10_3.0", "SUPERTs_10_3.0"]
    direction = out.iloc[:, 1]
    assert direction.iloc[:9].isna().all()
    assert (direction.iloc[9:PEAK + 1] == 1).all()
    flip = first_flip(direction, -1.0)
    assert PEAK < flip <= PEAK + 20
    level, long_, short = out.iloc[:, 0], out.iloc[:, 2], out.iloc[:, 3]
    assert np.allclose(level[direction == 1], long_[direction == 1])
    assert np.allclose(level[direction == -1], short[direction == -1])


def test_alphatrend_turns_down_after_the_peak(trend_bars):
    out = alphatrend(trend_bars, 1.0, 14)
    line, lagged = out.iloc[:, 0], out.iloc[:, 1]
    assert line.iloc[PEAK + 30] < line.iloc[PEAK]
    assert np.allclose(lagged.iloc[20:], line.shift(2).iloc[20:], equal_nan=True)


def test_alphatrend_without_volume_warns(trend_bars):
    bars = trend_bars.drop(columns=["volume"])
    with pytest.warns(UserWarning):
        alphatrend(bars, 1.0, 14)
    with warnings.catch_warnings():
        warnings.simplefilter("error", UserWarning)
        alphatrend(bars, 1.0, 14, use_rsi=True)


def test_halftrend_direction_and_channel(trend_bars):
    out = halftrend(trend_bars, 2, 2.0, 100)
    ht, direction, upper, lower = (out.iloc[:, j] for j in range(4))
    assert set(direction.dropna().unique()) <= {1.0, -1.0}
    assert direction.iloc[PEAK] == 1.0
    assert direction.iloc[-1] == -1.0
    assert PEAK < first_flip(direction, -1.0) <= PEAK + 10
    assert (upper.dropna() >= ht[upper.notna()]).all()
    assert (lower.dropna() <= ht[lower.notna()]).all()


def test_ott_columns_and_direction(trend_bars):
    out = ott(trend_bars["close"], 2, 1.4)
    assert list(out.columns) == ["OTTmavg", "OTT", "OTTd", "OTTl", "OTTs"]
    direction = out["OTTd"]
    assert direction.iloc[PEAK] == 1.0
    assert direction.iloc[-1] == -1.0


@pytest.mark.parametrize("trail_type", ["ATR", "Percent", "Price"])
def test_autotrail_types(trend_bars, trail_type):
    out = autotrail(trend_bars, trail_type, 14, 1.0, 2.0, 5)
    level, direction = out.iloc[:, 0], out.iloc[:, 1]
    assert direction.iloc[-1] == -1.0
    up = direction == 1
    assert (level[up] <= trend_bars["close"][up]).all()


def test_autotrail_unknown_type(trend_bars):
    with pytest.raises(ValueError):
        autotrail(trend_bars, "Chandelier")


def test_darvas_box_contains_recent_range(random_bars):
    frame = random_bars.reset_index(drop=True)
    out = darvas(frame, 5)
    top, bottom = out.iloc[:, 0], out.iloc[:, 1]
    assert top.iloc[:5].isna().all()
    defined = top.notna()
    assert (top[defined] >= bottom[defined]).all()


def test_darvas_starts_on_box_length(trend_bars):
    out = darvas(trend_bars, 5)
    top, bottom = out.iloc[:, 0], out.iloc[:, 1]
    assert top.iloc[:5].isna().all()
    assert top.iloc[5] == trend_bars["high"].iloc[5]
    assert bottom.iloc[5] == trend_bars["low"].iloc[1:6].min()


@pytest.mark.parametrize("trail_type", ["ATR", "Percent", "Price"])
def test_autotrail_starts_after_atr_and_lookback(trend_bars, trail_type):
    level = autotrail(trend_bars, trail_type, 14, 1.0, 2.0, 5).iloc[:, 0]
    assert level.iloc[:14].isna().all()
    assert level.first_valid_index() == 14
    longer = autotrail(trend_bars, trail_type, 5, 1.0, 2.0, 20).iloc[:, 0]
    assert longer.first_valid_index() == 20


def assert_trail_consistent(close: pd.Series, level: pd.Series, direction: pd.Series) -> int:
    c, lv, d = close.to_numpy(), level.to_numpy(), direction.to_numpy()
    flips = 0
    for i in range(1, d.size):
        if np.isnan(d[i]) or np.isnan(d[i - 1]):
            continue
        if d[i] == d[i - 1] == 1:
            assert lv[i] >= lv[i - 1]
            assert c[i] >= lv[i - 1]
        elif d[i] == d[i - 1] == -1:
            assert lv[i] <= lv[i - 1]
            assert c[i] <= lv[i - 1]
        elif d[i] == -1:
            assert c[i] < lv[i - 1]
            flips += 1
        else:
            assert c[i] > lv[i - 1]
            flips += 1
    return flips


def test_trailing_stops_on_a_random_walk():
    bars = make_ohlcv(1500, 7).reset_index(drop=True)
    st = supertrend(bars, 10, 3.0)
    assert assert_trail_consistent(bars["close"], st.iloc[:, 0], st.iloc[:, 1]) >= 2
    for trail_type in ("ATR", "Percent", "Price"):
        at = autotrail(bars, trail_type, 14, 1.0, 2.0, 5)
        assert assert_trail_consistent(bars["close"], at.iloc[:, 0], at.iloc[:, 1]) >= 2
