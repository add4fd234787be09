# -*- coding: utf-8 -*-
import math

import numpy as np
import pandas as pd
import pytest

from pandas_ta_pine.stateful import (
    STATEFUL_REGISTRY,
    atr,
    correlation,
    ema,
    fold,
    highest,
    highestbars,
    linreg,
    lowest,
    lowestbars,
    replay,
    resolve_output_names,
    rma,
    sma,
    stdev,
    wma,
)
from pandas_ta_pine.stateful._rolling import sma_update_raw, window_make
from pandas_ta_pine.stateful._volatility import tr


def test_sma_warmup_and_values():
    s = pd.Series([1.0, 2.0, 3.0, 4.0, 5.0])
    out = sma(s, 3)
    assert out.iloc[:2].isna().all()
    assert out.iloc[2:].tolist() == pytest.approx([2.0, 3.0, 4.0])
    assert out.name == "SMA_3"


def test_wma_weights_newest_most():
    out = wma(pd.Series([1.0, 2.0, 3.0]), 3)
    assert out.iloc[-1] == pytest.approx((1 * 1 + 2 * 2 + 3 * 3) / 6.0)


def test_length_is_clamped_to_one():
    s = pd.Series([4.0, 5.0])
    assert sma(s, 0).tolist() == [4.0, 5.0]


def test_constant_input_converges():
    s = pd.Series(np.full(200, 7.0))
    for out in (sma(s, 10), wma(s, 10), ema(s, 10), rma(s, 10)):
        assert out.dropna().to_numpy() == pytest.approx(7.0)


def test_ema_seeds_on_first_sample_rma_on_mean():
    s = pd.Series([2.0, 4.0, 6.0, 8.0])
    e = ema(s, 3)
    assert e.iloc[0] == 2.0
    assert e.iloc[1] == pytest.approx(0.5 * 4.0 + 0.5 * 2.0)
    r = rma(s, 3)
    assert r.iloc[:2].isna().all()
    assert r.iloc[2] == pytest.approx(4.0)
    assert r.iloc[3] == pytest.approx(4.0 + (8.0 - 4.0) / 3.0)


def test_fold_skips_nan_without_touching_state():
    s = pd.Series([1.0, np.nan, 3.0, 5.0])
    out = fold(sma_update_raw, window_make(2), s)
    assert math.isnan(out.iloc[1])
    assert out.iloc[2] == pytest.approx(2.0)
    assert out.iloc[3] == pytest.approx(4.0)


def test_highest_lowest_bound_window(random_bars):
    close = random_bars["close"].reset_index(drop=True)
    hi, lo = highest(close, 10), lowest(close, 10)
    rolled = close.rolling(10)
    assert np.allclose(hi.dropna(), rolled.max().dropna())
    assert np.allclose(lo.dropna(), rolled.min().dropna())
    assert (hi.dropna() >= lo.dropna()).all()


def test_highestbars_ties_pick_most_recent():
    s = pd.Series([5.0, 1.0, 5.0, 2.0])
    out = highestbars(s, 4)
    assert out.iloc[-1] == -1.0
    assert lowestbars(pd.Series([1.0, 3.0, 1.0]), 3).iloc[-1] == 0.0


def test_stdev_is_population():
    s = pd.Series([2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0])
    assert stdev(s, 8).iloc[-1] == pytest.approx(2.0)


def test_linreg_on_a_line_reproduces_it():
    s = pd.Series(3.0 + 2.0 * np.arange(20))
    out = linreg(s, 5)
    assert np.allclose(out.dropna(), s.iloc[4:])
    shifted = linreg(s, 5, offset=1)
    assert shifted.iloc[-1] == pytest.approx(s.iloc[-2])


def test_linreg_single_sample_window():
    out = linreg(pd.Series([1.0, 9.0]), 1)
    assert out.tolist() == [1.0, 9.0]


def test_correlation_signs_and_flat():
    a = pd.Series(np.arange(30, dtype=float))
    assert correlation(a, 2 * a + 1, 10).dropna().to_numpy() == pytest.approx(1.0)
    assert correlation(a, -a, 10).dropna().to_numpy() == pytest.approx(-1.0)
    flat = correlation(a, pd.Series(np.full(30, 3.0)), 10)
    assert flat.isna().all()


def test_true_range_first_bar_is_high_minus_low(trend_bars):
    values = tr(trend_bars)
    assert values.iloc[0] == pytest.approx(1.0)
    assert values.iloc[1:].to_numpy() == pytest.approx(1.5)


def test_atr_seed_and_convergence(trend_bars):
    values = atr(trend_bars, 10)
    assert values.iloc[:9].isna().all()
    assert values.iloc[9] == pytest.approx((1.0 + 9 * 1.5) / 10)
    assert values.iloc[-1] == pytest.approx(1.5, abs=1e-6)


def test_replay_unknown_kind_and_missing_inputs():
    with pytest.raises(ValueError):
        replay("nope", {"close": pd.Series([1.0])})
    with pytest.raises(ValueError):
        replay("correlation", {"a": pd.Series([1.0])})


def test_registry_sma_matches_series_wrapper(random_bars):
    close = random_bars["close"]
    out = replay("sma", {"close": close}, {"length": 7})
    assert list(out.columns) == ["SMA_7"]
    assert np.allclose(out.iloc[:, 0].dropna(), sma(close, 7).dropna())
    assert "sma" in STATEFUL_REGISTRY


def test_resolve_output_names():
    names, err = resolve_output_names(["A", "B"], {"prefix": "x", "suffix": "y"})
    assert err is None and names == ["x_A_y", "x_B_y"]
    names, err = resolve_output_names(["A", "B"], {"col_names": ("only",)})
    assert names is None and err


def test_replay_resumes_across_a_gap():
    close = pd.Series([1.0, 2.0, np.nan, 4.0])
    out = replay("sma", {"close": close}, {"length": 2}).iloc[:, 0]
    assert math.isnan(out.iloc[2])
    assert out.iloc[3] == pytest.approx(3.0)
