# -*- coding: utf-8 -*-
import numpy as np
import pandas as pd
import pytest

from pandas_ta_pine.stateful import (
    STATEFUL_REGISTRY,
    ehma,
    hma,
    ma,
    mavilimw,
    mavilimw_lengths,
    replay,
    rma,
    t3,
    thma,
    var,
    vma,
    vwma,
    wwma,
    zlema,
    zlsma,
)


def test_hma_on_a_line_lags_two_thirds():
    src = pd.Series(np.arange(60, dtype=float))
    out = hma(src, 16)
    assert out.iloc[:18].isna().all()
    assert np.allclose(out.iloc[18:], src.iloc[18:] - 2.0 / 3.0, rtol=0.0, atol=1e-9)


def test_hull_family_constant_input():
    src = pd.Series(np.full(300, 42.0))
    for fn in (hma, ehma, thma):
        assert fn(src, 20).dropna().to_numpy() == pytest.approx(42.0)


def test_t3_constant_input_is_identity():
    src = pd.Series(np.full(100, 10.0))
    assert t3(src, 5).to_numpy() == pytest.approx(10.0)


def test_mavilimw_lengths_and_warmup():
    assert mavilimw_lengths(3, 5) == (3, 5, 8, 13, 21, 34)
    src = pd.Series(np.arange(200, dtype=float))
    out = mavilimw(src, 3, 5)
    first = out.first_valid_index()
    assert first == sum(mavilimw_lengths(3, 5)) - 6


def test_var_starts_at_source_and_follows_trend():
    src = pd.Series(np.arange(1.0, 101.0))
    out = var(src, 2)
    assert out.iloc[0] == 1.0
    assert out.is_monotonic_increasing
    assert out.iloc[-1] < src.iloc[-1]


def test_vma_tracks_trend_and_holds_when_flat():
    src = pd.Series(np.r_[np.arange(50.0), np.full(20, 49.0)])
    out = vma(src, 6)
    assert out.iloc[0] == 0.0
    assert out.iloc[49] > out.iloc[10]
    assert out.notna().all()


def test_vwma_zero_volume_is_undefined():
    src = pd.Series([1.0, 2.0, 3.0, 4.0])
    vol = pd.Series([0.0, 0.0, 1.0, 1.0])
    out = vwma(src, vol, 2)
    assert np.isnan(out.iloc[1])
    assert out.iloc[2] == pytest.approx(3.0)
    assert out.iloc[3] == pytest.approx(3.5)


def test_ma_dispatch_and_errors():
    src = pd.Series(np.arange(30, dtype=float))
    assert ma("SMA", src, 5).iloc[-1] == pytest.approx(27.0)
    with pytest.raises(ValueError):
        ma("kama", src, 5)
    with pytest.raises(ValueError):
        ma("vwma", src, 5)


def test_zlema_removes_linear_lag():
    src = pd.Series(np.arange(300, dtype=float))
    out = zlema(src, 21)
    assert out.iloc[-1] == pytest.approx(src.iloc[-1], abs=1e-6)


def test_zlsma_on_a_line():
    src = pd.Series(5.0 + np.arange(80, dtype=float))
    out = zlsma(src, 10)
    assert out.iloc[:18].isna().all()
    assert np.allclose(out.dropna(), src.iloc[18:])


def test_wwma_seeds_with_first_sample():
    src = pd.Series([4.0, 8.0, 0.0, 4.0])
    out = wwma(src, 4)
    assert out.to_numpy() == pytest.approx([4.0, 5.0, 3.75, 3.8125])
    assert rma(src, 4).iloc[:3].isna().all()
    assert rma(src, 4).iloc[3] == pytest.approx(4.0)
    assert ma("WWMA", src, 4).to_numpy() == pytest.approx(out.to_numpy())


def test_wwma_registered_for_replay():
    src = pd.Series([4.0, 8.0, 0.0, 4.0])
    out = replay("wwma", {"close": src}, {"length": 4})
    assert list(out.columns) == ["WWMA_4"]
    assert out.iloc[:, 0].to_numpy() == pytest.approx([4.0, 5.0, 3.75, 3.8125])
    assert "wwma" in STATEFUL_REGISTRY
