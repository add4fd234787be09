# -*- coding: utf-8 -*-
import numpy as np
import pandas as pd
import pytest

from pandas_ta_pine.stateful import mfi, qqe, rci, rsi, stc, stoch, stoch_vx3, stochrsi


def test_rsi_bounds(random_bars):
    out = rsi(random_bars["close"], 14).dropna()
    assert ((out >= 0) & (out <= 100)).all()


def test_rsi_first_value_and_monotone_extremes():
    up = pd.Series(np.arange(30, dtype=float))
    out = rsi(up, 14)
    assert out.iloc[:14].isna().all()
    assert out.iloc[14:].to_numpy() == pytest.approx(100.0)
    assert rsi(-up, 14).dropna().to_numpy() == pytest.approx(0.0)


def test_rsi_flat_is_fifty():
    assert rsi(pd.Series(np.full(30, 5.0)), 14).dropna().to_numpy() == pytest.approx(50.0)


def test_stoch_bounds_and_zero_range(random_bars):
    k = stoch(random_bars["close"], random_bars["high"], random_bars["low"], 14).dropna()
    assert ((k >= 0) & (k <= 100)).all()
    flat = pd.Series(np.full(20, 3.0))
    assert stoch(flat, flat, flat, 5).dropna().to_numpy() == pytest.approx(50.0)
    assert stoch(flat, flat, flat, 5, fallback=np.nan).isna().all()


def test_stochrsi_columns_and_bounds(random_bars):
    out = stochrsi(random_bars["close"], 14, 14, 3, 3)
    assert list(out.columns) == ["STOCHRSIk_14_14_3_3", "STOCHRSId_14_14_3_3"]
    k = out.iloc[:, 0].dropna()
    assert len(k) > 0 and ((k >= 0) & (k <= 100)).all()


def test_mfi_bounds_first_value_and_flat(random_bars):
    hlc3 = (random_bars["high"] + random_bars["low"] + random_bars["close"]) / 3.0
    out = mfi(hlc3, random_bars["volume"].astype(float), 14)
    assert out.iloc[:14].isna().all()
    assert out.iloc[14:].notna().all()
    assert ((out.dropna() >= 0) & (out.dropna() <= 100)).all()
    flat = pd.Series(np.full(20, 1.0))
    assert mfi(flat, flat, 5).dropna().to_numpy() == pytest.approx(50.0)


def test_rci_extremes():
    up = pd.Series(np.arange(20, dtype=float))
    assert rci(up, 9).dropna().to_numpy() == pytest.approx(100.0)
    assert rci(-up, 9).dropna().to_numpy() == pytest.approx(-100.0)
    assert rci(up, 1).to_numpy() == pytest.approx(0.0)


def test_stc_range_and_warmup(random_bars):
    out = stc(random_bars["close"], 10, 23, 50, 0.5)
    assert out.iloc[:50].isna().all()
    defined = out.dropna()
    assert len(defined) > 0
    assert ((defined >= 0) & (defined <= 100)).all()


def test_stoch_vx3_columns_and_bounds(random_bars):
    out = stoch_vx3(random_bars, 14, 3, 3, 3)
    assert out.shape[1] == 2
    values = out.dropna().to_numpy()
    assert ((values >= 0) & (values <= 100)).all()
    k_raw_early = out.iloc[6, 0]
    assert k_raw_early == pytest.approx(0.0)


def test_qqe_outputs(random_bars):
    out = qqe(random_bars["close"], 14, 5, 4.236)
    assert list(out.columns) == ["QQE_rsi_ma", "QQE_trail", "QQE_trend", "QQE_long", "QQE_short"]
    trend = out["QQE_trend"].dropna()
    assert set(trend.unique()) <= {1.0, -1.0}
    both = out[["QQE_long", "QQE_short"]].dropna()
    assert (both["QQE_long"] <= both["QQE_short"]).all()
