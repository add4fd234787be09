# -*- coding: utf-8 -*-
import numpy as np
import pandas as pd
import pytest


PEAK = 124


def make_trend_bars(rows: int = 250, peak: int = PEAK) -> pd.DataFrame:
    """Close climbs one point per bar up to *peak*, then falls one per bar.

    high / low sit half a point around the close, open at the previous
    close, constant volume.
    """
    i = np.arange(rows, dtype=float)
    close = np.where(i <= peak, 100.0 + i, 100.0 + 2 * peak - i)
    open_ = np.concatenate([[close[0]], close[:-1]])
    return pd.DataFrame(
        {
            "time": 1_700_000_000 + 60 * i,
            "open": open_,
            "high": close + 0.5,
            "low": close - 0.5,
            "close": close,
            "volume": np.full(rows, 1000.0),
        }
    )


def make_ohlcv(rows: int, seed: int) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    idx = pd.date_range("2025-01-01", periods=rows, freq="1min")
    base = 100 + rng.standard_normal(rows).cumsum()
    close = base + rng.normal(0, 0.2, rows)
    open_ = base + rng.normal(0, 0.2, rows)
    high = np.maximum(open_, close) + rng.random(rows) * 0.5
    low = np.minimum(open_, close) - rng.random(rows) * 0.5
    volume = rng.integers(100, 1000, rows)
    df = pd.DataFrame(
        {
            "open": open_,
            "high": high,
            "low": low,
            "close": close,
            "volume": volume,
        },
        index=idx,
    )
    df["timestamp"] = (df.index - pd.Timestamp("1970-01-01")) // pd.Timedelta(seconds=1)
    return df


@pytest.fixture
def trend_bars() -> pd.DataFrame:
    return make_trend_bars()


@pytest.fixture
def random_bars() -> pd.DataFrame:
    return make_ohlcv(400, 11)
