# -*- coding: utf-8 -*-
import json
import math

import numpy as np
import pandas as pd
import pytest

import pandas_ta_pine as ta
from pandas_ta_pine import Bar, Category, INDICATOR_REGISTRY, calculate, source, to_frame
from pandas_ta_pine.indicators import crossover, crossunder
from conftest import PEAK, make_trend_bars

ALL_KINDS = sorted(INDICATOR_REGISTRY)

# Every plot of these indicators sits behind a warmup of more than 4 bars.
WARMUP_KINDS = [k for k in ALL_KINDS if k not in ("ema", "supertrend")]


def finite(points):
    return np.array([p.value for p in points if not math.isnan(p.value)])


def test_category_matches_registry():
    kinds = [k for group in Category.values() for k in group]
    assert sorted(kinds) == ALL_KINDS
    assert len(ALL_KINDS) == 27


@pytest.mark.parametrize("kind", ALL_KINDS)
def test_one_point_per_bar(kind, trend_bars):
    result = calculate(kind, trend_bars)
    times = trend_bars["time"].tolist()
    for points in result.plots.values():
        assert [p.time for p in points] == times


@pytest.mark.parametrize("kind", WARMUP_KINDS)
def test_short_input_is_all_nan(kind):
    bars = make_trend_bars(rows=4)
    result = calculate(kind, bars)
    for key, points in result.plots.items():
        assert len(points) == 4
        assert all(math.isnan(p.value) for p in points), key


@pytest.mark.parametrize("kind", ALL_KINDS)
def test_calculate_is_idempotent(kind, random_bars):
    before = random_bars.copy()
    first = calculate(kind, random_bars).to_dict()
    second = calculate(kind, random_bars).to_dict()
    assert first == second
    pd.testing.assert_frame_equal(random_bars, before)


@pytest.mark.parametrize("kind", [k for k in ALL_KINDS if INDICATOR_REGISTRY[k].metadata.overlay])
def test_overlay_tracks_price_magnitude(kind, random_bars):
    result = calculate(kind, random_bars)
    close_mean = random_bars["close"].mean()
    for key, points in result.plots.items():
        values = finite(points)
        if values.size:
            assert abs(values.mean() - close_mean) < 0.5 * close_mean, key


def test_unknown_kind_raises(trend_bars):
    with pytest.raises(ValueError):
        calculate("ichimoku", trend_bars)


def test_inputs_override_defaults(trend_bars):
    default = calculate("sma", trend_bars)
    custom = calculate("sma", trend_bars, {"length": 3, "ma_type": None})
    assert math.isnan(default.plots["sma"][3].value)
    assert custom.plots["sma"][3].value == pytest.approx(trend_bars["close"].iloc[1:4].mean())


def test_smoothing_with_bollinger_bands(trend_bars):
    result = calculate("rsi", trend_bars, {"ma_type": "SMA + Bollinger Bands"})
    upper, lower = finite(result.plots["bb_upper"]), finite(result.plots["bb_lower"])
    assert upper.size and (upper >= lower).all()
    assert any(f.plot1 == "bb_upper" for f in result.fills)


def test_supertrend_catalog_marks_the_flip_after_the_peak(trend_bars):
    result = calculate("supertrend", trend_bars)
    times = trend_bars["time"].to_numpy()
    assert [m.text for m in result.markers] == ["Sell"]
    marker = result.markers[0]
    assert (marker.position, marker.shape) == ("aboveBar", "labelDown")
    assert PEAK < int(np.searchsorted(times, marker.time)) <= PEAK + 10
    up = finite(result.plots["up_trend"])
    assert np.all(np.diff(up) >= 0)


def test_alphatrend_sell_signal_near_the_peak(trend_bars):
    result = calculate("alphatrend", trend_bars)
    times = trend_bars["time"].to_numpy()
    sells = [m for m in result.markers if m.text == "Sell"]
    assert sells
    first = int(np.searchsorted(times, sells[0].time))
    assert PEAK < first <= PEAK + 20


def test_alphatrend_without_volume_warns(trend_bars):
    with pytest.warns(UserWarning):
        calculate("alphatrend", trend_bars.drop(columns=["volume"]))


def test_halftrend_sell_marker_after_warmup(trend_bars):
    result = calculate("halftrend", trend_bars)
    texts = [m.text for m in result.markers]
    assert texts == ["Sell"]


def test_ott_warmups_and_fill(trend_bars):
    result = calculate("ott", trend_bars)
    support = np.array([p.value for p in result.plots["support"]])
    line = np.array([p.value for p in result.plots["ott"]])
    assert np.isnan(support[:11]).all() and not np.isnan(support[11:]).any()
    assert np.isnan(line[:13]).all() and not np.isnan(line[13:]).any()
    (fill,) = result.fills
    assert (fill.plot1, fill.plot2) == ("support", "ott")
    assert len(fill.colors) == len(trend_bars)
    assert set(fill.colors[:13]) == {"transparent"}


def test_ott_highlight_colors(trend_bars):
    highlighted = {p.color for p in calculate("ott", trend_bars).plots["ott"] if p.color}
    assert highlighted == {"#008000", "#FF0000"}
    plain = {p.color for p in calculate("ott", trend_bars, {"highlight": False}).plots["ott"] if p.color}
    assert plain == {"#B800D9"}


def test_ott_signal_options(random_bars):
    times = random_bars["timestamp"].to_numpy(dtype=float)
    default = calculate("ott", random_bars).markers
    crossings = calculate("ott", random_bars, {"show_signals_c": True}).markers
    turns = calculate("ott", random_bars, {"show_signals_r": True}).markers
    assert set(default) <= set(crossings) and len(crossings) > len(default)
    assert set(default) <= set(turns) and len(turns) > len(default)
    for marker in default + crossings + turns:
        assert marker.time >= times[14]


def test_hull_suite_modes(trend_bars):
    for mode in ("Hma", "Ehma", "Thma"):
        result = calculate("hull_suite", trend_bars, {"mode": mode, "length": 20, "color_bars": True})
        assert finite(result.plots["mhull"]).size
        assert result.bar_colors
    with pytest.raises(ValueError):
        calculate("hull_suite", trend_bars, {"mode": "Kama"})


def test_ema_ribbon_plots(trend_bars):
    result = calculate("ema_ribbon", trend_bars)
    assert list(result.plots) == [f"ema_{n}" for n in ta.EMA_RIBBON_LENGTHS]


def test_darvas_boxes_cover_defined_bars(random_bars):
    result = calculate("darvas_box", random_bars)
    assert result.boxes
    for box in result.boxes:
        assert box.time1 <= box.time2
        assert box.price1 >= box.price2


def test_zigzag_drawings():
    t = np.arange(200, dtype=float)
    wave = 100.0 + 10.0 * np.sin(t / 5.0)
    bars = pd.DataFrame({"time": t, "open": wave, "high": wave + 0.5, "low": wave - 0.5, "close": wave})
    result = calculate("zigzag", bars, {"deviation": 1.0})
    pivots = result.extras["pivots"]
    assert len(pivots) > 4
    extra = 1 if result.extras["extension"] is not None else 0
    assert len(result.lines) == len(pivots) + extra - 1
    assert len(result.labels) == len(pivots) + extra
    assert result.labels[0].style in ("label_up", "label_down")


def test_zigzag_fibonacci_levels(random_bars):
    result = calculate("zigzag_fibonacci", random_bars)
    assert result.lines
    fib_labels = [label for label in result.labels if "(" in label.text]
    assert fib_labels
    assert fib_labels[0].text.startswith("0.000")
    assert calculate("zigzag_fibonacci", random_bars.iloc[:20]).lines == []


def test_pivot_hh_hl_plots_and_markers(random_bars):
    result = calculate("pivot_hh_hl", random_bars)
    assert set(result.plots) == {"pivot_avg", "pivot_high", "pivot_low"}
    texts = {m.text for m in result.markers}
    assert texts & {"HH", "LH", "HL", "LL"}


def test_to_frame_and_to_dict(trend_bars):
    result = calculate("supertrend", trend_bars)
    frame = result.to_frame()
    assert list(frame.columns) == ["up_trend", "down_trend", "body_middle"]
    assert len(frame) == len(trend_bars)
    payload = result.to_dict()
    json.dumps(payload, allow_nan=False)
    assert payload["metadata"]["short_title"] == "ST"


def test_accessor(trend_bars):
    result = trend_bars.pine.calculate("sma", length=5)
    assert len(result.plots["sma"]) == len(trend_bars)
    out = trend_bars.pine.stateful("supertrend", length=10, factor=3.0, prefix="x")
    assert out.columns[0] == "x_SUPERT_10_3.0"
    assert out.index.equals(trend_bars.index)
    with pytest.raises(ValueError):
        trend_bars.pine.stateful("qqe")
    with pytest.raises(ValueError):
        trend_bars.pine.stateful("unknown")


def test_to_frame_inputs():
    bars = [Bar(time=1.0, open=1.0, high=2.0, low=0.5, close=1.5)]
    frame = to_frame(bars)
    assert list(frame.columns) == ["time", "open", "high", "low", "close", "volume"]
    assert np.isnan(frame["volume"].iloc[0])
    rows = to_frame([{"Open": 1, "High": 2, "Low": 0, "Close": 1}])
    assert rows["time"].iloc[0] == 0.0
    indexed = pd.DataFrame({"open": [1.0], "high": [2.0], "low": [0.0], "close": [1.0]},
                           index=pd.DatetimeIndex(["1970-01-01 00:01:00"]))
    assert to_frame(indexed)["time"].iloc[0] == 60.0
    with pytest.raises(ValueError):
        to_frame([{"open": 1.0, "close": 1.0}])


def test_source_names(trend_bars):
    frame = to_frame(trend_bars)
    assert np.allclose(source(frame, "hlc3"), frame["close"])
    with pytest.raises(ValueError):
        source(frame, "median")


def test_cross_helpers():
    a = [1.0, 2.0, 3.0, 2.0]
    assert crossover(a, 2.5).tolist() == [False, False, True, False]
    assert crossunder(a, 2.5).tolist() == [False, False, False, True]
