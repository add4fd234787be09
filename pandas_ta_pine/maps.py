# -*- coding: utf-8 -*-
from importlib.util import find_spec
from typing import Dict, List, Tuple

# Optional libraries: scripts and comparisons check here before importing.
Imports: Dict[str, bool] = {
    "numba": find_spec("numba") is not None,
    "talib": find_spec("talib") is not None,
}

# Indicator kinds per category, in catalog order.
Category: Dict[str, List[str]] = {
    "overlap": [
        "sma", "ema", "wma", "ema_ribbon", "hull_suite", "tillson_t3",
        "mavilimw", "variable_ma", "zero_lag_ema", "zlsma",
    ],
    "momentum": [
        "rsi", "stoch", "stoch_rsi", "mfi", "rci", "schaff_trend_cycle",
        "stoch_vx3", "qqe",
    ],
    "trend": [
        "supertrend", "alphatrend", "halftrend", "ott", "autotrail",
        "darvas_box",
    ],
    "pivots": ["zigzag", "pivot_hh_hl", "zigzag_fibonacci"],
}

MA_MODES: Tuple[str, ...] = ("sma", "ema", "rma", "wwma", "wma", "hma", "vwma")

SOURCES: Tuple[str, ...] = (
    "open", "high", "low", "close", "volume", "hl2", "hlc3", "ohlc4", "hlcc4",
)

EMA_RIBBON_LENGTHS: Tuple[int, ...] = (5, 8, 13, 21, 34, 55, 89, 144)

# Retracement levels drawn from the last zig-zag legs, then the extension
# levels tried once the retracements are exhausted.
FIB_RATIOS: Tuple[float, ...] = (0.236, 0.382, 0.5, 0.618, 0.786)
FIB_EXTENSIONS: Tuple[float, ...] = tuple(
    x + r for x in range(1, 6) for r in (0.0, 0.272, 0.414, 0.618)
)

# Colors shared by the catalog.
COLORS: Dict[str, str] = {
    "up": "#26A69A",
    "down": "#EF5350",
    "neutral": "#FFEB3B",
    "blue": "#2962FF",
    "purple": "#9C27B0",
    "gray": "#787B86",
    "orange": "#FF9800",
}
