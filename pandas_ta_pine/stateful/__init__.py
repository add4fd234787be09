# -*- coding: utf-8 -*-
"""pandas-ta-pine.stateful - streaming transform engine.

Category modules populate STATEFUL_REGISTRY at import time.  This package
re-exports the registry, the shared base API and every Series / DataFrame
transform.
"""
from __future__ import annotations

# Base API (always available)
from ._base import (
    NAN,
    EMAState,
    ATRState,
    StatefulIndicator,
    STATEFUL_REGISTRY,
    ema_update_raw,
    ema_make,
    rma_make,
    atr_make,
    atr_update_raw,
    fold,
    replay,
    resolve_output_names,
    stateful_supported_kinds,
    _is_nan,
    _param,
    _as_int,
    _as_float,
)

# ---------------------------------------------------------------------------
# Category modules - each populates the shared registry on import
# ---------------------------------------------------------------------------
from ._rolling import (      # sma, wma, stdev, highest/lowest, linreg, …
    sma,
    wma,
    stdev,
    highest,
    lowest,
    highestbars,
    lowestbars,
    linreg,
    correlation,
)
from ._overlap import (      # ema, rma, ma(), hull family, t3, …
    ema,
    rma,
    wwma,
    vwma,
    ma,
    hma,
    ehma,
    thma,
    t3,
    mavilimw,
    mavilimw_lengths,
    var,
    vma,
    zlema,
    zlsma,
)
from ._volatility import tr, atr, bbands
from ._momentum import (     # rsi, stoch, mfi, rci, stc, vx3, qqe
    rsi,
    stoch,
    stochrsi,
    mfi,
    rci,
    stc,
    stoch_vx3,
    qqe,
)
from ._trend import (        # trailing-stop machines
    trail_step,
    TrailState,
    supertrend,
    alphatrend,
    halftrend,
    ott,
    autotrail,
    darvas,
)
from ._pivots import (
    ZigZagPivot,
    pivothigh,
    pivotlow,
    zigzag,
    zigzag_make,
    zigzag_update_raw,
)

__all__ = [
    # base
    "NAN",
    "EMAState",
    "ATRState",
    "StatefulIndicator",
    "STATEFUL_REGISTRY",
    "ema_update_raw",
    "ema_make",
    "rma_make",
    "atr_make",
    "atr_update_raw",
    "fold",
    "replay",
    "resolve_output_names",
    "stateful_supported_kinds",
    # rolling
    "sma", "wma", "stdev", "highest", "lowest", "highestbars", "lowestbars",
    "linreg", "correlation",
    # overlap
    "ema", "rma", "wwma", "vwma", "ma", "hma", "ehma", "thma", "t3", "mavilimw",
    "mavilimw_lengths", "var", "vma", "zlema", "zlsma",
    # volatility
    "tr", "atr", "bbands",
    # momentum
    "rsi", "stoch", "stochrsi", "mfi", "rci", "stc", "stoch_vx3", "qqe",
    # trend
    "trail_step", "TrailState", "supertrend", "alphatrend", "halftrend",
    "ott", "autotrail", "darvas",
    # pivots
    "ZigZagPivot", "pivothigh", "pivotlow", "zigzag", "zigzag_make",
    "zigzag_update_raw",
]
