# -*- coding: utf-8 -*-
"""pandas-ta-pine.indicators - catalog of chart indicators.

Every entry turns OHLCV bars into an IndicatorResult (one plot point per
bar, plus sparse drawings).  Category modules populate INDICATOR_REGISTRY
at import time.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pandas_ta_pine.core import BarsLike
from pandas_ta_pine.result import IndicatorResult
from ._base import Indicator, INDICATOR_REGISTRY, crossover, crossunder

# Category modules - each populates the shared registry on import
from . import _overlap    # sma, ema, wma, ribbon, hull, t3, mavilimw, vma, zlema, zlsma
from . import _momentum   # rsi, stoch, stoch_rsi, mfi, rci, stc, vx3, qqe
from . import _trend      # supertrend, alphatrend, halftrend, ott, autotrail, darvas
from . import _pivots     # zigzag, pivot_hh_hl, zigzag_fibonacci


def indicator_kinds() -> List[str]:
    return sorted(INDICATOR_REGISTRY)


def calculate(kind: str, bars: BarsLike, inputs: Optional[Dict[str, Any]] = None) -> IndicatorResult:
    """Run catalog indicator *kind* over *bars*.

    *inputs* override the indicator's defaults; unknown keys are ignored.
    Raises ValueError for an unknown kind.
    """
    indicator = INDICATOR_REGISTRY.get(str(kind).lower())
    if indicator is None:
        raise ValueError(f"Unknown indicator '{kind}'. Available: {', '.join(indicator_kinds())}")
    return indicator.calculate(bars, inputs)


__all__ = [
    "Indicator",
    "INDICATOR_REGISTRY",
    "calculate",
    "crossover",
    "crossunder",
    "indicator_kinds",
]
