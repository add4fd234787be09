# -*- coding: utf-8 -*-
"""pandas-ta-pine stateful -- volatility transforms (TR, ATR, Bollinger)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from ._base import (
    _param,
    _as_int,
    ATRState,
    atr_make,
    atr_update_raw,
    true_range,
    replay,
    StatefulIndicator,
    STATEFUL_REGISTRY,
)
from ._rolling import sma, stdev


# ===========================================================================
# TR  (first bar: high - low)
# ===========================================================================

@dataclass
class TRState:
    prev_close: Optional[float] = None


def _tr_update(
    state: TRState, bar: Dict[str, float], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], TRState]:
    value = true_range(bar["high"], bar["low"], state.prev_close)
    state.prev_close = bar["close"]
    return [value], state


STATEFUL_REGISTRY["tr"] = StatefulIndicator(
    kind="tr",
    inputs=("high", "low", "close"),
    init=lambda params: TRState(),
    update=_tr_update,
    output_names=lambda params: ["TRUERANGE"],
)


# ===========================================================================
# ATR  (Wilder: rma of TR, seeded with the mean of the first `length` TRs)
# ===========================================================================
# Default length = 14.

def _atr_init(params: Dict[str, Any]) -> ATRState:
    return atr_make(max(_as_int(_param(params, "length", 14), 14), 1))


def _atr_update(
    state: ATRState, bar: Dict[str, float], params: Dict[str, Any]
) -> Tuple[List[Optional[float]], ATRState]:
    value, state = atr_update_raw(state, bar["high"], bar["low"], bar["close"])
    return [value], state


def _atr_output_names(params: Dict[str, Any]) -> List[str]:
    return [f"ATRr_{_as_int(_param(params, 'length', 14), 14)}"]


STATEFUL_REGISTRY["atr"] = StatefulIndicator(
    kind="atr",
    inputs=("high", "low", "close"),
    init=_atr_init,
    update=_atr_update,
    output_names=_atr_output_names,
)


def _hlc(frame: pd.DataFrame) -> Dict[str, pd.Series]:
    return {"high": frame["high"], "low": frame["low"], "close": frame["close"]}


def tr(frame: pd.DataFrame) -> pd.Series:
    return replay("tr", _hlc(frame)).iloc[:, 0]


def atr(frame: pd.DataFrame, length: int = 14) -> pd.Series:
    return replay("atr", _hlc(frame), {"length": length}).iloc[:, 0]


# ===========================================================================
# BBANDS  (sma +/- mult * population stdev)
# ===========================================================================

def bbands(src: pd.Series, length: int = 20, mult: float = 2.0) -> pd.DataFrame:
    mid = sma(src, length)
    dev = mult * stdev(src, length)
    return pd.DataFrame(
        {
            f"BBL_{length}_{mult}": mid - dev,
            f"BBM_{length}_{mult}": mid,
            f"BBU_{length}_{mult}": mid + dev,
        },
        index=src.index,
    )
