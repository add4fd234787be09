# -*- coding: utf-8 -*-
"""Bar input handling and the ``pine`` DataFrame extension."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Union

import numpy as np
import pandas as pd

from pandas_ta_pine.maps import SOURCES
from pandas_ta_pine.stateful import STATEFUL_REGISTRY, replay, resolve_output_names

_OHLC = ("open", "high", "low", "close")


@dataclass(frozen=True)
class Bar:
    time: float
    open: float
    high: float
    low: float
    close: float
    volume: Optional[float] = None


BarsLike = Union[pd.DataFrame, Iterable[Union[Bar, Mapping[str, Any]]]]


def _epoch_seconds(index: pd.DatetimeIndex) -> np.ndarray:
    origin = pd.Timestamp("1970-01-01", tz=index.tz)
    return np.asarray((index - origin) // pd.Timedelta(seconds=1), dtype=float)


def to_frame(bars: BarsLike) -> pd.DataFrame:
    """Normalize *bars* into a fresh float frame with a RangeIndex.

    Accepts a DataFrame (``time`` or ``timestamp`` column, or a
    DatetimeIndex), a sequence of ``Bar`` or a sequence of mappings.
    Columns: time, open, high, low, close, volume (NaN when absent).
    """
    if isinstance(bars, pd.DataFrame):
        df = bars.copy()
        df.columns = [str(c).lower() for c in df.columns]
        if "time" not in df:
            if "timestamp" in df:
                stamps = df["timestamp"]
                if pd.api.types.is_datetime64_any_dtype(stamps):
                    stamps = _epoch_seconds(pd.DatetimeIndex(stamps))
                df["time"] = stamps
            elif isinstance(df.index, pd.DatetimeIndex):
                df["time"] = _epoch_seconds(df.index)
    else:
        rows = [asdict(b) if isinstance(b, Bar) else dict(b) for b in bars]
        df = pd.DataFrame(rows) if rows else pd.DataFrame(columns=["time", *_OHLC])
        df.columns = [str(c).lower() for c in df.columns]

    missing = [c for c in _OHLC if c not in df]
    if missing:
        raise ValueError(f"[!] bars missing columns: {', '.join(missing)}")
    if "time" not in df:
        df["time"] = np.arange(len(df), dtype=float)
    if "volume" not in df:
        df["volume"] = np.nan

    frame = df[["time", *_OHLC, "volume"]].astype(float)
    return frame.reset_index(drop=True)


def source(frame: pd.DataFrame, name: str = "close") -> pd.Series:
    """Price source by name: open, high, low, close, volume, hl2, hlc3,
    ohlc4 or hlcc4."""
    name = str(name).lower()
    if name in ("open", "high", "low", "close", "volume"):
        s = frame[name]
    elif name == "hl2":
        s = (frame["high"] + frame["low"]) / 2.0
    elif name == "hlc3":
        s = (frame["high"] + frame["low"] + frame["close"]) / 3.0
    elif name == "ohlc4":
        s = (frame["open"] + frame["high"] + frame["low"] + frame["close"]) / 4.0
    elif name == "hlcc4":
        s = (frame["high"] + frame["low"] + 2.0 * frame["close"]) / 4.0
    else:
        raise ValueError(f"Unknown source '{name}', expected one of {', '.join(SOURCES)}")
    return s.astype(float).rename(name)


@pd.api.extensions.register_dataframe_accessor("pine")
class AnalysisIndicators:
    """DataFrame extension: ``df.pine.calculate("supertrend", factor=2)``."""

    def __init__(self, pandas_obj: pd.DataFrame):
        self._df = pandas_obj

    def calculate(self, kind: str, **inputs):
        from pandas_ta_pine.indicators import calculate
        return calculate(kind, self._df, inputs)

    def stateful(self, kind: str, **params) -> pd.DataFrame:
        """Replay a registered state machine over this frame's bars.

        Only kinds whose inputs are bar sources (close, hl2, ...) can be
        replayed from a frame.  ``prefix``, ``suffix`` and ``col_names``
        rename the output columns.
        """
        indicator = STATEFUL_REGISTRY.get(kind)
        if indicator is None:
            raise ValueError(f"Indicator '{kind}' not found in STATEFUL_REGISTRY")
        derived = [name for name in indicator.inputs if name not in SOURCES]
        if derived:
            raise ValueError(f"[!] '{kind}' needs derived inputs: {', '.join(derived)}")

        frame = to_frame(self._df)
        inputs: Dict[str, pd.Series] = {name: source(frame, name) for name in indicator.inputs}
        result = replay(kind, inputs, params)
        names, error = resolve_output_names(list(result.columns), params)
        if error:
            raise ValueError(error)
        result.columns = names
        result.index = self._df.index
        return result
