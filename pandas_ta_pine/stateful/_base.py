# -*- coding: utf-8 -*-
"""pandas-ta-pine stateful - shared base: state classes, helpers, registry.

All category modules (``_rolling``, ``_overlap``, ``_momentum``, …) import
from here and populate the registry at load time.

Every transform is a small state dataclass plus an ``*_update_raw`` step
``(state, x) -> (value | None, state)``.  The Series-level functions are a
left-to-right fold of that step over the bar index (``fold``), and the
multi-input state machines are replayed row by row (``replay``).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

import math

import numpy as np
import pandas as pd

NAN = float("nan")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _is_nan(x: Any) -> bool:
    """True when *x* is None or a float NaN."""
    return x is None or (isinstance(x, float) and math.isnan(x))


def _param(params: Optional[Dict[str, Any]], key: str, default: Any) -> Any:
    """Pull *key* from *params*; treat None as missing → default."""
    if not params:
        return default
    value = params.get(key, default)
    return default if value is None else value


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return int(default)


def _as_float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return float(default)


# ---------------------------------------------------------------------------
# Shared state classes
# ---------------------------------------------------------------------------

@dataclass
class EMAState:
    """Reusable for EMA / RMA / Wilder.

    EMA  -> alpha = 2 / (length + 1)   via ``ema_make``
    RMA  -> alpha = 1 / length          via ``rma_make``

    presma=True  ->  first output = SMA(x[0:length])   (Wilder seed)
    presma=False ->  first output = x[0]               (EMA seed)
    """
    length: int
    alpha: float
    last: Optional[float] = None
    presma: bool = False
    _warmup_sum: float = 0.0
    _warmup_count: int = 0


@dataclass
class ATRState:
    """True range fed through a Wilder (RMA, SMA-seeded) average."""
    length: int
    rma: EMAState
    prev_close: Optional[float] = None


# ---------------------------------------------------------------------------
# Low-level update helpers
# ---------------------------------------------------------------------------

def ema_make(length: int, presma: bool = False) -> EMAState:
    """EMA state - alpha = 2 / (length + 1), seeded with the first sample."""
    return EMAState(length=length, alpha=2.0 / (length + 1.0), presma=presma)


def rma_make(length: int, presma: bool = True) -> EMAState:
    """RMA / Wilder state - alpha = 1 / length, seeded with the first-N mean."""
    return EMAState(length=length, alpha=1.0 / length, presma=presma)


def ema_update_raw(state: EMAState, x: float) -> Tuple[Optional[float], EMAState]:
    """Single-step EMA / RMA update.  Returns (value | None, state).

    Returns None while warming up (presma mode, fewer than *length*
    samples seen).
    """
    if state.last is None:
        if state.presma:
            state._warmup_sum += x
            state._warmup_count += 1
            if state._warmup_count < state.length:
                return None, state
            state.last = state._warmup_sum / state.length   # SMA seed
            return state.last, state
        state.last = x
        return state.last, state
    state.last = state.alpha * x + (1.0 - state.alpha) * state.last
    return state.last, state


def true_range(high: float, low: float, prev_close: Optional[float]) -> float:
    if prev_close is None:
        return high - low
    return max(high - low, abs(high - prev_close), abs(low - prev_close))


def atr_make(length: int) -> ATRState:
    return ATRState(length=length, rma=rma_make(length))


def atr_update_raw(state: ATRState, high: float, low: float, close: float) -> Tuple[Optional[float], ATRState]:
    """Single-step ATR (Wilder).  Returns (atr | None, state)."""
    tr = true_range(high, low, state.prev_close)
    state.prev_close = close
    value, state.rma = ema_update_raw(state.rma, tr)
    return value, state


# ---------------------------------------------------------------------------
# Folding a single-input step over a Series
# ---------------------------------------------------------------------------

def fold(
    update: Callable[[Any, float], Tuple[Optional[float], Any]],
    state: Any,
    src: pd.Series,
    name: Optional[str] = None,
) -> pd.Series:
    """Run *update* left to right over *src* and collect a new Series.

    NaN inputs produce NaN outputs and leave the state untouched, so a
    chained transform starts on the first defined upstream sample.  An
    interior NaN is a gap, not a reset: a window keeps the samples from
    before the gap, so ``sma([1, nan, 3], 2)`` ends at 2.0.
    """
    values = np.asarray(src, dtype=float)
    out = np.full(values.size, np.nan)
    for i in range(values.size):
        x = values[i]
        if math.isnan(x):
            continue
        value, state = update(state, float(x))
        if value is not None:
            out[i] = value
    return pd.Series(out, index=src.index, name=name)


# ---------------------------------------------------------------------------
# Multi-input state machines & registry  (populated by category modules)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StatefulIndicator:
    """Immutable descriptor for a single stateful transform."""
    kind:         str
    inputs:       Tuple[str, ...]
    init:         Callable[[Dict[str, Any]], Any]
    update:       Callable[[Any, Dict[str, float], Dict[str, Any]],
                           Tuple[List[Optional[float]], Any]]
    output_names: Callable[[Dict[str, Any]], List[str]]


# Populated by category modules at import time.
STATEFUL_REGISTRY: Dict[str, StatefulIndicator] = {}


def replay(kind: str, inputs: Dict[str, pd.Series], params: Optional[Dict[str, Any]] = None) -> pd.DataFrame:
    """Replay the stateful update of *kind* over aligned input Series.

    Rows where any input is NaN are skipped: their outputs are NaN and the
    state carries over unchanged.  The state machine therefore starts on
    the first row where every input is defined.
    Later gaps do not reset the machine; it resumes from the state held
    before the gap.
    """
    indicator = STATEFUL_REGISTRY.get(kind)
    if indicator is None:
        raise ValueError(f"Indicator '{kind}' not found in STATEFUL_REGISTRY")
    params = dict(params or {})
    missing = [k for k in indicator.inputs if k not in inputs]
    if missing:
        raise ValueError(f"[!] '{kind}' missing inputs: {', '.join(missing)}")

    keys = list(indicator.inputs)
    index = inputs[keys[0]].index
    arrays = {k: np.asarray(inputs[k], dtype=float) for k in keys}
    names = indicator.output_names(params)
    out = np.full((len(index), len(names)), np.nan)

    state = indicator.init(params)
    for i in range(len(index)):
        bar: Dict[str, float] = {}
        valid = True
        for k in keys:
            v = arrays[k][i]
            if math.isnan(v):
                valid = False
                break
            bar[k] = float(v)
        if not valid:
            continue
        values, state = indicator.update(state, bar, params)
        for j, v in enumerate(values):
            if v is not None:
                out[i, j] = v
    return pd.DataFrame(out, index=index, columns=names)


# ---------------------------------------------------------------------------
# Output-name helpers
# ---------------------------------------------------------------------------

def resolve_output_names(
        base_names: List[str], options: Dict[str, Any]
) -> Tuple[Optional[List[str]], Optional[str]]:
    """Apply prefix / suffix / col_names overrides from *options*."""
    names = list(base_names)
    delimiter = options.get("delimiter", "_")
    prefix = options.get("prefix") or ""
    suffix = options.get("suffix") or ""
    if prefix:
        prefix = f"{prefix}{delimiter}"
    if suffix:
        suffix = f"{delimiter}{suffix}"
    if prefix or suffix:
        names = [f"{prefix}{n}{suffix}" for n in names]
    col_names = options.get("col_names")
    if col_names is not None:
        if not isinstance(col_names, tuple):
            col_names = (col_names,)
        if len(col_names) < len(names):
            return None, f"[!] col_names too short: {len(col_names)} < {len(names)}"
        names = list(col_names[: len(names)])
    return names, None


def stateful_supported_kinds() -> List[str]:
    """Return sorted list of registered stateful kinds."""
    return sorted(STATEFUL_REGISTRY.keys())
