# -*- coding: utf-8 -*-
"""Indicator output: plot series plus chart drawing primitives.

``IndicatorResult.plots`` maps a plot key to exactly one ``PlotPoint`` per
bar; undefined values are NaN.  Everything else (markers, lines, labels,
boxes, ...) is sparse.
"""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

import pandas as pd


@dataclass(frozen=True)
class Metadata:
    title: str
    short_title: str
    overlay: bool


@dataclass(frozen=True)
class PlotPoint:
    time: float
    value: float
    color: Optional[str] = None


@dataclass(frozen=True)
class Marker:
    time: float
    position: str   # aboveBar | belowBar | inBar
    shape: str      # arrowUp | arrowDown | circle | labelUp | labelDown | xcross | ...
    color: str
    text: str = ""


@dataclass(frozen=True)
class HLine:
    value: float
    color: str = "#787B86"
    linestyle: str = "dashed"
    title: str = ""


@dataclass(frozen=True)
class Fill:
    plot1: str
    plot2: str
    color: Optional[str] = None
    colors: Optional[List[str]] = None   # per bar, overrides color


@dataclass(frozen=True)
class BarColor:
    time: float
    color: str


@dataclass(frozen=True)
class BgColor:
    time: float
    color: str


@dataclass(frozen=True)
class LineDrawing:
    time1: float
    price1: float
    time2: float
    price2: float
    color: Optional[str] = None
    width: int = 1
    style: str = "solid"
    extend: str = "none"


@dataclass(frozen=True)
class Label:
    time: float
    price: float
    text: str
    color: Optional[str] = None
    text_color: Optional[str] = None
    style: str = "label_down"
    size: str = "normal"


@dataclass(frozen=True)
class Box:
    time1: float
    price1: float
    time2: float
    price2: float
    bg_color: Optional[str] = None
    border_color: Optional[str] = None


def _clean(obj: Any) -> Any:
    if isinstance(obj, float) and math.isnan(obj):
        return None
    if isinstance(obj, dict):
        return {k: _clean(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_clean(v) for v in obj]
    return obj


@dataclass
class IndicatorResult:
    metadata: Metadata
    plots: Dict[str, List[PlotPoint]] = field(default_factory=dict)
    markers: List[Marker] = field(default_factory=list)
    hlines: List[HLine] = field(default_factory=list)
    fills: List[Fill] = field(default_factory=list)
    bar_colors: List[BarColor] = field(default_factory=list)
    bg_colors: List[BgColor] = field(default_factory=list)
    lines: List[LineDrawing] = field(default_factory=list)
    labels: List[Label] = field(default_factory=list)
    boxes: List[Box] = field(default_factory=list)
    extras: Dict[str, Any] = field(default_factory=dict)

    def to_frame(self) -> pd.DataFrame:
        """Plot values as columns, indexed by bar time."""
        if not self.plots:
            return pd.DataFrame()
        first = next(iter(self.plots.values()))
        index = pd.Index([p.time for p in first], name="time")
        data = {key: [p.value for p in points] for key, points in self.plots.items()}
        return pd.DataFrame(data, index=index, dtype=float)

    def to_dict(self) -> Dict[str, Any]:
        """Plain JSON-compatible structure; NaN becomes None."""
        return _clean(asdict(self))
