# -*- coding: utf-8 -*-
from importlib.metadata import version
version = version("pandas_ta_pine")

from pandas_ta_pine.maps import (
    COLORS,
    EMA_RIBBON_LENGTHS,
    FIB_EXTENSIONS,
    FIB_RATIOS,
    MA_MODES,
    SOURCES,
    Category,
    Imports,
)
from pandas_ta_pine.result import (
    BarColor,
    BgColor,
    Box,
    Fill,
    HLine,
    IndicatorResult,
    Label,
    LineDrawing,
    Marker,
    Metadata,
    PlotPoint,
)
from pandas_ta_pine.stateful import *
from pandas_ta_pine.stateful import __all__ as stateful_all

# Catalog: pandas_ta_pine.calculate("supertrend", bars, {"factor": 2})
from pandas_ta_pine.indicators import INDICATOR_REGISTRY, calculate, indicator_kinds

# Enable "pine" DataFrame Extension
from pandas_ta_pine.core import AnalysisIndicators, Bar, source, to_frame

__all__ = [
    "COLORS",
    "EMA_RIBBON_LENGTHS",
    "FIB_EXTENSIONS",
    "FIB_RATIOS",
    "MA_MODES",
    "SOURCES",
    "Category",
    "Imports",
    "version",
    "BarColor",
    "BgColor",
    "Box",
    "Fill",
    "HLine",
    "IndicatorResult",
    "Label",
    "LineDrawing",
    "Marker",
    "Metadata",
    "PlotPoint",
    "INDICATOR_REGISTRY",
    "calculate",
    "indicator_kinds",
    "AnalysisIndicators",
    "Bar",
    "source",
    "to_frame",
]

__all__ += stateful_all
