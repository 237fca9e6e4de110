"""Superposed epoch analysis of scalar timeseries.

Typical use::

    from superepoch import EventCatalog, TimeSeries, superpose

    result = superpose(series, catalog, half_width=4.0, bin_count=96)
    for stat in result.statistics:
        print(stat.center, stat.median, stat.q1, stat.q3)
"""

from .config import Settings, load_settings
from .errors import (
    ConfigurationError,
    IrregularCadenceError,
    SeriesParseError,
    WindowOutOfRangeError,
)
from .pipeline import (
    Alignment,
    AlignmentStrategy,
    BinnedAlignment,
    EpochResult,
    IndexAlignment,
    available_strategies,
    get_strategy,
    superpose,
)
from .types import (
    AlignedMatrix,
    BinStatistic,
    BinStatistics,
    EpochWindowConfig,
    EventCatalog,
    EventWindow,
    TimeSeries,
)

__version__ = "0.1.0"

__all__ = [
    "Settings",
    "load_settings",
    "ConfigurationError",
    "IrregularCadenceError",
    "SeriesParseError",
    "WindowOutOfRangeError",
    "Alignment",
    "AlignmentStrategy",
    "BinnedAlignment",
    "EpochResult",
    "IndexAlignment",
    "available_strategies",
    "get_strategy",
    "superpose",
    "AlignedMatrix",
    "BinStatistic",
    "BinStatistics",
    "EpochWindowConfig",
    "EventCatalog",
    "EventWindow",
    "TimeSeries",
]
