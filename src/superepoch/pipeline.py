from __future__ import annotations

"""Alignment strategies and the superposed epoch pipeline."""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Protocol, Tuple, runtime_checkable

import numpy as np

from .config import Settings
from .core.binning import bin_window
from .core.index_align import align_by_index, check_uniform_cadence, samples_for
from .core.statistics import bin_statistics, validate_method
from .core.window import extract_window
from .errors import ConfigurationError
from .types import AlignedMatrix, BinStatistics, EpochWindowConfig, EventCatalog, TimeSeries

logger = logging.getLogger(__name__)


@dataclass
class Alignment:
    """Aligned matrix produced by a strategy together with diagnostics."""

    matrix: AlignedMatrix
    diagnostics: Dict[str, Any] = field(default_factory=dict)


@dataclass
class EpochResult:
    """Result of a superposed epoch analysis.

    Attributes
    ----------
    matrix:
        Per-event aligned values.
    statistics:
        Median and quartiles of every column of ``matrix``.
    diagnostics:
        Free-form dictionary describing how the result was obtained.
    """

    matrix: AlignedMatrix
    statistics: BinStatistics
    diagnostics: Dict[str, Any] = field(default_factory=dict)

    @property
    def centers(self) -> np.ndarray:
        return self.statistics.centers


@runtime_checkable
class AlignmentStrategy(Protocol):
    """Protocol describing how events are mapped onto a common axis."""

    name: str

    def align(self, series: TimeSeries, catalog: EventCatalog) -> Alignment:
        """Return one matrix row per event of ``catalog``."""


def _binned_row(series: TimeSeries, zero_epoch: float, config: EpochWindowConfig) -> Tuple[np.ndarray, np.ndarray, bool]:
    window = extract_window(series, zero_epoch, config.half_width)
    row, missing = bin_window(window, config)
    return row, missing, window.empty


class BinnedAlignment:
    """Align events by averaging samples into time bins around each event.

    ``workers`` greater than one spreads the events over a thread pool;
    rows keep the catalog order either way.
    """

    name = "binned"

    def __init__(self, config: EpochWindowConfig, workers: int = 1) -> None:
        if workers < 1:
            raise ConfigurationError("workers must be at least 1")
        self.config = config
        self.workers = workers

    def align(self, series: TimeSeries, catalog: EventCatalog) -> Alignment:
        events = list(catalog)
        if self.workers > 1 and len(events) > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                results = list(pool.map(lambda t: _binned_row(series, t, self.config), events))
        else:
            results = [_binned_row(series, t, self.config) for t in events]

        rows = [r[0] for r in results]
        masks = [r[1] for r in results]
        empty = [t for t, r in zip(events, results) if r[2]]
        if empty:
            logger.info("%d of %d events have no samples in their window", len(empty), len(events))
        matrix = AlignedMatrix.from_rows(rows, masks, self.config.centers)
        return Alignment(
            matrix,
            {
                "half_width": self.config.half_width,
                "bin_count": self.config.bin_count,
                "boundary": self.config.boundary,
                "empty_events": empty,
            },
        )


class IndexAlignment:
    """Align events by sample count on a uniformly sampled series.

    ``k`` is the half-width in samples.  When only ``half_width`` is given
    it is converted using the cadence of the series.
    """

    name = "index"

    def __init__(
        self,
        k: int | None = None,
        *,
        half_width: float | None = None,
        on_out_of_range: str = "raise",
        rtol: float = 1e-3,
        atol: float | None = None,
    ) -> None:
        if k is None and half_width is None:
            raise ConfigurationError("either k or half_width is required")
        if k is not None and k < 0:
            raise ConfigurationError("k must not be negative")
        self.k = k
        self.half_width = half_width
        self.on_out_of_range = on_out_of_range
        self.rtol = rtol
        self.atol = atol

    def align(self, series: TimeSeries, catalog: EventCatalog) -> Alignment:
        cadence = check_uniform_cadence(series.times, self.rtol, self.atol)
        k = self.k if self.k is not None else samples_for(self.half_width, cadence)
        result = align_by_index(
            series,
            catalog,
            k,
            on_out_of_range=self.on_out_of_range,
            cadence=cadence,
        )
        return Alignment(
            result.matrix,
            {
                "k": k,
                "cadence": cadence,
                "on_out_of_range": self.on_out_of_range,
                "events": result.events,
                "out_of_range": [err.zero_epoch for err in result.out_of_range],
            },
        )


_registry: Dict[str, Callable[[Settings], AlignmentStrategy]] = {}


def register_strategy(name: str, factory: Callable[[Settings], AlignmentStrategy]) -> None:
    """Register a factory building a strategy from :class:`Settings`."""
    _registry[name] = factory


def get_strategy(name: str, settings: Settings | None = None) -> AlignmentStrategy:
    """Build the strategy registered under ``name``."""
    if name not in _registry:
        raise ConfigurationError(f"unknown alignment strategy: {name}")
    strategy = _registry[name](settings or Settings())
    if not isinstance(strategy, AlignmentStrategy):
        raise TypeError("Strategy does not implement the required protocol")
    return strategy


def available_strategies() -> List[str]:
    """Return the list of registered strategy names."""
    return list(_registry)


register_strategy("binned", lambda s: BinnedAlignment(s.window.to_config()))
register_strategy(
    "index",
    lambda s: IndexAlignment(
        s.index.k,
        half_width=s.index.half_width if s.index.half_width is not None else s.window.half_width,
        on_out_of_range=s.index.on_out_of_range,
        rtol=s.index.cadence_rtol,
        atol=s.index.cadence_atol,
    ),
)


def superpose(
    series: TimeSeries,
    catalog: EventCatalog,
    strategy: AlignmentStrategy | str | None = None,
    *,
    settings: Settings | None = None,
    half_width: float | None = None,
    bin_count: int | None = None,
    boundary: str | None = None,
    quantile_method: str | None = None,
) -> EpochResult:
    """Run a superposed epoch analysis of ``series`` around ``catalog``.

    Parameters
    ----------
    series:
        Observations with strictly increasing times and no missing values.
    catalog:
        Zero-epoch times, one per event.  Row ``m`` of the result belongs to
        event ``m``.
    strategy:
        Strategy instance or registered name.  Defaults to binned alignment
        over the window described by ``settings``.
    settings:
        Optional :class:`~superepoch.config.Settings` instance providing
        default values for the remaining parameters.
    half_width, bin_count, boundary, quantile_method:
        Individual overrides for the binned window and the quantile rule.
        Any value set here takes precedence over ``settings``.  The window
        overrides require binned alignment, i.e. ``strategy`` omitted or
        ``"binned"``.

    Returns
    -------
    EpochResult
        Aligned matrix, per-bin statistics and diagnostics.

    Raises
    ------
    ConfigurationError
        If the series or catalog is empty, a parameter is invalid or window
        overrides are combined with another strategy.
    """

    if settings is None:
        settings = Settings()

    if len(series) == 0:
        raise ConfigurationError("time series is empty")
    if len(catalog) == 0:
        raise ConfigurationError("event catalog is empty")

    quantile_method = validate_method(quantile_method or settings.statistics.quantile_method)

    if strategy is None or strategy == BinnedAlignment.name:
        window = settings.window
        config = EpochWindowConfig(
            window.half_width if half_width is None else half_width,
            window.bin_count if bin_count is None else bin_count,
            boundary or window.boundary,
        )
        strategy = BinnedAlignment(config)
    else:
        overridden = [
            name
            for name, value in (("half_width", half_width), ("bin_count", bin_count), ("boundary", boundary))
            if value is not None
        ]
        if overridden:
            raise ConfigurationError(
                f"{', '.join(overridden)} only apply to binned alignment"
            )
        if isinstance(strategy, str):
            strategy = get_strategy(strategy, settings)

    alignment = strategy.align(series, catalog)
    statistics = bin_statistics(alignment.matrix, quantile_method)

    diagnostics = {
        "strategy": strategy.name,
        "n_events": len(catalog),
        "n_rows": alignment.matrix.shape[0],
        "quantile_method": quantile_method,
        "missing_bins": int(statistics.missing.sum()),
    }
    diagnostics.update(alignment.diagnostics)
    logger.debug("Superposed %d events with %s alignment", len(catalog), strategy.name)
    return EpochResult(alignment.matrix, statistics, diagnostics)


__all__ = [
    "Alignment",
    "EpochResult",
    "AlignmentStrategy",
    "BinnedAlignment",
    "IndexAlignment",
    "register_strategy",
    "get_strategy",
    "available_strategies",
    "superpose",
]
