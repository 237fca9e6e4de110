"""Alignment by sample count for uniformly sampled series.

Instead of binning offsets, every event contributes the ``2k + 1``
consecutive samples centred on its anchor index, the first sample after
the event's zero epoch.  Column ``j`` of the resulting matrix is the
sample ``j - k`` positions away from the anchor.  This is only meaningful
when the series has a fixed cadence without gaps, so callers are expected
to run :func:`check_uniform_cadence` first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

import numpy as np

from ..errors import ConfigurationError, IrregularCadenceError, WindowOutOfRangeError
from ..types import AlignedMatrix, EventCatalog, TimeSeries

logger = logging.getLogger(__name__)

OUT_OF_RANGE_POLICIES = ("raise", "skip", "partial")


@dataclass(frozen=True)
class IndexWindow:
    """Fixed sample window around one event."""

    zero_epoch: float
    anchor: int
    values: np.ndarray


@dataclass
class IndexAlignmentResult:
    """Matrix built by :func:`align_by_index`.

    Attributes
    ----------
    matrix:
        One row per retained event, ``2k + 1`` columns.
    events:
        Zero-epoch times of the rows of ``matrix``.
    out_of_range:
        Errors for the events whose window ran off the series.  These rows
        are absent under the ``"skip"`` policy and partially missing under
        ``"partial"``.
    """

    matrix: AlignedMatrix
    events: np.ndarray
    cadence: float
    out_of_range: List[WindowOutOfRangeError] = field(default_factory=list)


def anchor_index(times: np.ndarray, zero_epoch: float) -> int:
    """Return the smallest index ``i`` with ``times[i] > zero_epoch``."""

    return int(np.searchsorted(times, zero_epoch, side="right"))


def samples_for(half_width: float, cadence: float) -> int:
    """Express a time half-width as a number of samples."""

    if cadence <= 0:
        raise ConfigurationError("cadence must be positive")
    k = int(round(half_width / cadence))
    if k < 0:
        raise ConfigurationError("half_width must not be negative")
    return k


def check_uniform_cadence(
    times: np.ndarray, rtol: float = 1e-3, atol: float | None = None
) -> float:
    """Return the sampling cadence of ``times``.

    The cadence is the mean step over the whole span.  A step is irregular
    when it differs from the cadence by more than ``max(rtol * cadence,
    atol)``.  ``atol`` defaults to half of the smallest step, which absorbs
    the jitter of rounded timestamps (daily fractional years written with
    three decimals step by 0.002 or 0.003) while a single missing sample
    still moves its step by a whole cadence.

    Raises
    ------
    IrregularCadenceError
        If any step is irregular, if times are not strictly increasing or
        if fewer than two samples are given.
    """

    times = np.asarray(times, dtype=float)
    if times.size < 2:
        raise IrregularCadenceError("at least two samples are needed to determine a cadence")
    steps = np.diff(times)
    if steps.min() <= 0:
        raise IrregularCadenceError("times must be strictly increasing")
    cadence = float((times[-1] - times[0]) / (times.size - 1))
    if atol is None:
        atol = float(steps.min()) / 2.0
    tolerance = max(rtol * cadence, atol)
    bad = np.flatnonzero(np.abs(steps - cadence) > tolerance)
    if bad.size:
        i = int(bad[0])
        raise IrregularCadenceError(
            f"{bad.size} irregular steps, first between samples {i} and {i + 1} "
            f"({steps[i]!r} vs cadence {cadence!r})"
        )
    return cadence


def index_window(series: TimeSeries, zero_epoch: float, k: int) -> IndexWindow:
    """Return the ``2k + 1`` samples centred on the event's anchor index.

    Raises
    ------
    WindowOutOfRangeError
        If the anchor lies within ``k`` samples of either end of the series.
        The window is never truncated.
    """

    if k < 0:
        raise ConfigurationError("k must not be negative")
    n = len(series)
    anchor = anchor_index(series.times, zero_epoch)
    if anchor < k or anchor + k >= n:
        raise WindowOutOfRangeError(float(zero_epoch), anchor, k, n)
    return IndexWindow(float(zero_epoch), anchor, series.values[anchor - k : anchor + k + 1])


def _partial_row(series: TimeSeries, anchor: int, k: int) -> tuple[np.ndarray, np.ndarray]:
    n = len(series)
    positions = np.arange(anchor - k, anchor + k + 1)
    inside = (positions >= 0) & (positions < n)
    row = np.full(positions.size, np.nan)
    row[inside] = series.values[positions[inside]]
    return row, ~inside


def align_by_index(
    series: TimeSeries,
    catalog: EventCatalog,
    k: int,
    *,
    on_out_of_range: str = "raise",
    cadence: float | None = None,
) -> IndexAlignmentResult:
    """Stack the fixed sample windows of every event.

    Parameters
    ----------
    series:
        Uniformly sampled, gap-free series.
    catalog:
        Events to align.
    k:
        Half-width of each window in samples.
    on_out_of_range:
        ``"raise"`` re-raises the first :class:`WindowOutOfRangeError`,
        ``"skip"`` drops such events and ``"partial"`` keeps them with the
        samples beyond the series marked missing.
    cadence:
        Sampling step used to label the columns.  Determined with
        :func:`check_uniform_cadence` when omitted.
    """

    if on_out_of_range not in OUT_OF_RANGE_POLICIES:
        raise ConfigurationError(
            f"on_out_of_range must be one of {', '.join(OUT_OF_RANGE_POLICIES)}"
        )
    if cadence is None:
        cadence = check_uniform_cadence(series.times)
    centers = np.arange(-k, k + 1) * cadence

    rows: List[np.ndarray] = []
    masks: List[np.ndarray] = []
    events: List[float] = []
    errors: List[WindowOutOfRangeError] = []
    for zero_epoch in catalog:
        try:
            window = index_window(series, zero_epoch, k)
        except WindowOutOfRangeError as exc:
            if on_out_of_range == "raise":
                raise
            logger.warning("%s; %s", exc, "skipping" if on_out_of_range == "skip" else "keeping partial window")
            errors.append(exc)
            if on_out_of_range == "skip":
                continue
            row, missing = _partial_row(series, exc.anchor, k)
        else:
            row, missing = window.values, np.zeros(2 * k + 1, dtype=bool)
        rows.append(row)
        masks.append(missing)
        events.append(zero_epoch)

    matrix = AlignedMatrix.from_rows(rows, masks, centers)
    return IndexAlignmentResult(matrix, np.asarray(events, dtype=float), cadence, errors)


__all__ = [
    "OUT_OF_RANGE_POLICIES",
    "IndexWindow",
    "IndexAlignmentResult",
    "anchor_index",
    "samples_for",
    "check_uniform_cadence",
    "index_window",
    "align_by_index",
]
