"""Extraction of per-event windows from a timeseries."""

from __future__ import annotations

import logging

import numpy as np

from ..types import EventWindow, TimeSeries

logger = logging.getLogger(__name__)


def extract_window(series: TimeSeries, zero_epoch: float, half_width: float) -> EventWindow:
    """Return the samples strictly inside ``zero_epoch ± half_width``.

    Parameters
    ----------
    series:
        Series with strictly increasing times.
    zero_epoch:
        Reference time of the event.  It may lie outside the span of the
        series, in which case the window is simply empty.
    half_width:
        Half-width of the window in the time units of ``series``.

    Returns
    -------
    EventWindow
        Offsets ``t - zero_epoch`` and the matching values.  Both ends of
        the window are excluded.
    """

    lo = np.searchsorted(series.times, zero_epoch - half_width, side="right")
    hi = np.searchsorted(series.times, zero_epoch + half_width, side="left")
    hi = max(hi, lo)
    offsets = series.times[lo:hi] - zero_epoch
    values = series.values[lo:hi]
    if offsets.size == 0:
        logger.debug("No samples within %s of event %s", half_width, zero_epoch)
    return EventWindow(float(zero_epoch), offsets, values)


__all__ = ["extract_window"]
