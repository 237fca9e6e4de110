"""Binning of event offsets onto a common relative-time grid.

Each event contributes one row of the aligned matrix.  Offsets are
assigned to the ``bin_count`` equal-width bins of an
:class:`~superepoch.types.EpochWindowConfig` using half-open intervals
``[edge_t, edge_{t+1})``; the configured boundary policy decides whether
the final right edge belongs to the last bin.  A cell holds the mean of
the values assigned to it, or is flagged missing when nothing was.
"""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

from ..types import EpochWindowConfig, EventWindow


def assign_bins(offsets: Sequence[float] | np.ndarray, config: EpochWindowConfig) -> np.ndarray:
    """Return the bin index of each offset.

    Offsets outside ``[-half_width, half_width]`` map to ``-1``.  An offset
    of exactly ``+half_width`` maps to the last bin under the ``"closed"``
    policy and to ``-1`` under ``"open"``.
    """

    offsets = np.asarray(offsets, dtype=float)
    edges = config.edges
    idx = np.searchsorted(edges, offsets, side="right") - 1
    idx[idx >= config.bin_count] = -1
    if config.boundary == "closed":
        idx[offsets == edges[-1]] = config.bin_count - 1
    return idx


def bin_event(
    offsets: Sequence[float] | np.ndarray,
    values: Sequence[float] | np.ndarray,
    config: EpochWindowConfig,
) -> Tuple[np.ndarray, np.ndarray]:
    """Average ``values`` within each bin of ``config``.

    Returns
    -------
    tuple of numpy.ndarray
        ``(row, missing)`` where ``row`` holds the per-bin means (NaN for
        empty bins) and ``missing`` flags the empty bins.
    """

    values = np.asarray(values, dtype=float)
    idx = assign_bins(offsets, config)
    if idx.shape != values.shape:
        raise ValueError("offsets and values must have the same length")
    keep = idx >= 0
    counts = np.bincount(idx[keep], minlength=config.bin_count)
    sums = np.bincount(idx[keep], weights=values[keep], minlength=config.bin_count)
    missing = counts == 0
    row = np.full(config.bin_count, np.nan)
    row[~missing] = sums[~missing] / counts[~missing]
    return row, missing


def bin_window(window: EventWindow, config: EpochWindowConfig) -> Tuple[np.ndarray, np.ndarray]:
    """Convenience wrapper around :func:`bin_event` for an :class:`EventWindow`."""

    return bin_event(window.offsets, window.values, config)


__all__ = ["assign_bins", "bin_event", "bin_window"]
