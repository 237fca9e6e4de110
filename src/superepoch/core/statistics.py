"""Cross-event statistics of an aligned matrix."""

from __future__ import annotations

import numpy as np

from ..errors import ConfigurationError
from ..types import AlignedMatrix, BinStatistics

QUARTILES = (0.25, 0.5, 0.75)

# Methods understood by ``numpy.quantile``.
QUANTILE_METHODS = (
    "inverted_cdf",
    "averaged_inverted_cdf",
    "closest_observation",
    "interpolated_inverted_cdf",
    "hazen",
    "weibull",
    "linear",
    "median_unbiased",
    "normal_unbiased",
    "lower",
    "higher",
    "midpoint",
    "nearest",
)


def validate_method(method: str) -> str:
    """Return ``method`` if ``numpy.quantile`` accepts it."""

    if method not in QUANTILE_METHODS:
        raise ConfigurationError(f"unknown quantile method: {method}")
    return method


def column_quartiles(values: np.ndarray, method: str = "linear") -> tuple[float, float, float]:
    """Return ``(q1, median, q3)`` of a non-empty set of values.

    All three use the same ``numpy.quantile`` rule.  With the default
    ``"linear"`` rule the ``p`` quantile of sorted ``x`` (``n`` values) is
    ``x[j] + (h - j) * (x[j+1] - x[j])`` with ``h = (n - 1) p`` and
    ``j = floor(h)``.
    """

    if values.size == 0:
        raise ValueError("cannot compute quartiles of an empty column")
    if values.size == 1:
        v = float(values[0])
        return v, v, v
    q1, med, q3 = np.quantile(values, QUARTILES, method=validate_method(method))
    return float(q1), float(med), float(q3)


def bin_statistics(matrix: AlignedMatrix, method: str = "linear") -> BinStatistics:
    """Compute median and quartiles of every column of ``matrix``.

    Missing cells are excluded using the matrix mask.  Columns without any
    present cell get NaN statistics and are flagged missing in the result.

    Parameters
    ----------
    matrix:
        Aligned events x bins matrix.
    method:
        Quantile rule passed to :func:`numpy.quantile`.

    Returns
    -------
    BinStatistics
        Statistics in column order (ascending offset).
    """

    validate_method(method)
    n_bins = matrix.shape[1]
    median = np.full(n_bins, np.nan)
    q1 = np.full(n_bins, np.nan)
    q3 = np.full(n_bins, np.nan)
    count = (~matrix.missing).sum(axis=0).astype(int)
    for j in range(n_bins):
        if count[j] == 0:
            continue
        q1[j], median[j], q3[j] = column_quartiles(matrix.column(j), method)
    return BinStatistics(
        centers=matrix.centers.copy(),
        median=median,
        q1=q1,
        q3=q3,
        count=count,
        method=method,
    )


__all__ = ["QUARTILES", "QUANTILE_METHODS", "validate_method", "column_quartiles", "bin_statistics"]
